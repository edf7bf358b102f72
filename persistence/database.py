from __future__ import annotations

import os
from contextlib import contextmanager
from typing import Iterator, Optional

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker

from config.settings import settings
from persistence.models import Base


def _sqlite_url(db_path: str) -> str:
    # Ensure parent directory exists
    os.makedirs(os.path.dirname(db_path) if os.path.dirname(db_path) else ".", exist_ok=True)
    return f"sqlite:///{db_path}"


def build_engine(db_path: Optional[str] = None) -> Engine:
    return create_engine(
        _sqlite_url(db_path or settings.sqlite_db_path),
        connect_args={"check_same_thread": False},
        echo=settings.db_echo,
    )


engine = build_engine()

SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)


def bind_database(db_path: str) -> Engine:
    """Point the module engine and session factory at another SQLite file."""
    global engine, SessionLocal
    engine.dispose()
    engine = build_engine(db_path)
    SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    return engine


def init_db() -> None:
    """Create the storage table if it doesn't exist."""
    Base.metadata.create_all(bind=engine)


def drop_db() -> None:
    Base.metadata.drop_all(bind=engine)


@contextmanager
def get_db_session() -> Iterator[Session]:
    """Context manager for database sessions with auto-rollback on error."""
    session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
