from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import JSON, Column, DateTime, String
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class StorageEntry(Base):
    """
    One row per store key. The table is a plain associative store: the
    repositories decide what the keys mean and what the JSON values hold.
    """

    __tablename__ = "storage_entries"

    key = Column(String(255), primary_key=True)     # e.g. issue-templates:template:tmpl_...
    value = Column(JSON, nullable=True)
    updated_at = Column(DateTime, nullable=False, default=_utcnow, onupdate=_utcnow)
