from __future__ import annotations

import copy
import threading
from typing import Any, Optional, Protocol

from persistence.database import get_db_session
from persistence.models import StorageEntry


class KeyValueStore(Protocol):
    """
    Associative store consumed by the repositories.

    Values are JSON-compatible (dicts, lists, strings, numbers, bools). There
    are no multi-key transactions: each call stands alone.
    """

    def get(self, key: str) -> Optional[Any]: ...

    def set(self, key: str, value: Any) -> None: ...

    def delete(self, key: str) -> None: ...


class SqlKeyValueStore:
    """KeyValueStore over the `storage_entries` table. One short transaction per call."""

    def get(self, key: str) -> Optional[Any]:
        with get_db_session() as session:
            row = session.get(StorageEntry, key)
            return None if row is None else row.value

    def set(self, key: str, value: Any) -> None:
        with get_db_session() as session:
            row = session.get(StorageEntry, key)
            if row is None:
                session.add(StorageEntry(key=key, value=value))
            else:
                row.value = value

    def delete(self, key: str) -> None:
        with get_db_session() as session:
            row = session.get(StorageEntry, key)
            if row is not None:
                session.delete(row)


class InMemoryKeyValueStore:
    """Dict-backed KeyValueStore. Copies on the way in and out, like a real store."""

    def __init__(self, initial: Optional[dict[str, Any]] = None) -> None:
        self._data: dict[str, Any] = copy.deepcopy(initial) if initial else {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            return copy.deepcopy(self._data.get(key))

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            self._data[key] = copy.deepcopy(value)

    def delete(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)

    def keys(self) -> list[str]:
        with self._lock:
            return list(self._data)
