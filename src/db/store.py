"""Key-value persistence for engine state.

Engines only see the Store protocol: get(key) / set(key, value).
MemoryStore is the in-process double used by tests; SqlStore writes
to the engine_state table.
"""

import copy
import logging
from typing import Any, Dict, List, Optional, Protocol

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from src.db.models import EngineStateModel

logger = logging.getLogger(__name__)


class Store(Protocol):
    """Minimal key-value contract."""

    def get(self, key: str) -> Optional[List[Any]]: ...

    def set(self, key: str, value: List[Any]) -> None: ...


class MemoryStore:
    """Dict-backed store. Values are deep-copied on the way in and out."""

    def __init__(self) -> None:
        self._data: Dict[str, List[Any]] = {}

    def get(self, key: str) -> Optional[List[Any]]:
        value = self._data.get(key)
        return copy.deepcopy(value) if value is not None else None

    def set(self, key: str, value: List[Any]) -> None:
        self._data[key] = copy.deepcopy(value)

    def keys(self) -> List[str]:
        return list(self._data)


class SqlStore:
    """engine_state table store. One short session per call."""

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self._session_factory = session_factory

    def get(self, key: str) -> Optional[List[Any]]:
        with self._session_factory() as session:
            row = session.get(EngineStateModel, key)
            return list(row.payload) if row is not None else None

    def set(self, key: str, value: List[Any]) -> None:
        with self._session_factory() as session:
            row = session.get(EngineStateModel, key)
            if row is None:
                session.add(EngineStateModel(key=key, payload=value))
            else:
                row.payload = value
            session.commit()


def read_entries(store: Store, key: str) -> List[Any]:
    """Load a persisted entry list. Storage errors are logged and yield []."""
    try:
        entries = store.get(key)
    except (SQLAlchemyError, TypeError, ValueError):
        logger.exception("Failed to load state: %s", key)
        return []
    if entries is None:
        return []
    if not isinstance(entries, list):
        logger.warning("Ignoring malformed state for %s: %s", key, type(entries).__name__)
        return []
    return entries


def write_entries(store: Store, key: str, entries: List[Any]) -> bool:
    """Persist an entry list. Failures are logged and swallowed."""
    try:
        store.set(key, entries)
    except (SQLAlchemyError, TypeError, ValueError):
        logger.exception("Failed to save state: %s", key)
        return False
    return True
