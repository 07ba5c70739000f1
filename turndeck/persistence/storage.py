"""
State stores for persisting deck state between sessions.

Every store implements the same best-effort port: ``save`` reports failure
by returning False and ``load`` returns None for missing, corrupt or
incompatible data. Storage problems are logged and never propagated to the
state machine or its host.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Optional, Union
import json
import logging
import os
import sqlite3
import threading

import aiofiles

from turndeck.deck.constants import STORAGE_KEY
from turndeck.deck.state import DeckState
from turndeck.exceptions import PersistenceError
from turndeck.persistence.sanitizer import sanitize_state

logger = logging.getLogger(__name__)

# Failures a store may hit; anything else is a programming error and propagates
STORAGE_ERRORS = (OSError, sqlite3.Error, PersistenceError, TypeError, ValueError)


def serialize_state(state: DeckState) -> str:
    """Encode a state in its persisted JSON form (transient fields excluded)."""
    return json.dumps(state.to_dict())


def deserialize_state(payload: Optional[str]) -> Optional[DeckState]:
    """
    Decode and sanitize a persisted payload.

    Returns:
        The restored state, or None if the payload is empty or unusable
    """
    if payload is None or not payload.strip():
        return None

    try:
        data = json.loads(payload)
    except ValueError as e:
        logger.debug("Stored deck state is not valid JSON: %s", e)
        return None

    result = sanitize_state(data)
    if not result.is_valid:
        logger.debug("Invalid persisted state, using defaults: %s", result.errors)
        return None
    if result.errors:
        logger.debug("Persisted state sanitized: %s", "; ".join(result.errors))
    return result.state


class StateStore(ABC):
    """
    Base class for deck state stores.

    Subclasses implement raw ``_write``/``_read``/``_delete`` and may raise
    any of ``STORAGE_ERRORS``; the public methods turn those into the
    best-effort contract.
    """

    def __init__(self, key: str = STORAGE_KEY):
        self.key = key

    @abstractmethod
    def _write(self, payload: str) -> None:
        pass

    @abstractmethod
    def _read(self) -> Optional[str]:
        pass

    @abstractmethod
    def _delete(self) -> None:
        pass

    def save(self, state: DeckState) -> bool:
        """
        Persist ``state``.

        Returns:
            True if the state was written, False if storage failed
        """
        try:
            self._write(serialize_state(state))
        except STORAGE_ERRORS as e:
            logger.warning("Failed to save deck state to %s: %s", self, e)
            return False
        return True

    def load(self) -> Optional[DeckState]:
        """
        Restore the last saved state.

        Returns:
            The sanitized state, or None if nothing usable is stored
        """
        try:
            payload = self._read()
        except STORAGE_ERRORS as e:
            logger.warning("Failed to load deck state from %s: %s", self, e)
            return None
        if payload is None:
            logger.debug("No stored deck state in %s", self)
        return deserialize_state(payload)

    def clear(self) -> bool:
        try:
            self._delete()
        except STORAGE_ERRORS as e:
            logger.warning("Failed to clear deck state in %s: %s", self, e)
            return False
        return True

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.key!r})"


class MemoryStateStore(StateStore):
    """
    In-process store, mainly for tests and embedding.

    Args:
        key: Storage key
        capacity: Optional maximum payload size in characters; larger writes
            fail the way a full browser storage quota would
    """

    def __init__(self, key: str = STORAGE_KEY, capacity: Optional[int] = None):
        super().__init__(key)
        self.capacity = capacity
        self.data: Dict[str, str] = {}

    def _write(self, payload: str) -> None:
        if self.capacity is not None and len(payload) > self.capacity:
            raise PersistenceError(
                f"quota exceeded ({len(payload)} > {self.capacity} characters)"
            )
        self.data[self.key] = payload

    def _read(self) -> Optional[str]:
        return self.data.get(self.key)

    def _delete(self) -> None:
        self.data.pop(self.key, None)


class JsonFileStateStore(StateStore):
    """
    Store the state as a JSON document on disk.

    Writes go to a temporary file that is then renamed over the target, so a
    crash mid-write never leaves a truncated document behind. Async variants
    use ``aiofiles`` for hosts running an event loop.
    """

    def __init__(self, path: Union[str, Path], key: str = STORAGE_KEY):
        super().__init__(key)
        self.path = Path(path).expanduser()

    @property
    def _tmp_path(self) -> Path:
        return self.path.with_name(self.path.name + ".tmp")

    def _write(self, payload: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._tmp_path.write_text(payload, encoding="utf-8")
        os.replace(self._tmp_path, self.path)

    def _read(self) -> Optional[str]:
        if not self.path.exists():
            return None
        return self.path.read_text(encoding="utf-8")

    def _delete(self) -> None:
        if self.path.exists():
            self.path.unlink()

    async def save_async(self, state: DeckState) -> bool:
        """Asynchronous ``save``."""
        try:
            payload = serialize_state(state)
            self.path.parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(self._tmp_path, mode="w", encoding="utf-8") as f:
                await f.write(payload)
            os.replace(self._tmp_path, self.path)
        except STORAGE_ERRORS as e:
            logger.warning("Failed to save deck state to %s: %s", self, e)
            return False
        return True

    async def load_async(self) -> Optional[DeckState]:
        """Asynchronous ``load``."""
        if not self.path.exists():
            logger.debug("No stored deck state in %s", self)
            return None
        try:
            async with aiofiles.open(self.path, mode="r", encoding="utf-8") as f:
                payload = await f.read()
        except STORAGE_ERRORS as e:
            logger.warning("Failed to load deck state from %s: %s", self, e)
            return None
        return deserialize_state(payload)

    def __repr__(self) -> str:
        return f"JsonFileStateStore({str(self.path)!r})"


SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS deck_state (
    storage_key TEXT PRIMARY KEY,
    payload TEXT NOT NULL,  -- JSON of the persisted state
    updated_at DATETIME DEFAULT CURRENT_TIMESTAMP
);
"""


class SQLiteStateStore(StateStore):
    """
    Store deck states in SQLite, one row per storage key.

    The connection may be used from the debounce timer thread, so access is
    serialized with a lock.
    """

    def __init__(self, db_path: Optional[str] = None, key: str = STORAGE_KEY):
        super().__init__(key)
        self.db_path = db_path
        self._lock = threading.Lock()
        self.conn = sqlite3.connect(
            db_path if db_path else ":memory:", check_same_thread=False
        )
        self.conn.row_factory = sqlite3.Row
        self.initialize_database()

    def _connection(self) -> sqlite3.Connection:
        if self.conn is None:
            raise PersistenceError("store is closed")
        return self.conn

    def initialize_database(self) -> None:
        with self._lock:
            self.conn.executescript(SCHEMA_SQL)
            self.conn.commit()

    def _write(self, payload: str) -> None:
        with self._lock:
            conn = self._connection()
            conn.execute(
                """
                INSERT INTO deck_state (storage_key, payload) VALUES (?, ?)
                ON CONFLICT(storage_key) DO UPDATE SET
                    payload = excluded.payload,
                    updated_at = CURRENT_TIMESTAMP
                """,
                (self.key, payload),
            )
            conn.commit()

    def _read(self) -> Optional[str]:
        with self._lock:
            row = self._connection().execute(
                "SELECT payload FROM deck_state WHERE storage_key = ?", (self.key,)
            ).fetchone()
        return row["payload"] if row else None

    def _delete(self) -> None:
        with self._lock:
            conn = self._connection()
            conn.execute("DELETE FROM deck_state WHERE storage_key = ?", (self.key,))
            conn.commit()

    def close(self) -> None:
        """Close the database connection."""
        with self._lock:
            if self.conn is not None:
                self.conn.close()
                self.conn = None

    def __repr__(self) -> str:
        return f"SQLiteStateStore({self.db_path or ':memory:'!r}, {self.key!r})"
