"""
Persistence for deck state.

Stores implement a best-effort save/load port; the sanitizer repairs whatever
comes back from storage before it reaches the state machine.
"""

from turndeck.persistence.sanitizer import SanitizeResult, sanitize_state
from turndeck.persistence.storage import (
    StateStore,
    MemoryStateStore,
    JsonFileStateStore,
    SQLiteStateStore,
    serialize_state,
    deserialize_state,
)
from turndeck.persistence.saver import DebouncedSaver

__all__ = [
    "SanitizeResult",
    "sanitize_state",
    "StateStore",
    "MemoryStateStore",
    "JsonFileStateStore",
    "SQLiteStateStore",
    "serialize_state",
    "deserialize_state",
    "DebouncedSaver",
]
