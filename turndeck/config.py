"""
Engine configuration.

Settings come from a plain dict (as passed to a session) or from
``TURNDECK_*`` environment variables.
"""

import os
from dataclasses import dataclass, fields
from typing import Any, Dict, Mapping, Optional

from turndeck.persistence.storage import (
    JsonFileStateStore,
    MemoryStateStore,
    SQLiteStateStore,
    StateStore,
)

STORAGE_BACKENDS = ("memory", "json", "sqlite")
DEFAULT_STORAGE_PATH = "~/.turndeck/state.json"


@dataclass(frozen=True)
class EngineConfig:
    """
    Configuration for a deck session.

    Attributes:
        storage_backend: One of "memory", "json" or "sqlite"
        storage_path: File used by the json and sqlite backends
        save_debounce_ms: Quiet period before a state change is saved
        log_level: Level for the package logger
        disable_logging: Only log errors
    """

    storage_backend: str = "json"
    storage_path: str = DEFAULT_STORAGE_PATH
    save_debounce_ms: int = 100
    log_level: str = "INFO"
    disable_logging: bool = False

    def __post_init__(self):
        if self.storage_backend not in STORAGE_BACKENDS:
            raise ValueError(
                f"storage_backend must be one of {STORAGE_BACKENDS}, "
                f"got {self.storage_backend!r}"
            )
        if self.save_debounce_ms < 0:
            raise ValueError("save_debounce_ms must be non-negative")

    @classmethod
    def from_dict(cls, config: Optional[Mapping[str, Any]] = None) -> "EngineConfig":
        """Build a config from a dict, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in (config or {}).items() if k in known})

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "EngineConfig":
        """
        Build a config from ``TURNDECK_*`` environment variables.

        Args:
            environ: Mapping to read instead of ``os.environ``
        """
        env = os.environ if environ is None else environ
        values: Dict[str, Any] = {}
        if "TURNDECK_STORAGE_BACKEND" in env:
            values["storage_backend"] = env["TURNDECK_STORAGE_BACKEND"].lower()
        if "TURNDECK_STORAGE_PATH" in env:
            values["storage_path"] = env["TURNDECK_STORAGE_PATH"]
        if "TURNDECK_SAVE_DEBOUNCE_MS" in env:
            values["save_debounce_ms"] = int(env["TURNDECK_SAVE_DEBOUNCE_MS"])
        if "TURNDECK_LOG_LEVEL" in env:
            values["log_level"] = env["TURNDECK_LOG_LEVEL"].upper()
        if "TURNDECK_DISABLE_LOGGING" in env:
            values["disable_logging"] = env["TURNDECK_DISABLE_LOGGING"].lower() in (
                "1",
                "true",
                "yes",
            )
        return cls(**values)


def create_store(config: EngineConfig) -> StateStore:
    """Build the state store selected by ``config``."""
    if config.storage_backend == "memory":
        return MemoryStateStore()
    if config.storage_backend == "sqlite":
        return SQLiteStateStore(os.path.expanduser(config.storage_path))
    return JsonFileStateStore(config.storage_path)
