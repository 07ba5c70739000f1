"""
Event system for the turndeck engine.

Provides the process-wide event bus used by the state machine and the
edge-triggered observers used by hosting sessions.
"""

from turndeck.events.emitter import (
    EventEmitter,
    EventBus,
    DeckEventType,
)
from turndeck.events.observer import (
    EdgeTriggeredObserver,
    SettingsVisibility,
    error_appeared_observer,
)

__all__ = [
    "EventEmitter",
    "EventBus",
    "DeckEventType",
    "EdgeTriggeredObserver",
    "SettingsVisibility",
    "error_appeared_observer",
]
