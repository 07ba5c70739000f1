"""
Event system for the turndeck engine.

Transitions publish what happened (hands dealt, turns ended, decks replaced)
on a process-wide bus. Listeners subscribe to a single event type or to
everything, and are called in subscription order.
"""

from collections import defaultdict
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Union
import logging
import threading

logger = logging.getLogger("turndeck.events")


class DeckEventType(Enum):
    """Event types published by the deck/turn state machine and its host."""

    GAME_INITIALIZED = "game_initialized"
    HAND_DEALT = "hand_dealt"
    DISCARD_RESHUFFLED = "discard_reshuffled"
    TURN_ENDED = "turn_ended"
    DECK_REPLACED = "deck_replaced"
    PARAMETERS_CHANGED = "parameters_changed"
    CARDS_DISCARDED = "cards_discarded"
    PLAY_ORDER_LOCKED = "play_order_locked"
    GAME_RESET = "game_reset"
    STATE_SAVED = "state_saved"

    WARNING = "warning"
    ERROR = "error"


def _event_name(event_type: Union[str, Enum]) -> str:
    return event_type.name if isinstance(event_type, Enum) else event_type


class EventEmitter:
    """
    Thread-safe event emitter.

    Events are keyed by name, so ``DeckEventType.HAND_DEALT`` and
    ``"HAND_DEALT"`` address the same listeners. Handler exceptions are
    logged, never propagated to the emitter.
    """

    def __init__(self):
        self._listeners: Dict[str, List[Callable]] = defaultdict(list)
        self._global_listeners: List[Callable] = []
        self._listener_lock = threading.RLock()
        self._session_id: Optional[str] = None

    def set_context(self, session_id: str) -> None:
        """
        Tag every emitted event with a session id.

        Args:
            session_id: Identifier of the hosting session
        """
        self._session_id = session_id

    def on(self, event_type: Union[str, Enum], callback: Callable) -> Callable:
        """
        Subscribe to an event type.

        Args:
            event_type: The event type to subscribe to (string or enum)
            callback: Called as ``callback(event_data)``

        Returns:
            Function that removes this subscription
        """
        name = _event_name(event_type)
        with self._listener_lock:
            self._listeners[name].append(callback)

        def unsubscribe():
            with self._listener_lock:
                if callback in self._listeners[name]:
                    self._listeners[name].remove(callback)

        return unsubscribe

    def on_any(self, callback: Callable) -> Callable:
        """
        Subscribe to all events.

        Args:
            callback: Called as ``callback((event_type, event_data))``

        Returns:
            Function that removes this subscription
        """
        with self._listener_lock:
            self._global_listeners.append(callback)

        def unsubscribe():
            with self._listener_lock:
                if callback in self._global_listeners:
                    self._global_listeners.remove(callback)

        return unsubscribe

    def emit(self, event_type: Union[str, Enum], data: Dict[str, Any]) -> None:
        """
        Emit an event to all registered listeners.

        Args:
            event_type: The type of event to emit
            data: The data to include with the event
        """
        name = _event_name(event_type)

        if self._session_id is not None and "session_id" not in data:
            data = {**data, "session_id": self._session_id}

        with self._listener_lock:
            handlers_to_call = [(callback, data) for callback in self._listeners.get(name, [])]
            handlers_to_call.extend(
                (callback, (name, data)) for callback in self._global_listeners
            )

        # Call handlers outside of the lock to avoid deadlocks
        for callback, args in handlers_to_call:
            try:
                callback(args)
            except Exception as e:
                logger.error(f"Error in event handler for {name}: {e}", exc_info=True)


class EventBus:
    """
    Global event bus for the application.

    This singleton class provides a centralized event bus that can be accessed
    from anywhere in the application.
    """

    _instance = None
    _lock = threading.Lock()

    @classmethod
    def get_instance(cls) -> EventEmitter:
        """
        Get the singleton instance of the EventBus.

        Returns:
            EventEmitter instance
        """
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = EventEmitter()
        return cls._instance
