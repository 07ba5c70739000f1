"""
Hosting session for the deck/turn state machine.

``DeckSession`` owns the single current ``DeckState``. It serializes
dispatches, hands every new state to a debounced, fire-and-forget saver, and
drives observers that react to state changes outside the pure core.
"""

from typing import Any, Callable, Iterable, List, Mapping, Optional, Union
import logging
import threading
import uuid

from turndeck.config import EngineConfig, create_store
from turndeck.deck.actions import (
    Action,
    ApplyJsonOverride,
    ChangeParameters,
    ClearPlayOrder,
    ConfirmDiscard,
    DealNextHand,
    DeselectFromPlayOrder,
    EndTurn,
    Init,
    LoadPresetDeck,
    LockPlayOrder,
    Reset,
    SelectForPlayOrder,
    ToggleCardSelection,
    action_from_dict,
)
from turndeck.deck.presets import PRESET_REGISTRY, PresetDeck, build_registry
from turndeck.deck.state import DeckState
from turndeck.deck.transitions import transition
from turndeck.events import EventBus, SettingsVisibility, error_appeared_observer
from turndeck.logging_setup import configure_logging
from turndeck.persistence.saver import DebouncedSaver
from turndeck.persistence.storage import StateStore

logger = logging.getLogger(__name__)

StateListener = Callable[[DeckState], None]


class DeckSession:
    """
    A single player's deck session.

    Args:
        store: Where to persist state; None disables persistence unless a
            config selects a backend
        presets: Preset registry (an id-keyed mapping, or decks to validate)
        config: Engine configuration; when given, its logging settings are
            applied to the package logger
        state: Start from this state instead of loading one
        restore: Try the store before falling back to INIT
    """

    def __init__(
        self,
        store: Optional[StateStore] = None,
        presets: Optional[Union[Mapping[str, PresetDeck], Iterable[PresetDeck]]] = None,
        config: Optional[EngineConfig] = None,
        state: Optional[DeckState] = None,
        restore: bool = True,
    ):
        self.id = str(uuid.uuid4())
        self.config = config or EngineConfig(storage_backend="memory")
        if config is not None:
            configure_logging(config.log_level, disabled=config.disable_logging)
            if store is None:
                store = create_store(config)
        self.store = store

        if presets is None:
            self.presets = PRESET_REGISTRY
        elif isinstance(presets, Mapping):
            self.presets = presets
        else:
            self.presets = build_registry(presets)

        self.event_bus = EventBus.get_instance()
        self.event_bus.set_context(self.id)
        self.settings = SettingsVisibility()
        self._lock = threading.RLock()
        self._listeners: List[StateListener] = []
        self._saver = (
            DebouncedSaver(self.store, self.config.save_debounce_ms)
            if self.store is not None
            else None
        )

        if state is None and restore and self.store is not None:
            state = self.store.load()
        self.restored = state is not None
        if state is None:
            state = transition(None, Init(), self.presets)
            if self._saver is not None:
                self._saver.request(state)

        self._state = state
        self._error_observer = error_appeared_observer(self.settings, state.error)
        logger.info(
            "Deck session %s started (%s, turn %d)",
            self.id,
            "restored" if self.restored else "new",
            state.turn_number,
        )

    @classmethod
    async def restore_async(
        cls,
        store: StateStore,
        presets: Optional[Union[Mapping[str, PresetDeck], Iterable[PresetDeck]]] = None,
        config: Optional[EngineConfig] = None,
    ) -> "DeckSession":
        """
        Create a session, loading through the store's async API if it has one.
        """
        load_async = getattr(store, "load_async", None)
        state = await load_async() if load_async is not None else store.load()
        return cls(store=store, presets=presets, config=config, state=state, restore=False)

    @property
    def state(self) -> DeckState:
        return self._state

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """
        Call ``listener`` with every new state.

        Returns:
            Function that removes the listener
        """
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe():
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def dispatch(self, action: Action) -> DeckState:
        """
        Apply one action and return the resulting state.

        No-op actions leave the session untouched: nothing is saved and no
        listener is called.
        """
        with self._lock:
            previous = self._state
            new_state = transition(previous, action, self.presets)
            if new_state is previous:
                return previous
            self._state = new_state
            self._error_observer.update(new_state)
            listeners = list(self._listeners)

        if self._saver is not None:
            self._saver.request(new_state)

        for listener in listeners:
            try:
                listener(new_state)
            except Exception as e:
                logger.error(f"Error in state listener: {e}", exc_info=True)

        return new_state

    def dispatch_dict(self, data: Mapping[str, Any]) -> DeckState:
        """Dispatch an action given in its ``{"type", "payload"}`` wire form."""
        return self.dispatch(action_from_dict(data))

    def deal_next_hand(self) -> DeckState:
        return self.dispatch(DealNextHand())

    def end_turn(self) -> DeckState:
        return self.dispatch(EndTurn())

    def apply_json_override(self, raw: str) -> DeckState:
        return self.dispatch(ApplyJsonOverride(raw))

    def change_parameters(
        self, hand_size: Any, discard_count: Any, immediate_reset: bool = False
    ) -> DeckState:
        return self.dispatch(ChangeParameters(hand_size, discard_count, immediate_reset))

    def toggle_card_selection(self, instance_id: str) -> DeckState:
        return self.dispatch(ToggleCardSelection(instance_id))

    def confirm_discard(self) -> DeckState:
        return self.dispatch(ConfirmDiscard())

    def select_for_play_order(self, instance_id: str) -> DeckState:
        return self.dispatch(SelectForPlayOrder(instance_id))

    def deselect_from_play_order(self, instance_id: str) -> DeckState:
        return self.dispatch(DeselectFromPlayOrder(instance_id))

    def lock_play_order(self) -> DeckState:
        return self.dispatch(LockPlayOrder())

    def clear_play_order(self) -> DeckState:
        return self.dispatch(ClearPlayOrder())

    def reset(self) -> DeckState:
        return self.dispatch(Reset())

    def load_preset_deck(self, preset_id: str) -> DeckState:
        return self.dispatch(LoadPresetDeck(preset_id))

    def flush(self) -> bool:
        """Write any pending save immediately."""
        if self._saver is None:
            return False
        return self._saver.flush()

    def close(self) -> None:
        """Flush pending saves; the session stays readable afterwards."""
        self.flush()
        logger.info("Deck session %s closed at turn %d", self.id, self._state.turn_number)
