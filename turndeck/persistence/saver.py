"""
Debounced, fire-and-forget saving.

A burst of dispatches (say, a player clicking through a play order) should
produce a single write once things settle. Each request replaces the pending
one and restarts the timer; the save runs on a daemon timer thread so the
dispatching thread never waits on storage.
"""

import logging
import threading
from typing import Optional

from turndeck.deck.state import DeckState
from turndeck.events import DeckEventType, EventBus
from turndeck.persistence.storage import StateStore

logger = logging.getLogger(__name__)


class DebouncedSaver:
    """
    Coalesce state saves into one write per quiet period.

    Args:
        store: Destination store
        delay_ms: Quiet period in milliseconds; 0 saves synchronously
    """

    def __init__(self, store: StateStore, delay_ms: int = 100):
        self.store = store
        self.delay_ms = max(0, int(delay_ms))
        self._lock = threading.Lock()
        self._timer: Optional[threading.Timer] = None
        self._pending: Optional[DeckState] = None

    @property
    def pending(self) -> Optional[DeckState]:
        return self._pending

    def request(self, state: DeckState) -> None:
        """Schedule ``state`` to be saved, replacing any pending request."""
        if self.delay_ms == 0:
            self._save(state)
            return

        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._pending = state
            self._timer = threading.Timer(self.delay_ms / 1000.0, self._fire)
            self._timer.daemon = True
            self._timer.start()

    def _fire(self) -> None:
        with self._lock:
            state, self._pending = self._pending, None
            self._timer = None
        if state is not None:
            self._save(state)

    def _save(self, state: DeckState) -> bool:
        logger.debug("Saving deck state at turn %d to %r", state.turn_number, self.store)
        saved = self.store.save(state)
        EventBus.get_instance().emit(
            DeckEventType.STATE_SAVED,
            {"saved": saved, "turn_number": state.turn_number, "store": repr(self.store)},
        )
        return saved

    def flush(self) -> bool:
        """
        Save the pending state now.

        Returns:
            False if nothing was pending or the save failed
        """
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
            state, self._pending = self._pending, None
        if state is None:
            return False
        return self._save(state)

    def cancel(self) -> None:
        """Drop the pending save without writing it."""
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
            self._pending = None
