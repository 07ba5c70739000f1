"""
Edge-triggered observers for state-derived side effects.

Some host behaviour should react only when a condition *starts* holding, for
example expanding the settings panel the moment an error first appears. The
previous truth value lives here, outside the pure state machine.
"""

import logging
from typing import Callable, Generic, Optional, TypeVar

T = TypeVar("T")

logger = logging.getLogger(__name__)


class EdgeTriggeredObserver(Generic[T]):
    """
    Fire a callback on the false-to-true edge of a predicate.

    Args:
        predicate: Evaluated on every update
        callback: Called with the value that caused the rising edge
        initial: Assumed previous predicate result before the first update
    """

    def __init__(
        self,
        predicate: Callable[[T], bool],
        callback: Callable[[T], None],
        initial: bool = False,
    ):
        self._predicate = predicate
        self._callback = callback
        self._previous = initial

    @property
    def previous(self) -> bool:
        return self._previous

    def update(self, value: T) -> bool:
        """
        Feed a new value.

        Returns:
            True if the callback fired for this value
        """
        current = bool(self._predicate(value))
        fired = current and not self._previous
        self._previous = current
        if fired:
            self._callback(value)
        return fired

    def prime(self, value: T) -> None:
        """Record ``value``'s predicate result without firing."""
        self._previous = bool(self._predicate(value))


class SettingsVisibility:
    """Expanded/collapsed flag for a settings panel; always starts collapsed."""

    def __init__(self, expanded: bool = False):
        self.is_expanded = expanded

    def toggle(self) -> bool:
        self.is_expanded = not self.is_expanded
        return self.is_expanded

    def set_expanded(self, expanded: bool) -> None:
        self.is_expanded = bool(expanded)


def error_appeared_observer(
    settings: SettingsVisibility, initial_error: Optional[str] = None
) -> EdgeTriggeredObserver:
    """
    Build an observer that expands ``settings`` when an error first appears.

    A state that already carries an error when the observer is created does
    not trigger it; only a later transition from no error to an error does.
    """

    def expand(state) -> None:
        logger.debug("Error appeared, expanding settings: %s", state.error)
        settings.set_expanded(True)

    return EdgeTriggeredObserver(
        predicate=lambda state: state.error is not None,
        callback=expand,
        initial=initial_error is not None,
    )
