"""Exception hierarchy for the turndeck engine.

None of these escape ``turndeck.deck.transitions.transition``; the state
machine converts them into the ``error`` field of the returned state.
"""

from typing import List, Optional


class TurndeckError(Exception):
    """Base class for all turndeck errors."""


class DeckValidationError(TurndeckError):
    """Raised when externally supplied deck data is malformed."""


class OverrideValidationError(DeckValidationError):
    """Raised when a JSON deck override cannot be accepted."""


class PresetValidationError(DeckValidationError):
    """Raised when a single preset deck definition is invalid."""


class PresetRegistryError(TurndeckError):
    """
    Raised when a preset registry fails validation.

    Carries every failure found, not just the first one.
    """

    def __init__(self, errors: List[str]):
        self.errors = list(errors)
        summary = f"{len(self.errors)} preset deck error(s)"
        if self.errors:
            summary += ": " + "; ".join(self.errors)
        super().__init__(summary)


class PresetNotFoundError(TurndeckError):
    """Raised when a preset id is not present in the registry."""

    def __init__(self, preset_id: str):
        self.preset_id = preset_id
        super().__init__(f"Preset deck not found: {preset_id}")


class PresetEmptyError(TurndeckError):
    """Raised when a registered preset has no cards."""

    def __init__(self, preset_id: str, name: Optional[str] = None):
        self.preset_id = preset_id
        self.name = name or preset_id
        super().__init__(f"Preset deck '{self.name}' has no cards")


class PersistenceError(TurndeckError):
    """Raised inside a state store; never propagated past the store port."""
