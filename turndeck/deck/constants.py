"""Deck defaults, parameter bounds and user-facing messages."""

from typing import Tuple

DEFAULT_DECK: Tuple[str, ...] = tuple(
    f"{rank} of {suit}"
    for suit in ("Spades", "Hearts")
    for rank in (
        "Ace",
        "2",
        "3",
        "4",
        "5",
        "6",
        "7",
        "8",
        "9",
        "10",
        "Jack",
        "Queen",
        "King",
    )
)

DEFAULT_HAND_SIZE = 5
DEFAULT_DISCARD_COUNT = 5

# CHANGE_PARAMETERS bounds
MIN_HAND_SIZE = 1
MAX_HAND_SIZE = 10
MIN_DISCARD_COUNT = 0

# RESET uses a looser hand size bound than CHANGE_PARAMETERS
RESET_MAX_HAND_SIZE = 52

STORAGE_KEY = "turndeck-state"

EMPTY_OVERRIDE_WARNING = "Empty deck provided, reverted to default"
OVERRIDE_NOT_ARRAY_ERROR = "Override must be a JSON array"
OVERRIDE_NOT_STRINGS_ERROR = "All deck items must be strings"


def insufficient_cards_warning(dealt: int, requested: int) -> str:
    """Warning text for a deal that ran out of cards."""
    return f"Insufficient cards: could only deal {dealt} of {requested} requested cards"
