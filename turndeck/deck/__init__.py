"""
Deck/turn state machine.

This package holds the immutable ``DeckState``, the actions that drive it,
the pure ``transition`` function, and the validators for externally supplied
decks.
"""

from turndeck.deck.state import DeckState, DeckSource, DiscardPhase, TurnStage
from turndeck.deck.actions import (
    Action,
    ActionType,
    ActionParseError,
    Init,
    DealNextHand,
    EndTurn,
    ApplyJsonOverride,
    ChangeParameters,
    ToggleCardSelection,
    ConfirmDiscard,
    SelectForPlayOrder,
    DeselectFromPlayOrder,
    LockPlayOrder,
    ClearPlayOrder,
    Reset,
    LoadPresetDeck,
    action_from_dict,
)
from turndeck.deck.override import parse_override
from turndeck.deck.presets import (
    PresetDeck,
    PRESET_DECKS,
    PRESET_REGISTRY,
    build_registry,
    validate_preset_deck,
    validate_registry,
)
from turndeck.deck.transitions import StateTransitionEngine, transition

__all__ = [
    "DeckState",
    "DeckSource",
    "DiscardPhase",
    "TurnStage",
    "Action",
    "ActionType",
    "ActionParseError",
    "Init",
    "DealNextHand",
    "EndTurn",
    "ApplyJsonOverride",
    "ChangeParameters",
    "ToggleCardSelection",
    "ConfirmDiscard",
    "SelectForPlayOrder",
    "DeselectFromPlayOrder",
    "LockPlayOrder",
    "ClearPlayOrder",
    "Reset",
    "LoadPresetDeck",
    "action_from_dict",
    "parse_override",
    "PresetDeck",
    "PRESET_DECKS",
    "PRESET_REGISTRY",
    "build_registry",
    "validate_preset_deck",
    "validate_registry",
    "StateTransitionEngine",
    "transition",
]
