"""
Actions accepted by the deck/turn state machine.

Each action is a small frozen dataclass tagged with an ``ActionType``.
``action_from_dict`` parses the ``{"type": ..., "payload": ...}`` wire shape
used by hosting applications.
"""

from dataclasses import dataclass, fields
from enum import Enum
from typing import Any, ClassVar, Dict, Mapping, Type

from turndeck.exceptions import TurndeckError


class ActionType(Enum):
    """Tags for every action the state machine understands."""

    INIT = "INIT"
    DEAL_NEXT_HAND = "DEAL_NEXT_HAND"
    END_TURN = "END_TURN"
    APPLY_JSON_OVERRIDE = "APPLY_JSON_OVERRIDE"
    CHANGE_PARAMETERS = "CHANGE_PARAMETERS"
    TOGGLE_CARD_SELECTION = "TOGGLE_CARD_SELECTION"
    CONFIRM_DISCARD = "CONFIRM_DISCARD"
    SELECT_FOR_PLAY_ORDER = "SELECT_FOR_PLAY_ORDER"
    DESELECT_FROM_PLAY_ORDER = "DESELECT_FROM_PLAY_ORDER"
    LOCK_PLAY_ORDER = "LOCK_PLAY_ORDER"
    CLEAR_PLAY_ORDER = "CLEAR_PLAY_ORDER"
    RESET = "RESET"
    LOAD_PRESET_DECK = "LOAD_PRESET_DECK"


class Action:
    """Base class for all actions."""

    type: ClassVar[ActionType]


@dataclass(frozen=True)
class Init(Action):
    type: ClassVar[ActionType] = ActionType.INIT


@dataclass(frozen=True)
class DealNextHand(Action):
    type: ClassVar[ActionType] = ActionType.DEAL_NEXT_HAND


@dataclass(frozen=True)
class EndTurn(Action):
    type: ClassVar[ActionType] = ActionType.END_TURN


@dataclass(frozen=True)
class ApplyJsonOverride(Action):
    """Replace the deck with a raw JSON array of card labels."""

    raw: str
    type: ClassVar[ActionType] = ActionType.APPLY_JSON_OVERRIDE


@dataclass(frozen=True)
class ChangeParameters(Action):
    """Update hand size and discard count, optionally redealing at once."""

    hand_size: Any
    discard_count: Any
    immediate_reset: bool = False
    type: ClassVar[ActionType] = ActionType.CHANGE_PARAMETERS


@dataclass(frozen=True)
class ToggleCardSelection(Action):
    instance_id: str
    type: ClassVar[ActionType] = ActionType.TOGGLE_CARD_SELECTION


@dataclass(frozen=True)
class ConfirmDiscard(Action):
    type: ClassVar[ActionType] = ActionType.CONFIRM_DISCARD


@dataclass(frozen=True)
class SelectForPlayOrder(Action):
    instance_id: str
    type: ClassVar[ActionType] = ActionType.SELECT_FOR_PLAY_ORDER


@dataclass(frozen=True)
class DeselectFromPlayOrder(Action):
    instance_id: str
    type: ClassVar[ActionType] = ActionType.DESELECT_FROM_PLAY_ORDER


@dataclass(frozen=True)
class LockPlayOrder(Action):
    type: ClassVar[ActionType] = ActionType.LOCK_PLAY_ORDER


@dataclass(frozen=True)
class ClearPlayOrder(Action):
    type: ClassVar[ActionType] = ActionType.CLEAR_PLAY_ORDER


@dataclass(frozen=True)
class Reset(Action):
    type: ClassVar[ActionType] = ActionType.RESET


@dataclass(frozen=True)
class LoadPresetDeck(Action):
    preset_id: str
    type: ClassVar[ActionType] = ActionType.LOAD_PRESET_DECK


ACTION_CLASSES: Dict[ActionType, Type[Action]] = {
    cls.type: cls
    for cls in (
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
    )
}

# camelCase wire keys mapped to dataclass field names
_PAYLOAD_ALIASES = {
    "instanceId": "instance_id",
    "handSize": "hand_size",
    "discardCount": "discard_count",
    "immediateReset": "immediate_reset",
    "presetId": "preset_id",
}


class ActionParseError(TurndeckError):
    """Raised when a wire-format action cannot be parsed."""


def action_from_dict(data: Mapping[str, Any]) -> Action:
    """
    Build an action from its wire representation.

    Args:
        data: Mapping with a ``type`` key and an optional ``payload``. The
            payload may be a mapping (keys in camelCase or snake_case) or,
            for actions with a single field, a bare value.

    Returns:
        The matching action instance

    Raises:
        ActionParseError: If the type is unknown or the payload does not fit
    """
    try:
        action_type = ActionType(data["type"])
    except (KeyError, TypeError, ValueError):
        raise ActionParseError(f"Unknown action: {data!r}")

    cls = ACTION_CLASSES[action_type]
    payload = data.get("payload")

    if payload is None:
        kwargs: Dict[str, Any] = {}
    elif isinstance(payload, Mapping):
        kwargs = {_PAYLOAD_ALIASES.get(key, key): value for key, value in payload.items()}
    else:
        names = [f.name for f in fields(cls)]
        if len(names) != 1:
            raise ActionParseError(f"{action_type.value} requires a payload mapping")
        kwargs = {names[0]: payload}

    try:
        return cls(**kwargs)
    except TypeError as e:
        raise ActionParseError(f"Invalid payload for {action_type.value}: {e}")
