"""Tests for action types and wire-format parsing."""

import pytest

from turndeck.deck.actions import (
    ACTION_CLASSES,
    ActionParseError,
    ActionType,
    ApplyJsonOverride,
    ChangeParameters,
    EndTurn,
    Init,
    LoadPresetDeck,
    ToggleCardSelection,
    action_from_dict,
)


def test_every_action_type_has_a_class():
    assert set(ACTION_CLASSES) == set(ActionType)
    for action_type, cls in ACTION_CLASSES.items():
        assert cls.type is action_type


def test_actions_are_hashable_values():
    assert ToggleCardSelection("x") == ToggleCardSelection("x")
    assert len({EndTurn(), EndTurn()}) == 1


def test_parse_action_without_payload():
    assert action_from_dict({"type": "INIT"}) == Init()
    assert action_from_dict({"type": "END_TURN", "payload": None}) == EndTurn()


def test_parse_camel_case_payload():
    action = action_from_dict(
        {
            "type": "CHANGE_PARAMETERS",
            "payload": {"handSize": 7, "discardCount": 2, "immediateReset": True},
        }
    )
    assert action == ChangeParameters(7, 2, True)


def test_parse_snake_case_payload():
    action = action_from_dict(
        {"type": "TOGGLE_CARD_SELECTION", "payload": {"instance_id": "abc"}}
    )
    assert action == ToggleCardSelection("abc")


def test_parse_bare_payload_for_single_field_actions():
    assert action_from_dict(
        {"type": "APPLY_JSON_OVERRIDE", "payload": '["A"]'}
    ) == ApplyJsonOverride('["A"]')
    assert action_from_dict(
        {"type": "LOAD_PRESET_DECK", "payload": "starter-deck"}
    ) == LoadPresetDeck("starter-deck")


@pytest.mark.parametrize(
    "data",
    [
        {"type": "SHUFFLE_EVERYTHING"},
        {"payload": {}},
        {"type": None},
    ],
)
def test_unknown_action_rejected(data):
    with pytest.raises(ActionParseError):
        action_from_dict(data)


def test_bare_payload_rejected_for_multi_field_action():
    with pytest.raises(ActionParseError, match="requires a payload mapping"):
        action_from_dict({"type": "CHANGE_PARAMETERS", "payload": 5})


def test_missing_field_rejected():
    with pytest.raises(ActionParseError, match="Invalid payload"):
        action_from_dict({"type": "SELECT_FOR_PLAY_ORDER", "payload": {}})


def test_unexpected_field_rejected():
    with pytest.raises(ActionParseError):
        action_from_dict({"type": "RESET", "payload": {"hard": True}})
