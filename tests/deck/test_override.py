"""Tests for JSON deck override validation."""

import pytest

from turndeck.deck.constants import OVERRIDE_NOT_ARRAY_ERROR, OVERRIDE_NOT_STRINGS_ERROR
from turndeck.deck.override import parse_override
from turndeck.exceptions import DeckValidationError, OverrideValidationError


def test_valid_override_keeps_order_and_duplicates():
    assert parse_override('["B", "A", "B"]') == ("B", "A", "B")


def test_empty_array_is_valid():
    assert parse_override("[]") == ()


def test_whitespace_is_accepted():
    assert parse_override('  [ "A" ]\n') == ("A",)


@pytest.mark.parametrize("raw", ["{not json", "", "[1,", "'single quotes'"])
def test_invalid_json(raw):
    with pytest.raises(OverrideValidationError, match="^Invalid JSON"):
        parse_override(raw)


@pytest.mark.parametrize("raw", ['{"cards": []}', '"A"', "42", "null", "true"])
def test_non_array_rejected(raw):
    with pytest.raises(OverrideValidationError) as exc_info:
        parse_override(raw)
    assert str(exc_info.value) == OVERRIDE_NOT_ARRAY_ERROR


@pytest.mark.parametrize("raw", ['["A", 1]', '["A", null]', '[["A"]]', '[{"card": "A"}]'])
def test_non_string_elements_rejected(raw):
    with pytest.raises(OverrideValidationError) as exc_info:
        parse_override(raw)
    assert str(exc_info.value) == OVERRIDE_NOT_STRINGS_ERROR


def test_non_text_input_rejected():
    with pytest.raises(OverrideValidationError, match="expected text, got list"):
        parse_override(["A"])


def test_override_error_is_a_deck_validation_error():
    with pytest.raises(DeckValidationError):
        parse_override("nope")
