"""
Tests for the shuffle engine.

Covers the permutation property, immutability of the input, and the random
source selection.
"""

from collections import Counter
from unittest.mock import patch

import pytest

from turndeck.common import shuffle as shuffle_module
from turndeck.common.shuffle import random_index, shuffle


def test_shuffle_preserves_multiset():
    cards = ["A", "A", "B", "C", "C", "C", "D"]
    for _ in range(50):
        assert Counter(shuffle(cards)) == Counter(cards)


def test_shuffle_returns_new_tuple_and_leaves_input_alone():
    cards = ["A", "B", "C", "D", "E"]
    snapshot = list(cards)
    result = shuffle(cards)
    assert isinstance(result, tuple)
    assert cards == snapshot


def test_shuffle_accepts_any_iterable():
    result = shuffle(iter(["x", "y", "z"]))
    assert sorted(result) == ["x", "y", "z"]


def test_shuffle_empty_and_single():
    assert shuffle([]) == ()
    assert shuffle(["only"]) == ("only",)


def test_shuffle_eventually_changes_order():
    cards = [str(i) for i in range(26)]
    assert any(list(shuffle(cards)) != cards for _ in range(10))


def test_shuffle_swaps_with_index_in_range():
    """Each step must draw from [0, i], the Fisher-Yates bound."""
    calls = []

    def fake_index(upper):
        calls.append(upper)
        return 0

    with patch.object(shuffle_module, "random_index", side_effect=fake_index):
        shuffle(["a", "b", "c", "d"])

    assert calls == [4, 3, 2]


def test_every_ordering_of_three_cards_appears():
    seen = {shuffle("abc") for _ in range(600)}
    assert len(seen) == 6


def test_random_index_bounds():
    for upper in (1, 2, 7, 52):
        for _ in range(20):
            assert 0 <= random_index(upper) < upper


def test_random_index_rejects_non_positive():
    with pytest.raises(ValueError):
        random_index(0)


def test_random_index_falls_back_without_system_source():
    with patch.object(shuffle_module, "_SOURCE", None):
        with patch.object(shuffle_module.random, "randrange", return_value=2) as fallback:
            assert random_index(5) == 2
            fallback.assert_called_once_with(5)
