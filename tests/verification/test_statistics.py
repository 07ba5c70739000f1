"""
Statistical tests for the shuffle.

The engine's shuffle must pass the uniformity checks, while deliberately
broken shuffles must fail them.
"""

import random

import numpy as np
import pytest

from turndeck.verification.statistics import (
    MAX_PERMUTATION_DECK,
    ShuffleFairnessReport,
    analyze_permutations,
    analyze_positions,
    position_frequencies,
)


def identity_shuffle(deck):
    return list(deck)


def naive_shuffle(deck):
    """Swap every index with any index: a classic biased shuffle."""
    cards = list(deck)
    for i in range(len(cards)):
        j = random.randrange(len(cards))
        cards[i], cards[j] = cards[j], cards[i]
    return cards


def test_position_frequencies_shape_and_totals():
    counts = position_frequencies(6, 300)
    assert counts.shape == (6, 6)
    assert (counts.sum(axis=0) == 300).all()
    assert (counts.sum(axis=1) == 300).all()


def test_position_frequencies_identity():
    counts = position_frequencies(4, 10, identity_shuffle)
    assert np.array_equal(counts, np.eye(4, dtype=np.int64) * 10)


@pytest.mark.parametrize("deck_size, trials", [(0, 10), (3, 0)])
def test_position_frequencies_rejects_empty_runs(deck_size, trials):
    with pytest.raises(ValueError):
        position_frequencies(deck_size, trials)


def test_engine_shuffle_positions_are_uniform():
    report = analyze_positions(5, 5000)
    assert report.is_fair, report.p_values
    assert len(report.p_values) == 5


def test_engine_shuffle_permutations_are_uniform():
    report = analyze_permutations(3, 6000)
    assert report.is_fair, report.p_value
    assert len(report.counts) == 6


def test_identity_shuffle_detected():
    assert not analyze_positions(4, 400, identity_shuffle).is_fair


def test_naive_shuffle_detected():
    report = analyze_permutations(3, 30000, naive_shuffle)
    assert not report.is_fair
    assert report.to_dict()["permutations_seen"] == 6


@pytest.mark.parametrize("deck_size", [1, MAX_PERMUTATION_DECK + 1])
def test_permutation_deck_size_bounds(deck_size):
    with pytest.raises(ValueError):
        analyze_permutations(deck_size, 100)


def test_single_card_deck_is_trivially_fair():
    report = analyze_positions(1, 10)
    assert report.p_values == []
    assert report.is_fair


def test_fairness_uses_bonferroni_correction():
    frequencies = np.zeros((2, 2))
    borderline = ShuffleFairnessReport(2, 10, frequencies, [0.0005, 0.5], alpha=0.001)
    failing = ShuffleFairnessReport(2, 10, frequencies, [0.0004, 0.5], alpha=0.001)

    assert borderline.is_fair
    assert not failing.is_fair
    assert failing.to_dict()["min_p_value"] == 0.0004
