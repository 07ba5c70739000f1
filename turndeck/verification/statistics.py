"""
Statistical validation of shuffle fairness.

Two checks are provided:

- position uniformity: over many shuffles of a deck of ``n`` distinct cards,
  every card should land in every position about ``trials / n`` times. A
  chi-square goodness-of-fit test is run for each position.
- permutation uniformity: for small decks every one of the ``n!`` orderings
  should appear about equally often.

A biased shuffle (for instance the naive "swap with any index" variant)
fails these tests quickly.
"""

import itertools
import math
from collections import Counter
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Sequence, Tuple

import numpy as np
import scipy.stats as stats

from turndeck.common.shuffle import shuffle as default_shuffle

ShuffleFn = Callable[[Sequence[int]], Sequence[int]]

MAX_PERMUTATION_DECK = 7


@dataclass
class ShuffleFairnessReport:
    """
    Result of a position uniformity analysis.

    Attributes:
        deck_size: Number of distinct cards shuffled
        trials: Number of shuffles performed
        frequencies: deck_size x deck_size matrix; [card, position] counts
        p_values: Chi-square p-value per position
        alpha: Significance level used for ``is_fair``
    """

    deck_size: int
    trials: int
    frequencies: np.ndarray
    p_values: List[float]
    alpha: float = 0.001

    @property
    def min_p_value(self) -> float:
        return min(self.p_values) if self.p_values else 1.0

    @property
    def is_fair(self) -> bool:
        # Bonferroni-corrected across positions
        return self.min_p_value >= self.alpha / max(len(self.p_values), 1)

    def to_dict(self) -> Dict[str, object]:
        return {
            "deck_size": self.deck_size,
            "trials": self.trials,
            "min_p_value": self.min_p_value,
            "alpha": self.alpha,
            "is_fair": self.is_fair,
        }


@dataclass
class PermutationReport:
    """Result of a permutation uniformity analysis."""

    deck_size: int
    trials: int
    counts: Dict[Tuple[int, ...], int] = field(default_factory=dict)
    chi_square: float = 0.0
    p_value: float = 1.0
    alpha: float = 0.001

    @property
    def is_fair(self) -> bool:
        return self.p_value >= self.alpha

    def to_dict(self) -> Dict[str, object]:
        return {
            "deck_size": self.deck_size,
            "trials": self.trials,
            "permutations_seen": len(self.counts),
            "chi_square": self.chi_square,
            "p_value": self.p_value,
            "alpha": self.alpha,
            "is_fair": self.is_fair,
        }


def position_frequencies(
    deck_size: int, trials: int, shuffle_fn: ShuffleFn = default_shuffle
) -> np.ndarray:
    """
    Count where each card lands over ``trials`` shuffles.

    Returns:
        Matrix where entry ``[card, position]`` is the number of shuffles
        that put ``card`` at ``position``
    """
    if deck_size < 1 or trials < 1:
        raise ValueError("deck_size and trials must be positive")

    counts = np.zeros((deck_size, deck_size), dtype=np.int64)
    deck = list(range(deck_size))
    positions = np.arange(deck_size)
    for _ in range(trials):
        order = np.fromiter(shuffle_fn(deck), dtype=np.int64, count=deck_size)
        counts[order, positions] += 1
    return counts


def analyze_positions(
    deck_size: int,
    trials: int,
    shuffle_fn: ShuffleFn = default_shuffle,
    alpha: float = 0.001,
) -> ShuffleFairnessReport:
    """
    Run the position uniformity test.

    Args:
        deck_size: Number of distinct cards to shuffle
        trials: Number of shuffles
        shuffle_fn: Shuffle implementation under test
        alpha: Significance level

    Returns:
        Report with per-position p-values
    """
    frequencies = position_frequencies(deck_size, trials, shuffle_fn)
    p_values = []
    if deck_size > 1:
        for position in range(deck_size):
            observed = frequencies[:, position]
            result = stats.chisquare(observed)
            p_values.append(float(result.pvalue))
    return ShuffleFairnessReport(deck_size, trials, frequencies, p_values, alpha)


def analyze_permutations(
    deck_size: int,
    trials: int,
    shuffle_fn: ShuffleFn = default_shuffle,
    alpha: float = 0.001,
) -> PermutationReport:
    """
    Run the permutation uniformity test over all ``deck_size!`` orderings.

    Raises:
        ValueError: If the deck is too large to enumerate its orderings
    """
    if not 1 < deck_size <= MAX_PERMUTATION_DECK:
        raise ValueError(
            f"deck_size must be between 2 and {MAX_PERMUTATION_DECK} "
            "for permutation analysis"
        )

    deck = list(range(deck_size))
    seen = Counter(tuple(shuffle_fn(deck)) for _ in range(trials))
    all_orders = list(itertools.permutations(deck))
    observed = np.array([seen.get(order, 0) for order in all_orders], dtype=np.float64)
    expected = np.full(len(all_orders), trials / math.factorial(deck_size))
    result = stats.chisquare(observed, expected)

    return PermutationReport(
        deck_size=deck_size,
        trials=trials,
        counts=dict(seen),
        chi_square=float(result.statistic),
        p_value=float(result.pvalue),
        alpha=alpha,
    )
