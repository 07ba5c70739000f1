"""
Unbiased shuffling for card piles.

>>> cards = ("A", "B", "C", "D")
>>> shuffled = shuffle(cards)
>>> sorted(shuffled) == sorted(cards)
True
>>> cards
('A', 'B', 'C', 'D')
"""

import logging
import random
from typing import Iterable, Optional, Tuple, TypeVar

T = TypeVar("T")

logger = logging.getLogger(__name__)


def _system_source() -> Optional[random.Random]:
    """Return an OS-backed random source, or None if the platform has none."""
    source = random.SystemRandom()
    try:
        source.random()
    except NotImplementedError:
        logger.warning("OS random source unavailable, using pseudo-random fallback")
        return None
    return source


_SOURCE = _system_source()


def random_index(upper: int) -> int:
    """
    Return a uniformly random integer in ``[0, upper)``.

    :param upper: Exclusive upper bound, must be positive.
    :return: A random index.
    """
    if upper <= 0:
        raise ValueError("upper bound must be positive")
    if _SOURCE is not None:
        return _SOURCE.randrange(upper)
    return random.randrange(upper)


def shuffle(sequence: Iterable[T]) -> Tuple[T, ...]:
    """
    Return a uniformly random permutation of ``sequence`` as a new tuple.

    Fisher-Yates: walk from the last index down, swapping each position with
    a random index in ``[0, i]``. The input is never modified.

    :param sequence: Cards (or any values) to permute.
    :return: A new tuple holding the same multiset in random order.
    """
    result = list(sequence)
    for i in range(len(result) - 1, 0, -1):
        j = random_index(i + 1)
        result[i], result[j] = result[j], result[i]
    return tuple(result)
