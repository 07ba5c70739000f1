"""
Statistical verification of the shuffle engine.
"""

from turndeck.verification.statistics import (
    ShuffleFairnessReport,
    PermutationReport,
    position_frequencies,
    analyze_positions,
    analyze_permutations,
)

__all__ = [
    "ShuffleFairnessReport",
    "PermutationReport",
    "position_frequencies",
    "analyze_positions",
    "analyze_permutations",
]
