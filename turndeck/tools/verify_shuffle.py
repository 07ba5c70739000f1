#!/usr/bin/env python
"""
Shuffle fairness verification tool.

Runs the position and permutation uniformity tests against the engine's
shuffle and exits with status 1 if either looks biased.

Examples:
    python -m turndeck.tools.verify_shuffle --deck-size 26 --trials 20000
    python -m turndeck.tools.verify_shuffle --permutation-size 4 --alpha 0.0001
"""

import argparse
import json
import logging
import sys
from typing import List, Optional

from turndeck.config import EngineConfig
from turndeck.logging_setup import configure_logging
from turndeck.verification.statistics import analyze_permutations, analyze_positions

logger = logging.getLogger(__name__)


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        description="Verify that the deck shuffle is unbiased"
    )
    parser.add_argument(
        "--deck-size", type=int, default=26, help="Cards in the position test"
    )
    parser.add_argument(
        "--trials", type=int, default=20000, help="Shuffles per test"
    )
    parser.add_argument(
        "--permutation-size",
        type=int,
        default=4,
        help="Cards in the permutation test (2-7)",
    )
    parser.add_argument(
        "--alpha", type=float, default=0.001, help="Significance level"
    )
    parser.add_argument("--json", action="store_true", help="Emit JSON")
    args = parser.parse_args(argv)

    config = EngineConfig.from_env()
    configure_logging(config.log_level, disabled=config.disable_logging)

    positions = analyze_positions(args.deck_size, args.trials, alpha=args.alpha)
    permutations = analyze_permutations(
        args.permutation_size, args.trials, alpha=args.alpha
    )
    fair = positions.is_fair and permutations.is_fair

    if args.json:
        print(
            json.dumps(
                {
                    "positions": positions.to_dict(),
                    "permutations": permutations.to_dict(),
                    "fair": fair,
                },
                indent=2,
            )
        )
    else:
        print(
            f"Position test: {positions.deck_size} cards x {positions.trials} "
            f"shuffles, min p = {positions.min_p_value:.4g}"
        )
        print(
            f"Permutation test: {permutations.deck_size}! orderings, "
            f"chi2 = {permutations.chi_square:.2f}, p = {permutations.p_value:.4g}"
        )
        print("Shuffle looks fair." if fair else "Shuffle looks BIASED.")

    if not fair:
        logger.error("Shuffle fairness check failed")
    return 0 if fair else 1


if __name__ == "__main__":
    sys.exit(main())
