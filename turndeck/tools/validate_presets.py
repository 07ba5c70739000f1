#!/usr/bin/env python
"""
Preset deck validation tool.

Validates every preset in the built-in registry and exits with status 1 if
any of them is invalid, so a build or CI step can refuse to ship a broken
registry.

Examples:
    python -m turndeck.tools.validate_presets
    python -m turndeck.tools.validate_presets --json
"""

import argparse
import json
import sys
from typing import Any, Iterable, List, Mapping, Optional, TextIO

from turndeck.deck.presets import PRESET_DECKS, RegistryValidationReport, validate_registry


def _attr(deck: Any, key: str) -> Any:
    if isinstance(deck, Mapping):
        return deck.get(key)
    return getattr(deck, key, None)


def render_report(
    decks: List, report: RegistryValidationReport, out: TextIO, quiet: bool = False
) -> None:
    total = len(report.results)
    valid = sum(1 for result in report.results if result.is_valid)

    for index, (deck, result) in enumerate(zip(decks, report.results), start=1):
        name = _attr(deck, "name") or "?"
        preset_id = _attr(deck, "id") or "?"
        if result.is_valid:
            if not quiet:
                out.write(f"OK   [{index}/{total}] {name} ({preset_id})\n")
        else:
            out.write(f"FAIL [{index}/{total}] {name} ({preset_id})\n")
            for error in result.errors:
                out.write(f"       - {error}\n")

    for error in report.registry_errors:
        out.write(f"FAIL registry: {error}\n")

    out.write("=" * 60 + "\n")
    out.write(f"Total presets: {total}\n")
    out.write(f"Valid: {valid}\n")
    out.write(f"Invalid: {total - valid}\n")
    out.write("=" * 60 + "\n")
    if report.is_valid:
        out.write("All preset decks are valid.\n")
    else:
        out.write("Preset deck validation failed.\n")


def run(
    decks: Iterable = PRESET_DECKS,
    as_json: bool = False,
    quiet: bool = False,
    out: Optional[TextIO] = None,
) -> int:
    """
    Validate ``decks`` and write a report.

    Returns:
        Process exit code: 0 if every preset is valid, 1 otherwise
    """
    out = out if out is not None else sys.stdout
    decks = list(decks)
    report = validate_registry(decks)

    if as_json:
        json.dump(
            {
                "valid": report.is_valid,
                "total": len(report.results),
                "errors": report.errors,
            },
            out,
            indent=2,
        )
        out.write("\n")
    else:
        render_report(decks, report, out, quiet=quiet)

    return 0 if report.is_valid else 1


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        description="Validate the built-in preset deck registry"
    )
    parser.add_argument(
        "--json", action="store_true", help="Emit the result as JSON"
    )
    parser.add_argument(
        "--quiet", action="store_true", help="Only report invalid presets"
    )
    args = parser.parse_args(argv)
    return run(as_json=args.json, quiet=args.quiet)


if __name__ == "__main__":
    sys.exit(main())
