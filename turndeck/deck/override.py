"""
Validation of externally supplied deck overrides.

An override is a raw string that must parse as a JSON array of strings.
Duplicates are preserved; an empty array is valid and signals a revert to
the default deck.
"""

import json
import logging
from typing import Tuple

from turndeck.deck.constants import OVERRIDE_NOT_ARRAY_ERROR, OVERRIDE_NOT_STRINGS_ERROR
from turndeck.exceptions import OverrideValidationError

logger = logging.getLogger(__name__)


def parse_override(raw: str) -> Tuple[str, ...]:
    """
    Parse and validate a raw deck override.

    :param raw: JSON text expected to hold an array of card labels.
    :return: The cards in the given order, duplicates kept.
    :raises OverrideValidationError: If the text is not valid JSON, not an
        array, or holds any non-string element.

    >>> parse_override('["A", "A", "B"]')
    ('A', 'A', 'B')
    >>> parse_override('[]')
    ()
    """
    if not isinstance(raw, (str, bytes, bytearray)):
        raise OverrideValidationError(
            f"Invalid JSON: expected text, got {type(raw).__name__}"
        )

    try:
        parsed = json.loads(raw)
    except ValueError as e:
        raise OverrideValidationError(f"Invalid JSON: {e}") from e

    if not isinstance(parsed, list):
        raise OverrideValidationError(OVERRIDE_NOT_ARRAY_ERROR)

    if not all(isinstance(item, str) for item in parsed):
        raise OverrideValidationError(OVERRIDE_NOT_STRINGS_ERROR)

    logger.debug("Parsed deck override with %d cards", len(parsed))
    return tuple(parsed)
