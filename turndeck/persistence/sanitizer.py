"""
Validation and sanitization of persisted deck state.

Stored data may be stale, hand-edited or written by another version. Rather
than rejecting it outright, each field is clamped or filtered to something the
state machine can work with, and every correction is reported. Only data that
is not a mapping at all is refused.
"""

import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple

from turndeck.common.instance import CardInstance
from turndeck.deck.constants import (
    DEFAULT_DISCARD_COUNT,
    DEFAULT_HAND_SIZE,
    MAX_HAND_SIZE,
    MIN_DISCARD_COUNT,
    MIN_HAND_SIZE,
)
from turndeck.deck.state import DeckSource, DeckState, DiscardPhase

# Largest integer a JSON number carries exactly
MAX_SAFE_INTEGER = 2**53 - 1

KNOWN_FIELDS = frozenset(
    {
        "draw_pile",
        "discard_pile",
        "hand",
        "hand_cards",
        "turn_number",
        "hand_size",
        "discard_count",
        "discard_phase",
        "play_order_sequence",
        "planning_phase",
        "play_order_locked",
        "deck_source",
        "active_preset_id",
        "warning",
        "error",
        "selected_card_ids",
        "is_dealing",
    }
)


@dataclass
class SanitizeResult:
    """
    Outcome of sanitizing persisted data.

    Attributes:
        is_valid: False only when nothing usable could be recovered
        state: The sanitized state, or None when invalid
        errors: Human-readable notes on every correction made
        extra_fields: Unknown top-level keys, kept for forward compatibility
    """

    is_valid: bool
    state: Optional[DeckState]
    errors: List[str] = field(default_factory=list)
    extra_fields: Dict[str, Any] = field(default_factory=dict)


def _string_array(value: Any, name: str, errors: List[str]) -> Tuple[str, ...]:
    if not isinstance(value, (list, tuple)):
        errors.append(f"{name} is not an array, using empty array")
        return ()
    filtered = tuple(item for item in value if isinstance(item, str))
    if len(filtered) != len(value):
        errors.append(f"{name} had invalid elements removed")
    return filtered


def _card_instances(value: Any, errors: List[str]) -> Tuple[CardInstance, ...]:
    if not isinstance(value, (list, tuple)):
        errors.append("hand_cards is not an array, using empty array")
        return ()

    instances = []
    seen = set()
    for item in value:
        if not isinstance(item, Mapping):
            continue
        instance_id, card = item.get("instance_id"), item.get("card")
        if not isinstance(instance_id, str) or not isinstance(card, str):
            continue
        if instance_id in seen:
            continue
        seen.add(instance_id)
        instances.append(CardInstance(card=card, instance_id=instance_id))

    if len(instances) != len(value):
        errors.append("hand_cards had invalid elements removed")
    return tuple(instances)


def _number(
    value: Any, minimum: int, maximum: int, default: int, name: str, errors: List[str]
) -> int:
    if value is None or isinstance(value, bool):
        errors.append(f"{name} is not a valid number, using default {default}")
        return default
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        errors.append(f"{name} is not a valid number, using default {default}")
        return default
    if math.isnan(number) or math.isinf(number):
        errors.append(f"{name} is not a valid number, using default {default}")
        return default

    clamped = max(minimum, min(maximum, int(math.floor(number))))
    if clamped != number:
        errors.append(f"{name} was clamped from {value} to {clamped}")
    return clamped


def _optional_string(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None


def sanitize_state(data: Any) -> SanitizeResult:
    """
    Validate and sanitize a persisted state dictionary.

    Transient fields are always reset, and cross-field invariants (play order
    only referencing hand cards, lock only with a complete order, discard
    budget within the hand) are re-established.

    Args:
        data: Raw decoded data from storage

    Returns:
        Sanitize result holding the state and a list of corrections
    """
    errors: List[str] = []

    if not isinstance(data, Mapping):
        errors.append("State must be a non-null object")
        return SanitizeResult(False, None, errors)

    hand_cards = _card_instances(data.get("hand_cards"), errors)
    hand = tuple(instance.card for instance in hand_cards)
    if "hand" in data and _string_array(data.get("hand"), "hand", []) != hand:
        errors.append("hand did not match hand_cards, rebuilt from hand_cards")

    hand_ids = {instance.instance_id for instance in hand_cards}
    raw_sequence = _string_array(
        data.get("play_order_sequence"), "play_order_sequence", errors
    )
    sequence = []
    for instance_id in raw_sequence:
        if instance_id in hand_ids and instance_id not in sequence:
            sequence.append(instance_id)
    if len(sequence) != len(raw_sequence):
        errors.append("play_order_sequence had unknown or duplicate ids removed")

    locked = bool(data.get("play_order_locked"))
    if locked and len(sequence) != len(hand_cards):
        errors.append("play_order_locked dropped, play order is incomplete")
        locked = False
    planning = bool(data.get("planning_phase")) and not locked

    raw_phase = data.get("discard_phase")
    if isinstance(raw_phase, Mapping):
        remaining = _number(
            raw_phase.get("remaining_discards"),
            0,
            len(hand_cards),
            0,
            "discard_phase.remaining_discards",
            errors,
        )
        active = raw_phase.get("active") is True and remaining > 0
        discard_phase = DiscardPhase(active=active, remaining_discards=remaining)
    else:
        errors.append("discard_phase is invalid, using defaults")
        discard_phase = DiscardPhase()

    try:
        deck_source = DeckSource(data.get("deck_source"))
    except (TypeError, ValueError):
        errors.append("deck_source is invalid, using default")
        deck_source = DeckSource.DEFAULT

    active_preset_id = _optional_string(data.get("active_preset_id"))
    if deck_source is not DeckSource.PRESET:
        active_preset_id = None

    state = DeckState(
        draw_pile=_string_array(data.get("draw_pile"), "draw_pile", errors),
        discard_pile=_string_array(data.get("discard_pile"), "discard_pile", errors),
        hand=hand,
        hand_cards=hand_cards,
        turn_number=_number(
            data.get("turn_number"), 1, MAX_SAFE_INTEGER, 1, "turn_number", errors
        ),
        hand_size=_number(
            data.get("hand_size"),
            MIN_HAND_SIZE,
            MAX_HAND_SIZE,
            DEFAULT_HAND_SIZE,
            "hand_size",
            errors,
        ),
        discard_count=_number(
            data.get("discard_count"),
            MIN_DISCARD_COUNT,
            MAX_SAFE_INTEGER,
            DEFAULT_DISCARD_COUNT,
            "discard_count",
            errors,
        ),
        selected_card_ids=frozenset(),
        discard_phase=discard_phase,
        play_order_sequence=tuple(sequence),
        planning_phase=planning,
        play_order_locked=locked,
        deck_source=deck_source,
        active_preset_id=active_preset_id,
        warning=_optional_string(data.get("warning")),
        error=_optional_string(data.get("error")),
        is_dealing=False,
    )

    extra_fields = {key: value for key, value in data.items() if key not in KNOWN_FIELDS}
    return SanitizeResult(True, state, errors, extra_fields)
