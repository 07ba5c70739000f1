"""
Preset deck registry and validation.

Presets are curated deck definitions shipped with the engine. The registry is
validated once, as a batch, so a build step can reject it with the complete
list of problems (see ``turndeck.tools.validate_presets``). The runtime lookup
re-checks only that the chosen preset still has cards.
"""

import logging
import re
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union

from turndeck.exceptions import (
    PresetEmptyError,
    PresetNotFoundError,
    PresetRegistryError,
    PresetValidationError,
)

logger = logging.getLogger(__name__)

MAX_NAME_LENGTH = 50
MAX_DESCRIPTION_LENGTH = 200
PRESET_ID_PATTERN = re.compile(r"^[a-z0-9]+(-[a-z0-9]+)*$")


@dataclass(frozen=True)
class PresetDeck:
    """
    A named, curated deck definition.

    Attributes:
        id: Unique kebab-case identifier
        name: Display name, at most 50 characters
        description: Short description, at most 200 characters
        cards: Card labels in deck order
    """

    id: str
    name: str
    description: str
    cards: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "cards": list(self.cards),
        }


@dataclass
class PresetValidationResult:
    """Outcome of validating a single preset deck."""

    is_valid: bool
    errors: List[str]
    deck: Any

    def raise_for_errors(self) -> None:
        if not self.is_valid:
            raise PresetValidationError("; ".join(self.errors))


@dataclass
class RegistryValidationReport:
    """Outcome of validating a whole registry."""

    results: List[PresetValidationResult] = field(default_factory=list)
    registry_errors: List[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.registry_errors and all(r.is_valid for r in self.results)

    @property
    def errors(self) -> List[str]:
        """Every failure, prefixed with the preset it belongs to."""
        collected = []
        for index, result in enumerate(self.results):
            label = _describe(result.deck, index)
            collected.extend(f"{label}: {error}" for error in result.errors)
        collected.extend(self.registry_errors)
        return collected

    def raise_for_errors(self) -> None:
        if not self.is_valid:
            raise PresetRegistryError(self.errors)


def _field(deck: Any, name: str) -> Any:
    if isinstance(deck, Mapping):
        return deck.get(name)
    return getattr(deck, name, None)


def _describe(deck: Any, index: int) -> str:
    preset_id = _field(deck, "id")
    if isinstance(preset_id, str) and preset_id:
        return f"preset '{preset_id}'"
    return f"preset #{index + 1}"


def validate_preset_deck(deck: Union[PresetDeck, Mapping[str, Any]]) -> PresetValidationResult:
    """
    Check a preset deck against every structural rule.

    All failures are collected rather than stopping at the first one.

    Args:
        deck: A ``PresetDeck`` or an equivalent mapping

    Returns:
        Result with ``is_valid`` and the list of error messages
    """
    if not isinstance(deck, (PresetDeck, Mapping)):
        return PresetValidationResult(False, ["Preset deck must be an object"], deck)

    errors: List[str] = []

    preset_id = _field(deck, "id")
    if not isinstance(preset_id, str) or not preset_id.strip():
        errors.append("id must be a non-empty string")
    elif not PRESET_ID_PATTERN.match(preset_id):
        errors.append(f"id '{preset_id}' must be kebab-case")

    name = _field(deck, "name")
    if not isinstance(name, str) or not name.strip():
        errors.append("name must be a non-empty string")
    elif len(name) > MAX_NAME_LENGTH:
        errors.append(
            f"name must be at most {MAX_NAME_LENGTH} characters (got {len(name)})"
        )

    description = _field(deck, "description")
    if not isinstance(description, str):
        errors.append("description must be a string")
    elif len(description) > MAX_DESCRIPTION_LENGTH:
        errors.append(
            f"description must be at most {MAX_DESCRIPTION_LENGTH} characters "
            f"(got {len(description)})"
        )

    cards = _field(deck, "cards")
    if not isinstance(cards, (list, tuple)):
        errors.append("cards must be an array")
    elif not cards:
        errors.append("cards must contain at least one card")
    else:
        for position, card in enumerate(cards):
            if not isinstance(card, str) or not card.strip():
                errors.append(f"card at position {position} must be a non-empty string")

    return PresetValidationResult(not errors, errors, deck)


def validate_registry(decks: Iterable[Any]) -> RegistryValidationReport:
    """
    Validate every preset in a registry and check that ids are unique.

    Args:
        decks: Preset decks in registry order

    Returns:
        Report covering every preset
    """
    report = RegistryValidationReport()
    seen: Dict[str, int] = {}

    for index, deck in enumerate(decks):
        report.results.append(validate_preset_deck(deck))
        preset_id = _field(deck, "id") if isinstance(deck, (PresetDeck, Mapping)) else None
        if isinstance(preset_id, str) and preset_id:
            if preset_id in seen:
                report.registry_errors.append(
                    f"duplicate preset id '{preset_id}' at positions "
                    f"{seen[preset_id] + 1} and {index + 1}"
                )
            else:
                seen[preset_id] = index

    return report


def build_registry(decks: Iterable[PresetDeck]) -> Mapping[str, PresetDeck]:
    """
    Validate presets and index them by id.

    Raises:
        PresetRegistryError: If any preset is invalid
    """
    decks = list(decks)
    validate_registry(decks).raise_for_errors()
    logger.debug("Preset registry built with %d decks", len(decks))
    return MappingProxyType({deck.id: deck for deck in decks})


def get_preset(registry: Mapping[str, PresetDeck], preset_id: str) -> PresetDeck:
    """
    Look up a preset, re-checking that it has cards.

    Raises:
        PresetNotFoundError: If the id is not registered
        PresetEmptyError: If the preset has no cards
    """
    if not isinstance(preset_id, str):
        raise PresetNotFoundError(preset_id)
    preset: Optional[PresetDeck] = registry.get(preset_id)
    if preset is None:
        raise PresetNotFoundError(preset_id)
    if not preset.cards:
        raise PresetEmptyError(preset.id, preset.name)
    return preset


PRESET_DECKS: Tuple[PresetDeck, ...] = (
    PresetDeck(
        id="starter-deck",
        name="Starter Deck",
        description="A balanced deck for learning the game mechanics with 20 cards.",
        cards=(
            ("Card 1",) * 3
            + ("Card 2",) * 3
            + ("Card 3",) * 3
            + ("Card 4",) * 2
            + ("Card 5",) * 2
            + ("Card 6",) * 2
            + ("Card 7",) * 2
            + ("Card 8", "Card 9", "Card 10")
        ),
    ),
    PresetDeck(
        id="full-spades",
        name="Full Spades",
        description="All thirteen spades, one of each rank.",
        cards=tuple(
            f"{rank} of Spades"
            for rank in (
                "Ace", "2", "3", "4", "5", "6", "7",
                "8", "9", "10", "Jack", "Queen", "King",
            )
        ),
    ),
    PresetDeck(
        id="duplicate-heavy",
        name="Duplicate Heavy",
        description=(
            "Few distinct values with many copies each, for practising discards "
            "and ordering among identical-looking cards."
        ),
        cards=("Strike",) * 6 + ("Defend",) * 6 + ("Focus",) * 3,
    ),
)

PRESET_REGISTRY: Mapping[str, PresetDeck] = build_registry(PRESET_DECKS)
