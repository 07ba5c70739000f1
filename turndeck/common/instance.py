"""
Card instance identity.

Card values may repeat inside a deck, so the hand tracks individual
occurrences. Every deal wraps each card in a new ``CardInstance`` carrying a
fresh id; ids are never reused between deals.
"""

import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Tuple


@dataclass(frozen=True)
class CardInstance:
    """
    One concrete occurrence of a card in the hand.

    Attributes:
        card: The card value (an opaque label)
        instance_id: Unique identifier for this occurrence
    """

    card: str
    instance_id: str = field(default_factory=lambda: str(uuid.uuid4()))

    def to_dict(self) -> Dict[str, Any]:
        return {"instance_id": self.instance_id, "card": self.card}


def instantiate(card: str) -> CardInstance:
    """Wrap ``card`` in a new instance with a unique id."""
    return CardInstance(card=card)


def instantiate_all(cards: Iterable[str]) -> Tuple[CardInstance, ...]:
    """Wrap every card of a freshly dealt hand, preserving order."""
    return tuple(instantiate(card) for card in cards)
