"""
Immutable state model for the deck/turn state machine.

``DeckState`` is replaced wholesale on every transition. Collections are
tuples and frozensets so a previous snapshot can be shared freely with
readers while new states are built from it.
"""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Dict, FrozenSet, Optional, Tuple

from turndeck.common.instance import CardInstance
from turndeck.deck.constants import DEFAULT_DISCARD_COUNT, DEFAULT_HAND_SIZE


class DeckSource(Enum):
    """Where the active deck came from."""

    DEFAULT = "default"
    CUSTOM = "custom"
    PRESET = "preset"


class TurnStage(Enum):
    """Conceptual stage of a turn, derived from the state flags."""

    DEALING = auto()
    IDLE = auto()
    DISCARD = auto()
    PLANNING = auto()
    LOCKED = auto()


@dataclass(frozen=True)
class DiscardPhase:
    """
    Discard sub-phase of a turn.

    Attributes:
        active: Whether the player must currently pick cards to discard
        remaining_discards: How many cards must be picked
    """

    active: bool = False
    remaining_discards: int = 0


@dataclass(frozen=True)
class DeckState:
    """
    Immutable representation of the deck and the current turn.

    Attributes:
        draw_pile: Undealt cards, front drawn first
        discard_pile: Cards removed from play
        hand: Card values in hand (display projection of hand_cards)
        hand_cards: Card instances in hand (authoritative)
        turn_number: Current turn, starting at 1
        hand_size: Cards dealt per hand
        discard_count: Cards to discard per turn
        selected_card_ids: Instance ids picked for discard
        discard_phase: Discard sub-phase status
        play_order_sequence: Instance ids in chosen play order
        planning_phase: Whether the play order is being arranged
        play_order_locked: Whether the play order is committed
        deck_source: Origin of the active deck
        active_preset_id: Preset id when deck_source is PRESET
        warning: Non-fatal notice from the last transition
        error: Reason the last operation was rejected
        is_dealing: Guard set while a deal is in progress
    """

    draw_pile: Tuple[str, ...] = ()
    discard_pile: Tuple[str, ...] = ()
    hand: Tuple[str, ...] = ()
    hand_cards: Tuple[CardInstance, ...] = ()
    turn_number: int = 1
    hand_size: int = DEFAULT_HAND_SIZE
    discard_count: int = DEFAULT_DISCARD_COUNT
    selected_card_ids: FrozenSet[str] = frozenset()
    discard_phase: DiscardPhase = field(default_factory=DiscardPhase)
    play_order_sequence: Tuple[str, ...] = ()
    planning_phase: bool = False
    play_order_locked: bool = False
    deck_source: DeckSource = DeckSource.DEFAULT
    active_preset_id: Optional[str] = None
    warning: Optional[str] = None
    error: Optional[str] = None
    is_dealing: bool = False

    @property
    def total_cards(self) -> int:
        """Number of cards across all piles and the hand."""
        return len(self.draw_pile) + len(self.discard_pile) + len(self.hand)

    @property
    def hand_instance_ids(self) -> Tuple[str, ...]:
        """Instance ids of the hand, in hand order."""
        return tuple(instance.instance_id for instance in self.hand_cards)

    @property
    def stage(self) -> TurnStage:
        """The conceptual turn stage implied by the current flags."""
        if self.is_dealing:
            return TurnStage.DEALING
        if self.discard_phase.active:
            return TurnStage.DISCARD
        if self.planning_phase:
            return TurnStage.PLANNING
        if self.play_order_locked:
            return TurnStage.LOCKED
        return TurnStage.IDLE

    def find_instance(self, instance_id: str) -> Optional[CardInstance]:
        for instance in self.hand_cards:
            if instance.instance_id == instance_id:
                return instance
        return None

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert the state to its persisted dictionary form.

        Transient fields (``is_dealing`` and ``selected_card_ids``) are left
        out so a restored session never resumes mid-interaction.

        Returns:
            JSON-serializable dictionary
        """
        return {
            "draw_pile": list(self.draw_pile),
            "discard_pile": list(self.discard_pile),
            "hand": list(self.hand),
            "hand_cards": [instance.to_dict() for instance in self.hand_cards],
            "turn_number": self.turn_number,
            "hand_size": self.hand_size,
            "discard_count": self.discard_count,
            "discard_phase": {
                "active": self.discard_phase.active,
                "remaining_discards": self.discard_phase.remaining_discards,
            },
            "play_order_sequence": list(self.play_order_sequence),
            "planning_phase": self.planning_phase,
            "play_order_locked": self.play_order_locked,
            "deck_source": self.deck_source.value,
            "active_preset_id": self.active_preset_id,
            "warning": self.warning,
            "error": self.error,
        }

    def to_adapter_format(self) -> Dict[str, Any]:
        """
        Convert the state to a compact summary for display layers.

        Returns:
            Dictionary in adapter-friendly format
        """
        return {
            "turn": self.turn_number,
            "stage": self.stage.name,
            "draw_pile_count": len(self.draw_pile),
            "discard_pile_count": len(self.discard_pile),
            "hand": [
                {
                    "id": instance.instance_id,
                    "card": instance.card,
                    "selected": instance.instance_id in self.selected_card_ids,
                    "play_position": (
                        self.play_order_sequence.index(instance.instance_id) + 1
                        if instance.instance_id in self.play_order_sequence
                        else None
                    ),
                }
                for instance in self.hand_cards
            ],
            "remaining_discards": self.discard_phase.remaining_discards,
            "deck_source": self.deck_source.value,
            "active_preset_id": self.active_preset_id,
            "warning": self.warning,
            "error": self.error,
        }
