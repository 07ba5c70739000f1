"""
State transition functions for the deck/turn state machine.

This module provides pure functions for transitioning between deck states,
without modifying the original state objects. ``transition`` is the single
dispatch entry point; it never raises for domain failures, which surface as
the ``error`` and ``warning`` fields of the returned state instead.
"""

import logging
import math
from dataclasses import replace
from typing import Any, Dict, Iterable, Mapping, Optional, Union

from turndeck.common.instance import instantiate_all
from turndeck.common.shuffle import shuffle
from turndeck.deck.actions import Action, ActionType
from turndeck.deck.constants import (
    DEFAULT_DECK,
    DEFAULT_DISCARD_COUNT,
    DEFAULT_HAND_SIZE,
    EMPTY_OVERRIDE_WARNING,
    MAX_HAND_SIZE,
    MIN_DISCARD_COUNT,
    MIN_HAND_SIZE,
    RESET_MAX_HAND_SIZE,
    insufficient_cards_warning,
)
from turndeck.deck.override import parse_override
from turndeck.deck.presets import PRESET_REGISTRY, PresetDeck, get_preset
from turndeck.deck.state import DeckSource, DeckState, DiscardPhase
from turndeck.events import DeckEventType, EventBus
from turndeck.exceptions import (
    OverrideValidationError,
    PresetEmptyError,
    PresetNotFoundError,
)

logger = logging.getLogger(__name__)

PresetSource = Union[Mapping[str, PresetDeck], Iterable[PresetDeck]]


def _emit(event_type: DeckEventType, data: Dict[str, Any]) -> None:
    EventBus.get_instance().emit(event_type, data)


def _coerce_int(value: Any, fallback: int) -> int:
    """Floor ``value`` to an int, or return ``fallback`` if it is not numeric."""
    if isinstance(value, bool):
        return fallback
    try:
        return int(math.floor(float(value)))
    except (TypeError, ValueError, OverflowError):
        return fallback


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _as_registry(presets: Optional[PresetSource]) -> Mapping[str, PresetDeck]:
    if presets is None:
        return PRESET_REGISTRY
    if isinstance(presets, Mapping):
        return presets
    return {deck.id: deck for deck in presets}


class StateTransitionEngine:
    """
    Pure functions for deck/turn state transitions.

    This class contains static methods that implement the state machine's
    actions. Each method takes a state and returns a new state, without
    modifying the original. Guarded actions whose precondition does not hold
    return the very same state object.
    """

    @staticmethod
    def initialize() -> DeckState:
        """
        Build the initial state: shuffled default deck, turn 1, first hand dealt.

        Returns:
            New game state
        """
        state = StateTransitionEngine.deal_next_hand(
            DeckState(draw_pile=shuffle(DEFAULT_DECK))
        )
        _emit(
            DeckEventType.GAME_INITIALIZED,
            {"total_cards": state.total_cards, "hand_size": state.hand_size},
        )
        return state

    @staticmethod
    def deal_next_hand(state: DeckState, preserve_warning: bool = False) -> DeckState:
        """
        Deal a new hand of ``state.hand_size`` cards.

        Cards still held are returned to the discard pile first. When the
        draw pile runs dry the discard pile is reshuffled into it; when both
        are exhausted the deal stops early with a warning.

        Args:
            state: Current game state
            preserve_warning: Keep the incoming warning after a full deal

        Returns:
            New game state with a fresh hand
        """
        state = replace(state, is_dealing=True)

        draw_pile = list(state.draw_pile)
        discard_pile = list(state.discard_pile) + list(state.hand)
        dealt = []
        warning = state.warning if preserve_warning else None
        reshuffles = 0

        for _ in range(state.hand_size):
            if not draw_pile and discard_pile:
                draw_pile = list(shuffle(discard_pile))
                discard_pile = []
                reshuffles += 1
            if not draw_pile:
                warning = insufficient_cards_warning(len(dealt), state.hand_size)
                break
            dealt.append(draw_pile.pop(0))

        hand_cards = instantiate_all(dealt)
        remaining = min(max(state.discard_count, 0), len(hand_cards))

        new_state = replace(
            state,
            draw_pile=tuple(draw_pile),
            discard_pile=tuple(discard_pile),
            hand=tuple(dealt),
            hand_cards=hand_cards,
            selected_card_ids=frozenset(),
            discard_phase=DiscardPhase(active=remaining > 0, remaining_discards=remaining),
            play_order_sequence=(),
            planning_phase=False,
            play_order_locked=False,
            warning=warning,
            error=None,
            is_dealing=False,
        )

        if reshuffles:
            _emit(
                DeckEventType.DISCARD_RESHUFFLED,
                {"turn_number": new_state.turn_number, "reshuffles": reshuffles},
            )
        _emit(
            DeckEventType.HAND_DEALT,
            {
                "turn_number": new_state.turn_number,
                "requested": state.hand_size,
                "dealt": len(dealt),
                "cards": list(dealt),
            },
        )
        if warning and warning != state.warning:
            logger.info(warning)
            _emit(DeckEventType.WARNING, {"message": warning})

        return new_state

    @staticmethod
    def can_end_turn(state: DeckState) -> bool:
        """Whether END_TURN would take effect in ``state``."""
        if state.is_dealing or state.discard_phase.active or state.planning_phase:
            return False
        if state.play_order_sequence and not state.play_order_locked:
            return False
        return True

    @staticmethod
    def end_turn(state: DeckState) -> DeckState:
        """
        Discard the hand, advance the turn counter and deal the next hand.

        Ignored while dealing, during the discard or planning phase, or while
        a partial play order is pending.

        Args:
            state: Current game state

        Returns:
            New game state for the next turn, or ``state`` itself if ignored
        """
        if not StateTransitionEngine.can_end_turn(state):
            logger.debug("END_TURN ignored in stage %s", state.stage.name)
            return state

        finished_turn = state.turn_number
        emptied = replace(
            state,
            discard_pile=state.discard_pile + state.hand,
            hand=(),
            hand_cards=(),
            turn_number=state.turn_number + 1,
            selected_card_ids=frozenset(),
            discard_phase=DiscardPhase(),
        )
        new_state = StateTransitionEngine.deal_next_hand(emptied)

        _emit(
            DeckEventType.TURN_ENDED,
            {"turn_number": finished_turn, "next_turn": new_state.turn_number},
        )
        return new_state

    @staticmethod
    def _replace_deck(
        state: DeckState,
        cards: Iterable[str],
        source: DeckSource,
        preset_id: Optional[str] = None,
        warning: Optional[str] = None,
    ) -> DeckState:
        base = replace(
            state,
            draw_pile=shuffle(cards),
            discard_pile=(),
            hand=(),
            hand_cards=(),
            deck_source=source,
            active_preset_id=preset_id,
            warning=warning,
            error=None,
        )
        new_state = StateTransitionEngine.deal_next_hand(
            base, preserve_warning=warning is not None
        )
        _emit(
            DeckEventType.DECK_REPLACED,
            {
                "deck_source": source.value,
                "preset_id": preset_id,
                "total_cards": new_state.total_cards,
            },
        )
        return new_state

    @staticmethod
    def apply_json_override(state: DeckState, raw: str) -> DeckState:
        """
        Replace the deck with cards from a raw JSON array.

        Invalid input only sets ``error``; piles stay untouched. An empty
        array reverts to the default deck with a warning.

        Args:
            state: Current game state
            raw: JSON text holding an array of card labels

        Returns:
            New game state
        """
        try:
            cards = parse_override(raw)
        except OverrideValidationError as e:
            logger.info("Rejected deck override: %s", e)
            _emit(DeckEventType.ERROR, {"message": str(e)})
            return replace(state, error=str(e))

        if not cards:
            return StateTransitionEngine._replace_deck(
                state, DEFAULT_DECK, DeckSource.CUSTOM, warning=EMPTY_OVERRIDE_WARNING
            )
        return StateTransitionEngine._replace_deck(state, cards, DeckSource.CUSTOM)

    @staticmethod
    def change_parameters(
        state: DeckState,
        hand_size: Any,
        discard_count: Any,
        immediate_reset: bool = False,
    ) -> DeckState:
        """
        Update the hand size and discard count.

        Values are clamped, never rejected: hand size into [1, 10], discard
        count to at least 0. Non-numeric values keep the current setting.

        Args:
            state: Current game state
            hand_size: Requested cards per hand
            discard_count: Requested discards per turn
            immediate_reset: Pool every card, reshuffle and redeal now

        Returns:
            New game state
        """
        new_hand_size = min(
            MAX_HAND_SIZE, max(MIN_HAND_SIZE, _coerce_int(hand_size, state.hand_size))
        )
        new_discard_count = max(
            MIN_DISCARD_COUNT, _coerce_int(discard_count, state.discard_count)
        )

        _emit(
            DeckEventType.PARAMETERS_CHANGED,
            {
                "hand_size": new_hand_size,
                "discard_count": new_discard_count,
                "immediate_reset": bool(immediate_reset),
            },
        )

        if not immediate_reset:
            return replace(
                state, hand_size=new_hand_size, discard_count=new_discard_count
            )

        pooled = state.draw_pile + state.discard_pile + state.hand
        return StateTransitionEngine.deal_next_hand(
            replace(
                state,
                draw_pile=shuffle(pooled),
                discard_pile=(),
                hand=(),
                hand_cards=(),
                hand_size=new_hand_size,
                discard_count=new_discard_count,
                warning=None,
                error=None,
            )
        )

    @staticmethod
    def toggle_card_selection(state: DeckState, instance_id: str) -> DeckState:
        """
        Select or deselect a hand card for discard.

        Selection saturates at ``remaining_discards``: selecting beyond it is
        a no-op, not an error.
        """
        if not state.discard_phase.active:
            return state
        if state.find_instance(instance_id) is None:
            return state

        if instance_id in state.selected_card_ids:
            return replace(
                state, selected_card_ids=state.selected_card_ids - {instance_id}
            )
        if len(state.selected_card_ids) >= state.discard_phase.remaining_discards:
            return state
        return replace(state, selected_card_ids=state.selected_card_ids | {instance_id})

    @staticmethod
    def confirm_discard(state: DeckState) -> DeckState:
        """
        Discard the selected cards and move on to planning.

        Requires the discard phase to be active with exactly
        ``remaining_discards`` cards selected. If no cards remain in hand the
        planning phase is skipped.

        Args:
            state: Current game state

        Returns:
            New game state, or ``state`` itself if the precondition fails
        """
        if not state.discard_phase.active:
            return state
        if len(state.selected_card_ids) != state.discard_phase.remaining_discards:
            return state

        kept = tuple(
            instance
            for instance in state.hand_cards
            if instance.instance_id not in state.selected_card_ids
        )
        discarded = tuple(
            instance.card
            for instance in state.hand_cards
            if instance.instance_id in state.selected_card_ids
        )

        new_state = replace(
            state,
            hand_cards=kept,
            hand=tuple(instance.card for instance in kept),
            discard_pile=state.discard_pile + discarded,
            selected_card_ids=frozenset(),
            discard_phase=DiscardPhase(),
            play_order_sequence=(),
            planning_phase=bool(kept),
        )

        _emit(
            DeckEventType.CARDS_DISCARDED,
            {
                "turn_number": state.turn_number,
                "cards": list(discarded),
                "remaining_in_hand": len(kept),
            },
        )
        return new_state

    @staticmethod
    def select_for_play_order(state: DeckState, instance_id: str) -> DeckState:
        """Append a hand card to the play order."""
        if not state.planning_phase or state.play_order_locked:
            return state
        if state.find_instance(instance_id) is None:
            return state
        if instance_id in state.play_order_sequence:
            return state
        return replace(
            state, play_order_sequence=state.play_order_sequence + (instance_id,)
        )

    @staticmethod
    def deselect_from_play_order(state: DeckState, instance_id: str) -> DeckState:
        """Remove a card from the play order, keeping the others in order."""
        if not state.planning_phase or state.play_order_locked:
            return state
        if instance_id not in state.play_order_sequence:
            return state
        return replace(
            state,
            play_order_sequence=tuple(
                existing
                for existing in state.play_order_sequence
                if existing != instance_id
            ),
        )

    @staticmethod
    def lock_play_order(state: DeckState) -> DeckState:
        """Commit the play order once every hand card has a position."""
        if state.play_order_locked:
            return state
        if len(state.play_order_sequence) < len(state.hand_cards):
            return state

        new_state = replace(state, play_order_locked=True, planning_phase=False)
        _emit(
            DeckEventType.PLAY_ORDER_LOCKED,
            {
                "turn_number": state.turn_number,
                "order": [
                    state.find_instance(instance_id).card
                    for instance_id in state.play_order_sequence
                ],
            },
        )
        return new_state

    @staticmethod
    def clear_play_order(state: DeckState) -> DeckState:
        if state.play_order_locked or not state.play_order_sequence:
            return state
        return replace(state, play_order_sequence=())

    @staticmethod
    def reset(state: DeckState) -> DeckState:
        """
        Start over with the full default deck at turn 1.

        The current hand size is kept if it lies in [1, 52], and the discard
        count if it lies in [0, hand size]; otherwise defaults are used.

        Args:
            state: Current game state

        Returns:
            New game state
        """
        hand_size = state.hand_size
        if not (_is_int(hand_size) and MIN_HAND_SIZE <= hand_size <= RESET_MAX_HAND_SIZE):
            hand_size = DEFAULT_HAND_SIZE

        discard_count = state.discard_count
        if not (_is_int(discard_count) and MIN_DISCARD_COUNT <= discard_count <= hand_size):
            discard_count = DEFAULT_DISCARD_COUNT

        new_state = StateTransitionEngine.deal_next_hand(
            DeckState(
                draw_pile=shuffle(DEFAULT_DECK),
                hand_size=hand_size,
                discard_count=discard_count,
            )
        )
        _emit(
            DeckEventType.GAME_RESET,
            {"hand_size": hand_size, "discard_count": discard_count},
        )
        return new_state

    @staticmethod
    def load_preset_deck(
        state: DeckState, preset_id: str, presets: Optional[PresetSource] = None
    ) -> DeckState:
        """
        Replace the deck with a registered preset.

        Args:
            state: Current game state
            preset_id: Id of the preset to load
            presets: Registry to look in; defaults to the built-in one

        Returns:
            New game state, or ``state`` with ``error`` set if the preset is
            unknown or empty
        """
        try:
            preset = get_preset(_as_registry(presets), preset_id)
        except (PresetNotFoundError, PresetEmptyError) as e:
            logger.info("Cannot load preset: %s", e)
            _emit(DeckEventType.ERROR, {"message": str(e), "preset_id": preset_id})
            return replace(state, error=str(e))

        return StateTransitionEngine._replace_deck(
            state, preset.cards, DeckSource.PRESET, preset_id=preset.id
        )


def transition(
    state: Optional[DeckState],
    action: Action,
    presets: Optional[PresetSource] = None,
) -> DeckState:
    """
    Compute the next state for ``action``.

    Args:
        state: Current state; may be None only for INIT
        action: One of the actions from ``turndeck.deck.actions``
        presets: Preset registry for LOAD_PRESET_DECK

    Returns:
        The new state (or ``state`` itself when the action is a no-op)
    """
    engine = StateTransitionEngine
    action_type = getattr(action, "type", None)

    if action_type is ActionType.INIT:
        return engine.initialize()
    if state is None:
        logger.debug("No state yet, initializing before %s", action_type)
        state = engine.initialize()

    logger.debug("Dispatching %s at turn %d", action_type, state.turn_number)

    if action_type is ActionType.DEAL_NEXT_HAND:
        return engine.deal_next_hand(state)
    if action_type is ActionType.END_TURN:
        return engine.end_turn(state)
    if action_type is ActionType.APPLY_JSON_OVERRIDE:
        return engine.apply_json_override(state, action.raw)
    if action_type is ActionType.CHANGE_PARAMETERS:
        return engine.change_parameters(
            state, action.hand_size, action.discard_count, action.immediate_reset
        )
    if action_type is ActionType.TOGGLE_CARD_SELECTION:
        return engine.toggle_card_selection(state, action.instance_id)
    if action_type is ActionType.CONFIRM_DISCARD:
        return engine.confirm_discard(state)
    if action_type is ActionType.SELECT_FOR_PLAY_ORDER:
        return engine.select_for_play_order(state, action.instance_id)
    if action_type is ActionType.DESELECT_FROM_PLAY_ORDER:
        return engine.deselect_from_play_order(state, action.instance_id)
    if action_type is ActionType.LOCK_PLAY_ORDER:
        return engine.lock_play_order(state)
    if action_type is ActionType.CLEAR_PLAY_ORDER:
        return engine.clear_play_order(state)
    if action_type is ActionType.RESET:
        return engine.reset(state)
    if action_type is ActionType.LOAD_PRESET_DECK:
        return engine.load_preset_deck(state, action.preset_id, presets)

    logger.debug("Ignoring unknown action %r", action)
    return state
