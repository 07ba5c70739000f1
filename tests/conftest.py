"""
Pytest configuration shared by all test packages.

Resets the event bus singleton around every test and provides helpers for
building deck states by hand.
"""

import logging

import pytest

from turndeck.common.instance import instantiate_all
from turndeck.deck.state import DeckState, DiscardPhase
from turndeck.events import EventBus


@pytest.fixture(scope="function", autouse=True)
def reset_event_bus():
    """Reset the event bus singleton before and after each test."""
    EventBus._instance = None
    yield
    EventBus._instance = None


@pytest.fixture(autouse=True)
def restore_package_logger():
    """Undo logging configuration applied by sessions and tools."""
    logger = logging.getLogger("turndeck")
    handlers, level = list(logger.handlers), logger.level
    yield
    logger.handlers = handlers
    logger.setLevel(level)


def build_state(hand=(), draw=(), discard=(), **overrides) -> DeckState:
    """
    Build a state whose hand holds fresh instances of ``hand``.

    The discard phase is derived from ``discard_count`` the same way a deal
    would derive it, unless ``discard_phase`` is given explicitly.
    """
    hand_cards = instantiate_all(hand)
    discard_count = overrides.pop("discard_count", 0)
    remaining = min(discard_count, len(hand_cards))
    values = dict(
        draw_pile=tuple(draw),
        discard_pile=tuple(discard),
        hand=tuple(hand),
        hand_cards=hand_cards,
        discard_count=discard_count,
        discard_phase=DiscardPhase(active=remaining > 0, remaining_discards=remaining),
    )
    values.update(overrides)
    return DeckState(**values)


@pytest.fixture
def make_state():
    """Factory fixture around ``build_state``."""
    return build_state


@pytest.fixture
def captured_events():
    """Record every event published on the bus as (type, data) tuples."""
    events = []
    EventBus.get_instance().on_any(events.append)
    return events
