"""Tests for debounced saving."""

import time
from dataclasses import replace
from unittest.mock import patch

from turndeck.deck.actions import Init
from turndeck.deck.transitions import transition
from turndeck.persistence.saver import DebouncedSaver
from turndeck.persistence.storage import MemoryStateStore


def make_states(count):
    state = transition(None, Init())
    return [replace(state, turn_number=turn) for turn in range(1, count + 1)]


def test_zero_delay_saves_synchronously():
    store = MemoryStateStore()
    saver = DebouncedSaver(store, delay_ms=0)
    state = transition(None, Init())

    saver.request(state)

    assert store.load() == state
    assert saver.pending is None


def test_burst_is_coalesced_into_last_state():
    store = MemoryStateStore()
    saver = DebouncedSaver(store, delay_ms=50)
    states = make_states(3)

    with patch.object(store, "save", wraps=store.save) as save:
        for state in states:
            saver.request(state)
        assert saver.pending is states[-1]
        time.sleep(0.4)

    save.assert_called_once_with(states[-1])
    assert store.load().turn_number == 3
    assert saver.pending is None


def test_flush_writes_pending_now():
    store = MemoryStateStore()
    saver = DebouncedSaver(store, delay_ms=10_000)
    state = transition(None, Init())

    saver.request(state)
    assert store.load() is None

    assert saver.flush() is True
    assert store.load() == state
    assert saver.flush() is False


def test_cancel_drops_pending_save():
    store = MemoryStateStore()
    saver = DebouncedSaver(store, delay_ms=50)
    saver.request(transition(None, Init()))
    saver.cancel()
    time.sleep(0.2)
    assert store.load() is None


def test_failed_save_is_reported_not_raised():
    store = MemoryStateStore(capacity=1)
    saver = DebouncedSaver(store, delay_ms=0)
    saver.request(transition(None, Init()))
    saver.request(transition(None, Init()))
    assert store.data == {}


def test_save_publishes_event(captured_events):
    store = MemoryStateStore(capacity=1)
    saver = DebouncedSaver(store, delay_ms=0)
    saver.request(transition(None, Init()))

    saved = [data for name, data in captured_events if name == "STATE_SAVED"]
    assert saved == [
        {"saved": False, "turn_number": 1, "store": "MemoryStateStore('turndeck-state')"}
    ]
