"""
Tests for DeckSession.

These check that a session restores and saves state, skips side effects for
no-op actions, and drives the settings panel from errors.
"""

import json
import logging
from unittest.mock import MagicMock

import pytest

from turndeck.config import EngineConfig
from turndeck.deck.actions import EndTurn, LockPlayOrder
from turndeck.deck.presets import PresetDeck
from turndeck.engine import DeckSession
from turndeck.exceptions import PresetRegistryError
from turndeck.persistence.storage import (
    JsonFileStateStore,
    MemoryStateStore,
    SQLiteStateStore,
)


@pytest.fixture
def immediate():
    """Config that saves synchronously."""
    return EngineConfig(storage_backend="memory", save_debounce_ms=0)


@pytest.fixture
def store():
    return MemoryStateStore()


def play_discard(session):
    """Select the required number of cards and confirm the discard."""
    state = session.state
    for instance in state.hand_cards[: state.discard_phase.remaining_discards]:
        session.toggle_card_selection(instance.instance_id)
    return session.confirm_discard()


class TestStartup:
    def test_new_session_initializes_and_saves(self, store, immediate):
        session = DeckSession(store=store, config=immediate)

        assert session.restored is False
        assert len(session.state.hand) == 5
        assert store.load() == session.state

    def test_restores_saved_state(self, store, immediate):
        first = DeckSession(store=store, config=immediate)
        play_discard(first)

        second = DeckSession(store=store, config=immediate)

        assert second.restored is True
        assert second.state == first.state
        assert second.state.planning_phase is False

    def test_corrupt_storage_falls_back_to_init(self, store, immediate):
        store.data[store.key] = "not json at all"
        session = DeckSession(store=store, config=immediate)
        assert session.restored is False
        assert session.state.turn_number == 1

    def test_restore_false_ignores_store(self, store, immediate):
        DeckSession(store=store, config=immediate).reset()
        session = DeckSession(store=store, config=immediate, restore=False)
        assert session.restored is False

    def test_without_store_nothing_is_saved(self):
        session = DeckSession()
        assert session.store is None
        assert session.flush() is False

    def test_config_selects_store(self, tmp_path):
        config = EngineConfig(
            storage_backend="json",
            storage_path=str(tmp_path / "state.json"),
            save_debounce_ms=0,
        )
        session = DeckSession(config=config)
        assert isinstance(session.store, JsonFileStateStore)
        assert (tmp_path / "state.json").exists()

    def test_config_applies_logging_settings(self):
        DeckSession(config=EngineConfig(storage_backend="memory", log_level="debug"))
        assert logging.getLogger("turndeck").level == logging.DEBUG

        DeckSession(config=EngineConfig(storage_backend="memory", disable_logging=True))
        assert logging.getLogger("turndeck").level == logging.ERROR

    def test_events_carry_session_id(self, captured_events):
        session = DeckSession()
        session.end_turn()

        assert captured_events
        assert all(data["session_id"] == session.id for _, data in captured_events)

    def test_preset_iterable_is_validated(self):
        with pytest.raises(PresetRegistryError):
            DeckSession(presets=[PresetDeck("Bad Id", "", "", ())])

    def test_custom_presets(self):
        session = DeckSession(presets=[PresetDeck("mini", "Mini", "", ("A", "B", "C"))])
        state = session.load_preset_deck("mini")
        assert state.active_preset_id == "mini"
        assert session.load_preset_deck("starter-deck").error is not None

    def test_closed_store_does_not_break_dispatch(self, immediate, captured_events):
        store = SQLiteStateStore()
        session = DeckSession(store=store, config=immediate)
        store.close()

        state = play_discard(session)

        assert state.discard_phase.active is False
        saves = [data for name, data in captured_events if name == "STATE_SAVED"]
        assert saves[-1]["saved"] is False


class TestDispatch:
    def test_listener_receives_new_states(self):
        session = DeckSession()
        listener = MagicMock()
        unsubscribe = session.subscribe(listener)

        state = session.change_parameters(3, 1)
        listener.assert_called_once_with(state)

        unsubscribe()
        session.reset()
        assert listener.call_count == 1

    def test_noop_skips_save_and_listeners(self, store, immediate):
        session = DeckSession(store=store, config=immediate)
        listener = MagicMock()
        session.subscribe(listener)
        before = session.state
        store.data.clear()

        assert session.end_turn() is before
        assert session.dispatch(LockPlayOrder()) is before

        listener.assert_not_called()
        assert store.data == {}

    def test_listener_errors_are_logged(self):
        session = DeckSession()
        session.subscribe(MagicMock(side_effect=RuntimeError("boom")))
        state = session.reset()
        assert session.state is state

    def test_dispatch_dict(self):
        session = DeckSession()
        state = session.dispatch_dict(
            {"type": "CHANGE_PARAMETERS", "payload": {"handSize": 2, "discardCount": 0}}
        )
        assert state.hand_size == 2

    def test_full_turn_through_session(self, store, immediate):
        session = DeckSession(store=store, config=immediate)
        session.change_parameters(3, 1, immediate_reset=True)
        play_discard(session)

        for instance_id in session.state.hand_instance_ids:
            session.select_for_play_order(instance_id)
        session.deselect_from_play_order(session.state.hand_instance_ids[0])
        session.select_for_play_order(session.state.hand_instance_ids[0])
        session.lock_play_order()
        state = session.dispatch(EndTurn())

        assert state.turn_number == 2
        assert json.loads(store.data[store.key])["turn_number"] == 2

    def test_debounced_saves_flush_on_close(self, store):
        session = DeckSession(
            store=store, config=EngineConfig(storage_backend="memory", save_debounce_ms=60_000)
        )
        session.reset()
        assert store.load() is None

        session.close()
        assert store.load() == session.state


class TestSettingsVisibility:
    def test_settings_start_collapsed(self):
        assert DeckSession().settings.is_expanded is False

    def test_error_expands_settings_once(self):
        session = DeckSession()
        session.apply_json_override("[oops")
        assert session.settings.is_expanded is True

        session.settings.toggle()
        session.apply_json_override("still bad")
        assert session.settings.is_expanded is False

    def test_restored_error_does_not_expand(self, store, immediate):
        first = DeckSession(store=store, config=immediate)
        first.load_preset_deck("missing")

        second = DeckSession(store=store, config=immediate)
        assert second.state.error == "Preset deck not found: missing"
        assert second.settings.is_expanded is False


@pytest.mark.asyncio
async def test_restore_async(tmp_path, immediate):
    store = JsonFileStateStore(tmp_path / "state.json")
    original = DeckSession(store=store, config=immediate)

    session = await DeckSession.restore_async(store, config=immediate)

    assert session.restored is True
    assert session.state == original.state
