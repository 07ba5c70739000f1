"""Tests for edge-triggered observers and the settings panel flag."""

from dataclasses import replace
from unittest.mock import MagicMock

from turndeck.deck.actions import ApplyJsonOverride, Init
from turndeck.deck.transitions import transition
from turndeck.events import EdgeTriggeredObserver, SettingsVisibility, error_appeared_observer


def test_fires_only_on_rising_edge():
    callback = MagicMock()
    observer = EdgeTriggeredObserver(lambda v: v > 0, callback)

    assert observer.update(1) is True
    assert observer.update(2) is False
    assert observer.update(0) is False
    assert observer.update(3) is True

    assert [c.args[0] for c in callback.call_args_list] == [1, 3]


def test_initial_true_suppresses_first_value():
    callback = MagicMock()
    observer = EdgeTriggeredObserver(bool, callback, initial=True)
    assert observer.update("already") is False
    callback.assert_not_called()


def test_prime_records_without_firing():
    callback = MagicMock()
    observer = EdgeTriggeredObserver(bool, callback)
    observer.prime(True)
    assert observer.previous is True
    assert observer.update(True) is False
    callback.assert_not_called()


def test_settings_start_collapsed_and_toggle():
    settings = SettingsVisibility()
    assert settings.is_expanded is False
    assert settings.toggle() is True
    assert settings.toggle() is False


def test_settings_expand_when_error_appears():
    settings = SettingsVisibility()
    observer = error_appeared_observer(settings)
    state = transition(None, Init())
    observer.prime(state)

    bad = transition(state, ApplyJsonOverride("{oops"))
    observer.update(bad)

    assert settings.is_expanded is True


def test_persisting_error_does_not_reexpand():
    settings = SettingsVisibility()
    state = transition(None, Init())
    observer = error_appeared_observer(settings)
    observer.prime(state)

    errored = replace(state, error="first")
    observer.update(errored)
    settings.set_expanded(False)

    observer.update(replace(errored, error="second"))
    assert settings.is_expanded is False


def test_error_present_at_creation_does_not_expand():
    settings = SettingsVisibility()
    state = replace(transition(None, Init()), error="restored")
    observer = error_appeared_observer(settings, initial_error=state.error)

    observer.update(state)
    assert settings.is_expanded is False

    observer.update(replace(state, error=None))
    observer.update(replace(state, error="new"))
    assert settings.is_expanded is True
