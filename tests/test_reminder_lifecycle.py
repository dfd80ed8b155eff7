"""Tests for the reminder lifecycle state machine."""

import pytest

from domains.reminders.lifecycle import (
    ALLOWED_TRANSITIONS,
    InvalidTransition,
    ReminderError,
    ReminderState,
    can_transition,
    transition,
)


def test_active_can_be_notified_or_completed():
    assert can_transition(ReminderState.ACTIVE, ReminderState.NOTIFIED)
    assert can_transition(ReminderState.ACTIVE, ReminderState.COMPLETED)


def test_notified_can_only_be_completed():
    assert can_transition(ReminderState.NOTIFIED, ReminderState.COMPLETED)
    assert not can_transition(ReminderState.NOTIFIED, ReminderState.NOTIFIED)
    assert not can_transition(ReminderState.NOTIFIED, ReminderState.ACTIVE)


def test_completed_is_terminal():
    assert ALLOWED_TRANSITIONS[ReminderState.COMPLETED] == frozenset()
    for state in ReminderState:
        assert not can_transition(ReminderState.COMPLETED, state)


def test_nothing_returns_to_active():
    for state in ReminderState:
        assert not can_transition(state, ReminderState.ACTIVE)


def test_transition_returns_new_state():
    assert transition("remind_1", ReminderState.ACTIVE, ReminderState.NOTIFIED) == ReminderState.NOTIFIED


def test_invalid_transition_carries_details():
    with pytest.raises(InvalidTransition) as exc_info:
        transition("remind_1", ReminderState.COMPLETED, ReminderState.NOTIFIED)

    error = exc_info.value
    assert isinstance(error, ReminderError)
    assert error.reminder_id == "remind_1"
    assert error.current == ReminderState.COMPLETED
    assert error.requested == ReminderState.NOTIFIED
    assert "completed" in str(error)


def test_states_serialize_as_plain_strings():
    assert ReminderState("notified") is ReminderState.NOTIFIED
    assert ReminderState.COMPLETED.value == "completed"
