"""Reminder lifecycle state machine.

States:
- ACTIVE: Created, waiting for its due window
- NOTIFIED: Fire-now message delivered (non-daily reminders only)
- COMPLETED: Closed by the user

Transitions:
- ACTIVE → NOTIFIED: Matcher delivered a non-daily fire-now message
- ACTIVE → COMPLETED: User command
- NOTIFIED → COMPLETED: User command

Deletion is not a state: the record is removed from the store, from any state.
Nothing ever moves back to ACTIVE.
"""

from enum import Enum


class ReminderState(str, Enum):
    """Lifecycle states persisted with each reminder."""
    ACTIVE = "active"
    NOTIFIED = "notified"
    COMPLETED = "completed"


ALLOWED_TRANSITIONS: dict[ReminderState, frozenset[ReminderState]] = {
    ReminderState.ACTIVE: frozenset({ReminderState.NOTIFIED, ReminderState.COMPLETED}),
    ReminderState.NOTIFIED: frozenset({ReminderState.COMPLETED}),
    ReminderState.COMPLETED: frozenset(),
}


class ReminderError(Exception):
    """Base class for reminder domain errors."""


class InvalidTransition(ReminderError):
    """Raised when a lifecycle edge is not allowed from the current state."""

    def __init__(self, reminder_id: str, current: ReminderState, requested: ReminderState):
        self.reminder_id = reminder_id
        self.current = current
        self.requested = requested
        super().__init__(
            f"Reminder {reminder_id}: cannot move from {current.value} to {requested.value}"
        )


def can_transition(current: ReminderState, requested: ReminderState) -> bool:
    """Check whether `requested` is reachable from `current` in one step."""
    return requested in ALLOWED_TRANSITIONS[current]


def transition(reminder_id: str, current: ReminderState, requested: ReminderState) -> ReminderState:
    """Validate a lifecycle edge.

    Returns:
        The new state

    Raises:
        InvalidTransition: If the edge is not allowed
    """
    if not can_transition(current, requested):
        raise InvalidTransition(reminder_id, current, requested)
    return requested
