"""Data models for reminders."""

from dataclasses import dataclass, replace
from datetime import date, datetime
from enum import Enum
from typing import Optional

from .lifecycle import ReminderState


class Frequency(str, Enum):
    """How often a reminder recurs."""
    ONCE = "once"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


@dataclass(frozen=True)
class ReminderDraft:
    """Parsed reminder fields, not yet persisted."""
    text: str
    date: Optional[date] = None
    time: Optional[str] = None  # HH:MM, 24-hour
    frequency: Frequency = Frequency.ONCE

    def with_defaults(self, today: date, default_time: str) -> "ReminderDraft":
        """Fill in the date and time the parser could not find."""
        return replace(
            self,
            date=self.date or today,
            time=self.time or default_time,
        )


@dataclass
class Reminder:
    """A stored reminder."""
    id: str
    owner: str
    text: str
    date: date
    time: str
    frequency: Frequency = Frequency.ONCE
    state: ReminderState = ReminderState.ACTIVE
    notified_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    last_fired_on: Optional[date] = None  # Last daily fire-now delivery
    advance_notice_on: Optional[date] = None  # Last day-before delivery
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def notified(self) -> bool:
        return self.notified_at is not None

    @property
    def completed(self) -> bool:
        return self.state == ReminderState.COMPLETED

    @property
    def hour(self) -> int:
        return int(self.time.split(":")[0])

    @property
    def minute(self) -> int:
        return int(self.time.split(":")[1])
