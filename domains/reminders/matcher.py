"""Due-window matching: decide which reminders fire on a poll tick.

Per candidate from ReminderStore.list_due(now), while it is not notified:
- fire-now, non-daily: send, then mark notified (one-shot)
- fire-now, daily: send, notified untouched
- fire-day-before: send advance notice, notified untouched

Deliveries that leave `notified` untouched can repeat on later ticks. Whether
they do is the DedupPolicy: EVERY_TICK repeats whenever the test holds,
ONCE_PER_DAY records the delivery date and skips the rest of that day.

Candidates are processed in store order and are not isolated from each other:
the first exception ends the tick and propagates to the caller.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum

from logger import logger
from . import config
from .formatter import format_day_before, format_fire_now
from .models import Frequency, Reminder
from .notifier import Notifier
from .store import ReminderStore


class DedupPolicy(str, Enum):
    """Repeat policy for deliveries that do not set the notified flag."""
    EVERY_TICK = "every_tick"
    ONCE_PER_DAY = "once_per_day"

    @classmethod
    def parse(cls, value: str) -> "DedupPolicy":
        try:
            return cls(value.strip().lower())
        except ValueError:
            valid = ", ".join(policy.value for policy in cls)
            raise ValueError(f"Unknown dedup policy '{value}' (expected one of: {valid})") from None


def should_fire_now(reminder: Reminder, now: datetime, window_minutes: int = 5) -> bool:
    """Is `now` inside the reminder's due window?

    The window opens at the reminder's minute and lasts `window_minutes`,
    within the same hour. Daily reminders ignore the date.
    """
    in_window = (
        now.hour == reminder.hour
        and reminder.minute <= now.minute < reminder.minute + window_minutes
    )
    if reminder.frequency == Frequency.DAILY:
        return in_window
    return in_window and now.date() == reminder.date


def should_fire_day_before(reminder: Reminder, now: datetime) -> bool:
    """Is today the calendar day before a non-daily reminder? (any time of day)"""
    if reminder.frequency == Frequency.DAILY:
        return False
    return reminder.date - timedelta(days=1) == now.date()


@dataclass
class TickResult:
    """What one tick did."""
    candidates: int = 0
    fired: list[str] = field(default_factory=list)
    advance_notices: list[str] = field(default_factory=list)
    skipped_duplicates: list[str] = field(default_factory=list)

    @property
    def sent(self) -> int:
        return len(self.fired) + len(self.advance_notices)


class DueWindowMatcher:
    """Evaluates the candidate set of a tick and sends what is due."""

    def __init__(
        self,
        store: ReminderStore,
        notifier: Notifier,
        daily_policy: DedupPolicy = DedupPolicy.EVERY_TICK,
        advance_policy: DedupPolicy = DedupPolicy.ONCE_PER_DAY,
        window_minutes: int = 5,
    ):
        self.store = store
        self.notifier = notifier
        self.daily_policy = daily_policy
        self.advance_policy = advance_policy
        self.window_minutes = window_minutes

    @classmethod
    def from_config(cls, store: ReminderStore, notifier: Notifier) -> "DueWindowMatcher":
        return cls(
            store,
            notifier,
            daily_policy=DedupPolicy.parse(config.REMINDER_DAILY_DEDUP),
            advance_policy=DedupPolicy.parse(config.REMINDER_ADVANCE_DEDUP),
            window_minutes=config.DUE_WINDOW_MINUTES,
        )

    async def run_tick(self, now: datetime) -> TickResult:
        """Process every candidate for `now`, in store order."""
        candidates = await self.store.list_due(now)
        result = TickResult(candidates=len(candidates))

        for reminder in candidates:
            if reminder.notified:
                continue

            if should_fire_now(reminder, now, self.window_minutes):
                await self._fire_now(reminder, now, result)

            if should_fire_day_before(reminder, now):
                await self._fire_day_before(reminder, now, result)

        if result.sent:
            logger.info(
                f"Reminder tick: {result.candidates} candidates, "
                f"{len(result.fired)} fired, {len(result.advance_notices)} advance notices"
            )
        return result

    async def _fire_now(self, reminder: Reminder, now: datetime, result: TickResult) -> None:
        today = now.date()

        if reminder.frequency == Frequency.DAILY:
            if self.daily_policy == DedupPolicy.ONCE_PER_DAY and reminder.last_fired_on == today:
                result.skipped_duplicates.append(reminder.id)
                return
            await self.notifier.send(reminder.owner, format_fire_now(reminder))
            if self.daily_policy == DedupPolicy.ONCE_PER_DAY:
                await self.store.record_daily_fire(reminder.id, today)
        else:
            await self.notifier.send(reminder.owner, format_fire_now(reminder))
            await self.store.mark_notified(reminder.id)

        result.fired.append(reminder.id)
        logger.info(f"Fired reminder {reminder.id} for {reminder.owner}: {reminder.text}")

    async def _fire_day_before(self, reminder: Reminder, now: datetime, result: TickResult) -> None:
        today = now.date()

        if self.advance_policy == DedupPolicy.ONCE_PER_DAY and reminder.advance_notice_on == today:
            result.skipped_duplicates.append(reminder.id)
            return

        await self.notifier.send(reminder.owner, format_day_before(reminder))
        if self.advance_policy == DedupPolicy.ONCE_PER_DAY:
            await self.store.record_advance_notice(reminder.id, today)

        result.advance_notices.append(reminder.id)
        logger.info(f"Sent advance notice for reminder {reminder.id} to {reminder.owner}")
