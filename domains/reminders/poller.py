"""Poll loop driving the due-window matcher.

One poller per process. Each tick runs the matcher once; any exception from
the store or the notifier ends that tick early and is logged, the loop keeps
going. Ticks are aligned to wall-clock multiples of the interval (like a
*/5 cron), so a 300s interval ticks at :00, :05, :10, ...

Clock and sleep are injectable so tests can drive many ticks without waiting.
"""

import asyncio
from datetime import datetime
from typing import Awaitable, Callable, Optional
from zoneinfo import ZoneInfo

from config import TIMEZONE
from logger import logger
from . import config
from .matcher import DueWindowMatcher, TickResult

LOCAL_TZ = ZoneInfo(TIMEZONE)


def local_now() -> datetime:
    """Current time in the process timezone."""
    return datetime.now(LOCAL_TZ)


def seconds_until_next_tick(now: datetime, interval_seconds: int) -> float:
    """Seconds from `now` to the next multiple of the interval since midnight."""
    midnight = now.replace(hour=0, minute=0, second=0, microsecond=0)
    elapsed = (now - midnight).total_seconds()
    remainder = elapsed % interval_seconds
    return interval_seconds - remainder


class ReminderPoller:
    """Explicit scheduler loop for reminder ticks."""

    def __init__(
        self,
        matcher: DueWindowMatcher,
        interval_seconds: int = config.POLL_INTERVAL_SECONDS,
        clock: Optional[Callable[[], datetime]] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        if interval_seconds > matcher.window_minutes * 60:
            logger.warning(
                f"Poll interval {interval_seconds}s is wider than the "
                f"{matcher.window_minutes}min due window - reminders can be missed"
            )

        self.matcher = matcher
        self.interval_seconds = interval_seconds
        self.clock = clock or local_now
        self.sleep = sleep
        self.ticks = 0
        self.failures = 0
        self._running = False

    async def tick(self) -> Optional[TickResult]:
        """Run one matcher pass. Returns None if the tick failed."""
        now = self.clock()
        self.ticks += 1
        try:
            return await self.matcher.run_tick(now)
        except Exception as e:
            self.failures += 1
            logger.error(f"Reminder tick at {now:%Y-%m-%d %H:%M} failed: {e}", exc_info=True)
            return None

    async def run(self, max_ticks: Optional[int] = None) -> None:
        """Tick on every interval boundary until stopped (or max_ticks reached)."""
        self._running = True
        logger.info(f"Reminder poller started (every {self.interval_seconds}s)")
        done = 0

        try:
            while self._running and (max_ticks is None or done < max_ticks):
                await self.sleep(seconds_until_next_tick(self.clock(), self.interval_seconds))
                if not self._running:
                    break
                await self.tick()
                done += 1
        finally:
            self._running = False
            logger.info(f"Reminder poller stopped after {done} ticks")

    def stop(self) -> None:
        """Ask the loop to exit before its next tick."""
        self._running = False

    @property
    def running(self) -> bool:
        return self._running
