"""Pytest configuration and fixtures."""

import os
import sys
import tempfile
from datetime import date, datetime, timezone
from unittest.mock import Mock, AsyncMock

import pytest

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from domains.reminders.lifecycle import ReminderState
from domains.reminders.models import Frequency, Reminder, ReminderDraft
from domains.reminders.notifier import Notifier


@pytest.fixture
def temp_store():
    """Fresh SQLite reminder store for each test."""
    from domains.reminders.store import SQLiteReminderStore

    # Create unique temp file
    fd, temp_path = tempfile.mkstemp(suffix="_reminders_test.db")
    os.close(fd)

    store = SQLiteReminderStore(db_path=temp_path)

    yield store

    # Cleanup
    store.close()
    for suffix in ["", "-wal", "-shm"]:
        try:
            os.unlink(temp_path + suffix)
        except FileNotFoundError:
            pass


@pytest.fixture
def mock_notifier():
    """Notifier whose send is an AsyncMock."""
    notifier = Mock(spec=Notifier)
    notifier.send = AsyncMock()
    return notifier


@pytest.fixture
def mock_discord_bot():
    """Create a mock Discord bot with a DM-able user."""
    user = Mock()
    user.send = AsyncMock()

    bot = Mock()
    bot.get_user = Mock(return_value=user)
    bot.fetch_user = AsyncMock(return_value=user)
    bot.user = Mock(name="ReminderBot#1234")
    return bot


@pytest.fixture
def draft():
    """Factory for complete drafts."""
    def _draft(text="reunião", day=date(2026, 5, 10), time="14:00", frequency=Frequency.ONCE):
        return ReminderDraft(text=text, date=day, time=time, frequency=frequency)
    return _draft


@pytest.fixture
def make_reminder():
    """Factory for in-memory Reminder objects (no store)."""
    def _make(
        reminder_id="remind_00000001",
        owner="42",
        text="reunião",
        day=date(2026, 5, 10),
        time="14:00",
        frequency=Frequency.ONCE,
        state=ReminderState.ACTIVE,
        notified=False,
    ):
        return Reminder(
            id=reminder_id,
            owner=owner,
            text=text,
            date=day,
            time=time,
            frequency=frequency,
            state=state,
            notified_at=datetime(2026, 1, 1, tzinfo=timezone.utc) if notified else None,
        )
    return _make
