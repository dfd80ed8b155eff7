"""Reminders domain configuration."""

import os

from config import DATA_DIR

# Storage backend: "sqlite" (local file) or "supabase" (PostgREST)
REMINDER_STORE = os.environ.get("REMINDER_STORE", "sqlite").lower()
REMINDER_DB_PATH = os.environ.get("REMINDER_DB_PATH", str(DATA_DIR / "reminders.db"))
SUPABASE_TABLE = os.environ.get("REMINDER_SUPABASE_TABLE", "reminders")

# Polling cadence must not exceed the due window, or daily reminders can be skipped
POLL_INTERVAL_SECONDS = int(os.environ.get("REMINDER_POLL_INTERVAL", 300))
DUE_WINDOW_MINUTES = int(os.environ.get("REMINDER_DUE_WINDOW", 5))

# Filled in when a parsed draft carries no time
DEFAULT_TIME = "12:00"

# Repeat policy for deliveries that do not set the notified flag.
#   every_tick   - send on every tick the test holds
#   once_per_day - send at most once per calendar day
REMINDER_DAILY_DEDUP = os.environ.get("REMINDER_DAILY_DEDUP", "every_tick")
REMINDER_ADVANCE_DEDUP = os.environ.get("REMINDER_ADVANCE_DEDUP", "once_per_day")

# Per-user conversation context
CONTEXT_MAX_ENTRIES = int(os.environ.get("REMINDER_CONTEXT_MAX", 1000))
CONTEXT_TTL_SECONDS = int(os.environ.get("REMINDER_CONTEXT_TTL", 3600))
CONTEXT_SWEEP_MINUTES = 10

# Discord caps a single message at 2000 characters
DISCORD_MESSAGE_LIMIT = 2000
