"""Reminders domain: natural-language reminders delivered by Discord DM.

Parsed from Portuguese free text, persisted in SQLite or Supabase, and fired by
a polling loop that matches each reminder's due window.
"""

from .lifecycle import ReminderState, ReminderError, InvalidTransition, can_transition, transition
from .models import Frequency, Reminder, ReminderDraft
from .parser import parse_reminder, first_match, detect_frequency
from .store import ReminderStore, SQLiteReminderStore, SupabaseReminderStore, create_store
from .notifier import Notifier, DiscordNotifier, split_message
from .matcher import DedupPolicy, DueWindowMatcher, TickResult, should_fire_now, should_fire_day_before
from .poller import ReminderPoller, local_now
from .context import ContextRegistry, ConversationContext
from .handler import ReminderCommandHandler, start_context_sweep

__all__ = [
    "ReminderState",
    "ReminderError",
    "InvalidTransition",
    "can_transition",
    "transition",
    "Frequency",
    "Reminder",
    "ReminderDraft",
    "parse_reminder",
    "first_match",
    "detect_frequency",
    "ReminderStore",
    "SQLiteReminderStore",
    "SupabaseReminderStore",
    "create_store",
    "Notifier",
    "DiscordNotifier",
    "split_message",
    "DedupPolicy",
    "DueWindowMatcher",
    "TickResult",
    "should_fire_now",
    "should_fire_day_before",
    "ReminderPoller",
    "local_now",
    "ContextRegistry",
    "ConversationContext",
    "ReminderCommandHandler",
    "start_context_sweep",
]
