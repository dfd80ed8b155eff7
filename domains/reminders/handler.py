"""Text command surface for reminders.

Messages starting with "/" are commands; anything else is offered to the
parser. Every path returns the reply text; store failures are caught here and
turned into a user-facing message.
"""

from datetime import datetime
from typing import Callable, Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from logger import logger
from . import config
from .context import ContextRegistry
from .formatter import (
    HELP_MESSAGE,
    NOT_UNDERSTOOD_MESSAGE,
    UNKNOWN_COMMAND_MESSAGE,
    format_created,
    format_reminder_list,
    usage_hint,
)
from .lifecycle import InvalidTransition
from .models import Reminder
from .parser import parse_reminder
from .poller import local_now
from .store import ReminderStore

# Command word → action (English names plus Portuguese aliases)
COMMANDS = {
    "/help": "help",
    "/ajuda": "help",
    "/list": "list",
    "/lembretes": "list",
    "/complete": "complete",
    "/concluir": "complete",
    "/delete": "delete",
    "/deletar": "delete",
}

NOT_FOUND_MESSAGE = "❌ Lembrete não encontrado. Verifique o ID e tente novamente."


class ReminderCommandHandler:
    """Turns one incoming message into one reply."""

    def __init__(
        self,
        store: ReminderStore,
        contexts: Optional[ContextRegistry] = None,
        clock: Callable[[], datetime] = local_now,
        default_time: str = config.DEFAULT_TIME,
    ):
        self.store = store
        self.contexts = contexts or ContextRegistry(
            max_entries=config.CONTEXT_MAX_ENTRIES,
            ttl_seconds=config.CONTEXT_TTL_SECONDS,
        )
        self.clock = clock
        self.default_time = default_time

    async def handle(self, owner: str, text: str) -> str:
        """Handle a message from `owner` and return the reply."""
        content = text.strip()

        if content.startswith("/"):
            return await self._handle_command(owner, content)

        return await self._create_from_text(owner, content)

    async def _handle_command(self, owner: str, content: str) -> str:
        parts = content.split()
        command = parts[0].lower()
        args = parts[1:]
        action = COMMANDS.get(command)

        if action == "help":
            return HELP_MESSAGE
        if action == "list":
            return await self._list(owner)
        if action in ("complete", "delete"):
            if not args:
                return usage_hint(command)
            if action == "complete":
                return await self._complete(owner, args[0])
            return await self._delete(owner, args[0])

        return UNKNOWN_COMMAND_MESSAGE

    async def _create_from_text(self, owner: str, content: str) -> str:
        today = self.clock().date()
        draft = parse_reminder(content, today=today)

        if draft is None:
            logger.debug(f"Message from {owner} not recognized as reminder")
            return NOT_UNDERSTOOD_MESSAGE

        try:
            reminder = await self.store.create(draft.with_defaults(today, self.default_time), owner)
        except Exception as e:
            logger.error(f"Failed to create reminder for {owner}: {e}")
            return "❌ Erro ao criar lembrete. Tente novamente mais tarde."

        return format_created(reminder)

    async def _list(self, owner: str) -> str:
        try:
            reminders = await self.store.list_by_owner(owner)
        except Exception as e:
            logger.error(f"Failed to list reminders for {owner}: {e}")
            return "❌ Erro ao buscar lembretes. Tente novamente mais tarde."

        self.contexts.get(owner).listed_ids = [r.id for r in reminders]
        return format_reminder_list(reminders)

    async def _find_owned(self, owner: str, reference: str) -> Optional[Reminder]:
        """Resolve an id (or a position from the last /list) to the caller's reminder."""
        context = self.contexts.peek(owner)
        reminder_id = (context.resolve(reference) if context else None) or reference

        reminder = await self.store.get(reminder_id)
        if reminder is None or reminder.owner != owner:
            return None
        return reminder

    async def _complete(self, owner: str, reference: str) -> str:
        try:
            reminder = await self._find_owned(owner, reference)
            if reminder is None:
                return NOT_FOUND_MESSAGE

            updated = await self.store.mark_completed(reminder.id)
            if updated is None:
                return NOT_FOUND_MESSAGE
        except InvalidTransition:
            return "ℹ️ Este lembrete já está concluído."
        except Exception as e:
            logger.error(f"Failed to complete reminder {reference} for {owner}: {e}")
            return "❌ Erro ao concluir lembrete. Tente novamente mais tarde."

        return f"✅ Lembrete concluído: *{updated.text}*"

    async def _delete(self, owner: str, reference: str) -> str:
        try:
            reminder = await self._find_owned(owner, reference)
            if reminder is None or not await self.store.delete(reminder.id):
                return NOT_FOUND_MESSAGE
        except Exception as e:
            logger.error(f"Failed to delete reminder {reference} for {owner}: {e}")
            return "❌ Erro ao remover lembrete. Tente novamente mais tarde."

        context = self.contexts.peek(owner)
        if context and reminder.id in context.listed_ids:
            # Positions refer to the last list shown; keep them stable
            context.listed_ids[context.listed_ids.index(reminder.id)] = ""

        return "🗑️ Lembrete removido com sucesso!"


def start_context_sweep(scheduler: AsyncIOScheduler, contexts: ContextRegistry) -> None:
    """Purge idle conversation contexts every CONTEXT_SWEEP_MINUTES.

    Args:
        scheduler: APScheduler instance
        contexts: Registry to sweep
    """
    def sweep():
        removed = contexts.purge_expired()
        if removed:
            logger.info(f"Context sweep removed {removed} idle conversation(s)")

    scheduler.add_job(
        sweep,
        trigger=IntervalTrigger(minutes=config.CONTEXT_SWEEP_MINUTES),
        id="reminder_context_sweep",
        name="Purge idle reminder conversations",
        replace_existing=True
    )
    logger.info(f"Started context sweep (every {config.CONTEXT_SWEEP_MINUTES}min)")
