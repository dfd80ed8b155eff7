"""Reminder Bot - Main Bot.

A Discord bot that turns Portuguese free-text messages into reminders and
delivers them by direct message when they come due.
Direct messages (and mentions in servers) are routed to the reminder handler.
"""

import asyncio
import re
import time
from typing import Optional

import discord
from discord.ext import commands
from apscheduler.schedulers.asyncio import AsyncIOScheduler

from logger import logger
from config import DISCORD_TOKEN
from domains.reminders import (
    ContextRegistry,
    DiscordNotifier,
    DueWindowMatcher,
    ReminderCommandHandler,
    ReminderPoller,
    create_store,
    split_message,
    start_context_sweep,
)
from domains.reminders import config as reminders_config

# Initialize bot
intents = discord.Intents.default()
intents.message_content = True
bot = commands.Bot(command_prefix="/", intents=intents)

# Initialize scheduler
scheduler = AsyncIOScheduler()

# Message deduplication: track recently processed message IDs
_processed_messages: dict[int, float] = {}  # message_id -> timestamp
MESSAGE_DEDUP_SECONDS = 5

# Built in on_ready
handler: Optional[ReminderCommandHandler] = None
poller: Optional[ReminderPoller] = None
_poller_task: Optional[asyncio.Task] = None

MENTION_PATTERN = re.compile(r"<@!?\d+>")


@bot.event
async def on_ready():
    """Called when bot is connected and ready."""
    global handler, poller, _poller_task
    logger.info(f"Logged in as {bot.user}")

    # on_ready fires again after every reconnect
    if handler is not None:
        logger.info("Reconnected - reminder services already running")
        return

    store = create_store()
    contexts = ContextRegistry(
        max_entries=reminders_config.CONTEXT_MAX_ENTRIES,
        ttl_seconds=reminders_config.CONTEXT_TTL_SECONDS,
    )
    handler = ReminderCommandHandler(store, contexts=contexts)

    matcher = DueWindowMatcher.from_config(store, DiscordNotifier(bot))
    poller = ReminderPoller(matcher)
    _poller_task = asyncio.create_task(poller.run())

    start_context_sweep(scheduler, contexts)
    scheduler.start()
    logger.info(f"Scheduler started with {len(scheduler.get_jobs())} jobs")
    logger.info(f"Bot ready - store: {reminders_config.REMINDER_STORE}")


def _is_duplicate(message_id: int) -> bool:
    """Remember a message id; True if it was already seen recently."""
    now = time.time()
    if message_id in _processed_messages:
        return True
    _processed_messages[message_id] = now
    # Clean up old entries
    cutoff = now - MESSAGE_DEDUP_SECONDS * 2
    keys_to_delete = [k for k, v in _processed_messages.items() if v < cutoff]
    for k in keys_to_delete:
        del _processed_messages[k]
    return False


@bot.event
async def on_message(message):
    """Handle incoming messages."""
    # Ignore bot messages
    if message.author.bot:
        return

    if handler is None:
        return

    is_dm = isinstance(message.channel, discord.DMChannel)
    if not is_dm and bot.user not in message.mentions:
        return

    if _is_duplicate(message.id):
        logger.debug(f"Skipping duplicate message {message.id}")
        return

    content = MENTION_PATTERN.sub("", message.content).strip()
    if not content:
        return

    async with message.channel.typing():
        reply = await handler.handle(str(message.author.id), content)

    for chunk in split_message(reply):
        await message.channel.send(chunk)


@bot.event
async def on_error(event, *args, **kwargs):
    """Handle errors."""
    logger.error(f"Bot error in {event}: {args}", exc_info=True)


def main():
    """Entry point."""
    if not DISCORD_TOKEN:
        logger.error("DISCORD_TOKEN not set")
        return

    logger.info("Starting Reminder Bot...")
    bot.run(DISCORD_TOKEN)


if __name__ == "__main__":
    main()
