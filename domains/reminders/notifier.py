"""Deliver reminder messages to users."""

from abc import ABC, abstractmethod

import discord

from logger import logger
from . import config


class Notifier(ABC):
    """Sends a text message to a recipient.

    Failures must raise; callers decide how to handle them.
    """

    @abstractmethod
    async def send(self, recipient: str, text: str) -> None:
        """Deliver `text` to `recipient`."""


def split_message(text: str, limit: int = config.DISCORD_MESSAGE_LIMIT) -> list[str]:
    """Split long messages into chunks under the Discord limit."""
    if len(text) <= limit:
        return [text]
    return [text[i:i + limit] for i in range(0, len(text), limit)]


class DiscordNotifier(Notifier):
    """Direct messages to a Discord user id."""

    def __init__(self, client: discord.Client):
        self.client = client

    async def send(self, recipient: str, text: str) -> None:
        user = self.client.get_user(int(recipient))
        if user is None:
            user = await self.client.fetch_user(int(recipient))

        for chunk in split_message(text):
            await user.send(chunk)

        logger.debug(f"Sent DM to {recipient} ({len(text)} chars)")
