"""Tests for message splitting and Discord DM delivery."""

from unittest.mock import AsyncMock, Mock

import pytest

from domains.reminders.notifier import DiscordNotifier, split_message


def test_short_message_is_not_split():
    assert split_message("olá") == ["olá"]


def test_long_message_is_split_at_limit():
    chunks = split_message("a" * 4500)

    assert [len(chunk) for chunk in chunks] == [2000, 2000, 500]
    assert "".join(chunks) == "a" * 4500


def test_custom_limit():
    assert split_message("abcdef", limit=4) == ["abcd", "ef"]


@pytest.mark.asyncio
async def test_send_uses_cached_user(mock_discord_bot):
    notifier = DiscordNotifier(mock_discord_bot)

    await notifier.send("1234", "🔔 *LEMBRETE*: reunião")

    mock_discord_bot.get_user.assert_called_once_with(1234)
    mock_discord_bot.fetch_user.assert_not_awaited()
    mock_discord_bot.get_user.return_value.send.assert_awaited_once_with("🔔 *LEMBRETE*: reunião")


@pytest.mark.asyncio
async def test_send_fetches_uncached_user(mock_discord_bot):
    mock_discord_bot.get_user.return_value = None
    notifier = DiscordNotifier(mock_discord_bot)

    await notifier.send("1234", "oi")

    mock_discord_bot.fetch_user.assert_awaited_once_with(1234)
    mock_discord_bot.fetch_user.return_value.send.assert_awaited_once_with("oi")


@pytest.mark.asyncio
async def test_send_splits_long_messages(mock_discord_bot):
    notifier = DiscordNotifier(mock_discord_bot)

    await notifier.send("1234", "x" * 2500)

    assert mock_discord_bot.get_user.return_value.send.await_count == 2


@pytest.mark.asyncio
async def test_send_failure_propagates():
    user = Mock()
    user.send = AsyncMock(side_effect=RuntimeError("Cannot send messages to this user"))
    client = Mock()
    client.get_user = Mock(return_value=user)

    with pytest.raises(RuntimeError):
        await DiscordNotifier(client).send("1234", "oi")
