"""Pytest fixtures for Discord Summarize tests."""

import os
from unittest.mock import AsyncMock, MagicMock

import discord
import pytest


@pytest.fixture(scope="session", autouse=True)
def setup_test_environment():
    """Set up test environment variables before any imports.

    This fixture runs automatically before any tests and ensures that
    Settings can be imported without validation errors.
    """
    os.environ.setdefault("DISCORD_TOKEN", "test-discord-token-placeholder")
    os.environ.setdefault("ENVIRONMENT", "test")

    # Clear the settings cache to ensure tests start fresh
    from discord_summarize.config import get_settings

    get_settings.cache_clear()

    yield

    get_settings.cache_clear()


@pytest.fixture
def mock_settings():
    """Settings for tests, without reading a .env file."""
    from discord_summarize.config import Settings

    return Settings(
        _env_file=None,
        discord_token="test-discord-token",
        openai_api_key="test-openai-key",
        gemini_api_key="test-gemini-key",
        anthropic_api_key=None,
        ollama_enabled=False,
        enable_mock_model=False,
        environment="test",
        log_level="DEBUG",
        sync_slash_commands=True,
    )


class AsyncIterator:
    """Async iterator over a fixed list, standing in for ``channel.history``."""

    def __init__(self, items):
        self._items = list(items)

    def __aiter__(self):
        return self

    async def __anext__(self):
        if not self._items:
            raise StopAsyncIteration
        return self._items.pop(0)


def make_history_message(username: str, content: str) -> MagicMock:
    """Create a mock channel history message."""
    message = MagicMock(spec=discord.Message)
    message.author = MagicMock(spec=discord.User)
    message.author.name = username
    message.content = content
    return message


@pytest.fixture
def mock_message():
    """Create a mock Discord message in a text channel."""
    message = MagicMock(spec=discord.Message)
    message.author = MagicMock(spec=discord.User)
    message.author.id = 123456789
    message.author.bot = False
    message.author.send = AsyncMock()
    message.channel = MagicMock(spec=discord.TextChannel)
    message.channel.id = 987654321
    message.channel.send = AsyncMock()
    message.channel.history = MagicMock(return_value=AsyncIterator([]))
    # Mock typing() as an async context manager
    typing_cm = MagicMock()
    typing_cm.__aenter__ = AsyncMock()
    typing_cm.__aexit__ = AsyncMock(return_value=False)
    message.channel.typing = MagicMock(return_value=typing_cm)
    message.reply = AsyncMock()
    message.content = "!help"
    return message


@pytest.fixture
def mock_interaction():
    """Create a mock Discord interaction that has not been responded to."""
    interaction = MagicMock(spec=discord.Interaction)
    interaction.user = MagicMock(spec=discord.User)
    interaction.user.id = 123456789
    interaction.user.send = AsyncMock()
    interaction.channel_id = 987654321
    interaction.channel = MagicMock(spec=discord.TextChannel)
    interaction.channel.history = MagicMock(return_value=AsyncIterator([]))
    interaction.response = AsyncMock()
    interaction.response.is_done = MagicMock(return_value=False)
    interaction.response.type = None
    interaction.followup = AsyncMock()
    interaction.edit_original_response = AsyncMock()
    return interaction


@pytest.fixture
def deferred_interaction(mock_interaction):
    """Create a mock interaction that has already been deferred."""
    mock_interaction.response.is_done = MagicMock(return_value=True)
    mock_interaction.response.type = discord.InteractionResponseType.deferred_channel_message
    return mock_interaction


@pytest.fixture
def make_history():
    """Build a ``channel.history`` mock over ``(username, content)`` pairs, newest first."""

    def _make(pairs):
        messages = [make_history_message(username, content) for username, content in pairs]
        return MagicMock(side_effect=lambda limit=None: AsyncIterator(messages[:limit]))

    return _make
