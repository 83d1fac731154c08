"""Command handlers shared by text and slash commands.

Handlers never talk to Discord directly: every reply, including error
messages, goes through :class:`ReplyDispatcher` on a :class:`ResponseTarget`.
"""

from __future__ import annotations

from typing import Any

import discord

from discord_summarize.config import Settings
from discord_summarize.constants import DEFAULT_EMBED_COLOR
from discord_summarize.delivery import (
    DisplayUnit,
    ReplyDispatcher,
    ResponseTarget,
    UnitField,
)
from discord_summarize.discord.security import validate_prompt
from discord_summarize.logging import get_logger, make_logger
from discord_summarize.models import ModelError, ModelRegistry

log = get_logger("discord_summarize.discord.handlers")

CANNOT_ACCESS_CHANNEL = "Cannot access messages in this channel."
NO_MESSAGES_FOUND = "No messages found to summarize."
MISSING_PROMPT = "Error: Please provide a prompt."
HISTORY_FETCH_FAILED = "Failed to fetch messages from the channel."

SUMMARY_TITLE = "Chat Summary"
PROMPT_TITLE = "🤖 AI Response"
HELP_TITLE = "Discord Summarize Bot - Available Commands"
HELP_DESCRIPTION = "Here are all the available commands and how to use them:"
HELP_FOOTER = "Discord Summarize Bot"
DM_HINT = "Use `--dm` to receive the summary as a direct message instead of in the channel."


class HistoryFetchError(Exception):
    """Raised when channel history cannot be read."""

    pass


def format_history(messages: list[discord.Message]) -> list[str]:
    """Format messages as ``"username: content"`` lines, oldest first.

    ``messages`` is expected newest first, as returned by
    ``channel.history``. Messages without text content are skipped.
    """
    return [f"{msg.author.name}: {msg.content}" for msg in reversed(messages) if msg.content]


class CommandHandlers:
    """Implements the summarize, prompt and help commands."""

    def __init__(
        self,
        registry: ModelRegistry,
        settings: Settings,
        dispatcher: ReplyDispatcher | None = None,
    ) -> None:
        """Initialize the handlers.

        Args:
            registry: Models available to commands.
            settings: Application settings.
            dispatcher: Reply dispatcher; by default one logging at ``LOG_LEVEL``.
        """
        self._registry = registry
        self._settings = settings
        self._dispatcher = dispatcher or ReplyDispatcher(
            logger=make_logger("discord_summarize.delivery.dispatcher", settings)
        )

    @property
    def dispatcher(self) -> ReplyDispatcher:
        return self._dispatcher

    async def _reply(
        self,
        target: ResponseTarget,
        content: str | list[DisplayUnit],
        dm: bool = False,
    ) -> discord.Message | None:
        return await self._dispatcher.safe_reply(target, content, dm=dm)

    def _model_error_message(self, error: Exception) -> str:
        available = ", ".join(self._registry.available_models())
        return f"Error: {error}. Available models: {available}"

    async def summarize(
        self,
        target: ResponseTarget,
        count: int | None = None,
        model: str | None = None,
        custom_prompt: str | None = None,
        language: str = "english",
        formatted: bool = False,
        dm: bool = False,
    ) -> None:
        """Summarize recent channel history and reply with the summary.

        Args:
            target: Where the command came from.
            count: Number of messages to read; None or 0 means ``DEFAULT_MESSAGE_COUNT``.
            model: Registered model name; defaults to ``DEFAULT_SUMMARY_MODEL``.
            custom_prompt: Extra instructions for the model.
            language: ``"english"`` or ``"spanish"``.
            formatted: Produce a topics-and-perspectives summary.
            dm: Deliver the summary to the user's DMs.
        """
        try:
            channel = target.channel
            if channel is None or not hasattr(channel, "history"):
                await self._reply(target, CANNOT_ACCESS_CHANNEL)
                return

            # 0 means "use the default", like an omitted count
            message_count = count or self._settings.default_message_count
            max_count = self._settings.max_message_count
            if not 1 <= message_count <= max_count:
                await self._reply(target, f"Error: Count must be between 1 and {max_count}.")
                return

            model_name = model or self._settings.default_summary_model
            messages = await self._fetch_history(channel, message_count)
            if not messages:
                await self._reply(target, NO_MESSAGES_FOUND)
                return

            lines = format_history(messages)
            log.info(
                "summarize_requested",
                model=model_name,
                count=message_count,
                fetched=len(messages),
                formatted=formatted,
                language=language,
                dm=dm,
            )

            try:
                ai_model = self._registry.create(model_name)
                summary = await ai_model.summarize(
                    lines,
                    formatted=formatted,
                    custom_prompt=custom_prompt,
                    language=language,
                )
            except ModelError as e:
                log.warning("summarize_model_error", model=model_name, error=str(e))
                await self._reply(target, self._model_error_message(e))
                return

            unit = DisplayUnit(
                title=SUMMARY_TITLE,
                body=summary,
                footer=f"Summarized {len(messages)} messages using {ai_model.get_name()}",
                color=DEFAULT_EMBED_COLOR,
                timestamp=discord.utils.utcnow(),
            )
            await self._reply(target, [unit], dm=dm)
        except Exception as e:
            log.exception("summarize_command_failed")
            await self._reply(target, f"An error occurred: {e}")

    async def _fetch_history(self, channel: Any, limit: int) -> list[discord.Message]:
        try:
            return [message async for message in channel.history(limit=limit)]
        except discord.HTTPException as e:
            log.error("history_fetch_failed", error=str(e), limit=limit)
            raise HistoryFetchError(HISTORY_FETCH_FAILED) from e

    async def prompt(
        self,
        target: ResponseTarget,
        prompt: str | None,
        model: str | None = None,
    ) -> None:
        """Answer a free-form prompt.

        Args:
            target: Where the command came from.
            prompt: The user's prompt.
            model: Registered model name; defaults to ``DEFAULT_PROMPT_MODEL``.
        """
        try:
            if not prompt or not prompt.strip():
                await self._reply(target, MISSING_PROMPT)
                return

            validation = validate_prompt(prompt)
            if not validation.is_valid:
                await self._reply(target, f"Error: {validation.error}")
                return

            model_name = model or self._settings.default_prompt_model
            log.info("prompt_requested", model=model_name, length=len(prompt))

            try:
                ai_model = self._registry.create(model_name)
                async with target.typing():
                    response = await ai_model.process_prompt(prompt)
            except ModelError as e:
                log.warning("prompt_model_error", model=model_name, error=str(e))
                await self._reply(target, self._model_error_message(e))
                return

            unit = DisplayUnit(
                title=PROMPT_TITLE,
                body=response,
                footer=f"Processed using {ai_model.get_name()}",
                color=DEFAULT_EMBED_COLOR,
                timestamp=discord.utils.utcnow(),
            )
            await self._reply(target, [unit])
        except Exception as e:
            log.exception("prompt_command_failed")
            await self._reply(target, f"An error occurred: {e}")

    def build_help(self) -> DisplayUnit:
        """Build the help embed listing every command."""
        prefix = self._settings.command_prefix
        summary_model = self._settings.default_summary_model
        prompt_model = self._settings.default_prompt_model
        count = self._settings.default_message_count
        summary_args = f"[count={count}] [model={summary_model}] [--lang=english|spanish]"

        fields = (
            UnitField(
                name=f"{prefix}summarize / {prefix}tldr / {prefix}s",
                value=(
                    "Summarizes the last messages in the channel.\n"
                    f"Usage: `{prefix}summarize {summary_args} [--dm] [custom prompt]`\n"
                    f"Example: `{prefix}summarize 100 openai --lang=spanish "
                    "Focus on decisions made`\n"
                    f"{DM_HINT}"
                ),
            ),
            UnitField(
                name=f"{prefix}summarizeg / {prefix}tldrg / {prefix}sg",
                value=(
                    "Summarizes the last messages with formatted topics and perspectives.\n"
                    f"Usage: `{prefix}summarizeg {summary_args} [--dm] [custom prompt]`\n"
                    f"Example: `{prefix}summarizeg 75 gemini --lang=english "
                    "Highlight key points`\n"
                    f"{DM_HINT}"
                ),
            ),
            UnitField(
                name=f"{prefix}sdm",
                value=(
                    f"Alias for `{prefix}summarize` with the `--dm` flag automatically included.\n"
                    "Summarizes the last messages and sends the result as a direct message.\n"
                    f"Usage: `{prefix}sdm {summary_args} [custom prompt]`"
                ),
            ),
            UnitField(
                name=f"{prefix}sgdm",
                value=(
                    f"Alias for `{prefix}summarizeg` with the `--dm` flag "
                    "automatically included.\n"
                    "Summarizes the last messages with formatted topics and perspectives "
                    "and sends the result as a direct message.\n"
                    f"Usage: `{prefix}sgdm {summary_args} [custom prompt]`"
                ),
            ),
            UnitField(
                name=f"{prefix}p",
                value=(
                    "Process a prompt with an AI model.\n"
                    f"Usage: `{prefix}p [model={prompt_model}] <prompt>`\n"
                    f"Example: `{prefix}p What is the capital of France?` "
                    f"or `{prefix}p openai Explain quantum computing`"
                ),
            ),
            UnitField(
                name=f"{prefix}help",
                value=(
                    "Shows this help message with all available commands and how to use them.\n"
                    f"Usage: `{prefix}help [--dm]`"
                ),
            ),
            UnitField(
                name="Models",
                value=", ".join(self._registry.available_models()) or "None configured",
            ),
            UnitField(
                name="Note",
                value=(
                    "All commands above have slash command counterparts "
                    "(e.g., `/summarize`, `/help`)."
                ),
            ),
        )
        return DisplayUnit(
            title=HELP_TITLE,
            body=HELP_DESCRIPTION,
            footer=HELP_FOOTER,
            color=DEFAULT_EMBED_COLOR,
            fields=fields,
            timestamp=discord.utils.utcnow(),
        )

    async def help(self, target: ResponseTarget, dm: bool = False) -> None:
        """Send the help embed, in-channel or by DM."""
        await self._reply(target, [self.build_help()], dm=dm)
