"""Discord bot implementation."""

from uuid import uuid4

import discord
import structlog
from discord import app_commands

from discord_summarize.config import Settings, get_settings
from discord_summarize.delivery import (
    InteractionTarget,
    LiveMessageTarget,
    ReplyDispatcher,
    ResponseTarget,
)
from discord_summarize.discord.commands import CommandKind, ParsedCommand, parse_command
from discord_summarize.discord.handlers import CommandHandlers
from discord_summarize.logging import get_logger
from discord_summarize.models import ModelRegistry

log = get_logger("discord_summarize.discord.bot")

LANGUAGE_CHOICES = [
    app_commands.Choice(name="English", value="english"),
    app_commands.Choice(name="Spanish", value="spanish"),
]

SUMMARY_COMMANDS = (
    ("summarize", False, "Summarize recent messages in the channel"),
    ("tldr", False, "Summarize recent messages in the channel"),
    ("summarizeg", True, "Summarize recent messages with formatted topics and perspectives"),
    ("tldrg", True, "Summarize recent messages with formatted topics and perspectives"),
)


class SummarizeBot(discord.Client):
    """Discord client answering summary, prompt and help commands."""

    def __init__(
        self,
        registry: ModelRegistry,
        settings: Settings | None = None,
        dispatcher: ReplyDispatcher | None = None,
    ) -> None:
        """Initialize the bot.

        Args:
            registry: Models available to commands.
            settings: Application settings; defaults to :func:`get_settings`.
            dispatcher: Reply dispatcher shared by all handlers.
        """
        self._settings = settings or get_settings()

        intents = discord.Intents.default()
        intents.message_content = True

        application_id = int(self._settings.client_id) if self._settings.client_id else None
        super().__init__(intents=intents, application_id=application_id)

        self._registry = registry
        self._handlers = CommandHandlers(registry, self._settings, dispatcher)
        self._tree = app_commands.CommandTree(self)

        self._setup_commands()

    @property
    def tree(self) -> app_commands.CommandTree:
        return self._tree

    @property
    def handlers(self) -> CommandHandlers:
        return self._handlers

    def _setup_commands(self) -> None:
        """Set up slash commands."""
        for name, formatted, description in SUMMARY_COMMANDS:
            self._add_summary_command(name, formatted, description)

        @self._tree.command(name="p", description="Process a prompt with an AI model")
        @app_commands.describe(prompt="The prompt to process", model="AI model to use")
        async def prompt_command(
            interaction: discord.Interaction[discord.Client],
            prompt: str,
            model: str | None = None,
        ) -> None:
            await self._handle_prompt_interaction(interaction, prompt, model)

        @self._tree.command(
            name="help", description="Shows all available commands and how to use them"
        )
        @app_commands.describe(dm="Send the help message as a direct message")
        async def help_command(
            interaction: discord.Interaction[discord.Client],
            dm: bool = False,
        ) -> None:
            await self._handle_help_interaction(interaction, dm)

    def _add_summary_command(self, name: str, formatted: bool, description: str) -> None:
        @self._tree.command(name=name, description=description)
        @app_commands.describe(
            count="Number of messages to summarize",
            model="AI model to use for summarization",
            prompt="Custom prompt to personalize the summary",
            language="Language for the summary",
            dm="Send the summary as a direct message",
        )
        @app_commands.choices(language=LANGUAGE_CHOICES)
        async def summary_command(
            interaction: discord.Interaction[discord.Client],
            count: int | None = None,
            model: str | None = None,
            prompt: str | None = None,
            language: str | None = None,
            dm: bool = False,
        ) -> None:
            await self._handle_summary_interaction(
                interaction,
                formatted=formatted,
                count=count,
                model=model,
                custom_prompt=prompt,
                language=language or "english",
                dm=dm,
            )

    async def setup_hook(self) -> None:
        """Called when the bot is ready to set up."""
        if not self._settings.sync_slash_commands:
            log.info("command_sync_skipped")
            return

        try:
            await self._tree.sync()
            log.info("commands_synced", commands=len(self._tree.get_commands()))
        except discord.HTTPException:
            log.exception("command_sync_failed")

    async def on_ready(self) -> None:
        """Called when the bot is fully ready."""
        log.info(
            "bot_ready",
            user=str(self.user),
            guilds=len(self.guilds),
            models=self._registry.available_models(),
        )

    async def close(self) -> None:
        """Close model clients, then the Discord connection."""
        await self._registry.close()
        await super().close()

    async def on_message(self, message: discord.Message) -> None:
        """Handle incoming text commands."""
        # Ignore own messages and other bots
        if message.author == self.user or message.author.bot:
            return

        command = parse_command(
            message.content,
            prefix=self._settings.command_prefix,
            known_models=self._registry.available_models(),
        )
        if command is None:
            return

        structlog.contextvars.bind_contextvars(
            request_id=str(uuid4())[:12],
            user_id=message.author.id,
            channel_id=message.channel.id,
            command=command.kind.value,
        )
        try:
            await self.run_command(LiveMessageTarget(message), command)
        finally:
            structlog.contextvars.clear_contextvars()

    async def run_command(self, target: ResponseTarget, command: ParsedCommand) -> None:
        """Run a parsed text command against ``target``."""
        match command.kind:
            case CommandKind.SUMMARIZE:
                await self._handlers.summarize(
                    target,
                    count=command.count,
                    model=command.model,
                    custom_prompt=command.prompt,
                    language=command.language,
                    formatted=command.formatted,
                    dm=command.dm,
                )
            case CommandKind.PROMPT:
                await self._handlers.prompt(target, command.prompt, model=command.model)
            case CommandKind.HELP:
                await self._handlers.help(target, dm=command.dm)

    def _bind_interaction(
        self, interaction: discord.Interaction[discord.Client], command: str
    ) -> None:
        structlog.contextvars.bind_contextvars(
            request_id=str(uuid4())[:12],
            user_id=interaction.user.id,
            channel_id=interaction.channel_id or 0,
            command=command,
        )

    async def _handle_summary_interaction(
        self,
        interaction: discord.Interaction[discord.Client],
        formatted: bool,
        count: int | None,
        model: str | None,
        custom_prompt: str | None,
        language: str,
        dm: bool,
    ) -> None:
        """Handle /summarize, /tldr, /summarizeg and /tldrg."""
        self._bind_interaction(interaction, CommandKind.SUMMARIZE.value)
        try:
            await interaction.response.defer()
            await self._handlers.summarize(
                InteractionTarget(interaction),
                count=count,
                model=model,
                custom_prompt=custom_prompt,
                language=language,
                formatted=formatted,
                dm=dm,
            )
        finally:
            structlog.contextvars.clear_contextvars()

    async def _handle_prompt_interaction(
        self,
        interaction: discord.Interaction[discord.Client],
        prompt: str,
        model: str | None,
    ) -> None:
        """Handle /p."""
        self._bind_interaction(interaction, CommandKind.PROMPT.value)
        try:
            await interaction.response.defer()
            await self._handlers.prompt(InteractionTarget(interaction), prompt, model=model)
        finally:
            structlog.contextvars.clear_contextvars()

    async def _handle_help_interaction(
        self,
        interaction: discord.Interaction[discord.Client],
        dm: bool,
    ) -> None:
        """Handle /help."""
        self._bind_interaction(interaction, CommandKind.HELP.value)
        try:
            await self._handlers.help(InteractionTarget(interaction), dm=dm)
        finally:
            structlog.contextvars.clear_contextvars()
