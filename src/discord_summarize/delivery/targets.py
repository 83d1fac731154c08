"""Response targets: where a command's reply is delivered.

Commands arrive either as a live :class:`discord.Message` (text commands) or
as a :class:`discord.Interaction` (slash commands). Both are wrapped in a
:class:`ResponseTarget` exposing the same four send capabilities, so the
delivery code branches on capabilities rather than on Discord types.
"""

from __future__ import annotations

import contextlib
from abc import ABC, abstractmethod
from collections.abc import Sequence
from enum import Enum
from typing import Any, ClassVar

import discord

from discord_summarize.delivery.units import DisplayUnit
from discord_summarize.logging import get_logger

log = get_logger("discord_summarize.delivery.targets")

ReplyContent = str | Sequence[DisplayUnit]

_DEFERRED_RESPONSE_TYPES = frozenset(
    {
        discord.InteractionResponseType.deferred_channel_message,
        discord.InteractionResponseType.deferred_message_update,
    }
)


def build_payload(content: ReplyContent) -> dict[str, Any]:
    """Translate reply content into keyword arguments for a Discord send call."""
    if isinstance(content, str):
        return {"content": content}
    return {"embeds": [unit.to_embed() for unit in content]}


class InteractionState(Enum):
    """Response state of an interaction."""

    NOT_RESPONDED = "not_responded"
    DEFERRED = "deferred"
    RESPONDED = "responded"


class ResponseTarget(ABC):
    """Something a command can reply to.

    ``respond`` is the primary send. The first call uses ``send_initial`` or
    ``send_update`` depending on the target's state; every later call in the
    same invocation goes through ``send_follow_up``.
    """

    # Whether sends hand back a message object the caller can use
    returns_message: ClassVar[bool] = True

    def __init__(self) -> None:
        self._primary_sent = False

    @property
    def primary_sent(self) -> bool:
        """True once ``respond`` has delivered its primary send."""
        return self._primary_sent

    @property
    @abstractmethod
    def needs_update(self) -> bool:
        """True when the primary send must edit an existing response."""

    @property
    @abstractmethod
    def user(self) -> discord.User | discord.Member:
        """The user who issued the command."""

    @property
    @abstractmethod
    def channel(self) -> Any:
        """The channel the command was issued in, if available."""

    @property
    def supports_follow_up(self) -> bool:
        """Whether ``send_follow_up`` can deliver anything."""
        return True

    def typing(self) -> contextlib.AbstractAsyncContextManager[Any]:
        """Context showing the user that a reply is being prepared."""
        return contextlib.nullcontext()

    @abstractmethod
    async def send_initial(self, content: ReplyContent) -> discord.Message | None:
        """Send the first response."""

    @abstractmethod
    async def send_update(self, content: ReplyContent) -> discord.Message | None:
        """Replace a deferred or existing response."""

    @abstractmethod
    async def send_follow_up(self, content: ReplyContent) -> discord.Message | None:
        """Send an additional message after the first response."""

    async def send_direct(self, content: ReplyContent) -> discord.Message:
        """Send content to the user's direct messages."""
        return await self.user.send(**build_payload(content))

    async def respond(self, content: ReplyContent) -> discord.Message | None:
        """Deliver content in-channel, honouring the one-primary-send rule."""
        if self._primary_sent:
            if not self.supports_follow_up:
                log.debug("follow_up_unsupported", target=type(self).__name__)
                return None
            return await self.send_follow_up(content)

        if self.needs_update:
            sent = await self.send_update(content)
        else:
            sent = await self.send_initial(content)
        self._primary_sent = True
        return sent


class LiveMessageTarget(ResponseTarget):
    """A text command: reply to the message, follow up in its channel."""

    def __init__(self, message: discord.Message) -> None:
        super().__init__()
        self._message = message

    @property
    def message(self) -> discord.Message:
        return self._message

    @property
    def needs_update(self) -> bool:
        return False

    @property
    def user(self) -> discord.User | discord.Member:
        return self._message.author

    @property
    def channel(self) -> Any:
        return self._message.channel

    @property
    def supports_follow_up(self) -> bool:
        return isinstance(self._message.channel, discord.abc.Messageable)

    def typing(self) -> contextlib.AbstractAsyncContextManager[Any]:
        if isinstance(self._message.channel, discord.abc.Messageable):
            return self._message.channel.typing()
        return contextlib.nullcontext()

    async def send_initial(self, content: ReplyContent) -> discord.Message:
        return await self._message.reply(**build_payload(content))

    async def send_update(self, content: ReplyContent) -> discord.Message:
        # Live messages are never deferred, so an update is a plain reply
        return await self.send_initial(content)

    async def send_follow_up(self, content: ReplyContent) -> discord.Message:
        return await self._message.channel.send(**build_payload(content))


class InteractionTarget(ResponseTarget):
    """A slash command: respond, edit the response, then use the followup webhook."""

    returns_message = False

    def __init__(self, interaction: discord.Interaction[discord.Client]) -> None:
        super().__init__()
        self._interaction = interaction

    @property
    def interaction(self) -> discord.Interaction[discord.Client]:
        return self._interaction

    @property
    def state(self) -> InteractionState:
        """Current response state, including sends made through this target."""
        if self._primary_sent:
            return InteractionState.RESPONDED

        response = self._interaction.response
        if not response.is_done():
            return InteractionState.NOT_RESPONDED
        if response.type in _DEFERRED_RESPONSE_TYPES:
            return InteractionState.DEFERRED
        return InteractionState.RESPONDED

    @property
    def needs_update(self) -> bool:
        return self.state is not InteractionState.NOT_RESPONDED

    @property
    def user(self) -> discord.User | discord.Member:
        return self._interaction.user

    @property
    def channel(self) -> Any:
        return self._interaction.channel

    @property
    def supports_follow_up(self) -> bool:
        return self._interaction.channel is not None

    async def send_initial(self, content: ReplyContent) -> None:
        await self._interaction.response.send_message(**build_payload(content))

    async def send_update(self, content: ReplyContent) -> None:
        await self._interaction.edit_original_response(**build_payload(content))

    async def send_follow_up(self, content: ReplyContent) -> None:
        await self._interaction.followup.send(**build_payload(content))
