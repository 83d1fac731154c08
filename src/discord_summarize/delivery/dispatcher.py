"""Safe reply delivery.

:class:`ReplyDispatcher` is the single exit point for every reply the bot
sends. It decides whether a reply has to be split, packs the pieces into
message-sized batches, sends them in order (in-channel or by DM), and turns
any send failure into a short error message instead of an exception.
"""

from __future__ import annotations

from collections.abc import Sequence
import discord
import structlog

from discord_summarize.constants import (
    DISCORD_EMBED_DESCRIPTION_LIMIT,
    DISCORD_TOTAL_MESSAGE_LIMIT,
    DM_CONFIRMATION_MESSAGE,
    ERROR_REPLY_PREFIX,
)
from discord_summarize.delivery.batcher import group_units_into_batches
from discord_summarize.delivery.chunker import split_unit
from discord_summarize.delivery.targets import ReplyContent, ResponseTarget
from discord_summarize.delivery.units import DisplayUnit
from discord_summarize.logging import get_logger


class ReplyDispatcher:
    """Deliver replies within Discord's size limits, never raising."""

    def __init__(
        self,
        logger: structlog.stdlib.BoundLogger | None = None,
        description_limit: int = DISCORD_EMBED_DESCRIPTION_LIMIT,
        message_limit: int = DISCORD_TOTAL_MESSAGE_LIMIT,
    ) -> None:
        """Initialize the dispatcher.

        Args:
            logger: structlog logger to report failures on. Defaults to the
                module logger, whose level comes from ``LOG_LEVEL``.
            description_limit: Longest body a single unit may carry.
            message_limit: Largest estimated size of one message.
        """
        self._log: structlog.stdlib.BoundLogger = logger or get_logger(
            "discord_summarize.delivery.dispatcher"
        )
        self._description_limit = description_limit
        self._message_limit = message_limit

    def plan(self, content: ReplyContent) -> list[ReplyContent]:
        """Work out the sequence of messages needed to deliver ``content``.

        Strings and empty unit lists go out unchanged as one message. Unit
        lists are packed into size-limited batches, after splitting the
        first unit's body if it is too long for one embed.
        """
        if isinstance(content, str) or not content:
            return [content]

        units: Sequence[DisplayUnit] = content
        first = units[0]
        if first.body and len(first.body) > self._description_limit:
            units = [*split_unit(first, self._description_limit), *units[1:]]

        return list(group_units_into_batches(units, self._message_limit))

    async def safe_reply(
        self,
        target: ResponseTarget,
        content: ReplyContent,
        dm: bool = False,
    ) -> discord.Message | None:
        """Send a reply, splitting it across messages when needed.

        Args:
            target: Where to reply.
            content: A short string, or display units of any size.
            dm: Deliver the content to the user's DMs instead of the channel.

        Returns:
            The first message sent when replying to a live message, otherwise
            None. Failures are logged and answered with an error message; they
            are never raised.
        """
        try:
            batches = self.plan(content)
            if len(batches) > 1:
                self._log.debug(
                    "reply_split",
                    batches=len(batches),
                    dm=dm,
                    target=type(target).__name__,
                )

            if dm:
                first = await self._deliver_direct(target, batches)
            else:
                first = await self._deliver_in_channel(target, batches)
            return first if target.returns_message else None
        except Exception as e:
            self._log.error("safe_reply_failed", error=str(e), error_type=type(e).__name__)
            return await self._send_error_reply(target, e)

    async def _deliver_direct(
        self,
        target: ResponseTarget,
        batches: list[ReplyContent],
    ) -> discord.Message | None:
        first = await target.send_direct(batches[0])

        # Interactions still need an answer in the channel they came from
        if not target.returns_message:
            await target.respond(DM_CONFIRMATION_MESSAGE)

        for batch in batches[1:]:
            await target.send_direct(batch)
        return first

    async def _deliver_in_channel(
        self,
        target: ResponseTarget,
        batches: list[ReplyContent],
    ) -> discord.Message | None:
        first = await target.respond(batches[0])

        for batch in batches[1:]:
            if not target.supports_follow_up:
                self._log.debug("follow_up_skipped", target=type(target).__name__)
                continue
            await target.send_follow_up(batch)
        return first

    async def _send_error_reply(
        self,
        target: ResponseTarget,
        error: Exception,
    ) -> discord.Message | None:
        try:
            sent = await target.respond(f"{ERROR_REPLY_PREFIX}{error}")
        except Exception as fallback_error:
            self._log.error(
                "safe_reply_fallback_failed",
                error=str(fallback_error),
                original_error=str(error),
            )
            return None
        return sent if target.returns_message else None
