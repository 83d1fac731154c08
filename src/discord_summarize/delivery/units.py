"""Display units: the presentational envelopes sent back to Discord.

A :class:`DisplayUnit` is the library-agnostic form of a Discord embed. It
is immutable so the chunker and batcher can regroup units without worrying
about shared state, and is only turned into a ``discord.Embed`` at send time.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

import discord

from discord_summarize.constants import DEFAULT_EMBED_COLOR


@dataclass(frozen=True)
class UnitField:
    """A name/value pair rendered as an embed field."""

    name: str
    value: str
    inline: bool = False


@dataclass(frozen=True)
class DisplayUnit:
    """One embed worth of content."""

    title: str | None = None
    body: str | None = None
    footer: str | None = None
    color: int = DEFAULT_EMBED_COLOR
    fields: tuple[UnitField, ...] = field(default_factory=tuple)
    timestamp: datetime | None = None

    def to_embed(self) -> discord.Embed:
        """Build the ``discord.Embed`` for this unit."""
        embed = discord.Embed(
            title=self.title,
            description=self.body,
            color=self.color,
            timestamp=self.timestamp,
        )
        for unit_field in self.fields:
            embed.add_field(name=unit_field.name, value=unit_field.value, inline=unit_field.inline)
        if self.footer:
            embed.set_footer(text=self.footer)
        return embed
