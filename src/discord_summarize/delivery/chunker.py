"""Split long text into pieces that fit inside a single embed description."""

from __future__ import annotations

from dataclasses import replace

from discord_summarize.constants import DISCORD_EMBED_DESCRIPTION_LIMIT
from discord_summarize.delivery.units import DisplayUnit


def _find_break_point(text: str, chunk_size: int) -> int:
    """Return where to cut ``text`` so the head is at most ``chunk_size`` long.

    Newlines win when they fall in the second half of the window, then
    spaces anywhere in the window, then a hard cut at ``chunk_size``.
    """
    break_point = text.rfind("\n", 0, chunk_size + 1)
    if break_point == -1 or break_point < chunk_size / 2:
        break_point = text.rfind(" ", 0, chunk_size + 1)

    # A cut at 0 would emit an empty chunk
    if break_point <= 0:
        break_point = chunk_size
    return break_point


def split_text_chunks(
    text: str,
    chunk_size: int = DISCORD_EMBED_DESCRIPTION_LIMIT,
) -> list[str]:
    """Split text into chunks no longer than ``chunk_size``.

    Whitespace around each cut is dropped from the start of the following
    chunk; the text of each chunk is otherwise kept verbatim.

    Args:
        text: The text to split.
        chunk_size: Maximum length of each chunk.

    Returns:
        The chunks in their original order. Text that already fits
        (including the empty string) comes back as a single chunk.
    """
    if len(text) <= chunk_size:
        return [text]

    chunks: list[str] = []
    remaining = text

    while len(remaining) > chunk_size:
        break_point = _find_break_point(remaining, chunk_size)
        chunks.append(remaining[:break_point])
        remaining = remaining[break_point:].strip()

    if remaining:
        chunks.append(remaining)
    return chunks


def split_unit(
    unit: DisplayUnit,
    chunk_size: int = DISCORD_EMBED_DESCRIPTION_LIMIT,
) -> list[DisplayUnit]:
    """Rebuild a unit with an oversized body as several smaller units.

    The first unit keeps the title; the last keeps the footer, fields and
    timestamp. Every unit keeps the colour.
    """
    chunks = split_text_chunks(unit.body or "", chunk_size)
    last = len(chunks) - 1

    return [
        replace(
            unit,
            title=unit.title if i == 0 else None,
            body=chunk,
            footer=unit.footer if i == last else None,
            fields=unit.fields if i == last else (),
            timestamp=unit.timestamp if i == last else None,
        )
        for i, chunk in enumerate(chunks)
    ]
