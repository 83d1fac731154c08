"""Group display units into batches that fit in one Discord message."""

from __future__ import annotations

from collections.abc import Iterable

from discord_summarize.constants import DISCORD_TOTAL_MESSAGE_LIMIT, EMBED_OVERHEAD
from discord_summarize.delivery.units import DisplayUnit


def estimate_unit_size(unit: DisplayUnit) -> int:
    """Estimate how many characters a unit costs against the message limit."""
    size = EMBED_OVERHEAD
    if unit.title:
        size += len(unit.title)
    if unit.body:
        size += len(unit.body)
    if unit.footer:
        size += len(unit.footer)
    return size


def group_units_into_batches(
    units: Iterable[DisplayUnit],
    limit: int = DISCORD_TOTAL_MESSAGE_LIMIT,
) -> list[list[DisplayUnit]]:
    """Greedily pack units into batches whose estimated size stays under ``limit``.

    Order is preserved and units are never split. A unit that is larger
    than ``limit`` on its own still gets a batch to itself.

    Args:
        units: Units in display order.
        limit: Maximum estimated size of one batch.

    Returns:
        Non-empty batches covering every input unit exactly once.
    """
    batches: list[list[DisplayUnit]] = []
    current: list[DisplayUnit] = []
    current_size = 0

    for unit in units:
        unit_size = estimate_unit_size(unit)
        if current and current_size + unit_size > limit:
            batches.append(current)
            current = []
            current_size = 0

        current.append(unit)
        current_size += unit_size

    if current:
        batches.append(current)
    return batches
