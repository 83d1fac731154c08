"""Reply delivery: chunking, batching and safe sending of bot replies."""

from discord_summarize.delivery.batcher import estimate_unit_size, group_units_into_batches
from discord_summarize.delivery.chunker import split_text_chunks, split_unit
from discord_summarize.delivery.dispatcher import ReplyDispatcher
from discord_summarize.delivery.targets import (
    InteractionState,
    InteractionTarget,
    LiveMessageTarget,
    ReplyContent,
    ResponseTarget,
)
from discord_summarize.delivery.units import DisplayUnit, UnitField

__all__ = [
    "DisplayUnit",
    "InteractionState",
    "InteractionTarget",
    "LiveMessageTarget",
    "ReplyContent",
    "ReplyDispatcher",
    "ResponseTarget",
    "UnitField",
    "estimate_unit_size",
    "group_units_into_batches",
    "split_text_chunks",
    "split_unit",
]
