"""LLM backends used for summaries and prompts."""

from discord_summarize.models.base import ModelError, ModelTimeoutError, SummaryModel
from discord_summarize.models.providers import (
    ClaudeModel,
    GeminiModel,
    MockModel,
    OllamaModel,
    OpenAIModel,
)
from discord_summarize.models.registry import (
    ModelNotFoundError,
    ModelRegistry,
    build_default_registry,
)

__all__ = [
    "ClaudeModel",
    "GeminiModel",
    "MockModel",
    "ModelError",
    "ModelNotFoundError",
    "ModelRegistry",
    "ModelTimeoutError",
    "OllamaModel",
    "OpenAIModel",
    "SummaryModel",
    "build_default_registry",
]
