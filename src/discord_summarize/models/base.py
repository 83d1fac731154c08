"""Base class and errors shared by all LLM backends."""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import ClassVar

from discord_summarize.constants import (
    DEFAULT_MAX_TOKENS,
    DEFAULT_MODEL_TIMEOUT_SECONDS,
    DEFAULT_TEMPERATURE,
)
from discord_summarize.discord.security import sanitize_prompt, validate_prompt
from discord_summarize.logging import get_logger
from discord_summarize.prompts import (
    PROMPT_SYSTEM_PROMPT,
    generate_system_prompt,
    generate_user_prompt,
)

log = get_logger("discord_summarize.models.base")

EMPTY_SUMMARY_FALLBACK = "Failed to generate summary"
EMPTY_RESPONSE_FALLBACK = "Failed to generate response"


class ModelError(Exception):
    """Raised when a model cannot produce a response."""

    pass


class ModelTimeoutError(ModelError):
    """Raised when a model call exceeds its timeout."""

    def __init__(self, message: str = "Timeout error") -> None:
        super().__init__(message)


class SummaryModel(ABC):
    """An LLM backend that can summarize conversations and answer prompts.

    Subclasses only implement :meth:`_generate`; prompt building, prompt
    validation, timeouts and error wrapping live here.
    """

    name: ClassVar[str] = "Model"

    def __init__(
        self,
        timeout: float = DEFAULT_MODEL_TIMEOUT_SECONDS,
        max_tokens: int = DEFAULT_MAX_TOKENS,
        temperature: float = DEFAULT_TEMPERATURE,
    ) -> None:
        """Initialize the model.

        Args:
            timeout: Seconds to wait for one generation call.
            max_tokens: Maximum tokens to generate.
            temperature: Sampling temperature.
        """
        self._timeout = timeout
        self._max_tokens = max_tokens
        self._temperature = temperature

    def get_name(self) -> str:
        """Human-readable model name, shown in reply footers."""
        return self.name

    @staticmethod
    def prepare_custom_prompt(custom_prompt: str | None) -> str | None:
        """Validate and sanitize user instructions appended to a summary request.

        Raises:
            ModelError: If the prompt fails validation.
        """
        if not custom_prompt:
            return None
        validation = validate_prompt(custom_prompt)
        if not validation.is_valid:
            raise ModelError(validation.error or "Invalid custom prompt")
        return sanitize_prompt(custom_prompt) or None

    async def summarize(
        self,
        messages: Sequence[str],
        formatted: bool = False,
        custom_prompt: str | None = None,
        language: str = "english",
    ) -> str:
        """Summarize a conversation.

        Args:
            messages: Conversation lines, oldest first.
            formatted: Produce a topics-and-perspectives summary.
            custom_prompt: Optional extra instructions from the user.
            language: ``"english"`` or ``"spanish"``.

        Returns:
            The summary text.

        Raises:
            ModelTimeoutError: If the call times out.
            ModelError: If the prompt is rejected or the provider call fails.
        """
        extra = self.prepare_custom_prompt(custom_prompt)
        system_prompt = generate_system_prompt(formatted, language)
        user_prompt = generate_user_prompt(formatted, language, extra, messages)

        text = await self._run(system_prompt, user_prompt, action="summarize")
        return text or EMPTY_SUMMARY_FALLBACK

    async def process_prompt(self, prompt: str) -> str:
        """Answer a free-form prompt.

        Raises:
            ModelTimeoutError: If the call times out.
            ModelError: If the prompt is rejected or the provider call fails.
        """
        validation = validate_prompt(prompt)
        if not validation.is_valid:
            raise ModelError(validation.error or "Invalid prompt")

        text = await self._run(PROMPT_SYSTEM_PROMPT, prompt, action="process prompt")
        return text or EMPTY_RESPONSE_FALLBACK

    async def _run(self, system_prompt: str, user_prompt: str, action: str) -> str:
        try:
            return await asyncio.wait_for(
                self._generate(system_prompt, user_prompt),
                timeout=self._timeout,
            )
        except TimeoutError as e:
            log.warning("model_timeout", model=self.name, timeout=self._timeout)
            raise ModelTimeoutError() from e
        except ModelError:
            raise
        except Exception as e:
            log.error("model_call_failed", model=self.name, action=action, error=str(e))
            raise ModelError(f"Failed to {action} with {self.name}: {e}") from e

    @abstractmethod
    async def _generate(self, system_prompt: str, user_prompt: str) -> str:
        """Call the provider and return the generated text."""

    async def close(self) -> None:
        """Release provider resources."""
        return None
