"""Validation and sanitization of user-supplied prompts."""

from __future__ import annotations

import re
from dataclasses import dataclass

from discord_summarize.constants import MAX_PROMPT_LENGTH
from discord_summarize.logging import get_logger

log = get_logger("discord_summarize.discord.security")

# Terms that indicate NSFW content, prompt injection or harmful requests
BLOCKED_TERMS: tuple[str, ...] = (
    # NSFW
    "nsfw",
    "porn",
    "xxx",
    "sex",
    "adult",
    "explicit",
    # Prompt injection
    "ignore previous instructions",
    "ignore above instructions",
    "disregard",
    "system prompt",
    "system message",
    "prompt injection",
    "jailbreak",
    # Harmful instructions
    "harmful",
    "illegal",
    "unethical",
    "dangerous",
)

BLOCKED_CONTENT_ERROR = (
    "Your prompt contains inappropriate content or attempts to manipulate the AI. "
    "Please provide a different prompt."
)
PROMPT_TOO_LONG_ERROR = (
    f"Your prompt is too long. Please keep it under {MAX_PROMPT_LENGTH} characters."
)

_SCRIPT_BLOCK = re.compile(r"<script\b[^<]*(?:(?!</script>)<[^<]*)*</script>", re.IGNORECASE)
_WRAPPING_TAG = re.compile(r"<[^>]*>([^<]*)</[^>]*>")
_ANY_TAG = re.compile(r"<[^>]*>")
_CODE_BLOCK = re.compile(r"```[^`]*```")
_INLINE_CODE = re.compile(r"`[^`]*`")


@dataclass(frozen=True)
class PromptValidation:
    """Outcome of validating a prompt."""

    is_valid: bool
    error: str | None = None


def validate_prompt(prompt: str | None) -> PromptValidation:
    """Check a prompt for blocked terms and excessive length.

    Empty prompts are valid; callers decide whether a prompt is required.
    """
    if not prompt or not prompt.strip():
        return PromptValidation(is_valid=True)

    lowered = prompt.lower()
    for term in BLOCKED_TERMS:
        if term in lowered:
            log.warning("prompt_blocked", reason="blocked_term", term=term)
            return PromptValidation(is_valid=False, error=BLOCKED_CONTENT_ERROR)

    if len(prompt) > MAX_PROMPT_LENGTH:
        log.warning("prompt_blocked", reason="too_long", length=len(prompt))
        return PromptValidation(is_valid=False, error=PROMPT_TOO_LONG_ERROR)

    return PromptValidation(is_valid=True)


def sanitize_prompt(prompt: str | None) -> str:
    """Strip markup and code from a prompt before it reaches a model.

    Script blocks are dropped entirely, other HTML tags are unwrapped to
    their text, and code blocks and inline code are replaced by a space.
    """
    if not prompt:
        return ""

    sanitized = _SCRIPT_BLOCK.sub("", prompt)
    sanitized = _WRAPPING_TAG.sub(r"\1", sanitized)
    sanitized = _ANY_TAG.sub("", sanitized)
    sanitized = _CODE_BLOCK.sub(" ", sanitized)
    sanitized = _INLINE_CODE.sub(" ", sanitized)
    return sanitized.strip()
