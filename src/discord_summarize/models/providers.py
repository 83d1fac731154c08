"""LLM provider adapters: OpenAI, Gemini, Claude, Ollama and a canned mock."""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from typing import Any

import anthropic
import httpx
import openai
from google import genai

from discord_summarize.models.base import SummaryModel
from discord_summarize.prompts import normalize_language


class OpenAIModel(SummaryModel):
    """OpenAI chat completions."""

    name = "OpenAI"

    def __init__(self, client: openai.AsyncOpenAI, model: str, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self._client = client
        self._model = model

    async def _generate(self, system_prompt: str, user_prompt: str) -> str:
        response = await self._client.chat.completions.create(
            model=self._model,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            temperature=self._temperature,
            max_tokens=self._max_tokens,
        )
        if not response.choices:
            return ""
        return response.choices[0].message.content or ""

    async def close(self) -> None:
        await self._client.close()


class GeminiModel(SummaryModel):
    """Google Gemini via the google-genai SDK."""

    name = "Gemini"

    def __init__(self, client: genai.Client, model: str, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self._client = client
        self._model = model

    async def _generate(self, system_prompt: str, user_prompt: str) -> str:
        def _sync_generate() -> Any:
            return self._client.models.generate_content(
                model=self._model,
                contents=user_prompt,
                config={
                    "system_instruction": system_prompt,
                    "temperature": self._temperature,
                    "max_output_tokens": self._max_tokens,
                },
            )

        # The SDK call is blocking; keep it off the event loop
        response = await asyncio.to_thread(_sync_generate)
        return response.text or ""


class ClaudeModel(SummaryModel):
    """Anthropic Claude messages API."""

    name = "Claude"

    def __init__(self, client: anthropic.AsyncAnthropic, model: str, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self._client = client
        self._model = model

    async def _generate(self, system_prompt: str, user_prompt: str) -> str:
        response = await self._client.messages.create(
            model=self._model,
            max_tokens=self._max_tokens,
            temperature=self._temperature,
            system=system_prompt,
            messages=[{"role": "user", "content": user_prompt}],
        )
        if not response.content:
            return ""
        return getattr(response.content[0], "text", "") or ""

    async def close(self) -> None:
        await self._client.close()


class OllamaModel(SummaryModel):
    """A local model served by Ollama's chat endpoint."""

    name = "Ollama"

    def __init__(
        self,
        client: httpx.AsyncClient,
        base_url: str,
        model: str,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self._client = client
        self._base_url = base_url.rstrip("/")
        self._model = model

    async def _generate(self, system_prompt: str, user_prompt: str) -> str:
        response = await self._client.post(
            f"{self._base_url}/api/chat",
            json={
                "model": self._model,
                "messages": [
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                "stream": False,
                "options": {
                    "temperature": self._temperature,
                    "num_predict": self._max_tokens,
                },
            },
        )
        response.raise_for_status()
        data = response.json()
        return data.get("message", {}).get("content", "")

    async def close(self) -> None:
        await self._client.aclose()


class MockModel(SummaryModel):
    """Canned responses for tests and local development."""

    name = "MockModel"

    FORMATTED_SUMMARIES = {
        "english": (
            "# 📝 Summary\n\n**Main Topics:**\n* Topic 1\n* Topic 2\n\n"
            "## 👥 Perspectives\n\n**User1:**\n* Point of view on topic 1\n\n"
            "**User2:**\n* Point of view on topic 2"
        ),
        "spanish": (
            "# 📝 Resumen\n\n**Temas Principales:**\n* Tema 1\n* Tema 2\n\n"
            "## 👥 Perspectivas\n\n**Usuario1:**\n* Punto de vista sobre tema 1\n\n"
            "**Usuario2:**\n* Punto de vista sobre tema 2"
        ),
    }

    async def summarize(
        self,
        messages: Sequence[str],
        formatted: bool = False,
        custom_prompt: str | None = None,
        language: str = "english",
    ) -> str:
        self.prepare_custom_prompt(custom_prompt)
        language = normalize_language(language)

        if formatted:
            return self.FORMATTED_SUMMARIES[language]
        if language == "spanish":
            suffix = " con prompt personalizado" if custom_prompt else ""
            return f"Resumidos {len(messages)} mensajes{suffix}"
        suffix = " with custom prompt" if custom_prompt else ""
        return f"Summarized {len(messages)} messages{suffix}"

    async def _generate(self, system_prompt: str, user_prompt: str) -> str:
        return f'This is a mock response to: "{user_prompt}" from MockModel'
