"""Name-based registry of LLM backends."""

from __future__ import annotations

from collections.abc import Callable

import anthropic
import httpx
import openai
from google import genai
from pydantic import SecretStr

from discord_summarize.config import Settings
from discord_summarize.logging import get_logger
from discord_summarize.models.base import ModelError, SummaryModel
from discord_summarize.models.providers import (
    ClaudeModel,
    GeminiModel,
    MockModel,
    OllamaModel,
    OpenAIModel,
)

log = get_logger("discord_summarize.models.registry")

ModelFactory = Callable[[], SummaryModel]


class ModelNotFoundError(ModelError):
    """Raised when a model name has not been registered."""

    def __init__(self, name: str) -> None:
        super().__init__(f'Model "{name}" not registered')
        self.name = name


class ModelRegistry:
    """Maps case-insensitive model names to factories.

    Instances are built on first use and reused afterwards.
    """

    def __init__(self) -> None:
        self._factories: dict[str, ModelFactory] = {}
        self._instances: dict[str, SummaryModel] = {}

    def register(self, name: str, factory: ModelFactory) -> None:
        """Register a factory under ``name`` (stored lowercased)."""
        key = name.lower()
        self._factories[key] = factory
        self._instances.pop(key, None)
        log.debug("model_registered", model=key)

    def create(self, name: str) -> SummaryModel:
        """Get the model registered under ``name``.

        Raises:
            ModelNotFoundError: If no model is registered under that name.
            ModelError: If the factory cannot build the model.
        """
        key = name.lower()
        if key in self._instances:
            return self._instances[key]

        factory = self._factories.get(key)
        if factory is None:
            raise ModelNotFoundError(name)

        model = factory()
        self._instances[key] = model
        return model

    def available_models(self) -> list[str]:
        """Names of all registered models, in registration order."""
        return list(self._factories)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.lower() in self._factories

    async def close(self) -> None:
        """Close every model that was built."""
        for key, model in list(self._instances.items()):
            try:
                await model.close()
            except Exception as e:
                log.warning("model_close_failed", model=key, error=str(e))
        self._instances.clear()


def _require_key(secret: SecretStr | None, env_name: str) -> str:
    value = secret.get_secret_value() if secret is not None else ""
    if not value:
        raise ModelError(f"{env_name} environment variable is not set")
    return value


def build_default_registry(settings: Settings) -> ModelRegistry:
    """Register the backends enabled by ``settings``.

    ``openai`` and ``gemini`` are always registered and fail on use when
    their key is missing. ``claude`` needs a key, ``ollama`` needs
    ``OLLAMA_ENABLED`` and ``mock`` is only available for tests and
    when ``ENABLE_MOCK_MODEL`` is set.
    """
    registry = ModelRegistry()
    common = {
        "timeout": settings.model_timeout_seconds,
        "max_tokens": settings.max_output_tokens,
    }

    def make_openai() -> SummaryModel:
        api_key = _require_key(settings.openai_api_key, "OPENAI_API_KEY")
        return OpenAIModel(openai.AsyncOpenAI(api_key=api_key), settings.openai_model, **common)

    def make_gemini() -> SummaryModel:
        api_key = _require_key(settings.gemini_api_key, "GEMINI_API_KEY")
        return GeminiModel(genai.Client(api_key=api_key), settings.gemini_model, **common)

    registry.register("openai", make_openai)
    registry.register("gemini", make_gemini)

    if settings.anthropic_api_key is not None:

        def make_claude() -> SummaryModel:
            api_key = _require_key(settings.anthropic_api_key, "ANTHROPIC_API_KEY")
            return ClaudeModel(
                anthropic.AsyncAnthropic(api_key=api_key), settings.claude_model, **common
            )

        registry.register("claude", make_claude)

    if settings.ollama_enabled:

        def make_ollama() -> SummaryModel:
            client = httpx.AsyncClient(timeout=settings.model_timeout_seconds)
            return OllamaModel(client, settings.ollama_url, settings.ollama_model, **common)

        registry.register("ollama", make_ollama)

    if settings.enable_mock_model or settings.is_test:
        registry.register("mock", lambda: MockModel(**common))

    log.info("model_registry_built", models=registry.available_models())
    return registry
