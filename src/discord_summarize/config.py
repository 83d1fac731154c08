"""Configuration management for Discord Summarize."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from discord_summarize.constants import (
    DEFAULT_MAX_TOKENS,
    DEFAULT_MESSAGE_COUNT,
    DEFAULT_MODEL_TIMEOUT_SECONDS,
    MAX_MESSAGE_COUNT,
)

ALLOWED_OPENAI_MODELS = ["gpt-4o-mini", "gpt-4-turbo", "gpt-4", "gpt-3.5-turbo"]
ALLOWED_GEMINI_MODELS = ["gemini-2.5-pro", "gemini-2.5-flash"]
VALID_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        env_parse_none_str="",
    )

    # Discord
    discord_token: SecretStr = Field(description="Discord bot token")
    client_id: str | None = Field(default=None, description="Discord application ID")
    command_prefix: str = Field(default="!", description="Prefix for text commands")
    sync_slash_commands: bool = Field(
        default=True, description="Sync slash commands with Discord on startup"
    )

    # Provider credentials (each provider is optional)
    openai_api_key: SecretStr | None = Field(default=None, description="OpenAI API key")
    gemini_api_key: SecretStr | None = Field(default=None, description="Gemini API key")
    anthropic_api_key: SecretStr | None = Field(
        default=None, description="Anthropic API key for Claude"
    )

    # Provider models
    openai_model: str = Field(default="gpt-4-turbo", description="OpenAI chat model")
    gemini_model: str = Field(default="gemini-2.5-pro", description="Gemini model")
    claude_model: str = Field(default="claude-sonnet-4-5-20250929", description="Claude model")

    # Ollama (local generation)
    ollama_enabled: bool = Field(default=False, description="Register the local Ollama model")
    ollama_host: str = Field(default="ollama", description="Ollama host")
    ollama_port: int = Field(default=11434, description="Ollama API port")
    ollama_model: str = Field(default="llama3.1:8b", description="Ollama model for generation")

    # Model selection
    default_summary_model: str = Field(
        default="openai", description="Model used by summary commands when none is given"
    )
    default_prompt_model: str = Field(
        default="gemini", description="Model used by the prompt command when none is given"
    )
    enable_mock_model: bool = Field(
        default=False, description="Register the canned-response mock model"
    )

    # Summaries
    default_message_count: int = Field(
        default=DEFAULT_MESSAGE_COUNT, description="Messages summarized when no count is given"
    )
    max_message_count: int = Field(
        default=MAX_MESSAGE_COUNT, description="Largest message count a user may request"
    )

    # LLM calls
    model_timeout_seconds: float = Field(
        default=DEFAULT_MODEL_TIMEOUT_SECONDS, description="Timeout for one LLM call"
    )
    max_output_tokens: int = Field(
        default=DEFAULT_MAX_TOKENS, description="Maximum tokens generated per reply"
    )

    # Application
    environment: str = Field(default="production", description="Environment name")
    log_level: str = Field(default="INFO", description="Logging level")

    # Logging Configuration
    log_to_file: bool = Field(default=False, description="Enable file-based logging")
    log_directory: str = Field(default="logs", description="Directory for log files")
    log_file_max_bytes: int = Field(
        default=10485760,  # 10MB
        description="Max size per log file before rotation",
    )
    log_file_backup_count: int = Field(
        default=5, description="Number of rotated log files to keep"
    )
    log_file_prefix: str = Field(default="discord_summarize", description="Prefix for log files")

    @property
    def log_file_path(self) -> str:
        """Get the full log file path."""
        return f"{self.log_directory}/{self.log_file_prefix}.log"

    @field_validator("openai_model")
    @classmethod
    def validate_openai_model(cls, v: str) -> str:
        """Only allow OpenAI models the prompts were tuned for."""
        if v not in ALLOWED_OPENAI_MODELS:
            allowed = ", ".join(ALLOWED_OPENAI_MODELS)
            raise ValueError(f"Invalid OpenAI model: {v}. Allowed models are: {allowed}")
        return v

    @field_validator("gemini_model")
    @classmethod
    def validate_gemini_model(cls, v: str) -> str:
        """Only allow Gemini models the prompts were tuned for."""
        if v not in ALLOWED_GEMINI_MODELS:
            allowed = ", ".join(ALLOWED_GEMINI_MODELS)
            raise ValueError(f"Invalid Gemini model: {v}. Allowed models are: {allowed}")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate and normalize the log level name."""
        level = v.upper()
        if level == "WARN":
            level = "WARNING"
        if level not in VALID_LOG_LEVELS:
            raise ValueError(f"log_level must be one of {VALID_LOG_LEVELS}, got: {v}")
        return level

    @field_validator("default_message_count", "max_message_count")
    @classmethod
    def validate_message_count(cls, v: int) -> int:
        """Validate message counts are positive."""
        if v < 1:
            raise ValueError(f"Message count must be at least 1, got: {v}")
        return v

    @field_validator("default_summary_model", "default_prompt_model")
    @classmethod
    def normalize_model_name(cls, v: str) -> str:
        """Model names are looked up case-insensitively."""
        return v.strip().lower()

    @property
    def ollama_url(self) -> str:
        """Get the full Ollama URL."""
        return f"http://{self.ollama_host}:{self.ollama_port}"

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.environment.lower() == "development"

    @property
    def is_test(self) -> bool:
        """Check if running under tests."""
        return self.environment.lower() == "test"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()  # type: ignore[call-arg]  # Pydantic loads from env vars
