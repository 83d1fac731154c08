"""Logging configuration for Discord Summarize.

:func:`setup_logging` installs the process-wide handlers once at startup.
Components that need their own level, such as the reply dispatcher, get an
explicit logger from :func:`make_logger` instead of relying on the global
structlog configuration.
"""

from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

import structlog

from discord_summarize.config import Settings, get_settings

# Handlers installed by the last setup_logging() call
_installed_handlers: list[logging.Handler] = []

# Chatty third-party loggers capped at WARNING
NOISY_LOGGERS = ("discord", "httpx", "httpcore")


def _shared_processors() -> list[Any]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
    ]


def resolve_level(settings: Settings) -> int:
    """Map ``LOG_LEVEL`` to its numeric level; unknown names mean INFO."""
    return getattr(logging, settings.log_level.upper(), logging.INFO)


def _formatter(json_output: bool) -> structlog.stdlib.ProcessorFormatter:
    renderer: Any = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer(colors=True)
    )
    return structlog.stdlib.ProcessorFormatter(
        processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer]
    )


def _file_handler(settings: Settings, level: int) -> logging.Handler | None:
    try:
        Path(settings.log_directory).mkdir(parents=True, exist_ok=True)
        handler = RotatingFileHandler(
            filename=settings.log_file_path,
            maxBytes=settings.log_file_max_bytes,
            backupCount=settings.log_file_backup_count,
            encoding="utf-8",
        )
    except OSError as e:
        # Continue with console-only logging
        print(f"Warning: Could not set up file logging: {e}", file=sys.stderr)
        return None

    handler.setLevel(level)
    # Files are always JSON
    handler.setFormatter(_formatter(json_output=True))
    return handler


def setup_logging(settings: Settings | None = None) -> None:
    """Configure structured logging with console and optional file outputs.

    Calling this again replaces the handlers installed by the previous call.
    """
    settings = settings or get_settings()
    level = resolve_level(settings)

    root = logging.getLogger()
    for handler in _installed_handlers:
        root.removeHandler(handler)
        handler.close()
    _installed_handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    # Colored in development, JSON otherwise
    console_handler.setFormatter(_formatter(json_output=not settings.is_development))
    _installed_handlers.append(console_handler)

    if settings.log_to_file:
        file_handler = _file_handler(settings, level)
        if file_handler is not None:
            _installed_handlers.append(file_handler)

    for handler in _installed_handlers:
        root.addHandler(handler)
    root.setLevel(level)

    structlog.configure(
        processors=_shared_processors(),
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a logger instance."""
    return structlog.get_logger(name)  # type: ignore[no-any-return]


def make_logger(name: str, settings: Settings | None = None) -> structlog.stdlib.BoundLogger:
    """Build a logger whose level is fixed from ``settings`` at construction.

    Events below ``LOG_LEVEL`` are dropped by the logger itself, so the
    filtering holds whatever the global structlog configuration is. Events
    that pass are handed to the stdlib handlers set up by
    :func:`setup_logging`.
    """
    settings = settings or get_settings()
    return structlog.wrap_logger(  # type: ignore[no-any-return]
        logging.getLogger(name),
        processors=_shared_processors(),
        wrapper_class=structlog.make_filtering_bound_logger(resolve_level(settings)),
        context_class=dict,
    )
