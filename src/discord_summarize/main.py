"""Main entry point for Discord Summarize."""

import asyncio

from discord_summarize.config import get_settings
from discord_summarize.discord.bot import SummarizeBot
from discord_summarize.logging import get_logger, setup_logging
from discord_summarize.models import build_default_registry


async def main() -> None:
    """Main application entry point."""
    setup_logging()
    log = get_logger("discord_summarize.main")

    settings = get_settings()
    log.info(
        "starting_discord_summarize",
        environment=settings.environment,
        default_summary_model=settings.default_summary_model,
        default_prompt_model=settings.default_prompt_model,
    )

    registry = build_default_registry(settings)
    bot = SummarizeBot(registry=registry, settings=settings)
    log.info("bot_created")

    try:
        await bot.start(settings.discord_token.get_secret_value())
    except KeyboardInterrupt:
        log.info("shutdown_requested")
    finally:
        await bot.close()
        log.info("discord_summarize_stopped")


def run() -> None:
    """Run the application."""
    asyncio.run(main())


if __name__ == "__main__":
    run()
