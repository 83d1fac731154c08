"""Discord integration: commands, handlers and the bot client."""
