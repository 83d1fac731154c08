"""Application-wide constants for Discord Summarize."""

# Discord platform limits
DISCORD_EMBED_DESCRIPTION_LIMIT = 4000  # characters per embed description
DISCORD_TOTAL_MESSAGE_LIMIT = 6000  # characters across all embeds in one message
EMBED_OVERHEAD = 100  # rough per-embed cost of colour, timestamp and framing

# Embed presentation
DEFAULT_EMBED_COLOR = 0x0099FF

# Delivery
DM_CONFIRMATION_MESSAGE = "Summary sent as a DM."
ERROR_REPLY_PREFIX = "Error sending reply: "

# Summaries
DEFAULT_MESSAGE_COUNT = 50
MAX_MESSAGE_COUNT = 500
SUPPORTED_LANGUAGES = ("english", "spanish")

# Prompt validation
MAX_PROMPT_LENGTH = 500

# LLM calls
DEFAULT_MODEL_TIMEOUT_SECONDS = 30.0
DEFAULT_MAX_TOKENS = 500
DEFAULT_TEMPERATURE = 0.7
