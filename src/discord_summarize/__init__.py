"""Discord Summarize - chat summaries and prompts backed by pluggable LLMs."""

__version__ = "1.0.0"
