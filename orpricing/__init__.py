"""OpenRouter pricing intelligence: expected prices weighted by uptime."""

__version__ = "2.0.0"
