"""Leaderboard scraping and cached snapshots."""

from orpricing.leaderboard.extractor import extract, format_tokens
from orpricing.leaderboard.store import LeaderboardStore, resolve_target

__all__ = ["LeaderboardStore", "extract", "format_tokens", "resolve_target"]
