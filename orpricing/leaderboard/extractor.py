"""Ranking extraction from the rankings page's streamed RSC payload.

The page ships its client-rendering data as ``self.__next_f.push([1,"..."])``
calls whose second element is an escaped string literal. The chart chunk
holds weekly snapshots ``[{"x": date, "ys": {model_id: tokens, ...}}, ...]``.
This is an undocumented format; every structural surprise raises
:class:`ScrapeError` instead of producing a partial ranking.
"""

from __future__ import annotations

import json
import re
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from orpricing.engine.exceptions import ScrapeError
from orpricing.pricing.models import LeaderboardEntry, LeaderboardSnapshot

PUSH_PATTERN = re.compile(r'self\.__next_f\.push\(\[1,"((?:[^"\\]|\\.)*)"\]\)')
CHART_MARKER = '\\"ys\\":{'
DATA_MARKER = '"data":['
OTHERS_BUCKET = "Others"
# threshold, suffix, decimal places
TOKEN_SCALES = (
    (1e12, "T", 2),
    (1e9, "B", 1),
    (1e6, "M", 1),
    (1e3, "K", 0),
)


def find_chart_chunk(html: str) -> str:
    """Return the un-escaped text of the first chunk carrying chart series."""
    for match in PUSH_PATTERN.finditer(html):
        raw = match.group(1)
        if CHART_MARKER in raw:
            return raw.replace('\\"', '"').replace("\\\\", "\\")
    raise ScrapeError("no chart data found in page")


def extract_json_array(text: str, marker: str = DATA_MARKER) -> str:
    """Slice the JSON array that starts at ``marker`` by bracket depth."""
    marker_idx = text.find(marker)
    if marker_idx == -1:
        raise ScrapeError("no data array found in SSR payload")

    start = marker_idx + len(marker) - 1
    depth = 0
    for idx in range(start, len(text)):
        char = text[idx]
        if char == "[":
            depth += 1
        elif char == "]":
            depth -= 1
            if depth == 0:
                return text[start : idx + 1]

    raise ScrapeError("unterminated data array in SSR payload")


def extract_weeks(html: str) -> list[dict[str, Any]]:
    chunk = find_chart_chunk(html)
    try:
        weeks = json.loads(extract_json_array(chunk))
    except json.JSONDecodeError as exc:
        raise ScrapeError(f"failed to parse leaderboard data: {exc}") from exc

    if not isinstance(weeks, list):
        raise ScrapeError("leaderboard data is not an array")
    return weeks


def extract(html: str) -> LeaderboardSnapshot:
    """Build the latest week's ranking from raw rankings page HTML."""
    weeks = extract_weeks(html)
    if not weeks:
        raise ScrapeError("no weekly data found")

    latest = weeks[-1]
    ys = latest.get("ys") if isinstance(latest, dict) else None
    if not isinstance(ys, dict):
        raise ScrapeError("latest week has no series data")

    counted: list[tuple[str, float]] = []
    for model_id, count in ys.items():
        if model_id == OTHERS_BUCKET:
            continue
        if isinstance(count, bool) or not isinstance(count, (int, float)):
            raise ScrapeError(
                f"non-numeric token count for '{model_id}': {count!r}"
            )
        counted.append((model_id, count))

    if not counted:
        raise ScrapeError("no model entries in latest week")

    # sorted() is stable, ties keep page order
    ranked = sorted(counted, key=lambda item: item[1], reverse=True)

    entries: list[LeaderboardEntry] = []
    for rank, (model_id, count) in enumerate(ranked, start=1):
        author, model = split_model_id(model_id)
        entries.append(
            LeaderboardEntry(
                rank=rank,
                model=model,
                author=author,
                tokens=format_tokens(count),
            )
        )
    return LeaderboardSnapshot(entries=entries)


def split_model_id(model_id: str) -> tuple[str, str]:
    author, sep, model = model_id.partition("/")
    if not sep or not author:
        return "", model_id
    return author, model


def format_tokens(count: float) -> str:
    """Format a token count as a human-scaled magnitude string.

    Scaled values round half-up on their exact binary value and lose
    trailing zeros: 1_500_000 is ``1.5M tokens``, 2e9 is ``2B tokens``.
    """
    for threshold, suffix, places in TOKEN_SCALES:
        if count >= threshold:
            return f"{_fixed(count / threshold, places)}{suffix} tokens"
    if float(count).is_integer():
        return f"{int(count)} tokens"
    return f"{count} tokens"


def _fixed(value: float, places: int) -> str:
    quantum = Decimal(1).scaleb(-places)
    rounded = Decimal(value).quantize(quantum, rounding=ROUND_HALF_UP)
    text = format(rounded, "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text
