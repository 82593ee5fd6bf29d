from __future__ import annotations

import json
import logging
import re
from collections.abc import Callable
from datetime import UTC, datetime
from pathlib import Path
from typing import Any
from urllib.parse import quote

from jsonschema import Draft202012Validator

from orpricing.cache import TimedCache
from orpricing.constants import (
    LEADERBOARD_APP_URL,
    LEADERBOARD_CACHE_FILE,
    LEADERBOARD_URL,
)
from orpricing.engine.exceptions import InvalidInputError, ScrapeError
from orpricing.leaderboard import extractor
from orpricing.pricing.models import (
    LeaderboardEntry,
    LeaderboardSnapshot,
    LeaderboardTarget,
)

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).resolve().parents[1] / "schema"
SCHEME_PREFIX = re.compile(r"^https?://")
NON_ALNUM = re.compile(r"[^a-zA-Z0-9]")


def app_slug(url: str) -> str:
    """Reduce an app URL to its host, with separators for other characters.

    ``https://openclaw.ai/docs`` becomes ``openclaw-ai``.
    """
    host = SCHEME_PREFIX.sub("", url).split("/", 1)[0]
    return NON_ALNUM.sub("-", host)


def resolve_target(app_url: str | None = None) -> LeaderboardTarget:
    """Pick the cache blob, scrape URL and title for a leaderboard."""
    if not app_url:
        return LeaderboardTarget(
            cache_file=LEADERBOARD_CACHE_FILE,
            scrape_url=LEADERBOARD_URL,
            title="OpenRouter",
        )

    return LeaderboardTarget(
        cache_file=f"leaderboard-{app_slug(app_url)}.json",
        scrape_url=LEADERBOARD_APP_URL.format(app_url=quote(app_url, safe="")),
        title=app_url,
        app_url=app_url,
    )


def _utc_now() -> datetime:
    return datetime.now(UTC)


class LeaderboardStore:
    def __init__(
        self,
        cache: TimedCache,
        fetch_page: Callable[[str], str],
        now: Callable[[], datetime] = _utc_now,
    ) -> None:
        """Bind leaderboard snapshots to the raw cache path."""
        self._cache = cache
        self._fetch_page = fetch_page
        self._now = now
        schema = json.loads(
            (SCHEMA_PATH / "leaderboard.schema.json").read_text(
                encoding="utf-8"
            )
        )
        self._validator = Draft202012Validator(schema)

    def refresh(self, target: LeaderboardTarget) -> LeaderboardSnapshot:
        """Scrape the target page and overwrite its cached snapshot."""
        logger.info(
            "leaderboard_refresh",
            extra={"event": "leaderboard_refresh", "url": target.scrape_url},
        )
        html = self._fetch_page(target.scrape_url)
        snapshot = extractor.extract(html)
        payload = self._stamp(snapshot.to_dict(), target)
        problem = self._schema_problem(payload, target.scrape_url)
        if problem is not None:
            raise ScrapeError(
                f"scraped leaderboard is unusable: {problem}",
                suggestions=["The page format may have changed"],
            )
        self._cache.write_raw(target.cache_file, self._dump(payload))
        logger.info(
            "leaderboard_refreshed",
            extra={
                "event": "leaderboard_refreshed",
                "cache_file": target.cache_file,
                "count": len(snapshot.entries),
            },
        )
        return self._to_snapshot(payload)

    def update_from_json(self, target: LeaderboardTarget, text: str) -> int:
        """Seed the cache from externally supplied JSON; return entry count."""
        try:
            payload = json.loads(text)
        except json.JSONDecodeError as exc:
            raise InvalidInputError(
                "invalid JSON on stdin",
                details={"reason": str(exc)},
            ) from exc

        self._validate(payload, "stdin")
        stamped = self._stamp(payload, target)
        self._cache.write_raw(target.cache_file, self._dump(stamped))
        return len(stamped["entries"])

    def load(self, target: LeaderboardTarget) -> LeaderboardSnapshot | None:
        """Read the cached snapshot regardless of age."""
        raw = self._cache.read_raw(target.cache_file)
        if raw is None:
            return None

        try:
            payload = json.loads(raw)
            self._validate(payload, target.cache_file)
        except (json.JSONDecodeError, InvalidInputError):
            logger.warning(
                "cache_corrupt",
                extra={
                    "event": "cache_corrupt",
                    "cache_file": target.cache_file,
                },
            )
            return None
        return self._to_snapshot(payload)

    def _stamp(
        self,
        payload: dict[str, Any],
        target: LeaderboardTarget,
    ) -> dict[str, Any]:
        timestamp = self._now().astimezone(UTC).strftime("%Y-%m-%dT%H:%M:%SZ")
        return {**payload, "cached_at": timestamp, "source": target.scrape_url}

    def _validate(self, payload: Any, filename: str) -> None:
        problem = self._schema_problem(payload, filename)
        if problem is not None:
            raise InvalidInputError(
                problem,
                suggestions=['Expected JSON shaped like {"entries": [...]}'],
            )

    def _schema_problem(self, payload: Any, filename: str) -> str | None:
        errors = sorted(
            self._validator.iter_errors(payload),
            key=lambda err: list(err.path),
        )
        if not errors:
            return None

        first_error = errors[0]
        path = ".".join(str(part) for part in first_error.path)
        path_suffix = f" at '{path}'" if path else ""
        return (
            "Leaderboard validation failed for "
            f"{filename}{path_suffix}: {first_error.message}"
        )

    @staticmethod
    def _dump(payload: dict[str, Any]) -> str:
        return json.dumps(payload, indent=2)

    @staticmethod
    def _to_snapshot(payload: dict[str, Any]) -> LeaderboardSnapshot:
        return LeaderboardSnapshot(
            entries=[
                LeaderboardEntry(
                    rank=entry["rank"],
                    model=entry["model"],
                    author=entry["author"],
                    tokens=entry["tokens"],
                )
                for entry in payload["entries"]
            ],
            cached_at=payload.get("cached_at"),
            source=payload.get("source"),
        )
