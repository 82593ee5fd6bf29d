"""On-disk blob cache with an age-based freshness window.

The cache directory is resolved once per process by :func:`resolve_cache_dir`
and handed to :class:`TimedCache` through :class:`CacheSettings`. There is no
locking: concurrent writers race and the last write wins.
"""

from __future__ import annotations

import logging
import os
import time
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from orpricing.constants import (
    CACHE_DIR_ENV,
    CACHE_TTL_SECONDS,
    PROJECT_MARKER,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CacheSettings:
    directory: Path
    ttl_seconds: int = CACHE_TTL_SECONDS


def resolve_cache_dir(
    cwd: Path | None = None,
    tool_dir: Path | None = None,
    home: Path | None = None,
) -> Path:
    """Pick the first existing cache directory candidate.

    Candidates, in order: ``<cwd>/.cache``; ``<cwd>/.cache`` when the working
    directory carries a project marker; ``.cache`` next to the installed
    package; ``~/.cache/or-pricing``. The last one is returned even when it
    does not exist yet; it is created on first write.
    """
    cwd = cwd or Path.cwd()
    tool_dir = tool_dir or Path(__file__).resolve().parent
    home = home or Path.home()

    project_cache = cwd / ".cache"
    if project_cache.is_dir():
        return project_cache
    if (cwd / PROJECT_MARKER).is_file():
        return project_cache

    tool_cache = tool_dir.parent / ".cache"
    if tool_cache.is_dir():
        return tool_cache

    return home / ".cache" / "or-pricing"


def load_cache_settings() -> CacheSettings:
    """Build the process-wide cache settings, honoring the env override."""
    override = os.environ.get(CACHE_DIR_ENV)
    if override:
        return CacheSettings(directory=Path(override).expanduser())
    return CacheSettings(directory=resolve_cache_dir())


class TimedCache:
    def __init__(
        self,
        settings: CacheSettings,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Bind the cache to a resolved directory and a clock."""
        self._settings = settings
        self._clock = clock

    @property
    def directory(self) -> Path:
        return self._settings.directory

    def path_for(self, name: str) -> Path:
        return self._settings.directory / name

    def read(self, name: str) -> str | None:
        """Return the blob if it is younger than the TTL, else ``None``."""
        path = self.path_for(name)
        try:
            mtime = path.stat().st_mtime
        except FileNotFoundError:
            return None

        age = self._clock() - mtime
        if age >= self._settings.ttl_seconds:
            logger.info(
                "cache_stale",
                extra={"event": "cache_stale", "cache_file": name},
            )
            return None

        return self._read_text(path)

    def read_raw(self, name: str) -> str | None:
        """Return the blob regardless of its age."""
        return self._read_text(self.path_for(name))

    def write(self, name: str, content: str) -> None:
        self._write_text(name, content)

    def write_raw(self, name: str, content: str) -> None:
        # same storage as write(); freshness only matters to readers
        self._write_text(name, content)

    def _write_text(self, name: str, content: str) -> None:
        self._settings.directory.mkdir(parents=True, exist_ok=True)
        self.path_for(name).write_text(content, encoding="utf-8")
        logger.info(
            "cache_write",
            extra={"event": "cache_write", "cache_file": name},
        )

    @staticmethod
    def _read_text(path: Path) -> str | None:
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
