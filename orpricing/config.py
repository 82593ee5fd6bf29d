from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from orpricing.engine.exceptions import ConfigError
from orpricing.pricing.models import AgentConfig

ROUTER_PREFIX = "openrouter/"


def default_config_path() -> Path:
    return Path.home() / ".openclaw" / "openclaw.json"


def read_agent_config(path: Path | None = None) -> AgentConfig | None:
    """Load configured models from the agent config file, if present."""
    path = path or default_config_path()
    if not path.is_file():
        return None

    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ConfigError(
            f"malformed agent config at {path}",
            details={"reason": str(exc)},
        ) from exc

    defaults = _dig(raw, "agents", "defaults")
    models = defaults.get("models")
    if not isinstance(models, dict):
        models = {}

    primary = _dig(defaults, "model").get("primary")
    return AgentConfig(
        model_ids=[_strip_prefix(key) for key in sorted(models)],
        primary=_strip_prefix(primary) if isinstance(primary, str) else None,
        aliases=[_alias_for(key, value) for key, value in models.items()],
    )


def _dig(payload: Any, *keys: str) -> dict[str, Any]:
    for key in keys:
        payload = payload.get(key) if isinstance(payload, dict) else None
    return payload if isinstance(payload, dict) else {}


def _strip_prefix(model_id: str) -> str:
    return model_id.removeprefix(ROUTER_PREFIX)


def _alias_for(key: str, value: Any) -> str:
    alias = value.get("alias") if isinstance(value, dict) else None
    if alias:
        return str(alias)
    model_id = _strip_prefix(key)
    parts = model_id.split("/")
    return parts[1] if len(parts) > 1 else model_id
