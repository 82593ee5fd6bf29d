from __future__ import annotations

import json
from collections.abc import Callable
from pathlib import Path
from typing import Any

import httpx

from orpricing.cache import CacheSettings, TimedCache
from orpricing.leaderboard.store import LeaderboardStore
from orpricing.pricing.client import OpenRouterClient
from orpricing.pricing.models import ProviderEndpoint
from orpricing.service import PricingService

CATALOG: dict[str, Any] = {
    "data": [
        {
            "id": "openai/gpt-4",
            "name": "OpenAI: GPT-4",
            "context_length": 8191,
            "pricing": {"prompt": "0.00003", "completion": "0.00006"},
        },
        {
            "id": "openai/gpt-4-turbo",
            "name": "OpenAI: GPT-4 Turbo",
            "context_length": 128000,
            "pricing": {"prompt": "0.00001", "completion": "0.00003"},
        },
        {
            "id": "anthropic/claude-3.5-sonnet",
            "name": "Anthropic: Claude 3.5 Sonnet",
            "context_length": 200000,
            "pricing": {"prompt": "0.000003", "completion": "0.000015"},
        },
        {
            "id": "meta-llama/llama-3.1-70b-instruct",
            "name": "Meta: Llama 3.1 70B Instruct",
            "context_length": 131072,
            "pricing": {"prompt": "0.00000012", "completion": "0.0000003"},
        },
    ]
}

ENDPOINTS: dict[str, list[dict[str, Any]]] = {
    "anthropic/claude-3.5-sonnet": [
        {
            "provider_name": "Anthropic",
            "pricing": {"prompt": "0.000003", "completion": "0.000015"},
            "status": 0,
            "uptime_last_30m": 100,
        },
        {
            "provider_name": "Amazon Bedrock",
            "pricing": {"prompt": "0.000003", "completion": "0.000015"},
            "status": -2,
            "uptime_last_30m": 12.5,
        },
    ],
    "meta-llama/llama-3.1-70b-instruct": [
        {
            "provider_name": "DeepInfra",
            "quantization": "fp8",
            "pricing": {"prompt": "0.0000001", "completion": "0.0000003"},
            "status": 0,
            "uptime_last_30m": 80,
        },
        {
            "provider_name": "Together",
            "pricing": {
                "prompt": "0.0000003",
                "completion": "0.0000005",
                "discount": 0.5,
            },
            "status": 0,
            "uptime_last_30m": 20,
        },
    ],
    "openai/gpt-4": [
        {
            "provider_name": "OpenAI",
            "pricing": {"prompt": "0.00003", "completion": "0.00006"},
            "status": -1,
            "uptime_last_30m": 99.0,
        },
    ],
}


def make_cache(tmp_path: Path, now: float | None = None) -> TimedCache:
    """Create a cache rooted in a temporary directory."""
    settings = CacheSettings(directory=tmp_path / "cache")
    if now is None:
        return TimedCache(settings)
    return TimedCache(settings, clock=lambda: now)


def api_handler(
    calls: list[str] | None = None,
    pages: dict[str, str] | None = None,
) -> Callable[[httpx.Request], httpx.Response]:
    """Build a MockTransport handler serving the fixture catalog."""

    def handler(request: httpx.Request) -> httpx.Response:
        if calls is not None:
            calls.append(str(request.url))
        path = request.url.path
        if pages is not None and str(request.url) in pages:
            return httpx.Response(200, text=pages[str(request.url)])
        if path == "/api/v1/models":
            return httpx.Response(200, text=json.dumps(CATALOG))
        prefix, suffix = "/api/v1/models/", "/endpoints"
        if path.startswith(prefix) and path.endswith(suffix):
            model_id = path[len(prefix) : -len(suffix)]
            if model_id in ENDPOINTS:
                payload = {"data": {"endpoints": ENDPOINTS[model_id]}}
                return httpx.Response(200, json=payload)
        return httpx.Response(404, json={"error": "not found"})

    return handler


def make_client(
    tmp_path: Path,
    calls: list[str] | None = None,
    pages: dict[str, str] | None = None,
) -> OpenRouterClient:
    """Create an API client backed by a mock transport."""
    transport = httpx.MockTransport(api_handler(calls=calls, pages=pages))
    return OpenRouterClient(
        make_cache(tmp_path),
        http_client=httpx.Client(transport=transport),
    )


def endpoint(
    prompt: str = "0.000001",
    completion: str = "0.000002",
    **overrides: Any,
) -> ProviderEndpoint:
    """Create a provider endpoint with sensible defaults."""
    values: dict[str, Any] = {
        "provider_name": "Provider",
        "prompt": prompt,
        "completion": completion,
        "status": 0,
        "uptime_last_30m": 100.0,
    }
    values.update(overrides)
    return ProviderEndpoint(**values)


def make_service(
    tmp_path: Path,
    calls: list[str] | None = None,
    sleeps: list[float] | None = None,
    pages: dict[str, str] | None = None,
) -> PricingService:
    """Create a pricing service wired to the mock API."""
    client = make_client(tmp_path, calls=calls, pages=pages)
    store = LeaderboardStore(make_cache(tmp_path), client.fetch_page)
    sleep = sleeps.append if sleeps is not None else (lambda _: None)
    return PricingService(client, store, sleep=sleep)
