from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class CatalogModel:
    id: str
    name: str
    context_length: int
    # headline price, raw per-token decimal strings
    prompt: str
    completion: str


@dataclass(frozen=True)
class ProviderEndpoint:
    provider_name: str
    prompt: str
    completion: str
    quantization: str | None = None
    discount: float | None = None
    # >= 0 healthy, -1 degraded, < -1 down
    status: int | None = None
    uptime_last_30m: float | None = None


@dataclass(frozen=True)
class ProviderEntry:
    provider: str
    quantization: str
    prompt_per_m: float
    completion_per_m: float
    discount: float
    status: int
    uptime: float


@dataclass(frozen=True)
class ExpectedPricing:
    prompt_expected: float | None
    completion_expected: float | None
    providers: list[ProviderEntry]


@dataclass(frozen=True)
class PriceReport:
    id: str
    name: str
    context_length: int
    headline_prompt: float
    headline_completion: float
    expected_prompt: float | None
    expected_completion: float | None
    providers: list[ProviderEntry]

    def to_dict(self) -> dict[str, object]:
        return {
            "id": self.id,
            "name": self.name,
            "context_length": self.context_length,
            "headline": {
                "prompt_per_m": self.headline_prompt,
                "completion_per_m": self.headline_completion,
            },
            "expected": {
                "prompt_per_m": self.expected_prompt,
                "completion_per_m": self.expected_completion,
            },
            "providers": [vars(p) for p in self.providers],
        }


@dataclass(frozen=True)
class SearchEntry:
    id: str
    name: str
    context: int
    prompt_per_m: float
    completion_per_m: float


@dataclass(frozen=True)
class CompareEntry:
    id: str
    name: str
    context: int
    headline_prompt: float
    headline_completion: float
    expected_prompt: float | None
    expected_completion: float | None
    providers: int
    healthy: int
    primary: bool | None = None


@dataclass(frozen=True)
class LeaderboardEntry:
    rank: int
    model: str
    author: str
    tokens: str


@dataclass(frozen=True)
class LeaderboardSnapshot:
    entries: list[LeaderboardEntry]
    cached_at: str | None = None
    source: str | None = None

    def to_dict(self) -> dict[str, object]:
        payload: dict[str, object] = {
            "entries": [vars(entry) for entry in self.entries],
        }
        if self.cached_at is not None:
            payload["cached_at"] = self.cached_at
        if self.source is not None:
            payload["source"] = self.source
        return payload


@dataclass(frozen=True)
class LeaderboardTarget:
    cache_file: str
    scrape_url: str
    title: str
    app_url: str | None = None


@dataclass(frozen=True)
class AgentConfig:
    model_ids: list[str] = field(default_factory=list)
    primary: str | None = None
    aliases: list[str] = field(default_factory=list)
