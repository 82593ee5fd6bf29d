from __future__ import annotations

import math
from collections.abc import Iterable

from orpricing.constants import ONE_MILLION, QUANTIZATION_SENTINEL
from orpricing.pricing.models import (
    ExpectedPricing,
    ProviderEndpoint,
    ProviderEntry,
)


def aggregate(endpoints: Iterable[ProviderEndpoint]) -> ExpectedPricing:
    """Compute per-provider prices and the uptime-weighted expected price.

    Only providers with ``status >= 0`` carry weight, each weighted by its
    trailing uptime fraction. The returned provider list is unfiltered.
    """
    providers = [normalize_endpoint(endpoint) for endpoint in endpoints]
    healthy = [p for p in providers if is_healthy(p.status)]

    prompt_expected: float | None = None
    completion_expected: float | None = None

    if healthy:
        sum_prompt = 0.0
        sum_completion = 0.0
        sum_weight = 0.0

        for provider in healthy:
            weight = provider.uptime / 100
            keep = 1 - provider.discount
            sum_prompt += weight * provider.prompt_per_m * keep
            sum_completion += weight * provider.completion_per_m * keep
            sum_weight += weight

        if sum_weight > 0:
            prompt_expected = round_price(sum_prompt / sum_weight)
            completion_expected = round_price(sum_completion / sum_weight)

    return ExpectedPricing(
        prompt_expected=prompt_expected,
        completion_expected=completion_expected,
        providers=providers,
    )


def normalize_endpoint(endpoint: ProviderEndpoint) -> ProviderEntry:
    """Scale per-token prices to per-million and fill defaults."""
    return ProviderEntry(
        provider=endpoint.provider_name,
        quantization=endpoint.quantization or QUANTIZATION_SENTINEL,
        prompt_per_m=per_million(endpoint.prompt),
        completion_per_m=per_million(endpoint.completion),
        discount=endpoint.discount or 0,
        status=endpoint.status if endpoint.status is not None else 0,
        uptime=(
            endpoint.uptime_last_30m
            if endpoint.uptime_last_30m is not None
            else 0
        ),
    )


def is_healthy(status: int) -> bool:
    return status >= 0


def count_healthy(providers: Iterable[ProviderEntry]) -> int:
    return sum(1 for p in providers if is_healthy(p.status))


def per_million(raw: str) -> float:
    return float(raw) * ONE_MILLION


def headline_per_million(raw: str) -> float:
    """Return a catalog per-token price as a rounded per-million price."""
    return round_price(per_million(raw))


def round_price(value: float) -> float:
    """Round to cents on the binary float, halves upward.

    ``0.000000145`` per token reports as 0.14 per million, not 0.15.
    """
    return math.floor(value * 100 + 0.5) / 100
