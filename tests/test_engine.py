from __future__ import annotations

import pytest

from orpricing.engine import (
    AmbiguousError,
    ModelResolver,
    NotFoundError,
    aggregate,
    count_healthy,
)
from orpricing.engine.aggregator import headline_per_million, round_price
from orpricing.pricing.models import CatalogModel, ProviderEndpoint
from tests.helpers import endpoint


def make_model(model_id: str, name: str = "") -> CatalogModel:
    """Create a catalog entry with placeholder pricing."""
    return CatalogModel(
        id=model_id,
        name=name or model_id,
        context_length=8192,
        prompt="0.000001",
        completion="0.000002",
    )


def make_resolver() -> ModelResolver:
    """Create a resolver over a small catalog."""
    return ModelResolver(
        [
            make_model("openai/gpt-4-turbo", "OpenAI: GPT-4 Turbo"),
            make_model("openai/gpt-4", "OpenAI: GPT-4"),
            make_model("anthropic/claude-3.5-sonnet", "Claude 3.5 Sonnet"),
            make_model("meta-llama/llama-3-8b", "Meta: Llama 3 8B"),
        ]
    )


# ----------------------------------------------------------------------
# Aggregation
# ----------------------------------------------------------------------


def test_expected_price_weighted_by_uptime_and_discount() -> None:
    """Weight healthy providers by uptime and apply discounts."""
    result = aggregate(
        [
            endpoint("0.0000001", "0.0000002", uptime_last_30m=75),
            endpoint(
                "0.0000006",
                "0.0000012",
                discount=0.5,
                uptime_last_30m=25,
            ),
        ]
    )

    # prompt = (0.75 * 0.1 + 0.25 * 0.6 * 0.5) / 1.0 = 0.15
    assert result.prompt_expected == 0.15
    # completion = (0.75 * 0.2 + 0.25 * 1.2 * 0.5) / 1.0 = 0.3
    assert result.completion_expected == 0.3


def test_all_unhealthy_providers_yield_no_expectation() -> None:
    """Return absent expectations when every provider is degraded or down."""
    result = aggregate(
        [
            endpoint(status=-1, uptime_last_30m=99.0),
            endpoint(status=-2, uptime_last_30m=100.0),
        ]
    )

    assert result.prompt_expected is None
    assert result.completion_expected is None
    assert len(result.providers) == 2


def test_zero_uptime_yields_no_expectation() -> None:
    """Avoid dividing by zero when healthy providers report 0% uptime."""
    result = aggregate([endpoint(uptime_last_30m=0), endpoint()])

    assert result.prompt_expected == 1.0

    result = aggregate([endpoint(uptime_last_30m=0)])

    assert result.prompt_expected is None
    assert result.completion_expected is None


def test_empty_endpoint_list() -> None:
    """Treat a model without endpoints like one without healthy providers."""
    result = aggregate([])

    assert result.prompt_expected is None
    assert result.providers == []


def test_degraded_provider_carries_no_weight() -> None:
    """Exclude status -1 from weighting while still listing it."""
    result = aggregate(
        [
            endpoint("0.00001", "0.00002", status=-1),
            endpoint("0.000002", "0.000004", status=0),
        ]
    )

    assert result.prompt_expected == 2.0
    assert result.completion_expected == 4.0
    assert [p.status for p in result.providers] == [-1, 0]
    assert count_healthy(result.providers) == 1


def test_positive_status_is_healthy() -> None:
    """Count every non-negative status as operational."""
    result = aggregate([endpoint(status=3), endpoint(status=0)])

    assert count_healthy(result.providers) == 2
    assert result.prompt_expected == 1.0


def test_expected_price_is_bounded_by_healthy_prices() -> None:
    """Keep the weighted mean between the cheapest and dearest provider."""
    endpoints = [
        endpoint("0.0000012", "0.000002", uptime_last_30m=97.3),
        endpoint("0.0000031", "0.000009", uptime_last_30m=12.0),
        endpoint(
            "0.0000020",
            "0.000004",
            discount=0.1,
            uptime_last_30m=64.8,
        ),
        endpoint("0.0000500", "0.000100", status=-2, uptime_last_30m=100),
    ]
    result = aggregate(endpoints)

    assert result.prompt_expected is not None
    assert result.completion_expected is not None
    assert 1.2 <= result.prompt_expected <= 3.1
    assert 2.0 <= result.completion_expected <= 9.0


def test_aggregate_is_order_invariant() -> None:
    """Produce the same expectation regardless of endpoint order."""
    endpoints = [
        endpoint("0.0000012", "0.000002", uptime_last_30m=97.3),
        endpoint("0.0000031", "0.000009", uptime_last_30m=12.0),
        endpoint("0.0000020", "0.000004", discount=0.2, uptime_last_30m=65),
    ]

    forward = aggregate(endpoints)
    backward = aggregate(list(reversed(endpoints)))

    assert forward.prompt_expected == backward.prompt_expected
    assert forward.completion_expected == backward.completion_expected


def test_normalization_fills_defaults() -> None:
    """Scale prices per million and default the optional fields."""
    raw = ProviderEndpoint(
        provider_name="Fireworks",
        prompt="0.0000025",
        completion="0.00001",
    )
    result = aggregate([raw])
    provider = result.providers[0]

    assert provider.provider == "Fireworks"
    assert provider.quantization == "-"
    assert provider.prompt_per_m == pytest.approx(2.5)
    assert provider.completion_per_m == pytest.approx(10.0)
    assert provider.discount == 0
    assert provider.status == 0
    assert provider.uptime == 0
    # healthy by status, but 0% uptime leaves no weight
    assert result.prompt_expected is None


def test_expected_price_rounds_binary_floats() -> None:
    """Round the float per-million price, not its decimal spelling."""
    result = aggregate([endpoint("0.000000145", "0.000000225")])

    assert result.prompt_expected == 0.14
    assert result.completion_expected == 0.22


def test_round_price_sends_halves_up() -> None:
    assert round_price(0.125) == 0.13
    assert round_price(2.375) == 2.38
    assert round_price(0.0) == 0.0


def test_headline_per_million() -> None:
    """Convert catalog per-token prices into rounded per-million prices."""
    assert headline_per_million("0.0000025") == 2.5
    assert headline_per_million("0.00000012") == 0.12
    assert headline_per_million("0") == 0.0
    assert headline_per_million("0.000000145") == 0.14


# ----------------------------------------------------------------------
# Resolution
# ----------------------------------------------------------------------


def test_exact_id_match_wins_over_substrings() -> None:
    """Resolve an exact id even when it is a prefix of other ids."""
    resolver = make_resolver()

    assert resolver.resolve("openai/gpt-4") == "openai/gpt-4"


def test_exact_id_match_is_case_insensitive() -> None:
    """Return the canonical casing for a case-insensitive exact match."""
    resolver = make_resolver()

    assert resolver.resolve("OpenAI/GPT-4") == "openai/gpt-4"


def test_unique_id_substring_resolves() -> None:
    """Resolve a partial id that matches exactly one model."""
    resolver = make_resolver()

    assert resolver.resolve("claude") == "anthropic/claude-3.5-sonnet"


def test_unique_name_substring_resolves() -> None:
    """Fall back to display names when no id contains the query."""
    resolver = make_resolver()

    assert resolver.resolve("Meta: Llama") == "meta-llama/llama-3-8b"


def test_ambiguous_query_lists_candidates() -> None:
    """Fail with every candidate when several ids match."""
    resolver = make_resolver()

    with pytest.raises(AmbiguousError) as exc_info:
        resolver.resolve("gpt")

    error = exc_info.value
    candidate_ids = [m.id for m in error.candidates]
    assert candidate_ids == ["openai/gpt-4", "openai/gpt-4-turbo"]
    assert error.code == "AMBIGUOUS"
    assert error.exit_code == 4
    assert "openai/gpt-4-turbo  OpenAI: GPT-4 Turbo" in error.message
    assert error.suggestions[0].endswith("or-pricing price openai/gpt-4")


def test_ambiguous_suggestions_are_capped() -> None:
    """Show 15 candidates, summarize the rest and suggest at most 5."""
    resolver = ModelResolver(
        [make_model(f"vendor/model-{i:02d}") for i in range(20)]
    )

    with pytest.raises(AmbiguousError) as exc_info:
        resolver.resolve("model")

    error = exc_info.value
    candidate_ids = {m.id for m in error.candidates}
    suggested = [s.rsplit(" ", 1)[-1] for s in error.suggestions]
    assert len(error.candidates) == 20
    assert len(suggested) == 5
    assert set(suggested) <= candidate_ids
    assert "vendor/model-14" in error.message
    assert "vendor/model-15" not in error.message
    assert "... and 5 more" in error.message


def test_id_matches_precede_name_matches() -> None:
    """Order ambiguous candidates id matches first, then name matches."""
    resolver = ModelResolver(
        [
            make_model("a/other", "Alpha Prime"),
            make_model("c/alpha-2", "Gamma"),
            make_model("b/alpha-1", "Beta Alpha"),
        ]
    )

    with pytest.raises(AmbiguousError) as exc_info:
        resolver.resolve("alpha")

    candidate_ids = [m.id for m in exc_info.value.candidates]
    assert candidate_ids == ["b/alpha-1", "c/alpha-2", "a/other"]


def test_unknown_query_is_not_found() -> None:
    """Fail with remediation hints when nothing matches."""
    resolver = make_resolver()

    with pytest.raises(NotFoundError) as exc_info:
        resolver.resolve("does-not-exist")

    assert exc_info.value.exit_code == 3
    assert exc_info.value.suggestions
