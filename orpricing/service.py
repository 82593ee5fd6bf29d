from __future__ import annotations

import logging
import time
from collections.abc import Callable, Sequence

from orpricing.constants import ENDPOINT_DELAY_SECONDS
from orpricing.engine import (
    InvalidInputError,
    ModelResolver,
    NotFoundError,
    aggregate,
    count_healthy,
)
from orpricing.engine.aggregator import headline_per_million
from orpricing.leaderboard.store import LeaderboardStore
from orpricing.pricing.client import OpenRouterClient
from orpricing.pricing.models import (
    AgentConfig,
    CatalogModel,
    CompareEntry,
    LeaderboardSnapshot,
    LeaderboardTarget,
    PriceReport,
    SearchEntry,
)

logger = logging.getLogger(__name__)


class PricingService:
    """Command-level operations over the catalog, endpoints and leaderboard.

    Multi-model commands look up endpoints one at a time with a fixed pause
    between requests.
    """

    def __init__(
        self,
        client: OpenRouterClient,
        leaderboards: LeaderboardStore,
        delay_seconds: float = ENDPOINT_DELAY_SECONDS,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._client = client
        self._leaderboards = leaderboards
        self._delay_seconds = delay_seconds
        self._sleep = sleep

    def resolve(self, query: str) -> str:
        return ModelResolver(self._client.fetch_models()).resolve(query)

    def search(self, query: str) -> list[SearchEntry]:
        """List catalog models whose id or name contains the query."""
        q = query.lower()
        matches = sorted(
            (
                m
                for m in self._client.fetch_models()
                if q in m.id.lower() or q in m.name.lower()
            ),
            key=lambda m: m.id,
        )
        if not matches:
            raise NotFoundError(f"no models found matching '{query}'")

        return [
            SearchEntry(
                id=m.id,
                name=m.name,
                context=m.context_length,
                prompt_per_m=headline_per_million(m.prompt),
                completion_per_m=headline_per_million(m.completion),
            )
            for m in matches
        ]

    def price(self, query: str) -> PriceReport:
        """Resolve a model and report headline and expected pricing."""
        model = self._require_model(self.resolve(query))
        pricing = aggregate(self._client.fetch_endpoints(model.id))
        return PriceReport(
            id=model.id,
            name=model.name,
            context_length=model.context_length,
            headline_prompt=headline_per_million(model.prompt),
            headline_completion=headline_per_million(model.completion),
            expected_prompt=pricing.prompt_expected,
            expected_completion=pricing.completion_expected,
            providers=pricing.providers,
        )

    def compare(self, queries: Sequence[str]) -> list[CompareEntry]:
        if len(queries) < 2:
            raise InvalidInputError("compare requires at least 2 models")

        # resolve everything before spending any endpoint requests
        model_ids = [self.resolve(q) for q in queries]
        models = [self._require_model(mid) for mid in model_ids]
        return self._compare_models(models)

    def configured(self, config: AgentConfig) -> list[CompareEntry]:
        """Compare every model configured for the local agent.

        Ids missing from the catalog are skipped with a warning.
        """
        models: list[CatalogModel] = []
        for model_id in config.model_ids:
            model = self._client.get_model(model_id)
            if model is None:
                logger.warning(
                    "configured_model_missing",
                    extra={
                        "event": "configured_model_missing",
                        "model": model_id,
                    },
                )
                continue
            models.append(model)

        return self._compare_models(
            models, primary=config.primary, mark_primary=True
        )

    def leaderboard(
        self,
        target: LeaderboardTarget,
        refresh: bool = False,
    ) -> LeaderboardSnapshot | None:
        """Return the cached leaderboard, scraping first when asked."""
        if refresh:
            self._leaderboards.refresh(target)
        return self._leaderboards.load(target)

    def seed_leaderboard(self, target: LeaderboardTarget, text: str) -> int:
        return self._leaderboards.update_from_json(target, text)

    def _compare_models(
        self,
        models: Sequence[CatalogModel],
        primary: str | None = None,
        mark_primary: bool = False,
    ) -> list[CompareEntry]:
        entries: list[CompareEntry] = []
        for index, model in enumerate(models):
            if index > 0:
                self._sleep(self._delay_seconds)

            pricing = aggregate(self._client.fetch_endpoints(model.id))
            entries.append(
                CompareEntry(
                    id=model.id,
                    name=model.name,
                    context=model.context_length,
                    headline_prompt=headline_per_million(model.prompt),
                    headline_completion=headline_per_million(
                        model.completion
                    ),
                    expected_prompt=pricing.prompt_expected,
                    expected_completion=pricing.completion_expected,
                    providers=len(pricing.providers),
                    healthy=count_healthy(pricing.providers),
                    primary=model.id == primary if mark_primary else None,
                )
            )
        return entries

    def _require_model(self, model_id: str) -> CatalogModel:
        model = self._client.get_model(model_id)
        if model is None:
            raise NotFoundError(f"model '{model_id}' is not in the catalog")
        return model
