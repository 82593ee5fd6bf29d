from __future__ import annotations

import logging
from types import TracebackType

import httpx
import pydantic

from orpricing.cache import TimedCache
from orpricing.constants import (
    API_BASE,
    HTTP_TIMEOUT_SECONDS,
    MODELS_CACHE_FILE,
    USER_AGENT,
)
from orpricing.engine.exceptions import NetworkError, ScrapeError
from orpricing.pricing.models import CatalogModel, ProviderEndpoint
from orpricing.pricing.schemas import ApiEndpointsResponse, ApiModelsResponse

logger = logging.getLogger(__name__)


class OpenRouterClient:
    """Catalog, endpoint and page fetches against OpenRouter.

    Only the catalog goes through the timed cache; endpoint and page fetches
    always hit the network. Failures are raised, never retried.
    """

    def __init__(
        self,
        cache: TimedCache,
        http_client: httpx.Client | None = None,
        base_url: str = API_BASE,
    ) -> None:
        self._cache = cache
        self._base_url = base_url.rstrip("/")
        self._owns_client = http_client is None
        self._http = http_client or httpx.Client(
            timeout=HTTP_TIMEOUT_SECONDS,
            follow_redirects=True,
        )
        self._models: list[CatalogModel] | None = None

    def __enter__(self) -> OpenRouterClient:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def close(self) -> None:
        if self._owns_client:
            self._http.close()

    def fetch_models(self) -> list[CatalogModel]:
        """Return the catalog snapshot, served from cache while fresh."""
        if self._models is not None:
            return self._models

        cached = self._cache.read(MODELS_CACHE_FILE)
        if cached is not None:
            try:
                self._models = self._parse_models(cached)
                return self._models
            except pydantic.ValidationError:
                logger.warning(
                    "cache_corrupt",
                    extra={
                        "event": "cache_corrupt",
                        "cache_file": MODELS_CACHE_FILE,
                    },
                )

        url = f"{self._base_url}/models"
        try:
            response = self._http.get(url)
        except httpx.HTTPError as exc:
            raise NetworkError(
                "failed to fetch model list from OpenRouter API",
                suggestions=[
                    "Check your internet connection",
                    "Try again in a moment",
                ],
                details={"reason": str(exc)},
            ) from exc

        if response.is_error:
            raise NetworkError(
                f"OpenRouter API returned {response.status_code}",
                suggestions=[
                    "OpenRouter API may be down, try again",
                    "Check https://status.openrouter.ai",
                ],
                details={"status_code": response.status_code},
            )

        try:
            models = self._parse_models(response.text)
        except pydantic.ValidationError as exc:
            raise NetworkError(
                "OpenRouter API returned an unexpected model list",
                details={"reason": str(exc)},
            ) from exc

        self._cache.write(MODELS_CACHE_FILE, response.text)
        logger.info(
            "models_fetched",
            extra={"event": "models_fetched", "count": len(models)},
        )
        self._models = models
        return models

    def get_model(self, model_id: str) -> CatalogModel | None:
        for model in self.fetch_models():
            if model.id == model_id:
                return model
        return None

    def fetch_endpoints(self, model_id: str) -> list[ProviderEndpoint]:
        """Return the current provider endpoints for a canonical model id."""
        url = f"{self._base_url}/models/{model_id}/endpoints"
        try:
            response = self._http.get(url)
        except httpx.HTTPError as exc:
            raise NetworkError(
                f"failed to fetch endpoints for {model_id}",
                suggestions=[
                    "Check your internet connection",
                    "Try again in a moment",
                ],
                details={"reason": str(exc)},
            ) from exc

        if response.is_error:
            raise NetworkError(
                (
                    f"OpenRouter API returned {response.status_code} "
                    f"for {model_id} endpoints"
                ),
                suggestions=[
                    "Verify the model ID exists",
                    "OpenRouter API may be temporarily unavailable",
                ],
                details={"status_code": response.status_code},
            )

        try:
            payload = ApiEndpointsResponse.model_validate_json(response.text)
        except pydantic.ValidationError as exc:
            raise NetworkError(
                f"OpenRouter API returned unexpected endpoints for {model_id}",
                details={"reason": str(exc)},
            ) from exc

        logger.info(
            "endpoints_fetched",
            extra={
                "event": "endpoints_fetched",
                "model": model_id,
                "count": len(payload.data.endpoints),
            },
        )
        return [ep.to_provider_endpoint() for ep in payload.data.endpoints]

    def fetch_page(self, url: str) -> str:
        """Fetch raw HTML for scraping."""
        try:
            response = self._http.get(url, headers={"User-Agent": USER_AGENT})
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise ScrapeError(
                f"failed to fetch {url}: HTTP {exc.response.status_code}",
                details={"status_code": exc.response.status_code},
            ) from exc
        except httpx.HTTPError as exc:
            raise ScrapeError(f"failed to fetch {url}: {exc}") from exc

        logger.info(
            "page_fetched", extra={"event": "page_fetched", "url": url}
        )
        return response.text

    @staticmethod
    def _parse_models(text: str) -> list[CatalogModel]:
        payload = ApiModelsResponse.model_validate_json(text)
        return [model.to_catalog_model() for model in payload.data]
