from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from orpricing.pricing.models import CatalogModel


class PricingError(Exception):
    code = "GENERAL_ERROR"
    exit_code = 1

    def __init__(
        self,
        message: str,
        *,
        suggestions: list[str] | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Create a structured error carrying remediation suggestions."""
        super().__init__(message)
        self.message = message
        self.suggestions = list(suggestions or [])
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Return the machine-readable error envelope."""
        payload: dict[str, Any] = {
            "error": True,
            "code": self.code,
            "message": self.message,
            "exitCode": self.exit_code,
        }
        if self.suggestions:
            payload["suggestions"] = self.suggestions
        return payload


class NetworkError(PricingError):
    code = "NETWORK_ERROR"
    exit_code = 2


class NotFoundError(PricingError):
    code = "NOT_FOUND"
    exit_code = 3


class AmbiguousError(PricingError):
    code = "AMBIGUOUS"
    exit_code = 4

    def __init__(
        self,
        message: str,
        *,
        candidates: list[CatalogModel],
        suggestions: list[str] | None = None,
    ) -> None:
        """Create an ambiguity error holding every matching model."""
        super().__init__(
            message,
            suggestions=suggestions,
            details={"candidates": [model.id for model in candidates]},
        )
        self.candidates = candidates


class ConfigError(PricingError):
    code = "CONFIG_ERROR"
    exit_code = 5


class ScrapeError(PricingError):
    code = "SCRAPE_ERROR"
    exit_code = 6


class InvalidInputError(PricingError):
    code = "INVALID_INPUT"
    exit_code = 7
