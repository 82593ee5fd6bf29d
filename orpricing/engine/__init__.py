"""Engine package exports."""

from orpricing.engine.aggregator import aggregate, count_healthy
from orpricing.engine.exceptions import (
    AmbiguousError,
    ConfigError,
    InvalidInputError,
    NetworkError,
    NotFoundError,
    PricingError,
    ScrapeError,
)
from orpricing.engine.resolver import ModelResolver

__all__ = [
    "AmbiguousError",
    "ConfigError",
    "InvalidInputError",
    "ModelResolver",
    "NetworkError",
    "NotFoundError",
    "PricingError",
    "ScrapeError",
    "aggregate",
    "count_healthy",
]
