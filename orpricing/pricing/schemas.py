"""Pydantic shapes of the OpenRouter API payloads this tool consumes."""

from __future__ import annotations

from decimal import Decimal, InvalidOperation

import pydantic
from pydantic import BaseModel, ConfigDict, Field

from orpricing.pricing.models import CatalogModel, ProviderEndpoint


class ApiPricing(BaseModel):
    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    prompt: str
    completion: str

    @pydantic.field_validator("prompt", "completion")
    @classmethod
    def validate_decimal(cls: type["ApiPricing"], value: str) -> str:
        """Ensure per-token prices parse as decimals."""
        try:
            Decimal(value)
        except InvalidOperation as exc:
            raise ValueError(f"Price is not a decimal: {value!r}") from exc
        return value


class ApiEndpointPricing(ApiPricing):
    discount: float | None = None


class ApiModel(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str = Field(min_length=1)
    name: str
    context_length: int = Field(default=0, ge=0)
    pricing: ApiPricing

    def to_catalog_model(self) -> CatalogModel:
        """Convert the payload into the immutable catalog entry."""
        return CatalogModel(
            id=self.id,
            name=self.name,
            context_length=self.context_length,
            prompt=self.pricing.prompt,
            completion=self.pricing.completion,
        )


class ApiModelsResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    data: list[ApiModel]


class ApiEndpoint(BaseModel):
    model_config = ConfigDict(extra="ignore")

    provider_name: str
    quantization: str | None = None
    pricing: ApiEndpointPricing
    status: int | None = None
    uptime_last_30m: float | None = None

    def to_provider_endpoint(self) -> ProviderEndpoint:
        """Convert the payload into a raw provider endpoint."""
        return ProviderEndpoint(
            provider_name=self.provider_name,
            quantization=self.quantization,
            prompt=self.pricing.prompt,
            completion=self.pricing.completion,
            discount=self.pricing.discount,
            status=self.status,
            uptime_last_30m=self.uptime_last_30m,
        )


class ApiEndpointsData(BaseModel):
    model_config = ConfigDict(extra="ignore")

    endpoints: list[ApiEndpoint]


class ApiEndpointsResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    data: ApiEndpointsData
