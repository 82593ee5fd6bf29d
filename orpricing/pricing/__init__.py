"""Pricing data package exports."""

from orpricing.pricing.client import OpenRouterClient

__all__ = ["OpenRouterClient"]
