"""Pydantic models for upstream payloads and gateway responses."""

from .rates import (
    ConversionResponse,
    FrankfurterHistoricalPayload,
    FrankfurterLatestPayload,
    LatestRatesResponse,
    PaginatedHistoricalRatesResponse,
)  # re-export

__all__ = [
    "ConversionResponse",
    "FrankfurterHistoricalPayload",
    "FrankfurterLatestPayload",
    "LatestRatesResponse",
    "PaginatedHistoricalRatesResponse",
]
