from __future__ import annotations

"""Rate provider abstraction.

Every provider answers the same four questions; a provider that cannot answer
one raises ProviderOperationNotSupported so callers can tell a capability gap
apart from a missing result (None).
"""
from abc import ABC, abstractmethod
from datetime import date
from decimal import Decimal
from typing import Optional

from currency_gateway.models.rates import (
    ConversionResponse,
    LatestRatesResponse,
    PaginatedHistoricalRatesResponse,
)


class ProviderOperationNotSupported(NotImplementedError):
    """Raised when a provider does not implement an operation at all."""


class RateProvider(ABC):
    name: str = ""

    @abstractmethod
    async def get_latest_rates(self, base_currency: str) -> Optional[LatestRatesResponse]:
        """Latest rates relative to base_currency, or None if unavailable."""
        raise NotImplementedError

    @abstractmethod
    async def convert(
        self, from_currency: str, to_currency: str, amount: Decimal
    ) -> Optional[ConversionResponse]:
        raise NotImplementedError

    @abstractmethod
    async def get_historical_rates(
        self,
        base_currency: str,
        start_date: date,
        end_date: date,
        page: int,
        page_size: int,
    ) -> Optional[PaginatedHistoricalRatesResponse]:
        raise NotImplementedError

    @abstractmethod
    def is_excluded(self, currency: str) -> bool:
        raise NotImplementedError
