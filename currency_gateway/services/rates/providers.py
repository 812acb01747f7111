from __future__ import annotations

"""Concrete rate providers and the provider registry.

'FrankfurterRateProvider' serves live data from the Frankfurter API through the
resilient fetcher and the shared response cache. 'DummyRateProvider' answers
conversions with a fixed multiplier and nothing else; it exists for demos and
for exercising provider selection.
"""
import logging
from datetime import date, datetime, timezone
from decimal import Decimal
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Protocol, Type, TypeVar

from pydantic import BaseModel, ValidationError

from currency_gateway.core.constants import DUMMY_PROVIDER, FRANKFURTER_PROVIDER
from currency_gateway.models.rates import (
    ConversionResponse,
    FrankfurterHistoricalPayload,
    FrankfurterLatestPayload,
    LatestRatesResponse,
    PaginatedHistoricalRatesResponse,
)
from currency_gateway.services.http_client import HttpError
from .base import ProviderOperationNotSupported, RateProvider
from .cache_service import ResponseCache, cache_key
from .exclusion import filter_rates, is_excluded
from .pagination import paginate

logger = logging.getLogger("currency_gateway.providers")

DUMMY_MULTIPLIER = Decimal("1.2")
LATEST_TTL_SECONDS = 3600
HISTORICAL_TTL_SECONDS = 86400

P = TypeVar("P", bound=BaseModel)


class SupportsGetJson(Protocol):
    async def get_json(
        self, path: str, params: Optional[Mapping[str, Any]] = None
    ) -> Dict[str, Any]: ...


def format_amount(amount: Decimal) -> str:
    """Canonical text for an amount: 100, 100.0 and 1E+2 all give '100'."""
    return format(Decimal(amount).normalize(), "f")


class FrankfurterRateProvider(RateProvider):
    name = FRANKFURTER_PROVIDER

    def __init__(
        self,
        fetcher: SupportsGetJson,
        cache: ResponseCache,
        *,
        latest_ttl_seconds: int = LATEST_TTL_SECONDS,
        historical_ttl_seconds: int = HISTORICAL_TTL_SECONDS,
    ):
        self._fetcher = fetcher
        self._cache = cache
        self._latest_ttl = latest_ttl_seconds
        self._historical_ttl = historical_ttl_seconds

    def is_excluded(self, currency: str) -> bool:
        return is_excluded(currency)

    async def _fetch(
        self, path: str, params: Mapping[str, Any], model: Type[P]
    ) -> Optional[P]:
        try:
            data = await self._fetcher.get_json(path, params=params)
        except HttpError as e:
            logger.error("upstream fetch failed for %s %s: %s", path, dict(params), e)
            return None
        try:
            return model.model_validate(data)
        except ValidationError as e:
            logger.error("unparseable upstream payload for %s: %s", path, e)
            return None

    async def get_latest_rates(self, base_currency: str) -> Optional[LatestRatesResponse]:
        base_currency = base_currency.upper()

        async def load() -> Optional[LatestRatesResponse]:
            payload = await self._fetch("latest", {"from": base_currency}, FrankfurterLatestPayload)
            if payload is None:
                return None
            return LatestRatesResponse(
                base=payload.base, date=payload.date, rates=filter_rates(payload.rates)
            )

        return await self._cache.get_or_create(
            cache_key("latest", base_currency), load, self._latest_ttl
        )

    async def convert(
        self, from_currency: str, to_currency: str, amount: Decimal
    ) -> Optional[ConversionResponse]:
        from_currency = from_currency.upper()
        to_currency = to_currency.upper()
        amount_text = format_amount(amount)

        async def load() -> Optional[ConversionResponse]:
            payload = await self._fetch(
                "latest",
                {"amount": amount_text, "from": from_currency, "to": to_currency},
                FrankfurterLatestPayload,
            )
            if payload is None:
                return None
            converted = payload.rates.get(to_currency)
            if converted is None:
                logger.error("upstream conversion payload lacks target %s", to_currency)
                return None
            return ConversionResponse(
                amount=payload.amount,
                base=payload.base,
                date=payload.date,
                rates={to_currency: converted},
            )

        return await self._cache.get_or_create(
            cache_key("convert", from_currency, to_currency, amount_text),
            load,
            self._latest_ttl,
        )

    async def _historical_series(
        self, base_currency: str, start_date: date, end_date: date
    ) -> Optional[FrankfurterHistoricalPayload]:
        start, end = start_date.isoformat(), end_date.isoformat()

        async def load() -> Optional[FrankfurterHistoricalPayload]:
            return await self._fetch(
                f"{start}..{end}", {"from": base_currency}, FrankfurterHistoricalPayload
            )

        # Cached unfiltered so exclusion changes apply without a refetch
        return await self._cache.get_or_create(
            cache_key("historical", base_currency, start, end), load, self._historical_ttl
        )

    async def get_historical_rates(
        self,
        base_currency: str,
        start_date: date,
        end_date: date,
        page: int,
        page_size: int,
    ) -> Optional[PaginatedHistoricalRatesResponse]:
        base_currency = base_currency.upper()
        series = await self._historical_series(base_currency, start_date, end_date)
        if series is None:
            return None
        filtered = {day: filter_rates(rates) for day, rates in series.rates.items()}
        window = paginate(filtered, page, page_size)
        return PaginatedHistoricalRatesResponse(
            base=series.base,
            start_date=series.start_date,
            end_date=series.end_date,
            page=window.page,
            page_size=window.page_size,
            total_items=window.total_items,
            total_pages=window.total_pages,
            rates=window.items,
        )


class DummyRateProvider(RateProvider):
    name = DUMMY_PROVIDER

    def is_excluded(self, currency: str) -> bool:  # type: ignore[override]
        return False

    async def convert(
        self, from_currency: str, to_currency: str, amount: Decimal
    ) -> Optional[ConversionResponse]:
        to_currency = to_currency.upper()
        return ConversionResponse(
            amount=amount,
            base=from_currency.upper(),
            date=datetime.now(timezone.utc).date(),
            rates={to_currency: amount * DUMMY_MULTIPLIER},
        )

    async def get_latest_rates(self, base_currency: str) -> Optional[LatestRatesResponse]:
        raise ProviderOperationNotSupported(
            "This is a dummy provider and does not implement latest rates."
        )

    async def get_historical_rates(
        self,
        base_currency: str,
        start_date: date,
        end_date: date,
        page: int,
        page_size: int,
    ) -> Optional[PaginatedHistoricalRatesResponse]:
        raise ProviderOperationNotSupported(
            "This is a dummy provider and does not implement historical rates."
        )


def build_provider_registry(
    fetcher: SupportsGetJson,
    cache: ResponseCache,
    *,
    latest_ttl_seconds: int = LATEST_TTL_SECONDS,
    historical_ttl_seconds: int = HISTORICAL_TTL_SECONDS,
    extra: Optional[Mapping[str, RateProvider]] = None,
) -> Mapping[str, RateProvider]:
    """Build the read-only identifier -> provider mapping used for the process lifetime."""
    providers: Dict[str, RateProvider] = {
        FRANKFURTER_PROVIDER: FrankfurterRateProvider(
            fetcher,
            cache,
            latest_ttl_seconds=latest_ttl_seconds,
            historical_ttl_seconds=historical_ttl_seconds,
        ),
        DUMMY_PROVIDER: DummyRateProvider(),
    }
    if extra:
        providers.update(extra)
    return MappingProxyType(providers)
