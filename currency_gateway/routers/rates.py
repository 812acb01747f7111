from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from currency_gateway.core.security import require_admin, require_user
from currency_gateway.models.rates import (
    ConversionResponse,
    LatestRatesResponse,
    PaginatedHistoricalRatesResponse,
)
from currency_gateway.services.rates.base import RateProvider
from currency_gateway.services.rates.resolver import ProviderResolver

"""Rates router.

Endpoints:
    - GET /rates/latest?baseCurrency=USD                  -> latest rates (User)
    - GET /convert?from=USD&to=EUR&amount=100             -> conversion (User)
    - GET /rates/historical?baseCurrency=...&startDate=...
          &endDate=...&page=1&pageSize=10                 -> paginated history (Admin)

The provider answering each call is picked from the X-Currency-Provider header.
Providers report "no result" as None, mapped here to 404; unsupported
operations surface as 501 through the app's exception handler.
"""

router = APIRouter(tags=["rates"])

# Largest amount and finest precision accepted by /convert
MAX_AMOUNT = Decimal("1E+15")
MAX_AMOUNT_SCALE = 10


def get_resolver(request: Request) -> ProviderResolver:
    return request.app.state.resolver


def get_rate_provider(
    request: Request, resolver: ProviderResolver = Depends(get_resolver)
) -> RateProvider:
    return resolver.resolve(request)


def _is_blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


def _is_valid_amount(amount: Optional[Decimal]) -> bool:
    if amount is None or not amount.is_finite():
        return False
    if amount <= 0 or amount > MAX_AMOUNT:
        return False
    return -amount.normalize().as_tuple().exponent <= MAX_AMOUNT_SCALE


@router.get(
    "/rates/latest",
    response_model=LatestRatesResponse,
    summary="Latest rates for a base currency",
)
async def get_latest_rates(
    base_currency: Optional[str] = Query(None, alias="baseCurrency"),
    _: str = Depends(require_user),
    provider: RateProvider = Depends(get_rate_provider),
):
    if _is_blank(base_currency):
        raise HTTPException(status_code=400, detail="Base currency cannot be empty.")
    base_currency = base_currency.strip().upper()
    result = await provider.get_latest_rates(base_currency)
    if result is None:
        raise HTTPException(
            status_code=404, detail=f"Rates for base currency '{base_currency}' not found."
        )
    return result


@router.get(
    "/convert",
    response_model=ConversionResponse,
    summary="Convert an amount between two currencies",
)
async def convert(
    from_currency: Optional[str] = Query(None, alias="from"),
    to_currency: Optional[str] = Query(None, alias="to"),
    amount: Optional[Decimal] = Query(None),
    _: str = Depends(require_user),
    provider: RateProvider = Depends(get_rate_provider),
):
    if _is_blank(from_currency) or _is_blank(to_currency) or not _is_valid_amount(amount):
        raise HTTPException(
            status_code=400,
            detail=(
                "'from', 'to' and 'amount' parameters are required and amount must be "
                f"positive, at most {MAX_AMOUNT:f} with up to {MAX_AMOUNT_SCALE} decimal places."
            ),
        )
    from_currency = from_currency.strip().upper()
    to_currency = to_currency.strip().upper()
    if provider.is_excluded(from_currency) or provider.is_excluded(to_currency):
        raise HTTPException(
            status_code=400,
            detail="Currency conversion involving TRY, PLN, THB, or MXN is not supported.",
        )
    result = await provider.convert(from_currency, to_currency, amount)
    if result is None:
        raise HTTPException(status_code=404, detail="Could not perform currency conversion.")
    return result


@router.get(
    "/rates/historical",
    response_model=PaginatedHistoricalRatesResponse,
    summary="Paginated historical rates for a date range",
)
async def get_historical_rates(
    base_currency: Optional[str] = Query(None, alias="baseCurrency"),
    start_date: Optional[date] = Query(None, alias="startDate"),
    end_date: Optional[date] = Query(None, alias="endDate"),
    page: Optional[int] = Query(None),
    page_size: Optional[int] = Query(None, alias="pageSize"),
    _: str = Depends(require_admin),
    provider: RateProvider = Depends(get_rate_provider),
):
    if (
        _is_blank(base_currency)
        or start_date is None
        or end_date is None
        or page is None
        or page_size is None
        or page <= 0
        or page_size <= 0
    ):
        raise HTTPException(
            status_code=400,
            detail="All parameters (baseCurrency, startDate, endDate, page, pageSize) are required and must be valid.",
        )
    if start_date > end_date:
        raise HTTPException(status_code=400, detail="startDate cannot be after endDate.")
    result = await provider.get_historical_rates(
        base_currency.strip().upper(), start_date, end_date, page, page_size
    )
    if result is None:
        raise HTTPException(status_code=404, detail="Could not retrieve historical rates.")
    return result
