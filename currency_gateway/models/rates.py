from __future__ import annotations

import datetime as dt
from decimal import Decimal
from typing import Annotated, Dict

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer, field_validator
from pydantic.alias_generators import to_camel

# Rates stay Decimal in Python but go out as JSON numbers
Rate = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]
RateSet = Dict[str, Rate]


def _upper_keys(rates: Dict[str, object]) -> Dict[str, object]:
    return {code.upper(): value for code, value in rates.items()}


# Upstream (Frankfurter) payloads -------------------------------------------
class FrankfurterLatestPayload(BaseModel):
    amount: Decimal
    base: str
    date: dt.date
    rates: Dict[str, Decimal]

    @field_validator("base")
    @classmethod
    def upper_base(cls, v: str) -> str:
        return v.upper()

    @field_validator("rates", mode="before")
    @classmethod
    def upper_codes(cls, v):  # type: ignore[no-untyped-def]
        return _upper_keys(v) if isinstance(v, dict) else v


class FrankfurterHistoricalPayload(BaseModel):
    amount: Decimal
    base: str
    start_date: dt.date
    end_date: dt.date
    rates: Dict[dt.date, Dict[str, Decimal]]

    @field_validator("base")
    @classmethod
    def upper_base(cls, v: str) -> str:
        return v.upper()

    @field_validator("rates", mode="before")
    @classmethod
    def upper_codes(cls, v):  # type: ignore[no-untyped-def]
        if not isinstance(v, dict):
            return v
        return {day: _upper_keys(r) if isinstance(r, dict) else r for day, r in v.items()}


# Produced results -----------------------------------------------------------
class LatestRatesResponse(BaseModel):
    base: str
    date: dt.date
    rates: RateSet


class ConversionResponse(BaseModel):
    amount: Rate
    base: str
    date: dt.date
    rates: RateSet = Field(..., description="Exactly one entry: target currency -> converted amount")


class PaginatedHistoricalRatesResponse(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    base: str
    start_date: dt.date
    end_date: dt.date
    page: int
    page_size: int
    total_items: int
    total_pages: int
    rates: Dict[dt.date, RateSet]
