"""Currencies the gateway refuses to quote."""

from __future__ import annotations

from typing import Dict, FrozenSet, Mapping, TypeVar

EXCLUDED_CURRENCIES: FrozenSet[str] = frozenset({"TRY", "PLN", "THB", "MXN"})

V = TypeVar("V")


def is_excluded(currency: str) -> bool:
    return currency.upper() in EXCLUDED_CURRENCIES


def filter_rates(rates: Mapping[str, V]) -> Dict[str, V]:
    return {code: value for code, value in rates.items() if not is_excluded(code)}
