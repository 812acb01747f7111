"""Exclusion policy tests."""

import pytest

from currency_gateway.services.rates.exclusion import EXCLUDED_CURRENCIES, filter_rates, is_excluded


@pytest.mark.parametrize("code", ["TRY", "PLN", "THB", "MXN", "try", "Pln", "thB", "mxn"])
def test_excluded_codes_any_case(code):
    assert is_excluded(code) is True


@pytest.mark.parametrize("code", ["USD", "EUR", "gbp", "JPY", "CHF"])
def test_other_codes_not_excluded(code):
    assert is_excluded(code) is False


def test_filter_rates_drops_only_excluded_keys():
    rates = {"EUR": 0.9, "TRY": 30.0, "pln": 4.0, "GBP": 0.8}
    assert filter_rates(rates) == {"EUR": 0.9, "GBP": 0.8}


def test_filter_rates_may_return_empty():
    assert filter_rates({code: 1 for code in EXCLUDED_CURRENCIES}) == {}
