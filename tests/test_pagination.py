"""Date-series pagination tests."""

from datetime import date, timedelta

import pytest

from currency_gateway.services.rates.pagination import paginate

SERIES = {date(2023, 1, 1) + timedelta(days=i): {"EUR": i} for i in reversed(range(5))}


def test_second_page_holds_third_and_fourth_dates():
    window = paginate(SERIES, page=2, page_size=2)
    assert list(window.items) == [date(2023, 1, 3), date(2023, 1, 4)]
    assert window.total_items == 5
    assert window.total_pages == 3


def test_last_page_is_partial():
    window = paginate(SERIES, page=3, page_size=2)
    assert list(window.items) == [date(2023, 1, 5)]


def test_page_past_the_end_is_empty_with_totals():
    window = paginate(SERIES, page=10, page_size=2)
    assert window.items == {}
    assert window.page == 10
    assert window.page_size == 2
    assert window.total_items == 5
    assert window.total_pages == 3


def test_empty_series():
    window = paginate({}, page=1, page_size=3)
    assert window.items == {}
    assert window.total_items == 0
    assert window.total_pages == 0


@pytest.mark.parametrize("page,page_size", [(0, 1), (1, 0), (-1, 5)])
def test_rejects_non_positive_page_arguments(page, page_size):
    with pytest.raises(ValueError):
        paginate(SERIES, page=page, page_size=page_size)
