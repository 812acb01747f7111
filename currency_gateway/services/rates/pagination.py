from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date
from typing import Dict, Generic, Mapping, TypeVar

V = TypeVar("V")


@dataclass(frozen=True)
class Page(Generic[V]):
    page: int
    page_size: int
    total_items: int
    total_pages: int
    items: Dict[date, V]


def paginate(series: Mapping[date, V], page: int, page_size: int) -> Page[V]:
    """Slice a date-keyed series into one 1-based page, oldest date first.

    A page past the end is empty but still reports the real totals.
    """
    if page < 1 or page_size < 1:
        raise ValueError("page and page_size must be >= 1")
    total_items = len(series)
    total_pages = math.ceil(total_items / page_size)
    start = (page - 1) * page_size
    days = sorted(series)[start : start + page_size]
    return Page(
        page=page,
        page_size=page_size,
        total_items=total_items,
        total_pages=total_pages,
        items={d: series[d] for d in days},
    )
