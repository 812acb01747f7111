import asyncio
import inspect
import pathlib
import sys
from typing import Any, Dict, List, Mapping, Optional, Tuple

import pytest

ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from currency_gateway.services.http_client import HttpError  # noqa: E402


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers used in the suite."""

    config.addinivalue_line("markers", "asyncio: mark test as running in an asyncio event loop")


@pytest.hookimpl(tryfirst=True)
def pytest_pyfunc_call(pyfuncitem: pytest.Function) -> bool | None:
    """Execute async test functions without requiring pytest-asyncio."""

    test_function = pyfuncitem.obj
    if inspect.iscoroutinefunction(test_function):
        loop = asyncio.new_event_loop()
        try:
            asyncio.set_event_loop(loop)
            funcargs = {
                name: pyfuncitem.funcargs[name] for name in pyfuncitem._fixtureinfo.argnames
            }
            loop.run_until_complete(test_function(**funcargs))
        finally:
            asyncio.set_event_loop(None)
            loop.close()
        return True
    return None


class StubFetcher:
    """Records every upstream call and answers from a path -> payload table.

    Values may be callables taking the query params. A missing path or an
    HttpError value behaves like a failed upstream call.
    """

    def __init__(self, responses: Optional[Dict[str, Any]] = None) -> None:
        self.responses: Dict[str, Any] = responses or {}
        self.calls: List[Tuple[str, Dict[str, Any]]] = []

    async def get_json(
        self, path: str, params: Optional[Mapping[str, Any]] = None
    ) -> Dict[str, Any]:
        self.calls.append((path, dict(params or {})))
        result = self.responses.get(path)
        if callable(result):
            result = result(dict(params or {}))
        if result is None:
            raise HttpError(f"HTTP 404 for {path}")
        if isinstance(result, Exception):
            raise result
        return result


class FakeClock:
    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


LATEST_USD = {
    "amount": 1.0,
    "base": "USD",
    "date": "2024-01-01",
    "rates": {"EUR": 0.9, "GBP": 0.78, "TRY": 30.1, "PLN": 3.95, "JPY": 141.2},
}

CONVERT_USD_EUR_100 = {
    "amount": 100.0,
    "base": "USD",
    "date": "2024-01-01",
    "rates": {"EUR": 90.0},
}


def latest_route(params: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    if "amount" in params:
        if (params["from"], params["to"]) == ("USD", "EUR"):
            payload = dict(CONVERT_USD_EUR_100)
            payload["amount"] = float(params["amount"])
            payload["rates"] = {"EUR": round(float(params["amount"]) * 0.9, 4)}
            return payload
        return None
    if params.get("from") == "USD":
        return LATEST_USD
    return None


HISTORICAL_USD = {
    "amount": 1.0,
    "base": "USD",
    "start_date": "2023-01-01",
    "end_date": "2023-01-05",
    "rates": {
        "2023-01-05": {"EUR": 0.94, "THB": 34.4},
        "2023-01-01": {"EUR": 0.93, "MXN": 19.5},
        "2023-01-03": {"EUR": 0.95, "PLN": 4.4, "GBP": 0.83},
        "2023-01-02": {"EUR": 0.935},
        "2023-01-04": {"EUR": 0.945, "TRY": 18.7},
    },
}


@pytest.fixture
def stub_fetcher() -> StubFetcher:
    return StubFetcher(
        {
            "latest": latest_route,
            "2023-01-01..2023-01-05": HISTORICAL_USD,
        }
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()
