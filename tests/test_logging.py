"""JSON log formatting and request context propagation."""

from __future__ import annotations

import json
import logging
import sys

from fastapi.testclient import TestClient
from starlette.requests import Request

from currency_gateway.core.config import Settings
from currency_gateway.core.constants import CURRENCY_PROVIDER_HEADER, DUMMY_PROVIDER
from currency_gateway.core.logging import (
    GatewayContextFilter,
    GatewayJsonFormatter,
    request_ctx,
    request_id_ctx,
)
from currency_gateway.main import create_app


def make_record(msg: str = "cache miss for %s", *args) -> logging.LogRecord:
    return logging.LogRecord(
        name="currency_gateway.cache",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg=msg,
        args=args or ("latest_USD",),
        exc_info=None,
    )


def render(record: logging.LogRecord) -> dict:
    GatewayContextFilter().filter(record)
    return json.loads(GatewayJsonFormatter("Currency Converter Gateway").format(record))


def test_record_outside_a_request_has_service_fields_only():
    line = render(make_record())
    assert line["service"] == "Currency Converter Gateway"
    assert line["level"] == "INFO"
    assert line["logger"] == "currency_gateway.cache"
    assert line["msg"] == "cache miss for latest_USD"
    assert line["request_id"] == "-"
    assert line["ts"].endswith("Z")
    assert "method" not in line and "provider" not in line


def test_record_inside_a_request_carries_route_and_provider():
    request = Request(
        {
            "type": "http",
            "method": "GET",
            "path": "/convert",
            "query_string": b"",
            "headers": [(CURRENCY_PROVIDER_HEADER.lower().encode(), DUMMY_PROVIDER.encode())],
        }
    )
    rid_token = request_id_ctx.set("req-1")
    req_token = request_ctx.set(request)
    try:
        line = render(make_record())
    finally:
        request_ctx.reset(req_token)
        request_id_ctx.reset(rid_token)
    assert line["request_id"] == "req-1"
    assert line["method"] == "GET"
    assert line["path"] == "/convert"
    assert line["provider"] == DUMMY_PROVIDER


def test_exception_is_rendered():
    try:
        raise RuntimeError("upstream exploded")
    except RuntimeError:
        record = make_record()
        record.exc_info = sys.exc_info()
    assert "upstream exploded" in render(record)["exc_info"]


def test_inbound_request_id_is_echoed(stub_fetcher):
    with TestClient(create_app(Settings(auth_enabled=False), fetcher_override=stub_fetcher)) as c:
        kept = c.get("/health", headers={"X-Request-ID": "trace-42"})
        fresh = c.get("/health")
    assert kept.headers["X-Request-ID"] == "trace-42"
    assert fresh.headers["X-Request-ID"] not in ("", "trace-42")
