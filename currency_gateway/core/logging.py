import json
import logging
import sys
import uuid
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from starlette.requests import Request

from .constants import CURRENCY_PROVIDER_HEADER

REQUEST_ID_HEADER = "X-Request-ID"

request_id_ctx: ContextVar[str | None] = ContextVar("request_id", default=None)
# Current inbound request, read by the provider resolver
request_ctx: ContextVar[Optional[Request]] = ContextVar("request", default=None)


class GatewayContextFilter(logging.Filter):
    """Stamps records with the request id, route and requested provider."""

    def filter(self, record: logging.LogRecord) -> bool:  # noqa: D401
        record.request_id = request_id_ctx.get() or "-"
        request = request_ctx.get()
        if request is not None:
            record.method = request.method
            record.path = request.url.path
            record.provider = request.headers.get(CURRENCY_PROVIDER_HEADER) or "-"
        return True


class GatewayJsonFormatter(logging.Formatter):
    def __init__(self, service: str) -> None:
        super().__init__()
        self.service = service

    def format(self, record: logging.LogRecord) -> str:  # noqa: D401
        ts = datetime.fromtimestamp(record.created, tz=timezone.utc)
        base: Dict[str, Any] = {
            "ts": ts.isoformat(timespec="milliseconds").replace("+00:00", "Z"),
            "service": self.service,
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
            "request_id": getattr(record, "request_id", "-"),
        }
        for field in ("method", "path", "provider"):
            value = getattr(record, field, None)
            if value is not None:
                base[field] = value
        if record.exc_info:
            base["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(base, ensure_ascii=False)


def init_logging(debug: bool = False, service: str = "currency-gateway") -> None:
    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(logging.DEBUG if debug else logging.INFO)

    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(GatewayContextFilter())
    handler.setFormatter(GatewayJsonFormatter(service))
    root.addHandler(handler)
    # upstream request lines from httpx are only useful while debugging
    logging.getLogger("httpx").setLevel(logging.DEBUG if debug else logging.WARNING)


def current_request() -> Optional[Request]:
    return request_ctx.get()


async def request_context_middleware(request, call_next):  # type: ignore
    # A caller-supplied id is kept so traces line up across services
    rid = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
    rid_token = request_id_ctx.set(rid)
    req_token = request_ctx.set(request)
    logger = logging.getLogger("currency_gateway.request")
    logger.debug("request start")
    try:
        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = rid
        logger.debug("request end status=%s", response.status_code)
        return response
    finally:
        request_ctx.reset(req_token)
        request_id_ctx.reset(rid_token)
