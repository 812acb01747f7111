from __future__ import annotations

"""Resilient async HTTP client for upstream rate APIs.

GET JSON with limited retries (exponential backoff) and a consecutive-failure
circuit breaker. Callers only see a decoded payload or an HttpError.
"""
import asyncio
import logging
import time
from typing import Any, Callable, Dict, Mapping, Optional

import httpx

logger = logging.getLogger("currency_gateway.http")

RETRYABLE_STATUSES = frozenset({429, 500, 502, 503, 504})


class HttpError(Exception):
    pass


class CircuitOpenError(HttpError):
    pass


class _RetryableError(HttpError):
    pass


class CircuitBreaker:
    """Opens after `failure_threshold` consecutive failures.

    While open every call is rejected; once `reset_seconds` have passed a
    single trial call is let through (half-open) and concurrent callers are
    rejected until it settles. Success closes the circuit, failure re-opens it.
    """

    def __init__(
        self,
        failure_threshold: int = 5,
        reset_seconds: float = 30.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._threshold = failure_threshold
        self._reset = reset_seconds
        self._clock = clock
        self._failures = 0
        self._opened_at: Optional[float] = None
        self._trial_in_flight = False

    @property
    def state(self) -> str:
        if self._opened_at is None:
            return "closed"
        if self._clock() - self._opened_at >= self._reset:
            return "half-open"
        return "open"

    def allow(self) -> bool:
        state = self.state
        if state == "open":
            return False
        if state == "half-open":
            if self._trial_in_flight:
                return False
            self._trial_in_flight = True
        return True

    def record_success(self) -> None:
        self._failures = 0
        self._opened_at = None
        self._trial_in_flight = False

    def record_failure(self) -> None:
        half_open = self.state == "half-open"
        self._trial_in_flight = False
        self._failures += 1
        if half_open or self._failures >= self._threshold:
            logger.warning("circuit opened after %d consecutive failures", self._failures)
            self._opened_at = self._clock()


class ResilientFetcher:
    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 5.0,
        retries: int = 3,
        backoff: float = 1.0,
        breaker: Optional[CircuitBreaker] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self._client = client or httpx.AsyncClient(base_url=base_url, timeout=timeout)
        self._retries = retries
        self._backoff = backoff
        self._breaker = breaker or CircuitBreaker()

    @property
    def breaker(self) -> CircuitBreaker:
        return self._breaker

    async def _get_once(self, path: str, params: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
        try:
            resp = await self._client.get(path, params=params)
        except httpx.TransportError as e:
            raise _RetryableError(f"transport error for {path}: {e}") from e
        except httpx.HTTPError as e:
            # decoding, redirect loops and other non-transient client faults
            raise HttpError(f"request failed for {path}: {e}") from e
        if resp.status_code in RETRYABLE_STATUSES:
            raise _RetryableError(f"HTTP {resp.status_code} for {resp.request.url}")
        if resp.status_code >= 400:
            raise HttpError(f"HTTP {resp.status_code} for {resp.request.url}")
        try:
            return resp.json()
        except ValueError as e:
            raise HttpError(f"invalid JSON from {resp.request.url}") from e

    async def get_json(
        self, path: str, params: Optional[Mapping[str, Any]] = None
    ) -> Dict[str, Any]:
        if not self._breaker.allow():
            raise CircuitOpenError(f"circuit open, refusing GET {path}")
        last_err: Optional[Exception] = None
        for attempt in range(self._retries + 1):
            try:
                data = await self._get_once(path, params)
            except _RetryableError as e:
                last_err = e
                if attempt == self._retries:
                    break
                delay = self._backoff * (2**attempt)
                logger.info("retrying GET %s in %.2fs (attempt %d): %s", path, delay, attempt + 1, e)
                await asyncio.sleep(delay)
            except HttpError:
                # upstream answered; not a circuit failure
                self._breaker.record_success()
                raise
            else:
                self._breaker.record_success()
                return data
        self._breaker.record_failure()
        raise HttpError(f"Failed to fetch JSON from {path}: {last_err}")

    async def aclose(self) -> None:
        await self._client.aclose()
