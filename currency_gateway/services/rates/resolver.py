from __future__ import annotations

import logging
from typing import Mapping, Optional

from starlette.requests import Request

from currency_gateway.core.constants import CURRENCY_PROVIDER_HEADER, DEFAULT_PROVIDER
from currency_gateway.core.logging import current_request
from .base import RateProvider

logger = logging.getLogger("currency_gateway.resolver")


class ProviderResolver:
    """Picks a rate provider per request from the X-Currency-Provider header.

    Never raises: a missing request, a blank header or an unknown provider
    name all resolve to the default provider.
    """

    def __init__(
        self,
        registry: Mapping[str, RateProvider],
        default_provider: str = DEFAULT_PROVIDER,
    ):
        if default_provider not in registry:
            raise ValueError(f"default provider '{default_provider}' is not registered")
        self._registry = registry
        self._default_name = default_provider

    @property
    def default(self) -> RateProvider:
        return self._registry[self._default_name]

    def _provider_name_from_header(self, request: Request) -> str:
        provider_name = request.headers.get(CURRENCY_PROVIDER_HEADER)
        if provider_name and provider_name.strip():
            logger.info("Found provider in header: %s", provider_name)
            return provider_name
        logger.info(
            "No provider specified in header '%s', using default: %s",
            CURRENCY_PROVIDER_HEADER,
            self._default_name,
        )
        return self._default_name

    def resolve(self, request: Optional[Request] = None) -> RateProvider:
        request = request if request is not None else current_request()
        if request is None:
            logger.warning("No request context, using default provider: %s", self._default_name)
            return self.default

        provider_name = self._provider_name_from_header(request)
        try:
            provider = self._registry[provider_name]
        except Exception:
            logger.warning(
                "Provider '%s' not supported, falling back to default: %s",
                provider_name,
                self._default_name,
                exc_info=True,
            )
            return self.default
        logger.info("Resolved currency service: %s", provider_name)
        return provider
