import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from .core.config import get_settings, Settings
from .core.logging import init_logging, request_context_middleware
from .core import errors
from .routers import health, rates
from .services.http_client import CircuitBreaker, ResilientFetcher
from .services.rates.base import ProviderOperationNotSupported
from .services.rates.cache_service import ResponseCache
from .services.rates.providers import SupportsGetJson, build_provider_registry
from .services.rates.resolver import ProviderResolver


def build_fetcher(settings: Settings) -> ResilientFetcher:
    return ResilientFetcher(
        str(settings.frankfurter_base_url),
        timeout=settings.http_timeout_seconds,
        retries=settings.http_retries,
        backoff=settings.http_backoff_seconds,
        breaker=CircuitBreaker(
            failure_threshold=settings.circuit_failure_threshold,
            reset_seconds=settings.circuit_reset_seconds,
        ),
    )


def create_app(
    settings_override: Settings | None = None,
    fetcher_override: SupportsGetJson | None = None,
) -> FastAPI:
    """Application factory.

    settings_override: pass an already constructed Settings instance for tests
    to isolate environment. Falls back to cached get_settings().
    fetcher_override: stand-in for the upstream HTTP fetcher (tests, demos).
    """
    settings = settings_override or get_settings()
    # Initialize logging early
    init_logging(debug=settings.debug, service=settings.app_name)

    fetcher = fetcher_override or build_fetcher(settings)
    cache = ResponseCache()
    registry = build_provider_registry(
        fetcher,
        cache,
        latest_ttl_seconds=settings.latest_cache_ttl_seconds,
        historical_ttl_seconds=settings.historical_cache_ttl_seconds,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logging.getLogger("currency_gateway").info(
            "starting %s with providers %s", settings.app_name, sorted(registry)
        )
        yield
        if isinstance(fetcher, ResilientFetcher):
            await fetcher.aclose()

    app = FastAPI(
        title=settings.app_name,
        debug=settings.debug,
        version=settings.version,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.cache = cache
    app.state.registry = registry
    app.state.resolver = ProviderResolver(registry)

    # Middleware (request id, request context for provider resolution)
    app.middleware("http")(request_context_middleware)

    # Error handlers
    app.add_exception_handler(StarletteHTTPException, errors.http_error_handler)
    app.add_exception_handler(RequestValidationError, errors.validation_error_handler)
    app.add_exception_handler(ProviderOperationNotSupported, errors.not_implemented_handler)
    app.add_exception_handler(Exception, errors.server_error_handler)

    # Routers
    app.include_router(health.router)
    app.include_router(rates.router)

    @app.get("/")
    async def root():
        return {"message": settings.app_name, "version": settings.version}

    return app
