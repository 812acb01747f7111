"""Rate retrieval: providers, provider selection, caching and exclusion policy."""

from .base import ProviderOperationNotSupported, RateProvider
from .cache_service import ResponseCache, cache_key
from .exclusion import EXCLUDED_CURRENCIES, filter_rates, is_excluded
from .providers import DummyRateProvider, FrankfurterRateProvider, build_provider_registry
from .resolver import ProviderResolver

__all__ = [
    "ProviderOperationNotSupported",
    "RateProvider",
    "ResponseCache",
    "cache_key",
    "EXCLUDED_CURRENCIES",
    "filter_rates",
    "is_excluded",
    "DummyRateProvider",
    "FrankfurterRateProvider",
    "build_provider_registry",
    "ProviderResolver",
]
