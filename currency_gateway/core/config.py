from functools import lru_cache
from typing import Dict

from pydantic import AnyHttpUrl
from pydantic_settings import BaseSettings, SettingsConfigDict

from .constants import ADMIN_ROLE, USER_ROLE


class Settings(BaseSettings):
    """Application settings loaded from environment with defaults.

    Environment variable mapping follows pydantic's rules (e.g., APP_NAME, DEBUG,
    FRANKFURTER_BASE_URL, LATEST_CACHE_TTL_SECONDS, API_TOKENS as JSON).
    """

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Basic app metadata
    app_name: str = "Currency Converter Gateway"
    debug: bool = False
    version: str = "0.1.0"

    # Upstream (Frankfurter) access
    frankfurter_base_url: AnyHttpUrl = "https://api.frankfurter.app/"
    http_timeout_seconds: float = 5.0
    http_retries: int = 3
    http_backoff_seconds: float = 1.0
    circuit_failure_threshold: int = 5
    circuit_reset_seconds: float = 30.0

    # Response caching
    latest_cache_ttl_seconds: int = 3600  # 1 hour, also used for conversions
    historical_cache_ttl_seconds: int = 86400  # 24 hours

    # Caller authentication (bearer token -> role)
    auth_enabled: bool = True
    api_tokens: Dict[str, str] = {
        "dev-user-token": USER_ROLE,
        "dev-admin-token": ADMIN_ROLE,
    }

    def init_post_load(self) -> None:
        """Validate cross-field constraints after loading."""
        if self.latest_cache_ttl_seconds <= 0 or self.historical_cache_ttl_seconds <= 0:
            raise ValueError("cache TTLs must be positive seconds")
        if self.http_retries < 0:
            raise ValueError("http_retries cannot be negative")
        if self.circuit_failure_threshold <= 0:
            raise ValueError("circuit_failure_threshold must be positive")
        allowed = {USER_ROLE, ADMIN_ROLE}
        unknown = set(self.api_tokens.values()) - allowed
        if unknown:
            raise ValueError(f"Unsupported roles in api_tokens {unknown}. Allowed: {allowed}")


@lru_cache
def get_settings() -> Settings:
    settings = Settings()
    settings.init_post_load()
    return settings
