"""Names shared across routers, providers and auth."""

CURRENCY_PROVIDER_HEADER = "X-Currency-Provider"

# Provider identifiers used as registry keys and header values
FRANKFURTER_PROVIDER = "FrankfurterApiCurrencyService"
DUMMY_PROVIDER = "DummyExchangeRateApiService"
DEFAULT_PROVIDER = FRANKFURTER_PROVIDER

ADMIN_ROLE = "Admin"
USER_ROLE = "User"
