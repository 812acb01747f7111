"""Currency conversion gateway over pluggable exchange-rate providers."""

__version__ = "0.1.0"
