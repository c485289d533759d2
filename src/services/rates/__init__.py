"""Exchange rate providers."""

from src.services.rates.provider import (
    FixedRateProvider,
    NbpRateProvider,
    RateProvider,
    RateUnavailableError,
)

__all__ = [
    "FixedRateProvider",
    "NbpRateProvider",
    "RateProvider",
    "RateUnavailableError",
]
