"""Services package."""

from src.services.currency import to_base
from src.services.rates import (
    FixedRateProvider,
    NbpRateProvider,
    RateProvider,
    RateUnavailableError,
)
from src.services.storage import (
    InMemoryStateStorage,
    JsonFileStateStorage,
    PersistenceError,
    SnapshotCorruptedError,
    StateStorageInterface,
    StorageError,
)

__all__ = [
    # Currency
    "to_base",
    # Rates
    "FixedRateProvider",
    "NbpRateProvider",
    "RateProvider",
    "RateUnavailableError",
    # Storage
    "InMemoryStateStorage",
    "JsonFileStateStorage",
    "PersistenceError",
    "SnapshotCorruptedError",
    "StateStorageInterface",
    "StorageError",
]
