"""
Storage Services Package

Provides the abstract snapshot interface and concrete implementations.
The JSON file backend is the default; the in-memory one backs tests.
"""

from src.services.storage.interface import (
    PersistenceError,
    SnapshotCorruptedError,
    StateStorageInterface,
    StorageError,
    default_snapshot,
    migrate_snapshot,
)
from src.services.storage.json_file import JsonFileStateStorage
from src.services.storage.memory import InMemoryStateStorage

__all__ = [
    # Interface
    "StateStorageInterface",
    "default_snapshot",
    "migrate_snapshot",
    # Exceptions
    "PersistenceError",
    "SnapshotCorruptedError",
    "StorageError",
    # Implementations
    "InMemoryStateStorage",
    "JsonFileStateStorage",
]
