"""
Abstract Storage Interface

DESIGN DECISION: The ledger persists one opaque snapshot (AppState).
Storage is a load/save pair so that we can:
1. Keep the snapshot in a local JSON file for everyday use
2. Use in-memory storage for testing
3. Swap in another backend without touching ledger logic

The interface is intentionally tiny - the ledger never queries storage,
it only loads the whole snapshot at startup and saves it after every mutation.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Optional

from src.models.ledger import DEFAULT_PRESETS, AppState, new_app_state


class StateStorageInterface(ABC):
    """
    Abstract interface for snapshot storage.

    Any storage implementation must implement these methods.
    """

    @abstractmethod
    def load(self) -> AppState:
        """
        Load the persisted snapshot.

        Returns:
            The stored AppState, or the default snapshot if nothing is
            stored or the stored data cannot be parsed. Backends that
            persist to disk keep unparseable data rather than dropping it.
        """
        pass

    @abstractmethod
    def save(self, state: AppState) -> None:
        """
        Persist the snapshot, replacing whatever was stored.

        Raises:
            PersistenceError: If the write fails
        """
        pass

    @property
    def description(self) -> str:
        """Human-readable name of the backend, used in logs."""
        return type(self).__name__


def migrate_snapshot(
    raw: dict[str, Any],
    default_presets: Optional[list[str]] = None,
) -> dict[str, Any]:
    """
    Fill in fields that older snapshots did not have.

    - totalSavings was introduced after the first release -> 0
    - presets were introduced later still -> the starter list
    """
    migrated = dict(raw)
    if migrated.get("totalSavings") is None and migrated.get("total_savings") is None:
        migrated["totalSavings"] = 0
    if migrated.get("presets") is None:
        migrated["presets"] = list(DEFAULT_PRESETS if default_presets is None else default_presets)
    if migrated.get("lastOpened") is None and migrated.get("last_opened") is None:
        migrated["lastOpened"] = datetime.now()
    return migrated


def default_snapshot(default_presets: Optional[list[str]] = None) -> AppState:
    """The snapshot handed out when nothing usable is stored."""
    return new_app_state(presets=default_presets)


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class PersistenceError(StorageError):
    """The snapshot could not be written."""
    pass


class SnapshotCorruptedError(StorageError):
    """The stored snapshot could not be read or parsed."""
    pass
