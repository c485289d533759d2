"""
In-Memory Storage Implementation

Keeps the serialized snapshot in a string. Every save/load goes through the
same JSON round trip as the file backend, so tests exercise the real
persisted shape without touching the disk.
"""

from typing import Optional

from src.models.ledger import AppState
from src.services.storage.interface import StateStorageInterface, default_snapshot


class InMemoryStateStorage(StateStorageInterface):
    """Snapshot storage for tests and throwaway sessions."""

    def __init__(
        self,
        initial: Optional[AppState] = None,
        default_presets: Optional[list[str]] = None,
    ):
        self._payload: Optional[str] = None
        self._default_presets = default_presets
        self.save_count = 0
        if initial is not None:
            self._payload = initial.model_dump_json(by_alias=True)

    def load(self) -> AppState:
        if self._payload is None:
            return default_snapshot(self._default_presets)
        return AppState.model_validate_json(self._payload)

    def save(self, state: AppState) -> None:
        self._payload = state.model_dump_json(by_alias=True)
        self.save_count += 1

    @property
    def payload(self) -> Optional[str]:
        """The last saved JSON document."""
        return self._payload
