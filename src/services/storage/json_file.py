"""
JSON File Storage Implementation

DESIGN DECISION: The wallet is a single-user local tool, so the whole
snapshot lives in one JSON file:
1. No database setup required
2. The user can back up or inspect the file directly
3. Snapshots written by the earlier browser version load unchanged
   (same camelCase keys)

TRADEOFFS:
- The whole file is rewritten after every mutation (fine for one person's
  weekly history)
- Writes go to a temporary file first and are moved into place, so a crash
  mid-write never leaves a half-written snapshot behind
- A snapshot that does not parse is kept beside the live file, never
  deleted or overwritten
"""

import json
import os
from datetime import datetime
from pathlib import Path
from typing import Optional, Union

from pydantic import ValidationError as SchemaError
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from src.config import get_settings
from src.logs import LedgerLogger
from src.models.ledger import AppState
from src.services.storage.interface import (
    PersistenceError,
    SnapshotCorruptedError,
    StateStorageInterface,
    default_snapshot,
    migrate_snapshot,
)


class JsonFileStateStorage(StateStorageInterface):
    """
    Snapshot storage backed by a local JSON file.

    A missing file means first run. An unreadable file is renamed to
    `<name>.corrupt-<timestamp>` and logged before the default snapshot
    is used, so nothing written later can overwrite it.
    """

    def __init__(
        self,
        path: Optional[Union[str, Path]] = None,
        default_presets: Optional[list[str]] = None,
        logger: Optional[LedgerLogger] = None,
    ):
        settings = get_settings()
        self._path = Path(path).expanduser() if path else settings.storage.state_path
        self._default_presets = (
            default_presets if default_presets is not None
            else settings.ledger.default_presets_list
        )
        self._logger = logger or LedgerLogger()

    @property
    def path(self) -> Path:
        return self._path

    @property
    def description(self) -> str:
        return str(self._path)

    def load(self) -> AppState:
        if not self._path.exists():
            return default_snapshot(self._default_presets)

        try:
            return self._read()
        except SnapshotCorruptedError as e:
            backup_path = self._preserve_unreadable()
            self._logger.log_state_load_fallback(
                source=self.description,
                error_message=str(e),
                backup_path=str(backup_path),
            )
            return default_snapshot(self._default_presets)

    def _preserve_unreadable(self) -> Path:
        """
        Move the unreadable file aside so the next save cannot overwrite it.

        Raises:
            PersistenceError: If the file cannot be moved
        """
        stamp = datetime.now().strftime("%Y%m%dT%H%M%S%f")
        backup_path = self._path.with_name(f"{self._path.name}.corrupt-{stamp}")
        try:
            os.replace(self._path, backup_path)
        except OSError as e:
            raise PersistenceError(
                f"Snapshot {self._path} is unreadable and could not be moved aside: {e}"
            ) from e
        return backup_path

    def _read(self) -> AppState:
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            raise SnapshotCorruptedError(f"Cannot read snapshot {self._path}: {e}") from e

        if not isinstance(raw, dict):
            raise SnapshotCorruptedError(f"Snapshot {self._path} is not a JSON object")

        try:
            return AppState.model_validate(migrate_snapshot(raw, self._default_presets))
        except SchemaError as e:
            raise SnapshotCorruptedError(f"Snapshot {self._path} does not match the schema: {e}") from e

    def save(self, state: AppState) -> None:
        payload = state.model_dump_json(by_alias=True, indent=2)
        try:
            self._write(payload)
        except OSError as e:
            raise PersistenceError(f"Failed to write snapshot {self._path}: {e}") from e

    @retry(
        retry=retry_if_exception_type(OSError),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.1, max=1),
        reraise=True,
    )
    def _write(self, payload: str) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self._path.with_name(self._path.name + ".tmp")
        tmp_path.write_text(payload, encoding="utf-8")
        os.replace(tmp_path, self._path)
