"""
Tests for snapshot storage

Uses tmp_path for the JSON backend; nothing touches the real home directory.
"""

import copy
import json

import pytest
from decimal import Decimal

from src.ledger import add_transaction, close_week, set_income
from src.models.ledger import ConvertedAmount, Currency, TransactionType
from src.services.storage import (
    InMemoryStateStorage,
    JsonFileStateStorage,
    PersistenceError,
    migrate_snapshot,
)
from src.validation import TransactionDraft

PRESETS = ["Groceries", "Dining out", "Subscriptions"]

LEGACY_SNAPSHOT = {
    "currentWeek": {
        "id": "2024-03-03T10:00:00.000Z",
        "startDate": "2024-03-03T10:00:00.000Z",
        "endDate": None,
        "income": 100,
        "transactions": [
            {
                "id": "1709460000000",
                "title": "Obiad",
                "amount": 10,
                "originalAmount": 43,
                "originalCurrency": "PLN",
                "type": "actual",
                "category": "pleasures",
                "isConfirmed": True,
                "date": "2024-03-03T12:00:00.000Z",
            },
        ],
        "isClosed": False,
    },
    "history": [],
    "lastOpened": "2024-03-03T10:00:00.000Z",
}


@pytest.fixture
def populated_state(fresh_state, now):
    state = set_income(fresh_state, Decimal("100"))
    state = add_transaction(
        state,
        TransactionDraft(title="Obiad", raw_amount="43", currency=Currency.PLN,
                         type=TransactionType.ACTUAL),
        rate=Decimal("4.30"),
        now=now,
    )
    state = add_transaction(
        state,
        TransactionDraft(title="Fund", raw_amount="10", type=TransactionType.SAVING),
        now=now,
    )
    return close_week(state, "150", now=now)


class TestJsonFileStateStorage:
    """Tests for the JSON file backend."""

    def test_missing_file_gives_default(self, tmp_path):
        """Test the first-run snapshot."""
        storage = JsonFileStateStorage(tmp_path / "state.json", default_presets=PRESETS)
        state = storage.load()
        assert state.history == []
        assert state.total_savings == Decimal("0")
        assert state.current_week.income == Decimal("0")
        assert state.presets == PRESETS

    def test_save_then_load_round_trip(self, tmp_path, populated_state):
        """Test that load(save(state)) == state."""
        storage = JsonFileStateStorage(tmp_path / "state.json", default_presets=PRESETS)
        storage.save(populated_state)
        assert storage.load() == populated_state

    def test_saved_file_uses_camel_case(self, tmp_path, populated_state):
        """Test the persisted JSON shape."""
        path = tmp_path / "state.json"
        JsonFileStateStorage(path, default_presets=PRESETS).save(populated_state)

        raw = json.loads(path.read_text(encoding="utf-8"))
        assert set(raw) >= {"currentWeek", "history", "totalSavings", "lastOpened", "presets"}
        archived_tx = raw["history"][0]["transactions"][-1]
        assert archived_tx["originalCurrency"] == "PLN"
        assert not (tmp_path / "state.json.tmp").exists()

    def test_creates_parent_directory(self, tmp_path, fresh_state):
        """Test that the snapshot directory is created on first save."""
        path = tmp_path / "nested" / "dir" / "state.json"
        JsonFileStateStorage(path, default_presets=PRESETS).save(fresh_state)
        assert path.exists()

    def test_corrupted_file_falls_back(self, tmp_path):
        """Test that an unparsable file yields the default snapshot and is kept aside."""
        path = tmp_path / "state.json"
        path.write_text("{not json", encoding="utf-8")
        state = JsonFileStateStorage(path, default_presets=PRESETS).load()
        assert state.history == []
        assert state.presets == PRESETS

        assert not path.exists()
        backups = list(tmp_path.glob("state.json.corrupt-*"))
        assert len(backups) == 1
        assert backups[0].read_text(encoding="utf-8") == "{not json"

    def test_schema_mismatch_falls_back(self, tmp_path):
        """Test that valid JSON of the wrong shape yields the default snapshot."""
        path = tmp_path / "state.json"
        original = json.dumps({"currentWeek": 42})
        path.write_text(original, encoding="utf-8")
        state = JsonFileStateStorage(path, default_presets=PRESETS).load()
        assert state.current_week.transactions == []
        [backup] = tmp_path.glob("state.json.corrupt-*")
        assert backup.read_text(encoding="utf-8") == original

    def test_save_after_fallback_keeps_backup(self, tmp_path):
        """Test that saving the default snapshot leaves the unreadable data alone."""
        path = tmp_path / "state.json"
        path.write_text("{not json", encoding="utf-8")
        storage = JsonFileStateStorage(path, default_presets=PRESETS)
        storage.save(storage.load())

        assert path.exists()
        [backup] = tmp_path.glob("state.json.corrupt-*")
        assert backup.read_text(encoding="utf-8") == "{not json"

    def test_unmovable_corrupt_file_raises(self, tmp_path, monkeypatch):
        """Test that load refuses to continue when the bad file cannot be kept."""
        path = tmp_path / "state.json"
        path.write_text("{not json", encoding="utf-8")

        def refuse(src, dst):
            raise PermissionError("read-only directory")

        monkeypatch.setattr("src.services.storage.json_file.os.replace", refuse)
        with pytest.raises(PersistenceError):
            JsonFileStateStorage(path, default_presets=PRESETS).load()
        assert path.read_text(encoding="utf-8") == "{not json"

    def test_empty_presets_round_trip(self, tmp_path, fresh_state):
        """Test that a user who removed every preset gets an empty list back."""
        state = fresh_state.model_copy(update={"presets": []})
        storage = JsonFileStateStorage(tmp_path / "state.json", default_presets=PRESETS)
        storage.save(state)

        loaded = storage.load()
        assert loaded.presets == []
        assert loaded == state

    def test_legacy_titles_load_unchanged(self, tmp_path):
        """Test that stored titles are not re-validated on load."""
        snapshot = copy.deepcopy(LEGACY_SNAPSHOT)
        long_title = "Zakupy " * 50
        first = snapshot["currentWeek"]["transactions"][0]
        snapshot["currentWeek"]["transactions"].append(
            dict(first, id="1709460000001", title=long_title)
        )
        first["title"] = ""
        path = tmp_path / "state.json"
        path.write_text(json.dumps(snapshot), encoding="utf-8")

        state = JsonFileStateStorage(path, default_presets=PRESETS).load()
        titles = [tx.title for tx in state.current_week.transactions]
        assert titles == ["", long_title]
        assert path.exists()
        assert list(tmp_path.glob("state.json.corrupt-*")) == []

    def test_legacy_snapshot_loads_with_defaults(self, tmp_path):
        """Test a snapshot written before totalSavings and presets existed."""
        path = tmp_path / "state.json"
        path.write_text(json.dumps(LEGACY_SNAPSHOT), encoding="utf-8")

        state = JsonFileStateStorage(path, default_presets=PRESETS).load()
        assert state.total_savings == Decimal("0")
        assert state.presets == PRESETS
        assert state.current_week.income == Decimal("100")

        tx = state.current_week.transactions[0]
        assert isinstance(tx.source, ConvertedAmount)
        assert tx.original_amount == Decimal("43")
        assert tx.date.tzinfo is None

    def test_write_failure_raises_persistence_error(self, tmp_path, fresh_state):
        """Test that an unwritable location raises PersistenceError."""
        blocker = tmp_path / "blocker"
        blocker.write_text("a file, not a directory", encoding="utf-8")
        storage = JsonFileStateStorage(blocker / "state.json", default_presets=PRESETS)
        with pytest.raises(PersistenceError):
            storage.save(fresh_state)


class TestInMemoryStateStorage:
    """Tests for the in-memory backend."""

    def test_round_trip(self, populated_state):
        """Test that the in-memory backend serializes like the file one."""
        storage = InMemoryStateStorage()
        storage.save(populated_state)
        assert storage.load() == populated_state
        assert storage.save_count == 1

    def test_empty_gives_default(self):
        """Test the first-run snapshot."""
        assert InMemoryStateStorage().load().history == []


class TestMigrateSnapshot:
    """Tests for snapshot migration."""

    def test_fills_missing_fields(self):
        """Test that totalSavings and presets are added."""
        migrated = migrate_snapshot({"currentWeek": {}}, ["Rent"])
        assert migrated["totalSavings"] == 0
        assert migrated["presets"] == ["Rent"]
        assert "lastOpened" in migrated

    def test_keeps_existing_fields(self):
        """Test that stored values win."""
        migrated = migrate_snapshot({"totalSavings": 12, "presets": ["Coffee"]}, ["Rent"])
        assert migrated["totalSavings"] == 12
        assert migrated["presets"] == ["Coffee"]

    def test_keeps_empty_presets(self):
        """Test that an emptied preset list is not refilled."""
        migrated = migrate_snapshot({"presets": []}, ["Rent"])
        assert migrated["presets"] == []


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
