"""
Tests for the wallet session

Integration tests over the whole flow with in-memory storage and
stubbed collaborators.
"""

import asyncio
import json

import pytest
from datetime import datetime, timedelta
from decimal import Decimal

from src.exceptions import NotFoundError, ValidationError
from src.ledger import recompute_total_savings
from src.models.ledger import Category, Currency, PeriodMode, TransactionType, new_app_state
from src.orchestrator import MutationResult, WalletSession
from src.services.rates import FixedRateProvider
from src.services.storage import InMemoryStateStorage, JsonFileStateStorage, PersistenceError
from src.validation import TransactionDraft, TransactionEdit


class FailingStorage(InMemoryStateStorage):
    """In-memory storage whose saves always fail."""

    def save(self, state):
        raise PersistenceError("disk full")


class StubReportAgent:
    def __init__(self):
        self.weeks = []

    async def generate_report(self, week):
        self.weeks.append(week.id)
        return f"Report for {week.id}"


@pytest.fixture
def storage(now):
    return InMemoryStateStorage(initial=new_app_state(now=now))


@pytest.fixture
def session(storage, now):
    wallet = WalletSession(storage=storage, rate_provider=FixedRateProvider(Decimal("4")))
    wallet.start(now=now)
    return wallet


def add(session, amount, transaction_type=TransactionType.ACTUAL, title="Item", **kwargs):
    draft = TransactionDraft(title=title, raw_amount=amount, type=transaction_type, **kwargs)
    return session.add_transaction(draft)


class TestSessionLifecycle:
    """Tests for startup and persistence."""

    def test_start_loads_and_stamps(self, storage, now):
        """Test that start loads the snapshot and saves last_opened."""
        wallet = WalletSession(storage=storage)
        result = wallet.start(now=now)
        assert result.persisted is True
        assert wallet.state.last_opened == now
        assert storage.save_count == 1

    def test_state_before_start_raises(self, storage):
        """Test that the session must be started first."""
        with pytest.raises(RuntimeError):
            WalletSession(storage=storage).state

    def test_every_mutation_is_saved(self, session, storage):
        """Test save-after-every-mutation."""
        before = storage.save_count
        add(session, "5")
        session.set_income("100")
        assert storage.save_count == before + 2
        assert storage.load() == session.state

    def test_save_failure_keeps_new_state(self, now):
        """Test that a failed save is reported and never rolled back."""
        wallet = WalletSession(storage=FailingStorage())
        wallet.start(now=now)

        result = add(wallet, "12")
        assert isinstance(result, MutationResult)
        assert result.persisted is False
        assert "disk full" in result.save_error
        assert len(wallet.state.current_week.transactions) == 1
        assert result.state == wallet.state

    def test_start_keeps_stored_history_with_odd_titles(self, tmp_path, now):
        """Test that a snapshot with an empty stored title survives startup intact."""
        path = tmp_path / "state.json"
        archived = {
            "id": "2025-03-03T09:00:00",
            "startDate": "2025-03-03T09:00:00",
            "endDate": "2025-03-10T09:00:00",
            "income": 200,
            "transactions": [
                {"id": "a1", "title": "", "amount": 20, "type": "actual",
                 "category": "necessities", "isConfirmed": True,
                 "date": "2025-03-04T12:00:00"},
            ],
            "isClosed": True,
        }
        snapshot = {
            "currentWeek": {"id": "2025-03-10T09:00:00", "startDate": "2025-03-10T09:00:00",
                            "income": 150, "transactions": [], "isClosed": False},
            "history": [archived],
            "totalSavings": 0,
            "lastOpened": "2025-03-10T09:00:00",
            "presets": [],
        }
        path.write_text(json.dumps(snapshot), encoding="utf-8")

        wallet = WalletSession(storage=JsonFileStateStorage(path, default_presets=["Rent"]))
        wallet.start(now=now)

        on_disk = json.loads(path.read_text(encoding="utf-8"))
        assert len(on_disk["history"]) == 1
        assert on_disk["history"][0]["transactions"][0]["title"] == ""
        assert on_disk["presets"] == []
        assert wallet.state.current_week.income == Decimal("150")

    def test_start_on_corrupt_file_keeps_original_bytes(self, tmp_path, now):
        """Test that starting over a broken snapshot never destroys it."""
        path = tmp_path / "state.json"
        path.write_text('{"currentWeek": {"transactions": [{"amount": null}]}}', encoding="utf-8")

        wallet = WalletSession(storage=JsonFileStateStorage(path, default_presets=["Rent"]))
        result = wallet.start(now=now)

        assert result.persisted is True
        assert wallet.state.history == []
        [backup] = tmp_path.glob("state.json.corrupt-*")
        assert backup.read_text(encoding="utf-8") == (
            '{"currentWeek": {"transactions": [{"amount": null}]}}'
        )


class TestSessionTransactions:
    """Tests for transaction flows."""

    def test_rate_refresh_feeds_conversion(self, session):
        """Test that PLN entries use the refreshed rate."""
        assert session.refresh_rate() == Decimal("4")
        add(session, "12,00", currency=Currency.PLN)
        assert session.state.current_week.transactions[0].amount == Decimal("3")

    def test_default_rate_is_fallback(self, session):
        """Test that the session starts with the fallback rate."""
        assert session.rate == Decimal("4.30")

    def test_edit_saving_updates_total(self, session):
        """Test the edit flow on a saving."""
        add(session, "20", TransactionType.SAVING)
        tx = session.state.current_week.transactions[0]

        session.edit_transaction(tx.id, TransactionEdit(title="Fund", raw_amount="35"))
        assert session.state.total_savings == Decimal("35")

    def test_delete_uses_stored_record(self, session):
        """Test that deleting a saving of 20 from 50 leaves 30."""
        add(session, "30", TransactionType.SAVING)
        add(session, "20", TransactionType.SAVING)
        target = session.state.current_week.transactions[0]

        session.delete_transaction(target.id)
        assert session.state.total_savings == Decimal("30")
        assert session.state.total_savings == recompute_total_savings(session.state)

    def test_missing_transaction_raises(self, session):
        """Test that unknown ids are rejected for every mutation."""
        with pytest.raises(NotFoundError):
            session.delete_transaction("missing")
        with pytest.raises(NotFoundError):
            session.edit_transaction("missing", TransactionEdit(title="X", raw_amount="1"))
        with pytest.raises(NotFoundError):
            session.toggle_transaction("missing")

    def test_rejected_input_changes_nothing(self, session, storage):
        """Test that validation failures leave state and storage alone."""
        state = session.state
        saves = storage.save_count
        with pytest.raises(ValidationError):
            add(session, "0")
        with pytest.raises(ValidationError):
            session.set_income("-10")
        assert session.state is state
        assert storage.save_count == saves

    def test_rent_scenario(self, session):
        """Test the planned-then-confirmed flow through the summary."""
        session.set_income("1000")
        add(session, "500", TransactionType.PLANNED, title="Rent", category=Category.OBLIGATIONS)
        rent = session.state.current_week.transactions[0]
        assert session.summary().total_planned == Decimal("500")

        session.toggle_transaction(rent.id)
        summary = session.summary()
        assert summary.total_planned == Decimal("0")
        assert summary.total_spent == Decimal("500")
        assert summary.available_funds == Decimal("500")
        assert session.groups().done[0].id == rent.id


class TestSessionWeekClose:
    """Tests for closing weeks through the session."""

    def test_close_week(self, session, now):
        """Test the archival transition and history overview."""
        session.set_income("100")
        add(session, "30")
        add(session, "10", TransactionType.SAVING)

        result = session.close_week("150", now=now + timedelta(days=4))
        assert result.persisted is True
        assert len(session.state.history) == 1
        assert session.state.current_week.income == Decimal("150")
        assert session.state.total_savings == Decimal("10")

        overview = session.history_overview()
        assert overview[0].spent == Decimal("40")
        assert overview[0].saved == Decimal("10")

    def test_close_week_if_due(self, session, now):
        """Test that the trigger only fires on a due Sunday."""
        assert session.close_week_if_due("100", now=now + timedelta(hours=2)) is None

        sunday = datetime(2025, 3, 16, 9, 0)
        assert session.is_close_due(sunday) is True
        assert session.close_week_if_due("100", now=sunday) is not None
        assert session.is_close_due(sunday + timedelta(hours=1)) is False


class TestSessionViews:
    """Tests for read-only views and presets."""

    def test_presets(self, session):
        """Test preset add and remove through the session."""
        session.add_preset("Rent")
        assert "Rent" in session.state.presets
        session.remove_preset("Rent")
        assert "Rent" not in session.state.presets

    def test_titles_and_statistics(self, session, now):
        """Test autocomplete titles and the statistics bundle."""
        add(session, "30", title="Groceries")
        add(session, "5", title="Coffee")
        assert session.titles() == ["Coffee", "Groceries"]

        stats = session.statistics(PeriodMode.MONTH, now)
        assert stats.summary.total_spent == Decimal("35")
        assert len(stats.timeline) == 31

    def test_generate_report(self, storage, now):
        """Test that the report is requested for the chosen week."""
        agent = StubReportAgent()
        wallet = WalletSession(storage=storage, report_agent=agent)
        wallet.start(now=now)
        wallet.close_week("10", now=now + timedelta(days=4))
        archived_id = wallet.state.history[0].id

        assert asyncio.run(wallet.generate_report(archived_id)) == f"Report for {archived_id}"
        with pytest.raises(LookupError):
            asyncio.run(wallet.generate_report("missing"))


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
