from decimal import Decimal

from conftest import make_record
from expense_tracker.errors import StorageError
from expense_tracker.models.schemas import ExpenseDraft
from expense_tracker.services.live_ledger import LiveLedger
from expense_tracker.services.report_service import monthly_by_category
from expense_tracker.storage.memory import InMemoryExpenseStore


def test_snapshot_replacement_is_total(sample_records):
    ledger = LiveLedger(sample_records)
    ledger.on_snapshot_changed([make_record(9, "2025-05-05", amount=1)])
    assert [r.id for r in ledger.records] == ["9"]
    assert ledger.updated_at is not None


def test_reports_are_memoised_per_snapshot(sample_records):
    ledger = LiveLedger(sample_records)
    calls = []

    def build(records):
        calls.append(len(records))
        return monthly_by_category(records)

    first = ledger.report(("monthly",), build)
    second = ledger.report(("monthly",), build)
    assert first is second
    assert calls == [3]

    ledger.on_snapshot_changed(sample_records[:1])
    third = ledger.report(("monthly",), build)
    assert calls == [3, 1]
    assert [p.period for p in third] == ["2024-01"]


def test_storage_error_keeps_last_good_snapshot(sample_records):
    ledger = LiveLedger(sample_records)
    ledger.on_error(StorageError("offline"))
    assert len(ledger.records) == 3
    assert str(ledger.last_error) == "offline"

    ledger.on_snapshot_changed(sample_records)
    assert ledger.last_error is None


def test_attach_receives_pushes(sample_records, vocabulary):
    store = InMemoryExpenseStore(sample_records, vocabulary)
    ledger = LiveLedger()
    unsubscribe = ledger.attach(store)
    assert len(ledger.records) == 3

    store.append_expense(
        ExpenseDraft("2024-03-01", "Bus", "Misc", "B", Decimal("2"))
    )
    assert len(ledger.records) == 4

    unsubscribe()
    store.append_expense(
        ExpenseDraft("2024-03-02", "Bus", "Misc", "B", Decimal("2"))
    )
    assert len(ledger.records) == 4
