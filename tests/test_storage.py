import json
import threading
import time
from decimal import Decimal

import pytest

from expense_tracker.errors import StorageError, ValidationError
from expense_tracker.models.schemas import ExpenseDraft, Vocabulary
from expense_tracker.storage import (
    InMemoryExpenseStore,
    JsonFileExpenseStore,
    create_store,
)
from expense_tracker.services.live_ledger import LiveLedger
from expense_tracker.storage.base import IdGenerator, record_from_dict, record_to_dict


def _draft(amount="10", date="2024-01-05"):
    return ExpenseDraft(date, "Groceries", "Grocery", "Gaurav", Decimal(amount))


def test_id_generator_is_strictly_increasing():
    ids = IdGenerator(clock=lambda: 1.0)
    assert [ids.next_id() for _ in range(3)] == ["1000", "1001", "1002"]


def test_memory_store_assigns_ids_and_publishes():
    store = InMemoryExpenseStore()
    snapshots = []
    store.subscribe(snapshots.append)
    assert snapshots == [[]]

    record = store.append_expense(_draft())
    assert record.id
    assert record.created_at is not None
    assert snapshots[-1] == [record]


def test_memory_store_rejects_invalid_draft():
    store = InMemoryExpenseStore()
    with pytest.raises(ValidationError):
        store.append_expense(_draft(amount="-5"))
    assert store.get_expenses() == []


def test_append_category_and_user():
    store = InMemoryExpenseStore()
    assert store.append_category("Rent").categories[-1] == "Rent"
    assert store.append_category("Rent").categories.count("Rent") == 1
    assert store.append_user("Asha").users == ("Gaurav", "Dolly", "Asha")
    assert store.get_settings().users == ("Gaurav", "Dolly", "Asha")


def test_record_dict_round_trip_keeps_exact_amount():
    store = InMemoryExpenseStore()
    record = store.append_expense(_draft(amount="0.10"))
    restored = record_from_dict(record_to_dict(record))
    assert restored == record
    assert restored.amount == Decimal("0.10")


def test_json_store_persists_across_instances(tmp_path):
    path = tmp_path / "data" / "expenses.json"
    first = JsonFileExpenseStore(path)
    record = first.append_expense(_draft(amount="12.35"))
    first.append_user("Asha")

    second = JsonFileExpenseStore(path)
    assert second.get_expenses() == [record]
    assert second.get_settings().users[-1] == "Asha"

    raw = json.loads(path.read_text(encoding="utf-8"))
    assert raw["expenses"][0]["amount"] == "12.35"
    assert raw["expenses"][0]["expenseBy"] == "Gaurav"


def test_json_store_missing_file_gives_defaults(tmp_path):
    store = JsonFileExpenseStore(tmp_path / "absent.json")
    assert store.get_expenses() == []
    assert store.get_settings() == Vocabulary()


def test_json_store_reads_numeric_amounts(tmp_path):
    path = tmp_path / "expenses.json"
    path.write_text(json.dumps({
        "expenses": [{"id": 1700000000000, "date": "2024-01-05", "description": "x",
                      "category": "Food", "expenseBy": "A", "amount": 99.9}],
        "categories": [],
    }), encoding="utf-8")
    records = JsonFileExpenseStore(path).get_expenses()
    assert records[0].id == "1700000000000"
    assert records[0].amount == Decimal("99.9")


def test_json_store_corrupt_file_reports_storage_error(tmp_path):
    path = tmp_path / "expenses.json"
    path.write_text("{not json", encoding="utf-8")
    store = JsonFileExpenseStore(path)

    with pytest.raises(StorageError):
        store.get_expenses()

    errors = []
    snapshots = []
    store.subscribe(snapshots.append, errors.append)
    assert snapshots == []
    assert len(errors) == 1


def test_create_store(tmp_path):
    assert isinstance(create_store({"EXPENSE_STORE": "memory"}), InMemoryExpenseStore)
    json_store = create_store({"EXPENSE_STORE": "json", "EXPENSE_STORE_PATH": str(tmp_path / "e.json")})
    assert isinstance(json_store, JsonFileExpenseStore)
    with pytest.raises(ValueError):
        create_store({"EXPENSE_STORE": "sqlite"})
    with pytest.raises(ValueError):
        create_store({"EXPENSE_STORE": "firestore", "FIRESTORE_PROJECT": ""})


class _SlowReadStore(InMemoryExpenseStore):
    """Stalls one snapshot read after copying it, while other writes go on."""

    def __init__(self):
        super().__init__()
        self.slow_next_read = False
        self.reading = threading.Event()

    def get_expenses(self):
        records = super().get_expenses()
        if self.slow_next_read:
            self.slow_next_read = False
            self.reading.set()
            time.sleep(0.3)
        return records


def test_concurrent_appends_leave_ledger_on_latest_snapshot():
    store = _SlowReadStore()
    ledger = LiveLedger()
    ledger.attach(store)
    store.slow_next_read = True

    first = threading.Thread(target=store.append_expense, args=(_draft(),))
    first.start()
    assert store.reading.wait(timeout=5)
    store.append_expense(_draft(amount="20", date="2024-01-06"))
    first.join(timeout=5)

    assert len(store.get_expenses()) == 2
    assert len(ledger.records) == 2


def test_json_store_removes_temp_file_when_write_fails(tmp_path, monkeypatch):
    store = JsonFileExpenseStore(tmp_path / "expenses.json")

    def refuse(src, dst):
        raise OSError("disk full")

    monkeypatch.setattr("expense_tracker.storage.json_store.os.replace", refuse)

    with pytest.raises(StorageError):
        store.append_category("Rent")
    assert list(tmp_path.iterdir()) == []


def test_record_from_dict_coerces_text_fields():
    record = record_from_dict({
        "id": 7,
        "date": "2024-01-05",
        "description": 5,
        "category": None,
        "expenseBy": "A",
        "amount": "1.50",
    })

    assert record.id == "7"
    assert record.description == "5"
    assert record.category == ""
