import io
import json
import logging

import pytest

from expense_tracker.config import Config
from expense_tracker.logging_config import setup_logging
from expense_tracker.storage import (
    FirestoreExpenseStore,
    InMemoryExpenseStore,
    JsonFileExpenseStore,
    create_store,
)


def test_config_reads_environment(monkeypatch):
    monkeypatch.setenv("EXPENSE_STORE", " JSON ")
    monkeypatch.setenv("CURRENCY_SYMBOL", "$")
    monkeypatch.setenv("FIRESTORE_TIMEOUT", "soon")

    config = Config().as_dict()

    assert config["EXPENSE_STORE"] == "json"
    assert config["CURRENCY_SYMBOL"] == "$"
    assert config["FIRESTORE_TIMEOUT"] == 10.0


def test_create_store_by_kind(tmp_path):
    assert isinstance(create_store({"EXPENSE_STORE": "memory"}), InMemoryExpenseStore)

    json_store = create_store({
        "EXPENSE_STORE": "json",
        "EXPENSE_STORE_PATH": str(tmp_path / "expenses.json"),
    })
    assert isinstance(json_store, JsonFileExpenseStore)

    firestore = create_store({"EXPENSE_STORE": "firestore", "FIRESTORE_PROJECT": "demo"})
    assert isinstance(firestore, FirestoreExpenseStore)
    assert "/projects/demo/databases/(default)/documents" in firestore.documents_url


def test_create_store_rejects_unknown_kind():
    with pytest.raises(ValueError):
        create_store({"EXPENSE_STORE": "sqlite"})
    with pytest.raises(ValueError):
        create_store({"EXPENSE_STORE": "firestore", "FIRESTORE_PROJECT": ""})


def test_structured_logging_includes_context():
    stream = io.StringIO()
    logger = setup_logging("DEBUG", "json", stream=stream)

    logging.getLogger("expense_tracker.test").info(
        "served", extra={"status": 200, "duration_ms": 1.5}
    )

    entry = json.loads(stream.getvalue().strip().splitlines()[-1])
    assert entry["message"] == "served"
    assert entry["level"] == "INFO"
    assert entry["status"] == 200
    assert entry["duration_ms"] == 1.5
    assert len(logger.handlers) == 1


def test_setup_logging_rejects_unknown_level():
    with pytest.raises(ValueError):
        setup_logging("LOUD")


def test_text_logging_appends_request_context():
    stream = io.StringIO()
    setup_logging("DEBUG", "text", stream=stream)

    logging.getLogger("expense_tracker.test").debug(
        "GET /api/v1/expenses -> 200", extra={"status": 200, "duration_ms": 1.5}
    )

    assert stream.getvalue().rstrip().endswith("[status=200, duration_ms=1.5]")
