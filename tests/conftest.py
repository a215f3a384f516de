from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

import pytest
from flask import Flask
from flask.testing import FlaskClient

from expense_tracker import create_app
from expense_tracker.models.schemas import ExpenseRecord, Vocabulary
from expense_tracker.storage.memory import InMemoryExpenseStore


def make_record(
    id,
    date: str,
    category: str = "Food",
    expense_by: str = "A",
    amount="0",
    description: str = "item",
    created_at: Optional[datetime] = None,
) -> ExpenseRecord:
    return ExpenseRecord(
        id=str(id),
        date=date,
        description=description,
        category=category,
        expense_by=expense_by,
        amount=Decimal(str(amount)),
        created_at=created_at,
    )


@pytest.fixture
def sample_records() -> List[ExpenseRecord]:
    return [
        make_record(1, "2024-01-05", "Food", "A", 100, "Lunch at office"),
        make_record(2, "2024-01-20", "Food", "B", 50, "Dinner"),
        make_record(3, "2024-02-01", "Fuel", "A", 30, "Petrol"),
    ]


@pytest.fixture
def vocabulary() -> Vocabulary:
    return Vocabulary(users=("A", "B"))


@pytest.fixture
def store(sample_records, vocabulary) -> InMemoryExpenseStore:
    return InMemoryExpenseStore(sample_records, vocabulary)


@pytest.fixture
def app(store) -> Flask:
    return create_app({"TESTING": True, "LOG_LEVEL": "WARNING"}, store=store)


@pytest.fixture
def client(app) -> FlaskClient:
    return app.test_client()
