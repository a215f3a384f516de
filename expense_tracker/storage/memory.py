"""
In-process store, used by default and in tests.
"""

from __future__ import annotations

import threading
from datetime import datetime
from typing import Iterable, List, Optional

from expense_tracker.models.schemas import ExpenseDraft, ExpenseRecord, Vocabulary
from expense_tracker.storage.base import ExpenseStore, IdGenerator


class InMemoryExpenseStore(ExpenseStore):

    def __init__(
        self,
        records: Optional[Iterable[ExpenseRecord]] = None,
        vocabulary: Optional[Vocabulary] = None,
        id_generator: Optional[IdGenerator] = None,
    ) -> None:
        super().__init__()
        self._records: List[ExpenseRecord] = list(records or ())
        self._vocabulary = vocabulary or Vocabulary()
        self._ids = id_generator or IdGenerator()
        self._lock = threading.Lock()

    def get_expenses(self) -> List[ExpenseRecord]:
        with self._lock:
            return list(self._records)

    def get_settings(self) -> Vocabulary:
        return self._vocabulary

    def _insert_expense(self, draft: ExpenseDraft) -> ExpenseRecord:
        record = ExpenseRecord(
            id=self._ids.next_id(),
            date=draft.date,
            description=draft.description,
            category=draft.category,
            expense_by=draft.expense_by,
            amount=draft.amount,
            created_at=datetime.now(),
        )
        with self._lock:
            self._records.append(record)
        return record

    def _save_settings(self, vocabulary: Vocabulary) -> None:
        self._vocabulary = vocabulary
