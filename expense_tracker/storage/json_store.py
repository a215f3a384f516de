"""
Local JSON-file store for offline use.

The whole state lives in one JSON document::

    {"expenses": [...], "categories": [...], "users": [...]}

Every read re-opens the file so edits made by another process are picked
up; every write replaces the file atomically.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from expense_tracker.errors import ParseError, StorageError
from expense_tracker.models.schemas import ExpenseDraft, ExpenseRecord, Vocabulary
from expense_tracker.services.vocabulary_service import vocabulary_from_lists
from expense_tracker.storage.base import (
    ExpenseStore,
    IdGenerator,
    record_from_dict,
    record_to_dict,
)

logger = logging.getLogger(__name__)


class JsonFileExpenseStore(ExpenseStore):

    def __init__(
        self,
        path: Union[str, Path],
        id_generator: Optional[IdGenerator] = None,
    ) -> None:
        super().__init__()
        self.path = Path(path)
        self._ids = id_generator or IdGenerator()
        self._lock = threading.Lock()

    # ── File I/O ─────────────────────────────────────────────────────────────

    def _load(self) -> Dict[str, Any]:
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            return {}
        except (OSError, json.JSONDecodeError) as exc:
            raise StorageError(f"Cannot read {self.path}: {exc}") from exc
        if not isinstance(data, dict):
            raise StorageError(f"{self.path} does not hold a JSON object.")
        return data

    def _write(self, data: Dict[str, Any]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp = tempfile.mkstemp(dir=self.path.parent, suffix=".tmp")
        except OSError as exc:
            raise StorageError(f"Cannot write {self.path}: {exc}") from exc

        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False, indent=2)
            os.replace(tmp, self.path)
        except (OSError, TypeError, ValueError) as exc:
            os.unlink(tmp)
            raise StorageError(f"Cannot write {self.path}: {exc}") from exc

    # ── Primitives ───────────────────────────────────────────────────────────

    def get_expenses(self) -> List[ExpenseRecord]:
        records: List[ExpenseRecord] = []
        for i, raw in enumerate(self._load().get("expenses", [])):
            try:
                records.append(record_from_dict(raw))
            except (ParseError, AttributeError) as exc:
                raise StorageError(f"{self.path}: expense #{i} is corrupt: {exc}") from exc
        return records

    def get_settings(self) -> Vocabulary:
        data = self._load()
        return vocabulary_from_lists(data.get("categories"), data.get("users"))

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
            data = self._load()
            data.setdefault("expenses", []).append(record_to_dict(record))
            self._write(data)
        return record

    def _save_settings(self, vocabulary: Vocabulary) -> None:
        with self._lock:
            data = self._load()
            data["categories"] = list(vocabulary.categories)
            data["users"] = list(vocabulary.users)
            self._write(data)
        logger.debug("Saved settings to %s", self.path)
