"""
Storage collaborator contract.

A store owns the expense collection and the settings document.  The
reporting core only ever sees read-only snapshots of it, delivered either
on demand (:meth:`ExpenseStore.get_expenses`) or pushed to subscribers
after every change (:meth:`ExpenseStore.subscribe`).

Subclasses implement four primitives: read expenses, read settings, insert
one validated expense, and persist a settings snapshot.
"""

from __future__ import annotations

import abc
import logging
import threading
import time
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Tuple

from expense_tracker.errors import ParseError, StorageError
from expense_tracker.models.schemas import ExpenseDraft, ExpenseRecord, Vocabulary
from expense_tracker.services.validation_service import validate_draft
from expense_tracker.services.vocabulary_service import add_category, add_user
from expense_tracker.utils.money import to_decimal

logger = logging.getLogger(__name__)

SnapshotCallback = Callable[[List[ExpenseRecord]], None]
ErrorCallback = Callable[[StorageError], None]


class IdGenerator:
    """Millisecond-timestamp ids that strictly increase within a process."""

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self._clock = clock
        self._last = 0
        self._lock = threading.Lock()

    def next_id(self) -> str:
        with self._lock:
            candidate = int(self._clock() * 1000)
            self._last = max(candidate, self._last + 1)
            return str(self._last)


def _text(raw: Dict[str, Any], key: str) -> str:
    value = raw.get(key)
    return "" if value is None else str(value)


def record_from_dict(raw: Dict[str, Any], record_id: Optional[str] = None) -> ExpenseRecord:
    """
    Rebuild an :class:`ExpenseRecord` from its stored/wire dict form.

    Raises
    ------
    ParseError
        If the amount is unreadable or no id is available.
    """
    rid = record_id if record_id is not None else raw.get("id")
    if rid is None or rid == "":
        raise ParseError("Stored expense has no id.")

    created_raw = raw.get("createdAt")
    created_at = None
    if created_raw:
        try:
            created_at = datetime.fromisoformat(str(created_raw))
        except ValueError as exc:
            raise ParseError(f"Invalid createdAt {created_raw!r}.") from exc

    return ExpenseRecord(
        id=str(rid),
        date=_text(raw, "date"),
        description=_text(raw, "description"),
        category=_text(raw, "category"),
        expense_by=_text(raw, "expenseBy"),
        amount=to_decimal(raw.get("amount", 0)),
        created_at=created_at,
    )


def record_to_dict(record: ExpenseRecord) -> Dict[str, Any]:
    """Storage form: amounts as strings so no precision is lost on disk."""
    data = record.to_dict()
    data["amount"] = str(record.amount)
    if record.created_at is not None:
        data["createdAt"] = record.created_at.isoformat()
    return data


class ExpenseStore(abc.ABC):
    """Base class for every storage collaborator."""

    def __init__(self) -> None:
        self._subscribers: List[Tuple[SnapshotCallback, Optional[ErrorCallback]]] = []
        self._settings_lock = threading.Lock()
        # Held from snapshot read to last callback so pushes arrive in write order.
        self._publish_lock = threading.RLock()

    # ── Primitives ───────────────────────────────────────────────────────────

    @abc.abstractmethod
    def get_expenses(self) -> List[ExpenseRecord]:
        """Full current expense collection."""

    @abc.abstractmethod
    def get_settings(self) -> Vocabulary:
        """Current vocabulary, seeded with defaults when none is stored."""

    @abc.abstractmethod
    def _insert_expense(self, draft: ExpenseDraft) -> ExpenseRecord:
        """Persist a validated draft and return it with its id."""

    @abc.abstractmethod
    def _save_settings(self, vocabulary: Vocabulary) -> None:
        """Persist a whole vocabulary snapshot."""

    # ── Operations ───────────────────────────────────────────────────────────

    def append_expense(self, draft: ExpenseDraft) -> ExpenseRecord:
        """
        Validate and store *draft*, then push a fresh snapshot.

        Raises
        ------
        ParseError, ValidationError
            If the draft breaks a rule.
        StorageError
            If the write fails.
        """
        record = self._insert_expense(validate_draft(draft))
        logger.info("Stored expense %s (%s, %s)", record.id, record.date, record.category)
        self.publish()
        return record

    def append_category(self, name: str) -> Vocabulary:
        return self._update_settings(lambda v: add_category(v, name))

    def append_user(self, name: str) -> Vocabulary:
        return self._update_settings(lambda v: add_user(v, name))

    def _update_settings(self, update: Callable[[Vocabulary], Vocabulary]) -> Vocabulary:
        with self._settings_lock:
            current = self.get_settings()
            updated = update(current)
            if updated is not current:
                self._save_settings(updated)
            return updated

    # ── Subscriptions ────────────────────────────────────────────────────────

    def subscribe(
        self,
        on_snapshot: SnapshotCallback,
        on_error: Optional[ErrorCallback] = None,
    ) -> Callable[[], None]:
        """
        Register for full-snapshot pushes and deliver the current one now.

        Returns a callable that removes the subscription.
        """
        entry = (on_snapshot, on_error)
        self._subscribers.append(entry)
        self._deliver([entry])

        def unsubscribe() -> None:
            if entry in self._subscribers:
                self._subscribers.remove(entry)

        return unsubscribe

    def publish(self) -> None:
        """Push the current snapshot to every subscriber."""
        self._deliver(list(self._subscribers))

    def _deliver(self, entries: List[Tuple[SnapshotCallback, Optional[ErrorCallback]]]) -> None:
        if not entries:
            return
        with self._publish_lock:
            try:
                records = self.get_expenses()
            except StorageError as exc:
                logger.warning("Snapshot read failed: %s", exc)
                for _, on_error in entries:
                    if on_error is not None:
                        on_error(exc)
                return
            for on_snapshot, _ in entries:
                on_snapshot(list(records))
