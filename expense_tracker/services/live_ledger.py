"""
Live snapshot holder.

The storage collaborator pushes whole-collection snapshots at arbitrary
times.  :class:`LiveLedger` keeps the latest one as the working set and
answers report requests from it.  Reports are memoised per snapshot: a new
snapshot drops every cached result, and a storage error leaves the last
good snapshot (and its cache) in place.
"""

from __future__ import annotations

import logging
import threading
from datetime import datetime
from typing import Any, Callable, Dict, Hashable, Iterable, Optional, Tuple

from expense_tracker.errors import StorageError
from expense_tracker.models.schemas import ExpenseRecord

logger = logging.getLogger(__name__)


class LiveLedger:

    def __init__(self, records: Iterable[ExpenseRecord] = ()) -> None:
        self._records: Tuple[ExpenseRecord, ...] = tuple(records)
        self._memo: Dict[Hashable, Any] = {}
        self._lock = threading.Lock()
        self.last_error: Optional[StorageError] = None
        self.updated_at: Optional[datetime] = None

    @property
    def records(self) -> Tuple[ExpenseRecord, ...]:
        return self._records

    def on_snapshot_changed(self, records: Iterable[ExpenseRecord]) -> None:
        """Replace the entire working set."""
        snapshot = tuple(records)
        with self._lock:
            self._records = snapshot
            self._memo = {}
            self.last_error = None
            self.updated_at = datetime.now()
        logger.debug("Snapshot replaced: %d expenses", len(snapshot))

    def on_error(self, exc: StorageError) -> None:
        """Record a feed failure; keep serving the last good snapshot."""
        self.last_error = exc
        logger.warning(
            "Storage feed error, keeping last snapshot of %d expenses: %s",
            len(self._records),
            exc,
        )

    def attach(self, store) -> Callable[[], None]:
        """Subscribe to *store*; returns its unsubscribe callable."""
        return store.subscribe(self.on_snapshot_changed, self.on_error)

    def report(
        self,
        key: Hashable,
        build: Callable[[Tuple[ExpenseRecord, ...]], Any],
    ) -> Any:
        """
        Return ``build(records)`` for the current snapshot, memoised on *key*.

        *key* must capture every input besides the snapshot (e.g. the
        vocabulary or a month filter).
        """
        with self._lock:
            snapshot, memo = self._records, self._memo
            if key in memo:
                return memo[key]

        value = build(snapshot)

        with self._lock:
            # Only cache if no newer snapshot arrived while building.
            if self._records is snapshot:
                self._memo[key] = value
        return value
