"""
Expense filter service.

Provides two public entry-points:

filter_expenses(records, query)
    Narrow a snapshot to the records matching every active clause of an
    :class:`~expense_tracker.models.schemas.ExpenseQuery`.  The output
    keeps the input's relative order.

sort_expenses(records)
    Canonical list-view order:

    1. Newest calendar date first.
    2. Missing or malformed dates after every real date.
    3. Equal dates: newest-created first (``created_at``, then numeric id,
       then id string).

    Python's sort is stable, so records with identical keys keep their
    input order and repeated calls give the same result.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Callable, List, Optional, Sequence, Tuple

from expense_tracker.models.schemas import ExpenseQuery, ExpenseRecord
from expense_tracker.utils.time_utils import is_within_range, month_key, try_parse_date

Predicate = Callable[[ExpenseRecord], bool]

ALL_PAYERS = "All"


# ── Clause builders ──────────────────────────────────────────────────────────

def _category_clause(categories: Sequence[str]) -> Predicate:
    allowed = frozenset(categories)
    return lambda r: r.category in allowed


def _exact_date_clause(day: str) -> Predicate:
    return lambda r: r.date == day


def _month_clause(month: str) -> Predicate:
    # Same key as the monthly buckets, so malformed dates never match a month.
    return lambda r: month_key(r.date) == month


def _payer_clause(payer: str) -> Predicate:
    return lambda r: r.expense_by == payer


def _search_clause(text: str) -> Predicate:
    needle = text.casefold()
    return lambda r: needle in (r.description or "").casefold()


def _range_clause(start: Optional[date], end: Optional[date]) -> Predicate:
    def _match(record: ExpenseRecord) -> bool:
        d = try_parse_date(record.date)
        # A record without a usable date cannot be placed inside any range.
        if d is None:
            return False
        return is_within_range(d, start, end)

    return _match


def build_predicates(query: ExpenseQuery) -> List[Predicate]:
    """Translate the active clauses of *query* into predicates."""
    predicates: List[Predicate] = []

    if query.categories:
        predicates.append(_category_clause(query.categories))
    if query.date:
        predicates.append(_exact_date_clause(query.date))
    if query.month:
        predicates.append(_month_clause(query.month))
    if query.expense_by and query.expense_by != ALL_PAYERS:
        predicates.append(_payer_clause(query.expense_by))

    search = (query.search or "").strip()
    if search:
        predicates.append(_search_clause(search))

    if query.date_from is not None or query.date_to is not None:
        predicates.append(_range_clause(query.date_from, query.date_to))

    return predicates


# ── Public API ───────────────────────────────────────────────────────────────

def filter_expenses(
    records: Sequence[ExpenseRecord],
    query: Optional[ExpenseQuery] = None,
) -> List[ExpenseRecord]:
    """
    Return the records passing every clause of *query*, in input order.

    An empty query (or ``None``) returns all records unchanged.
    """
    if query is None:
        return list(records)
    predicates = build_predicates(query)
    return [r for r in records if all(p(r) for p in predicates)]


def _id_key(raw_id: object) -> Tuple[int, int, str]:
    text = str(raw_id)
    if text.isdigit():
        return (1, int(text), "")
    return (0, 0, text)


def _creation_key(created_at: Optional[datetime]) -> float:
    return created_at.timestamp() if created_at is not None else float("-inf")


def _sort_key(record: ExpenseRecord):
    d = try_parse_date(record.date)
    return (
        d is not None,
        d or date.min,
        _creation_key(record.created_at),
        _id_key(record.id),
    )


def sort_expenses(records: Sequence[ExpenseRecord]) -> List[ExpenseRecord]:
    """Return *records* in canonical list-view order (newest first)."""
    return sorted(records, key=_sort_key, reverse=True)
