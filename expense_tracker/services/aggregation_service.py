"""
Grouping / aggregation service.

Responsibility: partition an expense snapshot by one or more keys and
reduce each partition to a :class:`~decimal.Decimal` sum.  Pure business
logic – no I/O, no state carried between calls.

Ordering
--------
Every mapping produced here is a plain ``dict`` and keeps the first-seen
order of its keys.  Nothing is sorted unless the caller asks for it
(see :func:`sort_month_keys`).

Empty-bucket policy
-------------------
Records with a *missing* date never reach a period bucket.  Records with
a *malformed* date are bucketed under
:data:`~expense_tracker.utils.time_utils.INVALID_DATE`, which stays visible
in reports and sorts after every real period.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Callable, Dict, Iterable, List, Sequence, TypeVar

from expense_tracker.models.schemas import CategorySum, ExpenseRecord, PeriodSummary
from expense_tracker.utils.money import ZERO, sum_money
from expense_tracker.utils.time_utils import INVALID_DATE, is_missing_date, month_key

T = TypeVar("T")
K = TypeVar("K")

PeriodKeyFn = Callable[[str], str]
RecordKeyFn = Callable[[ExpenseRecord], str]


# ── Generic combinators ──────────────────────────────────────────────────────

def group_by(items: Iterable[T], key_fn: Callable[[T], K]) -> Dict[K, List[T]]:
    """
    Partition *items* by ``key_fn(item)``.

    Keys appear in first-seen order and each group keeps the relative
    order of its items.
    """
    groups: Dict[K, List[T]] = {}
    for item in items:
        groups.setdefault(key_fn(item), []).append(item)
    return groups


def total_amount(records: Iterable[ExpenseRecord]) -> Decimal:
    """Exact total of ``amount`` over *records*, independent of order."""
    return sum_money(r.amount for r in records)


def dated_records(records: Iterable[ExpenseRecord]) -> List[ExpenseRecord]:
    """Records eligible for period bucketing (date present, valid or not)."""
    return [r for r in records if not is_missing_date(r.date)]


def sum_by_keys(
    records: Iterable[ExpenseRecord],
    *key_fns: RecordKeyFn,
) -> Dict[str, Any]:
    """
    Nested sum of ``amount`` keyed by each of *key_fns* in turn.

    ``sum_by_keys(rs, by_category, by_month, by_person)`` returns
    ``{category: {month: {person: Decimal}}}``.  Callers wanting the
    period empty-bucket policy pass the output of :func:`dated_records`.

    Raises
    ------
    ValueError
        If no key function is supplied.
    """
    if not key_fns:
        raise ValueError("sum_by_keys needs at least one key function.")

    result: Dict[str, Any] = {}
    *outer, last = key_fns
    for record in records:
        node = result
        for fn in outer:
            node = node.setdefault(fn(record), {})
        leaf = last(record)
        node[leaf] = node.get(leaf, ZERO) + record.amount
    return result


# ── Record key functions ─────────────────────────────────────────────────────

def by_category(record: ExpenseRecord) -> str:
    return record.category


def by_person(record: ExpenseRecord) -> str:
    return record.expense_by


def by_month(record: ExpenseRecord) -> str:
    return month_key(record.date)


# ── Period report core ───────────────────────────────────────────────────────

def group_and_sum(
    records: Sequence[ExpenseRecord],
    key_fn: PeriodKeyFn,
    label_fn: Callable[[str], str] = str,
) -> List[PeriodSummary]:
    """
    Bucket *records* by ``key_fn(record.date)`` and total each category.

    Parameters
    ----------
    records:
        Expense snapshot, in any order.
    key_fn:
        Maps a record's date string to its period key, e.g.
        :func:`~expense_tracker.utils.time_utils.month_key`.
    label_fn:
        Produces the display label of a period key.

    Returns
    -------
    List[PeriodSummary]
        One entry per period in first-seen order; within a period the
        categories are in first-seen order too.
    """
    periods = group_by(dated_records(records), lambda r: key_fn(r.date))

    summaries: List[PeriodSummary] = []
    for period, items in periods.items():
        category_sums = [
            CategorySum(category=cat, total=total_amount(group))
            for cat, group in group_by(items, by_category).items()
        ]
        summaries.append(
            PeriodSummary(
                period=period,
                category_sums=category_sums,
                subtotal=sum_money(c.total for c in category_sums),
                label=label_fn(period),
            )
        )
    return summaries


def sort_month_keys(keys: Iterable[str], descending: bool = False) -> List[str]:
    """
    Sort ``YYYY-MM`` keys; :data:`INVALID_DATE` always goes last.
    """
    keys = list(keys)
    ordered = sorted((k for k in keys if k != INVALID_DATE), reverse=descending)
    if INVALID_DATE in keys:
        ordered.append(INVALID_DATE)
    return ordered
