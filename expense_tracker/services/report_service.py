"""
Report builder service.

Each builder composes the filter service and the aggregation service into
one named report shape.  Builders are pure: the output depends only on the
snapshot and vocabulary passed in, and an empty snapshot yields an empty
(or zeroed) report rather than an error.

Reports
-------
* :func:`monthly_by_category`   – period → category totals, by month.
* :func:`weekly_by_category`    – same, by Sunday-start week.
* :func:`category_month_person` – category → month → person matrix.
* :func:`person_summary`        – per-person totals + month × person matrix.
* :func:`category_breakdown`    – category totals with percentage share.
* :func:`date_range_summary`    – totals and records inside a date range.
* :func:`expense_list`          – filtered list view with its total.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Sequence

from expense_tracker.models.schemas import (
    CategoryBreakdown,
    CategoryMatrix,
    CategoryMonthPersonReport,
    CategoryShare,
    DateRangeSummary,
    ExpenseListResult,
    ExpenseQuery,
    ExpenseRecord,
    PeriodSummary,
    PersonRow,
    PersonSummaryReport,
    Vocabulary,
)
from expense_tracker.services.aggregation_service import (
    by_category,
    by_month,
    by_person,
    dated_records,
    group_and_sum,
    sort_month_keys,
    sum_by_keys,
    total_amount,
)
from expense_tracker.services.filter_service import filter_expenses, sort_expenses
from expense_tracker.utils.money import ZERO, percentage, sum_money
from expense_tracker.utils.time_utils import (
    INVALID_DATE,
    DateLike,
    format_date,
    format_month_label,
    month_key,
    parse_optional_date,
    week_start_key,
)

logger = logging.getLogger(__name__)


# ── Shared helpers ───────────────────────────────────────────────────────────

def _ordered_names(configured: Iterable[str], seen: Iterable[str]) -> List[str]:
    """Configured names first, then unknown names in first-seen order."""
    names = list(dict.fromkeys(configured))
    known = set(names)
    for name in seen:
        if name not in known:
            names.append(name)
            known.add(name)
    return names


def _person_row(month: str, sums: Dict[str, Decimal], columns: Sequence[str]) -> PersonRow:
    return PersonRow(
        month=month,
        by_person={person: sums.get(person, ZERO) for person in columns},
        total=sum_money(sums.values()),
    )


def _week_label(key: str) -> str:
    return key if key == INVALID_DATE else f"Week Starting {key}"


# ── Period reports ───────────────────────────────────────────────────────────

def monthly_by_category(records: Sequence[ExpenseRecord]) -> List[PeriodSummary]:
    """Month → category totals, months in first-seen order."""
    return group_and_sum(records, month_key, format_month_label)


def weekly_by_category(records: Sequence[ExpenseRecord]) -> List[PeriodSummary]:
    """Week-start → category totals, weeks in first-seen order."""
    return group_and_sum(records, week_start_key, _week_label)


# ── Person matrices ──────────────────────────────────────────────────────────

def category_month_person(
    records: Sequence[ExpenseRecord],
    vocabulary: Vocabulary,
) -> CategoryMonthPersonReport:
    """
    Build the category × month × person report.

    Parameters
    ----------
    records:
        Expense snapshot.  Records without a date are left out.
    vocabulary:
        Supplies the column order (configured users) and category order.
        Payers and categories missing from the vocabulary are appended in
        first-seen order so no amount is dropped.

    Returns
    -------
    CategoryMonthPersonReport
        One :class:`CategoryMatrix` per category with its month rows sorted
        ascending; every row has a column for every user (``0`` if absent)
        and a row total.
    """
    dated = dated_records(records)
    users = _ordered_names(vocabulary.users, (r.expense_by for r in dated))
    nested = sum_by_keys(dated, by_category, by_month, by_person)

    categories = _ordered_names(
        (c for c in vocabulary.categories if c in nested), nested.keys()
    )

    matrices: List[CategoryMatrix] = []
    for category in categories:
        months = nested[category]
        rows = [_person_row(m, months[m], users) for m in sort_month_keys(months)]
        matrices.append(
            CategoryMatrix(
                category=category,
                rows=rows,
                total=sum_money(r.total for r in rows),
            )
        )

    return CategoryMonthPersonReport(users=users, categories=matrices)


def person_summary(
    records: Sequence[ExpenseRecord],
    vocabulary: Vocabulary,
) -> PersonSummaryReport:
    """
    Per-person totals over the whole snapshot plus a month × person matrix.

    The totals include undated records; the matrix does not.  Matrix rows
    are sorted newest month first.
    """
    users = _ordered_names(vocabulary.users, (r.expense_by for r in records))
    person_totals = sum_by_keys(records, by_person)
    matrix = sum_by_keys(dated_records(records), by_month, by_person)

    rows = [
        _person_row(month, matrix[month], users)
        for month in sort_month_keys(matrix, descending=True)
    ]

    return PersonSummaryReport(
        users=users,
        totals={u: person_totals.get(u, ZERO) for u in users},
        rows=rows,
        grand_total=total_amount(records),
    )


# ── Breakdown & range ────────────────────────────────────────────────────────

def category_breakdown(
    records: Sequence[ExpenseRecord],
    month: Optional[str] = None,
) -> CategoryBreakdown:
    """
    Category totals and their share of the (optionally month-filtered) total.

    Shares are sorted by total, largest first; equal totals keep the order
    in which their categories first appear.  A zero total gives every
    category a ``0.0`` share.
    """
    scoped = filter_expenses(records, ExpenseQuery(month=month)) if month else list(records)
    total = total_amount(scoped)

    shares = [
        CategoryShare(name=name, value=value, pct=percentage(value, total))
        for name, value in sum_by_keys(scoped, by_category).items()
    ]
    shares.sort(key=lambda s: s.value, reverse=True)

    return CategoryBreakdown(month=month, total=total, shares=shares)


def date_range_summary(
    records: Sequence[ExpenseRecord],
    date_from: DateLike = None,
    date_to: DateLike = None,
) -> DateRangeSummary:
    """
    Summarise the records dated inside ``[date_from, date_to]``.

    Raises
    ------
    ParseError
        If a supplied bound is not a valid ``YYYY-MM-DD`` date.
    """
    start = parse_optional_date(date_from)
    end = parse_optional_date(date_to)
    if start is not None and end is not None and start > end:
        logger.debug("Date range %s..%s is inverted; summary will be empty.", start, end)

    matched = filter_expenses(records, ExpenseQuery(date_from=start, date_to=end))

    return DateRangeSummary(
        date_from=format_date(start) if start else None,
        date_to=format_date(end) if end else None,
        total=total_amount(matched),
        by_category=sum_by_keys(matched, by_category),
        by_person=sum_by_keys(matched, by_person),
        expenses=sort_expenses(matched),
    )


def expense_list(
    records: Sequence[ExpenseRecord],
    query: Optional[ExpenseQuery] = None,
) -> ExpenseListResult:
    """List view: filtered records in canonical order plus their total."""
    matched = filter_expenses(records, query)
    return ExpenseListResult(expenses=sort_expenses(matched), total=total_amount(matched))
