"""
Immutable data models / schemas for the expense tracker.

These dataclasses serve as typed containers that travel between
the storage → service → route layers.  No business logic lives here
beyond serialisation to the camelCase JSON shapes the API returns.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date as date_type, datetime
from decimal import Decimal
from typing import Dict, List, Optional, Tuple

from expense_tracker.utils.money import (
    DEFAULT_CURRENCY_SYMBOL,
    decimal_to_float,
    format_money,
    format_percentage,
)
from expense_tracker.utils.time_utils import format_month_label

DEFAULT_CATEGORIES: Tuple[str, ...] = ("Grocery", "Fuel", "Misc", "Food")
DEFAULT_USERS: Tuple[str, ...] = ("Gaurav", "Dolly")


def _money_map(values: Dict[str, Decimal]) -> Dict[str, float]:
    return {k: decimal_to_float(v) for k, v in values.items()}


#Expense atoms
@dataclass(frozen=True)
class ExpenseDraft:
    """An expense as submitted by a client, before the store assigns an id."""
    date: str
    description: str
    category: str
    expense_by: str
    amount: Decimal


@dataclass(frozen=True)
class ExpenseRecord:
    """
    One stored expense.

    ``date`` is kept as the string received so malformed values reach the
    reporting layer and can be surfaced there.  ``created_at`` is set by the
    store when it knows the creation time and only drives sort tie-breaks.
    """
    id: str
    date: str
    description: str
    category: str
    expense_by: str
    amount: Decimal
    created_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "date": self.date,
            "description": self.description,
            "category": self.category,
            "expenseBy": self.expense_by,
            "amount": decimal_to_float(self.amount),
        }


#Settings
@dataclass(frozen=True)
class Vocabulary:
    """Append-only category and payer names, in insertion order."""
    categories: Tuple[str, ...] = DEFAULT_CATEGORIES
    users: Tuple[str, ...] = DEFAULT_USERS

    def to_dict(self) -> dict:
        return {"categories": list(self.categories), "users": list(self.users)}


#Period reports
@dataclass(frozen=True)
class CategorySum:
    category: str
    total: Decimal

    def to_dict(self) -> dict:
        return {"category": self.category, "total": decimal_to_float(self.total)}


@dataclass(frozen=True)
class PeriodSummary:
    """Per-category totals for one period bucket (month or week start)."""
    period: str
    category_sums: List[CategorySum]
    subtotal: Decimal
    label: str = ""

    def to_dict(self) -> dict:
        return {
            "period": self.period,
            "label": self.label or self.period,
            "categorySums": [c.to_dict() for c in self.category_sums],
            "subtotal": decimal_to_float(self.subtotal),
        }


#Person matrices
@dataclass(frozen=True)
class PersonRow:
    """One month row of a month × person matrix."""
    month: str
    by_person: Dict[str, Decimal]
    total: Decimal

    def to_dict(self) -> dict:
        return {
            "month": self.month,
            "label": format_month_label(self.month),
            "byPerson": _money_map(self.by_person),
            "total": decimal_to_float(self.total),
        }


@dataclass(frozen=True)
class CategoryMatrix:
    category: str
    rows: List[PersonRow]
    total: Decimal

    def to_dict(self) -> dict:
        return {
            "category": self.category,
            "months": [r.to_dict() for r in self.rows],
            "total": decimal_to_float(self.total),
        }


@dataclass(frozen=True)
class CategoryMonthPersonReport:
    """Category → month → person totals; ``users`` lists the matrix columns."""
    users: List[str]
    categories: List[CategoryMatrix]

    def to_dict(self) -> dict:
        return {
            "users": list(self.users),
            "categories": [c.to_dict() for c in self.categories],
        }


@dataclass(frozen=True)
class PersonSummaryReport:
    users: List[str]
    totals: Dict[str, Decimal]
    rows: List[PersonRow]
    grand_total: Decimal

    def to_dict(self) -> dict:
        return {
            "users": list(self.users),
            "totals": _money_map(self.totals),
            "months": [r.to_dict() for r in self.rows],
            "grandTotal": decimal_to_float(self.grand_total),
        }


#Category breakdown
@dataclass(frozen=True)
class CategoryShare:
    name: str
    value: Decimal
    pct: Decimal

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "value": decimal_to_float(self.value),
            "pct": format_percentage(self.pct),
        }


@dataclass(frozen=True)
class CategoryBreakdown:
    month: Optional[str]
    total: Decimal
    shares: List[CategoryShare] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "month": self.month,
            "total": decimal_to_float(self.total),
            "categories": [s.to_dict() for s in self.shares],
        }


#List-style outputs
@dataclass(frozen=True)
class ExpenseListResult:
    """Filtered expenses in canonical order plus their total."""
    expenses: List[ExpenseRecord]
    total: Decimal

    @property
    def count(self) -> int:
        return len(self.expenses)

    def to_dict(self, symbol: str = DEFAULT_CURRENCY_SYMBOL) -> dict:
        return {
            "expenses": [e.to_dict() for e in self.expenses],
            "count": self.count,
            "total": decimal_to_float(self.total),
            "totalDisplay": format_money(self.total, symbol),
        }


@dataclass(frozen=True)
class DateRangeSummary:
    date_from: Optional[str]
    date_to: Optional[str]
    total: Decimal
    by_category: Dict[str, Decimal]
    by_person: Dict[str, Decimal]
    expenses: List[ExpenseRecord]

    @property
    def count(self) -> int:
        return len(self.expenses)

    def to_dict(self, symbol: str = DEFAULT_CURRENCY_SYMBOL) -> dict:
        return {
            "from": self.date_from,
            "to": self.date_to,
            "total": decimal_to_float(self.total),
            "totalDisplay": format_money(self.total, symbol),
            "count": self.count,
            "byCategory": _money_map(self.by_category),
            "byPerson": _money_map(self.by_person),
            "expenses": [e.to_dict() for e in self.expenses],
        }


#Query definition
@dataclass(frozen=True)
class ExpenseQuery:
    """
    Conjunction of optional list-view clauses; unset clauses match everything.

    ``date_from`` / ``date_to`` are inclusive and either may be open.
    """
    categories: Tuple[str, ...] = ()
    date: Optional[str] = None
    month: Optional[str] = None
    expense_by: Optional[str] = None
    search: str = ""
    date_from: Optional[date_type] = None
    date_to: Optional[date_type] = None
