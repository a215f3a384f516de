"""
Expense draft validator service.

Responsibility: apply the business rules a new expense must satisfy
before it is handed to the storage collaborator.

Rules (applied in order):
1. ``date`` must be a valid ``YYYY-MM-DD`` date.
2. ``description`` must be non-empty after trimming.
3. ``category`` and ``expense_by`` must be non-empty.  They are *not*
   checked against the vocabulary, which can change independently.
4. ``amount`` must be >= 0.
"""

from __future__ import annotations

from expense_tracker.errors import ValidationError
from expense_tracker.models.schemas import ExpenseDraft
from expense_tracker.utils.money import ZERO
from expense_tracker.utils.time_utils import format_date, parse_date


def validate_draft(draft: ExpenseDraft) -> ExpenseDraft:
    """
    Check *draft* and return a normalised copy.

    The date is re-rendered in canonical form and text fields are trimmed.

    Raises
    ------
    ParseError
        If the date cannot be parsed.
    ValidationError
        If any other rule fails.
    """
    day = format_date(parse_date(draft.date))

    description = (draft.description or "").strip()
    if not description:
        raise ValidationError("'description' must not be empty.")

    category = (draft.category or "").strip()
    if not category:
        raise ValidationError("'category' must not be empty.")

    expense_by = (draft.expense_by or "").strip()
    if not expense_by:
        raise ValidationError("'expenseBy' must not be empty.")

    if draft.amount < ZERO:
        raise ValidationError(f"amount ({draft.amount}) must be >= 0.")

    return ExpenseDraft(
        date=day,
        description=description,
        category=category,
        expense_by=expense_by,
        amount=draft.amount,
    )
