"""
Vocabulary (settings) service.

Categories and payers form an append-only vocabulary.  Updates never mutate
a :class:`~expense_tracker.models.schemas.Vocabulary`; they return a new
snapshot, or the same one when the name is already present.  Names are
whitespace-trimmed and matched case-sensitively.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional, Tuple

from expense_tracker.errors import ValidationError
from expense_tracker.models.schemas import DEFAULT_CATEGORIES, DEFAULT_USERS, Vocabulary

logger = logging.getLogger(__name__)


def normalize_name(raw: Optional[str]) -> str:
    """
    Trim *raw* and reject empty names.

    Raises
    ------
    ValidationError
        If *raw* is not a string or is blank after trimming.
    """
    if not isinstance(raw, str):
        raise ValidationError(f"Name must be a string, got {type(raw).__name__}.")
    name = raw.strip()
    if not name:
        raise ValidationError("Name must not be empty.")
    return name


def _append(names: Tuple[str, ...], raw: str, kind: str) -> Tuple[str, ...]:
    name = normalize_name(raw)
    if name in names:
        logger.debug("%s %r already present; nothing to add.", kind, name)
        return names
    return names + (name,)


def add_category(vocabulary: Vocabulary, name: str) -> Vocabulary:
    """Return *vocabulary* with *name* appended to its categories."""
    categories = _append(vocabulary.categories, name, "Category")
    if categories is vocabulary.categories:
        return vocabulary
    return Vocabulary(categories=categories, users=vocabulary.users)


def add_user(vocabulary: Vocabulary, name: str) -> Vocabulary:
    """Return *vocabulary* with *name* appended to its users."""
    users = _append(vocabulary.users, name, "User")
    if users is vocabulary.users:
        return vocabulary
    return Vocabulary(categories=vocabulary.categories, users=users)


def vocabulary_from_lists(
    categories: Optional[Iterable[str]],
    users: Optional[Iterable[str]],
) -> Vocabulary:
    """
    Build a vocabulary from stored lists.

    Each list falls back to its seed values when missing or empty, and
    duplicates are dropped keeping the first occurrence.
    """
    cats = tuple(dict.fromkeys(categories or ())) or DEFAULT_CATEGORIES
    people = tuple(dict.fromkeys(users or ())) or DEFAULT_USERS
    return Vocabulary(categories=cats, users=people)
