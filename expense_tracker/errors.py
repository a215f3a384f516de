"""
Exception hierarchy shared by the reporting core, storage and API layers.
"""

from __future__ import annotations


class ExpenseTrackerError(Exception):
    """Base class for every error raised by :mod:`expense_tracker`."""


class ParseError(ExpenseTrackerError, ValueError):
    """A date, amount or payload field could not be interpreted."""


class ValidationError(ExpenseTrackerError, ValueError):
    """A well-formed value broke a business rule (e.g. negative amount)."""


class StorageError(ExpenseTrackerError):
    """The storage collaborator failed to read or write."""
