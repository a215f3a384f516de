"""
Storage collaborators and the factory that picks one from configuration.
"""

from __future__ import annotations

from typing import Any, Mapping

from expense_tracker.storage.base import ExpenseStore
from expense_tracker.storage.firestore import FirestoreExpenseStore
from expense_tracker.storage.json_store import JsonFileExpenseStore
from expense_tracker.storage.memory import InMemoryExpenseStore

__all__ = [
    "ExpenseStore",
    "FirestoreExpenseStore",
    "InMemoryExpenseStore",
    "JsonFileExpenseStore",
    "create_store",
]


def create_store(config: Mapping[str, Any]) -> ExpenseStore:
    """
    Build the store named by ``config["EXPENSE_STORE"]``.

    Raises
    ------
    ValueError
        For an unknown store kind or missing Firestore project.
    """
    kind = config.get("EXPENSE_STORE", "memory")
    if kind == "memory":
        return InMemoryExpenseStore()
    if kind == "json":
        return JsonFileExpenseStore(config["EXPENSE_STORE_PATH"])
    if kind == "firestore":
        return FirestoreExpenseStore(
            project=config.get("FIRESTORE_PROJECT", ""),
            database=config.get("FIRESTORE_DATABASE", "(default)"),
            api_key=config.get("FIRESTORE_API_KEY"),
            timeout=config.get("FIRESTORE_TIMEOUT", 10.0),
        )
    raise ValueError(f"Unknown EXPENSE_STORE {kind!r}; expected memory, json or firestore.")
