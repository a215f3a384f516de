"""
Central configuration for the expense tracker Flask application.

Every setting can be overridden through an environment variable of the
same name; the defaults suit local development.

* ``EXPENSE_STORE``: ``memory`` (default), ``json`` or ``firestore``.
* ``EXPENSE_STORE_PATH``: JSON document used by the ``json`` store.
* ``FIRESTORE_PROJECT`` / ``FIRESTORE_DATABASE`` / ``FIRESTORE_API_KEY`` /
  ``FIRESTORE_TIMEOUT``: connection settings for the ``firestore`` store.
* ``CURRENCY_SYMBOL``: prefix used in ``*Display`` strings.
* ``LOG_LEVEL`` / ``LOG_FORMAT``: see :mod:`expense_tracker.logging_config`.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent
DEFAULT_STORE_PATH = BASE_DIR / "instance" / "expenses.json"


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError:
        logging.getLogger("expense_tracker.config").warning(
            "%s=%r is not a number; using %s.", name, raw, default
        )
        return default


class Config:
    """Settings loaded into ``app.config`` by the application factory."""

    def __init__(self) -> None:
        self.JSON_SORT_KEYS = False
        self.EXPENSE_STORE = os.getenv("EXPENSE_STORE", "memory").strip().lower()
        self.EXPENSE_STORE_PATH = os.getenv("EXPENSE_STORE_PATH", str(DEFAULT_STORE_PATH))
        self.FIRESTORE_PROJECT = os.getenv("FIRESTORE_PROJECT", "")
        self.FIRESTORE_DATABASE = os.getenv("FIRESTORE_DATABASE", "(default)")
        self.FIRESTORE_API_KEY = os.getenv("FIRESTORE_API_KEY") or None
        self.FIRESTORE_TIMEOUT = _float_env("FIRESTORE_TIMEOUT", 10.0)
        self.CURRENCY_SYMBOL = os.getenv("CURRENCY_SYMBOL", "₹")
        self.LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
        self.LOG_FORMAT = os.getenv("LOG_FORMAT", "text")

    def as_dict(self) -> dict:
        return {k: v for k, v in vars(self).items() if k.isupper()}
