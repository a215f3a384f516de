"""
System performance snapshot utilities.
"""

from __future__ import annotations

import threading
from datetime import datetime
from typing import Optional

import psutil


def get_process_memory_mb() -> float:
    """RSS of the current process in megabytes, via :mod:`psutil`."""
    rss_bytes: int = psutil.Process().memory_info().rss
    return rss_bytes / (1024 * 1024)


def collect_performance_snapshot(
    last_request_ms: float,
    expense_count: int,
    snapshot_updated_at: Optional[datetime] = None,
    storage_error: Optional[str] = None,
) -> dict:
    """
    Build the performance metrics dictionary.

    Parameters
    ----------
    last_request_ms:
        Execution time of the most recently completed request, in milliseconds.
    expense_count:
        Size of the live snapshot the reports are computed from.
    snapshot_updated_at:
        When that snapshot was last replaced, if ever.
    storage_error:
        Message of the last storage feed failure, if the feed is unhealthy.

    Returns
    -------
    dict
        ``{"time": "...", "memory": "...", "threads": int, "snapshot": {...}}``
    """
    return {
        "time": f"{last_request_ms:.4f} ms",
        "memory": f"{get_process_memory_mb():.2f} MB",
        "threads": threading.active_count(),
        "snapshot": {
            "expenses": expense_count,
            "updatedAt": snapshot_updated_at.isoformat() if snapshot_updated_at else None,
            "storageError": storage_error,
        },
    }
