"""
Performance metrics route.

Endpoint
--------
GET /api/v1/performance

Returns the execution time of the most recently completed request,
current process RSS memory usage, active thread count and the state of
the live expense snapshot.
"""

from __future__ import annotations

from flask import Blueprint, Response, jsonify

from expense_tracker import get_last_request_time_ms, get_state
from expense_tracker.utils.performance import collect_performance_snapshot

performance_bp = Blueprint("performance", __name__)

BASE = "/api/v1"


@performance_bp.route(f"{BASE}/performance", methods=["GET"])
def get_performance() -> tuple[Response, int]:
    """
    Return a live performance snapshot.

    Response body::

        {
            "time":    "X.XXXX ms",
            "memory":  "XXX.XX MB",
            "threads": integer,
            "snapshot": {"expenses": integer, "updatedAt": str | null,
                         "storageError": str | null}
        }
    """
    ledger = get_state().ledger
    error = ledger.last_error
    snapshot = collect_performance_snapshot(
        get_last_request_time_ms(),
        expense_count=len(ledger.records),
        snapshot_updated_at=ledger.updated_at,
        storage_error=str(error) if error else None,
    )
    return jsonify(snapshot), 200
