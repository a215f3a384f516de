"""
Application factory with performance measurement middleware.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from flask import Flask, Response, current_app, g, jsonify, request

from expense_tracker.config import Config
from expense_tracker.errors import ParseError, StorageError, ValidationError
from expense_tracker.logging_config import setup_logging
from expense_tracker.services.live_ledger import LiveLedger
from expense_tracker.storage import ExpenseStore, create_store

logger = logging.getLogger(__name__)

EXTENSION_KEY = "expense_tracker"

# Thread-safe store for last request timing
_last_request_lock = threading.Lock()
_last_request_time_ms: float = 0.0


@dataclass
class TrackerState:
    """Per-app wiring between the storage collaborator and the live ledger."""
    store: ExpenseStore
    ledger: LiveLedger
    unsubscribe: Callable[[], None]


def create_app(
    overrides: Optional[Dict[str, Any]] = None,
    store: Optional[ExpenseStore] = None,
) -> Flask:
    """
    Create and configure the Flask application.

    Parameters
    ----------
    overrides:
        Values applied on top of :class:`~expense_tracker.config.Config`.
    store:
        Ready-made storage collaborator; built from config when omitted.
    """
    app = Flask(__name__)
    app.config.update(Config().as_dict())
    if overrides:
        app.config.update(overrides)
    app.json.sort_keys = app.config["JSON_SORT_KEYS"]

    setup_logging(app.config["LOG_LEVEL"], app.config["LOG_FORMAT"])

    if store is None:
        store = create_store(app.config)

    ledger = LiveLedger()
    unsubscribe = ledger.attach(store)
    app.extensions[EXTENSION_KEY] = TrackerState(store=store, ledger=ledger, unsubscribe=unsubscribe)
    logger.info(
        "Expense tracker ready (%s store, %d expenses)",
        type(store).__name__,
        len(ledger.records),
    )

    # ── Performance middleware ──────────────────────────────────────────────

    @app.before_request
    def _start_timer() -> None:
        g.start_time = time.perf_counter()

    @app.after_request
    def _stop_timer(response: Response) -> Response:
        global _last_request_time_ms
        elapsed = (time.perf_counter() - g.start_time) * 1_000
        with _last_request_lock:
            _last_request_time_ms = elapsed
        response.headers["X-Response-Time-Ms"] = f"{elapsed:.4f}"
        logger.debug(
            "%s %s -> %s",
            request.method,
            request.path,
            response.status_code,
            extra={"duration_ms": round(elapsed, 4), "status": response.status_code},
        )
        return response

    # ── Error handlers ──────────────────────────────────────────────────────

    @app.errorhandler(ParseError)
    @app.errorhandler(ValidationError)
    def invalid_input(exc: Exception) -> tuple[Response, int]:
        return jsonify({"error": "Unprocessable Entity", "message": str(exc)}), 422

    @app.errorhandler(StorageError)
    def storage_unavailable(exc: StorageError) -> tuple[Response, int]:
        logger.error("Storage failure: %s", exc)
        return jsonify({"error": "Service Unavailable", "message": str(exc)}), 503

    @app.errorhandler(400)
    def bad_request(exc: Any) -> tuple[Response, int]:
        return jsonify({"error": "Bad Request", "message": str(exc)}), 400

    @app.errorhandler(404)
    def not_found(exc: Any) -> tuple[Response, int]:
        return jsonify({"error": "Not Found", "message": str(exc)}), 404

    @app.errorhandler(405)
    def method_not_allowed(exc: Any) -> tuple[Response, int]:
        return jsonify({"error": "Method Not Allowed", "message": str(exc)}), 405

    @app.errorhandler(500)
    def internal_error(exc: Any) -> tuple[Response, int]:
        return jsonify({"error": "Internal Server Error", "message": str(exc)}), 500

    # ── Register blueprints ─────────────────────────────────────────────────

    from expense_tracker.routes.expenses import expenses_bp
    from expense_tracker.routes.settings import settings_bp
    from expense_tracker.routes.reports import reports_bp
    from expense_tracker.routes.performance import performance_bp

    app.register_blueprint(expenses_bp)
    app.register_blueprint(settings_bp)
    app.register_blueprint(reports_bp)
    app.register_blueprint(performance_bp)

    return app


def get_state() -> TrackerState:
    """Wiring of the application handling the current request."""
    return current_app.extensions[EXTENSION_KEY]


def get_last_request_time_ms() -> float:
    """Return the execution time of the most recently completed request (ms)."""
    with _last_request_lock:
        return _last_request_time_ms
