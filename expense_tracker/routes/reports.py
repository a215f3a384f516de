"""
Report routes.

Endpoints
---------
GET /api/v1/reports/monthly
GET /api/v1/reports/weekly
GET /api/v1/reports/category-month-person
GET /api/v1/reports/persons
GET /api/v1/reports/categories?month=YYYY-MM
GET /api/v1/reports/range?from=YYYY-MM-DD&to=YYYY-MM-DD

All reports are computed from the live ledger's current snapshot.  Every
report except the date-range summary is memoised per snapshot.
"""

from __future__ import annotations

from flask import Blueprint, Response, current_app, jsonify, request

from expense_tracker import get_state
from expense_tracker.errors import ParseError
from expense_tracker.services.report_service import (
    category_breakdown,
    category_month_person,
    date_range_summary,
    monthly_by_category,
    person_summary,
    weekly_by_category,
)
from expense_tracker.utils.time_utils import parse_month

reports_bp = Blueprint("reports", __name__)

BASE = "/api/v1/reports"


@reports_bp.route(f"{BASE}/monthly", methods=["GET"])
def monthly_report() -> tuple[Response, int]:
    report = get_state().ledger.report(("monthly",), monthly_by_category)
    return jsonify([p.to_dict() for p in report]), 200


@reports_bp.route(f"{BASE}/weekly", methods=["GET"])
def weekly_report() -> tuple[Response, int]:
    report = get_state().ledger.report(("weekly",), weekly_by_category)
    return jsonify([p.to_dict() for p in report]), 200


@reports_bp.route(f"{BASE}/category-month-person", methods=["GET"])
def category_month_person_report() -> tuple[Response, int]:
    state = get_state()
    vocabulary = state.store.get_settings()
    report = state.ledger.report(
        ("category-month-person", vocabulary),
        lambda records: category_month_person(records, vocabulary),
    )
    return jsonify(report.to_dict()), 200


@reports_bp.route(f"{BASE}/persons", methods=["GET"])
def person_report() -> tuple[Response, int]:
    state = get_state()
    vocabulary = state.store.get_settings()
    report = state.ledger.report(
        ("persons", vocabulary),
        lambda records: person_summary(records, vocabulary),
    )
    return jsonify(report.to_dict()), 200


@reports_bp.route(f"{BASE}/categories", methods=["GET"])
def category_report() -> tuple[Response, int]:
    raw_month = request.args.get("month", "")
    try:
        month = parse_month(raw_month) if raw_month else None
    except ParseError as exc:
        return jsonify({"error": str(exc)}), 422

    report = get_state().ledger.report(
        ("categories", month),
        lambda records: category_breakdown(records, month),
    )
    return jsonify(report.to_dict()), 200


@reports_bp.route(f"{BASE}/range", methods=["GET"])
def range_report() -> tuple[Response, int]:
    try:
        summary = date_range_summary(
            get_state().ledger.records,
            request.args.get("from"),
            request.args.get("to"),
        )
    except ParseError as exc:
        return jsonify({"error": str(exc)}), 422

    return jsonify(summary.to_dict(current_app.config["CURRENCY_SYMBOL"])), 200
