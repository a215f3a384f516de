from __future__ import annotations

from typing import Any, Dict

from flask import Blueprint, Response, current_app, jsonify, request
from werkzeug.datastructures import MultiDict

from expense_tracker import get_state
from expense_tracker.errors import ParseError, ValidationError
from expense_tracker.models.schemas import ExpenseDraft, ExpenseQuery
from expense_tracker.services.report_service import expense_list
from expense_tracker.utils.money import to_decimal
from expense_tracker.utils.time_utils import parse_optional_date

expenses_bp = Blueprint("expenses", __name__)

BASE = "/api/v1"


#Shared parsing helpers
def parse_expense_payload(raw: Dict[str, Any]) -> ExpenseDraft:
    for key in ("date", "description", "category", "expenseBy", "amount"):
        if key not in raw:
            raise ParseError(f"Missing required field: {key!r}")
    for key in ("date", "description", "category", "expenseBy"):
        if not isinstance(raw[key], str):
            raise ParseError(
                f"Field {key!r} must be a string, got {type(raw[key]).__name__}."
            )
    return ExpenseDraft(
        date=raw["date"],
        description=raw["description"],
        category=raw["category"],
        expense_by=raw["expenseBy"],
        amount=to_decimal(raw["amount"]),
    )


def parse_query_args(args: MultiDict) -> ExpenseQuery:
    return ExpenseQuery(
        categories=tuple(c for c in args.getlist("category") if c),
        date=args.get("date") or None,
        month=args.get("month") or None,
        expense_by=args.get("expenseBy") or None,
        search=args.get("q", ""),
        date_from=parse_optional_date(args.get("from")),
        date_to=parse_optional_date(args.get("to")),
    )


#Endpoint: list view
@expenses_bp.route(f"{BASE}/expenses", methods=["GET"])
def list_expenses() -> tuple[Response, int]:
    try:
        query = parse_query_args(request.args)
    except ParseError as exc:
        return jsonify({"error": str(exc)}), 422

    result = expense_list(get_state().ledger.records, query)
    return jsonify(result.to_dict(current_app.config["CURRENCY_SYMBOL"])), 200


#Endpoint: append
@expenses_bp.route(f"{BASE}/expenses", methods=["POST"])
def add_expense() -> tuple[Response, int]:
    body: Dict[str, Any] | None = request.get_json(silent=True)
    if not isinstance(body, dict):
        return jsonify({"error": "Invalid or missing JSON body."}), 400

    try:
        draft = parse_expense_payload(body)
        record = get_state().store.append_expense(draft)
    except (ParseError, ValidationError) as exc:
        return jsonify({"error": str(exc)}), 422

    return jsonify(record.to_dict()), 201


#Endpoint: force a snapshot re-read (stores without push, e.g. Firestore REST)
@expenses_bp.route(f"{BASE}/snapshot:refresh", methods=["POST"])
def refresh_snapshot() -> tuple[Response, int]:
    state = get_state()
    state.store.publish()
    error = state.ledger.last_error
    return jsonify({
        "count": len(state.ledger.records),
        "error": str(error) if error else None,
    }), 200 if error is None else 503
