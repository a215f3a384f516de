from __future__ import annotations

from typing import Any, Callable, Dict

from flask import Blueprint, Response, jsonify, request

from expense_tracker import get_state
from expense_tracker.errors import ValidationError
from expense_tracker.models.schemas import Vocabulary

settings_bp = Blueprint("settings", __name__)

BASE = "/api/v1"


def _append_name(append: Callable[[str], Vocabulary]) -> tuple[Response, int]:
    body: Dict[str, Any] | None = request.get_json(silent=True)
    if not isinstance(body, dict):
        return jsonify({"error": "Invalid or missing JSON body."}), 400
    if "name" not in body:
        return jsonify({"error": "Missing required field: 'name'"}), 422

    try:
        vocabulary = append(body["name"])
    except ValidationError as exc:
        return jsonify({"error": str(exc)}), 422

    return jsonify(vocabulary.to_dict()), 200


@settings_bp.route(f"{BASE}/settings", methods=["GET"])
def get_settings() -> tuple[Response, int]:
    return jsonify(get_state().store.get_settings().to_dict()), 200


@settings_bp.route(f"{BASE}/settings/categories", methods=["POST"])
def add_category() -> tuple[Response, int]:
    """Append a category; an existing name leaves the settings unchanged."""
    return _append_name(get_state().store.append_category)


@settings_bp.route(f"{BASE}/settings/users", methods=["POST"])
def add_user() -> tuple[Response, int]:
    """Append a payer; an existing name leaves the settings unchanged."""
    return _append_name(get_state().store.append_user)
