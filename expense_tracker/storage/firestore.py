"""
Firestore store over the public REST API.

Layout
------
* ``expenses`` collection – one document per expense; Firestore assigns
  the document id, which becomes :attr:`ExpenseRecord.id`, and
  ``createTime``, which becomes :attr:`ExpenseRecord.created_at`.
* ``settings/app`` document – ``categories`` and ``users`` string arrays,
  updated with an update mask so other fields are left untouched.

The REST API has no push channel, so :meth:`FirestoreExpenseStore.refresh`
re-reads the collection and pushes the snapshot to subscribers; callers
poll it at whatever cadence suits them.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

import requests

from expense_tracker.errors import ParseError, StorageError
from expense_tracker.models.schemas import ExpenseDraft, ExpenseRecord, Vocabulary
from expense_tracker.services.vocabulary_service import vocabulary_from_lists
from expense_tracker.storage.base import ExpenseStore, record_from_dict
from expense_tracker.utils.money import decimal_to_float

logger = logging.getLogger(__name__)

FIRESTORE_URL = "https://firestore.googleapis.com/v1"
EXPENSES_COLLECTION = "expenses"
SETTINGS_COLLECTION = "settings"
SETTINGS_DOC_ID = "app"

_FRACTION = re.compile(r"\.(\d+)")


# ── Value codec ──────────────────────────────────────────────────────────────

def decode_value(value: Dict[str, Any]) -> Any:
    """Turn one typed Firestore ``Value`` into a plain Python value."""
    if "stringValue" in value:
        return value["stringValue"]
    if "integerValue" in value:
        return int(value["integerValue"])
    if "doubleValue" in value:
        return value["doubleValue"]
    if "booleanValue" in value:
        return value["booleanValue"]
    if "timestampValue" in value:
        return value["timestampValue"]
    if "arrayValue" in value:
        return [decode_value(v) for v in value["arrayValue"].get("values", [])]
    if "mapValue" in value:
        return decode_fields(value["mapValue"].get("fields", {}))
    return None


def decode_fields(fields: Dict[str, Any]) -> Dict[str, Any]:
    return {name: decode_value(v) for name, v in fields.items()}


def encode_value(value: Any) -> Dict[str, Any]:
    if isinstance(value, bool):
        return {"booleanValue": value}
    if isinstance(value, int):
        return {"integerValue": str(value)}
    if isinstance(value, float):
        return {"doubleValue": value}
    if isinstance(value, (list, tuple)):
        return {"arrayValue": {"values": [encode_value(v) for v in value]}}
    if value is None:
        return {"nullValue": None}
    return {"stringValue": str(value)}


def parse_timestamp(raw: str) -> datetime:
    """RFC 3339 with up to nanosecond precision → aware datetime."""
    # fromisoformat wants exactly six fractional digits on older Pythons.
    text = _FRACTION.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), raw.replace("Z", "+00:00"))
    try:
        return datetime.fromisoformat(text)
    except ValueError as exc:
        raise ParseError(f"Invalid Firestore timestamp {raw!r}.") from exc


def document_to_record(document: Dict[str, Any]) -> ExpenseRecord:
    doc_id = document["name"].rsplit("/", 1)[-1]
    data = decode_fields(document.get("fields", {}))
    data.pop("createdAt", None)
    record = record_from_dict(data, record_id=doc_id)
    created = document.get("createTime")
    if created:
        record = ExpenseRecord(
            id=record.id,
            date=record.date,
            description=record.description,
            category=record.category,
            expense_by=record.expense_by,
            amount=record.amount,
            created_at=parse_timestamp(created),
        )
    return record


# ── Store ────────────────────────────────────────────────────────────────────

class FirestoreExpenseStore(ExpenseStore):

    def __init__(
        self,
        project: str,
        database: str = "(default)",
        api_key: Optional[str] = None,
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
    ) -> None:
        super().__init__()
        if not project:
            raise ValueError("A Firestore project id is required.")
        self.documents_url = f"{FIRESTORE_URL}/projects/{project}/databases/{database}/documents"
        self.api_key = api_key
        self.timeout = timeout
        self.session = session or requests.Session()

    def _request(
        self,
        method: str,
        url: str,
        params: Optional[List[Tuple[str, str]]] = None,
        json: Optional[Dict[str, Any]] = None,
        allow_missing: bool = False,
    ) -> Optional[Any]:
        query = list(params or [])
        if self.api_key:
            query.append(("key", self.api_key))
        try:
            response = self.session.request(
                method, url, params=query, json=json, timeout=self.timeout
            )
        except requests.RequestException as exc:
            logger.error("Firestore %s %s failed: %s", method, url, exc)
            raise StorageError(f"Firestore request failed: {exc}") from exc

        if allow_missing and response.status_code == 404:
            return None
        if response.status_code >= 400:
            logger.error("Firestore %s %s returned %s", method, url, response.status_code)
            raise StorageError(
                f"Firestore returned {response.status_code}: {response.text[:200]}"
            )
        return response.json()

    # ── Primitives ───────────────────────────────────────────────────────────

    def get_expenses(self) -> List[ExpenseRecord]:
        body = {
            "structuredQuery": {
                "from": [{"collectionId": EXPENSES_COLLECTION}],
                "orderBy": [{"field": {"fieldPath": "date"}, "direction": "DESCENDING"}],
            }
        }
        rows = self._request("POST", f"{self.documents_url}:runQuery", json=body) or []

        records: List[ExpenseRecord] = []
        for row in rows:
            document = row.get("document")
            if not document:
                continue
            try:
                records.append(document_to_record(document))
            except (ParseError, KeyError) as exc:
                raise StorageError(f"Malformed expense document: {exc}") from exc
        return records

    def get_settings(self) -> Vocabulary:
        url = f"{self.documents_url}/{SETTINGS_COLLECTION}/{SETTINGS_DOC_ID}"
        document = self._request("GET", url, allow_missing=True)
        if document is None:
            return vocabulary_from_lists(None, None)
        data = decode_fields(document.get("fields", {}))
        return vocabulary_from_lists(data.get("categories"), data.get("users"))

    def _insert_expense(self, draft: ExpenseDraft) -> ExpenseRecord:
        fields = {
            "date": encode_value(draft.date),
            "description": encode_value(draft.description),
            "category": encode_value(draft.category),
            "expenseBy": encode_value(draft.expense_by),
            "amount": encode_value(decimal_to_float(draft.amount)),
        }
        document = self._request(
            "POST", f"{self.documents_url}/{EXPENSES_COLLECTION}", json={"fields": fields}
        )
        try:
            return document_to_record(document)
        except (ParseError, KeyError, TypeError) as exc:
            raise StorageError(f"Unexpected Firestore response: {exc}") from exc

    def _save_settings(self, vocabulary: Vocabulary) -> None:
        url = f"{self.documents_url}/{SETTINGS_COLLECTION}/{SETTINGS_DOC_ID}"
        body = {
            "fields": {
                "categories": encode_value(list(vocabulary.categories)),
                "users": encode_value(list(vocabulary.users)),
            }
        }
        params = [
            ("updateMask.fieldPaths", "categories"),
            ("updateMask.fieldPaths", "users"),
        ]
        self._request("PATCH", url, params=params, json=body)

    def refresh(self) -> None:
        """Re-read the collection and push it to subscribers."""
        self.publish()
