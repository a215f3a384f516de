from flask.testing import FlaskClient

from expense_tracker import create_app
from expense_tracker.errors import StorageError
from expense_tracker.storage.memory import InMemoryExpenseStore


def test_list_expenses_sorted_with_total(client: FlaskClient):
    response = client.get("/api/v1/expenses")

    assert response.status_code == 200
    assert "X-Response-Time-Ms" in response.headers

    data = response.get_json()
    assert [e["id"] for e in data["expenses"]] == ["3", "2", "1"]
    assert data["count"] == 3
    assert data["total"] == 180.0
    assert data["totalDisplay"] == "₹180.00"
    assert data["expenses"][0]["expenseBy"] == "A"


def test_list_expenses_filters(client):
    response = client.get("/api/v1/expenses?category=Food&category=Fuel&expenseBy=A")
    assert [e["id"] for e in response.get_json()["expenses"]] == ["3", "1"]

    response = client.get("/api/v1/expenses?from=2024-01-10&to=2024-01-31")
    assert [e["id"] for e in response.get_json()["expenses"]] == ["2"]

    response = client.get("/api/v1/expenses?q=petrol&expenseBy=All")
    assert [e["id"] for e in response.get_json()["expenses"]] == ["3"]


def test_list_expenses_bad_range(client):
    response = client.get("/api/v1/expenses?from=10-01-2024")
    assert response.status_code == 422
    assert "Invalid date" in response.get_json()["error"]


def test_add_expense_updates_list(client):
    payload = {
        "date": "2024-02-10",
        "description": "Vegetables",
        "category": "Grocery",
        "expenseBy": "B",
        "amount": 20.25,
    }

    response = client.post("/api/v1/expenses", json=payload)

    assert response.status_code == 201
    created = response.get_json()
    assert created["amount"] == 20.25
    assert created["id"]

    data = client.get("/api/v1/expenses").get_json()
    assert data["count"] == 4
    assert data["expenses"][0]["id"] == created["id"]
    assert data["total"] == 200.25


def test_add_expense_validation(client):
    base = {
        "date": "2024-02-10",
        "description": "Vegetables",
        "category": "Grocery",
        "expenseBy": "B",
        "amount": 5,
    }

    missing = {k: v for k, v in base.items() if k != "amount"}
    response = client.post("/api/v1/expenses", json=missing)
    assert response.status_code == 422
    assert "amount" in response.get_json()["error"]

    response = client.post("/api/v1/expenses", json={**base, "amount": -1})
    assert response.status_code == 422

    response = client.post("/api/v1/expenses", json={**base, "description": "  "})
    assert response.status_code == 422

    response = client.post("/api/v1/expenses", json={**base, "amount": "ten"})
    assert response.status_code == 422

    response = client.post("/api/v1/expenses", data="not json", content_type="text/plain")
    assert response.status_code == 400

    assert client.get("/api/v1/expenses").get_json()["count"] == 3


class _BrokenStore(InMemoryExpenseStore):
    def _insert_expense(self, draft):
        raise StorageError("write refused")


def test_storage_failure_is_503_and_reports_keep_working(sample_records):
    app = create_app({"TESTING": True, "LOG_LEVEL": "CRITICAL"}, store=_BrokenStore(sample_records))
    client = app.test_client()

    response = client.post("/api/v1/expenses", json={
        "date": "2024-02-10",
        "description": "Vegetables",
        "category": "Grocery",
        "expenseBy": "B",
        "amount": 5,
    })

    assert response.status_code == 503
    assert response.get_json()["message"] == "write refused"
    assert client.get("/api/v1/reports/monthly").status_code == 200


def test_snapshot_refresh(client):
    response = client.post("/api/v1/snapshot:refresh")
    assert response.status_code == 200
    assert response.get_json() == {"count": 3, "error": None}
