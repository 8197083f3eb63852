"""Tests for the Flask endpoints."""

import json

import pytest

from api.app import create_app


@pytest.fixture
def client(store):
    app = create_app(store=store)
    app.config["TESTING"] = True
    return app.test_client()


def _post_transaction(client, **overrides):
    payload = {
        "kind": "expense",
        "date": "2024-03-10",
        "amount": "12.50",
        "category": "Food",
        "description": "lunch",
    }
    payload.update(overrides)
    return client.post("/transactions", json=payload)


def test_create_and_list_transactions(client):
    response = _post_transaction(client)
    assert response.status_code == 201
    created = response.get_json()
    assert created["amount"] == "12.50"

    _post_transaction(client, kind="income", amount="100", category="Salary", date="2024-03-01")

    listing = client.get("/transactions?type=expense").get_json()
    assert [item["id"] for item in listing["items"]] == [created["id"]]
    assert listing["balance"] == "-12.50"

    everything = client.get("/transactions").get_json()
    assert [item["date"] for item in everything["items"]] == ["2024-03-10", "2024-03-01"]


def test_create_transaction_validation_error(client):
    response = _post_transaction(client, amount="lots")
    assert response.status_code == 400
    assert response.get_json()["error"] == "Validation error"


def test_create_transaction_requires_json(client):
    response = client.post("/transactions", data="kind=expense")
    assert response.status_code == 400


def test_get_and_delete_transaction(client):
    transaction_id = _post_transaction(client).get_json()["id"]
    assert client.get(f"/transactions/{transaction_id}").status_code == 200
    assert client.delete(f"/transactions/{transaction_id}").status_code == 204
    assert client.get(f"/transactions/{transaction_id}").status_code == 404
    assert client.delete(f"/transactions/{transaction_id}").status_code == 204


def test_clear_transactions(client, store):
    _post_transaction(client)
    assert client.delete("/transactions").status_code == 204
    assert store.transactions == ()
    assert len(store.categories) == 8


def test_category_endpoints(client):
    items = client.get("/categories").get_json()["items"]
    assert len(items) == 8
    assert all(item["in_use"] is False for item in items)

    assert client.post("/categories", json={"name": "Travel", "color": "#123456"}).status_code == 201
    duplicate = client.post("/categories", json={"name": "Travel", "color": "#123456"})
    assert duplicate.status_code == 409

    _post_transaction(client, category="Travel")
    in_use = client.delete("/categories/Travel")
    assert in_use.status_code == 409
    assert in_use.get_json()["error"] == "Category in use"

    assert client.delete("/categories/Education").status_code == 204


def test_summary_for_period(client):
    _post_transaction(client, date="2024-03-14", amount="20")
    _post_transaction(client, kind="income", date="2024-03-02", amount="100", category="Salary")
    _post_transaction(client, date="2024-01-02", amount="7")

    week = client.get("/summary?period=week").get_json()
    assert week["income"] == "0.00"
    assert week["expenses"] == "20.00"

    month = client.get("/summary?period=month").get_json()
    assert month["balance"] == "80.00"
    assert month["expenses_by_category"] == {"Food": "20.00"}
    assert month["transaction_count"] == 2
    assert month["income_count"] == 1
    assert month["expense_count"] == 1
    assert month["is_positive"] is True

    everything = client.get("/summary").get_json()
    assert everything["expenses"] == "27.00"
    assert everything["transaction_count"] == 3
    assert everything["is_positive"] is True
    assert len(everything["recent"]) == 3


def test_reports(client):
    monthly = client.get("/reports/monthly").get_json()["items"]
    daily = client.get("/reports/daily").get_json()["items"]
    assert len(monthly) == 6
    assert monthly[-1]["label"] == "Mar 24"
    assert len(daily) == 30
    assert daily[-1]["date"] == "2024-03-15"


def test_export_and_import(client, store):
    _post_transaction(client)
    response = client.get("/export")
    assert response.status_code == 200
    assert "expense-tracker-2024-03-15.json" in response.headers["Content-Disposition"]
    exported = response.get_data(as_text=True)

    client.delete("/transactions")
    imported = client.post("/import", data=exported, content_type="application/json")
    assert imported.status_code == 200
    assert imported.get_json()["transactions"] == 1
    assert json.loads(store.export_data()) == json.loads(exported)


def test_import_rejects_invalid_document(client):
    response = client.post("/import", data="{nope", content_type="application/json")
    assert response.status_code == 400


def test_create_transaction_defaults_date_to_today(client):
    payload = {"kind": "expense", "amount": "3", "category": "Food"}
    response = client.post("/transactions", json=payload)
    assert response.status_code == 201
    assert response.get_json()["date"] == "2024-03-15"


def test_summary_marks_negative_balance(client):
    _post_transaction(client, amount="40")
    summary = client.get("/summary").get_json()
    assert summary["balance"] == "-40.00"
    assert summary["is_positive"] is False


def test_dev_environment_allows_any_origin(monkeypatch, store):
    monkeypatch.setenv("EXPENSE_TRACKER_ENV", "dev")
    client = create_app(store=store).test_client()
    response = client.get("/categories", headers={"Origin": "http://example.com"})
    assert response.headers.get("Access-Control-Allow-Origin") in ("*", "http://example.com")


def test_allowed_origins_restrict_cors(monkeypatch, store):
    monkeypatch.setenv("EXPENSE_TRACKER_ENV", "prod")
    monkeypatch.setenv("EXPENSE_TRACKER_ALLOWED_ORIGINS", "http://a.test, http://b.test")
    client = create_app(store=store).test_client()

    allowed = client.get("/categories", headers={"Origin": "http://b.test"})
    assert allowed.headers.get("Access-Control-Allow-Origin") == "http://b.test"

    denied = client.get("/categories", headers={"Origin": "http://evil.test"})
    assert denied.status_code == 200
    assert "Access-Control-Allow-Origin" not in denied.headers
