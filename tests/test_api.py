import os
import sys
from decimal import Decimal
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

os.environ.setdefault("DATABASE_URL", "sqlite://")

from laptop_tracker.db.session import Base, get_db
from laptop_tracker.main import app

# Ensure models are imported so metadata is populated
from laptop_tracker.models import laptop as laptop_model  # noqa: F401


@pytest.fixture()
def client():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    TestingSessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    Base.metadata.create_all(bind=engine)

    def override_get_db():
        db = TestingSessionLocal()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.pop(get_db, None)


def _add(client, **overrides):
    payload = {
        "brand": "X",
        "model": "Book 14",
        "processor": "i5",
        "ram": 16,
        "storage": "512GB SSD",
        "condition": "New",
        "buying_cost": "100",
        "quantity": 2,
    }
    payload.update(overrides)
    resp = client.post("/api/v1/laptops", json=payload)
    assert resp.status_code == 201, resp.text
    return resp.json()


def test_health(client):
    resp = client.get("/health")

    assert resp.status_code == 200
    assert resp.json() == {"ok": True}
    assert resp.headers.get("X-Request-ID")


def test_add_and_group_laptops(client):
    created = _add(client)
    _add(client, ram=8, quantity=1)

    assert len(created) == 2
    assert created[0]["buying_cost"] == "100.00"
    assert created[0]["sequence"] < created[1]["sequence"]

    groups = client.get("/api/v1/laptops/groups").json()
    assert sorted(g["quantity"] for g in groups) == [1, 2]
    pair = next(g for g in groups if g["quantity"] == 2)
    assert pair["representative"]["id"] == created[0]["id"]
    assert [m["id"] for m in pair["members"]] == [c["id"] for c in created]

    stock = client.get("/api/v1/laptops").json()
    assert len(stock) == 3


def test_sell_scenario(client):
    created = _add(client)
    oldest, newest = created

    resp = client.post(
        "/api/v1/sales",
        json={"unit_id": newest["id"], "quantity": 1, "unit_price": "150"},
    )

    assert resp.status_code == 201, resp.text
    body = resp.json()
    assert body["removed_unit_ids"] == [oldest["id"]]
    assert body["sale"]["quantity_sold"] == 1
    assert Decimal(body["sale"]["total_profit"]) == Decimal("50")
    assert body["remaining_group"]["quantity"] == 1
    assert [m["id"] for m in body["remaining_group"]["members"]] == [newest["id"]]

    sales = client.get("/api/v1/sales").json()
    assert [s["sale_id"] for s in sales] == [body["sale"]["sale_id"]]
    assert client.get(f"/api/v1/laptops/{oldest['id']}").status_code == 404


def test_oversell_is_rejected_without_changes(client):
    created = _add(client)

    resp = client.post(
        "/api/v1/sales",
        json={"unit_id": created[0]["id"], "quantity": 5, "unit_price": "150"},
    )

    assert resp.status_code == 422
    body = resp.json()
    assert body["code"] == "validation_error"
    assert body["details"] == {"field": "quantity"}
    assert len(client.get("/api/v1/laptops").json()) == 2
    assert client.get("/api/v1/sales").json() == []


def test_non_positive_price_is_rejected(client):
    created = _add(client)

    resp = client.post(
        "/api/v1/sales",
        json={"unit_id": created[0]["id"], "quantity": 1, "unit_price": "0"},
    )

    assert resp.status_code == 422
    assert resp.json()["details"] == {"field": "unit_price"}


def test_selling_unknown_unit_returns_404(client):
    resp = client.post("/api/v1/sales", json={"unit_id": "laptop-nope", "quantity": 1, "unit_price": "10"})

    assert resp.status_code == 404
    assert resp.json()["code"] == "not_found"


def test_bad_laptop_payload_uses_error_envelope(client):
    resp = client.post(
        "/api/v1/laptops",
        json={"brand": "X", "model": "Y", "ram": 8, "storage": "256GB", "buying_cost": "-3"},
    )

    assert resp.status_code == 422
    body = resp.json()
    assert body["code"] == "validation_error"
    assert body["details"]["errors"]


def test_reports(client):
    created = _add(client)
    _add(client, brand="HP", condition="Used", buying_cost="300", quantity=1)
    client.post("/api/v1/sales", json={"unit_id": created[0]["id"], "quantity": 2, "unit_price": "90"})

    dashboard = client.get("/api/v1/reports/dashboard").json()
    assert dashboard["stock_count"] == 1
    assert Decimal(dashboard["stock_value"]) == Decimal("300")
    assert Decimal(dashboard["sales_value"]) == Decimal("180")
    assert Decimal(dashboard["total_profit"]) == Decimal("-20")

    stock = client.get("/api/v1/reports/stock").json()
    assert stock["by_condition"][0] == {"label": "Used", "count": 1}

    profit = client.get("/api/v1/reports/profit").json()
    assert profit["loss_sales_count"] == 1
    assert Decimal(profit["overall_profit_margin"]) == Decimal("-10")

    sales_value = client.get("/api/v1/reports/sales-value").json()
    assert Decimal(sales_value["average_selling_price"]) == Decimal("90")

    stock_value = client.get("/api/v1/reports/stock-value").json()
    assert stock_value["total_stock_count"] == 1


def test_reports_on_empty_store(client):
    profit = client.get("/api/v1/reports/profit").json()

    assert Decimal(profit["overall_profit_margin"]) == 0
    assert Decimal(profit["average_profit_per_unit"]) == 0
    assert profit["profit_by_brand"] == []


def test_dashboard_lists_recent_activity_newest_first(client):
    first = _add(client, quantity=3)
    latest = _add(client, brand="HP", quantity=3)
    sale_a = client.post("/api/v1/sales", json={"unit_id": first[0]["id"], "quantity": 1, "unit_price": "120"}).json()
    sale_b = client.post("/api/v1/sales", json={"unit_id": latest[0]["id"], "quantity": 1, "unit_price": "130"}).json()

    dashboard = client.get("/api/v1/reports/dashboard").json()

    recent_ids = [u["id"] for u in dashboard["recent_stock"]]
    assert len(recent_ids) == 4
    assert recent_ids[:2] == [latest[2]["id"], latest[1]["id"]]
    assert [s["sale_id"] for s in dashboard["recent_sales"]] == [
        sale_b["sale"]["sale_id"],
        sale_a["sale"]["sale_id"],
    ]


def test_dashboard_recent_activity_is_capped_at_five(client):
    _add(client, quantity=7)

    dashboard = client.get("/api/v1/reports/dashboard").json()

    assert dashboard["stock_count"] == 7
    assert len(dashboard["recent_stock"]) == 5
    assert dashboard["recent_sales"] == []


def test_amounts_beyond_column_range_are_rejected(client):
    created = _add(client)

    resp = client.post(
        "/api/v1/sales",
        json={"unit_id": created[0]["id"], "quantity": 1, "unit_price": "100000000"},
    )
    assert resp.status_code == 422
    assert resp.json()["details"] == {"field": "unit_price"}

    resp = client.post(
        "/api/v1/laptops",
        json={"brand": "X", "model": "Y", "ram": 8, "storage": "256GB", "buying_cost": "100000000"},
    )
    assert resp.status_code == 422
    assert resp.json()["code"] == "validation_error"
