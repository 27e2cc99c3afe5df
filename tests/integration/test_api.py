"""Integration tests for API endpoints"""

import pytest
from datetime import date, datetime, timedelta, timezone
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session
from hostel_analytics.infrastructure.database.repositories import InvoiceRepository


def _post_history(client: TestClient, samples) -> None:
    for s in samples:
        response = client.post(
            "/v1/analytics/occupancy",
            json={"date": s.date.isoformat(), "total_beds": s.total_beds, "occupied_beds": s.occupied_beds},
        )
        assert response.status_code == 201


def _create_invoice(client: TestClient, amount_cents: int = 1000, resident_id: str = "R-001") -> str:
    response = client.post(
        "/v1/fees/invoices",
        json={
            "resident_id": resident_id,
            "amount_cents": amount_cents,
            "due_date": (date.today() + timedelta(days=7)).isoformat(),
            "description": "Monthly Rent",
        },
    )
    assert response.status_code == 201
    return response.json()["invoice_id"]


def _pay(client: TestClient, invoice_id: str, amount_cents: int, method: str = "CASH"):
    return client.post(
        "/v1/fees/payments",
        json={"invoice_id": invoice_id, "amount_cents": amount_cents, "method": method},
    )


def test_health_endpoint(client: TestClient):
    """Test health check endpoint"""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_metrics_endpoint(client: TestClient):
    """Test Prometheus metrics endpoint"""
    response = client.get("/metrics")
    assert response.status_code == 200
    assert "hostel_payment_total" in response.text


def test_request_id_header(client: TestClient):
    response = client.get("/health", headers={"X-Request-ID": "abc-123"})
    assert response.headers["X-Request-ID"] == "abc-123"


def test_record_and_list_occupancy(client: TestClient, history_factory):
    _post_history(client, history_factory([60, 70, 80]))

    response = client.get("/v1/analytics/occupancy")

    assert response.status_code == 200
    data = response.json()
    assert [d["occupied_beds"] for d in data] == [60, 70, 80]
    assert data[-1]["date"] == date.today().isoformat()


def test_record_occupancy_duplicate_day(client: TestClient, history_factory):
    _post_history(client, history_factory([60]))

    response = client.post(
        "/v1/analytics/occupancy",
        json={"date": date.today().isoformat(), "total_beds": 100, "occupied_beds": 10},
    )

    assert response.status_code == 409


@pytest.mark.parametrize(
    "payload",
    [
        {"total_beds": 0, "occupied_beds": 0},
        {"total_beds": 10, "occupied_beds": 11},
        {"total_beds": 10, "occupied_beds": -1},
    ],
)
def test_record_occupancy_rejects_invalid_counts(client: TestClient, payload: dict):
    response = client.post("/v1/analytics/occupancy", json={"date": date.today().isoformat(), **payload})
    assert response.status_code == 422


def test_forecast_endpoint(client: TestClient, history_factory):
    """Rising week of occupancy forecasts an increasing trend"""
    _post_history(client, history_factory([60, 65, 70, 75, 80, 85, 90]))

    response = client.get("/v1/analytics/forecast")

    assert response.status_code == 200
    data = response.json()
    assert len(data["forecast"]) == 7
    assert data["forecast"][0]["date"] == (date.today() + timedelta(days=1)).isoformat()
    assert data["forecast"][0]["predicted_occupancy_rate"] == pytest.approx(87.0)
    assert all(0 <= p["predicted_occupancy_rate"] <= 100 for p in data["forecast"])
    assert data["metadata"]["trend"] == "increasing"
    assert data["metadata"]["historical_days"] == 7
    assert data["metadata"]["trend_slope"] == pytest.approx(5.0)


def test_forecast_insufficient_history(client: TestClient, history_factory):
    _post_history(client, history_factory([70] * 6))

    response = client.get("/v1/analytics/forecast")

    assert response.status_code == 400
    assert "at least 7 days" in response.json()["detail"]


def test_forecast_ignores_history_outside_window(client: TestClient, history_factory):
    """Only the trailing 30-day window is used"""
    old_end = date.today() - timedelta(days=40)
    _post_history(client, history_factory([50] * 7, end=old_end))

    response = client.get("/v1/analytics/forecast")

    assert response.status_code == 400


def test_create_and_get_invoice(client: TestClient):
    invoice_id = _create_invoice(client, amount_cents=500_000)

    response = client.get(f"/v1/fees/invoices/{invoice_id}")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "PENDING"
    assert data["amount_cents"] == 500_000
    assert data["remaining_cents"] == 500_000
    assert data["payments"] == []


def test_get_invoice_not_found(client: TestClient):
    fake_uuid = "00000000-0000-0000-0000-000000000000"
    response = client.get(f"/v1/fees/invoices/{fake_uuid}")
    assert response.status_code == 404


def test_get_invoice_bad_id(client: TestClient):
    response = client.get("/v1/fees/invoices/not-a-uuid")
    assert response.status_code == 400


def test_payment_flow(client: TestClient):
    """400 -> PARTIAL, 601 rejected, 600 -> PAID, then nothing more accepted"""
    invoice_id = _create_invoice(client, amount_cents=1000)

    response = _pay(client, invoice_id, 400)
    assert response.status_code == 200
    data = response.json()
    assert data["payment"]["amount_cents"] == 400
    assert data["invoice"]["status"] == "PARTIAL"
    assert data["invoice"]["remaining_cents"] == 600

    response = _pay(client, invoice_id, 601, method="UPI")
    assert response.status_code == 400
    assert "Remaining: 600" in response.json()["detail"]

    response = _pay(client, invoice_id, 600, method="UPI")
    assert response.status_code == 200
    data = response.json()
    assert data["invoice"]["status"] == "PAID"
    assert data["invoice"]["remaining_cents"] == 0
    assert len(data["invoice"]["payments"]) == 2

    response = _pay(client, invoice_id, 1)
    assert response.status_code == 400
    assert "Remaining: 0" in response.json()["detail"]


def test_payment_unknown_invoice(client: TestClient):
    response = _pay(client, "00000000-0000-0000-0000-000000000000", 100)
    assert response.status_code == 404


@pytest.mark.parametrize(
    "payload",
    [
        {"amount_cents": 0, "method": "CASH"},
        {"amount_cents": 100, "method": "CHEQUE"},
    ],
)
def test_payment_validation(client: TestClient, payload: dict):
    invoice_id = _create_invoice(client)
    response = client.post("/v1/fees/payments", json={"invoice_id": invoice_id, **payload})
    assert response.status_code == 422


def test_list_invoices_by_status(client: TestClient):
    paid_id = _create_invoice(client, resident_id="R-001")
    _create_invoice(client, resident_id="R-002")
    _pay(client, paid_id, 1000)

    response = client.get("/v1/fees/invoices", params={"status": "PAID"})

    assert response.status_code == 200
    assert [i["invoice_id"] for i in response.json()] == [paid_id]

    response = client.get("/v1/fees/invoices", params={"resident_id": "R-002"})
    assert [i["status"] for i in response.json()] == ["PENDING"]


def test_fees_time_series(client: TestClient, db: Session):
    """Invoice on Jan 1 paid on Jan 3 shows up as two buckets"""
    repo = InvoiceRepository(db)
    invoice = repo.create_invoice(
        resident_id="R-001",
        amount_cents=1000,
        due_date=date(2024, 1, 8),
        issued_at=datetime(2024, 1, 1, 9, tzinfo=timezone.utc),
    )
    repo.record_payment(
        invoice.id,
        1000,
        "CASH",
        paid_at=datetime(2024, 1, 3, 14, tzinfo=timezone.utc),
    )
    db.commit()

    response = client.get("/v1/analytics/fees", params={"start_date": "2024-01-01", "end_date": "2024-01-31"})

    assert response.status_code == 200
    assert response.json() == [
        {"date": "2024-01-01", "total_invoiced_cents": 1000, "total_paid_cents": 0},
        {"date": "2024-01-03", "total_invoiced_cents": 0, "total_paid_cents": 1000},
    ]


def test_fees_time_series_default_window(client: TestClient):
    invoice_id = _create_invoice(client, amount_cents=2500)
    _pay(client, invoice_id, 1000)

    response = client.get("/v1/analytics/fees")

    assert response.status_code == 200
    assert response.json() == [
        {"date": datetime.now(timezone.utc).date().isoformat(), "total_invoiced_cents": 2500, "total_paid_cents": 1000},
    ]


def test_fees_time_series_rejects_reversed_range(client: TestClient):
    response = client.get("/v1/analytics/fees", params={"start_date": "2024-02-01", "end_date": "2024-01-01"})
    assert response.status_code == 400
