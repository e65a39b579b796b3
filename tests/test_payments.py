from datetime import datetime, timedelta, timezone
from decimal import Decimal
from types import SimpleNamespace

from syncdesk.domain.payments.service import is_overdue


def test_pending_past_due_is_overdue():
    payment = SimpleNamespace(status="pending", due_date=datetime(2025, 1, 1))
    assert is_overdue(payment, now=datetime(2025, 1, 2))


def test_paid_payment_is_never_overdue():
    payment = SimpleNamespace(status="paid", due_date=datetime(2020, 1, 1))
    assert not is_overdue(payment, now=datetime(2025, 1, 2))


def test_future_due_date_is_not_overdue():
    payment = SimpleNamespace(status="pending", due_date=datetime.now() + timedelta(days=3))
    assert not is_overdue(payment)


def test_mixed_timezones_compare_in_utc():
    payment = SimpleNamespace(status="pending", due_date=datetime(2025, 1, 1, 12, tzinfo=timezone.utc))
    assert is_overdue(payment, now=datetime(2025, 1, 1, 13))
    assert not is_overdue(payment, now=datetime(2025, 1, 1, 11))


def _create(client, amount, due, status="pending", deal_id=None):
    response = client.post(
        "/api/payments",
        json={"amount": amount, "dueDate": due.isoformat(), "status": status, "dealId": deal_id},
    )
    assert response.status_code == 200, response.text
    return response.json()


def test_overdue_filter_and_flag(client):
    past = datetime.now() - timedelta(days=10)
    future = datetime.now() + timedelta(days=10)
    late = _create(client, "250", past)
    _create(client, "100", future)
    _create(client, "75", past, status="paid")

    response = client.get("/api/payments", params={"status": "overdue"})

    assert response.status_code == 200
    body = response.json()
    assert [p["id"] for p in body] == [late["id"]]
    assert body[0]["isOverdue"] is True
    assert body[0]["status"] == "pending"


def test_marking_paid_stamps_paid_date(client):
    payment = _create(client, "$1,200.00", datetime.now() - timedelta(days=1))
    assert Decimal(payment["amount"]) == Decimal("1200")
    assert payment["isOverdue"] is True

    response = client.patch(f"/api/payments/{payment['id']}", json={"status": "paid"})

    body = response.json()
    assert body["status"] == "paid"
    assert body["paidDate"] is not None
    assert body["isOverdue"] is False


def test_overdue_status_input_is_stored_as_pending(client):
    payment = _create(client, "10", datetime.now() + timedelta(days=1), status="overdue")
    assert payment["status"] == "pending"


def test_invalid_payment_status_is_rejected(client):
    response = client.post(
        "/api/payments",
        json={"amount": "10", "dueDate": datetime.now().isoformat(), "status": "sent"},
    )
    assert response.status_code == 400
    assert response.json()["error"][0]["field"] == "status"


def test_payment_summary(client):
    past = datetime.now() - timedelta(days=5)
    _create(client, "300", past)
    _create(client, "200", datetime.now() + timedelta(days=5))
    _create(client, "50", past, status="paid")

    body = client.get("/api/payments/summary").json()

    assert Decimal(body["totalPaid"]) == Decimal("50")
    assert Decimal(body["totalPending"]) == Decimal("500")
    assert Decimal(body["totalOverdue"]) == Decimal("300")
    assert body["overdueCount"] == 1


def test_missing_payment_is_404(client):
    response = client.get("/api/payments/999")
    assert response.status_code == 404
    assert response.json() == {"error": "Payment not found"}
