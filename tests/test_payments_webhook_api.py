import json

import pytest

from app.api.webhooks import compute_signature
from app.core.config import settings
from app.models.audit import AuditAction, LeaseAuditLog

SECRET = "whsec_test"


@pytest.fixture(autouse=True)
def webhook_secret(monkeypatch):
    monkeypatch.setattr(settings, "PAYMENT_WEBHOOK_SECRET", SECRET)


@pytest.fixture
def pending_payment(client, finalized_lease, owner_headers):
    response = client.post(
        f"/api/leases/{finalized_lease['id']}/generate-monthly-payment?as_of=2024-03-15",
        headers=owner_headers,
    )
    return response.json()["payment"]


def post_event(client, event, secret=SECRET):
    body = json.dumps(event).encode()
    return client.post(
        "/api/webhooks/payments",
        content=body,
        headers={
            "Content-Type": "application/json",
            "X-Webhook-Signature": compute_signature(body, secret),
        },
    )


def test_paid_event_settles_payment(client, pending_payment, finalized_lease, tenant_headers, db_session):
    response = post_event(client, {
        "payment_id": pending_payment["id"],
        "status": "paid",
        "gateway_reference": "cs_test_abc123",
    })

    assert response.status_code == 200
    assert response.json() == {"success": True, "payment_id": pending_payment["id"], "status": "paid"}

    payments = client.get("/api/tenant/payments", headers=tenant_headers).json()
    assert payments[0]["status"] == "paid"
    assert payments[0]["paid_at"] is not None

    balance = client.get(
        f"/api/tenant/rent-management/{finalized_lease['id']}?as_of=2024-03-15",
        headers=tenant_headers,
    ).json()["balance"]
    assert balance["totalPaid"] == 1000.0
    assert balance["balance"] == 2500.0

    audit = db_session.query(LeaseAuditLog).filter(LeaseAuditLog.action == AuditAction.PAYMENT_SETTLED).all()
    assert len(audit) == 1


def test_duplicate_delivery_is_a_no_op(client, pending_payment):
    event = {"payment_id": pending_payment["id"], "status": "paid"}

    assert post_event(client, event).status_code == 200
    second = post_event(client, event)

    assert second.status_code == 200
    assert second.json()["status"] == "paid"


def test_paid_payment_cannot_fail_later(client, pending_payment):
    post_event(client, {"payment_id": pending_payment["id"], "status": "paid"})

    response = post_event(client, {"payment_id": pending_payment["id"], "status": "failed"})
    assert response.status_code == 409
    assert response.json()["error"] == "payment_already_settled"


def test_failed_event(client, pending_payment):
    response = post_event(client, {"payment_id": pending_payment["id"], "status": "failed"})

    assert response.status_code == 200
    assert response.json()["status"] == "failed"


def test_bad_signature_is_rejected(client, pending_payment):
    response = post_event(client, {"payment_id": pending_payment["id"], "status": "paid"}, secret="wrong")
    assert response.status_code == 401


def test_missing_signature_is_rejected(client, pending_payment):
    response = client.post(
        "/api/webhooks/payments",
        json={"payment_id": pending_payment["id"], "status": "paid"},
    )
    assert response.status_code == 401


def test_unknown_payment_is_404(client):
    response = post_event(client, {"payment_id": "00000000-0000-0000-0000-000000000000", "status": "paid"})
    assert response.status_code == 404


def test_malformed_event_is_422(client):
    response = post_event(client, {"payment_id": "not-a-uuid", "status": "refunded"})
    assert response.status_code == 422


def test_unconfigured_secret_is_503(client, monkeypatch):
    monkeypatch.setattr(settings, "PAYMENT_WEBHOOK_SECRET", "")

    response = post_event(client, {"payment_id": "00000000-0000-0000-0000-000000000000", "status": "paid"})
    assert response.status_code == 503
