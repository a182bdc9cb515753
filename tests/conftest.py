import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SEND_EMAILS", "false")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.security import create_access_token
from app.database import get_db
from app.db.base import Base
from app.main import app
from app.services.checkout import CheckoutSession, get_checkout_creator
from app.services.notifications import get_email_sender

TEST_DATABASE_URL = "sqlite://"

OWNER_ID = "owner-1"
TENANT_ID = "tenant-1"


class RecordingEmailSender:
    def __init__(self):
        self.sent = []

    def send(self, to, subject, body_html, body_text=""):
        self.sent.append({"to": to, "subject": subject})
        return True


class FakeCheckout:
    def __init__(self):
        self.created = []

    def create(self, payment, lease, customer_email):
        self.created.append(payment.id)
        return CheckoutSession(
            session_id=f"cs_test_{len(self.created)}",
            checkout_url=f"https://checkout.example.com/pay/{payment.id}",
        )


@pytest.fixture
def engine():
    engine = create_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db_session(engine):
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()
    yield session
    session.close()


@pytest.fixture
def email_sender():
    return RecordingEmailSender()


@pytest.fixture
def checkout():
    return FakeCheckout()


@pytest.fixture
def client(engine, email_sender, checkout):
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    def override_get_db():
        db = TestingSessionLocal()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_email_sender] = lambda: email_sender
    app.dependency_overrides[get_checkout_creator] = lambda: checkout
    yield TestClient(app)
    app.dependency_overrides.clear()


def auth_headers(user_id, role, email=None, name=None):
    token = create_access_token(user_id, role, email=email, name=name)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def owner_headers():
    return auth_headers(OWNER_ID, "LANDLORD", email="owner@example.com", name="Olivia Owner")


@pytest.fixture
def tenant_headers():
    return auth_headers(TENANT_ID, "TENANT", email="tenant@example.com", name="Tom Tenant")


@pytest.fixture
def lease_payload():
    return {
        "tenant_id": TENANT_ID,
        "tenant_email": "tenant@example.com",
        "tenant_name": "Tom Tenant",
        "start_date": "2024-01-01",
        "end_date": "2024-12-31",
        "monthly_rent": 1000,
        "deposit": 500,
        "terms": "Standard residential lease.",
    }


@pytest.fixture
def create_lease(client, owner_headers, lease_payload):
    def _create(**overrides):
        payload = {**lease_payload, **overrides}
        response = client.post("/api/leases/", json=payload, headers=owner_headers)
        assert response.status_code == 201, response.text
        return response.json()
    return _create


@pytest.fixture
def finalized_lease(client, create_lease, owner_headers, tenant_headers):
    lease = create_lease()
    client.post(
        f"/api/leases/{lease['id']}/sign-tenant",
        json={"consent_given": True, "initials": "tt"},
        headers=tenant_headers,
    )
    response = client.post(
        f"/api/leases/{lease['id']}/sign-owner",
        json={"consent_given": True, "initials": "OO"},
        headers=owner_headers,
    )
    assert response.json()["status"] == "FINALIZED"
    return lease
