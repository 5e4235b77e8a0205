from __future__ import annotations

import os
import tempfile

# Settings and the engine are built at import time, so point them at a
# throw-away database and file store before anything from tenderdesk loads.
_TMP_DIR = tempfile.mkdtemp(prefix="tenderdesk-tests-")
os.environ["TD_DATABASE_URL"] = f"sqlite:///{os.path.join(_TMP_DIR, 'test.db')}"
os.environ["TD_STORAGE_DIR"] = os.path.join(_TMP_DIR, "storage")
os.environ["TD_PUBLIC_BASE_URL"] = "http://testserver"
os.environ["TD_JWT_SECRET"] = "test-secret"
os.environ["TD_LOG_LEVEL"] = "WARNING"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from tenderdesk.app.core.database import Base, engine, import_models  # noqa: E402
from tenderdesk.app.main import create_app  # noqa: E402

DEFAULT_PASSWORD = "Passwort123"


@pytest.fixture()
def client():
    import_models()
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    with TestClient(create_app()) as test_client:
        yield test_client


def register(client: TestClient, email: str = "anna@example.com", full_name: str = "Anna Berger") -> dict:
    response = client.post(
        "/api/auth/signup",
        json={"email": email, "password": DEFAULT_PASSWORD, "full_name": full_name},
    )
    assert response.status_code == 201, response.text
    response = client.post("/api/auth/login", json={"email": email, "password": DEFAULT_PASSWORD})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


@pytest.fixture()
def auth_headers(client):
    return register(client)


@pytest.fixture()
def other_headers(client):
    return register(client, email="ben@example.com", full_name="Ben Koch")


@pytest.fixture()
def tender(client, auth_headers):
    response = client.post(
        "/api/tenders",
        json={
            "title": "Unterhaltsreinigung Rathaus",
            "client": "Stadt Musterstadt",
            "internal_reference": "TD-2024-001",
            "due_date": "2030-03-01T12:00:00Z",
        },
        headers=auth_headers,
    )
    assert response.status_code == 201, response.text
    return response.json()
