import os
import tempfile

# Settings are read at import time, so the environment must be ready first
os.environ["JWT_SECRET_KEY"] = "test-secret-key-for-findbids"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="findbids-uploads-")
os.environ["BASE_URL"] = "http://testserver"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["NOTIFICATION_BACKEND"] = "memory"
os.environ["BCRYPT_ROUNDS"] = "4"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, Session, create_engine

from findbids.database import enable_sqlite_foreign_keys, get_session
from findbids.db import models  # noqa: F401
from findbids.main import app


@pytest.fixture(name="engine")
def engine_fixture():
    """In-memory SQLite shared by every connection of one test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_foreign_keys(engine)
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture(name="session")
def session_fixture(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture(name="client")
def client_fixture(session):
    def get_session_override():
        return session

    app.dependency_overrides[get_session] = get_session_override
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
def hub():
    return app.state.notification_hub


class ApiUser:
    def __init__(self, id: int, email: str, token: str):
        self.id = id
        self.email = email
        self.token = token

    @property
    def headers(self) -> dict:
        return {"Authorization": f"Bearer {self.token}"}


def register_user(client, email: str, company_name: str = "Acme Builders", password: str = "password123") -> ApiUser:
    response = client.post(
        "/api/register",
        json={"email": email, "password": password, "company_name": company_name},
    )
    assert response.status_code == 201, response.text
    token = response.cookies.get("access_token")
    assert token
    return ApiUser(response.json()["id"], email, token)


def create_rfp(client, user: ApiUser, title: str = "Warehouse roof replacement", featured: bool = False) -> dict:
    response = client.post(
        "/api/rfps",
        json={
            "title": title,
            "description": "Tear off and replace 40,000 sq ft of roofing",
            "walkthrough_date": "2030-01-10T09:00:00",
            "rfi_date": "2030-01-15T17:00:00",
            "deadline": "2030-02-01T17:00:00",
            "job_location": "Springfield, IL",
            "budget_min": 250000,
            "featured": featured,
        },
        headers=user.headers,
    )
    assert response.status_code == 201, response.text
    return response.json()


def submit_rfi(client, user: ApiUser, rfp_id: int, message: str = "When is the walkthrough?") -> dict:
    response = client.post(f"/api/rfps/{rfp_id}/rfi", json={"message": message}, headers=user.headers)
    assert response.status_code == 201, response.text
    return response.json()


@pytest.fixture
def helpers():
    class Helpers:
        register = staticmethod(register_user)
        rfp = staticmethod(create_rfp)
        rfi = staticmethod(submit_rfi)
    return Helpers
