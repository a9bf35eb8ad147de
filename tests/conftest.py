import sys
import os
from datetime import date, timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# --- backend on the path ---
BASE_DIR = os.path.dirname(os.path.dirname(__file__))
BACKEND_DIR = os.path.join(BASE_DIR, "backend")
sys.path.insert(0, BACKEND_DIR)

from main import app, Base  # noqa: E402

# ------------------ engine ------------------
engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestingSessionLocal = sessionmaker(bind=engine)
Base.metadata.create_all(bind=engine)


# ------------------ fixtures ------------------
@pytest.fixture(autouse=True)
def override_db(monkeypatch):
    monkeypatch.setattr("main.SessionLocal", TestingSessionLocal)
    yield
    # fresh tables for every test
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)


@pytest.fixture
def db():
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def tomorrow():
    return date.today() + timedelta(days=1)


@pytest.fixture
def make_payload(tomorrow):
    """Factory for a valid create-booking body; keyword overrides replace fields."""
    def _make(**overrides):
        payload = {
            "customerName": "John Smith",
            "carDetails": {"make": "Toyota", "model": "Camry", "year": 2020, "type": "sedan"},
            "serviceType": "Basic Wash",
            "date": tomorrow.isoformat(),
            "timeSlot": "09:00-10:00",
            "addOns": [],
        }
        payload.update(overrides)
        return payload
    return _make


@pytest.fixture
def create(client, make_payload):
    """Create a booking through the API and return its data."""
    def _create(**overrides):
        response = client.post("/api/bookings", json=make_payload(**overrides))
        assert response.status_code == 201, response.text
        return response.json()["data"]
    return _create
