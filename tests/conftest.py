"""Shared fixtures for the DCIMS API tests."""

import os
import tempfile

# Settings and logging are configured at import time.
os.environ.setdefault("LOG_FILE", os.path.join(tempfile.gettempdir(), "dcims-tests", "app.log"))
os.environ.setdefault("SUPABASE_JWT_SECRET", "test-secret")

import pytest
from fastapi.testclient import TestClient
from jose import jwt

from dcims.core.config import settings
from dcims.events.bus import bus

OWNER_ID = "11111111-1111-4111-8111-111111111111"
OTHER_ID = "22222222-2222-4222-8222-222222222222"


def make_token(sub: str, secret: str = "test-secret") -> str:
    return jwt.encode({"sub": sub, "aud": "authenticated"}, secret, algorithm="HS256")


@pytest.fixture(autouse=True)
def clear_bus():
    """Start and end every test with no subscribers on the event bus."""
    bus.clear()
    yield
    bus.clear()


@pytest.fixture(autouse=True)
def jwt_secret(monkeypatch):
    monkeypatch.setattr(settings, "SUPABASE_JWT_SECRET", "test-secret")


@pytest.fixture
def client():
    from dcims.main import app

    # No context manager: the lifespan (and its DB-backed activity
    # subscriber) stays out of the request tests.
    return TestClient(app)


@pytest.fixture
def owner_headers():
    return {"Authorization": f"Bearer {make_token(OWNER_ID)}"}


@pytest.fixture
def other_headers():
    return {"Authorization": f"Bearer {make_token(OTHER_ID)}"}
