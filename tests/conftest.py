import os
import uuid

# Must be set before teachsim is imported: settings and engine are module level.
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
from fastapi.testclient import TestClient

from teachsim.main import app
from teachsim.routers.api import get_clock

PASSWORD = "correct-horse-battery"


@pytest.fixture(scope="session")
def client():
    with TestClient(app) as c:
        yield c


@pytest.fixture(autouse=True)
def _clear_overrides():
    yield
    app.dependency_overrides.clear()


@pytest.fixture
def set_clock():
    """Pin the API clock: set_clock(datetime) makes every request see that time."""
    def _set(moment):
        app.dependency_overrides[get_clock] = lambda: (lambda: moment)
    return _set


@pytest.fixture
def register(client):
    """Register a fresh user (logged in via cookie) and return the response JSON."""
    def _register(email=None, display_name=None):
        client.cookies.clear()
        email = email or f"teacher-{uuid.uuid4().hex[:10]}@example.com"
        body = {"email": email, "password": PASSWORD}
        if display_name is not None:
            body["display_name"] = display_name
        resp = client.post("/auth/register", json=body)
        assert resp.status_code == 201, resp.text
        return resp.json()
    return _register
