import os
import tempfile
import uuid
from datetime import datetime, timezone
from types import SimpleNamespace

import pytest

# Point the app at a throwaway SQLite database before anything imports core.config.
_DB_DIR = tempfile.mkdtemp(prefix="inventory-tests-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{os.path.join(_DB_DIR, 'test.db')}"
os.environ["JWT_SECRET"] = "test-secret"
os.environ["UPC_DATABASE_API_KEY"] = ""

from fastapi.testclient import TestClient  # noqa: E402

from core.auth import current_active_user  # noqa: E402
from main import app  # noqa: E402
from schemas.inventory import InventoryItem  # noqa: E402


@pytest.fixture(scope="session")
def client():
    # Entering the context runs the lifespan, which creates the tables.
    with TestClient(app) as c:
        yield c


def make_user():
    return SimpleNamespace(id=uuid.uuid4(), email="user@example.com", is_active=True, is_superuser=False)


@pytest.fixture
def user():
    return make_user()


@pytest.fixture
def login_as():
    """Switch the authenticated user for subsequent requests."""

    def _login(u):
        app.dependency_overrides[current_active_user] = lambda: u
        return u

    yield _login
    app.dependency_overrides.pop(current_active_user, None)


@pytest.fixture
def auth_client(client, user, login_as):
    login_as(user)
    return client


def make_item(**overrides) -> InventoryItem:
    data = {
        "id": str(uuid.uuid4()),
        "name": "Tomatoes",
        "category": "Vegetables",
        "quantity": 10,
        "unit": "kg",
        "minStock": 5,
        "price": 2.5,
        "supplier": "Fresh Farms Co.",
        "lastUpdated": datetime(2026, 1, 1, tzinfo=timezone.utc).isoformat(),
    }
    data.update(overrides)
    return InventoryItem.model_validate(data)


class FakeResponse:
    def __init__(self, status_code=200, payload=None, json_error=False):
        self.status_code = status_code
        self._payload = payload
        self._json_error = json_error
        self.text = "" if payload is None else str(payload)

    def json(self):
        if self._json_error:
            raise ValueError("Expecting value: line 1 column 1 (char 0)")
        return self._payload


class FakeSession:
    """Stands in for requests.Session; records every call."""

    def __init__(self, *responses, error=None):
        self.responses = list(responses)
        self.error = error
        self.calls = []

    def _next(self):
        if self.error is not None:
            raise self.error
        return self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]

    def request(self, method, url, **kwargs):
        self.calls.append((method, url, kwargs))
        return self._next()

    def get(self, url, **kwargs):
        return self.request("GET", url, **kwargs)

    def post(self, url, **kwargs):
        return self.request("POST", url, **kwargs)
