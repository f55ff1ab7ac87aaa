"""
Shared fixtures.

Everything runs against the in-memory sheets client: no Google
credentials and no network calls.
"""

import pytest
from fastapi.testclient import TestClient

from paysheet.api import create_app
from paysheet.config import get_settings
from paysheet.models.user import Role, TokenUser
from paysheet.orchestrator import create_app_components
from paysheet.services.storage import (
    InMemorySheetsClient,
    SheetTransactionStorage,
    SheetUserStorage,
)
from paysheet.services.storage.rows import TRANSACTION_COLUMNS, USER_COLUMNS


ADMIN_EMAIL = "admin@example.com"
ADMIN_PASSWORD = "admin-pass"


@pytest.fixture(autouse=True)
def app_env(monkeypatch):
    """Deterministic settings for every test."""
    monkeypatch.setenv("JWT_SECRET", "test-secret-0123456789abcdef-0123")
    monkeypatch.setenv("JWT_EXPIRES_IN", "1h")
    monkeypatch.setenv("STORAGE_BACKEND", "memory")
    monkeypatch.setenv("LOG_JSON", "false")
    monkeypatch.setenv("LOG_LEVEL", "WARNING")
    monkeypatch.setenv("REGISTRATION_ENABLED", "true")
    for name in (
        "BOOTSTRAP_ADMIN_EMAIL",
        "BOOTSTRAP_ADMIN_PASSWORD",
        "BOOTSTRAP_ADMIN_NAME",
    ):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def sheets_client():
    client = InMemorySheetsClient()
    client.ensure_table("Users", USER_COLUMNS)
    client.ensure_table("Transactions", TRANSACTION_COLUMNS)
    return client


@pytest.fixture
def user_storage(sheets_client):
    return SheetUserStorage(sheets_client)


@pytest.fixture
def transaction_storage(sheets_client):
    return SheetTransactionStorage(sheets_client)


@pytest.fixture
def components(sheets_client):
    return create_app_components(client=sheets_client)


@pytest.fixture
def admin(components):
    """An admin account, as the identity a decoded token would carry."""
    created = components.users.create({
        "email": "root@example.com",
        "password": "root-pass",
        "name": "Root",
        "role": "admin",
    })
    return TokenUser(**created.model_dump())


@pytest.fixture
def member(components):
    created = components.users.create({
        "email": "alice@example.com",
        "password": "alice-pass",
        "name": "Alice",
    })
    assert created.role == Role.USER
    return TokenUser(**created.model_dump())


@pytest.fixture
def api(components, monkeypatch):
    """TestClient with startup run, so the bootstrap admin exists."""
    monkeypatch.setenv("BOOTSTRAP_ADMIN_EMAIL", ADMIN_EMAIL)
    monkeypatch.setenv("BOOTSTRAP_ADMIN_PASSWORD", ADMIN_PASSWORD)
    monkeypatch.setenv("BOOTSTRAP_ADMIN_NAME", "Admin")
    app = create_app(components)
    with TestClient(app) as client:
        yield client


@pytest.fixture
def admin_headers(api):
    response = api.post(
        "/api/auth/login",
        json={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD},
    )
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.json()['data']['token']}"}


@pytest.fixture
def user_headers(api):
    response = api.post(
        "/api/auth/register",
        json={"email": "bob@example.com", "password": "bob-pass", "name": "Bob"},
    )
    assert response.status_code == 201
    return {"Authorization": f"Bearer {response.json()['data']['token']}"}
