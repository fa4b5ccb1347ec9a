from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient

import app.api.dependencies as dependencies
from app.store import factory
from app.store.memory import InMemoryTicketStore


@pytest.fixture
def store():
    return InMemoryTicketStore(pool_size=5)


@pytest.fixture
def client(monkeypatch, store):
    from app.main import app

    monkeypatch.setattr(
        dependencies,
        "settings",
        SimpleNamespace(purchase_password="buyer-secret", admin_password="admin-secret"),
    )
    factory.set_store(store)
    try:
        yield TestClient(app)
    finally:
        factory.set_store(None)
