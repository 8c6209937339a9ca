"""Shared fixtures: an isolated store, bus, activity log and app per test."""
from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from contact_book.config import Settings
from contact_book.contacts import MemoryContactStore
from contact_book.revalidation import InvalidationBus


@pytest.fixture(autouse=True)
def activity_log(tmp_path, monkeypatch):
    """Keep activity entries out of the source tree."""
    log_file = tmp_path / "activity.jsonl"
    monkeypatch.setenv("CONTACTS_ACTIVITY_LOG", str(log_file))
    monkeypatch.setenv("CONTACTS_STORE", "memory")
    return log_file


@pytest.fixture
def store():
    return MemoryContactStore()


@pytest.fixture
def bus():
    return InvalidationBus()


@pytest.fixture
def shelby_and_jim(store):
    shelby, jim = store.seed([
        {"first": "Shelby", "last": "Flores"},
        {"first": "Jim", "last": "Beam"},
    ])
    return shelby, jim


@pytest.fixture
def app(store):
    from api.main import create_app

    return create_app(settings=Settings(environment="test"), store=store)


@pytest.fixture
def client(app):
    return TestClient(app)
