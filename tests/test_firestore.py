"""Tests for the cached Firestore client setup."""
from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import pytest

from contact_book.firestore import get_firestore_client, reset_firestore_client


@pytest.fixture(autouse=True)
def fresh_client():
    reset_firestore_client()
    yield
    reset_firestore_client()


@pytest.fixture
def firebase():
    with patch("firebase_admin._apps", {}), \
            patch("firebase_admin.initialize_app") as initialize_app, \
            patch("firebase_admin.credentials.Certificate") as certificate, \
            patch("firebase_admin.firestore.client") as client:
        yield initialize_app, certificate, client


def test_uses_key_file_and_project(firebase):
    initialize_app, certificate, client = firebase

    db = get_firestore_client(
        project_id="contacts-demo", credentials_path=Path("/secrets/key.json"),
    )

    certificate.assert_called_once_with("/secrets/key.json")
    initialize_app.assert_called_once_with(
        certificate.return_value, {"projectId": "contacts-demo"}
    )
    assert db is client.return_value


def test_defaults_to_application_credentials(firebase):
    initialize_app, certificate, _ = firebase

    get_firestore_client()

    certificate.assert_not_called()
    initialize_app.assert_called_once_with(None, None)


def test_client_is_cached(firebase):
    _, _, client = firebase
    first = get_firestore_client()
    second = get_firestore_client(project_id="ignored-once-cached")
    assert first is second
    client.assert_called_once()
