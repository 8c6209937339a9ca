"""Firestore client for the contact store, configured from ``Settings``."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

_firestore_client = None


def get_firestore_client(
    project_id: Optional[str] = None,
    credentials_path: Optional[Path] = None,
):
    """Return a cached Firestore client.

    The first call initializes the default firebase app. A service-account
    key file is used when ``credentials_path`` is given, otherwise the
    application default credentials. ``project_id`` overrides the project
    those credentials name.
    """

    global _firestore_client
    if _firestore_client is not None:
        return _firestore_client

    try:
        import firebase_admin
        from firebase_admin import credentials, firestore
    except ModuleNotFoundError as exc:  # pragma: no cover
        raise RuntimeError(
            "firebase-admin is required for the Firestore contact store. "
            "Install dependencies before setting CONTACTS_STORE=firestore."
        ) from exc

    if not firebase_admin._apps:
        cred = credentials.Certificate(str(credentials_path)) if credentials_path else None
        options: Dict[str, Any] = {"projectId": project_id} if project_id else {}
        firebase_admin.initialize_app(cred, options or None)
        logger.info(
            f"[Firestore] Initialized app for project {project_id or '(default)'}"
        )
    _firestore_client = firestore.client()
    return _firestore_client


def reset_firestore_client() -> None:
    """Drop the cached client so the next call re-initializes it."""

    global _firestore_client
    _firestore_client = None
