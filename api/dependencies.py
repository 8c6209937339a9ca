"""Shared dependencies and helper functions for API routers.

The store, invalidation bus and settings live on ``app.state`` and are
handed to loaders/actions explicitly; nothing reaches for a module-level
store.

Usage in routers:
    from api.dependencies import get_store, get_bus, get_settings
"""
from __future__ import annotations

from typing import Any, Dict, Mapping

from fastapi import Request

from contact_book.config import Settings
from contact_book.contacts import ContactStore
from contact_book.revalidation import InvalidationBus


# =============================================================================
# Configuration Constants
# =============================================================================

ALLOWED_ORIGINS = [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
    "http://localhost:8000",
    "http://127.0.0.1:8000",
]


# =============================================================================
# Request-scoped Accessors
# =============================================================================

def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_store(request: Request) -> ContactStore:
    return request.app.state.store


def get_bus(request: Request) -> InvalidationBus:
    return request.app.state.bus


# =============================================================================
# Serialization Helpers
# =============================================================================

def form_fields(form: Mapping[str, Any]) -> Dict[str, str]:
    """Flatten submitted form data to a string-keyed mapping of text values."""
    return {key: value for key, value in form.items() if isinstance(value, str)}
