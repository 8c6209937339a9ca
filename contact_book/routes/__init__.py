"""Route loaders and actions."""
from .actions import (
    create_action,
    destroy_action,
    favorite_action,
    update_action,
)
from .errors import NotFound, PreconditionViolation, Redirect, invariant
from .loaders import ContactData, RootData, contact_loader, root_loader, search_query

__all__ = [
    # Loaders
    "ContactData",
    "RootData",
    "contact_loader",
    "root_loader",
    "search_query",
    # Actions
    "create_action",
    "destroy_action",
    "favorite_action",
    "update_action",
    # Outcomes
    "NotFound",
    "PreconditionViolation",
    "Redirect",
    "invariant",
]
