"""Write handlers: one mutation each, then a redirect.

Actions never render. After the mutation they publish on the
invalidation bus so every mounted loader re-reads, and they append an
entry to the activity log.
"""
from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from ..contacts import ContactNotFound, ContactStore
from ..logs import log_contact_event
from ..revalidation import InvalidationBus
from .errors import NotFound, Redirect, invariant

logger = logging.getLogger(__name__)


def _finish(
    bus: InvalidationBus,
    action: str,
    contact_id: str,
    location: str,
    environment: Optional[str],
) -> Redirect:
    bus.publish(action, contact_id)
    log_contact_event(action=action, contact_id=contact_id, environment=environment)
    return Redirect(location)


def create_action(
    store: ContactStore,
    bus: InvalidationBus,
    *,
    environment: Optional[str] = None,
) -> Redirect:
    """Create an empty contact and send the user straight to its edit form."""
    contact = store.create()
    return _finish(bus, "create", contact.id, f"/contacts/{contact.id}/edit", environment)


def update_action(
    store: ContactStore,
    bus: InvalidationBus,
    params: Mapping[str, Any],
    form: Mapping[str, Any],
    *,
    environment: Optional[str] = None,
) -> Redirect:
    """Apply submitted fields to the contact.

    The form mapping is handed to the store as-is; fields the form did not
    submit keep their stored values.
    """
    contact_id = invariant(params.get("contact_id"), "Missing contact_id param")
    updates = dict(form)
    try:
        store.update(contact_id, updates)
    except ContactNotFound as exc:
        raise NotFound(contact_id) from exc
    return _finish(bus, "update", contact_id, f"/contacts/{contact_id}", environment)


def favorite_action(
    store: ContactStore,
    bus: InvalidationBus,
    params: Mapping[str, Any],
    form: Mapping[str, Any],
    *,
    environment: Optional[str] = None,
) -> Redirect:
    contact_id = invariant(params.get("contact_id"), "Missing contact_id param")
    try:
        store.update(contact_id, {"favorite": form.get("favorite", "false")})
    except ContactNotFound as exc:
        raise NotFound(contact_id) from exc
    return _finish(bus, "favorite", contact_id, f"/contacts/{contact_id}", environment)


def destroy_action(
    store: ContactStore,
    bus: InvalidationBus,
    params: Mapping[str, Any],
    *,
    environment: Optional[str] = None,
) -> Redirect:
    contact_id = invariant(params.get("contact_id"), "Missing contact_id param")
    try:
        store.destroy(contact_id)
    except ContactNotFound as exc:
        raise NotFound(contact_id) from exc
    return _finish(bus, "destroy", contact_id, "/", environment)
