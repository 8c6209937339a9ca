"""Pages Router - server-rendered contact views and form actions.

Handles:
- The sidebar list with search (GET /)
- New contact (POST /)
- Contact detail, edit form, and edit submission
- Favorite toggle and delete

Every POST answers with a 303 redirect; the follow-up GET re-runs all
loaders so the sidebar always reflects the write.
"""
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse, RedirectResponse

from api.dependencies import form_fields, get_bus, get_settings, get_store
from api.views import page_context, render_page
from contact_book.config import Settings
from contact_book.contacts import ContactStore
from contact_book.revalidation import InvalidationBus
from contact_book.routes import (
    Redirect,
    contact_loader,
    create_action,
    destroy_action,
    favorite_action,
    root_loader,
    update_action,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _redirect(result: Redirect) -> RedirectResponse:
    return RedirectResponse(result.location, status_code=result.status)


# =============================================================================
# Loaders (GET)
# =============================================================================

@router.get("/", response_class=HTMLResponse)
def index(request: Request, store: ContactStore = Depends(get_store)):
    root = root_loader(store, str(request.url))
    return render_page(request, "index", page_context(root))


@router.get("/contacts/{contact_id}", response_class=HTMLResponse)
def contact_detail(
    contact_id: str,
    request: Request,
    store: ContactStore = Depends(get_store),
):
    root = root_loader(store, str(request.url))
    data = contact_loader(store, {"contact_id": contact_id})
    return render_page(request, "contact", page_context(root, contact=data.contact))


@router.get("/contacts/{contact_id}/edit", response_class=HTMLResponse)
def edit_contact_form(
    contact_id: str,
    request: Request,
    store: ContactStore = Depends(get_store),
):
    root = root_loader(store, str(request.url))
    data = contact_loader(store, {"contact_id": contact_id})
    return render_page(request, "edit", page_context(root, contact=data.contact))


# =============================================================================
# Actions (POST)
# =============================================================================

@router.post("/")
def new_contact(
    store: ContactStore = Depends(get_store),
    bus: InvalidationBus = Depends(get_bus),
    settings: Settings = Depends(get_settings),
) -> RedirectResponse:
    return _redirect(create_action(store, bus, environment=settings.environment))


@router.post("/contacts/{contact_id}/edit")
async def edit_contact(
    contact_id: str,
    request: Request,
    store: ContactStore = Depends(get_store),
    bus: InvalidationBus = Depends(get_bus),
    settings: Settings = Depends(get_settings),
) -> RedirectResponse:
    form = form_fields(await request.form())
    result = update_action(
        store, bus, {"contact_id": contact_id}, form,
        environment=settings.environment,
    )
    return _redirect(result)


@router.post("/contacts/{contact_id}/favorite")
async def toggle_favorite(
    contact_id: str,
    request: Request,
    store: ContactStore = Depends(get_store),
    bus: InvalidationBus = Depends(get_bus),
    settings: Settings = Depends(get_settings),
) -> RedirectResponse:
    form = form_fields(await request.form())
    result = favorite_action(
        store, bus, {"contact_id": contact_id}, form,
        environment=settings.environment,
    )
    return _redirect(result)


@router.post("/contacts/{contact_id}/destroy")
def delete_contact(
    contact_id: str,
    store: ContactStore = Depends(get_store),
    bus: InvalidationBus = Depends(get_bus),
    settings: Settings = Depends(get_settings),
) -> RedirectResponse:
    result = destroy_action(
        store, bus, {"contact_id": contact_id},
        environment=settings.environment,
    )
    return _redirect(result)
