"""Data Router - loader and action results as JSON.

The client-side router fetches loader data from here instead of full
HTML pages, and posts forms here to get the redirect target back.

Mounted at /data.
"""
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request

from api.dependencies import form_fields, get_bus, get_settings, get_store
from api.models import ContactDataResponse, RedirectResponseModel, RootDataResponse
from contact_book.config import Settings
from contact_book.contacts import ContactStore
from contact_book.revalidation import InvalidationBus
from contact_book.routes import (
    contact_loader,
    create_action,
    destroy_action,
    favorite_action,
    root_loader,
    update_action,
)

router = APIRouter()


@router.get("/root", response_model=RootDataResponse)
def root_data(
    request: Request,
    q: Optional[str] = Query(None),
    store: ContactStore = Depends(get_store),
) -> dict:
    """Sidebar list filtered by ``q``, with ``q`` echoed back."""
    return root_loader(store, str(request.url)).to_dict()


@router.get("/contacts/{contact_id}", response_model=ContactDataResponse)
def contact_data(contact_id: str, store: ContactStore = Depends(get_store)) -> dict:
    return contact_loader(store, {"contact_id": contact_id}).to_dict()


@router.post("/", response_model=RedirectResponseModel)
def create_contact(
    store: ContactStore = Depends(get_store),
    bus: InvalidationBus = Depends(get_bus),
    settings: Settings = Depends(get_settings),
) -> dict:
    result = create_action(store, bus, environment=settings.environment)
    return {"redirect": result.location}


@router.post("/contacts/{contact_id}/edit", response_model=RedirectResponseModel)
async def update_contact(
    contact_id: str,
    request: Request,
    store: ContactStore = Depends(get_store),
    bus: InvalidationBus = Depends(get_bus),
    settings: Settings = Depends(get_settings),
) -> dict:
    form = form_fields(await request.form())
    result = update_action(
        store, bus, {"contact_id": contact_id}, form,
        environment=settings.environment,
    )
    return {"redirect": result.location}


@router.post("/contacts/{contact_id}/favorite", response_model=RedirectResponseModel)
async def favorite_contact(
    contact_id: str,
    request: Request,
    store: ContactStore = Depends(get_store),
    bus: InvalidationBus = Depends(get_bus),
    settings: Settings = Depends(get_settings),
) -> dict:
    form = form_fields(await request.form())
    result = favorite_action(
        store, bus, {"contact_id": contact_id}, form,
        environment=settings.environment,
    )
    return {"redirect": result.location}


@router.post("/contacts/{contact_id}/destroy", response_model=RedirectResponseModel)
def destroy_contact(
    contact_id: str,
    store: ContactStore = Depends(get_store),
    bus: InvalidationBus = Depends(get_bus),
    settings: Settings = Depends(get_settings),
) -> dict:
    result = destroy_action(
        store, bus, {"contact_id": contact_id},
        environment=settings.environment,
    )
    return {"redirect": result.location}
