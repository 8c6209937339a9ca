"""Pydantic response models for the JSON data routes.

Usage in routers:
    from api.models import ContactModel, RootDataResponse, RedirectResponseModel
"""
from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field


class ContactModel(BaseModel):
    """A contact record as returned to the client router."""
    id: str
    first: Optional[str] = None
    last: Optional[str] = None
    twitter: Optional[str] = None
    avatar: Optional[str] = None
    notes: Optional[str] = None
    favorite: bool = False
    created_at: str = ""


class RootDataResponse(BaseModel):
    contacts: List[ContactModel] = Field(default_factory=list)
    q: Optional[str] = Field(
        None,
        description="The search text the list was filtered by, echoed so a reload can restore the field.",
    )


class ContactDataResponse(BaseModel):
    contact: ContactModel


class RedirectResponseModel(BaseModel):
    redirect: str = Field(..., description="Where the client should navigate next.")
