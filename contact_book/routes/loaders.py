"""Read-only handlers that compute what a view needs before it renders."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional
from urllib.parse import parse_qs, urlsplit

from ..contacts import Contact, ContactStore
from .errors import NotFound, invariant


@dataclass
class RootData:
    """Sidebar data: the filtered list plus the ``q`` it was filtered by."""
    contacts: List[Contact] = field(default_factory=list)
    q: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "contacts": [contact.to_dict() for contact in self.contacts],
            "q": self.q,
        }


@dataclass
class ContactData:
    contact: Contact

    def to_dict(self) -> Dict[str, Any]:
        return {"contact": self.contact.to_dict()}


def search_query(url: str) -> Optional[str]:
    """Return the first ``q`` parameter of ``url``.

    ``None`` when the parameter is absent, ``""`` when present but blank.
    Accepts a full URL, a path with a query string, or a bare query string.
    """
    if "?" in url or "://" in url or url.startswith("/"):
        query = urlsplit(url).query
    else:
        query = url
    values = parse_qs(query, keep_blank_values=True).get("q")
    return values[0] if values else None


def root_loader(store: ContactStore, url: str) -> RootData:
    q = search_query(url)
    return RootData(contacts=store.list(q), q=q)


def contact_loader(store: ContactStore, params: Mapping[str, Any]) -> ContactData:
    contact_id = invariant(params.get("contact_id"), "Missing contact_id param")
    contact = store.get(contact_id)
    if contact is None:
        raise NotFound(contact_id)
    return ContactData(contact=contact)
