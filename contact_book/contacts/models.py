"""Contact record model."""
from __future__ import annotations

import uuid
from dataclasses import dataclass, asdict
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional


EDITABLE_FIELDS = ("first", "last", "twitter", "avatar", "notes", "favorite")
TRUTHY_FORM_VALUES = {"true", "on", "1", "yes"}


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def new_contact_id() -> str:
    return uuid.uuid4().hex[:12]


def parse_favorite(value: Any) -> bool:
    """Coerce a submitted favorite value ("true", "on", True...) to a bool."""
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    return str(value).strip().lower() in TRUTHY_FORM_VALUES


@dataclass
class Contact:
    """A single entry in the address book.

    ``id`` and ``created_at`` are fixed when the record is created; every
    other field is optional and filled in through the edit form.
    """
    id: str
    first: Optional[str] = None
    last: Optional[str] = None
    twitter: Optional[str] = None
    avatar: Optional[str] = None
    notes: Optional[str] = None
    favorite: bool = False
    created_at: str = ""

    @classmethod
    def empty(cls) -> Contact:
        return cls(id=new_contact_id(), created_at=_now())

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Contact:
        return cls(
            id=data.get("id", ""),
            first=data.get("first"),
            last=data.get("last"),
            twitter=data.get("twitter"),
            avatar=data.get("avatar"),
            notes=data.get("notes"),
            favorite=parse_favorite(data.get("favorite", False)),
            created_at=data.get("created_at", ""),
        )

    @property
    def display_name(self) -> Optional[str]:
        """First and last name joined, or None when neither is set."""
        if not (self.first or self.last):
            return None
        return " ".join(part for part in (self.first, self.last) if part)

    def matches(self, query: Optional[str]) -> bool:
        """Case-insensitive substring match against first or last name."""
        if not query:
            return True
        needle = query.casefold()
        return any(
            needle in value.casefold()
            for value in (self.first, self.last)
            if value
        )

    def apply_updates(self, fields: Mapping[str, Any]) -> None:
        """Copy submitted fields onto the record.

        Only keys present in ``fields`` change. ``id`` and ``created_at``
        are never touched and unknown keys are skipped.
        """
        for key in EDITABLE_FIELDS:
            if key not in fields:
                continue
            if key == "favorite":
                self.favorite = parse_favorite(fields[key])
            else:
                value = fields[key]
                setattr(self, key, None if value is None else str(value))

    def sort_key(self) -> tuple:
        return ((self.last or "").casefold(), self.created_at)
