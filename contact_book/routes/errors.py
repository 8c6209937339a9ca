"""Outcomes shared by loaders and actions."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, TypeVar

T = TypeVar("T")


class NotFound(LookupError):
    """A read targeted a contact that does not exist; rendered as a 404 page."""

    status_code = 404

    def __init__(self, contact_id: str, detail: Optional[str] = None) -> None:
        self.contact_id = contact_id
        self.detail = detail or "Not Found"
        super().__init__(f"{self.detail}: {contact_id}")


class PreconditionViolation(AssertionError):
    """A required route parameter was missing. Indicates a routing defect."""


def invariant(value: Optional[T], message: str) -> T:
    """Return ``value`` or raise PreconditionViolation when it is falsy."""
    if not value:
        raise PreconditionViolation(message)
    return value


@dataclass(frozen=True)
class Redirect:
    """Navigation instruction returned by every action."""
    location: str
    status: int = 303
