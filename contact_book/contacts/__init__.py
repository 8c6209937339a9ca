"""Contact model and record stores."""
from .models import (
    Contact,
    EDITABLE_FIELDS,
    parse_favorite,
)
from .seed import SAMPLE_CONTACTS
from .store import (
    ContactNotFound,
    ContactStore,
    FileContactStore,
    FirestoreContactStore,
    MemoryContactStore,
    open_store,
)

__all__ = [
    # Model
    "Contact",
    "EDITABLE_FIELDS",
    "parse_favorite",
    "SAMPLE_CONTACTS",
    # Storage
    "ContactNotFound",
    "ContactStore",
    "FileContactStore",
    "FirestoreContactStore",
    "MemoryContactStore",
    "open_store",
]
