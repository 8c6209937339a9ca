"""Contact record stores: in-memory, local JSON files, and Firestore."""
from __future__ import annotations

import json
import logging
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional

from ..config import Settings
from ..firestore import get_firestore_client
from .models import Contact

logger = logging.getLogger(__name__)


class ContactNotFound(KeyError):
    """Raised by update/destroy when the contact id is unknown."""

    def __init__(self, contact_id: str) -> None:
        super().__init__(contact_id)
        self.contact_id = contact_id

    def __str__(self) -> str:
        return f"Contact {self.contact_id!r} not found"


class ContactStore(ABC):
    """Keyed store of contact records.

    Every create/update/destroy call is applied as a single unit; callers
    never observe a half-written record.
    """

    backend = "abstract"

    @abstractmethod
    def _all(self) -> Iterable[Contact]:
        ...

    @abstractmethod
    def get(self, contact_id: str) -> Optional[Contact]:
        ...

    @abstractmethod
    def _write(self, contact: Contact) -> None:
        ...

    @abstractmethod
    def _delete(self, contact_id: str) -> bool:
        ...

    def list(self, query: Optional[str] = None) -> List[Contact]:
        """Contacts whose first or last name contains ``query``, sorted by last name."""
        contacts = [contact for contact in self._all() if contact.matches(query)]
        contacts.sort(key=Contact.sort_key)
        return contacts

    def create(self) -> Contact:
        contact = Contact.empty()
        self._write(contact)
        logger.info(f"[Contacts] Created contact {contact.id} ({self.backend})")
        return contact

    def update(self, contact_id: str, fields: Mapping[str, Any]) -> Contact:
        contact = self.get(contact_id)
        if contact is None:
            raise ContactNotFound(contact_id)
        contact.apply_updates(fields)
        self._write(contact)
        logger.info(f"[Contacts] Updated contact {contact_id}: {sorted(fields)}")
        return contact

    def destroy(self, contact_id: str) -> None:
        if not self._delete(contact_id):
            raise ContactNotFound(contact_id)
        logger.info(f"[Contacts] Deleted contact {contact_id}")

    def seed(self, records: Iterable[Mapping[str, Any]]) -> List[Contact]:
        """Insert sample records, generating ids for those without one."""
        seeded = []
        for record in records:
            contact = Contact.empty()
            contact.apply_updates(record)
            if record.get("id"):
                contact.id = str(record["id"])
            self._write(contact)
            seeded.append(contact)
        logger.info(f"[Contacts] Seeded {len(seeded)} contacts ({self.backend})")
        return seeded


class MemoryContactStore(ContactStore):
    """Process-local store; contents vanish on restart."""

    backend = "memory"

    def __init__(self) -> None:
        self._contacts: Dict[str, Contact] = {}
        self._lock = threading.Lock()

    def _all(self) -> Iterable[Contact]:
        with self._lock:
            return [Contact.from_dict(c.to_dict()) for c in self._contacts.values()]

    def get(self, contact_id: str) -> Optional[Contact]:
        with self._lock:
            contact = self._contacts.get(contact_id)
            return Contact.from_dict(contact.to_dict()) if contact else None

    def _write(self, contact: Contact) -> None:
        with self._lock:
            self._contacts[contact.id] = Contact.from_dict(contact.to_dict())

    def _delete(self, contact_id: str) -> bool:
        with self._lock:
            return self._contacts.pop(contact_id, None) is not None


class FileContactStore(ContactStore):
    """One JSON file per contact inside ``directory``."""

    backend = "file"

    def __init__(self, directory: Path) -> None:
        self.directory = Path(directory)
        self._lock = threading.Lock()

    def _contact_file(self, contact_id: str) -> Path:
        self.directory.mkdir(parents=True, exist_ok=True)
        safe_id = contact_id.replace("/", "_").replace("\\", "_")
        return self.directory / f"{safe_id}.json"

    def _all(self) -> Iterable[Contact]:
        if not self.directory.exists():
            return []
        contacts = []
        for filepath in self.directory.glob("*.json"):
            try:
                with open(filepath, "r", encoding="utf-8") as f:
                    contacts.append(Contact.from_dict(json.load(f)))
            except (json.JSONDecodeError, IOError) as exc:
                logger.warning(f"[Contacts] Skipping unreadable file {filepath.name}: {exc}")
        return contacts

    def get(self, contact_id: str) -> Optional[Contact]:
        filepath = self._contact_file(contact_id)
        if not filepath.exists():
            return None
        try:
            with open(filepath, "r", encoding="utf-8") as f:
                return Contact.from_dict(json.load(f))
        except (json.JSONDecodeError, IOError) as exc:
            logger.warning(f"[Contacts] Could not read contact {contact_id}: {exc}")
            return None

    def _write(self, contact: Contact) -> None:
        filepath = self._contact_file(contact.id)
        tmp_path = filepath.with_suffix(".json.tmp")
        with self._lock:
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(contact.to_dict(), f, indent=2)
            tmp_path.replace(filepath)

    def _delete(self, contact_id: str) -> bool:
        filepath = self._contact_file(contact_id)
        with self._lock:
            if filepath.exists():
                filepath.unlink()
                return True
        return False


class FirestoreContactStore(ContactStore):
    """One Firestore document per contact, keyed by contact id."""

    backend = "firestore"

    def __init__(self, db: Any, collection: str = "contacts") -> None:
        self.db = db
        self.collection_name = collection

    def _collection(self) -> Any:
        return self.db.collection(self.collection_name)

    def _all(self) -> Iterable[Contact]:
        return [Contact.from_dict(doc.to_dict()) for doc in self._collection().stream()]

    def get(self, contact_id: str) -> Optional[Contact]:
        doc = self._collection().document(contact_id).get()
        if doc.exists:
            return Contact.from_dict(doc.to_dict())
        return None

    def _write(self, contact: Contact) -> None:
        self._collection().document(contact.id).set(contact.to_dict())

    def _delete(self, contact_id: str) -> bool:
        doc_ref = self._collection().document(contact_id)
        if doc_ref.get().exists:
            doc_ref.delete()
            return True
        return False


def open_store(settings: Settings) -> ContactStore:
    """Build the store selected by ``settings.store_backend``.

    A Firestore backend that cannot get a client falls back to local files.
    """
    if settings.store_backend == "firestore":
        try:
            db = get_firestore_client(
                project_id=settings.firestore_project,
                credentials_path=settings.firestore_credentials,
            )
        except Exception as exc:
            logger.warning(
                f"[Contacts] Firestore unavailable, falling back to local files: {exc}"
            )
        else:
            return FirestoreContactStore(db, settings.contacts_collection)
        return FileContactStore(settings.contacts_dir)

    if settings.store_backend == "file":
        return FileContactStore(settings.contacts_dir)

    return MemoryContactStore()
