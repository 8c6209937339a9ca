"""Configuration helpers for the contact book service and CLI."""
from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv


VALID_BACKENDS = ("memory", "file", "firestore")
DEFAULT_CONTACTS_DIR = Path(__file__).resolve().parents[1] / "contacts_data"


class ConfigError(RuntimeError):
    """Raised when configuration values are missing or malformed."""


@dataclass(slots=True)
class Settings:
    """Runtime configuration for the service and CLI."""

    environment: str = "local"
    store_backend: str = "memory"
    contacts_dir: Path = DEFAULT_CONTACTS_DIR
    contacts_collection: str = "contacts"
    firestore_project: Optional[str] = None
    firestore_credentials: Optional[Path] = None
    seed_sample_data: bool = False
    search_debounce_ms: int = 0
    allowed_frontend: Optional[str] = None


def _parse_int(name: str, raw: str) -> int:
    try:
        value = int(raw)
    except ValueError as exc:
        raise ConfigError(f"{name} must be an integer, got {raw!r}.") from exc
    if value < 0:
        raise ConfigError(f"{name} must not be negative, got {value}.")
    return value


def load_settings(*, use_dotenv: bool = True) -> Settings:
    """Load settings from environment variables.

    Args:
        use_dotenv: Read a ``.env`` file into the environment first.

    Returns:
        Settings with every value resolved.

    Raises:
        ConfigError: if a value is not usable.
    """

    if use_dotenv:
        load_dotenv()

    backend = os.getenv("CONTACTS_STORE", "memory").strip().lower()
    if backend not in VALID_BACKENDS:
        raise ConfigError(
            f"Unknown CONTACTS_STORE {backend!r}. Valid: {', '.join(VALID_BACKENDS)}"
        )

    contacts_dir = os.getenv("CONTACTS_DIR")
    debounce = os.getenv("CONTACTS_SEARCH_DEBOUNCE_MS", "0").strip() or "0"
    allowed_frontend = os.getenv("CONTACTS_ALLOWED_FRONTEND", "").strip()
    firestore_project = os.getenv("CONTACTS_FIRESTORE_PROJECT", "").strip()
    firestore_credentials = os.getenv("CONTACTS_FIRESTORE_CREDENTIALS", "").strip()

    return Settings(
        environment=os.getenv("CONTACTS_ENV", "local"),
        store_backend=backend,
        contacts_dir=Path(contacts_dir) if contacts_dir else DEFAULT_CONTACTS_DIR,
        contacts_collection=os.getenv("CONTACTS_COLLECTION", "contacts"),
        firestore_project=firestore_project or None,
        firestore_credentials=Path(firestore_credentials) if firestore_credentials else None,
        seed_sample_data=os.getenv("CONTACTS_SEED", "0") == "1",
        search_debounce_ms=_parse_int("CONTACTS_SEARCH_DEBOUNCE_MS", debounce),
        allowed_frontend=allowed_frontend or None,
    )
