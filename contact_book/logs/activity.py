"""Append-only activity log of contact mutations (JSON lines)."""
from __future__ import annotations

import json
import logging
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

DEFAULT_LOG_PATH = Path(__file__).resolve().parents[2] / "activity_log.jsonl"


def log_contact_event(
    *,
    action: str,
    contact_id: str,
    environment: Optional[str] = None,
) -> None:
    entry: Dict[str, Any] = {
        "ts": datetime.now(timezone.utc).isoformat(),
        "action": action,
        "contact_id": contact_id,
        "environment": environment or os.getenv("CONTACTS_ENV", "local"),
    }
    try:
        _write_file(entry)
    except OSError as exc:
        logger.warning(f"[ActivityLog] Could not write activity entry: {exc}")


def fetch_activity_entries(limit: int = 50) -> list[Dict[str, Any]]:
    """Return recent activity entries, newest first."""

    return _read_file_entries(limit)


def _write_file(entry: Dict[str, Any]) -> None:
    path = _get_log_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("a", encoding="utf-8") as handle:
        handle.write(json.dumps(entry))
        handle.write("\n")


def _get_log_path() -> Path:
    override = os.getenv("CONTACTS_ACTIVITY_LOG")
    if override:
        return Path(override)
    return DEFAULT_LOG_PATH


def _read_file_entries(limit: int) -> list[Dict[str, Any]]:
    path = _get_log_path()
    if not path.exists():
        return []
    lines = path.read_text(encoding="utf-8").splitlines()
    entries: list[Dict[str, Any]] = []
    for line in lines[-limit:]:
        try:
            entries.append(json.loads(line))
        except json.JSONDecodeError:
            continue
    return list(reversed(entries))
