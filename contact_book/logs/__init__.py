"""Logging utilities for the contact book."""

from .activity import fetch_activity_entries, log_contact_event

__all__ = ["log_contact_event", "fetch_activity_entries"]
