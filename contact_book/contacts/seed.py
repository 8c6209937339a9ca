"""Sample address book loaded when CONTACTS_SEED=1."""
from __future__ import annotations

from typing import Any, Dict, List


SAMPLE_CONTACTS: List[Dict[str, Any]] = [
    {
        "first": "Shelby",
        "last": "Flores",
        "twitter": "@shelbyf",
        "avatar": "https://placecats.com/200/200",
        "notes": "Met at the spring meetup.",
    },
    {
        "first": "Jim",
        "last": "Beam",
        "twitter": "@jimbeam",
        "favorite": True,
    },
    {
        "first": "Ada",
        "last": "Lovelace",
        "notes": "Analytical engine enthusiast.",
        "favorite": True,
    },
    {
        "first": "Grace",
        "last": "Hopper",
        "twitter": "@amazinggrace",
    },
    {
        "first": "Alan",
        "last": "Turing",
    },
]
