#!/usr/bin/env python3
"""Contact book CLI."""
from __future__ import annotations

import argparse
import sys
from urllib.parse import urlencode

from contact_book.config import ConfigError, load_settings
from contact_book.contacts import Contact, ContactStore, open_store
from contact_book.revalidation import InvalidationBus
from contact_book.routes import (
    NotFound,
    contact_loader,
    create_action,
    destroy_action,
    root_loader,
    update_action,
)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="contact-book",
        description="Manage the contact book from the terminal or run the web app.",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    list_parser = subparsers.add_parser("list", help="List contacts.")
    list_parser.add_argument(
        "--q",
        default=None,
        help="Only show contacts whose first or last name contains this text.",
    )

    show_parser = subparsers.add_parser("show", help="Show a single contact.")
    show_parser.add_argument("contact_id")

    subparsers.add_parser("new", help="Create an empty contact and print its id.")

    edit_parser = subparsers.add_parser("edit", help="Update fields on a contact.")
    edit_parser.add_argument("contact_id")
    edit_parser.add_argument(
        "--field",
        action="append",
        default=[],
        metavar="NAME=VALUE",
        help="Field to set, e.g. --field first=Ada. Repeat for more fields.",
    )

    delete_parser = subparsers.add_parser("delete", help="Delete a contact.")
    delete_parser.add_argument("contact_id")

    serve_parser = subparsers.add_parser("serve", help="Run the web app with uvicorn.")
    serve_parser.add_argument("--host", default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=8000)

    return parser


def _format_contact_row(contact: Contact) -> str:
    star = " ★" if contact.favorite else ""
    return f"{contact.id}  {contact.display_name or 'No Name'}{star}"


def _parse_fields(pairs: list[str]) -> dict[str, str]:
    fields: dict[str, str] = {}
    for pair in pairs:
        name, sep, value = pair.partition("=")
        if not sep or not name:
            raise ValueError(f"Expected NAME=VALUE, got {pair!r}")
        fields[name.strip()] = value
    return fields


def _cmd_list(store: ContactStore, q: str | None) -> int:
    data = root_loader(store, "" if q is None else "?" + urlencode({"q": q}))
    if not data.contacts:
        print("No contacts")
        return 0
    for contact in data.contacts:
        print(_format_contact_row(contact))
    return 0


def _cmd_show(store: ContactStore, contact_id: str) -> int:
    try:
        contact = contact_loader(store, {"contact_id": contact_id}).contact
    except NotFound:
        print(f"Contact {contact_id} not found.", file=sys.stderr)
        return 1

    print(_format_contact_row(contact))
    for label, value in (
        ("Twitter", contact.twitter),
        ("Avatar", contact.avatar),
        ("Notes", contact.notes),
    ):
        if value:
            print(f"  {label}: {value}")
    return 0


def _cmd_serve(host: str, port: int) -> int:
    import uvicorn

    from api.main import app

    uvicorn.run(app, host=host, port=port, reload=False)
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command == "serve":
        return _cmd_serve(host=args.host, port=args.port)

    try:
        settings = load_settings()
    except ConfigError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return 1

    if settings.store_backend == "memory":
        print(
            "Note: CONTACTS_STORE=memory, changes are lost when this command exits.",
            file=sys.stderr,
        )
    store = open_store(settings)
    bus = InvalidationBus()
    env = settings.environment

    if args.command == "list":
        return _cmd_list(store, args.q)
    if args.command == "show":
        return _cmd_show(store, args.contact_id)
    if args.command == "new":
        redirect = create_action(store, bus, environment=env)
        print(redirect.location.split("/")[2])
        return 0
    if args.command == "edit":
        try:
            fields = _parse_fields(args.field)
            update_action(store, bus, {"contact_id": args.contact_id}, fields, environment=env)
        except ValueError as exc:
            print(exc, file=sys.stderr)
            return 2
        except NotFound:
            print(f"Contact {args.contact_id} not found.", file=sys.stderr)
            return 1
        return _cmd_show(store, args.contact_id)
    if args.command == "delete":
        try:
            destroy_action(store, bus, {"contact_id": args.contact_id}, environment=env)
        except NotFound:
            print(f"Contact {args.contact_id} not found.", file=sys.stderr)
            return 1
        print(f"Deleted {args.contact_id}")
        return 0

    parser.error(f"Unknown command: {args.command}")
    return 2


if __name__ == "__main__":
    sys.exit(main())
