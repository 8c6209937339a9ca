"""Tests for route loaders and actions."""
from __future__ import annotations

import json

import pytest

from contact_book.routes import (
    NotFound,
    PreconditionViolation,
    Redirect,
    contact_loader,
    create_action,
    destroy_action,
    favorite_action,
    invariant,
    root_loader,
    search_query,
    update_action,
)


class TestSearchQuery:
    @pytest.mark.parametrize(
        "url,expected",
        [
            ("http://testserver/?q=sh", "sh"),
            ("/?q=sh", "sh"),
            ("?q=Shelby%20F", "Shelby F"),
            ("q=sh", "sh"),
            ("/?q=", ""),
            ("/", None),
            ("", None),
            ("/contacts/1?other=x", None),
        ],
    )
    def test_extracts_q(self, url, expected):
        assert search_query(url) == expected


class TestRootLoader:
    def test_filters_and_echoes_q(self, store, shelby_and_jim):
        data = root_loader(store, "/?q=sh")
        assert [(c.first, c.last) for c in data.contacts] == [("Shelby", "Flores")]
        assert data.q == "sh"

    @pytest.mark.parametrize("url", ["/", "/?q="])
    def test_blank_or_absent_query_lists_everything(self, store, shelby_and_jim, url):
        data = root_loader(store, url)
        assert len(data.contacts) == 2

    def test_absent_and_empty_q_are_distinct(self, store):
        assert root_loader(store, "/").q is None
        assert root_loader(store, "/?q=").q == ""

    @pytest.mark.parametrize("q", ["s", "S", "beam", "LOR", "i"])
    def test_returns_exactly_matching_contacts(self, store, shelby_and_jim, q):
        data = root_loader(store, f"/?q={q}")
        expected = {
            c.id for c in store.list()
            if q.lower() in (c.first or "").lower() or q.lower() in (c.last or "").lower()
        }
        assert {c.id for c in data.contacts} == expected
        assert data.q == q

    def test_to_dict(self, store, shelby_and_jim):
        body = root_loader(store, "/?q=jim").to_dict()
        assert body["q"] == "jim"
        assert body["contacts"][0]["first"] == "Jim"


class TestContactLoader:
    def test_returns_contact(self, store, shelby_and_jim):
        shelby, _ = shelby_and_jim
        assert contact_loader(store, {"contact_id": shelby.id}).contact.first == "Shelby"

    @pytest.mark.parametrize("contact_id", ["missing", "0", "does-not-exist"])
    def test_missing_contact_is_not_found(self, store, shelby_and_jim, contact_id):
        with pytest.raises(NotFound) as excinfo:
            contact_loader(store, {"contact_id": contact_id})
        assert excinfo.value.contact_id == contact_id
        assert excinfo.value.status_code == 404

    def test_missing_param_is_precondition_violation(self, store):
        with pytest.raises(PreconditionViolation):
            contact_loader(store, {})


class TestActions:
    def test_create_redirects_to_edit_view(self, store, bus):
        result = create_action(store, bus)
        assert isinstance(result, Redirect)
        new_id = result.location.split("/")[2]
        assert result.location == f"/contacts/{new_id}/edit"
        contact = contact_loader(store, {"contact_id": new_id}).contact
        assert contact.first is None and contact.notes is None
        assert contact.favorite is False

    def test_update_passes_fields_and_redirects_to_detail(self, store, bus, shelby_and_jim):
        shelby, _ = shelby_and_jim
        store.update(shelby.id, {"twitter": "@shelby", "notes": "hi"})
        result = update_action(store, bus, {"contact_id": shelby.id}, {"first": "Ada"})
        assert result.location == f"/contacts/{shelby.id}"
        updated = store.get(shelby.id)
        assert updated.first == "Ada"
        assert updated.last == "Flores"
        assert updated.twitter == "@shelby"
        assert updated.notes == "hi"

    def test_update_missing_param_fails_fast(self, store, bus):
        with pytest.raises(PreconditionViolation, match="Missing contact_id"):
            update_action(store, bus, {}, {"first": "Ada"})
        with pytest.raises(PreconditionViolation):
            update_action(store, bus, {"contact_id": ""}, {"first": "Ada"})

    def test_update_unknown_contact_is_not_found(self, store, bus):
        with pytest.raises(NotFound):
            update_action(store, bus, {"contact_id": "ghost"}, {"first": "Ada"})

    def test_favorite_sets_flag(self, store, bus, shelby_and_jim):
        shelby, _ = shelby_and_jim
        favorite_action(store, bus, {"contact_id": shelby.id}, {"favorite": "true"})
        assert store.get(shelby.id).favorite is True
        favorite_action(store, bus, {"contact_id": shelby.id}, {"favorite": "false"})
        assert store.get(shelby.id).favorite is False

    def test_destroy_redirects_home(self, store, bus, shelby_and_jim):
        shelby, _ = shelby_and_jim
        assert destroy_action(store, bus, {"contact_id": shelby.id}).location == "/"
        assert store.get(shelby.id) is None
        with pytest.raises(NotFound):
            destroy_action(store, bus, {"contact_id": shelby.id})

    def test_every_mutation_publishes_invalidation(self, store, bus, shelby_and_jim):
        shelby, jim = shelby_and_jim
        events = []
        bus.subscribe(events.append)

        created = create_action(store, bus)
        update_action(store, bus, {"contact_id": shelby.id}, {"first": "S"})
        favorite_action(store, bus, {"contact_id": shelby.id}, {"favorite": "true"})
        destroy_action(store, bus, {"contact_id": jim.id})

        assert [e.reason for e in events] == ["create", "update", "favorite", "destroy"]
        assert events[0].contact_id == created.location.split("/")[2]
        assert [e.sequence for e in events] == [1, 2, 3, 4]

    def test_failed_mutation_does_not_publish(self, store, bus):
        events = []
        bus.subscribe(events.append)
        with pytest.raises(NotFound):
            update_action(store, bus, {"contact_id": "ghost"}, {"first": "Ada"})
        assert events == []

    def test_actions_write_activity_log(self, store, bus, activity_log):
        create_action(store, bus, environment="test")
        entry = json.loads(activity_log.read_text(encoding="utf-8").splitlines()[0])
        assert entry["action"] == "create"
        assert entry["environment"] == "test"
        assert entry["contact_id"]


def test_invariant_returns_value():
    assert invariant("abc", "missing") == "abc"
    with pytest.raises(PreconditionViolation, match="missing"):
        invariant(None, "missing")
