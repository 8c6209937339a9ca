import json

from contact_book.logs import fetch_activity_entries, log_contact_event


def test_log_contact_event_writes_jsonl(activity_log):
    log_contact_event(action="update", contact_id="abc", environment="local")

    assert activity_log.exists()
    lines = activity_log.read_text(encoding="utf-8").strip().splitlines()
    assert len(lines) == 1
    record = json.loads(lines[0])
    assert record["action"] == "update"
    assert record["contact_id"] == "abc"
    assert record["environment"] == "local"
    assert record["ts"]


def test_fetch_returns_newest_first_and_skips_bad_lines(activity_log):
    log_contact_event(action="create", contact_id="1")
    with activity_log.open("a", encoding="utf-8") as handle:
        handle.write("not json\n")
    log_contact_event(action="destroy", contact_id="1")

    entries = fetch_activity_entries(limit=10)
    assert [e["action"] for e in entries] == ["destroy", "create"]


def test_fetch_limit(activity_log):
    for index in range(5):
        log_contact_event(action="update", contact_id=str(index))
    entries = fetch_activity_entries(limit=2)
    assert [e["contact_id"] for e in entries] == ["4", "3"]


def test_fetch_without_log_file(activity_log):
    assert fetch_activity_entries() == []
