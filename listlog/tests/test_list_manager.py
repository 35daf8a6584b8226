"""
Tests for the user's list collection.
"""

from listlog.config import ListLogConfig
from listlog.core.clock import DeterministicClock
from listlog.sync.list_manager import ListManager, replay_list_refs
from listlog.core.events import parse_event
from listlog.tests.fakes import FakeRemoteLog


def make_manager(remote):
    config = ListLogConfig(
        api_base="memory://", user="ann", snapshot_dir="", poll_interval_seconds=5,
        request_timeout_seconds=1, import_pause_seconds=0, max_workers=2,
    )
    return ListManager(remote, config=config, clock=DeterministicClock())


def test_create_list_writes_reference_and_init():
    remote = FakeRemoteLog()
    manager = make_manager(remote)

    result = manager.create_list("shopping", "Groceries", list_id="G1")

    assert result.ok
    assert remote.logs[("ann", "lists")][0]["op"] == "list_added"
    assert remote.logs[("ann", "lists")][0]["listType"] == "shopping"
    init = remote.logs[("ann", "shopping", "G1")][0]
    assert (init["op"], init["name"], init["type"]) == ("list_init", "Groceries", "shopping")
    assert [ref.id for ref in manager.refresh()] == ["G1"]
    assert manager.get_metadata("G1").name == "Groceries"
    manager.close()


def test_create_list_reports_divergence_when_init_fails():
    remote = FakeRemoteLog()
    remote.fail_paths.append(("ann", "tracker", "T1"))
    manager = make_manager(remote)

    result = manager.create_list("tracker", "Spring line", list_id="T1")

    assert result.reference_posted is True
    assert result.init_posted is False
    assert not result.consistent
    # No rollback: the list is referenced but has no metadata.
    assert [ref.id for ref in manager.refresh()] == ["T1"]
    assert manager.get_metadata("T1").name == ""
    manager.close()


def test_create_list_reports_divergence_when_reference_fails():
    remote = FakeRemoteLog()
    remote.fail_paths.append(("ann", "lists"))
    manager = make_manager(remote)

    result = manager.create_list("shopping", "Orphan", list_id="O1")

    assert (result.reference_posted, result.init_posted) == (False, True)
    assert ("ann", "shopping", "O1") in remote.logs
    assert manager.refresh() == []
    manager.close()


def test_metadata_is_fetched_lazily_and_cached():
    remote = FakeRemoteLog()
    remote.seed(["ann", "lists"], [{"op": "list_added", "id": "S1", "listType": "shopping", "timeStamp": "t1"}])
    remote.seed(["ann", "shopping", "S1"], [
        {"op": "list_init", "name": "Old", "type": "shopping", "timeStamp": "t1"},
        {"op": "list_renamed", "name": "New", "timeStamp": "t2"},
    ])
    manager = make_manager(remote)
    manager.refresh()

    assert manager.cached_metadata("S1") is None
    assert manager.get_metadata("S1").name == "New"
    fetches = len(remote.fetches)
    assert manager.get_metadata("S1").name == "New"
    assert len(remote.fetches) == fetches
    manager.close()


def test_load_all_metadata():
    remote = FakeRemoteLog()
    remote.seed(["ann", "lists"], [
        {"op": "list_added", "id": "A", "listType": "shopping", "timeStamp": "t1"},
        {"op": "list_added", "id": "B", "listType": "planner", "timeStamp": "t2"},
    ])
    remote.seed(["ann", "shopping", "A"], [{"op": "list_init", "name": "Food", "type": "shopping"}])
    remote.seed(["ann", "planner", "B"], [{"op": "list_init", "name": "Work", "type": "planner"}])
    manager = make_manager(remote)
    manager.refresh()

    metadata = manager.load_all_metadata()

    assert {k: v.name for k, v in metadata.items()} == {"A": "Food", "B": "Work"}
    manager.close()


def test_failed_metadata_fetch_is_not_cached():
    remote = FakeRemoteLog()
    manager = make_manager(remote)
    remote.offline = True

    assert manager.get_metadata("X", "shopping").name == ""
    assert manager.cached_metadata("X") is None
    manager.close()


def test_remove_list():
    remote = FakeRemoteLog()
    manager = make_manager(remote)
    manager.create_list("shopping", "Groceries", list_id="G1")

    assert manager.remove_list("G1").confirmed(timeout=5)
    assert manager.lists() == []
    assert manager.refresh() == []
    manager.close()


def test_list_refs_replay():
    events = [
        parse_event({"op": "list_added", "id": "A", "listType": "shopping", "ts": "t1"}),
        parse_event({"op": "list_added", "id": "B", "listType": "tennis", "ts": "t2"}),
        parse_event({"op": "list_removed", "id": "A", "ts": "t3"}),
        parse_event({"op": "list_added", "id": "B", "listType": "tennis", "ts": "t4"}),
    ]

    refs = replay_list_refs(events)

    assert [(r.id, r.list_type, r.added_ts) for r in refs] == [("B", "tennis", "t4")]


def test_numeric_list_id_hits_metadata_cache():
    remote = FakeRemoteLog()
    manager = make_manager(remote)

    result = manager.create_list("shopping", "Groceries", list_id="42")
    fetches = len(remote.fetches)

    assert manager.cached_metadata(result.list_id).name == "Groceries"
    assert manager.get_metadata(result.list_id).name == "Groceries"
    assert [ref.id for ref in manager.refresh()] == [42]
    assert manager.get_metadata(42).name == "Groceries"
    assert len(remote.fetches) == fetches + 1
    manager.close()
