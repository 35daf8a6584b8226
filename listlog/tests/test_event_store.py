"""
Tests for EventStore sync behavior.
"""

import tempfile

from listlog.config import ListLogConfig
from listlog.core.clock import DeterministicClock
from listlog.domains.planner import DEFAULT_TASKS, seed_default_tasks
from listlog.log.snapshot import SnapshotStore
from listlog.sync.event_store import EventStore, SyncStatus
from listlog.tests.fakes import FakeRemoteLog


def make_config(**overrides):
    values = dict(
        api_base="memory://",
        user="ann",
        snapshot_dir="",
        poll_interval_seconds=5,
        request_timeout_seconds=1,
        import_pause_seconds=0,
        max_workers=2,
    )
    values.update(overrides)
    return ListLogConfig(**values)


def make_store(list_type="shopping", list_id="L1", remote=None, snapshots=None, statuses=None):
    return EventStore(
        list_type,
        list_id,
        remote or FakeRemoteLog(),
        config=make_config(),
        snapshots=snapshots,
        clock=DeterministicClock(date_key="2024-05-01"),
        on_status=statuses.append if statuses is not None else None,
    )


def test_load_replaces_cache_and_reports_synced():
    remote = FakeRemoteLog()
    remote.seed(["ann", "shopping", "L1"], [
        {"op": "added", "id": "a", "text": "Milk", "timeStamp": "2024-01-01T00:00:00.000Z"},
    ])
    statuses = []
    store = make_store(remote=remote, statuses=statuses)

    events = store.load_changelog_from_server()

    assert [e.op for e in events] == ["added"]
    assert events[0].ts == "2024-01-01T00:00:00.000Z"
    assert statuses == [SyncStatus.SYNCING, SyncStatus.SYNCED]
    assert [i.text for i in store.replay()] == ["Milk"]
    store.close()


def test_add_event_is_optimistic_and_posts_without_ts():
    remote = FakeRemoteLog()
    store = make_store(remote=remote)

    result = store.add_event("added", {"id": "a", "text": "Milk"})

    assert result.event.ts == "2024-01-01T00:00:00.000Z"
    assert [e.id for e in store.cache] == ["a"]
    assert result.confirmed(timeout=5) is True
    path, params = remote.appends[0]
    assert path == ("ann", "shopping", "L1")
    assert params == {"op": "added", "id": "a", "text": "Milk", "user": "ann"}
    store.close()


def test_failed_post_stays_only_in_cache_until_next_load():
    remote = FakeRemoteLog()
    store = make_store(remote=remote)
    remote.offline = True

    result = store.add_event("added", {"id": "a", "text": "Milk"})

    assert result.confirmed(timeout=5) is False
    assert [e.id for e in store.cache] == ["a"]

    # No outbox: a later successful load replaces the cache and the edit is gone.
    remote.offline = False
    assert store.load_changelog_from_server() == []
    assert store.cache == []
    store.close()


def test_network_failure_falls_back_to_snapshot():
    with tempfile.TemporaryDirectory() as tmpdir:
        snapshots = SnapshotStore(tmpdir)
        remote = FakeRemoteLog()
        remote.seed(["ann", "shopping", "L1"], [{"op": "added", "id": "a", "text": "Milk", "timeStamp": "t1"}])

        first = make_store(remote=remote, snapshots=snapshots)
        first.load_changelog_from_server()
        first.close()

        remote.offline = True
        statuses = []
        second = make_store(remote=remote, snapshots=snapshots, statuses=statuses)
        events = second.load_changelog_from_server()

        assert [e.id for e in events] == ["a"]
        assert statuses[-1] == SyncStatus.OFFLINE
        second.close()


def test_server_error_reports_error_status():
    remote = FakeRemoteLog()
    remote.fail_status = 500
    statuses = []
    store = make_store(remote=remote, statuses=statuses)

    assert store.load_changelog_from_server() == []
    assert statuses[-1] == SyncStatus.ERROR
    store.close()


def test_silent_load_does_not_touch_status():
    remote = FakeRemoteLog()
    remote.offline = True
    statuses = []
    store = make_store(remote=remote, statuses=statuses)

    store.load_changelog_from_server(silent=True)

    assert statuses == []
    store.close()


def test_snapshot_written_after_local_append():
    with tempfile.TemporaryDirectory() as tmpdir:
        snapshots = SnapshotStore(tmpdir)
        remote = FakeRemoteLog()
        remote.offline = True
        store = make_store(remote=remote, snapshots=snapshots)

        store.add_event("added", {"id": "a", "text": "Milk"}).confirmed(timeout=5)

        saved = snapshots.load(store.snapshot_key())
        assert [e.id for e in saved] == ["a"]
        store.close()


def test_dated_list_merges_metadata_and_day_partition():
    remote = FakeRemoteLog()
    remote.seed(["ann", "planner", "P1"], [{"op": "list_init", "name": "Work", "type": "planner", "timeStamp": "t0"}])
    remote.seed(["ann", "planner", "P1", "2024-05-01"], [{"op": "added", "id": "x", "text": "Email", "timeStamp": "t1"}])
    remote.seed(["ann", "planner", "P1", "2024-04-30"], [{"op": "added", "id": "old", "timeStamp": "t1"}])
    store = make_store("planner", "P1", remote=remote)

    events = store.load_changelog_from_server()

    assert [e.op for e in events] == ["list_init", "added"]
    assert store.get_metadata().name == "Work"
    assert [t.id for t in store.replay()] == ["x"]
    store.close()


def test_dated_list_routes_metadata_ops_to_perpetual_log():
    remote = FakeRemoteLog()
    store = make_store("planner", "P1", remote=remote)

    store.rename("Home").confirmed(timeout=5)
    store.add_event("added", {"id": "x", "text": "Email"}).confirmed(timeout=5)

    paths = [path for path, _ in remote.appends]
    assert paths == [("ann", "planner", "P1"), ("ann", "planner", "P1", "2024-05-01")]
    assert store.get_metadata().name == "Home"
    store.close()


def test_add_events_sequentially_waits_for_each_post():
    remote = FakeRemoteLog()
    store = make_store("tracker", "T1", remote=remote)

    results = store.add_events_sequentially("added", [{"id": "a", "name": "A"}, {"id": "b", "name": "B"}], pause=0)

    assert [r.post.done() for r in results] == [True, True]
    assert [params["id"] for _, params in remote.appends] == ["a", "b"]
    store.close()


def test_seed_default_tasks_posts_to_the_day_partition():
    remote = FakeRemoteLog()
    store = make_store("planner", "P1", remote=remote)

    results = seed_default_tasks(store)

    assert len(results) == len(DEFAULT_TASKS)
    assert all(r.post.result() for r in results)
    assert {path for path, _ in remote.appends} == {("ann", "planner", "P1", "2024-05-01")}
    assert [t.text for t in store.replay()] == [t["text"] for t in DEFAULT_TASKS]
    store.close()


def test_load_survives_non_finite_numbers():
    remote = FakeRemoteLog()
    remote.seed(["ann", "planner", "P1", "2024-05-01"], [
        {"op": "added", "id": "a", "text": "Email", "timeStamp": "t1"},
        {"op": "moved", "id": "a", "toIndex": "1e999", "timeStamp": "t2"},
        {"op": "added", "id": "b", "text": "Ship", "timeStamp": "t3"},
    ])
    statuses = []
    store = make_store("planner", "P1", remote=remote, statuses=statuses)

    events = store.load_changelog_from_server()

    assert [e.op for e in events] == ["added", "moved", "added"]
    assert statuses[-1] == SyncStatus.SYNCED
    assert [t.id for t in store.replay()] == ["a", "b"]
    store.close()


def test_hero_image_metadata():
    store = make_store()

    store.set_hero_image("https://img/x.png")

    assert store.get_metadata().hero_image == "https://img/x.png"
    store.close()


def test_sync_latch():
    store = make_store()

    assert store.begin_sync() is True
    assert store.begin_sync() is False
    store.end_sync()
    assert store.begin_sync() is True
    store.close()
