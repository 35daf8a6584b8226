"""
Tests for tennis roster replay and lineup commands.
"""

import json

from listlog.core.events import parse_event
from listlog.domains.models import Match
from listlog.domains.tennis import assign_player, position_ids, replay_tennis, unassign_player

T = [f"2024-01-01T00:00:{i:02d}.000Z" for i in range(30)]


def ev(op, id=None, ts="", **fields):
    raw = {"op": op, "ts": ts, **fields}
    if id is not None:
        raw["id"] = id
    return parse_event(raw)


def roster():
    return [
        ev("player_added", "p1", T[0], name="Zoe"),
        ev("player_added", "p2", T[1], name="adam", email="a@x"),
        ev("player_added", "p3", T[2], name="Mia"),
        ev("match_added", "m1", T[3], title="Home", date="2024-06-02", singles="2", doubles="1"),
        ev("match_added", "m2", T[4], title="Away", date="2024-05-01"),
    ]


def test_players_sorted_by_name_and_matches_by_date():
    state = replay_tennis(roster())

    assert [p.name for p in state.players] == ["adam", "Mia", "Zoe"]
    assert [m.id for m in state.matches] == ["m2", "m1"]


def test_match_counts_default_and_coerce():
    state = replay_tennis(roster())

    assert (state.match("m1").singles, state.match("m1").doubles) == (2, 1)
    assert (state.match("m2").singles, state.match("m2").doubles) == (2, 2)


def test_player_update_ignores_empty_name():
    events = roster() + [ev("player_updated", "p1", T[5], name="", phone="555")]

    zoe = [p for p in replay_tennis(events).players if p.id == "p1"][0]

    assert zoe.name == "Zoe"
    assert zoe.phone == "555"


def test_match_update_partial():
    events = roster() + [ev("match_updated", "m1", T[5], location="Court 3", title="")]

    m1 = replay_tennis(events).match("m1")

    assert m1.title == "Home"
    assert m1.location == "Court 3"
    assert m1.date == "2024-06-02"


def test_availability_set_and_unset():
    events = roster() + [
        ev("availability_set", ts=T[5], matchId="m1", playerId="p1"),
        ev("availability_set", ts=T[6], matchId="m1", playerId="p2"),
        ev("availability_unset", ts=T[7], matchId="m1", playerId="p1"),
    ]

    assert replay_tennis(events).availability["m1"] == {"p2"}


def test_events_for_unknown_match_are_dropped():
    events = roster() + [
        ev("availability_set", ts=T[5], matchId="nope", playerId="p1"),
        ev("assignment_set", ts=T[6], matchId="nope", positionId="singles-1", playerIds='["p1"]'),
    ]

    state = replay_tennis(events)

    assert "nope" not in state.availability
    assert "nope" not in state.assignments


def test_match_removed_cascades():
    events = roster() + [
        ev("availability_set", ts=T[5], matchId="m1", playerId="p1"),
        ev("assignment_set", ts=T[6], matchId="m1", positionId="singles-1", playerIds='["p1"]'),
        ev("match_removed", "m1", T[7]),
        ev("availability_set", ts=T[8], matchId="m1", playerId="p2"),
    ]

    state = replay_tennis(events)

    assert state.match("m1") is None
    assert "m1" not in state.availability
    assert "m1" not in state.assignments


def test_assignment_set_and_position_time():
    events = roster() + [
        ev("assignment_set", ts=T[5], matchId="m1", positionId="doubles-1", playerIds='["p1","p2"]'),
        ev("position_time_set", ts=T[6], matchId="m1", positionId="doubles-1", date="10:30"),
        ev("assignment_set", ts=T[7], matchId="m1", positionId="doubles-1", playerIds='["p2"]'),
    ]

    position = replay_tennis(events).assignments["m1"]["doubles-1"]

    assert position.players == ["p2"]
    assert position.date == "10:30"


def test_assignment_set_with_explicit_null_date_clears_time():
    events = roster() + [
        ev("position_time_set", ts=T[5], matchId="m1", positionId="singles-1", date="9:00"),
        ev("assignment_set", ts=T[6], matchId="m1", positionId="singles-1", playerIds='["p1"]', date="null"),
    ]

    assert replay_tennis(events).assignments["m1"]["singles-1"].date is None


def test_assignment_blob_shapes():
    events = roster() + [
        ev("assignment_set", ts=T[5], matchId="m1", positionId="singles-1",
           playerIds=json.dumps({"players": ["p3"], "date": "11:00"})),
        ev("assignment_set", ts=T[6], matchId="m1", positionId="singles-2", playerIds='["p1"]'),
    ]

    assigned = replay_tennis(events).assignments["m1"]

    assert assigned["singles-1"].players == ["p3"]
    assert assigned["singles-1"].date == "11:00"
    assert assigned["singles-2"].players == ["p1"]
    assert assigned["singles-2"].date is None


def test_assignment_clear():
    events = roster() + [
        ev("assignment_set", ts=T[5], matchId="m1", positionId="singles-1", playerIds='["p1"]'),
        ev("assignment_clear", ts=T[6], matchId="m1", positionId="singles-1"),
    ]

    assert replay_tennis(events).assignments["m1"] == {}


def test_position_ids():
    assert position_ids(Match(id="m", singles=2, doubles=1)) == ["singles-1", "singles-2", "doubles-1"]


class RecordingStore:
    """Stand-in for EventStore: records posts and replays them on refresh."""

    def __init__(self, events):
        self.events = list(events)
        self.posted = []

    def build_event(self, op, data):
        return parse_event({"op": op, **data, "ts": T[20 + len(self.posted)]})

    def post_event(self, event):
        self.posted.append(event)
        self.events.append(event)
        return True

    def load_changelog_from_server(self, silent=False):
        return list(self.events)


def test_assign_player_respects_capacity():
    store = RecordingStore(roster())
    state = replay_tennis(store.events)

    state = assign_player(store, state, "m1", "singles-1", "p1")
    assert state.assignments["m1"]["singles-1"].players == ["p1"]

    assert assign_player(store, state, "m1", "singles-1", "p2") is None
    assert len(store.posted) == 1


def test_doubles_position_holds_two():
    store = RecordingStore(roster())
    state = replay_tennis(store.events)

    state = assign_player(store, state, "m1", "doubles-1", "p1")
    state = assign_player(store, state, "m1", "doubles-1", "p2")

    assert state.assignments["m1"]["doubles-1"].players == ["p1", "p2"]
    assert assign_player(store, state, "m1", "doubles-1", "p3") is None


def test_unassign_last_player_clears_position():
    store = RecordingStore(roster())
    state = replay_tennis(store.events)
    state = assign_player(store, state, "m1", "doubles-1", "p1")
    state = assign_player(store, state, "m1", "doubles-1", "p2")

    state = unassign_player(store, state, "m1", "doubles-1", "p1")
    assert state.assignments["m1"]["doubles-1"].players == ["p2"]

    state = unassign_player(store, state, "m1", "doubles-1", "p2")
    assert "doubles-1" not in state.assignments["m1"]
    assert store.posted[-1].op == "assignment_clear"


def test_assign_to_unknown_match_is_noop():
    store = RecordingStore(roster())

    assert assign_player(store, replay_tennis(store.events), "ghost", "singles-1", "p1") is None
    assert store.posted == []
