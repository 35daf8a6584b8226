"""
Tests for the event wire codec.

Events arrive as flat string maps with nested values as JSON blobs; they go
out as query parameters without ts.
"""

import json

from listlog.core.events import (
    UNSET,
    AddedEvent,
    AssignmentSetEvent,
    MovedEvent,
    UnknownEvent,
    build_event,
    encode_param,
    parse_event,
    parse_events,
    to_query_params,
)
from listlog.core.ids import BASE62_ALPHABET, coerce_id, generate_id
from listlog.core.values import PositionAssignment


def test_timestamp_normalized_to_ts():
    ev = parse_event({"op": "added", "id": "a", "timeStamp": "2024-01-01T00:00:00.000Z", "text": "Milk"})

    assert ev.ts == "2024-01-01T00:00:00.000Z"
    assert isinstance(ev, AddedEvent)
    assert ev.fields == {"text": "Milk"}


def test_timestamp_wins_over_client_ts():
    ev = parse_event({"op": "removed", "id": "a", "timeStamp": "server", "ts": "client"})

    assert ev.ts == "server"


def test_numeric_ids_coerced():
    assert parse_event({"op": "removed", "id": "1712345678901"}).id == 1712345678901
    assert parse_event({"op": "removed", "id": "a1B2c3"}).id == "a1B2c3"
    assert coerce_id("1.5") == 1.5
    assert coerce_id("") == ""
    assert coerce_id(None) is None


def test_moved_fields():
    ev = parse_event({"op": "moved", "id": "x", "toIndex": "2", "afterId": "null"})

    assert isinstance(ev, MovedEvent)
    assert ev.to_index == 2
    assert ev.after_id is None


def test_unknown_op_round_trips():
    raw = {"op": "teleported", "id": "a", "ts": "t", "where": "mars"}

    ev = parse_event(raw)

    assert isinstance(ev, UnknownEvent)
    assert ev.op == "teleported"
    assert ev.to_wire() == raw


def test_parse_events_skips_non_objects():
    events = parse_events([{"op": "removed", "id": "a"}, "garbage", None, 42])

    assert [e.op for e in events] == ["removed"]


def test_parse_events_accepts_none():
    assert parse_events(None) == []


def test_query_params_leave_out_ts_and_stringify_nested():
    ev = build_event("reorder", {"order": ["b", "a"], "ts": "2024-01-01T00:00:00.000Z", "user": "ann"})

    params = to_query_params(ev)

    assert "ts" not in params
    assert params == {"op": "reorder", "order": '["b","a"]', "user": "ann"}


def test_encode_param():
    assert encode_param(None) == "null"
    assert encode_param(True) == "true"
    assert encode_param(3) == "3"
    assert encode_param({"a": 1}) == '{"a":1}'
    assert encode_param("plain") == "plain"


def test_assignment_blob_round_trip_through_params():
    ev = build_event("assignment_set", {"matchId": "m1", "positionId": "doubles-1", "playerIds": ["p1", "p2"]})

    params = to_query_params(ev)
    back = parse_event(params)

    assert isinstance(back, AssignmentSetEvent)
    assert back.player_ids == ("p1", "p2")
    assert back.date is UNSET
    assert "date" not in params


def test_assignment_set_with_garbage_blob_is_empty():
    ev = parse_event({"op": "assignment_set", "matchId": "m1", "positionId": "singles-1", "playerIds": "[oops"})

    assert ev.player_ids == ()


def test_position_assignment_upgrades_bare_list():
    assert PositionAssignment.coerce(["1", "p"]) == PositionAssignment(players=[1, "p"], date=None)
    assert PositionAssignment.coerce({"players": [], "date": "null"}).date is None


def test_protos_parsed_into_models():
    blob = json.dumps([{"id": "p1", "name": "A", "updates": [{"id": "u", "date": "2024-01-01"}]}])

    ev = parse_event({"op": "added", "id": "x", "protos": blob})

    assert ev.protos[0].updates[0].type == "sent"
    assert "protos" not in ev.fields


def test_generate_id_is_base62_and_not_numeric():
    for _ in range(200):
        token = generate_id()
        assert len(token) == 6
        assert set(token) <= set(BASE62_ALPHABET)
        assert isinstance(coerce_id(token), str)


def test_non_finite_numbers_become_none():
    assert parse_event({"op": "moved", "id": "a", "toIndex": "1e999"}).to_index is None
    assert parse_event({"op": "moved", "id": "a", "toIndex": float("nan")}).to_index is None

    match = parse_event({"op": "match_added", "id": "m", "singles": "-1e999", "doubles": float("inf")})
    assert match.fields["singles"] is None
    assert match.fields["doubles"] is None


def test_non_scalar_ids_are_dropped():
    reorder = parse_event({"op": "reorder", "order": '[["a"], "b", {"x": 1}, "3"]'})
    clear = parse_event({"op": "clear_completed", "ids": [{"x": 1}, "c"]})
    envelope = parse_event({"op": "added", "id": {"x": 1}, "text": "Milk"})
    availability = parse_event({"op": "availability_set", "matchId": ["m"], "playerId": "p"})

    assert reorder.order == ("b", 3)
    assert clear.ids == ("c",)
    assert envelope.id is None
    assert availability.match_id is None
    assert availability.player_id == "p"


def test_parse_events_skips_records_that_fail_to_parse(monkeypatch):
    def explode(payload):
        raise OverflowError("cannot convert float infinity to integer")

    monkeypatch.setattr(MovedEvent, "from_payload", explode)

    events = parse_events([
        {"op": "added", "id": "a"},
        {"op": "moved", "id": "a", "toIndex": "1"},
        {"op": "removed", "id": "a"},
    ])

    assert [e.op for e in events] == ["added", "removed"]
