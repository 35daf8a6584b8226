"""
Core primitives for replicated list changelogs.

This module provides the foundational abstractions:
- Event: Immutable, typed change records and their wire codec
- Reducer: Op handler registry for replay passes
- Canonical: Deterministic serialization and content hashing
- Clock: Timestamp and date-partition sources
- IDs: Random base62 identifiers
"""

from .events import Event, UnknownEvent, build_event, parse_event, parse_events, to_query_params
from .reducer import Reducer
from .canonical import canonicalize, canonical_json_bytes, canonical_json_str, content_hash
from .clock import DeterministicClock, SystemClock
from .ids import coerce_id, generate_id
from .values import PositionAssignment, Proto, ProtoUpdate
from .errors import ListLogError, NetworkUnavailableError, RemoteLogError, SnapshotError

__all__ = [
    "Event",
    "UnknownEvent",
    "build_event",
    "parse_event",
    "parse_events",
    "to_query_params",
    "Reducer",
    "canonicalize",
    "canonical_json_bytes",
    "canonical_json_str",
    "content_hash",
    "DeterministicClock",
    "SystemClock",
    "coerce_id",
    "generate_id",
    "PositionAssignment",
    "Proto",
    "ProtoUpdate",
    "ListLogError",
    "NetworkUnavailableError",
    "RemoteLogError",
    "SnapshotError",
]
