"""
Event model for list changelogs.

Events are immutable records of state changes. Each op has its own frozen
dataclass variant; ops this client does not know are kept as UnknownEvent so
logs written by newer clients still load and round-trip.

Wire format: a flat JSON object ``{op, id, timeStamp|ts, user, ...}`` whose
nested values (id arrays, proto lists, assignments) may arrive as JSON
strings. parse_event() and to_query_params() are the only places that deal
with that representation.
"""

import dataclasses
import json
import logging
import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple, Type

from pydantic import ValidationError

from .ids import coerce_id
from .values import PositionAssignment, Proto, load_blob, nullable

logger = logging.getLogger(__name__)

# Kernel ops
ADDED = "added"
REMOVED = "removed"
REORDER = "reorder"

# Shopping
CHECKED = "checked"
UNCHECKED = "unchecked"
CLEAR_COMPLETED = "clear_completed"

# Planner
COMPLETED = "completed"
UNCOMPLETED = "uncompleted"
MOVED = "moved"
ENJOYMENT = "enjoyment"

# Tracker
UPDATED = "updated"
STATUS_CHANGED = "status_changed"

# Tennis
PLAYER_ADDED = "player_added"
PLAYER_UPDATED = "player_updated"
PLAYER_REMOVED = "player_removed"
MATCH_ADDED = "match_added"
MATCH_UPDATED = "match_updated"
MATCH_REMOVED = "match_removed"
AVAILABILITY_SET = "availability_set"
AVAILABILITY_UNSET = "availability_unset"
ASSIGNMENT_SET = "assignment_set"
ASSIGNMENT_CLEAR = "assignment_clear"
POSITION_TIME_SET = "position_time_set"

# Metadata sub-log
LIST_INIT = "list_init"
LIST_RENAMED = "list_renamed"
HERO_IMAGE = "hero_image"
METADATA_OPS = frozenset({LIST_INIT, LIST_RENAMED, HERO_IMAGE})

# User list log
LIST_ADDED = "list_added"
LIST_REMOVED = "list_removed"

ENVELOPE_KEYS = ("op", "id", "ts", "timeStamp", "user")


class _Unset:
    def __repr__(self) -> str:
        return "UNSET"


UNSET: Any = _Unset()


@dataclass(frozen=True)
class Event:
    """
    Immutable event record.

    Fields:
        op: Operation name (e.g., "added", "checked")
        id: Target entity id, if the op has one
        ts: ISO-8601 timestamp; ordering is plain string comparison
        user: Author of the change
    """
    op: str = ""
    id: Any = None
    ts: str = ""
    user: str = ""

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> Dict[str, Any]:
        """Build variant kwargs from the op-specific wire fields."""
        return {}

    def payload(self) -> Dict[str, Any]:
        """Op-specific fields in wire naming, with nested values decoded."""
        return {}

    def to_wire(self, include_ts: bool = True) -> Dict[str, Any]:
        data: Dict[str, Any] = {"op": self.op}
        if self.id is not None:
            data["id"] = self.id
        data.update(self.payload())
        if self.user:
            data["user"] = self.user
        if include_ts and self.ts:
            data["ts"] = self.ts
        return data

    def with_ts(self, ts: str) -> "Event":
        return dataclasses.replace(self, ts=ts)


_VARIANTS: Dict[str, Type[Event]] = {}


def register(cls: Type[Event]) -> Type[Event]:
    """Register an event variant under its op name."""
    op = cls.__dataclass_fields__["op"].default
    _VARIANTS[op] = cls
    return cls


def known_ops() -> List[str]:
    return sorted(_VARIANTS)


def _is_scalar_id(value: Any) -> bool:
    return isinstance(value, (str, int, float)) and not isinstance(value, bool)


def _scalar_id(value: Any, what: str) -> Any:
    """Coerce an id field; objects and arrays are not ids and become None."""
    if value is None or _is_scalar_id(value):
        return coerce_id(value)
    logger.warning("Dropping %s that is not a scalar: %r", what, value)
    return None


def _id_tuple(value: Any, what: str) -> Tuple[Any, ...]:
    data = load_blob(value, what)
    if data is None:
        return ()
    if not isinstance(data, (list, tuple)):
        logger.warning("Dropping %s that is not a list: %r", what, data)
        return ()
    ids = tuple(coerce_id(x) for x in data if _is_scalar_id(x))
    if len(ids) != len(data):
        logger.warning("Dropping non-scalar entries from %s: %r", what, data)
    return ids


def _number(value: Any) -> Any:
    value = nullable(value)
    if isinstance(value, str):
        coerced = coerce_id(value)
        return coerced if isinstance(coerced, (int, float)) else None
    return value


def _int(value: Any) -> Optional[int]:
    number = _number(value)
    if number is None or isinstance(number, bool):
        return None
    if isinstance(number, float) and not math.isfinite(number):
        return None
    return int(number)


# ---------------------------------------------------------------------------
# Kernel
# ---------------------------------------------------------------------------


@register
@dataclass(frozen=True)
class AddedEvent(Event):
    """Creates an item. ``fields`` holds the domain payload verbatim."""
    op: str = field(default=ADDED, init=False)
    fields: Dict[str, Any] = field(default_factory=dict)
    protos: Optional[Tuple[Proto, ...]] = None

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> Dict[str, Any]:
        fields = dict(payload)
        kwargs: Dict[str, Any] = {"fields": fields}
        if "protos" in fields:
            kwargs["protos"] = Proto.parse_blob(fields.pop("protos"))
        return kwargs

    def payload(self) -> Dict[str, Any]:
        data = dict(self.fields)
        if self.protos is not None:
            data["protos"] = [p.model_dump() for p in self.protos]
        return data


@register
@dataclass(frozen=True)
class RemovedEvent(Event):
    op: str = field(default=REMOVED, init=False)


@register
@dataclass(frozen=True)
class ReorderEvent(Event):
    """Replaces the whole item order."""
    op: str = field(default=REORDER, init=False)
    order: Tuple[Any, ...] = ()

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> Dict[str, Any]:
        return {"order": _id_tuple(payload.get("order"), "reorder order")}

    def payload(self) -> Dict[str, Any]:
        return {"order": list(self.order)}


# ---------------------------------------------------------------------------
# Shopping
# ---------------------------------------------------------------------------


@register
@dataclass(frozen=True)
class CheckedEvent(Event):
    op: str = field(default=CHECKED, init=False)


@register
@dataclass(frozen=True)
class UncheckedEvent(Event):
    op: str = field(default=UNCHECKED, init=False)


@register
@dataclass(frozen=True)
class ClearCompletedEvent(Event):
    """Removes the ids that were checked when the event was created."""
    op: str = field(default=CLEAR_COMPLETED, init=False)
    ids: Tuple[Any, ...] = ()

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> Dict[str, Any]:
        return {"ids": _id_tuple(payload.get("ids"), "clear_completed ids")}

    def payload(self) -> Dict[str, Any]:
        return {"ids": list(self.ids)}


# ---------------------------------------------------------------------------
# Planner
# ---------------------------------------------------------------------------


@register
@dataclass(frozen=True)
class CompletedEvent(Event):
    op: str = field(default=COMPLETED, init=False)


@register
@dataclass(frozen=True)
class UncompletedEvent(Event):
    op: str = field(default=UNCOMPLETED, init=False)


@register
@dataclass(frozen=True)
class MovedEvent(Event):
    """Moves one id to ``to_index``, or after ``after_id``, or to the end."""
    op: str = field(default=MOVED, init=False)
    to_index: Optional[int] = None
    after_id: Any = None

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "to_index": _int(payload.get("toIndex")),
            "after_id": _scalar_id(nullable(payload.get("afterId")), "moved afterId"),
        }

    def payload(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {}
        if self.to_index is not None:
            data["toIndex"] = self.to_index
        if self.after_id is not None:
            data["afterId"] = self.after_id
        return data


@register
@dataclass(frozen=True)
class EnjoymentEvent(Event):
    op: str = field(default=ENJOYMENT, init=False)
    value: Any = None

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> Dict[str, Any]:
        return {"value": _number(payload.get("value"))}

    def payload(self) -> Dict[str, Any]:
        return {"value": self.value}


# ---------------------------------------------------------------------------
# Tracker
# ---------------------------------------------------------------------------


@register
@dataclass(frozen=True)
class UpdatedEvent(Event):
    """Partial update: only keys present in ``fields`` overwrite the item."""
    op: str = field(default=UPDATED, init=False)
    fields: Dict[str, Any] = field(default_factory=dict)
    protos: Optional[Tuple[Proto, ...]] = None

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> Dict[str, Any]:
        return AddedEvent.from_payload(payload)

    def payload(self) -> Dict[str, Any]:
        data = dict(self.fields)
        if self.protos is not None:
            data["protos"] = [p.model_dump() for p in self.protos]
        return data


@register
@dataclass(frozen=True)
class StatusChangedEvent(Event):
    op: str = field(default=STATUS_CHANGED, init=False)
    status: str = ""

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> Dict[str, Any]:
        return {"status": str(payload.get("status") or "")}

    def payload(self) -> Dict[str, Any]:
        return {"status": self.status}


# ---------------------------------------------------------------------------
# Tennis
# ---------------------------------------------------------------------------


def _match_fields(payload: Dict[str, Any]) -> Dict[str, Any]:
    fields = dict(payload)
    for key in ("singles", "doubles"):
        if key in fields:
            fields[key] = _int(fields[key])
    return fields


@register
@dataclass(frozen=True)
class PlayerAddedEvent(Event):
    op: str = field(default=PLAYER_ADDED, init=False)
    fields: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> Dict[str, Any]:
        return {"fields": dict(payload)}

    def payload(self) -> Dict[str, Any]:
        return dict(self.fields)


@register
@dataclass(frozen=True)
class PlayerUpdatedEvent(PlayerAddedEvent):
    op: str = field(default=PLAYER_UPDATED, init=False)


@register
@dataclass(frozen=True)
class PlayerRemovedEvent(Event):
    op: str = field(default=PLAYER_REMOVED, init=False)


@register
@dataclass(frozen=True)
class MatchAddedEvent(Event):
    op: str = field(default=MATCH_ADDED, init=False)
    fields: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> Dict[str, Any]:
        return {"fields": _match_fields(payload)}

    def payload(self) -> Dict[str, Any]:
        return dict(self.fields)


@register
@dataclass(frozen=True)
class MatchUpdatedEvent(MatchAddedEvent):
    op: str = field(default=MATCH_UPDATED, init=False)


@register
@dataclass(frozen=True)
class MatchRemovedEvent(Event):
    op: str = field(default=MATCH_REMOVED, init=False)


@register
@dataclass(frozen=True)
class AvailabilitySetEvent(Event):
    op: str = field(default=AVAILABILITY_SET, init=False)
    match_id: Any = None
    player_id: Any = None

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "match_id": _scalar_id(payload.get("matchId"), "matchId"),
            "player_id": _scalar_id(payload.get("playerId"), "playerId"),
        }

    def payload(self) -> Dict[str, Any]:
        return {"matchId": self.match_id, "playerId": self.player_id}


@register
@dataclass(frozen=True)
class AvailabilityUnsetEvent(AvailabilitySetEvent):
    op: str = field(default=AVAILABILITY_UNSET, init=False)


@register
@dataclass(frozen=True)
class AssignmentSetEvent(Event):
    """
    Sets the players of one position. ``date`` is UNSET when the event
    leaves the position time alone.
    """
    op: str = field(default=ASSIGNMENT_SET, init=False)
    match_id: Any = None
    position_id: str = ""
    player_ids: Tuple[Any, ...] = ()
    date: Any = UNSET

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> Dict[str, Any]:
        blob = load_blob(payload.get("playerIds"), "assignment playerIds")
        try:
            assignment = PositionAssignment.coerce(blob)
        except ValidationError:
            logger.warning("Dropping malformed assignment playerIds: %r", blob)
            assignment = PositionAssignment()
        kwargs: Dict[str, Any] = {
            "match_id": _scalar_id(payload.get("matchId"), "matchId"),
            "position_id": str(payload.get("positionId") or ""),
            "player_ids": tuple(assignment.players),
        }
        if "date" in payload:
            kwargs["date"] = nullable(payload["date"])
        elif isinstance(blob, dict) and "date" in blob:
            kwargs["date"] = assignment.date
        return kwargs

    def payload(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "matchId": self.match_id,
            "positionId": self.position_id,
            "playerIds": list(self.player_ids),
        }
        if self.date is not UNSET:
            data["date"] = self.date
        return data


@register
@dataclass(frozen=True)
class AssignmentClearEvent(Event):
    op: str = field(default=ASSIGNMENT_CLEAR, init=False)
    match_id: Any = None
    position_id: str = ""

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "match_id": _scalar_id(payload.get("matchId"), "matchId"),
            "position_id": str(payload.get("positionId") or ""),
        }

    def payload(self) -> Dict[str, Any]:
        return {"matchId": self.match_id, "positionId": self.position_id}


@register
@dataclass(frozen=True)
class PositionTimeSetEvent(AssignmentClearEvent):
    op: str = field(default=POSITION_TIME_SET, init=False)
    date: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> Dict[str, Any]:
        kwargs = AssignmentClearEvent.from_payload(payload)
        kwargs["date"] = nullable(payload.get("date"))
        return kwargs

    def payload(self) -> Dict[str, Any]:
        data = super().payload()
        data["date"] = self.date
        return data


# ---------------------------------------------------------------------------
# Metadata sub-log and user list log
# ---------------------------------------------------------------------------


@register
@dataclass(frozen=True)
class ListInitEvent(Event):
    op: str = field(default=LIST_INIT, init=False)
    name: str = ""
    list_type: str = ""

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> Dict[str, Any]:
        return {"name": str(payload.get("name") or ""), "list_type": str(payload.get("type") or "")}

    def payload(self) -> Dict[str, Any]:
        return {"name": self.name, "type": self.list_type}


@register
@dataclass(frozen=True)
class ListRenamedEvent(Event):
    op: str = field(default=LIST_RENAMED, init=False)
    name: str = ""

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> Dict[str, Any]:
        return {"name": str(payload.get("name") or "")}

    def payload(self) -> Dict[str, Any]:
        return {"name": self.name}


@register
@dataclass(frozen=True)
class HeroImageEvent(Event):
    op: str = field(default=HERO_IMAGE, init=False)
    url: str = ""

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> Dict[str, Any]:
        return {"url": str(payload.get("url") or payload.get("path") or "")}

    def payload(self) -> Dict[str, Any]:
        return {"url": self.url}


@register
@dataclass(frozen=True)
class ListAddedEvent(Event):
    """Reference from a user's list log to a list (id only, no content)."""
    op: str = field(default=LIST_ADDED, init=False)
    list_type: str = ""

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> Dict[str, Any]:
        return {"list_type": str(payload.get("listType") or "")}

    def payload(self) -> Dict[str, Any]:
        return {"listType": self.list_type}


@register
@dataclass(frozen=True)
class ListRemovedEvent(Event):
    op: str = field(default=LIST_REMOVED, init=False)


# ---------------------------------------------------------------------------
# Unknown ops
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class UnknownEvent(Event):
    """Event with an op this client does not understand; fields kept verbatim."""
    fields: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> Dict[str, Any]:
        return {"fields": dict(payload)}

    def payload(self) -> Dict[str, Any]:
        return dict(self.fields)


# ---------------------------------------------------------------------------
# Wire boundary
# ---------------------------------------------------------------------------


def parse_event(raw: Mapping[str, Any]) -> Event:
    """
    Build a typed event from a wire record.

    Normalizes ``timeStamp`` to ``ts`` and coerces numeric-looking ids.
    Unrecognized ops become UnknownEvent.
    """
    data = dict(raw)
    op = str(data.pop("op", "") or "")
    time_stamp = data.pop("timeStamp", None)
    ts = data.pop("ts", None)
    user = data.pop("user", None)
    entity_id = _scalar_id(data.pop("id", None), f"{op or 'event'} id")

    cls = _VARIANTS.get(op, UnknownEvent)
    kwargs = cls.from_payload(data)
    if cls is UnknownEvent:
        kwargs["op"] = op
    return cls(id=entity_id, ts=str(time_stamp or ts or ""), user=str(user or ""), **kwargs)


def build_event(op: str, data: Optional[Mapping[str, Any]] = None) -> Event:
    """Build a typed event from an op name and wire-style fields."""
    raw: Dict[str, Any] = {"op": op}
    raw.update(data or {})
    return parse_event(raw)


def parse_events(records: Any) -> List[Event]:
    """Parse a wire array. Malformed entries are logged and skipped."""
    events: List[Event] = []
    for rec in records or []:
        if isinstance(rec, Event):
            events.append(rec)
        elif isinstance(rec, Mapping):
            try:
                events.append(parse_event(rec))
            except (ValueError, OverflowError, TypeError) as e:
                logger.warning("Skipping unparseable changelog entry %r: %s", rec, e)
        else:
            logger.warning("Skipping malformed changelog entry: %r", rec)
    return events


def encode_param(value: Any) -> str:
    """Encode one field value as a query parameter string."""
    if isinstance(value, (dict, list, tuple)) or value is None:
        return json.dumps(value, separators=(",", ":"))
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def to_query_params(event: Event) -> Dict[str, str]:
    """
    Flatten an event for a POST query string.

    ``ts`` is left out: the log service stamps its own ``timeStamp``.
    """
    return {k: encode_param(v) for k, v in event.to_wire(include_ts=False).items()}


def sort_key(event: Event) -> str:
    return event.ts or ""
