"""
Tennis roster and match lineup replay.

Unlike the other list types, tennis does not use the item kernel: one pass
over the ts-sorted events maintains players, matches, per-match availability
and per-match position assignments. Removing a match drops its availability
and assignments with it; availability and assignment events that reference a
match not currently present are ignored.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Set

from ..core.events import (
    ASSIGNMENT_CLEAR,
    ASSIGNMENT_SET,
    AVAILABILITY_SET,
    AVAILABILITY_UNSET,
    MATCH_ADDED,
    MATCH_REMOVED,
    MATCH_UPDATED,
    PLAYER_ADDED,
    PLAYER_REMOVED,
    PLAYER_UPDATED,
    POSITION_TIME_SET,
    UNSET,
    AssignmentClearEvent,
    AssignmentSetEvent,
    AvailabilitySetEvent,
    Event,
    MatchAddedEvent,
    PlayerAddedEvent,
    PositionTimeSetEvent,
)
from ..core.reducer import Reducer
from ..core.values import PositionAssignment
from ..replay.runner import sort_events
from .models import Match, Player, TennisState

DEFAULT_SINGLES = 2
DEFAULT_DOUBLES = 2


@dataclass
class _TennisView:
    players: Dict[Any, Player] = field(default_factory=dict)
    matches: Dict[Any, Match] = field(default_factory=dict)
    availability: Dict[Any, Set[Any]] = field(default_factory=dict)
    assignments: Dict[Any, Dict[str, PositionAssignment]] = field(default_factory=dict)


def _on_player_added(view: _TennisView, ev: PlayerAddedEvent) -> None:
    f = ev.fields
    view.players[ev.id] = Player(
        id=ev.id,
        name=str(f.get("name") or ""),
        email=str(f.get("email") or ""),
        phone=str(f.get("phone") or ""),
        usta=str(f.get("usta") or ""),
    )


def _on_player_updated(view: _TennisView, ev: PlayerAddedEvent) -> None:
    player = view.players.get(ev.id)
    if player is None:
        return
    f = ev.fields
    # An empty name never blanks an existing one.
    if f.get("name"):
        player.name = str(f["name"])
    for key in ("email", "phone", "usta"):
        if key in f:
            setattr(player, key, str(f[key] or ""))


def _on_player_removed(view: _TennisView, ev: Event) -> None:
    view.players.pop(ev.id, None)


def _on_match_added(view: _TennisView, ev: MatchAddedEvent) -> None:
    f = ev.fields
    view.matches[ev.id] = Match(
        id=ev.id,
        title=str(f.get("title") or ""),
        location=str(f.get("location") or ""),
        date=f.get("date") or None,
        singles=f.get("singles") or DEFAULT_SINGLES,
        doubles=f.get("doubles") or DEFAULT_DOUBLES,
    )
    view.availability[ev.id] = set()
    view.assignments[ev.id] = {}


def _on_match_updated(view: _TennisView, ev: MatchAddedEvent) -> None:
    match = view.matches.get(ev.id)
    if match is None:
        return
    f = ev.fields
    if f.get("title"):
        match.title = str(f["title"])
    if "location" in f:
        match.location = str(f["location"] or "")
    if f.get("date"):
        match.date = str(f["date"])
    for key in ("singles", "doubles"):
        if f.get(key) is not None:
            setattr(match, key, f[key])


def _on_match_removed(view: _TennisView, ev: Event) -> None:
    view.matches.pop(ev.id, None)
    view.availability.pop(ev.id, None)
    view.assignments.pop(ev.id, None)


def _on_availability(available: bool):
    def handler(view: _TennisView, ev: AvailabilitySetEvent) -> None:
        players = view.availability.get(ev.match_id)
        if players is None:
            return
        if available:
            players.add(ev.player_id)
        else:
            players.discard(ev.player_id)
    return handler


def _position(view: _TennisView, match_id: Any, position_id: str) -> Optional[PositionAssignment]:
    match_assign = view.assignments.get(match_id)
    if match_assign is None:
        return None
    if position_id not in match_assign:
        match_assign[position_id] = PositionAssignment()
    return match_assign[position_id]


def _on_assignment_set(view: _TennisView, ev: AssignmentSetEvent) -> None:
    position = _position(view, ev.match_id, ev.position_id)
    if position is None:
        return
    position.players = list(ev.player_ids)
    if ev.date is not UNSET:
        position.date = ev.date


def _on_assignment_clear(view: _TennisView, ev: AssignmentClearEvent) -> None:
    match_assign = view.assignments.get(ev.match_id)
    if match_assign is not None and ev.position_id:
        match_assign.pop(ev.position_id, None)


def _on_position_time_set(view: _TennisView, ev: PositionTimeSetEvent) -> None:
    position = _position(view, ev.match_id, ev.position_id)
    if position is not None:
        position.date = ev.date


reducer = Reducer()
reducer.register(PLAYER_ADDED, _on_player_added)
reducer.register(PLAYER_UPDATED, _on_player_updated)
reducer.register(PLAYER_REMOVED, _on_player_removed)
reducer.register(MATCH_ADDED, _on_match_added)
reducer.register(MATCH_UPDATED, _on_match_updated)
reducer.register(MATCH_REMOVED, _on_match_removed)
reducer.register(AVAILABILITY_SET, _on_availability(True))
reducer.register(AVAILABILITY_UNSET, _on_availability(False))
reducer.register(ASSIGNMENT_SET, _on_assignment_set)
reducer.register(ASSIGNMENT_CLEAR, _on_assignment_clear)
reducer.register(POSITION_TIME_SET, _on_position_time_set)


def replay_tennis(events: Iterable[Event]) -> TennisState:
    view = _TennisView()
    reducer.fold(view, sort_events(events))
    return TennisState(
        players=sorted(view.players.values(), key=lambda p: p.name.casefold()),
        matches=sorted(view.matches.values(), key=lambda m: m.date or ""),
        availability=view.availability,
        assignments=view.assignments,
    )


# ---------------------------------------------------------------------------
# Lineup commands
# ---------------------------------------------------------------------------


def position_ids(match: Match) -> List[str]:
    """Lineup positions of a match: singles-1..N then doubles-1..M."""
    return [f"singles-{i}" for i in range(1, match.singles + 1)] + [
        f"doubles-{i}" for i in range(1, match.doubles + 1)
    ]


def position_capacity(position_id: str) -> int:
    return 2 if position_id.startswith("doubles") else 1


def write_and_refresh(store: Any, op: str, data: Dict[str, Any]) -> Optional[TennisState]:
    """
    Post one event, then refetch and replay the whole log.

    Tennis edits are not applied optimistically; the screen only changes
    once the server has the write. Returns None if the post failed.
    """
    if not store.post_event(store.build_event(op, data)):
        return None
    return replay_tennis(store.load_changelog_from_server(silent=True))


def assign_player(store: Any, state: TennisState, match_id: Any, position_id: str,
                  player_id: Any) -> Optional[TennisState]:
    """
    Add a player to a lineup position.

    No-op (returns None) if the match is unknown or the position is full.
    """
    match_assign = state.assignments.get(match_id)
    if match_assign is None:
        return None
    position = PositionAssignment.coerce(match_assign.get(position_id))
    if len(position.players) >= position_capacity(position_id):
        return None
    return write_and_refresh(store, ASSIGNMENT_SET, {
        "matchId": match_id,
        "positionId": position_id,
        "playerIds": position.players + [player_id],
        "date": position.date,
    })


def unassign_player(store: Any, state: TennisState, match_id: Any, position_id: str,
                    player_id: Any) -> Optional[TennisState]:
    """Take a player off a position; an emptied position is cleared outright."""
    match_assign = state.assignments.get(match_id)
    if match_assign is None or position_id not in match_assign:
        return None
    position = PositionAssignment.coerce(match_assign[position_id])
    remaining = [p for p in position.players if p != player_id]
    if not remaining:
        return write_and_refresh(store, ASSIGNMENT_CLEAR, {"matchId": match_id, "positionId": position_id})
    return write_and_refresh(store, ASSIGNMENT_SET, {
        "matchId": match_id,
        "positionId": position_id,
        "playerIds": remaining,
        "date": position.date,
    })
