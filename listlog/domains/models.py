from typing import Any, Dict, List, Optional, Set

from pydantic import BaseModel, ConfigDict, Field

from ..core.values import PositionAssignment, Proto


class ShoppingItem(BaseModel):
    id: Any
    text: str = ""
    category: str = "other"
    checked: bool = False


class PlannerTask(BaseModel):
    id: Any
    text: str = ""
    time: str = ""
    color: str = ""
    completed: bool = False
    enjoyment: Any = 2


class Product(BaseModel):
    # Imports and newer clients add fields beyond the known ones.
    model_config = ConfigDict(extra="allow")

    id: Any
    name: str = ""
    imageUrl: str = ""
    season: str = ""
    launchMonth: str = ""
    vendor: str = ""
    poBulk: str = ""
    poTop: str = ""
    status: str = "pending"
    notes: str = ""
    protos: List[Proto] = Field(default_factory=list)


class Player(BaseModel):
    id: Any
    name: str = ""
    email: str = ""
    phone: str = ""
    usta: str = ""


class Match(BaseModel):
    id: Any
    title: str = ""
    location: str = ""
    date: Optional[str] = None
    singles: int = 2
    doubles: int = 2


class TennisState(BaseModel):
    """
    Materialized tennis roster.

    availability maps match id -> player ids available for it; assignments
    maps match id -> position id -> assignment.
    """

    players: List[Player] = Field(default_factory=list)
    matches: List[Match] = Field(default_factory=list)
    availability: Dict[Any, Set[Any]] = Field(default_factory=dict)
    assignments: Dict[Any, Dict[str, PositionAssignment]] = Field(default_factory=dict)

    def match(self, match_id: Any) -> Optional[Match]:
        for m in self.matches:
            if m.id == match_id:
                return m
        return None


class ListMetadata(BaseModel):
    name: str = ""
    type: str = ""
    hero_image: str = ""


class ListRef(BaseModel):
    """Entry in a user's list log."""

    id: Any
    list_type: str = ""
    added_ts: str = ""
