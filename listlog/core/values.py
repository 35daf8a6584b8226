"""
Nested value objects carried inside flat events.

The log service only stores flat string fields, so nested structures travel
as JSON blobs. They are parsed into these models once, when an event is read
off the wire, and serialized back only when it is posted.
"""

import json
import logging
from typing import Any, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from .ids import coerce_id

logger = logging.getLogger(__name__)

_NULL_MARKERS = ("", "null", "undefined")


def nullable(value: Any) -> Any:
    """Map the string spellings of a missing value back to None."""
    if value is None:
        return None
    if isinstance(value, str) and value in _NULL_MARKERS:
        return None
    return value


def load_blob(value: Any, what: str) -> Any:
    """
    Decode a JSON blob field.

    Already-decoded values pass through. Malformed JSON is logged and
    reported as None so the caller can drop the field.
    """
    if not isinstance(value, str):
        return value
    try:
        return json.loads(value)
    except ValueError:
        logger.warning("Dropping malformed %s blob: %r", what, value[:100])
        return None


class ProtoUpdate(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: Any = None
    type: str = "sent"
    date: str = ""
    notes: str = ""


class Proto(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: Any = None
    name: str = ""
    updates: List[ProtoUpdate] = Field(default_factory=list)

    @staticmethod
    def parse_blob(value: Any) -> Optional[Tuple["Proto", ...]]:
        """Parse a ``protos`` field (JSON string or list) into Proto objects."""
        data = load_blob(value, "protos")
        if data is None:
            return None
        if not isinstance(data, list):
            logger.warning("Dropping protos blob that is not a list: %r", data)
            return None
        try:
            return tuple(Proto.model_validate(p) for p in data)
        except ValidationError as e:
            logger.warning("Dropping protos blob with invalid entries: %s", e)
            return None


class PositionAssignment(BaseModel):
    """
    Players assigned to one lineup position, with an optional start time.

    Older clients stored a bare list of player ids; that shape is upgraded
    to ``{"players": [...], "date": None}`` on validation.
    """

    players: List[Any] = Field(default_factory=list)
    date: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def _upgrade_legacy(cls, data: Any) -> Any:
        if isinstance(data, (list, tuple)):
            return {"players": list(data), "date": None}
        return data

    @field_validator("players")
    @classmethod
    def _coerce_players(cls, value: List[Any]) -> List[Any]:
        return [coerce_id(p) for p in value]

    @field_validator("date", mode="before")
    @classmethod
    def _null_date(cls, value: Any) -> Any:
        return nullable(value)

    @staticmethod
    def coerce(value: Any) -> "PositionAssignment":
        """Accept either shape, or an existing assignment."""
        if isinstance(value, PositionAssignment):
            return value
        return PositionAssignment.model_validate(value if value is not None else {})
