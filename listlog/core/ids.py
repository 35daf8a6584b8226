"""
Client-side identifier generation.

Ids are short random base62 tokens. Millisecond wall-clock ids collide under
rapid sequential creation and are never produced here.
"""

import re
import secrets
from typing import Any, Union

EntityId = Union[str, int, float]

BASE62_ALPHABET = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz"
DEFAULT_ID_LENGTH = 6

_NUMERIC_RE = re.compile(r"^\s*-?(\d+\.?\d*|\.\d+)([eE][-+]?\d+)?\s*$")


def generate_id(length: int = DEFAULT_ID_LENGTH) -> str:
    """
    Generate a random base62 token.

    With the default length the collision space is 62**6 (about 56e9).
    Numeric-looking tokens (all digits, or exponent forms like "12e345")
    are redrawn since coerce_id() would turn them into numbers when they
    come back from the log.
    """
    while True:
        token = "".join(secrets.choice(BASE62_ALPHABET) for _ in range(length))
        if isinstance(coerce_id(token), str):
            return token


def coerce_id(value: Any) -> Any:
    """
    Coerce a numeric-looking id string to a number.

    The log service stores every field as a string, so ids written as numbers
    come back as strings. Anything that does not parse as a number is returned
    unchanged, as are empty values.

    Example:
        coerce_id("42") -> 42
        coerce_id("a1B2c3") -> "a1B2c3"
    """
    if not isinstance(value, str) or not value:
        return value
    if not _NUMERIC_RE.match(value):
        return value
    number = float(value)
    if number.is_integer():
        return int(number)
    return number
