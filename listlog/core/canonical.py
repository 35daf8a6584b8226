"""
Canonical serialization for deterministic hashing.

Materialized list state is hashed after every poll to decide whether a
re-render is needed, so identical state must always produce identical bytes.
"""

import dataclasses
import hashlib
import json
from typing import Any

from pydantic import BaseModel


def canonicalize(obj: Any) -> Any:
    """
    Convert arbitrary nested data to canonical form.

    Rules:
    - pydantic models and dataclasses treated as dicts of their fields
    - dict keys stringified and sorted
    - tuples converted to lists
    - sets converted to sorted lists
    - recursive normalization
    """
    if isinstance(obj, BaseModel):
        # dict(model) keeps set-typed fields as sets, so they get sorted below.
        return canonicalize(dict(obj))
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return canonicalize({f.name: getattr(obj, f.name) for f in dataclasses.fields(obj)})
    if isinstance(obj, dict):
        return {str(k): canonicalize(obj[k]) for k in sorted(obj.keys(), key=str)}
    if isinstance(obj, (set, frozenset)):
        return [canonicalize(x) for x in sorted(obj, key=lambda x: (type(x).__name__, str(x)))]
    if isinstance(obj, (list, tuple)):
        return [canonicalize(x) for x in obj]
    return obj


def canonical_json_bytes(obj: Any) -> bytes:
    """
    Deterministic JSON bytes for hashing.

    Returns:
        UTF-8 encoded JSON bytes
    """
    canon = canonicalize(obj)
    s = json.dumps(canon, sort_keys=True, separators=(",", ":"), ensure_ascii=False)
    return s.encode("utf-8")


def canonical_json_str(obj: Any) -> str:
    """Deterministic JSON string (for display or storage)."""
    return canonical_json_bytes(obj).decode("utf-8")


def content_hash(obj: Any) -> str:
    """
    SHA-256 hex digest of the canonical form of ``obj``.

    Used by the poller to skip redundant renders.
    """
    return hashlib.sha256(canonical_json_bytes(obj)).hexdigest()
