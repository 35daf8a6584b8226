"""
Local durable snapshots of list changelogs.

One JSON file per key holding the last known full event array. Snapshots
are only read when the log service is unavailable.
"""

import json
import logging
import os
import re
import tempfile
from typing import Any, Iterable, List, Optional

from ..core.errors import SnapshotError
from ..core.events import Event, parse_events

logger = logging.getLogger(__name__)

_UNSAFE = re.compile(r"[^A-Za-z0-9._-]")


def snapshot_key(list_type: str, list_id: Any, date_key: Optional[str] = None) -> str:
    """Key for a list's snapshot; dated lists get one per day."""
    parts = [list_type, str(list_id)]
    if date_key:
        parts.append(date_key)
    return "_".join(parts)


class SnapshotStore:
    """
    Directory of JSON snapshot files.

    Writes go to a temp file in the same directory and are moved into place
    with os.replace(), so a reader never sees a half-written snapshot.
    """

    def __init__(self, directory: str) -> None:
        self.directory = directory
        os.makedirs(directory, exist_ok=True)

    def _path(self, key: str) -> str:
        return os.path.join(self.directory, _UNSAFE.sub("-", key) + ".json")

    def save(self, key: str, events: Iterable[Event]) -> None:
        data = [ev.to_wire() for ev in events]
        path = self._path(key)
        try:
            fd, tmp_path = tempfile.mkstemp(dir=self.directory, prefix=".snap-", suffix=".tmp")
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, separators=(",", ":"), ensure_ascii=False, default=str)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, path)
        except OSError as ex:
            raise SnapshotError(f"Failed to write snapshot {path}: {ex}") from ex

    def load(self, key: str) -> Optional[List[Event]]:
        """
        Read a snapshot back as events.

        Returns None if there is no snapshot or it cannot be parsed.
        """
        path = self._path(key)
        if not os.path.exists(path):
            return None
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as ex:
            logger.warning("Ignoring unreadable snapshot %s: %s", path, ex)
            return None
        if not isinstance(data, list):
            logger.warning("Ignoring snapshot %s: not an array", path)
            return None
        return parse_events(data)
