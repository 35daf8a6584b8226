"""
Directory-backed log service.

Stands in for the HTTP service when the api base is a ``file://`` URL: each
log path maps to one JSONL file under the root directory. Appends stamp
``timeStamp`` the way the service does and are fsynced before returning.
"""

import json
import os
from typing import Any, Dict, List, Optional

from ..core.clock import SystemClock
from ..core.errors import RemoteLogError
from .store import LogPath, RemoteLog

try:
    import fcntl
except ImportError:  # Windows or unsupported platform
    fcntl = None


class FileRemoteLog(RemoteLog):
    """
    File-based append-only log service.

    Storage format: one JSONL file per log path, ``<root>/<seg>/<seg>.jsonl``.
    Each line is a flat record exactly as posted, plus ``timeStamp``.
    """

    def __init__(self, root: str, clock: Optional[Any] = None) -> None:
        self.root = root
        self.clock = clock or SystemClock()
        os.makedirs(root, exist_ok=True)

    def path_for(self, path: LogPath) -> str:
        segments = [str(seg) for seg in path]
        for seg in segments:
            if not seg or seg in (".", "..") or "/" in seg or os.sep in seg:
                raise RemoteLogError(f"Invalid log path segment: {seg!r}", status=400)
        return os.path.join(self.root, *segments[:-1], segments[-1] + ".jsonl")

    def describe(self, path: LogPath) -> str:
        return self.path_for(path)

    def fetch(self, path: LogPath) -> List[Dict[str, Any]]:
        file_path = self.path_for(path)
        if not os.path.exists(file_path):
            return []
        records: List[Dict[str, Any]] = []
        try:
            with open(file_path, "r", encoding="utf-8") as f:
                for line in f:
                    if not line.strip():
                        continue
                    records.append(json.loads(line))
        except (OSError, ValueError) as ex:
            raise RemoteLogError(f"Failed to read {file_path}: {ex}", status=500) from ex
        return records

    def append(self, path: LogPath, params: Dict[str, str]) -> None:
        file_path = self.path_for(path)
        record = dict(params)
        record["timeStamp"] = self.clock.now_iso()
        line = json.dumps(record, separators=(",", ":"), ensure_ascii=False) + "\n"
        try:
            os.makedirs(os.path.dirname(file_path), exist_ok=True)
            with open(file_path, "ab") as f:
                if fcntl:
                    fcntl.flock(f.fileno(), fcntl.LOCK_EX)
                f.write(line.encode("utf-8"))
                f.flush()
                os.fsync(f.fileno())
        except OSError as ex:
            raise RemoteLogError(f"Failed to append to {file_path}: {ex}", status=500) from ex
