"""
Log service backends and local snapshots.
"""

from .store import LogPath, RemoteLog
from .http_store import HttpRemoteLog
from .file_store import FileRemoteLog
from .snapshot import SnapshotStore, snapshot_key


def remote_from_config(config) -> RemoteLog:
    """Pick the backend for a config: ``file://`` bases use a local directory."""
    if config.is_file_backend:
        return FileRemoteLog(config.api_base[len("file://"):])
    return HttpRemoteLog(config.api_base, timeout=config.request_timeout_seconds)


__all__ = [
    "LogPath",
    "RemoteLog",
    "HttpRemoteLog",
    "FileRemoteLog",
    "SnapshotStore",
    "snapshot_key",
    "remote_from_config",
]
