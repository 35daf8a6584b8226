"""
Runtime configuration, read from LISTLOG_* environment variables.
"""

import os
from dataclasses import dataclass

DEFAULT_API_BASE = "http://localhost:8080/api/events"


def _default_snapshot_dir() -> str:
    return os.path.join(os.path.expanduser("~"), ".cache", "listlog", "snapshots")


@dataclass
class ListLogConfig:
    api_base: str
    user: str
    snapshot_dir: str
    poll_interval_seconds: float
    request_timeout_seconds: float
    import_pause_seconds: float
    max_workers: int

    @staticmethod
    def from_env() -> "ListLogConfig":
        api_base = os.getenv("LISTLOG_API_BASE", DEFAULT_API_BASE)
        user = os.getenv("LISTLOG_USER") or os.getenv("USER") or "anonymous"
        snapshot_dir = os.getenv("LISTLOG_SNAPSHOT_DIR") or _default_snapshot_dir()
        poll_interval_seconds = float(os.getenv("LISTLOG_POLL_INTERVAL_SECONDS", "5"))
        request_timeout_seconds = float(os.getenv("LISTLOG_REQUEST_TIMEOUT_SECONDS", "10"))
        import_pause_seconds = float(os.getenv("LISTLOG_IMPORT_PAUSE_SECONDS", "0.1"))
        max_workers = int(os.getenv("LISTLOG_MAX_WORKERS", "4"))
        return ListLogConfig(
            api_base=api_base,
            user=user,
            snapshot_dir=snapshot_dir,
            poll_interval_seconds=poll_interval_seconds,
            request_timeout_seconds=request_timeout_seconds,
            import_pause_seconds=import_pause_seconds,
            max_workers=max(1, max_workers),
        )

    @property
    def is_file_backend(self) -> bool:
        return self.api_base.startswith("file://")
