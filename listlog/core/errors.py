"""
Exception types for the list log client.

Backends raise these; the sync layer catches them, logs them and reports a
coarse sync status instead of propagating to callers.
"""

from typing import Optional


class ListLogError(Exception):
    """Base class for all list log errors."""
    pass


class RemoteLogError(ListLogError):
    """Raised when the log service answers with an error or a malformed body."""

    def __init__(self, message: str, status: Optional[int] = None) -> None:
        super().__init__(message)
        self.status = status


class NetworkUnavailableError(ListLogError):
    """Raised when the log service cannot be reached at all."""
    pass


class SnapshotError(ListLogError):
    """Raised when a local snapshot cannot be written."""
    pass
