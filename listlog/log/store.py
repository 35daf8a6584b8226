"""
RemoteLog abstract interface.

A remote log is an append-only service addressed by path segments (user,
list type, list id, and optionally a date). It returns whole logs on fetch
and accepts one flat event per append; it never edits or deletes.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Sequence

LogPath = Sequence[str]


class RemoteLog(ABC):
    """
    Abstract log service.

    Implementations must guarantee:
    - Append-only (no updates, no deletes)
    - The service, not the client, stamps each stored record's ``timeStamp``
    """

    @abstractmethod
    def fetch(self, path: LogPath) -> List[Dict[str, Any]]:
        """
        Fetch every record stored under a path.

        Returns:
            Raw wire records, in storage order; [] for an empty log

        Raises:
            NetworkUnavailableError: If the service cannot be reached
            RemoteLogError: If the service errors or returns a non-array body
        """
        ...

    @abstractmethod
    def append(self, path: LogPath, params: Dict[str, str]) -> None:
        """
        Append one flat record to the log at a path.

        Args:
            path: Log address
            params: Event fields already encoded as strings

        Raises:
            NetworkUnavailableError: If the service cannot be reached
            RemoteLogError: If the service rejects the write
        """
        ...

    def describe(self, path: LogPath) -> str:
        """Human-readable address for logs and CLI output."""
        return "/".join(path)
