"""
HTTP client for the list log service.

GET {base}/{path} returns a JSON array of records. POST to the same URL
appends one record whose fields ride in the query string; the body is empty.
"""

import json
import logging
import urllib.error
import urllib.parse
import urllib.request
from typing import Any, Dict, List

from ..core.errors import NetworkUnavailableError, RemoteLogError
from .store import LogPath, RemoteLog

logger = logging.getLogger(__name__)


class HttpRemoteLog(RemoteLog):
    def __init__(self, base_url: str, timeout: float = 10.0) -> None:
        self.base = base_url.rstrip("/")
        self.timeout = timeout

    def url_for(self, path: LogPath) -> str:
        return self.base + "/" + "/".join(urllib.parse.quote(str(seg), safe="") for seg in path)

    def describe(self, path: LogPath) -> str:
        return self.url_for(path)

    def _open(self, req: urllib.request.Request) -> bytes:
        try:
            with urllib.request.urlopen(req, timeout=self.timeout) as response:
                return response.read()
        except urllib.error.HTTPError as e:
            raise RemoteLogError(f"{req.get_method()} {req.full_url} failed with status {e.code}", status=e.code) from e
        except urllib.error.URLError as e:
            raise NetworkUnavailableError(f"{req.get_method()} {req.full_url} unreachable: {e.reason}") from e
        except OSError as e:
            # Socket timeouts surface as bare OSError subclasses.
            raise NetworkUnavailableError(f"{req.get_method()} {req.full_url} failed: {e}") from e

    def fetch(self, path: LogPath) -> List[Dict[str, Any]]:
        req = urllib.request.Request(self.url_for(path), headers={"Accept": "application/json"}, method="GET")
        body = self._open(req)
        try:
            data = json.loads(body.decode("utf-8") or "null")
        except ValueError as e:
            raise RemoteLogError(f"GET {req.full_url} returned invalid JSON: {e}") from e
        if data is None:
            return []
        if not isinstance(data, list):
            raise RemoteLogError(f"GET {req.full_url} returned {type(data).__name__}, expected array")
        return data

    def append(self, path: LogPath, params: Dict[str, str]) -> None:
        url = self.url_for(path) + "?" + urllib.parse.urlencode(params)
        req = urllib.request.Request(url, data=b"", method="POST")
        self._open(req)
        logger.debug("Appended %s to %s", params.get("op"), self.url_for(path))
