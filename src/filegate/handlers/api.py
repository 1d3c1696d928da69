"""
=============================================================================
JSON API
=============================================================================

    GET /api/stats               uptime, request count, start time, root
    GET /api/files[/<subpath>]   contents of a directory below the root
    anything else under /api/    404 "API Endpoint Not Found"

Example ``/api/files/docs`` response:

    {
      "path": "/docs",
      "items": [
        {"name": "img", "type": "directory", "path": "/docs/img",
         "modified": "2026-10-19 09:12:44"},
        {"name": "guide.txt", "type": "file", "size": 5000,
         "size_formatted": "4.88 KB", "path": "/docs/guide.txt",
         "modified": "2026-10-18 17:03:10", "extension": ".txt"}
      ]
    }

Payloads are plain dicts handed to ``ResponseBuilder.json()``, which is the
only place JSON text is produced.

=============================================================================
"""

import logging
from pathlib import Path
from typing import Any, Dict, Union

from ..core.stats import ServerStats
from ..http.response import HTTPResponse, ResponseBuilder, error_response
from ..http.status_codes import HTTPStatus
from .listing import DirectoryEntry, list_directory
from .sandbox import resolve_within_root


logger = logging.getLogger(__name__)


STATS_PATH = "/api/stats"
FILES_PATH = "/api/files"


class ApiHandler:
    """Dispatches ``/api/...`` paths."""

    def __init__(self, root_dir: Union[str, Path], stats: ServerStats):
        self.root_dir = Path(root_dir).resolve()
        self.stats = stats

    def handle(self, path: str) -> HTTPResponse:
        lowered = path.lower()

        if lowered == STATS_PATH:
            return self.stats_response()

        if lowered == FILES_PATH or lowered.startswith(FILES_PATH + "/"):
            return self.files_response(path[len(FILES_PATH):] or "/")

        return error_response(HTTPStatus.NOT_FOUND, "API Endpoint Not Found")

    def stats_response(self) -> HTTPResponse:
        return ResponseBuilder().json(self.stats.snapshot(), pretty=True).no_cache().build()

    def files_response(self, sub_path: str) -> HTTPResponse:
        directory = resolve_within_root(self.root_dir, sub_path)
        if directory is None or not directory.is_dir():
            return error_response(HTTPStatus.NOT_FOUND, "Directory Not Found")

        base = sub_path.rstrip("/")
        items = [_item(entry, f"{base}/{entry.name}") for entry in list_directory(directory)]
        return ResponseBuilder().json({"path": sub_path, "items": items}).build()


def _item(entry: DirectoryEntry, path: str) -> Dict[str, Any]:
    if entry.is_dir:
        return {
            "name": entry.name,
            "type": "directory",
            "path": path,
            "modified": entry.modified_formatted,
        }
    return {
        "name": entry.name,
        "type": "file",
        "size": entry.size,
        "size_formatted": entry.size_formatted,
        "path": path,
        "modified": entry.modified_formatted,
        "extension": entry.extension,
    }
