"""
=============================================================================
STATIC FILE HANDLER
=============================================================================

Serves files and directory listings from the sandboxed root.

=============================================================================
FLOW
=============================================================================

    GET /docs/readme.txt
        │
        ├─► "/" or ""?           rewrite to /index.html
        ├─► resolve in sandbox    escapes root → 403 Forbidden
        ├─► is a directory?       HTML listing
        ├─► is not a file?        404 Not Found
        ├─► larger than limit?    413 "File Too Large"
        └─► read fully            200 with Content-Type from the extension

Files are read into memory in one go; the size limit (100 MB by default)
bounds how much a single request can pull in.

=============================================================================
"""

import logging
from pathlib import Path
from typing import Union

from .. import templates
from ..http.mime_types import get_content_type
from ..http.response import HTTPResponse, ResponseBuilder, error_response
from ..http.status_codes import HTTPStatus
from .listing import breadcrumbs, list_directory, parent_path
from .sandbox import resolve_within_root


logger = logging.getLogger(__name__)


DEFAULT_MAX_FILE_SIZE = 100 * 1024 * 1024
INDEX_FILE = "/index.html"


class StaticFileHandler:
    """
    Handler for files and directories below ``root_dir``.

    Args:
        root_dir: Directory to serve. Resolved once here; every request
                  is still re-resolved and re-checked against it.
        max_file_size: Files above this many bytes get 413.
    """

    def __init__(self, root_dir: Union[str, Path], max_file_size: int = DEFAULT_MAX_FILE_SIZE):
        self.root_dir = Path(root_dir).resolve()
        self.max_file_size = max_file_size

    def handle(self, request_path: str) -> HTTPResponse:
        """
        Serve ``request_path`` (decoded, query string already removed).
        """
        if not request_path or request_path == "/":
            request_path = INDEX_FILE

        full_path = resolve_within_root(self.root_dir, request_path)
        if full_path is None:
            return error_response(HTTPStatus.FORBIDDEN)

        if full_path.is_dir():
            return self._directory_listing(full_path, request_path)

        if not full_path.is_file():
            return error_response(HTTPStatus.NOT_FOUND)

        return self._serve_file(full_path)

    def _serve_file(self, path: Path) -> HTTPResponse:
        try:
            size = path.stat().st_size
            if size > self.max_file_size:
                logger.info(f"Refusing {path.name}: {size} bytes exceeds {self.max_file_size}")
                return error_response(HTTPStatus.PAYLOAD_TOO_LARGE, "File Too Large")

            content = path.read_bytes()
        except PermissionError:
            return error_response(HTTPStatus.FORBIDDEN)
        except FileNotFoundError:
            # deleted between the is_file() check and the read
            return error_response(HTTPStatus.NOT_FOUND)

        return ResponseBuilder().file(content, get_content_type(path)).build()

    def _directory_listing(self, directory: Path, request_path: str) -> HTTPResponse:
        page = templates.directory_listing(
            request_path=request_path,
            entries=list_directory(directory),
            breadcrumbs=breadcrumbs(request_path),
            parent=parent_path(request_path),
        )
        return ResponseBuilder().html(page).build()
