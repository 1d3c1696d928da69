"""
=============================================================================
REQUEST DISPATCH
=============================================================================

The single entry point that turns a parsed request into a response.

=============================================================================
DISPATCH ORDER (first match wins)
=============================================================================

    ┌────┬──────────────────────────────────┬──────────────────────────────┐
    │ #  │ Condition                        │ Result                       │
    ├────┼──────────────────────────────────┼──────────────────────────────┤
    │ 1  │ method not GET / POST            │ 405 Method Not Allowed       │
    │    │ (request counter +1 from here)   │                              │
    │ 2  │ /login                           │ login form / credential check│
    │ 3  │ /logout                          │ drop session, → /login       │
    │ 4  │ /api/...                         │ JSON API                     │
    │ 5  │ no session and not public        │ 302 → /login                 │
    │ 6  │ everything else                  │ static files and listings    │
    └────┴──────────────────────────────────┴──────────────────────────────┘

Path comparisons are case-insensitive. "Public" means ``/login``,
``/login.html`` or a static asset extension (stylesheets, scripts, images,
fonts), so the login page can load its assets before anyone is logged in.

Any exception escaping a handler is logged with its traceback and turned
into a 500 page here; nothing propagates to the connection worker.

=============================================================================
"""

import logging
import posixpath
from pathlib import Path
from typing import Union

from ..auth.credentials import CredentialValidator
from ..auth.sessions import SessionStore
from ..core.stats import ServerStats
from ..http.request import HTTPRequest
from ..http.response import HTTPResponse, error_response
from ..http.status_codes import HTTPStatus
from .api import ApiHandler
from .auth import AuthHandler
from .static import DEFAULT_MAX_FILE_SIZE, StaticFileHandler


logger = logging.getLogger(__name__)


ALLOWED_METHODS = ("GET", "POST")

PUBLIC_PATHS = {"/login", "/login.html"}
PUBLIC_EXTENSIONS = {
    ".css", ".js", ".png", ".jpg", ".jpeg", ".gif", ".ico", ".svg",
    ".woff", ".woff2", ".ttf", ".eot",
}


def is_public_path(path: str) -> bool:
    """Paths reachable without a session."""
    if path.lower() in PUBLIC_PATHS:
        return True
    return posixpath.splitext(path)[1].lower() in PUBLIC_EXTENSIONS


class RequestHandler:
    """
    Routes requests to the login, API and static handlers.

    All shared state is injected, so one server instance owns exactly one
    set of sessions and statistics.
    """

    def __init__(
        self,
        root_dir: Union[str, Path],
        sessions: SessionStore,
        credentials: CredentialValidator,
        stats: ServerStats,
        max_file_size: int = DEFAULT_MAX_FILE_SIZE,
    ):
        self.root_dir = Path(root_dir).resolve()
        self.stats = stats
        self.auth = AuthHandler(sessions, credentials)
        self.api = ApiHandler(self.root_dir, stats)
        self.static = StaticFileHandler(self.root_dir, max_file_size=max_file_size)

    def handle(self, request: HTTPRequest) -> HTTPResponse:
        try:
            return self._dispatch(request)
        except Exception:
            logger.exception(f"Error handling {request.method} {request.path}")
            return error_response(HTTPStatus.INTERNAL_SERVER_ERROR)

    def _dispatch(self, request: HTTPRequest) -> HTTPResponse:
        if request.method not in ALLOWED_METHODS:
            response = error_response(HTTPStatus.METHOD_NOT_ALLOWED)
            response.set_header("Allow", ", ".join(ALLOWED_METHODS))
            return response

        self.stats.increment()

        path = request.local_path
        lowered = path.lower()

        if lowered == "/login":
            return self.auth.login(request)

        if lowered == "/logout":
            return self.auth.logout(request)

        if lowered.startswith("/api/"):
            return self.api.handle(path)

        session = self.auth.current_session(request)
        if session is None and not is_public_path(path):
            return self.auth.redirect_to_login()

        return self.static.handle(path)
