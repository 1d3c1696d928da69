"""
=============================================================================
LOGIN / LOGOUT
=============================================================================

    GET  /login    login form
    POST /login    check credentials
                     ok    → 302 Location: /       + Set-Cookie sessionId=<token>
                     bad   → 200 login form with "Invalid username or password"
    *    /logout   drop the session (if any), clear the cookie,
                   302 Location: /login

The session cookie is HttpOnly so page scripts can't read it, and its
Max-Age matches the session timeout.

=============================================================================
"""

import logging
from typing import Optional

from .. import templates
from ..auth.credentials import CredentialValidator
from ..auth.sessions import Session, SessionStore
from ..http.request import HTTPRequest
from ..http.response import HTTPResponse, ResponseBuilder, redirect


logger = logging.getLogger(__name__)


SESSION_COOKIE = "sessionId"
LOGIN_PATH = "/login"
LOGIN_ERROR = "Invalid username or password"


class AuthHandler:
    """
    Login, logout and session lookup.

    Args:
        sessions: Where sessions are created and found.
        credentials: Validates username/password pairs.
    """

    def __init__(self, sessions: SessionStore, credentials: CredentialValidator):
        self.sessions = sessions
        self.credentials = credentials

    @property
    def cookie_max_age(self) -> int:
        return int(self.sessions.timeout)

    def current_session(self, request: HTTPRequest) -> Optional[Session]:
        """The live session named by the request's cookie, renewing it."""
        return self.sessions.get_session(request.get_cookie(SESSION_COOKIE))

    def login(self, request: HTTPRequest) -> HTTPResponse:
        if request.method == "POST":
            return self._submit_login(request)
        return self.login_page()

    def login_page(self, error: Optional[str] = None) -> HTTPResponse:
        hint = "Default users: " + ", ".join(self.credentials.usernames)
        return ResponseBuilder().html(templates.login_page(error=error, hint=hint)).build()

    def _submit_login(self, request: HTTPRequest) -> HTTPResponse:
        username = request.get_form("username")
        password = request.get_form("password")

        if not self.credentials.validate(username, password):
            logger.info(f"Failed login for {username!r} from {request.client_address[0]}")
            return self.login_page(error=LOGIN_ERROR)

        session = self.sessions.create_session(username)
        logger.info(f"User {username!r} logged in from {request.client_address[0]}")
        return (
            ResponseBuilder()
            .redirect("/")
            .cookie(SESSION_COOKIE, session.token, max_age=self.cookie_max_age)
            .build()
        )

    def logout(self, request: HTTPRequest) -> HTTPResponse:
        token = request.get_cookie(SESSION_COOKIE)
        if token:
            self.sessions.remove_session(token)

        return (
            ResponseBuilder()
            .redirect(LOGIN_PATH)
            .cookie(SESSION_COOKIE, "", max_age=0)
            .build()
        )

    @staticmethod
    def redirect_to_login() -> HTTPResponse:
        return redirect(LOGIN_PATH)
