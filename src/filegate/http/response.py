"""
=============================================================================
HTTP RESPONSE WRITER
=============================================================================

Structured responses and their serialization back to wire bytes.

=============================================================================
RESPONSE ON THE WIRE
=============================================================================

    HTTP/1.1 302 Found\r\n                         ← status line
    Location: /\r\n                                ← headers
    Content-Length: 0\r\n                          ← always added
    Connection: close\r\n                          ← always added
    Date: Mon, 19 Oct 2026 10:00:00 GMT\r\n
    Server: FileGate/1.0\r\n
    Set-Cookie: sessionId=9f3c...; Path=/; Max-Age=1800; HttpOnly\r\n
    \r\n                                           ← end of head
    <body bytes>

=============================================================================
WHY COOKIES ARE NOT HEADERS HERE
=============================================================================

Headers live in a dict, and a dict can hold one value per name. Set-Cookie
is the one response header that legitimately repeats (one line per cookie,
RFC 6265 forbids folding them with commas), so cookies are kept as an
ordered list of directives and each becomes its own ``Set-Cookie:`` line.
A ``Set-Cookie`` entry put into ``headers`` by mistake is not written.

=============================================================================
BUILDING RESPONSES
=============================================================================

    response = (
        ResponseBuilder()
        .status(HTTPStatus.FOUND)
        .header("Location", "/")
        .cookie("sessionId", token, max_age=1800)
        .build()
    )

or one of the helpers at the bottom of this module: ``redirect()``,
``error_response()``.

=============================================================================
"""

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from email.utils import format_datetime
from typing import Any, Dict, List, Optional, Union

from .status_codes import HTTPStatus
from .. import templates


DEFAULT_SERVER_NAME = "FileGate/1.0"


@dataclass
class HTTPResponse:
    """
    An HTTP response waiting to be written to a socket.

    Built fresh by a handler, serialized once by ``to_bytes()``.
    """

    status: HTTPStatus = HTTPStatus.OK
    headers: Dict[str, str] = field(default_factory=dict)
    cookies: List[str] = field(default_factory=list)
    body: bytes = b""
    reason: Optional[str] = None
    version: str = "HTTP/1.1"

    @property
    def status_message(self) -> str:
        """Reason phrase, the override if one was set."""
        return self.reason or HTTPStatus(self.status).phrase

    @property
    def status_line(self) -> str:
        return f"{self.version} {int(self.status)} {self.status_message}"

    def set_header(self, name: str, value: str) -> "HTTPResponse":
        self.headers[name] = value
        return self

    def get_header(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """Case-insensitive header lookup (responses keep their original casing)."""
        lowered = name.lower()
        for key, value in self.headers.items():
            if key.lower() == lowered:
                return value
        return default

    def set_cookie(
        self,
        name: str,
        value: str,
        max_age: int = 3600,
        path: str = "/",
        http_only: bool = True,
    ) -> "HTTPResponse":
        """
        Add a Set-Cookie directive.

            name=value; Path=/; Max-Age=3600; HttpOnly

        A ``max_age`` of 0 tells the browser to drop the cookie.
        """
        directive = f"{name}={value}; Path={path}; Max-Age={max_age}"
        if http_only:
            directive += "; HttpOnly"
        self.cookies.append(directive)
        return self

    def set_body(self, body: Union[str, bytes]) -> "HTTPResponse":
        self.body = body.encode("utf-8") if isinstance(body, str) else body
        return self

    def to_bytes(self, server_name: str = DEFAULT_SERVER_NAME) -> bytes:
        """
        Serialize to wire bytes.

        Content-Length and ``Connection: close`` are always present since
        every connection carries exactly one exchange. Date and Server are
        added unless the handler set them.
        """
        response_headers = dict(self.headers)
        response_headers["Content-Length"] = str(len(self.body))
        response_headers["Connection"] = "close"
        response_headers.setdefault("Date", format_http_date(datetime.now(timezone.utc)))
        response_headers.setdefault("Server", server_name)

        lines = [self.status_line]
        for name, value in response_headers.items():
            if name.lower() == "set-cookie":
                continue
            lines.append(f"{name}: {value}")

        for directive in self.cookies:
            lines.append(f"Set-Cookie: {directive}")

        lines.append("")
        head = "\r\n".join(lines).encode("utf-8") + b"\r\n"
        return head + self.body


class ResponseBuilder:
    """
    Fluent builder for HTTPResponse.

        ResponseBuilder().json({"ok": True}).build()
        ResponseBuilder().status(HTTPStatus.NOT_FOUND).html(page).build()
    """

    def __init__(self):
        self._response = HTTPResponse()

    def status(self, status: HTTPStatus, reason: Optional[str] = None) -> "ResponseBuilder":
        self._response.status = status
        self._response.reason = reason
        return self

    def header(self, name: str, value: str) -> "ResponseBuilder":
        self._response.set_header(name, value)
        return self

    def content_type(self, content_type: str) -> "ResponseBuilder":
        return self.header("Content-Type", content_type)

    def body(self, body: Union[str, bytes]) -> "ResponseBuilder":
        self._response.set_body(body)
        return self

    def html(self, html: str) -> "ResponseBuilder":
        return self.content_type("text/html; charset=utf-8").body(html)

    def json(self, data: Any, pretty: bool = False) -> "ResponseBuilder":
        """
        Serialize ``data`` as the JSON body.

        All API output goes through here, so quoting and escaping of names
        coming from the filesystem is handled by ``json.dumps`` alone.
        """
        payload = json.dumps(data, indent=2 if pretty else None)
        return self.content_type("application/json; charset=utf-8").body(payload)

    def file(self, content: bytes, content_type: str) -> "ResponseBuilder":
        return self.content_type(content_type).body(content)

    def redirect(self, location: str) -> "ResponseBuilder":
        self._response.status = HTTPStatus.FOUND
        return self.header("Location", location)

    def cookie(
        self,
        name: str,
        value: str,
        max_age: int = 3600,
        path: str = "/",
        http_only: bool = True,
    ) -> "ResponseBuilder":
        self._response.set_cookie(name, value, max_age=max_age, path=path, http_only=http_only)
        return self

    def no_cache(self) -> "ResponseBuilder":
        return self.header("Cache-Control", "no-store")

    def build(self) -> HTTPResponse:
        return self._response


# =============================================================================
# HELPERS
# =============================================================================

def format_http_date(dt: datetime) -> str:
    """RFC 7231 IMF-fixdate, e.g. ``Mon, 19 Oct 2026 10:00:00 GMT``."""
    return format_datetime(dt.astimezone(timezone.utc), usegmt=True)


def redirect(location: str) -> HTTPResponse:
    """302 Found pointing at ``location``."""
    return ResponseBuilder().redirect(location).build()


def error_response(status: HTTPStatus, message: Optional[str] = None) -> HTTPResponse:
    """
    HTML error page for ``status``.

    The page shows the status code and ``message`` (the reason phrase when
    no message is given), e.g. ``error_response(HTTPStatus.PAYLOAD_TOO_LARGE,
    "File Too Large")``.
    """
    status = HTTPStatus(status)
    page = templates.error_page(int(status), status.phrase, message or status.phrase)
    return ResponseBuilder().status(status).html(page).build()


# =============================================================================
# CLIENT SIDE
# =============================================================================

def parse_response(data: bytes) -> HTTPResponse:
    """
    Parse wire bytes back into an HTTPResponse.

    The counterpart of ``HTTPResponse.to_bytes()``, used by tests and small
    clients talking to the server. Set-Cookie lines are collected into
    ``cookies``; the body is cut at Content-Length when one is given.

    Raises:
        ValueError: If the bytes don't contain a valid status line.
    """
    head, separator, body = data.partition(b"\r\n\r\n")
    if not separator:
        raise ValueError("response has no header terminator")

    lines = head.decode("utf-8", errors="replace").split("\r\n")
    parts = lines[0].split(" ", 2)
    if len(parts) < 2 or not parts[1].isdigit():
        raise ValueError(f"invalid status line: {lines[0]!r}")

    status = HTTPStatus(int(parts[1]))
    reason = parts[2] if len(parts) == 3 else None
    response = HTTPResponse(
        status=status,
        version=parts[0],
        reason=reason if reason != status.phrase else None,
    )

    for line in lines[1:]:
        name, sep, value = line.partition(":")
        if not sep:
            continue
        name, value = name.strip(), value.strip()
        if name.lower() == "set-cookie":
            response.cookies.append(value)
        else:
            response.headers[name] = value

    length = response.get_header("Content-Length")
    if length is not None and length.isdigit():
        body = body[:int(length)]
    response.body = body

    return response
