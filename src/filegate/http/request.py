"""
=============================================================================
HTTP REQUEST PARSER
=============================================================================

Turns the raw head of an HTTP/1.1 request into a structured HTTPRequest.

=============================================================================
TWO-PHASE PARSING
=============================================================================

The length of the body is only known once the headers have been read, so
a request is assembled in two steps:

    ┌──────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   socket bytes up to \r\n\r\n                                        │
    │          │                                                           │
    │          ▼                                                           │
    │   parse_request(head)  ──► ParseFailure ──► 400 Bad Request          │
    │          │                                                           │
    │          ▼                                                           │
    │   HTTPRequest (no body yet)                                          │
    │          │                                                           │
    │          │   Connection reads Content-Length more bytes              │
    │          ▼                                                           │
    │   request.set_body(body)  ──► form fields decoded when the body      │
    │                               is application/x-www-form-urlencoded   │
    │                                                                      │
    └──────────────────────────────────────────────────────────────────────┘

A malformed head is not exceptional for a server facing the open internet,
so the parser returns a ParseFailure value instead of raising.

=============================================================================
LIMITS
=============================================================================

    ┌─────────────────────────────┬──────────────┐
    │ Head size                   │ 8 KiB        │
    │ Lines in the head           │ 100          │
    │ Request path                │ 2048 chars   │
    │ Cookie name / value         │ 100 / 4096   │
    │ Form body                   │ 10 MiB       │
    │ Form pairs                  │ 1000         │
    │ Form key / value            │ 256 / 8192   │
    └─────────────────────────────┴──────────────┘

Everything keyed by name (headers, cookies, form fields) is stored with a
lowercase key, so lookups are case-insensitive and a repeated name simply
overwrites the earlier value.

=============================================================================
"""

from dataclasses import dataclass, field
from typing import Dict, Optional, Union
from urllib.parse import parse_qs, unquote, unquote_plus


MAX_REQUEST_SIZE = 8192
MAX_HEADER_LINES = 100
MAX_PATH_LENGTH = 2048

MAX_COOKIE_NAME_LENGTH = 100
MAX_COOKIE_VALUE_LENGTH = 4096

MAX_FORM_BODY_SIZE = 10 * 1024 * 1024
MAX_FORM_PAIRS = 1000
MAX_FORM_KEY_LENGTH = 256
MAX_FORM_VALUE_LENGTH = 8192

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"


@dataclass(frozen=True)
class ParseFailure:
    """
    Result of parsing a head that is not a usable HTTP request.

    ``reason`` is meant for logs only; clients just get a 400.
    """

    reason: str


@dataclass
class HTTPRequest:
    """
    A parsed HTTP request.

    Attributes:
        method:         Request method exactly as sent ("GET", "POST", ...).
        path:           Raw request target, still percent-encoded and with
                        any query string attached. Use ``local_path`` for
                        routing and filesystem work.
        version:        Protocol token ("HTTP/1.1").
        headers:        Header name (lowercase) → value.
        cookies:        Cookie name (lowercase) → value.
        form:           Decoded form field (lowercase) → value. Only filled
                        for url-encoded POST bodies.
        body:           Raw body bytes, attached after the head is parsed.
        client_address: (ip, port) of the peer, for logging.
    """

    method: str
    path: str
    version: str = "HTTP/1.1"

    headers: Dict[str, str] = field(default_factory=dict)
    cookies: Dict[str, str] = field(default_factory=dict)
    form: Dict[str, str] = field(default_factory=dict)
    body: bytes = b""

    client_address: tuple[str, int] = ("", 0)

    # =========================================================================
    # PROPERTIES
    # =========================================================================

    @property
    def local_path(self) -> str:
        """
        Request path with the query string removed and percent-escapes decoded.

            "/docs/My%20File.txt?download=1"  →  "/docs/My File.txt"
        """
        raw = self.path.split("?", 1)[0].split("#", 1)[0]
        return unquote(raw)

    @property
    def query_params(self) -> Dict[str, list[str]]:
        if "?" not in self.path:
            return {}
        return parse_qs(self.path.split("?", 1)[1], keep_blank_values=True)

    @property
    def content_length(self) -> int:
        """Content-Length as an int; 0 when missing, negative or garbage."""
        try:
            return max(int(self.headers.get("content-length", "0")), 0)
        except ValueError:
            return 0

    @property
    def content_type(self) -> str:
        return self.headers.get("content-type", "")

    @property
    def is_form(self) -> bool:
        return FORM_CONTENT_TYPE in self.content_type.lower()

    # =========================================================================
    # ACCESSORS (case-insensitive)
    # =========================================================================

    def get_header(self, name: str, default: str = "") -> str:
        return self.headers.get(name.lower(), default)

    def get_cookie(self, name: str, default: Optional[str] = None) -> Optional[str]:
        return self.cookies.get(name.lower(), default)

    def get_form(self, name: str, default: str = "") -> str:
        return self.form.get(name.lower(), default)

    # =========================================================================
    # BODY
    # =========================================================================

    def set_body(self, body: bytes) -> None:
        """
        Attach the body read after the head and decode form fields if needed.

        Form decoding only happens for a non-empty body whose Content-Type
        is ``application/x-www-form-urlencoded``.
        """
        self.body = body
        if body and self.is_form:
            self.form = parse_form_data(body)


# =============================================================================
# HEAD PARSING
# =============================================================================

def parse_request(
    raw: Union[str, bytes],
    client_address: tuple[str, int] = ("", 0),
) -> Union[HTTPRequest, ParseFailure]:
    """
    Parse a request head into an HTTPRequest, or explain why it can't be.

    Args:
        raw: The head (request line and headers), ideally including the
             terminating blank line. Anything after the blank line is
             ignored; the body is attached later via ``set_body``.
        client_address: Peer address carried onto the request.

    Returns:
        HTTPRequest on success, ParseFailure otherwise.

    Example:
        >>> req = parse_request("GET / HTTP/1.1\\r\\nHost: x\\r\\n\\r\\n")
        >>> req.method, req.path, req.get_header("host")
        ('GET', '/', 'x')
    """
    if isinstance(raw, bytes):
        raw = raw.decode("utf-8", errors="replace")

    if not raw or not raw.strip():
        return ParseFailure("empty request")

    if len(raw) > MAX_REQUEST_SIZE:
        return ParseFailure(f"request head too large: {len(raw)} bytes")

    lines = raw.split("\r\n")
    if len(lines) > MAX_HEADER_LINES:
        return ParseFailure(f"too many lines in request head: {len(lines)}")

    # ─────────────────────────────────────────────────────────────────────
    # REQUEST LINE: exactly three space-separated tokens
    # ─────────────────────────────────────────────────────────────────────
    parts = lines[0].split(" ")
    if len(parts) != 3:
        return ParseFailure(f"malformed request line: {lines[0][:100]!r}")

    method, path, version = (part.strip() for part in parts)
    if not method or not path or not version:
        return ParseFailure("empty token in request line")

    if len(path) > MAX_PATH_LENGTH:
        return ParseFailure(f"request path too long: {len(path)} chars")

    request = HTTPRequest(
        method=method,
        path=path,
        version=version,
        client_address=client_address,
    )

    # ─────────────────────────────────────────────────────────────────────
    # HEADERS: up to the first empty line
    # ─────────────────────────────────────────────────────────────────────
    for line in lines[1:]:
        if line == "":
            break

        colon = line.find(":")
        if colon <= 0:
            continue  # not a header, skip it

        name = line[:colon].strip().lower()
        value = line[colon + 1:].strip()
        request.headers[name] = value

        if name == "cookie":
            request.cookies.update(parse_cookies(value))

    return request


def parse_cookies(header_value: str) -> Dict[str, str]:
    """
    Parse a Cookie header value into a lowercase-keyed dict.

        >>> parse_cookies("sessionId=abc; Theme=dark")
        {'sessionid': 'abc', 'theme': 'dark'}

    Segments without ``=``, with an empty name, or over the length limits
    are dropped.
    """
    cookies: Dict[str, str] = {}

    for segment in header_value.split(";"):
        if "=" not in segment:
            continue

        name, value = segment.split("=", 1)
        name = name.strip()
        value = value.strip()

        if not name or len(name) > MAX_COOKIE_NAME_LENGTH:
            continue
        if len(value) > MAX_COOKIE_VALUE_LENGTH:
            continue

        cookies[name.lower()] = value

    return cookies


def parse_form_data(body: Union[str, bytes]) -> Dict[str, str]:
    """
    Decode an ``application/x-www-form-urlencoded`` body.

        >>> parse_form_data("username=admin&password=admin123")
        {'username': 'admin', 'password': 'admin123'}

    Bodies over 10 MiB decode to nothing. At most 1000 pairs are looked at.
    A pair that fails to percent-decode, has an empty key, or exceeds the
    key/value length limits is dropped without affecting the others.
    """
    if len(body) > MAX_FORM_BODY_SIZE:
        return {}

    if isinstance(body, bytes):
        body = body.decode("utf-8", errors="replace")

    form: Dict[str, str] = {}

    for pair in body.split("&")[:MAX_FORM_PAIRS]:
        if "=" not in pair:
            continue

        raw_key, raw_value = pair.split("=", 1)
        if not raw_key:
            continue

        try:
            key = unquote_plus(raw_key, errors="strict")
            value = unquote_plus(raw_value, errors="strict")
        except UnicodeDecodeError:
            continue

        if not key or len(key) > MAX_FORM_KEY_LENGTH:
            continue
        if len(value) > MAX_FORM_VALUE_LENGTH:
            continue

        form[key.lower()] = value

    return form
