"""
=============================================================================
HTTP STATUS CODES
=============================================================================

The status codes FileGate actually emits, as an IntEnum with reason phrases.

=============================================================================
WHERE EACH CODE COMES FROM
=============================================================================

    ┌──────┬──────────────────────────┬─────────────────────────────────────┐
    │ Code │ Phrase                   │ Produced by                         │
    ├──────┼──────────────────────────┼─────────────────────────────────────┤
    │ 200  │ OK                       │ files, listings, API, login page    │
    │ 302  │ Found                    │ login success, logout, auth gate    │
    │ 400  │ Bad Request              │ wire parser rejected the head       │
    │ 403  │ Forbidden                │ path escaped the sandbox root       │
    │ 404  │ Not Found                │ missing file, unknown API endpoint  │
    │ 405  │ Method Not Allowed       │ anything other than GET / POST      │
    │ 413  │ Payload Too Large        │ file above the serving limit        │
    │ 500  │ Internal Server Error    │ handler fault, body read failure    │
    └──────┴──────────────────────────┴─────────────────────────────────────┘

Because HTTPStatus is an IntEnum, ``HTTPStatus.NOT_FOUND == 404`` holds and
a status can be formatted straight into a status line.

=============================================================================
"""

from enum import IntEnum


class HTTPStatus(IntEnum):
    """
    HTTP status codes and reason phrases.

        >>> HTTPStatus.FOUND == 302
        True
        >>> HTTPStatus.FOUND.phrase
        'Found'
    """

    OK = 200
    FOUND = 302

    BAD_REQUEST = 400
    FORBIDDEN = 403
    NOT_FOUND = 404
    METHOD_NOT_ALLOWED = 405
    PAYLOAD_TOO_LARGE = 413

    INTERNAL_SERVER_ERROR = 500

    @property
    def phrase(self) -> str:
        """Reason phrase used on the status line ("Not Found" for 404)."""
        return _STATUS_PHRASES.get(self, "Unknown")

    @property
    def is_error(self) -> bool:
        """True for 4xx and 5xx codes."""
        return self >= 400

    @property
    def is_server_error(self) -> bool:
        return self >= 500


_STATUS_PHRASES = {
    HTTPStatus.OK: "OK",
    HTTPStatus.FOUND: "Found",
    HTTPStatus.BAD_REQUEST: "Bad Request",
    HTTPStatus.FORBIDDEN: "Forbidden",
    HTTPStatus.NOT_FOUND: "Not Found",
    HTTPStatus.METHOD_NOT_ALLOWED: "Method Not Allowed",
    HTTPStatus.PAYLOAD_TOO_LARGE: "Payload Too Large",
    HTTPStatus.INTERNAL_SERVER_ERROR: "Internal Server Error",
}
