"""
=============================================================================
HTTP PROTOCOL LAYER
=============================================================================

Everything that knows what HTTP/1.1 looks like on the wire:

    ┌──────────────────────┬──────────────────────────────────────────────┐
    │ request.py           │ head parsing, cookies, url-encoded forms     │
    │ response.py          │ HTTPResponse, ResponseBuilder, serialization │
    │ status_codes.py      │ HTTPStatus enum with reason phrases          │
    │ mime_types.py        │ extension → Content-Type                     │
    └──────────────────────┴──────────────────────────────────────────────┘

Nothing in here touches sockets or the filesystem.

=============================================================================
"""

from .request import (
    HTTPRequest,
    ParseFailure,
    parse_request,
    parse_cookies,
    parse_form_data,
)
from .response import (
    HTTPResponse,
    ResponseBuilder,
    error_response,
    parse_response,
    redirect,
)
from .status_codes import HTTPStatus
from .mime_types import get_mime_type, get_content_type


__all__ = [
    # Request
    "HTTPRequest",
    "ParseFailure",
    "parse_request",
    "parse_cookies",
    "parse_form_data",
    # Response
    "HTTPResponse",
    "ResponseBuilder",
    "error_response",
    "parse_response",
    "redirect",
    # Status
    "HTTPStatus",
    # MIME
    "get_mime_type",
    "get_content_type",
]
