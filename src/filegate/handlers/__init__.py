"""
=============================================================================
REQUEST HANDLERS
=============================================================================

    request_handler.py   RequestHandler: dispatch order, auth gate, 500s
    auth.py              login form, credential check, logout
    api.py               /api/stats and /api/files JSON
    static.py            files and HTML directory listings
    listing.py           directory enumeration and size formatting
    sandbox.py           URL path → filesystem path, confined to the root

Only RequestHandler is used by the server; the others are composed by it.

=============================================================================
"""

from .request_handler import RequestHandler, is_public_path
from .auth import AuthHandler, SESSION_COOKIE
from .api import ApiHandler
from .static import StaticFileHandler
from .listing import DirectoryEntry, format_size, list_directory
from .sandbox import resolve_within_root


__all__ = [
    "RequestHandler",
    "is_public_path",
    "AuthHandler",
    "SESSION_COOKIE",
    "ApiHandler",
    "StaticFileHandler",
    "DirectoryEntry",
    "format_size",
    "list_directory",
    "resolve_within_root",
]
