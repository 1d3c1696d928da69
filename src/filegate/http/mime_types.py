"""
=============================================================================
MIME TYPE LOOKUP
=============================================================================

Maps file extensions to the Content-Type sent with a served file.

    style.css   ─►  text/css; charset=utf-8
    logo.png    ─►  image/png
    blob.xyz    ─►  application/octet-stream

Text types get a ``charset=utf-8`` parameter so browsers don't have to
sniff the encoding. Anything unknown is served as an opaque byte stream,
which makes browsers offer a download instead of rendering it.

=============================================================================
"""

from pathlib import Path
from typing import Union


MIME_TYPES = {
    # Text
    ".html": "text/html",
    ".htm": "text/html",
    ".css": "text/css",
    ".js": "text/javascript",
    ".json": "application/json",
    ".xml": "application/xml",
    ".txt": "text/plain",
    ".md": "text/markdown",
    ".csv": "text/csv",
    ".log": "text/plain",

    # Images
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".gif": "image/gif",
    ".svg": "image/svg+xml",
    ".ico": "image/x-icon",
    ".webp": "image/webp",
    ".bmp": "image/bmp",

    # Fonts
    ".woff": "font/woff",
    ".woff2": "font/woff2",
    ".ttf": "font/ttf",
    ".otf": "font/otf",
    ".eot": "application/vnd.ms-fontobject",

    # Audio / video
    ".mp3": "audio/mpeg",
    ".wav": "audio/wav",
    ".ogg": "audio/ogg",
    ".mp4": "video/mp4",
    ".webm": "video/webm",

    # Documents and archives
    ".pdf": "application/pdf",
    ".zip": "application/zip",
    ".tar": "application/x-tar",
    ".gz": "application/gzip",
    ".7z": "application/x-7z-compressed",
}

DEFAULT_MIME_TYPE = "application/octet-stream"

_TEXT_APPLICATION_TYPES = {
    "application/json",
    "application/xml",
    "image/svg+xml",
}


def get_mime_type(path: Union[str, Path]) -> str:
    """
    Look up the MIME type for a file by its extension (case-insensitive).

        >>> get_mime_type("INDEX.HTML")
        'text/html'
        >>> get_mime_type("archive.unknown")
        'application/octet-stream'
    """
    extension = Path(path).suffix.lower()
    return MIME_TYPES.get(extension, DEFAULT_MIME_TYPE)


def is_text_type(mime_type: str) -> bool:
    return mime_type.startswith("text/") or mime_type in _TEXT_APPLICATION_TYPES


def get_content_type(path: Union[str, Path], charset: str = "utf-8") -> str:
    """
    Full Content-Type header value for a file, with charset for text types.
    """
    mime_type = get_mime_type(path)
    if is_text_type(mime_type):
        return f"{mime_type}; charset={charset}"
    return mime_type
