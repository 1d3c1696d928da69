"""
Directory enumeration shared by the HTML listing and the files API.

Both views show the same thing: subdirectories first, then files, each
group sorted by name, with human readable sizes and local timestamps.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Tuple

from ..core.stats import TIMESTAMP_FORMAT


logger = logging.getLogger(__name__)


SIZE_UNITS = ("B", "KB", "MB", "GB", "TB")


def format_size(size: int) -> str:
    """
    Format a byte count with binary multiples and up to two decimals.

        >>> format_size(512)
        '512 B'
        >>> format_size(1024)
        '1 KB'
        >>> format_size(5000)
        '4.88 KB'
    """
    value = float(size)
    order = 0
    while value >= 1024 and order < len(SIZE_UNITS) - 1:
        order += 1
        value /= 1024

    number = f"{value:.2f}".rstrip("0").rstrip(".")
    return f"{number} {SIZE_UNITS[order]}"


def format_modified(timestamp: float) -> str:
    return datetime.fromtimestamp(timestamp).strftime(TIMESTAMP_FORMAT)


@dataclass
class DirectoryEntry:
    """One row of a listing."""

    name: str
    is_dir: bool
    size: int
    modified: float

    @property
    def extension(self) -> str:
        """File extension with the dot (".txt"), empty for directories."""
        return "" if self.is_dir else Path(self.name).suffix

    @property
    def size_formatted(self) -> str:
        return "-" if self.is_dir else format_size(self.size)

    @property
    def modified_formatted(self) -> str:
        return format_modified(self.modified)


def list_directory(directory: Path) -> List[DirectoryEntry]:
    """
    Enumerate ``directory``: subdirectories first, then files.

    Entries that vanish or can't be stat'ed between listing and stat are
    skipped.
    """
    directories: List[DirectoryEntry] = []
    files: List[DirectoryEntry] = []

    for child in directory.iterdir():
        try:
            stat = child.stat()
            is_dir = child.is_dir()
        except OSError as e:
            logger.debug(f"Skipping {child}: {e}")
            continue

        entry = DirectoryEntry(
            name=child.name,
            is_dir=is_dir,
            size=0 if is_dir else stat.st_size,
            modified=stat.st_mtime,
        )
        (directories if is_dir else files).append(entry)

    directories.sort(key=lambda e: e.name.lower())
    files.sort(key=lambda e: e.name.lower())
    return directories + files


def breadcrumbs(request_path: str) -> List[Tuple[str, str]]:
    """
    (label, href) pairs for the navigation bar.

        >>> breadcrumbs("/docs/api/")
        [('Home', '/'), ('docs', '/docs'), ('api', '/docs/api')]
    """
    crumbs = [("Home", "/")]
    current = ""
    for part in request_path.strip("/").split("/"):
        if part:
            current += "/" + part
            crumbs.append((part, current))
    return crumbs


def parent_path(request_path: str) -> Optional[str]:
    """
    URL of the parent directory, None when already at the root.

        >>> parent_path("/docs/api/")
        '/docs'
        >>> parent_path("/docs")
        '/'
    """
    if request_path == "/":
        return None
    trimmed = request_path.rstrip("/")
    last_slash = trimmed.rfind("/")
    return trimmed[:last_slash] if last_slash > 0 else "/"
