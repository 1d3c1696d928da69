"""
=============================================================================
PATH SANDBOX
=============================================================================

Maps a URL path onto the served root and refuses anything that lands
outside of it.

=============================================================================
THE ATTACK
=============================================================================

    GET /../../etc/passwd HTTP/1.1
    GET /docs/%2e%2e/%2e%2e/etc/passwd HTTP/1.1   (decoded before we see it)
    GET /link-to-etc/passwd HTTP/1.1              (symlink inside the root)

All three try to read a file above the root. Checking the *string* for
".." is not enough (symlinks, encodings), so the check runs on the fully
resolved filesystem path instead:

    root      = /srv/www                                (resolved once)
    candidate = resolve(/srv/www + "../../etc/passwd")  = /etc/passwd
    inside?   = candidate == root or startswith(root + "/")   → no → 403

The comparison happens on a path-component boundary, so a sibling such as
``/srv/www-private`` is not mistaken for being inside ``/srv/www``. Letter case is
compared the way the platform compares paths: ``os.path.normcase`` folds it
on Windows and leaves it alone on POSIX, where ``/srv/www`` and ``/srv/WWW``
are two different directories.

Nothing is cached: the resolution is redone for every request, so a
symlink swapped in after startup cannot be used to escape.

=============================================================================
"""

import logging
import os
from pathlib import Path
from typing import Optional, Union


logger = logging.getLogger(__name__)


def is_within_root(root: Path, candidate: Path) -> bool:
    """True if ``candidate`` is ``root`` or lies below it. Both must be resolved."""
    root_str = os.path.normcase(str(root))
    candidate_str = os.path.normcase(str(candidate))

    if candidate_str == root_str:
        return True

    prefix = root_str if root_str.endswith(os.sep) else root_str + os.sep
    return candidate_str.startswith(prefix)


def resolve_within_root(root: Union[str, Path], request_path: str) -> Optional[Path]:
    """
    Resolve a decoded URL path against ``root``.

    Args:
        root: The served directory (resolved by the caller).
        request_path: Decoded URL path such as ``/docs/readme.txt``.

    Returns:
        The resolved absolute path, or None if it escapes the root or
        cannot be resolved at all (embedded NUL bytes, OS errors).
    """
    root = Path(root)
    relative = request_path.lstrip("/").replace("/", os.sep)

    try:
        candidate = (root / relative).resolve()
    except (OSError, ValueError) as e:
        logger.warning(f"Could not resolve path {request_path!r}: {e}")
        return None

    if not is_within_root(root, candidate):
        logger.warning(f"Path traversal attempt blocked: {request_path!r}")
        return None

    return candidate
