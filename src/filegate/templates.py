"""
HTML pages served by FileGate.

Plain string producers: the login form, directory listings and error pages.
Every piece of dynamic text (file names, paths, messages) goes through
``html.escape`` before it lands in the markup.
"""

import html
from typing import Iterable, Optional, Sequence, Tuple
from urllib.parse import quote


_STYLE = """
    body { font-family: -apple-system, "Segoe UI", Helvetica, Arial, sans-serif;
           margin: 0; background: #f4f5f7; color: #222; }
    main { max-width: 960px; margin: 40px auto; background: #fff; padding: 24px 32px;
           border-radius: 6px; box-shadow: 0 1px 3px rgba(0, 0, 0, 0.12); }
    a { color: #0b5cad; text-decoration: none; }
    a:hover { text-decoration: underline; }
    table { width: 100%; border-collapse: collapse; }
    th, td { text-align: left; padding: 6px 8px; border-bottom: 1px solid #e3e5e8; }
    th { background: #fafbfc; }
    td.size, th.size { text-align: right; white-space: nowrap; }
    .crumbs { margin-bottom: 16px; }
    .error { background: #fdecea; color: #a12622; padding: 8px 12px; border-radius: 4px;
             margin-bottom: 12px; }
    .info { color: #666; font-size: 0.9em; margin-top: 16px; }
    form label { display: block; margin-top: 12px; }
    form input { width: 100%; padding: 6px; box-sizing: border-box; }
    form button { margin-top: 16px; padding: 8px 20px; }
"""


def _page(title: str, content: str) -> str:
    return (
        "<!DOCTYPE html>\n"
        "<html>\n<head>\n"
        '<meta charset="utf-8">\n'
        f"<title>{html.escape(title)}</title>\n"
        f"<style>{_STYLE}</style>\n"
        "</head>\n<body>\n<main>\n"
        f"{content}\n"
        "</main>\n</body>\n</html>\n"
    )


def login_page(error: Optional[str] = None, hint: Optional[str] = None) -> str:
    """Login form posting ``username`` and ``password`` back to ``/login``."""
    parts = ["<h1>FileGate Login</h1>"]
    if error:
        parts.append(f'<div class="error">{html.escape(error)}</div>')
    parts.append(
        '<form method="POST" action="/login">\n'
        '<label for="username">Username</label>\n'
        '<input type="text" id="username" name="username" required autofocus>\n'
        '<label for="password">Password</label>\n'
        '<input type="password" id="password" name="password" required>\n'
        '<button type="submit">Log in</button>\n'
        "</form>"
    )
    if hint:
        parts.append(f'<p class="info">{html.escape(hint)}</p>')
    return _page("Login - FileGate", "\n".join(parts))


def directory_listing(
    request_path: str,
    entries: Iterable,
    breadcrumbs: Sequence[Tuple[str, str]],
    parent: Optional[str],
) -> str:
    """
    Directory index page.

    Args:
        request_path: The URL path being listed, e.g. ``/docs/``.
        entries: Objects with ``name``, ``is_dir``, ``size_formatted`` and
                 ``modified_formatted`` attributes, already sorted.
        breadcrumbs: (label, href) pairs, starting with Home.
        parent: href of the parent directory, or None at the root.
    """
    crumbs = " / ".join(
        f'<a href="{quote(href)}">{html.escape(label)}</a>' for label, href in breadcrumbs
    )

    rows = []
    if parent is not None:
        rows.append(
            f'<tr><td><a href="{quote(parent)}">..</a></td>'
            '<td class="size">-</td><td></td></tr>'
        )

    base = request_path.rstrip("/")
    for entry in entries:
        href = quote(f"{base}/{entry.name}")
        label = html.escape(entry.name) + ("/" if entry.is_dir else "")
        rows.append(
            f'<tr><td><a href="{href}">{label}</a></td>'
            f'<td class="size">{html.escape(entry.size_formatted)}</td>'
            f"<td>{html.escape(entry.modified_formatted)}</td></tr>"
        )

    content = (
        f"<h1>Index of {html.escape(request_path)}</h1>\n"
        f'<div class="crumbs">{crumbs}</div>\n'
        "<table>\n"
        '<tr><th>Name</th><th class="size">Size</th><th>Last Modified</th></tr>\n'
        + "\n".join(rows)
        + "\n</table>\n"
        '<p class="info"><a href="/logout">Log out</a></p>'
    )
    return _page(f"Index of {request_path}", content)


def error_page(code: int, phrase: str, message: str) -> str:
    content = (
        f"<h1>{code} {html.escape(phrase)}</h1>\n"
        f"<p>{html.escape(message)}</p>\n"
        '<p><a href="/">Back to home</a></p>'
    )
    return _page(f"{code} {phrase}", content)
