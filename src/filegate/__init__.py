"""
=============================================================================
FILEGATE - Authenticated Static File Server on Raw Sockets
=============================================================================

A small HTTP/1.1 server that puts a login in front of a directory: users
sign in with a username and password, then browse and download files from
a sandboxed root. A tiny JSON API reports server statistics and lists
directories.

=============================================================================
PACKAGE LAYOUT
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                     │
    │   server.py          FileServer: wiring, worker threads, logging    │
    │   config.py          ServerConfig: defaults, env vars, validation   │
    │   access_log.py      one line per request on "filegate.access"      │
    │   templates.py       login, listing and error pages                 │
    │                                                                     │
    │   core/              sockets: acceptor, connection, stats counter   │
    │   http/              wire format: request parser, response writer   │
    │   auth/              credentials and the session store              │
    │   handlers/          dispatch, login/logout, API, files, sandbox    │
    │                                                                     │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
QUICK START
=============================================================================

    $ python -m filegate --root ./wwwroot --port 8080
    $ curl -i -d "username=admin&password=admin123" http://127.0.0.1:8080/login

or from code:

    from filegate import FileServer, ServerConfig

    FileServer(ServerConfig(root_dir="./wwwroot")).run()

=============================================================================
"""

__version__ = "1.0.0"

from .server import FileServer
from .config import ServerConfig

__all__ = ["FileServer", "ServerConfig", "__version__"]
