"""
=============================================================================
CORE NETWORKING
=============================================================================

    socket_server.py   SocketServer: listening socket and accept loop
    connection.py      Connection: read head, read body, send, close
    stats.py           ServerStats: shared request counter

The HTTP layer above never touches a socket directly; it receives bytes
from a Connection and gives bytes back to it.

=============================================================================
"""

from .socket_server import SocketServer
from .connection import (
    Connection,
    BodyReadError,
    BodyTooLarge,
    BodyReadTimeout,
)
from .stats import ServerStats, format_uptime


__all__ = [
    "SocketServer",
    "Connection",
    "BodyReadError",
    "BodyTooLarge",
    "BodyReadTimeout",
    "ServerStats",
    "format_uptime",
]
