"""
=============================================================================
FILEGATE SERVER
=============================================================================

Wires the pieces together and runs one worker thread per connection.

=============================================================================
ARCHITECTURE
=============================================================================

    ┌──────────────────────────────────────────────────────────────────────┐
    │  FileServer                                                          │
    │                                                                      │
    │   SocketServer ──accept──► _handle_connection(conn)                  │
    │                                   │  new daemon thread               │
    │                                   ▼                                  │
    │                            _process_connection(conn)                 │
    │                                   │                                  │
    │            read_head ──► parse_request ──► ParseFailure → 400        │
    │                                   │                                  │
    │            read_body ──► BodyReadError → 500                         │
    │                                   │                                  │
    │            RequestHandler.handle(request)                            │
    │              ├── AuthHandler   ── SessionStore, CredentialValidator  │
    │              ├── ApiHandler    ── ServerStats                        │
    │              └── StaticFileHandler                                   │
    │                                   │                                  │
    │            response.to_bytes() ──► conn.send_response ──► close      │
    │                                                                      │
    │   SessionSweeper (background) ── cleanup_expired() every 5 min       │
    └──────────────────────────────────────────────────────────────────────┘

Every piece of shared state (sessions, statistics) belongs to one FileServer
instance, so two servers in the same process never see each other's
sessions. Nothing raised while serving a connection escapes its worker
thread.

=============================================================================
USAGE
=============================================================================

    server = FileServer(ServerConfig(root_dir="./wwwroot", port=8080))
    server.run()            # blocks; Ctrl+C stops it

From another thread (tests):

    threading.Thread(target=server.run, daemon=True).start()
    server.wait_until_ready(5)
    host, port = server.address
    ...
    server.stop()

=============================================================================
"""

import logging
import threading
import time
from typing import Optional, Tuple

from .access_log import RequestLog, log_request
from .auth.credentials import CredentialValidator
from .auth.sessions import SessionStore, SessionSweeper
from .config import ServerConfig
from .core.connection import BodyReadError, Connection
from .core.socket_server import SocketServer
from .core.stats import ServerStats
from .handlers.request_handler import RequestHandler
from .http.request import HTTPRequest, ParseFailure, parse_request
from .http.response import HTTPResponse, error_response
from .http.status_codes import HTTPStatus


logger = logging.getLogger(__name__)


class FileServer:
    """
    Authenticated static file server.

    Args:
        config: Server configuration; defaults are used when omitted.
        credentials: User table to log in against (the default demo users
                     when omitted).
    """

    def __init__(
        self,
        config: Optional[ServerConfig] = None,
        credentials: Optional[CredentialValidator] = None,
    ):
        self.config = config or ServerConfig()
        self.config.validate()

        root = self.config.root_path

        self.sessions = SessionStore(timeout=self.config.session_timeout)
        self.credentials = credentials or CredentialValidator()
        self.stats = ServerStats(root_directory=str(root))

        self.handler = RequestHandler(
            root_dir=root,
            sessions=self.sessions,
            credentials=self.credentials,
            stats=self.stats,
            max_file_size=self.config.max_file_size,
        )

        self._socket_server = SocketServer(self.config)
        self._sweeper = SessionSweeper(self.sessions, self.config.session_cleanup_interval)

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    @property
    def address(self) -> Tuple[str, int]:
        return self._socket_server.address

    def run(self):
        """Serve until stop() is called or SIGINT/SIGTERM arrives (blocking)."""
        self._setup_logging()
        self._sweeper.start()

        logger.info(
            f"{self.config.server_name} serving {self.config.root_path} "
            f"on {self.config.host}:{self.config.port}"
        )

        try:
            self._socket_server.start(self._handle_connection)
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")
        finally:
            self._shutdown()

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        return self._socket_server.wait_until_ready(timeout)

    def stop(self):
        """Stop accepting connections. In-flight requests finish on their own."""
        self._socket_server.shutdown()

    def _shutdown(self):
        self._sweeper.stop()
        logger.info(f"Server stopped after {self.stats.total_requests} requests")

    def _setup_logging(self):
        level = getattr(logging, self.config.log_level.upper(), logging.INFO)
        logging.basicConfig(
            level=level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        logging.getLogger("filegate").setLevel(level)

    # =========================================================================
    # CONNECTIONS
    # =========================================================================

    def _handle_connection(self, conn: Connection):
        """Called by the acceptor; spawns the worker and returns at once."""
        worker = threading.Thread(
            target=self._process_connection,
            args=(conn,),
            name=f"conn-{conn.id}",
            daemon=True,
        )
        worker.start()

    def _process_connection(self, conn: Connection):
        """Read one request, answer it, close. Runs on the worker thread."""
        start = time.perf_counter()
        request: Optional[HTTPRequest] = None
        response: Optional[HTTPResponse] = None

        with conn:
            try:
                head = conn.read_head()
                if head is None:
                    return  # client connected and left without a word

                parsed = parse_request(head, conn.address)
                if isinstance(parsed, ParseFailure):
                    logger.debug(f"[{conn.id}] Bad request: {parsed.reason}")
                    response = error_response(HTTPStatus.BAD_REQUEST)
                else:
                    request = parsed
                    response = self._respond(conn, request)

                conn.send_response(response.to_bytes(self.config.server_name))
            except Exception:
                logger.exception(f"[{conn.id}] Unexpected error on connection")
                return

        if response is not None:
            self._log_access(conn, request, response, time.perf_counter() - start)

    def _respond(self, conn: Connection, request: HTTPRequest) -> HTTPResponse:
        try:
            request.set_body(conn.read_body(request.content_length))
        except BodyReadError as e:
            logger.warning(f"[{conn.id}] Failed to read request body: {e}")
            return error_response(HTTPStatus.INTERNAL_SERVER_ERROR)

        return self.handler.handle(request)

    def _log_access(
        self,
        conn: Connection,
        request: Optional[HTTPRequest],
        response: HTTPResponse,
        duration: float,
    ):
        entry = RequestLog(
            client_ip=conn.client_ip,
            method=request.method if request else "-",
            path=request.path if request else "-",
            version=request.version if request else "-",
            status=int(response.status),
            response_size=len(response.body),
            duration_ms=duration * 1000,
            user_agent=request.get_header("user-agent") if request else "",
            referer=request.get_header("referer") if request else "",
        )
        log_request(entry, self.config.log_format)
