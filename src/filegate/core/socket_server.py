"""
=============================================================================
TCP ACCEPTOR
=============================================================================

Owns the listening socket and hands every accepted client to a callback.

=============================================================================
LIFECYCLE
=============================================================================

    start(handler)
        │
        ├──► _create_socket()      SO_REUSEADDR, TCP_NODELAY, 1s accept timeout
        ├──► bind() / listen()     port 0 → the OS picks, see .address
        ├──► _setup_signals()      SIGINT / SIGTERM → shutdown() (main thread only)
        ├──► ready event set       wait_until_ready() returns
        │
        └──► accept loop (BLOCKS)
                 while running:
                     accept()                 wakes at least once a second
                     Connection(client, ...)  wrap with limits from config
                     handler(conn)            must return quickly

    shutdown()                     from a signal handler or another thread
        └──► running = False       the loop notices within one second

The one-second accept timeout is what makes shutdown() work without
closing the socket out from under a blocked accept().

=============================================================================
"""

import logging
import signal
import socket
import threading
from typing import Callable, Optional, Tuple

from ..config import ServerConfig
from .connection import Connection


logger = logging.getLogger(__name__)


class SocketServer:
    """
    Low-level TCP server.

        def handle(conn: Connection):
            threading.Thread(target=work, args=(conn,)).start()

        server = SocketServer(config)
        server.start(handle)   # blocks until shutdown()
    """

    def __init__(self, config: ServerConfig):
        self.config = config

        self._socket: Optional[socket.socket] = None
        self._running = False
        self._bound_address: Optional[Tuple[str, int]] = None

        self._ready_event = threading.Event()

        self._original_handlers: dict = {}

    @property
    def address(self) -> Tuple[str, int]:
        """The bound (host, port); the real port once bound with port 0."""
        return self._bound_address or (self.config.host, self.config.port)

    def _create_socket(self) -> socket.socket:
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)

        # Rebind immediately after a restart instead of waiting out TIME_WAIT
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)

        # Responses are written in one sendall(); don't let Nagle hold them back
        sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)

        sock.settimeout(1.0)
        return sock

    def _setup_signals(self):
        # signal.signal() only works on the main thread; tests run us elsewhere
        if threading.current_thread() is not threading.main_thread():
            return

        def shutdown_handler(signum, frame):
            logger.info(f"Received {signal.Signals(signum).name}, shutting down...")
            self.shutdown()

        for sig in (signal.SIGTERM, signal.SIGINT):
            self._original_handlers[sig] = signal.signal(sig, shutdown_handler)

    def _restore_signals(self):
        for sig, handler in self._original_handlers.items():
            signal.signal(sig, handler)
        self._original_handlers.clear()

    def start(self, connection_handler: Callable[[Connection], None]):
        """
        Bind, listen and accept until shutdown() is called.

        Raises:
            OSError: If the address can't be bound.
        """
        self._socket = self._create_socket()

        try:
            self._socket.bind((self.config.host, self.config.port))
        except OSError as e:
            logger.error(f"Failed to bind to {self.config.host}:{self.config.port}: {e}")
            self._socket.close()
            self._socket = None
            raise

        self._socket.listen(self.config.backlog)
        self._bound_address = self._socket.getsockname()[:2]

        self._running = True
        self._setup_signals()

        host, port = self._bound_address
        logger.info(f"Listening on {host}:{port}")
        self._ready_event.set()

        try:
            self._accept_loop(connection_handler)
        finally:
            self._cleanup()

    def _accept_loop(self, connection_handler: Callable[[Connection], None]):
        while self._running:
            try:
                client_socket, client_address = self._socket.accept()
            except socket.timeout:
                continue
            except OSError as e:
                if self._running:
                    logger.error(f"Accept error: {e}")
                break

            logger.debug(f"Accepted connection from {client_address[0]}:{client_address[1]}")

            conn = Connection(
                socket=client_socket,
                address=client_address,
                buffer_size=self.config.buffer_size,
                timeout=self.config.timeout,
                max_head_size=self.config.max_head_size,
                max_body_size=self.config.max_body_size,
                body_read_attempts=self.config.body_read_attempts,
                body_read_interval=self.config.body_read_interval,
            )

            try:
                connection_handler(conn)
            except Exception:
                # e.g. can't start a thread; drop this client, keep accepting
                logger.exception(f"[{conn.id}] Failed to dispatch connection")
                conn.close()

    def shutdown(self):
        """Stop accepting. Safe to call more than once and from any thread."""
        if self._running:
            logger.info("Shutting down acceptor...")
        self._running = False

    def _cleanup(self):
        self._restore_signals()

        if self._socket:
            try:
                self._socket.close()
            except OSError:
                pass
            self._socket = None

        self._running = False
        self._ready_event.clear()
        logger.info("Acceptor stopped")

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        """Block until the socket is listening. False on timeout."""
        return self._ready_event.wait(timeout)
