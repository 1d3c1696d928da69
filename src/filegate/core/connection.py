"""
=============================================================================
CONNECTION HANDLING
=============================================================================

Wraps one accepted client socket: read one request, write one response,
close. FileGate never keeps a connection open for a second exchange.

=============================================================================
TCP IS A BYTE STREAM
=============================================================================

TCP keeps bytes in order but does not keep message boundaries. A request
sent in one ``send()`` can arrive over several ``recv()`` calls, and the
head and the start of the body often arrive together:

    recv() #1  →  b"POST /login HTTP/1.1\\r\\nContent-Le"
    recv() #2  →  b"ngth: 33\\r\\n\\r\\nusername=ad"
    recv() #3  →  b"min&password=admin123"

So reading happens in two steps:

    ┌──────────────────────────────────────────────────────────────────────┐
    │  read_head()                                                         │
    │    recv until \\r\\n\\r\\n, EOF, or the head size cap                    │
    │    bytes after the blank line stay buffered as the start of the body │
    │                                                                      │
    │  read_body(content_length)                                           │
    │    use the buffered bytes, then recv the rest                        │
    │    each idle recv waits at most body_read_interval seconds           │
    │    after body_read_attempts idle waits → BodyReadTimeout             │
    │    content_length above max_body_size → BodyTooLarge                 │
    └──────────────────────────────────────────────────────────────────────┘

The body budget is bounded on purpose: a client that announces 10 MB and
sends 10 bytes must not pin a worker thread for the full socket timeout.

=============================================================================
CLOSING
=============================================================================

    shutdown(SHUT_WR)   send FIN, tell the client we're done
    drain recv()        swallow anything still in flight
    close()             release the file descriptor

Used as a context manager the connection always ends up closed:

    with conn:
        head = conn.read_head()
        ...
        conn.send_response(response_bytes)

=============================================================================
"""

import logging
import socket
import time
import uuid
from dataclasses import dataclass, field
from typing import Optional


logger = logging.getLogger(__name__)


HEAD_TERMINATOR = b"\r\n\r\n"


class BodyReadError(Exception):
    """The request body could not be read completely."""


class BodyTooLarge(BodyReadError):
    """Content-Length is above the configured body limit."""


class BodyReadTimeout(BodyReadError):
    """The client stopped sending before Content-Length bytes arrived."""


@dataclass
class Connection:
    """
    One client connection.

    Attributes:
        socket: The accepted client socket.
        address: Client (ip, port).
        id: Short random id used to correlate log lines.
        created_at: Accept timestamp.
    """

    socket: socket.socket
    address: tuple[str, int]

    id: str = field(default_factory=lambda: uuid.uuid4().hex[:8])
    created_at: float = field(default_factory=time.time)

    # Limits, copied from ServerConfig by the acceptor
    buffer_size: int = 8192
    timeout: Optional[float] = 30.0
    max_head_size: int = 8192
    max_body_size: int = 10 * 1024 * 1024
    body_read_attempts: int = 30
    body_read_interval: float = 0.1

    _buffer: bytes = field(default=b"", repr=False)
    _closed: bool = field(default=False, repr=False)

    def __post_init__(self):
        self.socket.setblocking(True)
        if self.timeout:
            self.socket.settimeout(self.timeout)

    @property
    def client_ip(self) -> str:
        return self.address[0]

    @property
    def age(self) -> float:
        return time.time() - self.created_at

    # =========================================================================
    # READING
    # =========================================================================

    def read_head(self) -> Optional[bytes]:
        """
        Read the request head (request line and headers).

        Returns:
            The head including the terminating blank line. When the client
            stops early or the head outgrows ``max_head_size``, whatever was
            received is returned so the parser can reject it. None if the
            client closed without sending anything.
        """
        try:
            while HEAD_TERMINATOR not in self._buffer:
                chunk = self._recv()
                if not chunk:
                    break

                self._buffer += chunk

                if len(self._buffer) > self.max_head_size and HEAD_TERMINATOR not in self._buffer:
                    logger.debug(f"[{self.id}] Head exceeds {self.max_head_size} bytes")
                    break
        except socket.timeout:
            logger.debug(f"[{self.id}] Timed out waiting for request head")

        if not self._buffer:
            return None

        end = self._buffer.find(HEAD_TERMINATOR)
        if end == -1:
            head, self._buffer = self._buffer, b""
            return head

        split_at = end + len(HEAD_TERMINATOR)
        head, self._buffer = self._buffer[:split_at], self._buffer[split_at:]
        return head

    def read_body(self, content_length: int) -> bytes:
        """
        Read exactly ``content_length`` body bytes.

        Raises:
            BodyTooLarge: If ``content_length`` exceeds ``max_body_size``.
            BodyReadTimeout: If the retry budget runs out or the client
                closes the connection before the body is complete.
        """
        if content_length <= 0:
            return b""

        if content_length > self.max_body_size:
            raise BodyTooLarge(
                f"body of {content_length} bytes exceeds limit of {self.max_body_size}"
            )

        body = self._buffer
        self._buffer = b""
        idle_attempts = 0

        self.socket.settimeout(self.body_read_interval)
        try:
            while len(body) < content_length:
                try:
                    chunk = self._recv()
                except socket.timeout:
                    idle_attempts += 1
                    if idle_attempts >= self.body_read_attempts:
                        raise BodyReadTimeout(
                            f"received {len(body)} of {content_length} body bytes "
                            f"after {idle_attempts} attempts"
                        )
                    continue

                if not chunk:
                    raise BodyReadTimeout(
                        f"connection closed after {len(body)} of {content_length} body bytes"
                    )
                body += chunk
        finally:
            self.socket.settimeout(self.timeout)

        return body[:content_length]

    def _recv(self) -> bytes:
        """recv() that reports a reset peer as EOF."""
        try:
            return self.socket.recv(self.buffer_size)
        except (ConnectionResetError, BrokenPipeError):
            return b""

    # =========================================================================
    # WRITING
    # =========================================================================

    def send_response(self, data: bytes) -> bool:
        """
        Send the full response.

        Returns:
            True if everything was sent, False if the client went away.
        """
        try:
            self.socket.sendall(data)
            return True
        except OSError as e:
            logger.warning(f"[{self.id}] Send failed: {e}")
            return False

    # =========================================================================
    # CLOSING
    # =========================================================================

    def close(self):
        if self._closed:
            return
        self._closed = True

        try:
            self.socket.shutdown(socket.SHUT_WR)
        except OSError:
            pass  # peer already gone

        try:
            self.socket.settimeout(0.5)
            while self.socket.recv(1024):
                pass
        except OSError:
            pass

        try:
            self.socket.close()
        except OSError:
            pass

        logger.debug(f"[{self.id}] Connection closed after {self.age:.3f}s")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
