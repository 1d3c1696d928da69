"""
pytest configuration and fixtures.
"""

import socket
import threading
import time
from typing import Callable, Generator, Iterable, Union
import pytest

# Add src to path for imports
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from filegate import FileServer, ServerConfig
from filegate.auth import CredentialValidator, SessionStore
from filegate.core import ServerStats
from filegate.handlers import RequestHandler
from filegate.http import HTTPResponse, parse_response


@pytest.fixture
def sample_get_request() -> bytes:
    """Sample HTTP GET request with a session cookie."""
    return (
        b"GET /docs/My%20Notes.txt?download=1 HTTP/1.1\r\n"
        b"Host: localhost:8080\r\n"
        b"User-Agent: pytest\r\n"
        b"Cookie: sessionId=abc123; Theme=dark\r\n"
        b"\r\n"
    )


def build_request(
    method: str,
    path: str,
    body: bytes = b"",
    cookie: str = None,
    form: bool = True,
) -> bytes:
    """Raw request bytes; body requests get a matching Content-Length."""
    lines = [f"{method} {path} HTTP/1.1", "Host: localhost"]
    if cookie:
        lines.append(f"Cookie: {cookie}")
    if body:
        if form:
            lines.append("Content-Type: application/x-www-form-urlencoded")
        lines.append(f"Content-Length: {len(body)}")
    return ("\r\n".join(lines) + "\r\n\r\n").encode() + body


@pytest.fixture
def make_request():
    """Factory fixture wrapping build_request()."""
    return build_request


@pytest.fixture
def root_dir(tmp_path: Path) -> Path:
    """
    A served root:

        index.html
        a.txt          (5000 bytes)
        style.css
        sub/
            nested.txt
    """
    root = tmp_path / "wwwroot"
    root.mkdir()
    (root / "index.html").write_text("<h1>Welcome</h1>")
    (root / "a.txt").write_bytes(b"x" * 5000)
    (root / "style.css").write_text("body { color: red; }")
    (root / "sub").mkdir()
    (root / "sub" / "nested.txt").write_text("nested")

    # Something just outside the root that traversal attempts go after
    (tmp_path / "secret.txt").write_text("top secret")
    return root


@pytest.fixture
def sessions() -> SessionStore:
    return SessionStore()


@pytest.fixture
def stats(root_dir: Path) -> ServerStats:
    return ServerStats(root_directory=str(root_dir))


@pytest.fixture
def handler(root_dir: Path, sessions: SessionStore, stats: ServerStats) -> RequestHandler:
    """RequestHandler wired to the test root, without any sockets."""
    return RequestHandler(
        root_dir=root_dir,
        sessions=sessions,
        credentials=CredentialValidator(),
        stats=stats,
    )


@pytest.fixture
def free_port() -> int:
    """Get a free port for testing."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(('127.0.0.1', 0))
        return s.getsockname()[1]


def exchange(
    port: int,
    data: Union[bytes, Iterable[bytes]],
    delay: float = 0.0,
    timeout: float = 5.0,
) -> bytes:
    """
    Send raw bytes to the server and read until it closes the connection.

    ``data`` may be a list of chunks, sent ``delay`` seconds apart, to
    exercise split reads on the server side.
    """
    chunks = [data] if isinstance(data, bytes) else list(data)

    with socket.create_connection(("127.0.0.1", port), timeout=timeout) as s:
        for i, chunk in enumerate(chunks):
            if i and delay:
                time.sleep(delay)
            s.sendall(chunk)

        received = b""
        while True:
            part = s.recv(65536)
            if not part:
                break
            received += part
    return received


class TestServer:
    """Test server helper that runs in a background thread."""

    def __init__(self, server: FileServer):
        self.server = server
        self._thread: threading.Thread = None

    @property
    def port(self) -> int:
        return self.server.address[1]

    def start(self):
        """Start server in background thread."""
        self._thread = threading.Thread(target=self.server.run, daemon=True)
        self._thread.start()

        if not self.server.wait_until_ready(timeout=5.0):
            raise RuntimeError("Server failed to start")

    def request(self, data: Union[bytes, Iterable[bytes]], delay: float = 0.0) -> HTTPResponse:
        return parse_response(exchange(self.port, data, delay=delay))

    def stop(self):
        """Stop the server."""
        self.server.stop()

        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=5.0)


@pytest.fixture
def server_factory(root_dir: Path) -> Generator[Callable[..., TestServer], None, None]:
    """
    Start FileServers on OS-assigned ports serving ``root_dir``.

    Keyword arguments override the test ServerConfig. Every server started
    through the factory is stopped at teardown.
    """
    started = []

    def start(**overrides) -> TestServer:
        settings = dict(
            host="127.0.0.1",
            port=0,
            root_dir=str(root_dir),
            timeout=5.0,
            body_read_attempts=5,
            body_read_interval=0.1,
            log_level="WARNING",
        )
        settings.update(overrides)

        test_srv = TestServer(FileServer(ServerConfig(**settings)))
        test_srv.start()
        started.append(test_srv)
        return test_srv

    yield start

    for test_srv in started:
        test_srv.stop()


@pytest.fixture
def test_server(server_factory) -> TestServer:
    """A FileServer with the default test configuration."""
    return server_factory()
