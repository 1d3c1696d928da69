"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

Every tunable of FileGate in one dataclass.

=============================================================================
CONFIGURATION SOURCES
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │   Priority (highest to lowest):                                     │
    │                                                                     │
    │   1. Command-line arguments                                         │
    │      └── python -m filegate --port 3000 --root ./site               │
    │                                                                     │
    │   2. Environment variables                                          │
    │      └── FILEGATE_PORT=3000 python -m filegate                      │
    │                                                                     │
    │   3. Default values (in this dataclass)                             │
    └─────────────────────────────────────────────────────────────────────┘

``validate()`` is called before the listening socket is opened, so a typo
in the root directory fails at startup instead of on the first request.

=============================================================================
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional


LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
LOG_FORMATS = ("text", "json")


@dataclass
class ServerConfig:
    """
    Configuration for the file server.

    =========================================================================
    CONFIGURATION GROUPS
    =========================================================================

    NETWORK          host, port, backlog, buffer_size, timeout
    CONTENT          root_dir
    REQUEST LIMITS   max_head_size, max_body_size, max_file_size,
                     body_read_attempts, body_read_interval
    SESSIONS         session_timeout, session_cleanup_interval
    LOGGING          log_level, log_format
    IDENTITY         server_name

    =========================================================================
    """

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK
    # ─────────────────────────────────────────────────────────────────────

    host: str = "127.0.0.1"
    """Address to bind. "0.0.0.0" exposes the server on every interface."""

    port: int = 8080
    """Port to listen on. 0 lets the OS pick a free one (handy in tests)."""

    backlog: int = 128
    """Queued connections the kernel holds before refusing new ones."""

    buffer_size: int = 8192
    """Bytes requested per recv() call."""

    timeout: Optional[float] = 30.0
    """Socket timeout for reading the head and writing the response."""

    # ─────────────────────────────────────────────────────────────────────
    # CONTENT
    # ─────────────────────────────────────────────────────────────────────

    root_dir: str = "./wwwroot"
    """
    Directory served to logged-in users. Nothing outside of it is ever
    read, whatever the request path says.
    """

    # ─────────────────────────────────────────────────────────────────────
    # REQUEST LIMITS
    # ─────────────────────────────────────────────────────────────────────

    max_head_size: int = 8192
    """Request line plus headers. Larger heads get 400 Bad Request."""

    max_body_size: int = 10 * 1024 * 1024
    """Request bodies announcing more than this are refused."""

    max_file_size: int = 100 * 1024 * 1024
    """Files above this size are answered with 413 instead of being read."""

    body_read_attempts: int = 30
    """Idle waits allowed while the rest of a body trickles in."""

    body_read_interval: float = 0.1
    """Length of one idle wait in seconds."""

    # ─────────────────────────────────────────────────────────────────────
    # SESSIONS
    # ─────────────────────────────────────────────────────────────────────

    session_timeout: float = 30 * 60
    """Seconds of inactivity after which a session expires."""

    session_cleanup_interval: float = 5 * 60
    """How often the background sweeper purges expired sessions."""

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"
    """DEBUG, INFO, WARNING, ERROR or CRITICAL."""

    log_format: str = "text"
    """Access log format: 'text' (combined-log style) or 'json'."""

    # ─────────────────────────────────────────────────────────────────────
    # IDENTITY
    # ─────────────────────────────────────────────────────────────────────

    server_name: str = "FileGate/1.0"
    """Value of the Server response header."""

    @property
    def root_path(self) -> Path:
        """The root directory, absolute and with symlinks resolved."""
        return Path(self.root_dir).resolve()

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """
        Build a configuration from environment variables.

            FILEGATE_HOST               bind address        (127.0.0.1)
            FILEGATE_PORT               port                (8080)
            FILEGATE_ROOT               served directory    (./wwwroot)
            FILEGATE_TIMEOUT            socket timeout      (30)
            FILEGATE_MAX_FILE_SIZE      413 threshold       (104857600)
            FILEGATE_SESSION_TIMEOUT    session idle life   (1800)
            FILEGATE_LOG_LEVEL          logging level       (INFO)
            FILEGATE_LOG_FORMAT         text | json         (text)
        """
        defaults = cls()
        return cls(
            host=os.getenv("FILEGATE_HOST", defaults.host),
            port=int(os.getenv("FILEGATE_PORT", str(defaults.port))),
            root_dir=os.getenv("FILEGATE_ROOT", defaults.root_dir),
            timeout=float(os.getenv("FILEGATE_TIMEOUT", str(defaults.timeout))),
            max_file_size=int(os.getenv("FILEGATE_MAX_FILE_SIZE", str(defaults.max_file_size))),
            session_timeout=float(
                os.getenv("FILEGATE_SESSION_TIMEOUT", str(defaults.session_timeout))
            ),
            log_level=os.getenv("FILEGATE_LOG_LEVEL", defaults.log_level),
            log_format=os.getenv("FILEGATE_LOG_FORMAT", defaults.log_format),
        )

    def validate(self) -> None:
        """
        Check the configuration, raising ValueError on the first problem.
        """
        if not 0 <= self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}. Must be 0-65535.")

        if self.backlog < 1:
            raise ValueError(f"backlog must be at least 1, got {self.backlog}")

        for name in ("buffer_size", "max_head_size", "max_body_size", "max_file_size",
                     "body_read_attempts"):
            if getattr(self, name) < 1:
                raise ValueError(f"{name} must be positive, got {getattr(self, name)}")

        if self.body_read_interval <= 0:
            raise ValueError(f"body_read_interval must be positive, got {self.body_read_interval}")

        if self.session_timeout <= 0 or self.session_cleanup_interval <= 0:
            raise ValueError("session_timeout and session_cleanup_interval must be positive")

        if self.log_level.upper() not in LOG_LEVELS:
            raise ValueError(f"Invalid log level: {self.log_level}")

        if self.log_format not in LOG_FORMATS:
            raise ValueError(f"Invalid log format: {self.log_format}. Use 'text' or 'json'.")

        root = Path(self.root_dir)
        if not root.exists():
            raise ValueError(f"Root directory does not exist: {self.root_dir}")
        if not root.is_dir():
            raise ValueError(f"Root path is not a directory: {self.root_dir}")
