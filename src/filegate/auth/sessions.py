"""
=============================================================================
SESSION STORE
=============================================================================

Maps opaque session tokens to logged-in users, with sliding expiration.

=============================================================================
SLIDING EXPIRATION
=============================================================================

Every successful lookup pushes the expiry forward, so a session only dies
after ``timeout`` seconds of *inactivity*:

    t=0      login          expires_at = 0 + 1800
    t=600    GET /docs/     expires_at = 600 + 1800
    t=1500   GET /api/stats expires_at = 1500 + 1800
    ...      (idle)
    t=3301   GET /          expired → entry removed, redirect to /login

Expired entries are removed lazily when someone looks them up. Sessions
nobody ever asks about again are swept by ``cleanup_expired()``, which the
server calls periodically from a background thread (see SessionSweeper).

=============================================================================
THREAD SAFETY
=============================================================================

Every connection runs on its own thread, so the store is shared. A single
lock covers create, lookup (including the lazy removal and the renewal),
remove and cleanup. The critical sections are a dict operation and a
couple of float assignments, so contention is negligible.

Lookups return a *copy* of the session; callers can read it freely
without holding the lock.

=============================================================================
"""

import logging
import secrets
import threading
import time
from dataclasses import dataclass, replace
from typing import Callable, Dict, Optional


logger = logging.getLogger(__name__)


DEFAULT_SESSION_TIMEOUT = 30 * 60  # seconds


@dataclass
class Session:
    """
    One logged-in user.

    Invariant: ``expires_at == last_accessed + timeout`` at all times.
    """

    token: str
    username: str
    created_at: float
    last_accessed: float
    expires_at: float

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at


class SessionStore:
    """
    Thread-safe token → Session map.

    Args:
        timeout: Idle lifetime of a session in seconds (default 30 minutes).
        clock: Returns "now" as a float timestamp. Tests inject a fake.
    """

    def __init__(
        self,
        timeout: float = DEFAULT_SESSION_TIMEOUT,
        clock: Callable[[], float] = time.time,
    ):
        self.timeout = timeout
        self._clock = clock
        self._sessions: Dict[str, Session] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    @staticmethod
    def generate_token() -> str:
        """128 random bits, hex encoded."""
        return secrets.token_hex(16)

    def create_session(self, username: str) -> Session:
        now = self._clock()
        session = Session(
            token=self.generate_token(),
            username=username,
            created_at=now,
            last_accessed=now,
            expires_at=now + self.timeout,
        )

        with self._lock:
            self._sessions[session.token] = session

        logger.info(f"Session created for {username}")
        return replace(session)

    def get_session(self, token: Optional[str]) -> Optional[Session]:
        """
        Look up a session and renew it.

        Returns None for a missing/empty token, an unknown token, or an
        expired session (which is removed as a side effect).
        """
        if not token:
            return None

        with self._lock:
            session = self._sessions.get(token)
            if session is None:
                return None

            now = self._clock()
            if session.is_expired(now):
                del self._sessions[token]
                logger.debug(f"Session for {session.username} expired")
                return None

            session.last_accessed = now
            session.expires_at = now + self.timeout
            return replace(session)

    def remove_session(self, token: Optional[str]) -> None:
        if not token:
            return
        with self._lock:
            session = self._sessions.pop(token, None)
        if session is not None:
            logger.info(f"Session removed for {session.username}")

    def cleanup_expired(self) -> int:
        """Drop every expired session. Returns how many were removed."""
        now = self._clock()
        with self._lock:
            expired = [
                token for token, session in self._sessions.items()
                if session.is_expired(now)
            ]
            for token in expired:
                del self._sessions[token]

        if expired:
            logger.debug(f"Cleaned up {len(expired)} expired session(s)")
        return len(expired)


class SessionSweeper:
    """
    Background thread calling ``store.cleanup_expired()`` every ``interval``.

        sweeper = SessionSweeper(store, interval=300)
        sweeper.start()
        ...
        sweeper.stop()
    """

    def __init__(self, store: SessionStore, interval: float = 300.0):
        self.store = store
        self.interval = interval
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def start(self) -> None:
        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._run,
            name="session-sweeper",
            daemon=True,
        )
        self._thread.start()

    def _run(self) -> None:
        # wait() returns True once stop() is called
        while not self._stop_event.wait(self.interval):
            try:
                self.store.cleanup_expired()
            except Exception:
                logger.exception("Session cleanup failed")

    def stop(self, timeout: float = 5.0) -> None:
        self._stop_event.set()
        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=timeout)
        self._thread = None
