"""
Unit tests for the session store and credential validator.
"""

import threading

import pytest

from filegate.auth.credentials import CredentialValidator
from filegate.auth.sessions import SessionStore, SessionSweeper


class FakeClock:
    """Manually advanced clock."""

    def __init__(self, now: float = 1_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store(clock: FakeClock) -> SessionStore:
    return SessionStore(timeout=1800, clock=clock)


class TestSessionStore:
    """Tests for SessionStore."""

    def test_create_session(self, store: SessionStore, clock: FakeClock):
        session = store.create_session("admin")

        assert session.username == "admin"
        assert session.created_at == clock.now
        assert session.last_accessed == clock.now
        assert session.expires_at == clock.now + 1800
        assert len(store) == 1

    def test_tokens_are_unique_and_long(self, store: SessionStore):
        tokens = {store.create_session("admin").token for _ in range(100)}

        assert len(tokens) == 100
        assert all(len(token) == 32 for token in tokens)

    def test_get_session(self, store: SessionStore):
        created = store.create_session("admin")
        found = store.get_session(created.token)

        assert found is not None
        assert found.username == "admin"
        assert found.token == created.token

    @pytest.mark.parametrize("token", [None, "", "unknown"])
    def test_get_missing(self, store: SessionStore, token):
        assert store.get_session(token) is None

    def test_lookup_slides_expiration(self, store: SessionStore, clock: FakeClock):
        """Each lookup moves expiry to now + timeout."""
        session = store.create_session("admin")

        clock.advance(600)
        renewed = store.get_session(session.token)

        assert renewed.last_accessed == clock.now
        assert renewed.expires_at == clock.now + 1800
        assert renewed.expires_at > session.expires_at

    def test_back_to_back_lookups_never_shrink_expiry(self, store: SessionStore, clock: FakeClock):
        token = store.create_session("admin").token

        first = store.get_session(token)
        second = store.get_session(token)
        assert second.expires_at >= first.expires_at

    def test_activity_keeps_session_alive(self, store: SessionStore, clock: FakeClock):
        """A session used every 20 minutes outlives the 30 minute timeout."""
        token = store.create_session("admin").token

        for _ in range(5):
            clock.advance(1200)
            assert store.get_session(token) is not None

    def test_expired_session_removed(self, store: SessionStore, clock: FakeClock):
        token = store.create_session("admin").token

        clock.advance(1800)

        assert store.get_session(token) is None
        assert len(store) == 0
        assert store.get_session(token) is None

    def test_returned_session_is_a_copy(self, store: SessionStore, clock: FakeClock):
        """Mutating a returned session doesn't touch the stored one."""
        session = store.create_session("admin")
        session.expires_at = 0

        assert store.get_session(session.token) is not None

    def test_remove_session(self, store: SessionStore):
        token = store.create_session("admin").token

        store.remove_session(token)

        assert store.get_session(token) is None

    def test_remove_unknown_is_noop(self, store: SessionStore):
        store.create_session("admin")

        store.remove_session("nope")
        store.remove_session(None)

        assert len(store) == 1

    def test_cleanup_expired(self, store: SessionStore, clock: FakeClock):
        old = store.create_session("old").token
        clock.advance(1000)
        fresh = store.create_session("fresh").token
        clock.advance(1000)

        removed = store.cleanup_expired()

        assert removed == 1
        assert store.get_session(old) is None
        assert store.get_session(fresh) is not None

    def test_concurrent_access(self):
        """Creates, lookups and removals from many threads stay consistent."""
        store = SessionStore()
        errors = []

        def worker():
            try:
                for _ in range(200):
                    session = store.create_session("user")
                    assert store.get_session(session.token) is not None
                    store.remove_session(session.token)
                    store.cleanup_expired()
            except Exception as e:  # surfaced via the errors list
                errors.append(e)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert errors == []
        assert len(store) == 0


class TestSessionSweeper:
    """Tests for the background sweeper."""

    def test_sweeps_expired_sessions(self, store: SessionStore, clock: FakeClock):
        store.create_session("admin")
        clock.advance(3600)

        sweeper = SessionSweeper(store, interval=0.05)
        sweeper.start()
        try:
            for _ in range(100):
                if len(store) == 0:
                    break
                threading.Event().wait(0.02)
        finally:
            sweeper.stop()

        assert len(store) == 0


class TestCredentialValidator:
    """Tests for CredentialValidator."""

    @pytest.mark.parametrize("username,password", [
        ("admin", "admin123"),
        ("user", "password123"),
        ("test", "test123"),
        ("ADMIN", "admin123"),
    ])
    def test_default_users(self, username, password):
        assert CredentialValidator().validate(username, password)

    @pytest.mark.parametrize("username,password", [
        ("admin", "ADMIN123"),
        ("admin", "wrong"),
        ("nobody", "admin123"),
        ("", "admin123"),
        ("   ", "admin123"),
        ("admin", ""),
        ("admin", "   "),
        (None, None),
    ])
    def test_rejected(self, username, password):
        assert not CredentialValidator().validate(username, password)

    def test_custom_table(self):
        validator = CredentialValidator({"Alice": "s3cret"})

        assert validator.validate("alice", "s3cret")
        assert not validator.validate("admin", "admin123")

    def test_user_exists(self):
        validator = CredentialValidator()

        assert validator.user_exists("Admin")
        assert not validator.user_exists("ghost")
        assert not validator.user_exists("")
