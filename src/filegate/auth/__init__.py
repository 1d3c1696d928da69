"""
Authentication: who may log in, and who is logged in.

    credentials.py   CredentialValidator over a fixed user table
    sessions.py      SessionStore with sliding expiry, SessionSweeper
"""

from .credentials import CredentialValidator, DEFAULT_USERS
from .sessions import Session, SessionStore, SessionSweeper, DEFAULT_SESSION_TIMEOUT


__all__ = [
    "CredentialValidator",
    "DEFAULT_USERS",
    "Session",
    "SessionStore",
    "SessionSweeper",
    "DEFAULT_SESSION_TIMEOUT",
]
