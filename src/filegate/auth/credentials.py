"""
Username/password checks against a fixed in-memory table.

This is a demo trust boundary: passwords are plaintext and the table never
changes while the process runs. Usernames match case-insensitively,
passwords exactly.
"""

import logging
from typing import Mapping, Optional


logger = logging.getLogger(__name__)


DEFAULT_USERS = {
    "admin": "admin123",
    "user": "password123",
    "test": "test123",
}


class CredentialValidator:
    """
    Validates login attempts.

        validator = CredentialValidator()
        validator.validate("ADMIN", "admin123")   # True
        validator.validate("admin", "ADMIN123")   # False
    """

    def __init__(self, users: Optional[Mapping[str, str]] = None):
        source = DEFAULT_USERS if users is None else users
        self._users = {name.lower(): password for name, password in source.items()}

    @property
    def usernames(self) -> list[str]:
        return sorted(self._users)

    def validate(self, username: Optional[str], password: Optional[str]) -> bool:
        """False for blank input, unknown users and wrong passwords."""
        if not username or not username.strip():
            return False
        if not password or not password.strip():
            return False

        expected = self._users.get(username.lower())
        if expected is None:
            logger.debug(f"Login attempt for unknown user {username!r}")
            return False
        return password == expected

    def user_exists(self, username: Optional[str]) -> bool:
        if not username:
            return False
        return username.lower() in self._users
