"""
Authentication

DESIGN DECISION: The first login with an unknown username registers it.
There is no separate sign-up step. This is deliberate for a tool installed
on one shop's machine, and it is isolated behind AuthenticationService so
a hashed-password implementation can replace it without touching pricing,
storage or the editor.
"""

from abc import ABC, abstractmethod
from typing import Optional

import structlog

from hisaab.models.invoice import SessionUser, User
from hisaab.services.storage import UserStorageInterface


logger = structlog.get_logger(__name__)


class AuthenticationError(Exception):
    """Base exception for authentication."""
    pass


class InvalidCredentialsError(AuthenticationError):
    """Password did not match the stored one for an existing username."""
    pass


class NotAuthenticatedError(AuthenticationError):
    """An operation needed a logged-in user and there was none."""
    pass


class AuthenticationService(ABC):
    """Checks a username/password pair."""

    @abstractmethod
    def validate_or_register_user(self, username: str, password: str) -> bool:
        """
        Check credentials, registering unknown usernames.

        Returns:
            True if the user may log in
        """
        pass


class PlaintextAuthenticationService(AuthenticationService):
    """
    Exact, case-sensitive comparison against stored plain-text passwords.

    Unknown usernames are created with the given password and accepted.
    """

    def __init__(self, user_storage: UserStorageInterface):
        self._users = user_storage

    def validate_or_register_user(self, username: str, password: str) -> bool:
        username = username.strip()
        if not username or not password:
            return False

        existing = self._users.get_user(username)
        if existing is not None:
            valid = existing.password == password
            if not valid:
                logger.info("login_rejected", username=username)
            return valid

        self._users.add_user(User(username=username, password=password))
        logger.info("user_registered", username=username)
        return True


class AuthSession:
    """
    The logged-in user for one UI session.

    Logging out just forgets the user; nothing is persisted.
    """

    def __init__(self, auth_service: AuthenticationService):
        self._auth = auth_service
        self._user: Optional[SessionUser] = None

    @property
    def current_user(self) -> Optional[SessionUser]:
        return self._user

    @property
    def is_authenticated(self) -> bool:
        return self._user is not None

    def login(self, username: str, password: str) -> SessionUser:
        """
        Log in (or register on first use).

        Raises:
            InvalidCredentialsError: If the password does not match
        """
        if not self._auth.validate_or_register_user(username, password):
            raise InvalidCredentialsError("Invalid username or password")
        self._user = SessionUser(username=username.strip())
        return self._user

    def logout(self) -> None:
        self._user = None

    def require_user(self) -> SessionUser:
        if self._user is None:
            raise NotAuthenticatedError("Please log in first")
        return self._user
