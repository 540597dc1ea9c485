"""Authentication package."""

from hisaab.auth.service import (
    AuthenticationError,
    AuthenticationService,
    AuthSession,
    InvalidCredentialsError,
    NotAuthenticatedError,
    PlaintextAuthenticationService,
)

__all__ = [
    "AuthenticationError",
    "AuthenticationService",
    "AuthSession",
    "InvalidCredentialsError",
    "NotAuthenticatedError",
    "PlaintextAuthenticationService",
]
