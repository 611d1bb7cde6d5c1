"""Error taxonomy shared by the authentication core.

Every ``AuthError`` carries the HTTP status the presentation layer answers
with. Messages of the 4xx errors are safe to show to clients; ``InternalError``
messages are logged and replaced by a generic response.
"""

from typing import Optional


class AuthError(Exception):
    """Base class for expected authentication failures."""

    status_code = 400

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationError(AuthError):
    """Malformed input: bad email, short password, missing role field."""

    status_code = 400


class BadRequestError(AuthError):
    """Well-formed request that cannot be honoured (wrong code, wrong old password)."""

    status_code = 400


class UnauthorizedError(AuthError):
    """Missing, forged or expired credentials."""

    status_code = 401


class NotFoundError(AuthError):
    """No principal exists for the given email or id."""

    status_code = 404


class ConflictError(AuthError):
    """Email already registered in one of the credential stores."""

    status_code = 409


class InternalError(AuthError):
    """Store unavailable or corrupted data. Never exposed verbatim."""

    status_code = 500
