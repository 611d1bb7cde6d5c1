"""Salted one-way password hashing."""

import bcrypt

from aquapulse.domain.errors import InternalError

MAX_PASSWORD_BYTES = 72


class PasswordHasher:
    """bcrypt wrapper. Each call to ``hash`` draws a fresh salt."""

    def __init__(self, rounds: int = 12):
        self.rounds = rounds

    def hash(self, password: str) -> str:
        """
        Hash a plain text password.

        Args:
            password: Plain text password

        Returns:
            bcrypt hash including its salt
        """
        return bcrypt.hashpw(
            password.encode("utf-8"), bcrypt.gensalt(rounds=self.rounds)
        ).decode("utf-8")

    def verify(self, password: str, password_hash: str) -> bool:
        """
        Check a plain text password against a stored hash.

        Returns:
            True on match, False otherwise

        Raises:
            InternalError: If the stored hash is not a bcrypt hash
        """
        encoded = password.encode("utf-8")
        # bcrypt only ever hashed the first 72 bytes; longer input cannot match.
        if len(encoded) > MAX_PASSWORD_BYTES:
            return False
        try:
            return bcrypt.checkpw(encoded, password_hash.encode("utf-8"))
        except ValueError as exc:
            raise InternalError("Stored password hash is malformed") from exc
