"""Signed bearer tokens for access and refresh.

``TokenCodec`` signs and decodes HS256 JWTs. Expiry is always checked by the
codec itself against an injectable clock so callers can decode a token with
expiry ignored and decide afterwards: the request authenticator relies on
that to tell "needs refresh" apart from "garbage".

``TokenService`` binds the codec to the two token categories. Access and
refresh tokens use distinct secrets and are tagged with their category, so
one can never stand in for the other.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, Optional

import jwt

from ..domain.models import ACCESS_TOKEN, REFRESH_TOKEN, TokenPayload
from .token_denylist import TokenDenylist

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]

_DEFAULT_SECRET = "change-me"


def utc_now() -> datetime:
    return datetime.now(tz=timezone.utc)


class TokenInvalid(Exception):
    """Signature mismatch, malformed token, wrong category or revoked."""


class TokenExpired(Exception):
    """Cryptographically valid token whose expiry has elapsed."""

    def __init__(self, payload: TokenPayload) -> None:
        super().__init__("Token has expired")
        self.payload = payload


class TokenCodec:
    def __init__(self, algorithm: str = "HS256", clock: Optional[Clock] = None) -> None:
        self._algorithm = algorithm
        self._clock = clock or utc_now

    def sign(self, payload: TokenPayload, secret: str, ttl: timedelta) -> str:
        now = self._clock()
        claims: Dict[str, Any] = {
            "sub": payload.principal_id,
            "email": payload.email,
            "role": payload.role,
            "token_type": payload.token_type,
            "iat": int(now.timestamp()),
            "exp": int((now + ttl).timestamp()),
        }
        return jwt.encode(claims, secret, algorithm=self._algorithm)

    def verify(self, token: str, secret: str, *, verify_expiry: bool = True) -> TokenPayload:
        if not token:
            raise TokenInvalid("Token is empty")
        try:
            claims = jwt.decode(
                token,
                secret,
                algorithms=[self._algorithm],
                # Time-based claims are checked below against our own clock.
                options={
                    "verify_exp": False,
                    "verify_iat": False,
                    "verify_nbf": False,
                    "require": ["sub", "exp"],
                },
            )
        except jwt.InvalidTokenError as exc:
            raise TokenInvalid(str(exc)) from exc

        payload = self._to_payload(claims)
        if verify_expiry and self.is_expired(payload):
            raise TokenExpired(payload)
        return payload

    def is_expired(self, payload: TokenPayload) -> bool:
        return payload.expires_at is None or payload.expires_at <= self._clock()

    @staticmethod
    def _to_payload(claims: Dict[str, Any]) -> TokenPayload:
        try:
            expires_at = datetime.fromtimestamp(int(claims["exp"]), tz=timezone.utc)
            issued_at = (
                datetime.fromtimestamp(int(claims["iat"]), tz=timezone.utc)
                if claims.get("iat") is not None
                else None
            )
        except (TypeError, ValueError, OverflowError) as exc:
            raise TokenInvalid("Token carries malformed timestamps") from exc
        return TokenPayload(
            principal_id=str(claims["sub"]),
            email=str(claims.get("email", "")),
            role=str(claims.get("role", "")),
            token_type=str(claims.get("token_type", ACCESS_TOKEN)),
            issued_at=issued_at,
            expires_at=expires_at,
        )


class TokenService:
    """Issues and checks the access/refresh token pair."""

    def __init__(
        self,
        access_secret: str,
        refresh_secret: str,
        *,
        access_ttl: timedelta = timedelta(hours=1),
        refresh_ttl: timedelta = timedelta(days=7),
        algorithm: str = "HS256",
        clock: Optional[Clock] = None,
        denylist: Optional[TokenDenylist] = None,
    ) -> None:
        if not access_secret or not refresh_secret:
            raise RuntimeError("JWT_SECRET and JWT_REFRESH_SECRET must be configured.")
        if _DEFAULT_SECRET in (access_secret, refresh_secret):
            logger.warning(
                "JWT secrets are using the default value. Configure strong secrets in production."
            )
        if access_secret == refresh_secret:
            logger.warning("JWT_SECRET and JWT_REFRESH_SECRET are identical; use distinct secrets.")
        self._access_secret = access_secret
        self._refresh_secret = refresh_secret
        self.access_ttl = access_ttl
        self.refresh_ttl = refresh_ttl
        self._codec = TokenCodec(algorithm=algorithm, clock=clock)
        self._denylist = denylist

    # ------------------------------------------------------------------
    def issue_access(self, principal_id: str, email: str, role: str) -> str:
        payload = TokenPayload(principal_id=principal_id, email=email, role=role)
        return self._codec.sign(payload, self._access_secret, self.access_ttl)

    def issue_refresh(self, principal_id: str, email: str, role: str) -> str:
        payload = TokenPayload(
            principal_id=principal_id, email=email, role=role, token_type=REFRESH_TOKEN
        )
        return self._codec.sign(payload, self._refresh_secret, self.refresh_ttl)

    def decode_access(self, token: str, *, verify_expiry: bool = True) -> TokenPayload:
        return self._decode(token, self._access_secret, ACCESS_TOKEN, verify_expiry)

    def verify_refresh(self, token: str) -> TokenPayload:
        return self._decode(token, self._refresh_secret, REFRESH_TOKEN, True)

    def is_expired(self, payload: TokenPayload) -> bool:
        return self._codec.is_expired(payload)

    def revoke(self, token: Optional[str], *, refresh: bool = False) -> bool:
        """Denylist a token until its natural expiry. Returns False if nothing was revoked."""
        if self._denylist is None or not token:
            return False
        secret = self._refresh_secret if refresh else self._access_secret
        try:
            payload = self._codec.verify(token, secret, verify_expiry=False)
        except TokenInvalid:
            logger.debug("Ignoring revocation of an undecodable token")
            return False
        if payload.expires_at is None:
            return False
        self._denylist.add(token, payload.expires_at)
        return True

    def _decode(
        self, token: str, secret: str, expected_type: str, verify_expiry: bool
    ) -> TokenPayload:
        payload = self._codec.verify(token, secret, verify_expiry=verify_expiry)
        if payload.token_type != expected_type:
            raise TokenInvalid(f"Expected a {expected_type} token")
        if self._denylist is not None and token in self._denylist:
            raise TokenInvalid("Token has been revoked")
        return payload
