"""Per-request authentication with silent access-token refresh.

The authenticator never touches the response itself. It reports whether a
new access token was minted and the HTTP layer decides how to hand it back.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Mapping, Optional, Tuple

from ...domain.errors import UnauthorizedError
from ...domain.models import Principal, TokenPayload
from ...services.token_codec import TokenExpired, TokenInvalid, TokenService
from .principal_resolver import PrincipalResolver

logger = logging.getLogger(__name__)

ACCESS_COOKIE = "access_token"
REFRESH_COOKIE = "refresh_token"
REFRESH_HEADER = "x-refresh-token"


class AuthState(str, enum.Enum):
    NO_TOKEN = "no_token"
    ACCESS_VALID = "access_valid"
    ACCESS_EXPIRED_REFRESH_VALID = "access_expired_refresh_valid"
    ACCESS_EXPIRED_REFRESH_INVALID = "access_expired_refresh_invalid"
    INVALID = "invalid"


@dataclass(slots=True)
class AuthenticatedRequest:
    principal: Principal
    principal_id: str
    email: str
    role: str
    new_token: Optional[str] = None
    new_token_issued: bool = False
    state: AuthState = AuthState.ACCESS_VALID


class RequestAuthenticator:
    def __init__(self, tokens: TokenService, resolver: PrincipalResolver) -> None:
        self._tokens = tokens
        self._resolver = resolver

    def authenticate(
        self, headers: Mapping[str, str], cookies: Mapping[str, str]
    ) -> AuthenticatedRequest:
        """
        Resolve the principal behind a request.

        Args:
            headers: Request headers (any key case)
            cookies: Request cookies

        Returns:
            AuthenticatedRequest, with ``new_token_issued`` set when the access
            token was replaced using the refresh token

        Raises:
            UnauthorizedError: When no usable credential is presented or the
                principal no longer exists
        """
        access_token, refresh_token = extract_tokens(headers, cookies)
        if not access_token and not refresh_token:
            raise UnauthorizedError("no token")

        payload, state = self._check_access(access_token)
        new_token: Optional[str] = None

        if payload is None:
            if not refresh_token:
                raise UnauthorizedError("invalid or expired access token")
            try:
                payload = self._tokens.verify_refresh(refresh_token)
            except (TokenInvalid, TokenExpired) as exc:
                logger.info("Refresh token rejected (%s): %s", state.value, exc)
                raise UnauthorizedError("invalid or expired refresh token") from exc
            new_token = self._tokens.issue_access(payload.principal_id, payload.email, payload.role)
            state = AuthState.ACCESS_EXPIRED_REFRESH_VALID

        principal = self._resolver.find_by_id(payload.principal_id)
        if principal is None:
            raise UnauthorizedError("user not found")

        return AuthenticatedRequest(
            principal=principal.strip_credentials(),
            principal_id=payload.principal_id,
            email=payload.email,
            role=payload.role,
            new_token=new_token,
            new_token_issued=new_token is not None,
            state=state,
        )

    def _check_access(self, token: Optional[str]) -> Tuple[Optional[TokenPayload], AuthState]:
        if not token:
            return None, AuthState.NO_TOKEN
        try:
            # Signature first, expiry second: an expired but genuine token
            # still routes to the refresh fallback.
            payload = self._tokens.decode_access(token, verify_expiry=False)
        except TokenInvalid:
            return None, AuthState.INVALID
        if self._tokens.is_expired(payload):
            return None, AuthState.ACCESS_EXPIRED_REFRESH_INVALID
        return payload, AuthState.ACCESS_VALID


def extract_tokens(
    headers: Mapping[str, str], cookies: Mapping[str, str]
) -> Tuple[Optional[str], Optional[str]]:
    """Return ``(access_token, refresh_token)`` from headers, falling back to cookies."""
    lowered = {key.lower(): value for key, value in headers.items()}
    access_token: Optional[str] = None
    authorization = lowered.get("authorization", "")
    scheme, _, credentials = authorization.partition(" ")
    if scheme.lower() == "bearer" and credentials.strip():
        access_token = credentials.strip()
    if not access_token:
        access_token = cookies.get(ACCESS_COOKIE) or None
    refresh_token = (lowered.get(REFRESH_HEADER) or "").strip() or cookies.get(REFRESH_COOKIE) or None
    return access_token, refresh_token
