"""Tests for per-request authentication and silent refresh."""

from __future__ import annotations

from typing import Dict, Tuple

import pytest

from aquapulse.application.services.request_authenticator import (
    AuthState,
    RequestAuthenticator,
    extract_tokens,
)
from aquapulse.domain.errors import UnauthorizedError
from aquapulse.domain.models import Principal, SupplierAccount, UserAccount
from aquapulse.infrastructure.repositories.supplier_repository import SupplierRepository
from aquapulse.infrastructure.repositories.user_repository import UserRepository
from aquapulse.services.token_codec import TokenService

from .conftest import FakeClock

NO_COOKIES: Dict[str, str] = {}


@pytest.fixture
def customer(users: UserRepository) -> UserAccount:
    return users.create("a@x.com", "stored-hash", role="customer")


@pytest.fixture
def supplier(suppliers: SupplierRepository) -> SupplierAccount:
    return suppliers.create("s@x.com", "stored-hash", company="Agua Pura")


def _pair(tokens: TokenService, account: Principal) -> Tuple[str, str]:
    identity = (account.id, account.email, account.role)
    return tokens.issue_access(*identity), tokens.issue_refresh(*identity)


class TestExtractTokens:
    def test_header_preferred_over_cookie(self) -> None:
        access, refresh = extract_tokens(
            {"Authorization": "Bearer header-token", "X-Refresh-Token": "header-refresh"},
            {"access_token": "cookie-token", "refresh_token": "cookie-refresh"},
        )
        assert (access, refresh) == ("header-token", "header-refresh")

    def test_cookie_fallback(self) -> None:
        access, refresh = extract_tokens(
            {"authorization": "Basic dXNlcjpwYXNz"},
            {"access_token": "cookie-token", "refresh_token": "cookie-refresh"},
        )
        assert (access, refresh) == ("cookie-token", "cookie-refresh")

    def test_nothing_presented(self) -> None:
        assert extract_tokens({"authorization": "Bearer "}, NO_COOKIES) == (None, None)


class TestRequestAuthenticator:
    def test_no_token(self, authenticator: RequestAuthenticator) -> None:
        with pytest.raises(UnauthorizedError) as excinfo:
            authenticator.authenticate({}, NO_COOKIES)
        assert excinfo.value.message == "no token"
        assert excinfo.value.status_code == 401

    def test_valid_access_token_mints_nothing(
        self,
        authenticator: RequestAuthenticator,
        token_service: TokenService,
        customer: UserAccount,
    ) -> None:
        access, _ = _pair(token_service, customer)

        result = authenticator.authenticate({"Authorization": f"Bearer {access}"}, NO_COOKIES)

        assert result.state is AuthState.ACCESS_VALID
        assert result.principal_id == customer.id
        assert result.role == "customer"
        assert result.principal.password_hash is None
        assert not result.new_token_issued
        assert result.new_token is None

    def test_access_cookie_for_supplier(
        self,
        authenticator: RequestAuthenticator,
        token_service: TokenService,
        supplier: SupplierAccount,
    ) -> None:
        access, _ = _pair(token_service, supplier)

        result = authenticator.authenticate({}, {"access_token": access})

        assert result.principal.kind == "supplier"
        assert result.email == "s@x.com"

    def test_expired_access_with_refresh_cookie_is_refreshed(
        self,
        authenticator: RequestAuthenticator,
        token_service: TokenService,
        customer: UserAccount,
        clock: FakeClock,
    ) -> None:
        access, refresh = _pair(token_service, customer)
        clock.advance(hours=2)

        result = authenticator.authenticate(
            {}, {"access_token": access, "refresh_token": refresh}
        )

        assert result.state is AuthState.ACCESS_EXPIRED_REFRESH_VALID
        assert result.new_token_issued
        assert result.new_token and result.new_token != access
        renewed = token_service.decode_access(result.new_token)
        assert renewed.identity() == {
            "principal_id": customer.id,
            "email": "a@x.com",
            "role": "customer",
        }
        assert renewed.issued_at == clock.now

    def test_expired_access_with_refresh_header_is_refreshed(
        self,
        authenticator: RequestAuthenticator,
        token_service: TokenService,
        customer: UserAccount,
        clock: FakeClock,
    ) -> None:
        access, refresh = _pair(token_service, customer)
        clock.advance(hours=2)

        result = authenticator.authenticate(
            {"Authorization": f"Bearer {access}", "x-refresh-token": refresh}, NO_COOKIES
        )

        assert result.new_token_issued
        assert result.principal_id == customer.id

    def test_refresh_token_alone_is_enough(
        self,
        authenticator: RequestAuthenticator,
        token_service: TokenService,
        customer: UserAccount,
    ) -> None:
        _, refresh = _pair(token_service, customer)

        result = authenticator.authenticate({}, {"refresh_token": refresh})

        assert result.new_token_issued

    def test_forged_access_falls_back_to_refresh(
        self,
        authenticator: RequestAuthenticator,
        token_service: TokenService,
        customer: UserAccount,
    ) -> None:
        _, refresh = _pair(token_service, customer)

        result = authenticator.authenticate(
            {"authorization": "Bearer not.a.token"}, {"refresh_token": refresh}
        )

        assert result.new_token_issued

    def test_expired_access_without_refresh(
        self,
        authenticator: RequestAuthenticator,
        token_service: TokenService,
        customer: UserAccount,
        clock: FakeClock,
    ) -> None:
        access, _ = _pair(token_service, customer)
        clock.advance(hours=2)

        with pytest.raises(UnauthorizedError) as excinfo:
            authenticator.authenticate({"Authorization": f"Bearer {access}"}, NO_COOKIES)
        assert excinfo.value.message == "invalid or expired access token"

    def test_both_tokens_expired(
        self,
        authenticator: RequestAuthenticator,
        token_service: TokenService,
        customer: UserAccount,
        clock: FakeClock,
    ) -> None:
        access, refresh = _pair(token_service, customer)
        clock.advance(days=8)

        with pytest.raises(UnauthorizedError) as excinfo:
            authenticator.authenticate({}, {"access_token": access, "refresh_token": refresh})
        assert excinfo.value.message == "invalid or expired refresh token"

    def test_access_token_cannot_act_as_refresh(
        self,
        authenticator: RequestAuthenticator,
        token_service: TokenService,
        customer: UserAccount,
        clock: FakeClock,
    ) -> None:
        access, _ = _pair(token_service, customer)
        clock.advance(minutes=30)
        other_access, _ = _pair(token_service, customer)
        clock.advance(minutes=45)

        with pytest.raises(UnauthorizedError) as excinfo:
            authenticator.authenticate(
                {"Authorization": f"Bearer {access}", "x-refresh-token": other_access},
                NO_COOKIES,
            )
        assert excinfo.value.message == "invalid or expired refresh token"

    def test_deleted_principal(
        self, authenticator: RequestAuthenticator, token_service: TokenService
    ) -> None:
        access = token_service.issue_access("deleted-id", "gone@x.com", "customer")

        with pytest.raises(UnauthorizedError) as excinfo:
            authenticator.authenticate({"Authorization": f"Bearer {access}"}, NO_COOKIES)
        assert excinfo.value.message == "user not found"

    def test_revoked_access_uses_refresh(
        self,
        authenticator: RequestAuthenticator,
        token_service: TokenService,
        customer: UserAccount,
    ) -> None:
        access, refresh = _pair(token_service, customer)
        token_service.revoke(access)

        result = authenticator.authenticate({}, {"access_token": access, "refresh_token": refresh})
        assert result.new_token_issued

        token_service.revoke(refresh, refresh=True)
        with pytest.raises(UnauthorizedError):
            authenticator.authenticate({}, {"access_token": access, "refresh_token": refresh})
