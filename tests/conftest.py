"""Shared fixtures: a throwaway SQLite file, a recording mailer and a clock tests can move."""

from __future__ import annotations

import sqlite3
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import List, Tuple

import pytest

from aquapulse.application.services.auth_service import AuthService
from aquapulse.application.services.principal_resolver import PrincipalResolver
from aquapulse.application.services.request_authenticator import RequestAuthenticator
from aquapulse.infrastructure.repositories.order_repository import (
    OrderRepository,
    PaymentMethodRepository,
)
from aquapulse.infrastructure.repositories.supplier_repository import SupplierRepository
from aquapulse.infrastructure.repositories.user_repository import UserRepository
from aquapulse.services.password_hasher import PasswordHasher
from aquapulse.services.token_codec import TokenService
from aquapulse.services.token_denylist import TokenDenylist

ACCESS_SECRET = "access-secret-for-tests"
REFRESH_SECRET = "refresh-secret-for-tests"


class FakeClock:
    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **delta: float) -> None:
        self.now += timedelta(**delta)


class RecordingMailer:
    def __init__(self) -> None:
        self.verifications: List[Tuple[str, str]] = []
        self.reset_codes: List[Tuple[str, str]] = []
        self.deliver = True

    def send_verification_email(self, to_email: str, verification_token: str) -> bool:
        self.verifications.append((to_email, verification_token))
        return self.deliver

    def send_password_reset_code(self, to_email: str, code: str) -> bool:
        self.reset_codes.append((to_email, code))
        return self.deliver


def insert_owned_row(db_path: Path, table: str, row_id: str, user_id: str, created_at: str) -> None:
    with sqlite3.connect(db_path) as conn:
        conn.execute(
            f"INSERT INTO {table} (id, user_id, created_at) VALUES (?, ?, ?)",
            (row_id, user_id, created_at),
        )
        conn.commit()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def mailer() -> RecordingMailer:
    return RecordingMailer()


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    return tmp_path / "aquapulse.db"


@pytest.fixture
def users(db_path: Path) -> UserRepository:
    return UserRepository(db_path)


@pytest.fixture
def suppliers(db_path: Path) -> SupplierRepository:
    return SupplierRepository(db_path)


@pytest.fixture
def orders(db_path: Path) -> OrderRepository:
    return OrderRepository(db_path)


@pytest.fixture
def payment_methods(db_path: Path) -> PaymentMethodRepository:
    return PaymentMethodRepository(db_path)


@pytest.fixture
def hasher() -> PasswordHasher:
    return PasswordHasher(rounds=4)


@pytest.fixture
def token_service(clock: FakeClock) -> TokenService:
    return TokenService(
        ACCESS_SECRET,
        REFRESH_SECRET,
        access_ttl=timedelta(hours=1),
        refresh_ttl=timedelta(days=7),
        clock=clock,
        denylist=TokenDenylist(clock=clock),
    )


@pytest.fixture
def resolver(users: UserRepository, suppliers: SupplierRepository) -> PrincipalResolver:
    return PrincipalResolver(users, suppliers)


@pytest.fixture
def auth_service(
    users: UserRepository,
    suppliers: SupplierRepository,
    orders: OrderRepository,
    payment_methods: PaymentMethodRepository,
    hasher: PasswordHasher,
    token_service: TokenService,
    mailer: RecordingMailer,
    resolver: PrincipalResolver,
    clock: FakeClock,
) -> AuthService:
    return AuthService(
        users,
        suppliers,
        orders,
        payment_methods,
        hasher,
        token_service,
        mailer,
        resolver=resolver,
        clock=clock,
    )


@pytest.fixture
def authenticator(token_service: TokenService, resolver: PrincipalResolver) -> RequestAuthenticator:
    return RequestAuthenticator(token_service, resolver)
