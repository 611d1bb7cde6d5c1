from dataclasses import dataclass
from datetime import timedelta
from typing import Optional

from ..application.services.auth_service import AuthService
from ..application.services.principal_resolver import PrincipalResolver
from ..application.services.request_authenticator import RequestAuthenticator
from ..domain.ports.persistence import Mailer
from ..infrastructure.repositories.order_repository import (
    OrderRepository,
    PaymentMethodRepository,
)
from ..infrastructure.repositories.supplier_repository import SupplierRepository
from ..infrastructure.repositories.user_repository import UserRepository
from ..services.email_service import EmailService
from ..services.password_hasher import PasswordHasher
from ..services.token_codec import Clock, TokenService
from ..services.token_denylist import TokenDenylist
from .config import Settings


@dataclass(slots=True)
class ApplicationContainer:
    """Dependency registry shared across the FastAPI application lifecycle."""

    settings: Settings
    users: UserRepository
    suppliers: SupplierRepository
    orders: OrderRepository
    payment_methods: PaymentMethodRepository
    mailer: Mailer
    token_service: TokenService
    resolver: PrincipalResolver
    auth_service: AuthService
    request_authenticator: RequestAuthenticator


def build_container(
    settings: Settings,
    *,
    mailer: Optional[Mailer] = None,
    clock: Optional[Clock] = None,
) -> ApplicationContainer:
    """Wire repositories and services from ``settings``.

    ``mailer`` and ``clock`` replace the SMTP sender and the wall clock.
    """
    users = UserRepository(settings.database_path)
    suppliers = SupplierRepository(settings.database_path)
    orders = OrderRepository(settings.database_path)
    payment_methods = PaymentMethodRepository(settings.database_path)
    if mailer is None:
        mailer = EmailService(
            smtp_host=settings.smtp_host,
            smtp_port=settings.smtp_port,
            smtp_username=settings.smtp_username,
            smtp_password=settings.smtp_password,
            from_email=settings.smtp_from_email,
            frontend_base_url=settings.frontend_base_url,
        )
    token_service = TokenService(
        settings.jwt_secret,
        settings.jwt_refresh_secret,
        access_ttl=timedelta(minutes=settings.access_token_exp_minutes),
        refresh_ttl=timedelta(days=settings.refresh_token_exp_days),
        algorithm=settings.jwt_algorithm,
        clock=clock,
        denylist=TokenDenylist(clock=clock),
    )
    resolver = PrincipalResolver(users, suppliers)
    auth_service = AuthService(
        users,
        suppliers,
        orders,
        payment_methods,
        PasswordHasher(rounds=settings.bcrypt_rounds),
        token_service,
        mailer,
        resolver=resolver,
        clock=clock,
    )
    return ApplicationContainer(
        settings=settings,
        users=users,
        suppliers=suppliers,
        orders=orders,
        payment_methods=payment_methods,
        mailer=mailer,
        token_service=token_service,
        resolver=resolver,
        auth_service=auth_service,
        request_authenticator=RequestAuthenticator(token_service, resolver),
    )
