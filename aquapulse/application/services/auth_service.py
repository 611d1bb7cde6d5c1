from __future__ import annotations

import asyncio
import logging
import re
import secrets
import sqlite3
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any, Callable, Dict, List, Optional

from ...domain.errors import (
    AuthError,
    BadRequestError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from ...domain.models import (
    ADMIN_ROLE,
    CUSTOMER_ROLE,
    SUPPLIER_KIND,
    SUPPLIER_ROLE,
    Principal,
    UserAccount,
    normalize_email,
)
from ...domain.ports.persistence import (
    Mailer,
    OrderStore,
    PaymentMethodStore,
    SupplierStore,
    UserStore,
)
from ...services.password_hasher import MAX_PASSWORD_BYTES, PasswordHasher
from ...services.token_codec import Clock, TokenService, utc_now
from .principal_resolver import PrincipalResolver

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
MIN_PASSWORD_LENGTH = 8
RESET_CODE_TTL = timedelta(minutes=10)
SELF_REGISTERED_ROLES = (CUSTOMER_ROLE, SUPPLIER_ROLE)


@dataclass(slots=True)
class RegistrationInput:
    email: str
    password: str
    role: str = CUSTOMER_ROLE
    first_name: str = ""
    last_name: str = ""
    phone_number: Optional[str] = None
    company: Optional[str] = None
    service_areas: List[Dict[str, Any]] = field(default_factory=list)
    pricing: List[Dict[str, Any]] = field(default_factory=list)


@dataclass(slots=True)
class LoginResult:
    access_token: str
    refresh_token: str
    principal: Principal
    order_ids: Optional[List[str]] = None
    payment_method_ids: Optional[List[str]] = None

    def user_payload(self) -> Dict[str, Any]:
        """Public view of the principal, with customer enrichment when present."""
        data = self.principal.to_public_dict()
        if self.order_ids is not None:
            data["order_ids"] = list(self.order_ids)
        if self.payment_method_ids is not None:
            data["payment_method_ids"] = list(self.payment_method_ids)
        return data


class AuthService:
    """Credential checks, token issuance and the account self-service flows."""

    def __init__(
        self,
        users: UserStore,
        suppliers: SupplierStore,
        orders: OrderStore,
        payment_methods: PaymentMethodStore,
        hasher: PasswordHasher,
        tokens: TokenService,
        mailer: Mailer,
        *,
        resolver: Optional[PrincipalResolver] = None,
        clock: Optional[Clock] = None,
    ) -> None:
        self._users = users
        self._suppliers = suppliers
        self._orders = orders
        self._payment_methods = payment_methods
        self._hasher = hasher
        self._tokens = tokens
        self._mailer = mailer
        self._resolver = resolver or PrincipalResolver(users, suppliers)
        self._clock = clock or utc_now

    @property
    def resolver(self) -> PrincipalResolver:
        return self._resolver

    # ------------------------------------------------------------------
    # Login
    async def validate_credentials(self, email: str, password: str) -> Optional[Principal]:
        """
        Check an email/password pair against both credential stores.

        Returns:
            The principal without its password hash, or None on a wrong password

        Raises:
            NotFoundError: If no account uses the email
        """
        principal = self._resolver.find_by_email(email)
        if principal is None:
            raise NotFoundError("User not found")
        if not principal.password_hash:
            return None
        matches = await asyncio.to_thread(
            self._hasher.verify, password or "", principal.password_hash
        )
        if not matches:
            return None
        return principal.strip_credentials()

    async def login(self, principal: Principal) -> LoginResult:
        identity = (principal.id, principal.email, principal.role)
        access_token, refresh_token = await asyncio.gather(
            asyncio.to_thread(self._tokens.issue_access, *identity),
            asyncio.to_thread(self._tokens.issue_refresh, *identity),
        )
        result = LoginResult(
            access_token=access_token,
            refresh_token=refresh_token,
            principal=principal.strip_credentials(),
        )
        if principal.role == CUSTOMER_ROLE:
            result.order_ids, result.payment_method_ids = await asyncio.gather(
                asyncio.to_thread(self._orders.find_ids_by_user_id, principal.id),
                asyncio.to_thread(self._payment_methods.find_ids_by_user_id, principal.id),
            )
        logger.info("Issued token pair for %s principal %s", principal.kind, principal.id)
        return result

    async def logout(self, access_token: Optional[str], refresh_token: Optional[str]) -> Dict[str, str]:
        self._tokens.revoke(access_token)
        self._tokens.revoke(refresh_token, refresh=True)
        return {"message": "Logged out successfully"}

    # ------------------------------------------------------------------
    # Registration
    async def register(self, data: RegistrationInput) -> Dict[str, Any]:
        try:
            return await self._register(data)
        except AuthError:
            raise
        except Exception:
            logger.exception("Unexpected failure while registering a %s account", data.role)
            raise ValidationError("Registration failed. Please try again.")

    async def _register(self, data: RegistrationInput) -> Dict[str, Any]:
        if not data.email or not data.password or len(data.password.strip()) < MIN_PASSWORD_LENGTH:
            raise ValidationError(
                "All fields are required and password must be at least 8 characters."
            )
        _check_password_size(data.password)
        email_clean = normalize_email(data.email)
        if not EMAIL_PATTERN.match(email_clean):
            raise ValidationError("Invalid email format.")
        if data.role not in SELF_REGISTERED_ROLES:
            raise ValidationError("Role must be either customer or supplier.")
        company = (data.company or "").strip()
        if data.role == SUPPLIER_ROLE and not company:
            raise ValidationError("Company is required for suppliers")

        password_hash = await asyncio.to_thread(self._hasher.hash, data.password)
        verification_token = secrets.token_hex(32)

        try:
            if data.role == SUPPLIER_ROLE:
                account: Principal = self._suppliers.create(
                    email_clean,
                    password_hash,
                    company=company,
                    first_name=data.first_name.strip(),
                    last_name=data.last_name.strip(),
                    phone_number=data.phone_number,
                    service_areas=data.service_areas,
                    pricing=data.pricing,
                    email_verification_token=verification_token,
                )
            else:
                account = self._users.create(
                    email_clean,
                    password_hash,
                    role=CUSTOMER_ROLE,
                    first_name=data.first_name.strip(),
                    last_name=data.last_name.strip(),
                    phone_number=data.phone_number,
                    email_verification_token=verification_token,
                )
        except sqlite3.IntegrityError:
            # Both stores share one email namespace, checked inside the insert.
            raise ConflictError("Email already exists") from None
        logger.info("Registered %s account %s", account.role, account.id)

        if not await self._dispatch(
            self._mailer.send_verification_email, account.email, verification_token
        ):
            logger.warning("Verification email for account %s was not delivered", account.id)

        return {
            "success": True,
            "message": "Registration successful. Please verify your email.",
        }

    def ensure_default_admin(self, email: Optional[str], password: Optional[str]) -> Optional[UserAccount]:
        """
        Seed the administrator account from configuration.

        Returns:
            The admin account, or None when unconfigured or when the email
            already belongs to a non-admin account

        Raises:
            ValidationError: If the configured password breaks the password rules
        """
        if not email or not password:
            return None
        email_clean = normalize_email(email)
        existing = self._resolver.find_by_email(email_clean)
        if existing is not None:
            if existing.role != ADMIN_ROLE:
                logger.warning(
                    "ADMIN_EMAIL is already used by a %s account; skipping admin seed",
                    existing.role,
                )
                return None
            return existing
        _check_new_password(password)
        logger.info("Creating default administrator account")
        return self._users.create(
            email_clean,
            self._hasher.hash(password),
            role=ADMIN_ROLE,
            is_email_verified=True,
        )

    async def verify_email(self, email: str, token: str) -> Dict[str, Any]:
        principal = self._resolver.find_by_email(email)
        if principal is None:
            raise NotFoundError("User not found")
        if principal.is_email_verified:
            return {"success": True, "message": "Email already verified."}
        if not _same_secret(principal.email_verification_token, token):
            raise BadRequestError("Invalid or expired verification token")
        self._store_for(principal).mark_email_verified(principal.id)
        return {"success": True, "message": "Email verified successfully."}

    # ------------------------------------------------------------------
    # Passwords
    async def change_password(
        self, principal: Principal, old_password: str, new_password: str
    ) -> Dict[str, str]:
        store = self._store_for(principal)
        # The principal attached to a request carries no hash; reload it.
        account = store.find_by_id(principal.id)
        if account is None:
            raise NotFoundError(
                "Supplier not found" if principal.kind == SUPPLIER_KIND else "User not found"
            )
        matches = bool(account.password_hash) and await asyncio.to_thread(
            self._hasher.verify, old_password or "", account.password_hash
        )
        if not matches:
            raise BadRequestError("Old password is incorrect")
        _check_new_password(new_password)
        store.update_password(account.id, await asyncio.to_thread(self._hasher.hash, new_password))
        logger.info("Password changed for %s %s", account.kind, account.id)
        return {"message": "Password updated successfully"}

    async def forgot_password(self, email: str) -> Dict[str, Any]:
        principal = self._resolver.find_by_email(email)
        if principal is None:
            raise NotFoundError("User not found")
        code = f"{secrets.randbelow(1_000_000):06d}"
        self._store_for(principal).set_reset_code(principal.id, code, self._clock() + RESET_CODE_TTL)
        if not await self._dispatch(self._mailer.send_password_reset_code, principal.email, code):
            logger.warning("Password reset email for account %s was not delivered", principal.id)
        return {"success": True}

    async def verify_reset_code(self, email: str, code: str) -> Dict[str, Any]:
        """Non-throwing probe for the reset form; never raises for a bad code."""
        principal = self._resolver.find_by_email(email)
        if principal is None:
            return {"success": False, "message": "User not found"}
        if not self._reset_code_matches(principal, code):
            return {"success": False, "message": "Invalid or expired code"}
        return {"success": True}

    async def reset_password(self, email: str, code: str, new_password: str) -> Dict[str, Any]:
        principal = self._resolver.find_by_email(email)
        if principal is None:
            raise NotFoundError("User not found")
        if not self._reset_code_matches(principal, code):
            raise BadRequestError("Invalid or expired code")
        _check_new_password(new_password)
        password_hash = await asyncio.to_thread(self._hasher.hash, new_password)
        # The stored code may have been spent while the hash was computed.
        if not self._store_for(principal).complete_password_reset(
            principal.id, code, password_hash, self._clock()
        ):
            raise BadRequestError("Invalid or expired code")
        logger.info("Password reset completed for %s %s", principal.kind, principal.id)
        return {"success": True}

    # ------------------------------------------------------------------
    def _store_for(self, principal: Principal):
        return self._suppliers if principal.kind == SUPPLIER_KIND else self._users

    def _reset_code_matches(self, principal: Principal, code: str) -> bool:
        expiry = principal.reset_password_code_expiry
        if not principal.reset_password_code or expiry is None:
            return False
        if expiry < self._clock():
            return False
        return _same_secret(principal.reset_password_code, code)

    @staticmethod
    async def _dispatch(send: Callable[[str, str], bool], to_email: str, secret: str) -> bool:
        try:
            return bool(await asyncio.to_thread(send, to_email, secret))
        except Exception:
            logger.exception("Mailer raised while sending to account email")
            return False


def _same_secret(expected: Optional[str], presented: Optional[str]) -> bool:
    if not expected or not presented:
        return False
    return secrets.compare_digest(expected.encode("utf-8"), presented.encode("utf-8"))


def _check_password_size(password: str) -> None:
    if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise ValidationError("Password must be at most 72 bytes long.")


def _check_new_password(password: str) -> None:
    if not password or len(password.strip()) < MIN_PASSWORD_LENGTH:
        raise ValidationError("Password must be at least 8 characters.")
    _check_password_size(password)
