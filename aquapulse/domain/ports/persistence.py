from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional, Protocol

from ..models import SupplierAccount, UserAccount


class UserStore(Protocol):
    """Persistence functions for customer and admin accounts."""

    def find_by_email(self, email: str) -> Optional[UserAccount]:
        ...

    def find_by_id(self, user_id: str) -> Optional[UserAccount]:
        ...

    def create(
        self,
        email: str,
        password_hash: str,
        *,
        role: str,
        first_name: str = "",
        last_name: str = "",
        phone_number: Optional[str] = None,
        email_verification_token: Optional[str] = None,
        is_email_verified: bool = False,
    ) -> UserAccount:
        """Insert an account; raises ``sqlite3.IntegrityError`` when the email is taken."""
        ...

    def update_password(self, user_id: str, password_hash: str) -> None:
        ...

    def set_reset_code(self, user_id: str, code: str, expires_at: datetime) -> None:
        ...

    def complete_password_reset(
        self, user_id: str, code: str, password_hash: str, now: datetime
    ) -> bool:
        """Swap the password only while ``code`` is the live reset code."""
        ...

    def mark_email_verified(self, user_id: str) -> None:
        ...


class SupplierStore(Protocol):
    """Persistence functions for supplier accounts."""

    def find_by_email(self, email: str) -> Optional[SupplierAccount]:
        ...

    def find_by_id(self, supplier_id: str) -> Optional[SupplierAccount]:
        ...

    def create(
        self,
        email: str,
        password_hash: str,
        *,
        company: str,
        first_name: str = "",
        last_name: str = "",
        phone_number: Optional[str] = None,
        service_areas: Optional[List[Dict[str, Any]]] = None,
        pricing: Optional[List[Dict[str, Any]]] = None,
        email_verification_token: Optional[str] = None,
    ) -> SupplierAccount:
        ...

    def update_password(self, supplier_id: str, password_hash: str) -> None:
        ...

    def set_reset_code(self, supplier_id: str, code: str, expires_at: datetime) -> None:
        ...

    def complete_password_reset(
        self, supplier_id: str, code: str, password_hash: str, now: datetime
    ) -> bool:
        ...

    def mark_email_verified(self, supplier_id: str) -> None:
        ...


class OrderStore(Protocol):
    """Read-only order lookups used while enriching a customer login."""

    def find_ids_by_user_id(self, user_id: str) -> List[str]:
        ...


class PaymentMethodStore(Protocol):
    """Read-only payment method lookups used while enriching a customer login."""

    def find_ids_by_user_id(self, user_id: str) -> List[str]:
        ...


class Mailer(Protocol):
    """Outbound email collaborator. Returns ``False`` instead of raising on failure."""

    def send_verification_email(self, to_email: str, verification_token: str) -> bool:
        ...

    def send_password_reset_code(self, to_email: str, code: str) -> bool:
        ...
