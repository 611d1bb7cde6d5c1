"""Principal domain model: customer/admin users and suppliers.

Both account kinds share the authentication-relevant attributes and are
discriminated by ``kind``. Callers branch on ``principal.kind`` rather than on
the runtime class.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Literal, Optional, Union

CUSTOMER_ROLE = "customer"
ADMIN_ROLE = "admin"
SUPPLIER_ROLE = "supplier"

USER_KIND = "user"
SUPPLIER_KIND = "supplier"

# Attributes that must never leave the authentication service boundary.
_PRIVATE_FIELDS = frozenset(
    {
        "password_hash",
        "email_verification_token",
        "reset_password_code",
        "reset_password_code_expiry",
    }
)


@dataclass(slots=True)
class UserAccount:
    """Customer or administrator account."""

    id: str
    email: str
    password_hash: Optional[str]
    role: str = CUSTOMER_ROLE
    first_name: str = ""
    last_name: str = ""
    phone_number: Optional[str] = None
    is_email_verified: bool = False
    email_verification_token: Optional[str] = None
    reset_password_code: Optional[str] = None
    reset_password_code_expiry: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    kind: Literal["user"] = field(default=USER_KIND, init=False)

    def strip_credentials(self) -> "UserAccount":
        return dataclasses.replace(self, password_hash=None)

    def to_public_dict(self) -> Dict[str, Any]:
        return _public_dict(self)


@dataclass(slots=True)
class SupplierAccount:
    """Water supplier account. ``company`` is mandatory."""

    id: str
    email: str
    password_hash: Optional[str]
    company: str
    first_name: str = ""
    last_name: str = ""
    phone_number: Optional[str] = None
    service_areas: List[Dict[str, Any]] = field(default_factory=list)
    pricing: List[Dict[str, Any]] = field(default_factory=list)
    rating: float = 0.0
    active: bool = True
    is_email_verified: bool = False
    email_verification_token: Optional[str] = None
    reset_password_code: Optional[str] = None
    reset_password_code_expiry: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    role: str = field(default=SUPPLIER_ROLE, init=False)
    kind: Literal["supplier"] = field(default=SUPPLIER_KIND, init=False)

    def strip_credentials(self) -> "SupplierAccount":
        return dataclasses.replace(self, password_hash=None)

    def to_public_dict(self) -> Dict[str, Any]:
        return _public_dict(self)


Principal = Union[UserAccount, SupplierAccount]


def _public_dict(account: Principal) -> Dict[str, Any]:
    data: Dict[str, Any] = {}
    for item in dataclasses.fields(account):
        if item.name in _PRIVATE_FIELDS:
            continue
        value = getattr(account, item.name)
        if isinstance(value, datetime):
            value = value.replace(microsecond=0).isoformat()
        data[item.name] = value
    return data


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()
