"""Domain models for the AquaPulse authentication core."""

from .principal import (
    ADMIN_ROLE,
    CUSTOMER_ROLE,
    SUPPLIER_KIND,
    SUPPLIER_ROLE,
    USER_KIND,
    Principal,
    SupplierAccount,
    UserAccount,
    normalize_email,
)
from .token import ACCESS_TOKEN, REFRESH_TOKEN, TokenPayload

__all__ = [
    "ACCESS_TOKEN",
    "ADMIN_ROLE",
    "CUSTOMER_ROLE",
    "Principal",
    "REFRESH_TOKEN",
    "SUPPLIER_KIND",
    "SUPPLIER_ROLE",
    "SupplierAccount",
    "TokenPayload",
    "USER_KIND",
    "UserAccount",
    "normalize_email",
]
