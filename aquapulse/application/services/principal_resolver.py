from __future__ import annotations

from typing import Any, Dict, Optional

from ...domain.models import Principal, normalize_email
from ...domain.ports.persistence import SupplierStore, UserStore


class PrincipalResolver:
    """Finds a principal in either credential store.

    The user store is always probed first; since an email (and an id) is
    unique across both stores, the first match is the only match.
    """

    def __init__(self, users: UserStore, suppliers: SupplierStore) -> None:
        self._users = users
        self._suppliers = suppliers

    def find_by_id(self, principal_id: str) -> Optional[Principal]:
        if not principal_id:
            return None
        return self._users.find_by_id(principal_id) or self._suppliers.find_by_id(principal_id)

    def find_by_email(self, email: str) -> Optional[Principal]:
        email_clean = normalize_email(email)
        if not email_clean:
            return None
        return self._users.find_by_email(email_clean) or self._suppliers.find_by_email(email_clean)

    def email_in_use(self, email: str) -> bool:
        return self.find_by_email(email) is not None

    def get_profile(self, principal_id: str) -> Optional[Dict[str, Any]]:
        principal = self.find_by_id(principal_id)
        if principal is None:
            return None
        return principal.strip_credentials().to_public_dict()
