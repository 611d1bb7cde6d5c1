from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional

ACCESS_TOKEN = "access"
REFRESH_TOKEN = "refresh"


@dataclass(slots=True)
class TokenPayload:
    """Claims carried by both access and refresh tokens."""

    principal_id: str
    email: str
    role: str
    token_type: str = ACCESS_TOKEN
    issued_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None

    def identity(self) -> Dict[str, Any]:
        """Return the principal claims shared by every token minted for it."""
        return {"principal_id": self.principal_id, "email": self.email, "role": self.role}
