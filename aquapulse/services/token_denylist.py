"""Best-effort, in-process token revocation.

Entries are keyed by the token signature and dropped lazily once the token
would have expired anyway. Nothing here survives a restart or is shared
between worker processes: logout stays advisory under stateless tokens.
"""

from __future__ import annotations

import threading
from datetime import datetime, timezone
from typing import Callable, Dict, Optional


def token_signature(token: str) -> str:
    return token.rsplit(".", 1)[-1]


class TokenDenylist:
    def __init__(self, clock: Optional[Callable[[], datetime]] = None) -> None:
        self._clock = clock or (lambda: datetime.now(tz=timezone.utc))
        self._entries: Dict[str, datetime] = {}
        self._lock = threading.Lock()

    def add(self, token: str, expires_at: datetime) -> None:
        with self._lock:
            self._evict_expired_locked()
            if expires_at > self._clock():
                self._entries[token_signature(token)] = expires_at

    def __contains__(self, token: object) -> bool:
        if not isinstance(token, str) or not token:
            return False
        with self._lock:
            self._evict_expired_locked()
            return token_signature(token) in self._entries

    def __len__(self) -> int:
        with self._lock:
            self._evict_expired_locked()
            return len(self._entries)

    def _evict_expired_locked(self) -> None:
        now = self._clock()
        expired = [key for key, expires_at in self._entries.items() if expires_at <= now]
        for key in expired:
            del self._entries[key]
