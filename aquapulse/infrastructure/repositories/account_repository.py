"""Shared SQLite plumbing for the two credential stores."""

import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Generic, Optional, Sequence, TypeVar
from uuid import uuid4

AccountT = TypeVar("AccountT")

# Tables that share one email namespace.
ACCOUNT_TABLES = ("users", "suppliers")


def _utcnow() -> str:
    return datetime.now(tz=timezone.utc).isoformat()


def _timestamp(value: datetime) -> str:
    """Fixed-width UTC ISO string, so stored timestamps compare as text."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat(timespec="microseconds")


def _parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    return datetime.fromisoformat(value)


class SQLiteAccountRepository(Generic[AccountT]):
    """Base repository for account tables keyed by a random hex id.

    Subclasses declare ``TABLE`` and implement ``_create_table`` and
    ``_row_to_account``. Every operation opens its own connection so the
    repository can be used from worker threads.
    """

    TABLE: str = ""

    def __init__(self, db_path: str):
        self.db_path = str(db_path)
        Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
        self._initialize_table()

    def _initialize_table(self) -> None:
        with sqlite3.connect(self.db_path) as conn:
            self._create_table(conn)
            conn.execute(
                f"CREATE INDEX IF NOT EXISTS idx_{self.TABLE}_email ON {self.TABLE}(email)"
            )
            conn.commit()

    def _create_table(self, conn: sqlite3.Connection) -> None:
        raise NotImplementedError

    def _row_to_account(self, row: sqlite3.Row) -> AccountT:
        raise NotImplementedError

    # Lookups ---------------------------------------------------------------
    def find_by_email(self, email: str) -> Optional[AccountT]:
        """Get account by (already normalised) email."""
        return self._fetch_one(f"SELECT * FROM {self.TABLE} WHERE email = ?", (email,))

    def find_by_id(self, account_id: str) -> Optional[AccountT]:
        """Get account by id."""
        return self._fetch_one(f"SELECT * FROM {self.TABLE} WHERE id = ?", (account_id,))

    # Credential updates ----------------------------------------------------
    def update_password(self, account_id: str, password_hash: str) -> None:
        self._execute(
            f"UPDATE {self.TABLE} SET password_hash = ?, updated_at = ? WHERE id = ?",
            (password_hash, _utcnow(), account_id),
        )

    def set_reset_code(self, account_id: str, code: str, expires_at: datetime) -> None:
        self._execute(
            f"""
            UPDATE {self.TABLE}
            SET reset_password_code = ?, reset_password_code_expiry = ?, updated_at = ?
            WHERE id = ?
            """,
            (code, _timestamp(expires_at), _utcnow(), account_id),
        )

    def complete_password_reset(
        self, account_id: str, code: str, password_hash: str, now: datetime
    ) -> bool:
        """Replace the password and burn the reset code in one statement.

        The update only applies while ``code`` is still the stored, unexpired
        reset code, so a code can complete at most one reset. Returns whether
        a row was updated.
        """
        rowcount = self._execute(
            f"""
            UPDATE {self.TABLE}
            SET password_hash = ?, reset_password_code = NULL,
                reset_password_code_expiry = NULL, updated_at = ?
            WHERE id = ? AND reset_password_code = ? AND reset_password_code_expiry >= ?
            """,
            (password_hash, _utcnow(), account_id, code, _timestamp(now)),
        )
        return rowcount == 1

    def mark_email_verified(self, account_id: str) -> None:
        self._execute(
            f"""
            UPDATE {self.TABLE}
            SET is_email_verified = 1, email_verification_token = NULL, updated_at = ?
            WHERE id = ?
            """,
            (_utcnow(), account_id),
        )

    # Helpers ---------------------------------------------------------------
    @staticmethod
    def _new_id() -> str:
        return uuid4().hex

    def _insert_account(self, query: str, params: Sequence[Any], email: str) -> None:
        """Insert a row unless any account table already holds ``email``.

        The lookup and the insert run in one ``BEGIN IMMEDIATE`` transaction
        holding the database write lock.

        Raises:
            sqlite3.IntegrityError: If the email is already registered
        """
        conn = sqlite3.connect(self.db_path, isolation_level=None)
        try:
            conn.execute("BEGIN IMMEDIATE")
            try:
                if self._email_taken(conn, email):
                    raise sqlite3.IntegrityError(f"email already registered: {email}")
                conn.execute(query, params)
            except Exception:
                conn.execute("ROLLBACK")
                raise
            conn.execute("COMMIT")
        finally:
            conn.close()

    @staticmethod
    def _email_taken(conn: sqlite3.Connection, email: str) -> bool:
        existing = {
            row[0]
            for row in conn.execute(
                "SELECT name FROM sqlite_master WHERE type = 'table' AND name IN "
                f"({', '.join('?' for _ in ACCOUNT_TABLES)})",
                ACCOUNT_TABLES,
            )
        }
        for table in ACCOUNT_TABLES:
            if table in existing and conn.execute(
                f"SELECT 1 FROM {table} WHERE email = ?", (email,)
            ).fetchone():
                return True
        return False

    def _fetch_one(self, query: str, params: Sequence[Any]) -> Optional[AccountT]:
        with sqlite3.connect(self.db_path) as conn:
            conn.row_factory = sqlite3.Row
            row = conn.execute(query, params).fetchone()

        if not row:
            return None

        return self._row_to_account(row)

    def _execute(self, query: str, params: Sequence[Any]) -> int:
        with sqlite3.connect(self.db_path) as conn:
            cursor = conn.execute(query, params)
            conn.commit()
            return cursor.rowcount
