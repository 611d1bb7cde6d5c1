"""Repository for customer and admin account persistence."""

import sqlite3
from datetime import datetime
from typing import List, Optional

from aquapulse.domain.models.principal import CUSTOMER_ROLE, UserAccount

from .account_repository import SQLiteAccountRepository, _parse_timestamp, _utcnow


class UserRepository(SQLiteAccountRepository[UserAccount]):
    """Repository for managing UserAccount entities in SQLite."""

    TABLE = "users"

    def _create_table(self, conn: sqlite3.Connection) -> None:
        conn.execute("""
            CREATE TABLE IF NOT EXISTS users (
                id TEXT PRIMARY KEY,
                email TEXT UNIQUE NOT NULL,
                password_hash TEXT NOT NULL,
                role TEXT NOT NULL DEFAULT 'customer',
                first_name TEXT NOT NULL DEFAULT '',
                last_name TEXT NOT NULL DEFAULT '',
                phone_number TEXT,
                is_email_verified INTEGER DEFAULT 0,
                email_verification_token TEXT,
                reset_password_code TEXT,
                reset_password_code_expiry TEXT,
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL
            )
        """)

    def create(
        self,
        email: str,
        password_hash: str,
        *,
        role: str = CUSTOMER_ROLE,
        first_name: str = "",
        last_name: str = "",
        phone_number: Optional[str] = None,
        email_verification_token: Optional[str] = None,
        is_email_verified: bool = False,
    ) -> UserAccount:
        """Create a new user."""
        user_id = self._new_id()
        now = _utcnow()

        self._insert_account(
            """
            INSERT INTO users (
                id, email, password_hash, role, first_name, last_name, phone_number,
                is_email_verified, email_verification_token, created_at, updated_at
            )
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                user_id,
                email,
                password_hash,
                role,
                first_name,
                last_name,
                phone_number,
                int(is_email_verified),
                email_verification_token,
                now,
                now,
            ),
            email,
        )

        return UserAccount(
            id=user_id,
            email=email,
            password_hash=password_hash,
            role=role,
            first_name=first_name,
            last_name=last_name,
            phone_number=phone_number,
            is_email_verified=is_email_verified,
            email_verification_token=email_verification_token,
            created_at=datetime.fromisoformat(now),
            updated_at=datetime.fromisoformat(now),
        )

    def list_all(self) -> List[UserAccount]:
        """List all users."""
        with sqlite3.connect(self.db_path) as conn:
            conn.row_factory = sqlite3.Row
            rows = conn.execute("SELECT * FROM users ORDER BY created_at DESC").fetchall()

        return [self._row_to_account(row) for row in rows]

    def _row_to_account(self, row: sqlite3.Row) -> UserAccount:
        """Convert database row to UserAccount entity."""
        return UserAccount(
            id=row["id"],
            email=row["email"],
            password_hash=row["password_hash"],
            role=row["role"],
            first_name=row["first_name"],
            last_name=row["last_name"],
            phone_number=row["phone_number"],
            is_email_verified=bool(row["is_email_verified"]),
            email_verification_token=row["email_verification_token"],
            reset_password_code=row["reset_password_code"],
            reset_password_code_expiry=_parse_timestamp(row["reset_password_code_expiry"]),
            created_at=_parse_timestamp(row["created_at"]),
            updated_at=_parse_timestamp(row["updated_at"]),
        )
