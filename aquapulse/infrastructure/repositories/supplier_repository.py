"""Repository for supplier account persistence."""

import json
import sqlite3
from datetime import datetime
from typing import Any, Dict, List, Optional

from aquapulse.domain.models.principal import SupplierAccount

from .account_repository import SQLiteAccountRepository, _parse_timestamp, _utcnow


class SupplierRepository(SQLiteAccountRepository[SupplierAccount]):
    """Repository for managing SupplierAccount entities in SQLite."""

    TABLE = "suppliers"

    def _create_table(self, conn: sqlite3.Connection) -> None:
        conn.execute("""
            CREATE TABLE IF NOT EXISTS suppliers (
                id TEXT PRIMARY KEY,
                email TEXT UNIQUE NOT NULL,
                password_hash TEXT NOT NULL,
                company TEXT NOT NULL,
                first_name TEXT NOT NULL DEFAULT '',
                last_name TEXT NOT NULL DEFAULT '',
                phone_number TEXT,
                service_areas TEXT NOT NULL DEFAULT '[]',
                pricing TEXT NOT NULL DEFAULT '[]',
                rating REAL NOT NULL DEFAULT 0,
                active INTEGER NOT NULL DEFAULT 1,
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
        company: str,
        first_name: str = "",
        last_name: str = "",
        phone_number: Optional[str] = None,
        service_areas: Optional[List[Dict[str, Any]]] = None,
        pricing: Optional[List[Dict[str, Any]]] = None,
        email_verification_token: Optional[str] = None,
    ) -> SupplierAccount:
        """Create a new supplier."""
        supplier_id = self._new_id()
        now = _utcnow()
        areas = list(service_areas or [])
        tiers = list(pricing or [])

        self._insert_account(
            """
            INSERT INTO suppliers (
                id, email, password_hash, company, first_name, last_name, phone_number,
                service_areas, pricing, email_verification_token, created_at, updated_at
            )
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                supplier_id,
                email,
                password_hash,
                company,
                first_name,
                last_name,
                phone_number,
                json.dumps(areas, ensure_ascii=False),
                json.dumps(tiers, ensure_ascii=False),
                email_verification_token,
                now,
                now,
            ),
            email,
        )

        return SupplierAccount(
            id=supplier_id,
            email=email,
            password_hash=password_hash,
            company=company,
            first_name=first_name,
            last_name=last_name,
            phone_number=phone_number,
            service_areas=areas,
            pricing=tiers,
            email_verification_token=email_verification_token,
            created_at=datetime.fromisoformat(now),
            updated_at=datetime.fromisoformat(now),
        )

    def _row_to_account(self, row: sqlite3.Row) -> SupplierAccount:
        """Convert database row to SupplierAccount entity."""
        return SupplierAccount(
            id=row["id"],
            email=row["email"],
            password_hash=row["password_hash"],
            company=row["company"],
            first_name=row["first_name"],
            last_name=row["last_name"],
            phone_number=row["phone_number"],
            service_areas=json.loads(row["service_areas"] or "[]"),
            pricing=json.loads(row["pricing"] or "[]"),
            rating=float(row["rating"]),
            active=bool(row["active"]),
            is_email_verified=bool(row["is_email_verified"]),
            email_verification_token=row["email_verification_token"],
            reset_password_code=row["reset_password_code"],
            reset_password_code_expiry=_parse_timestamp(row["reset_password_code_expiry"]),
            created_at=_parse_timestamp(row["created_at"]),
            updated_at=_parse_timestamp(row["updated_at"]),
        )
