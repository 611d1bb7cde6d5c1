"""Read-only lookups into the order and payment method tables.

Order and payment method management live outside the authentication core;
these repositories only answer "which ids belong to this customer" during
login enrichment.
"""

import sqlite3
from pathlib import Path
from typing import List


class _OwnedIdRepository:
    TABLE: str = ""
    SCHEMA: str = ""

    def __init__(self, db_path: str):
        self.db_path = str(db_path)
        Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
        with sqlite3.connect(self.db_path) as conn:
            conn.execute(self.SCHEMA)
            conn.execute(
                f"CREATE INDEX IF NOT EXISTS idx_{self.TABLE}_user_id ON {self.TABLE}(user_id)"
            )
            conn.commit()

    def find_ids_by_user_id(self, user_id: str) -> List[str]:
        with sqlite3.connect(self.db_path) as conn:
            rows = conn.execute(
                f"SELECT id FROM {self.TABLE} WHERE user_id = ? ORDER BY created_at",
                (user_id,),
            ).fetchall()
        return [row[0] for row in rows]


class OrderRepository(_OwnedIdRepository):
    TABLE = "orders"
    SCHEMA = """
        CREATE TABLE IF NOT EXISTS orders (
            id TEXT PRIMARY KEY,
            user_id TEXT NOT NULL,
            supplier_id TEXT,
            status TEXT NOT NULL DEFAULT 'pending',
            created_at TEXT NOT NULL
        )
    """


class PaymentMethodRepository(_OwnedIdRepository):
    TABLE = "payment_methods"
    SCHEMA = """
        CREATE TABLE IF NOT EXISTS payment_methods (
            id TEXT PRIMARY KEY,
            user_id TEXT NOT NULL,
            kind TEXT NOT NULL DEFAULT 'card',
            created_at TEXT NOT NULL
        )
    """
