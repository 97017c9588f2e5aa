"""
Transaction store contract and a SQLite implementation of it.

The import service only needs two calls from a store: a bulk insert that
silently skips rows already present under (label, amount, date, owner), and a
read of all transactions with their category for the recommender.
"""
import asyncio
import sqlite3
from decimal import Decimal
from typing import List, Optional, Protocol, Sequence

from ledger.config import get_settings
from ledger.exceptions import StoreError
from ledger.logger import setup_logger
from ledger.schema import (
    Category,
    CategoryId,
    HistoricalTransaction,
    NormalizedTransactionRecord,
    normalize_amount,
)

logger = setup_logger(__name__)


class TransactionStore(Protocol):
    """What the import service expects from the data store."""

    async def bulk_insert(
        self, records: Sequence[NormalizedTransactionRecord]
    ) -> List[NormalizedTransactionRecord]:
        """Insert records, ignoring duplicates; return the rows actually inserted."""
        ...

    async def list_all_with_category(self) -> List[HistoricalTransaction]:
        """Return every stored transaction with its resolved category."""
        ...


class SqliteTransactionStore:
    """SQLite-backed TransactionStore scoped to one owner."""

    def __init__(self, db_path: Optional[str] = None, owner_id: Optional[str] = None):
        settings = get_settings()
        self.db_path = db_path or settings.database_path
        self.owner_id = owner_id or settings.owner_id

    def get_connection(self) -> sqlite3.Connection:
        """Create a database connection."""
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def init_db(self) -> None:
        """Initialize database tables."""
        conn = self.get_connection()
        cursor = conn.cursor()

        try:
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS category (
                    id TEXT PRIMARY KEY,
                    label TEXT NOT NULL
                )
            """)
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS "transaction" (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    label TEXT NOT NULL,
                    amount TEXT NOT NULL,
                    transaction_date TEXT NOT NULL,
                    category_id TEXT REFERENCES category(id),
                    owner_id TEXT NOT NULL,
                    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                    UNIQUE (label, amount, transaction_date, owner_id)
                )
            """)
            conn.commit()
            logger.info(f"Database initialized at {self.db_path}")
        except sqlite3.Error as e:
            logger.error(f"Database initialization failed: {e}")
            raise StoreError("Database initialization failed", details={"error": str(e)}) from e
        finally:
            conn.close()

    def add_category(self, category_id: CategoryId, label: str) -> Category:
        """Add a category (no-op when the id already exists)."""
        conn = self.get_connection()

        try:
            conn.execute(
                "INSERT OR IGNORE INTO category (id, label) VALUES (?, ?)",
                (str(category_id), label)
            )
            conn.commit()
            return Category(id=str(category_id), label=label)
        except sqlite3.Error as e:
            logger.error(f"Failed to add category {category_id}: {e}")
            raise StoreError(f"Failed to add category {category_id}", details={"error": str(e)}) from e
        finally:
            conn.close()

    def _insert_records(
        self, records: Sequence[NormalizedTransactionRecord]
    ) -> List[NormalizedTransactionRecord]:
        conn = self.get_connection()
        inserted: List[NormalizedTransactionRecord] = []

        try:
            with conn:
                for record in records:
                    label, amount, transaction_date, owner_id = record.dedup_key(self.owner_id)
                    category_id = None if record.category_id is None else str(record.category_id)
                    cursor = conn.execute(
                        'INSERT OR IGNORE INTO "transaction" '
                        "(label, amount, transaction_date, category_id, owner_id) "
                        "VALUES (?, ?, ?, ?, ?)",
                        (label, amount, transaction_date, category_id, owner_id)
                    )
                    if cursor.rowcount == 1:
                        inserted.append(record)
            return inserted
        except sqlite3.Error as e:
            logger.error(f"Bulk insert of {len(records)} transactions failed: {e}")
            raise StoreError("Bulk insert failed", details={"error": str(e)}) from e
        finally:
            conn.close()

    def _select_with_category(self) -> List[HistoricalTransaction]:
        conn = self.get_connection()

        try:
            rows = conn.execute(
                'SELECT t.label, t.amount, t.transaction_date, '
                'c.id AS category_id, c.label AS category_label '
                'FROM "transaction" t LEFT JOIN category c ON c.id = t.category_id '
                "WHERE t.owner_id = ? ORDER BY t.transaction_date, t.id",
                (self.owner_id,)
            ).fetchall()
        except sqlite3.Error as e:
            logger.error(f"Failed to read transactions: {e}")
            raise StoreError("Failed to read transactions", details={"error": str(e)}) from e
        finally:
            conn.close()

        return [
            HistoricalTransaction(
                label=row["label"],
                amount=Decimal(row["amount"]),
                transaction_date=row["transaction_date"],
                category=(
                    Category(id=row["category_id"], label=row["category_label"])
                    if row["category_id"] is not None else None
                ),
            )
            for row in rows
        ]

    async def bulk_insert(
        self, records: Sequence[NormalizedTransactionRecord]
    ) -> List[NormalizedTransactionRecord]:
        if not records:
            return []
        loop = asyncio.get_event_loop()
        inserted = await loop.run_in_executor(None, self._insert_records, list(records))
        logger.info(f"Inserted {len(inserted)}/{len(records)} transactions")
        return inserted

    async def list_all_with_category(self) -> List[HistoricalTransaction]:
        loop = asyncio.get_event_loop()
        return await loop.run_in_executor(None, self._select_with_category)
