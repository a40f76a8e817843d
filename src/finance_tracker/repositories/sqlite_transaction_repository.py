import sqlite3
import uuid
from datetime import date, datetime, timezone
from typing import List, Optional

from finance_tracker.database.connection import DatabaseManager
from finance_tracker.domain.enums import TransactionType
from finance_tracker.domain.models import Transaction, to_decimal
from finance_tracker.logging_setup import get_logger
from finance_tracker.repositories.base import TransactionNotFoundError, TransactionRepository

logger = get_logger("finance_tracker.repositories.sqlite")

class SQLiteTransactionRepository(TransactionRepository):
    """
    SQLite implementation of the TransactionRepository.

    Handles all database operations for transactions using raw SQL.
    """

    def __init__(self, db_manager: DatabaseManager):
        self.db = db_manager

    def save(self, transaction: Transaction) -> Transaction:
        """Save a single transaction."""
        now = datetime.now(timezone.utc)
        transaction_id = uuid.uuid4().hex

        with self.db.transaction() as conn:
            conn.execute(
                """
                INSERT INTO transactions (
                    id, type, amount, category, item, date,
                    description, created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    transaction_id,
                    transaction.type.value,
                    str(transaction.amount), # Store as string for precision
                    transaction.category,
                    transaction.item or "",
                    self._date_to_text(transaction.date),
                    transaction.description or "",
                    now.isoformat(),
                    now.isoformat(),
                ),
            )

        transaction.id = transaction_id
        transaction.created_at = now
        transaction.updated_at = now

        logger.info("Saved transaction %s", transaction.id)
        return transaction

    def get_by_id(self, transaction_id: str) -> Optional[Transaction]:
        """Retrieve a transaction by ID, or None if it doesn't exist"""
        conn = self.db.get_connection()
        cursor = conn.execute(
            "SELECT * FROM transactions WHERE id = ?",
            (str(transaction_id),)
        )
        row = cursor.fetchone()

        if row is None:
            return None

        return self._row_to_transaction(row)

    def list(self) -> List[Transaction]:
        """Retrieve all transactions, newest date first. Unreadable rows are skipped."""
        conn = self.db.get_connection()
        cursor = conn.execute(
            "SELECT * FROM transactions ORDER BY date DESC, created_at DESC"
        )
        transactions = []
        for row in cursor.fetchall():
            try:
                transactions.append(self._row_to_transaction(row))
            except ValueError as e:
                logger.warning("Skipping unreadable row %r: %s", row["id"], e)
        return transactions

    def update(self, transaction: Transaction) -> Transaction:
        """Replace an existing transaction, keeping its type."""
        if transaction.id is None:
            raise ValueError("Cannot update transaction without ID")

        existing = self.get_by_id(transaction.id)
        if existing is None:
            raise TransactionNotFoundError(
                f"Transaction with ID {transaction.id} not found"
            )

        now = datetime.now(timezone.utc)
        with self.db.transaction() as conn:
            conn.execute(
                """
                UPDATE transactions
                SET amount = ?, category = ?, item = ?, date = ?,
                    description = ?, updated_at = ?
                WHERE id = ?
                """,
                (
                    str(transaction.amount),
                    transaction.category,
                    transaction.item or "",
                    self._date_to_text(transaction.date),
                    transaction.description or "",
                    now.isoformat(),
                    transaction.id,
                )
            )

        transaction.type = existing.type
        transaction.created_at = existing.created_at
        transaction.updated_at = now

        logger.info("Updated transaction %s", transaction.id)
        return transaction

    def delete(self, transaction_id: str) -> bool:
        """Delete a transaction by ID."""
        with self.db.transaction() as conn:
            cursor = conn.execute(
                "DELETE FROM transactions WHERE id = ?",
                (str(transaction_id),)
            )
            deleted = cursor.rowcount > 0

        if deleted:
            logger.info("Deleted transaction %s", transaction_id)
        return deleted

    @staticmethod
    def _date_to_text(value) -> str:
        if isinstance(value, (date, datetime)):
            return value.isoformat()
        return str(value)

    def _row_to_transaction(self, row: sqlite3.Row) -> Transaction:
        """Convert database row to Transaction object."""
        return Transaction(
            id=row["id"],
            type=TransactionType(row["type"]),
            amount=to_decimal(row["amount"]),
            category=row["category"],
            item=row["item"],
            date=row["date"],
            description=row["description"],
            created_at=datetime.fromisoformat(row["created_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]),
        )
