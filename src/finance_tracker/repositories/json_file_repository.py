import json
import os
import tempfile
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from finance_tracker import aggregation
from finance_tracker.domain.enums import TransactionType
from finance_tracker.domain.models import Transaction
from finance_tracker.logging_setup import get_logger
from finance_tracker.repositories.base import StoreError, TransactionNotFoundError, TransactionRepository

logger = get_logger("finance_tracker.repositories.json")

EMPTY_DOCUMENT: Dict[str, List[Any]] = {
    "transactions": [],
    "incomeSources": [],
    "expenseCategories": [],
    "expenseItems": [],
}


class JsonFileTransactionRepository(TransactionRepository):
    """
    Transaction store backed by a single JSON document.

    The document also keeps the lists of names that were ever used for
    income sources, expense categories and expense items.
    """

    def __init__(self, path: Path | str = "data/finance_data.json"):
        self.path = Path(path)

    def _read(self) -> Dict[str, Any]:
        if not self.path.exists():
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self._write(EMPTY_DOCUMENT)
            logger.info("Created empty store at %s", self.path)

        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise StoreError(f"Could not read store {self.path}: {e}") from e

        for key, default in EMPTY_DOCUMENT.items():
            data.setdefault(key, list(default))
        return data

    def _write(self, data: Dict[str, Any]) -> None:
        """Write atomically: temp file in the same directory, then replace."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
            os.replace(tmp_path, self.path)
        except OSError as e:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise StoreError(f"Could not write store {self.path}: {e}") from e

    def _records(self, data: Dict[str, Any]) -> List[Transaction]:
        transactions = []
        for record in data["transactions"]:
            try:
                transactions.append(Transaction.from_record(record))
            except (KeyError, ValueError) as e:
                logger.warning("Skipping unreadable record %r: %s", record.get("id"), e)
        return transactions

    @staticmethod
    def _remember_names(data: Dict[str, Any], transaction: Transaction) -> None:
        """Add new names to the suggestion lists"""
        def remember(key: str, value: str) -> None:
            if value and value not in data[key]:
                data[key].append(value)

        if transaction.type == TransactionType.INCOME:
            remember("incomeSources", transaction.category)
        else:
            remember("expenseCategories", transaction.category)
            remember("expenseItems", transaction.item)

    def save(self, transaction: Transaction) -> Transaction:
        """Save a single transaction."""
        data = self._read()

        now = datetime.now(timezone.utc)
        transaction.id = uuid.uuid4().hex
        transaction.created_at = now
        transaction.updated_at = now

        data["transactions"].append(transaction.to_record())
        self._remember_names(data, transaction)
        self._write(data)

        logger.info("Saved transaction %s", transaction.id)
        return transaction

    def get_by_id(self, transaction_id: str) -> Optional[Transaction]:
        """Retrieve a transaction by ID, or None if it doesn't exist"""
        for txn in self._records(self._read()):
            if txn.id == str(transaction_id):
                return txn
        return None

    def list(self) -> List[Transaction]:
        """Retrieve all transactions, newest date first."""
        return aggregation.sort_by_date_descending(self._records(self._read()))

    def update(self, transaction: Transaction) -> Transaction:
        """Replace an existing transaction."""
        if transaction.id is None:
            raise ValueError("Cannot update transaction without ID")

        data = self._read()
        for index, record in enumerate(data["transactions"]):
            if str(record.get("id")) != str(transaction.id):
                continue

            existing = Transaction.from_record(record)
            transaction.type = existing.type
            transaction.created_at = existing.created_at
            transaction.updated_at = datetime.now(timezone.utc)

            data["transactions"][index] = transaction.to_record()
            self._remember_names(data, transaction)
            self._write(data)

            logger.info("Updated transaction %s", transaction.id)
            return transaction

        raise TransactionNotFoundError(
            f"Transaction with ID {transaction.id} not found"
        )

    def delete(self, transaction_id: str) -> bool:
        """Delete a transaction by ID."""
        data = self._read()
        remaining = [
            record for record in data["transactions"]
            if str(record.get("id")) != str(transaction_id)
        ]
        if len(remaining) == len(data["transactions"]):
            return False

        data["transactions"] = remaining
        self._write(data)
        logger.info("Deleted transaction %s", transaction_id)
        return True

    def suggestion_lists(self) -> Dict[str, List[str]]:
        """Names remembered by the store, including ones no longer in use"""
        data = self._read()
        return {key: list(data[key]) for key in ("incomeSources", "expenseCategories", "expenseItems")}
