from finance_tracker.repositories.base import (
    StoreError,
    TransactionNotFoundError,
    TransactionRepository,
)
from finance_tracker.repositories.json_file_repository import JsonFileTransactionRepository
from finance_tracker.repositories.sqlite_transaction_repository import SQLiteTransactionRepository

__all__ = [
    "JsonFileTransactionRepository",
    "SQLiteTransactionRepository",
    "StoreError",
    "TransactionNotFoundError",
    "TransactionRepository",
]
