import json

import pytest
from datetime import date
from decimal import Decimal

from finance_tracker.domain.enums import TransactionType
from finance_tracker.repositories.base import StoreError, TransactionNotFoundError
from finance_tracker.repositories.json_file_repository import JsonFileTransactionRepository


@pytest.fixture
def store_path(tmp_path):
    return tmp_path / "data" / "finance_data.json"


@pytest.fixture
def repo(store_path):
    """Create a repository over a fresh JSON document"""
    return JsonFileTransactionRepository(store_path)


@pytest.mark.integration
class TestJsonFileRepository:
    """Test suite for the JSON document store. Uses a real temp file."""

    def test_missing_file_is_created_empty(self, repo, store_path):
        # Act
        transactions = repo.list()

        # Assert
        assert transactions == []
        assert json.loads(store_path.read_text()) == {
            "transactions": [],
            "incomeSources": [],
            "expenseCategories": [],
            "expenseItems": [],
        }

    def test_save_assigns_id_and_persists(self, repo, store_path, txn):
        # Act
        saved = repo.save(txn(amount="300", category="Food", item="Groceries"))

        # Assert
        assert saved.id
        record = json.loads(store_path.read_text())["transactions"][0]
        assert record["id"] == saved.id
        assert record["amount"] == "300"
        assert record["date"] == "2024-03-10"
        assert record["createdAt"] is not None

    def test_save_remembers_names(self, repo, txn):
        # Arrange
        repo.save(txn(TransactionType.INCOME, "5000", "Salary"))
        repo.save(txn(category="Food", item="Groceries"))
        saved = repo.save(txn(category="Food", item="Snacks"))

        # Act
        repo.delete(saved.id)

        # Assert
        assert repo.suggestion_lists() == {
            "incomeSources": ["Salary"],
            "expenseCategories": ["Food"],
            "expenseItems": ["Groceries", "Snacks"],
        }

    def test_get_by_id(self, repo, txn):
        saved = repo.save(txn(amount="12.34"))

        retrieved = repo.get_by_id(saved.id)

        assert retrieved.amount == Decimal("12.34")
        assert retrieved.calendar_date == date(2024, 3, 10)
        assert repo.get_by_id("missing") is None

    def test_list_newest_first(self, repo, txn):
        repo.save(txn(on=date(2024, 3, 1), description="first"))
        repo.save(txn(on=date(2024, 3, 20), description="last"))

        assert [t.description for t in repo.list()] == ["last", "first"]

    def test_update_keeps_type_and_created_at(self, repo, txn):
        # Arrange
        saved = repo.save(txn(category="Food"))
        created_at = saved.created_at

        # Act
        saved.type = TransactionType.INCOME
        saved.category = "Dining"
        repo.update(saved)

        # Assert
        retrieved = repo.get_by_id(saved.id)
        assert retrieved.type == TransactionType.EXPENSE
        assert retrieved.category == "Dining"
        assert retrieved.created_at == created_at

    def test_update_missing_raises(self, repo, txn):
        with pytest.raises(TransactionNotFoundError):
            repo.update(txn(id="missing"))

    def test_delete(self, repo, txn):
        saved = repo.save(txn())

        assert repo.delete(saved.id) is True
        assert repo.delete(saved.id) is False
        assert repo.list() == []

    def test_reads_legacy_records(self, store_path):
        """Numeric ids, float amounts and 'timestamp' are accepted"""
        # Arrange
        store_path.parent.mkdir(parents=True)
        store_path.write_text(json.dumps({
            "transactions": [
                {"id": 1700000000000, "type": "expense", "amount": 19.99, "category": "EMI",
                 "date": "2024-03-05", "timestamp": "2024-03-05T10:00:00.000Z"},
            ],
        }))
        repo = JsonFileTransactionRepository(store_path)

        # Act
        transactions = repo.list()

        # Assert
        assert len(transactions) == 1
        assert transactions[0].id == "1700000000000"
        assert transactions[0].amount == Decimal("19.99")
        assert transactions[0].created_at is not None
        assert repo.get_by_id("1700000000000") is not None

    def test_unreadable_records_are_skipped(self, store_path):
        store_path.parent.mkdir(parents=True)
        store_path.write_text(json.dumps({
            "transactions": [
                {"id": "good", "type": "income", "amount": "10", "category": "Salary", "date": "2024-03-01"},
                {"id": "bad", "type": "transfer", "amount": "10", "category": "X", "date": "2024-03-01"},
                {"id": "infinite", "type": "expense", "amount": "Infinity", "category": "Food", "date": "2024-03-02"},
                {"id": "nan", "type": "expense", "amount": "nan", "category": "Food", "date": "2024-03-03"},
            ],
        }))

        transactions = JsonFileTransactionRepository(store_path).list()

        assert [t.id for t in transactions] == ["good"]

    def test_corrupt_document_raises_store_error(self, store_path):
        store_path.parent.mkdir(parents=True)
        store_path.write_text("{not json")

        with pytest.raises(StoreError):
            JsonFileTransactionRepository(store_path).list()

    def test_list_puts_malformed_dates_last(self, store_path):
        store_path.parent.mkdir(parents=True)
        store_path.write_text(json.dumps({
            "transactions": [
                {"id": "undated", "type": "expense", "amount": "5", "category": "Food", "date": "someday"},
                {"id": "early", "type": "expense", "amount": "5", "category": "Food", "date": "2024-03-01"},
                {"id": "late", "type": "expense", "amount": "5", "category": "Food", "date": "2024-03-20"},
            ],
        }))

        transactions = JsonFileTransactionRepository(store_path).list()

        assert [t.id for t in transactions] == ["late", "early", "undated"]
