import pytest
from datetime import date
from decimal import Decimal
from typing import List

from finance_tracker.classification import ControllabilityClassifier
from finance_tracker.domain.enums import Controllability, TransactionType
from finance_tracker.domain.models import Transaction
from finance_tracker.repositories.base import TransactionNotFoundError, TransactionRepository
from finance_tracker.services.models import CalendarMonth, MonthlySummary
from finance_tracker.services.transaction_service import TransactionService

@pytest.fixture
def mock_repository(mocker) -> TransactionRepository:
    """Create a mock repository"""
    repository = mocker.Mock()
    repository.save.side_effect = lambda t: t
    repository.update.side_effect = lambda t: t
    repository.suggestion_lists.return_value = {}
    return repository

@pytest.fixture
def service(mock_repository) -> TransactionService:
    """Create service with mocked repository and the built-in rule table"""
    return TransactionService(
        repository=mock_repository,
        classifier=ControllabilityClassifier(config={"rules": []}),
    )

@pytest.fixture
def snapshot(march_transactions, txn) -> List[Transaction]:
    """March 2024 plus a few neighbours"""
    return march_transactions + [
        txn(TransactionType.EXPENSE, "80", "Home", date(2024, 3, 10), item="Home", id="t4"),
        txn(TransactionType.EXPENSE, "20", "Food", date(2024, 3, 25), item="Snacks", id="t5"),
        txn(TransactionType.EXPENSE, "999", "Food", date(2024, 4, 1), id="april"),
    ]

@pytest.mark.unit
class TestTransactionServiceMutations:
    """Test add/update/delete"""

    def test_add_transaction_saves_to_repository(
            self,
            service: TransactionService,
            mock_repository
    ):
        # Act
        result = service.add_transaction(
            transaction_type="expense",
            amount="300",
            category=" Food ",
            transaction_date="2024-03-10",
            item=" Groceries ",
        )

        # Assert
        mock_repository.save.assert_called_once()
        saved: Transaction = mock_repository.save.call_args.args[0]
        assert saved.type == TransactionType.EXPENSE
        assert saved.amount == Decimal("300")
        assert saved.category == "Food"
        assert saved.item == "Groceries"
        assert result is saved

    def test_add_income_drops_item(self, service: TransactionService, mock_repository):
        result = service.add_transaction(TransactionType.INCOME, 5000, "Salary", date(2024, 3, 1), item="x")

        assert result.item == ""

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"category": "  "},
            {"transaction_date": "2024-02-30"},
            {"amount": "lots"},
            {"amount": "inf"},
            {"amount": "NaN"},
            {"transaction_type": "transfer"},
        ],
    )
    def test_add_transaction_rejects_bad_input(self, service: TransactionService, mock_repository, kwargs):
        arguments = {
            "transaction_type": "expense",
            "amount": "10",
            "category": "Food",
            "transaction_date": "2024-03-10",
        }
        arguments.update(kwargs)

        with pytest.raises(ValueError):
            service.add_transaction(**arguments)

        mock_repository.save.assert_not_called()

    def test_update_preserves_type_and_id(
            self,
            service: TransactionService,
            mock_repository,
            march_transactions: List[Transaction]
    ):
        # Arrange
        mock_repository.get_by_id.return_value = march_transactions[2]

        # Act
        result = service.update_transaction("t3", amount="350", item="Vegetables")

        # Assert
        mock_repository.get_by_id.assert_called_once_with("t3")
        mock_repository.update.assert_called_once()
        assert result.id == "t3"
        assert result.type == TransactionType.EXPENSE
        assert result.amount == Decimal("350")
        assert result.item == "Vegetables"
        assert result.category == "Food"

    def test_update_rejects_type_change(self, service: TransactionService, mock_repository):
        with pytest.raises(ValueError):
            service.update_transaction("t1", type="expense")

        mock_repository.update.assert_not_called()

    @pytest.mark.parametrize(
        "changes",
        [
            {"category": "   "},
            {"category": ""},
            {"amount": "inf"},
            {"amount": "nan"},
            {"date": "2024-13-01"},
        ],
    )
    def test_update_rejects_bad_values(
            self,
            service: TransactionService,
            mock_repository,
            march_transactions: List[Transaction],
            changes
    ):
        # Arrange
        mock_repository.get_by_id.return_value = march_transactions[2]

        # Act & Assert
        with pytest.raises(ValueError):
            service.update_transaction("t3", **changes)

        mock_repository.update.assert_not_called()

    def test_update_strips_text_fields(self, service: TransactionService, mock_repository, march_transactions):
        mock_repository.get_by_id.return_value = march_transactions[2]

        result = service.update_transaction("t3", category="  Dining ", item=" Lunch ", description=" team ")

        assert result.category == "Dining"
        assert result.item == "Lunch"
        assert result.description == "team"

    def test_update_income_drops_item(self, service: TransactionService, mock_repository, march_transactions):
        # Arrange
        mock_repository.get_by_id.return_value = march_transactions[0]

        # Act
        result = service.update_transaction("t1", item="Bonus")

        # Assert
        assert result.type == TransactionType.INCOME
        assert result.item == ""

    def test_update_missing_transaction(self, service: TransactionService, mock_repository):
        mock_repository.get_by_id.return_value = None

        with pytest.raises(TransactionNotFoundError):
            service.update_transaction("nope", amount="1")

    def test_delete_delegates_to_repository(self, service: TransactionService, mock_repository):
        mock_repository.delete.return_value = True

        assert service.delete_transaction("t1") is True
        mock_repository.delete.assert_called_once_with("t1")

@pytest.mark.unit
class TestTransactionServiceMonthlySummary:

    def test_get_monthly_summary(
            self,
            service: TransactionService,
            mock_repository,
            snapshot: List[Transaction]
    ):
        # Arrange
        mock_repository.list.return_value = snapshot

        # Act
        result: MonthlySummary = service.get_monthly_summary(year=2024, month=3)

        # Assert
        mock_repository.list.assert_called_once_with()
        assert result.year == 2024
        assert result.month == 3
        assert result.label == "March 2024"
        assert result.totals.income == Decimal("5000")
        assert result.totals.expense == Decimal("1600")
        assert result.totals.balance == Decimal("3400")
        assert result.split.controllable == Decimal("320")
        assert result.split.non_controllable == Decimal("1280")
        assert result.top_spending_categories == [
            ("EMI", Decimal("1200")),
            ("Food", Decimal("320")),
            ("Home", Decimal("80")),
        ]
        assert [row.category for row in result.income_breakdown] == ["Salary"]
        assert result.total_transactions == 5

    def test_empty_month(self, service: TransactionService, mock_repository):
        mock_repository.list.return_value = []

        result = service.get_monthly_summary(2024, 2)

        assert result.total_transactions == 0
        assert result.totals.balance == Decimal("0")
        assert result.expense_breakdown == []
        assert "February 2024" in str(result)

    def test_invalid_month_raises(self, service: TransactionService, mock_repository):
        mock_repository.list.return_value = []

        with pytest.raises(ValueError):
            service.get_monthly_summary(2024, 0)

@pytest.mark.unit
class TestTransactionServiceViews:

    def test_get_transactions_newest_first(self, service, mock_repository, snapshot):
        mock_repository.list.return_value = snapshot

        result = service.get_transactions(2024, 3)

        assert [t.id for t in result] == ["t5", "t3", "t4", "t2", "t1"]

    def test_get_calendar(self, service, mock_repository, snapshot):
        # Arrange
        mock_repository.list.return_value = snapshot

        # Act
        cal: CalendarMonth = service.get_calendar(2024, 3)

        # Assert
        assert sorted(cal.days) == [1, 5, 10, 25]
        assert cal.totals_for(date(2024, 3, 10)).expense == Decimal("380")
        assert cal.totals_for(date(2024, 4, 1)) is None
        assert cal.totals_for(date(2024, 3, 2)) is None
        assert cal.busiest_day.date == date(2024, 3, 5)
        # March 2024 starts on a Friday, grid is Sunday-first
        assert cal.weeks[0][0] == date(2024, 2, 25)
        assert all(len(week) == 7 for week in cal.weeks)

    def test_get_day(self, service, mock_repository, snapshot):
        mock_repository.list.return_value = snapshot

        assert [t.id for t in service.get_day(2024, 3, 10)] == ["t3", "t4"]

    def test_get_day_totals_for_empty_day(self, service, mock_repository, snapshot):
        mock_repository.list.return_value = snapshot

        totals = service.get_day_totals(2024, 3, 2)

        assert totals.count == 0
        assert totals.expense == Decimal("0")

    def test_get_breakdown_for_non_controllable_group(self, service, mock_repository, snapshot):
        # Arrange
        mock_repository.list.return_value = snapshot

        # Act
        rows = service.get_breakdown(2024, 3, "expense", Controllability.NON_CONTROLLABLE)

        # Assert
        assert [(row.category, row.total) for row in rows] == [("EMI", Decimal("1200")), ("Home", Decimal("80"))]
        assert rows[0].percentage_of_group == Decimal("93.75")
        assert rows[1].percentage_of_group == Decimal("6.25")

    def test_get_breakdown_for_income(self, service, mock_repository, snapshot):
        mock_repository.list.return_value = snapshot

        rows = service.get_breakdown(2024, 3, TransactionType.INCOME)

        assert [row.category for row in rows] == ["Salary"]
        assert rows[0].percentage_of_group == Decimal("100.00")

    def test_group_not_allowed_for_income(self, service, mock_repository, snapshot):
        mock_repository.list.return_value = snapshot

        with pytest.raises(ValueError):
            service.get_breakdown(2024, 3, TransactionType.INCOME, "controllable")

    def test_get_category_details(self, service, mock_repository, snapshot):
        mock_repository.list.return_value = snapshot

        items = service.get_category_details(2024, 3, "Food")

        assert [t.id for t in items] == ["t5", "t3"]

    def test_get_suggestions(self, service, mock_repository, snapshot):
        mock_repository.list.return_value = snapshot

        suggestions = service.get_suggestions()

        assert suggestions.income_sources == ("Salary",)
        assert suggestions.expense_categories == ("EMI", "Food", "Home")
        assert suggestions.expense_items == ("Groceries", "Home", "Snacks")

    def test_get_suggestions_includes_remembered_names(self, service, mock_repository, snapshot):
        # Arrange
        mock_repository.list.return_value = snapshot
        mock_repository.suggestion_lists.return_value = {
            "incomeSources": ["Bonus", "Salary"],
            "expenseCategories": ["Travel", " "],
        }

        # Act
        suggestions = service.get_suggestions()

        # Assert
        assert suggestions.income_sources == ("Bonus", "Salary")
        assert suggestions.expense_categories == ("EMI", "Food", "Home", "Travel")
        assert suggestions.expense_items == ("Groceries", "Home", "Snacks")

    def test_classifier_is_lazy_loaded(self, mock_repository, mocker):
        mocker.patch(
            "finance_tracker.classification.classifier.ConfigLoader.load_controllability_rules",
            side_effect=FileNotFoundError,
        )
        service = TransactionService(repository=mock_repository)

        assert service._classifier is None
        assert isinstance(service.classifier, ControllabilityClassifier)
