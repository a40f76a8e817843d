from datetime import date
from decimal import Decimal
from typing import Any, List, Optional, Union

from finance_tracker import aggregation
from finance_tracker.aggregation.models import CategoryBreakdown, DailyTotals, Suggestions
from finance_tracker.classification import ControllabilityClassifier
from finance_tracker.dates import to_calendar_date, validate_month
from finance_tracker.domain.enums import Controllability, TransactionType
from finance_tracker.domain.models import DateLike, Transaction, to_decimal
from finance_tracker.logging_setup import get_logger
from finance_tracker.repositories.base import TransactionNotFoundError, TransactionRepository
from finance_tracker.services.models import CalendarMonth, MonthlySummary

logger = get_logger("finance_tracker.services")

EDITABLE_FIELDS = ("amount", "category", "item", "date", "description")


def _clean_transaction(
    transaction_type: TransactionType,
    amount: Any,
    category: str,
    transaction_date: DateLike,
    description: str,
    item: str,
) -> Transaction:
    """Validate and normalize user input, shared by add and edit"""
    if not category or not category.strip():
        raise ValueError("Category is required")
    if to_calendar_date(transaction_date) is None:
        raise ValueError(f"Invalid date: {transaction_date!r}")

    return Transaction(
        type=transaction_type,
        amount=to_decimal(amount),
        category=category.strip(),
        # Items only describe expenses
        item=(item or "").strip() if transaction_type == TransactionType.EXPENSE else "",
        date=transaction_date,
        description=(description or "").strip(),
    )

class TransactionService:
    """
    Coordinates the store and the aggregation engine.

    Every query lists a fresh snapshot from the repository and runs the
    pure aggregation functions over it; nothing is cached between calls.
    """

    def __init__(
        self,
        repository: TransactionRepository,
        classifier: Optional[ControllabilityClassifier] = None,
    ):
        self.repository = repository
        self._classifier: Optional[ControllabilityClassifier] = classifier

    @property
    def classifier(self) -> ControllabilityClassifier:
        """Lazy-load the controllability classifier"""
        if self._classifier is None:
            self._classifier = ControllabilityClassifier()
        return self._classifier

    def add_transaction(
        self,
        transaction_type: Union[TransactionType, str],
        amount: Union[Decimal, float, int, str],
        category: str,
        transaction_date: DateLike,
        description: str = "",
        item: str = "",
    ) -> Transaction:
        """
        Record a new income or expense.

        Args:
            transaction_type: INCOME or EXPENSE (or its string value)
            amount: Amount in any currency unit
            category: Income source or expense category
            transaction_date: Calendar date of the transaction
            description: Optional note
            item: Optional expense item, ignored for income

        Returns:
            The saved transaction, with its ID

        Raises:
            ValueError: If category is blank, the amount is not a finite number
                or the date is not a calendar date
        """
        transaction = _clean_transaction(
            transaction_type=TransactionType(transaction_type),
            amount=amount,
            category=category,
            transaction_date=transaction_date,
            description=description,
            item=item,
        )
        saved = self.repository.save(transaction)
        logger.info("Added %s %s (%s)", saved.type.value, saved.amount, saved.category)
        return saved

    def update_transaction(self, transaction_id: str, **changes: Any) -> Transaction:
        """
        Edit a transaction. Its type never changes.

        Args:
            transaction_id: ID of the transaction to edit
            **changes: New values for amount, category, item, date or description

        Raises:
            TransactionNotFoundError: If transaction doesn't exist
            ValueError: If an unknown or read-only field is given, or a new
                value fails the same checks as add_transaction
        """
        unknown = set(changes) - set(EDITABLE_FIELDS)
        if unknown:
            raise ValueError(f"Cannot edit field(s): {', '.join(sorted(unknown))}")

        existing = self.repository.get_by_id(transaction_id)
        if existing is None:
            raise TransactionNotFoundError(f"Transaction with ID {transaction_id} not found")

        updated = _clean_transaction(
            transaction_type=existing.type,
            amount=changes.get("amount", existing.amount),
            category=changes.get("category", existing.category),
            transaction_date=changes.get("date", existing.date),
            description=changes.get("description", existing.description),
            item=changes.get("item", existing.item),
        )
        updated.id = existing.id
        updated.created_at = existing.created_at
        return self.repository.update(updated)

    def delete_transaction(self, transaction_id: str) -> bool:
        """Delete a transaction permanently. Returns False if it didn't exist."""
        deleted = self.repository.delete(transaction_id)
        if not deleted:
            logger.warning("Transaction %s not found, nothing deleted", transaction_id)
        return deleted

    def get_snapshot(self) -> List[Transaction]:
        """Every transaction currently in the store"""
        return self.repository.list()

    def get_monthly_summary(self, year: int, month: int) -> MonthlySummary:
        """Summary cards and category tables for a month"""
        transactions = self.get_snapshot()
        monthly = aggregation.transactions_in_month(transactions, year, month)

        return MonthlySummary(
            year=year,
            month=month,
            totals=aggregation.monthly_totals(monthly, year, month),
            split=aggregation.controllable_split(monthly, year, month, self.classifier),
            expense_breakdown=aggregation.breakdown_by_category(
                t for t in monthly if t.is_expense
            ),
            income_breakdown=aggregation.breakdown_by_category(
                t for t in monthly if t.is_income
            ),
        )

    def get_transactions(self, year: int, month: int) -> List[Transaction]:
        """Transactions of a month, newest first"""
        return aggregation.sort_by_date_descending(
            aggregation.transactions_in_month(self.get_snapshot(), year, month)
        )

    def get_calendar(self, year: int, month: int) -> CalendarMonth:
        """Daily totals for the calendar heat-map"""
        return CalendarMonth(
            year=year,
            month=month,
            days=aggregation.daily_totals(self.get_snapshot(), year, month),
        )

    def get_day(self, year: int, month: int, day: int) -> List[Transaction]:
        """Transactions on one day"""
        return aggregation.transactions_on_day(self.get_snapshot(), year, month, day)

    def get_day_totals(self, year: int, month: int, day: int) -> DailyTotals:
        """Totals for one day, zero when nothing happened"""
        totals = aggregation.daily_totals(self.get_snapshot(), year, month)
        return totals.get(day, DailyTotals(date=date(year, month, day)))

    def get_breakdown(
        self,
        year: int,
        month: int,
        transaction_type: Union[TransactionType, str] = TransactionType.EXPENSE,
        group: Optional[Union[Controllability, str]] = None,
    ) -> List[CategoryBreakdown]:
        """
        Per-category breakdown behind one of the summary cards.

        Args:
            year: Four digit year
            month: Month number, 1-12
            transaction_type: INCOME or EXPENSE
            group: Optionally restrict expenses to one controllability group

        Raises:
            ValueError: If a group is requested for income
        """
        validate_month(year, month)
        transaction_type = TransactionType(transaction_type)
        transactions = [
            t for t in aggregation.transactions_in_month(self.get_snapshot(), year, month)
            if t.type == transaction_type
        ]

        if group is not None:
            if transaction_type != TransactionType.EXPENSE:
                raise ValueError("Controllability groups only apply to expenses")
            transactions = aggregation.filter_by_controllability(
                transactions, Controllability(group), self.classifier
            )

        return aggregation.breakdown_by_category(transactions)

    def get_category_details(
        self,
        year: int,
        month: int,
        category: str,
        transaction_type: Union[TransactionType, str] = TransactionType.EXPENSE,
    ) -> List[Transaction]:
        """Transactions of one category in a month, newest first"""
        transaction_type = TransactionType(transaction_type)
        items = [
            t for t in aggregation.transactions_in_month(self.get_snapshot(), year, month)
            if t.type == transaction_type and t.category == category
        ]
        return aggregation.sort_by_date_descending(items)

    def get_suggestions(self) -> Suggestions:
        """
        Known income sources, expense categories and items for auto-suggest.

        Names still in use are merged with the ones the store remembers,
        so a name survives the deletion of its last transaction.
        """
        in_use = aggregation.distinct_values(self.get_snapshot())
        remembered = self.repository.suggestion_lists()

        def merge(current, key: str):
            names = set(current) | {name for name in remembered.get(key, []) if name and name.strip()}
            return tuple(sorted(names))

        return Suggestions(
            income_sources=merge(in_use.income_sources, "incomeSources"),
            expense_categories=merge(in_use.expense_categories, "expenseCategories"),
            expense_items=merge(in_use.expense_items, "expenseItems"),
        )
