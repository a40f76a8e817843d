import pytest
from datetime import date
from decimal import Decimal
from typing import Callable, List

from finance_tracker.domain.enums import TransactionType
from finance_tracker.domain.models import Transaction


def make_transaction(
    type: TransactionType = TransactionType.EXPENSE,
    amount: str = "10.00",
    category: str = "Food",
    on=date(2024, 3, 10),
    item: str = "",
    description: str = "",
    id=None,
) -> Transaction:
    return Transaction(
        type=type,
        amount=Decimal(amount),
        category=category,
        date=on,
        item=item,
        description=description,
        id=id,
    )


@pytest.fixture
def txn() -> Callable[..., Transaction]:
    """Factory for transactions with sensible defaults"""
    return make_transaction


@pytest.fixture
def march_transactions() -> List[Transaction]:
    """Salary, an EMI and groceries in March 2024"""
    return [
        make_transaction(TransactionType.INCOME, "5000", "Salary", date(2024, 3, 1), id="t1"),
        make_transaction(TransactionType.EXPENSE, "1200", "EMI", date(2024, 3, 5), id="t2"),
        make_transaction(TransactionType.EXPENSE, "300", "Food", date(2024, 3, 10), item="Groceries", id="t3"),
    ]
