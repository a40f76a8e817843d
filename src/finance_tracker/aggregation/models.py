"""
Aggregation results.

Immutable value objects returned by the aggregation engine. They are
recomputed from a snapshot on every call and never persisted.
"""
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Tuple

from finance_tracker.domain.models import Transaction

ZERO = Decimal("0")


@dataclass(frozen=True)
class MonthlyTotals:
    """Income and expense totals for one month"""
    income: Decimal = ZERO
    expense: Decimal = ZERO

    @property
    def balance(self) -> Decimal:
        """Net for the month (income - expense)"""
        return self.income - self.expense


@dataclass(frozen=True)
class ControllableSplit:
    """Expense total split into discretionary and fixed commitments"""
    controllable: Decimal = ZERO
    non_controllable: Decimal = ZERO

    @property
    def total(self) -> Decimal:
        return self.controllable + self.non_controllable


@dataclass(frozen=True)
class CategoryBreakdown:
    """One row of a breakdown: a category, its transactions and its share"""
    category: str
    items: Tuple[Transaction, ...]
    total: Decimal
    percentage_of_group: Decimal

    @property
    def count(self) -> int:
        return len(self.items)


@dataclass(frozen=True)
class DailyTotals:
    """Totals for a single calendar day (one calendar heat-map cell)"""
    date: date
    income: Decimal = ZERO
    expense: Decimal = ZERO
    count: int = 0

    @property
    def net(self) -> Decimal:
        return self.income - self.expense


@dataclass(frozen=True)
class Suggestions:
    """Distinct names used to power auto-suggest inputs"""
    income_sources: Tuple[str, ...] = field(default_factory=tuple)
    expense_categories: Tuple[str, ...] = field(default_factory=tuple)
    expense_items: Tuple[str, ...] = field(default_factory=tuple)
