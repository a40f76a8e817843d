"""
Service layer models - DTOs for service operations.

These models bundle aggregation results for the views, not domain entities.
"""
from calendar import Calendar
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Dict, List, Optional, Tuple

from finance_tracker.aggregation.models import (
    CategoryBreakdown,
    ControllableSplit,
    DailyTotals,
    MonthlyTotals,
)
from finance_tracker.dates import month_label

@dataclass
class MonthlySummary:
    """
    Summary of transactions for a specific month.

    Holds the summary cards (income, expense, balance, controllable split)
    and the per-category tables.
    """

    year: int
    month: int

    totals: MonthlyTotals = field(default_factory=MonthlyTotals)
    split: ControllableSplit = field(default_factory=ControllableSplit)
    expense_breakdown: List[CategoryBreakdown] = field(default_factory=list)
    income_breakdown: List[CategoryBreakdown] = field(default_factory=list)

    @property
    def label(self) -> str:
        return month_label(self.year, self.month)

    @property
    def total_transactions(self) -> int:
        return sum(row.count for row in self.expense_breakdown + self.income_breakdown)

    @property
    def top_spending_categories(self) -> List[Tuple[str, Decimal]]:
        """Categories sorted by spending amount (descending)"""
        return [(row.category, row.total) for row in self.expense_breakdown]

    def __str__(self) -> str:
        """Human-readable summary"""
        lines = [
            f"📊 Monthly Summary - {self.label}",
            f"",
            f"Transactions: {self.total_transactions}",
            f"  💰 Income:   {self.totals.income:,.2f}",
            f"  💸 Expense:  {self.totals.expense:,.2f}",
            f"  {'📈' if self.totals.balance >= 0 else '📉'} Balance:  {self.totals.balance:,.2f}",
            f"  Controllable:     {self.split.controllable:,.2f}",
            f"  Non-controllable: {self.split.non_controllable:,.2f}",
        ]

        if self.expense_breakdown:
            lines.append(f"\nTop Spending Categories:")
            for row in self.expense_breakdown[:5]:
                lines.append(f"  • {row.category}: {row.total:,.2f} ({row.percentage_of_group}%)")

        return "\n".join(lines)

@dataclass
class CalendarMonth:
    """
    Calendar heat-map for one month.

    ``weeks`` is a Sunday-first grid of dates; cells outside the month are
    still present so the grid is rectangular, but carry no totals.
    """

    year: int
    month: int
    days: Dict[int, DailyTotals] = field(default_factory=dict)

    @property
    def label(self) -> str:
        return month_label(self.year, self.month)

    @property
    def weeks(self) -> List[List[date]]:
        return Calendar(firstweekday=6).monthdatescalendar(self.year, self.month)

    def in_month(self, day: date) -> bool:
        return day.year == self.year and day.month == self.month

    def totals_for(self, day: date) -> Optional[DailyTotals]:
        """Totals for a grid cell, None for empty days and days of other months"""
        if not self.in_month(day):
            return None
        return self.days.get(day.day)

    @property
    def busiest_day(self) -> Optional[DailyTotals]:
        """Day with the largest expense, if any"""
        if not self.days:
            return None
        return max(self.days.values(), key=lambda d: d.expense)
