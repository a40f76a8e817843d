"""
Aggregation engine: monthly, daily and per-category summaries computed
from a snapshot of transactions.
"""
from finance_tracker.aggregation.engine import (
    breakdown_by_category,
    controllable_split,
    daily_totals,
    distinct_values,
    expenses_by_category,
    filter_by_controllability,
    income_by_source,
    monthly_totals,
    percentage,
    sort_by_amount_descending,
    sort_by_date_descending,
    transactions_in_month,
    transactions_on_day,
)
from finance_tracker.aggregation.models import (
    CategoryBreakdown,
    ControllableSplit,
    DailyTotals,
    MonthlyTotals,
    Suggestions,
)

__all__ = [
    "CategoryBreakdown",
    "ControllableSplit",
    "DailyTotals",
    "MonthlyTotals",
    "Suggestions",
    "breakdown_by_category",
    "controllable_split",
    "daily_totals",
    "distinct_values",
    "expenses_by_category",
    "filter_by_controllability",
    "income_by_source",
    "monthly_totals",
    "percentage",
    "sort_by_amount_descending",
    "sort_by_date_descending",
    "transactions_in_month",
    "transactions_on_day",
]
