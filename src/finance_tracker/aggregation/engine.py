"""
Aggregation engine.

Pure, deterministic functions over a snapshot of transactions. Every
function takes the snapshot as its first argument and never mutates it.
Months are 1-12.

Transactions whose date cannot be parsed are left out of every
date-scoped result instead of failing the whole aggregation.
"""
from collections import defaultdict
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Iterable, List, Optional

from finance_tracker.aggregation.models import (
    ZERO,
    CategoryBreakdown,
    ControllableSplit,
    DailyTotals,
    MonthlyTotals,
    Suggestions,
)
from finance_tracker.classification import ControllabilityClassifier, classify_controllability
from finance_tracker.dates import validate_day, validate_month
from finance_tracker.domain.enums import Controllability, TransactionType
from finance_tracker.domain.models import Transaction
from finance_tracker.logging_setup import get_logger

logger = get_logger("finance_tracker.aggregation")

HUNDRED = Decimal("100")
PERCENT_PLACES = Decimal("0.01")


def _total(transactions: Iterable[Transaction]) -> Decimal:
    return sum((t.amount for t in transactions), ZERO)


def _dated(transactions: Iterable[Transaction]):
    """Yield (calendar_date, transaction) pairs, skipping malformed dates"""
    for txn in transactions:
        day = txn.calendar_date
        if day is None:
            logger.debug("Skipping transaction %s with malformed date %r", txn.id, txn.date)
            continue
        yield day, txn


def transactions_in_month(
    transactions: Iterable[Transaction],
    year: int,
    month: int,
) -> List[Transaction]:
    """
    Transactions dated in the given calendar month, in input order.

    Args:
        transactions: Snapshot to filter
        year: Four digit year
        month: Month number, 1-12

    Raises:
        ValueError: If month is outside 1-12
    """
    validate_month(year, month)
    return [
        txn for day, txn in _dated(transactions)
        if day.year == year and day.month == month
    ]


def transactions_on_day(
    transactions: Iterable[Transaction],
    year: int,
    month: int,
    day: int,
) -> List[Transaction]:
    """
    Transactions dated on exactly this calendar day, in input order.

    Raises:
        ValueError: If the day does not exist
    """
    validate_day(year, month, day)
    target = date(year, month, day)
    return [txn for txn_day, txn in _dated(transactions) if txn_day == target]


def monthly_totals(
    transactions: Iterable[Transaction],
    year: int,
    month: int,
) -> MonthlyTotals:
    """Income, expense and balance for a month. Empty months are all zero."""
    monthly = transactions_in_month(transactions, year, month)
    return MonthlyTotals(
        income=_total(t for t in monthly if t.type == TransactionType.INCOME),
        expense=_total(t for t in monthly if t.type == TransactionType.EXPENSE),
    )


def _sum_by_category(
    transactions: Iterable[Transaction],
    transaction_type: TransactionType,
) -> Dict[str, Decimal]:
    totals: Dict[str, Decimal] = defaultdict(lambda: ZERO)
    for txn in transactions:
        if txn.type == transaction_type:
            totals[txn.category] += txn.amount
    return dict(totals)


def expenses_by_category(
    transactions: Iterable[Transaction],
    year: int,
    month: int,
) -> Dict[str, Decimal]:
    """
    Expense totals per category for a month.

    Categories without expenses in the month are absent, never zero.
    """
    return _sum_by_category(
        transactions_in_month(transactions, year, month),
        TransactionType.EXPENSE,
    )


def income_by_source(
    transactions: Iterable[Transaction],
    year: int,
    month: int,
) -> Dict[str, Decimal]:
    """Income totals per source (category) for a month."""
    return _sum_by_category(
        transactions_in_month(transactions, year, month),
        TransactionType.INCOME,
    )


def controllable_split(
    transactions: Iterable[Transaction],
    year: int,
    month: int,
    classifier: Optional[ControllabilityClassifier] = None,
) -> ControllableSplit:
    """
    Split a month's expenses into controllable and non-controllable.

    Income is ignored. The two buckets always add up to the month's
    expense total.
    """
    controllable = ZERO
    non_controllable = ZERO

    for txn in transactions_in_month(transactions, year, month):
        if txn.type != TransactionType.EXPENSE:
            continue
        if classify_controllability(txn, classifier) == Controllability.NON_CONTROLLABLE:
            non_controllable += txn.amount
        else:
            controllable += txn.amount

    return ControllableSplit(controllable=controllable, non_controllable=non_controllable)


def filter_by_controllability(
    transactions: Iterable[Transaction],
    group: Controllability,
    classifier: Optional[ControllabilityClassifier] = None,
) -> List[Transaction]:
    """Expense transactions that fall in the given controllability group"""
    return [
        txn for txn in transactions
        if txn.type == TransactionType.EXPENSE
        and classify_controllability(txn, classifier) == group
    ]


def percentage(part: Decimal, whole: Decimal) -> Decimal:
    """
    Share of ``part`` in ``whole`` as a percentage rounded to 2 places.

    A zero ``whole`` gives 0 rather than an undefined value.
    """
    if whole == ZERO:
        return ZERO
    return (part / whole * HUNDRED).quantize(PERCENT_PLACES, rounding=ROUND_HALF_UP)


def breakdown_by_category(transactions: Iterable[Transaction]) -> List[CategoryBreakdown]:
    """
    Group transactions by category with totals and share of the grand total.

    Groups are ordered by descending total; equal totals keep the order in
    which their category was first seen.

    Args:
        transactions: Already-filtered set to break down (e.g. one month's
            expenses, or only the non-controllable ones)

    Returns:
        List of CategoryBreakdown rows
    """
    groups: Dict[str, List[Transaction]] = {}
    for txn in transactions:
        groups.setdefault(txn.category, []).append(txn)

    totals = {category: _total(items) for category, items in groups.items()}
    grand_total = sum(totals.values(), ZERO)

    rows = [
        CategoryBreakdown(
            category=category,
            items=tuple(items),
            total=totals[category],
            percentage_of_group=percentage(totals[category], grand_total),
        )
        for category, items in groups.items()
    ]

    # sorted() is stable, reverse included
    return sorted(rows, key=lambda row: row.total, reverse=True)


def sort_by_amount_descending(transactions: Iterable[Transaction]) -> List[Transaction]:
    """Largest amounts first; equal amounts keep their relative order"""
    return sorted(transactions, key=lambda t: t.amount, reverse=True)


def sort_by_date_descending(transactions: Iterable[Transaction]) -> List[Transaction]:
    """Newest first; equal dates keep their relative order, malformed dates go last"""
    items = list(transactions)
    dated = [t for t in items if t.calendar_date is not None]
    undated = [t for t in items if t.calendar_date is None]
    return sorted(dated, key=lambda t: t.calendar_date, reverse=True) + undated


def daily_totals(
    transactions: Iterable[Transaction],
    year: int,
    month: int,
) -> Dict[int, DailyTotals]:
    """
    Per-day income and expense for a month, keyed by day of month.

    Only days with at least one transaction are present.
    """
    validate_month(year, month)
    income: Dict[date, Decimal] = defaultdict(lambda: ZERO)
    expense: Dict[date, Decimal] = defaultdict(lambda: ZERO)
    counts: Dict[date, int] = defaultdict(int)

    for day, txn in _dated(transactions):
        if day.year != year or day.month != month:
            continue
        counts[day] += 1
        if txn.type == TransactionType.INCOME:
            income[day] += txn.amount
        elif txn.type == TransactionType.EXPENSE:
            expense[day] += txn.amount

    return {
        day.day: DailyTotals(date=day, income=income[day], expense=expense[day], count=counts[day])
        for day in sorted(counts)
    }


def distinct_values(transactions: Iterable[Transaction]) -> Suggestions:
    """
    Distinct income sources, expense categories and expense items.

    Each list is sorted; empty and whitespace-only names are skipped.
    """
    sources = set()
    categories = set()
    items = set()

    for txn in transactions:
        if txn.type == TransactionType.INCOME:
            if txn.category and txn.category.strip():
                sources.add(txn.category)
        else:
            if txn.category and txn.category.strip():
                categories.add(txn.category)
            if txn.item and txn.item.strip():
                items.add(txn.item)

    return Suggestions(
        income_sources=tuple(sorted(sources)),
        expense_categories=tuple(sorted(categories)),
        expense_items=tuple(sorted(items)),
    )
