"""
Reporting Engine

DESIGN DECISION: Reports are pure functions of a transaction list.
The persistence layer fetches the whole sheet; this module filters and
sums in memory. No caching, no indexes, no state between calls.

Arithmetic is Decimal throughout and nothing is rounded, so
``balance == total_income - total_expense`` holds exactly.
"""

from decimal import Decimal
from typing import Iterable, Optional, Union

from paysheet.models.report import (
    Aggregate,
    Balance,
    DailyTotals,
    Period,
    Report,
    ReportSummary,
    Summary,
)
from paysheet.models.transaction import Transaction, TransactionType
from paysheet.reports.dates import normalize_date


ZERO = Decimal("0")


def balance(transactions: Iterable[Transaction]) -> Balance:
    """Sum amounts by type."""
    income = ZERO
    expense = ZERO
    for transaction in transactions:
        if transaction.type == TransactionType.INCOME:
            income += transaction.amount
        elif transaction.type == TransactionType.EXPENSE:
            expense += transaction.amount

    return Balance(
        total_income=income,
        total_expense=expense,
        balance=income - expense,
    )


def filter_by_date_range(
    transactions: Iterable[Transaction],
    start,
    end,
) -> list[Transaction]:
    """
    Transactions dated within ``[start, end]`` (inclusive), in input order.

    Bounds and transaction dates are normalized to canonical strings and
    compared lexicographically. Transactions with unparseable dates are
    dropped; an unparseable bound yields an empty result.
    """
    start_key = normalize_date(start)
    end_key = normalize_date(end)
    if start_key is None or end_key is None:
        return []

    selected = []
    for transaction in transactions:
        day = normalize_date(transaction.date)
        if day is not None and start_key <= day <= end_key:
            selected.append(transaction)
    return selected


def category_breakdown(transactions: Iterable[Transaction]) -> dict[str, Decimal]:
    """Expense totals per category. Income never appears here."""
    breakdown: dict[str, Decimal] = {}
    for transaction in transactions:
        if transaction.type == TransactionType.EXPENSE:
            breakdown[transaction.category] = (
                breakdown.get(transaction.category, ZERO) + transaction.amount
            )
    return breakdown


def aggregate(transactions: Iterable[Transaction]) -> Aggregate:
    """
    One pass producing totals, the expense breakdown and daily series.

    Keys only exist for categories and days that at least one
    transaction touches; absent days are not zero-filled.
    """
    income = ZERO
    expense = ZERO
    count = 0
    breakdown: dict[str, Decimal] = {}
    daily: dict[str, DailyTotals] = {}

    for transaction in transactions:
        count += 1
        day = normalize_date(transaction.date) or transaction.date
        totals = daily.setdefault(day, DailyTotals())

        if transaction.type == TransactionType.INCOME:
            income += transaction.amount
            totals.income += transaction.amount
        else:
            expense += transaction.amount
            totals.expense += transaction.amount
            breakdown[transaction.category] = (
                breakdown.get(transaction.category, ZERO) + transaction.amount
            )

    return Aggregate(
        summary=ReportSummary(
            total_income=income,
            total_expense=expense,
            balance=income - expense,
            transaction_count=count,
        ),
        category_breakdown=breakdown,
        daily_data=daily,
    )


def _newest_first(transactions: Iterable[Transaction]) -> list[Transaction]:
    # Unparseable dates sort last; ties keep sheet order.
    keyed = [(normalize_date(t.date) or "", t) for t in transactions]
    keyed.sort(key=lambda pair: pair[0], reverse=True)
    return [transaction for _, transaction in keyed]


def filter_transactions(
    transactions: Iterable[Transaction],
    tx_type: Optional[Union[TransactionType, str]] = None,
    start=None,
    end=None,
    category: Optional[str] = None,
) -> list[Transaction]:
    """
    Listing filter: any combination of type, open or closed date bounds
    and a case-insensitive category. Newest first.
    """
    selected = list(transactions)

    if tx_type:
        wanted = TransactionType(tx_type)
        selected = [t for t in selected if t.type == wanted]

    if start:
        start_key = normalize_date(start)
        if start_key is None:
            return []
        selected = [
            t for t in selected
            if (normalize_date(t.date) or "") >= start_key
        ]

    if end:
        end_key = normalize_date(end)
        if end_key is None:
            return []
        selected = [
            t for t in selected
            if normalize_date(t.date) is not None and normalize_date(t.date) <= end_key
        ]

    if category:
        wanted_category = category.strip().lower()
        selected = [t for t in selected if t.category.lower() == wanted_category]

    return _newest_first(selected)


def build_report(transactions: Iterable[Transaction], period: Period) -> Report:
    """Aggregate of the transactions inside ``period`` plus the rows themselves."""
    start = period.start.isoformat()
    end = period.end.isoformat()
    selected = filter_by_date_range(transactions, start, end)
    result = aggregate(selected)

    return Report(
        period=period.slug,
        start_date=start,
        end_date=end,
        summary=result.summary,
        category_breakdown=result.category_breakdown,
        daily_data=result.daily_data,
        transactions=selected,
    )


def build_summary(transactions: Iterable[Transaction], recent: int = 5) -> Summary:
    """All-time totals, the most recent rows and the expense breakdown."""
    rows = list(transactions)
    totals = balance(rows)

    return Summary(
        total_income=totals.total_income,
        total_expense=totals.total_expense,
        balance=totals.balance,
        transaction_count=len(rows),
        recent_transactions=_newest_first(rows)[:recent],
        category_breakdown=category_breakdown(rows),
    )
