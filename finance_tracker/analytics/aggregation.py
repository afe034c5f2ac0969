"""
Aggregation Engine

Pure functions deriving totals and a per-day series from a ledger.
Both are total: any sequence of transactions, including an empty one,
produces a result. Nothing here is cached - callers recompute after
every store change.
"""

from datetime import date
from decimal import Decimal
from typing import Iterable

from finance_tracker.models.transaction import (
    DailyStat,
    SummaryStats,
    Transaction,
    TransactionKind,
)


DEFAULT_CHART_DAYS = 14


def summarize(transactions: Iterable[Transaction]) -> SummaryStats:
    """Total income, total expense and balance."""
    income = Decimal("0")
    expense = Decimal("0")

    for transaction in transactions:
        if transaction.kind == TransactionKind.INCOME:
            income += transaction.amount
        else:
            expense += transaction.amount

    return SummaryStats(total_income=income, total_expense=expense)


def daily_series(
    transactions: Iterable[Transaction],
    limit: int = DEFAULT_CHART_DAYS,
) -> list[DailyStat]:
    """
    Income and expense per calendar day, oldest day first.

    Only days with at least one transaction appear. The result keeps the
    `limit` most recent days; older transactions still count in summarize().
    Dates are plain calendar dates, so no timezone shift is applied.
    """
    if limit <= 0:
        return []

    ordered = sorted(transactions, key=lambda t: t.occurred_on)

    buckets: dict[date, list[Decimal]] = {}
    for transaction in ordered:
        day = transaction.occurred_on
        if day not in buckets:
            buckets[day] = [Decimal("0"), Decimal("0")]
        if transaction.kind == TransactionKind.INCOME:
            buckets[day][0] += transaction.amount
        else:
            buckets[day][1] += transaction.amount

    series = [
        DailyStat(day=day, income=income, expense=expense)
        for day, (income, expense) in buckets.items()
    ]
    return series[-limit:]
