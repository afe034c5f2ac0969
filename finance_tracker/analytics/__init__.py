"""Ledger analytics: totals, daily series and month grouping."""

from finance_tracker.analytics.aggregation import (
    DEFAULT_CHART_DAYS,
    daily_series,
    summarize,
)
from finance_tracker.analytics.grouping import group_by_month, month_label

__all__ = [
    "DEFAULT_CHART_DAYS",
    "daily_series",
    "group_by_month",
    "month_label",
    "summarize",
]
