"""
Grouping Engine

Buckets transactions by month for the history view.

The returned dict is an ordered mapping: Python dicts keep insertion
order, and callers depend on it. Months come out most recent first,
and transactions inside a month are most recent first.
"""

from datetime import date
from typing import Iterable

from finance_tracker.models.transaction import Transaction


# Fixed tables: labels must not depend on the host LC_TIME.
MONTH_NAMES = {
    "en": [
        "january", "february", "march", "april", "may", "june",
        "july", "august", "september", "october", "november", "december",
    ],
    "pt": [
        "janeiro", "fevereiro", "março", "abril", "maio", "junho",
        "julho", "agosto", "setembro", "outubro", "novembro", "dezembro",
    ],
}

LABEL_FORMATS = {
    "en": "{month} {year}",
    "pt": "{month} de {year}",
}

DEFAULT_LANGUAGE = "en"


def month_label(day: date, language: str = DEFAULT_LANGUAGE) -> str:
    """
    Human-readable "Month Year" label, first letter capitalized.

    >>> month_label(date(2024, 3, 5))
    'March 2024'
    >>> month_label(date(2024, 3, 5), "pt")
    'Março de 2024'
    """
    if language not in MONTH_NAMES:
        language = DEFAULT_LANGUAGE

    month = MONTH_NAMES[language][day.month - 1]
    label = LABEL_FORMATS[language].format(month=month, year=day.year)
    return label[:1].upper() + label[1:]


def group_by_month(
    transactions: Iterable[Transaction],
    language: str = DEFAULT_LANGUAGE,
) -> dict[str, list[Transaction]]:
    """Month label -> transactions, newest month and newest date first."""
    ordered = sorted(transactions, key=lambda t: t.occurred_on, reverse=True)

    groups: dict[str, list[Transaction]] = {}
    for transaction in ordered:
        label = month_label(transaction.occurred_on, language)
        groups.setdefault(label, []).append(transaction)

    return groups
