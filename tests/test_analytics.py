"""Tests for the aggregation and grouping engines."""

import random
from datetime import date, timedelta
from decimal import Decimal

import pytest

from finance_tracker.analytics import (
    DEFAULT_CHART_DAYS,
    daily_series,
    group_by_month,
    month_label,
    summarize,
)
from finance_tracker.models.transaction import TransactionKind


INCOME = TransactionKind.INCOME
EXPENSE = TransactionKind.EXPENSE


@pytest.fixture
def march_ledger(make_transaction):
    return [
        make_transaction(amount="100", kind=INCOME, occurred_on="2024-03-01"),
        make_transaction(amount="40", kind=EXPENSE, occurred_on="2024-03-01"),
        make_transaction(amount="10", kind=INCOME, occurred_on="2024-03-02"),
    ]


@pytest.fixture
def random_ledger(make_transaction):
    rng = random.Random(1234)
    start = date(2023, 11, 1)
    return [
        make_transaction(
            amount=Decimal(rng.randint(0, 50000)) / 100,
            kind=rng.choice([INCOME, EXPENSE]),
            occurred_on=start + timedelta(days=rng.randint(0, 120)),
        )
        for _ in range(200)
    ]


class TestSummarize:
    """Tests for summarize()."""

    def test_empty_ledger_is_all_zero(self):
        stats = summarize([])
        assert stats.total_income == 0
        assert stats.total_expense == 0
        assert stats.balance == 0

    def test_march_scenario(self, march_ledger):
        stats = summarize(march_ledger)
        assert stats.total_income == Decimal("110")
        assert stats.total_expense == Decimal("40")
        assert stats.balance == Decimal("70")

    def test_balance_may_be_negative(self, make_transaction):
        stats = summarize([
            make_transaction(amount="5", kind=INCOME),
            make_transaction(amount="20", kind=EXPENSE),
        ])
        assert stats.balance == Decimal("-15")

    def test_balance_identity_holds(self, random_ledger):
        stats = summarize(random_ledger)
        assert stats.balance == stats.total_income - stats.total_expense

    def test_keeps_decimal_precision(self, make_transaction):
        stats = summarize([
            make_transaction(amount="0.10", kind=INCOME),
            make_transaction(amount="0.20", kind=INCOME),
        ])
        assert stats.total_income == Decimal("0.30")

    def test_accepts_any_iterable(self, march_ledger):
        assert summarize(iter(march_ledger)).balance == Decimal("70")


class TestDailySeries:
    """Tests for daily_series()."""

    def test_empty_ledger(self):
        assert daily_series([]) == []

    def test_march_scenario(self, march_ledger):
        series = daily_series(march_ledger)

        assert [stat.day for stat in series] == [date(2024, 3, 1), date(2024, 3, 2)]
        assert series[0].income == Decimal("100")
        assert series[0].expense == Decimal("40")
        assert series[1].income == Decimal("10")
        assert series[1].expense == Decimal("0")

    def test_sorts_unordered_input(self, make_transaction):
        series = daily_series([
            make_transaction(occurred_on="2024-03-05"),
            make_transaction(occurred_on="2024-01-01"),
            make_transaction(occurred_on="2024-02-10"),
        ])
        assert [stat.day.isoformat() for stat in series] == [
            "2024-01-01", "2024-02-10", "2024-03-05",
        ]

    def test_same_day_in_different_years_is_not_merged(self, make_transaction):
        series = daily_series([
            make_transaction(amount="1", occurred_on="2023-03-01"),
            make_transaction(amount="2", occurred_on="2024-03-01"),
        ])
        assert len(series) == 2
        assert series[0].label == series[1].label == "01/03"

    def test_keeps_most_recent_fourteen_days(self, make_transaction):
        start = date(2024, 1, 1)
        ledger = [
            make_transaction(occurred_on=start + timedelta(days=offset))
            for offset in range(30)
        ]
        series = daily_series(ledger)

        assert DEFAULT_CHART_DAYS == 14
        assert len(series) == 14
        assert series[0].day == start + timedelta(days=16)
        assert series[-1].day == start + timedelta(days=29)

    def test_limit_is_configurable(self, make_transaction):
        ledger = [
            make_transaction(occurred_on=date(2024, 1, day)) for day in range(1, 11)
        ]
        assert len(daily_series(ledger, limit=3)) == 3
        assert daily_series(ledger, limit=0) == []

    def test_sorted_unique_and_bounded(self, random_ledger):
        series = daily_series(random_ledger)
        days = [stat.day for stat in series]

        assert days == sorted(days)
        assert len(days) == len(set(days))
        assert len(series) <= 14

    def test_truncation_does_not_touch_summary(self, make_transaction):
        ledger = [
            make_transaction(amount="1", kind=INCOME, occurred_on=date(2024, 1, 1) + timedelta(days=i))
            for i in range(20)
        ]
        charted = sum(stat.income for stat in daily_series(ledger))
        assert charted == Decimal("14")
        assert summarize(ledger).total_income == Decimal("20")


class TestMonthLabel:
    """Tests for month_label()."""

    def test_english_label(self):
        assert month_label(date(2024, 3, 15)) == "March 2024"

    def test_portuguese_label_is_capitalized(self):
        assert month_label(date(2023, 9, 1), "pt") == "Setembro de 2023"
        assert month_label(date(2024, 3, 1), "pt") == "Março de 2024"

    def test_unknown_language_falls_back_to_english(self):
        assert month_label(date(2024, 12, 31), "xx") == "December 2024"


class TestGroupByMonth:
    """Tests for group_by_month()."""

    def test_empty_ledger(self):
        assert group_by_month([]) == {}

    def test_months_most_recent_first(self, make_transaction):
        groups = group_by_month([
            make_transaction(description="jan", occurred_on="2024-01-10"),
            make_transaction(description="mar", occurred_on="2024-03-02"),
            make_transaction(description="feb", occurred_on="2024-02-20"),
        ])
        assert list(groups) == ["March 2024", "February 2024", "January 2024"]

    def test_within_month_descending(self, make_transaction):
        groups = group_by_month([
            make_transaction(description="early", occurred_on="2024-03-01"),
            make_transaction(description="late", occurred_on="2024-03-28"),
            make_transaction(description="middle", occurred_on="2024-03-15"),
        ])
        assert [t.description for t in groups["March 2024"]] == [
            "late", "middle", "early",
        ]

    def test_same_month_different_years(self, make_transaction):
        groups = group_by_month([
            make_transaction(occurred_on="2023-03-01"),
            make_transaction(occurred_on="2024-03-01"),
        ])
        assert list(groups) == ["March 2024", "March 2023"]

    def test_portuguese_keys(self, make_transaction):
        groups = group_by_month([make_transaction(occurred_on="2024-03-01")], language="pt")
        assert list(groups) == ["Março de 2024"]

    def test_flattened_order_is_non_increasing(self, random_ledger):
        groups = group_by_month(random_ledger)
        flattened = [t for bucket in groups.values() for t in bucket]
        days = [t.occurred_on for t in flattened]

        assert len(flattened) == len(random_ledger)
        assert all(a >= b for a, b in zip(days, days[1:]))

    def test_does_not_mutate_input(self, make_transaction):
        ledger = [
            make_transaction(occurred_on="2024-01-01"),
            make_transaction(occurred_on="2024-02-01"),
        ]
        original = list(ledger)
        group_by_month(ledger)
        assert ledger == original
