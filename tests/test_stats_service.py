"""Tests for log aggregation."""

import itertools
from datetime import date

from macro_log.domain.stats import MacroTotals
from macro_log.domain.targets import DailyTargets
from macro_log.services.stats import (
    daily_progress,
    daily_totals,
    monthly_totals,
    percentages,
    summarize_period,
)
from tests.conftest import TODAY, make_log


def test_daily_totals_sum_effective_values_for_the_day() -> None:
    logs = [
        make_log(user_calories=300, generated_calories=900, generated_protein=20),
        make_log(generated_calories=450, generated_protein=15.5, user_fat=10),
        make_log(log_date=date(2025, 3, 13), generated_calories=1000),
    ]

    totals = daily_totals(logs, TODAY)

    assert totals == MacroTotals(calories=750, protein=35.5, carbs=0, fat=10)


def test_daily_totals_ignore_order() -> None:
    logs = [
        make_log(generated_calories=0.1, generated_fat=0.7),
        make_log(generated_calories=0.2, generated_fat=0.1),
        make_log(generated_calories=0.3, generated_fat=0.2),
    ]

    results = {
        daily_totals(list(permutation), TODAY)
        for permutation in itertools.permutations(logs)
    }

    assert len(results) == 1


def test_percentages_are_zero_without_targets() -> None:
    totals = MacroTotals(calories=500, protein=20, carbs=60, fat=10)

    assert percentages(totals, None) == MacroTotals()
    assert percentages(totals, DailyTargets()) == MacroTotals()


def test_percentages_against_targets() -> None:
    totals = MacroTotals(calories=1000, protein=75, carbs=0, fat=30)
    targets = DailyTargets(calories=2000, protein=150, carbs=0, fat=60)

    result = percentages(totals, targets)

    assert result == MacroTotals(calories=50, protein=50, carbs=0, fat=50)


def test_daily_progress_bundles_totals_and_targets() -> None:
    targets = DailyTargets(calories=2000, protein=100, carbs=250, fat=70)
    logs = [make_log(user_calories=500, user_protein=25)]

    progress = daily_progress(logs, TODAY, targets)

    assert progress.current.calories == 500
    assert progress.targets == targets
    assert progress.percentages.calories == 25
    assert progress.percentages.protein == 25


def test_monthly_totals_newest_first() -> None:
    logs = [
        make_log(log_date=date(2025, 3, 1), user_calories=100),
        make_log(log_date=date(2025, 3, 14), user_calories=200),
        make_log(log_date=date(2025, 3, 14), user_calories=50),
        make_log(log_date=date(2025, 2, 28), user_calories=999),
    ]

    days = monthly_totals(logs, "2025-03")

    assert [entry.day for entry in days] == [date(2025, 3, 14), date(2025, 3, 1)]
    assert days[0].totals.calories == 250


def test_summarize_period_averages_over_all_days() -> None:
    logs = [
        make_log(log_date=date(2025, 3, 10), user_calories=1500, user_protein=90),
        make_log(log_date=date(2025, 3, 12), user_calories=2100, user_protein=120),
    ]

    summary = summarize_period(logs, date(2025, 3, 10), 3)

    assert [entry.day for entry in summary.daily] == [
        date(2025, 3, 10),
        date(2025, 3, 11),
        date(2025, 3, 12),
    ]
    assert summary.daily[1].totals == MacroTotals()
    assert summary.avg_calories == 1200
    assert summary.avg_protein == 70
