"""Aggregation of food logs into daily totals and target percentages."""

import math
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, timedelta

from macro_log.domain.models import FoodLog
from macro_log.domain.stats import DailyProgress, DailyTotals, MacroTotals
from macro_log.domain.targets import DailyTargets
from macro_log.services.values import resolve_all


@dataclass
class PeriodSummary:
    """Aggregated totals for a period."""

    daily: list[DailyTotals]
    avg_calories: float
    avg_protein: float
    avg_carbs: float
    avg_fat: float


def daily_totals(logs: Iterable[FoodLog], day: date) -> MacroTotals:
    """Sum effective values of the logs dated ``day``."""
    return sum_totals(resolve_all(log) for log in logs if log.log_date == day)


def percentages(
    totals: MacroTotals, targets: DailyTargets | None
) -> MacroTotals:
    """Return 100 * total / target per nutrient, 0 where no target is set."""
    if targets is None:
        return MacroTotals()
    return MacroTotals(
        calories=_percentage(totals.calories, targets.calories),
        protein=_percentage(totals.protein, targets.protein),
        carbs=_percentage(totals.carbs, targets.carbs),
        fat=_percentage(totals.fat, targets.fat),
    )


def daily_progress(
    logs: Iterable[FoodLog], day: date, targets: DailyTargets | None
) -> DailyProgress:
    """Return a day's totals, targets and percentages together."""
    current = daily_totals(logs, day)
    return DailyProgress(
        day=day,
        current=current,
        targets=targets,
        percentages=percentages(current, targets),
    )


def monthly_totals(logs: Iterable[FoodLog], month: str) -> list[DailyTotals]:
    """Return per-day totals for days with logs in ``YYYY-MM``, newest first."""
    by_day: dict[date, list[MacroTotals]] = {}
    for log in logs:
        if log.log_date.isoformat()[:7] != month:
            continue
        by_day.setdefault(log.log_date, []).append(resolve_all(log))
    return [
        DailyTotals(day=day, totals=sum_totals(values))
        for day, values in sorted(by_day.items(), reverse=True)
    ]


def summarize_period(
    logs: Iterable[FoodLog], start: date, days: int
) -> PeriodSummary:
    """Return per-day totals and averages for ``days`` days from ``start``."""
    materialized = list(logs)
    daily = [
        DailyTotals(
            day=start + timedelta(days=offset),
            totals=daily_totals(materialized, start + timedelta(days=offset)),
        )
        for offset in range(days)
    ]

    total_days = max(len(daily), 1)
    totals = sum_totals(entry.totals for entry in daily)

    return PeriodSummary(
        daily=daily,
        avg_calories=totals.calories / total_days,
        avg_protein=totals.protein / total_days,
        avg_carbs=totals.carbs / total_days,
        avg_fat=totals.fat / total_days,
    )


def sum_totals(values: Iterable[MacroTotals]) -> MacroTotals:
    """Sum totals with exact rounding so input order never matters."""
    items = list(values)
    return MacroTotals(
        calories=math.fsum(item.calories for item in items),
        protein=math.fsum(item.protein for item in items),
        carbs=math.fsum(item.carbs for item in items),
        fat=math.fsum(item.fat for item in items),
    )


def _percentage(total: float, target: float | None) -> float:
    if not target:
        return 0.0
    return 100 * total / target
