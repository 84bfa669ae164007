"""Domain models for statistics."""

from dataclasses import dataclass
from datetime import date

from macro_log.domain.targets import DailyTargets


@dataclass(frozen=True)
class MacroTotals:
    """Calories and macros for one log, one day, or a percentage view."""

    calories: float = 0.0
    protein: float = 0.0
    carbs: float = 0.0
    fat: float = 0.0


@dataclass(frozen=True)
class DailyTotals:
    """Daily total macros."""

    day: date
    totals: MacroTotals


@dataclass(frozen=True)
class DailyProgress:
    """Totals for a day next to targets and percentages."""

    day: date
    current: MacroTotals
    targets: DailyTargets | None
    percentages: MacroTotals
