"""Daily target calculation and the profile service."""

import logging
import math
from dataclasses import dataclass
from typing import TYPE_CHECKING

from pydantic import ValidationError

from macro_log.domain.errors import ConfigurationError, InputValidationError
from macro_log.domain.targets import (
    DEFAULT_FAT_PERCENTAGE,
    DEFAULT_PROTEIN_FACTOR,
    DailyTargets,
    UserSettings,
)

if TYPE_CHECKING:
    from macro_log.services.state import StateStore

ACTIVITY_MULTIPLIERS: dict[str, float] = {
    "sedentary": 1.2,
    "light": 1.375,
    "moderate": 1.55,
    "active": 1.725,
    "very_active": 1.9,
}
GOAL_ADJUSTMENTS: dict[str, float] = {
    "lose": -500.0,
    "maintain": 0.0,
    "gain": 500.0,
}
MIN_MANUAL_CALORIES = 1000
MAX_MANUAL_CALORIES = 5000

_logger = logging.getLogger(__name__)


def calculate_bmr(settings: UserSettings) -> float:
    """Base metabolic rate via Mifflin-St Jeor."""
    base = 10 * settings.weight + 6.25 * settings.height - 5 * settings.age
    return base + 5 if settings.sex == "male" else base - 161


def calculate_tdee(bmr: float, activity_level: str) -> float:
    return bmr * ACTIVITY_MULTIPLIERS[activity_level]


def adjust_for_goal(tdee: float, goal_type: str) -> float:
    return tdee + GOAL_ADJUSTMENTS[goal_type]


def compute_targets(settings: UserSettings) -> DailyTargets:
    """Derive daily calorie and macro targets from a profile.

    Raises ConfigurationError when protein and fat settings leave no room for
    carbs; the error carries the targets with carbs clamped to zero.
    """
    _validate_profile(settings)
    calories = adjust_for_goal(
        calculate_tdee(calculate_bmr(settings), settings.activity_level),
        settings.calorie_goal_type,
    )
    protein = settings.weight * settings.protein_factor
    fat = calories * settings.fat_percentage / 100 / 9
    carbs = (calories - protein * 4 - fat * 9) / 4

    targets = DailyTargets(
        calories=round_half_up(calories),
        protein=round_half_up(protein),
        carbs=round_half_up(carbs),
        fat=round_half_up(fat),
    )
    if targets.carbs < 0:
        raise ConfigurationError(
            f"Protein and fat settings exceed the calorie target by "
            f"{-targets.carbs * 4} kcal",
            clamped=targets.model_copy(update={"carbs": 0}),
        )
    return targets


def round_half_up(value: float) -> int:
    """Round halves upwards, so 2158.5 becomes 2159."""
    return math.floor(value + 0.5)


def override_calories(targets: DailyTargets, calories: int) -> DailyTargets:
    """Replace only the calorie target, leaving macros untouched."""
    if not MIN_MANUAL_CALORIES <= calories <= MAX_MANUAL_CALORIES:
        raise InputValidationError(
            f"Calories must be between {MIN_MANUAL_CALORIES} "
            f"and {MAX_MANUAL_CALORIES}",
            field="calories",
        )
    return targets.model_copy(update={"calories": calories})


def _validate_profile(settings: UserSettings) -> None:
    for field in ("age", "weight", "height"):
        if getattr(settings, field) <= 0:
            raise InputValidationError(f"{field} must be positive", field=field)
    if settings.protein_factor < 0:
        raise InputValidationError(
            "protein_factor cannot be negative", field="protein_factor"
        )
    if not 0 <= settings.fat_percentage <= 100:  # noqa: PLR2004
        raise InputValidationError(
            "fat_percentage must be between 0 and 100", field="fat_percentage"
        )


@dataclass
class TargetsService:
    """Keeps the stored profile and its derived targets in step."""

    store: "StateStore"

    def update_user_settings(self, **changes: object) -> UserSettings:
        """Merge profile changes, filling macro defaults for a new profile."""
        current = self.store.user_settings
        if current is None:
            payload: dict[str, object] = {
                "protein_factor": DEFAULT_PROTEIN_FACTOR,
                "fat_percentage": DEFAULT_FAT_PERCENTAGE,
            }
        else:
            payload = current.model_dump()
        payload.update(changes)
        try:
            settings = UserSettings.model_validate(payload)
        except ValidationError as exc:
            raise InputValidationError(str(exc), field="settings") from exc
        self.store.set_user_settings(settings)
        return settings

    def recalculate(self) -> DailyTargets:
        """Recompute targets from the stored profile and persist them.

        On an unsatisfiable profile the clamped targets are stored and the
        ConfigurationError is re-raised for the caller to surface.
        """
        settings = self.store.user_settings
        if settings is None:
            raise InputValidationError("No profile has been set", field="settings")
        try:
            targets = compute_targets(settings)
        except ConfigurationError as exc:
            _logger.warning("Unsatisfiable macro configuration: %s", exc)
            self.store.set_daily_targets(exc.clamped)
            raise
        self.store.set_daily_targets(targets)
        return targets

    def set_manual_calories(self, calories: int) -> DailyTargets:
        current = self.store.daily_targets or DailyTargets()
        targets = override_calories(current, calories)
        self.store.set_daily_targets(targets)
        return targets

    def reset(self) -> None:
        """Zero the targets and forget the profile."""
        self.store.set_daily_targets(DailyTargets())
        self.store.set_user_settings(None)
