"""Effective values of dual-valued log fields."""

from typing import Literal

from macro_log.domain.models import FoodLog
from macro_log.domain.stats import MacroTotals

Nutrient = Literal["calories", "protein", "carbs", "fat"]
ConfidenceLevel = Literal["uncertain", "low", "medium", "high"]

HIGH_CONFIDENCE = 80
MEDIUM_CONFIDENCE = 60


def resolve(log: FoodLog, field: Nutrient) -> float:
    """Return the user override, else the generated value, else 0."""
    user_value = getattr(log, f"user_{field}", None)
    if user_value is not None:
        return user_value
    generated_value = getattr(log, f"generated_{field}", None)
    if generated_value is not None:
        return generated_value
    return 0


def resolve_all(log: FoodLog) -> MacroTotals:
    """Return effective calories and macros for a log."""
    return MacroTotals(
        calories=resolve(log, "calories"),
        protein=resolve(log, "protein"),
        carbs=resolve(log, "carbs"),
        fat=resolve(log, "fat"),
    )


def resolve_title(log: FoodLog) -> str:
    """Return the user title when set, else the generated one."""
    return _first_text(log.user_title, log.generated_title)


def resolve_description(log: FoodLog) -> str:
    return _first_text(log.user_description, log.generated_description)


def confidence_level(confidence: int | None) -> ConfidenceLevel:
    """Map a 0-100 estimation confidence onto a display tier."""
    if not confidence:
        return "uncertain"
    if confidence >= HIGH_CONFIDENCE:
        return "high"
    if confidence >= MEDIUM_CONFIDENCE:
        return "medium"
    return "low"


def _first_text(*values: str | None) -> str:
    for value in values:
        if value is not None and value.strip():
            return value.strip()
    return ""
