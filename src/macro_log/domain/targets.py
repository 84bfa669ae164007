"""Profile and daily target models."""

from typing import Literal

from pydantic import BaseModel, ConfigDict

Sex = Literal["male", "female"]
ActivityLevel = Literal["sedentary", "light", "moderate", "active", "very_active"]
GoalType = Literal["lose", "maintain", "gain"]

DEFAULT_PROTEIN_FACTOR = 2.2
DEFAULT_FAT_PERCENTAGE = 30.0


class UserSettings(BaseModel):
    """Biometric profile used to derive daily targets."""

    model_config = ConfigDict(frozen=True)

    sex: Sex
    age: int
    weight: float
    height: float
    activity_level: ActivityLevel = "sedentary"
    calorie_goal_type: GoalType = "maintain"
    protein_factor: float = DEFAULT_PROTEIN_FACTOR
    fat_percentage: float = DEFAULT_FAT_PERCENTAGE


class DailyTargets(BaseModel):
    """Daily calorie and macro goals."""

    model_config = ConfigDict(frozen=True)

    calories: int = 0
    protein: int = 0
    carbs: int = 0
    fat: int = 0
