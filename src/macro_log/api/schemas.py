"""Request bodies for the HTTP API."""

from datetime import date
from typing import Literal

from pydantic import BaseModel, ConfigDict

from macro_log.domain.models import FoodLog


class LogEdit(BaseModel):
    """User-editable log fields; omitted fields stay unchanged."""

    model_config = ConfigDict(extra="forbid")

    log_date: date | None = None
    user_title: str | None = None
    user_description: str | None = None
    user_calories: str | float | None = None
    user_protein: str | float | None = None
    user_carbs: str | float | None = None
    user_fat: str | float | None = None
    image_ref: str | None = None

    def changes(self) -> dict[str, object]:
        return self.model_dump(exclude_unset=True)


class DraftCreate(LogEdit):
    log_date: date


class ComponentInput(BaseModel):
    name: str = ""
    amount: str | float
    unit: str


class PendingEditInput(BaseModel):
    log_id: str
    index: int | Literal["new"]
    action: Literal["save", "delete"]
    component: ComponentInput | None = None


class ProfileUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    sex: str | None = None
    age: int | None = None
    weight: float | None = None
    height: float | None = None
    activity_level: str | None = None
    calorie_goal_type: str | None = None
    protein_factor: float | None = None
    fat_percentage: float | None = None

    def changes(self) -> dict[str, object]:
        return self.model_dump(exclude_unset=True)


class CaloriesInput(BaseModel):
    calories: int


class FavoriteLogInput(BaseModel):
    log_date: date


def log_payload(log: FoodLog) -> dict[str, object]:
    """Serialize a log including its transient estimating flag."""
    payload = log.model_dump(mode="json", by_alias=True)
    payload["isEstimating"] = log.is_estimating
    return payload
