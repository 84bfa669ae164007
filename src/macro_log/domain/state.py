"""Durable snapshot of the engine state."""

from pydantic import BaseModel, Field

from macro_log.domain.models import Favorite, FoodLog
from macro_log.domain.targets import DailyTargets, UserSettings

STATE_SCHEMA_VERSION = 1


class PersistedState(BaseModel):
    """Everything that survives a restart.

    Drafts, the pending component edit and ``FoodLog.is_estimating`` are not
    part of it.
    """

    schema_version: int = STATE_SCHEMA_VERSION
    food_logs: list[FoodLog] = Field(default_factory=list)
    favorites: list[Favorite] = Field(default_factory=list)
    user_settings: UserSettings | None = None
    daily_targets: DailyTargets | None = None
