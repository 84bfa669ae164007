"""Models for estimation results and outcomes."""

from dataclasses import dataclass
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from macro_log.domain.models import FoodComponent, FoodLog


class EstimationResult(BaseModel):
    """Validated nutrition estimate returned by the estimation capability."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    generated_title: str = ""
    generated_description: str | None = None
    food_components: tuple[FoodComponent, ...] = ()
    calories: float = Field(default=0.0, ge=0)
    protein: float = Field(default=0.0, ge=0)
    carbs: float = Field(default=0.0, ge=0)
    fat: float = Field(default=0.0, ge=0)
    estimation_confidence: int = Field(default=0, ge=0, le=100)

    @field_validator("estimation_confidence", mode="before")
    @classmethod
    def _round_confidence(cls, value: object) -> object:
        if isinstance(value, float):
            return round(value)
        return value

    @field_validator("food_components", mode="before")
    @classmethod
    def _drop_empty_components(cls, value: object) -> object:
        # A zero amount is an allowed estimate but not a usable ingredient row.
        if not isinstance(value, (list, tuple)):
            return value
        return [
            component
            for component in value
            if not (isinstance(component, dict) and component.get("amount") == 0)
        ]

    @classmethod
    def not_food(cls) -> "EstimationResult":
        """Sentinel returned when no food could be identified."""
        return cls(generated_title="Not food")

    @property
    def is_not_food(self) -> bool:
        return (
            self.estimation_confidence == 0
            and not self.food_components
            and self.calories == 0
            and self.protein == 0
            and self.carbs == 0
            and self.fat == 0
        )


@dataclass(frozen=True)
class TextEstimationRequest:
    """Free-text description to estimate."""

    description: str


@dataclass(frozen=True)
class ImageEstimationRequest:
    """Image reference with optional context to estimate."""

    image_ref: str
    title: str | None = None
    description: str | None = None


EstimationRequest = TextEstimationRequest | ImageEstimationRequest


@dataclass(frozen=True)
class EstimationOutcome:
    """Result of one orchestrated estimation request."""

    status: Literal["merged", "stale"]
    log_id: str
    version: int
    log: FoodLog | None = None

    @property
    def merged(self) -> bool:
        return self.status == "merged"

    @property
    def stale(self) -> bool:
        return self.status == "stale"
