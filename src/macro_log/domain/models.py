"""Domain models for food logs, ingredients and favorites."""

from datetime import UTC, date, datetime
from typing import Literal
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

Unit = Literal[
    "g", "oz", "ml", "fl oz", "cup", "tbsp", "tsp", "scoop", "piece", "serving"
]
UNITS: tuple[str, ...] = (
    "g",
    "oz",
    "ml",
    "fl oz",
    "cup",
    "tbsp",
    "tsp",
    "scoop",
    "piece",
    "serving",
)
NUTRIENTS: tuple[str, ...] = ("calories", "protein", "carbs", "fat")

_UNIT_ALIASES = {
    "gram": "g",
    "grams": "g",
    "ounce": "oz",
    "ounces": "oz",
    "milliliter": "ml",
    "milliliters": "ml",
    "floz": "fl oz",
    "fl. oz": "fl oz",
    "cups": "cup",
    "tablespoon": "tbsp",
    "tablespoons": "tbsp",
    "teaspoon": "tsp",
    "teaspoons": "tsp",
    "scoops": "scoop",
    "pieces": "piece",
    "pc": "piece",
    "servings": "serving",
}


def new_id() -> str:
    """Return a fresh identifier for logs, drafts and favorites."""
    return uuid4().hex


def utc_now() -> datetime:
    return datetime.now(tz=UTC)


def normalize_unit(value: object) -> object:
    """Map common spellings of a unit onto the closed unit set."""
    if not isinstance(value, str):
        return value
    cleaned = value.strip().lower()
    return _UNIT_ALIASES.get(cleaned, cleaned)


class _Model(BaseModel):
    """Frozen model accepting both snake_case and camelCase keys."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


class Measurement(_Model):
    """Amount and unit pair suggested by image estimation."""

    amount: float = Field(gt=0)
    unit: Unit

    @field_validator("unit", mode="before")
    @classmethod
    def _unit_alias(cls, value: object) -> object:
        return normalize_unit(value)


class FoodComponent(_Model):
    """One ingredient line of a food log."""

    name: str = Field(min_length=1)
    amount: float = Field(gt=0)
    unit: Unit
    recommended_measurement: Measurement | None = None
    needs_refinement: bool = False

    @field_validator("unit", mode="before")
    @classmethod
    def _unit_alias(cls, value: object) -> object:
        return normalize_unit(value)

    @field_validator("name")
    @classmethod
    def _strip_name(cls, value: str) -> str:
        stripped = value.strip()
        if not stripped:
            raise ValueError("name must not be blank")
        return stripped

    @property
    def is_pending_confirmation(self) -> bool:
        return self.recommended_measurement is not None


class FoodLog(_Model):
    """One logged meal with user overrides next to generated values."""

    id: str = Field(default_factory=new_id)
    log_date: date
    created_at: datetime = Field(default_factory=utc_now)

    user_title: str | None = None
    generated_title: str | None = None
    user_description: str | None = None
    generated_description: str | None = None

    user_calories: float | None = None
    generated_calories: float | None = None
    user_protein: float | None = None
    generated_protein: float | None = None
    user_carbs: float | None = None
    generated_carbs: float | None = None
    user_fat: float | None = None
    generated_fat: float | None = None

    food_components: tuple[FoodComponent, ...] = ()
    estimation_confidence: int | None = Field(default=None, ge=0, le=100)
    needs_user_review: bool = False
    image_ref: str | None = None
    version: int = 0

    # Transient: never written to a durable snapshot.
    is_estimating: bool = Field(default=False, exclude=True)


class Favorite(_Model):
    """Immutable snapshot of a log's resolved values."""

    id: str = Field(default_factory=new_id)
    created_at: datetime = Field(default_factory=utc_now)
    log_date: date | None = None
    title: str
    description: str = ""
    calories: float
    protein: float
    carbs: float
    fat: float
    estimation_confidence: int | None = Field(default=None, ge=0, le=100)


def needs_review(components: tuple[FoodComponent, ...]) -> bool:
    """Return True when any component still carries a recommendation."""
    return any(component.is_pending_confirmation for component in components)
