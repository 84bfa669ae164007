"""Nutrition estimation service and the client interface it consumes."""

import logging
from dataclasses import dataclass
from typing import Protocol

from pydantic import ValidationError

from macro_log.domain.errors import EstimationFailure
from macro_log.domain.estimation import (
    EstimationRequest,
    EstimationResult,
    ImageEstimationRequest,
)
from macro_log.domain.models import UNITS

_MEASUREMENT_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "amount": {"type": "number", "exclusiveMinimum": 0},
        "unit": {"type": "string", "enum": list(UNITS)},
    },
    "required": ["amount", "unit"],
    "additionalProperties": False,
}

ESTIMATION_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "generatedTitle": {"type": "string"},
        "generatedDescription": {"anyOf": [{"type": "string"}, {"type": "null"}]},
        "estimationConfidence": {"type": "integer", "minimum": 0, "maximum": 100},
        "calories": {"type": "number", "minimum": 0},
        "protein": {"type": "number", "minimum": 0},
        "carbs": {"type": "number", "minimum": 0},
        "fat": {"type": "number", "minimum": 0},
        "foodComponents": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "name": {"type": "string"},
                    "amount": {"type": "number", "exclusiveMinimum": 0},
                    "unit": {"type": "string", "enum": list(UNITS)},
                    "recommendedMeasurement": {
                        "anyOf": [_MEASUREMENT_SCHEMA, {"type": "null"}]
                    },
                    "needsRefinement": {"type": "boolean"},
                },
                "required": [
                    "name",
                    "amount",
                    "unit",
                    "recommendedMeasurement",
                    "needsRefinement",
                ],
                "additionalProperties": False,
            },
        },
    },
    "required": [
        "generatedTitle",
        "generatedDescription",
        "estimationConfidence",
        "calories",
        "protein",
        "carbs",
        "fat",
        "foodComponents",
    ],
    "additionalProperties": False,
}

SYSTEM_PROMPT = (
    "You are a meticulous nutrition expert. Estimate calories, protein, carbs "
    "and fat in grams for the entire meal, give it a short descriptive title "
    "and list its ingredients with amounts. "
    "estimationConfidence (1-100) reflects how specific the input is: 90-100 "
    "for ingredients with precise weights, 50-89 for ingredients without "
    "quantities, below 50 for vague input. "
    "For photos, set needsRefinement and a recommendedMeasurement on any "
    "ingredient whose portion is hard to judge. "
    "If no food is present, return confidence 0, zero macros and no "
    "ingredients."
)

_logger = logging.getLogger(__name__)


class EstimationClient(Protocol):
    """Interface for the hosted nutrition estimation capability."""

    async def estimate_text(self, *, description: str) -> dict[str, object]:
        """Return a raw estimation payload for a free-text description."""

    async def estimate_image(
        self,
        *,
        image_ref: str,
        title: str | None,
        description: str | None,
    ) -> dict[str, object]:
        """Return a raw estimation payload for an image."""


def text_prompt(description: str) -> str:
    return f"Food: {description.strip()}. Estimate nutrition for the whole food."


def image_prompt(title: str | None, description: str | None) -> str:
    """Build the image prompt, adding title and description as context."""
    prompt = "Analyze this food image and estimate its nutritional content."
    context = []
    if title and title.strip():
        context.append(f" Title: {title.strip()}.")
    if description and description.strip():
        context.append(f" Description: {description.strip()}.")
    if context:
        prompt += " Additional context:" + "".join(context)
    return prompt


@dataclass
class EstimationService:
    """Calls the estimation client and validates what comes back."""

    client: EstimationClient

    async def estimate(self, request: EstimationRequest) -> EstimationResult:
        """Estimate a request, raising EstimationFailure on any client error."""
        try:
            if isinstance(request, ImageEstimationRequest):
                raw = await self.client.estimate_image(
                    image_ref=request.image_ref,
                    title=request.title,
                    description=request.description,
                )
            else:
                raw = await self.client.estimate_text(description=request.description)
        except EstimationFailure:
            raise
        except Exception as exc:
            raise EstimationFailure(f"Estimation request failed: {exc}") from exc

        if not isinstance(raw, dict):
            raise EstimationFailure("Estimation returned a non-object payload")
        if raw.get("error"):
            raise EstimationFailure(f"Estimation returned an error: {raw['error']}")
        try:
            result = EstimationResult.model_validate(raw)
        except ValidationError as exc:
            raise EstimationFailure("Estimation returned an invalid payload") from exc

        if isinstance(request, ImageEstimationRequest) and result.is_not_food:
            _logger.info("Estimation found no food: %s", result.generated_title)
            return EstimationResult.not_food()
        return result
