"""Validation and edits for ingredient lists and manual macro input."""

import logging
import re

from macro_log.domain.edits import PendingComponentEdit
from macro_log.domain.errors import InputValidationError
from macro_log.domain.models import UNITS, FoodComponent

MIN_NAME_LENGTH = 2
MAX_MACRO_VALUE = 10000

_AMOUNT_PATTERN = re.compile(r"^\d+(\.\d)?$")

_logger = logging.getLogger(__name__)


def parse_component(
    name: str,
    amount: str,
    unit: str,
    existing: FoodComponent | None = None,
) -> FoodComponent:
    """Validate editor input and build a component.

    In edit mode (``existing`` given) a blank name keeps the existing name.
    The amount accepts at most one decimal digit and must be positive.
    """
    cleaned_name = name.strip()
    if not cleaned_name and existing is not None:
        cleaned_name = existing.name
    if len(cleaned_name) < MIN_NAME_LENGTH:
        raise InputValidationError(
            f"Name must be at least {MIN_NAME_LENGTH} characters", field="name"
        )

    cleaned_amount = amount.strip()
    if not _AMOUNT_PATTERN.match(cleaned_amount):
        raise InputValidationError(
            "Amount must be a number with at most one decimal place", field="amount"
        )
    amount_value = float(cleaned_amount)
    if amount_value <= 0:
        raise InputValidationError("Amount must be greater than zero", field="amount")

    if unit not in UNITS:
        raise InputValidationError(f"Unsupported unit: {unit}", field="unit")

    return FoodComponent(name=cleaned_name, amount=amount_value, unit=unit)


def parse_macro_value(raw: str | float | None, field: str) -> float | None:
    """Parse a manually entered macro; blank means not provided."""
    if raw is None:
        return None
    if isinstance(raw, str):
        cleaned = raw.strip()
        if not cleaned:
            return None
        try:
            value = float(cleaned)
        except ValueError as exc:
            raise InputValidationError(
                f"{field} must be a valid number", field=field
            ) from exc
    else:
        value = float(raw)
    if value != value:  # NaN
        raise InputValidationError(f"{field} must be a valid number", field=field)
    if value < 0:
        raise InputValidationError(f"{field} cannot be negative", field=field)
    if value > MAX_MACRO_VALUE:
        raise InputValidationError(
            f"{field} value seems too high (max {MAX_MACRO_VALUE:,})", field=field
        )
    return value


def accept_recommendation(
    components: tuple[FoodComponent, ...], index: int
) -> tuple[FoodComponent, ...]:
    """Copy a component's recommended measurement into amount and unit."""
    if not 0 <= index < len(components):
        return components
    component = components[index]
    recommendation = component.recommended_measurement
    if recommendation is None:
        return components
    accepted = component.model_copy(
        update={
            "amount": recommendation.amount,
            "unit": recommendation.unit,
            "recommended_measurement": None,
            "needs_refinement": False,
        }
    )
    return (*components[:index], accepted, *components[index + 1 :])


def delete_component(
    components: tuple[FoodComponent, ...], index: int
) -> tuple[FoodComponent, ...]:
    if not 0 <= index < len(components):
        return components
    return (*components[:index], *components[index + 1 :])


def apply_component_edit(
    components: tuple[FoodComponent, ...], edit: PendingComponentEdit
) -> tuple[FoodComponent, ...]:
    """Apply a ferried edit; returns the same tuple when nothing changes."""
    if edit.action == "delete":
        if edit.index == "new":
            return components
        return delete_component(components, edit.index)

    if edit.component is None:
        _logger.warning("Ignoring save edit without component for %s", edit.log_id)
        return components
    if edit.index == "new":
        return (*components, edit.component)
    if not 0 <= edit.index < len(components):
        _logger.warning(
            "Ignoring save edit for %s at out-of-range index %s",
            edit.log_id,
            edit.index,
        )
        return components
    return (*components[: edit.index], edit.component, *components[edit.index + 1 :])
