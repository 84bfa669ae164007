"""User edits to persisted food logs."""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import date

from macro_log.domain.edits import PendingComponentEdit
from macro_log.domain.errors import InputValidationError, UnknownEntityError
from macro_log.domain.models import NUTRIENTS, FoodComponent, FoodLog, needs_review
from macro_log.services.changes import ChangeTracker, TrackerState
from macro_log.services.components import (
    accept_recommendation,
    apply_component_edit,
    delete_component,
    parse_macro_value,
)
from macro_log.services.ferry import PendingEditFerry
from macro_log.services.state import StateStore

EDITABLE_FIELDS = frozenset(
    {
        "log_date",
        "user_title",
        "user_description",
        "image_ref",
        *(f"user_{nutrient}" for nutrient in NUTRIENTS),
    }
)

_logger = logging.getLogger(__name__)


def clean_log_edits(fields: dict[str, object]) -> dict[str, object]:
    """Validate user-editable fields; blank text and blank macros become None."""
    unknown = sorted(set(fields) - EDITABLE_FIELDS)
    if unknown:
        raise InputValidationError(
            f"Fields cannot be edited: {', '.join(unknown)}", field=unknown[0]
        )

    cleaned: dict[str, object] = {}
    for name, value in fields.items():
        if name == "log_date":
            cleaned[name] = _parse_date(value)
        elif name.removeprefix("user_") in NUTRIENTS:
            cleaned[name] = parse_macro_value(value, name.removeprefix("user_"))
        elif value is None or isinstance(value, str):
            cleaned[name] = (value or "").strip() or None
        else:
            raise InputValidationError(f"{name} must be text", field=name)
    return cleaned


def _parse_date(value: object) -> date:
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value)
        except ValueError as exc:
            raise InputValidationError(
                "log_date must be an ISO date", field="log_date"
            ) from exc
    raise InputValidationError("log_date must be an ISO date", field="log_date")


@dataclass
class FoodLogService:
    """Applies field and ingredient edits to stored logs.

    Every edit bumps the log version, so an estimation requested before the
    edit is discarded when it completes.
    """

    store: StateStore
    change_tracker: ChangeTracker
    ferry: PendingEditFerry

    def get_log(self, log_id: str) -> FoodLog:
        return self.store.require_log(log_id)

    def list_logs(self, day: date | None = None) -> list[FoodLog]:
        """Return logs newest first, optionally only those dated ``day``."""
        logs = self.store.logs if day is None else self.store.logs_for_date(day)
        return sorted(logs, key=lambda log: log.created_at, reverse=True)

    def update_log(self, log_id: str, **fields: object) -> FoodLog:
        log = self.store.require_log(log_id)
        edits = clean_log_edits(fields)
        updated = log.model_copy(update={**edits, "version": log.version + 1})
        return self.store.replace_log(updated)

    def delete_log(self, log_id: str) -> None:
        if not self.store.remove_log(log_id):
            raise UnknownEntityError("log", log_id)
        self.change_tracker.forget(log_id)
        self.ferry.consume_pending(log_id)
        _logger.info("Deleted log %s", log_id)

    def open_for_edit(self, log_id: str) -> TrackerState:
        log = self.store.require_log(log_id)
        return self.change_tracker.start(log_id, log.food_components)

    def add_component(self, log_id: str, component: FoodComponent) -> FoodLog:
        return self.save_component(log_id, "new", component)

    def save_component(
        self, log_id: str, index: int | str, component: FoodComponent
    ) -> FoodLog:
        """Replace the component at ``index``, or append when index is "new"."""
        edit = PendingComponentEdit(
            log_id=log_id, component=component, index=_edit_index(index), action="save"
        )
        return self._mutate_components(
            log_id, lambda components: apply_component_edit(components, edit)
        )

    def delete_component(self, log_id: str, index: int) -> FoodLog:
        return self._mutate_components(
            log_id, lambda components: delete_component(components, index)
        )

    def accept_recommendation(self, log_id: str, index: int) -> FoodLog:
        return self._mutate_components(
            log_id, lambda components: accept_recommendation(components, index)
        )

    def apply_pending_edit(self, log_id: str) -> FoodLog | None:
        """Apply and clear the ferried edit for ``log_id``, if there is one."""
        edit = self.ferry.consume_pending(log_id)
        if edit is None:
            return None
        return self._mutate_components(
            log_id, lambda components: apply_component_edit(components, edit)
        )

    def should_warn_before_save(self, log_id: str) -> bool:
        return self.change_tracker.should_warn_before_save(log_id)

    def _mutate_components(
        self,
        log_id: str,
        change: Callable[[tuple[FoodComponent, ...]], tuple[FoodComponent, ...]],
    ) -> FoodLog:
        log = self.store.require_log(log_id)
        components = change(log.food_components)
        if components is log.food_components:
            return log
        self.change_tracker.record_change(log_id, log.food_components)
        updated = log.model_copy(
            update={
                "food_components": components,
                "needs_user_review": needs_review(components),
                "version": log.version + 1,
            }
        )
        return self.store.replace_log(updated)


def _edit_index(index: int | str) -> int | str:
    if index == "new" or isinstance(index, int):
        return index
    raise InputValidationError("index must be an integer or 'new'", field="index")
