"""Ingredient change tracking for the refine-and-save flow."""

from dataclasses import dataclass, field, replace

from macro_log.domain.models import FoodComponent


@dataclass(frozen=True)
class TrackerState:
    """Change counters for one log since its last estimation."""

    last_estimated_components: tuple[FoodComponent, ...] = ()
    changes_count: int = 0
    has_reestimated: bool = False

    @property
    def has_unsaved_changes(self) -> bool:
        return self.changes_count > 0


@dataclass
class ChangeTracker:
    """Counts ingredient edits per log and resets on each settled estimate."""

    _states: dict[str, TrackerState] = field(default_factory=dict)

    def start(
        self, log_id: str, components: tuple[FoodComponent, ...]
    ) -> TrackerState:
        """Snapshot the components when a log is first opened for editing."""
        state = self._states.get(log_id)
        if state is None:
            state = TrackerState(last_estimated_components=components)
            self._states[log_id] = state
        return state

    def state(self, log_id: str) -> TrackerState:
        return self._states.get(log_id, TrackerState())

    def record_change(
        self, log_id: str, components: tuple[FoodComponent, ...]
    ) -> TrackerState:
        """Count one add, edit, delete or accepted recommendation.

        ``components`` is the list before the change; it seeds the snapshot
        for a log that was never opened.
        """
        current = self.start(log_id, components)
        updated = replace(current, changes_count=current.changes_count + 1)
        self._states[log_id] = updated
        return updated

    def mark_estimated(
        self, log_id: str, components: tuple[FoodComponent, ...]
    ) -> TrackerState:
        updated = TrackerState(
            last_estimated_components=components,
            changes_count=0,
            has_reestimated=True,
        )
        self._states[log_id] = updated
        return updated

    def should_warn_before_save(self, log_id: str) -> bool:
        """True when ingredients changed but macros were not recalculated."""
        state = self.state(log_id)
        return state.has_unsaved_changes and not state.has_reestimated

    def forget(self, log_id: str) -> None:
        self._states.pop(log_id, None)

    def reset(self) -> None:
        self._states.clear()
