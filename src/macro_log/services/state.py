"""Single mutable store for logs, favorites and targets."""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Protocol

from macro_log.domain.errors import UnknownEntityError
from macro_log.domain.models import Favorite, FoodLog
from macro_log.domain.state import PersistedState
from macro_log.domain.targets import DailyTargets, UserSettings

_logger = logging.getLogger(__name__)


class StateRepository(Protocol):
    """Persistence interface for the durable state snapshot."""

    def load(self) -> PersistedState | None:
        """Return the stored snapshot, or None when nothing is stored."""

    def save(self, state: PersistedState) -> None:
        """Replace the stored snapshot."""


@dataclass
class StateStore:
    """Owns the log collection; every write goes through a command here."""

    repository: StateRepository
    _logs: dict[str, FoodLog] = field(default_factory=dict)
    _favorites: dict[str, Favorite] = field(default_factory=dict)
    _user_settings: UserSettings | None = None
    _daily_targets: DailyTargets | None = None

    @classmethod
    def open(cls, repository: StateRepository) -> "StateStore":
        """Create a store and load the persisted snapshot."""
        store = cls(repository)
        store.load()
        return store

    def load(self) -> None:
        state = self.repository.load() or PersistedState()
        self._logs = {
            log.id: log.model_copy(update={"is_estimating": False})
            for log in state.food_logs
        }
        self._favorites = {favorite.id: favorite for favorite in state.favorites}
        self._user_settings = state.user_settings
        self._daily_targets = state.daily_targets
        _logger.info(
            "Loaded state: logs=%s favorites=%s", len(self._logs), len(self._favorites)
        )

    def reset(self) -> None:
        """Forget everything and persist the empty state."""
        self._logs = {}
        self._favorites = {}
        self._user_settings = None
        self._daily_targets = None
        self._persist()

    def snapshot(self) -> PersistedState:
        return PersistedState(
            food_logs=list(self._logs.values()),
            favorites=list(self._favorites.values()),
            user_settings=self._user_settings,
            daily_targets=self._daily_targets,
        )

    # Logs

    @property
    def logs(self) -> tuple[FoodLog, ...]:
        return tuple(self._logs.values())

    def get_log(self, log_id: str) -> FoodLog | None:
        return self._logs.get(log_id)

    def require_log(self, log_id: str) -> FoodLog:
        log = self._logs.get(log_id)
        if log is None:
            raise UnknownEntityError("log", log_id)
        return log

    def logs_for_date(self, day: date) -> list[FoodLog]:
        return [log for log in self._logs.values() if log.log_date == day]

    def add_log(self, log: FoodLog) -> FoodLog:
        """Insert a log, replacing any log with the same id."""
        self._logs[log.id] = log
        self._persist()
        return log

    def replace_log(self, log: FoodLog) -> FoodLog:
        self.require_log(log.id)
        self._logs[log.id] = log
        self._persist()
        return log

    def remove_log(self, log_id: str) -> bool:
        removed = self._logs.pop(log_id, None)
        if removed is not None:
            self._persist()
        return removed is not None

    def cleanup_incomplete_estimations(self) -> list[str]:
        """Drop logs that were left estimating before any title arrived."""
        dropped = [
            log.id
            for log in self._logs.values()
            if log.is_estimating and not (log.user_title or log.generated_title)
        ]
        for log_id in dropped:
            del self._logs[log_id]
        if dropped:
            self._persist()
        return dropped

    def prune_old_logs(
        self,
        today: date,
        *,
        threshold: int = 200,
        keep_days: int = 90,
        keep_recent: int = 300,
    ) -> list[str]:
        """Keep logs within ``keep_days`` or among the ``keep_recent`` newest."""
        if len(self._logs) <= threshold:
            return []
        cutoff = today - timedelta(days=keep_days)
        ordered = sorted(self._logs.values(), key=lambda log: log.log_date, reverse=True)
        pruned = [
            log.id
            for index, log in enumerate(ordered)
            if log.log_date < cutoff and index >= keep_recent
        ]
        for log_id in pruned:
            del self._logs[log_id]
        if pruned:
            _logger.info("Pruned %s old logs, kept %s", len(pruned), len(self._logs))
            self._persist()
        return pruned

    # Favorites

    @property
    def favorites(self) -> tuple[Favorite, ...]:
        return tuple(self._favorites.values())

    def get_favorite(self, favorite_id: str) -> Favorite | None:
        return self._favorites.get(favorite_id)

    def add_favorite(self, favorite: Favorite) -> Favorite:
        self._favorites[favorite.id] = favorite
        self._persist()
        return favorite

    def remove_favorites(self, favorite_ids: Iterable[str]) -> int:
        removed = 0
        for favorite_id in favorite_ids:
            if self._favorites.pop(favorite_id, None) is not None:
                removed += 1
        if removed:
            self._persist()
        return removed

    # Profile and targets

    @property
    def user_settings(self) -> UserSettings | None:
        return self._user_settings

    @property
    def daily_targets(self) -> DailyTargets | None:
        return self._daily_targets

    def set_user_settings(self, settings: UserSettings | None) -> None:
        self._user_settings = settings
        self._persist()

    def set_daily_targets(self, targets: DailyTargets | None) -> None:
        self._daily_targets = targets
        self._persist()

    def _persist(self) -> None:
        self.repository.save(self.snapshot())
