"""Favorites: frozen snapshots of logs that can be logged again."""

import logging
from dataclasses import dataclass
from datetime import date

from macro_log.domain.errors import UnknownEntityError
from macro_log.domain.models import Favorite, FoodLog
from macro_log.services.state import StateStore
from macro_log.services.values import resolve_all, resolve_description, resolve_title

DEFAULT_FAVORITE_CONFIDENCE = 100

_logger = logging.getLogger(__name__)


def to_favorite(log: FoodLog) -> Favorite:
    """Snapshot a log's effective values; later log edits do not leak in."""
    totals = resolve_all(log)
    return Favorite(
        log_date=log.log_date,
        title=resolve_title(log),
        description=resolve_description(log),
        calories=totals.calories,
        protein=totals.protein,
        carbs=totals.carbs,
        fat=totals.fat,
        estimation_confidence=log.estimation_confidence or DEFAULT_FAVORITE_CONFIDENCE,
    )


def from_favorite(favorite: Favorite, log_date: date) -> FoodLog:
    """Build a new log whose user values come straight from the favorite."""
    return FoodLog(
        log_date=log_date,
        user_title=favorite.title or None,
        user_description=favorite.description or None,
        user_calories=favorite.calories,
        user_protein=favorite.protein,
        user_carbs=favorite.carbs,
        user_fat=favorite.fat,
        estimation_confidence=favorite.estimation_confidence,
    )


def matches(favorite: Favorite, log: FoodLog) -> bool:
    """True when the favorite holds the same title, description and macros."""
    totals = resolve_all(log)
    return (
        _normalize(favorite.title) == _normalize(resolve_title(log))
        and _normalize(favorite.description) == _normalize(resolve_description(log))
        and favorite.calories == totals.calories
        and favorite.protein == totals.protein
        and favorite.carbs == totals.carbs
        and favorite.fat == totals.fat
    )


def _normalize(text: str) -> str:
    return text.strip().lower()


@dataclass
class FavoritesService:
    """Favorites collection backed by the state store."""

    store: StateStore

    def list_favorites(self) -> list[Favorite]:
        return sorted(
            self.store.favorites, key=lambda favorite: favorite.created_at, reverse=True
        )

    def search(self, term: str) -> list[Favorite]:
        """Filter favorites whose title or description contains ``term``."""
        needle = _normalize(term)
        favorites = self.list_favorites()
        if not needle:
            return favorites
        return [
            favorite
            for favorite in favorites
            if needle in favorite.title.lower() or needle in favorite.description.lower()
        ]

    def is_favorite(self, log: FoodLog) -> bool:
        return any(matches(favorite, log) for favorite in self.store.favorites)

    def add_from_log(self, log: FoodLog) -> Favorite:
        """Add a favorite for the log, returning the existing one if present."""
        for favorite in self.store.favorites:
            if matches(favorite, log):
                return favorite
        favorite = self.store.add_favorite(to_favorite(log))
        _logger.info("Added favorite %s", favorite.id)
        return favorite

    def remove_for_log(self, log: FoodLog) -> int:
        return self.store.remove_favorites(
            favorite.id for favorite in self.store.favorites if matches(favorite, log)
        )

    def toggle(self, log: FoodLog) -> bool:
        """Add or remove the log's favorite; returns True when now a favorite."""
        if self.is_favorite(log):
            self.remove_for_log(log)
            return False
        self.add_from_log(log)
        return True

    def delete(self, favorite_id: str) -> None:
        if not self.store.remove_favorites([favorite_id]):
            raise UnknownEntityError("favorite", favorite_id)

    def create_log(self, favorite_id: str, log_date: date) -> FoodLog:
        favorite = self.store.get_favorite(favorite_id)
        if favorite is None:
            raise UnknownEntityError("favorite", favorite_id)
        return self.store.add_log(from_favorite(favorite, log_date))
