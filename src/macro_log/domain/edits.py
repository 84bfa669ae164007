"""Pending ingredient edit carried from a detached editor."""

from dataclasses import dataclass
from typing import Literal

from macro_log.domain.models import FoodComponent


@dataclass(frozen=True)
class PendingComponentEdit:
    """Single ingredient save or delete addressed to one log."""

    log_id: str
    component: FoodComponent | None
    index: int | Literal["new"]
    action: Literal["save", "delete"]
