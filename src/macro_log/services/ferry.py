"""Single-slot mailbox for ingredient edits made in a detached editor."""

import logging
from dataclasses import dataclass

from macro_log.domain.edits import PendingComponentEdit

_logger = logging.getLogger(__name__)


@dataclass
class PendingEditFerry:
    """Holds at most one pending edit; writing overwrites, reading clears."""

    _slot: PendingComponentEdit | None = None

    def set_pending(self, edit: PendingComponentEdit) -> None:
        if self._slot is not None:
            _logger.debug("Overwriting pending edit for log %s", self._slot.log_id)
        self._slot = edit

    def peek(self) -> PendingComponentEdit | None:
        return self._slot

    def consume_pending(self, log_id: str | None = None) -> PendingComponentEdit | None:
        """Take the pending edit, optionally only when it targets ``log_id``.

        An edit addressed to another log stays in the slot.
        """
        edit = self._slot
        if edit is None:
            return None
        if log_id is not None and edit.log_id != log_id:
            return None
        self._slot = None
        return edit

    def clear(self) -> None:
        self._slot = None
