"""In-memory drafts for logs that are still being composed."""

import logging
from dataclasses import dataclass, field
from datetime import date

from macro_log.domain.errors import InputValidationError, UnknownEntityError
from macro_log.domain.models import FoodLog, new_id, utc_now
from macro_log.services.logs import clean_log_edits
from macro_log.services.state import StateStore

_logger = logging.getLogger(__name__)


@dataclass
class DraftManager:
    """Drafts live here until committed; the aggregator never sees them."""

    store: StateStore
    _drafts: dict[str, FoodLog] = field(default_factory=dict)
    _promoted: dict[str, str] = field(default_factory=dict)

    def start_draft(self, log_date: date, **fields: object) -> str:
        edits = clean_log_edits(fields)
        edits.pop("log_date", None)
        draft = FoodLog(log_date=log_date, **edits)
        self._drafts[draft.id] = draft
        return draft.id

    def get_draft(self, draft_id: str) -> FoodLog | None:
        return self._drafts.get(draft_id)

    def require_draft(self, draft_id: str) -> FoodLog:
        draft = self._drafts.get(draft_id)
        if draft is None:
            raise UnknownEntityError("draft", draft_id)
        return draft

    def update_draft(self, draft_id: str, **fields: object) -> FoodLog:
        """Merge the given fields into the draft; other fields are untouched."""
        draft = self.require_draft(draft_id)
        edits = clean_log_edits(fields)
        updated = draft.model_copy(update={**edits, "version": draft.version + 1})
        self._drafts[draft_id] = updated
        return updated

    def replace_draft(self, draft: FoodLog) -> FoodLog:
        """Store a draft produced by an estimation merge."""
        self.require_draft(draft.id)
        self._drafts[draft.id] = draft
        return draft

    def discard_draft(self, draft_id: str) -> bool:
        return self._drafts.pop(draft_id, None) is not None

    def commit_draft(self, draft_id: str) -> FoodLog:
        """Persist the draft as a new log with a fresh id.

        An estimation still running for the draft lands on the committed log;
        the promotion is remembered only while such an estimation exists.
        """
        draft = self.require_draft(draft_id)
        if not (draft.user_title or draft.user_description or draft.image_ref):
            raise InputValidationError(
                "A title, description or image is required", field="user_title"
            )
        log = draft.model_copy(update={"id": new_id(), "created_at": utc_now()})
        self.store.add_log(log)
        del self._drafts[draft_id]
        if draft.is_estimating:
            self._promoted[draft_id] = log.id
        _logger.info("Committed draft %s as log %s", draft_id, log.id)
        return log

    def promoted_log_id(self, draft_id: str) -> str | None:
        return self._promoted.get(draft_id)

    def forget_promotion(self, draft_id: str) -> None:
        self._promoted.pop(draft_id, None)

    def reset(self) -> None:
        self._drafts.clear()
        self._promoted.clear()
