"""Version-stamped estimation requests and result merging."""

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Literal

from macro_log.domain.errors import (
    EstimationFailure,
    InputValidationError,
    UnknownEntityError,
)
from macro_log.domain.estimation import (
    EstimationOutcome,
    EstimationRequest,
    EstimationResult,
    ImageEstimationRequest,
    TextEstimationRequest,
)
from macro_log.domain.models import FoodLog, needs_review
from macro_log.services.changes import ChangeTracker
from macro_log.services.drafts import DraftManager
from macro_log.services.estimation import EstimationService
from macro_log.services.state import StateStore
from macro_log.services.values import resolve_description, resolve_title

_logger = logging.getLogger(__name__)

_Location = Literal["draft", "log"]


@dataclass
class EstimationOrchestrator:
    """Runs estimations for logs and drafts and merges results by version.

    A request stamps the target with a new version. When the response
    arrives it is merged only if the target still carries that version;
    otherwise it is reported as stale and nothing is written.
    """

    estimation_service: EstimationService
    store: StateStore
    drafts: DraftManager
    change_tracker: ChangeTracker
    _in_flight: Counter[str] = field(default_factory=Counter)

    async def request_estimation(self, log_id: str) -> EstimationOutcome:
        """Estimate from the image when the log has one, else from its text."""
        _, log = self._require(log_id)
        if log.image_ref:
            request: EstimationRequest = ImageEstimationRequest(
                image_ref=log.image_ref,
                title=resolve_title(log) or None,
                description=resolve_description(log) or None,
            )
        else:
            description = resolve_description(log) or resolve_title(log)
            if not description:
                raise InputValidationError(
                    "A description or image is required to estimate",
                    field="user_description",
                )
            request = TextEstimationRequest(description=description)
        return await self.estimate(log_id, request)

    async def estimate_from_text(
        self, log_id: str, description: str
    ) -> EstimationOutcome:
        if not description.strip():
            raise InputValidationError(
                "Description must not be empty", field="description"
            )
        return await self.estimate(
            log_id, TextEstimationRequest(description=description.strip())
        )

    async def estimate_from_image(
        self,
        log_id: str,
        image_ref: str,
        title: str | None = None,
        description: str | None = None,
    ) -> EstimationOutcome:
        return await self.estimate(
            log_id,
            ImageEstimationRequest(
                image_ref=image_ref, title=title, description=description
            ),
        )

    async def estimate(
        self, log_id: str, request: EstimationRequest
    ) -> EstimationOutcome:
        """Stamp the target, await the estimate, then merge or discard it."""
        stamp = self._begin(log_id)
        self._in_flight[log_id] += 1
        try:
            return await self._run(log_id, stamp, request)
        finally:
            if log_id not in self._in_flight:
                self.drafts.forget_promotion(log_id)

    async def _run(
        self, log_id: str, stamp: int, request: EstimationRequest
    ) -> EstimationOutcome:
        try:
            result = await self.estimation_service.estimate(request)
        except EstimationFailure:
            self._finish(log_id)
            located = self._locate(log_id)
            if located is None:
                _logger.info("Discarding failed estimation for removed %s", log_id)
                return EstimationOutcome(status="stale", log_id=log_id, version=stamp)
            _logger.warning("Estimation failed for %s", log_id)
            self._settle_flag(*located)
            raise
        except BaseException:
            self._finish(log_id)
            raise
        self._finish(log_id)
        return self._complete(log_id, stamp, result)

    def _begin(self, log_id: str) -> int:
        location, log = self._require(log_id)
        stamp = log.version + 1
        self._write(
            location, log.model_copy(update={"version": stamp, "is_estimating": True})
        )
        return stamp

    def _complete(
        self, log_id: str, stamp: int, result: EstimationResult
    ) -> EstimationOutcome:
        located = self._locate(log_id)
        if located is None:
            _logger.info("Discarding estimation for removed %s", log_id)
            return EstimationOutcome(status="stale", log_id=log_id, version=stamp)

        location, log = located
        if log.version != stamp:
            _logger.info(
                "Discarding stale estimation for %s: version %s, current %s",
                log.id,
                stamp,
                log.version,
            )
            self._settle_flag(location, log)
            return EstimationOutcome(status="stale", log_id=log.id, version=stamp)

        merged = log.model_copy(
            update={
                "generated_title": result.generated_title,
                "generated_description": result.generated_description,
                "generated_calories": result.calories,
                "generated_protein": result.protein,
                "generated_carbs": result.carbs,
                "generated_fat": result.fat,
                "estimation_confidence": result.estimation_confidence,
                "food_components": result.food_components,
                "needs_user_review": needs_review(result.food_components),
                "is_estimating": False,
            }
        )
        self._write(location, merged)
        if location == "log":
            self.change_tracker.mark_estimated(merged.id, merged.food_components)
        return EstimationOutcome(
            status="merged", log_id=merged.id, version=stamp, log=merged
        )

    def _settle_flag(self, location: _Location, log: FoodLog) -> None:
        """Clear the estimating flag unless another request is still running."""
        if log.is_estimating and self._in_flight_for(log.id) == 0:
            self._write(location, log.model_copy(update={"is_estimating": False}))

    def _in_flight_for(self, target_id: str) -> int:
        """Running requests for a target, counting those started on its draft."""
        return sum(
            count
            for requested_id, count in self._in_flight.items()
            if (self.drafts.promoted_log_id(requested_id) or requested_id)
            == target_id
        )

    def _finish(self, log_id: str) -> None:
        self._in_flight[log_id] -= 1
        if self._in_flight[log_id] <= 0:
            del self._in_flight[log_id]

    def _locate(self, log_id: str) -> tuple[_Location, FoodLog] | None:
        draft = self.drafts.get_draft(log_id)
        if draft is not None:
            return "draft", draft
        target_id = self.drafts.promoted_log_id(log_id) or log_id
        log = self.store.get_log(target_id)
        if log is None:
            return None
        return "log", log

    def _require(self, log_id: str) -> tuple[_Location, FoodLog]:
        located = self._locate(log_id)
        if located is None:
            raise UnknownEntityError("log", log_id)
        return located

    def _write(self, location: _Location, log: FoodLog) -> None:
        if location == "draft":
            self.drafts.replace_draft(log)
        else:
            self.store.replace_log(log)
