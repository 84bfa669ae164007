"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import asdict
from datetime import date

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.responses import JSONResponse

from macro_log.api.schemas import (
    CaloriesInput,
    ComponentInput,
    DraftCreate,
    FavoriteLogInput,
    LogEdit,
    PendingEditInput,
    ProfileUpdate,
    log_payload,
)
from macro_log.app_logging import configure_logging
from macro_log.containers import AppContainer
from macro_log.domain.edits import PendingComponentEdit
from macro_log.domain.errors import (
    ConfigurationError,
    EstimationFailure,
    InputValidationError,
    UnknownEntityError,
)
from macro_log.domain.estimation import EstimationOutcome
from macro_log.services.components import parse_component
from macro_log.services.stats import daily_progress, monthly_totals, summarize_period
from macro_log.services.values import confidence_level


def create_app(container: AppContainer) -> FastAPI:  # noqa: PLR0915
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        try:
            await app.state.container.close_resources()
        except Exception:
            logger.exception("Failed to close resources")

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    @app.exception_handler(InputValidationError)
    async def input_error(_: Request, exc: InputValidationError) -> JSONResponse:
        return JSONResponse(
            status_code=422,
            content={"detail": str(exc), "field": exc.field},
        )

    @app.exception_handler(UnknownEntityError)
    async def unknown_entity(_: Request, exc: UnknownEntityError) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND, content={"detail": str(exc)}
        )

    @app.exception_handler(EstimationFailure)
    async def estimation_failure(_: Request, exc: EstimationFailure) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_502_BAD_GATEWAY,
            content={"detail": str(exc), "retryable": exc.retryable},
        )

    @app.exception_handler(ConfigurationError)
    async def configuration_error(
        _: Request, exc: ConfigurationError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT,
            content={"detail": str(exc), "targets": exc.clamped.model_dump()},
        )

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    # Logs

    @app.get("/logs")
    async def list_logs(request: Request, day: date | None = None) -> dict[str, object]:
        state_container: AppContainer = request.app.state.container
        logs = state_container.log_service.list_logs(day)
        return {"logs": [log_payload(log) for log in logs]}

    @app.get("/logs/{log_id}")
    async def get_log(log_id: str, request: Request) -> dict[str, object]:
        """Return a log with its confidence tier and change tracking flags."""
        state_container: AppContainer = request.app.state.container
        log = state_container.log_service.get_log(log_id)
        tracker = state_container.change_tracker.state(log_id)
        return {
            "log": log_payload(log),
            "confidenceLevel": confidence_level(log.estimation_confidence),
            "isFavorite": state_container.favorites_service.is_favorite(log),
            "hasUnsavedChanges": tracker.has_unsaved_changes,
            "hasReestimated": tracker.has_reestimated,
            "shouldWarnBeforeSave": state_container.log_service.should_warn_before_save(
                log_id
            ),
        }

    @app.patch("/logs/{log_id}")
    async def update_log(
        log_id: str, body: LogEdit, request: Request
    ) -> dict[str, object]:
        state_container: AppContainer = request.app.state.container
        log = state_container.log_service.update_log(log_id, **body.changes())
        return {"log": log_payload(log)}

    @app.delete("/logs/{log_id}", status_code=status.HTTP_204_NO_CONTENT)
    async def delete_log(log_id: str, request: Request) -> None:
        state_container: AppContainer = request.app.state.container
        state_container.log_service.delete_log(log_id)

    @app.post("/logs/{log_id}/edit")
    async def open_for_edit(log_id: str, request: Request) -> dict[str, object]:
        state_container: AppContainer = request.app.state.container
        tracker = state_container.log_service.open_for_edit(log_id)
        return {"changesCount": tracker.changes_count}

    @app.post("/logs/{log_id}/estimate")
    async def estimate_log(log_id: str, request: Request) -> dict[str, object]:
        state_container: AppContainer = request.app.state.container
        outcome = await state_container.orchestrator.request_estimation(log_id)
        return _outcome_payload(outcome)

    # Ingredients

    @app.post("/logs/{log_id}/components")
    async def add_component(
        log_id: str, body: ComponentInput, request: Request
    ) -> dict[str, object]:
        state_container: AppContainer = request.app.state.container
        component = parse_component(body.name, _amount_text(body), body.unit)
        log = state_container.log_service.add_component(log_id, component)
        return {"log": log_payload(log)}

    @app.put("/logs/{log_id}/components/{index}")
    async def save_component(
        log_id: str, index: int, body: ComponentInput, request: Request
    ) -> dict[str, object]:
        state_container: AppContainer = request.app.state.container
        log = state_container.log_service.get_log(log_id)
        existing = (
            log.food_components[index]
            if 0 <= index < len(log.food_components)
            else None
        )
        component = parse_component(body.name, _amount_text(body), body.unit, existing)
        log = state_container.log_service.save_component(log_id, index, component)
        return {"log": log_payload(log)}

    @app.delete("/logs/{log_id}/components/{index}")
    async def delete_component(
        log_id: str, index: int, request: Request
    ) -> dict[str, object]:
        state_container: AppContainer = request.app.state.container
        log = state_container.log_service.delete_component(log_id, index)
        return {"log": log_payload(log)}

    @app.post("/logs/{log_id}/components/{index}/accept")
    async def accept_recommendation(
        log_id: str, index: int, request: Request
    ) -> dict[str, object]:
        state_container: AppContainer = request.app.state.container
        log = state_container.log_service.accept_recommendation(log_id, index)
        return {"log": log_payload(log)}

    @app.put("/pending-edit", status_code=status.HTTP_202_ACCEPTED)
    async def set_pending_edit(
        body: PendingEditInput, request: Request
    ) -> dict[str, str]:
        """Park an ingredient edit until its log applies it."""
        state_container: AppContainer = request.app.state.container
        component = None
        if body.action == "save":
            if body.component is None:
                raise InputValidationError(
                    "A component is required to save", field="component"
                )
            component = parse_component(
                body.component.name, _amount_text(body.component), body.component.unit
            )
        state_container.ferry.set_pending(
            PendingComponentEdit(
                log_id=body.log_id,
                component=component,
                index=body.index,
                action=body.action,
            )
        )
        return {"status": "pending"}

    @app.post("/logs/{log_id}/pending-edit")
    async def apply_pending_edit(log_id: str, request: Request) -> dict[str, object]:
        state_container: AppContainer = request.app.state.container
        log = state_container.log_service.apply_pending_edit(log_id)
        if log is None:
            return {"applied": False}
        return {"applied": True, "log": log_payload(log)}

    # Drafts

    @app.post("/drafts", status_code=status.HTTP_201_CREATED)
    async def start_draft(body: DraftCreate, request: Request) -> dict[str, object]:
        state_container: AppContainer = request.app.state.container
        changes = body.changes()
        changes.pop("log_date", None)
        draft_id = state_container.drafts.start_draft(body.log_date, **changes)
        return {"draft": log_payload(state_container.drafts.require_draft(draft_id))}

    @app.get("/drafts/{draft_id}")
    async def get_draft(draft_id: str, request: Request) -> dict[str, object]:
        state_container: AppContainer = request.app.state.container
        return {"draft": log_payload(state_container.drafts.require_draft(draft_id))}

    @app.patch("/drafts/{draft_id}")
    async def update_draft(
        draft_id: str, body: LogEdit, request: Request
    ) -> dict[str, object]:
        state_container: AppContainer = request.app.state.container
        draft = state_container.drafts.update_draft(draft_id, **body.changes())
        return {"draft": log_payload(draft)}

    @app.delete("/drafts/{draft_id}", status_code=status.HTTP_204_NO_CONTENT)
    async def discard_draft(draft_id: str, request: Request) -> None:
        state_container: AppContainer = request.app.state.container
        state_container.drafts.discard_draft(draft_id)

    @app.post("/drafts/{draft_id}/estimate")
    async def estimate_draft(draft_id: str, request: Request) -> dict[str, object]:
        state_container: AppContainer = request.app.state.container
        outcome = await state_container.orchestrator.request_estimation(draft_id)
        return _outcome_payload(outcome)

    @app.post("/drafts/{draft_id}/commit", status_code=status.HTTP_201_CREATED)
    async def commit_draft(draft_id: str, request: Request) -> dict[str, object]:
        state_container: AppContainer = request.app.state.container
        log = state_container.drafts.commit_draft(draft_id)
        return {"log": log_payload(log)}

    # Statistics

    @app.get("/stats/daily")
    async def daily_stats(request: Request, day: date) -> dict[str, object]:
        state_container: AppContainer = request.app.state.container
        progress = daily_progress(
            state_container.store.logs, day, state_container.store.daily_targets
        )
        return asdict(progress)

    @app.get("/stats/monthly")
    async def monthly_stats(request: Request, month: str) -> dict[str, object]:
        state_container: AppContainer = request.app.state.container
        days = monthly_totals(state_container.store.logs, month)
        return {"days": [asdict(entry) for entry in days]}

    @app.get("/stats/summary")
    async def period_summary(
        request: Request, start: date, days: int = 7
    ) -> dict[str, object]:
        state_container: AppContainer = request.app.state.container
        if days <= 0:
            raise HTTPException(
                status_code=422,
                detail="days must be positive",
            )
        return asdict(summarize_period(state_container.store.logs, start, days))

    # Profile and targets

    @app.get("/settings")
    async def get_settings(request: Request) -> dict[str, object]:
        state_container: AppContainer = request.app.state.container
        return {
            "profile": state_container.store.user_settings,
            "targets": state_container.store.daily_targets,
        }

    @app.patch("/settings/profile")
    async def update_profile(
        body: ProfileUpdate, request: Request
    ) -> dict[str, object]:
        """Store profile changes and recompute the daily targets."""
        state_container: AppContainer = request.app.state.container
        profile = state_container.targets_service.update_user_settings(
            **body.changes()
        )
        targets = state_container.targets_service.recalculate()
        return {"profile": profile, "targets": targets}

    @app.put("/settings/targets/calories")
    async def set_calories(body: CaloriesInput, request: Request) -> dict[str, object]:
        state_container: AppContainer = request.app.state.container
        targets = state_container.targets_service.set_manual_calories(body.calories)
        return {"targets": targets}

    @app.delete("/settings/targets")
    async def reset_targets(request: Request) -> dict[str, object]:
        state_container: AppContainer = request.app.state.container
        state_container.targets_service.reset()
        return {"targets": state_container.store.daily_targets}

    # Favorites

    @app.get("/favorites")
    async def list_favorites(request: Request, q: str = "") -> dict[str, object]:
        state_container: AppContainer = request.app.state.container
        return {"favorites": state_container.favorites_service.search(q)}

    @app.post("/logs/{log_id}/favorite")
    async def toggle_favorite(log_id: str, request: Request) -> dict[str, bool]:
        state_container: AppContainer = request.app.state.container
        log = state_container.log_service.get_log(log_id)
        return {"isFavorite": state_container.favorites_service.toggle(log)}

    @app.delete("/favorites/{favorite_id}", status_code=status.HTTP_204_NO_CONTENT)
    async def delete_favorite(favorite_id: str, request: Request) -> None:
        state_container: AppContainer = request.app.state.container
        state_container.favorites_service.delete(favorite_id)

    @app.post("/favorites/{favorite_id}/log", status_code=status.HTTP_201_CREATED)
    async def log_favorite(
        favorite_id: str, body: FavoriteLogInput, request: Request
    ) -> dict[str, object]:
        state_container: AppContainer = request.app.state.container
        log = state_container.favorites_service.create_log(favorite_id, body.log_date)
        return {"log": log_payload(log)}

    # Images

    @app.post("/images", status_code=status.HTTP_201_CREATED)
    async def upload_image(request: Request) -> dict[str, str]:
        state_container: AppContainer = request.app.state.container
        if state_container.image_service is None:
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail="Image storage is not configured",
            )
        image_ref = state_container.image_service.upload(await request.body())
        return {"imageRef": image_ref}

    return app


def _amount_text(body: ComponentInput) -> str:
    if isinstance(body.amount, str):
        return body.amount
    return f"{body.amount:g}"


def _outcome_payload(outcome: EstimationOutcome) -> dict[str, object]:
    return {
        "status": outcome.status,
        "logId": outcome.log_id,
        "version": outcome.version,
        "log": log_payload(outcome.log) if outcome.log is not None else None,
    }
