"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import date

from supabase import create_client

from macro_log.adapters.edge_estimation_client import HttpxEdgeEstimationClient
from macro_log.adapters.json_state_repository import JsonStateRepository
from macro_log.adapters.openai_estimation_client import OpenAIEstimationClient
from macro_log.adapters.supabase_image_store import SupabaseImageStore
from macro_log.config import Settings
from macro_log.services.changes import ChangeTracker
from macro_log.services.drafts import DraftManager
from macro_log.services.estimation import EstimationClient, EstimationService
from macro_log.services.favorites import FavoritesService
from macro_log.services.ferry import PendingEditFerry
from macro_log.services.images import ImageService
from macro_log.services.logs import FoodLogService
from macro_log.services.orchestrator import EstimationOrchestrator
from macro_log.services.state import StateRepository, StateStore
from macro_log.services.targets import TargetsService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    store: StateStore
    drafts: DraftManager
    change_tracker: ChangeTracker
    ferry: PendingEditFerry
    log_service: FoodLogService
    targets_service: TargetsService
    favorites_service: FavoritesService
    estimation_service: EstimationService
    orchestrator: EstimationOrchestrator
    image_service: ImageService | None
    close_resources: Callable[[], Awaitable[None]]

    def reset(self) -> None:
        """Drop all user state, as on logout."""
        self.drafts.reset()
        self.change_tracker.reset()
        self.ferry.clear()
        self.store.reset()


def build_container(  # noqa: PLR0913
    settings: Settings | None = None,
    *,
    repository: StateRepository | None = None,
    estimation_client: EstimationClient | None = None,
    image_service: ImageService | None = None,
    today: date | None = None,
) -> AppContainer:
    """Create the default dependency container.

    Explicit collaborators replace the configured adapters.
    """
    resolved_settings = settings or Settings()
    store = StateStore.open(repository or JsonStateRepository(resolved_settings.state_path))
    store.prune_old_logs(
        today or date.today(),
        threshold=resolved_settings.prune_after_logs,
        keep_days=resolved_settings.prune_keep_days,
        keep_recent=resolved_settings.prune_keep_recent,
    )

    closers: list[Callable[[], Awaitable[None]]] = []
    if estimation_client is None:
        estimation_client = _build_estimation_client(resolved_settings)
        closers.append(estimation_client.close)
    if image_service is None and resolved_settings.supabase_url:
        image_service = _build_image_service(resolved_settings)

    change_tracker = ChangeTracker()
    ferry = PendingEditFerry()
    drafts = DraftManager(store)
    estimation_service = EstimationService(estimation_client)

    async def close_resources() -> None:
        store.cleanup_incomplete_estimations()
        for close in closers:
            await close()

    return AppContainer(
        settings=resolved_settings,
        store=store,
        drafts=drafts,
        change_tracker=change_tracker,
        ferry=ferry,
        log_service=FoodLogService(store, change_tracker, ferry),
        targets_service=TargetsService(store),
        favorites_service=FavoritesService(store),
        estimation_service=estimation_service,
        orchestrator=EstimationOrchestrator(
            estimation_service=estimation_service,
            store=store,
            drafts=drafts,
            change_tracker=change_tracker,
        ),
        image_service=image_service,
        close_resources=close_resources,
    )


def _build_estimation_client(
    settings: Settings,
) -> HttpxEdgeEstimationClient | OpenAIEstimationClient:
    if settings.estimation_backend == "openai":
        if not settings.openai_api_key:
            raise ValueError("OPENAI_API_KEY is required for the openai backend")
        return OpenAIEstimationClient.create(
            api_key=settings.openai_api_key,
            model=settings.openai_model,
            reasoning_effort=settings.openai_reasoning_effort,
            store=settings.openai_store,
            timeout=settings.estimation_timeout_seconds,
        )
    if not settings.supabase_url or not settings.supabase_anon_key:
        raise ValueError(
            "SUPABASE_URL and SUPABASE_ANON_KEY are required for the edge backend"
        )
    return HttpxEdgeEstimationClient.create(
        supabase_url=settings.supabase_url,
        anon_key=settings.supabase_anon_key,
        timeout=settings.estimation_timeout_seconds,
    )


def _build_image_service(settings: Settings) -> ImageService | None:
    if not settings.supabase_url or not settings.supabase_anon_key:
        return None
    supabase_client = create_client(settings.supabase_url, settings.supabase_anon_key)
    return ImageService(
        SupabaseImageStore(supabase_client, bucket=settings.supabase_image_bucket)
    )
