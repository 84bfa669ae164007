"""Shared test fixtures."""

import asyncio
from dataclasses import dataclass, field
from datetime import date

import pytest

from macro_log.config import Settings
from macro_log.containers import AppContainer, build_container
from macro_log.domain.models import FoodLog
from macro_log.domain.state import PersistedState
from macro_log.services.changes import ChangeTracker
from macro_log.services.drafts import DraftManager
from macro_log.services.estimation import EstimationClient, EstimationService
from macro_log.services.ferry import PendingEditFerry
from macro_log.services.images import ImageService, ImageStore
from macro_log.services.logs import FoodLogService
from macro_log.services.orchestrator import EstimationOrchestrator
from macro_log.services.state import StateRepository, StateStore

TODAY = date(2025, 3, 14)


def estimate_payload(**overrides: object) -> dict[str, object]:
    """Raw camelCase estimation payload as the hosted functions return it."""
    payload: dict[str, object] = {
        "generatedTitle": "Oats with Nuts and Quark",
        "estimationConfidence": 95,
        "calories": 610,
        "protein": 75,
        "carbs": 40,
        "fat": 18,
    }
    payload.update(overrides)
    return payload


def make_log(**fields: object) -> FoodLog:
    fields.setdefault("log_date", TODAY)
    return FoodLog(**fields)


@dataclass
class InMemoryStateRepository(StateRepository):
    """In-memory state repository for tests."""

    state: PersistedState | None = None
    saves: int = 0

    def load(self) -> PersistedState | None:
        return self.state

    def save(self, state: PersistedState) -> None:
        self.state = state
        self.saves += 1


@dataclass
class FakeEstimationClient(EstimationClient):
    """Fake estimation client returning queued payloads or raising."""

    payloads: list[dict[str, object]] = field(default_factory=list)
    error: Exception | None = None
    calls: list[tuple[str, dict[str, object]]] = field(default_factory=list)

    async def estimate_text(self, *, description: str) -> dict[str, object]:
        self.calls.append(("text", {"description": description}))
        return self._next()

    async def estimate_image(
        self,
        *,
        image_ref: str,
        title: str | None,
        description: str | None,
    ) -> dict[str, object]:
        self.calls.append(
            (
                "image",
                {"image_ref": image_ref, "title": title, "description": description},
            )
        )
        return self._next()

    def _next(self) -> dict[str, object]:
        if self.error is not None:
            raise self.error
        if self.payloads:
            return self.payloads.pop(0)
        return estimate_payload()


@dataclass
class GatedEstimationClient(EstimationClient):
    """Estimation client whose calls complete only when released by the test."""

    payloads: list[dict[str, object]]
    gates: list[asyncio.Event] = field(default_factory=list)

    async def estimate_text(self, *, description: str) -> dict[str, object]:
        return await self._wait()

    async def estimate_image(
        self,
        *,
        image_ref: str,
        title: str | None,
        description: str | None,
    ) -> dict[str, object]:
        return await self._wait()

    def release(self, index: int) -> None:
        self.gates[index].set()

    async def _wait(self) -> dict[str, object]:
        index = len(self.gates)
        gate = asyncio.Event()
        self.gates.append(gate)
        await gate.wait()
        return self.payloads[index]


@dataclass
class FakeImageStore(ImageStore):
    """Fake image store that keeps uploads in memory."""

    uploads: dict[str, tuple[bytes, str]] = field(default_factory=dict)

    def upload(self, path: str, data: bytes, content_type: str) -> str:
        self.uploads[path] = (data, content_type)
        return f"https://images.test/{path}"


@dataclass
class Engine:
    """Services wired around one store, for service-level tests."""

    store: StateStore
    drafts: DraftManager
    tracker: ChangeTracker
    ferry: PendingEditFerry
    logs: FoodLogService
    orchestrator: EstimationOrchestrator


def build_engine(
    client: EstimationClient, repository: StateRepository | None = None
) -> Engine:
    store = StateStore.open(repository or InMemoryStateRepository())
    tracker = ChangeTracker()
    ferry = PendingEditFerry()
    drafts = DraftManager(store)
    return Engine(
        store=store,
        drafts=drafts,
        tracker=tracker,
        ferry=ferry,
        logs=FoodLogService(store, tracker, ferry),
        orchestrator=EstimationOrchestrator(
            estimation_service=EstimationService(client),
            store=store,
            drafts=drafts,
            change_tracker=tracker,
        ),
    )


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        state_path=tmp_path / "state.json",
        estimation_backend="openai",
        openai_api_key="openai-key",
    )


@pytest.fixture
def repository() -> InMemoryStateRepository:
    return InMemoryStateRepository()


@pytest.fixture
def store(repository: InMemoryStateRepository) -> StateStore:
    return StateStore.open(repository)


@pytest.fixture
def estimation_client() -> FakeEstimationClient:
    return FakeEstimationClient()


@pytest.fixture
def engine(estimation_client: FakeEstimationClient) -> Engine:
    return build_engine(estimation_client)


@pytest.fixture
def image_store() -> FakeImageStore:
    return FakeImageStore()


@pytest.fixture
def container(
    settings: Settings,
    repository: InMemoryStateRepository,
    estimation_client: FakeEstimationClient,
    image_store: FakeImageStore,
) -> AppContainer:
    return build_container(
        settings,
        repository=repository,
        estimation_client=estimation_client,
        image_service=ImageService(image_store),
        today=TODAY,
    )
