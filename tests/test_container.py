"""Tests for container wiring."""

import asyncio
from datetime import date

import pytest

from macro_log.adapters.openai_estimation_client import OpenAIEstimationClient
from macro_log.config import Settings
from macro_log.containers import build_container
from tests.conftest import TODAY, InMemoryStateRepository, make_log


def test_build_container_creates_services(settings: Settings) -> None:
    container = build_container(settings)

    assert isinstance(container.estimation_service.client, OpenAIEstimationClient)
    assert container.image_service is None
    assert container.orchestrator.store is container.store
    asyncio.run(container.close_resources())


def test_edge_backend_requires_supabase(tmp_path) -> None:
    settings = Settings(state_path=tmp_path / "state.json", estimation_backend="edge")

    with pytest.raises(ValueError, match="SUPABASE_URL"):
        build_container(settings)


def test_close_resources_drops_incomplete_estimations(container) -> None:
    container.store.add_log(make_log(image_ref="a.jpg", is_estimating=True))

    asyncio.run(container.close_resources())

    assert container.store.logs == ()


def test_reset_forgets_user_state(container) -> None:
    container.store.add_log(make_log(user_title="Oats"))
    draft_id = container.drafts.start_draft(TODAY, user_title="Soup")

    container.reset()

    assert container.store.logs == ()
    assert container.drafts.get_draft(draft_id) is None


def test_build_container_prunes_old_logs(settings: Settings) -> None:
    repository = InMemoryStateRepository()
    seed = build_container(
        settings.model_copy(update={"prune_after_logs": 1, "prune_keep_recent": 1}),
        repository=repository,
        estimation_client=object(),  # type: ignore[arg-type]
        today=date(2026, 1, 1),
    )
    seed.store.add_log(make_log())
    seed.store.add_log(make_log())

    reopened = build_container(
        settings.model_copy(update={"prune_after_logs": 1, "prune_keep_recent": 1}),
        repository=repository,
        estimation_client=object(),  # type: ignore[arg-type]
        today=date(2026, 1, 1),
    )

    assert len(reopened.store.logs) == 1
