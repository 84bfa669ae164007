"""Tests for the HTTP API."""

from fastapi.testclient import TestClient

from macro_log.api.app import create_app
from macro_log.containers import AppContainer
from tests.conftest import FakeEstimationClient, FakeImageStore, make_log


def _client(container: AppContainer) -> TestClient:
    return TestClient(create_app(container))


def test_health_endpoint(container: AppContainer) -> None:
    response = _client(container).get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_draft_commit_and_daily_stats(container: AppContainer) -> None:
    client = _client(container)

    draft = client.post(
        "/drafts",
        json={"log_date": "2025-03-14", "user_title": "Oats", "user_calories": "350"},
    ).json()["draft"]
    client.patch(f"/drafts/{draft['id']}", json={"user_protein": 20})
    committed = client.post(f"/drafts/{draft['id']}/commit")
    stats = client.get("/stats/daily", params={"day": "2025-03-14"}).json()

    assert committed.status_code == 201
    assert committed.json()["log"]["userTitle"] == "Oats"
    assert stats["current"]["calories"] == 350
    assert stats["current"]["protein"] == 20
    assert stats["percentages"]["calories"] == 0


def test_estimate_endpoint_merges_result(
    container: AppContainer, estimation_client: FakeEstimationClient
) -> None:
    log = container.store.add_log(make_log(user_description="40g oats"))

    response = _client(container).post(f"/logs/{log.id}/estimate")

    body = response.json()
    assert response.status_code == 200
    assert body["status"] == "merged"
    assert body["log"]["generatedCalories"] == 610
    assert body["log"]["isEstimating"] is False
    assert estimation_client.calls == [("text", {"description": "40g oats"})]


def test_estimation_failure_maps_to_bad_gateway(
    container: AppContainer, estimation_client: FakeEstimationClient
) -> None:
    estimation_client.error = ConnectionError("offline")
    log = container.store.add_log(make_log(user_description="oats"))

    response = _client(container).post(f"/logs/{log.id}/estimate")

    assert response.status_code == 502
    assert response.json()["retryable"] is True


def test_unknown_log_maps_to_not_found(container: AppContainer) -> None:
    response = _client(container).get("/logs/missing")

    assert response.status_code == 404


def test_invalid_component_maps_to_unprocessable(container: AppContainer) -> None:
    log = container.store.add_log(make_log(user_title="Oats"))

    response = _client(container).post(
        f"/logs/{log.id}/components", json={"name": "Oats", "amount": "12.34", "unit": "g"}
    )

    assert response.status_code == 422
    assert response.json()["field"] == "amount"


def test_component_edit_flow_sets_warning(container: AppContainer) -> None:
    log = container.store.add_log(make_log(user_title="Oats"))
    client = _client(container)

    client.post(f"/logs/{log.id}/edit")
    added = client.post(
        f"/logs/{log.id}/components", json={"name": "Oats", "amount": 40, "unit": "g"}
    )
    detail = client.get(f"/logs/{log.id}").json()

    assert added.status_code == 200
    assert added.json()["log"]["foodComponents"][0]["amount"] == 40
    assert detail["hasUnsavedChanges"] is True
    assert detail["shouldWarnBeforeSave"] is True


def test_pending_edit_is_applied_once(container: AppContainer) -> None:
    log = container.store.add_log(make_log(user_title="Oats"))
    client = _client(container)

    parked = client.put(
        "/pending-edit",
        json={
            "log_id": log.id,
            "index": "new",
            "action": "save",
            "component": {"name": "Nuts", "amount": "20", "unit": "g"},
        },
    )
    first = client.post(f"/logs/{log.id}/pending-edit").json()
    second = client.post(f"/logs/{log.id}/pending-edit").json()

    assert parked.status_code == 202
    assert first["applied"] is True
    assert first["log"]["foodComponents"][0]["name"] == "Nuts"
    assert second == {"applied": False}


def test_profile_update_computes_targets(container: AppContainer) -> None:
    response = _client(container).patch(
        "/settings/profile",
        json={"sex": "male", "age": 30, "weight": 85, "height": 175},
    )

    assert response.status_code == 200
    assert response.json()["targets"]["calories"] == 2159


def test_unsatisfiable_profile_maps_to_conflict(container: AppContainer) -> None:
    response = _client(container).patch(
        "/settings/profile",
        json={"sex": "male", "age": 30, "weight": 85, "height": 175, "protein_factor": 10},
    )

    assert response.status_code == 409
    assert response.json()["targets"]["carbs"] == 0


def test_favorite_toggle_and_relog(container: AppContainer) -> None:
    log = container.store.add_log(
        make_log(generated_title="Soup", generated_calories=250)
    )
    client = _client(container)

    toggled = client.post(f"/logs/{log.id}/favorite").json()
    favorites = client.get("/favorites", params={"q": "soup"}).json()["favorites"]
    relogged = client.post(
        f"/favorites/{favorites[0]['id']}/log", json={"log_date": "2025-03-15"}
    )

    assert toggled == {"isFavorite": True}
    assert relogged.status_code == 201
    assert relogged.json()["log"]["userCalories"] == 250
    assert relogged.json()["log"]["logDate"] == "2025-03-15"


def test_image_upload_returns_reference(
    container: AppContainer, image_store: FakeImageStore
) -> None:
    response = _client(container).post("/images", content=b"\xff\xd8\xffdata")

    assert response.status_code == 201
    assert response.json()["imageRef"].endswith(".jpg")
    assert len(image_store.uploads) == 1


def test_monthly_stats(container: AppContainer) -> None:
    container.store.add_log(make_log(user_calories=500))

    response = _client(container).get("/stats/monthly", params={"month": "2025-03"})

    assert response.json()["days"] == [
        {
            "day": "2025-03-14",
            "totals": {"calories": 500.0, "protein": 0.0, "carbs": 0.0, "fat": 0.0},
        }
    ]
