"""Integration tests for the sync HTTP surface, wired against in-memory fakes."""

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from salespro_sync.application.interfaces import StorageKey
from salespro_sync.application.services.user_mapping import USERS_TABLE, user_to_fields
from salespro_sync.config import Settings
from salespro_sync.domain.entities import UserRecord
from salespro_sync.infrastructure.broadcast.broadcast_channel import BroadcastHub
from salespro_sync.infrastructure.defaults.yaml_dataset import YamlDefaultDataset
from salespro_sync.infrastructure.dependencies import build_sync_context
from salespro_sync.main import create_app
from tests.support.fakes import FakeRemoteTableClient, InMemoryLocalStore


@pytest.fixture
def remote() -> FakeRemoteTableClient:
    return FakeRemoteTableClient()


@pytest.fixture
def hub() -> BroadcastHub:
    return BroadcastHub()


@pytest_asyncio.fixture
async def context(remote, hub):
    settings = Settings()
    ctx = build_sync_context(
        settings,
        store=InMemoryLocalStore(),
        hub=hub,
        remote=remote,
        defaults=YamlDefaultDataset(settings.default_content_file),
    )
    yield ctx
    await ctx.aclose()


@pytest_asyncio.fixture
async def client(context):
    app = create_app()
    app.state.sync_context = context
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as http:
        yield http


# ── Users ──


@pytest.mark.asyncio
async def test_unknown_user_gets_fresh_record(client):
    response = await client.get("/api/v1/users/1001")

    assert response.status_code == 200
    data = response.json()
    assert data["external_id"] == "1001"
    assert data["name"] == "Guest"
    assert data["xp"] == 0


@pytest.mark.asyncio
async def test_save_user_writes_locally_then_remote(client, context, remote):
    response = await client.put(
        "/api/v1/users/1001",
        json={"name": "Ann", "xp": 40, "completed_lesson_ids": ["l1-1"]},
    )

    assert response.status_code == 200
    saved = response.json()
    assert saved["last_sync_timestamp"] > 0
    assert context.store.get(StorageKey.CURRENT_USER, None)["name"] == "Ann"

    await context.tasks.drain()

    assert remote.tables[USERS_TABLE][0].fields["TelegramId"] == "1001"
    reloaded = (await client.get("/api/v1/users/1001")).json()
    assert reloaded["remote_row_id"] == "rec0001"
    assert reloaded["completed_lesson_ids"] == ["l1-1"]


@pytest.mark.asyncio
async def test_save_user_rejects_negative_xp(client):
    response = await client.put("/api/v1/users/1001", json={"xp": -1})

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_save_user_notifies_other_contexts(client, hub):
    received = []
    hub.open("salespro_sync_channel").subscribe(received.append)

    await client.put("/api/v1/users/1001", json={"name": "Ann"})

    assert len(received) >= 1


@pytest.mark.asyncio
async def test_leaderboard_is_sorted_by_xp(client, remote):
    remote.seed(USERS_TABLE, "rec1", user_to_fields(UserRecord(external_id="1", name="Low", xp=5)))
    remote.seed(USERS_TABLE, "rec2", user_to_fields(UserRecord(external_id="2", name="High", xp=90)))

    response = await client.get("/api/v1/leaderboard")

    assert response.status_code == 200
    assert [u["name"] for u in response.json()] == ["High", "Low"]


# ── Content ──


@pytest.mark.asyncio
async def test_content_falls_back_to_shipped_defaults(client, remote):
    remote.offline = True

    response = await client.get("/api/v1/content")

    assert response.status_code == 200
    data = response.json()
    assert [m["id"] for m in data["modules"]] == ["m1", "m2", "m3"]
    assert [m["id"] for m in data["materials"]] == ["mat1", "mat2"]
    assert [s["id"] for s in data["streams"]] == ["s1"]


@pytest.mark.asyncio
async def test_put_collection_replaces_local_snapshot(client):
    response = await client.put(
        "/api/v1/content/events",
        json={"items": [{"id": "e9", "title": "Demo day", "duration_minutes": 90}]},
    )

    assert response.status_code == 200
    assert response.json()[0]["id"] == "e9"

    content = (await client.get("/api/v1/content")).json()
    assert [e["id"] for e in content["events"]] == ["e9"]


@pytest.mark.asyncio
async def test_put_unknown_collection_returns_404(client):
    response = await client.put("/api/v1/content/recipes", json={"items": []})

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_put_invalid_items_returns_422(client):
    response = await client.put(
        "/api/v1/content/materials",
        json={"items": [{"id": "x", "title": "X", "type": "SCROLL"}]},
    )

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_notifications_are_prepended(client):
    await client.post("/api/v1/notifications", json={"id": "n1", "title": "First"})
    response = await client.post("/api/v1/notifications", json={"id": "n2", "title": "Second"})

    assert response.status_code == 201
    listed = (await client.get("/api/v1/notifications")).json()
    assert [n["id"] for n in listed] == ["n2", "n1"]


# ── Global config ──


@pytest.mark.asyncio
async def test_config_round_trip(client, remote):
    remote.configured = False

    default = (await client.get("/api/v1/config")).json()
    assert default["feature_flags"]["chat_assistant"] is True

    response = await client.put("/api/v1/config", json={"feature_flags": {"chat_assistant": False}})
    assert response.status_code == 200

    updated = (await client.get("/api/v1/config")).json()
    assert updated["feature_flags"] == {"chat_assistant": False}


# ── Health ──


@pytest.mark.asyncio
async def test_health_reports_sync_context_state(client, context, remote):
    remote.configured = True

    response = await client.get("/api/v1/health")

    assert response.status_code == 200
    assert response.json()["sync"] == {
        "channel": context.bus.name,
        "remote_configured": True,
        "pending_pushes": 0,
    }


@pytest.mark.asyncio
async def test_health_shows_unconfigured_remote(client, remote):
    remote.configured = False

    response = await client.get("/api/v1/health")

    assert response.json()["sync"]["remote_configured"] is False
