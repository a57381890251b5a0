"""
Tests for feature API endpoints.
"""

import pytest
from httpx import AsyncClient, ASGITransport
from redis.exceptions import ConnectionError as RedisConnectionError

from flagstore.main import app
from flagstore.core.features import (
    DEFAULT_GATES,
    Feature,
    FeatureAdapter,
    Gate,
    MemoryFeatureAdapter,
    RedisFeatureAdapter,
    Thing,
    get_feature_adapter,
)


async def request_with(adapter: FeatureAdapter, method: str, url: str, **kwargs):
    """Send one request against the app using a specific adapter."""
    app.dependency_overrides[get_feature_adapter] = lambda: adapter
    try:
        async with AsyncClient(
            transport=ASGITransport(app=app),
            base_url="http://test",
        ) as client:
            return await client.request(method, url, **kwargs)
    finally:
        app.dependency_overrides.clear()


@pytest.mark.asyncio
async def test_stats_scenario(client: AsyncClient, adapter: FeatureAdapter):
    """Enable then disable the boolean gate of a feature."""
    response = await client.post("/api/features", json={"name": "stats"})
    assert response.status_code == 201
    assert response.json()["state"] == "off"

    response = await client.post("/api/features/stats/boolean")
    assert response.status_code == 200
    data = response.json()
    assert data["gates"]["boolean"] == "true"
    assert data["state"] == "on"

    response = await client.delete("/api/features/stats/boolean")
    assert response.status_code == 200
    data = response.json()
    assert data["gates"]["boolean"] is None
    assert data["state"] == "off"

    assert (await adapter.get(Feature("stats")))["boolean"] is None


@pytest.mark.asyncio
async def test_list_features(client: AsyncClient, adapter: FeatureAdapter):
    await adapter.add(Feature("search"))
    await adapter.add(Feature("stats"))
    await adapter.enable(Feature("search"), Gate("actors", "set"), Thing("User;2"))
    await adapter.enable(Feature("search"), Gate("actors", "set"), Thing("User;1"))

    response = await client.get("/api/features")

    assert response.status_code == 200
    features = response.json()["features"]
    assert [f["key"] for f in features] == ["search", "stats"]
    assert features[0]["gates"]["actors"] == ["User;1", "User;2"]
    assert features[0]["state"] == "conditional"
    assert features[1]["state"] == "off"


@pytest.mark.asyncio
async def test_get_feature(client: AsyncClient, adapter: FeatureAdapter):
    await adapter.add(Feature("stats"))
    await adapter.enable(Feature("stats"), Gate("percentage_of_time", "integer"), Thing(20))

    response = await client.get("/api/features/stats")

    assert response.status_code == 200
    data = response.json()
    assert data["key"] == "stats"
    assert data["gates"] == {
        "boolean": None,
        "actors": [],
        "percentage_of_actors": None,
        "percentage_of_time": "20",
        "groups": [],
    }


@pytest.mark.asyncio
async def test_get_unknown_feature(client: AsyncClient):
    response = await client.get("/api/features/nope")

    assert response.status_code == 404
    assert response.json()["code"] == "feature_not_found"


@pytest.mark.asyncio
async def test_enable_registers_feature(client: AsyncClient, adapter: FeatureAdapter):
    response = await client.post("/api/features/search/groups", json={"value": "admins"})

    assert response.status_code == 200
    assert response.json()["gates"]["groups"] == ["admins"]
    assert await adapter.features() == {"search"}


@pytest.mark.asyncio
async def test_disable_set_member(client: AsyncClient, adapter: FeatureAdapter):
    search = Feature("search")
    await adapter.add(search)
    await adapter.enable(search, Gate("actors", "set"), Thing("a"))
    await adapter.enable(search, Gate("actors", "set"), Thing("b"))

    response = await client.request(
        "DELETE",
        "/api/features/search/actors",
        json={"value": "a"},
    )

    assert response.status_code == 200
    assert response.json()["gates"]["actors"] == ["b"]


@pytest.mark.asyncio
async def test_unknown_gate(client: AsyncClient):
    response = await client.post("/api/features/search/nope", json={"value": 1})

    assert response.status_code == 404
    assert response.json()["code"] == "gate_not_found"


@pytest.mark.asyncio
async def test_set_gate_requires_value(client: AsyncClient, adapter: FeatureAdapter):
    response = await client.post("/api/features/search/actors")

    assert response.status_code == 422
    assert response.json()["code"] == "value_required"
    assert await adapter.features() == set()


@pytest.mark.asyncio
async def test_member_with_delimiter_rejected(client: AsyncClient, adapter: FeatureAdapter):
    response = await client.post(
        "/api/features/search/actors",
        json={"value": "team/admins"},
    )

    assert response.status_code == 422
    assert response.json()["code"] == "invalid_gate_value"
    assert (await adapter.get(Feature("search")))["actors"] == set()
    assert await adapter.features() == set()


@pytest.mark.asyncio
async def test_remove_feature(client: AsyncClient, adapter: FeatureAdapter):
    await adapter.add(Feature("stats"))
    await adapter.enable(Feature("stats"), Gate("boolean", "boolean"), Thing(True))

    response = await client.delete("/api/features/stats")
    assert response.status_code == 204

    response = await client.get("/api/features/stats")
    assert response.status_code == 404
    assert (await adapter.get(Feature("stats")))["boolean"] is None


@pytest.mark.asyncio
async def test_clear_feature(client: AsyncClient, adapter: FeatureAdapter):
    await adapter.add(Feature("stats"))
    await adapter.enable(Feature("stats"), Gate("groups", "set"), Thing("staff"))

    response = await client.delete("/api/features/stats/clear")
    assert response.status_code == 204

    response = await client.get("/api/features/stats")
    assert response.status_code == 200
    assert response.json()["gates"]["groups"] == []


@pytest.mark.asyncio
async def test_request_id_is_echoed(client: AsyncClient):
    response = await client.get("/api/features", headers={"X-Request-ID": "req-123"})
    assert response.headers["X-Request-ID"] == "req-123"


@pytest.mark.asyncio
async def test_error_body_carries_request_id(client: AsyncClient):
    response = await client.get("/api/features/nope", headers={"X-Request-ID": "req-456"})
    assert response.json()["request_id"] == "req-456"


@pytest.mark.asyncio
async def test_health(client: AsyncClient, adapter: FeatureAdapter):
    response = await client.get("/health")

    assert response.status_code == 200
    data = response.json()
    assert data["components"][adapter.name]["status"] in ("healthy", "degraded")


@pytest.mark.asyncio
async def test_unsupported_data_type_response():
    adapter = MemoryFeatureAdapter(gates=DEFAULT_GATES + (Gate("rollout", "percentage"),))

    response = await request_with(
        adapter, "POST", "/api/features/stats/rollout", json={"value": 10}
    )

    assert response.status_code == 422
    assert response.json()["code"] == "unsupported_data_type"
    assert await adapter.features() == set()


@pytest.mark.asyncio
async def test_backend_unavailable(monkeypatch, redis_client):
    async def smembers(*args, **kwargs):
        raise RedisConnectionError("connection refused")

    monkeypatch.setattr(redis_client, "smembers", smembers)
    adapter = RedisFeatureAdapter(redis_client)

    response = await request_with(adapter, "GET", "/api/features")
    assert response.status_code == 503
    assert response.json()["code"] == "backend_unavailable"

    response = await request_with(adapter, "GET", "/health")
    assert response.status_code == 503
    assert response.json()["status"] == "unhealthy"
