"""
Pytest fixtures for testing.

Provides:
- In-process fake Redis (fakeredis) per test
- Redis and memory adapters, plus a parametrized `adapter` running
  contract tests against both
- Test client with the adapter dependency overridden
"""

from typing import AsyncGenerator

import fakeredis
import fakeredis.aioredis
import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

from flagstore.main import app
from flagstore.core.features import (
    FeatureAdapter,
    Gate,
    GateDataType,
    MemoryFeatureAdapter,
    RedisFeatureAdapter,
    get_feature_adapter,
)


async def _close(client) -> None:
    if hasattr(client, "aclose"):
        await client.aclose(close_connection_pool=True)
    else:
        await client.close()


@pytest_asyncio.fixture
async def redis_client():
    """Fake Redis with decoded (str) replies and its own server state."""
    client = fakeredis.aioredis.FakeRedis(
        server=fakeredis.FakeServer(),
        decode_responses=True,
    )
    try:
        yield client
    finally:
        await _close(client)


@pytest_asyncio.fixture
async def raw_redis_client():
    """Fake Redis returning bytes, as a client without decode_responses would."""
    client = fakeredis.aioredis.FakeRedis(server=fakeredis.FakeServer())
    try:
        yield client
    finally:
        await _close(client)


@pytest_asyncio.fixture
async def redis_adapter(redis_client) -> RedisFeatureAdapter:
    return RedisFeatureAdapter(redis_client)


@pytest.fixture
def memory_adapter() -> MemoryFeatureAdapter:
    return MemoryFeatureAdapter()


@pytest_asyncio.fixture(params=["redis", "memory"])
async def adapter(request, redis_client) -> FeatureAdapter:
    """Every adapter implementation, for contract tests."""
    if request.param == "redis":
        return RedisFeatureAdapter(redis_client)
    return MemoryFeatureAdapter()


@pytest_asyncio.fixture
async def client(adapter: FeatureAdapter) -> AsyncGenerator[AsyncClient, None]:
    """
    Test client with the feature adapter dependency overridden.
    """
    app.dependency_overrides[get_feature_adapter] = lambda: adapter

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client

    app.dependency_overrides.clear()


# ============ Gate Fixtures ============


@pytest.fixture
def boolean_gate() -> Gate:
    return Gate("boolean", GateDataType.BOOLEAN)


@pytest.fixture
def integer_gate() -> Gate:
    return Gate("percentage_of_actors", GateDataType.INTEGER)


@pytest.fixture
def set_gate() -> Gate:
    return Gate("actors", GateDataType.SET)
