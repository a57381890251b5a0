"""
FastAPI dependencies for the feature store.

The Redis client is created and closed by the application lifespan; adapters
only borrow it.

Usage:
    from flagstore.core.features import Adapter

    @router.get("/stats")
    async def stats(adapter: Adapter):
        return await adapter.get(Feature("stats"))
"""

from typing import Annotated

import redis.asyncio as redis
from fastapi import Depends, Request

from flagstore.core.config import RedisSettings, Settings

from .interfaces import FeatureAdapter
from .backends.memory import MemoryFeatureAdapter
from .backends.redis import RedisFeatureAdapter


# ============================================================
# ADAPTER FACTORY
# ============================================================

# In-memory adapter singleton (for development)
_memory_adapter: MemoryFeatureAdapter | None = None


def get_memory_adapter() -> MemoryFeatureAdapter:
    """Get or create memory adapter singleton."""
    global _memory_adapter
    if _memory_adapter is None:
        _memory_adapter = MemoryFeatureAdapter()
    return _memory_adapter


def create_redis_client(config: RedisSettings) -> redis.Redis:
    """Build a pooled Redis client from settings. The caller closes it."""
    return redis.from_url(
        str(config.url),
        max_connections=config.max_connections,
        decode_responses=config.decode_responses,
    )


def build_feature_adapter(
    config: Settings,
    client: redis.Redis | None = None,
) -> FeatureAdapter:
    """
    Get feature adapter based on configuration.

    Uses FEATURE_BACKEND setting:
    - "redis": Redis (default, production)
    - "memory": In-memory (development/testing)
    """
    if config.features.backend == "memory":
        return get_memory_adapter()

    if client is None:
        raise RuntimeError("Redis feature adapter requires a Redis client")
    return RedisFeatureAdapter(client, registry_key=config.features.registry_key)


# ============================================================
# REQUEST DEPENDENCY
# ============================================================

async def get_feature_adapter(request: Request) -> FeatureAdapter:
    """Adapter attached to the application at startup."""
    adapter = getattr(request.app.state, "feature_adapter", None)
    if adapter is None:
        raise RuntimeError("Feature adapter not configured. Is the app lifespan running?")
    return adapter


# Type alias for cleaner injection
Adapter = Annotated[FeatureAdapter, Depends(get_feature_adapter)]
