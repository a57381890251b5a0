"""
Redis backend for feature gate values.

Layout:
    <registry_key>   SET   of registered feature keys
    <feature.key>    HASH  of gate fields (see ..encoding)

The client is owned by the caller; this adapter never connects or closes it.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

import redis.asyncio as redis
import structlog

from ..encoding import (
    SET_MEMBER_MARKER,
    decode_document,
    encode_set_field,
    resolve_gate_types,
    stringify,
    to_text,
)
from ..interfaces import Feature, FeatureAdapter, Gate, GateDataType, GateValues, Thing

logger = structlog.get_logger()

FEATURES_KEY = "flipper_features"


class RedisFeatureAdapter(FeatureAdapter):
    """
    Redis-backed feature storage.

    Usage:
        client = redis.from_url("redis://localhost:6379/0", decode_responses=True)
        adapter = RedisFeatureAdapter(client)

        stats = Feature("stats")
        await adapter.add(stats)
        await adapter.enable(stats, Gate("boolean", GateDataType.BOOLEAN), Thing(True))
        await adapter.get(stats)   # {"boolean": "true", "actors": set(), ...}
    """

    name = "redis"

    def __init__(
        self,
        client: redis.Redis,
        gates: Sequence[Gate] | None = None,
        registry_key: str = FEATURES_KEY,
    ):
        super().__init__(gates)
        self.client = client
        self.registry_key = registry_key

    # ============================================================
    # REGISTRY
    # ============================================================

    async def features(self) -> set[str]:
        members = await self.client.smembers(self.registry_key)
        return {to_text(m) for m in members}

    async def add(self, feature: Feature) -> bool:
        await self.client.sadd(self.registry_key, feature.key)
        logger.debug("Feature added", feature=feature.key)
        return True

    async def remove(self, feature: Feature) -> bool:
        # Registry entry and document go together or not at all
        async with self.client.pipeline(transaction=True) as pipe:
            pipe.srem(self.registry_key, feature.key)
            pipe.delete(feature.key)
            await pipe.execute()
        logger.debug("Feature removed", feature=feature.key)
        return True

    async def clear(self, feature: Feature) -> bool:
        await self.client.delete(feature.key)
        logger.debug("Feature cleared", feature=feature.key)
        return True

    # ============================================================
    # READS
    # ============================================================

    async def get(self, feature: Feature) -> GateValues:
        resolve_gate_types([feature])
        doc = await self.client.hgetall(feature.key)
        return decode_document(feature, doc)

    async def get_multi(self, features: Iterable[Feature]) -> dict[str, GateValues]:
        features = list(features)
        if not features:
            return {}
        resolve_gate_types(features)

        async with self.client.pipeline(transaction=False) as pipe:
            for feature in features:
                pipe.hgetall(feature.key)
            docs = await pipe.execute()

        # Replies come back in the order the commands were queued
        return {
            feature.key: decode_document(feature, doc)
            for feature, doc in zip(features, docs)
        }

    # ============================================================
    # WRITES
    # ============================================================

    async def enable(self, feature: Feature, gate: Gate, thing: Thing) -> bool:
        data_type = gate.resolved_type

        if data_type in (GateDataType.BOOLEAN, GateDataType.INTEGER):
            await self.client.hset(feature.key, gate.key, stringify(thing.value))
        elif data_type is GateDataType.SET:
            field = encode_set_field(gate, thing)
            await self.client.hset(feature.key, field, SET_MEMBER_MARKER)

        logger.debug(
            "Gate enabled",
            feature=feature.key,
            gate=gate.key,
            data_type=data_type.value,
        )
        return True

    async def disable(self, feature: Feature, gate: Gate, thing: Thing) -> bool:
        data_type = gate.resolved_type

        if data_type is GateDataType.BOOLEAN:
            # Turning the boolean gate off resets every gate of the feature
            await self.client.delete(feature.key)
        elif data_type is GateDataType.INTEGER:
            await self.client.hset(feature.key, gate.key, stringify(thing.value))
        elif data_type is GateDataType.SET:
            await self.client.hdel(feature.key, encode_set_field(gate, thing))

        logger.debug(
            "Gate disabled",
            feature=feature.key,
            gate=gate.key,
            data_type=data_type.value,
        )
        return True
