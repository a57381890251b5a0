"""
Feature Store.

Persists feature toggles and their gate values (boolean, integer, set)
in Redis hashes, with a registry set of known feature keys.

Usage:
    import redis.asyncio as redis
    from flagstore.core.features import (
        Feature, Gate, GateDataType, Thing, RedisFeatureAdapter,
    )

    client = redis.from_url("redis://localhost:6379/0", decode_responses=True)
    adapter = RedisFeatureAdapter(client)

    search = Feature("search")
    actors = Gate("actors", GateDataType.SET)

    await adapter.add(search)
    await adapter.enable(search, actors, Thing("User;42"))
    await adapter.get(search)           # {"actors": {"User;42"}, "boolean": None, ...}
    await adapter.get_all()             # {"search": {...}} in one round trip
"""

from .errors import (
    FeatureStoreError,
    InvalidGateValueError,
    UnsupportedDataTypeError,
)

from .interfaces import (
    DEFAULT_GATES,
    Feature,
    FeatureAdapter,
    Gate,
    GateDataType,
    GateValues,
    Thing,
)

from .encoding import (
    SET_MEMBER_DELIMITER,
    decode_document,
    decode_set_field,
    encode_set_field,
    stringify,
)

from .backends import (
    FEATURES_KEY,
    MemoryFeatureAdapter,
    RedisFeatureAdapter,
)

from .dependencies import (
    Adapter,
    build_feature_adapter,
    create_redis_client,
    get_feature_adapter,
)

__all__ = [
    # Errors
    "FeatureStoreError",
    "InvalidGateValueError",
    "UnsupportedDataTypeError",
    # Model & contract
    "DEFAULT_GATES",
    "Feature",
    "FeatureAdapter",
    "Gate",
    "GateDataType",
    "GateValues",
    "Thing",
    # Encoding
    "SET_MEMBER_DELIMITER",
    "decode_document",
    "decode_set_field",
    "encode_set_field",
    "stringify",
    # Adapters
    "FEATURES_KEY",
    "MemoryFeatureAdapter",
    "RedisFeatureAdapter",
    # Dependencies
    "Adapter",
    "build_feature_adapter",
    "create_redis_client",
    "get_feature_adapter",
]
