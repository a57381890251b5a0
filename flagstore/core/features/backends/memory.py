"""
In-memory backend for feature gate values.

For development and testing. Data is lost on restart.
Follows the same document encoding as the Redis adapter, so both behave
identically under the contract tests.
"""

from collections.abc import Iterable, Sequence

from ..encoding import (
    SET_MEMBER_MARKER,
    decode_document,
    encode_set_field,
    resolve_gate_types,
    stringify,
)
from ..interfaces import Feature, FeatureAdapter, Gate, GateDataType, GateValues, Thing


class MemoryFeatureAdapter(FeatureAdapter):
    """
    In-memory feature storage.

    Useful for:
    - Development without Redis
    - Unit testing
    """

    name = "memory"

    def __init__(self, gates: Sequence[Gate] | None = None):
        super().__init__(gates)
        self._registry: set[str] = set()
        self._documents: dict[str, dict[str, str]] = {}

    # ============================================================
    # REGISTRY
    # ============================================================

    async def features(self) -> set[str]:
        return set(self._registry)

    async def add(self, feature: Feature) -> bool:
        self._registry.add(feature.key)
        return True

    async def remove(self, feature: Feature) -> bool:
        self._registry.discard(feature.key)
        self._documents.pop(feature.key, None)
        return True

    async def clear(self, feature: Feature) -> bool:
        self._documents.pop(feature.key, None)
        return True

    # ============================================================
    # READS
    # ============================================================

    async def get(self, feature: Feature) -> GateValues:
        resolve_gate_types([feature])
        return decode_document(feature, self._documents.get(feature.key))

    async def get_multi(self, features: Iterable[Feature]) -> dict[str, GateValues]:
        features = list(features)
        resolve_gate_types(features)
        return {
            feature.key: decode_document(feature, self._documents.get(feature.key))
            for feature in features
        }

    # ============================================================
    # WRITES
    # ============================================================

    async def enable(self, feature: Feature, gate: Gate, thing: Thing) -> bool:
        data_type = gate.resolved_type

        if data_type in (GateDataType.BOOLEAN, GateDataType.INTEGER):
            field, value = gate.key, stringify(thing.value)
        elif data_type is GateDataType.SET:
            field, value = encode_set_field(gate, thing), SET_MEMBER_MARKER

        self._documents.setdefault(feature.key, {})[field] = value
        return True

    async def disable(self, feature: Feature, gate: Gate, thing: Thing) -> bool:
        data_type = gate.resolved_type

        if data_type is GateDataType.BOOLEAN:
            self._documents.pop(feature.key, None)
        elif data_type is GateDataType.INTEGER:
            self._documents.setdefault(feature.key, {})[gate.key] = stringify(thing.value)
        elif data_type is GateDataType.SET:
            field = encode_set_field(gate, thing)
            doc = self._documents.get(feature.key)
            if doc is not None:
                doc.pop(field, None)
                if not doc:
                    del self._documents[feature.key]

        return True

    # ============================================================
    # TEST HELPERS
    # ============================================================

    def reset(self) -> None:
        """Drop all features and documents. Useful for testing."""
        self._registry.clear()
        self._documents.clear()
