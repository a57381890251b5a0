"""
Feature Store Interfaces - Core abstractions.

These define the domain model and the contract every storage adapter
implements. Adapters only store and return raw gate values; deciding whether
a feature is on for a given actor happens elsewhere.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .errors import UnsupportedDataTypeError


class GateDataType(str, Enum):
    """Storage shape of a gate value."""

    BOOLEAN = "boolean"
    INTEGER = "integer"
    SET = "set"

    @classmethod
    def parse(cls, value: "GateDataType | str") -> "GateDataType":
        """Resolve a data type, raising UnsupportedDataTypeError for unknown tags."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise UnsupportedDataTypeError(value) from None


@dataclass(frozen=True)
class Gate:
    """
    A typed sub-condition of a feature.

    Attributes:
        key: Field name scoped to the feature (e.g., "boolean", "actors")
        data_type: GateDataType, or a raw tag that will be validated on use
    """
    key: str
    data_type: GateDataType | str

    @property
    def resolved_type(self) -> GateDataType:
        return GateDataType.parse(self.data_type)


@dataclass(frozen=True)
class Thing:
    """Opaque value written into a gate (actor id, percentage, flag value)."""
    value: Any


DEFAULT_GATES: tuple[Gate, ...] = (
    Gate("boolean", GateDataType.BOOLEAN),
    Gate("actors", GateDataType.SET),
    Gate("percentage_of_actors", GateDataType.INTEGER),
    Gate("percentage_of_time", GateDataType.INTEGER),
    Gate("groups", GateDataType.SET),
)


@dataclass
class Feature:
    """
    Feature toggle identity plus its gate definitions.

    The gate list is configuration, not storage: only gate values
    are persisted.
    """
    key: str
    gates: Sequence[Gate] = field(default_factory=lambda: DEFAULT_GATES)

    def gate(self, key: str) -> Gate | None:
        """Find a declared gate by key."""
        for gate in self.gates:
            if gate.key == key:
                return gate
        return None


# gate key -> "true"/"42", set of members, or None when nothing is stored
GateValues = dict[str, str | set[str] | None]


class FeatureAdapter(ABC):
    """
    Abstract storage adapter for features and their gate values.

    Implementations:
    - RedisFeatureAdapter: Redis hashes + registry set
    - MemoryFeatureAdapter: In-memory (dev/testing)
    """

    name: str

    def __init__(self, gates: Sequence[Gate] | None = None):
        self.gates: tuple[Gate, ...] = tuple(gates) if gates is not None else DEFAULT_GATES

    def build_feature(self, key: str) -> Feature:
        """Feature for a registry key, using this adapter's gate list."""
        return Feature(key, self.gates)

    @abstractmethod
    async def features(self) -> set[str]:
        """All registered feature keys."""
        pass

    @abstractmethod
    async def add(self, feature: Feature) -> bool:
        """Register a feature. Does not touch its gate values."""
        pass

    @abstractmethod
    async def remove(self, feature: Feature) -> bool:
        """Unregister a feature and delete all of its gate values atomically."""
        pass

    @abstractmethod
    async def clear(self, feature: Feature) -> bool:
        """Delete all gate values, leaving the feature registered."""
        pass

    @abstractmethod
    async def get(self, feature: Feature) -> GateValues:
        """Gate values for every gate the feature declares."""
        pass

    @abstractmethod
    async def get_multi(self, features: Iterable[Feature]) -> dict[str, GateValues]:
        """Gate values for many features, keyed by feature key, in one batch."""
        pass

    async def get_all(self) -> dict[str, GateValues]:
        """Gate values for every registered feature."""
        keys = await self.features()
        return await self.get_multi([self.build_feature(key) for key in sorted(keys)])

    @abstractmethod
    async def enable(self, feature: Feature, gate: Gate, thing: Thing) -> bool:
        """Write a gate value."""
        pass

    @abstractmethod
    async def disable(self, feature: Feature, gate: Gate, thing: Thing) -> bool:
        """Clear a gate value. Semantics depend on the gate's data type."""
        pass
