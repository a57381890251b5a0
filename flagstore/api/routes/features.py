"""
Feature store API routes.

Thin layer over the adapter: each route maps to one adapter operation
and renders its result as JSON.
"""

from typing import Any

import structlog
from fastapi import APIRouter, Response, status
from pydantic import BaseModel, Field

from flagstore.api.errors import ApiError, FeatureNotFound, GateNotFound
from flagstore.core.features import (
    Adapter,
    Feature,
    FeatureAdapter,
    Gate,
    GateDataType,
    GateValues,
    Thing,
    encode_set_field,
)

logger = structlog.get_logger()

router = APIRouter()


# ============================================================
# SCHEMAS
# ============================================================

class FeatureCreate(BaseModel):
    """Register a feature."""
    name: str = Field(..., min_length=1, max_length=200)


class GateValue(BaseModel):
    """Value written into or cleared from a gate."""
    value: Any = None


# ============================================================
# HELPERS
# ============================================================

def feature_state(gates: GateValues) -> str:
    """
    Summarize gate values for display.

    "on" when the boolean gate is set, "conditional" when any other gate
    holds a value, otherwise "off".
    """
    if gates.get("boolean") == "true":
        return "on"
    for key, value in gates.items():
        if key != "boolean" and value not in (None, set(), "0"):
            return "conditional"
    return "off"


def render_feature(key: str, gates: GateValues) -> dict[str, Any]:
    return {
        "key": key,
        "state": feature_state(gates),
        "gates": {
            gate_key: sorted(value) if isinstance(value, set) else value
            for gate_key, value in gates.items()
        },
    }


async def registered_feature(adapter: FeatureAdapter, key: str) -> Feature:
    if key not in await adapter.features():
        raise FeatureNotFound(key)
    return adapter.build_feature(key)


def resolve_gate(feature: Feature, gate_key: str) -> Gate:
    gate = feature.gate(gate_key)
    if gate is None:
        raise GateNotFound(feature.key, gate_key)
    return gate


def thing_for(gate: Gate, body: GateValue | None, default: Any) -> Thing:
    # Validate type and value up front so a rejected request writes nothing
    data_type = gate.resolved_type
    value = body.value if body is not None else None
    if value is None:
        if data_type is not GateDataType.BOOLEAN:
            raise ApiError(
                status.HTTP_422_UNPROCESSABLE_ENTITY,
                "value_required",
                f"Gate {gate.key!r} requires a value",
            )
        value = default

    thing = Thing(value)
    if data_type is GateDataType.SET:
        encode_set_field(gate, thing)
    return thing


# ============================================================
# ENDPOINTS
# ============================================================

@router.get("")
async def list_features(adapter: Adapter) -> dict[str, Any]:
    """All registered features with their gate values."""
    results = await adapter.get_all()
    return {
        "features": [render_feature(key, gates) for key, gates in sorted(results.items())],
    }


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_feature(data: FeatureCreate, adapter: Adapter) -> dict[str, Any]:
    """Register a feature. Registering twice is harmless."""
    feature = adapter.build_feature(data.name)
    await adapter.add(feature)
    logger.info("Feature registered", feature=feature.key)
    return render_feature(feature.key, await adapter.get(feature))


@router.get("/{key}")
async def get_feature(key: str, adapter: Adapter) -> dict[str, Any]:
    feature = await registered_feature(adapter, key)
    return render_feature(feature.key, await adapter.get(feature))


@router.delete("/{key}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_feature(key: str, adapter: Adapter) -> Response:
    """Unregister a feature and drop all of its gate values."""
    await adapter.remove(adapter.build_feature(key))
    logger.info("Feature removed", feature=key)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/{key}/clear", status_code=status.HTTP_204_NO_CONTENT)
async def clear_feature(key: str, adapter: Adapter) -> Response:
    """Drop gate values but keep the feature registered."""
    feature = await registered_feature(adapter, key)
    await adapter.clear(feature)
    logger.info("Feature cleared", feature=key)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{key}/{gate_key}")
async def enable_gate(
    key: str,
    gate_key: str,
    adapter: Adapter,
    body: GateValue | None = None,
) -> dict[str, Any]:
    """Enable a gate, registering the feature first if needed."""
    feature = adapter.build_feature(key)
    gate = resolve_gate(feature, gate_key)
    thing = thing_for(gate, body, default=True)

    await adapter.add(feature)
    await adapter.enable(feature, gate, thing)
    logger.info("Gate enabled", feature=key, gate=gate_key)
    return render_feature(feature.key, await adapter.get(feature))


@router.delete("/{key}/{gate_key}")
async def disable_gate(
    key: str,
    gate_key: str,
    adapter: Adapter,
    body: GateValue | None = None,
) -> dict[str, Any]:
    """Disable a gate. Disabling the boolean gate clears every gate."""
    feature = await registered_feature(adapter, key)
    gate = resolve_gate(feature, gate_key)
    thing = thing_for(gate, body, default=False)

    await adapter.disable(feature, gate, thing)
    logger.info("Gate disabled", feature=key, gate=gate_key)
    return render_feature(feature.key, await adapter.get(feature))
