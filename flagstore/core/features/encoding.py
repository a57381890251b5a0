"""
Document field encoding.

A feature's gate values live in one flat mapping of field -> string:

    boolean / integer gates:  "<gate.key>"           -> "true", "25", ...
    set gates:                "<gate.key>/<member>"  -> "1" (one field per member)

For set fields only the field name carries meaning; the value is a marker.
Gate keys and members must not contain the delimiter, otherwise a field name
could not be split back into (gate key, member) unambiguously.
"""

from collections.abc import Iterable, Mapping
from typing import Any

from .errors import InvalidGateValueError
from .interfaces import Feature, Gate, GateDataType, GateValues, Thing

SET_MEMBER_DELIMITER = "/"
SET_MEMBER_MARKER = "1"


def stringify(value: Any) -> str:
    """Text form of a gate value. Booleans are lowercase."""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def to_text(value: str | bytes) -> str:
    """Normalize a backend reply (bytes unless decode_responses is on)."""
    if isinstance(value, bytes):
        return value.decode("utf-8")
    return value


def _check_part(part: str, what: str) -> str:
    if SET_MEMBER_DELIMITER in part:
        raise InvalidGateValueError(
            f"{what} {part!r} must not contain {SET_MEMBER_DELIMITER!r}"
        )
    return part


def encode_set_field(gate: Gate, thing: Thing) -> str:
    """Field name for one member of a set gate."""
    gate_key = _check_part(gate.key, "Set gate key")
    member = _check_part(stringify(thing.value), "Set member")
    return f"{gate_key}{SET_MEMBER_DELIMITER}{member}"


def decode_set_field(field: str) -> tuple[str, str]:
    """Split a set field name back into (gate key, member)."""
    gate_key, sep, member = field.partition(SET_MEMBER_DELIMITER)
    if not sep:
        raise InvalidGateValueError(f"{field!r} is not a set member field")
    return gate_key, member


def resolve_gate_types(features: Iterable[Feature]) -> None:
    """Validate every declared gate before any backend round trip."""
    for feature in features:
        for gate in feature.gates:
            if GateDataType.parse(gate.data_type) is GateDataType.SET:
                _check_part(gate.key, "Set gate key")


def set_members(fields: Iterable[str], gate: Gate) -> set[str]:
    """Members of a set gate, given all field names of a document."""
    members = set()
    for field in fields:
        gate_key, sep, member = field.partition(SET_MEMBER_DELIMITER)
        if sep and gate_key == gate.key:
            members.add(member)
    return members


def decode_document(feature: Feature, doc: Mapping[Any, Any] | None) -> GateValues:
    """
    Decode a stored document into gate values.

    An absent or empty document yields None for scalar gates and an empty
    set for set gates.
    """
    doc = {to_text(k): to_text(v) for k, v in (doc or {}).items()}
    result: GateValues = {}

    for gate in feature.gates:
        data_type = gate.resolved_type
        if data_type in (GateDataType.BOOLEAN, GateDataType.INTEGER):
            result[gate.key] = doc.get(gate.key)
        elif data_type is GateDataType.SET:
            result[gate.key] = set_members(doc.keys(), gate)

    return result
