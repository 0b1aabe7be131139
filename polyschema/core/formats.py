"""Schema nodes for leaf types.

The table is fixed: downstream consumers key off the ``format`` values, so it
is exposed read-only and looked up along each type's MRO.
"""

from __future__ import annotations
import datetime as dt
from dataclasses import dataclass
from decimal import Decimal
from ipaddress import IPv4Address, IPv6Address
from pathlib import PurePath
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple
from uuid import UUID

from pydantic import AnyUrl


@dataclass(frozen=True)
class Instant:
    """A point on the time-line, as seconds and nanoseconds since the epoch."""

    seconds: int
    nanos: int = 0

    @classmethod
    def from_datetime(cls, value: dt.datetime) -> "Instant":
        if value.tzinfo is None:
            value = value.replace(tzinfo=dt.timezone.utc)
        delta = value - dt.datetime(1970, 1, 1, tzinfo=dt.timezone.utc)
        seconds = delta.days * 86_400 + delta.seconds
        return cls(seconds=seconds, nanos=delta.microseconds * 1_000)


LEAF_FORMATS: Mapping[type, Mapping[str, Any]] = MappingProxyType(
    {
        str: MappingProxyType({"type": "string"}),
        bytes: MappingProxyType({"type": "string"}),
        bool: MappingProxyType({"type": "boolean"}),
        int: MappingProxyType({"type": "integer"}),
        float: MappingProxyType({"type": "number"}),
        Decimal: MappingProxyType({"type": "number"}),
        UUID: MappingProxyType({"type": "string", "format": "uuid"}),
        dt.datetime: MappingProxyType({"type": "string", "format": "date-time"}),
        dt.date: MappingProxyType({"type": "string", "format": "date"}),
        dt.time: MappingProxyType({"type": "string", "format": "time"}),
        dt.timedelta: MappingProxyType({"type": "string", "format": "duration"}),
        AnyUrl: MappingProxyType({"type": "string", "format": "uri"}),
        IPv4Address: MappingProxyType({"type": "string", "format": "ipv4"}),
        IPv6Address: MappingProxyType({"type": "string", "format": "ipv6"}),
        PurePath: MappingProxyType({"type": "string"}),
    }
)

NUMERIC_DURATION: Mapping[str, Any] = MappingProxyType({"type": "number"})

# ``ser_json_timedelta`` settings that write durations as seconds
NUMERIC_DURATION_MODES = frozenset({"float", "seconds_float"})

# Opaque types written as a nested object: definition name and schema.
OBJECT_FORMATS: Mapping[type, Tuple[str, Mapping[str, Any]]] = MappingProxyType(
    {
        Instant: (
            "Instant",
            MappingProxyType(
                {
                    "type": "object",
                    "additionalProperties": False,
                    "properties": {
                        "nanos": {"type": "integer"},
                        "seconds": {"type": "integer"},
                    },
                    "required": ["nanos", "seconds"],
                }
            ),
        ),
    }
)


def _lookup(table: Mapping[type, Any], type_: type) -> Any:
    for klass in getattr(type_, "__mro__", (type_,)):
        if klass in table:
            return table[klass]
    return None


def is_leaf(type_: Any) -> bool:
    return isinstance(type_, type) and (
        _lookup(LEAF_FORMATS, type_) is not None or _lookup(OBJECT_FORMATS, type_) is not None
    )


def leaf_schema(type_: type, *, numeric_durations: bool = False) -> Optional[Dict[str, Any]]:
    """A fresh schema node for a simple leaf type, or None if not in the table."""
    if numeric_durations and issubclass(type_, dt.timedelta):
        return dict(NUMERIC_DURATION)
    node = _lookup(LEAF_FORMATS, type_)
    return dict(node) if node is not None else None


def object_format(type_: type) -> Optional[Tuple[str, Dict[str, Any]]]:
    """Definition name and a fresh deep copy of the schema for an opaque object type."""
    found = _lookup(OBJECT_FORMATS, type_)
    if found is None:
        return None
    name, schema = found
    return name, _copy(schema)


def _copy(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {k: _copy(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_copy(v) for v in value]
    return value
