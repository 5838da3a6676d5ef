"""
Primitive Records
=================
Typed, immutable view of one element of the ``primitives`` array.

Why is this file needed?
------------------------
1. Presence: JSON values are checked for presence and type explicitly, so an
   all-zero color or position is honoured instead of being mistaken for a
   missing field.
2. Isolation: A malformed record raises RecordError here and is skipped by
   the builder; it never aborts the rest of the document.

Classes:
    PrimitiveType: The recognised ``type`` values.
    PrimitiveRecord: One parsed record with common defaults resolved.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Optional

from primitiveviewer import config
from primitiveviewer.model.geometry_primitives import Vector


class RecordError(ValueError):
    """A primitive record is malformed or describes degenerate geometry."""


class PrimitiveType(str, Enum):
    POINT = "point"
    LINE = "line"
    POLYLINE = "polyline"
    CIRCLE = "circle"
    BOX = "box"
    SPHERE = "sphere"
    PYRAMID = "pyramid"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value: Any) -> PrimitiveType:
        if isinstance(value, str):
            try:
                return cls(value)
            except ValueError:
                pass
        return cls.UNKNOWN


# Type-specific keys each type reads; anything else in the record is ignored
TYPE_FIELDS: dict[PrimitiveType, frozenset[str]] = {
    PrimitiveType.POINT: frozenset(),
    PrimitiveType.LINE: frozenset({"points"}),
    PrimitiveType.POLYLINE: frozenset({"points"}),
    PrimitiveType.CIRCLE: frozenset({"radius", "normal"}),
    PrimitiveType.BOX: frozenset({"size"}),
    PrimitiveType.SPHERE: frozenset({"radius"}),
    PrimitiveType.PYRAMID: frozenset({"baseRadius", "apex", "baseCenter"}),
    PrimitiveType.UNKNOWN: frozenset(),
}


# JSON booleans are ints in Python; they are never valid numbers here
def _is_number(value: Any) -> bool:
    if not isinstance(value, (int, float)) or isinstance(value, bool):
        return False
    try:
        return math.isfinite(value)
    except OverflowError:
        # Integer literals too large for a float
        return False


def _present(data: Mapping[str, Any], key: str) -> bool:
    return data.get(key) is not None


def _read_vector(
    data: Mapping[str, Any],
    key: str,
    default: Optional[Vector] = None
) -> Optional[Vector]:
    if not _present(data, key):
        return default
    value = data[key]
    if not isinstance(value, (list, tuple)) or len(value) != 3 or not all(_is_number(v) for v in value):
        raise RecordError(f"'{key}' must be an array of 3 numbers, got {value!r}")
    return Vector.from_sequence(value)


def _read_scalar(data: Mapping[str, Any], key: str) -> Optional[float]:
    if not _present(data, key):
        return None
    value = data[key]
    if not _is_number(value):
        raise RecordError(f"'{key}' must be a number, got {value!r}")
    return float(value)


def _read_points(data: Mapping[str, Any], key: str) -> Optional[tuple[Vector, ...]]:
    if not _present(data, key):
        return None
    value = data[key]
    if not isinstance(value, (list, tuple)):
        raise RecordError(f"'{key}' must be an array of points, got {value!r}")
    points = []
    for i, p in enumerate(value):
        if not isinstance(p, (list, tuple)) or len(p) != 3 or not all(_is_number(v) for v in p):
            raise RecordError(f"'{key}[{i}]' must be an array of 3 numbers, got {p!r}")
        points.append(Vector.from_sequence(p))
    return tuple(points)


@dataclass(frozen=True)
class PrimitiveRecord:
    """
    One shape instruction.

    Common fields (position, rotation, color) are always resolved to their
    defaults. Type-specific fields stay ``None`` when absent; the builder owns
    their defaults because some depend on other fields (the pyramid apex
    defaults relative to the position).
    """
    type: PrimitiveType
    raw_type: Optional[str] = None

    position: Vector = Vector(*config.DEFAULT_POSITION)
    rotation: Vector = Vector(*config.DEFAULT_ROTATION)  # degrees
    color: Vector = Vector(*config.DEFAULT_COLOR)

    size: Optional[Vector] = None
    radius: Optional[float] = None
    base_radius: Optional[float] = None
    points: Optional[tuple[Vector, ...]] = None
    normal: Optional[Vector] = None
    apex: Optional[Vector] = None
    base_center: Optional[Vector] = None

    @property
    def type_name(self) -> str:
        """The type as written in the document (for diagnostics)."""
        if self.raw_type is not None:
            return self.raw_type
        return self.type.value

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> PrimitiveRecord:
        """
        Parse one JSON object.

        ``center`` is accepted as an alias of ``position`` when ``position``
        is absent.

        Raises:
            RecordError: If the element is not an object or a present field
                used by its type has the wrong shape. Fields the type does
                not use are ignored.
        """
        if not isinstance(data, Mapping):
            raise RecordError(f"Primitive must be a JSON object, got {type(data).__name__}")

        raw_type = data.get("type")
        primitive_type = PrimitiveType.parse(raw_type)
        fields = TYPE_FIELDS[primitive_type]

        def read(key, reader):
            return reader(data, key) if key in fields else None

        position = _read_vector(data, "position")
        if position is None:
            position = _read_vector(data, "center", default=Vector(*config.DEFAULT_POSITION))

        return cls(
            type=primitive_type,
            raw_type=raw_type if isinstance(raw_type, str) else None,
            position=position,
            rotation=_read_vector(data, "rotation", default=Vector(*config.DEFAULT_ROTATION)),
            color=_read_vector(data, "color", default=Vector(*config.DEFAULT_COLOR)),
            size=read("size", _read_vector),
            radius=read("radius", _read_scalar),
            base_radius=read("baseRadius", _read_scalar),
            points=read("points", _read_points),
            normal=read("normal", _read_vector),
            apex=read("apex", _read_vector),
            base_center=read("baseCenter", _read_vector),
        )
