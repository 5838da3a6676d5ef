"""
Primitive Builder
=================
Maps one primitive record to one positioned, oriented, colored object.

Why is this file needed?
------------------------
1. Geometry: It creates the local-frame shape (PyVista PolyData) for each
   primitive type.
2. Transform: It resolves the object's position and rotation, including the
   shape-intrinsic base rotation of circles and pyramids.
3. Isolation: Failures are returned as ``Skipped`` outcomes, never raised,
   so one bad record cannot abort a load.

Note: This module must not import PySide6. Rendering is the view's job.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Mapping, NamedTuple, Optional, Union, TYPE_CHECKING

import numpy as np
import pyvista as pv

from primitiveviewer import config
from primitiveviewer.model.geometry_primitives import Vector
from primitiveviewer.model.records import PrimitiveRecord, PrimitiveType, RecordError
from primitiveviewer.model import transforms

if TYPE_CHECKING:
    import numpy.typing as npt

logger = logging.getLogger(__name__)

UP = Vector(*config.UP)


class ObjectKind(str, Enum):
    MESH = "mesh"
    POLYLINE = "polyline"


@dataclass(frozen=True, eq=False)
class BuiltObject:
    """
    A renderable shape plus its local-to-world transform.

    ``world = position + rotation @ local`` where
    ``rotation = declared_rotation @ base_rotation``.
    """
    type: PrimitiveType
    kind: ObjectKind
    geometry: pv.PolyData
    color: tuple[float, float, float]
    position: npt.NDArray[np.float64]
    rotation: npt.NDArray[np.float64]
    base_rotation: npt.NDArray[np.float64] = field(default_factory=lambda: np.eye(3))
    lit: bool = True

    @property
    def matrix(self) -> npt.NDArray[np.float64]:
        """4x4 local-to-world matrix."""
        return transforms.compose(self.position, self.rotation)

    def world_points(self) -> npt.NDArray[np.float64]:
        local = np.asarray(self.geometry.points, dtype=np.float64)
        return local @ self.rotation.T + self.position

    def world_geometry(self) -> pv.PolyData:
        """A transformed deep copy; `geometry` itself stays in the local frame."""
        world = self.geometry.copy(deep=True)
        world.points = self.world_points()
        return world

    def bounds(self) -> tuple[npt.NDArray[np.float64], npt.NDArray[np.float64]]:
        pts = self.world_points()
        return pts.min(axis=0), pts.max(axis=0)


@dataclass(frozen=True)
class Built:
    index: int
    obj: BuiltObject


@dataclass(frozen=True)
class Skipped:
    index: int
    type_name: str
    reason: str

    def __str__(self) -> str:
        return f"Primitive #{self.index} ({self.type_name}) skipped: {self.reason}"


BuildOutcome = Union[Built, Skipped]


class _Shape(NamedTuple):
    geometry: pv.PolyData
    kind: ObjectKind
    lit: bool = True
    base_rotation: Optional[npt.NDArray[np.float64]] = None
    # Overrides the record position (the pyramid sits at its axis midpoint)
    origin: Optional[Vector] = None


# ------------------------------------------------------------------------------
# Geometry helpers
# ------------------------------------------------------------------------------

def polyline_to_polydata(points: npt.NDArray[np.float64]) -> pv.PolyData:
    """A single polyline cell through the points, in order (no vertex cells)."""
    pts = np.asarray(points, dtype=np.float64).reshape(-1, 3)
    n = pts.shape[0]
    return pv.PolyData(pts, lines=np.hstack([[n], np.arange(n, dtype=np.int_)]))


def circle_points(radius: float, segments: int = config.CIRCLE_SEGMENTS) -> npt.NDArray[np.float64]:
    """
    Closed circle in the local XZ plane (normal +Y).

    Angles run over [0, 2*pi] inclusive, so the last point repeats the first
    and the loop closes.
    """
    angles = np.linspace(0.0, 2.0 * np.pi, segments + 1)
    return np.column_stack([
        radius * np.cos(angles),
        np.zeros_like(angles),
        -radius * np.sin(angles),
    ])


def _solid(poly: pv.PolyData) -> pv.PolyData:
    """Triangles only, so every mesh exports as a plain triangle list."""
    return poly.triangulate()


def _positive(value: float, name: str) -> float:
    if value <= 0.0:
        raise RecordError(f"'{name}' must be positive, got {value:g}")
    return value


# ------------------------------------------------------------------------------
# Per-type shapes
# ------------------------------------------------------------------------------

def _point_shape(record: PrimitiveRecord) -> _Shape:
    sphere = pv.Sphere(
        radius=config.POINT_RADIUS,
        theta_resolution=config.POINT_RESOLUTION,
        phi_resolution=config.POINT_RESOLUTION,
    )
    return _Shape(_solid(sphere), ObjectKind.MESH, lit=False)


def _line_shape(record: PrimitiveRecord) -> _Shape:
    points = record.points or ()
    if len(points) < 2:
        raise RecordError(f"a line needs at least 2 points, got {len(points)}")
    pts = np.array([p.as_tuple() for p in points], dtype=np.float64)
    return _Shape(polyline_to_polydata(pts), ObjectKind.POLYLINE, lit=False)


def _circle_shape(record: PrimitiveRecord) -> _Shape:
    radius = config.DEFAULT_RADIUS if record.radius is None else _positive(record.radius, "radius")
    normal = record.normal if record.normal is not None else Vector(*config.DEFAULT_NORMAL)
    if normal.is_zero():
        raise RecordError("'normal' must be non-zero")

    alignment = transforms.align_vectors(UP.to_array(), normal.to_array())
    logger.debug(
        f"Circle normal {normal.as_tuple()} -> alignment of "
        f"{math.degrees(transforms.rotation_angle(alignment)):.1f} deg"
    )
    geometry = polyline_to_polydata(circle_points(radius))
    return _Shape(geometry, ObjectKind.POLYLINE, lit=False, base_rotation=alignment)


def _box_shape(record: PrimitiveRecord) -> _Shape:
    size = record.size if record.size is not None else Vector(*config.DEFAULT_SIZE)
    for name, value in zip(("size[0]", "size[1]", "size[2]"), size.as_tuple()):
        _positive(value, name)
    cube = pv.Cube(center=(0.0, 0.0, 0.0), x_length=size.x, y_length=size.y, z_length=size.z)
    return _Shape(_solid(cube), ObjectKind.MESH)


def _sphere_shape(record: PrimitiveRecord) -> _Shape:
    radius = config.DEFAULT_RADIUS if record.radius is None else _positive(record.radius, "radius")
    sphere = pv.Sphere(
        radius=radius,
        theta_resolution=config.SPHERE_RESOLUTION,
        phi_resolution=config.SPHERE_RESOLUTION,
    )
    return _Shape(_solid(sphere), ObjectKind.MESH)


def _pyramid_shape(record: PrimitiveRecord) -> _Shape:
    base_radius = (
        config.DEFAULT_RADIUS if record.base_radius is None
        else _positive(record.base_radius, "baseRadius")
    )
    base_center = record.base_center if record.base_center is not None else record.position
    apex = record.apex if record.apex is not None else record.position + Vector(*config.DEFAULT_APEX_OFFSET)

    height = apex.distance_to(base_center)
    if height == 0.0:
        raise RecordError("'apex' coincides with 'baseCenter'")

    midpoint = base_center.lerp(apex, 0.5)

    # Look-at aims local +Z at the apex; the cone's own axis is local +Y,
    # so a further +90 deg about local X brings +Y onto the apex direction.
    orientation = (
        transforms.look_at(midpoint.to_array(), apex.to_array(), UP.to_array())
        @ transforms.rotation_x(math.pi / 2.0)
    )

    cone = pv.Cone(
        center=(0.0, 0.0, 0.0),
        direction=(0.0, 1.0, 0.0),
        height=height,
        radius=base_radius,
        resolution=config.PYRAMID_SIDES,
        capping=True,
    )
    return _Shape(_solid(cone), ObjectKind.MESH, base_rotation=orientation, origin=midpoint)


_SHAPES: dict[PrimitiveType, Callable[[PrimitiveRecord], _Shape]] = {
    PrimitiveType.POINT: _point_shape,
    PrimitiveType.LINE: _line_shape,
    PrimitiveType.POLYLINE: _line_shape,
    PrimitiveType.CIRCLE: _circle_shape,
    PrimitiveType.BOX: _box_shape,
    PrimitiveType.SPHERE: _sphere_shape,
    PrimitiveType.PYRAMID: _pyramid_shape,
}


# ------------------------------------------------------------------------------
# Public API
# ------------------------------------------------------------------------------

def build_object(record: PrimitiveRecord) -> BuiltObject:
    """
    Build the object for a parsed record.

    Raises:
        RecordError: Unknown type or degenerate geometry.
    """
    shape_factory = _SHAPES.get(record.type)
    if shape_factory is None:
        raise RecordError(f"unknown primitive type {record.type_name!r}")

    shape = shape_factory(record)

    base_rotation = shape.base_rotation if shape.base_rotation is not None else np.eye(3)
    declared = transforms.euler_xyz(record.rotation.radians().as_tuple())
    origin = shape.origin if shape.origin is not None else record.position

    return BuiltObject(
        type=record.type,
        kind=shape.kind,
        geometry=shape.geometry,
        color=record.color.as_tuple(),
        position=origin.to_array(),
        rotation=declared @ base_rotation,
        base_rotation=base_rotation,
        lit=shape.lit,
    )


def build(record: Union[PrimitiveRecord, Mapping[str, Any]], index: int = 0) -> BuildOutcome:
    """
    Build one record, reporting failure as a ``Skipped`` outcome.

    Args:
        record: A parsed record, or the raw JSON element to parse first.
        index: Position of the record in the document (for diagnostics).
    """
    type_name = "?"
    try:
        if not isinstance(record, PrimitiveRecord):
            if isinstance(record, Mapping):
                type_name = str(record.get("type", "?"))
            record = PrimitiveRecord.from_dict(record)
        type_name = record.type_name
        obj = build_object(record)
    except RecordError as e:
        skipped = Skipped(index=index, type_name=type_name, reason=str(e))
        logger.warning(str(skipped))
        return skipped

    logger.debug(f"Primitive #{index} ({type_name}) built at {tuple(obj.position)}")
    return Built(index=index, obj=obj)
