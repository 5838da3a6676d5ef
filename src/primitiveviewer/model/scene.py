"""
Scene Assembler
===============
Aggregates built objects and derives the camera framing for a load.

Why is this file needed?
------------------------
1. Aggregation: It folds the per-record build outcomes into an ordered object
   list (skips leave gaps, never placeholders).
2. Framing: It computes the axis-aligned bounds over all world-space geometry
   and places the camera so the whole scene is in view.
3. State: It defines SceneState, the value the controller replaces wholesale
   on every load.

Classes:
    Bounds: Axis-aligned bounding box.
    CameraFrame: Eye position, look-at target and up vector.
    SceneAssembly: Result of one ``assemble`` call.
    SceneState: The committed scene shown by the viewport and exported.
"""
from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Optional, TYPE_CHECKING

import numpy as np

from primitiveviewer import config
from primitiveviewer.model.builder import Built, BuildOutcome, BuiltObject, Skipped, build

if TYPE_CHECKING:
    import numpy.typing as npt

logger = logging.getLogger(__name__)

Vec3 = tuple[float, float, float]


@dataclass(frozen=True, eq=False)
class Bounds:
    minimum: npt.NDArray[np.float64]
    maximum: npt.NDArray[np.float64]

    @classmethod
    def from_points(cls, points: npt.NDArray[np.float64]) -> Bounds:
        pts = np.asarray(points, dtype=np.float64).reshape(-1, 3)
        return cls(minimum=pts.min(axis=0), maximum=pts.max(axis=0))

    @property
    def center(self) -> npt.NDArray[np.float64]:
        return (self.minimum + self.maximum) / 2.0

    @property
    def size(self) -> npt.NDArray[np.float64]:
        return self.maximum - self.minimum

    @property
    def max_dim(self) -> float:
        return float(np.max(self.size))


@dataclass(frozen=True)
class CameraFrame:
    eye: Vec3
    target: Vec3
    up: Vec3 = config.UP

    @classmethod
    def default(cls) -> CameraFrame:
        return cls(eye=config.DEFAULT_EYE, target=config.DEFAULT_TARGET)

    @classmethod
    def fit(cls, bounds: Bounds) -> CameraFrame:
        """
        Frame the bounds from above one corner.

        The eye sits at ``center + (d, 0.7 d, d)`` with
        ``d = 2.5 * max_dim`` and looks at the center.
        """
        center = bounds.center
        distance = bounds.max_dim * config.FIT_DISTANCE_FACTOR
        offset = np.array([distance, distance * config.EYE_HEIGHT_FACTOR, distance])
        eye = center + offset
        return cls(
            eye=tuple(float(v) for v in eye),
            target=tuple(float(v) for v in center),
        )

    def as_camera_position(self) -> list[Vec3]:
        """PyVista ``camera_position`` triple."""
        return [self.eye, self.target, self.up]


@dataclass(frozen=True)
class SceneAssembly:
    objects: tuple[BuiltObject, ...]
    outcomes: tuple[BuildOutcome, ...]
    bounds: Optional[Bounds]
    # None when nothing was built: the caller keeps its previous frame
    frame: Optional[CameraFrame]

    @property
    def skipped(self) -> list[Skipped]:
        return [o for o in self.outcomes if isinstance(o, Skipped)]


@dataclass(frozen=True)
class SceneState:
    """
    The committed scene. Replaced as a whole on every load, never patched.
    """
    objects: tuple[BuiltObject, ...] = ()
    outcomes: tuple[BuildOutcome, ...] = ()
    # Parsed JSON document, kept for export; None until the first successful load
    document: Optional[Any] = None

    @property
    def is_loaded(self) -> bool:
        return self.document is not None

    @property
    def is_empty(self) -> bool:
        return not self.objects


def compute_bounds(objects: Sequence[BuiltObject]) -> Optional[Bounds]:
    """Axis-aligned bounds over the world-space points of all objects."""
    if not objects:
        return None
    return Bounds.from_points(np.vstack([obj.world_points() for obj in objects]))


def is_record_sequence(records: Any) -> bool:
    """JSON arrays only: strings and objects are not primitive lists."""
    return isinstance(records, Sequence) and not isinstance(records, (str, bytes, Mapping))


def assemble(records: Any, previous_frame: Optional[CameraFrame] = None) -> SceneAssembly:
    """
    Build every record in order and frame the result.

    Args:
        records: The ``primitives`` array (raw JSON elements or parsed
            PrimitiveRecords).
        previous_frame: Returned unchanged when nothing is built.

    Returns:
        SceneAssembly with the objects, per-record outcomes, bounds and frame.
    """
    if not is_record_sequence(records):
        logger.warning(f"Expected a list of primitives, got {type(records).__name__}; scene is empty.")
        return SceneAssembly(objects=(), outcomes=(), bounds=None, frame=previous_frame)

    outcomes = tuple(build(record, index=i) for i, record in enumerate(records))
    objects = tuple(o.obj for o in outcomes if isinstance(o, Built))

    if not objects:
        logger.warning(f"No primitives could be built from {len(outcomes)} record(s).")
        return SceneAssembly(objects=(), outcomes=outcomes, bounds=None, frame=previous_frame)

    bounds = compute_bounds(objects)
    frame = CameraFrame.fit(bounds)
    logger.info(
        f"Assembled {len(objects)} of {len(outcomes)} primitive(s); "
        f"center={tuple(round(float(v), 4) for v in bounds.center)}, max_dim={bounds.max_dim:g}"
    )
    return SceneAssembly(objects=objects, outcomes=outcomes, bounds=bounds, frame=frame)
