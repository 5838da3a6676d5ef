"""
Rotation helpers (pure NumPy).

All matrices are 3x3 and act on column vectors: ``world = R @ local``.
"""
from __future__ import annotations

import math
from typing import Sequence, TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    import numpy.typing as npt

EPS = 1e-9


def rotation_x(angle: float) -> npt.NDArray[np.float64]:
    c, s = math.cos(angle), math.sin(angle)
    return np.array([[1.0, 0.0, 0.0], [0.0, c, -s], [0.0, s, c]])


def rotation_y(angle: float) -> npt.NDArray[np.float64]:
    c, s = math.cos(angle), math.sin(angle)
    return np.array([[c, 0.0, s], [0.0, 1.0, 0.0], [-s, 0.0, c]])


def rotation_z(angle: float) -> npt.NDArray[np.float64]:
    c, s = math.cos(angle), math.sin(angle)
    return np.array([[c, -s, 0.0], [s, c, 0.0], [0.0, 0.0, 1.0]])


def euler_xyz(angles: Sequence[float]) -> npt.NDArray[np.float64]:
    """
    Intrinsic X -> Y -> Z rotation from angles in radians.

    Rotating about the local X axis first, then the new Y, then the new Z
    is the same matrix as ``Rx @ Ry @ Rz``.
    """
    ax, ay, az = angles
    return rotation_x(ax) @ rotation_y(ay) @ rotation_z(az)


def axis_angle(axis: Sequence[float], angle: float) -> npt.NDArray[np.float64]:
    """Rodrigues' rotation about a (not necessarily unit) axis."""
    k = np.asarray(axis, dtype=np.float64)
    norm = np.linalg.norm(k)
    if norm < EPS:
        raise ValueError("Rotation axis must be non-zero.")
    k = k / norm
    kx = np.array([
        [0.0, -k[2], k[1]],
        [k[2], 0.0, -k[0]],
        [-k[1], k[0], 0.0],
    ])
    return np.eye(3) + math.sin(angle) * kx + (1.0 - math.cos(angle)) * (kx @ kx)


def perpendicular(v: Sequence[float]) -> npt.NDArray[np.float64]:
    """Some unit vector perpendicular to v (crossed with its least aligned basis axis)."""
    a = np.asarray(v, dtype=np.float64)
    basis = np.zeros(3)
    basis[int(np.argmin(np.abs(a)))] = 1.0
    p = np.cross(a, basis)
    return p / np.linalg.norm(p)


def align_vectors(
    source: Sequence[float],
    target: Sequence[float],
    tol: float = 1e-6
) -> npt.NDArray[np.float64]:
    """
    Shortest-arc rotation taking direction `source` onto direction `target`.

    Parallel inputs give the identity. Antiparallel inputs give a 180 degree
    turn about an axis perpendicular to `source`, where the cross product
    carries no usable direction.

    Raises:
        ValueError: If either vector has zero length.
    """
    s = np.asarray(source, dtype=np.float64)
    t = np.asarray(target, dtype=np.float64)
    s_norm, t_norm = np.linalg.norm(s), np.linalg.norm(t)
    if s_norm < EPS or t_norm < EPS:
        raise ValueError("Cannot align zero-length vectors.")
    s, t = s / s_norm, t / t_norm

    cos_angle = float(np.clip(np.dot(s, t), -1.0, 1.0))
    axis = np.cross(s, t)

    if np.linalg.norm(axis) < tol:
        if cos_angle > 0.0:
            return np.eye(3)
        return axis_angle(perpendicular(s), math.pi)

    return axis_angle(axis, math.acos(cos_angle))


def look_at(
    origin: Sequence[float],
    target: Sequence[float],
    up: Sequence[float] = (0.0, 1.0, 0.0)
) -> npt.NDArray[np.float64]:
    """
    Orientation whose local +Z axis points from `origin` toward `target`.

    Local +X is ``up x z``; when the viewing direction is parallel to `up`
    the X axis falls back to the limit of a tiny nudge toward +Z (or +X if
    `up` is itself the Z axis), so vertical directions stay well defined.
    """
    up_v = np.asarray(up, dtype=np.float64)
    z = np.asarray(target, dtype=np.float64) - np.asarray(origin, dtype=np.float64)
    z_norm = np.linalg.norm(z)
    if z_norm < EPS:
        z = np.array([0.0, 0.0, 1.0])
    else:
        z = z / z_norm

    x = np.cross(up_v, z)
    if np.linalg.norm(x) < EPS:
        nudge = np.array([1.0, 0.0, 0.0]) if abs(up_v[2]) == 1.0 else np.array([0.0, 0.0, 1.0])
        x = np.cross(up_v, nudge)
    x = x / np.linalg.norm(x)
    y = np.cross(z, x)

    return np.column_stack([x, y, z])


def rotation_angle(matrix: npt.NDArray[np.float64]) -> float:
    """Angle (radians) of the rotation described by a 3x3 matrix."""
    cos_angle = (np.trace(matrix) - 1.0) / 2.0
    return math.acos(float(np.clip(cos_angle, -1.0, 1.0)))


def compose(position: Sequence[float], rotation: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
    """4x4 homogeneous matrix: rotate about the local origin, then translate."""
    matrix = np.eye(4)
    matrix[:3, :3] = rotation
    matrix[:3, 3] = np.asarray(position, dtype=np.float64)
    return matrix
