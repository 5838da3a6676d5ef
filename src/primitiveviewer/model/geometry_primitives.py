"""
Geometric value types shared by the record parser and the builder.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Sequence, TYPE_CHECKING
import math

import numpy as np

if TYPE_CHECKING:
    import numpy.typing as npt


@dataclass(frozen=True)
class Vector:
    """
    An immutable 3-component vector.

    Used for positions, rotations (degrees), colors (RGB) and directions.
    """
    x: float
    y: float
    z: float = 0.0

    @classmethod
    def from_sequence(cls, values: Sequence[float]) -> Vector:
        x, y, z = values
        return cls(float(x), float(y), float(z))

    def __add__(self, other: Vector) -> Vector:
        return Vector(*(a + b for a, b in zip(self.as_tuple(), other.as_tuple())))

    def __sub__(self, other: Vector) -> Vector:
        return Vector(*(a - b for a, b in zip(self.as_tuple(), other.as_tuple())))

    def __mul__(self, scalar: float) -> Vector:
        return Vector(*(a * scalar for a in self.as_tuple()))

    @property
    def magnitude(self) -> float:
        return math.hypot(self.x, self.y, self.z)

    def is_zero(self) -> bool:
        return self.x == 0.0 and self.y == 0.0 and self.z == 0.0

    def distance_to(self, other: Vector) -> float:
        return (self - other).magnitude

    def lerp(self, other: Vector, t: float) -> Vector:
        """Linear interpolation; t=0 gives self, t=1 gives other."""
        return self + (other - self) * t

    def radians(self) -> Vector:
        """Interpret the components as degrees and convert them to radians."""
        return Vector(math.radians(self.x), math.radians(self.y), math.radians(self.z))

    def as_tuple(self) -> tuple[float, float, float]:
        return (self.x, self.y, self.z)

    def to_array(self) -> npt.NDArray[np.float64]:
        return np.array([self.x, self.y, self.z], dtype=np.float64)
