"""The draggable target ball."""

from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np

_SCALE = 0.125


def _initial_position() -> np.ndarray:
    return np.array([-0.0692501, 3.85358, -1.63441, 0.0])


def _initial_color() -> np.ndarray:
    return np.array([0.0, 0.5, 1.0, 0.0])


@dataclass(eq=False)
class Ball:
    """A small sphere with a homogeneous position that can be picked by a ray."""

    current_position: np.ndarray = field(default_factory=_initial_position)
    color: np.ndarray = field(default_factory=_initial_color)
    dragging: bool = False

    def __post_init__(self) -> None:
        self.current_position = np.array(self.current_position, dtype=float).reshape(4)
        self.color = np.array(self.color, dtype=float).reshape(4)

    def model_matrix(self) -> np.ndarray:
        """Translation to the current position followed by a uniform scale."""
        mat = np.diag([_SCALE, _SCALE, _SCALE, 1.0])
        mat[:3, 3] = self.current_position[:3]
        return mat

    def ray_intersects_sphere(self, origin, direction, radius: float) -> bool:
        """Whether the line through ``origin`` along ``direction`` meets the sphere."""
        o = np.asarray(origin, dtype=float)[:3]
        d = np.asarray(direction, dtype=float)[:3]
        oc = o - self.current_position[:3]
        a = d @ d
        b = 2.0 * (oc @ d)
        c = oc @ oc - radius * radius
        return bool(b * b - 4.0 * a * c >= 0.0)