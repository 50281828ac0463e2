"""A single frame of joint rotations and translations."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Sequence

import numpy as np


def _empty() -> np.ndarray:
    return np.zeros((0, 4))


def angular_difference(angle1: float, angle2: float) -> float:
    """Signed difference angle2 - angle1 in degrees, wrapped to [-180, 180)."""
    diff = math.fmod(angle2 - angle1 + 180.0, 360.0)
    if diff < 0:
        diff += 360.0
    return diff - 180.0


@dataclass(eq=False)
class Posture:
    """Per-bone rotations (degrees) and translations, one row of 4 per bone."""

    bone_rotations: np.ndarray = field(default_factory=_empty)
    bone_translations: np.ndarray = field(default_factory=_empty)

    def __post_init__(self) -> None:
        self.bone_rotations = np.array(self.bone_rotations, dtype=float).reshape(-1, 4)
        self.bone_translations = np.array(self.bone_translations, dtype=float).reshape(-1, 4)

    @classmethod
    def zeros(cls, size: int) -> Posture:
        """A posture of ``size`` bones with all values zero."""
        return cls(np.zeros((size, 4)), np.zeros((size, 4)))

    def __len__(self) -> int:
        return len(self.bone_rotations)

    def copy(self) -> Posture:
        return Posture(self.bone_rotations.copy(), self.bone_translations.copy())

    def pose_distance(self, other: Posture, num_bones: int, joint_weights: Sequence[float]) -> float:
        """Weighted sum of per-bone rotation differences, ignoring the root."""
        weights = np.asarray(joint_weights, dtype=float)
        if num_bones > min(len(self), len(other), len(weights)):
            raise IndexError(f"num_bones {num_bones} exceeds the available bones or weights")
        if num_bones <= 1:
            return 0.0
        r1 = self.bone_rotations[1:num_bones, :3]
        r2 = other.bone_rotations[1:num_bones, :3]
        diff = np.mod(r2 - r1 + 180.0, 360.0) - 180.0
        return float(np.linalg.norm(diff, axis=1) @ weights[1:num_bones])

    def facing_angle(self) -> float:
        """The root's rotation about the Y axis, in degrees."""
        return float(self.bone_rotations[0][1])