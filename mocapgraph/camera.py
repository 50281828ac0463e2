"""Cameras producing view and projection matrices."""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from enum import Enum
from typing import Optional

import numpy as np

from .helper import look_at, perspective, to_radian

_PITCH_LIMIT = 89.9
_UNIT_Y = np.array([0.0, 1.0, 0.0])


def _normalized(vector: np.ndarray) -> np.ndarray:
    norm = np.linalg.norm(vector)
    return vector / norm if norm > 0 else vector


class MoveKey(Enum):
    """Movement keys understood by :class:`FreeCamera`."""

    FORWARD = "w"
    BACKWARD = "s"
    LEFT = "a"
    RIGHT = "d"


class Camera(ABC):
    """Common state of a camera and the cached view and projection matrices."""

    def __init__(self) -> None:
        self.position = np.zeros(4)
        self.up = np.array([0.0, 1.0, 0.0, 0.0])
        self.center = np.array([0.0, 0.0, 1.0, 0.0])
        self.view_matrix = np.eye(4)
        self.projection_matrix = np.eye(4)
        self.vp_matrix = np.eye(4)
        self.field_of_view = 60.0
        self.near_clip_plane = 0.01
        self.far_clip_plane = 100.0
        self.aspect_ratio = 1.0

    def set_aspect_ratio(self, width: int, height: int) -> None:
        """Set the aspect ratio from a viewport size."""
        if height == 0:
            raise ZeroDivisionError("viewport height must not be zero")
        self.aspect_ratio = width / height

    def update(self) -> None:
        """Recompute the view, projection and combined matrices."""
        self._update_view_matrix()
        self._update_projection_matrix()
        self.vp_matrix = self.projection_matrix @ self.view_matrix

    def _update_projection_matrix(self) -> None:
        self.projection_matrix = perspective(
            self.field_of_view, self.aspect_ratio, self.near_clip_plane, self.far_clip_plane
        )

    @abstractmethod
    def _update_view_matrix(self) -> None:
        """Recompute the position-dependent view matrix."""


class DefaultCamera(Camera):
    """A camera orbiting its center at a fixed radius."""

    def __init__(self) -> None:
        super().__init__()
        self.rotation_angle = 80.0
        self.y_offset = 0.2
        self.rotation_radius = 12.0

    def _update_view_matrix(self) -> None:
        angle = to_radian(self.rotation_angle)
        self.position[0] = self.center[0] + self.rotation_radius * math.cos(angle)
        self.position[1] = (self.center[1] + self.y_offset) * self.rotation_radius
        self.position[2] = self.center[2] + self.rotation_radius * math.sin(angle)
        self.view_matrix = look_at(self.position, self.center, self.up)


class FreeCamera(Camera):
    """A first-person camera steered by yaw and pitch; ``center`` is the view direction."""

    def __init__(self) -> None:
        super().__init__()
        self.position = np.array([8.0, 21.0, -9.0, 0.0])
        self.move_speed = 30.0
        self.mouse_sensitivity = 0.1
        self.last_x = 0.0
        self.last_y = 0.0
        self.yaw = 135.0
        self.pitch = -45.0
        self.last_frame_time = 0.0
        self.right = np.zeros(4)

    def reset(self) -> None:
        """Forget the last cursor position, so the next move only records it."""
        self.last_x = 0.0
        self.last_y = 0.0

    def move_sight(self, x: float, y: float) -> None:
        """Turn the camera by the cursor movement since the last call."""
        if self.last_x == 0 and self.last_y == 0:
            self.last_x, self.last_y = x, y
            return
        dx = (x - self.last_x) * self.mouse_sensitivity
        dy = (self.last_y - y) * self.mouse_sensitivity
        self.last_x, self.last_y = x, y
        self.yaw += dx
        self.pitch = min(max(self.pitch + dy, -_PITCH_LIMIT), _PITCH_LIMIT)

    def move_camera(self, key: Optional[MoveKey], now: float) -> None:
        """Move along the view or right direction for the time elapsed until ``now``."""
        delta = now - self.last_frame_time
        self.last_frame_time = now
        speed = self.move_speed * delta
        if key is MoveKey.FORWARD:
            self.position = self.position + self.center * speed
        elif key is MoveKey.BACKWARD:
            self.position = self.position - self.center * speed
        elif key is MoveKey.LEFT:
            self.position = self.position - self.right * speed
        elif key is MoveKey.RIGHT:
            self.position = self.position + self.right * speed

    def _update_view_matrix(self) -> None:
        yaw, pitch = to_radian(self.yaw), to_radian(self.pitch)
        center = self.center.copy()
        center[0] = math.cos(yaw) * math.cos(pitch)
        center[1] = math.sin(pitch)
        center[2] = math.sin(yaw) * math.cos(pitch)
        self.center = _normalized(center)

        right = np.zeros(4)
        right[:3] = _normalized(np.cross(self.center[:3], _UNIT_Y))
        self.right = right
        up = np.zeros(4)
        up[:3] = _normalized(np.cross(self.right[:3], self.center[:3]))
        self.up = up
        self.view_matrix = look_at(self.position, self.position + self.center, self.up)