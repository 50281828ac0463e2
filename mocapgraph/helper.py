"""Angle conversion, quaternion rotation and projection helpers."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence, Union

import numpy as np

PI = 3.141592653589793238

Angle = Union[float, Sequence[float], np.ndarray]


def to_radian(angle: Angle):
    """Convert degrees to radians; works on scalars and arrays."""
    if isinstance(angle, (int, float)):
        return angle * PI / 180.0
    return np.asarray(angle, dtype=float) * PI / 180.0


def to_degree(angle: Angle):
    """Convert radians to degrees; works on scalars and arrays."""
    if isinstance(angle, (int, float)):
        return angle * 180.0 / PI
    return np.asarray(angle, dtype=float) * 180.0 / PI


def _normalize(vector: np.ndarray) -> np.ndarray:
    norm = np.linalg.norm(vector)
    return vector / norm if norm > 0 else vector


@dataclass(frozen=True)
class Quaternion:
    """A quaternion w + xi + yj + zk, used for 3D rotations."""

    w: float = 1.0
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    @classmethod
    def from_axis_angle(cls, angle: float, axis) -> Quaternion:
        """Rotation of ``angle`` radians about ``axis`` (expected unit length)."""
        half = 0.5 * angle
        s = math.sin(half)
        ax = np.asarray(axis, dtype=float)[:3]
        return cls(math.cos(half), s * ax[0], s * ax[1], s * ax[2])

    @property
    def coeffs(self) -> np.ndarray:
        return np.array([self.w, self.x, self.y, self.z])

    def dot(self, other: Quaternion) -> float:
        return float(self.coeffs @ other.coeffs)

    def norm(self) -> float:
        return float(np.linalg.norm(self.coeffs))

    def normalized(self) -> Quaternion:
        return Quaternion(*(self.coeffs / self.norm()))

    def conjugate(self) -> Quaternion:
        return Quaternion(self.w, -self.x, -self.y, -self.z)

    def __mul__(self, other):
        if not isinstance(other, Quaternion):
            return NotImplemented
        w1, x1, y1, z1 = self.w, self.x, self.y, self.z
        w2, x2, y2, z2 = other.w, other.x, other.y, other.z
        return Quaternion(
            w1 * w2 - x1 * x2 - y1 * y2 - z1 * z2,
            w1 * x2 + x1 * w2 + y1 * z2 - z1 * y2,
            w1 * y2 - x1 * z2 + y1 * w2 + z1 * x2,
            w1 * z2 + x1 * y2 - y1 * x2 + z1 * w2,
        )

    def to_matrix(self) -> np.ndarray:
        """The 3x3 rotation matrix of this (unit) quaternion."""
        w, x, y, z = self.w, self.x, self.y, self.z
        tx, ty, tz = 2.0 * x, 2.0 * y, 2.0 * z
        twx, twy, twz = tx * w, ty * w, tz * w
        txx, txy, txz = tx * x, ty * x, tz * x
        tyy, tyz, tzz = ty * y, tz * y, tz * z
        return np.array(
            [
                [1.0 - (tyy + tzz), txy - twz, txz + twy],
                [txy + twz, 1.0 - (txx + tzz), tyz - twx],
                [txz - twy, tyz + twx, 1.0 - (txx + tyy)],
            ]
        )

    def slerp(self, t: float, other: Quaternion) -> Quaternion:
        """Spherical linear interpolation from self (t=0) to other (t=1)."""
        one = 1.0 - np.finfo(float).eps
        d = self.dot(other)
        abs_d = abs(d)
        if abs_d >= one:
            scale0, scale1 = 1.0 - t, t
        else:
            theta = math.acos(abs_d)
            sin_theta = math.sin(theta)
            scale0 = math.sin((1.0 - t) * theta) / sin_theta
            scale1 = math.sin(t * theta) / sin_theta
        if d < 0.0:
            scale1 = -scale1
        return Quaternion(*(scale0 * self.coeffs + scale1 * other.coeffs))

    def rotate(self, vector) -> np.ndarray:
        """Rotate a 3-vector, or a homogeneous 4-vector keeping its last component."""
        v = np.asarray(vector, dtype=float)
        result = v.copy()
        result[:3] = self.to_matrix() @ v[:3]
        return result


def _rx(angle: float) -> Quaternion:
    return Quaternion.from_axis_angle(angle, (1.0, 0.0, 0.0))


def _ry(angle: float) -> Quaternion:
    return Quaternion.from_axis_angle(angle, (0.0, 1.0, 0.0))


def _rz(angle: float) -> Quaternion:
    return Quaternion.from_axis_angle(angle, (0.0, 0.0, 1.0))


def rotate_radian_zyx(rotation) -> Quaternion:
    """Rotate about X first, then Y, then Z (angles in radians)."""
    r = np.asarray(rotation, dtype=float)
    return _rz(r[2]) * _ry(r[1]) * _rx(r[0])


def rotate_radian_xyz(rotation) -> Quaternion:
    """Rotate about Z first, then Y, then X (angles in radians)."""
    r = np.asarray(rotation, dtype=float)
    return _rx(r[0]) * _ry(r[1]) * _rz(r[2])


def rotate_degree_zyx(rotation) -> Quaternion:
    """Rotate about X first, then Y, then Z (angles in degrees)."""
    return rotate_radian_zyx(to_radian(np.asarray(rotation, dtype=float)))


def rotate_degree_xyz(rotation) -> Quaternion:
    """Rotate about Z first, then Y, then X (angles in degrees)."""
    return rotate_radian_xyz(to_radian(np.asarray(rotation, dtype=float)))


def perspective(fovy: float, aspect: float, z_near: float, z_far: float) -> np.ndarray:
    """Perspective projection matrix; ``fovy`` is in degrees."""
    mat = np.zeros((4, 4))
    tan_half_fovy = math.tan(to_radian(fovy) / 2.0)
    mat[0, 0] = 1.0 / (aspect * tan_half_fovy)
    mat[1, 1] = 1.0 / tan_half_fovy
    mat[2, 2] = -(z_far + z_near) / (z_far - z_near)
    mat[3, 2] = -1.0
    mat[2, 3] = -(2.0 * z_far * z_near) / (z_far - z_near)
    return mat


def look_at(eye, center, up) -> np.ndarray:
    """View matrix looking from ``eye`` towards ``center``."""
    e = np.asarray(eye, dtype=float)[:3]
    c = np.asarray(center, dtype=float)[:3]
    f = _normalize(c - e)
    u = _normalize(np.asarray(up, dtype=float)[:3])
    s = _normalize(np.cross(f, u))
    u = np.cross(s, f)
    mat = np.zeros((4, 4))
    mat[0, :3] = s
    mat[1, :3] = u
    mat[2, :3] = -f
    mat[3, 3] = 1.0
    mat[0, 3] = -(s @ e)
    mat[1, 3] = -(u @ e)
    mat[2, 3] = f @ e
    return mat


def ortho(left: float, right: float, bottom: float, top: float, z_near: float, z_far: float) -> np.ndarray:
    """Orthographic projection matrix with the translation stored in the last row."""
    mat = np.eye(4)
    mat[0, 0] = 2.0 / (right - left)
    mat[1, 1] = 2.0 / (top - bottom)
    mat[2, 2] = -2.0 / (z_far - z_near)
    mat[3, 0] = -(right + left) / (right - left)
    mat[3, 1] = -(top + bottom) / (top - bottom)
    mat[3, 2] = -(z_far + z_near) / (z_far - z_near)
    return mat


def euler_angles(matrix, a0: int, a1: int, a2: int) -> np.ndarray:
    """Decompose a rotation matrix into angles about axes a0, a1, a2.

    The matrix equals R(a0, r[0]) @ R(a1, r[1]) @ R(a2, r[2]); the first
    angle lies in [0, pi] and the others in [-pi, pi].
    """
    m = np.asarray(matrix, dtype=float)[:3, :3]
    res = np.zeros(3)
    odd = 0 if (a0 + 1) % 3 == a1 else 1
    i = a0
    j = (a0 + 1 + odd) % 3
    k = (a0 + 2 - odd) % 3

    def shift(angle: float) -> float:
        return angle - math.pi if angle > 0.0 else angle + math.pi

    needs_shift = lambda angle: (odd and angle < 0.0) or ((not odd) and angle > 0.0)  # noqa: E731

    if a0 == a2:
        res[0] = math.atan2(m[j, i], m[k, i])
        s2 = math.hypot(m[j, i], m[k, i])
        if needs_shift(res[0]):
            res[0] = shift(res[0])
            res[1] = -math.atan2(s2, m[i, i])
        else:
            res[1] = math.atan2(s2, m[i, i])
        s1, c1 = math.sin(res[0]), math.cos(res[0])
        res[2] = math.atan2(c1 * m[j, k] - s1 * m[k, k], c1 * m[j, j] - s1 * m[k, j])
    else:
        res[0] = math.atan2(m[j, k], m[k, k])
        c2 = math.hypot(m[i, i], m[i, j])
        if needs_shift(res[0]):
            res[0] = shift(res[0])
            res[1] = math.atan2(-m[i, k], -c2)
        else:
            res[1] = math.atan2(-m[i, k], c2)
        s1, c1 = math.sin(res[0]), math.cos(res[0])
        res[2] = math.atan2(s1 * m[k, i] - c1 * m[j, i], c1 * m[j, j] - s1 * m[k, j])
    if not odd:
        res = -res
    return res


def euler_to_quaternion(euler) -> Quaternion:
    """Quaternion of X(e0) * Y(e1) * Z(e2), angles in radians."""
    return rotate_radian_xyz(euler)


def euler_to_matrix(euler) -> np.ndarray:
    """Rotation matrix of X(e0) * Y(e1) * Z(e2), angles in radians."""
    return euler_to_quaternion(euler).to_matrix()


def quaternion_to_euler(q: Quaternion) -> np.ndarray:
    """X, Y, Z angles (radians) such that X * Y * Z reproduces ``q``."""
    return euler_angles(q.to_matrix(), 0, 1, 2)