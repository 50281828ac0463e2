"""Motion clips: AMC parsing, editing, re-rooting and blending."""

from __future__ import annotations

import logging
import math
from pathlib import Path
from typing import Iterable, Iterator, List, Sequence, Union

import numpy as np

from .helper import euler_angles, rotate_degree_zyx, rotate_radian_zyx, to_degree
from .kinematics import forward_solver
from .posture import Posture
from .skeleton import Skeleton

_log = logging.getLogger(__name__)

PathLike = Union[str, Path]

_HEADER_LINES = 3
# AMC channel order: translations first, then rotations.
_CHANNELS = (
    ("doftx", "translation", 0),
    ("dofty", "translation", 1),
    ("doftz", "translation", 2),
    ("dofrx", "rotation", 0),
    ("dofry", "rotation", 1),
    ("dofrz", "rotation", 2),
)


def _yaw(matrix: np.ndarray) -> float:
    return math.atan2(-matrix[2, 0], matrix[0, 0])


def _zyx_degrees(matrix: np.ndarray) -> np.ndarray:
    """X, Y, Z angles in degrees with Z(z) * Y(y) * X(x) equal to ``matrix``."""
    z, y, x = euler_angles(matrix, 2, 1, 0)
    return to_degree(np.array([x, y, z]))


class Motion:
    """A skeleton together with a sequence of postures, one per frame."""

    def __init__(self, skeleton: Skeleton, postures: Iterable[Posture] = ()) -> None:
        self.skeleton = skeleton
        self.postures: List[Posture] = list(postures)

    @property
    def frame_num(self) -> int:
        return len(self.postures)

    def __len__(self) -> int:
        return len(self.postures)

    def copy(self) -> Motion:
        """A deep copy, including the skeleton."""
        return Motion(self.skeleton.copy(), [p.copy() for p in self.postures])

    def slice(self, start: int, end: int) -> Motion:
        """A copy of frames ``start`` up to but not including ``end``."""
        n = len(self.postures)
        if start < 0 or start >= n or end <= start or end > n:
            raise IndexError(f"invalid frame range [{start}, {end}) for {n} frames")
        return Motion(self.skeleton.copy(), [p.copy() for p in self.postures[start:end]])

    def remove(self, begin: int, end: int) -> None:
        """Delete frames ``begin`` up to but not including ``end``."""
        if end < begin:
            raise ValueError(f"end {end} is before begin {begin}")
        if begin < 0:
            raise IndexError(f"begin {begin} is negative")
        del self.postures[begin:end]

    def concatenate(self, other: Motion) -> None:
        """Append copies of the frames of ``other``."""
        self.postures.extend(p.copy() for p in other.postures)

    def forward_kinematics(self, frame_idx: int) -> List[np.ndarray]:
        """Pose the skeleton at ``frame_idx`` and return the bones' model matrices."""
        forward_solver(self.postures[frame_idx], self.skeleton.bone(Skeleton.ROOT_IDX))
        return self.skeleton.model_matrices()

    def transform(self, new_facing: Sequence[float], new_position: Sequence[float]) -> None:
        """Move the clip so its first root sits at ``new_position`` facing ``new_facing``.

        Only the rotation about the vertical axis is changed, so the clip stays
        continuous.
        """
        facing = np.array(new_facing, dtype=float)
        position = np.array(new_position, dtype=float)
        first = self.postures[0]
        old_rot = rotate_degree_zyx(first.bone_rotations[0]).to_matrix()
        new_rot = rotate_degree_zyx(facing).to_matrix()
        turn = rotate_radian_zyx((0.0, _yaw(new_rot) - _yaw(old_rot), 0.0)).to_matrix()
        old_position = first.bone_translations[0].copy()
        for posture in self.postures:
            root_rot = posture.bone_rotations[0]
            root_rot[:3] = _zyx_degrees(turn @ rotate_degree_zyx(root_rot).to_matrix())
            root_pos = posture.bone_translations[0]
            root_pos[:3] = turn @ (root_pos - old_position)[:3] + position[:3]

    def blending(self, other: Motion, blend_weight: Sequence[float], blend_window_size: int) -> Motion:
        """Blend the last window of this clip with the first window of ``other``."""
        n = self.frame_num
        tail = self.slice(n - blend_window_size, n)
        head = other.slice(0, blend_window_size)
        return blend(tail, head, blend_weight)


def blend(bm1: Motion, bm2: Motion, weight: Sequence[float]) -> Motion:
    """Per-frame blend of two clips; ``weight[i]`` is the share of ``bm2`` at frame i.

    Translations are mixed linearly and rotations by quaternion slerp. The
    inputs are left untouched.
    """
    result = bm2.copy()
    for i, p2 in enumerate(result.postures):
        p1 = bm1.postures[i]
        w2 = float(weight[i])
        w1 = 1.0 - w2
        bones = len(p1)
        p2.bone_translations[:bones] = p1.bone_translations * w1 + p2.bone_translations[:bones] * w2
        for rot1, rot2 in zip(p1.bone_rotations, p2.bone_rotations):
            q1 = rotate_degree_zyx(rot1)
            q2 = rotate_degree_zyx(rot2)
            rot2[:3] = _zyx_degrees(q1.slerp(w2, q2).to_matrix())
    return result


def _next(tokens: Iterator[str], what: str) -> str:
    try:
        return next(tokens)
    except StopIteration:
        raise ValueError(f"unexpected end of motion data while reading {what}") from None


def _number(tokens: Iterator[str], what: str) -> float:
    token = _next(tokens, what)
    try:
        return float(token)
    except ValueError:
        raise ValueError(f"expected a number for {what}, got {token!r}") from None


def _read_frame(tokens: Iterator[str], skeleton: Skeleton) -> Posture:
    posture = Posture.zeros(skeleton.bone_count)
    for _ in range(skeleton.movable_bones):
        name = _next(tokens, "bone name")
        try:
            bone = skeleton.bone(name)
        except KeyError:
            raise ValueError(f"unknown bone {name!r} in motion data") from None
        values = {"rotation": np.zeros(4), "translation": np.zeros(4)}
        for flag, kind, axis in _CHANNELS:
            if getattr(bone, flag):
                values[kind][axis] = _number(tokens, name)
        if bone.idx == Skeleton.ROOT_IDX:
            values["translation"] *= skeleton.scale
        posture.bone_rotations[bone.idx] = values["rotation"]
        posture.bone_translations[bone.idx] = values["translation"]
    return posture


def parse_amc(text: str, skeleton: Skeleton) -> Motion:
    """Build a motion from AMC text for ``skeleton``.

    The three header lines are skipped; reading stops at the first token
    where a frame number is expected but none is found.
    """
    tokens = iter(" ".join(text.splitlines()[_HEADER_LINES:]).split())
    postures = []
    for token in tokens:
        try:
            int(token)
        except ValueError:
            break
        postures.append(_read_frame(tokens, skeleton))
    return Motion(skeleton, postures)


def load_motion(path: PathLike, skeleton: Skeleton) -> Motion:
    """Read and parse an AMC file."""
    motion = parse_amc(Path(path).read_text(), skeleton)
    _log.info("%d samples in %s are read", motion.frame_num, path)
    return motion