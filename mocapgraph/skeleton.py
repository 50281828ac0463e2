"""ASF skeletons: parsing, bone hierarchy and inverse-kinematics chains."""

from __future__ import annotations

import logging
import math
from dataclasses import fields
from pathlib import Path
from typing import List, Optional, Sequence, Tuple, Union

import numpy as np

from .bone import Bone
from .helper import Quaternion, rotate_degree_xyz, rotate_degree_zyx

_log = logging.getLogger(__name__)

PathLike = Union[str, Path]

ROOT_IDX = 0
# Walking up from a secondary end effector stops at the root or at the thorax.
_THORAX_IDX = 13
# (end bones, chain root, secondary end bones, joint anchoring the chain root)
_CHAIN_LAYOUTS: Tuple[Tuple[range, int, Tuple[int, ...], str], ...] = (
    (range(24, 31), 4, (9, 22), "end_position"),
    (range(17, 24), 9, (4, 29), "end_position"),
    (range(6, 10), 6, (), "start_position"),
    (range(1, 5), 1, (), "start_position"),
)

_PAREN = str.maketrans({"(": " ( ", ")": " ) "})


class SkeletonFormatError(ValueError):
    """Raised when ASF text cannot be parsed."""


def _affine(q: Quaternion) -> np.ndarray:
    mat = np.eye(4)
    mat[:3, :3] = q.to_matrix()
    return mat


def _angle_axis_matrix(angle: float, axis: np.ndarray) -> np.ndarray:
    """Rodrigues rotation; a zero axis yields cos(angle) times the identity."""
    c, s = math.cos(angle), math.sin(angle)
    ax = np.asarray(axis, dtype=float)[:3]
    skew = np.array([[0.0, -ax[2], ax[1]], [ax[2], 0.0, -ax[0]], [-ax[1], ax[0], 0.0]])
    return c * np.eye(3) + (1.0 - c) * np.outer(ax, ax) + s * skew


def _copy_bone(bone: Bone) -> Bone:
    values = {}
    for f in fields(bone):
        if f.name in ("parent", "child", "sibling"):
            continue
        value = getattr(bone, f.name)
        values[f.name] = value.copy() if isinstance(value, np.ndarray) else value
    return Bone(**values)


class Skeleton:
    """A tree of bones whose first bone (index 0) is always the root."""

    ROOT_IDX = ROOT_IDX

    def __init__(self, bones: Sequence[Bone], scale: float = 0.2, movable_bones: int = 1) -> None:
        self.bones: List[Bone] = list(bones)
        self.scale = scale
        self.movable_bones = movable_bones
        self.current_end_bone = -1
        self.bone_chains: List[List[Bone]] = []
        self.joint_chains: List[List[np.ndarray]] = []
        self.current_root_pos = np.zeros(4)

    @property
    def bone_count(self) -> int:
        return len(self.bones)

    def __len__(self) -> int:
        return len(self.bones)

    def bone(self, key: Union[str, int]) -> Bone:
        """Look a bone up by name or by index."""
        if isinstance(key, str):
            found = next((b for b in self.bones if b.name == key), None)
            if found is None:
                raise KeyError(key)
            return found
        if not 0 <= key < len(self.bones):
            raise IndexError(f"bone index {key} out of range")
        return self.bones[key]

    def copy(self) -> Skeleton:
        """An independent copy whose hierarchy links point into the copy."""
        position = {id(b): i for i, b in enumerate(self.bones)}
        bones = [_copy_bone(b) for b in self.bones]

        def remap(linked: Optional[Bone]) -> Optional[Bone]:
            return None if linked is None else bones[position[id(linked)]]

        for new, old in zip(bones, self.bones):
            new.parent = remap(old.parent)
            new.child = remap(old.child)
            new.sibling = remap(old.sibling)
        return Skeleton(bones, self.scale, self.movable_bones)

    def model_matrices(self) -> List[np.ndarray]:
        """Per-bone 4x4 model matrices placing a unit cylinder along each posed bone."""
        matrices = []
        for bone in self.bones:
            rotation = np.eye(4)
            rotation[:3, :3] = bone.rotation[:3, :3]
            model = rotation @ bone.global_facing
            model[:3, 3] += 0.5 * (bone.start_position + bone.end_position)[:3]
            matrices.append(model)
        return matrices

    def set_end(self, end: int) -> None:
        """Select the end-effector bone and rebuild the bone and joint chains."""
        if end == self.current_end_bone:
            return
        end_bone = self.bone(end)
        self.current_end_bone = end

        root_idx, other_ends = 0, ()
        for ends, layout_root, layout_others, anchor in _CHAIN_LAYOUTS:
            if end in ends:
                root_idx, other_ends = layout_root, layout_others
                self.current_root_pos = getattr(self.bones[root_idx], anchor).copy()
                break

        from_root: List[Bone] = []
        current: Optional[Bone] = self.bones[root_idx]
        while current.parent is not None:
            from_root.append(current)
            current = current.parent

        from_end: List[Bone] = []
        current = end_bone
        while current is not None:
            from_end.append(current)
            if current.idx == root_idx:
                break
            current = current.parent

        joints = [end_bone.end_position, *(b.start_position for b in from_end)]
        chain = list(from_end)
        if root_idx not in (1, 6):
            for bone in reversed(from_root):
                joints.append(bone.end_position)
                chain.append(bone)
        joint_chains = [joints]
        bone_chains = [chain]

        for other in other_ends:
            current = self.bones[other]
            joints = [current.end_position]
            chain = []
            while current is not None and current.idx not in (ROOT_IDX, _THORAX_IDX):
                joints.append(current.start_position)
                chain.append(current)
                current = current.parent
            joint_chains.append(joints)
            bone_chains.append(chain)

        self.joint_chains = joint_chains
        self.bone_chains = bone_chains


class _TokenStream:
    """Whitespace tokens of a block of lines, remembering each token's line."""

    def __init__(self, lines: Sequence[str], first: int) -> None:
        self._tokens = [
            (n, token) for n in range(first, len(lines)) for token in lines[n].translate(_PAREN).split()
        ]
        self._pos = 0

    def next(self) -> Tuple[int, str]:
        if self._pos >= len(self._tokens):
            raise SkeletonFormatError("unexpected end of bone data")
        item = self._tokens[self._pos]
        self._pos += 1
        return item

    def word(self) -> str:
        return self.next()[1]

    def number(self) -> float:
        token = self.word()
        try:
            return float(token)
        except ValueError:
            raise SkeletonFormatError(f"expected a number, got {token!r}") from None

    def numbers(self, count: int) -> List[float]:
        return [self.number() for _ in range(count)]

    def integer(self) -> int:
        token = self.word()
        try:
            return int(token)
        except ValueError:
            raise SkeletonFormatError(f"expected an integer, got {token!r}") from None

    def expect(self, symbol: str) -> None:
        token = self.word()
        if token != symbol:
            raise SkeletonFormatError(f"expected {symbol!r}, got {token!r}")

    def rest_of_line(self, line_no: int) -> List[str]:
        rest = []
        while self._pos < len(self._tokens) and self._tokens[self._pos][0] == line_no:
            rest.append(self._tokens[self._pos][1])
            self._pos += 1
        return rest


def _root_bone() -> Bone:
    return Bone(
        idx=ROOT_IDX,
        name="root",
        dof=6,
        dofrx=True,
        dofry=True,
        dofrz=True,
        doftx=True,
        dofty=True,
        doftz=True,
    )


def _read_dof(bone: Bone, tokens: Sequence[str]) -> None:
    bone.dof = 0
    for token in tokens:
        for prefix in ("rx", "ry", "rz", "tx", "ty", "tz"):
            if token.startswith(prefix):
                setattr(bone, "dof" + prefix, True)
                bone.dof += 1
                break
        else:
            _log.warning("Unknown dof token: %s", token)


def _read_limits(bone: Bone, stream: _TokenStream) -> None:
    for axis in ("x", "y", "z"):
        if getattr(bone, f"dofr{axis}"):
            stream.expect("(")
            low, high = stream.numbers(2)
            stream.expect(")")
            setattr(bone, f"r{axis}min", low)
            setattr(bone, f"r{axis}max", high)


def _read_bone_data(stream: _TokenStream, scale: float) -> Tuple[List[Bone], int, int]:
    """Read bone blocks up to ':hierarchy'; return bones, dof-bearing count and that line."""
    bones: List[Bone] = []
    movable = 0
    while True:
        bone = Bone()
        while True:
            line_no, keyword = stream.next()
            if keyword == "end":
                break
            if keyword == ":hierarchy":
                return bones, movable, line_no
            if keyword == "id":
                bone.idx = stream.integer()
            elif keyword == "name":
                bone.name = stream.word()
            elif keyword == "direction":
                bone.direction[:3] = stream.numbers(3)
            elif keyword == "length":
                bone.length = stream.number() * scale
            elif keyword == "axis":
                bone.axis[:3] = stream.numbers(3)
            elif keyword == "dof":
                movable += 1
                _read_dof(bone, stream.rest_of_line(line_no))
            elif keyword == "limits":
                _read_limits(bone, stream)
        bones.append(bone)


def _link(parent: Bone, child: Bone) -> None:
    child.parent = parent
    if parent.child is None:
        parent.child = child
        return
    current = parent.child
    while current.sibling is not None:
        current = current.sibling
    current.sibling = child


def _read_hierarchy(skeleton: Skeleton, lines: Sequence[str]) -> None:
    for line in lines:
        tokens = line.split()
        if not tokens:
            continue
        if tokens[0] == "end":
            break
        try:
            parent = skeleton.bone(tokens[0])
        except KeyError:
            raise SkeletonFormatError(f"inboard bone {tokens[0]!r} is undefined") from None
        for name in tokens[1:]:
            try:
                child = skeleton.bone(name)
            except KeyError:
                raise SkeletonFormatError(f"outboard bone {name!r} is undefined") from None
            _link(parent, child)


def _compute_local_directions(bones: Sequence[Bone]) -> None:
    for bone in bones[1:]:
        bone.direction = rotate_degree_xyz(-bone.axis).rotate(bone.direction)


def _compute_local_rotations(bones: Sequence[Bone]) -> None:
    bones[0].rot_parent_current = _affine(rotate_degree_zyx(bones[0].axis))
    for bone in bones:
        to_parent = rotate_degree_xyz(-bone.axis)
        for child in bone.children():
            child.rot_parent_current = _affine(to_parent * rotate_degree_zyx(child.axis))


def _compute_global_facing(bones: Sequence[Bone]) -> None:
    unit_z = np.array([0.0, 0.0, 1.0])
    for bone in bones:
        direction = bone.direction[:3]
        rotation_axis = np.cross(unit_z, direction)
        cross_val = float(np.linalg.norm(rotation_axis))
        if cross_val > 0.0:
            rotation_axis = rotation_axis / cross_val
        theta = math.atan2(cross_val, float(unit_z @ direction))
        facing = np.eye(4)
        facing[:3, :3] = _angle_axis_matrix(theta, rotation_axis) @ np.diag([1.0, 1.0, bone.length])
        bone.global_facing = facing


def parse_asf(text: str, scale: float = 0.2) -> Skeleton:
    """Build a skeleton from ASF text; bone lengths are multiplied by ``scale``."""
    lines = text.splitlines()
    start = next((n for n, line in enumerate(lines) if line.startswith(":bonedata")), None)
    if start is None:
        raise SkeletonFormatError("missing :bonedata section")
    bones, movable, hierarchy_line = _read_bone_data(_TokenStream(lines, start + 2), scale)
    skeleton = Skeleton([_root_bone(), *bones], scale, 1 + movable)
    _read_hierarchy(skeleton, lines[hierarchy_line + 2:])
    _compute_local_directions(skeleton.bones)
    _compute_local_rotations(skeleton.bones)
    _compute_global_facing(skeleton.bones)
    return skeleton


def load_skeleton(path: PathLike, scale: float = 0.2) -> Skeleton:
    """Read and parse an ASF file."""
    skeleton = parse_asf(Path(path).read_text(), scale)
    _log.info("%d bones in %s are read", skeleton.bone_count, path)
    return skeleton