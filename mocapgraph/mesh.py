"""Vertex and index data for the primitive shapes used in the scene."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import List, Optional

import numpy as np

from .helper import PI

SPHERE_SECTORS = 50
SPHERE_STACKS = 50
SPHERE_RADIUS = 1.0

CYLINDER_SECTORS = 72
CYLINDER_HEIGHT = 1.0
CYLINDER_RADIUS = 0.1

# Interleaved layout of 8-float vertices: position, normal, texture coordinate.
VERTEX_STRIDE = 8

_PLANE_EXTENT = 30.0


def _vertex_array(values) -> np.ndarray:
    return np.asarray(values, dtype=np.float32)


def _index_array(values) -> np.ndarray:
    return np.asarray(values, dtype=np.uint32)


@dataclass(frozen=True, eq=False)
class Mesh:
    """Vertices, one row per vertex, and an optional triangle index list."""

    vertices: np.ndarray
    indices: Optional[np.ndarray] = None

    def __post_init__(self) -> None:
        vertices = _vertex_array(self.vertices)
        if vertices.ndim != 2:
            raise ValueError("vertices must be a two-dimensional array")
        object.__setattr__(self, "vertices", vertices)
        if self.indices is not None:
            indices = _index_array(self.indices)
            if indices.size and int(indices.max()) >= len(vertices):
                raise ValueError("an index refers past the last vertex")
            object.__setattr__(self, "indices", indices)

    @property
    def vertex_count(self) -> int:
        return len(self.vertices)

    @property
    def index_count(self) -> int:
        return 0 if self.indices is None else len(self.indices)

    @property
    def stride(self) -> int:
        """Number of floats per vertex."""
        return self.vertices.shape[1]

    @property
    def positions(self) -> np.ndarray:
        return self.vertices[:, :3]

    @property
    def normals(self) -> np.ndarray:
        if self.stride < 6:
            raise ValueError("this mesh has no normals")
        return self.vertices[:, 3:6]

    @property
    def tex_coords(self) -> np.ndarray:
        if self.stride < VERTEX_STRIDE:
            raise ValueError("this mesh has no texture coordinates")
        return self.vertices[:, 6:8]


@dataclass(frozen=True, eq=False)
class SphereMesh(Mesh):
    """A sphere with filled-triangle ``indices`` and line ``wire_indices``."""

    wire_indices: np.ndarray = field(default_factory=lambda: np.zeros(0, dtype=np.uint32))

    def __post_init__(self) -> None:
        super().__post_init__()
        wire = _index_array(self.wire_indices)
        if wire.size and int(wire.max()) >= len(self.vertices):
            raise ValueError("a wire index refers past the last vertex")
        object.__setattr__(self, "wire_indices", wire)


def sphere_mesh(
    stacks: int = SPHERE_STACKS, sectors: int = SPHERE_SECTORS, radius: float = SPHERE_RADIUS
) -> SphereMesh:
    """A UV sphere from the north pole (stack 0) to the south pole."""
    if stacks < 1 or sectors < 1:
        raise ValueError("stacks and sectors must be positive")
    if radius <= 0:
        raise ValueError("radius must be positive")
    stack_angle = PI / 2.0 - np.arange(stacks + 1) * (PI / stacks)
    sector_angle = np.arange(sectors + 1) * (2.0 * PI / sectors)
    xy = np.cos(stack_angle)[:, None]
    x = xy * np.cos(sector_angle)[None, :]
    y = xy * np.sin(sector_angle)[None, :]
    z = np.broadcast_to(np.sin(stack_angle)[:, None], x.shape)
    s = np.broadcast_to(np.arange(sectors + 1)[None, :] / sectors, x.shape)
    t = np.broadcast_to(np.arange(stacks + 1)[:, None] / stacks, x.shape)
    grid = np.stack([x * radius, y * radius, z * radius, x, y, z, s, t], axis=-1)

    fill: List[int] = []
    wire: List[int] = []
    for i in range(stacks):
        k1 = i * (sectors + 1)
        k2 = k1 + sectors + 1
        for _ in range(sectors):
            wire.extend((k1, k2))
            if i != 0:
                wire.extend((k1, k1 + 1))
                fill.extend((k1, k2, k1 + 1))
            if i != stacks - 1:
                fill.extend((k1 + 1, k2, k2 + 1))
            k1 += 1
            k2 += 1
    return SphereMesh(grid.reshape(-1, VERTEX_STRIDE), fill, wire)


def cylinder_mesh(
    sectors: int = CYLINDER_SECTORS, height: float = CYLINDER_HEIGHT, radius: float = CYLINDER_RADIUS
) -> Mesh:
    """A closed cylinder along Z, centred on the origin."""
    if sectors < 1:
        raise ValueError("sectors must be positive")
    if height <= 0 or radius <= 0:
        raise ValueError("height and radius must be positive")
    step = 2.0 * PI / sectors
    circle = [(math.cos(j * step), math.sin(j * step)) for j in range(sectors + 1)]

    vertices: List[List[float]] = []
    for i in range(2):
        h = -height / 2.0 + i * height
        t = 1.0 - i
        for j, (ux, uy) in enumerate(circle):
            vertices.append([ux * radius, uy * radius, h, ux, uy, 0.0, j / sectors, t])

    base_center = len(vertices)
    top_center = base_center + sectors + 1
    for i in range(2):
        h = -height / 2.0 + i * height
        nz = -1.0 + 2.0 * i
        vertices.append([0.0, 0.0, h, 0.0, 0.0, nz, 0.5, 0.5])
        for ux, uy in circle[:sectors]:
            vertices.append([ux * radius, uy * radius, h, 0.0, 0.0, nz, -ux * 0.5 + 0.5, -uy * 0.5 + 0.5])

    indices: List[int] = []
    for k1 in range(sectors):
        k2 = k1 + sectors + 1
        indices.extend((k1, k1 + 1, k2, k2, k1 + 1, k2 + 1))
    for i in range(sectors):
        k = base_center + 1 + i
        following = k + 1 if i < sectors - 1 else base_center + 1
        indices.extend((base_center, following, k))
    for i in range(sectors):
        k = top_center + 1 + i
        following = k + 1 if i < sectors - 1 else top_center + 1
        indices.extend((top_center, k, following))
    return Mesh(vertices, indices)


def box_mesh() -> Mesh:
    """A cube spanning -1 to 1 on each axis, positions only (used for the sky box)."""
    vertices = [
        [-1.0, -1.0, -1.0], [1.0, -1.0, -1.0], [1.0, 1.0, -1.0], [-1.0, 1.0, -1.0],
        [-1.0, -1.0, 1.0], [1.0, -1.0, 1.0], [1.0, 1.0, 1.0], [-1.0, 1.0, 1.0],
    ]
    indices = [
        0, 1, 3, 3, 1, 2, 1, 5, 2, 2, 5, 6, 5, 4, 6, 6, 4, 7,
        4, 0, 7, 7, 0, 3, 3, 2, 7, 7, 2, 6, 4, 5, 0, 0, 5, 1,
    ]
    return Mesh(vertices, indices)


def plane_mesh() -> Mesh:
    """The ground quad at y = 0, drawn as a triangle fan without indices."""
    e = _PLANE_EXTENT
    vertices = [
        [-e, 0.0, -e, 0.0, 1.0, 0.0, 0.0, 1.0],
        [-e, 0.0, e, 0.0, 1.0, 0.0, 1.0, 1.0],
        [e, 0.0, e, 0.0, 1.0, 0.0, 1.0, 0.0],
        [e, 0.0, -e, 0.0, 1.0, 0.0, 0.0, 0.0],
    ]
    return Mesh(vertices)