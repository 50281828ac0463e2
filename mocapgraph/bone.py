"""A bone segment of an ASF skeleton."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, Optional

import numpy as np


def _zeros4() -> np.ndarray:
    return np.zeros(4)


def _identity4() -> np.ndarray:
    return np.eye(4)


@dataclass(eq=False)
class Bone:
    """One bone: its hierarchy links, degrees of freedom and posed state.

    Transforms (``rot_parent_current``, ``global_facing``, ``rotation``) are
    4x4 affine matrices; vectors are homogeneous 4-vectors.
    """

    idx: int = 0
    name: str = ""
    # Unit direction from the bone's origin to its child, in local coordinates.
    direction: np.ndarray = field(default_factory=_zeros4)
    length: float = 0.0
    # Orientation of the local frame as given by the ASF axis field.
    axis: np.ndarray = field(default_factory=_zeros4)
    dof: int = 0
    dofrx: bool = False
    dofry: bool = False
    dofrz: bool = False
    doftx: bool = False
    dofty: bool = False
    doftz: bool = False
    rot_parent_current: np.ndarray = field(default_factory=_identity4)
    global_facing: np.ndarray = field(default_factory=_identity4)
    start_position: np.ndarray = field(default_factory=_zeros4)
    end_position: np.ndarray = field(default_factory=_zeros4)
    rotation: np.ndarray = field(default_factory=_identity4)
    rxmin: float = 0.0
    rxmax: float = 0.0
    rymin: float = 0.0
    rymax: float = 0.0
    rzmin: float = 0.0
    rzmax: float = 0.0
    parent: Optional[Bone] = field(default=None, repr=False)
    child: Optional[Bone] = field(default=None, repr=False)
    sibling: Optional[Bone] = field(default=None, repr=False)

    def children(self) -> Iterator[Bone]:
        """Yield the first child and then each of its siblings."""
        current = self.child
        while current is not None:
            yield current
            current = current.sibling