"""Forward kinematics over a bone hierarchy."""

from __future__ import annotations

import numpy as np

from .bone import Bone
from .helper import rotate_degree_zyx
from .posture import Posture


def forward_solver(posture: Posture, bone: Bone) -> None:
    """Pose ``bone``, its siblings and all their descendants from ``posture``.

    Positions and rotations are written into the bones' existing arrays so
    that references to them stay valid.
    """
    pending = [bone]
    while pending:
        current = pending.pop()
        local = np.eye(4)
        local[:3, :3] = rotate_degree_zyx(posture.bone_rotations[current.idx]).to_matrix()
        if current.parent is None:
            current.start_position[:] = posture.bone_translations[current.idx]
            current.rotation[:] = local
        else:
            current.start_position[:] = current.parent.end_position
            current.rotation[:] = current.parent.rotation @ current.rot_parent_current @ local
        current.end_position[:] = current.start_position + (current.rotation @ current.direction) * current.length
        if current.child is not None:
            pending.append(current.child)
        if current.sibling is not None:
            pending.append(current.sibling)