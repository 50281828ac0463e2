"""A motion graph: clips cut into segments joined by low-cost transitions."""

from __future__ import annotations

import logging
import math
import random
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

import numpy as np

from .motion import Motion

_log = logging.getLogger(__name__)

_PI = 3.1415926
_JOINT_WEIGHTS = {
    2: 50.0, 3: 30.0, 4: 15.0, 5: 5.0,
    7: 50.0, 8: 30.0, 9: 15.0, 10: 5.0,
    11: 50.0, 12: 40.0, 13: 30.0, 14: 20.0, 15: 15.0, 16: 5.0,
    17: 30.0, 18: 15.0, 19: 5.0,
    24: 30.0, 25: 15.0, 26: 5.0,
}
_JOINT_WEIGHT_TOTAL = 480.0
_CONSECUTIVE_WEIGHT = 0.5


@dataclass
class MotionNode:
    """Outgoing edges of one segment, with their transition probabilities."""

    edges: List[int] = field(default_factory=list)
    weights: List[float] = field(default_factory=list)

    @property
    def num_edges(self) -> int:
        return len(self.edges)

    def add_edge_to(self, node: int, weight: float) -> None:
        self.edges.append(node)
        self.weights.append(weight)


def motion_source(end_segments: Sequence[int], segment: int) -> int:
    """Index of the clip that ``segment`` was cut from."""
    try:
        return next(i for i, last in enumerate(end_segments) if segment <= last)
    except StopIteration:
        raise IndexError(f"segment {segment} lies past the last clip") from None


def _blend_weights(window: int) -> List[float]:
    if window < 2:
        raise ValueError(f"blend window must hold at least 2 frames, got {window}")
    return [(1.0 + math.sin(i / (window - 1) * _PI - _PI / 2)) / 2.0 for i in range(window)]


class MotionGraph:
    """Segments of several clips and the transitions between them."""

    def __init__(
        self,
        motions: Sequence[Motion],
        segment_size: int,
        blend_window_size: int,
        edge_cost_threshold: float,
        rng: Optional[random.Random] = None,
    ) -> None:
        if not motions:
            raise ValueError("at least one motion is needed")
        if segment_size < 1:
            raise ValueError(f"segment size must be positive, got {segment_size}")
        self.segment_size = segment_size
        self.blend_window_size = blend_window_size
        self.edge_cost_threshold = edge_cost_threshold
        self.rng = rng if rng is not None else random.Random()

        self.segments: List[Motion] = []
        self.end_segments: List[int] = []
        for motion in motions:
            total = motion.frame_num
            begin, end = 0, segment_size
            while end <= total:
                if total - end < segment_size:
                    end = total
                self.segments.append(motion.slice(begin, end))
                begin += segment_size
                end += segment_size
            self.end_segments.append(len(self.segments) - 1)
        if not self.segments:
            raise ValueError("no motion is long enough for a single segment")

        self.num_nodes = len(self.segments)
        self.num_bones = motions[0].skeleton.bone_count
        if self.num_bones <= max(_JOINT_WEIGHTS):
            raise ValueError(f"skeleton needs more than {max(_JOINT_WEIGHTS)} bones, has {self.num_bones}")
        weights = np.zeros(self.num_bones)
        for idx, weight in _JOINT_WEIGHTS.items():
            weights[idx] = weight
        self.joint_weights = weights / _JOINT_WEIGHT_TOTAL
        self.blend_weights = _blend_weights(blend_window_size)
        _log.debug("Joint weights: %s", self.joint_weights)
        _log.debug("Blend weights: %s", self.blend_weights)

        self.dist_matrix = np.zeros((self.num_nodes, self.num_nodes))
        self.graph: List[MotionNode] = []
        self.curr_idx = 0
        self.curr_segment: Optional[Motion] = None
        self.next_idx = 0
        self.next_segment = self.segments[0].copy()

    def compute_dist_matrix(self, blend_window_size: int) -> None:
        """Cost of moving from the tail of segment i to the head of segment j."""
        if any(len(s) < blend_window_size for s in self.segments):
            raise ValueError(f"every segment needs at least {blend_window_size} frames")
        for i, m1 in enumerate(self.segments):
            _log.debug("Calculating costs for segment %d", i)
            tail = m1.postures[len(m1) - blend_window_size:]
            for j, m2 in enumerate(self.segments):
                if i == j:
                    self.dist_matrix[i, j] = self.edge_cost_threshold
                    continue
                self.dist_matrix[i, j] = sum(
                    p1.pose_distance(p2, self.num_bones, self.joint_weights)
                    for p1, p2 in zip(tail, m2.postures[:blend_window_size])
                )

    def construct_graph(self) -> None:
        """Compute costs and add an edge for every allowed transition."""
        self.compute_dist_matrix(self.blend_window_size)
        self.graph = [MotionNode() for _ in range(self.num_nodes)]
        for i, node in enumerate(self.graph):
            is_end = i in self.end_segments
            source = motion_source(self.end_segments, i)
            targets = [
                j
                for j in range(self.num_nodes)
                if j != i
                and j != i + 1
                and motion_source(self.end_segments, j) != source
                and self.dist_matrix[i, j] < self.edge_cost_threshold
            ]
            if not targets:
                if not is_end:
                    node.add_edge_to(i + 1, 1.0)
                continue
            dist_sum = self.dist_matrix[i, targets].sum()
            share = 1.0
            if not is_end:
                node.add_edge_to(i + 1, _CONSECUTIVE_WEIGHT)
                share = 1.0 - _CONSECUTIVE_WEIGHT
            for j in targets:
                node.add_edge_to(j, float(share * self.dist_matrix[i, j] / dist_sum))

    def traverse(self) -> Motion:
        """Advance one step through the graph and return the current segment.

        On a jump the target clip is re-rooted onto the current pose and the
        transition window is blended.
        """
        self.curr_idx = self.next_idx
        self.curr_segment = self.next_segment
        node = self.graph[self.curr_idx]
        prob = self.rng.random()
        total = 0.0
        _log.debug("Current segment index: %d", self.curr_idx)

        if node.num_edges == 0:
            self.next_idx = 0
        else:
            for edge, weight in zip(node.edges, node.weights):
                total += weight
                if total >= prob:
                    self.next_idx = edge
                    break

        if self.next_idx - self.curr_idx == 1:
            self.next_segment = self.segments[self.next_idx].copy()
            return self.curr_segment

        _log.debug("rand: %f, sum: %f, jump from %d to %d", prob, total, self.curr_idx, self.next_idx)
        w = self.blend_window_size
        current = self.curr_segment
        last_pose = current.postures[current.frame_num - w]
        self.segments[self.next_idx].transform(last_pose.bone_rotations[0], last_pose.bone_translations[0])
        following = self.segments[self.next_idx].copy()
        blended = current.blending(following, self.blend_weights, w)

        i = self.next_idx
        while i not in self.end_segments:
            last_pose = self.segments[i].postures[-1]
            i += 1
            self.segments[i].transform(last_pose.bone_rotations[0], last_pose.bone_translations[0])

        new_current = current.copy()
        new_current.remove(new_current.frame_num - w, new_current.frame_num)
        new_current.concatenate(blended)
        following.remove(0, w)

        self.curr_segment = new_current
        self.next_segment = following
        return self.curr_segment