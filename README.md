# mocapgraph

Tools for Acclaim motion capture data. The package reads skeletons (ASF) and
motions (AMC), runs forward kinematics, re-aligns and blends motion clips, and
builds a motion graph that joins clips with smooth transitions. It also holds
the math a viewer needs: camera matrices, a pickable target ball, and vertex
and index data for simple shapes. All vectors and matrices are `numpy` arrays.

## Installation

```
pip install .
```

To run the test suite:

```
pip install ".[test]"
pytest
```

## Modules

### `mocapgraph.helper`

- `to_radian` and `to_degree` convert scalars or arrays.
- `Quaternion` is a frozen `(w, x, y, z)` record. It provides
  `from_axis_angle`, multiplication with `*`, `to_matrix`, `slerp` and
  `rotate`. `rotate` takes a 3-vector, or a homogeneous 4-vector whose last
  component it keeps.
- `rotate_radian_zyx`, `rotate_degree_zyx`, `rotate_radian_xyz` and
  `rotate_degree_xyz` turn three angles into a quaternion. The `zyx` forms
  apply the X rotation first, then Y, then Z. The `xyz` forms apply Z first,
  then Y, then X.
- `euler_angles(matrix, a0, a1, a2)` splits a rotation matrix into angles
  about the three given axes. `euler_to_quaternion`, `euler_to_matrix` and
  `quaternion_to_euler` use the X·Y·Z convention in radians.
- `perspective`, `look_at` and `ortho` build 4x4 projection and view
  matrices.

### `mocapgraph.assets`

- `locate_assets(start=None)` walks up from `start` to find the `assets`
  folder. `start` defaults to the working directory. The folder is
  recognised by its placeholder file `assets/DO NOT remove this placeholder
  file`. The function returns `None` if no such folder is found.
- `find_asset(filename, start=None)` resolves a name inside that folder. If
  there is no assets folder, it returns the name unchanged.

### `mocapgraph.bone` and `mocapgraph.posture`

- `Bone` holds a bone's index and name, its direction and length, its axis,
  its degree-of-freedom flags and rotation limits, and its posed state. The
  posed state is `start_position`, `end_position` and `rotation`. The bone is
  linked to other bones through `parent`, `child` and `sibling`, and
  `children()` yields its direct children.
- `Posture` holds one frame of data. `bone_rotations` (degrees) and
  `bone_translations` are arrays with one row of four values per bone.
  - `Posture.zeros(n)` creates an all-zero frame.
  - `copy()` returns an independent copy.
  - `facing_angle()` gives the root's Y rotation.
  - `pose_distance(other, num_bones, joint_weights)` gives a weighted sum of
    per-joint angle differences. It skips the root, and wraps each difference
    with the same rule as `angular_difference`.

### `mocapgraph.skeleton`

- `parse_asf(text, scale=0.2)` and `load_skeleton(path, scale=0.2)` build a
  `Skeleton`. Bone lengths are multiplied by `scale`. Malformed input raises
  `SkeletonFormatError`, a subclass of `ValueError`.
- `Skeleton.bone(key)` looks a bone up by name or by index. An unknown name
  raises `KeyError` and a bad index raises `IndexError`.
- `copy()` returns an independent skeleton whose links point into the copy.
- `model_matrices()` returns one 4x4 matrix per bone. Each matrix places a
  unit cylinder along the posed bone.
- `set_end(end)` picks an end-effector bone. It rebuilds `bone_chains`,
  `joint_chains` and `current_root_pos` for a fixed limb layout. The layout
  assumes the standard Acclaim bone order.

### `mocapgraph.kinematics`

- `forward_solver(posture, bone)` poses a bone, its siblings and all their
  descendants. It writes the results in place.

### `mocapgraph.motion`

- `parse_amc(text, skeleton)` and `load_motion(path, skeleton)` build a
  `Motion`. They skip the three header lines. A frame that names an unknown
  bone, or that ends early, raises `ValueError`.
- `Motion` has these methods:
  - `copy()` returns an independent copy.
  - `slice(start, end)` returns a copy of frames `start` up to `end`. A bad
    range raises `IndexError`.
  - `remove(begin, end)` deletes a range of frames.
  - `concatenate(other)` appends copies of the frames of `other`.
  - `forward_kinematics(frame_idx)` poses the skeleton at one frame and
    returns the model matrices.
  - `transform(new_facing, new_position)` re-roots the clip. Its first frame
    then starts at `new_position`, turned about the vertical axis to match
    `new_facing`.
  - `blending(other, weights, window)` blends the last `window` frames of
    this clip with the first `window` frames of `other`.
- `blend(bm1, bm2, weight)` blends two clips frame by frame. It mixes
  translations linearly and rotations by slerp, and leaves both inputs
  untouched.

### `mocapgraph.motion_graph`

- `MotionGraph(motions, segment_size, blend_window_size, edge_cost_threshold,
  rng=None)` cuts each clip into segments. It needs a skeleton with more than
  26 bones, because its joint weights are fixed per bone index.
- `construct_graph()` computes the transition costs (`compute_dist_matrix`)
  and adds edges to `graph`, a list of `MotionNode` objects.
  - A segment links to the next segment of the same clip.
  - A segment also links to segments of other clips whose cost is below the
    threshold, weighted by cost.
- `traverse()` picks the next segment using `rng` and returns the current
  segment.
  - On a jump to another clip, it re-roots the target clip onto the current
    pose and blends the transition window.
  - A segment with no edges leads back to segment 0.
- `motion_source(end_segments, segment)` tells which clip a segment came
  from.

### `mocapgraph.camera`

- `DefaultCamera` orbits its `center` at a set radius and angle.
- `FreeCamera` is steered by yaw and pitch:
  - `move_sight(x, y)` turns it by cursor movement.
  - `move_camera(key, now)` moves it by a `MoveKey` for the time elapsed
    until `now`.
  - `reset()` forgets the last cursor position.
- Both cameras support `set_aspect_ratio(width, height)` and `update()`.
  `update()` refreshes `view_matrix`, `projection_matrix` and `vp_matrix`.

### `mocapgraph.ball`

- `Ball` is the target sphere.
- `model_matrix()` translates to the ball's position and scales by 0.125.
- `ray_intersects_sphere(origin, direction, radius)` tests whether the
  infinite line through `origin` meets the sphere.

### `mocapgraph.mesh`

- `sphere_mesh`, `cylinder_mesh`, `box_mesh` and `plane_mesh` return `Mesh`
  objects with `float32` vertices and `uint32` indices.
- `sphere_mesh` returns a `SphereMesh`, which also holds line indices in
  `wire_indices`.

## Example

```python
from mocapgraph.skeleton import load_skeleton
from mocapgraph.motion import load_motion
from mocapgraph.motion_graph import MotionGraph

skeleton = load_skeleton("walk.asf", 0.2)
clips = [load_motion(name, skeleton) for name in ("walk.amc", "run.amc")]

graph = MotionGraph(clips, 60, 10, 30)
graph.construct_graph()
for _ in range(5):
    segment = graph.traverse()
    for frame in range(segment.frame_num):
        matrices = segment.forward_kinematics(frame)
```

## What the package does not do

- **No window, drawing or input handling.** The cameras, the ball and the
  meshes give matrices and vertex data only. Displaying them, and feeding
  cursor and key input to `FreeCamera`, is up to the caller.
- **No inverse kinematics solver.** `Skeleton.set_end` prepares the bone and
  joint chains, but nothing in the package moves the bones toward a target.
- **No command-line program.**
- **No output files.** Motions are read from AMC text but never written back.
- **Messages go through the standard `logging` module.** The package prints
  nothing itself.