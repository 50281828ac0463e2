import numpy as np
import pytest

from mocapgraph.helper import rotate_degree_zyx
from mocapgraph.motion import Motion, blend, load_motion, parse_amc
from mocapgraph.skeleton import parse_asf

ASF = """:version 1.10
:name test
:units
  mass 1.0
  length 1.0
  angle deg
:root
   order TX TY TZ RX RY RZ
   axis XYZ
   position 0 0 0
   orientation 0 0 0
:bonedata
  begin
     id 1
     name lfemur
     direction 0 -1 0
     length 2.0
     axis 0 0 20 XYZ
     dof rx ry rz
     limits (-160.0 20.0)
            (-70.0 70.0)
            (-60.0 70.0)
  end
  begin
     id 2
     name ltibia
     direction 0 -1 0
     length 2.0
     axis 0 0 20 XYZ
     dof rx
     limits (-10.0 170.0)
  end
:hierarchy
  begin
    root lfemur
    lfemur ltibia
  end
"""

AMC = """#!OML:ASF test.asf
:FULLY-SPECIFIED
:DEGREES
1
root 1 2 3 10 20 30
lfemur 5 6 7
ltibia 8
2
root 2 2 3 12 25 30
lfemur 6 6 7
ltibia 9
3
root 3 2 3 14 30 30
lfemur 7 6 7
ltibia 10
4
root 4 2 3 16 35 30
lfemur 8 6 7
ltibia 11
"""


@pytest.fixture
def skeleton():
    return parse_asf(ASF, scale=1.0)


@pytest.fixture
def motion(skeleton):
    return parse_amc(AMC, skeleton)


def _matrix(rotation):
    return rotate_degree_zyx(rotation).to_matrix()


def test_parse_amc_reads_every_frame(motion):
    assert len(motion) == 4
    assert motion.frame_num == 4


def test_parse_amc_values(motion):
    first = motion.postures[0]
    np.testing.assert_allclose(first.bone_translations[0], [1, 2, 3, 0])
    np.testing.assert_allclose(first.bone_rotations[0], [10, 20, 30, 0])
    np.testing.assert_allclose(first.bone_rotations[1], [5, 6, 7, 0])
    np.testing.assert_allclose(first.bone_rotations[2], [8, 0, 0, 0])
    np.testing.assert_allclose(first.bone_translations[1], np.zeros(4))


def test_root_translation_is_scaled():
    skeleton = parse_asf(ASF, scale=0.5)
    motion = parse_amc(AMC, skeleton)
    np.testing.assert_allclose(motion.postures[0].bone_translations[0][:3], np.array([1, 2, 3]) * skeleton.scale)
    np.testing.assert_allclose(motion.postures[0].bone_rotations[0][:3], [10, 20, 30])


def test_parse_stops_at_non_numeric_frame(skeleton):
    assert len(parse_amc(AMC + "trailer\n", skeleton)) == 4


def test_unknown_bone_raises(skeleton):
    text = "h\nh\nh\n1\nlhand 1 2 3\n"
    with pytest.raises(ValueError):
        parse_amc(text, skeleton)


def test_truncated_frame_raises(skeleton):
    text = "h\nh\nh\n1\nroot 1 2\n"
    with pytest.raises(ValueError):
        parse_amc(text, skeleton)


def test_load_motion_matches_parse(tmp_path, skeleton, motion):
    path = tmp_path / "clip.amc"
    path.write_text(AMC)
    loaded = load_motion(path, skeleton)
    assert len(loaded) == len(motion)
    for a, b in zip(loaded.postures, motion.postures):
        np.testing.assert_allclose(a.bone_rotations, b.bone_rotations)
        np.testing.assert_allclose(a.bone_translations, b.bone_translations)


@pytest.mark.parametrize("start,end", [(-1, 2), (4, 5), (2, 2), (3, 2), (0, 5)])
def test_slice_rejects_bad_range(motion, start, end):
    with pytest.raises(IndexError):
        motion.slice(start, end)


def test_slice_is_independent(motion):
    part = motion.slice(1, 3)
    assert len(part) == 2
    part.postures[0].bone_rotations[0, 0] = 99.0
    assert motion.postures[1].bone_rotations[0, 0] == 12.0
    assert part.skeleton is not motion.skeleton


def test_copy_is_independent(motion):
    clone = motion.copy()
    clone.postures[0].bone_translations[0, 0] = -50.0
    assert motion.postures[0].bone_translations[0, 0] == 1.0
    assert len(clone) == len(motion)


def test_remove_frames(motion):
    motion.remove(1, 3)
    assert len(motion) == 2
    assert motion.postures[0].bone_rotations[0, 0] == 10.0
    assert motion.postures[1].bone_rotations[0, 0] == 16.0


def test_remove_rejects_reversed_range(motion):
    with pytest.raises(ValueError):
        motion.remove(3, 1)


def test_concatenate_appends_copies(motion):
    joined = motion.copy()
    joined.concatenate(motion)
    assert len(joined) == 2 * len(motion)
    np.testing.assert_allclose(joined.postures[4].bone_rotations, motion.postures[0].bone_rotations)
    assert joined.postures[4] is not motion.postures[0]


def test_forward_kinematics(motion):
    matrices = motion.forward_kinematics(0)
    assert len(matrices) == 3
    root = motion.skeleton.bone(0)
    femur = motion.skeleton.bone("lfemur")
    tibia = motion.skeleton.bone("ltibia")
    np.testing.assert_allclose(root.start_position[:3], [1, 2, 3])
    np.testing.assert_allclose(tibia.start_position, femur.end_position)
    for bone in (femur, tibia):
        assert np.linalg.norm(bone.end_position - bone.start_position) == pytest.approx(bone.length)


def test_transform_moves_first_frame_and_keeps_shape(motion):
    before = [p.bone_translations[0][:3].copy() for p in motion.postures]
    motion.transform([0, 45, 0, 0], [5, 0, -3, 0])
    after = [p.bone_translations[0][:3] for p in motion.postures]
    np.testing.assert_allclose(after[0], [5, 0, -3], atol=1e-9)
    for b, a in zip(before, after):
        offset_before = b - before[0]
        offset_after = a - after[0]
        assert np.linalg.norm(offset_after) == pytest.approx(np.linalg.norm(offset_before))
        assert offset_after[1] == pytest.approx(offset_before[1])


def test_transform_keeps_relative_rotations(motion):
    before = [_matrix(p.bone_rotations[0]) for p in motion.postures]
    motion.transform([0, -70, 0, 0], [0, 0, 0, 0])
    after = [_matrix(p.bone_rotations[0]) for p in motion.postures]
    for b, a in zip(before, after):
        np.testing.assert_allclose(after[0].T @ a, before[0].T @ b, atol=1e-9)


def test_transform_to_own_pose_is_identity(motion):
    reference = motion.copy()
    first = motion.postures[0]
    motion.transform(first.bone_rotations[0].copy(), first.bone_translations[0].copy())
    for a, b in zip(motion.postures, reference.postures):
        np.testing.assert_allclose(_matrix(a.bone_rotations[0]), _matrix(b.bone_rotations[0]), atol=1e-9)
        np.testing.assert_allclose(a.bone_translations, b.bone_translations, atol=1e-9)


def test_transform_pure_yaw(motion):
    motion.postures[0].bone_rotations[0] = [0, 30, 0, 0]
    motion.transform([0, 60, 0, 0], [0, 0, 0, 0])
    np.testing.assert_allclose(_matrix(motion.postures[0].bone_rotations[0]), _matrix([0, 60, 0]), atol=1e-9)


@pytest.mark.parametrize("w", [0.0, 1.0])
def test_blend_endpoints(motion, w):
    a = motion.slice(0, 2)
    b = motion.slice(2, 4)
    result = blend(a, b, [w, w])
    source = a if w == 0.0 else b
    for r, s in zip(result.postures, source.postures):
        for rot_r, rot_s in zip(r.bone_rotations, s.bone_rotations):
            np.testing.assert_allclose(_matrix(rot_r), _matrix(rot_s), atol=1e-9)
        np.testing.assert_allclose(r.bone_translations, s.bone_translations)


def test_blend_midpoint_translation_and_inputs_untouched(motion):
    a = motion.slice(0, 2)
    b = motion.slice(2, 4)
    b_before = b.postures[0].bone_translations.copy()
    result = blend(a, b, [0.5, 0.5])
    expected = (a.postures[0].bone_translations + b_before) / 2
    np.testing.assert_allclose(result.postures[0].bone_translations, expected)
    np.testing.assert_allclose(b.postures[0].bone_translations, b_before)


def test_blend_needs_a_weight_per_frame(motion):
    with pytest.raises(IndexError):
        blend(motion.slice(0, 2), motion.slice(2, 4), [0.5])


def test_blending_window(motion):
    other = motion.copy()
    result = motion.blending(other, [0.0, 1.0], 2)
    assert len(result) == 2
    np.testing.assert_allclose(
        _matrix(result.postures[0].bone_rotations[0]), _matrix(motion.postures[2].bone_rotations[0]), atol=1e-9
    )
    np.testing.assert_allclose(
        _matrix(result.postures[1].bone_rotations[0]), _matrix(other.postures[1].bone_rotations[0]), atol=1e-9
    )
    assert isinstance(result, Motion) and len(motion) == 4