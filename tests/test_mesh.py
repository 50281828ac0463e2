import numpy as np
import pytest

from mocapgraph.mesh import (
    CYLINDER_SECTORS,
    SPHERE_SECTORS,
    SPHERE_STACKS,
    Mesh,
    SphereMesh,
    box_mesh,
    cylinder_mesh,
    plane_mesh,
    sphere_mesh,
)


def test_default_sphere_index_counts_match_source_constants():
    mesh = sphere_mesh()
    assert mesh.index_count == 6 * SPHERE_STACKS * SPHERE_SECTORS - 6 * SPHERE_STACKS
    assert len(mesh.wire_indices) == 4 * SPHERE_STACKS * SPHERE_SECTORS - 2 * SPHERE_STACKS


def test_sphere_vertex_grid_size():
    mesh = sphere_mesh(4, 6)
    assert mesh.vertex_count == 5 * 7
    assert mesh.stride == 8


def test_sphere_positions_lie_on_radius():
    mesh = sphere_mesh(8, 12, 2.0)
    norms = np.linalg.norm(mesh.positions, axis=1)
    assert np.allclose(norms, 2.0, atol=1e-5)
    assert np.allclose(np.linalg.norm(mesh.normals, axis=1), 1.0, atol=1e-5)


def test_sphere_starts_at_north_pole_and_ends_at_south_pole():
    mesh = sphere_mesh(6, 6)
    assert np.allclose(mesh.positions[0], [0.0, 0.0, 1.0], atol=1e-6)
    assert np.allclose(mesh.positions[-1], [0.0, 0.0, -1.0], atol=1e-6)


def test_sphere_indices_in_range_and_triangles():
    mesh = sphere_mesh(5, 7)
    assert mesh.index_count % 3 == 0
    assert len(mesh.wire_indices) % 2 == 0
    assert int(mesh.indices.max()) < mesh.vertex_count
    assert int(mesh.wire_indices.max()) < mesh.vertex_count


def test_sphere_tex_coords_in_unit_square():
    tex = sphere_mesh(3, 4).tex_coords
    assert tex.min() >= 0.0
    assert tex.max() <= 1.0


@pytest.mark.parametrize("stacks,sectors,radius", [(0, 4, 1.0), (4, 0, 1.0), (4, 4, 0.0)])
def test_sphere_rejects_bad_parameters(stacks, sectors, radius):
    with pytest.raises(ValueError):
        sphere_mesh(stacks, sectors, radius)


def test_cylinder_counts():
    mesh = cylinder_mesh(10, 2.0, 0.5)
    assert mesh.vertex_count == 4 * (10 + 1)
    assert mesh.index_count == 12 * 10
    assert int(mesh.indices.max()) < mesh.vertex_count


def test_default_cylinder_sectors():
    mesh = cylinder_mesh()
    assert mesh.index_count == 12 * CYLINDER_SECTORS


def test_cylinder_side_vertices_on_radius_and_heights():
    mesh = cylinder_mesh(8, 2.0, 0.5)
    side = mesh.positions[: 2 * 9]
    assert np.allclose(np.hypot(side[:, 0], side[:, 1]), 0.5, atol=1e-6)
    assert set(np.round(mesh.positions[:, 2], 6)) == {-1.0, 1.0}


def test_cylinder_cap_normals_point_outwards():
    mesh = cylinder_mesh(6, 1.0, 0.1)
    caps = mesh.vertices[2 * 7:]
    z = caps[:, 2]
    nz = caps[:, 5]
    assert np.all(np.sign(nz) == np.sign(z))
    assert np.allclose(np.abs(nz), 1.0)


def test_cylinder_rejects_bad_parameters():
    with pytest.raises(ValueError):
        cylinder_mesh(0)
    with pytest.raises(ValueError):
        cylinder_mesh(8, -1.0, 0.1)


def test_box_corners_and_indices():
    mesh = box_mesh()
    assert mesh.vertex_count == 8
    assert mesh.stride == 3
    assert mesh.index_count == 36
    assert np.array_equal(np.abs(mesh.positions), np.ones((8, 3), dtype=np.float32))
    assert sorted(set(mesh.indices.tolist())) == list(range(8))


def test_box_has_no_normals():
    with pytest.raises(ValueError):
        box_mesh().normals


def test_plane_is_flat_and_faces_up():
    mesh = plane_mesh()
    assert mesh.vertex_count == 4
    assert mesh.indices is None
    assert mesh.index_count == 0
    assert np.allclose(mesh.positions[:, 1], 0.0)
    assert np.allclose(mesh.normals, [[0.0, 1.0, 0.0]] * 4)
    assert np.allclose(np.abs(mesh.positions[:, [0, 2]]), 30.0)


def test_mesh_rejects_out_of_range_index():
    with pytest.raises(ValueError):
        Mesh([[0.0, 0.0, 0.0]], [0, 1, 0])


def test_sphere_mesh_rejects_out_of_range_wire_index():
    with pytest.raises(ValueError):
        SphereMesh([[0.0, 0.0, 0.0]], [0], [0, 3])


def test_mesh_rejects_flat_vertex_list():
    with pytest.raises(ValueError):
        Mesh([0.0, 1.0, 2.0])