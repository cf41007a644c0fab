import gustaf as gus
import numpy as np
import pytest
import torch

from MSquares.mesh import Mesh, MeshList, free, get_count, get_mesh
from MSquares.msquares import from_grayscale


@pytest.fixture
def meshes():
    data = np.zeros((8, 8), dtype=np.float32)
    data[2:6, 2:6] = 1.0
    return from_grayscale(data, 8, 8, 2, 0.5)


def test_get_mesh_and_count(meshes):
    assert get_count(meshes) == 1
    assert len(meshes) == 1
    mesh = get_mesh(meshes, 0)
    assert mesh is meshes[0]
    assert list(meshes) == [mesh]


@pytest.mark.parametrize("index", [1, -1])
def test_get_mesh_out_of_range(meshes, index):
    with pytest.raises(AssertionError):
        get_mesh(meshes, index)


def test_buffers_are_trimmed_logically(meshes):
    mesh = meshes.get_mesh(0)
    # worst case is six points and three triangles per cell
    assert mesh._points.shape == (16 * 6, 3)
    assert mesh._triangles.shape == (16 * 3, 3)
    assert np.shares_memory(mesh.points, mesh._points)
    assert mesh.points.shape == (mesh.npoints, 3)
    assert mesh.triangles.shape == (mesh.ntriangles, 3)


def test_flat_buffers(meshes):
    mesh = meshes.get_mesh(0)
    flat_points = mesh.points.ravel()
    flat_triangles = mesh.triangles.ravel()
    assert flat_points.dtype == np.float32
    assert flat_points.shape == (mesh.npoints * mesh.dim,)
    assert flat_triangles.dtype == np.uint16
    assert flat_triangles.shape == (mesh.ntriangles * 3,)


def test_free(meshes):
    mesh = meshes.get_mesh(0)
    free(meshes)
    assert get_count(meshes) == 0
    assert mesh.freed
    assert mesh.npoints == 0
    with pytest.raises(RuntimeError):
        mesh.points
    with pytest.raises(AssertionError):
        get_mesh(meshes, 0)


def test_context_manager_frees():
    with from_grayscale(np.ones(4), 2, 2, 1, 0.5) as meshes:
        mesh = meshes.get_mesh(0)
        assert mesh.ntriangles == 8
    assert mesh.freed
    assert repr(mesh) == "Mesh(freed)"


def test_empty_mesh():
    mesh = Mesh.empty(dim=2)
    assert mesh.points.shape == (0, 2)
    assert MeshList([mesh]).get_count() == 1


def test_to_gus(meshes):
    mesh = meshes.get_mesh(0)
    faces = mesh.to_gus()
    assert isinstance(faces, gus.Faces)
    assert faces.vertices.shape == (mesh.npoints, 3)
    np.testing.assert_array_equal(faces.faces, mesh.triangles)


def test_to_torch(meshes):
    mesh = meshes.get_mesh(0)
    vertices, faces = mesh.to_torch()
    assert vertices.dtype == torch.float32
    assert faces.dtype == torch.long
    assert faces.shape == (mesh.ntriangles, 3)
    torch.testing.assert_close(vertices, torch.from_numpy(mesh.points.copy()))


if __name__ == "__main__":
    test_context_manager_frees()
    test_empty_mesh()
