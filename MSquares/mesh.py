import logging
import os
import pathlib

import gustaf as gus
import numpy as np
import torch as _torch
import vtk

import MSquares

logger = logging.getLogger(MSquares.__name__)

#: Largest vertex index a triangle can hold.
MAX_INDEX = np.iinfo(np.uint16).max


class Mesh:
    """
    Triangle mesh produced by one marching squares sweep.

    The point and triangle buffers are allocated for the worst case before
    the sweep starts; ``npoints`` and ``ntriangles`` record how much of them
    is in use. ``points`` and ``triangles`` are views of the used part, so
    ``mesh.points.ravel()`` is the flat vertex array with stride ``dim`` and
    ``mesh.triangles.ravel()`` the flat uint16 index array with stride 3.
    """

    def __init__(
        self,
        points: np.ndarray,
        npoints: int,
        triangles: np.ndarray,
        ntriangles: int,
        dim: int = 3,
    ):
        assert dim in (2, 3), f"dim must be 2 or 3, got {dim}"
        assert points.ndim == 2 and points.shape[1] == dim
        assert triangles.ndim == 2 and triangles.shape[1] == 3
        assert npoints <= points.shape[0] and ntriangles <= triangles.shape[0]
        self._points = points
        self._triangles = triangles
        self.npoints = npoints
        self.ntriangles = ntriangles
        self.dim = dim

    @classmethod
    def empty(cls, dim: int = 3):
        return cls(
            np.zeros((0, dim), dtype=np.float32),
            0,
            np.zeros((0, 3), dtype=np.uint16),
            0,
            dim=dim,
        )

    @property
    def freed(self) -> bool:
        return self._points is None

    @property
    def points(self) -> np.ndarray:
        if self.freed:
            raise RuntimeError("Mesh storage has already been freed")
        return self._points[: self.npoints]

    @property
    def triangles(self) -> np.ndarray:
        if self.freed:
            raise RuntimeError("Mesh storage has already been freed")
        return self._triangles[: self.ntriangles]

    def release(self):
        """Drops the point and triangle storage."""
        self._points = None
        self._triangles = None
        self.npoints = 0
        self.ntriangles = 0

    def to_gus(self):
        return gus.Faces(
            self.points.astype(np.float64), self.triangles.astype(np.int64)
        )

    def to_torch(self, device="cpu") -> tuple[_torch.Tensor, _torch.Tensor]:
        vertices = _torch.tensor(self.points, dtype=_torch.float32, device=device)
        faces = _torch.tensor(
            self.triangles.astype(np.int64), dtype=_torch.long, device=device
        )
        return vertices, faces

    def __repr__(self):
        if self.freed:
            return "Mesh(freed)"
        return (
            f"Mesh(npoints={self.npoints}, ntriangles={self.ntriangles}, "
            f"dim={self.dim})"
        )


class MeshList:
    """
    Ordered, fixed-size collection of the meshes returned by one extraction.

    The list owns its meshes. :meth:`free` releases all of them, after which
    neither the list nor meshes obtained from it may be used. The list is a
    context manager that frees itself on exit::

        with from_grayscale(data, w, h, 1, 0.5) as meshes:
            mesh = meshes.get_mesh(0)
    """

    def __init__(self, meshes):
        self._meshes = list(meshes)

    def get_mesh(self, n: int) -> Mesh:
        assert 0 <= n < self.get_count(), f"mesh index {n} out of range"
        return self._meshes[n]

    def get_count(self) -> int:
        return len(self._meshes)

    def free(self):
        for mesh in self._meshes:
            mesh.release()
        self._meshes = []

    def __len__(self):
        return self.get_count()

    def __getitem__(self, n: int) -> Mesh:
        return self.get_mesh(n)

    def __iter__(self):
        return iter(self._meshes)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.free()


def get_mesh(meshlist: MeshList, n: int) -> Mesh:
    assert meshlist is not None
    return meshlist.get_mesh(n)


def get_count(meshlist: MeshList) -> int:
    assert meshlist is not None
    return meshlist.get_count()


def free(meshlist: MeshList):
    """Releases every mesh owned by ``meshlist`` and empties it."""
    meshlist.free()


def _export_surface_mesh_vtk(verts, faces, filename):
    """
    verts: (N, 2) or (N, 3) array
    faces: (M, 3) array
    """
    vtk_points = vtk.vtkPoints()
    for v in verts:
        if len(v) == 2:
            vtk_points.InsertNextPoint(float(v[0]), float(v[1]), 0.0)
        else:
            vtk_points.InsertNextPoint([float(c) for c in v])

    vtk_cells = vtk.vtkCellArray()
    for f in faces:
        triangle = vtk.vtkTriangle()
        triangle.GetPointIds().SetId(0, int(f[0]))
        triangle.GetPointIds().SetId(1, int(f[1]))
        triangle.GetPointIds().SetId(2, int(f[2]))
        vtk_cells.InsertNextCell(triangle)

    polydata = vtk.vtkPolyData()
    polydata.SetPoints(vtk_points)
    polydata.SetPolys(vtk_cells)

    writer = vtk.vtkPolyDataWriter()
    writer.SetFileName(str(filename))
    writer.SetInputData(polydata)
    writer.Write()
    logger.info(f"Mesh saved to {filename}")


def export_surface_mesh(
    filename: str | os.PathLike[str],
    mesh: Mesh | gus.Faces,
):
    """
    Writes a triangle mesh to ``filename``.

    Legacy ``.vtk`` files are written with vtk, every other suffix is
    handed to ``gustaf.io.meshio``.
    """
    export_filename = pathlib.Path(filename)
    if not os.path.isdir(export_filename.parent):
        os.makedirs(export_filename.parent)
    ext = export_filename.suffix.lower()
    if isinstance(mesh, Mesh):
        mesh = mesh.to_gus()
    logger.debug(
        f"Exporting mesh with {len(mesh.faces)} triangles, "
        f"{len(mesh.vertices)} vertices to {export_filename}"
    )
    match ext:
        case ".vtk":
            _export_surface_mesh_vtk(mesh.vertices, mesh.faces, export_filename)
        case _:
            gus.io.meshio.export(export_filename, mesh)
