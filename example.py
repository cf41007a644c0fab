import numpy as np

from MSquares.mesh import export_surface_mesh
from MSquares.msquares import Flags, from_grayscale
from MSquares.plotting import plot_mesh
from MSquares.raster import rasterize


def cross(queries):
    q = np.abs(queries - 0.5)
    horizontal = np.maximum(q[:, 0] - 0.4, q[:, 1] - 0.1)
    vertical = np.maximum(q[:, 1] - 0.4, q[:, 0] - 0.1)
    return np.minimum(horizontal, vertical)


raster = rasterize(cross, 128, 128)
# negative values are inside the cross
meshes = from_grayscale(raster, 128, 128, 2, 0.0, Flags.INVERT | Flags.DUAL)
cross_mesh, background_mesh = meshes

plot_mesh(cross_mesh, raster=raster)
export_surface_mesh("cross.vtk", cross_mesh)
meshes.free()
