"""
MSquares - Marching Squares Triangulation of Raster Fields
==========================================================

MSquares converts rasterized scalar fields (grayscale images, sampled
signed distance functions) and 8-bit color images into triangle meshes.
Each raster is partitioned into square cells, the four corners of every
cell are classified as inside or outside, and a lookup table turns every
classification into a small triangle fan. Sample points shared between
neighbouring cells are emitted only once, so the resulting mesh is
watertight.

Key Components
--------------

Mesh Extraction
    - ``MSquares.msquares``: The marching squares engine and its entry points
      (``from_grayscale``, ``from_levels``, ``from_color``, ``from_colors``)
    - ``MSquares.msquares.tables``: The 16-case cell topology tables

Mesh Handling
    - ``MSquares.mesh``: ``Mesh`` and ``MeshList`` containers, conversion to
      gustaf and torch, and file export

Utilities
    - ``MSquares.raster``: Raster input handling and sampling of implicit
      functions
    - ``MSquares.plotting``: Visualization tools
    - ``MSquares.utils``: General utility functions

Examples
--------
Extract the region above a threshold from a grayscale raster::

    import numpy as np
    from MSquares.msquares import from_grayscale

    data = np.random.rand(64, 64).astype(np.float32)
    with from_grayscale(data, 64, 64, cellsize=4, threshold=0.5) as meshes:
        mesh = meshes.get_mesh(0)
        print(mesh.npoints, mesh.ntriangles)

Mesh the interior of a signed distance function::

    from MSquares.raster import rasterize
    from MSquares.msquares import from_grayscale, Flags

    def circle(queries):
        return np.linalg.norm(queries - 0.5, axis=1) - 0.3

    raster = rasterize(circle, 128, 128, bounds=[[0, 0], [1, 1]])
    meshes = from_grayscale(raster, 128, 128, 2, 0.0, Flags.INVERT)
"""

import MSquares.utils

MSquares.utils.configure_logging()

__version__ = "1.0.0"
__author__ = "Michael Kofler"
