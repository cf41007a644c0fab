"""
Marching Squares - Raster to Triangle Mesh Conversion
=====================================================

This module implements Marching Squares for turning rasterized fields into
triangle meshes. Grayscale rasters are classified against a threshold,
8-bit color rasters by exact pixel color.

The module uses precomputed lookup tables to handle all 16 possible
Marching Squares configurations, and shares sample points between
neighbouring cells so the extracted meshes are watertight.
"""

from MSquares.mesh import free, get_count, get_mesh
from MSquares.msquares.msquares import (
    Flags,
    MarchingSquares,
    from_color,
    from_colors,
    from_grayscale,
    from_levels,
)

__all__ = [
    "Flags",
    "MarchingSquares",
    "from_grayscale",
    "from_levels",
    "from_color",
    "from_colors",
    "get_mesh",
    "get_count",
    "free",
]
