"""
Marching Squares Implementation
===============================

This module contains the marching squares sweep and the public entry
points that build occupancy rasters from grayscale or color data.

The sweep visits cells in raster order. For every cell it looks up the
cell's case code in the topology tables, emits the sample points the code
needs and the triangles connecting them. Points on the west and raster-north
side of a cell are taken over from the neighbour that emitted them already,
so every location on the grid becomes exactly one vertex.
"""

import enum
import logging

import numpy as np

import MSquares
from MSquares.mesh import MAX_INDEX, Mesh, MeshList
from MSquares.msquares.tables import (
    NORTH_NEIGHBOR,
    SAMPLE_OFFSETS,
    WEST_NEIGHBOR,
    CellTopologyTables,
    get_tables,
)
from MSquares.raster import as_numpy, color_raster, grayscale_raster

logger = logging.getLogger(MSquares.__name__)

__all__ = [
    "Flags",
    "MarchingSquares",
    "from_grayscale",
    "from_levels",
    "from_color",
    "from_colors",
]


class Flags(enum.IntFlag):
    """Options of the extraction entry points.

    INVERT
        Treat samples that are not above the threshold (or not equal to the
        color) as inside.
    DUAL
        Append a second mesh covering the complementary region.
    WELD, CONNECT, SIMPLIFY
        Post-processing passes, not supported.
    HEIGHTS
        Use the raster value of every vertex as its z coordinate.
    """

    INVERT = 1 << 0
    DUAL = 1 << 1
    WELD = 1 << 2
    CONNECT = 1 << 3
    SIMPLIFY = 1 << 4
    HEIGHTS = 1 << 5


_UNSUPPORTED_FLAGS = Flags.WELD | Flags.CONNECT | Flags.SIMPLIFY


class MarchingSquares:
    """
    Marching squares sweep over a fixed raster size.

    Args:
        width (int): Raster width in pixels, a multiple of ``cellsize``.
        height (int): Raster height in pixels, a multiple of ``cellsize``.
        cellsize (int): Edge length of one cell in pixels.
        tables (CellTopologyTables, optional): Built topology tables.
            Defaults to the shared tables from :func:`get_tables`.

    Attributes:
        ncols (int): Number of cell columns.
        nrows (int): Number of cell rows.
        normalized_cellsize (float): Edge length of one cell in mesh
            coordinates, where the longer raster side spans [0, 1].
    """

    def __init__(
        self,
        width: int,
        height: int,
        cellsize: int,
        tables: CellTopologyTables | None = None,
    ):
        assert cellsize >= 1, f"cellsize must be at least 1, got {cellsize}"
        assert width > 0 and width % cellsize == 0, (
            f"width {width} must be a positive multiple of cellsize {cellsize}"
        )
        assert height > 0 and height % cellsize == 0, (
            f"height {height} must be a positive multiple of cellsize {cellsize}"
        )
        if tables is None:
            tables = get_tables()
        assert tables.built, "topology tables have not been built"

        self.width = width
        self.height = height
        self.cellsize = cellsize
        self.tables = tables
        self.ncols = width // cellsize
        self.nrows = height // cellsize
        self.normalized_cellsize = cellsize / max(width, height)

    @property
    def max_points(self) -> int:
        return self.ncols * self.nrows * self.tables.max_points_per_cell

    @property
    def max_triangles(self) -> int:
        return self.ncols * self.nrows * self.tables.max_triangles_per_cell

    def _pixel_columns(self):
        cols = np.arange(self.ncols + 1) * self.cellsize
        return np.minimum(cols, self.width - 1)

    def _pixel_rows(self):
        rows = np.arange(self.nrows + 1) * self.cellsize
        return np.minimum(rows, self.height - 1)

    def classify(self, inside: np.ndarray) -> np.ndarray:
        """
        Computes the case code of every cell.

        Corners are read from the pixel at the cell's top-left, with the
        last row and column clamped to the raster.

        Args:
            inside (np.ndarray): Boolean raster of shape (height, width).

        Returns:
            np.ndarray: Codes of shape (nrows, ncols).
        """
        assert inside.shape == (self.height, self.width), (
            f"occupancy shape {inside.shape} does not match "
            f"({self.height}, {self.width})"
        )
        corners = inside[np.ix_(self._pixel_rows(), self._pixel_columns())]
        corners = corners.astype(np.uint8)
        south_west = corners[1:, :-1]
        south_east = corners[1:, 1:]
        north_west = corners[:-1, :-1]
        north_east = corners[:-1, 1:]
        return south_west | (south_east << 1) | (north_west << 2) | (north_east << 3)

    @staticmethod
    def _shared_index(point, west, north):
        if point in WEST_NEIGHBOR and WEST_NEIGHBOR[point] in west:
            return west[WEST_NEIGHBOR[point]]
        if point in NORTH_NEIGHBOR and NORTH_NEIGHBOR[point] in north:
            return north[NORTH_NEIGHBOR[point]]
        return None

    def march(self, inside: np.ndarray, heights: np.ndarray | None = None) -> Mesh:
        """
        Sweeps the grid and returns the triangulated inside region.

        Args:
            inside (np.ndarray): Boolean raster of shape (height, width).
            heights (np.ndarray, optional): Raster of shape (height, width)
                whose values become the z coordinates. Without it every
                z coordinate is 0.

        Returns:
            Mesh: Mesh with ``dim == 3``.
        """
        codes = self.classify(inside)
        if heights is not None:
            assert heights.shape == inside.shape

        logger.debug(
            f"Marching {self.ncols}x{self.nrows} cells of {self.cellsize} pixels"
        )
        maxpts = self.max_points
        maxtris = self.max_triangles
        points = np.zeros((maxpts, 3), dtype=np.float32)
        triangles = np.zeros((maxtris, 3), dtype=np.uint16)
        npts = 0
        ntris = 0

        s = self.normalized_cellsize
        offsets_x = [ox for ox, _ in SAMPLE_OFFSETS]
        offsets_y = [oy for _, oy in SAMPLE_OFFSETS]
        north_row = [{}] * self.ncols
        for row in range(self.nrows):
            current_row = []
            west = {}
            for col in range(self.ncols):
                topology = self.tables[int(codes[row, col])]
                indices = {}
                for point in topology.points:
                    index = self._shared_index(point, west, north_row[col])
                    if index is None:
                        if npts > MAX_INDEX:
                            raise OverflowError(
                                f"Mesh needs more than {MAX_INDEX + 1} vertices, "
                                "use a larger cellsize"
                            )
                        x = col + offsets_x[point]
                        y = row + offsets_y[point]
                        z = 0.0
                        if heights is not None:
                            px = min(int(x * self.cellsize), self.width - 1)
                            py = min(int(y * self.cellsize), self.height - 1)
                            z = heights[py, px]
                        points[npts] = (x * s, y * s, z)
                        index = npts
                        npts += 1
                    indices[point] = index

                # reversed to make the triangles counter-clockwise
                for a, b, c in topology.triangles:
                    triangles[ntris] = (indices[c], indices[b], indices[a])
                    ntris += 1

                current_row.append(indices)
                west = indices
            north_row = current_row

        assert npts <= maxpts, f"{npts} points exceed the bound of {maxpts}"
        assert ntris <= maxtris, f"{ntris} triangles exceed the bound of {maxtris}"
        logger.debug(f"Extracted {npts} points and {ntris} triangles")
        return Mesh(points, npts, triangles, ntris, dim=3)


def _check_flags(flags) -> Flags:
    flags = Flags(flags)
    unsupported = flags & _UNSUPPORTED_FLAGS
    if unsupported:
        raise NotImplementedError(f"Flags {unsupported!r} are not supported")
    return flags


def from_grayscale(
    data,
    width: int,
    height: int,
    cellsize: int,
    threshold: float,
    flags: int = 0,
    tables: CellTopologyTables | None = None,
) -> MeshList:
    """
    Triangulates the region of a grayscale raster above ``threshold``.

    Args:
        data (array-like): ``width * height`` float samples in raster order,
            flat or shaped (height, width). numpy arrays and torch tensors
            are accepted.
        width (int): Raster width, a multiple of ``cellsize``.
        height (int): Raster height, a multiple of ``cellsize``.
        cellsize (int): Edge length of one cell in pixels.
        threshold (float): A sample is inside if its value is strictly
            greater than the threshold.
        flags (Flags or int): ``INVERT``, ``DUAL`` and ``HEIGHTS``.
        tables (CellTopologyTables, optional): Tables to use instead of the
            shared ones.

    Returns:
        MeshList: One mesh, or two with ``DUAL`` (the second covering the
        complementary region).

    Example:
        >>> meshes = from_grayscale([1.0, 1.0, 1.0, 0.0], 2, 2, 2, 0.5)
        >>> meshes.get_mesh(0).ntriangles
        3
    """
    flags = _check_flags(flags)
    engine = MarchingSquares(width, height, cellsize, tables)
    raster = grayscale_raster(data, width, height)

    inside = raster > threshold
    if flags & Flags.INVERT:
        inside = ~inside
    heights = raster if flags & Flags.HEIGHTS else None

    meshes = [engine.march(inside, heights)]
    if flags & Flags.DUAL:
        meshes.append(engine.march(~inside, heights))
    return MeshList(meshes)


def from_levels(
    data,
    width: int,
    height: int,
    cellsize: int,
    thresholds,
    flags: int = 0,
    tables: CellTopologyTables | None = None,
) -> MeshList:
    """
    Triangulates the bands between consecutive thresholds.

    Mesh ``i`` covers the samples with ``thresholds[i] < v <= thresholds[i+1]``;
    the last mesh covers everything above the last threshold.

    Args:
        thresholds (sequence of float): Strictly increasing thresholds.
        flags (Flags or int): ``INVERT`` (applied per band) and ``HEIGHTS``.

    Raises:
        ValueError: If thresholds are empty or not strictly increasing, or
            if ``DUAL`` is requested.
    """
    flags = _check_flags(flags)
    if flags & Flags.DUAL:
        raise ValueError("DUAL is only available for single threshold extraction")
    thresholds = as_numpy(thresholds).astype(np.float64).reshape(-1)
    if thresholds.shape[0] == 0:
        raise ValueError("At least one threshold is required")
    if np.any(np.diff(thresholds) <= 0):
        raise ValueError(f"Thresholds must be strictly increasing, got {thresholds}")

    engine = MarchingSquares(width, height, cellsize, tables)
    raster = grayscale_raster(data, width, height)
    heights = raster if flags & Flags.HEIGHTS else None

    meshes = []
    for i, lower in enumerate(thresholds):
        inside = raster > lower
        if i + 1 < thresholds.shape[0]:
            inside &= raster <= thresholds[i + 1]
        if flags & Flags.INVERT:
            inside = ~inside
        meshes.append(engine.march(inside, heights))
    return MeshList(meshes)


def _color_channels(color, bpp: int) -> np.ndarray:
    """Splits a packed color (first channel most significant) into channels."""
    if isinstance(color, (int, np.integer)):
        color = int(color)
        if not 0 <= color < 256**bpp:
            raise ValueError(f"Color {color:#x} does not fit into {bpp} bytes")
        channels = [(color >> (8 * (bpp - 1 - i))) & 0xFF for i in range(bpp)]
    else:
        channels = [int(c) for c in color]
        if len(channels) != bpp:
            raise ValueError(f"Color needs {bpp} channels, got {len(channels)}")
        if any(not 0 <= c < 256 for c in channels):
            raise ValueError(f"Color channels must be in [0, 255], got {channels}")
    return np.array(channels, dtype=np.uint8)


def from_color(
    data,
    width: int,
    height: int,
    cellsize: int,
    color,
    bpp: int,
    flags: int = 0,
    tables: CellTopologyTables | None = None,
) -> MeshList:
    """
    Triangulates the pixels of an 8-bit image that have exactly ``color``.

    Args:
        data (array-like): uint8 pixels in raster order, ``bpp`` bytes each
            (r8, rg16, rgb24 or rgba32).
        color (int or sequence of int): Packed color, first channel in the
            most significant byte, or one value per channel.
        bpp (int): Bytes per pixel, 1 to 4.
        flags (Flags or int): ``INVERT`` and ``DUAL``.

    Raises:
        ValueError: For invalid ``bpp`` or color values, non-uint8 data,
            or the ``HEIGHTS`` flag.
    """
    return _from_colors(data, width, height, cellsize, [color], bpp, flags, tables)


def from_colors(
    data,
    width: int,
    height: int,
    cellsize: int,
    colors,
    bpp: int,
    flags: int = 0,
    tables: CellTopologyTables | None = None,
) -> MeshList:
    """
    Like :func:`from_color`, producing one mesh per entry of ``colors``.

    ``DUAL`` is not available here.
    """
    flags = _check_flags(flags)
    if flags & Flags.DUAL:
        raise ValueError("DUAL is only available for single color extraction")
    return _from_colors(data, width, height, cellsize, colors, bpp, flags, tables)


def _from_colors(data, width, height, cellsize, colors, bpp, flags, tables):
    flags = _check_flags(flags)
    if flags & Flags.HEIGHTS:
        raise ValueError("HEIGHTS requires a grayscale raster")
    engine = MarchingSquares(width, height, cellsize, tables)
    raster = color_raster(data, width, height, bpp)

    meshes = []
    for color in colors:
        inside = np.all(raster == _color_channels(color, bpp), axis=-1)
        if flags & Flags.INVERT:
            inside = ~inside
        meshes.append(engine.march(inside))
        if flags & Flags.DUAL:
            meshes.append(engine.march(~inside))
    return MeshList(meshes)
