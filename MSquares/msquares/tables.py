"""
Cell Topology Tables
====================

Lookup tables for the 16 Marching Squares configurations.

Every cell carries eight candidate sample points on its boundary, laid out
counter-clockwise: the four corners at the even ids and the four edge
midpoints at the odd ids::

    (6) ─ 5 ─ (4)        raster north (earlier raster row)
     |         |
     7         3
     |         |
    (0) ─ 1 ─ (2)        raster south (later raster row)

A cell's case code is built from its corners as
``sw | se << 1 | nw << 2 | ne << 3``, where each term is 1 if that corner is
inside. For every code the table lists the triangles that cover the inside
part of the cell; the points of a code are the ids those triangles use, in
order of first appearance.
"""

import logging
import threading
from dataclasses import dataclass

import MSquares

logger = logging.getLogger(MSquares.__name__)

__all__ = [
    "CODE_TABLE",
    "NUM_CODES",
    "NUM_SAMPLE_POINTS",
    "SAMPLE_OFFSETS",
    "WEST_NEIGHBOR",
    "NORTH_NEIGHBOR",
    "CellTopology",
    "CellTopologyTables",
    "get_tables",
]

NUM_CODES = 16
NUM_SAMPLE_POINTS = 8

# code (hex), number of triangles, then the point ids of every triangle
CODE_TABLE = """
0 0
1 1 0 1 7
2 1 1 2 3
3 2 0 2 3 3 7 0
4 1 7 5 6
5 2 0 1 5 5 6 0
6 2 1 2 3 7 5 6
7 3 0 2 3 0 3 5 0 5 6
8 1 3 4 5
9 2 0 1 7 3 4 5
a 2 1 2 4 4 5 1
b 3 0 2 4 0 4 5 0 5 7
c 2 7 3 4 4 6 7
d 3 0 1 3 0 3 4 0 4 6
e 3 1 2 4 1 4 6 1 6 7
f 2 0 2 4 4 6 0
"""

#: Position of every sample point inside its cell, in units of one cell.
#: The y offset grows towards the later raster row.
SAMPLE_OFFSETS = (
    (0.0, 1.0),
    (0.5, 1.0),
    (1.0, 1.0),
    (1.0, 0.5),
    (1.0, 0.0),
    (0.5, 0.0),
    (0.0, 0.0),
    (0.0, 0.5),
)

#: Points on the west side of a cell, mapped to the id of the same location
#: in the cell to the west.
WEST_NEIGHBOR = {0: 2, 7: 3, 6: 4}

#: Points on the raster-north side of a cell, mapped to the id of the same
#: location in the cell of the previous raster row.
NORTH_NEIGHBOR = {6: 0, 5: 1, 4: 2}


@dataclass(frozen=True)
class CellTopology:
    """Sample points and triangle fan for one case code.

    Attributes:
        code (int): Case code in ``range(16)``.
        points (tuple[int, ...]): Sample point ids required by this code.
        triangles (tuple[tuple[int, int, int], ...]): Triangles as point id
            triples, in the orientation they were authored in.
    """

    code: int
    points: tuple
    triangles: tuple

    def __post_init__(self):
        referenced = {p for triangle in self.triangles for p in triangle}
        assert referenced <= set(
            self.points
        ), f"code {self.code}: triangles reference undeclared points"
        assert len(self.points) < NUM_SAMPLE_POINTS


def _parse_line(line: str) -> CellTopology:
    tokens = line.split()
    code = int(tokens[0], 16)
    ntris = int(tokens[1])
    ids = [int(t) for t in tokens[2:]]
    assert len(ids) == 3 * ntris, f"code {code}: expected {3 * ntris} point ids"
    assert all(0 <= i < NUM_SAMPLE_POINTS for i in ids), f"code {code}: bad id"

    triangles = tuple(tuple(ids[j : j + 3]) for j in range(0, len(ids), 3))
    points = []
    for i in ids:
        if i not in points:
            points.append(i)
    return CellTopology(code=code, points=tuple(points), triangles=triangles)


class CellTopologyTables:
    """
    The parsed case table, one :class:`CellTopology` per code.

    The tables are constants; :func:`get_tables` hands out one shared,
    already built instance. Building a private instance is only needed to
    pass a table explicitly into :class:`MSquares.msquares.MarchingSquares`.

    Examples
    --------
    >>> tables = CellTopologyTables()
    >>> tables.build()
    >>> tables[15].triangles
    ((0, 2, 4), (4, 6, 0))
    """

    def __init__(self, code_table: str = CODE_TABLE):
        self._code_table = code_table
        self._entries = None

    @property
    def built(self) -> bool:
        return self._entries is not None

    def build(self):
        """Parse the case table. Calling it on a built table does nothing."""
        if self.built:
            return
        lines = [line for line in self._code_table.strip().splitlines() if line]
        entries = tuple(_parse_line(line) for line in lines)
        assert len(entries) == NUM_CODES, f"expected {NUM_CODES} codes"
        for expected, entry in enumerate(entries):
            assert entry.code == expected, f"code {entry.code} out of order"
        assert not entries[0].points, "code 0 must not produce geometry"
        assert entries[15].points == (0, 2, 4, 6), "code 15 must cover the cell"
        self._entries = entries
        logger.debug("Built marching squares topology tables")

    def release(self):
        """Drop the parsed entries; :meth:`build` parses them again."""
        self._entries = None

    def entry(self, code: int) -> CellTopology:
        assert self.built, "topology tables have not been built"
        assert 0 <= code < NUM_CODES, f"invalid case code {code}"
        return self._entries[code]

    def __getitem__(self, code: int) -> CellTopology:
        return self.entry(code)

    def __iter__(self):
        assert self.built, "topology tables have not been built"
        return iter(self._entries)

    def __len__(self):
        return NUM_CODES if self.built else 0

    @property
    def max_triangles_per_cell(self) -> int:
        return max(len(entry.triangles) for entry in self)

    @property
    def max_points_per_cell(self) -> int:
        return max(len(entry.points) for entry in self)


_shared_tables = None
_shared_tables_lock = threading.Lock()


def get_tables() -> CellTopologyTables:
    """Return the process-wide topology tables, building them on first use."""
    global _shared_tables
    if _shared_tables is None:
        with _shared_tables_lock:
            if _shared_tables is None:
                tables = CellTopologyTables()
                tables.build()
                _shared_tables = tables
    return _shared_tables
