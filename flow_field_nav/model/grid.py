"""Tile grid holding the walkable/blocked classification of every cell."""

import logging
import numbers
from typing import Iterator, List, Optional, Sequence, Tuple

import numpy as np

from .errors import InvalidGridData

logger = logging.getLogger(__name__)

# Result of a query outside [0, width) x [0, height)
OUT_OF_BOUNDS = None

WALKABLE = 0
WALL = 1


def _is_positive_int(value) -> bool:
    return (isinstance(value, numbers.Integral) and not isinstance(value, bool)
            and value > 0)


class TileGrid:
    """
    Row-major map from cell coordinate to tile code.

    Tile code 0 is walkable, anything else is blocked.
    Coordinate convention: (x, y) for API, [y, x] for array indexing.
    """

    def __init__(self, width: int, height: int,
                 tiles: Optional[Sequence[int]] = None):
        self.width = 0
        self.height = 0
        self.tiles = np.zeros((0, 0), dtype=np.int64)
        if tiles is None:
            if _is_positive_int(width) and _is_positive_int(height):
                tiles = [WALKABLE] * (width * height)
            else:
                tiles = []
        self.load(width, height, tiles)

    @classmethod
    def from_sequence(cls, values: Sequence[int]) -> "TileGrid":
        """Build from a flat ``[width, height, t0, t1, ...]`` sequence."""
        values = list(values)
        if len(values) < 2:
            raise InvalidGridData(
                f"Grid sequence needs width and height, got {len(values)} values")
        return cls(values[0], values[1], values[2:])

    @classmethod
    def from_rows(cls, rows: Sequence[Sequence[int]]) -> "TileGrid":
        """Build from a list of rows, top row first."""
        rows = [list(r) for r in rows]
        if not rows or not rows[0]:
            raise InvalidGridData("Grid rows must not be empty")
        width = len(rows[0])
        if any(len(r) != width for r in rows):
            raise InvalidGridData("Grid rows have differing lengths")
        return cls(width, len(rows), [code for row in rows for code in row])

    def load(self, width: int, height: int, tiles: Sequence[int]) -> None:
        """Replace the held grid data wholesale."""
        if not (_is_positive_int(width) and _is_positive_int(height)):
            raise InvalidGridData(
                f"Grid dimensions must be positive integers, got {width}x{height}")
        try:
            raw = np.asarray(tiles)
        except (TypeError, ValueError) as exc:
            raise InvalidGridData(f"Tile codes must be integers: {exc}") from exc
        if raw.size and raw.dtype.kind not in 'iub' and not (
                raw.dtype.kind == 'f' and np.all(np.mod(raw, 1) == 0)):
            raise InvalidGridData(
                f"Tile codes must be integers, got {raw.dtype} values")
        flat = raw.astype(np.int64).ravel()
        if flat.size != width * height:
            raise InvalidGridData(
                f"Expected {width * height} tile codes for a {width}x{height} "
                f"grid, got {flat.size}")

        self.width = int(width)
        self.height = int(height)
        self.tiles = flat.reshape((self.height, self.width)).copy()
        logger.debug("Loaded %dx%d grid with %d blocked cells",
                     self.width, self.height, int(np.count_nonzero(self.tiles)))

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def get(self, x: int, y: int) -> Optional[int]:
        """Return tile code, or OUT_OF_BOUNDS outside the grid."""
        if not self.in_bounds(x, y):
            return OUT_OF_BOUNDS
        return int(self.tiles[y, x])

    def set(self, x: int, y: int, code: int) -> None:
        """Write tile code; ignored outside the grid."""
        if self.in_bounds(x, y):
            self.tiles[y, x] = code

    def set_if_walkable(self, x: int, y: int, code: int) -> bool:
        """Write only onto a walkable tile. Returns True if the cell was claimed."""
        if self.get(x, y) != WALKABLE:
            return False
        self.tiles[y, x] = code
        return True

    def is_walkable(self, x: int, y: int) -> bool:
        """Check if cell is within bounds and not a wall."""
        return self.get(x, y) == WALKABLE

    @property
    def walls(self) -> np.ndarray:
        """Boolean mask, True = blocked."""
        return self.tiles != WALKABLE

    def add_wall_rectangle(self, x: int, y: int, w: int, h: int,
                           code: int = WALL) -> None:
        """Mark rectangular region as wall."""
        # Clamp to grid boundaries
        x_end = min(x + w, self.width)
        y_end = min(y + h, self.height)
        x = max(0, x)
        y = max(0, y)
        self.tiles[y:y_end, x:x_end] = code

    def add_wall_points(self, coords: List[Tuple[int, int]],
                        code: int = WALL) -> None:
        """Mark specific cells as walls."""
        for x, y in coords:
            self.set(x, y, code)

    def blocked_cells(self) -> Iterator[Tuple[int, int]]:
        """Yield (x, y) of every blocked cell in row-major order."""
        ys, xs = np.nonzero(self.tiles)
        for x, y in zip(xs, ys):
            yield int(x), int(y)

    def format_tiles(self) -> str:
        return format_array(self.tiles)


def format_array(values: np.ndarray) -> str:
    """Render a 2D integer array as fixed-width rows."""
    return "\n".join("".join(f"{int(v):3d}" for v in row) for row in values)
