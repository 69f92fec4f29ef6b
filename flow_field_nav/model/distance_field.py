"""Step-distance heatmap built outward from a goal cell."""

import logging
from typing import List, Optional, Tuple

import numpy as np

from .errors import InvalidGoalCell
from .grid import OUT_OF_BOUNDS, TileGrid, format_array

logger = logging.getLogger(__name__)

UNREACHABLE = -1

# Up, right, down, left
NEIGHBOR_OFFSETS = [(0, -1), (1, 0), (0, 1), (-1, 0)]


class DistanceField:
    """
    Shortest 4-connected step count from every cell to a single goal.

    The goal holds 0; walls and walkable cells with no path to the
    goal hold UNREACHABLE. A field is tied to the grid state it was
    built from and must be rebuilt after any grid edit.
    """

    def __init__(self, width: int, height: int, distances: np.ndarray,
                 goal: Tuple[int, int]):
        self.width = width
        self.height = height
        self.distances = distances
        self.goal = goal

    @classmethod
    def build(cls, grid: TileGrid, goal: Tuple[int, int]) -> "DistanceField":
        """
        Expand breadth-first from ``goal`` one layer per pass.

        Cells are claimed on a scratch grid where 0 means unvisited and
        -1 marks a wall. The goal is seeded with 1 so that a claimed
        cell is never 0; every cell in layer ``i`` claims its unvisited
        neighbours with ``i + 1``. Stored values are shifted down by one
        at the end.
        """
        gx, gy = goal
        tile = grid.get(gx, gy)
        if tile is OUT_OF_BOUNDS:
            raise InvalidGoalCell(gx, gy, "outside the grid")
        if tile != 0:
            raise InvalidGoalCell(gx, gy, f"blocked tile (code {tile})")

        scratch = TileGrid(grid.width, grid.height,
                           np.where(grid.walls, -1, 0))
        scratch.set(gx, gy, 1)

        layer: List[Tuple[int, int]] = [(gx, gy)]
        step = 1
        while layer:
            claimed = []
            for x, y in layer:
                for dx, dy in NEIGHBOR_OFFSETS:
                    if scratch.set_if_walkable(x + dx, y + dy, step + 1):
                        claimed.append((x + dx, y + dy))
            layer = claimed
            step += 1

        distances = scratch.tiles - 1
        distances[distances < 0] = UNREACHABLE

        field = cls(grid.width, grid.height, distances, (gx, gy))
        logger.debug("Built distance field to goal (%d, %d): %d reachable cells, "
                     "max distance %d", gx, gy, field.reachable_count,
                     field.max_distance)
        return field

    def at(self, x: int, y: int) -> Optional[int]:
        """Distance at cell, UNREACHABLE, or OUT_OF_BOUNDS outside the grid."""
        if not (0 <= x < self.width and 0 <= y < self.height):
            return OUT_OF_BOUNDS
        return int(self.distances[y, x])

    def is_reachable(self, x: int, y: int) -> bool:
        value = self.at(x, y)
        return value is not OUT_OF_BOUNDS and value != UNREACHABLE

    @property
    def reachable_count(self) -> int:
        return int(np.count_nonzero(self.distances != UNREACHABLE))

    @property
    def max_distance(self) -> int:
        return int(self.distances.max())

    def format_tiles(self) -> str:
        return format_array(self.distances)
