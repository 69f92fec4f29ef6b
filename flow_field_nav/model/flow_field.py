"""Steering vectors derived from the local gradient of a distance field."""

import logging
from typing import Iterator, Optional, Tuple

import numpy as np

from .distance_field import UNREACHABLE, DistanceField
from .grid import OUT_OF_BOUNDS
from .vector import ZERO, Vec2

logger = logging.getLogger(__name__)

# Order in which neighbours are read: up, down, left, right
UNIT_TOWARD = (Vec2(0.0, -1.0), Vec2(0.0, 1.0), Vec2(-1.0, 0.0), Vec2(1.0, 0.0))


def _is_sentinel(value: Optional[int]) -> bool:
    return value is OUT_OF_BOUNDS or value == UNREACHABLE


def _corner_push(field: DistanceField, x: int, y: int,
                 dx: int, dy: int) -> int:
    """
    Flat-axis component that keeps a straight move off walls and corners.

    (dx, dy) is the unit direction of travel. If the neighbour straight
    ahead is a sentinel, the gradient only points there because that
    neighbour was filled in with the cell's own distance; both flat
    neighbours are then one step closer, and the push goes to the positive
    side (down or right). Otherwise the two diagonals one step ahead are
    probed; when exactly one is a sentinel, push one step away from it,
    unless the neighbour on that side is a sentinel as well.
    """
    if _is_sentinel(field.at(x + dx, y + dy)):
        return 1
    # Positive direction of the flat axis
    px, py = (0, 1) if dx else (1, 0)
    side_a = _is_sentinel(field.at(x + dx + px, y + dy + py))
    side_b = _is_sentinel(field.at(x + dx - px, y + dy - py))
    if side_a == side_b:
        return 0
    away = -1 if side_a else 1
    if _is_sentinel(field.at(x + away * px, y + away * py)):
        return 0
    return away


def steering_vector(field: DistanceField, x: int, y: int) -> Vec2:
    """Unnormalised direction of travel out of cell (x, y)."""
    t = field.at(x, y)
    if t is OUT_OF_BOUNDS or t <= 0:
        return ZERO

    neighbours = [
        field.at(x, y - 1),
        field.at(x, y + 1),
        field.at(x - 1, y),
        field.at(x + 1, y),
    ]

    if t == 1:
        for value, toward in zip(neighbours, UNIT_TOWARD):
            if value == 0:
                return toward

    up, down, left, right = [t if _is_sentinel(v) else v for v in neighbours]
    xd = left - right
    yd = up - down

    if xd and not yd:
        yd = _corner_push(field, x, y, 1 if xd > 0 else -1, 0)
    elif yd and not xd:
        xd = _corner_push(field, x, y, 0, 1 if yd > 0 else -1)

    if not xd and not yd:
        # Flat spot: fall downward when possible, else left
        if not _is_sentinel(field.at(x, y + 1)):
            yd = 1
        else:
            xd = -1

    return Vec2(float(xd), float(yd))


class FlowField:
    """
    Per-cell steering directions toward the goal of a distance field.

    Agents keep a reference to one FlowField for their whole lifetime;
    ``rebuild`` computes the new vectors in full and swaps them in with a
    single assignment, so readers see either the old field or the new one.
    """

    def __init__(self, width: int, height: int):
        self.vectors = np.zeros((height, width, 2), dtype=np.float64)
        self.goal: Optional[Tuple[int, int]] = None

    @classmethod
    def from_distance(cls, distance: DistanceField) -> "FlowField":
        flow = cls(distance.width, distance.height)
        flow.rebuild(distance)
        return flow

    @property
    def width(self) -> int:
        return self.vectors.shape[1]

    @property
    def height(self) -> int:
        return self.vectors.shape[0]

    def rebuild(self, distance: DistanceField) -> None:
        """Derive every cell's vector from ``distance`` and replace the field."""
        vectors = np.zeros((distance.height, distance.width, 2), dtype=np.float64)
        for y in range(distance.height):
            for x in range(distance.width):
                v = steering_vector(distance, x, y)
                vectors[y, x] = (v.x, v.y)

        self.vectors = vectors
        self.goal = distance.goal
        logger.debug("Flow field rebuilt toward goal %s", distance.goal)

    def vector_at(self, x: int, y: int) -> Vec2:
        """Steering vector at cell; zero outside the field."""
        if not (0 <= x < self.width and 0 <= y < self.height):
            return ZERO
        vx, vy = self.vectors[y, x]
        return Vec2(float(vx), float(vy))

    def items(self) -> Iterator[Tuple[int, int, Vec2]]:
        """Yield (x, y, vector) for every cell with a non-zero vector."""
        vectors = self.vectors
        ys, xs = np.nonzero(np.any(vectors != 0, axis=2))
        for x, y in zip(xs, ys):
            yield int(x), int(y), Vec2(float(vectors[y, x, 0]),
                                       float(vectors[y, x, 1]))
