"""2D vector value type used for steering and positions."""

import math
from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class Vec2:
    """
    Immutable (x, y) pair in cell units.

    All operations return a new vector, so agents sharing a vector
    never observe each other's updates.
    """
    x: float = 0.0
    y: float = 0.0

    def __add__(self, other: "Vec2") -> "Vec2":
        return Vec2(self.x + other.x, self.y + other.y)

    def __sub__(self, other: "Vec2") -> "Vec2":
        return Vec2(self.x - other.x, self.y - other.y)

    def __mul__(self, factor: float) -> "Vec2":
        return Vec2(self.x * factor, self.y * factor)

    __rmul__ = __mul__

    def magnitude(self) -> float:
        return math.hypot(self.x, self.y)

    def is_zero(self) -> bool:
        return self.x == 0 and self.y == 0

    def clamp(self, limit: float) -> "Vec2":
        """Scale down to ``limit`` length if longer, keeping the heading."""
        if self.magnitude() <= limit:
            return self
        angle = math.atan2(self.y, self.x)
        return Vec2(math.cos(angle) * limit, math.sin(angle) * limit)

    def move_to(self, target: "Vec2", fraction: float) -> "Vec2":
        """
        Exponential approach: cover ``fraction`` of the remaining distance.

        A fraction of 1 lands on the target; 0 leaves the vector unchanged.
        """
        return Vec2(self.x + (target.x - self.x) * fraction,
                    self.y + (target.y - self.y) * fraction)

    def as_tuple(self) -> Tuple[float, float]:
        return (self.x, self.y)


ZERO = Vec2(0.0, 0.0)
