"""Exception types raised by the flow field model."""


class FlowFieldError(Exception):
    """Base class for recoverable model errors."""


class InvalidGridData(FlowFieldError, ValueError):
    """Grid dimensions are non-positive or the tile count does not match."""


class InvalidGoalCell(FlowFieldError, ValueError):
    """Goal cell is out of bounds or sits on a blocked tile."""

    def __init__(self, x: int, y: int, reason: str):
        super().__init__(f"Invalid goal cell ({x}, {y}): {reason}")
        self.x = x
        self.y = y


class InvalidSpawnCell(FlowFieldError, ValueError):
    """Agent spawn cell is out of bounds or blocked."""

    def __init__(self, x: int, y: int, reason: str):
        super().__init__(f"Invalid spawn cell ({x}, {y}): {reason}")
        self.x = x
        self.y = y
