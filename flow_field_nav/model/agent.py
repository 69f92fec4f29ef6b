"""Continuous-motion agent steered by a flow field."""

import logging
import math
from enum import Enum
from typing import Tuple

from .flow_field import FlowField
from .grid import TileGrid
from .vector import ZERO, Vec2

logger = logging.getLogger(__name__)

DEFAULT_PROBE_FRACTION = 0.4
DEFAULT_SUBSTEPS = 10


class AgentState(Enum):
    """Reported classification of an agent, derived from its motion."""
    MOVING = "moving"
    STOPPED = "stopped"
    ARRIVED = "arrived"


class Agent:
    """
    Point agent integrating its velocity against a shared flow field.

    Positions and velocities are in cell units; ``speed`` is the maximum
    velocity in cells per millisecond and ``dt`` is given in milliseconds.
    The grid and flow field are borrowed: the owner (normally the
    SimulationEngine) keeps them alive for as long as the agent exists.

    Each update:
    1. Sample the flow field at the current cell
    2. Ease velocity toward that direction, clamp to ``speed``
    3. Stop outright on a zero direction (goal or unreachable cell)
    4. Pull the position toward the current cell's centre
    5. Move in ``substeps`` slices, y then x, rejecting any slice whose
       3x3 probe around the destination touches a blocked cell
    """

    def __init__(self, agent_id: int, grid: TileGrid, flow: FlowField,
                 position: Vec2, speed: float,
                 probe_fraction: float = DEFAULT_PROBE_FRACTION,
                 substeps: int = DEFAULT_SUBSTEPS,
                 center_on_walkable: bool = True):
        if substeps < 1:
            raise ValueError(f"substeps must be at least 1, got {substeps}")
        if not 0.0 <= probe_fraction < 1.0:
            raise ValueError(
                f"probe_fraction must be in [0, 1), got {probe_fraction}")
        self.id = agent_id
        self.grid = grid
        self.flow = flow
        self.position = position
        self.velocity = ZERO
        self.speed = speed
        # Fraction of the cell half-width
        self.probe_offset = probe_fraction * 0.5
        self.substeps = substeps
        self.center_on_walkable = center_on_walkable

    @classmethod
    def at_cell(cls, agent_id: int, grid: TileGrid, flow: FlowField,
                x: int, y: int, speed: float, **kwargs) -> "Agent":
        """Create an agent standing on the centre of cell (x, y)."""
        return cls(agent_id, grid, flow, Vec2(x + 0.5, y + 0.5), speed, **kwargs)

    @property
    def cell(self) -> Tuple[int, int]:
        return math.floor(self.position.x), math.floor(self.position.y)

    @property
    def state(self) -> AgentState:
        if self.flow.goal is not None and self.cell == self.flow.goal:
            return AgentState.ARRIVED
        if self.velocity.is_zero():
            return AgentState.STOPPED
        return AgentState.MOVING

    def update(self, dt: float) -> None:
        """Advance the agent by ``dt`` milliseconds."""
        cx, cy = self.cell
        rate = min(1.0, self.speed * dt)

        acc = self.flow.vector_at(cx, cy)
        velocity = self.velocity.move_to(acc, rate).clamp(self.speed)
        if acc.is_zero():
            velocity = ZERO

        walkable = self.grid.is_walkable(cx, cy)
        if not walkable:
            # Grid changed underneath the agent
            velocity = ZERO
        if not walkable or self.center_on_walkable:
            self.position = self.position.move_to(Vec2(cx + 0.5, cy + 0.5), rate)

        if velocity.is_zero() and not self.velocity.is_zero():
            logger.debug("Agent %d stopped at cell (%d, %d)", self.id, cx, cy)
        self.velocity = velocity

        step = velocity * (dt / self.substeps)
        for _ in range(self.substeps):
            self._try_move(0.0, step.y)
            self._try_move(step.x, 0.0)

    def _try_move(self, dx: float, dy: float) -> bool:
        if dx == 0 and dy == 0:
            return False
        destination = self.position + Vec2(dx, dy)
        if not self.can_occupy(destination):
            return False
        self.position = destination
        return True

    def can_occupy(self, point: Vec2) -> bool:
        """True if every probe point around ``point`` lies on a walkable cell."""
        r = self.probe_offset
        for ox in (-r, 0.0, r):
            for oy in (-r, 0.0, r):
                if not self.grid.is_walkable(math.floor(point.x + ox),
                                             math.floor(point.y + oy)):
                    return False
        return True

    def distance_to(self, x: float, y: float) -> float:
        return math.hypot(self.position.x - x, self.position.y - y)

    def __repr__(self) -> str:
        return (f"Agent(id={self.id}, pos=({self.position.x:.3f}, "
                f"{self.position.y:.3f}), state={self.state.value})")
