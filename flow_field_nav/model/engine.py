"""Simulation engine driving agents across a shared flow field."""

import logging
from typing import List, Dict, Tuple, Optional, TYPE_CHECKING, Iterator

import numpy as np

from .agent import Agent, AgentState
from .distance_field import UNREACHABLE, DistanceField
from .errors import InvalidGoalCell, InvalidSpawnCell
from .flow_field import FlowField
from .grid import OUT_OF_BOUNDS, TileGrid
from .state import SimulationState, AgentSnapshot
from .vector import Vec2

if TYPE_CHECKING:
    from ..config import SimulationConfig

logger = logging.getLogger(__name__)


class SimulationEngine:
    """
    Owns the grid, the current goal's fields and every agent.

    Implements:
    1. Grid loading and wall layout
    2. Distance and flow field builds for the chosen goal
    3. Agent spawning
    4. Tick updates and state snapshot generation

    The engine outlives the agents it creates, and its FlowField object
    is rebuilt in place, so agents never hold a stale field.
    """

    def __init__(self, config: "SimulationConfig"):
        self.config = config
        self.current_step = 0
        self.elapsed_ms = 0.0
        self.field_rebuilds = 0

        # Initialize grid
        self.grid = TileGrid(config.grid.width, config.grid.height,
                             config.grid.tiles)
        self._setup_walls()

        # Initialize fields
        self.distance_field = DistanceField.build(self.grid, tuple(config.goal))
        self.flow_field = FlowField.from_distance(self.distance_field)

        # Initialize agents
        self.agents: List[Agent] = []
        self._spawn_agents()

    def _setup_walls(self) -> None:
        """Configure walls from config."""
        for wall_spec in self.config.grid.walls:
            if wall_spec.wall_type == "rectangle":
                self.grid.add_wall_rectangle(
                    wall_spec.data['x'], wall_spec.data['y'],
                    wall_spec.data['width'], wall_spec.data['height']
                )
            elif wall_spec.wall_type == "points":
                self.grid.add_wall_points(wall_spec.data['coords'])

    def _spawn_agents(self) -> None:
        """Create agents on the centres of their configured spawn cells."""
        for spawn in self.config.agents.spawns:
            self.add_agent(spawn.x, spawn.y, spawn.speed)

    @property
    def goal(self) -> Tuple[int, int]:
        return self.distance_field.goal

    def add_agent(self, x: int, y: int, speed: float) -> Agent:
        """Place a new agent on the centre of walkable cell (x, y)."""
        tile = self.grid.get(x, y)
        if tile is OUT_OF_BOUNDS:
            raise InvalidSpawnCell(x, y, "outside the grid")
        if tile != 0:
            raise InvalidSpawnCell(x, y, f"blocked tile (code {tile})")

        agent_cfg = self.config.agents
        agent = Agent.at_cell(
            len(self.agents) + 1, self.grid, self.flow_field, x, y, speed,
            probe_fraction=agent_cfg.probe_fraction,
            substeps=agent_cfg.substeps,
            center_on_walkable=agent_cfg.center_on_walkable
        )
        self.agents.append(agent)
        return agent

    def set_goal(self, x: int, y: int) -> None:
        """
        Recompute the fields toward a new goal cell.

        On InvalidGoalCell the previous fields stay in place.
        """
        try:
            distance = DistanceField.build(self.grid, (x, y))
        except InvalidGoalCell as exc:
            logger.info("Goal rejected: %s", exc)
            raise
        self._install(distance)
        logger.info("Goal set to (%d, %d): %d reachable cells",
                    x, y, distance.reachable_count)

    def set_tile(self, x: int, y: int, code: int) -> None:
        """
        Edit one tile and rebuild the fields toward the current goal.

        Blocking the goal cell itself is rejected with InvalidGoalCell
        and the edit is undone.
        """
        previous = self.grid.get(x, y)
        if previous is OUT_OF_BOUNDS:
            return
        self.grid.set(x, y, code)
        try:
            distance = DistanceField.build(self.grid, self.goal)
        except InvalidGoalCell:
            self.grid.set(x, y, previous)
            raise
        self._install(distance)

    def _install(self, distance: DistanceField) -> None:
        self.flow_field.rebuild(distance)
        self.distance_field = distance
        self.field_rebuilds += 1

    def step(self, dt: Optional[float] = None) -> SimulationState:
        """
        Advance every agent by ``dt`` milliseconds (config default if None).

        Agents read the grid and flow field only; nothing they do
        changes either, so update order does not matter.
        """
        if dt is None:
            dt = self.config.dt_ms
        self.current_step += 1
        self.elapsed_ms += dt

        for agent in self.agents:
            agent.update(dt)

        return self._create_state_snapshot()

    def blocked_cells(self) -> Iterator[Tuple[int, int]]:
        return self.grid.blocked_cells()

    def flow_vectors(self) -> Iterator[Tuple[int, int, Vec2]]:
        return self.flow_field.items()

    def agent_positions(self) -> List[Tuple[float, float]]:
        return [agent.position.as_tuple() for agent in self.agents]

    def _agent_distance(self, agent: Agent) -> Optional[int]:
        value = self.distance_field.at(*agent.cell)
        if value is OUT_OF_BOUNDS or value == UNREACHABLE:
            return None
        return value

    def _create_state_snapshot(self) -> SimulationState:
        """Create immutable snapshot of current simulation state."""
        agent_snapshots = [
            AgentSnapshot(
                agent_id=a.id,
                x=a.position.x,
                y=a.position.y,
                distance=self._agent_distance(a),
                state=a.state.value
            )
            for a in self.agents
        ]

        distances = [s.distance for s in agent_snapshots if s.distance is not None]
        arrived = sum(1 for s in agent_snapshots
                      if s.state == AgentState.ARRIVED.value)

        metrics = {
            'arrived': arrived,
            'total_agents': len(self.agents),
            'active_agents': len(self.agents) - arrived,
            'mean_distance': float(np.mean(distances)) if distances else 0.0,
            'reachable_cells': self.distance_field.reachable_count,
            'max_distance': self.distance_field.max_distance,
            'field_rebuilds': self.field_rebuilds,
        }

        return SimulationState(
            step=self.current_step,
            elapsed_ms=self.elapsed_ms,
            goal=self.goal,
            agents=agent_snapshots,
            distance_field=self.distance_field.distances.copy(),
            metrics=metrics
        )

    def snapshot(self) -> SimulationState:
        """State without advancing the simulation."""
        return self._create_state_snapshot()

    def all_arrived(self) -> bool:
        return bool(self.agents) and all(
            a.state == AgentState.ARRIVED for a in self.agents)

    def is_finished(self) -> bool:
        """Check if simulation should terminate."""
        return self.current_step >= self.config.max_steps or self.all_arrived()

    def get_summary(self) -> Dict:
        """Get summary statistics for the simulation."""
        arrived = sum(1 for a in self.agents if a.state == AgentState.ARRIVED)
        return {
            'total_steps': self.current_step,
            'elapsed_ms': self.elapsed_ms,
            'goal': self.goal,
            'agents_arrived': arrived,
            'agents_total': len(self.agents),
            'field_rebuilds': self.field_rebuilds,
        }
