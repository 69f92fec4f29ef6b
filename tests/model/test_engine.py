"""Tests for flow_field_nav.model.engine module."""

import numpy as np
import pytest

from flow_field_nav.config import (
    AgentConfig,
    GridConfig,
    SimulationConfig,
    SpawnSpec,
    WallSpec,
    default_config,
)
from flow_field_nav.model.agent import AgentState
from flow_field_nav.model.engine import SimulationEngine
from flow_field_nav.model.errors import (
    InvalidGoalCell,
    InvalidGridData,
    InvalidSpawnCell,
)
from flow_field_nav.model.state import SimulationState


def corridor_config(length: int = 6, spawns=None) -> SimulationConfig:
    return SimulationConfig(
        grid=GridConfig(width=length, height=1, tiles=[0] * length),
        goal=(0, 0),
        agents=AgentConfig(spawns=spawns if spawns is not None else
                           [SpawnSpec(x=length - 1, y=0, speed=0.002)]),
        max_steps=500,
        dt_ms=16.0,
    )


class TestEngineSetup:
    def test_default_scenario(self) -> None:
        engine = SimulationEngine(default_config())
        assert (engine.grid.width, engine.grid.height) == (8, 11)
        assert engine.goal == (1, 1)
        assert len(engine.agents) == 2
        assert [a.id for a in engine.agents] == [1, 2]
        assert engine.agent_positions() == [(1.5, 9.5), (1.5, 9.5)]

    def test_agents_share_grid_and_field(self) -> None:
        engine = SimulationEngine(default_config())
        first, second = engine.agents
        assert first.grid is second.grid is engine.grid
        assert first.flow is second.flow is engine.flow_field

    def test_walls_applied(self) -> None:
        config = SimulationConfig(
            grid=GridConfig(width=4, height=3, tiles=[0] * 12, walls=[
                WallSpec('rectangle', {'x': 1, 'y': 0, 'width': 1, 'height': 2}),
                WallSpec('points', {'coords': [(3, 2)]}),
            ]),
            goal=(0, 0),
            agents=AgentConfig(spawns=[]),
        )
        engine = SimulationEngine(config)
        assert sorted(engine.blocked_cells()) == [(1, 0), (1, 1), (3, 2)]

    def test_bad_grid(self) -> None:
        config = corridor_config()
        config.grid.tiles = [0, 0]
        with pytest.raises(InvalidGridData):
            SimulationEngine(config)

    def test_bad_goal(self) -> None:
        config = corridor_config()
        config.goal = (9, 0)
        with pytest.raises(InvalidGoalCell):
            SimulationEngine(config)

    def test_bad_spawn(self) -> None:
        config = default_config()
        config.agents.spawns = [SpawnSpec(x=0, y=0, speed=0.001)]
        with pytest.raises(InvalidSpawnCell):
            SimulationEngine(config)


class TestEngineCommands:
    def test_set_goal_rebuilds_in_place(self) -> None:
        engine = SimulationEngine(default_config())
        flow = engine.flow_field
        engine.set_goal(6, 8)
        assert engine.flow_field is flow
        assert engine.goal == (6, 8)
        assert engine.distance_field.at(6, 8) == 0
        assert engine.field_rebuilds == 1

    def test_rejected_goal_keeps_field(self) -> None:
        engine = SimulationEngine(default_config())
        before = engine.flow_field.vectors
        with pytest.raises(InvalidGoalCell):
            engine.set_goal(0, 0)
        with pytest.raises(InvalidGoalCell):
            engine.set_goal(-3, 40)
        assert engine.goal == (1, 1)
        assert engine.flow_field.vectors is before
        assert engine.field_rebuilds == 0

    def test_set_tile_rebuilds_toward_current_goal(self) -> None:
        engine = SimulationEngine(corridor_config())
        engine.set_tile(2, 0, 1)
        assert engine.goal == (0, 0)
        assert not engine.distance_field.is_reachable(5, 0)
        assert engine.flow_field.vector_at(5, 0).is_zero()

    def test_blocking_goal_tile_is_undone(self) -> None:
        engine = SimulationEngine(corridor_config())
        with pytest.raises(InvalidGoalCell):
            engine.set_tile(0, 0, 1)
        assert engine.grid.get(0, 0) == 0

    def test_add_agent(self) -> None:
        engine = SimulationEngine(corridor_config(spawns=[]))
        agent = engine.add_agent(3, 0, 0.001)
        assert agent.id == 1
        with pytest.raises(InvalidSpawnCell):
            engine.add_agent(6, 0, 0.001)

    def test_flow_vectors_for_overlay(self) -> None:
        engine = SimulationEngine(corridor_config(length=3, spawns=[]))
        cells = [(x, y) for x, y, _ in engine.flow_vectors()]
        assert cells == [(1, 0), (2, 0)]


class TestEngineStep:
    def test_step_returns_snapshot(self) -> None:
        engine = SimulationEngine(corridor_config())
        state = engine.step()
        assert isinstance(state, SimulationState)
        assert state.step == 1
        assert state.elapsed_ms == pytest.approx(16.0)
        assert state.goal == (0, 0)
        assert len(state.agents) == 1
        assert state.agents[0].distance == 5
        assert state.agents[0].state == 'moving'
        assert state.metrics['total_agents'] == 1

    def test_explicit_dt(self) -> None:
        engine = SimulationEngine(corridor_config())
        engine.step(5.0)
        engine.step(7.5)
        assert engine.elapsed_ms == pytest.approx(12.5)

    def test_snapshot_copies_distance_field(self) -> None:
        engine = SimulationEngine(corridor_config())
        state = engine.step()
        engine.set_goal(5, 0)
        assert state.distance_field[0, 0] == 0
        assert engine.distance_field.distances[0, 0] == 5

    def test_corridor_run_finishes(self) -> None:
        engine = SimulationEngine(corridor_config())
        while not engine.is_finished():
            engine.step()
        assert engine.all_arrived()
        summary = engine.get_summary()
        assert summary['agents_arrived'] == 1
        assert summary['total_steps'] < 500

    def test_finishes_at_max_steps(self) -> None:
        config = corridor_config(spawns=[])
        config.max_steps = 3
        engine = SimulationEngine(config)
        steps = 0
        while not engine.is_finished():
            engine.step()
            steps += 1
        assert steps == 3

    def test_default_map_agents_reach_goal(self) -> None:
        config = default_config()
        config.max_steps = 6000
        engine = SimulationEngine(config)
        while not engine.is_finished():
            state = engine.step()
            for agent in engine.agents:
                assert engine.grid.is_walkable(*agent.cell)
        assert engine.all_arrived()
        assert state.metrics['arrived'] == 2
        assert state.metrics['mean_distance'] == 0.0

    def test_agents_follow_new_goal(self) -> None:
        config = default_config()
        config.max_steps = 8000
        engine = SimulationEngine(config)
        engine.set_goal(6, 8)
        while not engine.is_finished():
            engine.step()
        assert all(a.cell == (6, 8) for a in engine.agents)
        positions = np.array(engine.agent_positions())
        assert np.all(np.abs(positions - [6.5, 8.5]) <= 0.5)

    @pytest.mark.parametrize("goal", [(1, 1), (6, 9), (5, 1)])
    def test_agents_from_every_open_cell_arrive(self, goal) -> None:
        config = default_config()
        config.goal = goal
        config.max_steps = 4000
        config.agents.spawns = []
        engine = SimulationEngine(config)
        for y in range(engine.grid.height):
            for x in range(engine.grid.width):
                if engine.grid.is_walkable(x, y):
                    engine.add_agent(x, y, 0.002)
        assert len(engine.agents) == 36

        while not engine.is_finished():
            engine.step()
        stuck = [a for a in engine.agents if a.state != AgentState.ARRIVED]
        assert stuck == []
