"""Model package for flow field navigation."""

from .errors import FlowFieldError, InvalidGridData, InvalidGoalCell, InvalidSpawnCell
from .vector import Vec2
from .grid import TileGrid, OUT_OF_BOUNDS
from .distance_field import DistanceField, UNREACHABLE
from .flow_field import FlowField, steering_vector
from .agent import Agent, AgentState
from .state import AgentSnapshot, SimulationState
from .engine import SimulationEngine

__all__ = [
    'FlowFieldError',
    'InvalidGridData',
    'InvalidGoalCell',
    'InvalidSpawnCell',
    'Vec2',
    'TileGrid',
    'OUT_OF_BOUNDS',
    'DistanceField',
    'UNREACHABLE',
    'FlowField',
    'steering_vector',
    'Agent',
    'AgentState',
    'AgentSnapshot',
    'SimulationState',
    'SimulationEngine',
]
