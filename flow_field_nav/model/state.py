"""State snapshot dataclasses for flow field navigation."""

from dataclasses import dataclass
from typing import List, Dict, Optional, Tuple
import numpy as np


@dataclass(frozen=True)
class AgentSnapshot:
    """Immutable snapshot of an agent after a tick."""
    agent_id: int
    x: float  # cell units
    y: float
    distance: Optional[int]  # steps to goal from the agent's cell; None off-grid
    state: str  # "moving", "stopped", "arrived"


@dataclass
class SimulationState:
    """Complete snapshot of simulation state after a tick."""
    step: int
    elapsed_ms: float
    goal: Tuple[int, int]
    agents: List[AgentSnapshot]
    distance_field: np.ndarray  # Copy of distance values
    metrics: Dict[str, float]   # arrived, mean distance, etc.

    def to_csv_rows(self) -> List[Dict]:
        """Convert to CSV-compatible format."""
        return [
            {
                "step": self.step,
                "elapsed_ms": round(self.elapsed_ms, 3),
                "goal_x": self.goal[0],
                "goal_y": self.goal[1],
                "agent_id": a.agent_id,
                "x": round(a.x, 4),
                "y": round(a.y, 4),
                "distance": a.distance,
                "state": a.state
            }
            for a in self.agents
        ]
