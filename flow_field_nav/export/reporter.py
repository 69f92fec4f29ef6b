"""Summary report generation for flow field navigation."""

from typing import List, Dict, Optional, TYPE_CHECKING
from pathlib import Path

if TYPE_CHECKING:
    from ..model.state import SimulationState


class Reporter:
    """Generates summary statistics and formatted text report."""

    def __init__(self, config_path: Optional[str]):
        self.config_path = config_path
        self.step_metrics: List[Dict] = []
        self.arrival_steps: Dict[int, int] = {}
        self.stall_steps = 0
        self._prev_positions: Dict[int, tuple] = {}

    def update(self, state: "SimulationState") -> None:
        """Accumulate metrics per step."""
        self.step_metrics.append(state.metrics.copy())

        # First step at which each agent reached the goal cell
        for agent in state.agents:
            if agent.state == 'arrived' and agent.agent_id not in self.arrival_steps:
                self.arrival_steps[agent.agent_id] = state.step

        # Count ticks in which no unfinished agent moved at all
        moved = False
        unfinished = False
        for agent in state.agents:
            if agent.state == 'arrived':
                continue
            unfinished = True
            prev = self._prev_positions.get(agent.agent_id)
            if prev is None or prev != (agent.x, agent.y):
                moved = True
        if unfinished and not moved:
            self.stall_steps += 1

        self._prev_positions = {a.agent_id: (a.x, a.y) for a in state.agents}

    def generate_summary(self, final_state: "SimulationState",
                         output_dir: Path,
                         csv_enabled: bool,
                         snapshot_enabled: bool,
                         gif_enabled: bool) -> str:
        """Returns formatted text report."""
        metrics = final_state.metrics
        total_agents = int(metrics.get('total_agents', 0))
        arrived = int(metrics.get('arrived', 0))
        arrived_pct = (arrived / total_agents * 100) if total_agents > 0 else 0

        if self.arrival_steps:
            avg_arrival = sum(self.arrival_steps.values()) / len(self.arrival_steps)
            arrival_line = f"{avg_arrival:.1f} steps"
        else:
            arrival_line = "n/a"

        # Build report
        lines = [
            "",
            "=" * 80,
            "                    FLOW FIELD NAVIGATION REPORT",
            "=" * 80,
            f"Configuration: {self.config_path or '(built-in default map)'}",
            f"Goal Cell:     {final_state.goal}",
            "",
            "SIMULATION METRICS",
            "-" * 40,
            f"Total Steps:           {final_state.step}",
            f"Simulated Time:        {final_state.elapsed_ms / 1000:.2f} s",
            f"Agents Arrived:        {arrived} / {total_agents} ({arrived_pct:.1f}%)",
            f"Average Arrival Step:  {arrival_line}",
            f"Mean Remaining Dist:   {metrics.get('mean_distance', 0):.2f} cells",
            f"Reachable Cells:       {int(metrics.get('reachable_cells', 0))}",
            f"Field Rebuilds:        {int(metrics.get('field_rebuilds', 0))}",
            "",
            "BEHAVIORS DETECTED",
            "-" * 40,
            f"[{'X' if self.stall_steps > 0 else ' '}] Stalled Ticks: {self.stall_steps}",
            "",
            "OUTPUT FILES",
            "-" * 40,
        ]

        # Output file paths
        if csv_enabled:
            lines.append(f"CSV Log:    {output_dir / 'trajectories.csv'}")
        else:
            lines.append("CSV Log:    (disabled)")

        if snapshot_enabled:
            lines.append(f"Snapshot:   {output_dir / 'final_state.png'}")
        else:
            lines.append("Snapshot:   (disabled)")

        if gif_enabled:
            lines.append(f"Animation:  {output_dir / 'simulation.gif'}")
        else:
            lines.append("Animation:  (disabled)")

        lines.append("=" * 80)

        return "\n".join(lines)
