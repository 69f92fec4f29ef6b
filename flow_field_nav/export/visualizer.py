"""Visualization and export for flow field navigation."""

import numpy as np
import matplotlib
matplotlib.use('Agg')  # Use non-interactive backend
import matplotlib.pyplot as plt
from matplotlib.colors import to_rgb
from pathlib import Path
from typing import Iterable, List, Optional, Tuple, TYPE_CHECKING
from PIL import Image
import io

from ..model.distance_field import UNREACHABLE

if TYPE_CHECKING:
    from ..model.grid import TileGrid
    from ..model.state import SimulationState
    from ..model.vector import Vec2


class Visualizer:
    """
    Draws simulation state with matplotlib.

    The model works in cell units; this class is the only place cells are
    converted to pixels, using ``tile_size`` pixels per cell with the y
    axis pointing down (row 0 at the top).

    Supports:
    - Single PNG snapshots
    - Animated GIF compilation
    """

    # Color scheme
    COLORS = {
        'wall': '#2C3E50',      # Dark blue-gray
        'floor': '#ECF0F1',     # Light gray
        'goal': '#F39C12',      # Orange
        'vector': '#C0392B',    # Red
        'moving': '#3498DB',    # Blue
        'stopped': '#E74C3C',   # Red
        'arrived': '#27AE60',   # Green
    }

    DPI = 100

    def __init__(self, grid: "TileGrid", tile_size: int = 20,
                 show_vectors: bool = False, show_heatmap: bool = True):
        self.grid = grid
        self.width = grid.width
        self.height = grid.height
        self.tile_size = tile_size
        self.show_vectors = show_vectors
        self.show_heatmap = show_heatmap
        self.frames: List[Image.Image] = []

    def to_pixels(self, x: float, y: float) -> Tuple[float, float]:
        """Convert a cell-space point to pixel coordinates."""
        return x * self.tile_size, y * self.tile_size

    def _base_image(self, distances: np.ndarray) -> np.ndarray:
        """Floor, walls and optional distance heatmap as an RGB array."""
        base = np.ones((self.height, self.width, 3))
        base[:, :] = to_rgb(self.COLORS['floor'])

        if self.show_heatmap:
            reachable = distances != UNREACHABLE
            if np.any(reachable):
                peak = max(1, int(distances[reachable].max()))
                shade = matplotlib.colormaps['viridis_r'](distances / peak)[..., :3]
                base[reachable] = 0.5 * base[reachable] + 0.5 * shade[reachable]

        base[self.grid.walls] = to_rgb(self.COLORS['wall'])
        return base

    def _create_figure(self, state: "SimulationState",
                       flow_vectors: Optional[Iterable[Tuple[int, int, "Vec2"]]] = None
                       ) -> plt.Figure:
        """Create matplotlib figure for state visualization."""
        px_w = self.width * self.tile_size
        px_h = self.height * self.tile_size
        fig_width = max(4.0, px_w / self.DPI)
        fig_height = max(4.0, px_h / self.DPI) + 0.6
        fig, ax = plt.subplots(figsize=(fig_width, fig_height))

        ax.imshow(self._base_image(state.distance_field), origin='upper',
                  aspect='equal', interpolation='nearest',
                  extent=[0, px_w, px_h, 0])

        # Debug overlay: one arrow per cell from its centre
        if self.show_vectors and flow_vectors is not None:
            xs, ys, us, vs = [], [], [], []
            for cx, cy, vec in flow_vectors:
                x, y = self.to_pixels(cx + 0.5, cy + 0.5)
                xs.append(x)
                ys.append(y)
                us.append(vec.x * self.tile_size * 0.35)
                vs.append(vec.y * self.tile_size * 0.35)
            if xs:
                ax.quiver(xs, ys, us, vs, color=self.COLORS['vector'],
                          angles='xy', scale_units='xy', scale=1,
                          width=0.004)

        # Draw goal
        gx, gy = self.to_pixels(state.goal[0] + 0.5, state.goal[1] + 0.5)
        ax.plot(gx, gy, 's', color=self.COLORS['goal'],
                markersize=8, markeredgecolor='black', markeredgewidth=0.5,
                alpha=0.8)

        # Draw agents
        for agent in state.agents:
            color = self.COLORS.get(agent.state, '#95A5A6')
            x, y = self.to_pixels(agent.x, agent.y)
            ax.plot(x, y, 'o', color=color,
                    markersize=5, markeredgecolor='white', markeredgewidth=0.3)

        # Title and labels
        ax.set_title(f'Step {state.step} | t={state.elapsed_ms / 1000:.1f}s | '
                     f'Arrived: {int(state.metrics.get("arrived", 0))}/'
                     f'{len(state.agents)}', fontsize=8)
        ax.set_xlim(0, px_w)
        ax.set_ylim(px_h, 0)
        ax.set_xticks([])
        ax.set_yticks([])

        plt.tight_layout()
        return fig

    def buffer_frame(self, state: "SimulationState",
                     flow_vectors: Optional[Iterable[Tuple[int, int, "Vec2"]]] = None
                     ) -> None:
        """Store frame for GIF generation."""
        fig = self._create_figure(state, flow_vectors)

        # Convert to PIL Image
        buf = io.BytesIO()
        fig.savefig(buf, format='png', dpi=80)
        buf.seek(0)
        img = Image.open(buf).copy()
        self.frames.append(img)
        buf.close()
        plt.close(fig)

    def save_snapshot(self, state: "SimulationState", output_path: Path,
                      flow_vectors: Optional[Iterable[Tuple[int, int, "Vec2"]]] = None
                      ) -> None:
        """Save single PNG image of current state."""
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        fig = self._create_figure(state, flow_vectors)
        fig.savefig(output_path, dpi=self.DPI, bbox_inches='tight')
        plt.close(fig)

    def generate_gif(self, output_path: Path, fps: int = 10) -> None:
        """Compile buffered frames into animated GIF."""
        if not self.frames:
            return

        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        duration = int(1000 / fps)  # milliseconds per frame

        self.frames[0].save(
            output_path,
            save_all=True,
            append_images=self.frames[1:],
            duration=duration,
            loop=0
        )

    def clear_frames(self) -> None:
        """Clear buffered frames."""
        self.frames.clear()
