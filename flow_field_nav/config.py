"""Configuration dataclasses and YAML loader for flow field navigation."""

from dataclasses import dataclass, field
from typing import List, Tuple, Dict, Any, Optional
from pathlib import Path
import yaml

from .model.grid import TileGrid


# Test map: 8 wide, 11 tall, walled border
DEFAULT_MAP = [
    8, 11,
    1, 1, 1, 1, 1, 1, 1, 1,
    1, 0, 1, 1, 1, 0, 0, 1,
    1, 0, 0, 1, 0, 0, 0, 1,
    1, 1, 0, 1, 1, 0, 1, 1,
    1, 1, 0, 0, 0, 0, 1, 1,
    1, 1, 1, 1, 0, 1, 1, 1,
    1, 0, 0, 0, 0, 0, 0, 1,
    1, 0, 0, 1, 1, 1, 0, 1,
    1, 0, 0, 0, 0, 0, 0, 1,
    1, 0, 0, 0, 0, 0, 0, 1,
    1, 1, 1, 1, 1, 1, 1, 1,
]


@dataclass
class WallSpec:
    wall_type: str  # "rectangle" or "points"
    data: Dict[str, Any]


@dataclass
class GridConfig:
    width: int
    height: int
    tiles: List[int]  # row-major, len == width * height
    walls: List[WallSpec] = field(default_factory=list)


@dataclass
class SpawnSpec:
    x: int
    y: int
    speed: float  # cells per millisecond


@dataclass
class AgentConfig:
    spawns: List[SpawnSpec]
    probe_fraction: float = 0.4  # of the cell half-width
    substeps: int = 10
    center_on_walkable: bool = True


@dataclass
class RenderConfig:
    tile_size: int = 20  # pixels per cell
    show_vectors: bool = False
    show_heatmap: bool = True


@dataclass
class SimulationConfig:
    grid: GridConfig
    goal: Tuple[int, int]
    agents: AgentConfig
    max_steps: int = 2000
    dt_ms: float = 16.0
    render: RenderConfig = field(default_factory=RenderConfig)

    # Export flags (can be overridden by CLI)
    csv_enabled: bool = True
    snapshot_enabled: bool = True
    gif_enabled: bool = False
    quiet: bool = False
    out_dir: Path = field(default_factory=lambda: Path("./output"))


def _parse_walls(walls_raw: List[Dict]) -> List[WallSpec]:
    """Parse wall specifications from raw YAML data."""
    walls = []
    for w in walls_raw:
        wall_type = w.get('type', 'rectangle')
        if wall_type == 'rectangle':
            data = {
                'x': w['x'],
                'y': w['y'],
                'width': w['width'],
                'height': w['height']
            }
        elif wall_type == 'points':
            data = {'coords': [tuple(c) for c in w['coords']]}
        else:
            raise ValueError(f"Unknown wall type: {wall_type}")
        walls.append(WallSpec(wall_type=wall_type, data=data))
    return walls


def _parse_grid(grid_raw: Dict) -> GridConfig:
    """
    Parse the grid section.

    Accepts a flat ``data`` list ([width, height, tiles...]), a ``rows``
    list of tile rows (top row first), or bare ``width``/``height`` for
    an open floor. ``rows`` must be rectangular (InvalidGridData);
    other dimension and length checks happen when the grid is loaded.
    """
    walls = _parse_walls(grid_raw.get('walls', []))
    if 'data' in grid_raw:
        data = list(grid_raw['data'])
        if len(data) < 2:
            raise ValueError("grid.data must start with width and height")
        return GridConfig(width=data[0], height=data[1], tiles=data[2:],
                          walls=walls)
    if 'rows' in grid_raw:
        # Same shape checks as a grid built in code
        layout = TileGrid.from_rows(grid_raw['rows'])
        return GridConfig(width=layout.width, height=layout.height,
                          tiles=layout.tiles.ravel().tolist(), walls=walls)
    width = grid_raw['width']
    height = grid_raw['height']
    return GridConfig(width=width, height=height,
                      tiles=[0] * max(0, width * height), walls=walls)


def _parse_spawns(spawns_raw: List[Dict], default_speed: float) -> List[SpawnSpec]:
    """Parse agent spawn points from raw YAML data."""
    return [
        SpawnSpec(
            x=s['x'],
            y=s['y'],
            speed=s.get('speed', default_speed)
        )
        for s in spawns_raw
    ]


def default_config() -> SimulationConfig:
    """Built-in scenario: the test map with two agents of different speed."""
    return SimulationConfig(
        grid=GridConfig(width=DEFAULT_MAP[0], height=DEFAULT_MAP[1],
                        tiles=list(DEFAULT_MAP[2:])),
        goal=(1, 1),
        agents=AgentConfig(spawns=[
            SpawnSpec(x=1, y=9, speed=0.001),
            SpawnSpec(x=1, y=9, speed=0.0008),
        ]),
    )


def load_config(config_path: Path) -> SimulationConfig:
    """Load and validate YAML configuration file."""
    with open(config_path) as f:
        raw = yaml.safe_load(f)
    if not isinstance(raw, dict):
        raise ValueError(f"{config_path}: expected a mapping at top level")

    grid = _parse_grid(raw['grid'])

    goal_raw = raw['goal']
    goal = (goal_raw['x'], goal_raw['y'])

    # Parse agent config
    agents_raw = raw.get('agents', {})
    agents = AgentConfig(
        spawns=_parse_spawns(agents_raw.get('spawns', []),
                             agents_raw.get('speed', 0.001)),
        probe_fraction=agents_raw.get('probe_fraction', 0.4),
        substeps=agents_raw.get('substeps', 10),
        center_on_walkable=agents_raw.get('center_on_walkable', True)
    )

    render_raw = raw.get('render', {})
    render = RenderConfig(
        tile_size=render_raw.get('tile_size', 20),
        show_vectors=render_raw.get('show_vectors', False),
        show_heatmap=render_raw.get('show_heatmap', True)
    )

    # Parse simulation config (optional)
    sim_raw = raw.get('simulation', {})

    # Parse export config (optional)
    export_raw = raw.get('export', {})

    return SimulationConfig(
        grid=grid,
        goal=goal,
        agents=agents,
        max_steps=sim_raw.get('max_steps', 2000),
        dt_ms=sim_raw.get('dt_ms', 16.0),
        render=render,
        csv_enabled=export_raw.get('csv', True),
        snapshot_enabled=export_raw.get('snapshot', True),
        gif_enabled=export_raw.get('gif', False)
    )
