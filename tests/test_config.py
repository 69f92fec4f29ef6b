"""Tests for flow_field_nav.config module."""

from pathlib import Path

import pytest

from flow_field_nav.config import DEFAULT_MAP, default_config, load_config
from flow_field_nav.model.errors import InvalidGridData


def write_yaml(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "scenario.yaml"
    path.write_text(text)
    return path


class TestLoadConfig:
    def test_flat_data_grid(self, tmp_path) -> None:
        path = write_yaml(tmp_path, """
grid:
  data: [3, 2,
         0, 0, 0,
         0, 1, 0]
goal: {x: 0, y: 0}
agents:
  spawns:
    - {x: 2, y: 1, speed: 0.002}
""")
        config = load_config(path)
        assert (config.grid.width, config.grid.height) == (3, 2)
        assert config.grid.tiles == [0, 0, 0, 0, 1, 0]
        assert config.goal == (0, 0)
        assert len(config.agents.spawns) == 1
        assert config.agents.spawns[0].speed == 0.002

    def test_rows_grid(self, tmp_path) -> None:
        path = write_yaml(tmp_path, """
grid:
  rows:
    - [0, 1]
    - [0, 0]
    - [1, 0]
goal: {x: 1, y: 1}
""")
        config = load_config(path)
        assert (config.grid.width, config.grid.height) == (2, 3)
        assert config.grid.tiles == [0, 1, 0, 0, 1, 0]
        assert config.agents.spawns == []

    def test_open_floor_with_walls(self, tmp_path) -> None:
        path = write_yaml(tmp_path, """
grid:
  width: 5
  height: 4
  walls:
    - {type: rectangle, x: 1, y: 1, width: 2, height: 1}
    - type: points
      coords: [[4, 3]]
goal: {x: 0, y: 0}
""")
        config = load_config(path)
        assert config.grid.tiles == [0] * 20
        assert [w.wall_type for w in config.grid.walls] == ['rectangle', 'points']
        assert config.grid.walls[1].data['coords'] == [(4, 3)]

    def test_defaults_and_overrides(self, tmp_path) -> None:
        path = write_yaml(tmp_path, """
grid: {width: 2, height: 2}
goal: {x: 0, y: 0}
agents:
  speed: 0.004
  substeps: 4
  center_on_walkable: false
  spawns:
    - {x: 1, y: 1}
simulation:
  max_steps: 50
  dt_ms: 8
export:
  csv: false
  gif: true
render:
  tile_size: 12
  show_vectors: true
""")
        config = load_config(path)
        assert config.agents.spawns[0].speed == 0.004
        assert config.agents.substeps == 4
        assert config.agents.probe_fraction == 0.4
        assert config.agents.center_on_walkable is False
        assert config.max_steps == 50
        assert config.dt_ms == 8
        assert config.csv_enabled is False
        assert config.snapshot_enabled is True
        assert config.gif_enabled is True
        assert config.render.tile_size == 12
        assert config.render.show_vectors is True
        assert config.render.show_heatmap is True

    def test_unknown_wall_type(self, tmp_path) -> None:
        path = write_yaml(tmp_path, """
grid:
  width: 2
  height: 2
  walls:
    - {type: circle, x: 0, y: 0}
goal: {x: 0, y: 0}
""")
        with pytest.raises(ValueError, match="circle"):
            load_config(path)

    def test_ragged_rows(self, tmp_path) -> None:
        path = write_yaml(tmp_path, """
grid:
  rows:
    - [0, 0, 0]
    - [0, 0]
goal: {x: 0, y: 0}
""")
        with pytest.raises(InvalidGridData, match="differing lengths"):
            load_config(path)

    def test_short_data_list(self, tmp_path) -> None:
        path = write_yaml(tmp_path, """
grid:
  data: [4]
goal: {x: 0, y: 0}
""")
        with pytest.raises(ValueError):
            load_config(path)

    def test_not_a_mapping(self, tmp_path) -> None:
        path = write_yaml(tmp_path, "- just\n- a list\n")
        with pytest.raises(ValueError):
            load_config(path)

    def test_shipped_configs_load(self) -> None:
        root = Path(__file__).resolve().parent.parent / "configs"
        for name in ("default.yaml", "hall.yaml"):
            config = load_config(root / name)
            assert len(config.grid.tiles) == config.grid.width * config.grid.height


class TestDefaultConfig:
    def test_built_in_scenario(self) -> None:
        config = default_config()
        assert (config.grid.width, config.grid.height) == (8, 11)
        assert config.grid.tiles == DEFAULT_MAP[2:]
        assert config.goal == (1, 1)
        assert [(s.x, s.y) for s in config.agents.spawns] == [(1, 9), (1, 9)]
        assert [s.speed for s in config.agents.spawns] == [0.001, 0.0008]

    def test_returns_fresh_objects(self) -> None:
        first = default_config()
        first.grid.tiles[0] = 0
        first.max_steps = 1
        second = default_config()
        assert second.grid.tiles[0] == 1
        assert second.max_steps == 2000
