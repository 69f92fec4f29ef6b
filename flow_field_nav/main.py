#!/usr/bin/env python3
"""
Flow Field Navigation

Agents steer toward a shared goal cell by reading a precomputed flow
field instead of running their own pathfinding.

Usage:
    python -m flow_field_nav.main [--config configs/default.yaml] [options]

Examples:
    python -m flow_field_nav.main
    python -m flow_field_nav.main --config configs/default.yaml --gif --vectors
    python -m flow_field_nav.main --goal 5 1 --retarget 300 1 8 --no-csv
    python -m flow_field_nav.main --print-field --steps 0 --no-snapshot
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from .config import default_config, load_config
from .export.csv_writer import CSVWriter
from .export.reporter import Reporter
from .export.visualizer import Visualizer
from .log import configure_logging
from .model.engine import SimulationEngine
from .model.errors import FlowFieldError


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description='Flow Field Navigation Simulation',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    python -m flow_field_nav.main
    python -m flow_field_nav.main --config configs/default.yaml --gif --vectors
    python -m flow_field_nav.main --goal 5 1 --retarget 300 1 8 --no-csv
        """
    )

    parser.add_argument('--config', type=Path, default=None,
                        help='Path to YAML configuration file '
                             '(default: built-in test map)')

    # Optional overrides
    parser.add_argument('--steps', type=int, default=None,
                        help='Override max simulation steps')
    parser.add_argument('--dt', type=float, default=None,
                        help='Override tick length in milliseconds')
    parser.add_argument('--goal', type=int, nargs=2, metavar=('X', 'Y'),
                        default=None, help='Override goal cell')
    parser.add_argument('--retarget', type=int, nargs=3, action='append',
                        metavar=('STEP', 'X', 'Y'), default=[],
                        help='Move the goal to (X, Y) before step STEP '
                             '(repeatable)')
    parser.add_argument('--out-dir', type=Path, default=Path('./output'),
                        help='Output directory for exports (default: ./output)')

    # Export toggles
    parser.add_argument('--csv', dest='csv', action='store_true', default=None,
                        help='Enable CSV export (default)')
    parser.add_argument('--no-csv', dest='csv', action='store_false',
                        help='Disable CSV export')

    parser.add_argument('--snapshot', dest='snapshot', action='store_true', default=None,
                        help='Enable final snapshot (default)')
    parser.add_argument('--no-snapshot', dest='snapshot', action='store_false',
                        help='Disable final snapshot')

    parser.add_argument('--gif', action='store_true', default=False,
                        help='Enable GIF animation export')
    parser.add_argument('--vectors', action='store_true', default=False,
                        help='Draw flow vectors in snapshots and animations')
    parser.add_argument('--print-field', action='store_true', default=False,
                        help='Print grid and distance field before running')

    parser.add_argument('--quiet', action='store_true', default=False,
                        help='Suppress stdout output')
    parser.add_argument('--verbose', '-v', action='count', default=0,
                        help='Log model events to stderr (-v info, -vv debug)')

    return parser.parse_args(argv)


def _retarget_schedule(entries: List[List[int]]) -> Dict[int, Tuple[int, int]]:
    return {step: (x, y) for step, x, y in entries}


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    if args.verbose:
        configure_logging(logging.DEBUG if args.verbose > 1 else logging.INFO)
    else:
        configure_logging()

    # Load configuration
    try:
        config = load_config(args.config) if args.config else default_config()
    except FileNotFoundError:
        print(f"Error: Configuration file not found: {args.config}", file=sys.stderr)
        return 1
    except Exception as e:
        print(f"Error loading config: {e}", file=sys.stderr)
        return 1

    # Apply CLI overrides
    if args.steps is not None:
        config.max_steps = args.steps
    if args.dt is not None:
        config.dt_ms = args.dt
    if args.goal is not None:
        config.goal = tuple(args.goal)
    if args.csv is not None:
        config.csv_enabled = args.csv
    if args.snapshot is not None:
        config.snapshot_enabled = args.snapshot
    if args.gif:
        config.gif_enabled = True
    if args.vectors:
        config.render.show_vectors = True
    config.quiet = args.quiet
    config.out_dir = args.out_dir

    try:
        engine = SimulationEngine(config)
    except FlowFieldError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if not config.quiet:
        print(f"Initializing simulation...")
        print(f"  Grid: {engine.grid.width}x{engine.grid.height}")
        print(f"  Goal: {engine.goal}")
        print(f"  Agents: {len(engine.agents)}")
        print(f"  Max steps: {config.max_steps} (dt={config.dt_ms} ms)")

    if args.print_field and not config.quiet:
        print("\nTiles:")
        print(engine.grid.format_tiles())
        print("\nDistances:")
        print(engine.distance_field.format_tiles())

    retargets = _retarget_schedule(args.retarget)

    # Initialize exporters
    csv_path = config.out_dir / 'trajectories.csv'
    csv_writer = None
    if config.csv_enabled:
        csv_writer = CSVWriter(csv_path)
        csv_writer.open()

    visualizer = Visualizer(
        engine.grid,
        tile_size=config.render.tile_size,
        show_vectors=config.render.show_vectors,
        show_heatmap=config.render.show_heatmap
    )

    reporter = Reporter(str(args.config) if args.config else None)

    # Main simulation loop
    if not config.quiet:
        print(f"\nRunning simulation...")

    final_state = engine.snapshot()
    try:
        while not engine.is_finished():
            goal = retargets.get(engine.current_step + 1)
            if goal is not None:
                try:
                    engine.set_goal(*goal)
                    if not config.quiet:
                        print(f"  Step {engine.current_step + 1}: goal moved to {goal}")
                except FlowFieldError as e:
                    print(f"Warning: {e}", file=sys.stderr)

            state = engine.step()
            final_state = state

            if csv_writer:
                csv_writer.append(state)

            # Buffer GIF frame (every N steps to reduce memory)
            if config.gif_enabled:
                if state.step % 10 == 0 or engine.is_finished():
                    visualizer.buffer_frame(state, list(engine.flow_vectors()))

            reporter.update(state)

            # Progress indicator
            if not config.quiet and state.step % 100 == 0:
                arrived = int(state.metrics.get('arrived', 0))
                mean_dist = state.metrics.get('mean_distance', 0.0)
                print(f"  Step {state.step}: {arrived} arrived, "
                      f"mean distance {mean_dist:.2f}")

    except KeyboardInterrupt:
        if not config.quiet:
            print("\nSimulation interrupted by user.")

    # Cleanup and final exports
    if csv_writer:
        csv_writer.close()
        if not config.quiet:
            print(f"\nCSV saved: {csv_path}")

    if config.snapshot_enabled:
        snapshot_path = config.out_dir / 'final_state.png'
        visualizer.save_snapshot(final_state, snapshot_path,
                                 list(engine.flow_vectors()))
        if not config.quiet:
            print(f"Snapshot saved: {snapshot_path}")

    if config.gif_enabled:
        gif_path = config.out_dir / 'simulation.gif'
        if not config.quiet:
            print(f"Generating GIF ({len(visualizer.frames)} frames)...")
        visualizer.generate_gif(gif_path, fps=10)
        if not config.quiet:
            print(f"Animation saved: {gif_path}")

    # Print summary report
    if not config.quiet:
        report = reporter.generate_summary(
            final_state,
            config.out_dir,
            config.csv_enabled,
            config.snapshot_enabled,
            config.gif_enabled
        )
        print(report)

    return 0


if __name__ == '__main__':
    sys.exit(main())
