"""
Maze generation entry point.

Usage: python -m mazenav.run_maze [width] [height] [algorithm] [seed]
Defaults come from maze_gen_config.py.
"""

import logging
import os
import sys
import time
from typing import List, Optional

from .maze_generator import MazeConfig
from .maze_session import MazeSession
from .maze_solver import path_cost
from .maze_visualizer import render_ascii, save_visualization


def load_config(argv: List[str]) -> MazeConfig:
    """Build a MazeConfig from maze_gen_config.py with positional overrides."""
    from . import maze_gen_config as defaults

    config = MazeConfig(
        width=defaults.width,
        height=defaults.height,
        algorithm=defaults.algorithm,
        seed=defaults.seed,
        cell_size=defaults.cell_size,
        dense_graph=defaults.dense_graph,
        output_dir=defaults.output_dir,
        save_visualization=defaults.save_visualization,
    )
    if len(argv) > 0:
        config.width = int(argv[0])
    if len(argv) > 1:
        config.height = int(argv[1])
    if len(argv) > 2:
        config.algorithm = argv[2]
    if len(argv) > 3:
        config.seed = None if argv[3].lower() == 'none' else int(argv[3])
    return config


def main(argv: Optional[List[str]] = None) -> int:
    """Generate a maze, build its graph and solve start to goal."""
    try:
        config = load_config(sys.argv[1:] if argv is None else argv)
    except ValueError as e:
        print(f"Error: {e}")
        print("Usage: python -m mazenav.run_maze [width] [height] [algorithm] [seed]")
        return 2

    os.makedirs(config.output_dir, exist_ok=True)

    # Setup Logging
    log_file = os.path.join(config.output_dir, f"maze_{config.width}x{config.height}_{time.strftime('%Y%m%d-%H%M%S')}.log")
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s',
        handlers=[
            logging.FileHandler(log_file),
            logging.StreamHandler(sys.stdout)
        ]
    )

    logging.info("=" * 50)
    logging.info("MAZE GENERATION")
    logging.info("=" * 50)
    logging.info("Configuration:")
    for key, value in vars(config).items():
        logging.info(f"  {key}: {value}")
    logging.info("-" * 50)

    session = MazeSession(config)
    try:
        grid, graph = session.generate()
    except ValueError:
        return 1

    path = session.planner().solve()

    summary = "\n" + "=" * 50
    summary += "\nMAZE SUMMARY"
    summary += "\n" + "=" * 50
    summary += f"\nGrid size: {grid.width}x{grid.height}"
    summary += f"\nAlgorithm: {config.algorithm}"
    summary += f"\nInternal openings: {grid.count_internal_openings()}"
    summary += f"\nReachable cells: {session.report.reachable_cells}/{grid.num_cells}"
    summary += f"\nGraph nodes: {len(graph)} ({'dense' if config.dense_graph else 'sparse'})"
    summary += f"\nGraph edges: {graph.edge_count}"
    if path is None:
        summary += "\nA* path: not found"
    else:
        summary += f"\nA* path: {len(path)} nodes, cost {path_cost(path):.2f}"
    logging.info(summary)

    print(render_ascii(grid, route=session.route, graph=graph))

    if config.save_visualization:
        viz_path = os.path.join(config.output_dir, f"maze_{grid.width}x{grid.height}.png")
        if save_visualization(grid, graph, session.route, viz_path):
            logging.info(f"Visualization saved to: {viz_path}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
