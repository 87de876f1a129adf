"""
Maze Session

Owns the current grid and navigation graph. Generation and graph rebuilds are
explicit calls made by the host loop; listeners registered in on_generated are
told when a new grid/graph pair becomes valid and re-read the session state.
"""

import dataclasses
import logging
from typing import Callable, List, Optional, Tuple

from .maze_generator import (ConnectivityReport, MazeConfig, MazeGenerator, MazeGrid,
                             highlight_route, verify_connectivity)
from .maze_graph import NavGraph, build_graph
from .maze_solver import PathPlanner


class MazeSession:
    """
    Single-writer holder of the maze state.

    Path queries against self.graph are safe from any number of callers, but
    generate() and rebuild_graph() replace the graph and must not run while a
    query is in flight.
    """

    def __init__(self, config: Optional[MazeConfig] = None):
        self.config = config if config is not None else MazeConfig()
        self.grid: Optional[MazeGrid] = None
        self.graph: Optional[NavGraph] = None
        self.route = None
        self.report: Optional[ConnectivityReport] = None
        self.last_seed: Optional[int] = None
        self.on_generated: List[Callable[[], None]] = []

    @property
    def is_generated(self) -> bool:
        return self.grid is not None

    def generate(self, width: Optional[int] = None, height: Optional[int] = None,
                 algorithm: Optional[str] = None, seed: Optional[int] = None) -> Tuple[MazeGrid, NavGraph]:
        """
        Carve a new maze and derive its graph. Arguments left as None fall back to
        the session config. Deterministic when a seed is set; a per-call seed
        applies to this call only and is recorded in last_seed.

        Raises:
            ValueError: invalid dimensions or algorithm. The previous grid and
                graph are kept.
        """
        config = dataclasses.replace(
            self.config,
            width=self.config.width if width is None else width,
            height=self.config.height if height is None else height,
            algorithm=self.config.algorithm if algorithm is None else algorithm,
            seed=self.config.seed if seed is None else seed,
        )
        try:
            generator = MazeGenerator(config)
        except ValueError as e:
            logging.error(f"Maze generation failed: {e}")
            raise

        grid = generator.generate_maze()
        graph = build_graph(grid, dense=config.dense_graph, cell_size=config.cell_size)
        report = verify_connectivity(grid)
        route = highlight_route(grid, report)

        self.config = dataclasses.replace(config, seed=self.config.seed)
        self.last_seed = config.seed
        self.grid, self.graph = grid, graph
        self.report, self.route = report, route
        logging.info(f"Navigation graph: {len(graph)} nodes, {graph.edge_count} edges "
                     f"({'dense' if config.dense_graph else 'sparse'})")

        for listener in list(self.on_generated):
            listener()
        return grid, graph

    def rebuild_graph(self, dense: Optional[bool] = None) -> Optional[NavGraph]:
        """Re-derive the graph from the current grid without re-carving."""
        if dense is not None:
            self.config.dense_graph = dense
        if self.grid is None:
            logging.warning("Cannot rebuild graph: maze not generated yet")
            return None
        self.graph = build_graph(self.grid, dense=self.config.dense_graph, cell_size=self.config.cell_size)
        return self.graph

    def set_dense_graph(self, dense: bool) -> Optional[NavGraph]:
        """Change node density; the graph is rebuilt only if the setting changed."""
        if dense == self.config.dense_graph:
            return self.graph
        return self.rebuild_graph(dense)

    def planner(self) -> PathPlanner:
        if self.graph is None:
            raise ValueError("Maze not generated yet")
        return PathPlanner(self.graph)


def generate(width: int, height: int, algorithm: str = 'dfs', seed: Optional[int] = None,
             dense: bool = False, cell_size: float = 1.0) -> Tuple[MazeGrid, NavGraph]:
    """Carve a maze and build its graph without keeping any session state."""
    config = MazeConfig(width=width, height=height, algorithm=algorithm, seed=seed,
                        dense_graph=dense, cell_size=cell_size)
    grid = MazeGenerator(config).generate_maze()
    return grid, build_graph(grid, dense=dense, cell_size=cell_size)
