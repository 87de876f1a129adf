"""Perfect maze carving, navigation graph extraction and A* path queries."""

from .maze_generator import (CARVERS, ConnectivityReport, MazeConfig, MazeGenerator, MazeGrid,
                             carve_dfs, carve_prim, highlight_route, open_entrances,
                             verify_connectivity)
from .maze_graph import MazeNode, NavGraph, build_graph, rebuild_graph
from .maze_session import MazeSession, generate
from .maze_solver import PathPlanner, find_node_path, find_path, nearest_node, path_cost

__all__ = [
    'CARVERS', 'ConnectivityReport', 'MazeConfig', 'MazeGenerator', 'MazeGrid',
    'carve_dfs', 'carve_prim', 'highlight_route', 'open_entrances', 'verify_connectivity',
    'MazeNode', 'NavGraph', 'build_graph', 'rebuild_graph',
    'MazeSession', 'generate',
    'PathPlanner', 'find_node_path', 'find_path', 'nearest_node', 'path_cost',
]
