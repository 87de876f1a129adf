"""
Maze Solver

A* shortest path search over a maze navigation graph. One stateless primitive
shared by every caller (pursuing ghosts, the player) instead of a private copy
per agent. Also provides nearest-node snapping and world waypoint conversion.
"""

import heapq
import itertools
from typing import Dict, List, Optional, Sequence

import numpy as np

from .maze_graph import MazeNode, NavGraph


class _OpenSet:
    """
    Binary heap of (f, insertion order, node) entries with in-place priority
    updates. Ties on f are broken by insertion order.
    """

    def __init__(self):
        self._heap = []
        self._members = set()
        self._order = itertools.count()

    def __len__(self) -> int:
        return len(self._heap)

    def __contains__(self, node: MazeNode) -> bool:
        return node in self._members

    def push(self, node: MazeNode, f: float):
        heapq.heappush(self._heap, [f, next(self._order), node])
        self._members.add(node)

    def pop(self) -> MazeNode:
        _, _, node = heapq.heappop(self._heap)
        self._members.discard(node)
        return node

    def update(self, node: MazeNode, f: float):
        # Linear scan to locate the entry; the dominant cost on large graphs
        for entry in self._heap:
            if entry[2] is node:
                if f < entry[0]:
                    entry[0] = f
                    heapq.heapify(self._heap)
                return


def manhattan_distance(a: MazeNode, b: MazeNode) -> float:
    """Manhattan distance between two nodes in the world x/z plane."""
    return float(abs(a.world_pos[0] - b.world_pos[0]) + abs(a.world_pos[2] - b.world_pos[2]))


def edge_cost(a: MazeNode, b: MazeNode) -> float:
    """Euclidean distance between the world positions of two nodes."""
    return float(np.linalg.norm(a.world_pos - b.world_pos))


def path_cost(path: Optional[Sequence[MazeNode]]) -> float:
    """Total edge cost of a node path. A missing path costs infinity."""
    if path is None:
        return float('inf')
    return sum(edge_cost(path[i - 1], path[i]) for i in range(1, len(path)))


def _reconstruct(came_from: Dict[MazeNode, MazeNode], current: MazeNode) -> List[MazeNode]:
    path = [current]
    while current in came_from:
        current = came_from[current]
        path.append(current)
    return path[::-1]


def find_node_path(start: Optional[MazeNode], goal: Optional[MazeNode]) -> Optional[List[MazeNode]]:
    """
    Solve with A*.

    Edge cost is the world distance between nodes; the heuristic is the
    Manhattan distance between world positions, which is the grid Manhattan
    distance times the cell size and never overestimates since every edge is an
    axis-aligned corridor.

    Returns:
        Node list from start to goal, or None if goal is not reachable from start.
    """
    if start is None or goal is None:
        return None
    if start is goal:
        return [start]

    def heuristic(node: MazeNode) -> float:
        return manhattan_distance(node, goal)

    g_score: Dict[MazeNode, float] = {start: 0.0}
    came_from: Dict[MazeNode, MazeNode] = {}
    open_set = _OpenSet()
    open_set.push(start, heuristic(start))

    while open_set:
        current = open_set.pop()
        if current is goal:
            return _reconstruct(came_from, current)

        for neighbor in current.neighbors:
            tentative_g = g_score[current] + edge_cost(current, neighbor)
            if neighbor not in g_score or tentative_g < g_score[neighbor]:
                came_from[neighbor] = current
                g_score[neighbor] = tentative_g
                f = tentative_g + heuristic(neighbor)
                if neighbor in open_set:
                    open_set.update(neighbor, f)
                else:
                    open_set.push(neighbor, f)

    return None  # No path found


def nearest_node(graph: NavGraph, world_pos: Sequence[float]) -> Optional[MazeNode]:
    """Node whose world position is closest to world_pos, None for an empty graph."""
    target = np.asarray(world_pos, dtype=float)
    best, best_sq = None, float('inf')
    for node in graph:
        dist_sq = float(np.sum((node.world_pos - target) ** 2))
        if dist_sq < best_sq:
            best, best_sq = node, dist_sq
    return best


def validate_path(path: Optional[Sequence[MazeNode]]) -> bool:
    """
    Validate that a path is valid (all consecutive nodes are connected).
    """
    if not path:
        return False
    for i in range(len(path) - 1):
        if path[i + 1] not in path[i].neighbors:
            return False
    return True


def find_path(graph: NavGraph, start_world: Sequence[float],
              goal_world: Sequence[float]) -> List[np.ndarray]:
    """
    Shortest route between two world positions, snapped to their nearest nodes.

    Returns:
        Ordered world waypoints, empty if there is no path.
    """
    return PathPlanner(graph).find_path(start_world, goal_world)


class PathPlanner:
    """
    Stateless path queries against one graph snapshot.

    Holds no search state between calls, so any number of agents may query the
    same snapshot as long as the graph is not rebuilt meanwhile.
    """

    def __init__(self, graph: NavGraph):
        self.graph = graph

    def find_node_path(self, start: Optional[MazeNode], goal: Optional[MazeNode]) -> Optional[List[MazeNode]]:
        return find_node_path(start, goal)

    def nearest_node(self, world_pos: Sequence[float]) -> Optional[MazeNode]:
        return nearest_node(self.graph, world_pos)

    def find_path(self, start_world: Sequence[float], goal_world: Sequence[float]) -> List[np.ndarray]:
        path = self.find_node_path(self.nearest_node(start_world), self.nearest_node(goal_world))
        if path is None:
            return []
        return self.path_to_positions(path)

    def solve(self) -> Optional[List[MazeNode]]:
        """Route from the maze start node to the goal node."""
        start = self.graph.node_at(0, 0)
        goal = self.graph.node_at(self.graph.width - 1, self.graph.height - 1)
        return self.find_node_path(start, goal)

    @staticmethod
    def path_to_positions(path: Sequence[MazeNode]) -> List[np.ndarray]:
        """Convert path of nodes to world waypoints."""
        return [node.world_pos.copy() for node in path]
