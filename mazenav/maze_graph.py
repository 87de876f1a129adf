"""
Maze Navigation Graph

Derives a sparse navigation graph from a carved maze. Nodes sit on dead ends,
corners, junctions and the two endpoints; straight corridor cells are elided and
edges span them. In dense mode every cell becomes a node.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Set, Tuple

import numpy as np

from .maze_generator import Cell, EAST, MazeGrid, NORTH, opposite


@dataclass(eq=False)
class MazeNode:
    """A point of the navigation graph. Nodes compare and hash by identity."""
    x: int
    y: int
    world_pos: np.ndarray
    neighbors: List['MazeNode'] = field(default_factory=list, repr=False)

    @property
    def cell(self) -> Cell:
        return (self.x, self.y)

    def connect(self, other: 'MazeNode'):
        """Add an undirected edge. Self loops and duplicates are ignored."""
        if other is self:
            return
        if other not in self.neighbors:
            self.neighbors.append(other)
        if self not in other.neighbors:
            other.neighbors.append(self)


class NavGraph:
    """
    Navigation graph keyed by grid cell.

    World positions are (x * cell_size, 0, y * cell_size) shifted by an origin
    offset that centres the maze around (0, 0, 0).
    """

    def __init__(self, width: int, height: int, cell_size: float = 1.0, dense: bool = False):
        self.width = width
        self.height = height
        self.cell_size = cell_size
        self.dense = dense
        self.origin_offset = np.array([-(width - 1) * cell_size / 2.0, 0.0,
                                       -(height - 1) * cell_size / 2.0])
        self.nodes: Dict[Cell, MazeNode] = {}

    def world_position(self, x: int, y: int) -> np.ndarray:
        return np.array([x * self.cell_size, 0.0, y * self.cell_size]) + self.origin_offset

    def add_node(self, x: int, y: int) -> MazeNode:
        node = MazeNode(x, y, self.world_position(x, y))
        self.nodes[(x, y)] = node
        return node

    def node_at(self, x: int, y: int) -> Optional[MazeNode]:
        return self.nodes.get((x, y))

    def __iter__(self) -> Iterator[MazeNode]:
        return iter(self.nodes.values())

    def __len__(self) -> int:
        return len(self.nodes)

    def __contains__(self, node: MazeNode) -> bool:
        return self.nodes.get(node.cell) is node

    def iter_edges(self) -> Iterator[Tuple[MazeNode, MazeNode]]:
        """Yield each undirected edge once."""
        for node in self.nodes.values():
            for neighbor in node.neighbors:
                if node.cell < neighbor.cell:
                    yield node, neighbor

    def edges(self) -> Set[Tuple[Cell, Cell]]:
        return {(a.cell, b.cell) for a, b in self.iter_edges()}

    @property
    def edge_count(self) -> int:
        return sum(1 for _ in self.iter_edges())


def should_place_node(grid: MazeGrid, cell: Cell, dense: bool = False) -> bool:
    """Node predicate: endpoints, dead ends, junctions and corners."""
    if dense:
        return True
    if cell == grid.start or cell == grid.goal:
        return True

    open_sides = grid.open_sides(cell)
    if len(open_sides) != 2:
        return True
    # Two openings facing each other is a straight corridor, anything else a corner
    first, second = open_sides
    return second != opposite(first)


def _trace_corridor(grid: MazeGrid, graph: NavGraph, node: MazeNode, direction: int):
    """Walk from node along an open straight run and link the first node met."""
    if not grid.is_open(node.cell, direction):
        return
    prev = node.cell
    current = grid.neighbor(prev, direction)
    while grid.in_bounds(*current):
        if not grid.is_open(prev, direction):
            break
        other = graph.nodes.get(current)
        if other is not None:
            node.connect(other)
            break
        prev, current = current, grid.neighbor(current, direction)


def build_graph(grid: MazeGrid, dense: bool = False, cell_size: float = 1.0) -> NavGraph:
    """
    Build a fresh navigation graph from the wall state of a carved grid.

    Corridors are only traced north and east; the matching south and west runs
    are the same undirected edges seen from the other end.
    """
    graph = NavGraph(grid.width, grid.height, cell_size=cell_size, dense=dense)
    for x in range(grid.width):
        for y in range(grid.height):
            if should_place_node(grid, (x, y), dense):
                graph.add_node(x, y)

    for node in list(graph):
        _trace_corridor(grid, graph, node, NORTH)
        _trace_corridor(grid, graph, node, EAST)

    return graph


def rebuild_graph(grid: MazeGrid, dense: bool = False, cell_size: float = 1.0) -> NavGraph:
    """Re-derive the graph without re-carving, e.g. after a density change."""
    return build_graph(grid, dense=dense, cell_size=cell_size)
