"""
Maze Generator

Carves perfect mazes (spanning trees, no cycles) on a rectangular grid of walled
cells and verifies that the carved layout connects the start cell to the goal cell.
Supports a depth-first backtracker and a randomized Prim frontier growth.
"""

import logging
import random
from collections import deque
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Tuple

import numpy as np


Cell = Tuple[int, int]

# Direction indices, north is +y and east is +x
NORTH, EAST, SOUTH, WEST = 0, 1, 2, 3
DIRECTIONS = [NORTH, EAST, SOUTH, WEST]
DIRECTION_VECTORS = [(0, 1), (1, 0), (0, -1), (-1, 0)]


def opposite(direction: int) -> int:
    """Return the direction facing the other way."""
    return (direction + 2) % 4


@dataclass
class MazeConfig:
    """Configuration for maze generation."""
    width: int = 10
    height: int = 10
    algorithm: str = 'dfs'  # Algorithm to use: 'dfs' or 'prim'
    seed: Optional[int] = None  # None for ambient randomness
    cell_size: float = 1.0
    dense_graph: bool = False  # Every cell becomes a graph node
    save_visualization: bool = False  # Whether to save visualization to file
    output_dir: str = "maze_output"


class MazeGrid:
    """
    A width x height array of cells with four wall flags each.

    walls[x, y, d] is True while the wall of cell (x, y) facing direction d
    stands. The visited and parent arrays are scratch state shared by the
    carvers; parent holds (-1, -1) until a cell is discovered.
    """

    def __init__(self, width: int, height: int):
        if width <= 0 or height <= 0:
            raise ValueError(f"Invalid maze dimensions: {width}x{height}. Width and height must be > 0.")
        self.width = width
        self.height = height
        self.walls = np.ones((width, height, 4), dtype=bool)
        self.visited = np.zeros((width, height), dtype=bool)
        self.parent = np.full((width, height, 2), -1, dtype=int)

    @property
    def start(self) -> Cell:
        return (0, 0)

    @property
    def goal(self) -> Cell:
        return (self.width - 1, self.height - 1)

    @property
    def num_cells(self) -> int:
        return self.width * self.height

    def in_bounds(self, x: int, y: int) -> bool:
        """Check if cell coordinates are within maze bounds."""
        return 0 <= x < self.width and 0 <= y < self.height

    def neighbor(self, cell: Cell, direction: int) -> Cell:
        dx, dy = DIRECTION_VECTORS[direction]
        return cell[0] + dx, cell[1] + dy

    def neighbors(self, cell: Cell) -> List[Tuple[Cell, int]]:
        """Get in-bounds neighbouring cells with the direction leading to them."""
        result = []
        for direction in DIRECTIONS:
            nx, ny = self.neighbor(cell, direction)
            if self.in_bounds(nx, ny):
                result.append(((nx, ny), direction))
        return result

    def is_open(self, cell: Cell, direction: int) -> bool:
        return not self.walls[cell[0], cell[1], direction]

    def can_move(self, cell: Cell, direction: int) -> bool:
        """True if the wall is down and the cell beyond it is inside the grid."""
        nx, ny = self.neighbor(cell, direction)
        return self.is_open(cell, direction) and self.in_bounds(nx, ny)

    def open_sides(self, cell: Cell) -> List[int]:
        return [d for d in DIRECTIONS if self.is_open(cell, d)]

    def remove_wall(self, cell: Cell, direction: int):
        """Knock down a wall. Internal walls are cleared on both faces."""
        x, y = cell
        self.walls[x, y, direction] = False
        nx, ny = self.neighbor(cell, direction)
        if self.in_bounds(nx, ny):
            self.walls[nx, ny, opposite(direction)] = False

    def count_internal_openings(self) -> int:
        """Number of open wall pairs between adjacent cells."""
        east = ~self.walls[:-1, :, EAST] & ~self.walls[1:, :, WEST]
        north = ~self.walls[:, :-1, NORTH] & ~self.walls[:, 1:, SOUTH]
        return int(east.sum() + north.sum())

    def mark_visited(self, cell: Cell, parent: Optional[Cell] = None):
        self.visited[cell] = True
        if parent is not None:
            self.parent[cell] = parent

    def parent_of(self, cell: Cell) -> Optional[Cell]:
        px, py = self.parent[cell]
        if px == -1:
            return None
        return int(px), int(py)

    def reset_search_state(self):
        self.visited[:] = False
        self.parent[:] = -1


def carve_dfs(grid: MazeGrid, start: Cell, rng: random.Random):
    """Carve a perfect maze with an iterative depth-first backtracker."""
    stack = [start]
    grid.mark_visited(start)

    while stack:
        current = stack[-1]
        unvisited = [(cell, d) for cell, d in grid.neighbors(current) if not grid.visited[cell]]

        if unvisited:
            next_cell, direction = unvisited[rng.randrange(len(unvisited))]
            grid.remove_wall(current, direction)
            grid.mark_visited(next_cell, parent=current)
            stack.append(next_cell)
        else:
            stack.pop()  # Backtrack


def _add_frontier_walls(grid: MazeGrid, cell: Cell, frontier: List[Tuple[Cell, int]]):
    for neighbor, direction in grid.neighbors(cell):
        if not grid.visited[neighbor]:
            frontier.append((cell, direction))


def carve_prim(grid: MazeGrid, start: Cell, rng: random.Random):
    """
    Carve a perfect maze with randomized Prim frontier growth.

    The frontier holds (cell, direction) walls bordering the visited region. A cell
    can be queued from several neighbours; once it has been carved into, the later
    entries for it are stale and are skipped.
    """
    grid.mark_visited(start)
    frontier: List[Tuple[Cell, int]] = []
    _add_frontier_walls(grid, start, frontier)

    while frontier:
        idx = rng.randrange(len(frontier))
        cell, direction = frontier[idx]
        frontier[idx] = frontier[-1]
        frontier.pop()

        next_cell = grid.neighbor(cell, direction)
        if not grid.in_bounds(*next_cell):
            continue
        cell_seen, next_seen = grid.visited[cell], grid.visited[next_cell]
        if cell_seen == next_seen:
            continue  # stale: both or neither side visited

        if cell_seen:
            from_cell, to_cell = cell, next_cell
        else:
            from_cell, to_cell = next_cell, cell
            direction = opposite(direction)

        grid.remove_wall(from_cell, direction)
        grid.mark_visited(to_cell, parent=from_cell)
        _add_frontier_walls(grid, to_cell, frontier)


CARVERS: Dict[str, Callable[[MazeGrid, Cell, random.Random], None]] = {
    'dfs': carve_dfs,
    'prim': carve_prim,
}


def open_entrances(grid: MazeGrid):
    """Open the south face of the start cell and the north face of the goal cell."""
    sx, sy = grid.start
    gx, gy = grid.goal
    grid.walls[sx, sy, SOUTH] = False
    grid.walls[gx, gy, NORTH] = False
    if grid.width == 1 and grid.height == 1:
        # single cell, traversable in both directions
        grid.walls[0, 0, NORTH] = False
        grid.walls[0, 0, SOUTH] = False


@dataclass
class ConnectivityReport:
    """Result of a breadth-first sweep over the carved grid."""
    parent: np.ndarray
    reachable_cells: int
    num_cells: int
    route: Optional[List[Cell]]

    @property
    def fully_connected(self) -> bool:
        return self.reachable_cells == self.num_cells

    @property
    def goal_reachable(self) -> bool:
        return self.route is not None


def _route_from_parents(parent: np.ndarray, start: Cell, goal: Cell) -> Optional[List[Cell]]:
    """Follow parent pointers from goal back to start. None if the chain breaks."""
    route = [goal]
    current = goal
    for _ in range(parent.shape[0] * parent.shape[1]):
        if current == start:
            return route[::-1]
        px, py = parent[current]
        if px == -1:
            return None
        current = (int(px), int(py))
        route.append(current)
    return route[::-1] if current == start else None


def verify_connectivity(grid: MazeGrid, start: Optional[Cell] = None,
                        goal: Optional[Cell] = None) -> ConnectivityReport:
    """
    Breadth-first search over open transitions, independent of the carver.

    Records a parent pointer for every cell the first time it is discovered and
    reconstructs the start -> goal route. An unreachable goal means the carving
    is broken and is logged as a warning.
    """
    start = grid.start if start is None else start
    goal = grid.goal if goal is None else goal

    parent = np.full((grid.width, grid.height, 2), -1, dtype=int)
    seen = np.zeros((grid.width, grid.height), dtype=bool)
    seen[start] = True
    queue = deque([start])
    reachable = 0

    while queue:
        current = queue.popleft()
        reachable += 1
        for direction in DIRECTIONS:
            if not grid.can_move(current, direction):
                continue
            nxt = grid.neighbor(current, direction)
            if not seen[nxt]:
                seen[nxt] = True
                parent[nxt] = current
                queue.append(nxt)

    route = _route_from_parents(parent, start, goal) if seen[goal] else None
    if route is None:
        logging.warning(f"Goal {goal} unreachable from {start} after full BFS "
                        f"({reachable}/{grid.num_cells} cells reached); carving is defective")

    return ConnectivityReport(parent=parent, reachable_cells=reachable,
                              num_cells=grid.num_cells, route=route)


def highlight_route(grid: MazeGrid, report: Optional[ConnectivityReport] = None) -> Optional[List[Cell]]:
    """
    Start -> goal cell sequence for route highlighting.

    Uses the carver's parent tree when it reaches the goal, otherwise falls back
    to a breadth-first sweep, reusing report when one was already computed.
    Returns None if the goal cannot be reached.
    """
    route = _route_from_parents(grid.parent, grid.start, grid.goal)
    if route is not None:
        return route
    if report is None:
        report = verify_connectivity(grid)
    return report.route


class MazeGenerator:
    """
    Generates perfect mazes with the configured carving algorithm.
    """

    def __init__(self, config: MazeConfig):
        self.config = config
        if config.width <= 0 or config.height <= 0:
            raise ValueError(f"Invalid maze dimensions: {config.width}x{config.height}. Width and height must be > 0.")
        if config.algorithm not in CARVERS:
            raise ValueError(f"Invalid algorithm: {config.algorithm}. Choose one of {sorted(CARVERS)}.")

        self.rng = random.Random(config.seed) if config.seed is not None else random.Random()

    def generate_maze(self) -> MazeGrid:
        """
        Carve a fresh grid with the configured algorithm and open the entrances.
        """
        grid = MazeGrid(self.config.width, self.config.height)
        carve = CARVERS[self.config.algorithm]
        carve(grid, grid.start, self.rng)
        open_entrances(grid)

        logging.info(f"Carved {grid.width}x{grid.height} maze with '{self.config.algorithm}' "
                     f"({grid.count_internal_openings()} openings, seed={self.config.seed})")
        return grid
