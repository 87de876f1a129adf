"""
Maze Visualization

Debug views of a carved maze: a text dump for logs and a matplotlib figure with
walls, navigation graph and an optional route overlay.
"""

import logging
from typing import List, Optional, Sequence, Tuple

import matplotlib.pyplot as plt
import matplotlib.patches as patches
import numpy as np
from matplotlib.colors import ListedColormap

from .maze_generator import Cell, EAST, MazeGrid, NORTH, SOUTH, WEST
from .maze_graph import MazeNode, NavGraph


def _wall_layout(grid: MazeGrid) -> np.ndarray:
    """
    Boolean (2*height+1, 2*width+1) layout, True where a wall stands. Row 0 is
    the southern boundary so the array can be drawn with origin='lower'.
    """
    layout = np.ones((2 * grid.height + 1, 2 * grid.width + 1), dtype=bool)
    for x in range(grid.width):
        for y in range(grid.height):
            row, col = 2 * y + 1, 2 * x + 1
            layout[row, col] = False
            layout[row + 1, col] = grid.walls[x, y, NORTH]
            layout[row - 1, col] = layout[row - 1, col] and grid.walls[x, y, SOUTH]
            layout[row, col + 1] = grid.walls[x, y, EAST]
            layout[row, col - 1] = layout[row, col - 1] and grid.walls[x, y, WEST]
    return layout


def render_ascii(grid: MazeGrid, route: Optional[Sequence[Cell]] = None,
                 graph: Optional[NavGraph] = None) -> str:
    """
    Create a text visualization of the maze, north at the top.

    S and E mark the start and goal, '.' route cells and 'o' graph nodes.
    """
    layout = _wall_layout(grid)
    chars = [['#' if wall else ' ' for wall in row] for row in layout]

    if graph is not None:
        for x, y in graph.nodes:
            chars[2 * y + 1][2 * x + 1] = 'o'
    if route:
        for x, y in route:
            chars[2 * y + 1][2 * x + 1] = '.'
    sx, sy = grid.start
    gx, gy = grid.goal
    chars[2 * gy + 1][2 * gx + 1] = 'E'
    chars[2 * sy + 1][2 * sx + 1] = 'S'

    return '\n'.join(''.join(row) for row in reversed(chars))


class MazeVisualizer:
    """
    Matplotlib rendering of a maze grid, its navigation graph and a route.
    """

    def __init__(self, figsize: Tuple[int, int] = (10, 10), dpi: int = 100):
        self.figsize = figsize
        self.dpi = dpi

        # Color schemes
        self.colors = {
            'wall': '#2C3E50',           # Dark blue-gray
            'passage': '#ECF0F1',        # Light gray
            'start': '#E74C3C',          # Red
            'end': '#27AE60',            # Green
            'path': '#E67E22',           # Orange
            'node': '#F1C40F',           # Yellow
            'edge': '#00CCFF',           # Cyan
        }

    def _draw_maze_structure(self, ax, grid: MazeGrid):
        """Draw walls plus start/end markers."""
        cmap = ListedColormap([self.colors['passage'], self.colors['wall']])
        ax.imshow(_wall_layout(grid), cmap=cmap, origin='lower')

        for (x, y), color, label in ((grid.start, self.colors['start'], 'S'),
                                     (grid.goal, self.colors['end'], 'E')):
            ax.add_patch(patches.Circle((2 * x + 1, 2 * y + 1), 0.4, color=color, zorder=5))
            ax.text(2 * x + 1, 2 * y + 1, label, ha='center', va='center',
                    fontsize=12, color='white', weight='bold', zorder=6)

        ax.set_xlim(-0.5, 2 * grid.width + 0.5)
        ax.set_ylim(-0.5, 2 * grid.height + 0.5)
        ax.set_aspect('equal')
        ax.axis('off')

    def _draw_graph(self, ax, graph: NavGraph):
        for a, b in graph.iter_edges():
            ax.plot([2 * a.x + 1, 2 * b.x + 1], [2 * a.y + 1, 2 * b.y + 1],
                    color=self.colors['edge'], linewidth=1.5, alpha=0.6, zorder=2)
        xs = [2 * node.x + 1 for node in graph]
        ys = [2 * node.y + 1 for node in graph]
        ax.scatter(xs, ys, s=20, color=self.colors['node'], zorder=3)

    def _draw_route(self, ax, cells: Sequence[Cell], label: str):
        if len(cells) < 2:
            return
        xs = [2 * x + 1 for x, _ in cells]
        ys = [2 * y + 1 for _, y in cells]
        ax.plot(xs, ys, color=self.colors['path'], linewidth=3, alpha=0.8, zorder=4, label=label)

    def visualize(self, grid: MazeGrid,
                  graph: Optional[NavGraph] = None,
                  route: Optional[Sequence[Cell]] = None,
                  node_path: Optional[List[MazeNode]] = None,
                  title: str = "Maze",
                  save_path: Optional[str] = None,
                  show_plot: bool = True) -> plt.Figure:
        """
        Visualize a maze with optional graph and route overlays.

        Args:
            grid: Carved maze grid
            graph: Navigation graph to overlay
            route: Cell sequence to highlight (e.g. the verified start -> goal route)
            node_path: A* node path to highlight
            title: Plot title
            save_path: Path to save the visualization
            show_plot: Whether to display the plot

        Returns:
            matplotlib Figure object
        """
        fig, ax = plt.subplots(figsize=self.figsize, dpi=self.dpi)
        self._draw_maze_structure(ax, grid)
        if graph is not None:
            self._draw_graph(ax, graph)
        if route:
            self._draw_route(ax, route, 'Route')
        if node_path:
            self._draw_route(ax, [node.cell for node in node_path], 'A* path')

        subtitle = f"Size: {grid.width}x{grid.height}"
        if graph is not None:
            subtitle += f", Nodes: {len(graph)}, Edges: {graph.edge_count}"
        ax.set_title(f"{title}\n{subtitle}", fontsize=14, pad=20)
        if route or node_path:
            ax.legend(loc='upper left', bbox_to_anchor=(1.02, 1))

        plt.tight_layout()

        if save_path:
            plt.savefig(save_path, bbox_inches='tight', dpi=self.dpi)
            logging.info(f"Maze visualization saved to: {save_path}")

        if show_plot:
            plt.show()

        return fig


def save_visualization(grid: MazeGrid, graph: Optional[NavGraph], route: Optional[Sequence[Cell]],
                       save_path: str, title: str = "Maze") -> Optional[str]:
    """Render and save a figure. Failures are logged and return None."""
    try:
        fig = MazeVisualizer(figsize=(8, 8)).visualize(grid, graph=graph, route=route, title=title,
                                                       save_path=save_path, show_plot=False)
        plt.close(fig)
        return save_path
    except (OSError, ValueError) as e:
        logging.warning(f"Warning: Visualization failed: {e}")
        return None
