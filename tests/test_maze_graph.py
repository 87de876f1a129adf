import numpy as np
import pytest

from mazenav.maze_generator import EAST, NORTH, MazeConfig, MazeGenerator, MazeGrid, open_entrances
from mazenav.maze_graph import build_graph, rebuild_graph, should_place_node


def _grid_from_openings(width, height, openings):
    """Hand-carved grid: openings is a list of (cell, direction) walls to knock down."""
    grid = MazeGrid(width, height)
    for cell, direction in openings:
        grid.remove_wall(cell, direction)
    open_entrances(grid)
    return grid


def _generate(width, height, algorithm='dfs', seed=0):
    return MazeGenerator(MazeConfig(width=width, height=height, algorithm=algorithm, seed=seed)).generate_maze()


def _assert_well_formed(graph):
    for node in graph:
        assert node not in node.neighbors, "self loop"
        assert len(node.neighbors) == len(set(id(n) for n in node.neighbors)), "duplicate edge"
        for neighbor in node.neighbors:
            assert node in neighbor.neighbors, "edge is not bidirectional"
            assert neighbor in graph
            # corridors are straight runs
            assert neighbor.x == node.x or neighbor.y == node.y


def test_single_cell_graph_has_one_node():
    graph = build_graph(_generate(1, 1))

    assert len(graph) == 1
    assert graph.edge_count == 0
    assert graph.node_at(0, 0) is not None


def test_two_cell_graph():
    grid = _grid_from_openings(2, 1, [((0, 0), EAST)])
    graph = build_graph(grid)

    assert set(graph.nodes) == {(0, 0), (1, 0)}
    assert graph.edges() == {((0, 0), (1, 0))}


def test_straight_corridor_cells_are_elided():
    grid = _grid_from_openings(1, 4, [((0, y), NORTH) for y in range(3)])
    graph = build_graph(grid)

    assert set(graph.nodes) == {(0, 0), (0, 3)}
    assert graph.edges() == {((0, 0), (0, 3))}


def test_corners_dead_ends_and_junctions_become_nodes():
    # (0,1)-(1,1)
    #   |
    # (0,0)-(1,0)
    grid = _grid_from_openings(2, 2, [((0, 0), NORTH), ((0, 0), EAST), ((0, 1), EAST)])
    graph = build_graph(grid)

    assert set(graph.nodes) == {(0, 0), (1, 0), (0, 1), (1, 1)}
    assert graph.edges() == {((0, 0), (0, 1)), ((0, 0), (1, 0)), ((0, 1), (1, 1))}


def test_node_predicate():
    grid = _grid_from_openings(3, 3, [((0, 1), EAST), ((1, 1), EAST), ((1, 0), NORTH), ((1, 1), NORTH)])

    assert should_place_node(grid, (0, 0))  # start
    assert should_place_node(grid, (2, 2))  # goal
    assert should_place_node(grid, (0, 1))  # dead end
    assert should_place_node(grid, (1, 1))  # junction
    assert should_place_node(grid, (2, 0))  # isolated
    assert should_place_node(grid, (1, 2))  # dead end
    grid.remove_wall((1, 2), EAST)
    assert should_place_node(grid, (1, 2))  # corner south/east
    assert should_place_node(grid, (1, 0), dense=True)


def test_straight_cell_is_not_a_node_unless_dense():
    grid = _grid_from_openings(3, 1, [((0, 0), EAST), ((1, 0), EAST)])

    assert not should_place_node(grid, (1, 0))
    assert should_place_node(grid, (1, 0), dense=True)


@pytest.mark.parametrize("algorithm", ['dfs', 'prim'])
@pytest.mark.parametrize("seed", [0, 1, 2])
def test_generated_graphs_are_well_formed_trees(algorithm, seed):
    grid = _generate(12, 9, algorithm, seed)
    graph = build_graph(grid)

    _assert_well_formed(graph)
    # a perfect maze contracts to a tree
    assert graph.edge_count == len(graph) - 1
    assert graph.node_at(0, 0) is not None
    assert graph.node_at(11, 8) is not None


def test_dense_graph_has_every_cell():
    grid = _generate(7, 6, 'prim', seed=4)
    graph = build_graph(grid, dense=True)

    _assert_well_formed(graph)
    assert len(graph) == 7 * 6
    assert graph.edge_count == 7 * 6 - 1
    for a, b in graph.iter_edges():
        assert abs(a.x - b.x) + abs(a.y - b.y) == 1


def test_sparse_graph_is_smaller_than_dense():
    grid = _generate(15, 15, 'dfs', seed=9)

    assert len(build_graph(grid)) < len(build_graph(grid, dense=True))


def test_rebuild_graph_is_idempotent():
    grid = _generate(10, 8, 'dfs', seed=17)
    first = rebuild_graph(grid)
    second = rebuild_graph(grid)

    assert set(first.nodes) == set(second.nodes)
    assert first.edges() == second.edges()
    assert first.node_at(0, 0) is not second.node_at(0, 0)


def test_world_positions_are_centred():
    graph = build_graph(_generate(3, 3, seed=2), dense=True, cell_size=2.0)

    assert np.allclose(graph.node_at(0, 0).world_pos, [-2.0, 0.0, -2.0])
    assert np.allclose(graph.node_at(1, 1).world_pos, [0.0, 0.0, 0.0])
    assert np.allclose(graph.node_at(2, 2).world_pos, [2.0, 0.0, 2.0])
    assert np.allclose(graph.node_at(2, 0).world_pos, [2.0, 0.0, -2.0])


def test_connect_ignores_duplicates_and_self():
    graph = build_graph(_grid_from_openings(2, 1, [((0, 0), EAST)]))
    a, b = graph.node_at(0, 0), graph.node_at(1, 0)

    a.connect(b)
    b.connect(a)
    a.connect(a)

    assert a.neighbors == [b]
    assert b.neighbors == [a]
