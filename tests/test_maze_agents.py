import numpy as np

from mazenav.maze_agents import (GhostAgent, GhostSettings, GhostSpawner, PlayerAgent, WaypointFollower,
                                 derive_rng, spawn_positions)
from mazenav.maze_generator import MazeConfig
from mazenav.maze_session import MazeSession
from mazenav.maze_solver import validate_path


def _corridor_session():
    """4x1 maze: a single east-west corridor, nodes only at both ends."""
    session = MazeSession(MazeConfig(width=4, height=1, seed=0))
    session.generate()
    return session


def _run(agent, steps=200, dt=0.05):
    for _ in range(steps):
        if agent.update(dt):
            return True
    return False


def test_derive_rng_is_reproducible():
    a = derive_rng(10, 5)
    b = derive_rng(10, 5)
    c = derive_rng(10, 6)

    seq_a = [a.random() for _ in range(5)]
    assert seq_a == [b.random() for _ in range(5)]
    assert seq_a != [c.random() for _ in range(5)]


def test_waypoint_follower_reaches_last_waypoint():
    follower = WaypointFollower((0.0, 1.0, 0.0), move_speed=2.0)
    follower.set_waypoints([(1.0, 0.0, 0.0), (1.0, 0.0, 1.0)])

    done = False
    for _ in range(100):
        done = follower.tick(0.1)
        if done:
            break

    assert done
    assert not follower.is_moving
    assert np.allclose(follower.position, [1.0, 1.0, 1.0])


def test_player_placed_at_start_after_generation():
    session = MazeSession(MazeConfig(width=5, height=5, seed=1))
    player = PlayerAgent(session, position=(3.0, 0.5, 3.0))
    player.attach()

    session.generate()

    assert np.allclose(player.position, [-2.0, 0.5, -2.0])
    player.detach()
    assert player.place_at_start not in session.on_generated


def test_player_mid_corridor_destination():
    session = _corridor_session()
    player = PlayerAgent(session)
    player.attach()

    final = player.set_destination((0.2, 0.0, 0.1))

    assert np.allclose(final, [0.2, 0.0, 0.0])
    assert player.goal_node is session.graph.node_at(0, 0)
    assert _run(player)
    assert player.goal_reached
    assert np.allclose(player.position, [0.2, 0.0, 0.0], atol=0.06)


def test_player_snaps_to_nearest_node_off_corridor():
    session = _corridor_session()
    player = PlayerAgent(session)
    player.attach()

    final = player.set_destination((1.4, 0.0, 3.0))

    assert np.allclose(final, [1.5, 0.0, 0.0])
    assert player.goal_node is session.graph.node_at(3, 0)
    assert _run(player)


def test_player_without_corridor_capture():
    session = _corridor_session()
    player = PlayerAgent(session, allow_mid_corridor=False)
    player.attach()

    final = player.set_destination((0.9, 0.0, 0.0))

    assert np.allclose(final, [1.5, 0.0, 0.0])


def test_ghost_chases_player_node():
    session = MazeSession(MazeConfig(width=8, height=8, seed=6))
    session.generate()
    goal = session.graph.node_at(7, 7)
    ghost = GhostAgent(session, session.graph.node_at(0, 0).world_pos, derive_rng(1), chase_chance=1.0)

    path = ghost.retarget(goal.world_pos)

    assert ghost.chasing
    assert path[-1] is goal
    assert validate_path(path)
    assert ghost.is_moving


def test_ghost_scatters_to_random_node():
    session = MazeSession(MazeConfig(width=8, height=8, seed=6))
    session.generate()
    ghost = GhostAgent(session, (0.0, 0.0, 0.0), derive_rng(2), chase_chance=0.0)

    path = ghost.retarget((100.0, 0.0, 100.0))

    assert not ghost.chasing
    assert path[-1] in session.graph
    assert validate_path(path)


def test_ghost_retargets_on_interval():
    session = MazeSession(MazeConfig(width=6, height=6, seed=6))
    session.generate()
    ghost = GhostAgent(session, (0.0, 0.0, 0.0), derive_rng(3), retarget_interval=1.0)

    ghost.update(0.5)
    assert ghost.current_path is None
    ghost.update(0.6)
    assert ghost.current_path is not None
    assert ghost.timer == 0.0


def test_spawner_respawns_on_generation():
    session = MazeSession(MazeConfig(width=10, height=10, seed=8))
    spawner = GhostSpawner(session, GhostSettings(count=3))

    session.generate()
    first = spawner.ghosts
    session.generate(seed=9)

    assert len(first) == 3
    assert len(spawner.ghosts) == 3
    assert spawner.ghosts is not first
    for ghost in spawner.ghosts:
        assert ghost.current_path is None or validate_path(ghost.current_path)


def test_spawner_is_deterministic_with_seed():
    def positions(seed):
        session = MazeSession(MazeConfig(width=10, height=10, seed=seed))
        spawner = GhostSpawner(session, GhostSettings(count=4))
        session.generate()
        return [tuple(g.position) for g in spawner.ghosts], [g.current_path[-1].cell for g in spawner.ghosts]

    assert positions(5) == positions(5)


def test_spawner_with_no_ghosts():
    session = MazeSession(MazeConfig(width=4, height=4, seed=1))
    spawner = GhostSpawner(session, GhostSettings(count=0))
    session.generate()

    assert spawner.ghosts == []
    spawner.detach()
    assert spawner.spawn not in session.on_generated


def test_spawn_positions():
    assert spawn_positions([], 3, derive_rng(1)) == []
    session = _corridor_session()
    nodes = list(session.graph)

    picked = spawn_positions(nodes, 5, derive_rng(1))

    assert len(picked) == 5
    assert all(node in nodes for node in picked)


def test_spawner_uses_call_seed():
    def positions():
        session = MazeSession(MazeConfig(width=8, height=8))
        spawner = GhostSpawner(session, GhostSettings(count=3))
        session.generate(seed=12)
        return [tuple(g.position) for g in spawner.ghosts]

    assert positions() == positions()
