"""
Maze Agents

Callers of the path planner: pursuing ghosts that alternate between chasing the
player and scattering to random nodes, a player that walks to clicked points
(snapping onto corridors), and a spawner that repopulates ghosts after each
generation. Movement is planar (x, z); the y coordinate of an agent is kept.
"""

import logging
import random
from collections import deque
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

import numpy as np

from .maze_graph import MazeNode
from .maze_session import MazeSession
from .maze_solver import path_cost


def derive_rng(base_seed: Optional[int], offset: int = 0) -> random.Random:
    """
    Independent random stream for one consumer. Streams built from the same base
    seed and offset repeat exactly; a None base seed gives ambient randomness.
    """
    if base_seed is None:
        return random.Random()
    return random.Random(base_seed + offset)


def _flat(v: Sequence[float]) -> np.ndarray:
    p = np.array(v, dtype=float)
    p[1] = 0.0
    return p


class WaypointFollower:
    """Moves a position through a queue of world waypoints at constant speed."""

    def __init__(self, position: Sequence[float], move_speed: float, arrive_threshold: float = 0.05):
        self.position = np.array(position, dtype=float)
        self.move_speed = move_speed
        self.arrive_threshold = arrive_threshold
        self.waypoints = deque()
        self.active_waypoint: Optional[np.ndarray] = None

    @property
    def is_moving(self) -> bool:
        return self.active_waypoint is not None

    def set_waypoints(self, waypoints: Sequence[Sequence[float]]):
        self.waypoints = deque(np.array(w, dtype=float) for w in waypoints)
        self.active_waypoint = self.waypoints.popleft() if self.waypoints else None

    def clear_waypoints(self):
        self.waypoints.clear()
        self.active_waypoint = None

    def tick(self, dt: float) -> bool:
        """Advance by dt seconds. True on the tick the last waypoint is reached."""
        if self.active_waypoint is None:
            return False

        target = self.active_waypoint.copy()
        target[1] = self.position[1]
        delta = target - self.position
        dist = float(np.linalg.norm(delta))

        if dist <= self.arrive_threshold:
            if self.waypoints:
                self.active_waypoint = self.waypoints.popleft()
                return False
            self.active_waypoint = None
            return True

        step = self.move_speed * dt
        if step >= dist:
            self.position = target
        else:
            self.position = self.position + delta / dist * step
        return False


class GhostAgent(WaypointFollower):
    """
    Pursuer that periodically picks a new target: the player's nearest node with
    probability chase_chance, otherwise a random node of the graph.
    """

    def __init__(self, session: MazeSession, position: Sequence[float], rng: random.Random,
                 move_speed: float = 3.0, retarget_interval: float = 3.0, chase_chance: float = 0.5):
        super().__init__(position, move_speed)
        self.session = session
        self.rng = rng
        self.retarget_interval = retarget_interval
        self.chase_chance = chase_chance
        self.chasing = False
        self.timer = 0.0
        self.current_path: Optional[List[MazeNode]] = None

    def retarget(self, player_position: Optional[Sequence[float]] = None) -> Optional[List[MazeNode]]:
        self.chasing = self.rng.random() < self.chase_chance
        planner = self.session.planner()
        start = planner.nearest_node(self.position)
        if start is None:
            return None

        goal = None
        if self.chasing and player_position is not None:
            goal = planner.nearest_node(player_position)
        if goal is None:
            # scatter
            nodes = list(planner.graph)
            goal = nodes[self.rng.randrange(len(nodes))]

        self.current_path = planner.find_node_path(start, goal)
        self.set_waypoints(planner.path_to_positions(self.current_path) if self.current_path else [])
        return self.current_path

    def update(self, dt: float, player_position: Optional[Sequence[float]] = None):
        self.timer += dt
        if self.timer >= self.retarget_interval:
            self.timer = 0.0
            self.retarget(player_position)
        self.tick(dt)


class PlayerAgent(WaypointFollower):
    """
    Player walking to requested world points.

    A point lying within corridor_capture_radius of the interior of a graph edge
    becomes the final waypoint itself, reached through whichever edge endpoint is
    cheaper. Any other point snaps to its nearest node.
    """

    def __init__(self, session: MazeSession, position: Sequence[float] = (0.0, 0.0, 0.0),
                 move_speed: float = 4.0, arrive_threshold: float = 0.05,
                 allow_mid_corridor: bool = True, corridor_capture_radius: float = 0.45):
        super().__init__(position, move_speed, arrive_threshold)
        self.session = session
        self.allow_mid_corridor = allow_mid_corridor
        self.corridor_capture_radius = corridor_capture_radius
        self.goal_node: Optional[MazeNode] = None
        self.goal_position: Optional[np.ndarray] = None
        self.goal_reached = False

    def attach(self):
        """Re-place the player at the maze start after every generation."""
        self.session.on_generated.append(self.place_at_start)
        if self.session.is_generated:
            self.place_at_start()

    def detach(self):
        if self.place_at_start in self.session.on_generated:
            self.session.on_generated.remove(self.place_at_start)

    def place_at_start(self):
        start = self.session.graph.node_at(0, 0) if self.session.graph is not None else None
        target = start.world_pos.copy() if start is not None else np.zeros(3)
        target[1] = self.position[1]
        self.position = target
        self.clear_goal()
        self.clear_waypoints()

    def clear_goal(self):
        self.goal_node = None
        self.goal_position = None
        self.goal_reached = False

    def find_corridor_point(self, world_point: Sequence[float]) -> Optional[Tuple[np.ndarray, MazeNode, MazeNode]]:
        """Closest point on an edge interior within the capture radius, with the edge's nodes."""
        click = _flat(world_point)
        capture_sq = self.corridor_capture_radius ** 2
        best, best_sq = None, float('inf')

        for a, b in self.session.graph.iter_edges():
            p0, p1 = _flat(a.world_pos), _flat(b.world_pos)
            seg = p1 - p0
            length = float(np.linalg.norm(seg))
            if length < 1e-3:
                continue
            t = float(np.dot(click - p0, seg)) / (length * length)
            if t <= 0.0 or t >= 1.0:
                continue  # interior only
            closest = p0 + seg * t
            dist_sq = float(np.sum((closest - click) ** 2))
            if dist_sq < capture_sq and dist_sq < best_sq:
                best, best_sq = (closest, a, b), dist_sq
        return best

    def set_destination(self, world_point: Sequence[float]) -> Optional[np.ndarray]:
        """
        Plan a route to world_point and start following it.

        Returns:
            The final world position the player heads for, or None if the graph
            is empty.
        """
        planner = self.session.planner()
        start = planner.nearest_node(self.position)
        if start is None:
            return None
        self.clear_goal()

        corridor = self.find_corridor_point(world_point) if self.allow_mid_corridor else None
        if corridor is not None:
            point, a, b = corridor
            path_a = planner.find_node_path(start, a)
            path_b = planner.find_node_path(start, b)
            chosen = path_a if path_cost(path_a) <= path_cost(path_b) else path_b
            waypoints = planner.path_to_positions(chosen) if chosen else []
            waypoints.append(point)
            self.goal_node = chosen[-1] if chosen else None
            final = point
        else:
            dest = planner.nearest_node(world_point)
            path = planner.find_node_path(start, dest)
            waypoints = planner.path_to_positions(path) if path else []
            self.goal_node = dest
            final = dest.world_pos.copy()

        self.goal_position = final
        self.set_waypoints(waypoints)
        return final

    def update(self, dt: float) -> bool:
        """Tick movement. True on the tick the goal is reached."""
        if not self.tick(dt):
            return False
        if self.goal_position is not None and float(np.sum((_flat(self.position) - _flat(self.goal_position)) ** 2)) < 0.25:
            self.goal_reached = True
            return True
        return False


@dataclass
class GhostSettings:
    """Behaviour defaults handed to every spawned ghost."""
    count: int = 4
    move_speed: float = 3.0
    retarget_interval: float = 1.5
    chase_chance: float = 0.65
    spawn_seed_offset: int = 777
    scatter_seed_offset: int = 999


def spawn_positions(nodes: Sequence[MazeNode], count: int, rng: random.Random) -> List[MazeNode]:
    """Pick count spawn nodes at random, repeats allowed."""
    if not nodes:
        return []
    return [nodes[rng.randrange(len(nodes))] for _ in range(count)]


class GhostSpawner:
    """Respawns ghosts on random nodes each time the session generates a maze."""

    def __init__(self, session: MazeSession, settings: Optional[GhostSettings] = None,
                 player: Optional[PlayerAgent] = None, auto_spawn: bool = True):
        self.session = session
        self.settings = settings if settings is not None else GhostSettings()
        self.player = player
        self.ghosts: List[GhostAgent] = []
        if auto_spawn:
            session.on_generated.append(self.spawn)

    def detach(self):
        if self.spawn in self.session.on_generated:
            self.session.on_generated.remove(self.spawn)

    def clear(self):
        self.ghosts = []

    def spawn(self) -> List[GhostAgent]:
        self.clear()
        settings = self.settings
        if settings.count <= 0:
            return self.ghosts
        graph = self.session.graph
        if graph is None or len(graph) == 0:
            logging.warning("GhostSpawner: maze has no nodes yet")
            return self.ghosts

        base_seed = self.session.last_seed
        rng = derive_rng(base_seed, settings.spawn_seed_offset)
        player_position = self.player.position if self.player is not None else None
        for i, node in enumerate(spawn_positions(list(graph), settings.count, rng)):
            ghost = GhostAgent(
                self.session, node.world_pos,
                rng=derive_rng(base_seed, settings.scatter_seed_offset + i),
                move_speed=settings.move_speed,
                retarget_interval=settings.retarget_interval,
                chase_chance=settings.chase_chance,
            )
            ghost.retarget(player_position)
            self.ghosts.append(ghost)

        logging.info(f"Spawned {len(self.ghosts)} ghosts")
        return self.ghosts
