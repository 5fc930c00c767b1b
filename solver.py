#Shortest path solver for portal mazes
#Plain BFS where a step is either crossing an open wall or hopping through a portal, both cost 1
#Neighbour order is N, E, S, W and then the portal, so ties always break the same way on the same grid

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set

from maze_gen import Coord, Maze
from portals import portal_index

logger = logging.getLogger(__name__)


@dataclass
class Solution:
    path: List[Coord] = field(default_factory=list)
    portal_steps: List[bool] = field(default_factory=list)
    expanded: int = 0

    @property
    def solved(self) -> bool:
        return bool(self.path)

    @property
    def length(self) -> int:
        return max(0, len(self.path) - 1)

    def portal_hops(self) -> List[int]:
        #Indices i where path[i] -> path[i + 1] went through a portal
        return [i for i, hop in enumerate(self.portal_steps) if hop]


def check_coord(maze: Maze, x: int, y: int, label: str) -> None:
    if not maze.in_bounds(x, y):
        raise ValueError(f"{label} ({x}, {y}) is outside the {maze.width}x{maze.height} maze")


def reconstruct_path(maze: Maze, parent: List[int], through_portal: List[bool], start: int, goal: int) -> Solution:
    if goal != start and parent[goal] < 0:
        return Solution()
    keys = [goal]
    cur = goal
    while cur != start:
        cur = parent[cur]
        keys.append(cur)
    keys.reverse()
    path = [(key % maze.width, key // maze.width) for key in keys]
    hops = [through_portal[key] for key in keys[1:]]
    return Solution(path, hops)


def solve(maze: Maze, start: Coord, goal: Coord) -> Solution:
    check_coord(maze, *start, "start")
    check_coord(maze, *goal, "goal")

    links = portal_index(maze)
    size = maze.width * maze.height
    start_key = maze.key(*start)
    goal_key = maze.key(*goal)
    #Flat arrays keyed by y * width + x
    visited = [False] * size
    parent = [-1] * size
    through_portal = [False] * size

    q = deque([start])
    visited[start_key] = True
    expanded = 0
    found = False
    while q:
        x, y = q.popleft()
        expanded += 1
        if (x, y) == goal:
            found = True
            break
        here = maze.key(x, y)
        for nx, ny in maze.cell_neighbors(x, y):
            key = maze.key(nx, ny)
            if visited[key]:
                continue
            visited[key] = True
            parent[key] = here
            q.append((nx, ny))
        jump = links.get((x, y))
        if jump is not None:
            key = maze.key(*jump)
            if not visited[key]:
                visited[key] = True
                parent[key] = here
                through_portal[key] = True
                q.append(jump)

    if not found:
        logger.warning("no path from %s to %s", start, goal)
        return Solution(expanded=expanded)
    solution = reconstruct_path(maze, parent, through_portal, start_key, goal_key)
    solution.expanded = expanded
    return solution


def find_path(maze: Maze, start_x: int, start_y: int, goal_x: int, goal_y: int) -> List[Coord]:
    return solve(maze, (start_x, start_y), (goal_x, goal_y)).path


def reachable_from(maze: Maze, start: Coord, portals: bool = False) -> Set[Coord]:
    #Flood fill over open walls, portals are only followed when asked to
    check_coord(maze, *start, "start")
    links: Dict[Coord, Coord] = portal_index(maze) if portals else {}
    seen = {start}
    stack = [start]
    while stack:
        x, y = stack.pop()
        steps = maze.cell_neighbors(x, y)
        jump: Optional[Coord] = links.get((x, y))
        if jump is not None:
            steps.append(jump)
        for nxt in steps:
            if nxt not in seen:
                seen.add(nxt)
                stack.append(nxt)
    return seen
