from typing import Iterable, List, Sequence, Set, Tuple

from maze_gen import DIRS, Maze, create_grid

Coord = Tuple[int, int]


def direction_between(a: Coord, b: Coord) -> int:
    step = (b[0] - a[0], b[1] - a[1])
    return DIRS.index(step)


def carve_route(maze: Maze, route: Sequence[Coord]) -> Maze:
    """Open the walls along a route of grid-adjacent cells."""
    for a, b in zip(route, route[1:]):
        maze.carve(a[0], a[1], direction_between(a, b))
    return maze


def build_maze(width: int, height: int, *routes: Sequence[Coord]) -> Maze:
    maze = create_grid(width, height)
    for route in routes:
        carve_route(maze, route)
    return maze


def flood_fill(maze: Maze, start: Coord) -> Set[Coord]:
    """Cells reachable from start through open walls only."""
    seen = {start}
    stack = [start]
    while stack:
        x, y = stack.pop()
        for nxt in maze.cell_neighbors(x, y):
            if nxt not in seen:
                seen.add(nxt)
                stack.append(nxt)
    return seen


def is_valid_path(maze: Maze, path: List[Coord], links: dict) -> bool:
    for a, b in zip(path, path[1:]):
        if b not in maze.cell_neighbors(*a) and links.get(a) != b:
            return False
    return True


def portal_ids(maze: Maze) -> Iterable[int]:
    return [maze.cells[y][x].portal.id for x, y in maze.portal_cells()]
