#Portal maze engine: grid model and generators
#A maze is a width x height grid of cells, each cell keeps its own 4 walls (N, E, S, W)
#Two generators live here:
#generate() carves one perfect maze over the whole grid with randomized DFS
#generate_sectioned() cuts the grid into bands and carves a separate perfect maze inside each band,
# -so bands are never joined by a passage, only portals (see portals.py) can link them

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from typing import Iterable, Iterator, List, Optional, Tuple

logger = logging.getLogger(__name__)

Coord = Tuple[int, int]

#Direction indices are fixed, consumers rely on them: 0 = N, 1 = E, 2 = S, 3 = W
NORTH, EAST, SOUTH, WEST = 0, 1, 2, 3
DIRS: Tuple[Coord, ...] = (
    (0, -1),
    (1, 0),
    (0, 1),
    (-1, 0),
)
DIR_NAMES = ("N", "E", "S", "W")

MIN_SECTIONS = 2
MIN_SECTION_THICKNESS = 3


def opposite(direction: int) -> int:
    return (direction + 2) % 4


def within_bounds(width: int, height: int, x: int, y: int) -> bool:
    return 0 <= x < width and 0 <= y < height


@dataclass(frozen=True)
class Portal:
    id: int
    pair_index: int


@dataclass
class Cell:
    walls: List[bool] = field(default_factory=lambda: [True, True, True, True])
    visited: bool = False
    portal: Optional[Portal] = None
    section_id: Optional[int] = None

    def wall_count(self) -> int:
        return sum(1 for wall in self.walls if wall)

    def open_walls(self) -> List[int]:
        return [direction for direction, wall in enumerate(self.walls) if not wall]

    def is_dead_end(self) -> bool:
        return self.wall_count() == 3

    def copy(self) -> "Cell":
        return Cell(list(self.walls), self.visited, self.portal, self.section_id)


class Maze:
#Rectangular grid of cells addressed cells[y][x]
#Entrance is always (0, 0) and the exit is always (width - 1, height - 1)

    def __init__(self, width: int, height: int):
        if width < 1 or height < 1:
            raise ValueError(f"maze dimensions must be positive, got {width}x{height}")
        self.width = width
        self.height = height
        self.cells: List[List[Cell]] = [
            [Cell() for _ in range(width)] for _ in range(height)
        ]

    @property
    def entrance(self) -> Coord:
        return (0, 0)

    @property
    def exit(self) -> Coord:
        return (self.width - 1, self.height - 1)

    def is_terminal(self, x: int, y: int) -> bool:
        return (x, y) == self.entrance or (x, y) == self.exit

    def in_bounds(self, x: int, y: int) -> bool:
        return within_bounds(self.width, self.height, x, y)

    def cell(self, x: int, y: int) -> Cell:
        return self.cells[y][x]

    def coords(self) -> Iterator[Coord]:
        for y in range(self.height):
            for x in range(self.width):
                yield x, y

    def key(self, x: int, y: int) -> int:
        return y * self.width + x

    def carve(self, x: int, y: int, direction: int) -> None:
        #Open the wall on both sides of the edge, boundary walls only have the one side
        self.cells[y][x].walls[direction] = False
        dx, dy = DIRS[direction]
        nx, ny = x + dx, y + dy
        if self.in_bounds(nx, ny):
            self.cells[ny][nx].walls[opposite(direction)] = False

    def seal(self, x: int, y: int, direction: int) -> None:
        self.cells[y][x].walls[direction] = True
        dx, dy = DIRS[direction]
        nx, ny = x + dx, y + dy
        if self.in_bounds(nx, ny):
            self.cells[ny][nx].walls[opposite(direction)] = True

    def cell_neighbors(self, x: int, y: int) -> List[Coord]:
        #Neighbours reachable through an open wall, always in N, E, S, W order
        return [
            (nx, ny)
            for direction, (dx, dy) in enumerate(DIRS)
            if not self.cells[y][x].walls[direction]
            and within_bounds(self.width, self.height, nx := x + dx, ny := y + dy)
        ]

    def reset_visited(self) -> None:
        for row in self.cells:
            for cell in row:
                cell.visited = False

    def portal_cells(self) -> List[Coord]:
        return [(x, y) for x, y in self.coords() if self.cells[y][x].portal is not None]

    def section_cells(self, section_id: int) -> List[Coord]:
        return [(x, y) for x, y in self.coords() if self.cells[y][x].section_id == section_id]

    def clone(self) -> "Maze":
        copy = Maze.__new__(Maze)
        copy.width = self.width
        copy.height = self.height
        copy.cells = [[cell.copy() for cell in row] for row in self.cells]
        return copy

    def to_grid(self) -> List[List[int]]:
        #Block grid for drawing, 1 is floor and 0 is wall
        grid_w = self.width * 2 + 1
        grid_h = self.height * 2 + 1
        grid = [[0 for _ in range(grid_w)] for _ in range(grid_h)]
        for y in range(self.height):
            for x in range(self.width):
                cell = self.cells[y][x]
                gx, gy = 2 * x + 1, 2 * y + 1
                grid[gy][gx] = 1
                if not cell.walls[NORTH]:
                    grid[gy - 1][gx] = 1
                if not cell.walls[SOUTH]:
                    grid[gy + 1][gx] = 1
                if not cell.walls[WEST]:
                    grid[gy][gx - 1] = 1
                if not cell.walls[EAST]:
                    grid[gy][gx + 1] = 1
        return grid


def create_grid(width: int, height: int) -> Maze:
    return Maze(width, height)


@dataclass(frozen=True)
class Region:
    #Half-open box [x0, x1) x [y0, y1)
    x0: int
    y0: int
    x1: int
    y1: int

    def contains(self, x: int, y: int) -> bool:
        return self.x0 <= x < self.x1 and self.y0 <= y < self.y1

    @property
    def size(self) -> int:
        return (self.x1 - self.x0) * (self.y1 - self.y0)


def carve_region(
    maze: Maze,
    region: Region,
    rng: random.Random,
    start: Optional[Coord] = None,
    section_id: Optional[int] = None,
) -> int:
    #Randomized DFS with an explicit backtracking stack, never steps outside the region
    #Every cell it reaches gets tagged with section_id when one is given
    #Returns the number of loop iterations, bounded by 4 * cells since each cell is pushed and popped once
    if start is None:
        start = (rng.randrange(region.x0, region.x1), rng.randrange(region.y0, region.y1))
    if not region.contains(*start):
        raise ValueError(f"start cell {start} lies outside region {region}")

    sx, sy = start
    first = maze.cells[sy][sx]
    first.visited = True
    if section_id is not None:
        first.section_id = section_id
    stack = [start]

    limit = 4 * region.size + 4
    iterations = 0
    while stack:
        iterations += 1
        if iterations > limit:
            logger.warning("DFS carving hit its iteration cap (%s) in region %s", limit, region)
            break
        x, y = stack[-1]
        unvisited = [
            (direction, (nx, ny))
            for direction, (dx, dy) in enumerate(DIRS)
            if region.contains(nx := x + dx, ny := y + dy)
            and not maze.cells[ny][nx].visited
        ]
        if not unvisited:
            stack.pop()
            continue
        direction, (nx, ny) = rng.choice(unvisited)
        maze.carve(x, y, direction)
        nxt = maze.cells[ny][nx]
        nxt.visited = True
        if section_id is not None:
            nxt.section_id = section_id
        stack.append((nx, ny))
    return iterations


def generate(
    width: int,
    height: int,
    rng: Optional[random.Random] = None,
    start: Optional[Coord] = None,
) -> Maze:
    #Perfect maze: a spanning tree over the whole grid, so every cell reaches every other one
    rng = rng or random.Random()
    maze = create_grid(width, height)
    carve_region(maze, Region(0, 0, width, height), rng, start=start)
    maze.reset_visited()
    return maze


@dataclass
class SectionedMaze:
    maze: Maze
    dead_ends: List[List[Coord]]

    @property
    def sections(self) -> int:
        return len(self.dead_ends)


def max_sections(width: int, height: int) -> int:
    return max(MIN_SECTIONS, min(width // MIN_SECTION_THICKNESS, height // MIN_SECTION_THICKNESS))


def clamp_sections(width: int, height: int, requested: int) -> int:
    upper = max_sections(width, height)
    return max(MIN_SECTIONS, min(requested, upper))


def section_bounds(length: int, sections: int) -> List[int]:
    #sections + 1 evenly spaced cut points, the last one pinned to the axis length
    bounds = [(i * length) // sections for i in range(sections)]
    bounds.append(length)
    return bounds


def section_regions(width: int, height: int, sections: int) -> List[Region]:
    #Horizontal bands when the grid is at least as tall as it is wide, vertical bands otherwise
    if height >= width:
        cuts = section_bounds(height, sections)
        return [Region(0, cuts[i], width, cuts[i + 1]) for i in range(sections)]
    cuts = section_bounds(width, sections)
    return [Region(cuts[i], 0, cuts[i + 1], height) for i in range(sections)]


def find_dead_ends(maze: Maze, sections: int) -> List[List[Coord]]:
    #A dead end has exactly one open wall, the entrance and exit never count
    dead_ends: List[List[Coord]] = [[] for _ in range(sections)]
    for x, y in maze.coords():
        if maze.is_terminal(x, y):
            continue
        cell = maze.cells[y][x]
        if cell.section_id is None or not 0 <= cell.section_id < sections:
            continue
        if cell.is_dead_end():
            dead_ends[cell.section_id].append((x, y))
    return dead_ends


def force_dead_end(maze: Maze, section_id: int, rng: random.Random) -> Optional[Coord]:
    #Close all but one open wall on some cell of the section so it becomes a dead end
    candidates = maze.section_cells(section_id)
    rng.shuffle(candidates)
    for x, y in candidates:
        if maze.is_terminal(x, y):
            continue
        cell = maze.cells[y][x]
        open_dirs = cell.open_walls()
        if len(open_dirs) < 2:
            continue
        keep = rng.choice(open_dirs)
        for direction in open_dirs:
            if direction != keep:
                maze.seal(x, y, direction)
        logger.debug("forced dead end at %s in section %s (kept %s open)", (x, y), section_id, DIR_NAMES[keep])
        return x, y
    return None


def open_boundary(maze: Maze, rng: random.Random) -> None:
    #One outer opening at the entrance (N or W) and one at the exit (S or E)
    ex, ey = maze.entrance
    maze.cells[ey][ex].walls[rng.choice((NORTH, WEST))] = False
    gx, gy = maze.exit
    maze.cells[gy][gx].walls[rng.choice((SOUTH, EAST))] = False


def generate_sectioned(
    width: int,
    height: int,
    requested_sections: int,
    rng: Optional[random.Random] = None,
) -> SectionedMaze:
    if width < 1 or height < 1:
        raise ValueError(f"maze dimensions must be positive, got {width}x{height}")
    if requested_sections < 0:
        raise ValueError(f"section count must not be negative, got {requested_sections}")
    rng = rng or random.Random()

    sections = clamp_sections(width, height, requested_sections)
    if sections != requested_sections:
        logger.info("section count clamped from %s to %s for a %sx%s grid", requested_sections, sections, width, height)

    maze = create_grid(width, height)
    regions = section_regions(width, height, sections)
    for section_id, region in enumerate(regions):
        if region.size == 0:
            continue
        carve_region(maze, region, rng, section_id=section_id)
        logger.debug("carved section %s over %s", section_id, region)

    ex, ey = maze.entrance
    gx, gy = maze.exit
    maze.cells[ey][ex].section_id = 0
    maze.cells[gy][gx].section_id = sections - 1
    open_boundary(maze, rng)
    maze.reset_visited()

    dead_ends = find_dead_ends(maze, sections)
    empty = [section_id for section_id, found in enumerate(dead_ends) if not found]
    if empty:
        for section_id in empty:
            if force_dead_end(maze, section_id, rng) is None:
                logger.warning("section %s has no dead end and none could be made", section_id)
        dead_ends = find_dead_ends(maze, sections)

    logger.debug("dead ends per section: %s", [len(found) for found in dead_ends])
    return SectionedMaze(maze, dead_ends)


def is_spanning(maze: Maze, cells: Optional[Iterable[Coord]] = None) -> bool:
    #True when a flood fill from the first cell over open walls reaches every listed cell
    targets = set(cells) if cells is not None else set(maze.coords())
    if not targets:
        return True
    start = next(iter(targets))
    seen = {start}
    stack = [start]
    while stack:
        x, y = stack.pop()
        for nxt in maze.cell_neighbors(x, y):
            if nxt not in seen:
                seen.add(nxt)
                stack.append(nxt)
    return targets <= seen


def walls_symmetric(maze: Maze) -> bool:
    for x, y in maze.coords():
        for direction in (EAST, SOUTH):
            dx, dy = DIRS[direction]
            nx, ny = x + dx, y + dy
            if not maze.in_bounds(nx, ny):
                continue
            if maze.cells[y][x].walls[direction] != maze.cells[ny][nx].walls[opposite(direction)]:
                return False
    return True
