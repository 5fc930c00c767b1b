#Portal placement
#A portal pair is two cells sharing an id, one with pair_index 0 and the other with pair_index 1
#Stepping onto either one lets the solver jump to the other in a single move
#add_portals() sprinkles pairs anywhere on an already connected maze
#add_portals_to_sections() links the separately carved sections of a sectioned maze through their dead ends

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Set, Tuple

from maze_gen import Coord, Maze, Portal

logger = logging.getLogger(__name__)

Connection = Tuple[int, int]


@dataclass
class PortalPlacement:
    maze: Maze
    pairs: List[Tuple[Coord, Coord]] = field(default_factory=list)
    requested: int = 0

    @property
    def placed(self) -> int:
        return len(self.pairs)

    @property
    def short(self) -> bool:
        return self.placed < self.requested


def has_portal(maze: Maze, x: int, y: int) -> bool:
    return maze.cells[y][x].portal is not None


def get_portal_pair(maze: Maze, x: int, y: int) -> Optional[Coord]:
    #The other endpoint of the portal at (x, y), None if there is no portal or its partner is missing
    portal = maze.cells[y][x].portal
    if portal is None:
        return None
    for px, py in maze.coords():
        if (px, py) == (x, y):
            continue
        other = maze.cells[py][px].portal
        if other is not None and other.id == portal.id and other.pair_index != portal.pair_index:
            return px, py
    return None


def portal_index(maze: Maze) -> Dict[Coord, Coord]:
    #Every complete pairing in one pass, both directions
    by_id: Dict[int, Dict[int, Coord]] = {}
    for x, y in maze.coords():
        portal = maze.cells[y][x].portal
        if portal is not None:
            by_id.setdefault(portal.id, {})[portal.pair_index] = (x, y)
    links: Dict[Coord, Coord] = {}
    for portal_id, ends in by_id.items():
        if 0 in ends and 1 in ends:
            links[ends[0]] = ends[1]
            links[ends[1]] = ends[0]
        else:
            logger.warning("portal %s has no partner", portal_id)
    return links


def next_portal_id(maze: Maze) -> int:
    ids = [maze.cells[y][x].portal.id for x, y in maze.portal_cells()]
    return max(ids, default=0) + 1


def link(maze: Maze, portal_id: int, a: Coord, b: Coord) -> None:
    ax, ay = a
    bx, by = b
    maze.cells[ay][ax].portal = Portal(portal_id, 0)
    maze.cells[by][bx].portal = Portal(portal_id, 1)


def add_portals(
    maze: Maze,
    num_pairs: int,
    rng: Optional[random.Random] = None,
) -> PortalPlacement:
    #Unconstrained placement for a single connected maze
    #Endpoints may well be reachable from each other without the portal, nothing checks for that here
    if num_pairs < 0:
        raise ValueError(f"portal pair count must not be negative, got {num_pairs}")
    rng = rng or random.Random()
    result = maze.clone()

    candidates = [
        (x, y)
        for x, y in result.coords()
        if not result.is_terminal(x, y) and result.cells[y][x].portal is None
    ]
    rng.shuffle(candidates)

    placement = PortalPlacement(result, requested=num_pairs)
    portal_id = next_portal_id(result)
    for i in range(num_pairs):
        if i * 2 + 1 >= len(candidates):
            break
        a, b = candidates[i * 2], candidates[i * 2 + 1]
        link(result, portal_id, a, b)
        placement.pairs.append((a, b))
        portal_id += 1

    if placement.short:
        logger.warning("placed %s of %s requested portal pairs", placement.placed, num_pairs)
    return placement


def plan_connections(
    dead_ends: Sequence[Sequence[Coord]],
    num_pairs: int,
    rng: random.Random,
) -> List[Connection]:
    #Neighbouring sections first so every section is chained to the next one,
    # -then random non-neighbouring pairs if more portals were asked for
    sections = len(dead_ends)
    required = [
        (i, i + 1)
        for i in range(sections - 1)
        if dead_ends[i] and dead_ends[i + 1]
    ]
    planned = required[:num_pairs]
    if num_pairs > len(planned):
        extra = [
            (i, j)
            for i in range(sections)
            for j in range(i + 2, sections)
            if dead_ends[i] and dead_ends[j]
        ]
        rng.shuffle(extra)
        planned.extend(extra[: num_pairs - len(planned)])
    return planned


def add_portals_to_sections(
    maze: Maze,
    dead_ends: Sequence[Sequence[Coord]],
    num_pairs: int,
    rng: Optional[random.Random] = None,
) -> PortalPlacement:
    #Both ends of every pair are dead ends in different sections
    #Sections share no open wall, so the two ends can only meet through the portal itself
    if num_pairs < 0:
        raise ValueError(f"portal pair count must not be negative, got {num_pairs}")
    rng = rng or random.Random()
    result = maze.clone()
    placement = PortalPlacement(result, requested=num_pairs)

    used: Set[int] = set()
    portal_id = next_portal_id(result)
    for section_a, section_b in plan_connections(dead_ends, num_pairs, rng):
        free_a = [(x, y) for x, y in dead_ends[section_a] if result.key(x, y) not in used]
        free_b = [(x, y) for x, y in dead_ends[section_b] if result.key(x, y) not in used]
        if not free_a or not free_b:
            logger.warning(
                "skipping portal between sections %s and %s: no unused dead end left",
                section_a,
                section_b,
            )
            continue
        a = rng.choice(free_a)
        b = rng.choice(free_b)
        link(result, portal_id, a, b)
        used.add(result.key(*a))
        used.add(result.key(*b))
        placement.pairs.append((a, b))
        logger.debug("portal %s links section %s %s to section %s %s", portal_id, section_a, a, section_b, b)
        portal_id += 1

    if placement.short:
        logger.warning("placed %s of %s requested portal pairs", placement.placed, num_pairs)
    return placement
