import random
from collections import Counter

import pytest

from helpers import flood_fill, portal_ids
from maze_gen import Portal, create_grid, generate, generate_sectioned
from portals import (
    add_portals,
    add_portals_to_sections,
    get_portal_pair,
    has_portal,
    plan_connections,
    portal_index,
)


def assert_pairing(maze):
    cells = maze.portal_cells()
    assert len(cells) % 2 == 0
    for x, y in cells:
        portal = maze.cells[y][x].portal
        partners = [
            (px, py)
            for px, py in cells
            if (px, py) != (x, y)
            and maze.cells[py][px].portal.id == portal.id
        ]
        assert len(partners) == 1
        px, py = partners[0]
        assert {portal.pair_index, maze.cells[py][px].portal.pair_index} == {0, 1}


def test_add_portals_count():
    maze = generate(10, 10)
    placement = add_portals(maze, 3)
    assert placement.placed == 3
    assert len(placement.maze.portal_cells()) == 6


def test_add_portals_not_at_entrance_or_exit():
    for _ in range(20):
        maze = generate(8, 8)
        result = add_portals(maze, 5).maze
        assert result.cells[0][0].portal is None
        assert result.cells[7][7].portal is None


def test_add_portals_pairs_are_valid():
    placement = add_portals(generate(15, 15), 4, rng=random.Random(4))
    assert_pairing(placement.maze)
    assert sorted(Counter(portal_ids(placement.maze)).items()) == [(1, 2), (2, 2), (3, 2), (4, 2)]


def test_add_portals_leaves_input_untouched():
    maze = generate(6, 6)
    add_portals(maze, 2)
    assert maze.portal_cells() == []


def test_add_portals_runs_out_of_cells():
    placement = add_portals(generate(2, 2), 5)
    assert placement.placed == 1
    assert placement.short
    assert_pairing(placement.maze)


def test_add_portals_zero_pairs():
    assert add_portals(generate(4, 4), 0).placed == 0


def test_add_portals_rejects_negative():
    with pytest.raises(ValueError):
        add_portals(generate(4, 4), -1)


def test_add_portals_continues_ids():
    first = add_portals(generate(8, 8), 2, rng=random.Random(1)).maze
    second = add_portals(first, 2, rng=random.Random(2)).maze
    assert sorted(set(portal_ids(second))) == [1, 2, 3, 4]
    assert_pairing(second)


def test_has_portal():
    maze = add_portals(generate(10, 10), 2).maze
    for x, y in maze.coords():
        assert has_portal(maze, x, y) == (maze.cells[y][x].portal is not None)


def test_get_portal_pair_without_portal():
    maze = create_grid(3, 3)
    assert get_portal_pair(maze, 1, 1) is None


def test_get_portal_pair_finds_partner():
    maze = add_portals(generate(10, 10), 3).maze
    for x, y in maze.portal_cells():
        pair = get_portal_pair(maze, x, y)
        assert pair is not None
        px, py = pair
        assert maze.cells[py][px].portal.id == maze.cells[y][x].portal.id
        assert maze.cells[py][px].portal.pair_index != maze.cells[y][x].portal.pair_index


def test_get_portal_pair_missing_partner():
    maze = create_grid(3, 3)
    maze.cells[1][1].portal = Portal(1, 0)
    assert get_portal_pair(maze, 1, 1) is None
    assert portal_index(maze) == {}


def test_portal_index_both_directions():
    maze = create_grid(4, 4)
    maze.cells[1][1].portal = Portal(7, 0)
    maze.cells[3][2].portal = Portal(7, 1)
    assert portal_index(maze) == {(1, 1): (2, 3), (2, 3): (1, 1)}


def test_plan_connections_chain_first():
    dead_ends = [[(0, 1)], [(0, 5)], [(0, 9)], [(0, 13)]]
    assert plan_connections(dead_ends, 3, random.Random(0)) == [(0, 1), (1, 2), (2, 3)]
    assert plan_connections(dead_ends, 2, random.Random(0)) == [(0, 1), (1, 2)]


def test_plan_connections_extra_are_not_adjacent():
    dead_ends = [[(0, 1)], [(0, 5)], [(0, 9)], [(0, 13)]]
    planned = plan_connections(dead_ends, 10, random.Random(0))
    assert planned[:3] == [(0, 1), (1, 2), (2, 3)]
    extra = planned[3:]
    assert sorted(extra) == [(0, 2), (0, 3), (1, 3)]


def test_plan_connections_skips_empty_sections():
    dead_ends = [[(0, 1)], [], [(0, 9)]]
    assert plan_connections(dead_ends, 1, random.Random(0)) == [(0, 2)]


def test_sections_portals_on_dead_ends():
    for seed in range(20):
        rng = random.Random(seed)
        sectioned = generate_sectioned(21, 30, 4, rng=rng)
        placement = add_portals_to_sections(sectioned.maze, sectioned.dead_ends, 3, rng=rng)
        maze = placement.maze
        assert placement.placed == 3
        assert_pairing(maze)
        for x, y in maze.portal_cells():
            assert maze.cells[y][x].wall_count() == 3
            assert not maze.is_terminal(x, y)


def test_sections_portal_ends_unreachable_without_portal():
    for seed in range(20):
        rng = random.Random(seed)
        sectioned = generate_sectioned(30, 42, 5, rng=rng)
        placement = add_portals_to_sections(sectioned.maze, sectioned.dead_ends, 6, rng=rng)
        for a, b in placement.pairs:
            assert b not in flood_fill(placement.maze, a)


def test_sections_portals_link_different_sections():
    rng = random.Random(12)
    sectioned = generate_sectioned(21, 30, 3, rng=rng)
    placement = add_portals_to_sections(sectioned.maze, sectioned.dead_ends, 2, rng=rng)
    maze = placement.maze
    links = {
        (maze.cells[ay][ax].section_id, maze.cells[by][bx].section_id)
        for (ax, ay), (bx, by) in placement.pairs
    }
    assert links == {(0, 1), (1, 2)}


def test_sections_dead_ends_not_reused():
    dead_ends = [[(1, 1)], [(1, 4)], [(1, 7)]]
    maze = create_grid(3, 9)
    placement = add_portals_to_sections(maze, dead_ends, 3, rng=random.Random(0))
    # section 1 only has one dead end, so the chain can't be completed
    assert placement.placed == 1
    assert placement.short
    assert len(placement.maze.portal_cells()) == 2


def test_sections_fewer_pairs_than_requested():
    rng = random.Random(3)
    sectioned = generate_sectioned(12, 17, 2, rng=rng)
    placement = add_portals_to_sections(sectioned.maze, sectioned.dead_ends, 50, rng=rng)
    assert placement.placed <= 50
    assert len(placement.maze.portal_cells()) == 2 * placement.placed
    assert_pairing(placement.maze)


def test_sections_zero_pairs():
    sectioned = generate_sectioned(12, 17, 2)
    placement = add_portals_to_sections(sectioned.maze, sectioned.dead_ends, 0)
    assert placement.placed == 0
    assert placement.maze.portal_cells() == []


def test_sections_leaves_input_untouched():
    sectioned = generate_sectioned(12, 17, 3)
    add_portals_to_sections(sectioned.maze, sectioned.dead_ends, 2)
    assert sectioned.maze.portal_cells() == []


def test_sections_ids_start_at_one():
    rng = random.Random(9)
    sectioned = generate_sectioned(21, 30, 4, rng=rng)
    placement = add_portals_to_sections(sectioned.maze, sectioned.dead_ends, 3, rng=rng)
    assert sorted(set(portal_ids(placement.maze))) == [1, 2, 3]
