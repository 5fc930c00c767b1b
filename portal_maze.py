#Portal maze generator
#Builds a maze for a named page size, optionally splits it into sections joined only by portals,
# -and always solves it from the entrance (top left) to the exit (bottom right)

#To print a few mazes to the terminal run "python3 portal_maze.py --size M --portals 2"
#To save multiple runs to a csv file, run "python3 portal_maze.py --runs 10 --portals 3 --csv-output results.csv"
#To look at the maze in a window, run "python3 portal_maze.py --mode visual"

from __future__ import annotations

import argparse
import logging
import random
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple, Union

from maze_gen import Coord, Maze, clamp_sections, generate, generate_sectioned
from portals import add_portals_to_sections
from solver import solve

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SizeConfig:
    width: int
    height: int


#Proportions follow an A4 page (1:1.414)
SIZE_CONFIGS: Dict[str, SizeConfig] = {
    "S": SizeConfig(12, 17),
    "M": SizeConfig(21, 30),
    "L": SizeConfig(30, 42),
    "XL": SizeConfig(40, 56),
}

PORTAL_CHOICES = (0, 1, 2, 3, 4, 5)
DEFAULT_SIZE = "M"
DEFAULT_PORTALS = 2

SizeLike = Union[str, SizeConfig, Tuple[int, int]]


def resolve_size(size: SizeLike) -> SizeConfig:
    if isinstance(size, SizeConfig):
        config = size
    elif isinstance(size, str):
        config = SIZE_CONFIGS.get(size.upper())
        if config is None:
            raise ValueError(f"unknown maze size {size!r}, expected one of {', '.join(SIZE_CONFIGS)}")
    else:
        width, height = size
        config = SizeConfig(int(width), int(height))
    if config.width < 1 or config.height < 1:
        raise ValueError(f"maze dimensions must be positive, got {config.width}x{config.height}")
    return config


@dataclass
class MazeResult:
    maze: Maze
    path: List[Coord]
    size: SizeConfig
    requested_portals: int = 0
    portal_pairs: int = 0
    sections: int = 1
    seed: Optional[int] = None
    portal_steps: List[bool] = field(default_factory=list)

    @property
    def solved(self) -> bool:
        return bool(self.path)


def generate_with_portals(
    size: SizeLike,
    num_portal_pairs: int,
    seed: Optional[int] = None,
    rng: Optional[random.Random] = None,
) -> MazeResult:
    #No portals: one perfect maze over the whole page
    #With portals: one section per portal plus one, each pair of neighbouring sections linked by a portal
    if num_portal_pairs < 0:
        raise ValueError(f"portal pair count must not be negative, got {num_portal_pairs}")
    dims = resolve_size(size)
    rng = rng or random.Random(seed)

    if num_portal_pairs == 0:
        maze = generate(dims.width, dims.height, rng=rng)
        solution = solve(maze, maze.entrance, maze.exit)
        return MazeResult(maze, solution.path, dims, 0, 0, 1, seed, solution.portal_steps)

    requested_sections = num_portal_pairs + 1
    sectioned = generate_sectioned(dims.width, dims.height, requested_sections, rng=rng)
    sections = sectioned.sections
    #A chain through n sections needs n - 1 portals
    pairs = min(num_portal_pairs, sections - 1)
    if pairs < num_portal_pairs:
        logger.warning(
            "only %s portal pairs fit in %s sections (requested %s)",
            pairs,
            sections,
            num_portal_pairs,
        )

    placement = add_portals_to_sections(sectioned.maze, sectioned.dead_ends, pairs, rng=rng)
    solution = solve(placement.maze, placement.maze.entrance, placement.maze.exit)
    logger.debug(
        "generated %sx%s maze with %s portal pairs, path length %s",
        dims.width,
        dims.height,
        placement.placed,
        len(solution.path),
    )
    return MazeResult(
        placement.maze,
        solution.path,
        dims,
        num_portal_pairs,
        placement.placed,
        sections,
        seed,
        solution.portal_steps,
    )


def expected_sections(size: SizeLike, num_portal_pairs: int) -> int:
    dims = resolve_size(size)
    if num_portal_pairs <= 0:
        return 1
    return clamp_sections(dims.width, dims.height, num_portal_pairs + 1)


#CLI + visualization

def pick_seed(args) -> int:
    return args.seed if args.seed is not None else random.randint(0, 1_000_000_000)


def resolve_args_size(args, parser: argparse.ArgumentParser) -> SizeLike:
    if (args.width is None) != (args.height is None):
        parser.error("--width and --height must be given together")
    if args.width is not None:
        return (args.width, args.height)
    return args.size


def describe(result: MazeResult) -> str:
    path_len = len(result.path) if result.path else "unsolved"
    return (
        f"maze {result.size.width}x{result.size.height} | seed: {result.seed} | sections: {result.sections}"
        f" | portals: {result.portal_pairs}/{result.requested_portals} | path_len={path_len}"
    )


def run_cli_mode(args, size: SizeLike):
    base_seed = pick_seed(args)
    rows = []
    for run_idx in range(args.runs):
        seed = base_seed + run_idx
        result = generate_with_portals(size, args.portals, seed=seed)
        print(f"Run {run_idx + 1}/{args.runs} {describe(result)}")
        rows.append({
            "run": run_idx + 1,
            "seed": seed,
            "size": size if isinstance(size, str) else "custom",
            "width": result.size.width,
            "height": result.size.height,
            "requested_portals": result.requested_portals,
            "placed_portals": result.portal_pairs,
            "sections": result.sections,
            "path_length": len(result.path),
            "solved": result.solved,
        })

    if args.csv_output:
        import csv

        fieldnames = [
            "run",
            "seed",
            "size",
            "width",
            "height",
            "requested_portals",
            "placed_portals",
            "sections",
            "path_length",
            "solved",
        ]
        with open(args.csv_output, "w", newline="") as f:
            writer = csv.DictWriter(f, fieldnames=fieldnames)
            writer.writeheader()
            writer.writerows(rows)
        print(f"\nWrote {len(rows)} rows to {args.csv_output}")
    return rows


def run_visual_mode(args, size: SizeLike):
    from visualizer import MazeVisualizer

    viewer = MazeVisualizer(
        build=generate_with_portals,
        size=size,
        portals=args.portals,
        seed=pick_seed(args),
        tile_size=args.tile_size,
    )
    viewer.run()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Maze generator with portals and a shortest-path solver.")
    parser.add_argument("--mode", choices=["visual", "cli"], default="cli", help="Choose 'visual' for the pygame viewer or 'cli' for text output.")
    parser.add_argument("--size", type=str.upper, choices=list(SIZE_CONFIGS), default=DEFAULT_SIZE, help="Page size category.")
    parser.add_argument("--width", type=int, default=None, help="Custom maze width in cells (needs --height).")
    parser.add_argument("--height", type=int, default=None, help="Custom maze height in cells (needs --width).")
    parser.add_argument("--portals", type=int, default=DEFAULT_PORTALS, help="Number of portal pairs (0 for a plain maze).")
    parser.add_argument("--seed", type=int, default=None, help="Seed for generation (default: random).")
    parser.add_argument("--runs", type=int, default=1, help="Number of mazes to generate in CLI mode.")
    parser.add_argument("--csv-output", type=str, default=None, help="Path to write CSV metrics.")
    parser.add_argument("--tile-size", type=int, default=16, help="Base tile size for visual mode; auto-scales to fit the screen.")
    parser.add_argument("--verbose", action="store_true", help="Log generation details.")
    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    if args.portals < 0:
        parser.error("--portals must not be negative")
    if args.runs < 1:
        parser.error("--runs must be at least 1")
    size = resolve_args_size(args, parser)
    try:
        resolve_size(size)
    except ValueError as exc:
        parser.error(str(exc))
    if args.mode == "visual":
        run_visual_mode(args, size)
    else:
        run_cli_mode(args, size)


if __name__ == "__main__":
    main()
