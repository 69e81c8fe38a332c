"""Perfect-maze generator driven by a seed."""

from __future__ import annotations

import argparse
import json
import logging
from dataclasses import dataclass
from typing import Iterator, List, Optional, Tuple

import numpy as np

from .dimensions import MazeDimensions, plan_dimensions
from .grid import ENTRANCE, EXIT, PATH, Position, grid_to_text, new_grid
from .seeding import SeedLike, SeededRandom, generate_random_seed, seeded_shuffle

logger = logging.getLogger(__name__)

# North, South, West, East on the step-2 lattice.
LATTICE_STEPS: Tuple[Position, ...] = ((-2, 0), (2, 0), (0, -2), (0, 2))


@dataclass
class GeneratedMaze:
    grid: np.ndarray
    seed: int
    dimensions: MazeDimensions
    entrance: Position
    exit: Position

    @property
    def rows(self) -> int:
        return self.dimensions.rows

    @property
    def cols(self) -> int:
        return self.dimensions.cols

    @property
    def cell_size(self) -> int:
        return self.dimensions.cell_size

    def to_dict(self) -> dict:
        payload = {"seed": self.seed, "grid": self.grid.tolist()}
        payload.update(self.dimensions.to_dict())
        payload["entrance"] = list(self.entrance)
        payload["exit"] = list(self.exit)
        return payload


class MazeGenerator:
    """Carve perfect mazes with a depth-first recursive backtracker.

    Dimensions come from :func:`plan_dimensions`; carving uses a second
    :class:`SeededRandom` built from the same seed, so the pair
    (seed, algorithm) fully determines the grid.
    """

    def create_maze(self, seed: Optional[SeedLike] = None) -> GeneratedMaze:
        maze_seed = seed if seed is not None else generate_random_seed()
        dimensions = plan_dimensions(maze_seed)
        rng = SeededRandom(maze_seed)
        grid = self._carve(dimensions.rows, dimensions.cols, rng)
        entrance, exit_ = self._place_openings(grid)

        logger.info(
            "Generated maze seed=%s %dx%d (%s, %s) cell=%dpx",
            maze_seed,
            dimensions.rows,
            dimensions.cols,
            dimensions.shape,
            dimensions.size_category,
            dimensions.cell_size,
        )
        return GeneratedMaze(
            grid=grid,
            seed=rng.seed,
            dimensions=dimensions,
            entrance=entrance,
            exit=exit_,
        )

    # ------------------------------------------------------------------

    def _carve(self, rows: int, cols: int, rng: SeededRandom) -> np.ndarray:
        if rows < 3 or cols < 3:
            raise ValueError(f"Maze must be at least 3x3, got {rows}x{cols}")
        grid = new_grid(rows, cols)
        visited = np.zeros((rows, cols), dtype=bool)

        def unvisited_neighbors(r: int, c: int) -> List[Tuple[int, int, int, int]]:
            found = []
            for dr, dc in LATTICE_STEPS:
                nr, nc = r + dr, c + dc
                if 0 < nr < rows - 1 and 0 < nc < cols - 1 and not visited[nr, nc]:
                    found.append((nr, nc, dr, dc))
            return found

        def enter(r: int, c: int) -> Tuple[int, int, Iterator[Tuple[int, int, int, int]]]:
            visited[r, c] = True
            grid[r, c] = PATH
            return r, c, iter(seeded_shuffle(unvisited_neighbors(r, c), rng))

        # Each frame keeps the shuffled neighbours still to try, so the
        # draw order matches the recursive formulation.
        stack = [enter(1, 1)]
        while stack:
            r, c, pending = stack[-1]
            for nr, nc, dr, dc in pending:
                if not visited[nr, nc]:
                    grid[r + dr // 2, c + dc // 2] = PATH
                    stack.append(enter(nr, nc))
                    break
            else:
                stack.pop()
        return grid

    def _place_openings(self, grid: np.ndarray) -> Tuple[Position, Position]:
        rows, cols = grid.shape

        entrance_col = 1
        for col in range(1, cols - 1):
            if grid[1, col] == PATH:
                entrance_col = col
                break
        grid[0, entrance_col] = ENTRANCE

        exit_col = cols - 2
        for col in range(cols - 2, 0, -1):
            if grid[rows - 2, col] == PATH:
                exit_col = col
                break
        grid[rows - 1, exit_col] = EXIT

        return (0, entrance_col), (rows - 1, exit_col)


def generate_maze(seed: Optional[SeedLike] = None) -> GeneratedMaze:
    return MazeGenerator().create_maze(seed)


__all__ = ["MazeGenerator", "GeneratedMaze", "generate_maze"]


def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Generate a seeded perfect maze")
    parser.add_argument("seed", nargs="?", default=None, help="Integer or text seed (random when omitted)")
    parser.add_argument("--json", action="store_true", help="Print the maze as JSON instead of text")
    parser.add_argument("--verbose", action="store_true")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> None:
    args = _parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)
    seed: Optional[SeedLike] = args.seed
    if seed is not None and seed.lstrip("-").isdigit():
        seed = int(seed)
    maze = generate_maze(seed)
    if args.json:
        print(json.dumps(maze.to_dict(), indent=2))
    else:
        dims = maze.dimensions
        print(f"Seed: {maze.seed} | {dims.rows}x{dims.cols} ({dims.shape}, {dims.size_category})")
        print(grid_to_text(maze.grid))


if __name__ == "__main__":
    main()
