import unittest
from collections import deque

import numpy as np

from mazegame.generator import MazeGenerator, generate_maze
from mazegame.grid import ENTRANCE, EXIT, WALL, grid_to_text
from mazegame.seeding import MAX_RANDOM_SEED, SeededRandom

SEED_12345_ROWS = [
    "02000000000000000000000",
    "01011101111101111111110",
    "01010100010101000000000",
    "01110111110101111111110",
    "00000000000101000000010",
    "01110111110101111111010",
    "01010101000100000001010",
    "01010101111101110111010",
    "01010100000001010100010",
    "01010111111101010101010",
    "01010000000101010101010",
    "01011101111101011111010",
    "01010001000000000000010",
    "01010111011111111101110",
    "01010100000100000101010",
    "01010101111101110111010",
    "00010101000000010000010",
    "01110111010111111101110",
    "01000000010101000101000",
    "01111101111101011101010",
    "01010001000001000001010",
    "01011111111101111111110",
    "00000000000000000000030",
]


def _encode(grid: np.ndarray) -> list:
    return ["".join(str(int(v)) for v in row) for row in grid]


def _passable_edges_and_nodes(grid: np.ndarray):
    rows, cols = grid.shape
    nodes = [(r, c) for r in range(rows) for c in range(cols) if grid[r, c] != WALL]
    edges = 0
    for r, c in nodes:
        if r + 1 < rows and grid[r + 1, c] != WALL:
            edges += 1
        if c + 1 < cols and grid[r, c + 1] != WALL:
            edges += 1
    return nodes, edges


def _reachable(grid: np.ndarray, start) -> int:
    rows, cols = grid.shape
    seen = {start}
    queue = deque([start])
    while queue:
        r, c = queue.popleft()
        for dr, dc in ((1, 0), (-1, 0), (0, 1), (0, -1)):
            nr, nc = r + dr, c + dc
            if 0 <= nr < rows and 0 <= nc < cols and grid[nr, nc] != WALL and (nr, nc) not in seen:
                seen.add((nr, nc))
                queue.append((nr, nc))
    return len(seen)


class MazeGeneratorTests(unittest.TestCase):
    def test_seed_12345_reference_grid(self) -> None:
        maze = generate_maze(12345)
        self.assertEqual((maze.rows, maze.cols, maze.cell_size), (23, 23, 24))
        self.assertEqual(maze.dimensions.size_category, "Medium")
        self.assertEqual(maze.dimensions.shape, "Square")
        self.assertEqual(_encode(maze.grid), SEED_12345_ROWS)
        self.assertEqual(maze.entrance, (0, 1))
        self.assertEqual(maze.exit, (22, 21))

    def test_generation_is_deterministic(self) -> None:
        for seed in (0, 7, 99, "maze"):
            first = generate_maze(seed)
            second = generate_maze(seed)
            np.testing.assert_array_equal(first.grid, second.grid)
            self.assertEqual(first.dimensions, second.dimensions)

    def test_text_seed_matches_hashed_integer(self) -> None:
        by_text = generate_maze("maze")
        by_number = generate_maze(3344319)
        self.assertEqual(by_text.seed, 3344319)
        np.testing.assert_array_equal(by_text.grid, by_number.grid)

    def test_openings_on_border_rows(self) -> None:
        for seed in range(30):
            maze = generate_maze(seed)
            grid = maze.grid
            self.assertEqual(int(np.sum(grid == ENTRANCE)), 1)
            self.assertEqual(int(np.sum(grid == EXIT)), 1)
            self.assertEqual(maze.entrance[0], 0)
            self.assertEqual(maze.exit[0], maze.rows - 1)
            self.assertEqual(grid[maze.entrance], ENTRANCE)
            self.assertEqual(grid[maze.exit], EXIT)

    def test_fresh_grid_is_spanning_tree(self) -> None:
        for seed in range(30):
            grid = generate_maze(seed).grid
            nodes, edges = _passable_edges_and_nodes(grid)
            self.assertEqual(edges, len(nodes) - 1, f"seed {seed} has a cycle")
            self.assertEqual(_reachable(grid, nodes[0]), len(nodes), f"seed {seed} is disconnected")

    def test_every_lattice_cell_is_carved(self) -> None:
        grid = generate_maze(42).grid
        rows, cols = grid.shape
        for r in range(1, rows - 1, 2):
            for c in range(1, cols - 1, 2):
                self.assertNotEqual(grid[r, c], WALL)

    def test_large_maze_does_not_exhaust_stack(self) -> None:
        grid = MazeGenerator()._carve(201, 201, SeededRandom(5))
        nodes, edges = _passable_edges_and_nodes(grid)
        self.assertEqual(len(nodes), 2 * 100 * 100 - 1)
        self.assertEqual(edges, len(nodes) - 1)

    def test_random_seed_when_none_given(self) -> None:
        maze = generate_maze()
        self.assertGreaterEqual(maze.seed, 0)
        self.assertLess(maze.seed, MAX_RANDOM_SEED)

    def test_undersized_grid_is_rejected(self) -> None:
        with self.assertRaises(ValueError):
            MazeGenerator()._carve(1, 5, SeededRandom(1))

    def test_text_rendering_marks_trail(self) -> None:
        lines = grid_to_text(generate_maze(0).grid, [(0, 1), (1, 1), (1, 2)]).splitlines()
        self.assertEqual(lines[0], "#S#############")
        self.assertEqual(lines[1], "#**         # #")
        self.assertEqual(lines[14], "#############E#")

    def test_to_dict_exports_plain_lists(self) -> None:
        payload = generate_maze(0).to_dict()
        self.assertEqual(payload["seed"], 0)
        self.assertEqual(payload["rows"], 15)
        self.assertIsInstance(payload["grid"][0], list)
        self.assertEqual(payload["entrance"], [0, 1])
        self.assertEqual(payload["exit"], [14, 13])


if __name__ == "__main__":
    unittest.main()
