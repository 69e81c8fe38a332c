"""Grid cell values, directions and passability queries."""

from __future__ import annotations

from collections import deque
from enum import Enum
from typing import Iterable, Optional, Tuple

import numpy as np

WALL = 0
PATH = 1
ENTRANCE = 2
EXIT = 3

Position = Tuple[int, int]

CELL_CHARS = {WALL: "#", PATH: " ", ENTRANCE: "S", EXIT: "E"}
TRAIL_CHAR = "*"


class Direction(str, Enum):
    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"

    @property
    def delta(self) -> Position:
        return _DELTAS[self]

    @classmethod
    def parse(cls, value: "Direction | str") -> "Direction":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            raise ValueError(f"Unknown direction: {value!r}") from None


_DELTAS = {
    Direction.UP: (-1, 0),
    Direction.DOWN: (1, 0),
    Direction.LEFT: (0, -1),
    Direction.RIGHT: (0, 1),
}
ORTHOGONAL = tuple(_DELTAS.values())


def new_grid(rows: int, cols: int) -> np.ndarray:
    return np.full((rows, cols), WALL, dtype=np.int8)


def in_bounds(grid: np.ndarray, row: int, col: int) -> bool:
    rows, cols = grid.shape
    return 0 <= row < rows and 0 <= col < cols


def is_passable(grid: np.ndarray, row: int, col: int) -> bool:
    """Anything that is not a wall and lies inside the grid can be walked on."""

    return in_bounds(grid, row, col) and grid[row, col] != WALL


def passable_neighbors(grid: np.ndarray, row: int, col: int) -> int:
    return sum(1 for dr, dc in ORTHOGONAL if is_passable(grid, row + dr, col + dc))


def is_junction(grid: np.ndarray, row: int, col: int) -> bool:
    return is_passable(grid, row, col) and passable_neighbors(grid, row, col) > 2


def _find_value(grid: np.ndarray, value: int) -> Optional[Position]:
    hits = np.argwhere(grid == value)
    if len(hits) == 0:
        return None
    row, col = hits[0]
    return int(row), int(col)


def entrance_position(grid: np.ndarray) -> Position:
    found = _find_value(grid, ENTRANCE)
    return found if found is not None else (0, 1)


def exit_position(grid: np.ndarray) -> Position:
    found = _find_value(grid, EXIT)
    if found is not None:
        return found
    rows, cols = grid.shape
    return rows - 1, cols - 2


def is_exit_reachable(grid: np.ndarray, start: Position, goal: Optional[Position] = None) -> bool:
    """Breadth-first search over non-wall cells from ``start`` to the exit."""

    if goal is None:
        goal = exit_position(grid)
    if not is_passable(grid, *start):
        return False
    queue: deque[Position] = deque([start])
    visited = np.zeros(grid.shape, dtype=bool)
    visited[start] = True
    while queue:
        r, c = queue.popleft()
        if (r, c) == goal:
            return True
        for dr, dc in ORTHOGONAL:
            nr, nc = r + dr, c + dc
            if is_passable(grid, nr, nc) and not visited[nr, nc]:
                visited[nr, nc] = True
                queue.append((nr, nc))
    return False


def grid_to_text(grid: np.ndarray, trail: Optional[Iterable[Position]] = None) -> str:
    """Render ``grid`` as one line of characters per row."""

    chars = [[CELL_CHARS.get(int(value), "?") for value in row] for row in grid]
    for r, c in trail or ():
        if chars[r][c] == CELL_CHARS[PATH]:
            chars[r][c] = TRAIL_CHAR
    return "\n".join("".join(row) for row in chars)


__all__ = [
    "WALL",
    "PATH",
    "ENTRANCE",
    "EXIT",
    "Direction",
    "Position",
    "new_grid",
    "in_bounds",
    "is_passable",
    "passable_neighbors",
    "is_junction",
    "entrance_position",
    "exit_position",
    "is_exit_reachable",
    "grid_to_text",
]
