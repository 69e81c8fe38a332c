"""Rebuild a finished game's trajectory from its recorded moves."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional, Sequence

import numpy as np

from .generator import generate_maze
from .grid import Direction, Position, entrance_position, exit_position, grid_to_text, in_bounds
from .movement import resolve_move
from .storage import DEFAULT_STORE_PATH, GameRecord, JsonFileGameStore, RecordedShift, import_game_record

logger = logging.getLogger(__name__)


@dataclass
class ReplayResult:
    final_position: Position
    trail: List[Position]
    moves: List[Direction]
    won: bool
    grid: Optional[np.ndarray] = field(default=None, compare=False, repr=False)

    def to_dict(self) -> dict:
        return {
            "final_position": list(self.final_position),
            "trail": [list(cell) for cell in self.trail],
            "moves": [move.value for move in self.moves],
            "won": self.won,
        }


def _apply_changes(grid: np.ndarray, changes) -> None:
    for change in changes:
        if not in_bounds(grid, change.row, change.col):
            logger.warning("Skipping wall change outside the grid at (%d, %d)", change.row, change.col)
            continue
        grid[change.row, change.col] = change.value


def replay_moves(
    grid: np.ndarray,
    moves: Iterable["Direction | str"],
    wall_shifts: Sequence[RecordedShift] = (),
) -> ReplayResult:
    """Apply ``moves`` from the entrance with no timing side effects.

    Moves that do not change position are skipped, as are unrecognised
    direction names. Each recorded wall shift is applied to a copy of
    ``grid`` once as many moves have been made as had been resolved when it
    was committed live; the copy is returned as ``ReplayResult.grid``.
    """

    grid = grid.copy()
    shifts = sorted(wall_shifts, key=lambda shift: shift[0])
    next_shift = 0
    position = entrance_position(grid)
    trail = [position]
    applied: List[Direction] = []
    for raw in moves:
        try:
            direction = Direction.parse(raw)
        except ValueError:
            logger.warning("Skipping unrecognised move %r during replay", raw)
            continue
        while next_shift < len(shifts) and shifts[next_shift][0] <= len(applied):
            _apply_changes(grid, shifts[next_shift][1])
            next_shift += 1
        result = resolve_move(grid, position, direction)
        if not result.moved:
            continue
        trail.extend(result.path)
        position = result.position
        applied.append(direction)
    for _, changes in shifts[next_shift:]:
        _apply_changes(grid, changes)
    return ReplayResult(
        final_position=position,
        trail=trail,
        moves=applied,
        won=position == exit_position(grid),
        grid=grid,
    )


def replay_record(record: GameRecord) -> ReplayResult:
    """Regenerate the record's maze from its seed and replay its moves and wall shifts."""

    maze = generate_maze(record.seed)
    return replay_moves(maze.grid, record.moves, record.wall_shifts)


__all__ = ["ReplayResult", "replay_moves", "replay_record"]


def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Replay a saved maze game")
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--seed", type=int, help="Seed of a game in the store")
    source.add_argument("--record", type=Path, help="Exported game record JSON file")
    parser.add_argument("--store", type=Path, default=DEFAULT_STORE_PATH, help="Game store JSON file")
    parser.add_argument("--show", action="store_true", help="Also print the maze with the trail")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> None:
    args = _parse_args(argv)
    logging.basicConfig(level=logging.INFO)
    if args.record is not None:
        if not args.record.exists():
            raise FileNotFoundError(f"Record file not found: {args.record}")
        record = import_game_record(args.record.read_text(encoding="utf-8"))
    else:
        record = JsonFileGameStore(args.store).load_by_seed(args.seed)
    if record is None:
        print("No valid game record found.", file=sys.stderr)
        sys.exit(1)

    result = replay_record(record)
    payload = result.to_dict()
    payload["seed"] = record.seed
    payload["recorded_won"] = record.won
    print(json.dumps(payload, indent=2))
    if args.show:
        print(grid_to_text(result.grid, result.trail))


if __name__ == "__main__":
    main()
