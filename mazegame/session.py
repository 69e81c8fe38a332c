"""A single game session: the owner of the live grid.

The session is the only place the current grid is replaced. Movement reads
it through a callable; the wall scheduler submits whole replacement grids
through :meth:`GameSession.replace_grid`. Once the game is won or shown as a
replay the grid is frozen (read-only) until the next maze is loaded.
"""

from __future__ import annotations

import logging
import random
import re
from enum import Enum
from typing import List, Optional

import numpy as np

from .base import AbstractGameStore
from .generator import GeneratedMaze, MazeGenerator
from .grid import WALL, Direction, Position
from .movement import MovementController
from .replay import replay_moves
from .scheduling import AbstractScheduler, ManualScheduler
from .seeding import SeedLike
from .storage import MemoryGameStore, RecordedShift, create_game_record
from .walls import TO_PATH, TO_WALL, DynamicWallMutator, DynamicWallScheduler, WallChange

logger = logging.getLogger(__name__)

SEED_PATTERN = re.compile(r"-?[0-9]+")


class SessionMode(str, Enum):
    LIVE = "live"
    WON = "won"
    REPLAY = "replay"


class GameSession:
    def __init__(
        self,
        scheduler: Optional[AbstractScheduler] = None,
        store: Optional[AbstractGameStore] = None,
        *,
        seed: Optional[SeedLike] = None,
        generator: Optional[MazeGenerator] = None,
        mutator: Optional[DynamicWallMutator] = None,
        interval_rng: Optional[random.Random] = None,
    ) -> None:
        self.scheduler = scheduler or ManualScheduler()
        self.store = store if store is not None else MemoryGameStore()
        self.generator = generator or MazeGenerator()
        self.replay_mode = False
        self.grid_version = 0
        self._saved = False
        self.wall_shifts: List[RecordedShift] = []
        self._install_maze(self.generator.create_maze(seed))

        self.movement = MovementController(lambda: self._grid, self.scheduler, on_win=self._handle_win)
        self.walls = DynamicWallScheduler(
            self.scheduler,
            grid_source=lambda: self._grid,
            player_source=lambda: self.movement.position,
            publish=self.replace_grid,
            mutator=mutator,
            is_active=lambda: not self.has_won and not self.replay_mode,
            interval_rng=interval_rng,
        )

    # -- state ---------------------------------------------------------

    @property
    def grid(self) -> np.ndarray:
        return self._grid

    @property
    def seed(self) -> int:
        return self.maze.seed

    @property
    def player_position(self) -> Position:
        return self.movement.position

    @property
    def trail(self) -> List[Position]:
        return self.movement.trail

    @property
    def move_history(self) -> List[Direction]:
        return self.movement.move_history

    @property
    def has_won(self) -> bool:
        return self.movement.won

    @property
    def mode(self) -> SessionMode:
        if self.replay_mode:
            return SessionMode.REPLAY
        return SessionMode.WON if self.has_won else SessionMode.LIVE

    @property
    def dynamic_walls_enabled(self) -> bool:
        return self.walls.enabled

    @property
    def recent_changes(self) -> List[WallChange]:
        return self.walls.recent_changes

    @property
    def next_shift_time(self) -> Optional[float]:
        return self.walls.next_shift_time

    def trail_with_player(self) -> List[Position]:
        """Trail extended with the in-flight position while a move settles."""

        trail = list(self.trail)
        if trail and trail[-1] != self.player_position:
            trail.append(self.player_position)
        return trail

    # -- transitions ---------------------------------------------------

    def move(self, direction: "Direction | str") -> bool:
        if self.replay_mode:
            return False
        return self.movement.enqueue(direction)

    def replace_grid(self, grid: np.ndarray) -> None:
        """Single update entry point for the live grid.

        The changed cells are logged against the number of moves resolved so
        far, so a saved game replays against the same grids it was played on.
        """

        if self.has_won or self.replay_mode:
            raise RuntimeError("Grid is frozen once the game is won or replayed")
        if grid.shape != self._grid.shape:
            raise ValueError(f"Replacement grid shape {grid.shape} != {self._grid.shape}")
        changes = [
            WallChange(int(r), int(c), TO_WALL if grid[r, c] == WALL else TO_PATH)
            for r, c in np.argwhere(grid != self._grid)
        ]
        if changes:
            self.wall_shifts.append((len(self.move_history), changes))
        self._grid = grid
        self.grid_version += 1

    def new_maze(self, seed: Optional[SeedLike] = None) -> GeneratedMaze:
        """Start live play on a fresh maze; dynamic walls are switched off."""

        self.walls.reset()
        maze = self.generator.create_maze(seed)
        self._install_maze(maze)
        self.replay_mode = False
        self.movement.reset()
        return maze

    def load_seed(self, text: str) -> GeneratedMaze:
        """Load a maze by numeric seed, replaying a stored game if one exists.

        Raises ``ValueError`` for non-numeric input without touching the
        session.
        """

        stripped = str(text).strip()
        if not SEED_PATTERN.fullmatch(stripped):
            raise ValueError(f"Please enter a valid numeric seed, got {text!r}")
        seed = int(stripped)

        record = self.store.load_by_seed(seed)
        if record is None or not record.moves:
            logger.info("No saved game found, generating new maze with seed %s", seed)
            return self.new_maze(seed)

        logger.info("Loading saved game seed=%s (%d moves)", seed, len(record.moves))
        self.walls.reset()
        maze = self.generator.create_maze(seed)
        self._install_maze(maze)
        self.replay_mode = True
        result = replay_moves(self._grid, record.moves, record.wall_shifts)
        self._grid = result.grid
        self.wall_shifts = [(move, list(changes)) for move, changes in record.wall_shifts]
        self.movement.load_replay(result.final_position, result.trail, result.moves, result.won)
        self._grid.flags.writeable = False
        return maze

    def toggle_dynamic_walls(self) -> bool:
        """Flip the dynamic-walls flag; refused once won or in replay."""

        return self.set_dynamic_walls(not self.dynamic_walls_enabled)

    def set_dynamic_walls(self, enabled: bool) -> bool:
        if enabled and (self.has_won or self.replay_mode):
            return False
        if enabled:
            self.walls.start()
        else:
            self.walls.stop()
        return self.walls.enabled

    # ------------------------------------------------------------------

    def _install_maze(self, maze: GeneratedMaze) -> None:
        self.maze = maze
        self._grid = maze.grid.copy()
        self.grid_version += 1
        self._saved = False
        self.wall_shifts = []

    def _handle_win(self) -> None:
        self.walls.stop()
        self._grid.flags.writeable = False
        if self.replay_mode or self._saved or not self.move_history:
            return
        record = create_game_record(
            self.seed, self.move_history, True, self.maze.dimensions, wall_shifts=self.wall_shifts
        )
        self.store.save(record)
        self._saved = True
        logger.info("Game saved seed=%s moves=%d", self.seed, record.move_count)


__all__ = ["GameSession", "SessionMode"]
