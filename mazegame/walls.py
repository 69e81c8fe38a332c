"""Dynamic walls: periodic batches of wall/path flips that keep the exit reachable."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

import numpy as np

from .grid import PATH, WALL, Position, exit_position, is_exit_reachable
from .scheduling import AbstractScheduler, TimerHandle

logger = logging.getLogger(__name__)

SHIFT_INTERVAL = (3000, 6000)
CHANGE_DISPLAY_WINDOW = 1000
BATCH_SIZES = (3, 4, 5)
PLAYER_BUFFER = 2
WALL_MARGIN = 2

TO_WALL = "toWall"
TO_PATH = "toPath"


@dataclass(frozen=True)
class WallChange:
    row: int
    col: int
    transition: str

    def to_dict(self) -> dict:
        return {"row": self.row, "col": self.col, "type": self.transition}

    @classmethod
    def from_dict(cls, data: dict) -> "WallChange":
        transition = data.get("type")
        if transition not in (TO_WALL, TO_PATH):
            raise ValueError(f"Unknown wall change type: {transition!r}")
        return cls(int(data["row"]), int(data["col"]), transition)

    @property
    def value(self) -> int:
        return WALL if self.transition == TO_WALL else PATH


@dataclass
class WallShift:
    grid: np.ndarray
    changes: List[WallChange]

    @property
    def new_walls(self) -> int:
        return sum(1 for change in self.changes if change.transition == TO_WALL)

    @property
    def new_paths(self) -> int:
        return sum(1 for change in self.changes if change.transition == TO_PATH)


class DynamicWallMutator:
    """Propose and validate one batch of wall flips.

    Batches come from an unseeded ``random.Random`` unless one is passed in;
    they are not part of a maze's replay.
    """

    def __init__(
        self,
        rng: Optional[random.Random] = None,
        *,
        batch_sizes: Tuple[int, ...] = BATCH_SIZES,
        player_buffer: int = PLAYER_BUFFER,
        wall_margin: int = WALL_MARGIN,
    ) -> None:
        self._rng = rng or random.Random()
        self.batch_sizes = batch_sizes
        self.player_buffer = player_buffer
        self.wall_margin = wall_margin

    def path_candidates(self, grid: np.ndarray, player: Position) -> List[Position]:
        """Plain path cells off the border and at least ``player_buffer`` steps away."""

        rows, cols = grid.shape
        inner = np.zeros(grid.shape, dtype=bool)
        inner[1 : rows - 1, 1 : cols - 1] = True
        rr, cc = np.indices(grid.shape)
        distance = np.abs(rr - player[0]) + np.abs(cc - player[1])
        mask = inner & (grid == PATH) & (distance >= self.player_buffer)
        return [(int(r), int(c)) for r, c in np.argwhere(mask)]

    def wall_candidates(self, grid: np.ndarray) -> List[Position]:
        rows, cols = grid.shape
        m = self.wall_margin
        mask = np.zeros(grid.shape, dtype=bool)
        mask[m : rows - m, m : cols - m] = True
        mask &= grid == WALL
        return [(int(r), int(c)) for r, c in np.argwhere(mask)]

    def shift(self, grid: np.ndarray, player: Position) -> Optional[WallShift]:
        """Return the mutated copy of ``grid``, or None when nothing may change.

        The input grid is never modified. A batch that would cut the player
        off from the exit is discarded whole.
        """

        path_cells = self.path_candidates(grid, player)
        wall_cells = self.wall_candidates(grid)
        if not path_cells or not wall_cells:
            return None

        batch = self._rng.choice(self.batch_sizes)
        self._rng.shuffle(path_cells)
        self._rng.shuffle(wall_cells)
        to_walls = path_cells[: min(batch, len(path_cells))]
        to_paths = wall_cells[: min(batch, len(wall_cells))]

        candidate = grid.copy()
        for cell in to_walls:
            candidate[cell] = WALL
        for cell in to_paths:
            candidate[cell] = PATH

        if not is_exit_reachable(candidate, player, exit_position(grid)):
            logger.info("Wall shift cancelled - exit would be unreachable")
            return None

        changes = [WallChange(r, c, TO_WALL) for r, c in to_walls]
        changes += [WallChange(r, c, TO_PATH) for r, c in to_paths]
        return WallShift(grid=candidate, changes=changes)


class DynamicWallScheduler:
    """Self-rescheduling timer that feeds :class:`DynamicWallMutator`.

    ``grid_source`` and ``player_source`` read the session's current state at
    fire time; ``publish`` receives each committed grid. ``is_active`` is
    checked before every shift so a won or replayed session never mutates.
    """

    def __init__(
        self,
        scheduler: AbstractScheduler,
        grid_source: Callable[[], np.ndarray],
        player_source: Callable[[], Position],
        publish: Callable[[np.ndarray], None],
        *,
        mutator: Optional[DynamicWallMutator] = None,
        interval: Tuple[float, float] = SHIFT_INTERVAL,
        display_window: float = CHANGE_DISPLAY_WINDOW,
        is_active: Callable[[], bool] = lambda: True,
        interval_rng: Optional[random.Random] = None,
    ) -> None:
        self._scheduler = scheduler
        self._grid_source = grid_source
        self._player_source = player_source
        self._publish = publish
        self.mutator = mutator or DynamicWallMutator()
        self.interval = interval
        self.display_window = display_window
        self._is_active = is_active
        self._interval_rng = interval_rng or random.Random()
        self.enabled = False
        self.recent_changes: List[WallChange] = []
        self.next_shift_time: Optional[float] = None
        self._timer: Optional[TimerHandle] = None
        self._clear_timer: Optional[TimerHandle] = None

    def start(self) -> None:
        self.enabled = True
        self._schedule_next()

    def stop(self) -> None:
        """Disable shifting and cancel the pending timer synchronously."""

        self.enabled = False
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        self.next_shift_time = None

    def reset(self) -> None:
        self.stop()
        if self._clear_timer is not None:
            self._clear_timer.cancel()
            self._clear_timer = None
        self.recent_changes = []

    def _schedule_next(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        if not self.enabled or not self._is_active():
            self.next_shift_time = None
            return
        low, high = self.interval
        delay = low + self._interval_rng.random() * (high - low)
        self.next_shift_time = self._scheduler.now() + delay
        logger.debug("Next wall shift in %.0fms", delay)
        self._timer = self._scheduler.call_later(delay, self._fire)

    def _fire(self) -> None:
        self._timer = None
        self.shift_now()
        self._schedule_next()

    def shift_now(self) -> Optional[WallShift]:
        if not self.enabled or not self._is_active():
            return None
        result = self.mutator.shift(self._grid_source(), self._player_source())
        if result is None:
            return None
        self._publish(result.grid)
        self._show_changes(result.changes)
        logger.info("Wall shift: %d new walls, %d new paths", result.new_walls, result.new_paths)
        return result

    def _show_changes(self, changes: List[WallChange]) -> None:
        if self._clear_timer is not None:
            self._clear_timer.cancel()
        self.recent_changes = list(changes)
        self._clear_timer = self._scheduler.call_later(self.display_window, self._clear_changes)

    def _clear_changes(self) -> None:
        self._clear_timer = None
        self.recent_changes = []


__all__ = [
    "WallChange",
    "WallShift",
    "DynamicWallMutator",
    "DynamicWallScheduler",
    "TO_WALL",
    "TO_PATH",
    "SHIFT_INTERVAL",
    "CHANGE_DISPLAY_WINDOW",
]
