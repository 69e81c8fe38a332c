"""Junction-to-junction movement.

:func:`resolve_move` is the pure positional rule shared by live play and
replay. :class:`MovementController` wraps it in the live pipeline: a bounded
queue of pending directions, a single move in flight at a time and a settle
delay before the move's trail segment lands.
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Deque, List, Optional, Sequence

import numpy as np

from .grid import Direction, Position, entrance_position, exit_position, is_junction, is_passable
from .scheduling import AbstractScheduler, TimerHandle

logger = logging.getLogger(__name__)

QUEUE_CAPACITY = 3
SETTLE_DELAY = 120


@dataclass(frozen=True)
class MoveResult:
    position: Position
    path: List[Position] = field(default_factory=list)

    @property
    def moved(self) -> bool:
        return bool(self.path)


def resolve_move(grid: np.ndarray, position: Position, direction: "Direction | str") -> MoveResult:
    """Slide from ``position`` in ``direction`` until a junction or a dead end.

    The returned path lists every cell entered, excluding the start. A wall
    directly ahead yields the start position and an empty path.
    """

    dr, dc = Direction.parse(direction).delta
    row, col = position
    if not is_passable(grid, row + dr, col + dc):
        return MoveResult(position=position)

    row, col = row + dr, col + dc
    path = [(row, col)]
    while is_passable(grid, row + dr, col + dc):
        # Stop on decision points even when the corridor continues.
        if is_junction(grid, row, col):
            break
        row, col = row + dr, col + dc
        path.append((row, col))
    return MoveResult(position=(row, col), path=path)


class MovementState(str, Enum):
    IDLE = "idle"
    RESOLVING = "resolving"


GridSource = Callable[[], np.ndarray]


class MovementController:
    """Live movement pipeline for one player.

    ``grid_source`` is read at every resolution so wall shifts committed
    between moves are honoured. The position updates as soon as a move
    starts; the trail, win check and next dequeue wait for the settle delay.
    """

    def __init__(
        self,
        grid_source: GridSource,
        scheduler: AbstractScheduler,
        *,
        capacity: int = QUEUE_CAPACITY,
        settle_delay: float = SETTLE_DELAY,
        on_win: Optional[Callable[[], None]] = None,
    ) -> None:
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self._grid_source = grid_source
        self._scheduler = scheduler
        self.capacity = capacity
        self.settle_delay = settle_delay
        self.on_win = on_win
        self._queue: Deque[Direction] = deque()
        self._pending: Optional[TimerHandle] = None
        self.reset()

    @property
    def grid(self) -> np.ndarray:
        return self._grid_source()

    @property
    def queued(self) -> List[Direction]:
        return list(self._queue)

    def reset(self, start: Optional[Position] = None) -> None:
        self._cancel_pending()
        self.position: Position = start if start is not None else entrance_position(self.grid)
        self.trail: List[Position] = [self.position]
        self.move_history: List[Direction] = []
        self.won = False
        self.accepting_input = True
        self.state = MovementState.IDLE
        self._queue.clear()

    def load_replay(self, position: Position, trail: Sequence[Position], moves: Sequence[Direction], won: bool) -> None:
        """Show a reconstructed game; the controller stops taking input."""

        self.reset()
        self.position = position
        self.trail = list(trail)
        self.move_history = list(moves)
        self.won = won
        self.accepting_input = False

    def enqueue(self, direction: "Direction | str") -> bool:
        """Queue a direction; returns False when it was dropped."""

        direction = Direction.parse(direction)
        if self.won or not self.accepting_input:
            return False
        if len(self._queue) >= self.capacity:
            logger.debug("Move queue full, dropped %s", direction.value)
            return False
        self._queue.append(direction)
        logger.debug("Queued %s (%d pending)", direction.value, len(self._queue))
        if self.state is MovementState.IDLE:
            self._process_next()
        return True

    def _process_next(self) -> None:
        while self.state is MovementState.IDLE and self._queue and not self.won:
            direction = self._queue.popleft()
            result = resolve_move(self.grid, self.position, direction)
            if not result.moved:
                logger.debug("No-op move %s at %s", direction.value, self.position)
                continue
            self.state = MovementState.RESOLVING
            self.move_history.append(direction)
            self.position = result.position
            self._pending = self._scheduler.call_later(self.settle_delay, lambda: self._settle(result))

    def _settle(self, result: MoveResult) -> None:
        self._pending = None
        self.trail.extend(result.path)
        self.state = MovementState.IDLE
        if result.position == exit_position(self.grid):
            self.won = True
            self._queue.clear()
            if self.on_win is not None:
                self.on_win()
            return
        self._process_next()

    def _cancel_pending(self) -> None:
        if self._pending is not None:
            self._pending.cancel()
        self._pending = None


__all__ = [
    "MoveResult",
    "resolve_move",
    "MovementController",
    "MovementState",
    "QUEUE_CAPACITY",
    "SETTLE_DELAY",
]
