"""Game records and the stores that keep them."""

from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .base import AbstractGameStore, PathLike
from .dimensions import MazeDimensions
from .grid import Direction
from .walls import WallChange

logger = logging.getLogger(__name__)

DEFAULT_STORE_PATH = Path("data/maze_games.json")

# (number of moves resolved before the shift, cells it changed)
RecordedShift = Tuple[int, List[WallChange]]


@dataclass
class GameRecord:
    seed: int
    moves: List[str]
    won: bool = False
    completed: bool = False
    timestamp: Optional[int] = None
    move_count: int = 0
    rows: Optional[int] = None
    cols: Optional[int] = None
    cell_size: Optional[int] = None
    wall_shifts: List[RecordedShift] = field(default_factory=list)
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict:
        payload: Dict[str, Any] = dict(self.extra)
        payload.update(
            {
                "seed": self.seed,
                "moves": list(self.moves),
                "won": self.won,
                "completed": self.completed,
                "timestamp": self.timestamp,
                "moveCount": self.move_count,
            }
        )
        for key, value in (("rows", self.rows), ("cols", self.cols), ("cellSize", self.cell_size)):
            if value is not None:
                payload[key] = value
        if self.wall_shifts:
            payload["wallShifts"] = [
                {"move": move, "changes": [change.to_dict() for change in changes]}
                for move, changes in self.wall_shifts
            ]
        return payload

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GameRecord":
        """Build a record from a decoded document.

        Raises ``ValueError`` unless ``seed`` is an integer and ``moves`` a list,
        or when a recorded wall shift is malformed.
        """

        seed = data.get("seed")
        moves = data.get("moves")
        if isinstance(seed, bool) or not isinstance(seed, int):
            raise ValueError("Game record must include an integer 'seed'")
        if not isinstance(moves, list):
            raise ValueError("Game record 'moves' must be a list")
        known = {
            "seed", "moves", "won", "completed", "timestamp",
            "moveCount", "rows", "cols", "cellSize", "wallShifts",
        }
        return cls(
            seed=seed,
            moves=[str(move) for move in moves],
            won=bool(data.get("won", False)),
            completed=bool(data.get("completed", False)),
            timestamp=data.get("timestamp"),
            move_count=int(data.get("moveCount", len(moves))),
            rows=data.get("rows"),
            cols=data.get("cols"),
            cell_size=data.get("cellSize"),
            wall_shifts=_parse_wall_shifts(data.get("wallShifts", [])),
            extra={key: value for key, value in data.items() if key not in known},
        )


def _parse_wall_shifts(raw: Any) -> List[RecordedShift]:
    if not isinstance(raw, list):
        raise ValueError("Game record 'wallShifts' must be a list")
    shifts: List[RecordedShift] = []
    for entry in raw:
        try:
            move = entry["move"]
            changes = [WallChange.from_dict(change) for change in entry["changes"]]
        except (AttributeError, KeyError, TypeError) as exc:
            raise ValueError(f"Malformed wall shift entry: {entry!r}") from exc
        if isinstance(move, bool) or not isinstance(move, int) or move < 0:
            raise ValueError(f"Wall shift 'move' must be a non-negative integer: {move!r}")
        shifts.append((move, changes))
    return shifts


def create_game_record(
    seed: int,
    moves: Sequence["Direction | str"],
    won: bool,
    dimensions: Optional[MazeDimensions] = None,
    wall_shifts: Sequence[RecordedShift] = (),
) -> GameRecord:
    names = [Direction.parse(move).value for move in moves]
    record = GameRecord(
        seed=seed,
        moves=names,
        won=won,
        completed=True,
        timestamp=int(time.time() * 1000),
        move_count=len(names),
        wall_shifts=[(move, list(changes)) for move, changes in wall_shifts],
    )
    if dimensions is not None:
        record.rows = dimensions.rows
        record.cols = dimensions.cols
        record.cell_size = dimensions.cell_size
    return record


def export_game_record(record: GameRecord) -> str:
    return json.dumps(record.to_dict(), indent=2)


def import_game_record(text: str) -> Optional[GameRecord]:
    """Parse an exported record; returns None for anything malformed."""

    try:
        data = json.loads(text)
    except (TypeError, ValueError, RecursionError) as exc:
        logger.error("Failed to import game data: %s", exc)
        return None
    if not isinstance(data, dict):
        logger.error("Failed to import game data: expected a JSON object")
        return None
    try:
        return GameRecord.from_dict(data)
    except (TypeError, ValueError, RecursionError) as exc:
        logger.error("Failed to import game data: %s", exc)
        return None


class MemoryGameStore(AbstractGameStore):
    def __init__(self) -> None:
        self._records: Dict[int, GameRecord] = {}

    def save(self, record: GameRecord) -> None:
        self._records[record.seed] = record

    def all_records(self) -> Dict[int, GameRecord]:
        return dict(self._records)


class JsonFileGameStore(AbstractGameStore):
    """Store every game in one JSON object keyed by the decimal seed."""

    def __init__(self, path: PathLike = DEFAULT_STORE_PATH) -> None:
        self.path = Path(path)

    def _read(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        raw = json.loads(self.path.read_text(encoding="utf-8"))
        if not isinstance(raw, dict):
            raise ValueError(f"Game store must be a JSON object: {self.path}")
        return raw

    def save(self, record: GameRecord) -> None:
        try:
            games = self._read()
            games[str(record.seed)] = record.to_dict()
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(games, indent=2), encoding="utf-8")
        except (OSError, TypeError, ValueError, RecursionError):
            logger.exception("Failed to save game %s", record.seed)

    def all_records(self) -> Dict[int, GameRecord]:
        try:
            raw = self._read()
        except (OSError, ValueError, RecursionError):
            logger.exception("Failed to load games from %s", self.path)
            return {}
        records: Dict[int, GameRecord] = {}
        for key, value in raw.items():
            if not isinstance(value, dict):
                logger.warning("Skipping malformed game entry %r", key)
                continue
            try:
                record = GameRecord.from_dict(value)
            except (TypeError, ValueError) as exc:
                logger.warning("Skipping malformed game entry %r: %s", key, exc)
                continue
            records[record.seed] = record
        return records


__all__ = [
    "GameRecord",
    "RecordedShift",
    "create_game_record",
    "export_game_record",
    "import_game_record",
    "MemoryGameStore",
    "JsonFileGameStore",
    "DEFAULT_STORE_PATH",
]
