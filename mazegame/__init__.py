"""Seeded maze generation, junction movement, dynamic walls and replay."""

__all__ = [
    "AbstractGameStore",
    "SeededRandom",
    "create_seeded_random",
    "hash_string",
    "seeded_shuffle",
    "generate_random_seed",
    "MazeDimensions",
    "plan_dimensions",
    "WALL",
    "PATH",
    "ENTRANCE",
    "EXIT",
    "Direction",
    "is_junction",
    "is_exit_reachable",
    "entrance_position",
    "exit_position",
    "grid_to_text",
    "MazeGenerator",
    "GeneratedMaze",
    "generate_maze",
    "MoveResult",
    "resolve_move",
    "MovementController",
    "MovementState",
    "WallChange",
    "WallShift",
    "DynamicWallMutator",
    "DynamicWallScheduler",
    "ReplayResult",
    "replay_moves",
    "replay_record",
    "GameRecord",
    "create_game_record",
    "export_game_record",
    "import_game_record",
    "MemoryGameStore",
    "JsonFileGameStore",
    "ManualScheduler",
    "AsyncioScheduler",
    "GameSession",
    "SessionMode",
]

from .base import AbstractGameStore
from .seeding import (
    SeededRandom,
    create_seeded_random,
    hash_string,
    seeded_shuffle,
    generate_random_seed,
)
from .dimensions import MazeDimensions, plan_dimensions
from .grid import (
    WALL,
    PATH,
    ENTRANCE,
    EXIT,
    Direction,
    is_junction,
    is_exit_reachable,
    entrance_position,
    exit_position,
    grid_to_text,
)
from .generator import MazeGenerator, GeneratedMaze, generate_maze
from .movement import MoveResult, resolve_move, MovementController, MovementState
from .walls import WallChange, WallShift, DynamicWallMutator, DynamicWallScheduler
from .replay import ReplayResult, replay_moves, replay_record
from .storage import (
    GameRecord,
    create_game_record,
    export_game_record,
    import_game_record,
    MemoryGameStore,
    JsonFileGameStore,
)
from .scheduling import ManualScheduler, AsyncioScheduler
from .session import GameSession, SessionMode
