#!/usr/bin/env python3
"""Generate mazes for a range of seeds and sort the catalogue by maze size."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from mazegame.generator import MazeGenerator
from mazegame.grid import is_junction


def _junction_count(grid) -> int:
    rows, cols = grid.shape
    return sum(1 for r in range(rows) for c in range(cols) if is_junction(grid, r, c))


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--start", type=int, default=0, help="First seed")
    parser.add_argument("--count", type=int, default=100, help="Number of consecutive seeds")
    parser.add_argument(
        "--output",
        type=Path,
        default=Path("data/seed_catalog.json"),
        help="Where to write the size-sorted catalogue JSON",
    )
    parser.add_argument(
        "--include-grid",
        action="store_true",
        help="Store the full grid with each entry",
    )
    return parser.parse_args()


def main() -> None:
    args = _parse_args()
    if args.count <= 0:
        raise ValueError(f"--count must be positive, got {args.count}")
    logging.basicConfig(level=logging.WARNING)

    generator = MazeGenerator()
    entries: List[dict] = []
    for index, seed in enumerate(range(args.start, args.start + args.count), start=1):
        maze = generator.create_maze(seed)
        entry = maze.to_dict() if args.include_grid else {"seed": maze.seed, **maze.dimensions.to_dict()}
        entry["cells"] = maze.rows * maze.cols
        entry["junctions"] = _junction_count(maze.grid)
        entries.append(entry)
        print(f"[{index}/{args.count}] seed {seed}: {maze.rows}x{maze.cols} ({entry['junctions']} junctions)")

    entries.sort(key=lambda item: (item["cells"], item["seed"]))

    args.output.parent.mkdir(parents=True, exist_ok=True)
    args.output.write_text(json.dumps(entries, indent=2), encoding="utf-8")
    print(f"Wrote {len(entries)} mazes to {args.output}")


if __name__ == "__main__":
    main()
