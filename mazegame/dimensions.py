"""Seed-derived maze dimensions."""

from __future__ import annotations

from dataclasses import dataclass

from .seeding import SeedLike, SeededRandom

SIZE_SMALL = "Small"
SIZE_MEDIUM = "Medium"
SHAPE_SQUARE = "Square"
SHAPE_LANDSCAPE = "Landscape"

# (first value, number of steps) for each tier; values advance in steps of 2.
SIZE_TIERS = {
    SIZE_SMALL: {"base": (15, 3), "cell": (25, 3)},
    SIZE_MEDIUM: {"base": (21, 4), "cell": (20, 3)},
}


@dataclass(frozen=True)
class MazeDimensions:
    rows: int
    cols: int
    cell_size: int
    size_category: str
    shape: str

    @property
    def total_width(self) -> int:
        return self.cols * self.cell_size

    @property
    def total_height(self) -> int:
        return self.rows * self.cell_size

    def to_dict(self) -> dict:
        return {
            "rows": self.rows,
            "cols": self.cols,
            "cellSize": self.cell_size,
            "sizeCategory": self.size_category,
            "shape": self.shape,
            "totalWidth": self.total_width,
            "totalHeight": self.total_height,
        }


def _tier_value(rng: SeededRandom, tier) -> int:
    start, steps = tier
    return start + rng.randbelow(steps) * 2


def plan_dimensions(seed: SeedLike) -> MazeDimensions:
    """Derive rows, columns and cell size from ``seed``.

    Draw order is fixed: size category, shape, base size, cell size and,
    for landscape mazes only, the column increment. Changing it changes
    every maze a seed produces.
    """

    rng = SeededRandom(seed)
    size_category = (SIZE_SMALL, SIZE_MEDIUM)[rng.randbelow(2)]
    shape = (SHAPE_SQUARE, SHAPE_LANDSCAPE)[rng.randbelow(2)]

    tiers = SIZE_TIERS[size_category]
    base_size = _tier_value(rng, tiers["base"])
    cell_size = _tier_value(rng, tiers["cell"])

    rows = base_size
    if shape == SHAPE_LANDSCAPE:
        # 4, 6 or 8 extra columns
        cols = base_size + (rng.randbelow(3) + 2) * 2
    else:
        cols = base_size

    rows = rows + 1 if rows % 2 == 0 else rows
    cols = cols + 1 if cols % 2 == 0 else cols
    return MazeDimensions(
        rows=rows,
        cols=cols,
        cell_size=cell_size,
        size_category=size_category,
        shape=shape,
    )


__all__ = [
    "MazeDimensions",
    "plan_dimensions",
    "SIZE_SMALL",
    "SIZE_MEDIUM",
    "SHAPE_SQUARE",
    "SHAPE_LANDSCAPE",
]
