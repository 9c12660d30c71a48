from __future__ import annotations

import logging
from enum import IntEnum
from typing import Any, List, Optional, Protocol

from .seed import make_rng

logger = logging.getLogger(__name__)

DEFAULT_WALL_PROBABILITY = 0.46
DEFAULT_ITERATIONS = 5
WALL_THRESHOLD = 5

CaveGrid = List[List[int]]


class CaveCell(IntEnum):
    FLOOR = 0
    WALL = 1


class RandomSource(Protocol):
    def random(self) -> float: ...


def _frame_walls(grid: CaveGrid, width: int, height: int) -> None:
    for x in range(width):
        grid[0][x] = CaveCell.WALL
        grid[height - 1][x] = CaveCell.WALL
    for y in range(height):
        grid[y][0] = CaveCell.WALL
        grid[y][width - 1] = CaveCell.WALL


def generate(
    width: int,
    height: int,
    wall_probability: float = DEFAULT_WALL_PROBABILITY,
    iterations: int = DEFAULT_ITERATIONS,
    rng: Optional[RandomSource] = None,
    seed: Optional[Any] = None,
) -> CaveGrid:
    """Cellular automata cave generator.

    Algorithm:
    - Every cell is independently a wall with probability ``wall_probability``.
    - The outer border is forced to wall.
    - ``iterations`` smoothing passes over interior cells: a cell becomes a
      wall when at least 5 of its 8 Moore neighbours are walls, floor
      otherwise. Border cells are never recomputed and are re-forced to wall
      after each pass.

    Returns ``grid[y][x]`` of 0 (floor) / 1 (wall). Pass ``rng`` or ``seed``
    for reproducible output; with neither the result is not reproducible.
    """
    if width <= 0 or height <= 0:
        return []
    if rng is None:
        rng = make_rng(seed)

    grid: CaveGrid = [
        [CaveCell.WALL if rng.random() < wall_probability else CaveCell.FLOOR for _ in range(width)]
        for _ in range(height)
    ]
    _frame_walls(grid, width, height)

    for _ in range(max(0, int(iterations))):
        nxt: CaveGrid = [[CaveCell.FLOOR] * width for _ in range(height)]
        for y in range(1, height - 1):
            above, row, below = grid[y - 1], grid[y], grid[y + 1]
            for x in range(1, width - 1):
                walls = (
                    above[x - 1] + above[x] + above[x + 1]
                    + row[x - 1] + row[x + 1]
                    + below[x - 1] + below[x] + below[x + 1]
                )
                nxt[y][x] = CaveCell.WALL if walls >= WALL_THRESHOLD else CaveCell.FLOOR
        _frame_walls(nxt, width, height)
        grid = nxt

    logger.debug(
        "Generated %dx%d cave (p=%.2f, iterations=%d): %d walls",
        width, height, wall_probability, iterations, count_walls(grid),
    )
    return [[int(c) for c in row] for row in grid]


def count_walls(grid: CaveGrid) -> int:
    return sum(1 for row in grid for c in row if c == CaveCell.WALL)


def to_lines(grid: CaveGrid) -> List[str]:
    """ASCII view of a cave grid: '#' wall, '.' floor."""
    return ["".join("#" if c == CaveCell.WALL else "." for c in row) for row in grid]


__all__ = ["CaveCell", "CaveGrid", "count_walls", "generate", "to_lines"]
