from __future__ import annotations

import logging
from typing import Dict, Generator, Iterator, List, Optional, Tuple

from .cells import Cell, Layer, LayerData, LayerLike

logger = logging.getLogger(__name__)


class TileGrid:
    """A fixed-size, two-layer, bounds-tolerant tile store.

    Every coordinate access goes through these methods. Out-of-bounds reads
    return None and out-of-bounds writes are ignored: coordinates come from
    pointer/camera projections that routinely step outside the map while the
    user drags.
    """

    __slots__ = ("_w", "_h", "_layers")

    def __init__(self, width: int, height: int) -> None:
        if int(width) <= 0 or int(height) <= 0:
            raise ValueError("TileGrid dimensions must be positive")
        self._w = int(width)
        self._h = int(height)
        # layers[layer][y][x]
        self._layers: Dict[Layer, LayerData] = {layer: self._empty_layer() for layer in Layer}
        logger.debug("Initialized TileGrid %dx%d", self._w, self._h)

    def _empty_layer(self) -> LayerData:
        return [[None for _ in range(self._w)] for _ in range(self._h)]

    @property
    def width(self) -> int:
        return self._w

    @property
    def height(self) -> int:
        return self._h

    def is_within(self, x: int, y: int) -> bool:
        """Check if coordinates are within the grid bounds. Never raises."""
        return 0 <= x < self._w and 0 <= y < self._h

    def get(self, layer: LayerLike, x: int, y: int) -> Optional[Cell]:
        """Return the cell at (x, y) on ``layer``, or None when empty or out of bounds."""
        rows = self._layers[Layer.coerce(layer)]
        if not self.is_within(x, y):
            return None
        return rows[y][x]

    def set(self, layer: LayerLike, x: int, y: int, cell: Optional[Cell]) -> bool:
        """Write ``cell`` (or None to clear) at (x, y).

        Returns True if the write happened, False for out-of-bounds coordinates.
        """
        rows = self._layers[Layer.coerce(layer)]
        if cell is not None and not isinstance(cell, Cell):
            raise TypeError("cell must be a Cell or None")
        if not self.is_within(x, y):
            return False
        rows[y][x] = cell
        return True

    def clone_layer(self, layer: LayerLike) -> LayerData:
        """Return an independent copy of one layer's rows.

        Cells are immutable, so copying the row lists is a full deep copy.
        """
        return [row[:] for row in self._layers[Layer.coerce(layer)]]

    def clear_layer(self, layer: LayerLike) -> None:
        rows = self._layers[Layer.coerce(layer)]
        for row in rows:
            for x in range(self._w):
                row[x] = None

    def cells(self, layer: LayerLike) -> Iterator[Tuple[int, int, Cell]]:
        """Yield (x, y, cell) for every non-empty cell of ``layer`` in row-major order."""
        rows = self._layers[Layer.coerce(layer)]
        for y, row in enumerate(rows):
            for x, cell in enumerate(row):
                if cell is not None:
                    yield x, y, cell

    def count(self, layer: LayerLike) -> int:
        return sum(1 for _ in self.cells(layer))

    def neighbors(self, x: int, y: int, diagonals: bool = False) -> Generator[Tuple[int, int], None, None]:
        """Yield neighboring coordinates that are within bounds.

        Args:
            x: X coordinate
            y: Y coordinate
            diagonals: If True, include diagonal neighbors.
        """
        if diagonals:
            offsets = (
                (-1, 0), (1, 0), (0, -1), (0, 1),
                (-1, -1), (1, -1), (-1, 1), (1, 1),
            )
        else:
            offsets = ((-1, 0), (1, 0), (0, -1), (0, 1))

        for dx, dy in offsets:
            nx, ny = x + dx, y + dy
            if self.is_within(nx, ny):
                yield (nx, ny)

    def to_lines(self, layer: LayerLike, symbols: Optional[Dict[Cell, str]] = None) -> List[str]:
        """Render a layer as ASCII rows (for debugging/testing).

        Empty cells are '.', cells found in ``symbols`` use their character,
        anything else is '#'.
        """
        symbols = symbols or {}
        out: List[str] = []
        for row in self._layers[Layer.coerce(layer)]:
            out.append("".join("." if c is None else symbols.get(c, "#") for c in row))
        return out

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TileGrid):
            return NotImplemented
        return (
            self._w == other._w
            and self._h == other._h
            and all(self._layers[layer] == other._layers[layer] for layer in Layer)
        )

    def __repr__(self) -> str:
        return f"TileGrid(width={self._w}, height={self._h})"
