from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from typing import Deque, Iterable, Optional, Set, Tuple

from ..config import EditorConfig
from ..config.loader import FILL_PER_CELL
from ..events import EventBus, EventType
from ..map.cells import Cell, Layer, LayerLike, same_class
from ..map.grid import TileGrid
from ..procgen.cave import CaveGrid
from ..procgen.placement import CavePlacement
from .brush import SelectionLike, normalize_stamp
from .history import HistoryManager

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PlacedTile:
    """Where the most recent tile went, so a host can jump its camera there."""

    layer: Layer
    x: int
    y: int
    cell: Cell


class EditOperations:
    """Tile editing tools over a TileGrid with undo history.

    Every method is synchronous and returns once the grid is updated. A
    snapshot is pushed to the history before each mutation, and each changed
    cell is announced on the event bus; callers that prefer polling can simply
    re-query ``grid.get`` after each call.
    """

    def __init__(
        self,
        grid: TileGrid,
        history: Optional[HistoryManager] = None,
        bus: Optional[EventBus] = None,
        config: Optional[EditorConfig] = None,
    ) -> None:
        self.grid = grid
        self.config = config or EditorConfig()
        self.config.validate()
        self.history = history if history is not None else HistoryManager(self.config.history_capacity)
        self.bus = bus if bus is not None else EventBus()
        self.last_placed: Optional[PlacedTile] = None

    # ------------------------ internals ------------------------
    def _write(self, layer: Layer, x: int, y: int, cell: Optional[Cell]) -> None:
        old = self.grid.get(layer, x, y)
        self.grid.set(layer, x, y, cell)
        if cell is not None:
            self.last_placed = PlacedTile(layer, x, y, cell)
        self.bus.publish(
            EventType.CELL_CHANGED,
            {"layer": layer.value, "x": x, "y": y, "old": old, "new": cell},
        )

    # ------------------------ tools ------------------------
    def paint_single(self, layer: LayerLike, x: int, y: int, cell: Cell) -> bool:
        """Place ``cell`` at (x, y).

        Always one undo step, even when the cell already holds the same tile.
        Returns False (and records nothing) for out-of-bounds coordinates.
        """
        layer = Layer.coerce(layer)
        if not isinstance(cell, Cell):
            raise TypeError("cell must be a Cell")
        if not self.grid.is_within(x, y):
            return False
        self.history.record(self.grid)
        self._write(layer, x, y, cell)
        return True

    def place_stamp(self, layer: LayerLike, anchor_x: int, anchor_y: int, tiles: Iterable[SelectionLike]) -> int:
        """Stamp a multi-tile brush with its top-left offset at (anchor_x, anchor_y).

        Targets outside the grid are skipped, and so are targets that already
        hold the exact tile, which keeps re-dragging a stamp over itself from
        filling the history. Each written cell is its own undo step. Returns
        the number of cells written.
        """
        layer = Layer.coerce(layer)
        written = 0
        for tile in normalize_stamp(tiles):
            tx, ty = anchor_x + tile.dx, anchor_y + tile.dy
            if not self.grid.is_within(tx, ty):
                continue
            if same_class(self.grid.get(layer, tx, ty), tile.cell):
                continue
            self.paint_single(layer, tx, ty, tile.cell)
            written += 1
        logger.debug("Stamp at (%d,%d) on %s wrote %d cells", anchor_x, anchor_y, layer.value, written)
        return written

    def erase(self, layer: LayerLike, x: int, y: int) -> bool:
        """Clear (x, y). Erasing an empty or out-of-bounds cell records nothing."""
        layer = Layer.coerce(layer)
        if self.grid.get(layer, x, y) is None:
            return False
        self.history.record(self.grid)
        self._write(layer, x, y, None)
        return True

    def pick(self, layer: LayerLike, x: int, y: int) -> Optional[Cell]:
        """Return the cell at (x, y) as a candidate brush. Pure read."""
        return self.grid.get(layer, x, y)

    def flood_fill(self, layer: LayerLike, x: int, y: int, replacement: Cell) -> int:
        """Replace the 4-connected region of cells matching the content at (x, y).

        Cells match on tileset key and frame; empty cells form their own
        class. Nothing happens when the start is out of bounds or already
        equals ``replacement``.

        With ``fill_history == "atomic"`` (the default) one snapshot is taken
        before the first write and the fill undoes in a single step. With
        ``"per_cell"`` each replaced cell goes through ``paint_single`` and
        records its own entry, so a fill larger than the history capacity
        cannot be fully undone.

        Returns the number of cells replaced.
        """
        layer = Layer.coerce(layer)
        if not isinstance(replacement, Cell):
            raise TypeError("replacement must be a Cell")
        if not self.grid.is_within(x, y):
            return 0
        target = self.grid.get(layer, x, y)
        if same_class(target, replacement):
            return 0

        region = self._collect_region(layer, x, y, target)
        per_cell = self.config.fill_history == FILL_PER_CELL
        if not per_cell:
            self.history.record(self.grid)
        for cx, cy in region:
            if per_cell:
                self.paint_single(layer, cx, cy, replacement)
            else:
                self._write(layer, cx, cy, replacement)

        logger.info(
            "Flood fill on %s from (%d,%d) replaced %d cells (%s history)",
            layer.value, x, y, len(region), self.config.fill_history,
        )
        self.bus.publish(
            EventType.FILL_COMPLETED,
            {"layer": layer.value, "x": x, "y": y, "count": len(region)},
        )
        return len(region)

    def _collect_region(self, layer: Layer, x: int, y: int, target: Optional[Cell]) -> list:
        """BFS over the 4-connected component of ``target`` cells containing (x, y)."""
        visited: Set[Tuple[int, int]] = {(x, y)}
        queue: Deque[Tuple[int, int]] = deque([(x, y)])
        region = []
        while queue:
            cx, cy = queue.popleft()
            region.append((cx, cy))
            for nx, ny in self.grid.neighbors(cx, cy):
                if (nx, ny) in visited:
                    continue
                visited.add((nx, ny))
                if same_class(self.grid.get(layer, nx, ny), target):
                    queue.append((nx, ny))
        return region

    def undo(self) -> bool:
        """Restore the most recent snapshot. Returns False when there is nothing to undo."""
        snapshot = self.history.pop()
        if snapshot is None:
            logger.debug("Undo requested with empty history")
            return False
        self.history.restore(self.grid, snapshot)
        logger.info("Undo applied (%d steps remaining)", len(self.history))
        self.bus.publish(EventType.GRID_RESTORED, {"remaining": len(self.history)})
        return True

    def apply_cave(
        self,
        cave: CaveGrid,
        tileset_key: str,
        *,
        layer: LayerLike = Layer.GROUND,
        floor_frame: Optional[int] = None,
        wall_frame: Optional[int] = None,
        batch_size: Optional[int] = None,
    ) -> CavePlacement:
        """Prepare a batched placement of ``cave`` onto ``layer``.

        Nothing is written until the returned driver is stepped or run.
        """
        return CavePlacement(
            self.grid,
            cave,
            tileset_key,
            layer=layer,
            history=self.history,
            bus=self.bus,
            batch_size=batch_size if batch_size is not None else self.config.cave_batch_size,
            floor_frame=self.config.floor_frame if floor_frame is None else floor_frame,
            wall_frame=self.config.wall_frame if wall_frame is None else wall_frame,
            writer=self._write,
        )
