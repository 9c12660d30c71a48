from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Callable, Iterator, Optional

from ..events import EventBus, EventType
from ..map.cells import Cell, Layer, LayerLike
from ..map.grid import TileGrid
from .cave import CaveCell, CaveGrid

if TYPE_CHECKING:
    from ..editing.history import HistoryManager

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 500

CellWriter = Callable[[Layer, int, int, Cell], object]


class CavePlacement:
    """Writes a generated cave grid onto one layer of a TileGrid in batches.

    The host drives it from its frame scheduler, calling ``step()`` once per
    tick (or advancing ``iter_batches()``) so a full-map rewrite never blocks
    a frame for long. ``run()`` drains everything synchronously.

    Before the first batch the target layer is cleared and a single snapshot
    is pushed, so the whole cave undoes in one step. There is no cancel: once
    started, driving it to the end is the caller's job.

    Cells go through ``writer`` (EditOperations passes its own write path, so
    every cell is announced as ``cell.changed`` and becomes ``last_placed``);
    without one they are set on the grid directly.

    The snapshot is only pushed once. An ``undo()`` between batches restores
    the pre-cave grid, but batches still pending afterwards write with no
    history entry of their own; finish or abandon a placement before undoing.
    """

    def __init__(
        self,
        grid: TileGrid,
        cave: CaveGrid,
        tileset_key: str,
        *,
        layer: LayerLike = Layer.GROUND,
        history: Optional[HistoryManager] = None,
        bus: Optional[EventBus] = None,
        batch_size: int = DEFAULT_BATCH_SIZE,
        floor_frame: int = 0,
        wall_frame: int = 1,
        writer: Optional[CellWriter] = None,
    ) -> None:
        if batch_size <= 0:
            raise ValueError("batch_size must be positive")
        if len(cave) != grid.height or any(len(row) != grid.width for row in cave):
            raise ValueError(
                f"Cave grid does not match map size {grid.width}x{grid.height}"
            )
        self.grid = grid
        self.cave = cave
        self.layer = Layer.coerce(layer)
        self.history = history
        self.bus = bus
        self.batch_size = batch_size
        self._floor = Cell(tileset_key, floor_frame)
        self._wall = Cell(tileset_key, wall_frame)
        self._write = writer or grid.set
        self._index = 0
        self._started = False

    @property
    def total(self) -> int:
        return self.grid.width * self.grid.height

    @property
    def placed(self) -> int:
        return self._index

    @property
    def done(self) -> bool:
        return self._index >= self.total

    @property
    def progress(self) -> float:
        return self._index / float(self.total)

    def _begin(self) -> None:
        self._started = True
        if self.history is not None:
            self.history.record(self.grid)
        self.grid.clear_layer(self.layer)
        logger.info(
            "Placing %dx%d cave on %s layer in batches of %d",
            self.grid.width, self.grid.height, self.layer.value, self.batch_size,
        )

    def step(self) -> bool:
        """Place one batch. Returns True while cells remain."""
        if self.done:
            return False
        if not self._started:
            self._begin()
        width = self.grid.width
        end = min(self._index + self.batch_size, self.total)
        for idx in range(self._index, end):
            x = idx % width
            y = idx // width
            cell = self._wall if self.cave[y][x] == CaveCell.WALL else self._floor
            self._write(self.layer, x, y, cell)
        self._index = end
        if self.bus is not None:
            self.bus.publish(EventType.CAVE_PROGRESS, {"placed": self._index, "total": self.total})
        if self.done:
            logger.info("Cave placement complete (%d cells)", self.total)
            if self.bus is not None:
                self.bus.publish(EventType.CAVE_COMPLETED, {"layer": self.layer.value, "total": self.total})
            return False
        return True

    def iter_batches(self) -> Iterator[int]:
        """Yield the running count of placed cells after each batch."""
        while not self.done:
            self.step()
            yield self._index

    def run(self) -> int:
        """Place every remaining batch synchronously; returns the number of batches run."""
        batches = 0
        for _ in self.iter_batches():
            batches += 1
        return batches
