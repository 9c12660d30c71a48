from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from typing import Deque, Optional

from ..exceptions import HistoryError
from ..map.cells import Layer, LayerData
from ..map.grid import TileGrid

logger = logging.getLogger(__name__)

DEFAULT_CAPACITY = 50


@dataclass(frozen=True)
class GridSnapshot:
    """Full copy of both layers at one instant."""

    ground: LayerData
    decoration: LayerData

    @property
    def width(self) -> int:
        return len(self.ground[0]) if self.ground else 0

    @property
    def height(self) -> int:
        return len(self.ground)

    def layer(self, layer: Layer) -> LayerData:
        return self.ground if layer is Layer.GROUND else self.decoration


class HistoryManager:
    """Bounded undo stack of full-grid snapshots.

    The most recent snapshot is last. Pushing beyond capacity silently drops
    the oldest entry.
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        if isinstance(capacity, bool) or not isinstance(capacity, int) or capacity <= 0:
            raise ValueError("History capacity must be a positive integer")
        self._capacity = capacity
        self._stack: Deque[GridSnapshot] = deque(maxlen=capacity)

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def can_undo(self) -> bool:
        return bool(self._stack)

    def __len__(self) -> int:
        return len(self._stack)

    @staticmethod
    def capture(grid: TileGrid) -> GridSnapshot:
        return GridSnapshot(
            ground=grid.clone_layer(Layer.GROUND),
            decoration=grid.clone_layer(Layer.DECORATION),
        )

    def push(self, snapshot: GridSnapshot) -> None:
        if len(self._stack) == self._capacity:
            logger.debug("History full (%d); evicting oldest snapshot", self._capacity)
        self._stack.append(snapshot)

    def record(self, grid: TileGrid) -> GridSnapshot:
        """Capture ``grid`` and push the snapshot in one step."""
        snapshot = self.capture(grid)
        self.push(snapshot)
        return snapshot

    def pop(self) -> Optional[GridSnapshot]:
        if not self._stack:
            return None
        return self._stack.pop()

    def peek(self) -> Optional[GridSnapshot]:
        return self._stack[-1] if self._stack else None

    def clear(self) -> None:
        self._stack.clear()

    @staticmethod
    def restore(grid: TileGrid, snapshot: GridSnapshot) -> None:
        """Rebuild both layers of ``grid`` from ``snapshot``.

        Every coordinate is cleared then set; there is no diffing.
        """
        if snapshot.width != grid.width or snapshot.height != grid.height:
            raise HistoryError(
                f"Snapshot is {snapshot.width}x{snapshot.height} but grid is {grid.width}x{grid.height}"
            )
        for layer in Layer:
            rows = snapshot.layer(layer)
            for y in range(grid.height):
                row = rows[y]
                for x in range(grid.width):
                    grid.set(layer, x, y, None)
                    grid.set(layer, x, y, row[x])
        logger.debug("Restored %dx%d grid from snapshot", grid.width, grid.height)
