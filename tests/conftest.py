import sys
from pathlib import Path

import pytest

# Ensure 'src' is on sys.path for test imports without installing the package
ROOT = Path(__file__).resolve().parents[1]
src = ROOT / "src"
if str(src) not in sys.path:
    sys.path.insert(0, str(src))

from tessera.config import EditorConfig  # noqa: E402
from tessera.editing import EditOperations, HistoryManager  # noqa: E402
from tessera.map import Cell, TileGrid  # noqa: E402
from tessera.tilesets import TilesetRegistry  # noqa: E402

TILE_A = Cell("ts_0", 1)
TILE_B = Cell("ts_0", 2)
TILE_C = Cell("ts_1", 1)


@pytest.fixture
def grid() -> TileGrid:
    return TileGrid(5, 5)


@pytest.fixture
def ops(grid: TileGrid) -> EditOperations:
    return EditOperations(grid, HistoryManager(50))


@pytest.fixture
def per_cell_ops(grid: TileGrid) -> EditOperations:
    return EditOperations(grid, HistoryManager(50), config=EditorConfig(fill_history="per_cell"))


@pytest.fixture
def registry() -> TilesetRegistry:
    reg = TilesetRegistry()
    reg.register("terrain.png", 8, 4)
    reg.register("props.png", 4, 4)
    return reg
