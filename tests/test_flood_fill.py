import pytest

from tessera.config import EditorConfig
from tessera.editing import EditOperations, HistoryManager
from tessera.events import EventType
from tessera.map import Cell, Layer, TileGrid

from conftest import TILE_A, TILE_B, TILE_C

PLUS = [(2, 2), (1, 2), (3, 2), (2, 1), (2, 3)]


def _plus_grid(grid):
    for x, y in PLUS:
        grid.set(Layer.GROUND, x, y, TILE_A)


def test_fill_replaces_exactly_the_plus_region(ops):
    _plus_grid(ops.grid)
    replaced = ops.flood_fill(Layer.GROUND, 2, 2, TILE_B)
    assert replaced == 5
    for y in range(5):
        for x in range(5):
            expected = TILE_B if (x, y) in PLUS else None
            assert ops.grid.get(Layer.GROUND, x, y) == expected


def test_fill_matching_class_is_noop_without_history(ops):
    _plus_grid(ops.grid)
    assert ops.flood_fill(Layer.GROUND, 2, 2, TILE_A) == 0
    assert len(ops.history) == 0
    assert ops.grid.count(Layer.GROUND) == 5


def test_fill_out_of_bounds_start_is_noop(ops):
    assert ops.flood_fill(Layer.GROUND, 7, 7, TILE_A) == 0
    assert len(ops.history) == 0


def test_empty_is_its_own_class(ops):
    _plus_grid(ops.grid)
    # Corner region of empties is 4-connected around the plus: all 20 empty cells
    replaced = ops.flood_fill(Layer.GROUND, 0, 0, TILE_C)
    assert replaced == 20
    for x, y in PLUS:
        assert ops.grid.get(Layer.GROUND, x, y) == TILE_A


def test_fill_matches_on_key_and_frame():
    grid = TileGrid(3, 1)
    grid.set(Layer.GROUND, 0, 0, Cell("ts_0", 1))
    grid.set(Layer.GROUND, 1, 0, Cell("ts_1", 1))  # same frame, other tileset
    grid.set(Layer.GROUND, 2, 0, Cell("ts_0", 1))
    ops = EditOperations(grid)
    assert ops.flood_fill(Layer.GROUND, 0, 0, TILE_B) == 1
    assert grid.get(Layer.GROUND, 2, 0) == Cell("ts_0", 1)


def test_fill_only_touches_its_layer(ops):
    ops.grid.set(Layer.DECORATION, 0, 0, TILE_C)
    ops.flood_fill(Layer.GROUND, 0, 0, TILE_A)
    assert ops.grid.count(Layer.GROUND) == 25
    assert ops.grid.get(Layer.DECORATION, 0, 0) == TILE_C
    assert ops.grid.count(Layer.DECORATION) == 1


def test_fill_on_irregular_shape_visits_each_cell_once():
    rows = [
        "AAAA.",
        "A..A.",
        "A.AA.",
        "AAA..",
    ]
    grid = TileGrid(5, 4)
    for y, row in enumerate(rows):
        for x, ch in enumerate(row):
            if ch == "A":
                grid.set(Layer.GROUND, x, y, TILE_A)
    ops = EditOperations(grid, config=EditorConfig(fill_history="per_cell"), history=HistoryManager(50))
    replaced = ops.flood_fill(Layer.GROUND, 0, 0, TILE_B)
    assert replaced == 12
    # one history entry per replaced cell in per-cell mode proves no cell was written twice
    assert len(ops.history) == 12
    assert grid.to_lines(Layer.GROUND, {TILE_B: "B"}) == [
        "BBBB.",
        "B..B.",
        "B.BB.",
        "BBB..",
    ]


def test_atomic_fill_is_one_undo_step(ops):
    _plus_grid(ops.grid)
    before = TileGrid(5, 5)
    _plus_grid(before)
    ops.flood_fill(Layer.GROUND, 0, 0, TILE_B)
    assert len(ops.history) == 1
    assert ops.undo() is True
    assert ops.grid == before


def test_per_cell_fill_records_an_entry_per_cell(per_cell_ops):
    _plus_grid(per_cell_ops.grid)
    per_cell_ops.flood_fill(Layer.GROUND, 2, 2, TILE_B)
    assert len(per_cell_ops.history) == 5
    for _ in range(5):
        per_cell_ops.undo()
    for x, y in PLUS:
        assert per_cell_ops.grid.get(Layer.GROUND, x, y) == TILE_A


def test_large_per_cell_fill_exhausts_history():
    grid = TileGrid(10, 6)  # 60 cells
    ops = EditOperations(grid, HistoryManager(50), config=EditorConfig(fill_history="per_cell"))
    assert ops.flood_fill(Layer.GROUND, 0, 0, TILE_A) == 60
    assert len(ops.history) == 50

    undone = 0
    while ops.undo():
        undone += 1
    assert undone == 50
    # The first ten cell writes are beyond the history window and stay filled
    assert grid.count(Layer.GROUND) == 10
    assert grid != TileGrid(10, 6)


def test_fill_publishes_completion(ops):
    seen = []
    ops.bus.subscribe(EventType.FILL_COMPLETED, lambda e: seen.append(e.payload["count"]))
    ops.flood_fill(Layer.GROUND, 0, 0, TILE_A)
    assert seen == [25]


def test_fill_history_mode_is_normalised_on_construction():
    grid = TileGrid(3, 1)
    ops = EditOperations(grid, HistoryManager(50), config=EditorConfig(fill_history="PER_CELL"))
    assert ops.flood_fill(Layer.GROUND, 0, 0, TILE_A) == 3
    assert len(ops.history) == 3


def test_unknown_fill_history_mode_is_rejected():
    with pytest.raises(ValueError, match="fill_history"):
        EditOperations(TileGrid(2, 2), config=EditorConfig(fill_history="per-cel"))
