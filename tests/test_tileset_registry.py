import pytest

from tessera.exceptions import DuplicateTilesetError
from tessera.tilesets import (
    TilesetRef,
    TilesetRegistry,
    detect_tile_size,
    frame_index,
    frame_position,
    sheet_shape,
)


def test_register_generates_sequential_keys(registry):
    assert registry.keys() == ["ts_0", "ts_1"]
    ref = registry.register("items.png", 2, 2, tile_size=16)
    assert ref.key == "ts_2"
    assert ref.frame_count == 4
    assert "ts_2" in registry and len(registry) == 3


def test_register_skips_keys_already_taken():
    reg = TilesetRegistry([TilesetRef("ts_0", 1, 1)])
    assert reg.register("a.png", 1, 1).key == "ts_1"


def test_duplicate_key_rejected(registry):
    with pytest.raises(DuplicateTilesetError):
        registry.add(TilesetRef("ts_0", 1, 1))


def test_unload_and_iteration_order(registry):
    registry.register("third.png", 1, 1)
    assert registry.unload("ts_1") is True
    assert registry.unload("ts_1") is False
    assert [ref.display_name for ref in registry] == ["terrain.png", "third.png"]
    assert registry.get("ts_1") is None


@pytest.mark.parametrize("kwargs", [{"key": ""}, {"cols": 0}, {"rows": -1}, {"tile_size": 0}])
def test_tileset_ref_validation(kwargs):
    base = {"key": "k", "cols": 1, "rows": 1}
    base.update(kwargs)
    with pytest.raises(ValueError):
        TilesetRef(**base)


def test_frames_run_row_major():
    ref = TilesetRef("ts_0", 8, 4)
    assert frame_index(ref, 5, 1) == 13
    assert frame_position(ref, 13) == (5, 1)
    assert frame_position(ref, 31) == (7, 3)
    with pytest.raises(ValueError):
        frame_index(ref, 8, 0)
    with pytest.raises(ValueError):
        frame_position(ref, 32)


@pytest.mark.parametrize(
    "size,expected",
    [
        ((256, 128), 16),
        ((96, 48), 16),
        ((72, 72), 24),
        ((1024, 1024), 32),
        ((2048, 1536), 64),
        ((100, 70), 32),
    ],
)
def test_detect_tile_size(size, expected):
    assert detect_tile_size(*size) == expected


def test_sheet_shape():
    assert sheet_shape(256, 128, 32) == (8, 4)
    assert sheet_shape(100, 70, 32) == (3, 2)
    with pytest.raises(ValueError, match="too small"):
        sheet_shape(20, 64, 32)
