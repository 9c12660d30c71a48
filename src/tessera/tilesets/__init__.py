from .registry import (
    DEFAULT_TILE_SIZE,
    TilesetRef,
    TilesetRegistry,
    detect_tile_size,
    frame_index,
    frame_position,
    sheet_shape,
)

__all__ = [
    "DEFAULT_TILE_SIZE",
    "TilesetRef",
    "TilesetRegistry",
    "detect_tile_size",
    "frame_index",
    "frame_position",
    "sheet_shape",
]
