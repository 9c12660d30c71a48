from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

from ..exceptions import DuplicateTilesetError

logger = logging.getLogger(__name__)

DEFAULT_TILE_SIZE = 32
TILE_SIZE_CANDIDATES: Tuple[int, ...] = (16, 24, 32, 48, 64)
MAX_TILES_PER_AXIS = 32


@dataclass(frozen=True)
class TilesetRef:
    """Metadata of a loaded tileset frame sheet.

    Owned by the tileset collaborator; cells refer to it by ``key`` only.
    """

    key: str
    cols: int
    rows: int
    tile_size: int = DEFAULT_TILE_SIZE
    display_name: str = ""

    def __post_init__(self) -> None:
        if not self.key:
            raise ValueError("TilesetRef.key must be a non-empty string")
        for name in ("cols", "rows", "tile_size"):
            value = getattr(self, name)
            if not isinstance(value, int) or value <= 0:
                raise ValueError(f"TilesetRef.{name} must be a positive integer, got {value!r}")

    @property
    def frame_count(self) -> int:
        return self.cols * self.rows


def frame_index(ref: TilesetRef, col: int, row: int) -> int:
    """Frame number of the sheet position (col, row); frames run row-major."""
    if not (0 <= col < ref.cols and 0 <= row < ref.rows):
        raise ValueError(f"({col}, {row}) is outside the {ref.cols}x{ref.rows} sheet of '{ref.key}'")
    return row * ref.cols + col


def frame_position(ref: TilesetRef, frame: int) -> Tuple[int, int]:
    """Sheet position (col, row) of ``frame``."""
    if not 0 <= frame < ref.frame_count:
        raise ValueError(f"Frame {frame} is outside tileset '{ref.key}' ({ref.frame_count} frames)")
    return frame % ref.cols, frame // ref.cols


def detect_tile_size(
    image_width: int,
    image_height: int,
    candidates: Sequence[int] = TILE_SIZE_CANDIDATES,
    max_tiles: int = MAX_TILES_PER_AXIS,
    default: int = DEFAULT_TILE_SIZE,
) -> int:
    """Guess the tile size of a frame sheet from its pixel dimensions.

    Picks the first candidate that divides both dimensions while keeping at
    most ``max_tiles`` tiles per axis; falls back to ``default``.
    """
    for size in candidates:
        if (
            image_width % size == 0
            and image_height % size == 0
            and image_width // size <= max_tiles
            and image_height // size <= max_tiles
        ):
            return size
    return default


def sheet_shape(image_width: int, image_height: int, tile_size: int) -> Tuple[int, int]:
    """Return (cols, rows) of a sheet; raises ValueError when it holds no whole tile."""
    cols = image_width // tile_size
    rows = image_height // tile_size
    if cols == 0 or rows == 0:
        raise ValueError(f"Image too small for {tile_size}x{tile_size} tiles")
    return cols, rows


class TilesetRegistry:
    """Ordered collection of loaded tilesets, looked up by key.

    Order matters: the exporter writes tilesets in registration order and cells
    reference them by that position in the exported document.
    """

    def __init__(self, tilesets: Optional[Iterable[TilesetRef]] = None, key_prefix: str = "ts_") -> None:
        self._by_key: Dict[str, TilesetRef] = {}
        self._counter = 0
        self._key_prefix = key_prefix
        for ref in tilesets or ():
            self.add(ref)

    def _next_key(self) -> str:
        while True:
            key = f"{self._key_prefix}{self._counter}"
            self._counter += 1
            if key not in self._by_key:
                return key

    def add(self, ref: TilesetRef) -> TilesetRef:
        if ref.key in self._by_key:
            raise DuplicateTilesetError(f"Tileset key '{ref.key}' is already registered")
        self._by_key[ref.key] = ref
        logger.debug("Registered tileset %s (%dx%d, %dpx)", ref.key, ref.cols, ref.rows, ref.tile_size)
        return ref

    def register(
        self,
        display_name: str,
        cols: int,
        rows: int,
        tile_size: int = DEFAULT_TILE_SIZE,
        key: Optional[str] = None,
    ) -> TilesetRef:
        """Create and add a TilesetRef, generating a ``ts_<n>`` key when none is given."""
        ref = TilesetRef(
            key=key or self._next_key(),
            cols=cols,
            rows=rows,
            tile_size=tile_size,
            display_name=display_name,
        )
        return self.add(ref)

    def get(self, key: str) -> Optional[TilesetRef]:
        return self._by_key.get(key)

    def unload(self, key: str) -> bool:
        """Forget a tileset. Cells that still reference it stay valid."""
        ref = self._by_key.pop(key, None)
        if ref is None:
            return False
        logger.info("Unloaded tileset %s", key)
        return True

    def keys(self) -> List[str]:
        return list(self._by_key)

    def __iter__(self) -> Iterator[TilesetRef]:
        return iter(list(self._by_key.values()))

    def __len__(self) -> int:
        return len(self._by_key)

    def __contains__(self, key: object) -> bool:
        return key in self._by_key

    def __repr__(self) -> str:
        return f"TilesetRegistry({self.keys()!r})"
