"""Portable map documents.

Exported shape::

    {
      "name": "untitled_map",
      "version": "1.0",
      "width": W, "height": H, "tileSize": 32,
      "tilesets": [{"key": "ts_0", "file": "cave.png", "cols": 8, "rows": 8}],
      "layers": {"ground": [[0, [0, 5], ...], ...], "decoration": [...]}
    }

A layer cell is ``0`` when empty, otherwise ``[tileset_index, frame]`` where
``tileset_index`` is the position of the cell's tileset inside the
``tilesets`` array of the same document. Indexes are only meaningful within
one document; importers rebuild keys from the embedded array.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from ..exceptions import (
    DuplicateTilesetError,
    InvalidTilesetIndex,
    MapFormatError,
    MissingTilesetReference,
    UnsupportedFormatVersion,
)
from ..map.cells import Cell, Layer
from ..map.grid import TileGrid
from ..tilesets.registry import DEFAULT_TILE_SIZE, TilesetRef
from .fs import atomic_write_text
from .schema import FORMAT_VERSION, validate_document

logger = logging.getLogger(__name__)

DEFAULT_MAP_NAME = "untitled_map"

EncodedCell = Union[int, List[int]]


@dataclass
class PortableMap:
    """A decoded document: the grid plus the tilesets it was exported with."""

    name: str
    tile_size: int
    tilesets: List[TilesetRef]
    grid: TileGrid


def _index_tilesets(tilesets: Iterable[TilesetRef]) -> Dict[str, int]:
    index: Dict[str, int] = {}
    for i, ref in enumerate(tilesets):
        if ref.key in index:
            raise DuplicateTilesetError(f"Tileset key '{ref.key}' appears twice in the export registry")
        index[ref.key] = i
    return index


def to_portable(
    grid: TileGrid,
    tilesets: Iterable[TilesetRef],
    name: str = DEFAULT_MAP_NAME,
    tile_size: int = DEFAULT_TILE_SIZE,
) -> Dict[str, Any]:
    """Build the portable document for ``grid``.

    ``tilesets`` is the registry in its current order; each cell's key is
    replaced by its position in that order.

    Raises:
        MissingTilesetReference: a cell references a key not in ``tilesets``.
    """
    refs = list(tilesets)
    index = _index_tilesets(refs)

    def pack(layer: Layer) -> List[List[EncodedCell]]:
        rows: List[List[EncodedCell]] = []
        for y in range(grid.height):
            row: List[EncodedCell] = []
            for x in range(grid.width):
                cell = grid.get(layer, x, y)
                if cell is None:
                    row.append(0)
                    continue
                pos = index.get(cell.tileset_key)
                if pos is None:
                    logger.error(
                        "Export aborted: %s(%d,%d) references unregistered tileset %s",
                        layer.value, x, y, cell.tileset_key,
                    )
                    raise MissingTilesetReference(cell.tileset_key, layer.value, x, y)
                row.append([pos, cell.frame])
            rows.append(row)
        return rows

    document = {
        "name": name,
        "version": FORMAT_VERSION,
        "width": grid.width,
        "height": grid.height,
        "tileSize": tile_size,
        "tilesets": [
            {"key": ref.key, "file": ref.display_name, "cols": ref.cols, "rows": ref.rows}
            for ref in refs
        ],
        "layers": {layer.value: pack(layer) for layer in Layer},
    }
    logger.info("Exported map '%s' (%dx%d, %d tilesets)", name, grid.width, grid.height, len(refs))
    return document


def check_version(document: Mapping[str, Any]) -> None:
    version = document.get("version")
    if version != FORMAT_VERSION:
        logger.warning("Rejecting map document with version %r", version)
        raise UnsupportedFormatVersion(version, FORMAT_VERSION)


def read_document(document: Mapping[str, Any]) -> PortableMap:
    """Decode and validate a portable document.

    Checks the version first, then the overall shape (JSON Schema), then
    resolves every ``[index, frame]`` pair against the embedded tileset array.
    """
    if not isinstance(document, Mapping):
        raise MapFormatError("Map document must be a JSON object")
    check_version(document)
    validate_document(document)

    width = document["width"]
    height = document["height"]
    tile_size = document.get("tileSize", DEFAULT_TILE_SIZE)
    tilesets = [
        TilesetRef(
            key=entry["key"],
            cols=entry["cols"],
            rows=entry["rows"],
            tile_size=tile_size,
            display_name=entry.get("file", ""),
        )
        for entry in document["tilesets"]
    ]
    keys = [ref.key for ref in tilesets]

    grid = TileGrid(width, height)
    for layer in Layer:
        rows = document["layers"][layer.value]
        if len(rows) != height:
            raise MapFormatError(f"Layer '{layer.value}' has {len(rows)} rows; expected {height}")
        for y, row in enumerate(rows):
            if len(row) != width:
                raise MapFormatError(
                    f"Layer '{layer.value}' row {y} has {len(row)} cells; expected {width}"
                )
            for x, encoded in enumerate(row):
                if encoded == 0:
                    continue
                pos, frame = encoded
                if not 0 <= pos < len(keys):
                    raise InvalidTilesetIndex(pos, len(keys), layer.value, x, y)
                grid.set(layer, x, y, Cell(keys[pos], frame))

    name = document.get("name", DEFAULT_MAP_NAME)
    logger.info("Imported map '%s' (%dx%d, %d tilesets)", name, width, height, len(tilesets))
    return PortableMap(name=name, tile_size=tile_size, tilesets=tilesets, grid=grid)


def from_portable(document: Mapping[str, Any]) -> TileGrid:
    """Rebuild a TileGrid from a portable document."""
    return read_document(document).grid


def dumps(document: Mapping[str, Any], indent: Optional[int] = None) -> str:
    return json.dumps(document, ensure_ascii=False, indent=indent)


def loads(text: str) -> PortableMap:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise MapFormatError(f"Invalid JSON (line {e.lineno}, column {e.colno}): {e.msg}") from e
    return read_document(data)


def save_map(
    path: Union[str, Path],
    grid: TileGrid,
    tilesets: Iterable[TilesetRef],
    name: str = DEFAULT_MAP_NAME,
    tile_size: int = DEFAULT_TILE_SIZE,
) -> Path:
    """Export ``grid`` to ``path`` atomically and return the path."""
    p = Path(path)
    document = to_portable(grid, tilesets, name=name, tile_size=tile_size)
    atomic_write_text(p, dumps(document))
    logger.info("Saved map to %s", p)
    return p


def load_map(path: Union[str, Path]) -> PortableMap:
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"Map file not found: {p}")
    return loads(p.read_text(encoding="utf-8"))
