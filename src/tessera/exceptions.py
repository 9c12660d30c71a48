from __future__ import annotations

from typing import Optional


class TesseraError(Exception):
    """Base exception for the Tessera tile-map engine."""


class HistoryError(TesseraError):
    """Raised when a history snapshot cannot be applied to a grid."""


class TilesetError(TesseraError):
    """Raised for tileset registry problems."""


class DuplicateTilesetError(TilesetError):
    """Raised when registering a tileset under a key that is already taken."""


class MissingTilesetReference(TilesetError):
    """Raised on export when a cell references a key absent from the registry."""

    def __init__(self, key: str, layer: Optional[str] = None, x: Optional[int] = None, y: Optional[int] = None):
        self.key = key
        self.layer = layer
        self.x = x
        self.y = y
        where = f" at {layer}({x}, {y})" if layer is not None else ""
        super().__init__(f"Cell{where} references tileset '{key}' which is not in the registry")


class MapFormatError(TesseraError):
    """Raised when a portable map document is malformed."""


class UnsupportedFormatVersion(MapFormatError):
    """Raised when a document's version field is missing or not supported."""

    def __init__(self, version: object, supported: str):
        self.version = version
        self.supported = supported
        if version is None:
            msg = f"Map document has no version field; expected '{supported}'"
        else:
            msg = f"Unsupported map format version {version!r}; expected '{supported}'"
        super().__init__(msg)


class InvalidTilesetIndex(MapFormatError):
    """Raised on import when a cell's tileset index is outside the embedded registry."""

    def __init__(self, index: object, count: int, layer: str, x: int, y: int):
        self.index = index
        self.count = count
        self.layer = layer
        self.x = x
        self.y = y
        super().__init__(
            f"Cell at {layer}({x}, {y}) uses tileset index {index!r} but the document declares {count} tileset(s)"
        )
