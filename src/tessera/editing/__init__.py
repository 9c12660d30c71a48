from .brush import PaletteSelection, StampTile, normalize_stamp, stamp_from_rows
from .history import DEFAULT_CAPACITY, GridSnapshot, HistoryManager
from .operations import EditOperations, PlacedTile

__all__ = [
    "DEFAULT_CAPACITY",
    "EditOperations",
    "GridSnapshot",
    "HistoryManager",
    "PaletteSelection",
    "PlacedTile",
    "StampTile",
    "normalize_stamp",
    "stamp_from_rows",
]
