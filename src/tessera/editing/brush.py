from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Union

from ..map.cells import Cell


@dataclass(frozen=True)
class PaletteSelection:
    """One tile of a multi-tile brush as chosen on a tileset frame sheet.

    ``col``/``row`` are positions within the source sheet and only matter for
    deriving relative placement offsets.
    """

    tileset_key: str
    frame: int
    col: int
    row: int


@dataclass(frozen=True)
class StampTile:
    """A stamp cell placed at (anchor_x + dx, anchor_y + dy)."""

    dx: int
    dy: int
    cell: Cell


SelectionLike = Union[PaletteSelection, StampTile, Mapping[str, Any]]


def _as_selection(item: Union[PaletteSelection, Mapping[str, Any]]) -> PaletteSelection:
    if isinstance(item, PaletteSelection):
        return item
    key = item.get("tileset_key", item.get("tilesetKey", item.get("key")))
    return PaletteSelection(
        tileset_key=key,
        frame=int(item["frame"]),
        col=int(item["col"]),
        row=int(item["row"]),
    )


def normalize_stamp(selections: Iterable[SelectionLike]) -> List[StampTile]:
    """Turn palette selections into offset triples relative to their bounding box.

    Offsets are measured from the top-left of the selection (minimum col and
    minimum row), so a selection taken anywhere on a sheet stamps the same
    shape. Input order is preserved. Items that are already StampTiles pass
    through unchanged.
    """
    items = list(selections)
    if not items:
        return []
    if all(isinstance(i, StampTile) for i in items):
        return list(items)  # type: ignore[arg-type]
    if any(isinstance(i, StampTile) for i in items):
        raise TypeError("Cannot mix StampTile and palette selections in one stamp")

    picks = [_as_selection(i) for i in items]  # type: ignore[arg-type]
    min_col = min(p.col for p in picks)
    min_row = min(p.row for p in picks)
    return [StampTile(p.col - min_col, p.row - min_row, Cell(p.tileset_key, p.frame)) for p in picks]


def stamp_from_rows(rows: Sequence[Sequence[Optional[Cell]]]) -> List[StampTile]:
    """Build a stamp from a 2D block of cells; None entries are holes."""
    tiles: List[StampTile] = []
    for dy, row in enumerate(rows):
        for dx, cell in enumerate(row):
            if cell is not None:
                tiles.append(StampTile(dx, dy, cell))
    return tiles
