from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Union


class Layer(str, Enum):
    """The two fixed drawing planes of a map.

    Values double as the layer names used in exported documents.
    """

    GROUND = "ground"
    DECORATION = "decoration"

    @classmethod
    def coerce(cls, value: Union["Layer", str]) -> "Layer":
        """Return the Layer for a member or its string name.

        Raises ValueError for unknown names.
        """
        if isinstance(value, Layer):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            raise ValueError(f"Unknown layer {value!r}; expected one of {[m.value for m in cls]}") from None


LayerLike = Union[Layer, str]


@dataclass(frozen=True)
class Cell:
    """A reference to one frame of a tileset occupying a grid position.

    The grid never resolves ``tileset_key`` against loaded tilesets, so a cell
    may outlive the tileset it points at.
    """

    tileset_key: str
    frame: int

    def __post_init__(self) -> None:
        if not isinstance(self.tileset_key, str) or not self.tileset_key:
            raise ValueError("Cell.tileset_key must be a non-empty string")
        if isinstance(self.frame, bool) or not isinstance(self.frame, int) or self.frame < 0:
            raise ValueError("Cell.frame must be a non-negative integer")

    def to_dict(self) -> dict:
        return {"tilesetKey": self.tileset_key, "frame": self.frame}


# A layer is stored as rows: cells[y][x], None meaning empty.
LayerData = List[List[Optional[Cell]]]


def same_class(a: Optional[Cell], b: Optional[Cell]) -> bool:
    """True when both are empty or both reference the same key and frame."""
    return a == b
