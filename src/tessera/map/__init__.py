from .cells import Cell, Layer, LayerData, same_class
from .grid import TileGrid

__all__ = ["Cell", "Layer", "LayerData", "TileGrid", "same_class"]
