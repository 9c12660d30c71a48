from .cave import CaveCell, CaveGrid, count_walls, generate
from .placement import CavePlacement
from .seed import derive_seed, make_rng

__all__ = [
    "CaveCell",
    "CaveGrid",
    "CavePlacement",
    "count_walls",
    "derive_seed",
    "generate",
    "make_rng",
]
