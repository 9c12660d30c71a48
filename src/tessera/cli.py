from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import List, Optional

from . import __version__
from .config import EditorConfig, load_config
from .editing import EditOperations
from .exceptions import TesseraError
from .io import load_map, save_map
from .logging_config import configure_logging
from .map import Layer, TileGrid
from .procgen import cave
from .procgen.cave import to_lines
from .tilesets import TilesetRegistry

logger = logging.getLogger(__name__)


def _setup_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG
    configure_logging(default_level=level)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="tessera", description="Tessera tile-map tools")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("-v", "--verbose", action="count", default=0, help="Increase log verbosity (-v, -vv)")
    parser.add_argument("--config", default=None, help="Path to a YAML editor config")
    sub = parser.add_subparsers(dest="command", required=True)

    p_cave = sub.add_parser("cave", help="Generate a cave map and export it")
    p_cave.add_argument("--out", required=True, help="Output map JSON path")
    p_cave.add_argument("--width", type=int, default=None, help="Map width in tiles")
    p_cave.add_argument("--height", type=int, default=None, help="Map height in tiles")
    p_cave.add_argument("--seed", default=None, help="Seed (int or any string) for reproducible caves")
    p_cave.add_argument("--wall-probability", type=float, default=None)
    p_cave.add_argument("--iterations", type=int, default=None)
    p_cave.add_argument("--name", default="cave", help="Map name stored in the document")
    p_cave.add_argument("--tileset", default="cave.png", help="Display name of the cave tileset")
    p_cave.add_argument("--cols", type=int, default=2, help="Columns of the cave tileset sheet")
    p_cave.add_argument("--rows", type=int, default=1, help="Rows of the cave tileset sheet")
    p_cave.add_argument("--preview", action="store_true", help="Print an ASCII preview")

    p_info = sub.add_parser("info", help="Validate a map file and print a summary")
    p_info.add_argument("path", help="Map JSON path")
    return parser


def _seed_value(raw: Optional[str]):
    if raw is None:
        return None
    try:
        return int(raw)
    except ValueError:
        return raw


def cmd_cave(args: argparse.Namespace, config: EditorConfig) -> int:
    width = args.width or config.map_width
    height = args.height or config.map_height
    wall_p = config.cave_wall_probability if args.wall_probability is None else args.wall_probability
    iterations = config.cave_iterations if args.iterations is None else args.iterations

    registry = TilesetRegistry()
    ref = registry.register(args.tileset, args.cols, args.rows, tile_size=config.tile_size)
    grid = TileGrid(width, height)
    ops = EditOperations(grid, config=config)

    cave_grid = cave.generate(width, height, wall_p, iterations, seed=_seed_value(args.seed))
    ops.apply_cave(cave_grid, ref.key).run()

    path = save_map(args.out, grid, registry, name=args.name, tile_size=config.tile_size)
    if args.preview:
        print("\n".join(to_lines(cave_grid)))
    print(f"Wrote {width}x{height} cave to {path}")
    return 0


def cmd_info(args: argparse.Namespace) -> int:
    portable = load_map(args.path)
    grid = portable.grid
    summary = {
        "name": portable.name,
        "width": grid.width,
        "height": grid.height,
        "tileSize": portable.tile_size,
        "tilesets": [ref.key for ref in portable.tilesets],
        "cells": {layer.value: grid.count(layer) for layer in Layer},
    }
    print(json.dumps(summary, indent=2, sort_keys=True))
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    _setup_logging(args.verbose)
    try:
        config = load_config(args.config)
        if args.command == "cave":
            return cmd_cave(args, config)
        return cmd_info(args)
    except (TesseraError, FileNotFoundError, ValueError) as exc:
        logger.debug("Command failed", exc_info=True)
        print(f"error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
