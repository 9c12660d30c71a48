from __future__ import annotations

import logging
from functools import lru_cache
from typing import Any, Dict, List, Mapping, Sequence

from jsonschema import Draft202012Validator, exceptions as js_exceptions, validators

from ..exceptions import MapFormatError

logger = logging.getLogger(__name__)

FORMAT_VERSION = "1.0"

_CELL = {
    "oneOf": [
        {"type": "integer", "const": 0},
        {
            "type": "array",
            "prefixItems": [
                {"type": "integer", "minimum": 0},
                {"type": "integer", "minimum": 0},
            ],
            "minItems": 2,
            "maxItems": 2,
        },
    ]
}

_MATRIX = {"type": "array", "items": {"type": "array", "items": _CELL}}

MAP_SCHEMA: Dict[str, Any] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "title": "Portable tile map",
    "type": "object",
    "required": ["version", "width", "height", "tilesets", "layers"],
    "properties": {
        "name": {"type": "string"},
        "version": {"const": FORMAT_VERSION},
        "width": {"type": "integer", "minimum": 1},
        "height": {"type": "integer", "minimum": 1},
        "tileSize": {"type": "integer", "minimum": 1},
        "tilesets": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["key", "cols", "rows"],
                "properties": {
                    "key": {"type": "string", "minLength": 1},
                    "file": {"type": "string"},
                    "cols": {"type": "integer", "minimum": 1},
                    "rows": {"type": "integer", "minimum": 1},
                },
            },
        },
        "layers": {
            "type": "object",
            "required": ["ground", "decoration"],
            "properties": {"ground": _MATRIX, "decoration": _MATRIX},
        },
    },
}


def _is_strict_integer(checker: Any, instance: Any) -> bool:
    return isinstance(instance, int) and not isinstance(instance, bool)


# JSON Schema treats 1.0 as an integer; map documents must carry real ints.
MapValidator = validators.extend(
    Draft202012Validator,
    type_checker=Draft202012Validator.TYPE_CHECKER.redefine("integer", _is_strict_integer),
)


@lru_cache(maxsize=1)
def _validator() -> Draft202012Validator:
    MapValidator.check_schema(MAP_SCHEMA)
    return MapValidator(MAP_SCHEMA)


def _format_errors(errors: Sequence[js_exceptions.ValidationError], limit: int = 5) -> str:
    lines: List[str] = ["Map document failed schema validation:"]
    for err in errors[:limit]:
        where = ".".join(str(p) for p in err.absolute_path) or "$"
        lines.append(f" - At {where}: {err.message}")
    if len(errors) > limit:
        lines.append(f" - ... and {len(errors) - limit} more")
    return "\n".join(lines)


def validate_document(document: Mapping[str, Any]) -> None:
    """Validate a portable map document against MAP_SCHEMA.

    Raises:
        MapFormatError listing the first few violations.
    """
    errors = sorted(_validator().iter_errors(document), key=lambda e: list(e.absolute_path))
    if errors:
        for err in errors[:5]:
            logger.error("Map schema validation error at %s: %s", list(err.absolute_path), err.message)
        raise MapFormatError(_format_errors(errors))


__all__ = ["FORMAT_VERSION", "MAP_SCHEMA", "validate_document"]
