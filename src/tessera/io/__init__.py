from .schema import FORMAT_VERSION, MAP_SCHEMA, validate_document
from .serializer import (
    PortableMap,
    dumps,
    from_portable,
    load_map,
    loads,
    read_document,
    save_map,
    to_portable,
)

__all__ = [
    "FORMAT_VERSION",
    "MAP_SCHEMA",
    "PortableMap",
    "dumps",
    "from_portable",
    "load_map",
    "loads",
    "read_document",
    "save_map",
    "to_portable",
    "validate_document",
]
