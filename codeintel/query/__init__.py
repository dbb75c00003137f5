"""Multi-upload definitions / references / hover queries."""

from .client import HttpIndexedSourceClient
from .cursor import decode_cursor, encode_cursor
from .models import (
    Hover,
    IndexedSourceClient,
    Location,
    LocationConnection,
    QueryConfig,
    SourceQuery,
    Upload,
)
from .resolver import QueryResolver

__all__ = [
    "decode_cursor",
    "encode_cursor",
    "Hover",
    "HttpIndexedSourceClient",
    "IndexedSourceClient",
    "Location",
    "LocationConnection",
    "QueryConfig",
    "QueryResolver",
    "SourceQuery",
    "Upload",
]
