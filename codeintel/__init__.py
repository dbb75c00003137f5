"""Commit-relative code-intelligence queries over independently indexed uploads."""

from .errors import (
    CodeIntelError,
    CursorDecodeError,
    DiffParseError,
    DiffUnavailable,
    MalformedHunkError,
    QueryCancelled,
    SourceQueryError,
)

__all__ = [
    "CodeIntelError",
    "CursorDecodeError",
    "DiffParseError",
    "DiffUnavailable",
    "MalformedHunkError",
    "QueryCancelled",
    "SourceQueryError",
]
