"""Diff hunk parsing and commit-relative position translation."""

from .diff_source import GitDiffSource
from .hunks import parse_hunks
from .models import DiffSource, Hunk, Position, Range
from .translator import PositionAdjuster, find_anchor_hunk, translate

__all__ = [
    "DiffSource",
    "GitDiffSource",
    "Hunk",
    "Position",
    "PositionAdjuster",
    "Range",
    "find_anchor_hunk",
    "parse_hunks",
    "translate",
]
