"""Typed contracts for diff hunks and commit-relative positions."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field

ADDITION = "+"
DELETION = "-"


# ---------------------------------------------------------------------------
# Diff source protocol
# ---------------------------------------------------------------------------

@runtime_checkable
class DiffSource(Protocol):
    """Adapter that produces unified diffs between two commits of one file.

    The translator depends on this protocol only; commit identifiers are
    passed through untouched. Implementations are injected at construction time.
    """

    def get_diff(self, commit_a: str, commit_b: str, path: str) -> str:
        """Return the unified diff of *path* going from *commit_a* to *commit_b*."""
        ...


# ---------------------------------------------------------------------------
# Value types
# ---------------------------------------------------------------------------

class Position(BaseModel):
    """A (line, character) pair. Translation never touches ``character``."""

    model_config = ConfigDict(frozen=True)

    line: int
    character: int


class Range(BaseModel):
    model_config = ConfigDict(frozen=True)

    start: Position
    end: Position


class Hunk(BaseModel):
    """One contiguous region of a unified diff.

    ``body`` holds the raw hunk lines in order, each tagged by its leading
    marker: ``+`` for an addition, ``-`` for a deletion, anything else is
    context. The start fields of every hunk already include the net line
    offset of all hunks before it.
    """

    model_config = ConfigDict(frozen=True)

    orig_start_line: int = Field(ge=0)
    orig_lines: int = Field(ge=0)
    new_start_line: int = Field(ge=0)
    new_lines: int = Field(ge=0)
    body: tuple[str, ...] = ()

    @property
    def orig_end_line(self) -> int:
        """First original-file line past this hunk."""
        return self.orig_start_line + self.orig_lines

    @property
    def new_end_line(self) -> int:
        """First new-file line past this hunk."""
        return self.new_start_line + self.new_lines

    @property
    def line_offset(self) -> int:
        """Net lines inserted (positive) or removed (negative) up to the end of this hunk."""
        return self.new_end_line - self.orig_end_line


def is_addition(body_line: str) -> bool:
    return body_line.startswith(ADDITION)


def is_deletion(body_line: str) -> bool:
    return body_line.startswith(DELETION)
