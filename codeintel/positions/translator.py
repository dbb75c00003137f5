"""Position translator: map a line in one commit onto another via diff hunks.

Given the hunks of ``git diff <orig> <new> -- <path>``, a position expressed in
the *original* file is moved into the *new* file's coordinate space:

* before the first hunk    → unchanged
* past the anchor hunk     → shifted by that hunk's net offset
* inside the anchor hunk   → walked line by line; only context lines map

Lines that were added, removed, or edited have no counterpart and translate to
``None``. A guessed position there would point callers at unrelated code.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from codeintel.errors import CodeIntelError, DiffUnavailable, MalformedHunkError

from .hunks import parse_hunks
from .models import DiffSource, Hunk, Position, is_addition, is_deletion

logger = logging.getLogger(__name__)


def find_anchor_hunk(hunks: Sequence[Hunk], line: int) -> Hunk | None:
    """Return the last hunk starting at or before *line*, or ``None``."""
    i = 0
    while i < len(hunks) and hunks[i].orig_start_line <= line:
        i += 1
    if i == 0:
        return None
    return hunks[i - 1]


def translate(hunks: Sequence[Hunk], line: int, character: int) -> Position | None:
    """Translate ``(line, character)`` from the original file into the new file.

    Returns ``None`` when the line was added, removed or edited between the two
    files.

    Raises
    ------
    MalformedHunkError
        If the anchor hunk's body has fewer original-file lines than its header.
    """
    return translate_from_hunk(find_anchor_hunk(hunks, line), line, character)


def translate_from_hunk(hunk: Hunk | None, line: int, character: int) -> Position | None:
    """Translate relative to *hunk*, the anchor hunk for *line* (see ``find_anchor_hunk``)."""
    if hunk is None:
        # No hunk before this line, so no offset has accumulated yet
        return Position(line=line, character=character)

    if line >= hunk.orig_end_line:
        # Hunk headers already carry the cumulative offset of every earlier
        # hunk, so the anchor's own end delta is the full shift. Summing the
        # preceding hunks again would double-count.
        return Position(line=line + hunk.line_offset, character=character)

    # Two fingers at the first line of this hunk in each file
    orig_finger = hunk.orig_start_line
    new_finger = hunk.new_start_line

    for body_line in hunk.body:
        added = is_addition(body_line)
        removed = is_deletion(body_line)
        if not added:
            orig_finger += 1
        if not removed:
            new_finger += 1

        if orig_finger - 1 < line:
            continue

        if not added and not removed:
            return Position(line=new_finger - 1, character=character)

        # Edited, removed, or never indexed on the other side
        return None

    raise MalformedHunkError(
        f"malformed git diff hunk: @@ -{hunk.orig_start_line},{hunk.orig_lines} "
        f"+{hunk.new_start_line},{hunk.new_lines} @@ has no body line for original line {line}"
    )


class PositionAdjuster:
    """Moves a position in the target commit into an upload's commit.

    Parameters
    ----------
    diff_source:
        ``DiffSource`` implementation that fetches the per-path diff between
        two commits. A fresh diff is fetched and parsed on every call.
    """

    def __init__(self, diff_source: DiffSource) -> None:
        self._diff_source = diff_source

    def adjust(
        self,
        source_commit: str,
        target_commit: str,
        path: str,
        line: int,
        character: int,
    ) -> Position | None:
        """Return the position of ``(line, character)`` at *target_commit* as seen from *source_commit*.

        ``None`` means the line has no stable counterpart in *source_commit*.

        Raises
        ------
        DiffUnavailable
            If the diff collaborator fails.
        DiffParseError, MalformedHunkError
            If the diff it returns is corrupt.
        """
        if source_commit == target_commit:
            # Trivial case, this exact commit is indexed
            return Position(line=line, character=character)

        try:
            diff_text = self._diff_source.get_diff(target_commit, source_commit, path)
        except CodeIntelError:
            raise
        except Exception as exc:  # noqa: BLE001
            raise DiffUnavailable(
                f"could not diff {path} between {target_commit} and {source_commit}: {exc}"
            ) from exc

        position = translate(parse_hunks(diff_text), line, character)
        if position is None:
            logger.debug(
                "line %d of %s at %s has no counterpart at %s",
                line, path, target_commit, source_commit,
            )
        return position
