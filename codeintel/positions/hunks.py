"""Unified diff text → ordered ``Hunk`` sequence."""

from __future__ import annotations

from unidiff import PatchSet, UnidiffParseError
from unidiff.constants import LINE_TYPE_NO_NEWLINE

from codeintel.errors import DiffParseError

from .models import Hunk


def parse_hunks(diff_text: str) -> list[Hunk]:
    """Parse a single-file unified diff into hunks, in file order.

    An empty diff (identical files) yields ``[]``. ``unidiff`` validates every
    hunk body against its ``@@ -a,b +c,d @@`` header, so a truncated or padded
    hunk is rejected here rather than during translation.

    Raises
    ------
    DiffParseError
        If *diff_text* is not unified-diff syntax, or covers more than one file.
    """
    if not diff_text.strip():
        return []

    try:
        patch = PatchSet.from_string(diff_text)
    except UnidiffParseError as exc:
        raise DiffParseError(f"malformed git diff: {exc}") from exc

    if len(patch) == 0:
        raise DiffParseError("diff text contains no file header")
    if len(patch) > 1:
        paths = ", ".join(f.path for f in patch)
        raise DiffParseError(f"expected a diff for exactly one file, got {len(patch)}: {paths}")

    hunks: list[Hunk] = []
    for hunk in patch[0]:
        body: list[str] = []
        for line in hunk:
            # "\ No newline at end of file" belongs to neither file
            if line.line_type == LINE_TYPE_NO_NEWLINE:
                continue
            body.append(line.line_type + line.value.rstrip("\r\n"))
        hunks.append(Hunk(
            orig_start_line=hunk.source_start,
            orig_lines=hunk.source_length,
            new_start_line=hunk.target_start,
            new_lines=hunk.target_length,
            body=tuple(body),
        ))
    return hunks
