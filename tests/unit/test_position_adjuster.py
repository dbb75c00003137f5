"""Unit tests for PositionAdjuster — uses a stub diff source, no git needed."""

from __future__ import annotations

import pytest

from codeintel.errors import DiffParseError, DiffUnavailable, MalformedHunkError
from codeintel.positions.models import DiffSource, Position
from codeintel.positions.translator import PositionAdjuster

DIFF = """\
--- a/src/app.py
+++ b/src/app.py
@@ -3,4 +3,5 @@
 def main():
-    run()
+    setup()
+    run()
     return 0

"""


class StubDiffSource:
    """Minimal in-memory stub satisfying the DiffSource protocol."""

    def __init__(self, diff: str = "", error: Exception | None = None) -> None:
        self._diff = diff
        self._error = error
        self.calls: list[tuple[str, str, str]] = []

    def get_diff(self, commit_a: str, commit_b: str, path: str) -> str:
        self.calls.append((commit_a, commit_b, path))
        if self._error is not None:
            raise self._error
        return self._diff


class TestIdentity:
    def test_same_commit_returns_input_without_diffing(self):
        source = StubDiffSource(error=AssertionError("must not be called"))
        adjuster = PositionAdjuster(source)
        assert adjuster.adjust("abc1234", "abc1234", "src/app.py", 12, 3) == Position(line=12, character=3)
        assert source.calls == []


class TestDiffing:
    def test_diff_goes_from_target_to_source(self):
        source = StubDiffSource(DIFF)
        PositionAdjuster(source).adjust("upload_sha", "target_sha", "src/app.py", 1, 0)
        assert source.calls == [("target_sha", "upload_sha", "src/app.py")]

    def test_context_line_is_translated(self):
        adjuster = PositionAdjuster(StubDiffSource(DIFF))
        assert adjuster.adjust("u", "t", "src/app.py", 5, 4) == Position(line=6, character=4)

    def test_changed_line_is_unresolvable(self):
        adjuster = PositionAdjuster(StubDiffSource(DIFF))
        assert adjuster.adjust("u", "t", "src/app.py", 4, 4) is None

    def test_line_after_hunk_is_offset(self):
        adjuster = PositionAdjuster(StubDiffSource(DIFF))
        assert adjuster.adjust("u", "t", "src/app.py", 30, 1) == Position(line=31, character=1)

    def test_empty_diff_is_identity(self):
        adjuster = PositionAdjuster(StubDiffSource(""))
        assert adjuster.adjust("u", "t", "src/app.py", 30, 1) == Position(line=30, character=1)

    def test_diff_is_fetched_on_every_call(self):
        source = StubDiffSource(DIFF)
        adjuster = PositionAdjuster(source)
        adjuster.adjust("u", "t", "src/app.py", 1, 0)
        adjuster.adjust("u", "t", "src/app.py", 1, 0)
        assert len(source.calls) == 2


class TestErrors:
    def test_collaborator_failure_becomes_diff_unavailable(self):
        adjuster = PositionAdjuster(StubDiffSource(error=OSError("git exited 128")))
        with pytest.raises(DiffUnavailable, match="git exited 128") as excinfo:
            adjuster.adjust("u", "t", "src/app.py", 1, 0)
        assert isinstance(excinfo.value.__cause__, OSError)

    def test_diff_unavailable_passes_through_unchanged(self):
        original = DiffUnavailable("timeout")
        adjuster = PositionAdjuster(StubDiffSource(error=original))
        with pytest.raises(DiffUnavailable) as excinfo:
            adjuster.adjust("u", "t", "src/app.py", 1, 0)
        assert excinfo.value is original

    def test_malformed_diff_text_raises_parse_error(self):
        adjuster = PositionAdjuster(StubDiffSource("this is not a diff"))
        with pytest.raises(DiffParseError):
            adjuster.adjust("u", "t", "src/app.py", 1, 0)

    def test_malformed_hunk_surfaces(self, monkeypatch):
        from codeintel.positions import translator
        from codeintel.positions.models import Hunk

        broken = Hunk(orig_start_line=1, orig_lines=4, new_start_line=1, new_lines=4, body=(" a",))
        monkeypatch.setattr(translator, "parse_hunks", lambda _text: [broken])
        adjuster = PositionAdjuster(StubDiffSource(DIFF))
        with pytest.raises(MalformedHunkError):
            adjuster.adjust("u", "t", "src/app.py", 3, 0)


def test_stub_satisfies_protocol():
    assert isinstance(StubDiffSource(), DiffSource)
