"""Unit tests for unified diff → Hunk parsing."""

from __future__ import annotations

import pytest

from codeintel.errors import DiffParseError
from codeintel.positions.hunks import parse_hunks

# ---------------------------------------------------------------------------
# Fixture diffs
# ---------------------------------------------------------------------------

MODIFY_DIFF = """\
diff --git a/src/HttpClient.cs b/src/HttpClient.cs
index 3b18e51..a9c02f7 100644
--- a/src/HttpClient.cs
+++ b/src/HttpClient.cs
@@ -10,5 +10,5 @@ namespace Payments
 public class HttpClient
 {
-    private readonly int _timeout = 30;
+    private readonly int _timeout = 15;
     public async Task SendAsync() {}
 }
"""

TWO_HUNK_DIFF = """\
--- a/app.py
+++ b/app.py
@@ -1,4 +1,5 @@
 import os
+import sys

 def main():
     pass
@@ -20,4 +21,3 @@ def helper():
 a = 1
-b = 2
 c = 3
 d = 4
"""

NO_NEWLINE_DIFF = """\
--- a/notes.txt
+++ b/notes.txt
@@ -1,2 +1,2 @@
 first
-second
\\ No newline at end of file
+second line
\\ No newline at end of file
"""

TWO_FILE_DIFF = """\
--- a/one.py
+++ b/one.py
@@ -1,1 +1,1 @@
-x = 1
+x = 2
--- a/two.py
+++ b/two.py
@@ -1,1 +1,1 @@
-y = 1
+y = 2
"""

SHORT_HUNK_DIFF = """\
--- a/app.py
+++ b/app.py
@@ -1,5 +1,5 @@
 import os
-x = 1
+x = 2
"""


class TestParseHunks:
    def test_single_hunk_header_fields(self):
        hunks = parse_hunks(MODIFY_DIFF)
        assert len(hunks) == 1
        h = hunks[0]
        assert (h.orig_start_line, h.orig_lines) == (10, 5)
        assert (h.new_start_line, h.new_lines) == (10, 5)

    def test_body_lines_keep_markers_and_order(self):
        body = parse_hunks(MODIFY_DIFF)[0].body
        assert body[0] == " public class HttpClient"
        assert body[2] == "-    private readonly int _timeout = 30;"
        assert body[3] == "+    private readonly int _timeout = 15;"
        assert len(body) == 6

    def test_hunks_come_back_in_file_order(self):
        hunks = parse_hunks(TWO_HUNK_DIFF)
        assert [h.orig_start_line for h in hunks] == [1, 20]
        assert [h.new_start_line for h in hunks] == [1, 21]

    def test_blank_context_line_is_context(self):
        body = parse_hunks(TWO_HUNK_DIFF)[0].body
        assert body[2] == " "

    def test_no_newline_marker_is_not_a_body_line(self):
        body = parse_hunks(NO_NEWLINE_DIFF)[0].body
        assert body == (" first", "-second", "+second line")

    def test_empty_diff_returns_no_hunks(self):
        assert parse_hunks("") == []

    def test_whitespace_only_diff_returns_no_hunks(self):
        assert parse_hunks("\n\n") == []


class TestParseErrors:
    def test_garbage_raises(self):
        with pytest.raises(DiffParseError):
            parse_hunks("not a valid diff at all")

    def test_multiple_files_raise(self):
        with pytest.raises(DiffParseError, match="exactly one file"):
            parse_hunks(TWO_FILE_DIFF)

    def test_hunk_shorter_than_header_raises(self):
        with pytest.raises(DiffParseError):
            parse_hunks(SHORT_HUNK_DIFF)
