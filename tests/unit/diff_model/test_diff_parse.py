"""Tests for the unified-diff parser.

Covers git and plain ``diff -u`` input, file status detection, and the
structural errors that make a section fail to reload.
"""

from __future__ import annotations

import unittest

from lazydiff.diff_model import DiffParseError, LineKind, parse_unified_diff

GIT_DIFF = """diff --git a/src/app.py b/src/app.py
index 1111111..2222222 100644
--- a/src/app.py
+++ b/src/app.py
@@ -1,3 +1,3 @@ def main():
 keep
-old
+new
 tail
diff --git a/docs/new.md b/docs/new.md
new file mode 100644
index 0000000..3333333
--- /dev/null
+++ b/docs/new.md
@@ -0,0 +1,2 @@
+# Title
+body
"""


class ParseUnifiedDiffTests(unittest.TestCase):
    def test_git_diff_files_hunks_and_counts(self) -> None:
        document = parse_unified_diff(GIT_DIFF)

        self.assertEqual([f.display_path for f in document.files], ["src/app.py", "docs/new.md"])
        app, new = document.files
        self.assertEqual((app.additions, app.deletions), (1, 1))
        self.assertEqual(app.status, "modified")
        self.assertEqual(new.status, "added")
        self.assertEqual((new.additions, new.deletions), (2, 0))

        hunk = app.hunks[0]
        self.assertEqual(hunk.header, "@@ -1,3 +1,3 @@ def main():")
        self.assertEqual(
            [(line.kind, line.old_line, line.new_line) for line in hunk.lines],
            [
                (LineKind.CONTEXT, 1, 1),
                (LineKind.REMOVE, 2, 0),
                (LineKind.ADD, 0, 2),
                (LineKind.CONTEXT, 3, 3),
            ],
        )

    def test_plain_diff_u_without_git_headers(self) -> None:
        text = (
            "--- a/one.txt\n+++ b/one.txt\n@@ -1 +1 @@\n-a\n+b\n"
            "--- a/two.txt\n+++ b/two.txt\n@@ -1 +1 @@\n-c\n+d\n"
        )
        document = parse_unified_diff(text)
        self.assertEqual([f.display_path for f in document.files], ["one.txt", "two.txt"])
        self.assertEqual(document.files[1].hunks[0].lines[1].text, "d")

    def test_no_newline_marker_flags_previous_line(self) -> None:
        text = "--- a/x\n+++ b/x\n@@ -1 +1 @@\n-a\n+b\n\\ No newline at end of file\n"
        line = parse_unified_diff(text).files[0].hunks[0].lines[-1]
        self.assertEqual(line.text, "b")
        self.assertTrue(line.no_newline)

    def test_preamble_before_first_file_is_ignored(self) -> None:
        text = "commit abc123\nAuthor: Someone\n\n    Fix things\n\n" + GIT_DIFF
        self.assertEqual(len(parse_unified_diff(text).files), 2)

    def test_rename_and_binary_detection(self) -> None:
        text = (
            "diff --git a/old.py b/new.py\nsimilarity index 100%\nrename from old.py\nrename to new.py\n"
            "diff --git a/img.png b/img.png\nBinary files a/img.png and b/img.png differ\n"
        )
        renamed, binary = parse_unified_diff(text).files
        self.assertEqual(renamed.status, "renamed")
        self.assertEqual(renamed.display_path, "new.py")
        self.assertTrue(binary.is_binary)
        self.assertEqual(binary.hunks, [])

    def test_empty_text_has_no_files(self) -> None:
        self.assertEqual(parse_unified_diff("").files, [])

    def test_body_line_beyond_hunk_range_raises(self) -> None:
        with self.assertRaises(DiffParseError):
            parse_unified_diff("--- a/x\n+++ b/x\n@@ -1,1 +1,1 @@\n-a\n-b\n")

    def test_malformed_hunk_header_raises(self) -> None:
        with self.assertRaisesRegex(DiffParseError, "invalid hunk header"):
            parse_unified_diff("--- a/x\n+++ b/x\n@@ nope @@\n")

    def test_change_line_outside_hunk_raises(self) -> None:
        with self.assertRaises(DiffParseError):
            parse_unified_diff("diff --git a/x b/x\n+stray\n")


if __name__ == "__main__":
    unittest.main()
