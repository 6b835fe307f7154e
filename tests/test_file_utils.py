"""
test_file_utils.py

Tests for the JSON/CSV history exports, the PDF report and targets.txt loading.
"""

import csv
import json
import os
import tempfile
import unittest

from file_utils import HISTORY_FIELDS, load_targets, save_history_csv, save_history_json
from report_utils import export_history_pdf

ENTRIES = [
    {
        "id": 2,
        "created_at": "2026-01-02T10:00:00",
        "repo": "o/r",
        "sha": "b" * 40,
        "path": "src/b.py",
        "model": "m",
        "score": 72.0,
        "reasoning": "# Report\n- good naming\n- " + "long line " * 40,
    },
    {
        "id": 1,
        "created_at": "2026-01-01T10:00:00",
        "repo": "o/r",
        "sha": "a" * 40,
        "path": "",
        "model": "m",
        "score": 35.0,
        "reasoning": "Does not compile.",
    },
]


class TestExports(unittest.TestCase):

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.dir = self.tmp.name

    def tearDown(self):
        self.tmp.cleanup()

    def test_save_history_json(self):
        path = save_history_json("octocat", ENTRIES, reports_dir=self.dir)

        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)

        self.assertEqual(data["username"], "octocat")
        self.assertEqual([e["id"] for e in data["entries"]], [2, 1])

    def test_save_history_csv(self):
        path = save_history_csv("octocat", ENTRIES, reports_dir=self.dir)

        with open(path, "r", newline="", encoding="utf-8") as f:
            rows = list(csv.DictReader(f))

        self.assertEqual(list(rows[0].keys()), HISTORY_FIELDS)
        self.assertEqual(rows[1]["reasoning"], "Does not compile.")

    def test_save_empty_history_csv_has_header(self):
        path = save_history_csv("octocat", [], reports_dir=self.dir)
        with open(path, "r", encoding="utf-8") as f:
            self.assertEqual(f.read().strip(), ",".join(HISTORY_FIELDS))

    def test_export_history_pdf(self):
        path = export_history_pdf("octocat", ENTRIES, reports_dir=self.dir, output_name="r.pdf")

        self.assertEqual(path, os.path.join(self.dir, "r.pdf"))
        with open(path, "rb") as f:
            self.assertEqual(f.read(5), b"%PDF-")

    def test_export_empty_history_pdf(self):
        path = export_history_pdf("octocat", [], reports_dir=self.dir)
        self.assertTrue(os.path.getsize(path) > 0)


class TestLoadTargets(unittest.TestCase):

    def test_missing_file(self):
        self.assertEqual(load_targets("/nonexistent/targets.txt"), [])

    def test_parses_lines(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "targets.txt")
            with open(path, "w", encoding="utf-8") as f:
                f.write("# files to score\n")
                f.write("octocat/hello src/main.py\n")
                f.write("\n")
                f.write("just-a-repo\n")
                f.write("https://github.com/a/b  docs/my file.md\n")

            self.assertEqual(
                load_targets(path),
                [("octocat/hello", "src/main.py"), ("https://github.com/a/b", "docs/my file.md")],
            )


if __name__ == "__main__":
    unittest.main()
