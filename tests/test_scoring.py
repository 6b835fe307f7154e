"""
test_scoring.py

Unit tests for the score display helpers.

I am using Python's built-in unittest framework to keep the testing
structure simple and explicit.
"""

import unittest

from scoring import is_functional_score, score_band, score_color, summarize_scores


class TestScoring(unittest.TestCase):

    def test_summarize_scores_empty(self):
        """
        An empty history should not crash; every statistic is None
        and the counts are zero.
        """
        summary = summarize_scores([])

        self.assertEqual(summary["count"], 0)
        self.assertIsNone(summary["mean"])
        self.assertIsNone(summary["max"])
        self.assertEqual(summary["functional_count"], 0)

    def test_summarize_scores_values(self):
        # None and strings are skipped, not counted as zero
        summary = summarize_scores([90, 45, 60, None, "n/a", 30])

        self.assertEqual(summary["count"], 4)
        self.assertEqual(summary["mean"], 56.2)
        self.assertEqual(summary["median"], 52.5)
        self.assertEqual(summary["min"], 30.0)
        self.assertEqual(summary["max"], 90.0)
        self.assertEqual(summary["functional_count"], 2)
        self.assertEqual(summary["bands"], {"excellent": 1, "good": 1, "fair": 1, "poor": 1})

    def test_score_band_edges(self):
        self.assertEqual(score_band(80), "excellent")
        self.assertEqual(score_band(79.9), "good")
        self.assertEqual(score_band(60), "good")
        self.assertEqual(score_band(40), "fair")
        self.assertEqual(score_band(-5), "poor")
        self.assertEqual(score_band(150), "excellent")
        self.assertEqual(score_band(None), "unknown")
        self.assertEqual(score_band(True), "unknown")

    def test_score_color(self):
        self.assertEqual(score_color(95), "#22C55E")
        self.assertEqual(score_color("bad"), "#94A3B8")

    def test_is_functional_score(self):
        self.assertTrue(is_functional_score(50))
        self.assertFalse(is_functional_score(49.9))
        self.assertFalse(is_functional_score(None))


if __name__ == "__main__":
    unittest.main()
