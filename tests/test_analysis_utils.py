"""
test_analysis_utils.py

Tests for the fetch -> cache -> analyze -> history flow.
GitHub is patched out, and the LLM is a fake client.
"""

import os
import tempfile
import unittest
from types import SimpleNamespace
from unittest import mock

from analysis_utils import analyze_blob
from config import Settings
from db_utils import get_history
from errors import ConfigurationError, InvalidArgument, NotFound, Unauthorized

SHA = "0123456789abcdef0123456789abcdef01234567"


class FakeClient:
    def __init__(self, reply):
        self.calls = 0
        self.reply = reply
        self.chat = SimpleNamespace(completions=SimpleNamespace(create=self._create))

    def _create(self, **kwargs):
        self.calls += 1
        message = SimpleNamespace(content=self.reply)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


class TestAnalyzeBlob(unittest.TestCase):

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.settings = Settings(
            groq_api_key="key",
            groq_model="test-model",
            github_token="tok",
            request_timeout=5,
            db_path=os.path.join(self.tmp.name, "h.db"),
            cache_dir=os.path.join(self.tmp.name, "cache"),
            cache_minutes=60,
        )

    def tearDown(self):
        self.tmp.cleanup()

    @mock.patch("analysis_utils.fetch_blob", return_value="console.log(1)")
    def test_analyze_then_cache_hit(self, fetch):
        client = FakeClient('{"score": 85, "reasoning": "Simple, correct one-liner."}')

        result, from_cache = analyze_blob(self.settings, "tok", "o/r", SHA, llm_client=client)
        self.assertEqual((result.score, result.reasoning), (85, "Simple, correct one-liner."))
        self.assertFalse(from_cache)

        again, from_cache = analyze_blob(self.settings, "tok", "o/r", SHA, llm_client=client)
        self.assertEqual(again, result)
        self.assertTrue(from_cache)

        self.assertEqual(client.calls, 1)
        # GitHub is asked both times; only the LLM call is saved.
        self.assertEqual(fetch.call_count, 2)
        fetch.assert_called_with("o/r", SHA, "tok", timeout=5)

    @mock.patch("analysis_utils.fetch_blob", return_value="x = 1")
    def test_cache_disabled(self, fetch):
        client = FakeClient('{"score": 70, "reasoning": "fine"}')

        analyze_blob(self.settings, "tok", "o/r", SHA, use_cache=False, llm_client=client)
        analyze_blob(self.settings, "tok", "o/r", SHA, use_cache=False, llm_client=client)

        self.assertEqual(client.calls, 2)
        self.assertFalse(os.path.exists(self.settings.cache_dir))

    @mock.patch("analysis_utils.fetch_blob", return_value="x = 1")
    def test_history_saved_only_when_signed_in(self, fetch):
        client = FakeClient('{"score": 70, "reasoning": "fine"}')

        analyze_blob(self.settings, "tok", "o/r", SHA, use_cache=False, llm_client=client)
        self.assertEqual(get_history("octocat", db_path=self.settings.db_path), [])

        analyze_blob(self.settings, "tok", "o/r", SHA, username="octocat",
                     path="src/x.py", use_cache=False, llm_client=client)
        rows = get_history("octocat", db_path=self.settings.db_path)

        self.assertEqual(len(rows), 1)
        self.assertEqual(rows[0]["path"], "src/x.py")
        self.assertEqual(rows[0]["model"], "test-model")
        self.assertEqual(rows[0]["score"], 70)

    @mock.patch("analysis_utils.fetch_blob", return_value="x = 1")
    def test_cache_is_per_repo(self, fetch):
        client = FakeClient('{"score": 9, "reasoning": "r"}')

        analyze_blob(self.settings, "tok", "alice/private", SHA, llm_client=client)
        _, from_cache = analyze_blob(self.settings, "tok", "mallory/other", SHA, llm_client=client)

        self.assertFalse(from_cache)
        self.assertEqual(client.calls, 2)

    @mock.patch("github_api.requests.get")
    def test_warm_cache_still_checks_github(self, get):
        get.return_value = mock.Mock(status_code=200, content=b"x = 1")
        client = FakeClient('{"score": 9, "reasoning": "r"}')
        analyze_blob(self.settings, "tok", "alice/private", SHA, llm_client=client)

        with self.assertRaises(Unauthorized):
            analyze_blob(self.settings, None, "alice/private", SHA, username="mallory", llm_client=client)

        not_found = mock.Mock(status_code=404, content=b"")
        not_found.json.return_value = {"message": "Not Found"}
        get.return_value = not_found
        with self.assertRaises(NotFound):
            analyze_blob(self.settings, "other", "alice/private", SHA, username="mallory", llm_client=client)

        self.assertEqual(client.calls, 1)
        self.assertEqual(get_history("mallory", db_path=self.settings.db_path), [])

    @mock.patch("analysis_utils.fetch_blob", return_value="x = 1")
    def test_cache_write_failure_keeps_result(self, fetch):
        with open(self.settings.cache_dir, "w", encoding="utf-8") as f:
            f.write("not a folder")
        client = FakeClient('{"score": 70, "reasoning": "fine"}')

        with self.assertLogs("cache_utils", level="WARNING"):
            result, from_cache = analyze_blob(
                self.settings, "tok", "o/r", SHA, username="octocat", llm_client=client
            )

        self.assertEqual(result.score, 70)
        self.assertFalse(from_cache)
        self.assertEqual(len(get_history("octocat", db_path=self.settings.db_path)), 1)

    @mock.patch("analysis_utils.fetch_blob")
    def test_missing_llm_key(self, fetch):
        settings = self.settings._replace(groq_api_key=None)
        with self.assertRaises(ConfigurationError):
            analyze_blob(settings, "tok", "o/r", SHA)
        fetch.assert_not_called()

    @mock.patch("analysis_utils.fetch_blob")
    def test_bad_sha(self, fetch):
        with self.assertRaises(InvalidArgument):
            analyze_blob(self.settings, "tok", "o/r", "xyz")
        fetch.assert_not_called()


if __name__ == "__main__":
    unittest.main()
