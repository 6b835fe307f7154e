"""
test_config.py

Tests for reading settings from the environment.
The environment is patched with clear=True so the developer's own
GROQ_API_KEY / GITHUB_TOKEN never leak into the results, and env_file points
at an empty file so no real .env is read.
"""

import os
import tempfile
import unittest
from unittest import mock

from config import DEFAULT_MODEL, load_settings, require_llm_key
from errors import ConfigurationError


class TestLoadSettings(unittest.TestCase):

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.env_file = os.path.join(self.tmp.name, ".env")
        open(self.env_file, "w").close()

    def tearDown(self):
        self.tmp.cleanup()

    def test_defaults(self):
        with mock.patch.dict(os.environ, {}, clear=True):
            settings = load_settings(self.env_file)

        self.assertIsNone(settings.groq_api_key)
        self.assertIsNone(settings.github_token)
        self.assertEqual(settings.groq_model, DEFAULT_MODEL)
        self.assertEqual(settings.request_timeout, 30)
        self.assertEqual(settings.cache_minutes, 24 * 60)

    def test_values_from_environment(self):
        env = {
            "GROQ_API_KEY": " secret ",
            "GROQ_MODEL": "other-model",
            "GITHUB_TOKEN": "gh",
            "CODELENS_REQUEST_TIMEOUT": "12.5",
            "CODELENS_DB_PATH": "x.db",
            "CODELENS_CACHE_MINUTES": "15",
        }
        with mock.patch.dict(os.environ, env, clear=True):
            settings = load_settings(self.env_file)

        self.assertEqual(settings.groq_api_key, "secret")
        self.assertEqual(settings.groq_model, "other-model")
        self.assertEqual(settings.request_timeout, 12.5)
        self.assertEqual(settings.db_path, "x.db")
        self.assertEqual(settings.cache_minutes, 15)

    def test_values_from_env_file(self):
        with open(self.env_file, "w", encoding="utf-8") as f:
            f.write("GROQ_API_KEY=from-file\n")

        with mock.patch.dict(os.environ, {}, clear=True):
            settings = load_settings(self.env_file)

        self.assertEqual(settings.groq_api_key, "from-file")

    def test_bad_timeout(self):
        for raw in ("soon", "0", "-3"):
            with mock.patch.dict(os.environ, {"CODELENS_REQUEST_TIMEOUT": raw}, clear=True):
                with self.assertRaises(ConfigurationError):
                    load_settings(self.env_file)

    def test_require_llm_key(self):
        with mock.patch.dict(os.environ, {}, clear=True):
            settings = load_settings(self.env_file)

        with self.assertRaises(ConfigurationError):
            require_llm_key(settings)
        self.assertEqual(require_llm_key(settings._replace(groq_api_key="k")), "k")


if __name__ == "__main__":
    unittest.main()
