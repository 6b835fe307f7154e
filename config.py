# config.py
#
# Purpose:
# Read settings from the environment ONCE (at process start) and hand them to
# the rest of the app as a read-only Settings tuple.
#
# A .env file in the project root is loaded first, so local runs can keep
# GROQ_API_KEY / GITHUB_TOKEN there instead of exporting them by hand.
#
# I read everything in one place so a missing or bad value fails at startup,
# not halfway through an analysis.

import os                          # Environment variables
from collections import namedtuple  # Settings is a small read-only record

from dotenv import load_dotenv     # Reads a local .env file into os.environ

from errors import ConfigurationError

DEFAULT_MODEL = "llama-3.1-8b-instant"
DEFAULT_TIMEOUT_SECONDS = 30
DEFAULT_DB_PATH = "codelens.db"
DEFAULT_CACHE_DIR = "cache/analysis"
DEFAULT_CACHE_MINUTES = 24 * 60

Settings = namedtuple(
    "Settings",
    [
        "groq_api_key",
        "groq_model",
        "github_token",
        "request_timeout",
        "db_path",
        "cache_dir",
        "cache_minutes",
    ],
)


def _positive_number(name, raw, default, cast):
    """
    Parse a numeric env var. Missing/blank -> default.
    Anything that is not a positive number is a configuration error.
    """
    if raw is None or raw.strip() == "":
        return default
    try:
        value = cast(raw.strip())
    except ValueError:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}.")
    if value <= 0:
        raise ConfigurationError(f"{name} must be greater than zero, got {raw!r}.")
    return value


def _blank_to_none(value):
    if value is None:
        return None
    value = value.strip()
    return value or None


def load_settings(env_file=None):
    """
    Build a Settings tuple from the environment.

    env_file:
      Optional path to a dotenv file. If None, python-dotenv searches for
      a .env file starting from the current directory. Variables that are
      already set in the environment win over the file.
    """
    load_dotenv(env_file)

    return Settings(
        groq_api_key=_blank_to_none(os.getenv("GROQ_API_KEY")),
        groq_model=_blank_to_none(os.getenv("GROQ_MODEL")) or DEFAULT_MODEL,
        github_token=_blank_to_none(os.getenv("GITHUB_TOKEN")),
        request_timeout=_positive_number(
            "CODELENS_REQUEST_TIMEOUT",
            os.getenv("CODELENS_REQUEST_TIMEOUT"),
            DEFAULT_TIMEOUT_SECONDS,
            float,
        ),
        db_path=_blank_to_none(os.getenv("CODELENS_DB_PATH")) or DEFAULT_DB_PATH,
        cache_dir=_blank_to_none(os.getenv("CODELENS_CACHE_DIR")) or DEFAULT_CACHE_DIR,
        cache_minutes=_positive_number(
            "CODELENS_CACHE_MINUTES",
            os.getenv("CODELENS_CACHE_MINUTES"),
            DEFAULT_CACHE_MINUTES,
            int,
        ),
    )


def require_llm_key(settings):
    """Return the Groq API key or raise ConfigurationError if it is missing."""
    if not settings.groq_api_key:
        raise ConfigurationError(
            "Missing GROQ_API_KEY. Add it to your environment or .env file and restart."
        )
    return settings.groq_api_key
