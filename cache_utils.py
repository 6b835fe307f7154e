# cache_utils.py
#
# Purpose:
# A very simple file-based cache for JSON objects.
# I use it to store analysis results so the same file is not sent to the LLM
# again every time someone clicks "Analyze".
#
# Why a blob SHA makes a good key:
# GitHub blob SHAs are hashes of the file content, so the same SHA always
# means the same code. The repo and model name are added to the key.

import hashlib  # Used to create stable hashed cache keys
import json     # Used to save/load cached objects as JSON
import logging  # Warn (but keep going) when a cache file cannot be read or written
import os       # Used for file paths and creating folders
import shutil   # Used to delete the whole cache folder
import time     # Used to calculate cache age (TTL)

logger = logging.getLogger(__name__)

# Bump this when the prompt changes so old cached results are not reused.
PROMPT_VERSION = "v1"


def ensure_dir(path):
    """
    Ensure a directory exists.
    exist_ok=True prevents errors if the folder already exists.
    """
    os.makedirs(path, exist_ok=True)


def _hash_key(s):
    """SHA256 hex string, so cache file names are always filename-safe."""
    return hashlib.sha256(s.encode("utf-8")).hexdigest()


def _cache_path(cache_dir, key):
    return os.path.join(cache_dir, f"{key}.json")


def cache_get(cache_dir, key, ttl_minutes):
    """
    Read from cache if possible.

    Returns:
      - Cached JSON object (dict/list) if present and not expired
      - None if the file is missing, expired, or not valid JSON
    """
    path = _cache_path(cache_dir, key)

    if not os.path.exists(path):
        return None

    # File modification time = last time this entry was written.
    age_seconds = time.time() - os.path.getmtime(path)
    if age_seconds > (ttl_minutes * 60):
        return None

    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except (OSError, ValueError) as e:
        logger.warning("Ignoring unreadable cache file %s: %r", path, e)
        return None


def cache_set(cache_dir, key, obj):
    """
    Write a JSON-serializable object to the cache.

    A failed write is logged and otherwise ignored; the result has already
    been computed, so the caller does not need the cache to succeed.
    """
    path = _cache_path(cache_dir, key)

    try:
        ensure_dir(cache_dir)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(obj, f, indent=2)
    except (OSError, TypeError) as e:
        logger.warning("Could not write cache file %s: %r", path, e)


def clear_cache(cache_dir):
    """Delete every cached entry and recreate the empty folder."""
    if os.path.exists(cache_dir):
        shutil.rmtree(cache_dir)
    ensure_dir(cache_dir)


def make_analysis_cache_key(blob_sha, model_name="default", repo_id=""):
    """
    Build a cache key for one analysis.

    The key changes when the code changes (new blob SHA), when the model
    changes, or when PROMPT_VERSION is bumped. The repo is part of the key,
    so a result is only reused for the repo it was made for.
    """
    raw = json.dumps(
        {"repo": repo_id, "sha": blob_sha, "model": model_name, "prompt": PROMPT_VERSION},
        sort_keys=True,
    )
    return _hash_key(raw)
