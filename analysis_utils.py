# analysis_utils.py
#
# Purpose:
# The full "analyze one file" flow, shared by app.py and main.py:
#
#   GitHub blob -> cache check -> LLM analysis -> cache save -> history row
#
# github_api.py and llm_utils.py never call each other; this file wires them.
#
# Why I fetch from GitHub even when the result is cached:
# the fetch is what proves this token can see this file. The cache only
# skips the slow (and rate-limited) LLM call.

import logging  # One info line per cache hit

from cache_utils import cache_get, cache_set, make_analysis_cache_key
from config import require_llm_key
from db_utils import add_history_entry
from github_api import fetch_blob, validate_blob_sha, parse_repo_id
from llm_utils import AnalysisResult, analyze_code

logger = logging.getLogger(__name__)


def _from_cache(cached):
    """Cached entries are plain dicts. Ignore anything that doesn't look right."""
    if not isinstance(cached, dict):
        return None
    if "score" not in cached or not isinstance(cached.get("reasoning"), str):
        return None
    return AnalysisResult(score=cached["score"], reasoning=cached["reasoning"])


def analyze_blob(
    settings,
    token,
    repo_id,
    sha,
    username=None,
    path="",
    use_cache=True,
    cache_minutes=None,
    llm_client=None,
):
    """
    Analyze one file in a repo by blob SHA.

    Inputs:
      settings: config.Settings (API key, model, timeout, paths)
      token: GitHub token of the signed-in user
      username: GitHub login; when set, the result is added to the history

    Returns:
      (AnalysisResult, from_cache)

    Errors from errors.py propagate unchanged so each front-end can show them.
    """
    parse_repo_id(repo_id)
    validate_blob_sha(sha)
    api_key = require_llm_key(settings)

    # Always go to GitHub first: this is what checks the token and that this
    # user can see the file. The cache only saves the LLM call.
    code = fetch_blob(repo_id, sha, token, timeout=settings.request_timeout)

    cache_key = make_analysis_cache_key(sha, model_name=settings.groq_model, repo_id=repo_id)
    ttl = cache_minutes if cache_minutes is not None else settings.cache_minutes

    result = None
    from_cache = False

    if use_cache:
        result = _from_cache(cache_get(settings.cache_dir, cache_key, ttl_minutes=ttl))
        from_cache = result is not None

    if result is None:
        result = analyze_code(
            code,
            api_key,
            model=settings.groq_model,
            client=llm_client,
            timeout=settings.request_timeout,
        )
        if use_cache:
            cache_set(settings.cache_dir, cache_key, result._asdict())
    else:
        logger.info("Loaded analysis for %s@%s from cache.", repo_id, sha)

    if username:
        add_history_entry(
            username,
            repo_id,
            sha,
            result,
            path=path,
            model=settings.groq_model,
            db_path=settings.db_path,
        )

    return result, from_cache
