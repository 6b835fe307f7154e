# github_api.py
#
# Purpose:
# This file is the "data ingestion" layer of CodeLens.
# It talks to the GitHub REST API and hands back plain Python data
# (strings, dicts, lists) for the rest of the app.
#
# Main features in this file:
# 1) Input checks for repo ids ("owner/repo") and blob SHAs
# 2) _get(): one wrapper around requests.get() that turns HTTP failures
#    into the error types from errors.py
# 3) fetch_blob(): raw file text by blob SHA (what gets sent to the LLM)
# 4) list_contents() / get_file_sha(): what the file browser needs
# 5) fetch_viewer_login(): who the token belongs to (keys the history)

import logging                  # Warn when GitHub is down or returns an error
import re                       # Blob SHA check (40 lowercase hex characters)
from urllib.parse import urlparse  # Pull "owner/repo" out of a pasted GitHub URL

import requests                 # HTTP client for the GitHub REST API

from errors import (
    InvalidArgument,
    NotFound,
    Unauthorized,
    UpstreamError,
    UpstreamUnavailable,
)

logger = logging.getLogger(__name__)

API_ROOT = "https://api.github.com"

# Accept headers: JSON descriptors vs. raw file bytes.
ACCEPT_JSON = "application/vnd.github+json"
ACCEPT_RAW = "application/vnd.github.raw"

DEFAULT_TIMEOUT = 20

SHA_PATTERN = re.compile(r"^[0-9a-f]{40}$")


# ----------------------------
# Input validation
# ----------------------------
def parse_repo_id(repo_id):
    """
    Split "owner/name" into (owner, name).

    Exactly two non-empty segments are required, so "owner",
    "owner/", "/name" and "owner/name/extra" are all rejected.
    """
    parts = (repo_id or "").split("/")
    if len(parts) != 2 or not parts[0] or not parts[1]:
        raise InvalidArgument("Repository must be in the format owner/repo.")
    return parts[0], parts[1]


def validate_blob_sha(blob_sha):
    """A blob SHA is 40 lowercase hex characters."""
    if not isinstance(blob_sha, str) or not SHA_PATTERN.match(blob_sha):
        raise InvalidArgument("Invalid SHA format.")
    return blob_sha


def parse_repo_input(text):
    """
    Accept what a user would paste into the repo box and return "owner/repo".

    Supported:
      https://github.com/facebook/react
      https://github.com/facebook/react/tree/main/packages
      facebook/react
    """
    text = (text or "").strip()

    if "://" in text:
        url = urlparse(text)
        if url.hostname not in ("github.com", "www.github.com"):
            raise InvalidArgument("Only github.com repository URLs are supported.")
        segments = [s for s in url.path.split("/") if s]
        if len(segments) < 2:
            raise InvalidArgument("Repository URL must include owner and repo.")
        owner, name = segments[0], segments[1]
        if name.endswith(".git"):
            name = name[: -len(".git")]
        return f"{owner}/{name}"

    owner, name = parse_repo_id(text)
    return f"{owner}/{name}"


# ----------------------------
# Path helpers for the file browser
# ----------------------------
def parent_path(path):
    """Go up one directory level. The root ("") stays the root."""
    segments = [s for s in (path or "").split("/") if s]
    return "/".join(segments[:-1])


def breadcrumb(path):
    """
    Turn "src/utils/io" into clickable steps:
      [("Root", ""), ("src", "src"), ("utils", "src/utils"), ("io", "src/utils/io")]
    """
    crumbs = [("Root", "")]
    segments = [s for s in (path or "").split("/") if s]
    for i, segment in enumerate(segments):
        crumbs.append((segment, "/".join(segments[: i + 1])))
    return crumbs


# ----------------------------
# HTTP wrapper
# ----------------------------
def _headers(token, accept=ACCEPT_JSON):
    headers = {"Accept": accept}
    if token:
        headers["Authorization"] = f"Bearer {token}"
    return headers


def _upstream_message(resp):
    """GitHub usually sends {"message": "..."} on errors. Best effort."""
    try:
        data = resp.json()
    except ValueError:
        return ""
    if isinstance(data, dict):
        return str(data.get("message") or "")
    return ""


def _get(url, token, accept=ACCEPT_JSON, params=None, timeout=DEFAULT_TIMEOUT):
    """
    Wrapper around requests.get() for the GitHub API.

    Returns the Response on any 2xx status.

    Raises:
      Unauthorized        -> 401
      NotFound            -> 404
      UpstreamUnavailable -> no response at all (timeout, DNS, connection reset)
      UpstreamError       -> any other non-2xx status
    """
    try:
        resp = requests.get(url, headers=_headers(token, accept), params=params, timeout=timeout)
    except requests.RequestException as e:
        logger.warning("No response from GitHub for %s: %r", url, e)
        raise UpstreamUnavailable(f"No response from GitHub API: {e}")

    if 200 <= resp.status_code < 300:
        return resp

    message = _upstream_message(resp)
    logger.warning("GitHub returned %s for %s: %s", resp.status_code, url, message)

    if resp.status_code == 401:
        raise Unauthorized(message or "Unauthorized (401). Check your GitHub token.", status=401)
    if resp.status_code == 404:
        raise NotFound(message or "Not found (404).", status=404)
    raise UpstreamError(
        message or f"GitHub API responded with status {resp.status_code}",
        status=resp.status_code,
    )


def _require_token(token):
    if not token:
        raise Unauthorized("Missing GitHub token. Sign in first.")


def _json(resp):
    try:
        return resp.json()
    except ValueError:
        raise UpstreamError("GitHub response was not valid JSON.", status=resp.status_code)


# ----------------------------
# Core API functions
# ----------------------------
def fetch_blob(repo_id, blob_sha, token, timeout=DEFAULT_TIMEOUT):
    """
    Fetch the raw text of a file by its blob SHA.

    All input checks happen before the network call:
      - repo_id must be "owner/repo"
      - blob_sha must be 40 lowercase hex chars
      - a token must be present

    Returns the decoded file text (invalid UTF-8 bytes are replaced).
    """
    owner, name = parse_repo_id(repo_id)
    validate_blob_sha(blob_sha)
    _require_token(token)

    url = f"{API_ROOT}/repos/{owner}/{name}/git/blobs/{blob_sha}"
    resp = _get(url, token, accept=ACCEPT_RAW, timeout=timeout)
    return resp.content.decode("utf-8", errors="replace")


def _descriptor(item):
    """Keep only the fields the file browser needs."""
    return {
        "name": item.get("name", ""),
        "path": item.get("path", ""),
        "sha": item.get("sha", ""),
        "type": item.get("type", ""),
    }


def list_contents(repo_id, path="", token=None, timeout=DEFAULT_TIMEOUT):
    """
    List a directory in a repo (or describe a single file).

    GitHub returns a list for directories and a dict for a file.
    Either way this returns a list of {name, path, sha, type} dicts,
    with directories first and then files, each sorted by name.
    """
    owner, name = parse_repo_id(repo_id)
    _require_token(token)

    path = (path or "").strip("/")
    url = f"{API_ROOT}/repos/{owner}/{name}/contents"
    if path:
        url = f"{url}/{path}"

    data = _json(_get(url, token, timeout=timeout))

    if isinstance(data, list):
        entries = [_descriptor(item) for item in data if isinstance(item, dict)]
    elif isinstance(data, dict):
        entries = [_descriptor(data)]
    else:
        raise UpstreamError("Unexpected response format for repository contents.")

    entries.sort(key=lambda e: (e["type"] != "dir", e["name"].lower()))
    return entries


def get_file_sha(repo_id, file_path, token, timeout=DEFAULT_TIMEOUT):
    """Look up the blob SHA for a file path."""
    owner, name = parse_repo_id(repo_id)
    file_path = (file_path or "").strip("/")
    if not file_path:
        raise InvalidArgument("File path is required.")
    _require_token(token)

    url = f"{API_ROOT}/repos/{owner}/{name}/contents/{file_path}"
    data = _json(_get(url, token, timeout=timeout))

    # A directory comes back as a list, and there is no single SHA to analyze.
    if not isinstance(data, dict) or data.get("type") != "file":
        raise InvalidArgument(f"{file_path} is not a file.")
    return data.get("sha", "")


def fetch_viewer_login(token, timeout=DEFAULT_TIMEOUT):
    """Return the GitHub login the token belongs to."""
    _require_token(token)
    data = _json(_get(f"{API_ROOT}/user", token, timeout=timeout))
    login = data.get("login") if isinstance(data, dict) else None
    if not login:
        raise UpstreamError("GitHub did not return a login for this token.")
    return login
