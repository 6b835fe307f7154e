# db_utils.py
#
# Purpose:
# This file saves and loads analysis history in a local SQLite database.
# Every successful analysis becomes one row in the `analyses` table.
#
# History is keyed by the GitHub login of whoever is signed in, so two people
# sharing the same machine only see their own entries.
#
# - init_db() creates tables if missing and upgrades older files (migrations)
# - every public function calls init_db() first, so a deleted DB file is
#   recreated on the next call

import sqlite3                  # Built-in DB library in Python (no install needed)
from datetime import datetime   # Used for timestamps (created_at)

DB_PATH = "codelens.db"

SCHEMA_VERSION = 2


# ----------------------------
# Connection helpers
# ----------------------------
def get_conn(db_path=None):
    """
    Open a connection to the SQLite database file.

    check_same_thread=False because Streamlit may run reruns on
    different threads.
    """
    conn = sqlite3.connect(db_path or DB_PATH, check_same_thread=False)
    conn.row_factory = sqlite3.Row
    return conn


def _table_exists(conn, table_name):
    cur = conn.cursor()
    cur.execute(
        "SELECT name FROM sqlite_master WHERE type='table' AND name=?",
        (table_name,)
    )
    return cur.fetchone() is not None


def _get_table_columns(conn, table_name):
    """
    Return a set of column names for a table.
    PRAGMA table_info rows look like (cid, name, type, notnull, dflt_value, pk).
    """
    cur = conn.cursor()
    cur.execute(f"PRAGMA table_info({table_name})")
    return set([r[1] for r in cur.fetchall()])


# ----------------------------
# Schema versioning
# ----------------------------
def _ensure_schema_version_table(conn):
    """
    schema_version holds exactly one row (id = 1) with the version number.
    """
    cur = conn.cursor()

    cur.execute("""
    CREATE TABLE IF NOT EXISTS schema_version (
        id INTEGER PRIMARY KEY CHECK (id = 1),
        version INTEGER NOT NULL
    )
    """)

    cur.execute("SELECT version FROM schema_version WHERE id = 1")
    if cur.fetchone() is None:
        cur.execute("INSERT INTO schema_version (id, version) VALUES (1, 1)")

    conn.commit()


def _get_schema_version(conn):
    _ensure_schema_version_table(conn)
    cur = conn.cursor()
    cur.execute("SELECT version FROM schema_version WHERE id = 1")
    return int(cur.fetchone()[0])


def _set_schema_version(conn, version):
    cur = conn.cursor()
    cur.execute("UPDATE schema_version SET version = ? WHERE id = 1", (int(version),))
    conn.commit()


# ----------------------------
# Base schema creation
# ----------------------------
def _create_base_tables(conn):
    """
    analyses: one row per successful analysis.
    score is REAL because the model may return a float.
    """
    cur = conn.cursor()

    cur.execute("""
    CREATE TABLE IF NOT EXISTS analyses (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        created_at TEXT NOT NULL,
        username TEXT NOT NULL,
        repo TEXT NOT NULL,
        sha TEXT NOT NULL,
        path TEXT,
        model TEXT,
        score REAL NOT NULL,
        reasoning TEXT NOT NULL
    )
    """)

    cur.execute("""
    CREATE INDEX IF NOT EXISTS idx_analyses_username ON analyses (username, id)
    """)

    conn.commit()


# ----------------------------
# Migrations
# ----------------------------
def _migration_ensure_analyses_columns(conn):
    """
    Version 1 files only stored repo/sha/score/reasoning.
    Add the columns that were introduced later. Safe to run repeatedly.
    """
    if not _table_exists(conn, "analyses"):
        return

    expected = {
        "path": "TEXT",
        "model": "TEXT",
    }

    cols = _get_table_columns(conn, "analyses")
    cur = conn.cursor()

    for col, col_type in expected.items():
        if col not in cols:
            cur.execute(f"ALTER TABLE analyses ADD COLUMN {col} {col_type}")

    conn.commit()


def init_db(db_path=None):
    """
    Create/upgrade the database. Safe to call on every request.

    1) schema_version table exists
    2) base tables exist
    3) migrations repair older schemas
    4) schema version is bumped to SCHEMA_VERSION
    """
    conn = get_conn(db_path)
    try:
        _ensure_schema_version_table(conn)
        _migration_ensure_analyses_columns(conn)
        _create_base_tables(conn)

        if _get_schema_version(conn) < SCHEMA_VERSION:
            _set_schema_version(conn, SCHEMA_VERSION)
    finally:
        conn.close()


# ----------------------------
# Public DB functions
# ----------------------------
def add_history_entry(username, repo, sha, result, path="", model="", db_path=None):
    """
    Append one analysis to the history.

    result is an AnalysisResult (or anything with .score / .reasoning).
    Returns the new row id.
    """
    if not username:
        raise ValueError("username is required to save history.")

    init_db(db_path)

    conn = get_conn(db_path)
    try:
        cur = conn.cursor()
        created_at = datetime.now().isoformat(timespec="seconds")
        cur.execute(
            """
            INSERT INTO analyses (created_at, username, repo, sha, path, model, score, reasoning)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                created_at,
                str(username),
                str(repo),
                str(sha),
                str(path or ""),
                str(model or ""),
                float(result.score),
                str(result.reasoning),
            ),
        )
        entry_id = cur.lastrowid
        conn.commit()
    finally:
        conn.close()
    return entry_id


def get_history(username, limit=50, db_path=None):
    """
    Return this user's history, most recent first, as a list of dicts:
      id, created_at, repo, sha, path, model, score, reasoning
    """
    init_db(db_path)

    conn = get_conn(db_path)
    try:
        cur = conn.cursor()
        cur.execute(
            """
            SELECT id, COALESCE(created_at, '') AS created_at, repo, sha,
                   COALESCE(path, '') AS path, COALESCE(model, '') AS model,
                   score, reasoning
            FROM analyses
            WHERE username = ?
            ORDER BY id DESC
            LIMIT ?
            """,
            (str(username), int(limit)),
        )
        rows = [dict(r) for r in cur.fetchall()]
    finally:
        conn.close()
    return rows


def clear_history(username, db_path=None):
    """Delete every entry for this user. Returns how many rows were removed."""
    init_db(db_path)

    conn = get_conn(db_path)
    try:
        cur = conn.cursor()
        cur.execute("DELETE FROM analyses WHERE username = ?", (str(username),))
        removed = cur.rowcount
        conn.commit()
    finally:
        conn.close()
    return removed
