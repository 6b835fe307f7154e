# file_utils.py
#
# Purpose:
# This file handles saving history to disk in a couple of formats:
#   1) JSON (easy for code/tools to read later)
#   2) CSV (easy to open in Excel/Sheets)
# It also loads a list of files to analyze in batch from a text file.
#
# I keep this out of main.py and app.py so both front-ends export the exact
# same files.

import csv                     # Write CSV files (built-in)
import json                    # Write JSON files (built-in)
import os                      # File paths + existence checks
from datetime import datetime  # Timestamp for filenames

REPORTS_DIR = "reports"

HISTORY_FIELDS = ["created_at", "repo", "path", "sha", "model", "score", "reasoning"]


def ensure_reports_dir(reports_dir=REPORTS_DIR):
    os.makedirs(reports_dir, exist_ok=True)


def _timestamp():
    """Timestamp for filenames, e.g. 20260228_014512."""
    return datetime.now().strftime("%Y%m%d_%H%M%S")


def save_history_json(username, entries, reports_dir=REPORTS_DIR):
    """
    Save history entries (list of dicts from db_utils.get_history) as JSON.
    Returns the saved file path.
    """
    ensure_reports_dir(reports_dir)

    path = os.path.join(reports_dir, f"{username}_history_{_timestamp()}.json")

    with open(path, "w", encoding="utf-8") as f:
        json.dump(
            {"username": username, "entries": [dict(e) for e in entries]},
            f,
            indent=2,
        )

    return path


def save_history_csv(username, entries, reports_dir=REPORTS_DIR):
    """
    Save history entries as CSV with a fixed column order.
    An empty history still writes the header row.
    Returns the saved file path.
    """
    ensure_reports_dir(reports_dir)

    path = os.path.join(reports_dir, f"{username}_history_{_timestamp()}.csv")

    # newline="" prevents extra blank lines on Windows
    with open(path, "w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=HISTORY_FIELDS, extrasaction="ignore")
        writer.writeheader()
        for entry in entries:
            writer.writerow({k: entry.get(k, "") for k in HISTORY_FIELDS})

    return path


def load_targets(path="targets.txt"):
    """
    Load files to analyze in batch, one per line:

      owner/repo path/to/file.py

    Blank lines and lines starting with # are skipped.
    Returns a list of (repo, file_path) tuples.
    """
    if not os.path.exists(path):
        print(f"Error: file not found: {path}")
        return []

    targets = []

    with open(path, "r", encoding="utf-8") as f:
        for line_no, line in enumerate(f, start=1):
            line = line.strip()
            if line == "" or line.startswith("#"):
                continue

            parts = line.split(None, 1)
            if len(parts) != 2:
                print(f"Skipping line {line_no}: expected 'owner/repo path'.")
                continue

            targets.append((parts[0], parts[1].strip()))

    return targets
