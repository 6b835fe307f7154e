# main.py
#
# What this file is:
# The command-line (terminal) version of CodeLens.
# Instead of the Streamlit UI, it shows a simple menu and prints results.
#
# Big picture flow (Option 1):
#   GitHub blob -> LLM analysis -> SQLite history -> print score + reasoning
#
# The GitHub token comes from GITHUB_TOKEN (or .env). It is checked once at
# startup so every option knows which user's history to use.

import logging  # Warnings from the helper modules (retries, cache) go to stderr

from analysis_utils import analyze_blob
from config import load_settings
from db_utils import clear_history, get_history
from errors import CodeLensError
from file_utils import load_targets, save_history_csv, save_history_json
from github_api import (
    fetch_viewer_login,
    get_file_sha,
    list_contents,
    parse_repo_input,
)
from report_utils import export_history_pdf
from scoring import score_band, summarize_scores


def print_menu():
    print("\nCodeLens - AI Code Quality")
    print("----------------------------")
    print("1. Analyze a file by SHA")
    print("2. Analyze a file by path")
    print("3. Browse a repository directory")
    print("4. Show my history")
    print("5. Export my history (JSON + CSV + PDF)")
    print("6. Batch analyze files from targets.txt")
    print("7. Clear my history")
    print("q. Quit")


def print_result(repo, label, result, from_cache=False):
    print("\nRESULT")
    print("----------------------------")
    print(f"Repo : {repo}")
    print(f"File : {label}")
    print(f"Score: {result.score} ({score_band(result.score)})")
    if from_cache:
        print("(loaded from cache)")
    print()
    print(result.reasoning)


def _ask_repo():
    """Read a repo from the user. Returns "owner/repo" or None."""
    raw = input("GitHub repo (URL or owner/repo): ").strip()
    try:
        return parse_repo_input(raw)
    except CodeLensError as e:
        print(f"Error: {e}")
        return None


def analyze_by_sha(settings, token, username):
    repo = _ask_repo()
    if repo is None:
        return

    sha = input("Blob SHA: ").strip()

    try:
        result, from_cache = analyze_blob(settings, token, repo, sha, username=username)
    except CodeLensError as e:
        print(f"Error: {e}")
        return

    print_result(repo, sha, result, from_cache)


def analyze_by_path(settings, token, username):
    repo = _ask_repo()
    if repo is None:
        return

    file_path = input("File path (e.g. src/main.py): ").strip()

    try:
        sha = get_file_sha(repo, file_path, token, timeout=settings.request_timeout)
        result, from_cache = analyze_blob(
            settings, token, repo, sha, username=username, path=file_path
        )
    except CodeLensError as e:
        print(f"Error: {e}")
        return

    print_result(repo, file_path, result, from_cache)


def browse_option(settings, token):
    repo = _ask_repo()
    if repo is None:
        return

    path = input("Directory path (blank for root): ").strip()

    try:
        entries = list_contents(repo, path, token, timeout=settings.request_timeout)
    except CodeLensError as e:
        print(f"Error: {e}")
        return

    print(f"\n{repo}/{path}")
    print("----------------------------")
    for e in entries:
        marker = "[dir] " if e["type"] == "dir" else "      "
        print(f"{marker}{e['path']}  {e['sha']}")


def print_history(settings, username, limit=20):
    entries = get_history(username, limit=limit, db_path=settings.db_path)
    if not entries:
        print("No history yet.")
        return

    summary = summarize_scores([e["score"] for e in entries])
    print(f"\nHISTORY ({summary['count']} shown, avg score {summary['mean']})")
    print("----------------------------")
    for i, e in enumerate(entries, start=1):
        label = e["path"] or e["sha"]
        print(f"{i}. {e['created_at']} | {e['repo']} | {label} | score={e['score']}")


def export_option(settings, username):
    entries = get_history(username, limit=1000, db_path=settings.db_path)

    json_path = save_history_json(username, entries)
    csv_path = save_history_csv(username, entries)
    pdf_path = export_history_pdf(username, entries)

    print("\nEXPORTS")
    print("----------------------------")
    print("History JSON:", json_path)
    print("History CSV :", csv_path)
    print("Report PDF  :", pdf_path)


def batch_option(settings, token, username, path="targets.txt"):
    """
    Analyze every "owner/repo path" line in targets.txt.
    One failing file does not stop the batch.
    """
    targets = load_targets(path)
    if not targets:
        print("No targets found. Create targets.txt with 'owner/repo path' per line.")
        return

    ok = 0
    for repo_text, file_path in targets:
        print(f"\nAnalyzing {repo_text} {file_path}...")
        try:
            repo = parse_repo_input(repo_text)
            sha = get_file_sha(repo, file_path, token, timeout=settings.request_timeout)
            result, _ = analyze_blob(
                settings, token, repo, sha, username=username, path=file_path
            )
        except CodeLensError as e:
            print(f"  Error: {e}")
            continue
        ok += 1
        print(f"  score={result.score} ({score_band(result.score)})")

    print(f"\nDone: {ok}/{len(targets)} analyzed.")


def clear_option(settings, username):
    confirm = input("Delete all of your history? (y/n): ").strip().lower()
    if confirm != "y":
        print("Cancelled.")
        return
    removed = clear_history(username, db_path=settings.db_path)
    print(f"Removed {removed} entries.")


def main():
    """
    Sentinel-controlled main menu loop: keep going until the user enters "q".
    """
    logging.basicConfig(level=logging.INFO)

    try:
        settings = load_settings()
    except CodeLensError as e:
        print(f"Configuration error: {e}")
        return

    token = settings.github_token
    try:
        username = fetch_viewer_login(token, timeout=settings.request_timeout)
    except CodeLensError as e:
        print(f"Could not sign in to GitHub: {e}")
        print("Set GITHUB_TOKEN in your environment or .env file.")
        return

    print(f"Signed in as {username}")

    choice = ""
    while choice != "q":
        print_menu()
        choice = input("Choice: ").strip().lower()

        if choice == "1":
            analyze_by_sha(settings, token, username)
        elif choice == "2":
            analyze_by_path(settings, token, username)
        elif choice == "3":
            browse_option(settings, token)
        elif choice == "4":
            print_history(settings, username)
        elif choice == "5":
            export_option(settings, username)
        elif choice == "6":
            batch_option(settings, token, username)
        elif choice == "7":
            clear_option(settings, username)
        elif choice == "q":
            print("Goodbye!")
        else:
            print("Invalid option. Try again.")


if __name__ == "__main__":
    main()
