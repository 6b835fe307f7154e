# app.py
#
# CodeLens (Streamlit UI)
#
# Purpose:
# This file is the Streamlit front-end. A signed-in GitHub user loads a repo,
# browses to a file, and gets an AI code-quality score with written reasoning.
#
# UI code stays here. GitHub calls, the LLM, caching, history and exports all
# live in their own modules.
#
# I keep the session state small (token, repo, folder, picked file) because
# Streamlit re-runs this whole script on every click.

import logging                # Log lines from the helper modules show up in the terminal
import os                     # Used for file paths and opening generated files (like PDFs)
import base64                 # Used to embed an SVG logo into the page as a base64 data URI

import pandas as pd           # Pandas makes it easy to display tables and build chart-ready data
import streamlit as st        # Streamlit is the UI framework for the project

from analysis_utils import analyze_blob
from cache_utils import clear_cache
from config import load_settings
from db_utils import clear_history, get_history
from errors import CodeLensError
from file_utils import save_history_csv, save_history_json
from github_api import (
    breadcrumb,
    fetch_viewer_login,
    list_contents,
    parent_path,
    parse_repo_input,
)
from report_utils import export_history_pdf
from scoring import score_band, score_color, summarize_scores

logging.basicConfig(level=logging.INFO)


# ----------------------------
# Page Config
# ----------------------------
st.set_page_config(page_title="CodeLens", layout="wide")


# ----------------------------
# Settings (read once per process)
# ----------------------------
@st.cache_resource
def get_settings():
    return load_settings()


try:
    settings = get_settings()
except CodeLensError as e:
    st.error(f"Configuration error: {e}")
    st.stop()


# ----------------------------
# Logo (inline SVG)
# ----------------------------
def codelens_logo_svg(accent="#0EA5E9", accent2="#22C55E"):
    return f"""
<svg width="42" height="42" viewBox="0 0 64 64" xmlns="http://www.w3.org/2000/svg" role="img" aria-label="CodeLens logo">
  <defs>
    <linearGradient id="g" x1="0" y1="0" x2="1" y2="1">
      <stop offset="0" stop-color="{accent}"/>
      <stop offset="1" stop-color="{accent2}"/>
    </linearGradient>
  </defs>
  <rect x="0" y="0" width="64" height="64" rx="16" fill="#FFFFFF"/>
  <circle cx="28" cy="28" r="14" fill="none" stroke="url(#g)" stroke-width="6"/>
  <path d="M23 24 L19 28 L23 32 M33 24 L37 28 L33 32" fill="none" stroke="{accent}" stroke-width="3" stroke-linecap="round"/>
  <path d="M38.5 38.5 L51 51" stroke="url(#g)" stroke-width="6" stroke-linecap="round"/>
</svg>
""".strip()


def svg_to_data_uri(svg: str) -> str:
    b64 = base64.b64encode(svg.encode("utf-8")).decode("utf-8")
    return f"data:image/svg+xml;base64,{b64}"


TOOLTIPS = {
    "Score": "LLM code-quality score (0–100). Code that does not work should score below 50.",
    "Band": "excellent ≥ 80, good ≥ 60, fair ≥ 40, poor < 40.",
    "Average": "Mean score across your saved analyses.",
}


def render_badge(label, value):
    """Small pill with a colored dot, used for the score band."""
    color = score_color(value)
    safe_val = value if value is not None else "—"

    return f"""
    <span style="
        display:inline-flex;
        align-items:center;
        gap:8px;
        padding:7px 12px;
        border-radius:999px;
        border:1px solid #E2E8F0;
        background:#FFFFFF;
        font-weight:800;
        color:#0F172A;
        font-size: 13px;">
        <span style="width:10px;height:10px;border-radius:999px;background:{color};"></span>
        <span style="color:#334155; font-weight:800;">{label}:</span>
        <span>{safe_val}</span>
    </span>
    """


st.markdown(
    """
<style>
[data-testid="stHeader"]{ background: transparent !important; height: 0px !important; border-bottom: none !important; }
[data-testid="stToolbar"]{ visibility: hidden !important; height: 0px !important; }
[data-testid="stDecoration"]{ display: none !important; }
header{ visibility: hidden !important; height: 0px !important; }
.block-container{ padding-top: 1.2rem !important; }
</style>
""",
    unsafe_allow_html=True,
)


# ----------------------------
# Header
# ----------------------------
logo_uri = svg_to_data_uri(codelens_logo_svg())

st.markdown(
    f"""
<div style="display:flex; align-items:center; gap:12px; margin-bottom:6px;">
    <img src="{logo_uri}" width="42" height="42" />
    <div>
      <h1 style="margin:0; padding:0;">CodeLens</h1>
      <div style="font-weight:800; margin-top:2px;">
        AI code quality for any file on GitHub.
      </div>
    </div>
</div>
<div style="height:5px;width:100%;background: linear-gradient(90deg, #0EA5E9, #22C55E);
border-radius:999px;margin-bottom:18px;"></div>
""",
    unsafe_allow_html=True,
)


# ----------------------------
# Session state
# ----------------------------
# Streamlit re-runs the script on every interaction; session state keeps
# the signed-in user, the loaded repo and the browser position.
defaults = {
    "username": None,
    "token": settings.github_token or "",
    "repo": "",
    "current_path": "",
    "entries": None,
    "entries_key": None,
    "sha_input": "",
    "selected_path": "",
    "result": None,
    "error": "",
}
for key, value in defaults.items():
    if key not in st.session_state:
        st.session_state[key] = value


# ----------------------------
# Callbacks
# ----------------------------
# Callbacks run before the next rerun, so they may set widget-backed keys.
def _load_repo():
    try:
        st.session_state["repo"] = parse_repo_input(st.session_state["repo_input"])
    except CodeLensError as e:
        st.session_state["error"] = str(e)
        return
    st.session_state["current_path"] = ""
    st.session_state["entries_key"] = None
    st.session_state["sha_input"] = ""
    st.session_state["selected_path"] = ""
    st.session_state["result"] = None
    st.session_state["error"] = ""


def _navigate(path):
    st.session_state["current_path"] = path


def _select_file(path, sha):
    st.session_state["sha_input"] = sha
    st.session_state["selected_path"] = path
    st.session_state["error"] = ""


def _sha_typed():
    # A hand-typed SHA no longer matches the picked file path.
    st.session_state["selected_path"] = ""


# ----------------------------
# Sidebar
# ----------------------------
st.sidebar.markdown(
    f"""
<div style="display:flex; align-items:center; gap:10px; margin: 10px 0 8px 0;">
  <img src="{logo_uri}" width="34" height="34" />
  <div style="display:flex; flex-direction:column;">
    <div style="font-size:18px; font-weight:950; line-height:1;">CodeLens</div>
    <div style="font-size:12px; font-weight:800; margin-top:2px;">AI code quality</div>
  </div>
</div>
""",
    unsafe_allow_html=True,
)

st.sidebar.header("GitHub")
token_input = st.sidebar.text_input("GitHub token", value=st.session_state["token"], type="password")

col_in, col_out = st.sidebar.columns(2)
sign_in_btn = col_in.button("Sign in", type="primary")
sign_out_btn = col_out.button("Sign out")

if sign_in_btn:
    try:
        st.session_state["username"] = fetch_viewer_login(token_input, timeout=settings.request_timeout)
        st.session_state["token"] = token_input
    except CodeLensError as e:
        st.session_state["username"] = None
        st.sidebar.error(f"Sign-in failed: {e}")

if sign_out_btn:
    for key, value in defaults.items():
        st.session_state[key] = value
    st.session_state["token"] = ""

username = st.session_state["username"]
token = st.session_state["token"]

if username:
    st.sidebar.success(f"Signed in as {username}")
else:
    st.sidebar.info("Sign in with a GitHub token to analyze files.")

st.sidebar.subheader("LLM Settings")
st.sidebar.caption(f"Model: {settings.groq_model}")
use_cache = st.sidebar.checkbox("Use analysis cache (recommended)", value=True)
cache_minutes = st.sidebar.number_input("Cache minutes", 1, 30 * 24 * 60, int(settings.cache_minutes))

st.sidebar.subheader("Maintenance")
if st.sidebar.button("Clear analysis cache", type="secondary"):
    try:
        clear_cache(settings.cache_dir)
        st.sidebar.success("Cleared analysis cache.")
    except OSError as e:
        st.sidebar.error(f"Failed to clear cache: {e!r}")


tabs = st.tabs(["Analyze", "History"])

if not username:
    with tabs[0]:
        st.info("Sign in to begin.")
    st.stop()


# ----------------------------
# Analyze
# ----------------------------
with tabs[0]:
    st.header("Analyze a File")

    col_repo, col_load = st.columns([4, 1])
    col_repo.text_input(
        "GitHub Repo (URL or owner/repo)",
        key="repo_input",
        placeholder="e.g., https://github.com/facebook/react or facebook/react",
    )
    col_load.write("")
    col_load.button("Load Repo", on_click=_load_repo)

    repo = st.session_state["repo"]

    if repo:
        st.subheader(f"Select a file in {repo}")
        current_path = st.session_state["current_path"]

        # Breadcrumb: every step except the last is clickable.
        crumbs = breadcrumb(current_path)
        crumb_cols = st.columns(len(crumbs) + 1)
        for i, (label, crumb_path) in enumerate(crumbs):
            if i == len(crumbs) - 1:
                crumb_cols[i].markdown(f"**{label}**")
            else:
                crumb_cols[i].button(label, key=f"crumb_{i}", on_click=_navigate, args=(crumb_path,))
        if current_path:
            crumb_cols[-1].button("⬆ Up", key="nav_up", on_click=_navigate, args=(parent_path(current_path),))

        # Only hit the API when the repo or folder changes.
        entries_key = (repo, current_path)
        if st.session_state["entries_key"] != entries_key:
            try:
                with st.spinner("Loading repository contents..."):
                    st.session_state["entries"] = list_contents(
                        repo, current_path, token, timeout=settings.request_timeout
                    )
                st.session_state["entries_key"] = entries_key
            except CodeLensError as e:
                st.session_state["entries"] = []
                st.error(str(e))

        for entry in st.session_state["entries"] or []:
            if entry["type"] == "dir":
                st.button(
                    f"📁 {entry['name']}",
                    key=f"dir_{entry['path']}",
                    on_click=_navigate,
                    args=(entry["path"],),
                )
            elif entry["type"] == "file":
                st.button(
                    f"📄 {entry['name']}",
                    key=f"file_{entry['path']}",
                    on_click=_select_file,
                    args=(entry["path"], entry["sha"]),
                )

    st.divider()
    st.text_input("SHA of the File", key="sha_input", placeholder="Enter SHA or select a file", on_change=_sha_typed)
    if st.session_state["selected_path"]:
        st.caption(f"Selected: {st.session_state['selected_path']}")

    sha = st.session_state["sha_input"].strip()
    analyze_btn = st.button("Analyze", type="primary", disabled=not (repo and sha))

    if analyze_btn:
        st.session_state["error"] = ""
        st.session_state["result"] = None
        with st.spinner("Analyzing..."):
            try:
                result, from_cache = analyze_blob(
                    settings,
                    token,
                    repo,
                    sha,
                    username=username,
                    path=st.session_state["selected_path"],
                    use_cache=use_cache,
                    cache_minutes=int(cache_minutes),
                )
                st.session_state["result"] = result
                if from_cache:
                    st.success("Loaded from analysis cache.")
            except CodeLensError as e:
                st.session_state["error"] = str(e)

    if st.session_state["error"]:
        st.error(st.session_state["error"])

    result = st.session_state["result"]
    if result is not None:
        m1, m2 = st.columns([1, 3])
        m1.metric("Quality Score", result.score, help=TOOLTIPS["Score"])
        m2.markdown(render_badge("Band", score_band(result.score)), unsafe_allow_html=True)
        st.markdown(result.reasoning)


# ----------------------------
# History (SQLite)
# ----------------------------
with tabs[1]:
    st.header("History")

    entries = get_history(username, limit=200, db_path=settings.db_path)

    if not entries:
        st.info("No saved analyses yet.")
    else:
        summary = summarize_scores([e["score"] for e in entries])
        c1, c2, c3, c4 = st.columns(4)
        c1.metric("Files analyzed", summary["count"])
        c2.metric("Average", summary["mean"], help=TOOLTIPS["Average"])
        c3.metric("Median", summary["median"])
        c4.metric("Working (≥ 50)", summary["functional_count"])

        st.bar_chart(pd.DataFrame({"files": summary["bands"]}))

        hist_df = pd.DataFrame(entries)[["created_at", "repo", "path", "sha", "score"]]
        st.dataframe(hist_df, use_container_width=True, hide_index=True)

        for e in entries:
            label = e["path"] or e["sha"]
            with st.expander(f"{e['repo']} | {label} | score={e['score']}"):
                st.caption(f"{e['created_at']} · {e['sha']} · {e['model']}")
                st.markdown(e["reasoning"])

        st.divider()
        st.subheader("Export")
        ex1, ex2, ex3 = st.columns(3)

        if ex1.button("Export JSON"):
            path = save_history_json(username, entries)
            with open(path, "rb") as f:
                ex1.download_button("Download JSON", data=f.read(), file_name=os.path.basename(path), mime="application/json")

        if ex2.button("Export CSV"):
            path = save_history_csv(username, entries)
            with open(path, "rb") as f:
                ex2.download_button("Download CSV", data=f.read(), file_name=os.path.basename(path), mime="text/csv")

        if ex3.button("Export PDF"):
            path = export_history_pdf(username, entries)
            with open(path, "rb") as f:
                ex3.download_button("Download PDF", data=f.read(), file_name=os.path.basename(path), mime="application/pdf")

        st.divider()
        if st.button("Clear History", type="secondary"):
            removed = clear_history(username, db_path=settings.db_path)
            st.success(f"Removed {removed} entries.")
            st.rerun()
