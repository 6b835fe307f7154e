# scoring.py
#
# What this file is:
# Helpers for DISPLAYING scores: bands, colors, and summary stats for the
# history view. The LLM score itself is never changed here; the analyzer
# returns it exactly as the model gave it.
#
# Bands (same thresholds as the UI colors):
#   >= 80 excellent, >= 60 good, >= 40 fair, otherwise poor
# and anything under 50 means the model judged the code as not working.

import math          # isfinite() for odd scores

import numpy as np   # NumPy for mean/median/min/max

FUNCTIONAL_THRESHOLD = 50

BAND_COLORS = {
    "excellent": "#22C55E",  # green
    "good": "#0EA5E9",       # blue
    "fair": "#F59E0B",       # orange
    "poor": "#EF4444",       # red
    "unknown": "#94A3B8",    # gray
}


def _as_number(score):
    """float(score), or None for None/bools/strings/NaN."""
    if score is None or isinstance(score, bool):
        return None
    try:
        value = float(score)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(value):
        return None
    return value


def score_band(score):
    """Map a score to "excellent" / "good" / "fair" / "poor" / "unknown"."""
    s = _as_number(score)
    if s is None:
        return "unknown"
    if s >= 80:
        return "excellent"
    if s >= 60:
        return "good"
    if s >= 40:
        return "fair"
    return "poor"


def score_color(score):
    """Hex color for a score, used by the Streamlit badges."""
    return BAND_COLORS[score_band(score)]


def is_functional_score(score):
    """
    True when the score is at or above the "code works" line.
    The rubric tells the model that broken code must score below 50.
    """
    s = _as_number(score)
    return s is not None and s >= FUNCTIONAL_THRESHOLD


def summarize_scores(scores):
    """
    Summary stats over a list of scores (non-numbers are skipped).

    Returns a dict:
      count, mean, median, min, max  (rounded to 1 decimal)
      functional_count: how many are >= FUNCTIONAL_THRESHOLD
      bands: {band: count}

    Empty input returns count 0 and None for every statistic.
    """
    values = [v for v in (_as_number(s) for s in (scores or [])) if v is not None]

    bands = {"excellent": 0, "good": 0, "fair": 0, "poor": 0}
    for v in values:
        bands[score_band(v)] += 1

    if not values:
        return {
            "count": 0,
            "mean": None,
            "median": None,
            "min": None,
            "max": None,
            "functional_count": 0,
            "bands": bands,
        }

    arr = np.array(values, dtype=float)

    return {
        "count": int(arr.size),
        "mean": round(float(np.mean(arr)), 1),
        "median": round(float(np.median(arr)), 1),
        "min": round(float(np.min(arr)), 1),
        "max": round(float(np.max(arr)), 1),
        "functional_count": int(np.sum(arr >= FUNCTIONAL_THRESHOLD)),
        "bands": bands,
    }
