# report_utils.py
#
# What this file is:
# Generates a PDF of a user's analysis history using ReportLab.
#
# How it works:
# - Create the reports/ folder if needed
# - Draw text lines top to bottom on a canvas
# - Reasoning is markdown, so each line is wrapped to the page width
# - Start a new page when the cursor reaches the bottom margin

import os                      # Build paths + create reports/ folder
from datetime import datetime  # Timestamp for the PDF file name

from reportlab.lib.pagesizes import letter     # Standard US letter page size
from reportlab.lib.utils import simpleSplit    # Wrap long lines to the page width
from reportlab.pdfgen import canvas            # Canvas is used to draw text on a PDF

from scoring import score_band, summarize_scores

REPORTS_DIR = "reports"

FONT = "Helvetica"
FONT_BOLD = "Helvetica-Bold"
FONT_SIZE = 10


def ensure_reports_dir(reports_dir=REPORTS_DIR):
    os.makedirs(reports_dir, exist_ok=True)


def export_history_pdf(username, entries, reports_dir=REPORTS_DIR, output_name=None):
    """
    Create a PDF report and return its path.

    Parameters:
      username (str): GitHub login the history belongs to
      entries (list[dict]): rows from db_utils.get_history()
      output_name (str | None): optional filename; default is timestamped
    """
    ensure_reports_dir(reports_dir)

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    if not output_name:
        output_name = f"{username}_analysis_report_{timestamp}.pdf"

    path = os.path.join(reports_dir, output_name)

    c = canvas.Canvas(path, pagesize=letter)
    width, height = letter

    x = 50
    y = height - 50
    line = 13
    max_width = width - 2 * x

    def write(text, bold=False):
        nonlocal y
        font = FONT_BOLD if bold else FONT

        # simpleSplit returns [] for an empty string; keep the blank line.
        wrapped = simpleSplit(str(text), font, FONT_SIZE, max_width) or [""]
        for part in wrapped:
            if y < 60:
                c.showPage()
                y = height - 50
            c.setFont(font, FONT_SIZE)
            c.drawString(x, y, part)
            y -= line

    write("CodeLens - Code Quality Report", bold=True)
    write(f"User: {username}")
    write(f"Generated: {timestamp}")
    write("")

    summary = summarize_scores([e.get("score") for e in entries])
    write("Summary", bold=True)
    write(f"Files analyzed: {summary['count']}")
    if summary["count"]:
        write(f"Average score: {summary['mean']}  |  Median: {summary['median']}")
        write(f"Lowest: {summary['min']}  |  Highest: {summary['max']}")
        write(f"Scored as working (>= 50): {summary['functional_count']}")
    write("")

    if not entries:
        write("No analyses saved yet.")

    for entry in entries:
        label = entry.get("path") or entry.get("sha", "")
        score = entry.get("score")
        write(f"{entry.get('repo', '')} / {label}", bold=True)
        write(f"Score: {score} ({score_band(score)})  |  {entry.get('created_at', '')}")
        write(f"SHA: {entry.get('sha', '')}")
        for text_line in (entry.get("reasoning") or "").splitlines():
            write(text_line)
        write("")

    c.save()
    return path
