"""Best-effort executive summary extraction from the summary phase text.

This is a heuristic over the model's markdown, not a parser. It depends on
the model emitting an "Executive Summary" heading followed by another bold
or markdown heading. When the marker is missing the result is an empty
string and callers render a "no summary available" placeholder.
"""

import re

SUMMARY_MARKER = "executive summary"
MAX_SUMMARY_LINES = 10
MAX_SUMMARY_CHARS = 800
ELLIPSIS = "..."

_MARKDOWN_HEADING_RE = re.compile(r"^#{1,6}\s")


def _is_section_header(stripped_line: str) -> bool:
    return stripped_line.startswith("**") or bool(_MARKDOWN_HEADING_RE.match(stripped_line))


def extract_summary(text: str) -> str:
    """Pull the executive summary section out of the summary phase text.

    Capture starts after the first line containing the marker (any case) and
    stops at the next section header that is not itself a marker line. The
    first MAX_SUMMARY_LINES non-blank lines are joined with single spaces,
    cut to MAX_SUMMARY_CHARS and suffixed with an ellipsis.

    Returns "" when no marker is found or nothing follows it.
    """
    if not text:
        return ""

    captured: list[str] = []
    in_summary = False

    for line in text.splitlines():
        stripped = line.strip()
        if SUMMARY_MARKER in stripped.lower():
            in_summary = True
            continue
        if not in_summary:
            continue
        if _is_section_header(stripped):
            break
        if stripped:
            captured.append(stripped)

    if not captured:
        return ""

    joined = " ".join(captured[:MAX_SUMMARY_LINES])
    return joined[:MAX_SUMMARY_CHARS] + ELLIPSIS
