"""Display formatting for raw AI answers shown next to the parsed record."""

import re
from typing import Sequence

DISPLAY_SECTIONS = (
    "Metrics:",
    "Format Insights:",
    "Direct Answer:",
    "Explanation:",
    "Suggestions:",
)

_BULLET_RE = re.compile(r"^(?:[-•]|\*(?!\*))\s*")


def format_response(text: str, sections: Sequence[str] = DISPLAY_SECTIONS) -> str:
    """Tidy an answer for display.

    Normalizes line endings, drops indentation, renders bullets as '•',
    puts a blank line before each section heading and collapses runs of
    blank lines. The extractor never sees this output.
    """
    if not text:
        return ""

    lines = text.replace("\r\n", "\n").replace("\r", "\n").split("\n")
    heading_re = re.compile(
        r"^(?:#{1,6}[ \t]+)?(?:" + "|".join(re.escape(h.rstrip(":")) for h in sections) + r")\b",
        re.IGNORECASE,
    )

    formatted: list[str] = []
    for raw in lines:
        line = raw.strip()
        if heading_re.match(line) and formatted and formatted[-1] != "":
            formatted.append("")
        if _BULLET_RE.match(line) and line.strip("-*• "):
            line = "• " + _BULLET_RE.sub("", line)
        formatted.append(line)

    result = "\n".join(formatted)
    result = re.sub(r"\n{3,}", "\n\n", result)
    return result.strip()
