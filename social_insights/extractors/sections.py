"""Split a free-text answer into heading-delimited segments."""

import re
from typing import Optional

from .strategies import WORD_SEP, phrase_pattern
from .vocabulary import Section, Vocabulary


def _normalize_phrase(text: str) -> str:
    return re.sub(WORD_SEP, " ", text.strip().lower())


class SectionSplitter:
    """Locate section headings and cut the text between them.

    A heading is a vocabulary phrase at the start of a line, optionally
    preceded by markdown hashes and a space, bold markers or a list number.
    To count as a heading the line must carry a '#', a colon after the
    phrase, or nothing else at all; "Metrics show growth" is prose,
    "Metrics:" is a heading and "#Insights" is a hashtag.
    """

    def __init__(self, vocabulary: Vocabulary):
        self._lookup: dict[str, Section] = {}
        for section in Section:
            for phrase in vocabulary.sections.get(section, []):
                if phrase.strip():
                    self._lookup.setdefault(_normalize_phrase(phrase), section)

        phrases = sorted(self._lookup, key=len, reverse=True)
        titles = "|".join(phrase_pattern(p) for p in phrases) or r"(?!x)x"
        self._heading_re = re.compile(
            r"^[ \t]*(?P<hashes>\#{1,6}[ \t]+)?"
            r"(?:(?:\*\*|__)[ \t]*)?"
            r"(?:\d{1,2}[.)][ \t]+)?"
            r"(?P<title>" + titles + r")(?!\w)"
            r"[ \t]*(?:\*\*|__)?[ \t]*(?P<colon>:)?[ \t]*(?:\*\*|__)?[ \t]*"
            r"(?P<rest>[^\n]*)",
            re.IGNORECASE | re.MULTILINE,
        )

    def headings(self, text: str) -> list[tuple[Section, int, int]]:
        """All heading matches as ``(section, heading_start, content_start)``."""
        found = []
        for match in self._heading_re.finditer(text):
            if not (match.group("hashes") or match.group("colon") or not match.group("rest").strip()):
                continue
            section = self._section_for(match.group("title"))
            if section is None:
                continue
            found.append((section, match.start(), match.start("rest")))
        return found

    def split(self, text: str) -> dict[Section, str]:
        """Map each section found to its segment text.

        The first heading of a section wins; every later heading, of any
        section, ends the segment before it.
        """
        headings = self.headings(text)
        segments: dict[Section, str] = {}
        for index, (section, _, content_start) in enumerate(headings):
            if section in segments:
                continue
            end = headings[index + 1][1] if index + 1 < len(headings) else len(text)
            segments[section] = text[content_start:end]
        return segments

    def _section_for(self, title: str) -> Optional[Section]:
        return self._lookup.get(_normalize_phrase(title))
