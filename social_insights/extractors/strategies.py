"""Field extraction strategies.

A strategy takes the text of one segment and returns a value or ``None``.
Each field owns an ordered chain of named strategies; ``run_chain`` returns
the first value produced. A strategy that raises is logged and skipped so a
bad field never costs the rest of the record.
"""

import logging
import re
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Callable, Iterator, NamedTuple, Optional, Sequence

logger = logging.getLogger(__name__)

# Separator between words of a heading or label phrase ("direct answer",
# "DIRECT_ANSWER", "direct-answer").
WORD_SEP = r"[ \t_\-]+"

# Markdown emphasis that may wrap a label: **Likes:** or __Likes__:
EMPHASIS = r"(?:\*\*|__)?"

NUMBER_PATTERN = (
    r"(?<![\w.,])"
    r"(\d{1,3}(?:,\d{3})+|\d+)"      # integer part, optional thousands separators
    r"(\.\d+)?"                       # decimal part
    r"([kKmMbB](?![A-Za-z]))?"        # 1.2k, 3M, 1b
    r"(?![.,]?\d|[ \t]*%)"            # not a percentage, not cut mid-number
)
NUMBER_RE = re.compile(NUMBER_PATTERN)

PERCENT_PATTERN = r"(?<![\w.])(\d+(?:\.\d+)?)%"
PERCENT_RE = re.compile(PERCENT_PATTERN)

HASHTAG_RE = re.compile(r"(?<![\w#&])#\w+")

AGE_QUALIFIER = r"(?:[ \t]*(?:year[- ]olds?|years?[ \t]+old|years?|yrs?|y/o))"
AGE_RE = re.compile(
    r"(?<![\w.])\d{1,2}(?:[ \t]*(?:-|–|—|to)[ \t]*\d{1,2}|\+)?"
    + AGE_QUALIFIER + r"?"
    + r"(?!\.?\d|[ \t]*%|\w)",
    re.IGNORECASE,
)
# Segment-wide search only trusts ranges, "NN+" and qualified numbers.
AGE_RANGE_RE = re.compile(
    r"(?<![\w.])\d{1,2}(?:(?:[ \t]*(?:-|–|—|to)[ \t]*\d{1,2}|\+)"
    + AGE_QUALIFIER + r"?|" + AGE_QUALIFIER + r")"
    + r"(?!\.?\d|[ \t]*%|\w)",
    re.IGNORECASE,
)

BULLET_RE = re.compile(r"^[ \t]*(?:[-•◦▪‣]|\*(?!\*))[ \t]*(.*?)[ \t]*$")
HEADING_MARK_RE = re.compile(r"^[ \t]*#{1,6}(?:[ \t]+|$)")
LIST_SPLIT_RE = re.compile(r"\s*(?:,|;|/|&|\band\b)\s*", re.IGNORECASE)

MULTIPLIERS = {
    "": Decimal(1),
    "k": Decimal(1_000),
    "m": Decimal(1_000_000),
    "b": Decimal(1_000_000_000),
}


class Strategy(NamedTuple):
    """One named way of deriving a field value from a segment."""
    name: str
    func: Callable[[str], Optional[Any]]


def run_chain(strategies: Sequence[Strategy], segment: str, field: str = ""):
    """Run strategies in order, returning ``(value, strategy_name)``.

    Returns ``(None, None)`` when every strategy misses.
    """
    for strategy in strategies:
        try:
            value = strategy.func(segment)
        except Exception:
            logger.warning(
                "Strategy %r failed for field %r", strategy.name, field, exc_info=True
            )
            continue
        if value is not None:
            return value, strategy.name
    return None, None


# --- Normalization ----------------------------------------------------------

def phrase_pattern(phrase: str) -> str:
    """Regex for a phrase, tolerant of case-independent word separators."""
    words = [w for w in re.split(WORD_SEP, phrase.strip()) if w]
    return WORD_SEP.join(re.escape(w) for w in words)


def alternation(phrases: Sequence[str]) -> str:
    """Longest-first alternation of phrases, bounded so words are not split."""
    ordered = sorted({p.strip().lower() for p in phrases if p.strip()}, key=len, reverse=True)
    if not ordered:
        # Matches nothing; keeps an empty synonym list from matching everything.
        return r"(?!x)x"
    return r"(?<!\w)(?:" + "|".join(phrase_pattern(p) for p in ordered) + r")(?!\w)"


def count_from_match(match: re.Match) -> str:
    """Canonical digit string for a NUMBER_RE match: '12,345' -> '12345', '1.2k' -> '1200'."""
    integer, decimals, suffix = match.group(1), match.group(2), match.group(3)
    value = Decimal(integer.replace(",", "") + (decimals or ""))
    value *= MULTIPLIERS[(suffix or "").lower()]
    return str(value.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def canonical_percent(raw: str) -> str:
    """Round half-up to one decimal place and drop a trailing '.0'.

    '4.50' -> '4.5%', '4.56' -> '4.6%', '12' -> '12%'.
    """
    value = Decimal(raw).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP)
    text = str(value)
    if text.endswith(".0"):
        text = text[:-2]
    return f"{text}%"


def qualifier_pattern(qualifiers: Sequence[str]) -> re.Pattern:
    """Pattern removing hedging words ('approximately', '~') and the space after them."""
    parts = []
    for q in sorted({q.strip() for q in qualifiers if q.strip()}, key=len, reverse=True):
        part = re.escape(q)
        if re.match(r"\w", q):
            part = r"(?<!\w)" + part
        if re.search(r"\w$", q):
            part += r"(?!\w)"
        parts.append(part)
    if not parts:
        return re.compile(r"(?!x)x")
    return re.compile(r"(?:" + "|".join(parts) + r")[ \t]*", re.IGNORECASE)


def strip_qualifiers(text: str, pattern: re.Pattern) -> str:
    return pattern.sub("", text)


def clean_value(text: str) -> str:
    """Trim whitespace, markdown emphasis and stray separators from a label value."""
    text = text.replace("**", "").replace("__", "")
    return text.strip(" \t*_:-–—").strip()


# --- Strategy builders ------------------------------------------------------
# Each builder closes over compiled patterns so chains are built once per
# extractor and are read-only afterwards.

class LabelWindows:
    """Find a field's labels line by line, bounded by the labels around them.

    ``all_labels`` covers every field, the field's own labels included. A
    value for the field is only read between the neighbouring labels, so
    'Likes: N/A, Shares: 300' gives likes nothing rather than shares' 300.
    Each line is scanned for labels once.
    """

    def __init__(self, labels: str, all_labels: Optional[str] = None):
        self._own = re.compile(labels, re.IGNORECASE)
        self._any = re.compile(all_labels or labels, re.IGNORECASE)

    def scan(self, segment: str) -> Iterator[tuple[str, int, re.Match, int]]:
        """Yield ``(line, start, label, end)`` for each of the field's labels.

        ``start`` is where the previous label on the line ends and ``end``
        where the next one begins, or the line's bounds.
        """
        for line in segment.splitlines():
            matches = list(self._any.finditer(line))
            for index, match in enumerate(matches):
                if not self._own.fullmatch(line, match.start(), match.end()):
                    continue
                start = matches[index - 1].end() if index else 0
                end = matches[index + 1].start() if index + 1 < len(matches) else len(line)
                yield line, start, match, end


def label_colon_number(labels: str, all_labels: Optional[str] = None) -> Strategy:
    """'Likes: 12,345' - the number right after the label's colon."""
    windows = LabelWindows(labels, all_labels)

    def func(segment: str) -> Optional[str]:
        for line, _, label, end in windows.scan(segment):
            colon = line.find(":", label.end(), end)
            if colon == -1:
                continue
            start = colon + 1
            while start < end and line[start] in " \t*_":
                start += 1
            match = NUMBER_RE.match(line, start, end)
            if match:
                return count_from_match(match)
        return None

    return Strategy("label_colon_number", func)


def number_before_label(labels: str, all_labels: Optional[str] = None) -> Strategy:
    """'Expect 1,500 likes, 300 shares' - a number written just before the label."""
    windows = LabelWindows(labels, all_labels)

    def func(segment: str) -> Optional[str]:
        for line, start, label, _ in windows.scan(segment):
            numbers = list(NUMBER_RE.finditer(line, start, label.start()))
            if numbers and not line[numbers[-1].end():label.start()].strip(" \t*_"):
                return count_from_match(numbers[-1])
        return None

    return Strategy("number_before_label", func)


def label_first_number(labels: str, all_labels: Optional[str] = None) -> Strategy:
    """'Average likes per post sit near 1,200' - first number after the label."""
    windows = LabelWindows(labels, all_labels)

    def func(segment: str) -> Optional[str]:
        for line, _, label, end in windows.scan(segment):
            match = NUMBER_RE.search(line, label.end(), end)
            if match:
                return count_from_match(match)
        return None

    return Strategy("label_first_number", func)


def positional_number(position: int, any_count_label: str) -> Strategy:
    """Nth bare number of an unlabeled segment (likes, comments, shares, views).

    Only applies when none of the count labels appear in the segment, so it
    never contradicts a labeled value.
    """
    label_re = re.compile(any_count_label, re.IGNORECASE)

    def func(segment: str) -> Optional[str]:
        if label_re.search(segment):
            return None
        # both lists are in text order; walk them together
        age_spans = [m.span() for m in AGE_RANGE_RE.finditer(segment)]
        numbers = []
        span_index = 0
        for match in NUMBER_RE.finditer(segment):
            while span_index < len(age_spans) and age_spans[span_index][1] <= match.start():
                span_index += 1
            if span_index < len(age_spans) and age_spans[span_index][0] <= match.start():
                continue
            numbers.append(match)
            if len(numbers) > position:
                return count_from_match(numbers[position])
        return None

    return Strategy("positional", func)


def label_percent(labels: str, all_labels: Optional[str] = None) -> Strategy:
    """'Engagement Rate: 4.50%' - first percentage after the label."""
    windows = LabelWindows(labels, all_labels)

    def func(segment: str) -> Optional[str]:
        for line, _, label, end in windows.scan(segment):
            match = PERCENT_RE.search(line, label.end(), end)
            if match:
                return canonical_percent(match.group(1))
        return None

    return Strategy("label_percent", func)


def first_percent(other_labels: str) -> Strategy:
    """First percentage on a line that carries no other field's label."""
    other_re = re.compile(other_labels, re.IGNORECASE)

    def func(segment: str) -> Optional[str]:
        for line in segment.splitlines():
            if other_re.search(line):
                continue
            match = PERCENT_RE.search(line)
            if match:
                return canonical_percent(match.group(1))
        return None

    return Strategy("first_percent", func)


def _label_value_pattern(labels: str) -> re.Pattern:
    return re.compile(
        labels + r"[ \t]*" + EMPHASIS + r"[ \t]*(?::|[ \t][-–—][ \t])" + r"(?P<value>[^\n]*)",
        re.IGNORECASE,
    )


def label_value(labels: str, other_labels: str) -> Strategy:
    """Rest of the label's line, cut at the next recognized 'Label:'."""
    pattern = _label_value_pattern(labels)
    cut_re = re.compile(other_labels + r"[ \t]*" + EMPHASIS + r"[ \t]*:", re.IGNORECASE)

    def func(segment: str) -> Optional[str]:
        for match in pattern.finditer(segment):
            value = match.group("value")
            cut = cut_re.search(value)
            if cut:
                value = value[:cut.start()]
            value = clean_value(value)
            if value:
                return value
        return None

    return Strategy("label_value", func)


def label_next_line(labels: str, other_labels: str) -> Strategy:
    """Label alone on its line with the value on the following line."""
    pattern = _label_value_pattern(labels)
    other_re = re.compile(other_labels + r"[ \t]*" + EMPHASIS + r"[ \t]*:", re.IGNORECASE)

    def func(segment: str) -> Optional[str]:
        match = pattern.search(segment)
        if not match or clean_value(match.group("value")):
            return None
        for line in segment[match.end():].splitlines():
            if not line.strip():
                continue
            if other_re.search(line):
                return None
            bullet = BULLET_RE.match(line)
            value = clean_value(bullet.group(1) if bullet else line)
            return value or None
        return None

    return Strategy("label_next_line", func)


def bullet_lines() -> Strategy:
    """Lines starting with '-', '•' or a single '*', marker stripped."""

    def func(segment: str) -> Optional[list[str]]:
        items = []
        for line in segment.splitlines():
            match = BULLET_RE.match(line)
            if not match:
                continue
            item = match.group(1).strip()
            # skip empty bullets and rules like '---'
            if item and item.strip("-*• \t"):
                items.append(item)
        return items or None

    return Strategy("bullet_lines", func)


def segment_paragraph() -> Strategy:
    """All non-empty lines of the segment as one paragraph."""

    def func(segment: str) -> Optional[str]:
        parts = []
        for line in segment.splitlines():
            bullet = BULLET_RE.match(line)
            text = bullet.group(1) if bullet else HEADING_MARK_RE.sub("", line)
            text = text.strip()
            if text and text.strip("-*• \t"):
                parts.append(text)
        return " ".join(parts) or None

    return Strategy("segment_paragraph", func)


def _label_line_rest(labels: str) -> re.Pattern:
    return re.compile(labels + r"(?P<rest>[^\n]*)", re.IGNORECASE)


def hashtags_on_label_line(labels: str) -> Strategy:
    pattern = _label_line_rest(labels)

    def func(segment: str) -> Optional[list[str]]:
        for match in pattern.finditer(segment):
            tags = HASHTAG_RE.findall(match.group("rest"))
            if tags:
                return tags
        return None

    return Strategy("hashtags_on_label_line", func)


def hashtags_in_segment() -> Strategy:
    def func(segment: str) -> Optional[list[str]]:
        return HASHTAG_RE.findall(segment) or None

    return Strategy("hashtags_in_segment", func)


def _normalize_age(text: str) -> str:
    return re.sub(r"\s+", " ", text).strip()


def age_pattern_on_label_line(labels: str) -> Strategy:
    """'Primary Age Group: 18-24 and 25-34 year-olds' -> ['18-24', '25-34 year-olds']."""
    pattern = _label_line_rest(labels)

    def func(segment: str) -> Optional[list[str]]:
        for match in pattern.finditer(segment):
            groups = [_normalize_age(m.group(0)) for m in AGE_RE.finditer(match.group("rest"))]
            if groups:
                return groups
        return None

    return Strategy("age_pattern_on_label_line", func)


def age_list_on_label_line(labels: str) -> Strategy:
    """'Primary Age Group: Millennials and Gen Z' -> ['Millennials', 'Gen Z']."""
    pattern = _label_line_rest(labels)

    def func(segment: str) -> Optional[list[str]]:
        match = pattern.search(segment)
        if not match:
            return None
        value = clean_value(match.group("rest"))
        groups = [clean_value(part) for part in LIST_SPLIT_RE.split(value)]
        groups = [g.rstrip(".") for g in groups if g]
        return groups or None

    return Strategy("age_list_on_label_line", func)


def age_ranges_in_segment() -> Strategy:
    def func(segment: str) -> Optional[list[str]]:
        groups = [_normalize_age(m.group(0)) for m in AGE_RANGE_RE.finditer(segment)]
        return groups or None

    return Strategy("age_ranges_in_segment", func)
