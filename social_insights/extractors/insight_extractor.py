"""Tolerant parser turning a free-text AI answer into an InsightRecord."""

import logging
from functools import lru_cache
from typing import NamedTuple, Optional, Union

from ..models.insights import InsightRecord
from ..utils.deduplication import dedupe_preserving_order
from . import strategies as s
from .sections import SectionSplitter
from .vocabulary import DEFAULT_VOCABULARY, Section, Vocabulary, load_vocabulary

logger = logging.getLogger(__name__)

COUNT_FIELDS = ("likes", "comments", "shares", "views")
DEDUPED_FIELDS = {"metrics.age_groups", "recommendations.hashtags"}
# Strategies that guess without a label; not trusted on headless answers.
UNLABELED_STRATEGIES = {"positional", "first_percent", "age_ranges_in_segment"}


class FieldPlan(NamedTuple):
    """How one record field is filled: where to look and what to try."""
    path: str
    section: Section
    chain: list[s.Strategy]
    numeric: bool = False


class ExtractionTrace(NamedTuple):
    """Which sections were found and which strategy filled each field."""
    sections: list[str]
    strategies: dict[str, str]
    headless: bool


class InsightExtractor:
    """Extract metrics, predictions and recommendations from an AI answer.

    ``extract`` is total: any input yields a fully populated InsightRecord,
    with fields the text does not support left at their defaults.
    """

    def __init__(self, vocabulary: Optional[Vocabulary] = None):
        self.vocabulary = vocabulary or DEFAULT_VOCABULARY
        self.splitter = SectionSplitter(self.vocabulary)
        self._qualifiers = s.qualifier_pattern(self.vocabulary.qualifiers)
        self.plans = self._build_plans()

    @classmethod
    def from_settings(cls, settings) -> "InsightExtractor":
        """Build an extractor using the vocabulary file named in settings, if any."""
        if settings.vocabulary_file:
            return cls(vocabulary=load_vocabulary(settings.vocabulary_file))
        return cls()

    def _labels(self, *fields: str) -> str:
        phrases = []
        for field_name in fields:
            phrases.extend(self.vocabulary.labels_for(field_name))
        return s.alternation(phrases)

    def _other_labels(self, field_name: str) -> str:
        return self._labels(*(f for f in self.vocabulary.fields if f != field_name))

    def _count_chain(self, field_name: str) -> list[s.Strategy]:
        labels = self._labels(field_name)
        every = self._labels(*self.vocabulary.fields)
        chain = [
            s.label_colon_number(labels, every),
            s.number_before_label(labels, every),
            s.label_first_number(labels, every),
        ]
        if field_name in self.vocabulary.count_order:
            position = self.vocabulary.count_order.index(field_name)
            chain.append(s.positional_number(position, self._labels(*COUNT_FIELDS)))
        return chain

    def _text_chain(self, field_name: str) -> list[s.Strategy]:
        labels = self._labels(field_name)
        others = self._other_labels(field_name)
        return [s.label_value(labels, others), s.label_next_line(labels, others)]

    def _build_plans(self) -> list[FieldPlan]:
        plans = [
            FieldPlan(
                "metrics.engagement_rate",
                Section.METRICS,
                [
                    s.label_percent(
                        self._labels("engagement_rate"),
                        self._labels(*self.vocabulary.fields),
                    ),
                    s.first_percent(self._other_labels("engagement_rate")),
                ],
                numeric=True,
            ),
        ]
        for field_name in COUNT_FIELDS:
            plans.append(FieldPlan(
                f"metrics.{field_name}", Section.METRICS,
                self._count_chain(field_name), numeric=True,
            ))
        age_labels = self._labels("age_groups")
        plans.extend([
            FieldPlan("metrics.age_groups", Section.METRICS, [
                s.age_pattern_on_label_line(age_labels),
                s.age_list_on_label_line(age_labels),
                s.age_ranges_in_segment(),
            ]),
            FieldPlan("metrics.gender_split", Section.METRICS, self._text_chain("gender_split")),
            FieldPlan("format_insights", Section.FORMAT_INSIGHTS, [s.bullet_lines()]),
        ])
        for field_name in COUNT_FIELDS:
            plans.append(FieldPlan(
                f"predictions.{field_name}", Section.PREDICTIONS,
                self._count_chain(field_name), numeric=True,
            ))
        plans.extend([
            FieldPlan("analysis", Section.ANALYSIS, [s.segment_paragraph()]),
            FieldPlan("recommendations.timing", Section.RECOMMENDATIONS, self._text_chain("timing")),
            FieldPlan("recommendations.hashtags", Section.RECOMMENDATIONS, [
                s.hashtags_on_label_line(self._labels("hashtags")),
                s.hashtags_in_segment(),
            ]),
            FieldPlan(
                "recommendations.content_tips", Section.RECOMMENDATIONS,
                self._text_chain("content_tips"),
            ),
            FieldPlan("recommendations.audience", Section.RECOMMENDATIONS, self._text_chain("audience")),
        ])
        return plans

    def extract(self, response: Union[str, bytes, None]) -> InsightRecord:
        """Parse ``response`` into an InsightRecord. Never raises."""
        record, _ = self.extract_with_trace(response)
        return record

    def extract_with_trace(self, response: Union[str, bytes, None]) -> tuple[InsightRecord, ExtractionTrace]:
        """Like ``extract`` but also report how each field was filled."""
        record = InsightRecord()
        trace = ExtractionTrace(sections=[], strategies={}, headless=False)
        try:
            text = _as_text(response)
            segments = self.splitter.split(text)
            headless = not segments and bool(text.strip())
            if headless:
                # No headings at all: read the whole answer as metrics, labels only.
                segments = {Section.METRICS: text}
            trace = ExtractionTrace(
                sections=[section.value for section in segments],
                strategies={},
                headless=headless,
            )
            logger.debug("Sections found: %s (headless=%s)", trace.sections, headless)
        except Exception:
            logger.exception("Could not split response into sections")
            return record, trace

        numeric_segments: dict[Section, str] = {}
        for plan in self.plans:
            segment = segments.get(plan.section)
            if segment is None:
                continue
            if plan.numeric:
                if plan.section not in numeric_segments:
                    try:
                        numeric_segments[plan.section] = s.strip_qualifiers(segment, self._qualifiers)
                    except Exception:
                        logger.warning("Could not strip qualifiers", exc_info=True)
                        numeric_segments[plan.section] = segment
                segment = numeric_segments[plan.section]

            chain = plan.chain
            if headless:
                chain = [strategy for strategy in chain if strategy.name not in UNLABELED_STRATEGIES]

            value, strategy_name = s.run_chain(chain, segment, plan.path)
            if value is None:
                continue
            if self.vocabulary.dedupe_lists and plan.path in DEDUPED_FIELDS:
                value = dedupe_preserving_order(value)
            try:
                _assign(record, plan.path, value)
            except Exception:
                logger.warning("Could not store value for %r", plan.path, exc_info=True)
                continue
            trace.strategies[plan.path] = strategy_name

        logger.debug("Fields filled: %s", trace.strategies)
        return record, trace


def _as_text(response: Union[str, bytes, None]) -> str:
    if response is None:
        return ""
    if isinstance(response, bytes):
        return response.decode("utf-8", errors="replace")
    if not isinstance(response, str):
        return str(response)
    return response


def _assign(record: InsightRecord, path: str, value) -> None:
    target = record
    *parents, attr = path.split(".")
    for name in parents:
        target = getattr(target, name)
    setattr(target, attr, value)


@lru_cache(maxsize=1)
def _default_extractor() -> InsightExtractor:
    return InsightExtractor()


def extract_insights(response: Union[str, bytes, None]) -> InsightRecord:
    """Extract with the built-in vocabulary."""
    return _default_extractor().extract(response)
