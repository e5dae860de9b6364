"""Tests for extraction strategies and section splitting."""

import pytest

from social_insights.extractors import DEFAULT_VOCABULARY, Section
from social_insights.extractors import strategies as s
from social_insights.extractors.sections import SectionSplitter
from social_insights.prompts import ANALYSIS_TEMPLATE


class TestRunChain:
    """Test ordered strategy evaluation."""

    def test_first_value_wins(self):
        """Test that later strategies are not consulted."""
        chain = [
            s.Strategy("miss", lambda text: None),
            s.Strategy("hit", lambda text: "a"),
            s.Strategy("later", lambda text: "b"),
        ]
        assert s.run_chain(chain, "x") == ("a", "hit")

    def test_all_miss(self):
        """Test an exhausted chain."""
        chain = [s.Strategy("miss", lambda text: None)]
        assert s.run_chain(chain, "x") == (None, None)

    def test_failing_strategy_skipped(self):
        """Test that an exception moves on to the next strategy."""
        def boom(text):
            raise RuntimeError("bad pattern")

        chain = [s.Strategy("boom", boom), s.Strategy("ok", lambda text: "v")]
        assert s.run_chain(chain, "x", "metrics.likes") == ("v", "ok")


class TestNormalization:
    """Test number and text normalization helpers."""

    @pytest.mark.parametrize("text,expected", [
        ("12,345", "12345"),
        ("1,234,567", "1234567"),
        ("14.2k", "14200"),
        ("2M", "2000000"),
        ("7", "7"),
        ("2.5", "3"),
    ])
    def test_count_from_match(self, text, expected):
        """Test count canonicalization."""
        assert s.count_from_match(s.NUMBER_RE.search(text)) == expected

    @pytest.mark.parametrize("text", ["4.5%", "12 %", "v2", "3.14.15"])
    def test_number_regex_skips_non_counts(self, text):
        """Test that percentages and fragments are not counts."""
        assert s.NUMBER_RE.search(text) is None

    @pytest.mark.parametrize("raw,expected", [
        ("4.50", "4.5%"),
        ("4.56", "4.6%"),
        ("4.55", "4.6%"),
        ("12", "12%"),
        ("0.04", "0%"),
    ])
    def test_canonical_percent(self, raw, expected):
        """Test half-up rounding to one decimal."""
        assert s.canonical_percent(raw) == expected

    def test_strip_qualifiers(self):
        """Test removing hedging words."""
        pattern = s.qualifier_pattern(["approximately", "~", "over"])

        assert s.strip_qualifiers("Likes: approximately 1,245", pattern) == "Likes: 1,245"
        assert s.strip_qualifiers("Views: ~900", pattern) == "Views: 900"
        assert s.strip_qualifiers("Overall: 5", pattern) == "Overall: 5"

    def test_clean_value(self):
        """Test trimming emphasis and separators."""
        assert s.clean_value(":** Saturdays at 6pm ") == "Saturdays at 6pm"
        assert s.clean_value(" - ") == ""

    def test_alternation_respects_word_boundaries(self):
        """Test that labels do not match inside words."""
        import re

        pattern = re.compile(s.alternation(["likes"]), re.IGNORECASE)

        assert pattern.search("Likes: 3")
        assert not pattern.search("Dislikes: 3")

    def test_empty_alternation_matches_nothing(self):
        """Test that an empty synonym list never matches."""
        import re

        assert re.search(s.alternation([]), "anything at all") is None

    def test_phrase_pattern_separators(self):
        """Test spaces, underscores and hyphens between words."""
        import re

        pattern = re.compile(s.phrase_pattern("direct answer"), re.IGNORECASE)

        for text in ("Direct Answer", "DIRECT_ANSWER", "direct-answer"):
            assert pattern.fullmatch(text)


class TestStrategies:
    """Test individual strategies."""

    def test_label_colon_number(self):
        """Test number after the label's colon."""
        strategy = s.label_colon_number(s.alternation(["likes"]))
        assert strategy.func("**Likes:** 1,200 (up from 900)") == "1200"

    def test_label_colon_number_stops_at_next_label(self):
        """Test that a missing value is not read from the following label."""
        every = s.alternation(["likes", "shares"])
        strategy = s.label_colon_number(s.alternation(["likes"]), every)

        assert strategy.func("Likes: N/A, Shares: 300") is None
        assert strategy.func("Shares: 300, Likes: 40") == "40"

    def test_number_before_label(self):
        """Test counts written ahead of their labels."""
        every = s.alternation(["likes", "shares", "comments"])
        shares = s.number_before_label(s.alternation(["shares"]), every)
        comments = s.number_before_label(s.alternation(["comments"]), every)

        assert shares.func("Expect 1,500 likes, 300 shares, 45 comments") == "300"
        assert comments.func("Expect 1,500 likes, 300 shares, 45 comments") == "45"
        assert comments.func("300 shares and comments") is None

    def test_label_percent_stops_at_next_label(self):
        """Test that another field's percentage is not taken."""
        every = s.alternation(["engagement rate", "gender split"])
        strategy = s.label_percent(s.alternation(["engagement rate"]), every)

        assert strategy.func("Engagement rate: n/a. Gender split: 58% female") is None
        assert strategy.func("Engagement rate: 4.5%, Gender split: 58% female") == "4.5%"

    def test_label_windows_scan(self):
        """Test that windows run between neighbouring labels."""
        windows = s.LabelWindows(s.alternation(["likes"]), s.alternation(["likes", "views"]))
        line, start, label, end = next(windows.scan("Views 9 likes 3 views 4"))

        assert line[start:label.start()] == " 9 "
        assert line[label.end():end] == " 3 "

    def test_positional_skips_age_ranges(self):
        """Test that age ranges are not mistaken for counts."""
        strategy = s.positional_number(0, s.alternation(["likes", "views"]))
        assert strategy.func("Audience 18-24 saw 640 reactions") == "640"

    def test_first_percent_skips_other_labels(self):
        """Test that a labeled percentage line is not reused."""
        strategy = s.first_percent(s.alternation(["gender split"]))
        assert strategy.func("Gender split: 60% female\nOverall 4.2% of viewers engaged") == "4.2%"

    def test_bullet_lines(self):
        """Test bullet collection."""
        strategy = s.bullet_lines()
        assert strategy.func("intro\n- one\n  • two\n\n* three") == ["one", "two", "three"]
        assert strategy.func("no bullets here") is None

    def test_segment_paragraph(self):
        """Test joining lines into one paragraph."""
        strategy = s.segment_paragraph()
        assert strategy.func("\nFirst line.\n- Second line.\n\n") == "First line. Second line."
        assert strategy.func("\n\n") is None

    def test_segment_paragraph_keeps_leading_hashtag(self):
        """Test that only heading marks followed by a space are dropped."""
        strategy = s.segment_paragraph()
        assert strategy.func("#Reels lead growth.\n## Carousels follow.") == "#Reels lead growth. Carousels follow."

    def test_hashtags_exclude_entities(self):
        """Test that HTML entities and C# are not hashtags."""
        assert s.HASHTAG_RE.findall("Try #Reels, C#, &#39; and #Food_2024") == ["#Reels", "#Food_2024"]


class TestSectionSplitter:
    """Test heading detection."""

    @pytest.fixture
    def splitter(self):
        return SectionSplitter(DEFAULT_VOCABULARY)

    def test_prompt_template_headings(self, splitter):
        """Test that the requested layout yields all five sections."""
        segments = splitter.split(ANALYSIS_TEMPLATE)
        assert list(segments) == [
            Section.METRICS,
            Section.FORMAT_INSIGHTS,
            Section.PREDICTIONS,
            Section.ANALYSIS,
            Section.RECOMMENDATIONS,
        ]

    def test_segment_bounded_by_next_heading(self, splitter):
        """Test that a segment stops at the following heading."""
        segments = splitter.split("## Metrics\nLikes: 1\n## Suggestions\nPost daily")

        assert segments[Section.METRICS] == "\nLikes: 1\n"
        assert segments[Section.RECOMMENDATIONS] == "\nPost daily"

    def test_heading_requires_marker(self, splitter):
        """Test that prose starting with a section word is ignored."""
        assert splitter.split("Analysis shows clear growth") == {}
        assert Section.ANALYSIS in splitter.split("Analysis\nclear growth")

    def test_hashtag_is_not_a_heading(self, splitter):
        """Test that hashes need a space before the phrase."""
        assert splitter.split("#Insights #Growth") == {}
        assert splitter.split("#Metrics") == {}
        assert Section.METRICS in splitter.split("# Metrics\nLikes: 1")

    def test_longest_phrase_wins(self, splitter):
        """Test multi-word headings."""
        segments = splitter.split("Key Metrics:\nLikes: 1")
        assert segments == {Section.METRICS: "\nLikes: 1"}
