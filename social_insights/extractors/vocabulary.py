"""Heading and label vocabulary for the insight extractor.

The upstream workflow does not commit to a fixed answer template, so the
words used to find sections and fields live here as data. A deployment can
retarget the extractor by pointing ``VOCABULARY_FILE`` at a JSON document
with the same shape; keys it leaves out keep their defaults.
"""

import json
from enum import Enum
from pathlib import Path
from typing import Union

from pydantic import BaseModel, Field, ValidationError

from ..exceptions import VocabularyError


class Section(str, Enum):
    """Answer sections, in the order the workflow is asked to emit them."""
    METRICS = "metrics"
    FORMAT_INSIGHTS = "format_insights"
    PREDICTIONS = "predictions"
    ANALYSIS = "analysis"
    RECOMMENDATIONS = "recommendations"


DEFAULT_SECTIONS = {
    Section.METRICS: [
        "metrics",
        "key metrics",
        "current metrics",
        "performance metrics",
    ],
    Section.FORMAT_INSIGHTS: [
        "format insights",
        "format performance",
        "content format insights",
        "insights",
    ],
    Section.PREDICTIONS: [
        "direct answer",
        "predictions",
        "expected performance",
        "forecast",
    ],
    Section.ANALYSIS: [
        "explanation",
        "analysis",
    ],
    Section.RECOMMENDATIONS: [
        "suggestions",
        "recommendations",
    ],
}

DEFAULT_FIELDS = {
    "engagement_rate": ["engagement rate", "engagement"],
    "likes": ["likes"],
    "comments": ["comments"],
    "shares": ["shares", "reposts"],
    "views": ["views", "impressions"],
    "age_groups": ["primary age group", "age groups", "age group", "age range"],
    "gender_split": ["gender split", "gender distribution", "gender"],
    "timing": ["optimal posting time", "best time to post", "posting time", "timing"],
    "hashtags": ["recommended hashtags", "hashtags"],
    "content_tips": ["content quality", "content tips", "content"],
    "audience": ["target audience", "audience targeting", "audience"],
}

DEFAULT_QUALIFIERS = [
    "approximately",
    "approx.",
    "approx",
    "around",
    "about",
    "roughly",
    "nearly",
    "almost",
    "over",
    "estimated",
    "~",
]


class Vocabulary(BaseModel):
    """Synonym tables driving section isolation and field extraction."""

    sections: dict[Section, list[str]] = Field(
        default_factory=lambda: {k: list(v) for k, v in DEFAULT_SECTIONS.items()},
        description="Heading phrases per section"
    )
    fields: dict[str, list[str]] = Field(
        default_factory=lambda: {k: list(v) for k, v in DEFAULT_FIELDS.items()},
        description="Label phrases per canonical field"
    )
    qualifiers: list[str] = Field(
        default_factory=lambda: list(DEFAULT_QUALIFIERS),
        description="Hedging words removed before numbers are parsed"
    )
    count_order: list[str] = Field(
        default_factory=lambda: ["likes", "comments", "shares", "views"],
        description="Field order assumed by the positional fallback"
    )
    dedupe_lists: bool = Field(
        default=False,
        description="Drop repeated hashtags and age groups"
    )

    def labels_for(self, field_name: str) -> list[str]:
        return self.fields.get(field_name, [])

    def merged_with(self, overrides: dict) -> "Vocabulary":
        """Return a copy with ``overrides`` applied key by key."""
        data = self.model_dump(mode="json")
        for key, value in overrides.items():
            if key in ("sections", "fields") and isinstance(value, dict):
                data[key] = {**data[key], **value}
            else:
                data[key] = value
        return Vocabulary.model_validate(data)


DEFAULT_VOCABULARY = Vocabulary()


def load_vocabulary(path: Union[str, Path]) -> Vocabulary:
    """Load a vocabulary JSON file merged over the defaults."""
    path = Path(path)
    try:
        overrides = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        raise VocabularyError(f"Vocabulary file not found: {path}")
    except (OSError, json.JSONDecodeError) as e:
        raise VocabularyError(f"Could not read vocabulary file {path}: {e}")

    if not isinstance(overrides, dict):
        raise VocabularyError(f"Vocabulary file {path} must contain a JSON object")

    try:
        return DEFAULT_VOCABULARY.merged_with(overrides)
    except ValidationError as e:
        raise VocabularyError(f"Invalid vocabulary in {path}: {e}")
