"""Pydantic models for the structured insight record."""

import re

from pydantic import BaseModel, Field, field_validator
from pydantic.alias_generators import to_camel


COUNT_RE = re.compile(r"^\d+$")
PERCENT_RE = re.compile(r"^\d+(?:\.\d)?%$")
HASHTAG_RE = re.compile(r"^#\w+$")

RECORD_CONFIG = {"alias_generator": to_camel, "populate_by_name": True}


def _check_count(value: str) -> str:
    if not COUNT_RE.match(value):
        raise ValueError(f"count must be a plain digit string, got {value!r}")
    return value


class Metrics(BaseModel):
    """Observed performance metrics."""

    model_config = RECORD_CONFIG

    engagement_rate: str = Field(
        default="0%",
        description="Average engagement rate, e.g. '4.5%'"
    )
    likes: str = Field(default="0", description="Average likes per post")
    shares: str = Field(default="0", description="Average shares per post")
    comments: str = Field(default="0", description="Average comments per post")
    views: str = Field(default="0", description="Average views per post")
    age_groups: list[str] = Field(
        default_factory=list,
        description="Most engaged age groups, in order of mention"
    )
    gender_split: str = Field(
        default="",
        description="Free-text gender distribution"
    )

    @field_validator("likes", "shares", "comments", "views")
    @classmethod
    def validate_count(cls, value: str) -> str:
        return _check_count(value)

    @field_validator("engagement_rate")
    @classmethod
    def validate_percentage(cls, value: str) -> str:
        if not PERCENT_RE.match(value):
            raise ValueError(f"engagement rate must look like '4.5%', got {value!r}")
        return value


class Predictions(BaseModel):
    """Expected performance of the next post."""

    model_config = RECORD_CONFIG

    likes: str = Field(default="0", description="Expected likes")
    shares: str = Field(default="0", description="Expected shares")
    comments: str = Field(default="0", description="Expected comments")
    views: str = Field(default="0", description="Expected views")

    @field_validator("likes", "shares", "comments", "views")
    @classmethod
    def validate_count(cls, value: str) -> str:
        return _check_count(value)


class Recommendations(BaseModel):
    """Actionable suggestions."""

    model_config = RECORD_CONFIG

    timing: str = Field(default="", description="Best time to post")
    hashtags: list[str] = Field(
        default_factory=list,
        description="Recommended hashtags, each '#' followed by word characters"
    )
    content_tips: str = Field(default="", description="Content quality advice")
    audience: str = Field(default="", description="Audience targeting advice")

    @field_validator("hashtags")
    @classmethod
    def validate_hashtags(cls, value: list[str]) -> list[str]:
        for tag in value:
            if not HASHTAG_RE.match(tag):
                raise ValueError(f"not a hashtag: {tag!r}")
        return value


class InsightRecord(BaseModel):
    """Structured view of one AI answer.

    Every field is always present. ``InsightRecord()`` is the zero value
    returned for input that carries no recognizable structure.
    """

    model_config = RECORD_CONFIG

    metrics: Metrics = Field(default_factory=Metrics)
    format_insights: list[str] = Field(
        default_factory=list,
        description="Bullet points about content format performance"
    )
    predictions: Predictions = Field(default_factory=Predictions)
    recommendations: Recommendations = Field(default_factory=Recommendations)
    analysis: str = Field(default="", description="Free-text explanation")

    @property
    def populated_fields(self) -> list[str]:
        """Dotted names of fields that differ from their default."""
        populated = []
        zero = InsightRecord()
        for name in ("metrics", "predictions", "recommendations"):
            part = getattr(self, name)
            default_part = getattr(zero, name)
            for field_name in type(part).model_fields:
                if getattr(part, field_name) != getattr(default_part, field_name):
                    populated.append(f"{name}.{field_name}")
        if self.format_insights:
            populated.append("format_insights")
        if self.analysis:
            populated.append("analysis")
        return populated

    @property
    def is_empty(self) -> bool:
        """True when nothing was extracted."""
        return not self.populated_fields

    def to_display_dict(self) -> dict:
        """Serialize with the camelCase names the display layer expects."""
        return self.model_dump(by_alias=True)
