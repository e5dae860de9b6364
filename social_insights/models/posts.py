"""Pydantic models for post-level performance data."""

from collections import Counter, defaultdict
from typing import Optional

from pydantic import BaseModel, Field, field_validator


COUNT_FIELDS = ("likes", "comments", "shares", "views")


def _to_number(value) -> float:
    """Coerce a CSV cell to a number, treating blanks and junk as 0."""
    if value is None:
        return 0.0
    if isinstance(value, (int, float)):
        return float(value)
    text = str(value).strip().replace(",", "")
    if not text:
        return 0.0
    try:
        return float(text)
    except ValueError:
        return 0.0


class PostData(BaseModel):
    """Performance data for a single social media post."""

    likes: int = Field(default=0, ge=0, description="Number of likes")
    comments: int = Field(default=0, ge=0, description="Number of comments")
    shares: int = Field(default=0, ge=0, description="Number of shares")
    views: int = Field(default=0, ge=0, description="Number of views")
    engagement_rate: float = Field(
        default=0.0,
        description="Engagement rate in percent"
    )
    post_type: str = Field(default="", description="story, video, photo, carousel or reel")
    post_day: str = Field(default="", description="Weekday the post went out")
    primary_age_group: str = Field(default="", description="Most engaged age group")

    @field_validator("likes", "comments", "shares", "views", mode="before")
    @classmethod
    def coerce_count(cls, value) -> int:
        return max(int(round(_to_number(value))), 0)

    @field_validator("engagement_rate", mode="before")
    @classmethod
    def coerce_rate(cls, value) -> float:
        return _to_number(value)

    @field_validator("post_type", "post_day", "primary_age_group", mode="before")
    @classmethod
    def coerce_label(cls, value) -> str:
        return "" if value is None else str(value).strip()


class PostCollection(BaseModel):
    """A batch of posts plus the aggregates shown on the dashboard."""

    posts: list[PostData] = Field(
        default_factory=list,
        description="Posts in load order"
    )
    source: Optional[str] = Field(
        default=None,
        description="Where the posts were loaded from"
    )

    @property
    def total_posts(self) -> int:
        return len(self.posts)

    @property
    def totals(self) -> dict[str, int]:
        """Sum of each count field."""
        return {name: sum(getattr(p, name) for p in self.posts) for name in COUNT_FIELDS}

    @property
    def averages(self) -> dict[str, float]:
        """Mean of each count field, 0 for an empty collection."""
        if not self.posts:
            return {name: 0.0 for name in COUNT_FIELDS}
        return {
            name: round(total / len(self.posts), 2)
            for name, total in self.totals.items()
        }

    @property
    def average_engagement(self) -> float:
        if not self.posts:
            return 0.0
        return round(sum(p.engagement_rate for p in self.posts) / len(self.posts), 2)

    @property
    def post_type_distribution(self) -> dict[str, int]:
        return dict(Counter(p.post_type for p in self.posts if p.post_type))

    @property
    def age_group_distribution(self) -> dict[str, int]:
        return dict(Counter(p.primary_age_group for p in self.posts if p.primary_age_group))

    @property
    def engagement_by_type(self) -> dict[str, float]:
        return self._mean_engagement_by("post_type")

    @property
    def engagement_by_day(self) -> dict[str, float]:
        return self._mean_engagement_by("post_day")

    def _mean_engagement_by(self, attribute: str) -> dict[str, float]:
        groups: dict[str, list[float]] = defaultdict(list)
        for post in self.posts:
            key = getattr(post, attribute)
            if key:
                groups[key].append(post.engagement_rate)
        return {key: round(sum(rates) / len(rates), 2) for key, rates in groups.items()}

    def summary(self) -> dict:
        """Aggregates in a JSON-ready dict, sent to the workflow with each question."""
        return {
            "total_posts": self.total_posts,
            "totals": self.totals,
            "averages": self.averages,
            "average_engagement_rate": self.average_engagement,
            "post_types": self.post_type_distribution,
            "engagement_by_type": self.engagement_by_type,
            "engagement_by_day": self.engagement_by_day,
            "age_groups": self.age_group_distribution,
        }
