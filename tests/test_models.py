"""Tests for Pydantic models."""

import pytest
from pydantic import ValidationError

from social_insights.models import (
    InsightRecord,
    Metrics,
    PostCollection,
    PostData,
    Predictions,
    Recommendations,
)


class TestInsightModels:
    """Test insight record models."""

    def test_default_record(self):
        """Test the zero record."""
        record = InsightRecord()

        assert record.metrics.engagement_rate == "0%"
        assert record.metrics.likes == "0"
        assert record.metrics.age_groups == []
        assert record.metrics.gender_split == ""
        assert record.format_insights == []
        assert record.predictions.views == "0"
        assert record.recommendations.hashtags == []
        assert record.analysis == ""
        assert record.is_empty

    def test_display_dict_uses_camel_case(self):
        """Test serialized key names."""
        record = InsightRecord(
            metrics=Metrics(engagement_rate="4.5%", age_groups=["18-24"]),
            recommendations=Recommendations(content_tips="Use hooks"),
        )
        data = record.to_display_dict()

        assert data["metrics"]["engagementRate"] == "4.5%"
        assert data["metrics"]["ageGroups"] == ["18-24"]
        assert data["recommendations"]["contentTips"] == "Use hooks"
        assert data["formatInsights"] == []

    def test_populate_by_alias(self):
        """Test building from camelCase input."""
        metrics = Metrics.model_validate({"engagementRate": "3%", "genderSplit": "even"})

        assert metrics.engagement_rate == "3%"
        assert metrics.gender_split == "even"

    def test_populated_fields(self):
        """Test listing fields that differ from their defaults."""
        record = InsightRecord(
            predictions=Predictions(likes="100"),
            analysis="Reels win",
        )

        assert record.populated_fields == ["predictions.likes", "analysis"]
        assert not record.is_empty

    @pytest.mark.parametrize("value", ["12,345", "1.2k", "-5", "", "about 10"])
    def test_count_must_be_digits(self, value):
        """Test count validation."""
        with pytest.raises(ValidationError):
            Metrics(likes=value)

    @pytest.mark.parametrize("value", ["4.50%", "4.5", "%", "4.5 %"])
    def test_percentage_format(self, value):
        """Test engagement rate validation."""
        with pytest.raises(ValidationError):
            Metrics(engagement_rate=value)

    def test_hashtag_format(self):
        """Test hashtag validation."""
        assert Recommendations(hashtags=["#ok", "#Fine_1"]).hashtags == ["#ok", "#Fine_1"]
        with pytest.raises(ValidationError):
            Recommendations(hashtags=["missing-hash"])


class TestPostModels:
    """Test post data models."""

    def test_post_coercion(self):
        """Test that CSV-style strings become numbers."""
        post = PostData(
            likes="1,200",
            comments=" 30 ",
            shares="",
            views="n/a",
            engagement_rate="4.5",
            post_type=" reel ",
        )

        assert post.likes == 1200
        assert post.comments == 30
        assert post.shares == 0
        assert post.views == 0
        assert post.engagement_rate == 4.5
        assert post.post_type == "reel"

    def test_negative_counts_clamped(self):
        """Test that counts never go below zero."""
        assert PostData(likes=-4).likes == 0

    def test_collection_aggregates(self):
        """Test dashboard aggregates."""
        collection = PostCollection(posts=[
            PostData(likes=100, views=1000, engagement_rate=4.0, post_type="reel", post_day="Saturday"),
            PostData(likes=50, views=500, engagement_rate=2.0, post_type="photo", post_day="Monday"),
            PostData(likes=30, views=300, engagement_rate=3.0, post_type="reel", post_day="Saturday",
                     primary_age_group="18-24"),
        ])

        assert collection.total_posts == 3
        assert collection.totals["likes"] == 180
        assert collection.averages["likes"] == 60.0
        assert collection.average_engagement == 3.0
        assert collection.post_type_distribution == {"reel": 2, "photo": 1}
        assert collection.engagement_by_type == {"reel": 3.5, "photo": 2.0}
        assert collection.engagement_by_day == {"Saturday": 3.5, "Monday": 2.0}
        assert collection.age_group_distribution == {"18-24": 1}

    def test_empty_collection(self):
        """Test aggregates over no posts."""
        collection = PostCollection()
        summary = collection.summary()

        assert summary["total_posts"] == 0
        assert summary["averages"]["views"] == 0.0
        assert summary["average_engagement_rate"] == 0.0
        assert summary["post_types"] == {}
