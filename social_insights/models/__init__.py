"""Pydantic models for post data and extracted insights."""

from .insights import (
    Metrics,
    Predictions,
    Recommendations,
    InsightRecord,
)
from .posts import (
    PostData,
    PostCollection,
)

__all__ = [
    # Insight models
    "Metrics",
    "Predictions",
    "Recommendations",
    "InsightRecord",
    # Post models
    "PostData",
    "PostCollection",
]
