"""Utility functions for insight processing."""

from .deduplication import dedupe_preserving_order
from .formatting import format_response

__all__ = ["dedupe_preserving_order", "format_response"]
