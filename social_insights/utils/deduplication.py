"""Deduplication utilities for extracted list fields."""

from typing import Iterable


def normalize_key(text: str) -> str:
    """Comparison key: case-insensitive with whitespace collapsed."""
    return " ".join(text.lower().split())


def dedupe_preserving_order(items: Iterable[str]) -> list[str]:
    """
    Drop repeated entries, keeping the first spelling seen.

    '#SummerVibes' and '#summervibes' count as the same entry, as do
    '18-24' and '18-24 ' after whitespace is collapsed.

    Args:
        items: Entries in order of appearance

    Returns:
        Entries with later repeats removed
    """
    seen: set[str] = set()
    unique: list[str] = []
    for item in items:
        key = normalize_key(item)
        if key in seen:
            continue
        seen.add(key)
        unique.append(item)
    return unique
