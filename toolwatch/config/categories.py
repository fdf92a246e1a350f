"""Canonical category ordering for the exported catalog.

Every place that groups tools by category reads this table, so the data
file and the rendered listing can never disagree on order. Tools whose
category tag is missing or not listed here fall into ``OTHER_CATEGORY``,
which always sorts last.
"""

from __future__ import annotations

# Tag dimension that carries a tool's category
CATEGORY_TAG_KEY = "category"

# Trailing bucket for uncategorized tools
OTHER_CATEGORY = "Other"

CATEGORY_ORDER: tuple[str, ...] = (
    "AI",
    "Design",
    "Writing",
    "Development",
    "Productivity",
    "Media",
    "Privacy",
    "Data",
    "Communication",
    "Education",
    "Finance",
)


def category_bucket(category: str | None) -> str:
    """Map a raw category tag value to its listing bucket."""
    if category in CATEGORY_ORDER:
        return category
    return OTHER_CATEGORY


def ordered_buckets(present: set[str]) -> list[str]:
    """Return the buckets in ``present`` in canonical order, Other last."""
    ordered = [c for c in CATEGORY_ORDER if c in present]
    if OTHER_CATEGORY in present:
        ordered.append(OTHER_CATEGORY)
    return ordered
