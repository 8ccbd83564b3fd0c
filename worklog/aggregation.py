from __future__ import annotations

from collections import Counter
from typing import Iterable, Mapping, Sequence

from .dates import Moment, day_range, format_date
from .models import Category, ChartBucket, WorkItem, Window

UNKNOWN_LABEL = "Unknown"
NEUTRAL_COLOR = "#94a3b8"


def items_in_window(items: Iterable[WorkItem], window: Window) -> list[WorkItem]:
    return [item for item in items if window.contains(item.timestamp)]


def daily_items(items: Iterable[WorkItem], now: Moment = None) -> list[WorkItem]:
    today = items_in_window(items, day_range(now))
    return sorted(today, key=lambda item: item.timestamp, reverse=True)


def group_counts(items: Iterable[WorkItem], window: Window) -> dict[str, int]:
    return dict(Counter(item.category_id for item in items_in_window(items, window)))


def chart_buckets(
    counts: Mapping[str, int],
    categories: Sequence[Category],
) -> list[ChartBucket]:
    by_id = {category.id: category for category in categories}
    buckets: list[ChartBucket] = []
    for category_id, count in counts.items():
        category = by_id.get(category_id)
        if category is None:
            buckets.append(
                ChartBucket(
                    category_id=category_id,
                    name=UNKNOWN_LABEL,
                    color=NEUTRAL_COLOR,
                    count=count,
                    orphaned=True,
                )
            )
            continue
        buckets.append(
            ChartBucket(
                category_id=category_id,
                name=category.name,
                color=category.color,
                count=count,
            )
        )
    return buckets


def category_name(categories: Sequence[Category], category_id: str) -> str:
    for category in categories:
        if category.id == category_id:
            return category.name
    return UNKNOWN_LABEL


def category_color(categories: Sequence[Category], category_id: str) -> str:
    for category in categories:
        if category.id == category_id:
            return category.color
    return NEUTRAL_COLOR


def log_rows(items: Iterable[WorkItem], categories: Sequence[Category]) -> list[tuple[str, str, str, str]]:
    """Date, case id, category and description for each item, in stored order."""
    return [
        (
            format_date(item.timestamp),
            item.case_id,
            category_name(categories, item.category_id),
            item.description,
        )
        for item in items
    ]
