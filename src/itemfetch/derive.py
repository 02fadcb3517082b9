"""Pure helpers that turn an item list into the displayed view.

All functions accept :class:`~itemfetch.models.Item` objects, return new
lists and preserve input order unless they sort explicitly.
"""

from __future__ import annotations

from typing import Iterable, Optional

from itemfetch.models import Item, ItemSummary


def filter_active_items(items: Iterable[Item], min_score: Optional[float] = None) -> list[Item]:
    """Keep active items, and when *min_score* is given only those scoring above it."""
    kept = []
    for item in items:
        if not item.active:
            continue
        if min_score is not None and (item.score is None or item.score <= min_score):
            continue
        kept.append(item)
    return kept


def sort_by_score_desc(items: Iterable[Item]) -> list[Item]:
    """Highest score first; unscored items last. Ties keep input order."""
    return sorted(
        items,
        key=lambda item: (item.score is None, -(item.score or 0)),
    )


def format_item_name(item: Item) -> str:
    name = item.name.lower()
    if item.score is None:
        return name
    score = int(item.score) if float(item.score).is_integer() else item.score
    return f"{name}-{score}"


def format_item_names(items: Iterable[Item]) -> list[str]:
    """Display strings such as ``"alpha-10"``."""
    return [format_item_name(item) for item in items]


def summarize(items: Iterable[Item]) -> ItemSummary:
    items = list(items)
    scores = [item.score for item in items if item.score is not None]
    return ItemSummary(
        total=len(items),
        active_count=sum(1 for item in items if item.active),
        max_score=max(scores) if scores else None,
    )
