"""Derived inventory views: dashboard summary and per-category catalog."""

from collections import Counter
from datetime import datetime, timedelta
from typing import Dict, Iterable, List, Sequence, Tuple


def _count(values: Iterable[str]) -> Dict[str, int]:
    return dict(Counter(values))


def top_counts(counts: Dict[str, int], limit: int = 6) -> List[Tuple[str, int]]:
    """Largest buckets first, ties broken by name."""
    return sorted(counts.items(), key=lambda kv: (-kv[1], kv[0]))[:limit]


def _location_counts(items: Sequence, location_names: Dict[int, str]) -> Dict[str, int]:
    return _count(
        location_names.get(it.holder_location_id, "Unknown")
        for it in items
        if it.holder_location_id is not None
    )


def summarize_inventory(
    items: Sequence,
    categories: Sequence,
    locations: Sequence,
    movements: Sequence,
    *,
    now: datetime,
    recent_days: int = 30,
) -> dict:
    category_names = {c.id: c.name for c in categories}
    location_names = {loc.id: loc.name for loc in locations}
    since = now - timedelta(days=recent_days)

    items_with_people = sum(1 for it in items if it.holder_organizer_id is not None)
    items_with_locations = sum(1 for it in items if it.holder_location_id is not None)
    unassigned = sum(
        1 for it in items if it.holder_location_id is None and it.holder_organizer_id is None
    )

    return {
        "total_items": len(items),
        "status_counts": _count(it.status for it in items),
        "category_counts": _count(category_names.get(it.category_id, "Unknown") for it in items),
        "location_counts": _location_counts(items, location_names),
        "recent_movements": sum(1 for m in movements if m.created_at and m.created_at > since),
        "recent_days": recent_days,
        "total_movements": len(movements),
        "movement_reasons": _count(m.reason for m in movements),
        "items_with_people": items_with_people,
        "items_with_locations": items_with_locations,
        "unassigned_items": unassigned,
    }


def build_catalog(items: Sequence, categories: Sequence, locations: Sequence) -> List[dict]:
    location_names = {loc.id: loc.name for loc in locations}
    by_category: Dict[int, list] = {}
    for it in items:
        by_category.setdefault(it.category_id, []).append(it)

    out = []
    for category in categories:
        category_items = by_category.get(category.id, [])
        if not category_items:
            continue
        out.append(
            {
                "category": category,
                "total_items": len(category_items),
                "location_counts": _location_counts(category_items, location_names),
                "status_counts": _count(it.status for it in category_items),
                "items_with_people": sum(
                    1 for it in category_items if it.holder_organizer_id is not None
                ),
                "items": category_items,
            }
        )
    return out
