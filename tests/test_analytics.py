import uuid
from datetime import datetime, timedelta
from types import SimpleNamespace

from core.analytics import build_catalog, summarize_inventory, top_counts

NOW = datetime(2026, 10, 16, 12, 0, 0)
PERSON = uuid.uuid4()


def item(category_id, status="active", location_id=None, organizer_id=None):
    return SimpleNamespace(
        id=uuid.uuid4(),
        category_id=category_id,
        status=status,
        holder_location_id=location_id,
        holder_organizer_id=organizer_id,
    )


def movement(reason, days_ago):
    return SimpleNamespace(reason=reason, created_at=NOW - timedelta(days=days_ago))


CATEGORIES = [SimpleNamespace(id=1, name="Laptops"), SimpleNamespace(id=2, name="Cables"), SimpleNamespace(id=3, name="Empty")]
LOCATIONS = [SimpleNamespace(id=10, name="Storage"), SimpleNamespace(id=20, name="Desk")]
ITEMS = [
    item(1, location_id=10),
    item(1, status="checked_out", location_id=10, organizer_id=PERSON),
    item(1, status="checked_out", organizer_id=PERSON),
    item(2, location_id=20),
    item(2, status="lost"),
    item(99, location_id=77),
]
MOVEMENTS = [
    movement("checkout", 1),
    movement("checkout", 5),
    movement("transfer", 29),
    movement("return", 45),
]


class TestSummarizeInventory:
    def setup_method(self):
        self.summary = summarize_inventory(ITEMS, CATEGORIES, LOCATIONS, MOVEMENTS, now=NOW)

    def test_totals(self):
        assert self.summary["total_items"] == 6
        assert self.summary["total_movements"] == 4

    def test_status_counts(self):
        assert self.summary["status_counts"] == {"active": 3, "checked_out": 2, "lost": 1}

    def test_category_counts_use_unknown_for_dangling_ids(self):
        assert self.summary["category_counts"] == {"Laptops": 3, "Cables": 2, "Unknown": 1}

    def test_location_counts_only_count_located_items(self):
        assert self.summary["location_counts"] == {"Storage": 2, "Desk": 1, "Unknown": 1}

    def test_recent_movements_window(self):
        assert self.summary["recent_movements"] == 3
        narrow = summarize_inventory(ITEMS, CATEGORIES, LOCATIONS, MOVEMENTS, now=NOW, recent_days=2)
        assert narrow["recent_movements"] == 1

    def test_movement_reasons(self):
        assert self.summary["movement_reasons"] == {"checkout": 2, "transfer": 1, "return": 1}

    def test_holder_breakdown(self):
        assert self.summary["items_with_people"] == 2
        assert self.summary["items_with_locations"] == 4
        assert self.summary["unassigned_items"] == 1

    def test_empty_inventory(self):
        summary = summarize_inventory([], [], [], [], now=NOW)
        assert summary["total_items"] == 0
        assert summary["status_counts"] == {}
        assert summary["unassigned_items"] == 0


class TestBuildCatalog:
    def test_skips_categories_without_items(self):
        catalog = build_catalog(ITEMS, CATEGORIES, LOCATIONS)
        assert [entry["category"].name for entry in catalog] == ["Laptops", "Cables"]

    def test_category_breakdown(self):
        laptops = build_catalog(ITEMS, CATEGORIES, LOCATIONS)[0]
        assert laptops["total_items"] == 3
        assert laptops["location_counts"] == {"Storage": 2}
        assert laptops["status_counts"] == {"active": 1, "checked_out": 2}
        assert laptops["items_with_people"] == 2
        assert len(laptops["items"]) == 3


def test_top_counts_orders_by_count_then_name():
    counts = {"b": 2, "a": 2, "c": 5, "d": 1}
    assert top_counts(counts) == [("c", 5), ("a", 2), ("b", 2), ("d", 1)]
    assert top_counts(counts, limit=2) == [("c", 5), ("a", 2)]
