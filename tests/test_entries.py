from __future__ import annotations

import itertools
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from worklog.aggregation import chart_buckets, daily_items, group_counts
from worklog.dates import now_millis, week_range
from worklog.entries import WorklogState
from worklog.errors import StorageError, ValidationError
from worklog.models import WorkItem
from worklog.storage import CATEGORIES, WORK_ITEMS, WorklogStore


def _counter_ids():
    counter = itertools.count(1)
    return lambda: f"id-{next(counter)}"


class EntryLifecycleTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.store = WorklogStore(Path(self._tmp.name) / "worklog.sqlite3")
        self.state = WorklogState.load(self.store, id_factory=_counter_ids())

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def test_add_category_assigns_id_and_persists(self) -> None:
        category = self.state.add_category("  Maintenance ", "#8b5cf6")
        self.assertEqual(category.id, "id-1")
        self.assertEqual(category.name, "Maintenance")
        self.assertEqual(self.state.categories[-1], category)
        stored = self.store.load(CATEGORIES)
        self.assertEqual(stored[-1], {"id": "id-1", "name": "Maintenance", "color": "#8b5cf6"})
        self.assertEqual(len(stored), 5)

    def test_blank_category_name_rejected(self) -> None:
        with self.assertRaises(ValidationError):
            self.state.add_category("   ", "#3b82f6")
        self.assertEqual(len(self.state.categories), 4)

    def test_add_work_item(self) -> None:
        item = self.state.add_work_item(" CASE-7 ", " Fixed login bug ", "1", now=1_700_000_000_000)
        self.assertEqual(
            item,
            WorkItem(id="id-1", case_id="CASE-7", description="Fixed login bug", category_id="1", timestamp=1_700_000_000_000),
        )
        self.assertEqual(self.store.load(WORK_ITEMS), [item.to_record()])

    def test_case_id_is_optional(self) -> None:
        item = self.state.add_work_item("", "Reviewed PR", "2", now=5)
        self.assertEqual(item.case_id, "")

    def test_timestamp_defaults_to_now(self) -> None:
        before = now_millis()
        item = self.state.add_work_item("", "Standup", "2")
        self.assertLessEqual(before, item.timestamp)
        self.assertLessEqual(item.timestamp, now_millis())

    def test_empty_description_leaves_store_unchanged(self) -> None:
        self.state.add_work_item("A", "Existing", "1", now=1)
        before = self.store.load(WORK_ITEMS)
        for description in ("", "   ", None):
            with self.assertRaises(ValidationError):
                self.state.add_work_item("B", description, "1", now=2)
        self.assertEqual(self.store.load(WORK_ITEMS), before)
        self.assertEqual(len(self.state.work_items), 1)

    def test_missing_category_rejected(self) -> None:
        for category_id in ("", None):
            with self.assertRaises(ValidationError):
                self.state.add_work_item("A", "Something", category_id, now=1)
        self.assertEqual(self.state.work_items, ())

    def test_delete_unknown_ids_is_noop(self) -> None:
        self.state.add_work_item("A", "Existing", "1", now=1)
        categories_before = self.state.categories
        items_before = self.state.work_items
        with patch.object(self.store, "save") as save:
            self.state.delete_category("missing")
            self.state.delete_work_item("missing")
            save.assert_not_called()
        self.assertEqual(self.state.categories, categories_before)
        self.assertEqual(self.state.work_items, items_before)

    def test_delete_work_item(self) -> None:
        first = self.state.add_work_item("A", "One", "1", now=1)
        second = self.state.add_work_item("B", "Two", "1", now=2)
        self.state.delete_work_item(first.id)
        self.assertEqual(self.state.work_items, (second,))
        self.assertEqual(self.store.load(WORK_ITEMS), [second.to_record()])

    def test_ids_are_not_reused(self) -> None:
        state = WorklogState.load(self.store)
        first = state.add_work_item("", "One", "1", now=1)
        state.delete_work_item(first.id)
        second = state.add_work_item("", "Two", "1", now=2)
        self.assertNotEqual(first.id, second.id)

    def test_failed_write_rolls_back(self) -> None:
        self.state.add_work_item("A", "Kept", "1", now=1)
        items_before = self.state.work_items
        categories_before = self.state.categories
        with patch.object(self.store, "save", side_effect=StorageError("disk full")):
            with self.assertRaises(StorageError):
                self.state.add_work_item("B", "Lost", "1", now=2)
            with self.assertRaises(StorageError):
                self.state.delete_work_item(items_before[0].id)
            with self.assertRaises(StorageError):
                self.state.add_category("Ops", "#000000")
            with self.assertRaises(StorageError):
                self.state.delete_category("1")
        self.assertEqual(self.state.work_items, items_before)
        self.assertEqual(self.state.categories, categories_before)

    def test_default_category_selection(self) -> None:
        self.assertEqual(self.state.default_category_id(), "1")
        self.assertEqual(self.state.default_category_id("3"), "3")
        self.assertEqual(self.state.default_category_id("gone"), "1")
        for category in self.state.categories:
            self.state.delete_category(category.id)
        self.assertEqual(self.state.default_category_id("1"), "")

    def test_load_rejects_malformed_records(self) -> None:
        self.store.save(WORK_ITEMS, [{"id": "x", "description": "no category"}])
        with self.assertRaises(StorageError):
            WorklogState.load(self.store)

    def test_load_rejects_null_fields(self) -> None:
        valid = {"id": "x", "caseId": "", "description": "d", "categoryId": "1", "timestamp": 1}
        for key in ("id", "description", "categoryId", "timestamp"):
            with self.subTest(key=key):
                self.store.save(WORK_ITEMS, [dict(valid, **{key: None})])
                with self.assertRaises(StorageError):
                    WorklogState.load(self.store)

    def test_load_rejects_non_string_fields(self) -> None:
        self.store.save(WORK_ITEMS, [{"id": "x", "description": "d", "categoryId": 1, "timestamp": 1}])
        with self.assertRaises(StorageError):
            WorklogState.load(self.store)

        self.store.save(WORK_ITEMS, [])
        self.store.save(CATEGORIES, [{"id": "1", "name": None, "color": "#3b82f6"}])
        with self.assertRaises(StorageError):
            WorklogState.load(self.store)

    def test_load_accepts_null_case_id(self) -> None:
        self.store.save(WORK_ITEMS, [{"id": "x", "caseId": None, "description": "d", "categoryId": "1", "timestamp": 1}])
        state = WorklogState.load(self.store)
        self.assertEqual(state.work_items[0].case_id, "")


class WeeklyScenarioTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.store = WorklogStore(Path(self._tmp.name) / "worklog.sqlite3")
        self.state = WorklogState.load(self.store)

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def _weekly_buckets(self):
        window = week_range(0)
        return chart_buckets(group_counts(self.state.work_items, window), self.state.categories)

    def test_logged_item_shows_in_daily_and_weekly_views(self) -> None:
        names = [c.name for c in self.state.categories]
        self.assertEqual(names, ["Development", "Meetings", "Support", "Research"])
        development = self.state.categories[0]

        self.state.add_work_item("CASE-1", "Built the report page", development.id)

        self.assertEqual(len(daily_items(self.state.work_items)), 1)
        buckets = self._weekly_buckets()
        self.assertEqual([(b.name, b.count) for b in buckets], [("Development", 1)])

    def test_deleted_category_degrades_to_unknown(self) -> None:
        development = self.state.categories[0]
        item = self.state.add_work_item("CASE-1", "Built the report page", development.id)

        self.state.delete_category(development.id)

        reloaded = WorklogState.load(self.store)
        self.assertEqual(reloaded.work_items, (item,))
        self.assertEqual(reloaded.work_items[0].category_id, development.id)
        self.assertNotIn(development.id, [c.id for c in reloaded.categories])

        buckets = self._weekly_buckets()
        self.assertEqual([(b.name, b.count) for b in buckets], [("Unknown", 1)])
        self.assertTrue(buckets[0].orphaned)


if __name__ == "__main__":
    unittest.main()
