from __future__ import annotations

import logging
import uuid
from typing import Callable, TypeVar

from .dates import now_millis
from .errors import StorageError, ValidationError
from .models import Category, WorkItem
from .storage import CATEGORIES, WORK_ITEMS, WorklogStore

logger = logging.getLogger(__name__)

CATEGORY_COLORS = (
    "#3b82f6",
    "#ef4444",
    "#10b981",
    "#eab308",
    "#8b5cf6",
    "#f97316",
    "#ec4899",
    "#6366f1",
)

T = TypeVar("T")


def new_id() -> str:
    return uuid.uuid4().hex


class WorklogState:
    """
    Owns the in-memory categories and work items.

    Every mutation is written through to the store. When the write fails the
    collection is restored to its last saved value and the StorageError is
    re-raised.
    """

    def __init__(
        self,
        store: WorklogStore,
        categories: list[Category],
        work_items: list[WorkItem],
        id_factory: Callable[[], str] = new_id,
    ):
        self._store = store
        self._categories = list(categories)
        self._work_items = list(work_items)
        self._new_id = id_factory

    @classmethod
    def load(cls, store: WorklogStore, id_factory: Callable[[], str] = new_id) -> WorklogState:
        categories = [Category.from_record(r) for r in store.load(CATEGORIES)]
        work_items = [WorkItem.from_record(r) for r in store.load(WORK_ITEMS)]
        logger.info("Loaded %d categories and %d work items", len(categories), len(work_items))
        return cls(store, categories, work_items, id_factory=id_factory)

    @property
    def categories(self) -> tuple[Category, ...]:
        return tuple(self._categories)

    @property
    def work_items(self) -> tuple[WorkItem, ...]:
        return tuple(self._work_items)

    def find_category(self, category_id: str) -> Category | None:
        for category in self._categories:
            if category.id == category_id:
                return category
        return None

    def default_category_id(self, current: str = "") -> str:
        if current and self.find_category(current) is not None:
            return current
        return self._categories[0].id if self._categories else ""

    def add_category(self, name: str, color: str) -> Category:
        name = (name or "").strip()
        if not name:
            raise ValidationError("Category name is required.")
        category = Category(id=self._new_id(), name=name, color=color)
        self._categories = self._commit_categories(self._categories + [category])
        logger.info("Added category %s (%s)", category.name, category.id)
        return category

    def delete_category(self, category_id: str) -> None:
        remaining = [c for c in self._categories if c.id != category_id]
        if len(remaining) == len(self._categories):
            return
        self._categories = self._commit_categories(remaining)
        logger.info("Deleted category %s", category_id)

    def add_work_item(
        self,
        case_id: str,
        description: str,
        category_id: str | None,
        now: int | None = None,
    ) -> WorkItem:
        description = (description or "").strip()
        if not description:
            raise ValidationError("Description is required.")
        if not category_id:
            raise ValidationError("Category is required.")
        item = WorkItem(
            id=self._new_id(),
            case_id=(case_id or "").strip(),
            description=description,
            category_id=category_id,
            timestamp=now if now is not None else now_millis(),
        )
        self._work_items = self._commit_work_items(self._work_items + [item])
        logger.info("Added work item %s in category %s", item.id, item.category_id)
        return item

    def delete_work_item(self, item_id: str) -> None:
        remaining = [i for i in self._work_items if i.id != item_id]
        if len(remaining) == len(self._work_items):
            return
        self._work_items = self._commit_work_items(remaining)
        logger.info("Deleted work item %s", item_id)

    def _commit_categories(self, updated: list[Category]) -> list[Category]:
        return self._commit(CATEGORIES, updated, self._categories)

    def _commit_work_items(self, updated: list[WorkItem]) -> list[WorkItem]:
        return self._commit(WORK_ITEMS, updated, self._work_items)

    def _commit(self, collection: str, updated: list[T], previous: list[T]) -> list[T]:
        try:
            self._store.save(collection, [record.to_record() for record in updated])
        except StorageError:
            logger.error("Write-through of %s failed; keeping %d saved record(s)", collection, len(previous))
            raise
        return updated
