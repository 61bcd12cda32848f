"""In-memory backlog store with validation."""

import itertools
import logging
from datetime import datetime, timezone
from typing import Any, Iterable, Mapping, Optional

from .errors import NotFoundError
from .models import (
    PRIORITY_CHOICES,
    STATUS_CHOICES,
    BacklogItem,
    BacklogStats,
    ItemPatch,
    Priority,
    Status,
    normalize_priority,
    normalize_status,
    normalize_title,
)

logger = logging.getLogger(__name__)


# (id, title, priority, status) loaded into the application's store
SEED_ITEMS: list[tuple[int, str, Priority, Status]] = [
    (1, "Setup CI/CD pipeline", Priority.HIGH, Status.TODO),
    (2, "Add authentication", Priority.MEDIUM, Status.IN_PROGRESS),
    (3, "Write documentation", Priority.LOW, Status.DONE),
]


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _coerce_id(item_id: Any) -> Optional[int]:
    """Convert an id given as int or string to int; None if it is not numeric."""
    if isinstance(item_id, bool):
        return None
    if isinstance(item_id, int):
        return item_id
    text = str(item_id).strip()
    if not (text.isascii() and text.isdigit()):
        return None
    return int(text)


def seed_items() -> list[BacklogItem]:
    """Build the default seed items, stamped with the current time."""
    created = _now()
    return [
        BacklogItem(id=item_id, title=title, priority=priority, status=status, created_at=created)
        for item_id, title, priority, status in SEED_ITEMS
    ]


class BacklogStore:
    """
    Keyed collection of backlog items.

    Items keep insertion order. Ids come from a counter that starts above the
    highest seeded id and only moves forward, so deleted ids are never reused.
    """

    def __init__(self, items: Optional[Iterable[BacklogItem]] = None):
        self._items: dict[int, BacklogItem] = {}
        for item in items or []:
            self._items[item.id] = item
        self._ids = itertools.count(max(self._items, default=0) + 1)

    def list_all(self) -> list[BacklogItem]:
        return list(self._items.values())

    def _lookup_key(self, item_id: Any) -> int:
        key = _coerce_id(item_id)
        if key is None or key not in self._items:
            raise NotFoundError("Item not found")
        return key

    def get_by_id(self, item_id: Any) -> BacklogItem:
        return self._items[self._lookup_key(item_id)]

    def create(self, title: Any, priority: Any) -> BacklogItem:
        """Validate and append a new item with status ``todo``."""
        clean_title = normalize_title(title, "Title is required and must be a non-empty string")
        clean_priority = normalize_priority(
            priority, f"Priority is required and must be one of: {PRIORITY_CHOICES}"
        )

        item = BacklogItem(
            id=next(self._ids),
            title=clean_title,
            priority=clean_priority,
            status=Status.TODO,
            created_at=_now(),
        )
        self._items[item.id] = item
        logger.info(f"Created backlog item {item.id}: {item.title!r}")
        return item

    def update(self, item_id: Any, patch: ItemPatch | Mapping[str, Any]) -> BacklogItem:
        """
        Merge a partial update into an existing item.

        Args:
            item_id: Id of the item to update
            patch: An ItemPatch, or a raw mapping validated with ItemPatch.from_payload

        Returns:
            The updated item
        """
        key = self._lookup_key(item_id)
        if not isinstance(patch, ItemPatch):
            patch = ItemPatch.from_payload(patch)

        changes = patch.changes()
        changes["updated_at"] = _now()
        updated = self._items[key].model_copy(update=changes)
        self._items[key] = updated
        logger.info(f"Updated backlog item {key}: {sorted(changes)}")
        return updated

    def delete(self, item_id: Any) -> BacklogItem:
        key = self._lookup_key(item_id)
        item = self._items.pop(key)
        logger.info(f"Deleted backlog item {key}")
        return item

    def filter_by_status(self, status: Any) -> list[BacklogItem]:
        wanted = normalize_status(status, f"Invalid status. Must be one of: {STATUS_CHOICES}")
        return [item for item in self._items.values() if item.status == wanted]

    def filter_by_priority(self, priority: Any) -> list[BacklogItem]:
        wanted = normalize_priority(priority, f"Invalid priority. Must be one of: {PRIORITY_CHOICES}")
        return [item for item in self._items.values() if item.priority == wanted]

    def stats(self) -> BacklogStats:
        stats = BacklogStats()
        for item in self._items.values():
            stats.total += 1
            stats.by_status[item.status.value] += 1
            stats.by_priority[item.priority.value] += 1
        return stats
