"""
In-memory repository.

Dict-backed implementation of MasteryRepository for tests and offline use.
Stored records are copied on the way in and out, so callers never share
mutable state with the store.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import replace
from datetime import datetime

from loguru import logger

from vocab_mastery.core.errors import ConcurrentUpdate, NotFound
from vocab_mastery.core.models import MasteryRecord, VocabularyItem

from .repository import ItemFilter


class InMemoryMasteryRepository:
    """MasteryRepository held in process memory."""

    def __init__(self, items: Iterable[VocabularyItem] = ()):
        self._items: dict[str, VocabularyItem] = {item.id: item for item in items}
        self._records: dict[tuple[str, str], MasteryRecord] = {}

    async def get_item(self, item_id: str) -> VocabularyItem:
        try:
            return self._items[item_id]
        except KeyError:
            raise NotFound("VocabularyItem", item_id) from None

    async def list_items(self, item_filter: ItemFilter | None = None) -> list[VocabularyItem]:
        items = sorted(self._items.values(), key=lambda i: i.id)
        if item_filter is None:
            return items
        return [item for item in items if item_filter.matches(item)]

    async def add_items(self, items: Iterable[VocabularyItem]) -> int:
        count = 0
        for item in items:
            self._items[item.id] = item
            count += 1
        return count

    async def get_mastery_record(self, learner_id: str, item_id: str) -> MasteryRecord | None:
        record = self._records.get((learner_id, item_id))
        return replace(record) if record else None

    async def upsert_mastery_record(
        self, record: MasteryRecord, expected_version: int
    ) -> MasteryRecord:
        key = (record.learner_id, record.item_id)
        current = self._records.get(key)
        current_version = current.version if current else 0

        if current_version != expected_version:
            logger.warning(
                f"Version conflict on {key}: stored={current_version}, expected={expected_version}"
            )
            raise ConcurrentUpdate(record.learner_id, record.item_id, expected_version)

        stored = replace(record, version=expected_version + 1)
        self._records[key] = stored
        return replace(stored)

    async def list_due_records(self, learner_id: str, now: datetime) -> list[MasteryRecord]:
        due = [
            replace(record)
            for (learner, _), record in self._records.items()
            if learner == learner_id and record.is_due(now)
        ]
        due.sort(key=lambda r: (r.next_due, r.id))
        return due

    async def list_records(self, learner_id: str) -> list[MasteryRecord]:
        records = [
            replace(record)
            for (learner, _), record in self._records.items()
            if learner == learner_id
        ]
        records.sort(key=lambda r: r.item_id)
        return records
