"""
Abstract repository consumed by the engine.

Persistence is an external collaborator; the engine only depends on this
protocol. Implementations must honour the optimistic-concurrency contract of
upsert_mastery_record: the write succeeds only if the stored version still
equals expected_version, otherwise ConcurrentUpdate is raised and nothing is
written.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime
from typing import Protocol

from vocab_mastery.core.models import MasteryRecord, VocabularyItem


@dataclass(frozen=True)
class ItemFilter:
    """Optional narrowing for list_items."""

    tags: frozenset[str] | None = None  # any-of match
    item_ids: frozenset[str] | None = None

    def matches(self, item: VocabularyItem) -> bool:
        if self.item_ids is not None and item.id not in self.item_ids:
            return False
        if self.tags is not None and item.tags.isdisjoint(self.tags):
            return False
        return True


class MasteryRepository(Protocol):
    """Storage operations used by the mastery engine."""

    async def get_item(self, item_id: str) -> VocabularyItem:
        """Return the item or raise NotFound."""
        ...

    async def list_items(self, item_filter: ItemFilter | None = None) -> list[VocabularyItem]:
        """Return items, optionally filtered, ordered by id."""
        ...

    async def add_items(self, items: Iterable[VocabularyItem]) -> int:
        """Insert or replace content items. Returns the number written."""
        ...

    async def get_mastery_record(self, learner_id: str, item_id: str) -> MasteryRecord | None:
        """Return the record for (learner, item), or None if never answered."""
        ...

    async def upsert_mastery_record(
        self, record: MasteryRecord, expected_version: int
    ) -> MasteryRecord:
        """
        Write a record atomically.

        Args:
            record: The transitioned record
            expected_version: Version read before the transition (0 = insert)

        Returns:
            The stored record carrying its new version
        """
        ...

    async def list_due_records(self, learner_id: str, now: datetime) -> list[MasteryRecord]:
        """Records with next_due <= now, earliest first, ties by record id."""
        ...

    async def list_records(self, learner_id: str) -> list[MasteryRecord]:
        """Every record of a learner."""
        ...
