"""
Mastery Record Store.

Owns the retention state machine for (learner, item) pairs:

    new --correct--> learning --streak>=3--> reviewing --streak>=5--> mastered
     ^                  ^                                                  |
     |                  +-------------------- incorrect -------------------+
     +-- incorrect (first answer, or while still new)

Each answer is a read-modify-write. The new state is computed in memory by
transition() and written with a single conditional upsert, so a failed write
leaves the stored record untouched. Transitions for the same (learner, item)
are serialized in-process by a per-key lock; the repository's version check
catches writers in other processes.
"""

from __future__ import annotations

import asyncio
import uuid
from collections import Counter
from dataclasses import dataclass, replace
from datetime import datetime

from loguru import logger

from vocab_mastery.core.clock import ensure_utc
from vocab_mastery.core.intervals import DEFAULT_POLICY, IntervalPolicy
from vocab_mastery.core.models import MasteryRecord, MasteryStatus, TransitionEvent
from vocab_mastery.core.signals import mastery_transitioned

from .repository import MasteryRepository

REVIEWING_STREAK = 3
MASTERED_STREAK = 5


def transition(
    record: MasteryRecord | None,
    was_correct: bool,
    now: datetime,
    *,
    learner_id: str | None = None,
    item_id: str | None = None,
    policy: IntervalPolicy = DEFAULT_POLICY,
) -> MasteryRecord:
    """
    Apply one answer to a mastery record.

    Pure: the input record is not modified. Not idempotent: applying the same
    answer twice counts it twice.

    Args:
        record: Current record, or None for the learner's first answer
        was_correct: Whether the answer was correct
        now: Answer timestamp
        learner_id: Required when record is None
        item_id: Required when record is None
        policy: Interval policy used for the next due date

    Returns:
        The updated (or newly created) record
    """
    now = ensure_utc(now)

    if record is None:
        if not learner_id or not item_id:
            raise ValueError("learner_id and item_id are required to create a mastery record")
        return MasteryRecord(
            id=str(uuid.uuid4()),
            learner_id=learner_id,
            item_id=item_id,
            status=MasteryStatus.LEARNING if was_correct else MasteryStatus.NEW,
            correct_count=1 if was_correct else 0,
            incorrect_count=0 if was_correct else 1,
            streak=1 if was_correct else 0,
            next_due=policy.next_due(0, was_correct, now),
            last_reviewed=now,
        )

    new_streak = record.streak + 1 if was_correct else 0

    # Promotions first; an incorrect answer demotes anything past `new`
    status = record.status
    if new_streak >= REVIEWING_STREAK:
        status = MasteryStatus.REVIEWING
    if new_streak >= MASTERED_STREAK:
        status = MasteryStatus.MASTERED
    if not was_correct and record.status is not MasteryStatus.NEW:
        status = MasteryStatus.LEARNING

    return replace(
        record,
        status=status,
        correct_count=record.correct_count + (1 if was_correct else 0),
        incorrect_count=record.incorrect_count + (0 if was_correct else 1),
        streak=new_streak,
        next_due=policy.next_due(record.streak, was_correct, now),
        last_reviewed=now,
    )


@dataclass(frozen=True)
class AnswerOutcome:
    """A stored transition and the event describing it."""

    record: MasteryRecord
    event: TransitionEvent


class MasteryStore:
    """
    Applies answers to persisted mastery records.

    Every applied transition is published on the `mastery_transitioned`
    signal for the badge engine.
    """

    def __init__(self, repository: MasteryRepository, policy: IntervalPolicy | None = None):
        """
        Initialize the store.

        Args:
            repository: Persistence collaborator
            policy: Interval policy (uses the default table if None)
        """
        self.repository = repository
        self.policy = policy or DEFAULT_POLICY
        self._locks: dict[tuple[str, str], asyncio.Lock] = {}
        self._waiters: Counter[tuple[str, str]] = Counter()

    async def record_answer(
        self,
        learner_id: str,
        item_id: str,
        was_correct: bool,
        now: datetime,
    ) -> AnswerOutcome:
        """
        Transition the (learner, item) record for one answer.

        Raises:
            NotFound: the item does not exist
            ConcurrentUpdate: another process wrote the record in between
            Unavailable: the repository failed; nothing was applied
        """
        key = (learner_id, item_id)
        lock = self._locks.setdefault(key, asyncio.Lock())
        self._waiters[key] += 1
        try:
            async with lock:
                await self.repository.get_item(item_id)
                current = await self.repository.get_mastery_record(learner_id, item_id)

                updated = transition(
                    current,
                    was_correct,
                    now,
                    learner_id=learner_id,
                    item_id=item_id,
                    policy=self.policy,
                )
                stored = await self.repository.upsert_mastery_record(
                    updated, expected_version=current.version if current else 0
                )
        finally:
            # Drop the lock once nobody holds or waits on it
            self._waiters[key] -= 1
            if not self._waiters[key]:
                del self._waiters[key]
                del self._locks[key]

        event = TransitionEvent(
            learner_id=learner_id,
            item_id=item_id,
            was_correct=was_correct,
            previous_status=current.status if current else None,
            new_status=stored.status,
            streak=stored.streak,
            occurred_at=stored.last_reviewed,
        )

        logger.debug(
            f"Recorded answer for {learner_id}/{item_id}: correct={was_correct}, "
            f"status={stored.status.value}, streak={stored.streak}, next_due={stored.next_due}"
        )
        mastery_transitioned.send(self, event=event)

        return AnswerOutcome(record=stored, event=event)
