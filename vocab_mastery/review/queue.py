"""
Review Queue Builder.

Selects the learner's due items and turns each into a translation exercise
with distractor options.

Distractor selection, per exercise:
1. Pick a translation direction at random
2. Candidates are items sharing a tag with the target (target excluded)
3. Shuffle the candidates, keep up to max_distractors
4. Top up from the rest of the pool without replacement
5. Shuffle distractors and target together

All randomness goes through the injected random.Random, so a seeded builder
produces the same exercises every time.
"""

from __future__ import annotations

import random
from collections.abc import Sequence
from datetime import datetime

from loguru import logger

from vocab_mastery.core.clock import ensure_utc
from vocab_mastery.core.errors import NotFound
from vocab_mastery.core.models import MasteryRecord, TranslationDirection, VocabularyItem
from vocab_mastery.exercises.translate import ReviewExercise
from vocab_mastery.store.repository import MasteryRepository

DEFAULT_MAX_DISTRACTORS = 3


class ReviewQueueBuilder:
    """
    Builds review sessions from due mastery records.

    Args:
        repository: Persistence collaborator
        rng: Random source (seed it for reproducible sessions)
        max_distractors: Distractors per exercise (options = distractors + 1)
    """

    def __init__(
        self,
        repository: MasteryRepository,
        rng: random.Random | None = None,
        max_distractors: int = DEFAULT_MAX_DISTRACTORS,
    ):
        if not 0 <= max_distractors <= 3:
            raise ValueError("max_distractors must be between 0 and 3")
        self.repository = repository
        self.rng = rng or random.Random()
        self.max_distractors = max_distractors

    async def build_queue(self, learner_id: str, now: datetime) -> list[MasteryRecord]:
        """
        Due records for a learner, oldest due date first.

        Ties on next_due are broken by record id so the order is stable.
        """
        now = ensure_utc(now)
        records = await self.repository.list_due_records(learner_id, now)
        due = [r for r in records if r.is_due(now)]
        due.sort(key=lambda r: (r.next_due, r.id))
        return due

    def build_exercise(
        self, record: MasteryRecord, all_items: Sequence[VocabularyItem]
    ) -> ReviewExercise:
        """
        Build a translation exercise for a due record.

        With fewer than two items in the pool the exercise has a single
        option; there is nothing to draw distractors from.

        Raises:
            NotFound: the record's item is not in the pool
        """
        pool: dict[str, VocabularyItem] = {}
        for item in all_items:
            pool.setdefault(item.id, item)

        target = pool.get(record.item_id)
        if target is None:
            raise NotFound("VocabularyItem", record.item_id)

        direction = self.rng.choice(list(TranslationDirection))
        others = [item for item in pool.values() if item.id != target.id]

        candidates = [item for item in others if item.shares_tag_with(target)]
        self.rng.shuffle(candidates)
        distractors = candidates[: self.max_distractors]

        if len(distractors) < self.max_distractors:
            chosen = {item.id for item in distractors}
            remaining = [item for item in others if item.id not in chosen]
            self.rng.shuffle(remaining)
            distractors.extend(remaining[: self.max_distractors - len(distractors)])

        options = [*distractors, target]
        self.rng.shuffle(options)

        return ReviewExercise(direction=direction, item=target, options=tuple(options))

    async def build_session(
        self, learner_id: str, now: datetime, limit: int | None = None
    ) -> list[ReviewExercise]:
        """
        Load the due queue and the item pool and build every exercise.

        Records whose item has been removed from the pool are left out of
        the session.
        """
        records = await self.build_queue(learner_id, now)
        if limit is not None:
            records = records[:limit]
        if not records:
            logger.info(f"No reviews due for {learner_id}")
            return []

        all_items = await self.repository.list_items()

        exercises = []
        for record in records:
            try:
                exercises.append(self.build_exercise(record, all_items))
            except NotFound:
                logger.warning(f"Skipping review of missing item {record.item_id} for {learner_id}")

        logger.info(f"Built review session for {learner_id}: {len(exercises)} exercises")
        return exercises
