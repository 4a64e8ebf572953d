"""
Unit tests for the Review Queue Builder.

Tests:
- Due ordering and tie breaking
- Distractor selection (tag preference, top-up, sparse pools)
- Seeded reproducibility
- Session building
"""

import random
from datetime import timedelta

import pytest

from vocab_mastery.core.errors import NotFound
from vocab_mastery.core.models import MasteryRecord, TranslationDirection, VocabularyItem
from vocab_mastery.review.queue import ReviewQueueBuilder
from vocab_mastery.store.memory import InMemoryMasteryRepository


def make_record(item_id, next_due, record_id=None, learner_id="learner-1"):
    return MasteryRecord(
        id=record_id or f"rec-{item_id}",
        learner_id=learner_id,
        item_id=item_id,
        next_due=next_due,
    )


async def seed_records(repository, records):
    for record in records:
        await repository.upsert_mastery_record(record, expected_version=0)


class TestBuildQueue:
    """Tests for due record selection."""

    @pytest.mark.asyncio
    async def test_orders_by_due_date(self, repository, now):
        await seed_records(repository, [
            make_record("cat", now - timedelta(hours=1)),
            make_record("apple", now - timedelta(hours=3)),
            make_record("banana", now - timedelta(hours=2)),
        ])

        queue = await ReviewQueueBuilder(repository).build_queue("learner-1", now)

        assert [r.item_id for r in queue] == ["apple", "banana", "cat"]

    @pytest.mark.asyncio
    async def test_ties_broken_by_record_id(self, repository, now):
        due = now - timedelta(hours=1)
        await seed_records(repository, [
            make_record("cat", due, record_id="r-2"),
            make_record("apple", due, record_id="r-3"),
            make_record("dog", due, record_id="r-1"),
        ])

        queue = await ReviewQueueBuilder(repository).build_queue("learner-1", now)

        assert [r.id for r in queue] == ["r-1", "r-2", "r-3"]

    @pytest.mark.asyncio
    async def test_excludes_future_and_unscheduled(self, repository, now):
        await seed_records(repository, [
            make_record("apple", now),
            make_record("banana", now + timedelta(seconds=1)),
            make_record("cat", None),
            make_record("dog", now - timedelta(days=1), learner_id="learner-2"),
        ])

        queue = await ReviewQueueBuilder(repository).build_queue("learner-1", now)

        assert [r.item_id for r in queue] == ["apple"]


class TestBuildExercise:
    """Tests for distractor selection."""

    def test_four_options_with_large_pool(self, sample_items, now):
        builder = ReviewQueueBuilder(InMemoryMasteryRepository(), rng=random.Random(1))

        exercise = builder.build_exercise(make_record("apple", now), sample_items)

        ids = [o.id for o in exercise.options]
        assert len(ids) == 4
        assert len(set(ids)) == 4
        assert ids.count("apple") == 1
        assert exercise.item.id == "apple"

    def test_prefers_items_sharing_a_tag(self, sample_items, now):
        for seed in range(20):
            builder = ReviewQueueBuilder(InMemoryMasteryRepository(), rng=random.Random(seed))
            exercise = builder.build_exercise(make_record("apple", now), sample_items)
            assert "banana" in {o.id for o in exercise.options}

    def test_two_item_pool_gives_two_options(self, now):
        items = [
            VocabularyItem(id="a", source_text="a", target_text="x"),
            VocabularyItem(id="b", source_text="b", target_text="y"),
        ]
        builder = ReviewQueueBuilder(InMemoryMasteryRepository(), rng=random.Random(0))

        exercise = builder.build_exercise(make_record("a", now), items)

        assert sorted(o.id for o in exercise.options) == ["a", "b"]

    def test_single_item_pool_gives_single_option(self, now):
        items = [VocabularyItem(id="a", source_text="a", target_text="x")]
        builder = ReviewQueueBuilder(InMemoryMasteryRepository(), rng=random.Random(0))

        exercise = builder.build_exercise(make_record("a", now), items)

        assert [o.id for o in exercise.options] == ["a"]

    def test_duplicate_pool_entries_ignored(self, sample_items, now):
        builder = ReviewQueueBuilder(InMemoryMasteryRepository(), rng=random.Random(3))

        exercise = builder.build_exercise(make_record("cat", now), sample_items + sample_items)

        ids = [o.id for o in exercise.options]
        assert len(ids) == len(set(ids)) == 4

    def test_missing_item_raises_not_found(self, sample_items, now):
        builder = ReviewQueueBuilder(InMemoryMasteryRepository(), rng=random.Random(0))

        with pytest.raises(NotFound):
            builder.build_exercise(make_record("ghost", now), sample_items)

    def test_same_seed_same_exercise(self, sample_items, now):
        record = make_record("dog", now)
        first = ReviewQueueBuilder(InMemoryMasteryRepository(), rng=random.Random(42))
        second = ReviewQueueBuilder(InMemoryMasteryRepository(), rng=random.Random(42))

        assert first.build_exercise(record, sample_items) == second.build_exercise(record, sample_items)

    def test_both_directions_occur(self, sample_items, now):
        builder = ReviewQueueBuilder(InMemoryMasteryRepository(), rng=random.Random(7))
        directions = {
            builder.build_exercise(make_record("apple", now), sample_items).direction
            for _ in range(50)
        }
        assert directions == set(TranslationDirection)

    def test_fewer_distractors_configured(self, sample_items, now):
        builder = ReviewQueueBuilder(
            InMemoryMasteryRepository(), rng=random.Random(0), max_distractors=1
        )

        exercise = builder.build_exercise(make_record("apple", now), sample_items)

        assert [o.id for o in exercise.options if o.id != "apple"] == ["banana"]

    def test_invalid_distractor_count(self):
        with pytest.raises(ValueError):
            ReviewQueueBuilder(InMemoryMasteryRepository(), max_distractors=4)


class TestBuildSession:
    """Tests for assembling a full review session."""

    @pytest.mark.asyncio
    async def test_builds_one_exercise_per_due_record(self, repository, now):
        await seed_records(repository, [
            make_record("cat", now - timedelta(hours=1)),
            make_record("apple", now - timedelta(hours=2)),
        ])
        builder = ReviewQueueBuilder(repository, rng=random.Random(0))

        session = await builder.build_session("learner-1", now)

        assert [e.item.id for e in session] == ["apple", "cat"]

    @pytest.mark.asyncio
    async def test_limit(self, repository, now):
        await seed_records(repository, [
            make_record(item, now - timedelta(hours=i + 1))
            for i, item in enumerate(["apple", "banana", "cat"])
        ])
        builder = ReviewQueueBuilder(repository, rng=random.Random(0))

        session = await builder.build_session("learner-1", now, limit=2)

        assert [e.item.id for e in session] == ["cat", "banana"]

    @pytest.mark.asyncio
    async def test_skips_records_of_removed_items(self, repository, now):
        await seed_records(repository, [
            make_record("ghost", now - timedelta(hours=2)),
            make_record("apple", now - timedelta(hours=1)),
        ])
        builder = ReviewQueueBuilder(repository, rng=random.Random(0))

        session = await builder.build_session("learner-1", now)

        assert [e.item.id for e in session] == ["apple"]

    @pytest.mark.asyncio
    async def test_nothing_due(self, repository, now):
        builder = ReviewQueueBuilder(repository, rng=random.Random(0))
        assert await builder.build_session("learner-1", now) == []
