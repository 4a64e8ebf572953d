"""
Unit tests for MasteryStore.

Tests:
- Persisting transitions through the repository
- Transition events and the mastery_transitioned signal
- Error propagation without partial writes
- Concurrent answers for the same record
"""

import asyncio
from datetime import timedelta

import pytest

from vocab_mastery.core.errors import ConcurrentUpdate, NotFound, Unavailable
from vocab_mastery.core.intervals import IntervalPolicy
from vocab_mastery.core.models import MasteryStatus, VocabularyItem
from vocab_mastery.core.signals import mastery_transitioned
from vocab_mastery.store.mastery_store import MasteryStore, transition
from vocab_mastery.store.memory import InMemoryMasteryRepository


class FailingUpsertRepository(InMemoryMasteryRepository):
    """Repository whose writes always fail."""

    async def upsert_mastery_record(self, record, expected_version):
        raise Unavailable("database is down")


class TestRecordAnswer:
    """Tests for applying answers through the store."""

    @pytest.mark.asyncio
    async def test_first_answer_creates_record(self, store, repository, now):
        outcome = await store.record_answer("learner-1", "apple", True, now)

        stored = await repository.get_mastery_record("learner-1", "apple")
        assert stored == outcome.record
        assert stored.version == 1
        assert stored.status is MasteryStatus.LEARNING
        assert outcome.event.previous_status is None
        assert outcome.event.new_status is MasteryStatus.LEARNING

    @pytest.mark.asyncio
    async def test_subsequent_answers_bump_version(self, store, repository, now):
        for offset in range(3):
            await store.record_answer("learner-1", "apple", True, now + timedelta(minutes=offset))

        stored = await repository.get_mastery_record("learner-1", "apple")
        assert stored.version == 3
        assert stored.streak == 3
        assert stored.status is MasteryStatus.REVIEWING

    @pytest.mark.asyncio
    async def test_learners_are_independent(self, store, repository, now):
        await store.record_answer("learner-1", "apple", True, now)
        await store.record_answer("learner-2", "apple", False, now)

        first = await repository.get_mastery_record("learner-1", "apple")
        second = await repository.get_mastery_record("learner-2", "apple")
        assert first.streak == 1
        assert second.streak == 0

    @pytest.mark.asyncio
    async def test_custom_policy(self, repository, now):
        store = MasteryStore(repository, IntervalPolicy(table=(2,), failure_offset_hours=1))

        outcome = await store.record_answer("learner-1", "apple", True, now)

        assert outcome.record.next_due == now + timedelta(days=2)

    @pytest.mark.asyncio
    async def test_unknown_item_raises_not_found(self, store, repository, now):
        with pytest.raises(NotFound):
            await store.record_answer("learner-1", "ghost", True, now)

        assert await repository.list_records("learner-1") == []

    @pytest.mark.asyncio
    async def test_failed_write_leaves_no_record(self, sample_items, now):
        repository = FailingUpsertRepository(sample_items)
        store = MasteryStore(repository)

        with pytest.raises(Unavailable):
            await store.record_answer("learner-1", "apple", True, now)

        assert await repository.get_mastery_record("learner-1", "apple") is None


class TestTransitionSignal:
    """Tests for the event stream consumed by badge evaluation."""

    @pytest.mark.asyncio
    async def test_signal_sent_for_each_answer(self, store, now):
        received = []

        def on_transition(sender, event, **kwargs):
            received.append(event)

        with mastery_transitioned.connected_to(on_transition):
            await store.record_answer("learner-1", "apple", True, now)
            await store.record_answer("learner-1", "apple", False, now + timedelta(hours=1))

        assert [e.was_correct for e in received] == [True, False]
        assert received[1].previous_status is MasteryStatus.LEARNING
        assert received[1].new_status is MasteryStatus.LEARNING

    @pytest.mark.asyncio
    async def test_reached_mastery_flag(self, store, now):
        outcomes = []
        for offset in range(6):
            outcomes.append(
                await store.record_answer("learner-1", "apple", True, now + timedelta(days=offset))
            )

        flags = [o.event.reached_mastery for o in outcomes]
        assert flags == [False, False, False, False, True, False]

    @pytest.mark.asyncio
    async def test_no_signal_on_failure(self, store, now):
        received = []

        def on_transition(sender, event, **kwargs):
            received.append(event)

        with mastery_transitioned.connected_to(on_transition):
            with pytest.raises(NotFound):
                await store.record_answer("learner-1", "ghost", True, now)

        assert received == []


class TestConcurrency:
    """Tests for at-most-one in-flight mutation per record."""

    @pytest.mark.asyncio
    async def test_concurrent_answers_are_all_counted(self, store, repository, now):
        await asyncio.gather(
            *(store.record_answer("learner-1", "apple", True, now) for _ in range(5))
        )

        stored = await repository.get_mastery_record("learner-1", "apple")
        assert stored.correct_count == 5
        assert stored.streak == 5
        assert stored.version == 5

    @pytest.mark.asyncio
    async def test_stale_version_rejected(self, repository, now):
        record = transition(None, True, now, learner_id="learner-1", item_id="apple")
        await repository.upsert_mastery_record(record, expected_version=0)

        with pytest.raises(ConcurrentUpdate) as exc_info:
            await repository.upsert_mastery_record(transition(record, True, now), expected_version=0)

        assert exc_info.value.expected_version == 0
        stored = await repository.get_mastery_record("learner-1", "apple")
        assert stored.correct_count == 1

    @pytest.mark.asyncio
    async def test_locks_released_after_answers(self, store, repository, now):
        words = [VocabularyItem(id=f"word-{n}", source_text=f"w{n}", target_text=f"p{n}") for n in range(200)]
        await repository.add_items(words)

        for learner_id in ("learner-1", "learner-2", "learner-3"):
            await asyncio.gather(
                *(store.record_answer(learner_id, word.id, True, now) for word in words)
            )

        assert store._locks == {}
        assert not store._waiters

    @pytest.mark.asyncio
    async def test_lock_released_after_failed_answer(self, store, now):
        with pytest.raises(NotFound):
            await store.record_answer("learner-1", "ghost", True, now)

        assert store._locks == {}

