"""
Unit tests for the Reward Calculator.
"""

from datetime import datetime, timezone

import pytest

from vocab_mastery.core.models import BadgeEventKind, MasteryStatus, TransitionEvent
from vocab_mastery.rewards.calculator import (
    RewardPolicy,
    accuracy_percent,
    badge_events,
    compute_xp,
)

T0 = datetime(2024, 1, 1, tzinfo=timezone.utc)


def event(item_id, previous, new):
    return TransitionEvent(
        learner_id="learner-1",
        item_id=item_id,
        was_correct=True,
        previous_status=previous,
        new_status=new,
        streak=5,
        occurred_at=T0,
    )


class TestComputeXp:
    @pytest.mark.parametrize("accuracy,expected", [(95, 15), (90, 15), (89, 12), (75, 12), (70, 12), (69, 10), (50, 10), (0, 10)])
    def test_bonus_tiers(self, accuracy, expected):
        assert compute_xp(10, accuracy) == expected

    def test_lesson_base(self):
        assert compute_xp(25, 100) == 30

    @pytest.mark.parametrize("base_xp", [0, -5, 2.5, True])
    def test_invalid_base(self, base_xp):
        with pytest.raises(ValueError):
            compute_xp(base_xp, 80)

    @pytest.mark.parametrize("accuracy", [-1, 101])
    def test_accuracy_out_of_range(self, accuracy):
        with pytest.raises(ValueError):
            compute_xp(10, accuracy)

    def test_custom_tiers(self):
        policy = RewardPolicy(bonus_tiers=((100, 10), (50, 1)))
        assert policy.compute_xp(10, 100) == 20
        assert policy.compute_xp(10, 60) == 11

    def test_unordered_tiers_rejected(self):
        with pytest.raises(ValueError):
            RewardPolicy(bonus_tiers=((70, 2), (90, 5)))


class TestAccuracyPercent:
    @pytest.mark.parametrize(
        "correct,total,expected",
        [(0, 0, 0), (2, 3, 67), (1, 3, 33), (1, 8, 13), (3, 8, 38), (7, 7, 100), (0, 5, 0)],
    )
    def test_rounds_half_up(self, correct, total, expected):
        assert accuracy_percent(correct, total) == expected


class TestBadgeEvents:
    def test_session_complete_always(self):
        events = badge_events(40, [])
        assert [e.kind for e in events] == [BadgeEventKind.SESSION_COMPLETE]

    def test_perfect_accuracy(self):
        kinds = [e.kind for e in badge_events(100, [])]
        assert BadgeEventKind.PERFECT_ACCURACY in kinds

    def test_item_mastered_once_per_item(self):
        transitions = [
            event("apple", MasteryStatus.REVIEWING, MasteryStatus.MASTERED),
            event("cat", MasteryStatus.MASTERED, MasteryStatus.MASTERED),
            event("apple", MasteryStatus.LEARNING, MasteryStatus.MASTERED),
        ]

        mastered = [e for e in badge_events(80, transitions) if e.kind is BadgeEventKind.ITEM_MASTERED]

        assert [e.item_id for e in mastered] == ["apple"]
