"""
Reward Calculator.

Turns a finished session's accuracy into XP and lists the badge-eligible
events it produced. Badge rules themselves live with the badge engine; this
module only reports what happened.

XP = base + accuracy bonus:
    accuracy >= 90  ->  +5
    accuracy >= 70  ->  +2
    otherwise       ->  +0
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from vocab_mastery.core.models import BadgeEvent, BadgeEventKind, TransitionEvent

DEFAULT_BONUS_TIERS: tuple[tuple[int, int], ...] = ((90, 5), (70, 2))
DEFAULT_REVIEW_BASE_XP = 10


@dataclass(frozen=True)
class RewardPolicy:
    """XP configuration. Tiers are (minimum accuracy, bonus), highest first."""

    review_base_xp: int = DEFAULT_REVIEW_BASE_XP
    bonus_tiers: tuple[tuple[int, int], ...] = DEFAULT_BONUS_TIERS

    def __post_init__(self):
        if self.review_base_xp <= 0:
            raise ValueError("review_base_xp must be positive")
        thresholds = [threshold for threshold, _ in self.bonus_tiers]
        if thresholds != sorted(thresholds, reverse=True):
            raise ValueError("bonus tiers must be ordered from highest threshold down")

    def bonus(self, accuracy: int) -> int:
        for threshold, bonus in self.bonus_tiers:
            if accuracy >= threshold:
                return bonus
        return 0

    def compute_xp(self, base_xp: int, accuracy: int) -> int:
        """
        XP for a session.

        Args:
            base_xp: Positive base reward (lesson XP, or review base)
            accuracy: Session accuracy percentage, 0-100

        Raises:
            ValueError: base_xp not a positive integer or accuracy out of range
        """
        if isinstance(base_xp, bool) or not isinstance(base_xp, int) or base_xp <= 0:
            raise ValueError(f"base_xp must be a positive integer, got {base_xp!r}")
        if not 0 <= accuracy <= 100:
            raise ValueError(f"accuracy must be within 0-100, got {accuracy}")
        return base_xp + self.bonus(accuracy)


DEFAULT_REWARD_POLICY = RewardPolicy()


def compute_xp(base_xp: int, accuracy: int) -> int:
    """XP with the default bonus tiers."""
    return DEFAULT_REWARD_POLICY.compute_xp(base_xp, accuracy)


def accuracy_percent(correct: int, total: int) -> int:
    """correct / total as a percentage rounded half up; 0 when total is 0."""
    if total <= 0:
        return 0
    return (correct * 200 + total) // (2 * total)


def badge_events(accuracy: int, transitions: Iterable[TransitionEvent]) -> tuple[BadgeEvent, ...]:
    """
    Badge-eligible events for a finished session.

    - session_complete: always
    - perfect_accuracy: accuracy == 100
    - item_mastered: once per item that reached `mastered` during the session
    """
    events = [BadgeEvent(BadgeEventKind.SESSION_COMPLETE)]
    if accuracy == 100:
        events.append(BadgeEvent(BadgeEventKind.PERFECT_ACCURACY, value=accuracy))

    seen: set[str] = set()
    for transition in transitions:
        if transition.reached_mastery and transition.item_id not in seen:
            seen.add(transition.item_id)
            events.append(BadgeEvent(BadgeEventKind.ITEM_MASTERED, item_id=transition.item_id))

    return tuple(events)
