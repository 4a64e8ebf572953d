"""
Interval Policy.

Maps a streak of consecutive correct answers to the number of days until the
next review. The table saturates: streaks at or beyond its length reuse the
longest interval, so spacing grows with mastery but never without bound.

Wrong answers ignore the table and bring the item back after a short fixed
offset (4 hours by default).
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta

DEFAULT_INTERVALS_DAYS: tuple[int, ...] = (1, 3, 7, 14, 30)
DEFAULT_FAILURE_OFFSET_HOURS = 4


@dataclass(frozen=True)
class IntervalPolicy:
    """Review spacing configuration."""

    table: tuple[int, ...] = DEFAULT_INTERVALS_DAYS
    failure_offset_hours: int = DEFAULT_FAILURE_OFFSET_HOURS

    def __post_init__(self):
        if not self.table:
            raise ValueError("Interval table must not be empty")
        if any(days <= 0 for days in self.table):
            raise ValueError(f"Interval table must hold positive day counts: {self.table}")
        if self.failure_offset_hours <= 0:
            raise ValueError("Failure offset must be positive")

    @property
    def failure_offset(self) -> timedelta:
        return timedelta(hours=self.failure_offset_hours)

    def interval_days(self, streak: int) -> int:
        """
        Days until the next review for a streak value.

        Args:
            streak: Non-negative streak count

        Returns:
            table[min(streak, len(table) - 1)]
        """
        if streak < 0:
            raise ValueError(f"Streak must be non-negative, got {streak}")
        return self.table[min(streak, len(self.table) - 1)]

    def next_due(self, previous_streak: int, was_correct: bool, now: datetime) -> datetime:
        """
        Next due timestamp after an answer.

        A correct answer earns the interval indexed by the streak the item
        carried into the answer: the first correct answer waits table[0] days,
        the third in a row waits table[2]. Any wrong answer waits the failure
        offset.

        The index is the streak before the answer, not after it. A correct
        answer right after a failure (streak 0) therefore comes back in
        table[0] days (1), where indexing by the new streak would give
        table[1] (3).
        """
        if not was_correct:
            return now + self.failure_offset
        return now + timedelta(days=self.interval_days(previous_streak))


DEFAULT_POLICY = IntervalPolicy()


def interval_days(streak: int) -> int:
    """Interval lookup with the default table [1, 3, 7, 14, 30]."""
    return DEFAULT_POLICY.interval_days(streak)
