"""
Session Runner.

Drives one lesson or review session:

    not_started --start()--> in_progress --finalize()/last advance()--> complete

Each answer first transitions the mastery record of the exercise's tracked
item; the session counters only move once that write has succeeded. Session
state lives in memory and is owned by the runner. A session that is never
finalized emits no summary, but the answers it recorded stay applied.
"""

from __future__ import annotations

import asyncio
import math
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from loguru import logger

from vocab_mastery import exercises
from vocab_mastery.core.clock import ensure_utc, utc_now
from vocab_mastery.core.errors import InvalidState
from vocab_mastery.core.models import SessionSummary, TransitionEvent
from vocab_mastery.core.signals import session_completed
from vocab_mastery.exercises.base import AnswerResult
from vocab_mastery.rewards.calculator import (
    DEFAULT_REWARD_POLICY,
    RewardPolicy,
    accuracy_percent,
    badge_events,
)
from vocab_mastery.store.mastery_store import MasteryStore


class SessionKind(str, Enum):
    LESSON = "lesson"
    REVIEW = "review"


class SessionStatus(str, Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETE = "complete"


@dataclass
class SessionState:
    """In-memory progress of a running session."""

    exercises: list[Any] = field(default_factory=list)
    position: int = 0
    correct: int = 0
    total: int = 0
    started_at: datetime | None = None
    latencies_ms: list[int] = field(default_factory=list)
    transitions: list[TransitionEvent] = field(default_factory=list)
    answered_current: bool = False
    status: SessionStatus = SessionStatus.NOT_STARTED

    @property
    def current_exercise(self) -> Any | None:
        if 0 <= self.position < len(self.exercises):
            return self.exercises[self.position]
        return None

    @property
    def remaining(self) -> int:
        return max(len(self.exercises) - self.position, 0)


class SessionRunner:
    """
    Runs a single session for one learner.

    Args:
        store: Mastery Record Store that answers are applied to
        learner_id: The learner taking the session
        kind: lesson or review
        base_xp: Lesson XP reward (reviews use the policy's review base)
        lesson_id: Lesson identifier, reported in the summary
        reward_policy: XP policy
        clock: Source of "now" for start, answers and finalize
    """

    def __init__(
        self,
        store: MasteryStore,
        learner_id: str,
        kind: SessionKind = SessionKind.REVIEW,
        *,
        base_xp: int | None = None,
        lesson_id: str | None = None,
        reward_policy: RewardPolicy | None = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.store = store
        self.learner_id = learner_id
        self.kind = SessionKind(kind)
        self.lesson_id = lesson_id
        self.reward_policy = reward_policy or DEFAULT_REWARD_POLICY
        self.clock = clock
        if base_xp is not None and base_xp <= 0:
            raise ValueError(f"base_xp must be positive, got {base_xp}")
        if self.kind is SessionKind.LESSON and base_xp is not None:
            self.base_xp = base_xp
        else:
            self.base_xp = self.reward_policy.review_base_xp
        self.state = SessionState()
        self.summary: SessionSummary | None = None
        self._answer_lock = asyncio.Lock()

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def start(self, session_exercises: Sequence[Any]) -> SessionState:
        """Load the exercises and capture the start time."""
        if self.state.status is not SessionStatus.NOT_STARTED:
            raise InvalidState(f"Session already {self.state.status.value}")

        self.state.exercises = list(session_exercises)
        self.state.started_at = ensure_utc(self.clock())
        self.state.status = SessionStatus.IN_PROGRESS

        logger.info(
            f"Started {self.kind.value} session for {self.learner_id}: "
            f"{len(self.state.exercises)} exercises"
        )
        return self.state

    def _require_open_exercise(self) -> Any:
        if self.state.status is not SessionStatus.IN_PROGRESS:
            raise InvalidState(f"Cannot answer: session is {self.state.status.value}")
        exercise = self.state.current_exercise
        if exercise is None:
            raise InvalidState("No exercise left to answer")
        if self.state.answered_current:
            raise InvalidState("Current exercise already answered; call advance()")
        return exercise

    # =========================================================================
    # Answers
    # =========================================================================

    async def record_answer(self, correct: bool, latency_ms: int | None = None) -> TransitionEvent | None:
        """
        Record the outcome of the current exercise.

        Returns:
            The mastery transition, or None when the exercise tracks no item

        Raises:
            InvalidState: session not in progress, or exercise already answered
            NotFound / Unavailable: from the Mastery Record Store; counters unchanged
        """
        async with self._answer_lock:
            exercise = self._require_open_exercise()

            event = None
            item_id = exercises.tracked_item_id(exercise)
            if item_id is not None:
                outcome = await self.store.record_answer(
                    self.learner_id, item_id, correct, ensure_utc(self.clock())
                )
                event = outcome.event
                self.state.transitions.append(event)

            self.state.total += 1
            if correct:
                self.state.correct += 1
            if latency_ms is not None:
                self.state.latencies_ms.append(latency_ms)
            self.state.answered_current = True

        return event

    async def submit(self, answer: Any, latency_ms: int | None = None) -> AnswerResult:
        """Grade a raw answer with the exercise's handler, then record it."""
        exercise = self._require_open_exercise()
        result = exercises.check(exercise, answer)
        await self.record_answer(result.correct, latency_ms)
        return result

    async def skip(self, latency_ms: int | None = None) -> None:
        """A skipped exercise counts as an incorrect answer."""
        await self.record_answer(False, latency_ms)

    def advance(self) -> SessionSummary | None:
        """
        Move to the next exercise.

        Returns:
            The summary if that was the last exercise, else None
        """
        if self.state.status is not SessionStatus.IN_PROGRESS:
            raise InvalidState(f"Cannot advance: session is {self.state.status.value}")
        if self.state.current_exercise is not None and not self.state.answered_current:
            raise InvalidState("Answer or skip the current exercise before advancing")

        self.state.position += 1
        self.state.answered_current = False
        if self.state.current_exercise is None:
            return self.finalize()
        return None

    # =========================================================================
    # Summary
    # =========================================================================

    def finalize(self, now: datetime | None = None) -> SessionSummary:
        """
        Complete the session and build its summary.

        Raises:
            InvalidState: session never started or already complete
        """
        if self.state.status is not SessionStatus.IN_PROGRESS:
            raise InvalidState(f"Cannot finalize: session is {self.state.status.value}")

        completed_at = ensure_utc(now or self.clock())
        started_at = self.state.started_at or completed_at
        elapsed = max((completed_at - started_at).total_seconds(), 0.0)

        accuracy = accuracy_percent(self.state.correct, self.state.total)
        latencies = self.state.latencies_ms
        average_latency = (
            math.floor(sum(latencies) / len(latencies) + 0.5) if latencies else None
        )

        summary = SessionSummary(
            learner_id=self.learner_id,
            session_kind=self.kind.value,
            correct=self.state.correct,
            total=self.state.total,
            accuracy=accuracy,
            elapsed_seconds=math.floor(elapsed + 0.5),
            xp_earned=self.reward_policy.compute_xp(self.base_xp, accuracy),
            started_at=started_at,
            completed_at=completed_at,
            lesson_id=self.lesson_id,
            average_latency_ms=average_latency,
            badge_events=badge_events(accuracy, self.state.transitions),
        )

        self.state.status = SessionStatus.COMPLETE
        self.summary = summary

        logger.info(
            f"Completed {self.kind.value} session for {self.learner_id}: "
            f"{summary.correct}/{summary.total} ({summary.accuracy}%), +{summary.xp_earned} XP"
        )
        session_completed.send(self, summary=summary)
        return summary
