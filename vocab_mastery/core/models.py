"""
Core domain models for the mastery engine.

- VocabularyItem: immutable content unit, referenced by mastery records
- MasteryRecord: per (learner, item) retention state
- TransitionEvent: one applied answer, streamed to badge evaluation
- SessionSummary: durable output of a lesson or review session
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from .clock import to_iso


class MasteryStatus(str, Enum):
    """Retention stage of a learner's item."""

    NEW = "new"
    LEARNING = "learning"
    REVIEWING = "reviewing"
    MASTERED = "mastered"

    @property
    def display_name(self) -> str:
        """Human-readable name."""
        return self.value.title()

    @property
    def color(self) -> str:
        """Rich color for CLI display."""
        return {
            MasteryStatus.NEW: "dim",
            MasteryStatus.LEARNING: "yellow",
            MasteryStatus.REVIEWING: "cyan",
            MasteryStatus.MASTERED: "green",
        }[self]


class TranslationDirection(str, Enum):
    """Which side of the item is shown as the prompt."""

    SOURCE_TO_TARGET = "source_to_target"
    TARGET_TO_SOURCE = "target_to_source"


@dataclass(frozen=True)
class VocabularyItem:
    """
    A vocabulary content unit.

    Authored outside the engine and never mutated by it. Tags are used to
    pick similar distractors.
    """

    id: str
    source_text: str
    target_text: str
    image_ref: str | None = None
    audio_ref: str | None = None
    tags: frozenset[str] = field(default_factory=frozenset)

    def shares_tag_with(self, other: VocabularyItem) -> bool:
        return not self.tags.isdisjoint(other.tags)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> VocabularyItem:
        """Create from a plain dictionary (JSON row)."""
        return cls(
            id=str(data["id"]),
            source_text=data["source_text"],
            target_text=data["target_text"],
            image_ref=data.get("image_ref"),
            audio_ref=data.get("audio_ref"),
            tags=frozenset(data.get("tags") or ()),
        )


@dataclass
class MasteryRecord:
    """Retention state for one (learner, item) pair."""

    id: str
    learner_id: str
    item_id: str
    status: MasteryStatus = MasteryStatus.NEW
    correct_count: int = 0
    incorrect_count: int = 0
    streak: int = 0  # Consecutive correct answers
    next_due: datetime | None = None
    last_reviewed: datetime | None = None
    version: int = 0  # Optimistic-concurrency token, 0 = never stored

    @property
    def total_answers(self) -> int:
        return self.correct_count + self.incorrect_count

    def is_due(self, now: datetime) -> bool:
        """Due iff next_due is at or before now."""
        return self.next_due is not None and self.next_due <= now


@dataclass(frozen=True)
class TransitionEvent:
    """An answer applied to a mastery record."""

    learner_id: str
    item_id: str
    was_correct: bool
    previous_status: MasteryStatus | None  # None when the record was created
    new_status: MasteryStatus
    streak: int
    occurred_at: datetime

    @property
    def reached_mastery(self) -> bool:
        return (
            self.new_status is MasteryStatus.MASTERED
            and self.previous_status is not MasteryStatus.MASTERED
        )


class BadgeEventKind(str, Enum):
    """Badge-worthy things that happened during a session."""

    SESSION_COMPLETE = "session_complete"
    PERFECT_ACCURACY = "perfect_accuracy"
    ITEM_MASTERED = "item_mastered"


@dataclass(frozen=True)
class BadgeEvent:
    kind: BadgeEventKind
    value: int = 1
    item_id: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind.value, "value": self.value, "item_id": self.item_id}


@dataclass(frozen=True)
class SessionSummary:
    """
    Durable result of a finished session.

    Handed to progress persistence and the badge engine, which own it afterwards.
    """

    learner_id: str
    session_kind: str  # 'lesson' or 'review'
    correct: int
    total: int
    accuracy: int  # 0-100
    elapsed_seconds: int
    xp_earned: int
    started_at: datetime
    completed_at: datetime
    lesson_id: str | None = None
    average_latency_ms: int | None = None
    badge_events: tuple[BadgeEvent, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-ready dictionary (ISO-8601 UTC timestamps)."""
        return {
            "learner_id": self.learner_id,
            "session_kind": self.session_kind,
            "lesson_id": self.lesson_id,
            "correct": self.correct,
            "total": self.total,
            "accuracy": self.accuracy,
            "elapsed_seconds": self.elapsed_seconds,
            "xp_earned": self.xp_earned,
            "started_at": to_iso(self.started_at),
            "completed_at": to_iso(self.completed_at),
            "average_latency_ms": self.average_latency_ms,
            "badge_events": [event.to_dict() for event in self.badge_events],
        }
