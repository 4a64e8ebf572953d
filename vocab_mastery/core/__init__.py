"""
Core Module - Shared domain models and policies.

Components:
- models: VocabularyItem, MasteryRecord, SessionSummary and events
- intervals: Interval Policy (streak -> days until next review)
- errors: NotFound / InvalidState / Unavailable taxonomy
- signals: blinker signals consumed by external collaborators
"""

from vocab_mastery.core.errors import (
    ConcurrentUpdate,
    InvalidState,
    MasteryError,
    NotFound,
    Unavailable,
)
from vocab_mastery.core.intervals import IntervalPolicy, interval_days
from vocab_mastery.core.models import (
    BadgeEvent,
    BadgeEventKind,
    MasteryRecord,
    MasteryStatus,
    SessionSummary,
    TransitionEvent,
    TranslationDirection,
    VocabularyItem,
)

__all__ = [
    # Models
    "VocabularyItem",
    "MasteryRecord",
    "MasteryStatus",
    "TranslationDirection",
    "TransitionEvent",
    "BadgeEvent",
    "BadgeEventKind",
    "SessionSummary",
    # Intervals
    "IntervalPolicy",
    "interval_days",
    # Errors
    "MasteryError",
    "NotFound",
    "InvalidState",
    "Unavailable",
    "ConcurrentUpdate",
]
