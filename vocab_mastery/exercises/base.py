"""
Base protocol and types for exercise handlers.
"""

from dataclasses import dataclass
from typing import Any, Protocol


@dataclass
class AnswerResult:
    """Result of checking an answer."""
    correct: bool
    feedback: str
    user_answer: str
    correct_answer: str
    partial_score: float = 1.0  # 0.0-1.0 for partial credit


def require(data: dict, *keys: str) -> None:
    """Raise ValueError if a persisted config lacks any of the keys."""
    missing = [key for key in keys if key not in data]
    if missing:
        raise ValueError(f"{data.get('type', 'exercise')} config missing: {', '.join(missing)}")


class ExerciseHandler(Protocol):
    """Protocol for exercise kind handlers."""

    def parse(self, data: dict) -> Any:
        """Build the typed exercise from a persisted config."""
        ...

    def tracked_item_id(self, exercise: Any) -> str | None:
        """Item whose mastery record an answer updates, or None."""
        ...

    def check(self, exercise: Any, answer: Any) -> AnswerResult:
        """Validate the answer and return result."""
        ...
