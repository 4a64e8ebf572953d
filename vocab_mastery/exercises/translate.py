"""
Translate exercise handler.

The review exercise: one side of the target item is shown and the learner
picks the other side among 1-4 options. Built by the review queue; the
persisted form nests plain item dictionaries.
"""

from dataclasses import dataclass
from typing import ClassVar

from vocab_mastery.core.models import TranslationDirection, VocabularyItem

from . import ExerciseKind, register
from .base import AnswerResult, require


@dataclass(frozen=True)
class ReviewExercise:
    """A translation exercise with exactly one correct option."""

    direction: TranslationDirection
    item: VocabularyItem
    options: tuple[VocabularyItem, ...]

    kind: ClassVar[ExerciseKind] = ExerciseKind.TRANSLATE

    def __post_init__(self):
        if not 1 <= len(self.options) <= 4:
            raise ValueError(f"A review exercise needs 1-4 options, got {len(self.options)}")
        ids = [option.id for option in self.options]
        if len(set(ids)) != len(ids):
            raise ValueError("Review exercise options must be distinct items")
        if ids.count(self.item.id) != 1:
            raise ValueError("The target item must appear exactly once among the options")

    @property
    def prompt(self) -> str:
        if self.direction is TranslationDirection.SOURCE_TO_TARGET:
            return self.item.source_text
        return self.item.target_text

    def option_text(self, option: VocabularyItem) -> str:
        """The side of an option the learner chooses from."""
        if self.direction is TranslationDirection.SOURCE_TO_TARGET:
            return option.target_text
        return option.source_text


@register(ExerciseKind.TRANSLATE)
class TranslateHandler:
    """Handler for review translation exercises."""

    def parse(self, data: dict) -> ReviewExercise:
        require(data, "direction", "item", "options")
        return ReviewExercise(
            direction=TranslationDirection(data["direction"]),
            item=VocabularyItem.from_dict(data["item"]),
            options=tuple(VocabularyItem.from_dict(o) for o in data["options"]),
        )

    def tracked_item_id(self, exercise: ReviewExercise) -> str | None:
        return exercise.item.id

    def check(self, exercise: ReviewExercise, answer: str | None) -> AnswerResult:
        chosen = str(answer) if answer is not None else ""
        is_correct = chosen == exercise.item.id
        return AnswerResult(
            correct=is_correct,
            feedback="Correct!" if is_correct else "Not quite.",
            user_answer=chosen,
            correct_answer=exercise.option_text(exercise.item),
            partial_score=1.0 if is_correct else 0.0,
        )
