"""
Order-words exercise handler.

The learner rebuilds a sentence from shuffled word tiles. The answer is the
list of tile indices in the order they were placed. Sentence exercises do
not track any vocabulary item.
"""

from collections.abc import Sequence
from dataclasses import dataclass
from typing import ClassVar

from . import ExerciseKind, register
from .base import AnswerResult, require


@dataclass(frozen=True)
class OrderWordsExercise:
    source_sentence: str
    target_sentence: str
    words: tuple[str, ...]
    correct_order: tuple[int, ...]

    kind: ClassVar[ExerciseKind] = ExerciseKind.ORDER_WORDS

    def __post_init__(self):
        if sorted(self.correct_order) != list(range(len(self.words))):
            raise ValueError("correct_order must be a permutation of the word indices")


@register(ExerciseKind.ORDER_WORDS)
class OrderWordsHandler:
    """Handler for order-words exercises."""

    def parse(self, data: dict) -> OrderWordsExercise:
        require(data, "source_sentence", "target_sentence", "words", "correct_order")
        return OrderWordsExercise(
            source_sentence=data["source_sentence"],
            target_sentence=data["target_sentence"],
            words=tuple(data["words"]),
            correct_order=tuple(int(i) for i in data["correct_order"]),
        )

    def tracked_item_id(self, exercise: OrderWordsExercise) -> str | None:
        return None

    def check(self, exercise: OrderWordsExercise, answer: Sequence[int]) -> AnswerResult:
        placed = [int(i) for i in answer]
        is_correct = placed == list(exercise.correct_order)

        in_place = sum(
            1 for position, index in enumerate(placed)
            if position < len(exercise.correct_order) and exercise.correct_order[position] == index
        )
        built = " ".join(exercise.words[i] for i in placed if 0 <= i < len(exercise.words))
        expected = " ".join(exercise.words[i] for i in exercise.correct_order)

        return AnswerResult(
            correct=is_correct,
            feedback="Correct!" if is_correct else "Check the word order.",
            user_answer=built,
            correct_answer=expected,
            partial_score=in_place / len(exercise.correct_order) if exercise.correct_order else 0.0,
        )
