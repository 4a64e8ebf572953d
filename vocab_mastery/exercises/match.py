"""
Match exercise handler.

The learner pairs each word with its picture or translation. Both columns
come from the same items, so an attempt (left, right) is right when both
sides name the same item. One wrong attempt fails the exercise even if every
pair is matched in the end.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from typing import ClassVar

from . import ExerciseKind, register
from .base import AnswerResult, require

MATCH_TYPES = ("word_to_image", "word_to_translation")


@dataclass(frozen=True)
class MatchPair:
    item_id: str
    match_type: str = "word_to_translation"


@dataclass(frozen=True)
class MatchExercise:
    pairs: tuple[MatchPair, ...]

    kind: ClassVar[ExerciseKind] = ExerciseKind.MATCH


@register(ExerciseKind.MATCH)
class MatchHandler:
    """Handler for match exercises."""

    def parse(self, data: dict) -> MatchExercise:
        require(data, "pairs")
        pairs = []
        for raw in data["pairs"]:
            match_type = raw.get("match_type", "word_to_translation")
            if match_type not in MATCH_TYPES:
                raise ValueError(f"Unknown match type: {match_type!r}")
            pairs.append(MatchPair(item_id=str(raw["item_id"]), match_type=match_type))
        if not pairs:
            raise ValueError("match config needs at least one pair")
        return MatchExercise(pairs=tuple(pairs))

    def tracked_item_id(self, exercise: MatchExercise) -> str | None:
        # Only the first pair's item is tracked
        return exercise.pairs[0].item_id

    def check(self, exercise: MatchExercise, answer: Iterable[tuple[str, str]]) -> AnswerResult:
        """
        Check the learner's attempts.

        Args:
            answer: Every (left_item_id, right_item_id) attempt, in order
        """
        expected = {pair.item_id for pair in exercise.pairs}
        matched: set[str] = set()
        errors = 0
        for left, right in answer:
            if left == right and left in expected:
                matched.add(left)
            else:
                errors += 1

        is_correct = errors == 0 and matched == expected
        if is_correct:
            feedback = "All pairs matched!"
        elif errors:
            feedback = f"{errors} wrong match{'es' if errors != 1 else ''}"
        else:
            feedback = f"{len(expected) - len(matched)} pair(s) left unmatched"

        return AnswerResult(
            correct=is_correct,
            feedback=feedback,
            user_answer=f"{len(matched)}/{len(expected)} matched, {errors} errors",
            correct_answer=", ".join(sorted(expected)),
            partial_score=len(matched) / len(expected),
        )
