"""
Single-choice exercise handlers.

- listen_tap_image: hear a word, tap its picture
- read_choose: read a question, pick the matching word

Both track the correct item and accept the chosen item id as the answer.
"""

from dataclasses import dataclass
from typing import ClassVar

from . import ExerciseKind, register
from .base import AnswerResult, require


@dataclass(frozen=True)
class ListenTapImageExercise:
    audio_text: str
    correct_item_id: str
    distractor_item_ids: tuple[str, ...] = ()

    kind: ClassVar[ExerciseKind] = ExerciseKind.LISTEN_TAP_IMAGE

    @property
    def option_ids(self) -> tuple[str, ...]:
        return (self.correct_item_id, *self.distractor_item_ids)


@dataclass(frozen=True)
class ReadChooseExercise:
    question: str
    correct_item_id: str
    distractor_item_ids: tuple[str, ...] = ()

    kind: ClassVar[ExerciseKind] = ExerciseKind.READ_CHOOSE

    @property
    def option_ids(self) -> tuple[str, ...]:
        return (self.correct_item_id, *self.distractor_item_ids)


def _check_choice(correct_item_id: str, answer: str | None) -> AnswerResult:
    chosen = str(answer) if answer is not None else ""
    is_correct = chosen == correct_item_id
    return AnswerResult(
        correct=is_correct,
        feedback="Correct!" if is_correct else "Not quite.",
        user_answer=chosen,
        correct_answer=correct_item_id,
        partial_score=1.0 if is_correct else 0.0,
    )


@register(ExerciseKind.LISTEN_TAP_IMAGE)
class ListenTapImageHandler:
    """Handler for listen-and-tap-the-image exercises."""

    def parse(self, data: dict) -> ListenTapImageExercise:
        require(data, "audio_text", "correct_item_id")
        return ListenTapImageExercise(
            audio_text=data["audio_text"],
            correct_item_id=str(data["correct_item_id"]),
            distractor_item_ids=tuple(str(i) for i in data.get("distractor_item_ids") or ()),
        )

    def tracked_item_id(self, exercise: ListenTapImageExercise) -> str | None:
        return exercise.correct_item_id

    def check(self, exercise: ListenTapImageExercise, answer: str | None) -> AnswerResult:
        return _check_choice(exercise.correct_item_id, answer)


@register(ExerciseKind.READ_CHOOSE)
class ReadChooseHandler:
    """Handler for read-and-choose exercises."""

    def parse(self, data: dict) -> ReadChooseExercise:
        require(data, "question", "correct_item_id")
        return ReadChooseExercise(
            question=data["question"],
            correct_item_id=str(data["correct_item_id"]),
            distractor_item_ids=tuple(str(i) for i in data.get("distractor_item_ids") or ()),
        )

    def tracked_item_id(self, exercise: ReadChooseExercise) -> str | None:
        return exercise.correct_item_id

    def check(self, exercise: ReadChooseExercise, answer: str | None) -> AnswerResult:
        return _check_choice(exercise.correct_item_id, answer)
