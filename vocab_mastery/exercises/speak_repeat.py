"""
Speak-repeat exercise handler.

Speech capture and recognition happen outside the engine; the handler only
grades the transcript it is given. A transcript counts when its similarity to
the expected text reaches the threshold. Exercises without their own
threshold use the configured default (0.7).
"""

import re
from dataclasses import dataclass
from difflib import SequenceMatcher
from typing import ClassVar

from vocab_mastery.config import get_settings

from . import ExerciseKind, register
from .base import AnswerResult, require


@dataclass(frozen=True)
class SpeakRepeatExercise:
    text: str
    audio_ref: str | None = None
    threshold: float | None = None

    kind: ClassVar[ExerciseKind] = ExerciseKind.SPEAK_REPEAT

    @property
    def pass_threshold(self) -> float:
        """Own threshold, or the configured speak_repeat_threshold."""
        if self.threshold is not None:
            return self.threshold
        return get_settings().speak_repeat_threshold


def normalize(text: str) -> str:
    """Lowercase, drop punctuation, collapse whitespace."""
    text = re.sub(r"[^\w\s]", "", text.lower())
    return " ".join(text.split())


def similarity(expected: str, spoken: str) -> float:
    """SequenceMatcher ratio of the normalized strings (0.0-1.0)."""
    return SequenceMatcher(None, normalize(expected), normalize(spoken)).ratio()


@register(ExerciseKind.SPEAK_REPEAT)
class SpeakRepeatHandler:
    """Handler for speak-repeat exercises."""

    def parse(self, data: dict) -> SpeakRepeatExercise:
        require(data, "text")
        threshold = data.get("threshold")
        return SpeakRepeatExercise(
            text=data["text"],
            audio_ref=data.get("audio_ref"),
            threshold=float(threshold) if threshold is not None else None,
        )

    def tracked_item_id(self, exercise: SpeakRepeatExercise) -> str | None:
        return None

    def check(self, exercise: SpeakRepeatExercise, answer: str | None) -> AnswerResult:
        transcript = answer or ""
        score = similarity(exercise.text, transcript)
        is_correct = score >= exercise.pass_threshold

        return AnswerResult(
            correct=is_correct,
            feedback=f"{score:.0%} match" + ("" if is_correct else ", try again"),
            user_answer=transcript,
            correct_answer=exercise.text,
            partial_score=score,
        )
