"""
Exercise kinds for lesson and review sessions.

Each kind has its own module with:
- a frozen dataclass describing the exercise payload
- a handler that parses persisted configs, names the tracked item and
  checks a learner's answer
"""

from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .base import AnswerResult, ExerciseHandler


class ExerciseKind(str, Enum):
    """Supported exercise kinds."""
    LISTEN_TAP_IMAGE = "listen_tap_image"
    MATCH = "match"
    ORDER_WORDS = "order_words"
    READ_CHOOSE = "read_choose"
    SPEAK_REPEAT = "speak_repeat"
    TRANSLATE = "translate"


# Handler registry - populated by @register decorator
HANDLERS: dict[ExerciseKind, "ExerciseHandler"] = {}


def register(kind: ExerciseKind):
    """Decorator to register an exercise handler."""
    def decorator(cls):
        HANDLERS[kind] = cls()
        return cls
    return decorator


def get_handler(kind: str | ExerciseKind) -> "ExerciseHandler | None":
    """Get the handler for an exercise kind."""
    if isinstance(kind, str):
        try:
            kind = ExerciseKind(kind.lower())
        except ValueError:
            return None
    return HANDLERS.get(kind)


def parse_exercise(data: dict[str, Any]) -> Any:
    """
    Build a typed exercise from a persisted config.

    Args:
        data: Dictionary with a "type" key plus the kind's payload

    Raises:
        ValueError: unknown type or malformed payload
    """
    kind = data.get("type")
    handler = get_handler(kind) if isinstance(kind, str) else None
    if handler is None:
        raise ValueError(f"Unknown exercise type: {kind!r}")
    return handler.parse(data)


def tracked_item_id(exercise: Any) -> str | None:
    """Item whose mastery an answer to this exercise updates, if any."""
    return HANDLERS[exercise.kind].tracked_item_id(exercise)


def check(exercise: Any, answer: Any) -> "AnswerResult":
    """Grade a learner's answer to an exercise."""
    return HANDLERS[exercise.kind].check(exercise, answer)


# Import handlers to trigger registration
from . import choice  # noqa: E402
from . import match  # noqa: E402
from . import order_words  # noqa: E402
from . import speak_repeat  # noqa: E402
from . import translate  # noqa: E402

_unhandled = set(ExerciseKind) - set(HANDLERS)
if _unhandled:
    raise RuntimeError(f"Exercise kinds without a handler: {sorted(k.value for k in _unhandled)}")

from .base import AnswerResult  # noqa: E402
from .choice import ListenTapImageExercise, ReadChooseExercise  # noqa: E402
from .match import MatchExercise, MatchPair  # noqa: E402
from .order_words import OrderWordsExercise  # noqa: E402
from .speak_repeat import SpeakRepeatExercise  # noqa: E402
from .translate import ReviewExercise  # noqa: E402

__all__ = [
    "ExerciseKind",
    "HANDLERS",
    "AnswerResult",
    "get_handler",
    "register",
    "parse_exercise",
    "tracked_item_id",
    "check",
    "ListenTapImageExercise",
    "ReadChooseExercise",
    "MatchExercise",
    "MatchPair",
    "OrderWordsExercise",
    "SpeakRepeatExercise",
    "ReviewExercise",
]
