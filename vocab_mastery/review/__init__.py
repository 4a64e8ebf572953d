"""Review Queue Builder: due items to translation exercises."""

from .queue import DEFAULT_MAX_DISTRACTORS, ReviewQueueBuilder

__all__ = ["ReviewQueueBuilder", "DEFAULT_MAX_DISTRACTORS"]
