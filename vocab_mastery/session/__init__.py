"""Session Runner: lesson and review session lifecycle."""

from .runner import SessionKind, SessionRunner, SessionState, SessionStatus

__all__ = ["SessionRunner", "SessionState", "SessionKind", "SessionStatus"]
