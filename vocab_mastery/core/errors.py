"""
Error taxonomy for the mastery engine.

- NotFound: a referenced item or record does not exist
- InvalidState: the operation is not valid for the current session/record state
- Unavailable: the persistence collaborator failed
- ConcurrentUpdate: another writer changed the record since it was read

Sparse item pools are not an error; exercise building degrades instead.
"""

from __future__ import annotations


class MasteryError(Exception):
    """Base class for every error raised by the engine."""


class NotFound(MasteryError):
    """Raised when a referenced item or mastery record is absent."""

    def __init__(self, kind: str, identifier: str):
        self.kind = kind
        self.identifier = identifier
        super().__init__(f"{kind} not found: {identifier}")


class InvalidState(MasteryError):
    """Raised when an operation is rejected by the current state. Nothing is mutated."""


class Unavailable(MasteryError):
    """Raised when the persistence or progress collaborator cannot be reached."""


class ConcurrentUpdate(Unavailable):
    """Raised when an optimistic-concurrency check fails on upsert."""

    def __init__(self, learner_id: str, item_id: str, expected_version: int):
        self.learner_id = learner_id
        self.item_id = item_id
        self.expected_version = expected_version
        super().__init__(
            f"Mastery record ({learner_id}, {item_id}) changed since version {expected_version}"
        )
