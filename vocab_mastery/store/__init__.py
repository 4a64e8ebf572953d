"""
Mastery Record Store and its persistence adapters.

Components:
- mastery_store: transition() state machine and MasteryStore
- repository: MasteryRepository protocol (external persistence contract)
- memory: InMemoryMasteryRepository
- sql: SqlMasteryRepository (SQLAlchemy asyncio)
"""

from .mastery_store import AnswerOutcome, MasteryStore, transition
from .memory import InMemoryMasteryRepository
from .repository import ItemFilter, MasteryRepository
from .sql import SqlMasteryRepository

__all__ = [
    "transition",
    "MasteryStore",
    "AnswerOutcome",
    "MasteryRepository",
    "ItemFilter",
    "InMemoryMasteryRepository",
    "SqlMasteryRepository",
]
