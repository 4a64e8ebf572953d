"""
SQLAlchemy models for the mastery store.

- vocabulary_items: content items (read-mostly, owned by content authoring)
- mastery_records: one row per (learner, item), never deleted

Timestamps are stored as ISO-8601 UTC text written by core.clock.to_iso, so
due-date comparisons and ordering work on the text on every backend.
"""

from __future__ import annotations

from sqlalchemy import Index, Integer, Text, UniqueConstraint
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


class VocabularyItemRow(Base):
    """A vocabulary item. Tags are stored as a comma-separated list."""

    __tablename__ = "vocabulary_items"

    id: Mapped[str] = mapped_column(Text, primary_key=True)
    source_text: Mapped[str] = mapped_column(Text, nullable=False)
    target_text: Mapped[str] = mapped_column(Text, nullable=False)
    image_ref: Mapped[str | None] = mapped_column(Text)
    audio_ref: Mapped[str | None] = mapped_column(Text)
    tags: Mapped[str] = mapped_column(Text, default="", nullable=False)


class MasteryRecordRow(Base):
    """
    Retention state per learner per item.

    `version` is the optimistic-concurrency column: every update is
    conditional on the version that was read.
    """

    __tablename__ = "mastery_records"

    id: Mapped[str] = mapped_column(Text, primary_key=True)
    learner_id: Mapped[str] = mapped_column(Text, nullable=False)
    item_id: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[str] = mapped_column(Text, nullable=False, default="new")
    correct_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    incorrect_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    streak: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    next_due: Mapped[str | None] = mapped_column(Text)
    last_reviewed: Mapped[str | None] = mapped_column(Text)
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    __table_args__ = (
        UniqueConstraint("learner_id", "item_id", name="uq_mastery_learner_item"),
        Index("idx_mastery_learner_due", "learner_id", "next_due"),
    )
