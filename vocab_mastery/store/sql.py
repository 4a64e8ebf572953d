"""
SQLAlchemy repository for mastery records.

Runs on the SQLAlchemy asyncio extension: aiosqlite for SQLite URLs and
asyncpg for PostgreSQL URLs. Driver errors are translated to Unavailable;
lost optimistic-concurrency races are reported as ConcurrentUpdate.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator, Iterable
from contextlib import asynccontextmanager
from dataclasses import replace
from datetime import datetime

from loguru import logger
from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from vocab_mastery.core.clock import from_iso, to_iso
from vocab_mastery.core.errors import ConcurrentUpdate, MasteryError, NotFound, Unavailable
from vocab_mastery.core.models import MasteryRecord, MasteryStatus, VocabularyItem

from .repository import ItemFilter
from .tables import Base, MasteryRecordRow, VocabularyItemRow


def get_async_url(url: str) -> str:
    """Convert a sync database URL to its asyncio driver variant."""
    if url.startswith(("postgresql+asyncpg://", "sqlite+aiosqlite://")):
        return url
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+asyncpg://", 1)
    if url.startswith("sqlite://"):
        return url.replace("sqlite://", "sqlite+aiosqlite://", 1)
    return url


# =============================================================================
# Row conversion
# =============================================================================


def _item_from_row(row: VocabularyItemRow) -> VocabularyItem:
    return VocabularyItem(
        id=row.id,
        source_text=row.source_text,
        target_text=row.target_text,
        image_ref=row.image_ref,
        audio_ref=row.audio_ref,
        tags=frozenset(tag for tag in row.tags.split(",") if tag),
    )


def _item_to_row(item: VocabularyItem) -> VocabularyItemRow:
    return VocabularyItemRow(
        id=item.id,
        source_text=item.source_text,
        target_text=item.target_text,
        image_ref=item.image_ref,
        audio_ref=item.audio_ref,
        tags=",".join(sorted(item.tags)),
    )


def _record_from_row(row: MasteryRecordRow) -> MasteryRecord:
    return MasteryRecord(
        id=row.id,
        learner_id=row.learner_id,
        item_id=row.item_id,
        status=MasteryStatus(row.status),
        correct_count=row.correct_count,
        incorrect_count=row.incorrect_count,
        streak=row.streak,
        next_due=from_iso(row.next_due) if row.next_due else None,
        last_reviewed=from_iso(row.last_reviewed) if row.last_reviewed else None,
        version=row.version,
    )


def _record_values(record: MasteryRecord) -> dict:
    return {
        "status": record.status.value,
        "correct_count": record.correct_count,
        "incorrect_count": record.incorrect_count,
        "streak": record.streak,
        "next_due": to_iso(record.next_due) if record.next_due else None,
        "last_reviewed": to_iso(record.last_reviewed) if record.last_reviewed else None,
    }


# =============================================================================
# Repository
# =============================================================================


class SqlMasteryRepository:
    """MasteryRepository backed by a relational database."""

    def __init__(self, engine: AsyncEngine):
        self.engine = engine
        self._sessions = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    @classmethod
    def from_url(cls, database_url: str, echo: bool = False) -> SqlMasteryRepository:
        """Create a repository (and its engine) for a database URL."""
        engine = create_async_engine(get_async_url(database_url), echo=echo, pool_pre_ping=True)
        return cls(engine)

    async def init_schema(self) -> None:
        """Create tables if they do not exist."""
        try:
            async with self.engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
        except SQLAlchemyError as e:
            raise Unavailable(f"Could not initialize schema: {e}") from e
        logger.info("Mastery tables initialized")

    async def dispose(self) -> None:
        await self.engine.dispose()

    @asynccontextmanager
    async def _session_scope(self) -> AsyncGenerator[AsyncSession, None]:
        """Provide a transactional scope around a series of operations."""
        async with self._sessions() as session:
            try:
                yield session
                await session.commit()
            except MasteryError:
                await session.rollback()
                raise
            except SQLAlchemyError as e:
                await session.rollback()
                logger.error(f"Database operation failed: {e}")
                raise Unavailable(str(e)) from e

    # =========================================================================
    # Items
    # =========================================================================

    async def get_item(self, item_id: str) -> VocabularyItem:
        async with self._session_scope() as session:
            row = await session.get(VocabularyItemRow, item_id)
            if row is None:
                raise NotFound("VocabularyItem", item_id)
            return _item_from_row(row)

    async def list_items(self, item_filter: ItemFilter | None = None) -> list[VocabularyItem]:
        stmt = select(VocabularyItemRow).order_by(VocabularyItemRow.id)
        if item_filter is not None and item_filter.item_ids is not None:
            stmt = stmt.where(VocabularyItemRow.id.in_(item_filter.item_ids))

        async with self._session_scope() as session:
            rows = (await session.scalars(stmt)).all()

        items = [_item_from_row(row) for row in rows]
        if item_filter is not None:
            items = [item for item in items if item_filter.matches(item)]
        return items

    async def add_items(self, items: Iterable[VocabularyItem]) -> int:
        count = 0
        async with self._session_scope() as session:
            for item in items:
                await session.merge(_item_to_row(item))
                count += 1
        logger.debug(f"Stored {count} vocabulary items")
        return count

    # =========================================================================
    # Mastery records
    # =========================================================================

    async def get_mastery_record(self, learner_id: str, item_id: str) -> MasteryRecord | None:
        stmt = select(MasteryRecordRow).where(
            MasteryRecordRow.learner_id == learner_id,
            MasteryRecordRow.item_id == item_id,
        )
        async with self._session_scope() as session:
            row = (await session.scalars(stmt)).first()
            return _record_from_row(row) if row else None

    async def upsert_mastery_record(
        self, record: MasteryRecord, expected_version: int
    ) -> MasteryRecord:
        new_version = expected_version + 1

        async with self._session_scope() as session:
            if expected_version == 0:
                session.add(
                    MasteryRecordRow(
                        id=record.id,
                        learner_id=record.learner_id,
                        item_id=record.item_id,
                        version=new_version,
                        **_record_values(record),
                    )
                )
                try:
                    await session.flush()
                except IntegrityError:
                    # Another writer inserted the same (learner, item) first
                    raise ConcurrentUpdate(record.learner_id, record.item_id, expected_version) from None
            else:
                result = await session.execute(
                    update(MasteryRecordRow)
                    .where(
                        MasteryRecordRow.learner_id == record.learner_id,
                        MasteryRecordRow.item_id == record.item_id,
                        MasteryRecordRow.version == expected_version,
                    )
                    .values(version=new_version, **_record_values(record))
                )
                if result.rowcount == 0:
                    raise ConcurrentUpdate(record.learner_id, record.item_id, expected_version)

        return replace(record, version=new_version)

    async def list_due_records(self, learner_id: str, now: datetime) -> list[MasteryRecord]:
        stmt = (
            select(MasteryRecordRow)
            .where(
                MasteryRecordRow.learner_id == learner_id,
                MasteryRecordRow.next_due.is_not(None),
                MasteryRecordRow.next_due <= to_iso(now),
            )
            .order_by(MasteryRecordRow.next_due, MasteryRecordRow.id)
        )
        async with self._session_scope() as session:
            rows = (await session.scalars(stmt)).all()
        return [_record_from_row(row) for row in rows]

    async def list_records(self, learner_id: str) -> list[MasteryRecord]:
        stmt = (
            select(MasteryRecordRow)
            .where(MasteryRecordRow.learner_id == learner_id)
            .order_by(MasteryRecordRow.item_id)
        )
        async with self._session_scope() as session:
            rows = (await session.scalars(stmt)).all()
        return [_record_from_row(row) for row in rows]
