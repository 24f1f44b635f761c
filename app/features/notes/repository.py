"""SQLAlchemy repository for Notes (direct Postgres backend)"""

import logging
from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

# SQLAlchemy ORM models
from app.db.models.note import Note as NoteORM

# Pydantic domain models (feature-local)
from app.features.notes.domain import Note, NoteCreate, NoteUpdate
from app.features.notes.errors import CodeTaken, StoreError

logger = logging.getLogger(__name__)

UNIQUE_VIOLATION = "23505"


class SqlNoteRepository:
    """Repository for note operations using SQLAlchemy"""

    def __init__(self, db: AsyncSession):
        """
        Initialize the repository with a database session.

        Args:
            db: SQLAlchemy async database session
        """
        self.db = db

    async def find_by_short_code(self, short_code: str) -> Optional[Note]:
        stmt = select(NoteORM).where(NoteORM.short_code == short_code).limit(1)
        try:
            result = await self.db.execute(stmt)
        except SQLAlchemyError as e:
            logger.error(f"Failed to look up note by short code: {e}", exc_info=True)
            raise StoreError() from e

        row = result.scalars().first()
        return Note.model_validate(row) if row else None

    async def short_code_exists(self, short_code: str) -> bool:
        stmt = select(NoteORM.id).where(NoteORM.short_code == short_code).limit(1)
        try:
            result = await self.db.execute(stmt)
        except SQLAlchemyError as e:
            logger.error(f"Failed to probe short code: {e}", exc_info=True)
            raise StoreError() from e

        return result.first() is not None

    async def create(self, data: NoteCreate) -> Note:
        row = NoteORM(**data.model_dump())
        self.db.add(row)
        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            raise self._translate_integrity_error(e) from e
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Failed to insert note: {e}", exc_info=True)
            raise StoreError() from e

        await self.db.refresh(row)
        return Note.model_validate(row)

    async def update_by_id(self, note_id: UUID | str, data: NoteUpdate) -> Optional[Note]:
        if isinstance(note_id, str):
            note_id = UUID(note_id)

        row = await self.db.get(NoteORM, note_id)
        if row is None:
            return None

        for field, value in data.model_dump(exclude_unset=True).items():
            setattr(row, field, value)

        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            raise self._translate_integrity_error(e) from e
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Failed to update note {note_id}: {e}", exc_info=True)
            raise StoreError() from e

        await self.db.refresh(row)
        return Note.model_validate(row)

    @staticmethod
    def _translate_integrity_error(error: IntegrityError) -> Exception:
        sqlstate = getattr(error.orig, "sqlstate", None) or getattr(error.orig, "pgcode", None)
        if sqlstate == UNIQUE_VIOLATION:
            logger.warning("Unique constraint violated on notes.short_code")
            return CodeTaken()

        logger.error(f"Integrity error on notes table: {error}", exc_info=True)
        return StoreError()
