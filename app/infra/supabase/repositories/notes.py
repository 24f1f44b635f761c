"""Notes repository"""
from typing import Optional

from supabase import Client  # type: ignore

from app.config import NOTES_TABLE
from app.features.notes.domain import Note, NoteCreate, NoteUpdate

from .base import BaseRepository


class NoteRepository(BaseRepository[Note, NoteCreate, NoteUpdate]):
    """Repository for notes operations"""

    def __init__(self, client: Client):
        super().__init__(client, NOTES_TABLE, Note)

    async def find_by_short_code(self, short_code: str) -> Optional[Note]:
        """Find a note by its public short code"""
        rows = await self.find_by_filters({"short_code": short_code}, limit=1)
        return self._to_model(rows[0]) if rows else None

    async def short_code_exists(self, short_code: str) -> bool:
        """Existence probe that only selects the id column"""
        rows = await self.find_by_filters({"short_code": short_code}, limit=1, columns="id")
        return bool(rows)

    async def update_by_id(self, note_id: str, data: NoteUpdate) -> Optional[Note]:
        return await self.update(note_id, data)
