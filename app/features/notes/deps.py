"""FastAPI dependencies wiring the note service to its collaborators"""

from typing import AsyncGenerator

from fastapi import Depends

from app.config import NOTE_STORE_BACKEND
from app.db.session import get_session_factory
from app.features.notes.domain import NoteStore
from app.features.notes.repository import SqlNoteRepository
from app.features.notes.security import PasswordGuard
from app.features.notes.service import NoteService
from app.features.notes.tokens import OwnerTokens
from app.infra.supabase import get_supabase_client
from app.infra.supabase.repositories.notes import NoteRepository


async def get_note_store() -> AsyncGenerator[NoteStore, None]:
    """Note store for the configured backend (Supabase unless NOTE_STORE_BACKEND=postgres)"""
    if NOTE_STORE_BACKEND == "postgres":
        async with get_session_factory()() as session:
            yield SqlNoteRepository(session)
    else:
        yield NoteRepository(get_supabase_client())


def get_password_guard() -> PasswordGuard:
    return PasswordGuard()


def get_owner_tokens() -> OwnerTokens:
    return OwnerTokens()


def get_note_service(
    store: NoteStore = Depends(get_note_store),
    guard: PasswordGuard = Depends(get_password_guard),
    tokens: OwnerTokens = Depends(get_owner_tokens),
) -> NoteService:
    return NoteService(store, guard, tokens)
