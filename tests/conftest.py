import os
import uuid
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional

import pytest

# Process-local limiter and Supabase store regardless of the developer's .env
os.environ.pop("REDIS_URL", None)
os.environ["NOTE_STORE_BACKEND"] = "supabase"

from fastapi.testclient import TestClient  # noqa: E402

from app.features.notes.deps import get_note_store, get_owner_tokens, get_password_guard  # noqa: E402
from app.features.notes.domain import Note, NoteCreate, NoteUpdate  # noqa: E402
from app.features.notes.errors import CodeTaken  # noqa: E402
from app.features.notes.security import PasswordGuard  # noqa: E402
from app.features.notes.service import NoteService  # noqa: E402
from app.features.notes.tokens import OwnerTokens  # noqa: E402
from app.main import app  # noqa: E402

TEST_BASE_URL = "https://notes.test"


class InMemoryNoteStore:
    """Note store backed by a dict, enforcing short code uniqueness like the real table"""

    def __init__(self):
        self.notes: Dict[str, Note] = {}
        self.probes: List[str] = []

    def _by_code(self, short_code: str) -> Optional[Note]:
        return next((n for n in self.notes.values() if n.short_code == short_code), None)

    async def find_by_short_code(self, short_code: str) -> Optional[Note]:
        return self._by_code(short_code)

    async def short_code_exists(self, short_code: str) -> bool:
        self.probes.append(short_code)
        return self._by_code(short_code) is not None

    async def create(self, data: NoteCreate) -> Note:
        if self._by_code(data.short_code):
            raise CodeTaken()
        # Stored timestamps lag one second so later updates are observable
        now = datetime.now(timezone.utc) - timedelta(seconds=1)
        note = Note(id=str(uuid.uuid4()), created_at=now, updated_at=now, **data.model_dump())
        self.notes[str(note.id)] = note
        return note

    async def update_by_id(self, note_id: str, data: NoteUpdate) -> Optional[Note]:
        note = self.notes.get(str(note_id))
        if note is None:
            return None

        changes = data.model_dump(exclude_unset=True)
        existing = self._by_code(changes["short_code"]) if "short_code" in changes else None
        if existing and str(existing.id) != str(note_id):
            raise CodeTaken()

        updated = note.model_copy(update=changes)
        self.notes[str(note_id)] = updated
        return updated


@pytest.fixture
def store() -> InMemoryNoteStore:
    return InMemoryNoteStore()


@pytest.fixture
def guard() -> PasswordGuard:
    # Minimum bcrypt cost and no failure delay keep the suite fast
    return PasswordGuard(rounds=4, failure_delay=0)


@pytest.fixture
def tokens() -> OwnerTokens:
    return OwnerTokens(secret="test-note-token-secret")


@pytest.fixture
def service(store, guard, tokens) -> NoteService:
    return NoteService(store, guard, tokens, base_url=TEST_BASE_URL)


@pytest.fixture
def client(store, guard, tokens):
    app.dependency_overrides[get_note_store] = lambda: store
    app.dependency_overrides[get_password_guard] = lambda: guard
    app.dependency_overrides[get_owner_tokens] = lambda: tokens
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
