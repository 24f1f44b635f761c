"""Note service: orchestrates allocation, password protection and storage"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from app.config import APP_URL
from app.features.notes.allocator import ShortCodeAllocator
from app.features.notes.domain import Note, NoteCreate, NoteStore, NoteUpdate, PublicNote
from app.features.notes.errors import NotFound, NotPasswordProtected, StoreError, Unauthorized, ValidationError
from app.features.notes.security import PasswordGuard
from app.features.notes.tokens import OwnerTokens
from app.features.notes.validation import validate_content, validate_password

logger = logging.getLogger(__name__)


def build_note_url(short_code: str, base_url: str = APP_URL) -> str:
    return f"{base_url.rstrip('/')}/{short_code}"


@dataclass
class CreatedNote:
    """Outcome of a successful create"""
    short_code: str
    url: str
    owner_token: Optional[str] = None


@dataclass
class VerificationResult:
    """Outcome of a password check; a wrong password is a valid negative result"""
    valid: bool
    note: Optional[PublicNote] = None


class NoteService:
    """Service for note lifecycle operations"""

    def __init__(
        self,
        store: NoteStore,
        guard: PasswordGuard,
        tokens: Optional[OwnerTokens] = None,
        allocator: Optional[ShortCodeAllocator] = None,
        base_url: str = APP_URL,
    ):
        self.store = store
        self.guard = guard
        self.tokens = tokens or OwnerTokens(secret=None)
        self.allocator = allocator or ShortCodeAllocator(store)
        self.base_url = base_url

    # ============================================================================
    # LOOKUP
    # ============================================================================

    async def get_note_or_404(self, short_code: str) -> Note:
        if not short_code or not short_code.strip():
            raise ValidationError(detail="Short code is required")

        note = await self.store.find_by_short_code(short_code)
        if not note:
            raise NotFound()
        return note

    def _is_owner(self, note: Note, owner_token: Optional[str]) -> Optional[bool]:
        if not owner_token or not self.tokens.enabled:
            return None
        return self.tokens.verify(owner_token, str(note.id))

    # ============================================================================
    # OPERATIONS
    # ============================================================================

    async def create_note(
        self,
        content: str,
        password: Optional[str] = None,
        custom_code: Optional[str] = None,
    ) -> CreatedNote:
        """
        Create a note under a custom or generated short code.

        Raises:
            ValidationError: bad content, password or code format
            CodeTaken: the custom code (or, on a race, the generated one) is in use
            AllocationExhausted: no free generated code within the attempt bound
        """
        validate_content(content)
        if password is not None:
            validate_password(password)

        if custom_code is not None:
            short_code = await self.allocator.validate_custom(custom_code)
        else:
            short_code = await self.allocator.generate_and_reserve()

        password_hash = await self.guard.hash(password) if password else None

        note = await self.store.create(
            NoteCreate(short_code=short_code, content=content, password_hash=password_hash)
        )
        logger.info(
            f"Created note {note.short_code} (content_len={len(content)}, "
            f"protected={note.has_password}, custom={custom_code is not None})"
        )

        return CreatedNote(
            short_code=note.short_code,
            url=build_note_url(note.short_code, self.base_url),
            owner_token=self.tokens.issue(str(note.id)),
        )

    async def fetch_note(self, short_code: str, owner_token: Optional[str] = None) -> PublicNote:
        """Public view of a note; content is withheld while a password is set"""
        note = await self.get_note_or_404(short_code)
        return PublicNote.from_note(
            note,
            withhold_content=note.has_password,
            is_owner=self._is_owner(note, owner_token),
        )

    async def verify_password(self, short_code: str, password: str) -> VerificationResult:
        """
        Check a password against a protected note.

        Raises:
            NotFound: no note with this short code
            NotPasswordProtected: the note has no password
        """
        if not password:
            raise ValidationError(detail="Password is required")

        note = await self.get_note_or_404(short_code)
        if not note.has_password:
            raise NotPasswordProtected()

        if not await self.guard.verify(password, note.password_hash):
            logger.warning(f"Failed password verification for note {note.short_code}")
            return VerificationResult(valid=False)

        return VerificationResult(valid=True, note=PublicNote.from_note(note))

    async def update_note(
        self,
        short_code: str,
        content: Optional[str] = None,
        password: Optional[str] = None,
        new_password: Optional[str] = None,
        remove_password: bool = False,
        new_short_code: Optional[str] = None,
        owner_token: Optional[str] = None,
    ) -> PublicNote:
        """
        Apply a partial update.

        A protected note needs its current ``password`` (or a valid owner
        token). On a protected note ``new_password`` rotates the hash and
        ``remove_password`` clears it; on an unprotected note ``password`` or
        ``new_password`` sets one.

        Raises:
            ValidationError: malformed fields or nothing to change
            NotFound: no note with this short code
            Unauthorized: missing or wrong password on a protected note
            CodeTaken: ``new_short_code`` belongs to another note
            StoreError: the store accepted the lookup but refused the write
        """
        if content is not None:
            validate_content(content)
        if new_password is not None:
            validate_password(new_password)
        if new_password is not None and remove_password:
            raise ValidationError(detail="Cannot set and remove the password in the same request")

        note = await self.get_note_or_404(short_code)
        changes: dict = {}

        if note.has_password:
            await self._authorize(note, password, owner_token)
            if new_password is not None:
                changes["password_hash"] = await self.guard.hash(new_password)
            elif remove_password:
                changes["password_hash"] = None
        else:
            initial_password = new_password if new_password is not None else password
            if initial_password is not None:
                validate_password(initial_password)
                changes["password_hash"] = await self.guard.hash(initial_password)

        if content is not None:
            changes["content"] = content

        if new_short_code is not None and new_short_code != note.short_code:
            changes["short_code"] = await self.allocator.validate_custom(new_short_code)

        if not changes:
            raise ValidationError(detail="No changes supplied")

        changes["updated_at"] = datetime.now(timezone.utc)
        updated = await self.store.update_by_id(str(note.id), NoteUpdate(**changes))
        if not updated:
            # The row was just read, so an empty write means the store refused it
            logger.error(f"Update of note {note.short_code} matched no rows")
            raise StoreError()

        logger.info(
            f"Updated note {note.short_code} "
            f"(fields={sorted(k for k in changes if k != 'updated_at')}, protected={updated.has_password})"
        )
        return PublicNote.from_note(updated, is_owner=self._is_owner(updated, owner_token))

    async def check_availability(self, short_code: str) -> bool:
        """Read-only probe; absence means available"""
        if not short_code or not short_code.strip():
            raise ValidationError(detail="Code is required")
        return not await self.store.short_code_exists(short_code)

    async def _authorize(self, note: Note, password: Optional[str], owner_token: Optional[str]) -> None:
        if self._is_owner(note, owner_token):
            return

        if not password:
            raise Unauthorized(detail="Password is required to modify this note")

        if not await self.guard.verify(password, note.password_hash):
            logger.warning(f"Rejected update with wrong password for note {note.short_code}")
            raise Unauthorized()
