"""Domain models for Notes feature"""

from datetime import datetime
from enum import Enum
from typing import Optional, Protocol
from uuid import UUID

from pydantic import BaseModel, ConfigDict, field_serializer


class PasswordState(str, Enum):
    """Password protection state of a note"""
    UNPROTECTED = "unprotected"
    PROTECTED = "protected"


class NoteBase(BaseModel):
    """Base note fields"""
    short_code: str
    content: str
    password_hash: Optional[str] = None


class NoteCreate(NoteBase):
    """Note creation model"""
    pass


class NoteUpdate(BaseModel):
    """Note update model - only fields that are explicitly set are written"""
    short_code: Optional[str] = None
    content: Optional[str] = None
    password_hash: Optional[str] = None
    updated_at: Optional[datetime] = None


class Note(NoteBase):
    """Complete note model from the note store"""
    id: UUID | str
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @field_serializer('id')
    def serialize_id(self, id: UUID | str) -> str:
        return str(id)

    @property
    def password_state(self) -> PasswordState:
        return PasswordState.PROTECTED if self.password_hash else PasswordState.UNPROTECTED

    @property
    def has_password(self) -> bool:
        return self.password_state == PasswordState.PROTECTED


class PublicNote(BaseModel):
    """Note as exposed to clients; never carries the password hash"""
    id: str
    short_code: str
    content: str
    has_password: bool
    created_at: datetime
    updated_at: datetime
    is_owner: Optional[bool] = None

    @classmethod
    def from_note(cls, note: Note, withhold_content: bool = False, is_owner: Optional[bool] = None) -> "PublicNote":
        return cls(
            id=str(note.id),
            short_code=note.short_code,
            content="" if withhold_content else note.content,
            has_password=note.has_password,
            created_at=note.created_at,
            updated_at=note.updated_at,
            is_owner=is_owner,
        )


class NoteStore(Protocol):
    """Persistence operations the notes feature needs from a backend"""

    async def find_by_short_code(self, short_code: str) -> Optional[Note]: ...

    async def short_code_exists(self, short_code: str) -> bool: ...

    async def create(self, data: NoteCreate) -> Note: ...

    async def update_by_id(self, note_id: str, data: NoteUpdate) -> Optional[Note]: ...
