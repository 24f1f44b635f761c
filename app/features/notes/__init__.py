"""Notes feature module"""

from app.features.notes.domain import Note, NoteCreate, NoteUpdate, PublicNote, PasswordState
from app.features.notes.errors import (
    NoteServiceError,
    ValidationError,
    NotPasswordProtected,
    Unauthorized,
    NotFound,
    CodeTaken,
    RateLimited,
    AllocationExhausted,
    StoreError,
)

__all__ = [
    "Note",
    "NoteCreate",
    "NoteUpdate",
    "PublicNote",
    "PasswordState",
    "NoteServiceError",
    "ValidationError",
    "NotPasswordProtected",
    "Unauthorized",
    "NotFound",
    "CodeTaken",
    "RateLimited",
    "AllocationExhausted",
    "StoreError",
]
