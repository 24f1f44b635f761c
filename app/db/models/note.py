"""SQLAlchemy ORM model for notes table"""

import uuid

from sqlalchemy import Column, DateTime, Index, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.sql import func

from app.db.base import Base


class Note(Base):
    """
    SQLAlchemy ORM model for the notes table.
    Maps to the same table the Supabase store reads and writes.
    """
    __tablename__ = "notes"

    # Primary key
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)

    # Public lookup key, uniqueness enforced by the database
    short_code = Column(Text, nullable=False, unique=True, index=True)

    content = Column(Text, nullable=False)

    # Bcrypt hash, NULL when the note is unprotected
    password_hash = Column(Text, nullable=True)

    # Timestamps
    created_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False
    )
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False
    )

    def __repr__(self) -> str:
        return f"<Note(id={self.id}, short_code='{self.short_code}')>"


# Listing order index; unused by current lookups
Index("idx_notes_created_at", Note.created_at.desc())
