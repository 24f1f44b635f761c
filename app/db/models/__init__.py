"""SQLAlchemy ORM models"""

from app.db.models.note import Note

__all__ = ["Note"]
