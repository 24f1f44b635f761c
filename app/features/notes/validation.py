"""Input validation for note content, passwords and short codes.

All checks run before any store call. Each failing check raises
``ValidationError`` with the user-facing reason as the message detail.
"""

import re
from typing import Optional

from app.config import (
    CUSTOM_CODE_MAX_LENGTH,
    NOTE_MAX_SIZE_BYTES,
    NOTE_MAX_SIZE_CHARS,
    PASSWORD_MAX_LENGTH,
    PASSWORD_MIN_LENGTH,
    SHORT_CODE_MIN_LENGTH,
)
from app.features.notes.errors import ValidationError

SHORT_CODE_PATTERN = re.compile(r"[A-Za-z0-9_-]+")


def validate_content(content: Optional[str]) -> str:
    if content is None or not content.strip():
        raise ValidationError(detail="Note content cannot be empty")

    if len(content) > NOTE_MAX_SIZE_CHARS:
        raise ValidationError(detail=f"Note content cannot exceed {NOTE_MAX_SIZE_CHARS} characters")

    if len(content.encode("utf-8")) > NOTE_MAX_SIZE_BYTES:
        raise ValidationError(detail=f"Note size cannot exceed {NOTE_MAX_SIZE_BYTES // 1024} KB")

    return content


def validate_password(password: str) -> str:
    if len(password) < PASSWORD_MIN_LENGTH:
        raise ValidationError(detail=f"Password must be at least {PASSWORD_MIN_LENGTH} characters")

    if len(password) > PASSWORD_MAX_LENGTH:
        raise ValidationError(detail=f"Password cannot exceed {PASSWORD_MAX_LENGTH} characters")

    return password


def short_code_format_error(
    code: str,
    min_length: int = SHORT_CODE_MIN_LENGTH,
    max_length: int = CUSTOM_CODE_MAX_LENGTH,
) -> Optional[str]:
    """Return the reason a short code is malformed, or None when it is well formed"""
    if len(code) < min_length:
        return f"Custom code must be at least {min_length} characters"

    if len(code) > max_length:
        return f"Custom code cannot exceed {max_length} characters"

    if not SHORT_CODE_PATTERN.fullmatch(code):
        return "Custom code can only contain letters, numbers, hyphens, and underscores"

    return None
