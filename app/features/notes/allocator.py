"""Short code allocation.

The availability probe here only narrows the check-then-insert race; the
unique constraint on ``notes.short_code`` stays the source of truth and the
store adapters turn its violation into ``CodeTaken``.
"""

import logging
import secrets
import string

from app.config import (
    CUSTOM_CODE_MAX_LENGTH,
    SHORT_CODE_GENERATION_ATTEMPTS,
    SHORT_CODE_LENGTH,
    SHORT_CODE_MAX_LENGTH,
    SHORT_CODE_MIN_LENGTH,
)
from app.features.notes.domain import NoteStore
from app.features.notes.errors import AllocationExhausted, CodeTaken, ValidationError
from app.features.notes.validation import short_code_format_error

logger = logging.getLogger(__name__)

# URL-safe alphabet, same character class accepted for custom codes
SHORT_CODE_ALPHABET = string.ascii_letters + string.digits + "_-"


def generate_short_code(length: int = SHORT_CODE_LENGTH) -> str:
    """Random URL-safe short code"""
    return "".join(secrets.choice(SHORT_CODE_ALPHABET) for _ in range(length))


class ShortCodeAllocator:
    """Finds an unused random short code or validates a caller-supplied one"""

    def __init__(
        self,
        store: NoteStore,
        length: int = SHORT_CODE_LENGTH,
        attempts: int = SHORT_CODE_GENERATION_ATTEMPTS,
    ):
        if not SHORT_CODE_MIN_LENGTH <= length <= SHORT_CODE_MAX_LENGTH:
            raise ValueError(
                f"Generated short code length must be between {SHORT_CODE_MIN_LENGTH} and {SHORT_CODE_MAX_LENGTH}"
            )
        self.store = store
        self.length = length
        self.attempts = attempts

    async def generate_and_reserve(self) -> str:
        """
        Return the first generated code that is not in use.

        Raises:
            AllocationExhausted: every attempt collided with an existing note
        """
        for attempt in range(1, self.attempts + 1):
            code = generate_short_code(self.length)
            if not await self.store.short_code_exists(code):
                return code
            logger.info(f"Generated short code collided (attempt {attempt}/{self.attempts})")

        logger.warning(f"Short code allocation exhausted after {self.attempts} attempts")
        raise AllocationExhausted()

    async def validate_custom(self, code: str) -> str:
        """
        Check a caller-supplied code for format, then availability.

        Raises:
            ValidationError: malformed code, rejected before any store call
            CodeTaken: another note already uses the code
        """
        reason = short_code_format_error(code, SHORT_CODE_MIN_LENGTH, CUSTOM_CODE_MAX_LENGTH)
        if reason:
            raise ValidationError(detail=reason)

        if await self.store.short_code_exists(code):
            raise CodeTaken()

        return code
