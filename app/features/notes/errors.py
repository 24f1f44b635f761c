"""Error kinds raised by the notes feature.

Every failure that can leave the service is one of these classes. The API
layer maps them to HTTP responses through ``error_code`` and ``status_code``,
so nothing crosses the request boundary unconverted.
"""

from typing import Optional


class NoteServiceError(Exception):
    """Base class for notes feature errors"""
    error_code = "internal_error"
    status_code = 500
    default_message = "An unexpected error occurred. Please try again."

    def __init__(self, message: Optional[str] = None, detail: Optional[str] = None):
        self.message = message or self.default_message
        self.detail = detail
        super().__init__(self.message)

    def to_body(self) -> dict:
        """Structured ``{error, message?}`` response body"""
        body = {"error": self.message}
        if self.detail:
            body["message"] = self.detail
        return body


class ValidationError(NoteServiceError):
    """Bad input shape or size (client fault)"""
    error_code = "validation_error"
    status_code = 400
    default_message = "Validation failed"


class NotPasswordProtected(NoteServiceError):
    error_code = "not_password_protected"
    status_code = 400
    default_message = "This note is not password protected"


class Unauthorized(NoteServiceError):
    """Wrong or missing password on a protected mutation"""
    error_code = "unauthorized"
    status_code = 401
    default_message = "Invalid password"


class NotFound(NoteServiceError):
    error_code = "not_found"
    status_code = 404
    default_message = "Note not found"


class CodeTaken(NoteServiceError):
    """Requested short code is already used by another note"""
    error_code = "code_taken"
    status_code = 409
    default_message = "This custom code is already in use. Please choose another."


class RateLimited(NoteServiceError):
    error_code = "rate_limited"
    status_code = 429
    default_message = "Too many requests. Please try again later."

    def __init__(self, message: Optional[str] = None, retry_after: int = 60, remaining: int = 0):
        super().__init__(message)
        self.retry_after = retry_after
        self.remaining = remaining


class AllocationExhausted(NoteServiceError):
    """Every generated short code collided with an existing note"""
    error_code = "allocation_exhausted"
    status_code = 500
    default_message = "Failed to generate unique short code. Please try again."


class StoreError(NoteServiceError):
    """Opaque note store failure; details stay in the server log"""
    error_code = "store_error"
    status_code = 500
    default_message = "Failed to access note storage. Please try again."
