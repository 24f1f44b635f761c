"""Conversion of errors into structured JSON responses.

Every response body produced here has the shape ``{"error": ..., "message"?: ...}``.
No traceback or internal identifier reaches the client.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.features.notes.errors import NoteServiceError, RateLimited, StoreError

logger = logging.getLogger(__name__)

UNEXPECTED_ERROR_MESSAGE = "An unexpected error occurred. Please try again."


def _first_validation_issue(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"

    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "Invalid value")
    return f"{location}: {message}" if location else message


def register_exception_handlers(app: FastAPI) -> None:
    """
    Register handlers converting errors to HTTP responses.

    Usage:
        app = FastAPI()
        register_exception_handlers(app)
    """

    @app.exception_handler(NoteServiceError)
    async def note_service_error_handler(request: Request, exc: NoteServiceError) -> JSONResponse:
        headers = None
        if isinstance(exc, RateLimited):
            headers = {
                "Retry-After": str(exc.retry_after),
                "X-RateLimit-Remaining": str(exc.remaining),
            }

        if isinstance(exc, StoreError):
            logger.error(f"Store error on {request.method} {request.url.path}")
        elif exc.status_code >= 500:
            logger.error(f"[{exc.error_code}] {exc.message} on {request.method} {request.url.path}")
        else:
            logger.info(f"[{exc.error_code}] {request.method} {request.url.path} -> {exc.status_code}")

        return JSONResponse(status_code=exc.status_code, content=exc.to_body(), headers=headers)

    @app.exception_handler(RequestValidationError)
    async def request_validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": "Validation failed", "message": _first_validation_issue(exc)},
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception(f"Unhandled exception on {request.method} {request.url.path}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": UNEXPECTED_ERROR_MESSAGE},
        )
