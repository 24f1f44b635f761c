"""Notes API endpoints"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header, status
from fastapi.responses import JSONResponse

from app.features.notes.deps import get_note_service
from app.features.notes.domain import PublicNote
from app.features.notes.schemas import (
    CheckAvailabilityResponse,
    CreateNoteRequest,
    CreateNoteResponse,
    UpdateNoteRequest,
    VerifyPasswordRequest,
    VerifyPasswordResponse,
)
from app.features.notes.service import NoteService
from app.middleware.rate_limit import rate_limit

logger = logging.getLogger(__name__)


router = APIRouter(prefix="/api", tags=["notes"])


@router.post(
    "/notes",
    response_model=CreateNoteResponse,
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(rate_limit("create_note"))],
)
async def create_note(
    request: CreateNoteRequest,
    service: NoteService = Depends(get_note_service),
):
    """
    Create a note with optional password protection and custom short code.

    Returns:
        shortCode and share url; ownerToken when owner tokens are enabled

    Raises:
        400: invalid content, password or custom code
        409: custom code already in use
        500: no free short code could be generated
    """
    created = await service.create_note(
        content=request.content,
        password=request.password,
        custom_code=request.custom_code,
    )
    return CreateNoteResponse(
        short_code=created.short_code,
        url=created.url,
        owner_token=created.owner_token,
    )


@router.get(
    "/notes/{code}",
    response_model=PublicNote,
    response_model_exclude_none=True,
    dependencies=[Depends(rate_limit("fetch_note"))],
)
async def get_note(
    code: str,
    note_token: Optional[str] = Header(None, alias="X-Note-Token"),
    service: NoteService = Depends(get_note_service),
):
    """
    Fetch a note by short code.

    Content is empty for password-protected notes; use /api/verify to read it.
    """
    return await service.fetch_note(code, owner_token=note_token)


@router.patch(
    "/notes/{code}",
    response_model=PublicNote,
    response_model_exclude_none=True,
    dependencies=[Depends(rate_limit("update_note"))],
)
async def update_note(
    code: str,
    request: UpdateNoteRequest,
    note_token: Optional[str] = Header(None, alias="X-Note-Token"),
    service: NoteService = Depends(get_note_service),
):
    """
    Update content, password or short code of a note.

    Protected notes require the current password (or X-Note-Token).

    Raises:
        401: missing or wrong password
        404: note not found
        409: newShortCode already in use
    """
    return await service.update_note(
        code,
        content=request.content,
        password=request.password,
        new_password=request.new_password,
        remove_password=request.remove_password,
        new_short_code=request.new_short_code,
        owner_token=note_token,
    )


@router.post(
    "/verify",
    response_model=VerifyPasswordResponse,
    response_model_exclude_none=True,
    dependencies=[Depends(rate_limit("verify_password"))],
)
async def verify_password(
    request: VerifyPasswordRequest,
    service: NoteService = Depends(get_note_service),
):
    """
    Verify the password of a protected note and return its content.

    A wrong password answers 401 with {"valid": false}.
    """
    result = await service.verify_password(request.short_code, request.password)
    if not result.valid:
        return JSONResponse(status_code=status.HTTP_401_UNAUTHORIZED, content={"valid": False})

    return VerifyPasswordResponse(valid=True, note=result.note)


@router.get(
    "/check/{code}",
    response_model=CheckAvailabilityResponse,
    dependencies=[Depends(rate_limit("check_code"))],
)
async def check_availability(
    code: str,
    service: NoteService = Depends(get_note_service),
):
    """Report whether a short code is free"""
    return CheckAvailabilityResponse(available=await service.check_availability(code))
