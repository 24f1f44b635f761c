"""Request and response schemas for Notes feature"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from app.features.notes.domain import PublicNote


class CreateNoteRequest(BaseModel):
    """Request model for note creation"""
    model_config = ConfigDict(populate_by_name=True)

    content: str
    password: Optional[str] = None
    custom_code: Optional[str] = Field(None, alias="customCode")


class CreateNoteResponse(BaseModel):
    """Response model for note creation"""
    model_config = ConfigDict(populate_by_name=True)

    short_code: str = Field(..., alias="shortCode")
    url: str
    owner_token: Optional[str] = Field(None, alias="ownerToken")


class UpdateNoteRequest(BaseModel):
    """
    Request model for partial note update.

    `password` proves the current password of a protected note, or sets one
    on an unprotected note. `new_password` rotates and `remove_password`
    clears the password of a protected note.
    """
    model_config = ConfigDict(populate_by_name=True)

    content: Optional[str] = None
    password: Optional[str] = None
    new_password: Optional[str] = Field(None, alias="newPassword")
    remove_password: bool = Field(False, alias="removePassword")
    new_short_code: Optional[str] = Field(None, alias="newShortCode")


class VerifyPasswordRequest(BaseModel):
    """Request model for password verification"""
    model_config = ConfigDict(populate_by_name=True)

    short_code: str = Field(..., alias="shortCode")
    password: str


class VerifyPasswordResponse(BaseModel):
    """Response model for password verification"""
    valid: bool
    note: Optional[PublicNote] = None


class CheckAvailabilityResponse(BaseModel):
    available: bool
