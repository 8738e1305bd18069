"""Pydantic schemas for the contact API and the submission log."""

import uuid
from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from landing_service.shared.input_validation import (
    MAX_EMAIL_LENGTH,
    MAX_MESSAGE_LENGTH,
    MAX_NAME_LENGTH,
    MAX_SUBJECT_LENGTH,
    validate_required,
)


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class ContactRequest(BaseModel):
    """Schema for contact form submission."""
    name: str = Field(..., max_length=MAX_NAME_LENGTH, description="Your name")
    email: str = Field(..., max_length=MAX_EMAIL_LENGTH, description="Your email address")
    subject: str = Field(..., max_length=MAX_SUBJECT_LENGTH, description="Message subject")
    message: str = Field(..., max_length=MAX_MESSAGE_LENGTH, description="Your message")

    @field_validator('name', 'email', 'subject', 'message', mode='before')
    @classmethod
    def require_text(cls, v, info):
        """Reject missing, non-string and blank values."""
        return validate_required(v, info.field_name.capitalize())


class ContactResponse(BaseModel):
    """Schema for contact form response. Never echoes submitted content."""
    success: bool = True


class ErrorResponse(BaseModel):
    error: str


class Submission(BaseModel):
    """One accepted contact form submission as stored in the submission log."""
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    timestamp: str = Field(default_factory=utc_now_iso)
    name: str
    email: str
    subject: str
    message: str
    notification_sent: bool = Field(False, alias="notificationSent")
    notification_error: Optional[str] = Field(None, alias="notificationError")
    notification_sent_at: Optional[str] = Field(None, alias="notificationSentAt")

    @classmethod
    def from_request(cls, request: ContactRequest, timestamp: Optional[str] = None) -> "Submission":
        return cls(
            timestamp=timestamp or utc_now_iso(),
            name=request.name,
            email=request.email,
            subject=request.subject,
            message=request.message,
        )

    def to_document(self) -> dict:
        """JSON-ready dict with camelCase keys; optional notification fields only when set."""
        return self.model_dump(by_alias=True, exclude_none=True)
