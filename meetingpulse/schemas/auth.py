# meetingpulse/schemas/auth.py
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class TokenRecord(BaseModel):
    """
    Stored value behind a magic-link token: the bound email and its expiry.
    """

    email: str
    expires: datetime


class IssuedMagicLink(BaseModel):
    token: str
    email: str
    expires: datetime
    link: str


class SessionCredential(BaseModel):
    """
    Opaque session credential handed out after a successful verification.
    """

    session_token: str
    email: str
    expires_at: datetime


class MagicLinkRequest(BaseModel):
    email: str | None = Field(None, example="someone@company.com")


class MagicLinkResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    message: str = Field(..., example="Magic link sent to your email")
    magic_link: str | None = Field(
        None,
        alias="magicLink",
        description="Only present in local/test/development environments.",
    )
