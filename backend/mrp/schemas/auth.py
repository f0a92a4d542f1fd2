"""
User / auth request/response schemas.
"""
from uuid import UUID

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class RegisterRequest(BaseModel):
    """Payload for POST /api/users/register."""

    username: str | None = None
    password: str | None = None


class LoginRequest(BaseModel):
    """
    Payload for POST /api/users/login.

    Clients send ``Username``/``Password``; lowercase keys are accepted too.
    """

    username: str | None = Field(
        default=None,
        validation_alias=AliasChoices("Username", "username"),
    )
    password: str | None = Field(
        default=None,
        validation_alias=AliasChoices("Password", "password"),
    )


class MessageResponse(BaseModel):
    message: str


class TokenResponse(BaseModel):
    """Returned after successful login."""

    token: str


class UserProfileResponse(BaseModel):
    """Public-facing user profile."""

    id: UUID
    username: str

    model_config = ConfigDict(from_attributes=True)
