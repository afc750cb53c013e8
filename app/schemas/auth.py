"""Authentication schemas."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class LoginRequest(BaseModel):
    """Schema for login credentials."""

    email: str = Field(..., min_length=3, max_length=255)
    password: str = Field(..., min_length=1)


class SignupRequest(BaseModel):
    """Schema for creating an account."""

    email: str = Field(..., min_length=3, max_length=255, pattern=r"^[^@\s]+@[^@\s]+$")
    password: str = Field(..., min_length=8)
    name: str | None = Field(None, max_length=255)


class TokenResponse(BaseModel):
    """Schema for JWT token response."""

    access_token: str
    token_type: str = "bearer"


class UserRead(BaseModel):
    """Schema for reading user info (response)."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    name: str | None = None
