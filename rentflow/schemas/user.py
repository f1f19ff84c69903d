"""User-related Pydantic schemas."""

import re
from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

PHONE_PATTERN = re.compile(r"^\+?[\d\s\-()]{7,20}$")


def _validate_phone(v: str | None) -> str | None:
    if v is None:
        return v
    if not PHONE_PATTERN.match(v):
        raise ValueError("Please enter a valid phone number")
    return v.strip()


class UserCreate(BaseModel):
    """Schema for user registration."""

    name: str = Field(..., min_length=2, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=128)
    phone: str | None = None
    address: str | None = Field(None, max_length=500)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.lower()

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v: str | None) -> str | None:
        return _validate_phone(v)


class UserLogin(BaseModel):
    """Schema for user login."""

    email: EmailStr
    password: str = Field(..., min_length=1)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.lower()


class UserUpdate(BaseModel):
    """Fields a user may change on their own profile."""

    name: str | None = Field(None, min_length=2, max_length=100)
    phone: str | None = None
    address: str | None = Field(None, max_length=500)
    emergency_contact: str | None = Field(None, max_length=100)

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v: str | None) -> str | None:
        return _validate_phone(v)


class UserAdminUpdate(UserUpdate):
    """Profile fields plus the flags only an admin may change."""

    role: Literal["customer", "staff", "admin"] | None = None
    is_verified: bool | None = None
    is_active: bool | None = None


class UserResponse(BaseModel):
    """Schema for user response."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    email: str
    role: str
    phone: str | None
    address: str | None
    emergency_contact: str | None
    is_verified: bool
    is_active: bool
    last_login_at: datetime | None
    created_at: datetime


class TokenResponse(BaseModel):
    """Schema for authentication token response."""

    access_token: str
    token_type: str = "bearer"
    user: UserResponse


class PasswordUpdate(BaseModel):
    """Change the password of the signed-in account."""

    current_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=6, max_length=128)


class PasswordResetRequest(BaseModel):
    """Ask for a password reset token."""

    email: EmailStr

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.lower()


class PasswordResetConfirm(BaseModel):
    """New password set with a reset token."""

    password: str = Field(..., min_length=6, max_length=128)


class PasswordResetResponse(BaseModel):
    """Reply to a reset request. The token is only included in debug mode."""

    message: str
    reset_token: str | None = None
