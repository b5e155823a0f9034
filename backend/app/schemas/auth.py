"""Pydantic v2 request/response schemas for signup, login and tokens."""

import uuid
from datetime import date, datetime

from pydantic import BaseModel, EmailStr, Field, field_validator

from app.schemas.common import CamelModel
from app.schemas.user import (
    Address,
    AdminPermissions,
    BookingPreferences,
    EmergencyContact,
    Gender,
    UserResponse,
    UserType,
    check_phone,
    normalize_email,
)

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class SignupRequest(CamelModel):
    """Schema for account registration.

    ``bookingPreferences`` is kept only for customers and ``adminPermissions``
    only for admins; the other one is ignored.
    """

    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    phone: str
    password: str = Field(..., min_length=6, max_length=128)
    user_type: UserType = "customer"

    date_of_birth: date | None = None
    gender: Gender | None = None
    nationality: str | None = None
    address: Address | None = None
    emergency_contact: EmergencyContact | None = None
    booking_preferences: BookingPreferences | None = None
    occupation: str | None = None
    company: str | None = None
    student_id: str | None = None
    admin_permissions: AdminPermissions | None = None

    @field_validator("name")
    @classmethod
    def _strip_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Name is required")
        return value

    @field_validator("email", mode="before")
    @classmethod
    def _normalize_email(cls, value: str) -> str:
        return normalize_email(value) if isinstance(value, str) else value

    @field_validator("phone")
    @classmethod
    def _check_phone(cls, value: str) -> str:
        return check_phone(value)


class LoginRequest(BaseModel):
    """Schema for email/password login."""

    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class RefreshRequest(CamelModel):
    """Schema for token refresh."""

    refresh_token: str


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class TokenResponse(CamelModel):
    """JWT token pair returned on successful authentication."""

    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class SignupUser(CamelModel):
    """Account summary returned by signup, plus role-specific next steps."""

    id: uuid.UUID
    name: str
    email: str
    phone: str
    user_type: UserType
    account_status: str
    created_at: datetime
    is_verified: bool
    booking_preferences: BookingPreferences | None = None
    admin_permissions: AdminPermissions | None = None
    next_steps: list[str] = Field(default_factory=list)


class SignupResponse(CamelModel):
    message: str
    user: SignupUser


class LoginResponse(CamelModel):
    message: str
    user: UserResponse
    tokens: TokenResponse
