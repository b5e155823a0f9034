"""Pydantic v2 schemas for account profiles, role changes and profile updates."""

import re
import uuid
from datetime import date, datetime
from typing import Literal

from pydantic import ConfigDict, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel

from app.schemas.common import CamelModel

UserType = Literal["customer", "admin"]
Gender = Literal["male", "female", "other", "prefer-not-to-say"]

PHONE_RE = re.compile(r"^[\+]?[0-9][\d]{0,15}$")


def normalize_email(value: str) -> str:
    return value.strip().lower()


def normalize_phone(value: str) -> str:
    return value.strip()


def check_phone(value: str) -> str:
    value = normalize_phone(value)
    if not PHONE_RE.match(value):
        raise ValueError("Please enter a valid phone number")
    return value


# ---------------------------------------------------------------------------
# Nested profile structures
# ---------------------------------------------------------------------------


class Address(CamelModel):
    street: str | None = None
    city: str | None = None
    state: str | None = None
    country: str | None = None
    postal_code: str | None = None


class EmergencyContact(CamelModel):
    name: str | None = None
    relationship: str | None = None
    phone: str | None = None
    email: str | None = None


class BookingPreferences(CamelModel):
    """Customer-only booking preferences."""

    preferred_block: str | None = None
    preferred_room_type: Literal["single", "double", "triple", "suite"] = "single"
    preferred_floor: int | None = Field(None, ge=1, le=50)
    budget_range: Literal["low", "medium", "high", "luxury"] = "medium"
    special_requirements: list[str] = Field(default_factory=list)
    preferred_check_in_time: Literal["morning", "afternoon", "evening"] = "afternoon"


class AdminPermissions(CamelModel):
    """Admin-only permission flags; all off unless granted."""

    can_manage_users: bool = False
    can_manage_bookings: bool = False
    can_manage_rooms: bool = False
    can_view_reports: bool = False
    can_manage_settings: bool = False


class NotificationPreferences(CamelModel):
    email: bool = True
    sms: bool = True
    push: bool = True


class Preferences(CamelModel):
    notifications: NotificationPreferences = Field(default_factory=NotificationPreferences)
    language: Literal["en", "es", "fr", "de", "ar"] = "en"
    timezone: str = "UTC"
    currency: str = "USD"


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class UserTypeUpdate(CamelModel):
    """Body of ``PUT /users/{userId}/type``."""

    user_type: UserType
    admin_permissions: AdminPermissions | None = None


class ProfileUpdate(CamelModel):
    """Self-service profile changes.

    Credentials, role, permissions and the verified/active/blocked flags are
    not part of this schema; unknown keys are dropped, so a body carrying
    them updates nothing but the fields listed here.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        str_strip_whitespace=True,
    )

    name: str | None = Field(None, min_length=1, max_length=100)
    email: EmailStr | None = None
    phone: str | None = None
    profile_picture: str | None = None
    date_of_birth: date | None = None
    gender: Gender | None = None
    nationality: str | None = None
    address: Address | None = None
    emergency_contact: EmergencyContact | None = None
    booking_preferences: BookingPreferences | None = None
    preferences: Preferences | None = None
    occupation: str | None = None
    company: str | None = None
    student_id: str | None = None
    government_id: str | None = None
    government_id_type: Literal["passport", "national-id", "drivers-license", "other"] | None = None

    @field_validator("email", mode="before")
    @classmethod
    def _normalize_email(cls, value: str | None) -> str | None:
        return normalize_email(value) if isinstance(value, str) else value

    @field_validator("phone")
    @classmethod
    def _check_phone(cls, value: str | None) -> str | None:
        return check_phone(value) if value is not None else value


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class UserResponse(CamelModel):
    """Full account projection. Never carries the password hash."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    id: uuid.UUID
    name: str
    email: str
    phone: str
    user_type: UserType
    role_display: str
    account_status: str
    age: int | None = None
    profile_picture: str | None = None
    date_of_birth: date | None = None
    gender: str | None = None
    nationality: str | None = None
    address: Address | None = None
    emergency_contact: EmergencyContact | None = None
    booking_preferences: BookingPreferences | None = None
    admin_permissions: AdminPermissions | None = None
    preferences: Preferences | None = None
    occupation: str | None = None
    company: str | None = None
    student_id: str | None = None
    government_id_type: str | None = None
    is_active: bool
    is_verified: bool
    is_blocked: bool
    email_verified: bool
    phone_verified: bool
    last_login: datetime | None = None
    created_at: datetime
    updated_at: datetime


class UserEnvelope(CamelModel):
    message: str
    user: UserResponse


class UserListResponse(CamelModel):
    message: str
    users: list[UserResponse]
    total: int
