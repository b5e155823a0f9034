"""Pydantic v2 schemas for booking records, the booking form and responses.

Stored records and API bodies share the camelCase layout the browser app
keeps under its ``hostelBookings`` key.
"""

import re
from datetime import date, datetime
from decimal import Decimal
from typing import Literal

from pydantic import ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from app.schemas.common import CamelModel

BookingStatus = Literal["pending", "confirmed", "completed", "cancelled"]
BOOKING_STATUSES: tuple[str, ...] = ("pending", "confirmed", "completed", "cancelled")

_EMAIL_RE = re.compile(r"\S+@\S+\.\S+")

# ---------------------------------------------------------------------------
# Stored record
# ---------------------------------------------------------------------------


class Booking(CamelModel):
    """A booking as persisted in the store. Only ``status`` changes after creation."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    id: str
    room_id: str
    room_title: str
    room_type: str
    customer_name: str
    email: str
    phone: str
    id_number: str
    check_in_date: date
    check_out_date: date
    number_of_guests: int = Field(..., ge=1)
    special_requests: str = ""
    booking_date: date
    created_at: datetime | None = None
    status: BookingStatus = "pending"
    total_amount: str
    location: str | None = None
    distance: str | None = None


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class BookingForm(CamelModel):
    """Customer-supplied booking details.

    Field validators report every missing or malformed field; the stay-date
    rules that need both dates (and today's date) are applied by
    ``app.booking.store.validate_booking_form``.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        str_strip_whitespace=True,
    )

    full_name: str = Field("", validate_default=True)
    email: str = Field("", validate_default=True)
    phone: str = Field("", validate_default=True)
    id_number: str = Field("", validate_default=True)
    check_in_date: date | None = Field(None, validate_default=True)
    check_out_date: date | None = Field(None, validate_default=True)
    number_of_guests: int = Field(1, ge=1)
    special_requests: str = ""

    @field_validator("full_name")
    @classmethod
    def _require_name(cls, value: str) -> str:
        if not value:
            raise ValueError("Full name is required")
        return value

    @field_validator("email")
    @classmethod
    def _check_email(cls, value: str) -> str:
        if not value:
            raise ValueError("Email is required")
        if not _EMAIL_RE.search(value):
            raise ValueError("Please enter a valid email")
        return value

    @field_validator("phone")
    @classmethod
    def _require_phone(cls, value: str) -> str:
        if not value:
            raise ValueError("Phone number is required")
        return value

    @field_validator("id_number")
    @classmethod
    def _require_id_number(cls, value: str) -> str:
        if not value:
            raise ValueError("ID number is required")
        return value

    @field_validator("check_in_date")
    @classmethod
    def _require_check_in(cls, value: date | None) -> date | None:
        if value is None:
            raise ValueError("Check-in date is required")
        return value

    @field_validator("check_out_date")
    @classmethod
    def _require_check_out(cls, value: date | None) -> date | None:
        if value is None:
            raise ValueError("Check-out date is required")
        return value


class BookingStatusUpdate(CamelModel):
    status: BookingStatus


class QuoteRequest(CamelModel):
    check_in_date: date
    check_out_date: date
    number_of_guests: int = Field(1, ge=1)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class BookingListResponse(CamelModel):
    items: list[Booking]
    total: int


class BookingStatsResponse(CamelModel):
    """Summary counts plus revenue kept separate per currency code."""

    count: int
    count_by_status: dict[str, int]
    revenue_by_currency: dict[str, Decimal]


class QuoteResponse(CamelModel):
    listing_id: str
    room_type: str
    nights: int
    rate: int
    currency: str
    amount: Decimal
    total_amount: str
