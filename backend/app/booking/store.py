"""Booking store — submit, list, status changes and deletion over a key-value backend.

The whole collection lives as one JSON array under ``key`` in the injected
``StorageBackend``. Every mutation is a read-modify-write of that array,
serialized per store by an ``asyncio.Lock``; across processes the last
writer wins.
"""

from __future__ import annotations

import asyncio
import json
import logging
import random
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from datetime import date, datetime, time, timezone
from decimal import Decimal
from typing import Any

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import SQLAlchemyError

from app.booking.pricing import parse_amount, quote
from app.booking.storage import StorageBackend
from app.catalog.listings import Listing
from app.exceptions import MixedCurrencyError, NotFoundError, PersistenceError, ValidationFailed
from app.schemas.booking import BOOKING_STATUSES, Booking, BookingForm

logger = logging.getLogger(__name__)

DEFAULT_KEY = "hostelBookings"
SORT_FIELDS = ("bookingDate", "checkInDate", "checkOutDate", "customerName", "status")

_bookings_adapter = TypeAdapter(list[Booking])
_date_adapter = TypeAdapter(date)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def generate_booking_id(now: datetime | None = None) -> str:
    """``B`` + epoch milliseconds + a random 0-999 suffix."""
    now = now or _utcnow()
    return f"B{int(now.timestamp() * 1000)}{random.randint(0, 999)}"


# ---------------------------------------------------------------------------
# Form validation
# ---------------------------------------------------------------------------


def _alias(field_name: str) -> str:
    info = BookingForm.model_fields.get(field_name)
    return info.alias if info is not None and info.alias else field_name


def _field_errors(exc: PydanticValidationError) -> dict[str, str]:
    errors: dict[str, str] = {}
    for err in exc.errors():
        name = _alias(str(err["loc"][0])) if err["loc"] else "form"
        if err["type"] == "value_error":
            message = str(err["ctx"]["error"])
        else:
            message = err["msg"]
        errors.setdefault(name, message)
    return errors


def _raw_date(data: Mapping[str, Any], field_name: str) -> date | None:
    value = data.get(_alias(field_name), data.get(field_name))
    if value in (None, ""):
        return None
    try:
        return _date_adapter.validate_python(value)
    except PydanticValidationError:
        return None


def validate_booking_form(data: Mapping[str, Any] | BookingForm, today: date) -> BookingForm:
    """Validate a booking form, reporting every bad field in one ``ValidationFailed``.

    On top of the per-field rules the stay must start today or later and end
    strictly after it starts.

    Args:
        data: Raw form keyed by the camelCase field names, or a parsed form.
        today: Earliest allowed check-in date.

    Returns:
        The parsed form.

    Raises:
        ValidationFailed: With one message per offending field.
    """
    if isinstance(data, BookingForm):
        data = data.model_dump(by_alias=True)

    errors: dict[str, str] = {}
    form: BookingForm | None = None
    try:
        form = BookingForm.model_validate(data)
    except PydanticValidationError as exc:
        errors.update(_field_errors(exc))

    check_in = form.check_in_date if form else _raw_date(data, "check_in_date")
    check_out = form.check_out_date if form else _raw_date(data, "check_out_date")
    if check_in is not None and check_out is not None:
        if check_in < today:
            errors.setdefault("checkInDate", "Check-in date cannot be in the past")
        if check_out <= check_in:
            errors.setdefault("checkOutDate", "Check-out date must be after check-in date")

    if errors or form is None:
        raise ValidationFailed(errors)
    return form


# ---------------------------------------------------------------------------
# Aggregates
# ---------------------------------------------------------------------------


@dataclass
class BookingAggregates:
    count: int = 0
    count_by_status: dict[str, int] = field(default_factory=lambda: dict.fromkeys(BOOKING_STATUSES, 0))
    revenue_by_currency: dict[str, Decimal] = field(default_factory=dict)

    def total_revenue(self) -> Decimal:
        """Single revenue figure, only defined when every booking shares a currency."""
        if len(self.revenue_by_currency) > 1:
            raise MixedCurrencyError(
                "Bookings are priced in several currencies: " + ", ".join(sorted(self.revenue_by_currency))
            )
        return next(iter(self.revenue_by_currency.values()), Decimal(0))


def compute_aggregates(bookings: Iterable[Booking]) -> BookingAggregates:
    stats = BookingAggregates()
    for booking in bookings:
        stats.count += 1
        stats.count_by_status[booking.status] = stats.count_by_status.get(booking.status, 0) + 1
        try:
            currency, amount = parse_amount(booking.total_amount)
        except ValueError:
            logger.warning("Skipping unparseable amount %r on booking %s", booking.total_amount, booking.id)
            continue
        stats.revenue_by_currency[currency.code] = stats.revenue_by_currency.get(currency.code, Decimal(0)) + amount
    return stats


# ---------------------------------------------------------------------------
# Store
# ---------------------------------------------------------------------------


def _created_key(booking: Booking) -> datetime:
    if booking.created_at is not None:
        created = booking.created_at
        return created if created.tzinfo else created.replace(tzinfo=timezone.utc)
    return datetime.combine(booking.booking_date, time.min, tzinfo=timezone.utc)


class BookingStore:
    """Durable booking collection over a ``StorageBackend``."""

    def __init__(
        self,
        storage: StorageBackend,
        key: str = DEFAULT_KEY,
        clock: Callable[[], datetime] = _utcnow,
        id_factory: Callable[[datetime], str] = generate_booking_id,
    ) -> None:
        self.storage = storage
        self.key = key
        self._clock = clock
        self._id_factory = id_factory
        self._lock = asyncio.Lock()

    async def _load(self) -> list[Booking]:
        try:
            raw = await self.storage.get_item(self.key)
        except (OSError, SQLAlchemyError) as exc:
            logger.exception("Failed to read bookings under %r", self.key)
            raise PersistenceError("Stored bookings could not be read") from exc
        if raw is None:
            return []
        try:
            return _bookings_adapter.validate_python(json.loads(raw))
        except (ValueError, PydanticValidationError) as exc:
            logger.error("Stored bookings under %r are unreadable: %s", self.key, exc)
            raise PersistenceError("Stored bookings could not be read") from exc

    async def _save(self, bookings: list[Booking]) -> None:
        payload = json.dumps([b.model_dump(mode="json", by_alias=True) for b in bookings])
        try:
            await self.storage.set_item(self.key, payload)
        except (OSError, SQLAlchemyError) as exc:
            logger.exception("Failed to persist %d bookings under %r", len(bookings), self.key)
            raise PersistenceError() from exc

    def _new_id(self, now: datetime, taken: set[str]) -> str:
        booking_id = self._id_factory(now)
        while booking_id in taken:
            booking_id = self._id_factory(now)
        return booking_id

    async def submit(self, form: Mapping[str, Any] | BookingForm, listing: Listing) -> Booking:
        """Validate, price and persist a new ``pending`` booking for ``listing``.

        Args:
            form: Booking form as submitted by the guest.
            listing: Catalog entry being booked. Its title, type, location and
                distance are copied onto the booking.

        Raises:
            ValidationFailed: The form has invalid fields.
            PersistenceError: The storage backend failed.
        """
        now = self._clock()
        valid = validate_booking_form(form, today=now.date())

        async with self._lock:
            bookings = await self._load()
            price = quote(listing.type, valid.check_in_date, valid.check_out_date, valid.number_of_guests)
            booking = Booking(
                id=self._new_id(now, {b.id for b in bookings}),
                room_id=listing.id,
                room_title=listing.title,
                room_type=listing.type,
                customer_name=valid.full_name,
                email=valid.email,
                phone=valid.phone,
                id_number=valid.id_number,
                check_in_date=valid.check_in_date,
                check_out_date=valid.check_out_date,
                number_of_guests=valid.number_of_guests,
                special_requests=valid.special_requests,
                booking_date=now.date(),
                created_at=now,
                status="pending",
                total_amount=price.display,
                location=listing.location,
                distance=listing.distance_display,
            )
            await self._save([booking, *bookings])

        logger.info("Booking %s submitted for %s (%s)", booking.id, listing.id, booking.total_amount)
        return booking

    async def list_bookings(self) -> list[Booking]:
        """All bookings, most recently created first."""
        bookings = await self._load()
        return sorted(bookings, key=_created_key, reverse=True)

    async def search(
        self,
        search: str = "",
        status: str | None = None,
        room_type: str | None = None,
        sort_by: str = "bookingDate",
        order: str = "desc",
    ) -> list[Booking]:
        """Filter by free text (name, room title, email, id), status and room type."""
        needle = search.lower()
        results = [
            b
            for b in await self.list_bookings()
            if (
                not needle
                or needle in b.customer_name.lower()
                or needle in b.room_title.lower()
                or needle in b.email.lower()
                or needle in b.id.lower()
            )
            and (status in (None, "all") or b.status == status)
            and (room_type in (None, "all") or b.room_type == room_type)
        ]
        attribute = {
            "bookingDate": "booking_date",
            "checkInDate": "check_in_date",
            "checkOutDate": "check_out_date",
            "customerName": "customer_name",
            "status": "status",
        }.get(sort_by, "booking_date")
        results.sort(key=lambda b: getattr(b, attribute), reverse=order != "asc")
        return results

    async def get(self, booking_id: str) -> Booking | None:
        for booking in await self._load():
            if booking.id == booking_id:
                return booking
        return None

    async def change_status(self, booking_id: str, status: str) -> Booking:
        """Move a booking to any of the four statuses; no transition is forbidden."""
        if status not in BOOKING_STATUSES:
            raise ValidationFailed({"status": f"Status must be one of: {', '.join(BOOKING_STATUSES)}"})

        async with self._lock:
            bookings = await self._load()
            for index, booking in enumerate(bookings):
                if booking.id == booking_id:
                    updated = booking.model_copy(update={"status": status})
                    bookings[index] = updated
                    break
            else:
                raise NotFoundError("Booking not found")
            await self._save(bookings)

        logger.info("Booking %s status %s -> %s", booking_id, booking.status, status)
        return updated

    async def remove(self, booking_id: str) -> None:
        """Delete a booking; unknown ids are ignored."""
        async with self._lock:
            bookings = await self._load()
            remaining = [b for b in bookings if b.id != booking_id]
            if len(remaining) == len(bookings):
                return
            await self._save(remaining)
        logger.info("Booking %s deleted", booking_id)

    async def seed(self, bookings: Iterable[Booking]) -> int:
        """Load sample bookings into an empty store. Returns how many were written."""
        async with self._lock:
            if await self._load():
                return 0
            records = list(bookings)
            await self._save(records)
        return len(records)
