"""Tests for the booking store: form validation, persistence and aggregates."""

import json
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

import pytest
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.booking.storage import DATABASE, MEMORY, DatabaseStorage, MemoryStorage, storage_from_settings
from app.booking.store import (
    DEFAULT_KEY,
    BookingStore,
    compute_aggregates,
    generate_booking_id,
    validate_booking_form,
)
from app.catalog.listings import get_listing
from app.config import settings
from app.database import async_session_factory
from app.exceptions import MixedCurrencyError, NotFoundError, PersistenceError, ValidationFailed
from app.models.storage_item import StorageItem
from app.schemas.booking import Booking

pytestmark = pytest.mark.asyncio

TODAY = date(2025, 2, 1)

VALID_FORM = {
    "fullName": "Ama Mensah",
    "email": "ama.mensah@mail.com",
    "phone": "+233 54 123 4567",
    "idNumber": "GHA-123456789-0",
    "checkInDate": "2025-02-15",
    "checkOutDate": "2025-03-15",
    "numberOfGuests": 2,
    "specialRequests": "Ground floor please",
}


class Clock:
    """Settable clock; each call returns the current instant."""

    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


class FailingStorage(MemoryStorage):
    async def set_item(self, key: str, value: str) -> None:
        raise OSError("disk full")


def _sample(booking_id: str, **overrides) -> Booking:
    fields = {
        "id": booking_id,
        "room_id": "r-101",
        "room_title": "KARJEL HOMES",
        "room_type": "Student Hostel",
        "customer_name": "John Doe",
        "email": "john.doe@mail.com",
        "phone": "+233 54 123 4567",
        "id_number": "GH-123456789-0",
        "check_in_date": date(2025, 2, 15),
        "check_out_date": date(2025, 3, 15),
        "number_of_guests": 1,
        "booking_date": date(2025, 1, 20),
        "status": "confirmed",
        "total_amount": "Ghc950",
    }
    fields.update(overrides)
    return Booking(**fields)


@pytest.fixture
def clock() -> Clock:
    return Clock(datetime(2025, 2, 1, 9, 0, tzinfo=timezone.utc))


@pytest.fixture
def store(clock: Clock) -> BookingStore:
    return BookingStore(MemoryStorage(), clock=clock)


@pytest.fixture
def hostel():
    return get_listing("r-101")


class TestGenerateBookingId:
    async def test_prefix_and_timestamp(self):
        now = datetime(2025, 2, 1, tzinfo=timezone.utc)
        booking_id = generate_booking_id(now)
        millis = str(int(now.timestamp() * 1000))
        assert booking_id.startswith("B" + millis)
        assert 0 <= int(booking_id[len(millis) + 1 :]) <= 999


class TestValidateBookingForm:
    async def test_valid_form(self):
        form = validate_booking_form(VALID_FORM, today=TODAY)
        assert form.full_name == "Ama Mensah"
        assert form.check_in_date == date(2025, 2, 15)
        assert form.number_of_guests == 2

    async def test_empty_form_reports_every_field(self):
        with pytest.raises(ValidationFailed) as exc_info:
            validate_booking_form({}, today=TODAY)
        assert exc_info.value.errors == {
            "fullName": "Full name is required",
            "email": "Email is required",
            "phone": "Phone number is required",
            "idNumber": "ID number is required",
            "checkInDate": "Check-in date is required",
            "checkOutDate": "Check-out date is required",
        }

    async def test_whitespace_only_name_is_missing(self):
        with pytest.raises(ValidationFailed) as exc_info:
            validate_booking_form({**VALID_FORM, "fullName": "   "}, today=TODAY)
        assert exc_info.value.errors == {"fullName": "Full name is required"}

    async def test_malformed_email(self):
        with pytest.raises(ValidationFailed) as exc_info:
            validate_booking_form({**VALID_FORM, "email": "ama.mensah"}, today=TODAY)
        assert exc_info.value.errors["email"] == "Please enter a valid email"

    async def test_past_check_in_and_reversed_dates(self):
        form = {**VALID_FORM, "checkInDate": "2025-01-10", "checkOutDate": "2025-01-05"}
        with pytest.raises(ValidationFailed) as exc_info:
            validate_booking_form(form, today=TODAY)
        assert exc_info.value.errors == {
            "checkInDate": "Check-in date cannot be in the past",
            "checkOutDate": "Check-out date must be after check-in date",
        }

    async def test_check_out_equal_to_check_in(self):
        form = {**VALID_FORM, "checkInDate": "2025-02-15", "checkOutDate": "2025-02-15"}
        with pytest.raises(ValidationFailed) as exc_info:
            validate_booking_form(form, today=TODAY)
        assert set(exc_info.value.errors) == {"checkOutDate"}

    async def test_check_in_today_is_allowed(self):
        form = validate_booking_form({**VALID_FORM, "checkInDate": "2025-02-01"}, today=TODAY)
        assert form.check_in_date == TODAY

    async def test_date_rules_reported_with_field_errors(self):
        form = {**VALID_FORM, "fullName": "", "checkOutDate": "2025-02-10"}
        with pytest.raises(ValidationFailed) as exc_info:
            validate_booking_form(form, today=TODAY)
        assert set(exc_info.value.errors) == {"fullName", "checkOutDate"}

    async def test_zero_guests_rejected(self):
        with pytest.raises(ValidationFailed) as exc_info:
            validate_booking_form({**VALID_FORM, "numberOfGuests": 0}, today=TODAY)
        assert "numberOfGuests" in exc_info.value.errors


class TestSubmit:
    async def test_submit_prices_and_stores_pending_booking(self, store: BookingStore, hostel):
        booking = await store.submit(VALID_FORM, hostel)

        assert booking.id.startswith("B")
        assert booking.status == "pending"
        assert booking.total_amount == "Ghc1792"
        assert booking.room_id == "r-101"
        assert booking.room_title == "KARJEL HOMES"
        assert booking.room_type == "Student Hostel"
        assert booking.location == hostel.location
        assert booking.distance == hostel.distance_display
        assert booking.customer_name == "Ama Mensah"
        assert booking.booking_date == TODAY

    async def test_stored_as_camel_case_json_array(self, store: BookingStore, hostel):
        booking = await store.submit(VALID_FORM, hostel)

        raw = await store.storage.get_item(DEFAULT_KEY)
        records = json.loads(raw)
        assert isinstance(records, list)
        assert records[0]["id"] == booking.id
        assert records[0]["customerName"] == "Ama Mensah"
        assert records[0]["checkInDate"] == "2025-02-15"
        assert records[0]["totalAmount"] == "Ghc1792"

    async def test_hotel_booking_in_dollars(self, store: BookingStore):
        form = {**VALID_FORM, "checkInDate": "2025-02-25", "checkOutDate": "2025-02-28", "numberOfGuests": 1}
        booking = await store.submit(form, get_listing("r-104"))
        assert booking.total_amount == "$228"

    async def test_invalid_form_stores_nothing(self, store: BookingStore, hostel):
        with pytest.raises(ValidationFailed):
            await store.submit({**VALID_FORM, "phone": ""}, hostel)
        assert await store.list_bookings() == []

    async def test_newest_first(self, store: BookingStore, clock: Clock, hostel):
        first = await store.submit(VALID_FORM, hostel)
        clock.advance(minutes=5)
        second = await store.submit({**VALID_FORM, "fullName": "Kwame Boateng"}, hostel)

        assert [b.id for b in await store.list_bookings()] == [second.id, first.id]

    async def test_ids_are_unique(self, clock: Clock, hostel):
        ids = iter(["B1", "B1", "B2"])
        store = BookingStore(MemoryStorage(), clock=clock, id_factory=lambda now: next(ids))
        first = await store.submit(VALID_FORM, hostel)
        second = await store.submit(VALID_FORM, hostel)
        assert (first.id, second.id) == ("B1", "B2")

    async def test_failed_write_raises_persistence_error(self, clock: Clock, hostel):
        store = BookingStore(FailingStorage(), clock=clock)
        with pytest.raises(PersistenceError):
            await store.submit(VALID_FORM, hostel)

    async def test_unreadable_store_raises_persistence_error(self, clock: Clock, hostel):
        store = BookingStore(MemoryStorage({DEFAULT_KEY: "{not json"}), clock=clock)
        with pytest.raises(PersistenceError):
            await store.list_bookings()


class TestStatusAndRemoval:
    async def test_change_status_is_visible_in_listing(self, store: BookingStore, hostel):
        booking = await store.submit(VALID_FORM, hostel)

        updated = await store.change_status(booking.id, "confirmed")

        assert updated.status == "confirmed"
        assert updated.total_amount == booking.total_amount
        listed = await store.list_bookings()
        assert listed[0].status == "confirmed"

    async def test_any_transition_allowed(self, store: BookingStore, hostel):
        booking = await store.submit(VALID_FORM, hostel)
        await store.change_status(booking.id, "cancelled")
        restored = await store.change_status(booking.id, "pending")
        assert restored.status == "pending"

    async def test_change_status_unknown_id(self, store: BookingStore):
        with pytest.raises(NotFoundError):
            await store.change_status("B404", "confirmed")

    async def test_change_status_invalid_value(self, store: BookingStore, hostel):
        booking = await store.submit(VALID_FORM, hostel)
        with pytest.raises(ValidationFailed) as exc_info:
            await store.change_status(booking.id, "archived")
        assert "status" in exc_info.value.errors

    async def test_remove(self, store: BookingStore, hostel):
        booking = await store.submit(VALID_FORM, hostel)
        await store.remove(booking.id)
        assert await store.get(booking.id) is None
        assert await store.list_bookings() == []

    async def test_remove_unknown_id_is_noop(self, store: BookingStore, hostel):
        booking = await store.submit(VALID_FORM, hostel)
        before = await store.storage.get_item(DEFAULT_KEY)

        await store.remove("B404")

        assert await store.storage.get_item(DEFAULT_KEY) == before
        assert [b.id for b in await store.list_bookings()] == [booking.id]


class TestSearchAndSeed:
    async def test_seed_only_fills_empty_store(self, store: BookingStore):
        assert await store.seed([_sample("B001"), _sample("B002")]) == 2
        assert await store.seed([_sample("B003")]) == 0
        assert {b.id for b in await store.list_bookings()} == {"B001", "B002"}

    async def test_search_filters(self, store: BookingStore):
        await store.seed(
            [
                _sample("B001", customer_name="John Doe"),
                _sample("B002", customer_name="Sarah Johnson", room_type="Luxury Apartment", status="pending"),
                _sample("B003", customer_name="Michael Chen", room_type="Hotel", total_amount="$228"),
            ]
        )

        assert [b.id for b in await store.search("johnson")] == ["B002"]
        assert {b.id for b in await store.search("JOHN")} == {"B001", "B002", "B003"}
        assert [b.id for b in await store.search(status="pending")] == ["B002"]
        assert [b.id for b in await store.search(room_type="Hotel")] == ["B003"]
        assert [b.id for b in await store.search("b003")] == ["B003"]

    async def test_search_sort_by_name(self, store: BookingStore):
        await store.seed(
            [
                _sample("B001", customer_name="Zara"),
                _sample("B002", customer_name="Abena"),
            ]
        )
        results = await store.search(sort_by="customerName", order="asc")
        assert [b.customer_name for b in results] == ["Abena", "Zara"]


class TestAggregates:
    async def test_counts_every_status(self):
        stats = compute_aggregates([_sample("B001"), _sample("B002", status="pending")])
        assert stats.count == 2
        assert stats.count_by_status == {"pending": 1, "confirmed": 1, "completed": 0, "cancelled": 0}

    async def test_revenue_per_currency(self):
        stats = compute_aggregates(
            [
                _sample("B001", total_amount="Ghc950"),
                _sample("B002", total_amount="Ghc1500"),
                _sample("B003", total_amount="$228"),
            ]
        )
        assert stats.revenue_by_currency == {"GHS": Decimal(2450), "USD": Decimal(228)}

    async def test_total_revenue_refuses_mixed_currencies(self):
        stats = compute_aggregates([_sample("B001", total_amount="Ghc950"), _sample("B003", total_amount="$228")])
        with pytest.raises(MixedCurrencyError):
            stats.total_revenue()

    async def test_total_revenue_single_currency(self):
        stats = compute_aggregates([_sample("B001", total_amount="Ghc950"), _sample("B002", total_amount="Ghc1500")])
        assert stats.total_revenue() == Decimal(2450)

    async def test_empty(self):
        stats = compute_aggregates([])
        assert stats.count == 0
        assert stats.total_revenue() == 0


class TestDatabaseStorage:
    @pytest.fixture
    def session_factory(self, test_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
        return async_sessionmaker(test_engine, expire_on_commit=False)

    async def test_bookings_survive_a_new_store(self, session_factory, clock: Clock, hostel):
        first = BookingStore(DatabaseStorage(session_factory), clock=clock)
        booking = await first.submit(VALID_FORM, hostel)

        # A second store over the same database stands in for a restarted process.
        second = BookingStore(DatabaseStorage(session_factory), clock=clock)
        assert [b.id for b in await second.list_bookings()] == [booking.id]

    async def test_document_stored_under_key(self, session_factory, clock: Clock, hostel):
        store = BookingStore(DatabaseStorage(session_factory), clock=clock)
        booking = await store.submit(VALID_FORM, hostel)

        async with session_factory() as session:
            item = await session.get(StorageItem, DEFAULT_KEY)
        assert json.loads(item.value)[0]["id"] == booking.id

    async def test_set_overwrites_and_remove_is_idempotent(self, session_factory):
        storage = DatabaseStorage(session_factory)
        assert await storage.get_item("k") is None

        await storage.set_item("k", "v1")
        await storage.set_item("k", "v2")
        assert await storage.get_item("k") == "v2"

        await storage.remove_item("k")
        await storage.remove_item("k")
        assert await storage.get_item("k") is None

    async def test_database_failure_raises_persistence_error(self, clock: Clock, hostel):
        # No tables are created on this engine.
        engine = create_async_engine("sqlite+aiosqlite:///:memory:", poolclass=StaticPool)
        try:
            store = BookingStore(DatabaseStorage(async_sessionmaker(engine)), clock=clock)
            with pytest.raises(PersistenceError):
                await store.submit(VALID_FORM, hostel)
        finally:
            await engine.dispose()


class TestStorageFromSettings:
    async def test_database_is_the_default(self):
        assert settings.booking_storage == DATABASE
        backend = storage_from_settings(settings.booking_storage, async_session_factory)
        assert isinstance(backend, DatabaseStorage)

    async def test_memory_on_request(self):
        assert isinstance(storage_from_settings(MEMORY, async_session_factory), MemoryStorage)

    async def test_unknown_kind(self):
        with pytest.raises(ValueError):
            storage_from_settings("files", async_session_factory)
