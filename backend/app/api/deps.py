"""Shared API dependencies — single import point for all routers.

Re-exports database session, authentication and booking-store dependencies
so that router modules can import everything they need from one place::

    from app.api.deps import get_db, get_current_active_user, get_booking_store
"""

from fastapi import Request

from app.auth.dependencies import (
    get_current_active_user,
    get_current_user,
    get_optional_user,
    require_admin,
    require_permission,
)
from app.booking.storage import storage_from_settings
from app.booking.store import BookingStore
from app.config import settings
from app.database import async_session_factory, get_db


def build_booking_store() -> BookingStore:
    """Create the booking store described by settings (database or memory backed)."""
    storage = storage_from_settings(settings.booking_storage, async_session_factory)
    return BookingStore(storage, key=settings.booking_storage_key)


def get_booking_store(request: Request) -> BookingStore:
    """Return the booking store owned by the running application.

    The application lifespan creates it on ``app.state``; tests swap it out
    through ``app.dependency_overrides``.
    """
    return request.app.state.booking_store


can_manage_bookings = require_permission("can_manage_bookings")

__all__ = [
    "build_booking_store",
    "can_manage_bookings",
    "get_booking_store",
    "get_db",
    "get_current_user",
    "get_current_active_user",
    "get_optional_user",
    "require_admin",
    "require_permission",
]
