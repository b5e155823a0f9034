"""Bookings API router.

Submitting a booking is public, like the booking form on a room page.
Everything else is for staff: an admin account holding the
``can_manage_bookings`` permission.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, Query, status

from app.api.deps import can_manage_bookings, get_booking_store, get_optional_user
from app.booking.store import SORT_FIELDS, BookingStore, compute_aggregates
from app.catalog.listings import get_listing
from app.exceptions import NotFoundError, ValidationFailed
from app.models.user import User
from app.schemas.booking import (
    Booking,
    BookingListResponse,
    BookingStatsResponse,
    BookingStatusUpdate,
)
from app.schemas.common import MessageResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/bookings", tags=["bookings"])

_SUBMISSION_EXAMPLE = {
    "roomId": "r-101",
    "fullName": "Ama Mensah",
    "email": "ama.mensah@mail.com",
    "phone": "+233 54 123 4567",
    "idNumber": "GHA-123456789-0",
    "checkInDate": "2030-02-15",
    "checkOutDate": "2030-03-15",
    "numberOfGuests": 1,
    "specialRequests": "Ground floor please",
}


@router.post(
    "",
    response_model=Booking,
    status_code=status.HTTP_201_CREATED,
    summary="Submit a booking for a listing",
)
async def submit_booking(
    payload: dict[str, Any] = Body(..., examples=[_SUBMISSION_EXAMPLE]),
    store: BookingStore = Depends(get_booking_store),
    current_user: User | None = Depends(get_optional_user),
) -> Booking:
    """Validate the booking form, price the stay and store it as ``pending``.

    Form problems come back together as one 400 with an ``errors`` map.
    """
    room_id = payload.get("roomId") or payload.get("room_id")
    if not room_id:
        raise ValidationFailed({"roomId": "Room is required"})
    listing = get_listing(str(room_id))
    if listing is None:
        raise NotFoundError("Room/House not found")

    booking = await store.submit(payload, listing)
    if current_user is not None:
        logger.info("Booking %s submitted by account %s", booking.id, current_user.id)
    return booking


@router.get("", response_model=BookingListResponse, summary="List bookings")
async def list_bookings(
    search: str = Query("", description="Matches customer name, room title, email or booking id"),
    status_filter: str = Query("all", alias="status", description="Filter by booking status"),
    room_type: str = Query("all", alias="roomType", description="Filter by room type"),
    sort_by: str = Query("bookingDate", alias="sortBy", description=f"One of: {', '.join(SORT_FIELDS)}"),
    order: str = Query("desc", pattern="^(asc|desc)$"),
    store: BookingStore = Depends(get_booking_store),
    _: User = Depends(can_manage_bookings),
) -> BookingListResponse:
    items = await store.search(search, status_filter, room_type, sort_by, order)
    return BookingListResponse(items=items, total=len(items))


@router.get("/stats", response_model=BookingStatsResponse, summary="Booking counts and revenue")
async def booking_stats(
    store: BookingStore = Depends(get_booking_store),
    _: User = Depends(can_manage_bookings),
) -> BookingStatsResponse:
    """Counts per status and revenue per currency; amounts in different currencies are never added together."""
    stats = compute_aggregates(await store.list_bookings())
    return BookingStatsResponse(
        count=stats.count,
        count_by_status=stats.count_by_status,
        revenue_by_currency=stats.revenue_by_currency,
    )


@router.get("/{booking_id}", response_model=Booking, summary="Get one booking")
async def get_booking(
    booking_id: str,
    store: BookingStore = Depends(get_booking_store),
    _: User = Depends(can_manage_bookings),
) -> Booking:
    booking = await store.get(booking_id)
    if booking is None:
        raise NotFoundError("Booking not found")
    return booking


@router.patch("/{booking_id}/status", response_model=Booking, summary="Change a booking's status")
async def change_booking_status(
    booking_id: str,
    body: BookingStatusUpdate,
    store: BookingStore = Depends(get_booking_store),
    current_user: User = Depends(can_manage_bookings),
) -> Booking:
    booking = await store.change_status(booking_id, body.status)
    logger.info("Booking %s set to %s by %s", booking_id, body.status, current_user.id)
    return booking


@router.delete("/{booking_id}", response_model=MessageResponse, summary="Delete a booking")
async def delete_booking(
    booking_id: str,
    store: BookingStore = Depends(get_booking_store),
    _: User = Depends(can_manage_bookings),
) -> MessageResponse:
    """Delete a booking. Deleting an id that does not exist still succeeds."""
    await store.remove(booking_id)
    return MessageResponse(message="Booking deleted")
