"""Listings API router — browse the catalog and quote a stay."""

from __future__ import annotations

from fastapi import APIRouter, Query

from app.booking.pricing import quote
from app.catalog.listings import SORT_OPTIONS, Listing, get_listing, list_listings
from app.exceptions import NotFoundError, ValidationFailed
from app.schemas.booking import QuoteRequest, QuoteResponse
from app.schemas.listing import ListingListResponse, ListingResponse

router = APIRouter(prefix="/api/listings", tags=["listings"])


def _get_listing_or_404(listing_id: str) -> Listing:
    listing = get_listing(listing_id)
    if listing is None:
        raise NotFoundError("Room/House not found")
    return listing


@router.get("", response_model=ListingListResponse, summary="Browse the listing catalog")
async def browse_listings(
    q: str = Query("", description="Case-insensitive title search"),
    kind: str = Query("all", description="Room, House, Hostel, Hotel, Estate, Apartment or all"),
    sort: str = Query("relevance", description=f"One of: {', '.join(SORT_OPTIONS)}"),
) -> ListingListResponse:
    if sort not in SORT_OPTIONS:
        raise ValidationFailed({"sort": f"Sort must be one of: {', '.join(SORT_OPTIONS)}"})
    items = [ListingResponse.model_validate(listing) for listing in list_listings(q, kind, sort)]
    return ListingListResponse(items=items, total=len(items))


@router.get("/{listing_id}", response_model=ListingResponse, summary="Get one listing")
async def read_listing(listing_id: str) -> ListingResponse:
    return ListingResponse.model_validate(_get_listing_or_404(listing_id))


@router.post("/{listing_id}/quote", response_model=QuoteResponse, summary="Price a stay")
async def quote_stay(listing_id: str, body: QuoteRequest) -> QuoteResponse:
    """Price ``numberOfGuests`` guests from check-in to check-out at this listing's rate."""
    listing = _get_listing_or_404(listing_id)
    if body.check_out_date <= body.check_in_date:
        raise ValidationFailed({"checkOutDate": "Check-out date must be after check-in date"})

    priced = quote(listing.type, body.check_in_date, body.check_out_date, body.number_of_guests)
    return QuoteResponse(
        listing_id=listing.id,
        room_type=listing.type,
        nights=priced.nights,
        rate=priced.rate,
        currency=priced.currency.code,
        amount=priced.amount,
        total_amount=priced.display,
    )
