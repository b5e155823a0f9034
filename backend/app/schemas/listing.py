"""Pydantic v2 response schemas for the listing catalog."""

from pydantic import ConfigDict
from pydantic.alias_generators import to_camel

from app.schemas.common import CamelModel

_FROM_CATALOG = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class ContactResponse(CamelModel):
    model_config = _FROM_CATALOG

    phone: str
    email: str
    website: str | None = None


class ListingResponse(CamelModel):
    """A catalog listing as shown on the rooms page."""

    model_config = _FROM_CATALOG

    id: str
    title: str
    type: str
    kind: str
    location: str
    distance_display: str
    bedrooms: int
    bathrooms: int
    size_sqft: int
    price_per_month: int
    price_display: str
    rating: float
    availability: str
    amenities: list[str]
    images: list[str]
    contact: ContactResponse


class ListingListResponse(CamelModel):
    items: list[ListingResponse]
    total: int
