"""Static listing catalog — hostels, apartments, hotels and estates near UENR."""

from __future__ import annotations

from dataclasses import dataclass, field

SORT_OPTIONS = ("relevance", "price-asc", "price-desc", "rating")
KINDS = ("Room", "House", "Hostel", "Hotel", "Estate", "Apartment")


@dataclass(frozen=True, slots=True)
class Contact:
    phone: str
    email: str
    website: str | None = None


@dataclass(frozen=True, slots=True)
class Listing:
    """A bookable property. ``type`` is the category that keys the rate table."""

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
    contact: Contact
    availability: str = "available"  # available, limited, booked
    amenities: tuple[str, ...] = field(default_factory=tuple)
    images: tuple[str, ...] = field(default_factory=tuple)


LISTINGS: tuple[Listing, ...] = (
    Listing(
        id="r-101",
        title="KARJEL HOMES",
        type="Student Hostel",
        kind="Hostel",
        location="Sunyani Tonsoum Estate, Ghana",
        distance_display="5.5KM from UENR",
        bedrooms=1,
        bathrooms=1,
        size_sqft=220,
        price_per_month=950,
        price_display="Ghc950/month",
        rating=4.5,
        amenities=("WiFi", "Study room", "Water supply", "Security"),
        images=("/images/karjel-1.jpg", "/images/karjel-2.jpg"),
        contact=Contact(phone="+233 54 000 1101", email="karjel@estatepro.com"),
    ),
    Listing(
        id="r-102",
        title="GREEN VALLEY HOSTEL",
        type="Green Hostel",
        kind="Hostel",
        location="Fiapre, Sunyani",
        distance_display="2.0KM from UENR",
        bedrooms=1,
        bathrooms=1,
        size_sqft=200,
        price_per_month=1100,
        price_display="Ghc1100/month",
        rating=4.3,
        amenities=("Solar power", "WiFi", "Garden"),
        images=("/images/green-valley-1.jpg",),
        contact=Contact(phone="+233 54 000 1102", email="greenvalley@estatepro.com"),
    ),
    Listing(
        id="r-103",
        title="PARENT ESTATE LIMITED",
        type="Luxury Apartment",
        kind="Apartment",
        location="Accra, Sunyani Notre Dame",
        distance_display="8.5KM from UENR",
        bedrooms=2,
        bathrooms=2,
        size_sqft=850,
        price_per_month=1500,
        price_display="Ghc1500/month",
        rating=4.8,
        amenities=("Air conditioning", "Parking", "WiFi", "Kitchen"),
        images=("/images/parent-estate-1.jpg", "/images/parent-estate-2.jpg"),
        contact=Contact(
            phone="+233 54 000 1103",
            email="parentestate@estatepro.com",
            website="https://parentestate.example.com",
        ),
    ),
    Listing(
        id="r-104",
        title="EUSBETT HOTEL",
        type="Hotel",
        kind="Hotel",
        location="Berekum road, Sunyani",
        distance_display="1.1KM from UENR",
        bedrooms=1,
        bathrooms=1,
        size_sqft=400,
        price_per_month=2280,
        price_display="$76/night",
        rating=4.6,
        availability="limited",
        amenities=("Restaurant", "Pool", "WiFi", "Room service"),
        images=("/images/eusbett-1.jpg",),
        contact=Contact(
            phone="+233 35 202 7100",
            email="reservations@eusbett.example.com",
            website="https://eusbett.example.com",
        ),
    ),
    Listing(
        id="r-105",
        title="UNIVERSITY VIEW RESIDENCE",
        type="Student Residence",
        kind="Room",
        location="Odumase, Sunyani",
        distance_display="0.8KM from UENR",
        bedrooms=1,
        bathrooms=1,
        size_sqft=180,
        price_per_month=1200,
        price_display="Ghc1200/month",
        rating=4.2,
        amenities=("WiFi", "Laundry", "Security"),
        contact=Contact(phone="+233 54 000 1105", email="uniview@estatepro.com"),
    ),
    Listing(
        id="r-106",
        title="COMFORT SHARED HOUSE",
        type="Shared House",
        kind="House",
        location="Abesim, Sunyani",
        distance_display="4.0KM from UENR",
        bedrooms=3,
        bathrooms=2,
        size_sqft=1100,
        price_per_month=800,
        price_display="Ghc800/month",
        rating=3.9,
        amenities=("Shared kitchen", "Parking"),
        contact=Contact(phone="+233 54 000 1106", email="comfort@estatepro.com"),
    ),
    Listing(
        id="r-107",
        title="SKYLINE PREMIUM APARTMENTS",
        type="Premium Apartment",
        kind="Apartment",
        location="Sunyani Airport Residential Area",
        distance_display="6.2KM from UENR",
        bedrooms=3,
        bathrooms=3,
        size_sqft=1600,
        price_per_month=4200,
        price_display="Ghc4200/month",
        rating=4.9,
        availability="booked",
        amenities=("Gym", "Pool", "Backup generator", "Air conditioning"),
        contact=Contact(phone="+233 54 000 1107", email="skyline@estatepro.com"),
    ),
    Listing(
        id="r-108",
        title="ROYAL GARDENS ESTATE",
        type="Modern Apartment",
        kind="Estate",
        location="Sunyani New Town",
        distance_display="3.4KM from UENR",
        bedrooms=2,
        bathrooms=2,
        size_sqft=1000,
        price_per_month=2800,
        price_display="Ghc2800/month",
        rating=4.4,
        amenities=("Gated community", "Parking", "WiFi"),
        contact=Contact(phone="+233 54 000 1108", email="royalgardens@estatepro.com"),
    ),
)


def get_listing(listing_id: str) -> Listing | None:
    """Return the listing with ``listing_id``, or ``None`` when it is unknown."""
    for listing in LISTINGS:
        if listing.id == listing_id:
            return listing
    return None


def list_listings(query: str = "", kind: str = "all", sort: str = "relevance") -> list[Listing]:
    """Filter the catalog by title substring and kind, then sort it.

    ``relevance`` keeps catalog order; ``rating`` sorts best-rated first.
    """
    needle = query.lower()
    results = [listing for listing in LISTINGS if needle in listing.title.lower()]
    if kind != "all":
        results = [listing for listing in results if listing.kind == kind]

    if sort == "price-asc":
        results.sort(key=lambda listing: listing.price_per_month)
    elif sort == "price-desc":
        results.sort(key=lambda listing: listing.price_per_month, reverse=True)
    elif sort == "rating":
        results.sort(key=lambda listing: listing.rating, reverse=True)
    return results
