"""Stay pricing — rate table, currency policy and price-string formatting.

Everything here is a pure function of its inputs. Date ordering is not
checked: a zero or negative stay simply prices to zero or below, and callers
(the booking form validation) are expected to reject such stays first.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal

# Nightly base rate per listing category.
BASE_DAILY_RATES: dict[str, int] = {
    "Student Hostel": 32,  # Ghc950 / 30 days
    "Luxury Apartment": 50,  # Ghc1500 / 30 days
    "Hotel": 76,  # $76 per night
    "Student Residence": 40,  # Ghc1200 / 30 days
    "Shared House": 27,  # Ghc800 / 30 days
    "Modern Apartment": 93,  # Ghc2800 / 30 days
    "Budget Hostel": 22,  # Ghc650 / 30 days
    "Premium Apartment": 140,  # Ghc4200 / 30 days
    "Green Hostel": 37,  # Ghc1100 / 30 days
    "Studio Apartment": 60,  # Ghc1800 / 30 days
    "Study-Focused Hostel": 32,  # Ghc950 / 30 days
}
DEFAULT_DAILY_RATE = 50


@dataclass(frozen=True, slots=True)
class Currency:
    code: str
    symbol: str


GHS = Currency(code="GHS", symbol="Ghc")
USD = Currency(code="USD", symbol="$")

# Categories priced in something other than the default currency.
CATEGORY_CURRENCIES: dict[str, Currency] = {"Hotel": USD}
DEFAULT_CURRENCY = GHS
KNOWN_CURRENCIES: tuple[Currency, ...] = (GHS, USD)

_PRICE_RE = re.compile(r"^\s*(?P<symbol>[^\d\s.\-]*)\s*(?P<amount>-?[\d,]*\.?\d+)\s*$")


@dataclass(frozen=True, slots=True)
class Quote:
    """A priced stay. ``display`` is the string stored on bookings."""

    room_type: str
    nights: int
    guests: int
    rate: int
    amount: Decimal
    currency: Currency

    @property
    def display(self) -> str:
        return format_amount(self.amount, self.currency)


def daily_rate(room_type: str) -> int:
    return BASE_DAILY_RATES.get(room_type, DEFAULT_DAILY_RATE)


def currency_for(room_type: str) -> Currency:
    return CATEGORY_CURRENCIES.get(room_type, DEFAULT_CURRENCY)


def count_nights(check_in: date | datetime, check_out: date | datetime) -> int:
    """Whole nights between two dates, rounding any partial day up."""
    seconds = (check_out - check_in).total_seconds()
    return math.ceil(seconds / 86400)


def quote(
    room_type: str,
    check_in: date | datetime,
    check_out: date | datetime,
    number_of_guests: int,
) -> Quote:
    """Price a stay: ``nights × daily_rate(room_type) × guests``.

    Args:
        room_type: Listing category; unknown categories get the default rate.
        check_in: Start of the stay.
        check_out: End of the stay. Partial days count as a whole night.
        number_of_guests: Guests on the booking, each paying the full rate.

    Returns:
        A ``Quote`` with the amount in the category's currency.
    """
    nights = count_nights(check_in, check_out)
    rate = daily_rate(room_type)
    return Quote(
        room_type=room_type,
        nights=nights,
        guests=number_of_guests,
        rate=rate,
        amount=Decimal(rate * nights * number_of_guests),
        currency=currency_for(room_type),
    )


def calculate_total_amount(
    room_type: str,
    check_in: date | datetime,
    check_out: date | datetime,
    number_of_guests: int,
) -> str:
    """Formatted total for a stay, e.g. ``"Ghc1792"`` or ``"$228"``."""
    return quote(room_type, check_in, check_out, number_of_guests).display


def format_amount(amount: Decimal, currency: Currency) -> str:
    return f"{currency.symbol}{amount:.0f}"


def parse_amount(text: str) -> tuple[Currency, Decimal]:
    """Split a stored price string into its currency and numeric amount.

    Unknown symbols come back as an ad-hoc ``Currency`` whose code is the
    symbol itself, so they never silently merge with a known currency.

    Raises:
        ValueError: If ``text`` has no numeric part.
    """
    match = _PRICE_RE.match(text or "")
    if match is None:
        raise ValueError(f"Unrecognised price: {text!r}")
    symbol = match.group("symbol")
    amount = Decimal(match.group("amount").replace(",", ""))
    for currency in KNOWN_CURRENCIES:
        if currency.symbol.lower() == symbol.lower():
            return currency, amount
    return Currency(code=symbol or "?", symbol=symbol), amount
