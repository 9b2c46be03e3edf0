"""Deep links into Apollo's booking flow for a priced package."""

from datetime import date
from urllib.parse import quote, urlencode

from cheap_playitas.config import settings
from cheap_playitas.data.hotels import accommodation_uri

BOOKING_FLOW_PATH = "/booking-guide/core/select-unit-and-meal"


def hotel_link(
    departure_date: date,
    airport: str,
    duration: str,
    hotel_id: str,
    pax_ages: str,
    product_id: str | None,
    site_url: str | None = None,
) -> str:
    """Booking URL, or "" when any parameter the booking flow needs is blank."""
    required = (airport, duration, hotel_id, pax_ages, product_id)
    if any(not value or not value.strip() for value in required):
        return ""

    query = urlencode(
        [
            ("departureAirportCode", airport),
            ("paxAges", pax_ages),
            ("searchProductCategoryCodes", "FlightAndHotel"),
            ("searchProductCategoryCodes", "Cruise"),
            ("departureDate", departure_date.isoformat()),
            ("duration", duration),
            ("accommodationUri", accommodation_uri(hotel_id)),
            ("searchType", "Cached"),
            ("productId", product_id),
        ],
        quote_via=quote,
        safe="",
    )
    return f"{(site_url or settings.booking_site_url).rstrip('/')}{BOOKING_FLOW_PATH}?{query}"
