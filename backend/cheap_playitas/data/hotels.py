"""Hotel catalogue and departure airports queried for Playitas packages."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Hotel:
    """One hand-curated hotel in the Apollo catalogue."""
    display_name: str
    hotel_id: str
    accommodation_code: str
    hotel_url: str

    @property
    def accommodation_uri(self) -> str:
        return accommodation_uri(self.hotel_id)


def accommodation_uri(hotel_id: str) -> str:
    return f"der:accommodation:dtno:{hotel_id}"


HOTELS: tuple[Hotel, ...] = (
    Hotel(
        display_name="Playitas Annexe (Fuerteventura - Spanien)",
        hotel_id="530116",
        accommodation_code="ESPLYPLA01",
        hotel_url="spanien/de-kanariske-oer/fuerteventura/playitas-resort/hoteller/playitas-annexe",
    ),
    Hotel(
        display_name="Playitas Resort (Fuerteventura - Spanien)",
        hotel_id="160759",
        accommodation_code="ESPLYBAH01",
        hotel_url="spanien/de-kanariske-oer/fuerteventura/playitas-resort/hoteller/playitas-resort",
    ),
)

# Copenhagen, Billund, Aalborg
DEPARTURE_AIRPORTS: tuple[str, ...] = ("CPH", "BLL", "AAL")
