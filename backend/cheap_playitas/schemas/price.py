from datetime import date as date_type
from decimal import Decimal

from pydantic import BaseModel, field_serializer


class PricedItinerary(BaseModel):
    """One priced flight+hotel package as returned by /api/prices."""
    date: date_type
    price: Decimal
    airport: str
    duration: str
    hotel: str
    link: str

    model_config = {"frozen": True}

    @field_serializer("price")
    def _price_as_number(self, price: Decimal) -> float:
        return float(price)
