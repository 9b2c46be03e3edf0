"""Apollo booking-guide client: calendar, product and alternative-duration lookups.

Every call is fail-open: transport errors, non-2xx responses and bodies that
do not match the expected shape all come back as a failed ``Result`` rather
than an exception, so one bad upstream call only removes its own branch from
an aggregation.
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import date as date_type
from decimal import Decimal
from enum import Enum
from typing import Any, Generic, TypeVar

import httpx
from pydantic import BaseModel, Field, TypeAdapter, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from cheap_playitas.config import settings
from cheap_playitas.data.hotels import Hotel
from cheap_playitas.services.parameter_space import QueryTuple

logger = logging.getLogger(__name__)

T = TypeVar("T")


class UpstreamFailure(str, Enum):
    UPSTREAM_UNAVAILABLE = "upstream_unavailable"
    DECODE_FAILURE = "decode_failure"
    NO_USABLE_DATA = "no_usable_data"
    DURATION_MISMATCH = "duration_mismatch"


@dataclass(frozen=True)
class Result(Generic[T]):
    """Tagged outcome of an upstream call: a value or a failure kind."""
    value: T | None = None
    failure: UpstreamFailure | None = None

    @property
    def ok(self) -> bool:
        return self.failure is None

    @classmethod
    def success(cls, value: T) -> "Result[T]":
        return cls(value=value)

    @classmethod
    def fail(cls, failure: UpstreamFailure) -> "Result[T]":
        return cls(failure=failure)


# Upstream response shapes


class _ApolloModel(BaseModel):
    model_config = {"alias_generator": to_camel, "populate_by_name": True, "extra": "ignore"}


def _date_part(value: Any) -> Any:
    # Apollo sends full timestamps ("2025-11-03T00:00:00")
    if isinstance(value, str):
        return value[:10]
    return value


class DepartureQuote(_ApolloModel):
    """One day in the departure-dates calendar."""
    date: date_type
    is_sold_out: bool = False
    price: Decimal | None = None

    @field_validator("date", mode="before")
    @classmethod
    def strip_time(cls, value: Any) -> Any:
        return _date_part(value)

    @property
    def bookable(self) -> bool:
        return not self.is_sold_out and self.price is not None


class DepartureDatesResponse(_ApolloModel):
    departure_dates: list[DepartureQuote] = Field(default_factory=list)


class HotelStay(_ApolloModel):
    stay: int = 0


class AccommodationSearchResponse(_ApolloModel):
    product_id: str | None = None
    hotel_stay: HotelStay | None = None
    price: Decimal | None = None


class AlternativeDuration(_ApolloModel):
    """One candidate stay length offered for an existing product."""
    departure_date: date_type
    duration: int
    price: Decimal | None = None
    product_id: str | None = None

    @field_validator("departure_date", mode="before")
    @classmethod
    def strip_time(cls, value: Any) -> Any:
        return _date_part(value)


@dataclass(frozen=True)
class ProductMatch:
    product_id: str
    stay: int
    price: Decimal | None = None


_alternatives_adapter = TypeAdapter(list[AlternativeDuration])


# Decoders


def decode_departure_dates(payload: Any) -> Result[list[DepartureQuote]]:
    try:
        data = DepartureDatesResponse.model_validate(payload)
    except ValidationError as e:
        logger.warning(f"Unexpected departure-dates payload: {e.error_count()} errors")
        return Result.fail(UpstreamFailure.DECODE_FAILURE)
    return Result.success(data.departure_dates)


def decode_product(payload: Any) -> Result[ProductMatch]:
    try:
        data = AccommodationSearchResponse.model_validate(payload)
    except ValidationError as e:
        logger.warning(f"Unexpected accommodation-search payload: {e.error_count()} errors")
        return Result.fail(UpstreamFailure.DECODE_FAILURE)
    if not data.product_id:
        return Result.fail(UpstreamFailure.NO_USABLE_DATA)
    stay = data.hotel_stay.stay if data.hotel_stay else 0
    return Result.success(ProductMatch(product_id=data.product_id, stay=stay, price=data.price))


def decode_alternatives(payload: Any) -> Result[list[AlternativeDuration]]:
    try:
        alternatives = _alternatives_adapter.validate_python(payload)
    except ValidationError as e:
        logger.warning(f"Unexpected alternative-durations payload: {e.error_count()} errors")
        return Result.fail(UpstreamFailure.DECODE_FAILURE)
    return Result.success(alternatives)


def upstream_limits() -> httpx.Limits:
    return httpx.Limits(
        max_connections=settings.upstream_max_connections,
        max_keepalive_connections=settings.upstream_max_connections,
        keepalive_expiry=settings.upstream_keepalive_expiry,
    )


def upstream_timeout() -> httpx.Timeout:
    # No pool timeout: requests over the connection cap wait for a slot
    return httpx.Timeout(settings.upstream_timeout_seconds, pool=None)


def build_http_client() -> httpx.AsyncClient:
    """Shared outbound client for every Apollo call in the process."""
    return httpx.AsyncClient(
        base_url=settings.apollo_base_url,
        timeout=upstream_timeout(),
        limits=upstream_limits(),
    )


class ApolloClient:
    """Adapter for the Apollo booking-guide BFF."""

    def __init__(
        self,
        http: httpx.AsyncClient,
        sales_unit: str | None = None,
        alternatives_path: str | None = None,
        timeout: float | None = None,
    ):
        self._http = http
        self._timeout = timeout or settings.upstream_timeout_seconds
        self._sales_unit = sales_unit or settings.apollo_sales_unit
        self._alternatives_path = alternatives_path or settings.apollo_alternatives_path

    async def fetch_json(self, url: str, params: Any = None) -> Result[Any]:
        """GET a JSON document. Never raises."""
        try:
            # httpx times each connect/read/write step; this bounds the whole call
            resp = await asyncio.wait_for(self._http.get(url, params=params), self._timeout)
        except asyncio.TimeoutError:
            logger.warning(f"Apollo request timed out after {self._timeout}s for {url}")
            return Result.fail(UpstreamFailure.UPSTREAM_UNAVAILABLE)
        except httpx.HTTPError as e:
            logger.warning(f"Apollo request failed for {url}: {e!r}")
            return Result.fail(UpstreamFailure.UPSTREAM_UNAVAILABLE)

        if not resp.is_success:
            logger.warning(f"Apollo returned {resp.status_code} for {url}")
            return Result.fail(UpstreamFailure.UPSTREAM_UNAVAILABLE)

        try:
            return Result.success(resp.json())
        except ValueError:
            logger.warning(f"Apollo returned a non-JSON body for {url}")
            return Result.fail(UpstreamFailure.DECODE_FAILURE)

    async def departure_dates(self, query: QueryTuple, pax_ages: str) -> Result[list[DepartureQuote]]:
        """Price calendar for one hotel/airport/duration over a 31-day window."""
        hotel = query.hotel
        url = (
            f"/api/3/{self._sales_unit}"
            f"/accommodation-uri/{hotel.accommodation_uri}"
            f"/accommodation-code/{hotel.accommodation_code}"
            f"/departure-dates-for-accommodation"
        )
        params = [
            ("accommodationUri", hotel.accommodation_uri),
            ("accommodationCode", hotel.accommodation_code),
            ("departureAirportCode", query.airport),
            ("departureDate", f"{query.month}-01"),
            ("departureDateRange", "31"),
            ("duration", query.duration.query_duration),
            ("productTypeCodes", "FlightAndHotel"),
            ("productTypeCodes", "Cruise"),
            ("paxAges", pax_ages),
            ("paxConfig", ""),
        ]
        result = await self.fetch_json(url, params)
        if not result.ok:
            return Result.fail(result.failure)
        return decode_departure_dates(result.value)

    async def find_product(
        self,
        hotel: Hotel,
        airport: str,
        departure_date: date_type,
        duration: str,
        pax_ages: str,
    ) -> Result[ProductMatch]:
        """Look up the bookable product for an exact date and stay length."""
        url = f"/api/2.0/{self._sales_unit}/Core/AccommodationSearch"
        params = {
            "accommodationCode": hotel.accommodation_code,
            "departureAirportCode": airport,
            "departureDate": departure_date.isoformat(),
            "duration": duration,
            "paxAges": pax_ages,
        }
        result = await self.fetch_json(url, params)
        if not result.ok:
            return Result.fail(result.failure)
        return decode_product(result.value)

    async def alternative_durations(
        self,
        hotel: Hotel,
        airport: str,
        departure_date: date_type,
        product_id: str,
        pax_ages: str,
    ) -> Result[list[AlternativeDuration]]:
        """Other stay lengths Apollo offers for an already resolved product."""
        url = f"/api/2.0/{self._sales_unit}/{self._alternatives_path}"
        params = {
            "accommodationCode": hotel.accommodation_code,
            "departureAirportCode": airport,
            "departureDate": departure_date.isoformat(),
            "productId": product_id,
            "paxAges": pax_ages,
        }
        result = await self.fetch_json(url, params)
        if not result.ok:
            return Result.fail(result.failure)
        return decode_alternatives(result.value)
