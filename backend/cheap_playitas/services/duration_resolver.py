"""Duration resolver: turns one bookable calendar day into priced itineraries.

The 7- and 14-day buckets map one-to-one onto an itinerary. The long bucket
is queried as 21 days and then expanded into exact 21- and 28-day packages,
either by probing each stay length (``probe``) or by asking Apollo which
other stay lengths it sells for the probed product (``alternatives``).
"""

import logging
from decimal import Decimal
from typing import Literal

from cheap_playitas.config import settings
from cheap_playitas.schemas.price import PricedItinerary
from cheap_playitas.services.apollo_client import (
    ApolloClient,
    DepartureQuote,
    ProductMatch,
    Result,
    UpstreamFailure,
)
from cheap_playitas.services.booking_links import hotel_link
from cheap_playitas.services.parameter_space import (
    LONG_STAY_DURATIONS,
    LONG_STAY_PROBE_DURATION,
    DurationBucket,
    QueryTuple,
)

logger = logging.getLogger(__name__)

LongStayStrategy = Literal["probe", "alternatives"]
LongStayPricing = Literal["base", "product"]

MIN_LONG_STAY = int(LONG_STAY_PROBE_DURATION)


def exact_stay(found: Result[ProductMatch], duration: str) -> Result[ProductMatch]:
    """Keep a product only if its reported stay is exactly the requested one."""
    if not found.ok:
        return found
    if found.value.stay != int(duration):
        return Result.fail(UpstreamFailure.DURATION_MISMATCH)
    return found


class DurationResolver:
    """Resolves a departure quote into zero or more PricedItinerary."""

    def __init__(
        self,
        client: ApolloClient,
        strategy: LongStayStrategy | None = None,
        pricing: LongStayPricing | None = None,
    ):
        self._client = client
        self.strategy = strategy or settings.long_stay_strategy
        self.pricing = pricing or settings.long_stay_pricing

    async def resolve(
        self, query: QueryTuple, quote: DepartureQuote, pax_ages: str
    ) -> list[PricedItinerary]:
        if not quote.bookable:
            return []
        if query.duration is DurationBucket.LONG:
            return await self._resolve_long_stay(query, quote, pax_ages)
        return await self._resolve_short_stay(query, quote, pax_ages)

    async def _resolve_short_stay(
        self, query: QueryTuple, quote: DepartureQuote, pax_ages: str
    ) -> list[PricedItinerary]:
        duration = query.duration.value
        found = exact_stay(
            await self._client.find_product(query.hotel, query.airport, quote.date, duration, pax_ages),
            duration,
        )
        product_id = found.value.product_id if found.ok else None
        if not found.ok:
            logger.debug(
                f"No product for {query.hotel.accommodation_code} {query.airport} "
                f"{quote.date} {duration}d ({found.failure.value}), link left empty"
            )
        return [self._itinerary(query, quote, quote.price, duration, product_id, pax_ages)]

    async def _resolve_long_stay(
        self, query: QueryTuple, quote: DepartureQuote, pax_ages: str
    ) -> list[PricedItinerary]:
        probe = await self._client.find_product(
            query.hotel, query.airport, quote.date, LONG_STAY_PROBE_DURATION, pax_ages
        )
        if not probe.ok:
            logger.debug(
                f"Long-stay probe failed for {query.hotel.accommodation_code} {query.airport} "
                f"{quote.date}: {probe.failure.value}"
            )
            return []

        if self.strategy == "alternatives":
            return await self._from_alternatives(query, quote, probe.value, pax_ages)
        return await self._from_probes(query, quote, probe.value, pax_ages)

    async def _from_probes(
        self, query: QueryTuple, quote: DepartureQuote, probe: ProductMatch, pax_ages: str
    ) -> list[PricedItinerary]:
        itineraries = []
        for duration in LONG_STAY_DURATIONS:
            if duration == LONG_STAY_PROBE_DURATION:
                found = Result.success(probe)
            else:
                found = await self._client.find_product(
                    query.hotel, query.airport, quote.date, duration, pax_ages
                )
            found = exact_stay(found, duration)
            if not found.ok:
                continue

            price = self._price(quote, found.value.price)
            if price is None:
                continue
            itineraries.append(
                self._itinerary(query, quote, price, duration, found.value.product_id, pax_ages)
            )
        return itineraries

    async def _from_alternatives(
        self, query: QueryTuple, quote: DepartureQuote, probe: ProductMatch, pax_ages: str
    ) -> list[PricedItinerary]:
        result = await self._client.alternative_durations(
            query.hotel, query.airport, quote.date, probe.product_id, pax_ages
        )
        if not result.ok:
            return []

        itineraries = []
        seen: set[int] = set()
        for alt in result.value:
            if alt.duration < MIN_LONG_STAY or alt.departure_date != quote.date:
                continue
            if alt.duration in seen:
                logger.debug(f"Duplicate {alt.duration}d alternative for {quote.date} ignored")
                continue
            seen.add(alt.duration)

            price = self._price(quote, alt.price)
            if price is None:
                continue
            product_id = alt.product_id
            if not product_id and probe.stay == alt.duration:
                product_id = probe.product_id
            itineraries.append(
                self._itinerary(query, quote, price, str(alt.duration), product_id, pax_ages)
            )
        return itineraries

    def _price(self, quote: DepartureQuote, product_price: Decimal | None) -> Decimal | None:
        if self.pricing == "product":
            return product_price
        return quote.price

    def _itinerary(
        self,
        query: QueryTuple,
        quote: DepartureQuote,
        price: Decimal,
        duration: str,
        product_id: str | None,
        pax_ages: str,
    ) -> PricedItinerary:
        return PricedItinerary(
            date=quote.date,
            price=price,
            airport=query.airport,
            duration=duration,
            hotel=query.hotel.display_name,
            link=hotel_link(
                quote.date, query.airport, duration, query.hotel.hotel_id, pax_ages, product_id
            ),
        )
