"""Price aggregator: fans out calendar lookups and merges every priced package."""

import asyncio
import logging
import time
from collections.abc import Callable, Sequence
from datetime import date

from cheap_playitas.config import settings
from cheap_playitas.data.hotels import DEPARTURE_AIRPORTS, HOTELS, Hotel
from cheap_playitas.schemas.price import PricedItinerary
from cheap_playitas.services.apollo_client import ApolloClient
from cheap_playitas.services.duration_resolver import DurationResolver
from cheap_playitas.services.parameter_space import (
    DURATION_BUCKETS,
    DurationBucket,
    QueryTuple,
    build_query_space,
    month_tokens,
    pax_ages,
)

logger = logging.getLogger(__name__)


def _flatten(results: list, what: str) -> list[PricedItinerary]:
    merged: list[PricedItinerary] = []
    for result in results:
        if isinstance(result, BaseException):
            logger.warning(f"{what} task failed: {result!r}")
        else:
            merged.extend(result)
    return merged


class PriceAggregator:
    """Coordinates the query space, calendar fetches and duration resolution."""

    def __init__(
        self,
        client: ApolloClient,
        resolver: DurationResolver | None = None,
        hotels: Sequence[Hotel] = HOTELS,
        airports: Sequence[str] = DEPARTURE_AIRPORTS,
        durations: Sequence[DurationBucket] = DURATION_BUCKETS,
        today: Callable[[], date] = date.today,
    ):
        self._client = client
        self._resolver = resolver or DurationResolver(client)
        self._hotels = tuple(hotels)
        self._airports = tuple(airports)
        self._durations = tuple(durations)
        self._today = today

    def query_space(self) -> list[QueryTuple]:
        return build_query_space(
            self._durations, self._airports, month_tokens(self._today()), self._hotels
        )

    async def aggregate(self, persons: int) -> list[PricedItinerary]:
        """All priced packages for a party of ``persons`` adults.

        Unordered and not deduplicated; failed branches simply contribute
        nothing.
        """
        start_time = time.monotonic()
        ages = pax_ages(persons, settings.pax_age)
        queries = self.query_space()

        results = await asyncio.gather(
            *(self._prices_for_query(q, ages) for q in queries),
            return_exceptions=True,
        )
        prices = _flatten(results, "Calendar")

        elapsed = time.monotonic() - start_time
        logger.info(
            f"Aggregated {len(prices)} prices for {persons} persons "
            f"from {len(queries)} queries in {elapsed:.1f}s"
        )
        return prices

    async def _prices_for_query(self, query: QueryTuple, ages: str) -> list[PricedItinerary]:
        result = await self._client.departure_dates(query, ages)
        if not result.ok:
            return []

        quotes = [q for q in result.value if q.bookable]
        if not quotes:
            return []

        results = await asyncio.gather(
            *(self._resolver.resolve(query, quote, ages) for quote in quotes),
            return_exceptions=True,
        )
        return _flatten(results, "Duration")
