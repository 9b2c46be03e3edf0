"""Prices router: cheapest Playitas packages across airports, durations and months."""

import logging
import time

from fastapi import APIRouter, Depends, HTTPException, Query

from cheap_playitas.config import settings
from cheap_playitas.dependencies import get_price_aggregator, get_price_cache
from cheap_playitas.schemas.price import PricedItinerary
from cheap_playitas.services.cache_service import PriceCache, prices_key
from cheap_playitas.services.price_aggregator import PriceAggregator

logger = logging.getLogger(__name__)

router = APIRouter()


def parse_persons(raw: str | None) -> int:
    """Traveler count from the query string; blank means the default party."""
    if raw is None or not raw.strip():
        return settings.default_persons
    value = raw.strip()
    # int() would also take "1_0", "+3" and non-ASCII digits
    if not (value.isascii() and value.isdigit()):
        raise HTTPException(status_code=400, detail=f"persons must be an integer, got {raw!r}")
    persons = int(value)
    if persons < 1:
        raise HTTPException(status_code=400, detail="persons must be at least 1")
    return persons


@router.get("/prices", response_model=list[PricedItinerary])
async def get_prices(
    persons: str | None = Query(None, description="Number of adult travelers (default 2)"),
    cache: PriceCache = Depends(get_price_cache),
    aggregator: PriceAggregator = Depends(get_price_aggregator),
):
    """Every priced flight+hotel package for the party size, unordered."""
    party = parse_persons(persons)
    start_time = time.monotonic()
    logger.info(f"Starting request to prices for {party} persons")

    prices = await cache.get_or_compute(
        prices_key(party),
        lambda: aggregator.aggregate(party),
        ttl=settings.prices_cache_ttl_seconds,
    )

    logger.info(
        f"Finishing request to prices for {party} persons: "
        f"{len(prices)} prices in {time.monotonic() - start_time:.1f}s"
    )
    return prices
