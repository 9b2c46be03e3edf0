from fastapi import HTTPException, Request

from cheap_playitas.services.cache_service import PriceCache
from cheap_playitas.services.price_aggregator import PriceAggregator


def get_price_cache(request: Request) -> PriceCache:
    cache = getattr(request.app.state, "price_cache", None)
    if cache is None:
        raise HTTPException(status_code=500, detail="Price cache not initialized")
    return cache


def get_price_aggregator(request: Request) -> PriceAggregator:
    aggregator = getattr(request.app.state, "price_aggregator", None)
    if aggregator is None:
        raise HTTPException(status_code=500, detail="Price aggregator not initialized")
    return aggregator
