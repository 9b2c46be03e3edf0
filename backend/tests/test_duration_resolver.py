from datetime import date
from decimal import Decimal

import httpx
from conftest import product_payload

from cheap_playitas.data.hotels import HOTELS
from cheap_playitas.services.apollo_client import DepartureQuote
from cheap_playitas.services.duration_resolver import DurationResolver
from cheap_playitas.services.parameter_space import DurationBucket, QueryTuple

HOTEL = HOTELS[1]
CODE = HOTEL.accommodation_code
DAY = date(2026, 2, 7)
LONG_QUERY = QueryTuple(DurationBucket.LONG, "CPH", "2026-02", HOTEL)
WEEK_QUERY = QueryTuple(DurationBucket.ONE_WEEK, "CPH", "2026-02", HOTEL)


def quote(price="5499", sold_out=False) -> DepartureQuote:
    return DepartureQuote(date=DAY, is_sold_out=sold_out, price=Decimal(price) if price else None)


def test_only_21_day_product_yields_one_itinerary(asyncio_event_loop, apollo_client, fake_apollo):
    fake_apollo.products[(CODE, "CPH", "2026-02-07", "21")] = product_payload("P21", 21)
    resolver = DurationResolver(apollo_client, strategy="probe", pricing="base")

    result = asyncio_event_loop.run_until_complete(resolver.resolve(LONG_QUERY, quote(), "18,18"))

    assert len(result) == 1
    assert result[0].duration == "21"
    assert result[0].price == Decimal("5499")
    assert result[0].hotel == HOTEL.display_name
    assert "productId=P21" in result[0].link


def test_21_and_28_day_products_yield_two_itineraries(asyncio_event_loop, apollo_client, fake_apollo):
    fake_apollo.products[(CODE, "CPH", "2026-02-07", "21")] = product_payload("P21", 21)
    fake_apollo.products[(CODE, "CPH", "2026-02-07", "28")] = product_payload("P28", 28)
    resolver = DurationResolver(apollo_client, strategy="probe", pricing="base")

    result = asyncio_event_loop.run_until_complete(resolver.resolve(LONG_QUERY, quote(), "18,18"))

    assert sorted(r.duration for r in result) == ["21", "28"]
    assert all(r.price == Decimal("5499") for r in result)
    assert all(r.date == DAY and r.airport == "CPH" for r in result)
    # the 21-day probe doubles as the 21-day candidate
    assert fake_apollo.count("/Core/AccommodationSearch") == 2


def test_stay_mismatch_is_discarded(asyncio_event_loop, apollo_client, fake_apollo):
    fake_apollo.products[(CODE, "CPH", "2026-02-07", "21")] = product_payload("P21", 21)
    fake_apollo.products[(CODE, "CPH", "2026-02-07", "28")] = product_payload("P27", 27)
    resolver = DurationResolver(apollo_client, strategy="probe", pricing="base")

    result = asyncio_event_loop.run_until_complete(resolver.resolve(LONG_QUERY, quote(), "18"))

    assert [r.duration for r in result] == ["21"]


def test_probe_mismatch_still_allows_28(asyncio_event_loop, apollo_client, fake_apollo):
    fake_apollo.products[(CODE, "CPH", "2026-02-07", "21")] = product_payload("P22", 22)
    fake_apollo.products[(CODE, "CPH", "2026-02-07", "28")] = product_payload("P28", 28)
    resolver = DurationResolver(apollo_client, strategy="probe", pricing="base")

    result = asyncio_event_loop.run_until_complete(resolver.resolve(LONG_QUERY, quote(), "18"))

    assert [r.duration for r in result] == ["28"]


def test_failed_probe_ends_the_branch(asyncio_event_loop, apollo_client, fake_apollo):
    fake_apollo.products[(CODE, "CPH", "2026-02-07", "28")] = product_payload("P28", 28)
    resolver = DurationResolver(apollo_client, strategy="probe", pricing="base")

    result = asyncio_event_loop.run_until_complete(resolver.resolve(LONG_QUERY, quote(), "18"))

    assert result == []
    assert fake_apollo.count("/Core/AccommodationSearch") == 1


def test_sold_out_or_priceless_quote_yields_nothing(asyncio_event_loop, apollo_client, fake_apollo):
    fake_apollo.products[(CODE, "CPH", "2026-02-07", "7")] = product_payload("P7", 7)
    resolver = DurationResolver(apollo_client)

    sold_out = asyncio_event_loop.run_until_complete(
        resolver.resolve(WEEK_QUERY, quote(sold_out=True), "18")
    )
    priceless = asyncio_event_loop.run_until_complete(
        resolver.resolve(WEEK_QUERY, quote(price=None), "18")
    )

    assert sold_out == []
    assert priceless == []
    assert fake_apollo.calls == []


def test_product_pricing_uses_product_price(asyncio_event_loop, apollo_client, fake_apollo):
    fake_apollo.products[(CODE, "CPH", "2026-02-07", "21")] = product_payload("P21", 21, price=7100)
    fake_apollo.products[(CODE, "CPH", "2026-02-07", "28")] = product_payload("P28", 28)
    resolver = DurationResolver(apollo_client, strategy="probe", pricing="product")

    result = asyncio_event_loop.run_until_complete(resolver.resolve(LONG_QUERY, quote(), "18"))

    # the 28-day product reports no price, so it has no itinerary
    assert [(r.duration, r.price) for r in result] == [("21", Decimal("7100"))]


def test_alternatives_strategy(asyncio_event_loop, apollo_client, fake_apollo):
    fake_apollo.products[(CODE, "CPH", "2026-02-07", "21")] = product_payload("P21", 21)
    fake_apollo.alternatives[(CODE, "CPH", "2026-02-07", "P21")] = [
        {"departureDate": "2026-02-07T00:00:00", "duration": 14, "price": 4000},
        {"departureDate": "2026-02-07T00:00:00", "duration": 21, "price": 6000},
        {"departureDate": "2026-02-07T00:00:00", "duration": 28, "price": 7000, "productId": "P28"},
        {"departureDate": "2026-02-07T00:00:00", "duration": 28, "price": 1, "productId": "DUP"},
        {"departureDate": "2026-02-08T00:00:00", "duration": 35, "price": 8000},
    ]
    resolver = DurationResolver(apollo_client, strategy="alternatives", pricing="base")

    result = asyncio_event_loop.run_until_complete(resolver.resolve(LONG_QUERY, quote(), "18"))

    by_duration = {r.duration: r for r in result}
    assert sorted(by_duration) == ["21", "28"]
    assert all(r.price == Decimal("5499") for r in result)
    assert "productId=P21" in by_duration["21"].link
    assert "productId=P28" in by_duration["28"].link


def test_alternatives_strategy_with_product_pricing(asyncio_event_loop, apollo_client, fake_apollo):
    fake_apollo.products[(CODE, "CPH", "2026-02-07", "21")] = product_payload("P21", 21)
    fake_apollo.alternatives[(CODE, "CPH", "2026-02-07", "P21")] = [
        {"departureDate": "2026-02-07", "duration": 21, "price": 6000},
        {"departureDate": "2026-02-07", "duration": 28},
    ]
    resolver = DurationResolver(apollo_client, strategy="alternatives", pricing="product")

    result = asyncio_event_loop.run_until_complete(resolver.resolve(LONG_QUERY, quote(), "18"))

    assert [(r.duration, r.price) for r in result] == [("21", Decimal("6000"))]


def test_alternatives_failure_yields_nothing(asyncio_event_loop, apollo_client, fake_apollo):
    fake_apollo.products[(CODE, "CPH", "2026-02-07", "21")] = product_payload("P21", 21)
    fake_apollo.alternatives[(CODE, "CPH", "2026-02-07", "P21")] = httpx.Response(503)
    resolver = DurationResolver(apollo_client, strategy="alternatives")

    result = asyncio_event_loop.run_until_complete(resolver.resolve(LONG_QUERY, quote(), "18"))

    assert result == []


def test_short_stay_links_resolved_product(asyncio_event_loop, apollo_client, fake_apollo):
    fake_apollo.products[(CODE, "CPH", "2026-02-07", "7")] = product_payload("P7", 7)
    resolver = DurationResolver(apollo_client)

    result = asyncio_event_loop.run_until_complete(resolver.resolve(WEEK_QUERY, quote("3999"), "18"))

    assert len(result) == 1
    assert result[0].duration == "7"
    assert result[0].price == Decimal("3999")
    assert "productId=P7" in result[0].link
    assert "duration=7" in result[0].link


def test_short_stay_without_product_has_empty_link(asyncio_event_loop, apollo_client, fake_apollo):
    fake_apollo.products[(CODE, "CPH", "2026-02-07", "7")] = product_payload("P8", 8)
    resolver = DurationResolver(apollo_client)

    result = asyncio_event_loop.run_until_complete(resolver.resolve(WEEK_QUERY, quote("3999"), "18"))

    assert len(result) == 1
    assert result[0].link == ""
