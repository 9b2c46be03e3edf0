# tests/conftest.py
import asyncio
import os
import sys

import httpx
import pytest

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from cheap_playitas.services.apollo_client import ApolloClient

BASE_URL = "https://apollo.test"


class FakeApollo:
    """Routes Apollo requests to canned payloads and records every call.

    Unknown calendars answer with no departure dates, unknown products and
    alternatives with a 404.
    """

    def __init__(self):
        # (accommodationCode, airport, "YYYY-MM", duration) -> payload
        self.calendars = {}
        # (accommodationCode, airport, "YYYY-MM-DD", duration) -> payload
        self.products = {}
        # (accommodationCode, airport, "YYYY-MM-DD", productId) -> payload
        self.alternatives = {}
        self.calls: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        params = request.url.params
        path = request.url.path

        if path.endswith("/departure-dates-for-accommodation"):
            key = (
                params["accommodationCode"],
                params["departureAirportCode"],
                params["departureDate"][:7],
                params["duration"],
            )
            payload = self.calendars.get(key, {"departureDates": []})
        elif path.endswith("/Core/AccommodationSearch"):
            key = (
                params["accommodationCode"],
                params["departureAirportCode"],
                params["departureDate"],
                params["duration"],
            )
            payload = self.products.get(key)
        elif path.endswith("/Core/AlternativeDurations"):
            key = (
                params["accommodationCode"],
                params["departureAirportCode"],
                params["departureDate"],
                params["productId"],
            )
            payload = self.alternatives.get(key)
        else:
            payload = None

        if payload is None:
            return httpx.Response(404)
        if isinstance(payload, httpx.Response):
            return payload
        return httpx.Response(200, json=payload)

    def count(self, suffix: str) -> int:
        return sum(1 for r in self.calls if r.url.path.endswith(suffix))


def product_payload(product_id: str | None, stay: int, price: float | None = None) -> dict:
    payload = {"productId": product_id, "hotelStay": {"stay": stay}}
    if price is not None:
        payload["price"] = price
    return payload


@pytest.fixture
def asyncio_event_loop():
    loop = asyncio.new_event_loop()
    try:
        yield loop
    finally:
        loop.close()


@pytest.fixture
def fake_apollo():
    return FakeApollo()


@pytest.fixture
def apollo_client(fake_apollo):
    http = httpx.AsyncClient(transport=httpx.MockTransport(fake_apollo), base_url=BASE_URL)
    return ApolloClient(http, sales_unit="apollorejserdk")


@pytest.fixture
def make_apollo_client():
    """ApolloClient over an arbitrary request handler."""
    def factory(handler, **kwargs) -> ApolloClient:
        http = httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url=BASE_URL)
        return ApolloClient(http, sales_unit="apollorejserdk", **kwargs)
    return factory
