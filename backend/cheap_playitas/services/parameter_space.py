"""Query space: every duration, airport, month and hotel combination to ask Apollo about."""

from dataclasses import dataclass
from datetime import date
from enum import Enum
from itertools import product
from typing import Iterable

from cheap_playitas.data.hotels import Hotel


class DurationBucket(str, Enum):
    ONE_WEEK = "7"
    TWO_WEEKS = "14"
    LONG = "long"

    @property
    def query_duration(self) -> str:
        """Duration sent to the departure-dates calendar."""
        if self is DurationBucket.LONG:
            return LONG_STAY_PROBE_DURATION
        return self.value


LONG_STAY_PROBE_DURATION = "21"
LONG_STAY_DURATIONS: tuple[str, ...] = ("21", "28")

DURATION_BUCKETS: tuple[DurationBucket, ...] = (
    DurationBucket.ONE_WEEK,
    DurationBucket.TWO_WEEKS,
    DurationBucket.LONG,
)


@dataclass(frozen=True)
class QueryTuple:
    """One unit of fan-out work: a single departure-dates calendar lookup."""
    duration: DurationBucket
    airport: str
    month: str
    hotel: Hotel


def month_tokens(today: date) -> list[str]:
    """Month tokens ("YYYY-MM") from today's month through December next year."""
    tokens = []
    for year in (today.year, today.year + 1):
        start_month = today.month if year == today.year else 1
        for month in range(start_month, 13):
            tokens.append(f"{year}-{month:02d}")
    return tokens


def build_query_space(
    durations: Iterable[DurationBucket],
    airports: Iterable[str],
    months: Iterable[str],
    hotels: Iterable[Hotel],
) -> list[QueryTuple]:
    return [
        QueryTuple(duration=d, airport=a, month=m, hotel=h)
        for d, a, m, h in product(durations, airports, months, hotels)
    ]


def pax_ages(persons: int, age: int = 18) -> str:
    """Encode a party of adults as Apollo's comma-joined paxAges."""
    if persons < 1:
        raise ValueError(f"persons must be a positive integer, got {persons}")
    return ",".join([str(age)] * persons)
