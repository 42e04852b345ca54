"""
Shared fixtures and raw-offer builders
"""
import pytest


def make_segment(departure, arrival, departure_at, arrival_at, carrier="UA", number="100"):
    return {
        "departure": {"iataCode": departure, "at": departure_at},
        "arrival": {"iataCode": arrival, "at": arrival_at},
        "carrierCode": carrier,
        "number": number,
        "duration": "PT3H",
    }


def make_offer(offer_id="1", total="250.00", currency="USD", segments=None, duration="PT6H44M"):
    if segments is None:
        segments = [make_segment("SFO", "JFK", "2026-12-15T07:00:00", "2026-12-15T15:44:00")]
    return {
        "id": offer_id,
        "price": {"total": total, "currency": currency},
        "itineraries": [{"duration": duration, "segments": segments}],
    }


class FakeClock:
    """Manually advanced monotonic clock"""

    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()
