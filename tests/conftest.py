"""
Shared fixtures for SkyReplay tests.
"""

import sys
from pathlib import Path

import pytest

# Add repository root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from contracts.validation import Airport, ScheduledFlight


LAX = Airport(
    code="LAX",
    name="Los Angeles International Airport",
    city="Los Angeles",
    country="USA",
    longitude=-118.4085,
    latitude=33.9425,
)
JFK = Airport(
    code="JFK",
    name="John F. Kennedy International Airport",
    city="New York",
    country="USA",
    longitude=-73.7781,
    latitude=40.6413,
)
ORD = Airport(
    code="ORD",
    name="O'Hare International",
    city="Chicago",
    country="USA",
    longitude=-87.9,
    latitude=41.97,
)


def create_flight(**overrides) -> ScheduledFlight:
    """Build a LAX -> JFK flight departing 6:00 AM, arriving 11:00 AM."""
    fields = {
        "id": "AA100",
        "flight_number": "AA100",
        "origin": LAX,
        "destination": JFK,
        "departure_time": 360,
        "arrival_time": 660,
    }
    fields.update(overrides)
    return ScheduledFlight(**fields)


class FakeFrameScheduler:
    """Frame signal driven by the test with explicit timestamps."""

    def __init__(self):
        self.pending = {}
        self.cancelled = []
        self._next_handle = 0

    def request_frame(self, callback):
        self._next_handle += 1
        self.pending[self._next_handle] = callback
        return self._next_handle

    def cancel_frame(self, handle):
        self.cancelled.append(handle)
        self.pending.pop(handle, None)

    def fire(self, timestamp: float) -> int:
        """Run every pending callback once. Returns how many ran."""
        callbacks = list(self.pending.values())
        self.pending.clear()
        for callback in callbacks:
            callback(timestamp)
        return len(callbacks)


@pytest.fixture
def flight() -> ScheduledFlight:
    return create_flight()


@pytest.fixture
def overnight_flight() -> ScheduledFlight:
    return create_flight(id="UA700", flight_number="UA700", departure_time=1380, arrival_time=120)


@pytest.fixture
def schedule() -> list:
    return [
        create_flight(id="AA100", departure_time=360, arrival_time=660),
        create_flight(id="DL200", flight_number="DL200", departure_time=480, arrival_time=720, origin=ORD),
        create_flight(id="UA300", flight_number="UA300", departure_time=720, arrival_time=900),
    ]


@pytest.fixture
def frames() -> FakeFrameScheduler:
    return FakeFrameScheduler()
