#!/usr/bin/env python3
"""
Schedule Loader - Reads the daily flight schedule for animation.

Sources:
- file: JSON schedule document on disk (default)
- url: JSON schedule document served over HTTP

Every flight is validated against contracts.validation before it reaches
the simulation. Invalid flights are skipped (lenient) or fail the load
(strict).
"""

import os
import sys
import json
import logging
from pathlib import Path
from typing import Optional, List

import requests
from prometheus_client import Counter, Histogram

from contracts.constants import SOURCE_FILE, SOURCE_URL
from contracts.validation import (
    ScheduledFlight,
    validate_scheduled_flight,
)
from simulation.timeutil import minutes_to_hhmm

# ============================================
# Configuration
# ============================================

SCHEDULE_FILE = os.getenv(
    "SCHEDULE_FILE", str(Path(__file__).resolve().parent.parent / "fixtures" / "flight_schedules.json")
)
SCHEDULE_URL = os.getenv("SCHEDULE_URL")
SCHEDULE_FETCH_TIMEOUT_S = int(os.getenv("SCHEDULE_FETCH_TIMEOUT_S", "30"))

logger = logging.getLogger(__name__)

# ============================================
# Prometheus Metrics
# ============================================

SCHEDULE_LOADS = Counter('schedule_loads_total', 'Schedule load attempts', ['source', 'status'])
FLIGHTS_REJECTED = Counter('schedule_flights_rejected_total', 'Invalid scheduled flights skipped')
LOAD_LATENCY = Histogram('schedule_load_latency_seconds', 'Schedule load duration')


class ScheduleLoadError(RuntimeError):
    """The schedule document could not be read or is unusable."""


# ============================================
# Parsing
# ============================================

def parse_schedule(document: dict, strict: bool = False) -> List[ScheduledFlight]:
    """
    Validate a schedule document and return its flights.

    Args:
        document: Parsed JSON of shape {"flights": [...], "metadata": {...}}
        strict: Raise on the first invalid flight instead of skipping it

    Raises:
        ScheduleLoadError: Document is not an object with a flights list,
            or (strict) a flight is invalid
    """
    if not isinstance(document, dict) or not isinstance(document.get("flights"), list):
        raise ScheduleLoadError("Invalid flight schedule data: expected an object with a 'flights' list")

    flights = []
    seen_ids = set()

    for index, entry in enumerate(document["flights"]):
        is_valid, flight, error = validate_scheduled_flight(entry)

        if is_valid and flight.id in seen_ids:
            is_valid, error = False, f"duplicate flight id {flight.id}"

        if not is_valid:
            if strict:
                raise ScheduleLoadError(f"Invalid flight at index {index}: {error}")
            logger.warning(f"Skipping invalid flight at index {index}: {error}")
            FLIGHTS_REJECTED.inc()
            continue

        seen_ids.add(flight.id)
        flights.append(flight)

    metadata = document.get("metadata") or {}
    expected = metadata.get("totalFlights")
    if expected is not None and expected != len(flights):
        logger.warning(f"Schedule metadata lists {expected} flights, loaded {len(flights)}")

    return flights


# ============================================
# Sources
# ============================================

def load_schedule_file(path: str, strict: bool = False) -> List[ScheduledFlight]:
    """Load and validate a schedule document from disk."""
    schedule_path = Path(path)
    logger.info(f"Loading flight schedule from {schedule_path}")

    try:
        with LOAD_LATENCY.time():
            with open(schedule_path, encoding="utf-8") as f:
                document = json.load(f)
            flights = parse_schedule(document, strict=strict)
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        SCHEDULE_LOADS.labels(source=SOURCE_FILE, status="error").inc()
        raise ScheduleLoadError(f"Failed to read flight schedule {schedule_path}: {e}") from e
    except ScheduleLoadError:
        SCHEDULE_LOADS.labels(source=SOURCE_FILE, status="invalid").inc()
        raise

    SCHEDULE_LOADS.labels(source=SOURCE_FILE, status="success").inc()
    logger.info(f"Loaded {len(flights)} flights from {schedule_path}")
    return flights


def fetch_schedule(
    url: str,
    session: Optional[requests.Session] = None,
    timeout: int = SCHEDULE_FETCH_TIMEOUT_S,
    strict: bool = False,
) -> List[ScheduledFlight]:
    """Fetch and validate a schedule document over HTTP."""
    if session is None:
        with requests.Session() as owned:
            return fetch_schedule(url, session=owned, timeout=timeout, strict=strict)

    logger.info(f"Fetching flight schedule from {url}")

    try:
        with LOAD_LATENCY.time():
            response = session.get(url, timeout=timeout)
            if response.status_code == 200:
                document = response.json()

    except requests.exceptions.Timeout as e:
        SCHEDULE_LOADS.labels(source=SOURCE_URL, status="timeout").inc()
        raise ScheduleLoadError(f"Timed out fetching flight schedules from {url}") from e

    except requests.exceptions.JSONDecodeError as e:
        SCHEDULE_LOADS.labels(source=SOURCE_URL, status="invalid_json").inc()
        raise ScheduleLoadError(f"Flight schedule response is not JSON: {e}") from e

    except requests.exceptions.RequestException as e:
        SCHEDULE_LOADS.labels(source=SOURCE_URL, status="connection_error").inc()
        raise ScheduleLoadError(f"Connection error fetching flight schedules: {e}") from e

    if response.status_code != 200:
        SCHEDULE_LOADS.labels(source=SOURCE_URL, status=f"http_{response.status_code}").inc()
        raise ScheduleLoadError(f"Failed to fetch flight schedules: {response.status_code}")

    try:
        flights = parse_schedule(document, strict=strict)
    except ScheduleLoadError:
        SCHEDULE_LOADS.labels(source=SOURCE_URL, status="invalid").inc()
        raise

    SCHEDULE_LOADS.labels(source=SOURCE_URL, status="success").inc()
    logger.info(f"Fetched {len(flights)} flights from {url}")
    return flights


def load_schedule(
    url: Optional[str] = SCHEDULE_URL,
    path: str = SCHEDULE_FILE,
    strict: bool = False,
) -> List[ScheduledFlight]:
    """Load the schedule from `url` when configured, otherwise from `path`."""
    if url:
        return fetch_schedule(url, strict=strict)
    return load_schedule_file(path, strict=strict)


def main():
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s',
        stream=sys.stdout
    )
    strict = "--strict" in sys.argv[1:]

    try:
        flights = load_schedule(strict=strict)
    except ScheduleLoadError as e:
        logger.error(str(e))
        sys.exit(1)

    overnight = sum(1 for flight in flights if flight.is_overnight)
    airports = {flight.origin.code for flight in flights} | {flight.destination.code for flight in flights}
    logger.info("=" * 50)
    logger.info(f"Flights: {len(flights)} ({overnight} overnight)")
    logger.info(f"Airports: {len(airports)}")
    if flights:
        departures = [flight.departure_time for flight in flights]
        logger.info(f"Departures: {minutes_to_hhmm(min(departures))} - {minutes_to_hhmm(max(departures))}")
    logger.info("=" * 50)


if __name__ == "__main__":
    main()
