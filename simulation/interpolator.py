"""
Position interpolation for scheduled flights.

Maps (flight, simulated time) to an aircraft position, heading and
altitude. Everything here is a pure function of its inputs, so callers may
evaluate any instant in any order (scrubbing backward included).
"""

import math
from dataclasses import dataclass, asdict
from typing import Optional, Tuple

from contracts.constants import (
    CRUISE_ALTITUDE_FT,
    CLIMB_FRACTION,
    DESCENT_FRACTION,
)
from contracts.validation import Airport, ScheduledFlight, FlightPositionState
from simulation.timeutil import flight_duration


@dataclass(frozen=True)
class FlightPosition:
    """Computed position of one airborne flight. Recomputed every frame."""
    flight_id: str
    flight_number: str
    origin: str
    destination: str
    longitude: float
    latitude: float
    bearing: float
    altitude: float
    progress: float

    def to_state(self) -> FlightPositionState:
        """Convert to the wire model used by REST and WebSocket consumers."""
        return FlightPositionState(**asdict(self))


def is_active(flight: ScheduledFlight, time: float) -> bool:
    """Check whether the flight is airborne at `time` (boundaries inclusive)."""
    departure = flight.departure_time
    arrival = flight.arrival_time

    if arrival >= departure:
        return departure <= time <= arrival

    # Overnight: [departure, 1440) and [0, arrival]
    return time >= departure or time <= arrival


def compute_progress(flight: ScheduledFlight, time: float) -> Optional[float]:
    """
    Fraction of the flight elapsed at `time`.

    Returns:
        Progress in [0, 1], or None if the flight is not airborne.
    """
    if not is_active(flight, time):
        return None

    # Past midnight the elapsed span crosses the day boundary like the flight does
    duration = flight_duration(flight.departure_time, flight.arrival_time)
    elapsed = flight_duration(flight.departure_time, time)

    return min(max(elapsed / duration, 0.0), 1.0)


def interpolate_position(origin: Airport, destination: Airport, progress: float) -> Tuple[float, float]:
    """Linear blend of origin and destination. Returns (longitude, latitude)."""
    longitude = origin.longitude + (destination.longitude - origin.longitude) * progress
    latitude = origin.latitude + (destination.latitude - origin.latitude) * progress
    return longitude, latitude


def calculate_bearing(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Initial great-circle bearing from point 1 to point 2, in degrees [0, 360)."""
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    dlambda = math.radians(lon2 - lon1)

    y = math.sin(dlambda) * math.cos(phi2)
    x = math.cos(phi1) * math.sin(phi2) - math.sin(phi1) * math.cos(phi2) * math.cos(dlambda)

    bearing = (math.degrees(math.atan2(y, x)) + 360) % 360
    return 0.0 if bearing >= 360 else bearing


def _ease(fraction: float) -> float:
    """Smoothstep ramp on [0, 1]."""
    return fraction * fraction * (3 - 2 * fraction)


def estimate_altitude(progress: float, cruise_altitude: float = CRUISE_ALTITUDE_FT) -> float:
    """
    Estimate altitude in feet from flight progress.

    Climb over the first CLIMB_FRACTION of the flight, hold cruise, then
    descend over the last DESCENT_FRACTION. Both ramps are eased so the
    aircraft levels off smoothly.
    """
    if progress < CLIMB_FRACTION:
        return cruise_altitude * _ease(progress / CLIMB_FRACTION)
    if progress > 1 - DESCENT_FRACTION:
        return cruise_altitude * _ease((1 - progress) / DESCENT_FRACTION)
    return float(cruise_altitude)


def compute_position(flight: ScheduledFlight, time: float) -> Optional[FlightPosition]:
    """
    Calculate the position of a flight at a simulated time.

    Args:
        flight: Validated scheduled flight
        time: Minutes from midnight in [0, 1440)

    Returns:
        FlightPosition if the flight is airborne, None otherwise
    """
    progress = compute_progress(flight, time)
    if progress is None:
        return None

    origin = flight.origin
    destination = flight.destination
    longitude, latitude = interpolate_position(origin, destination, progress)

    return FlightPosition(
        flight_id=flight.id,
        flight_number=flight.flight_number,
        origin=origin.code,
        destination=destination.code,
        longitude=longitude,
        latitude=latitude,
        bearing=calculate_bearing(origin.latitude, origin.longitude, destination.latitude, destination.longitude),
        altitude=estimate_altitude(progress),
        progress=progress,
    )
