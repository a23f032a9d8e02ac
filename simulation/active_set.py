"""
Active flight set: every airborne flight at a simulated instant.
"""

from typing import Iterable, List, Optional

from contracts.validation import ScheduledFlight
from simulation.interpolator import FlightPosition, compute_position, is_active


def _touches_airport(flight: ScheduledFlight, code: str) -> bool:
    return flight.origin.code == code or flight.destination.code == code


def flights_for_airport(flights: Iterable[ScheduledFlight], code: str) -> List[ScheduledFlight]:
    """Schedule subset departing from or arriving at `code`."""
    code = code.strip().upper()
    return [flight for flight in flights if _touches_airport(flight, code)]


def active_positions(
    flights: Iterable[ScheduledFlight],
    time: float,
    airport_filter: Optional[str] = None,
) -> List[FlightPosition]:
    """
    Calculate positions for all flights airborne at `time`.

    Args:
        flights: Scheduled flights
        time: Minutes from midnight in [0, 1440)
        airport_filter: Optional airport code; keeps flights with that
            airport as origin or destination

    Returns:
        Positions in schedule order. Empty if nothing is airborne.
    """
    code = airport_filter.strip().upper() if airport_filter else None
    positions = []

    for flight in flights:
        if code and not _touches_airport(flight, code):
            continue

        position = compute_position(flight, time)
        if position is not None:
            positions.append(position)

    return positions


def count_active(flights: Iterable[ScheduledFlight], time: float) -> int:
    """Number of flights airborne at `time`."""
    return sum(1 for flight in flights if is_active(flight, time))
