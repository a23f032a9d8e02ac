"""
Minutes-from-midnight arithmetic for the simulated day.
"""

from contracts.constants import MINUTES_PER_DAY


def normalize_time(minutes: float) -> float:
    """Wrap any minute value into [0, 1440)."""
    wrapped = minutes % MINUTES_PER_DAY
    # Float modulo of a tiny negative value can round up to the divisor
    if wrapped >= MINUTES_PER_DAY:
        return 0.0
    return wrapped


def flight_duration(departure_time: float, arrival_time: float) -> float:
    """Duration in minutes, treating an earlier arrival as next-day."""
    if arrival_time >= departure_time:
        return arrival_time - departure_time
    return (MINUTES_PER_DAY - departure_time) + arrival_time


def format_time(minutes: float) -> str:
    """
    Format minutes from midnight as a 12-hour clock label.

    0 -> "12:00 AM", 510 -> "8:30 AM", 780 -> "1:00 PM"
    """
    hours = int(minutes // 60)
    mins = int(minutes % 60)
    ampm = "PM" if hours >= 12 else "AM"
    display_hours = hours % 12 or 12
    return f"{display_hours}:{mins:02d} {ampm}"


def minutes_to_hhmm(minutes: float) -> str:
    """Format minutes from midnight as a 24-hour "HH:MM" label."""
    hours = int(minutes // 60)
    mins = int(minutes % 60)
    return f"{hours:02d}:{mins:02d}"
