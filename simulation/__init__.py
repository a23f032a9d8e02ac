"""
SkyReplay simulation core.

Position interpolation, active flight sets, the animation state store and
the frame-driven simulation clock.
"""

from simulation.interpolator import (
    FlightPosition,
    compute_position,
    compute_progress,
    is_active,
    calculate_bearing,
    estimate_altitude,
    interpolate_position,
)
from simulation.active_set import active_positions, flights_for_airport, count_active
from simulation.state import AnimationStateStore
from simulation.frames import FrameScheduler, AsyncioFrameScheduler
from simulation.clock import SimulationClock
from simulation.timeutil import normalize_time, flight_duration, format_time, minutes_to_hhmm

__all__ = [
    "FlightPosition",
    "compute_position",
    "compute_progress",
    "is_active",
    "calculate_bearing",
    "estimate_altitude",
    "interpolate_position",
    "active_positions",
    "flights_for_airport",
    "count_active",
    "AnimationStateStore",
    "FrameScheduler",
    "AsyncioFrameScheduler",
    "SimulationClock",
    "normalize_time",
    "flight_duration",
    "format_time",
    "minutes_to_hhmm",
]
