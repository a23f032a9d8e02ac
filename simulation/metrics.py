"""
Prometheus metrics for the simulation clock.
"""

from prometheus_client import Counter, Gauge

# outcome: advanced, throttled, primed, wrapped, stopped
CLOCK_TICKS = Counter(
    'simulation_clock_ticks_total',
    'Frame callbacks handled by the simulation clock',
    ['outcome']
)

CURRENT_TIME_MINUTES = Gauge(
    'simulation_current_time_minutes',
    'Simulated minutes from midnight'
)

PLAYBACK_SPEED = Gauge(
    'simulation_playback_speed',
    'Playback speed multiplier'
)
