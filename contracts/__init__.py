"""
SkyReplay Contracts Package

Provides shared constants and validation for schedule and message contracts.
"""

from contracts.constants import *
from contracts.validation import (
    Airport,
    ScheduledFlight,
    ScheduleMetadata,
    ScheduledFlightsResponse,
    AnimationSnapshot,
    FlightPositionState,
    FrameMessage,
    validate_scheduled_flight,
    validate_schedule_response,
    validate_frame_message,
)

__all__ = [
    # Constants
    "MINUTES_PER_DAY",
    "END_OF_DAY_MINUTES",
    "CRUISE_ALTITUDE_FT",
    "CLIMB_FRACTION",
    "DESCENT_FRACTION",
    "TARGET_FPS",
    "FRAME_INTERVAL_MS",
    "DEFAULT_PLAYBACK_SPEED",
    "PLAYBACK_SPEED_OPTIONS",
    "WS_MESSAGE_TYPE_FRAME",
    "WS_MESSAGE_TYPE_ERROR",
    "SOURCE_FILE",
    "SOURCE_URL",
    # Models
    "Airport",
    "ScheduledFlight",
    "ScheduleMetadata",
    "ScheduledFlightsResponse",
    "AnimationSnapshot",
    "FlightPositionState",
    "FrameMessage",
    # Validators
    "validate_scheduled_flight",
    "validate_schedule_response",
    "validate_frame_message",
]
