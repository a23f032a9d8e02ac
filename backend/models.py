"""
Request and response models for the animation REST API.
"""

from typing import Optional
from pydantic import BaseModel, Field

from contracts.validation import FlightPositionState


class SeekRequest(BaseModel):
    """Jump to a time of day. Values outside [0, 1440) wrap."""
    time: float = Field(allow_inf_nan=False, description="Minutes from midnight")


class SpeedRequest(BaseModel):
    """Playback speed multiplier (120 = 2 simulated hours per real minute)."""
    speed: float = Field(gt=0, allow_inf_nan=False)


class EnabledRequest(BaseModel):
    """Boolean switch for loop and animation toggles."""
    enabled: bool


class AnimationStateResponse(BaseModel):
    """Public animation state (schedule omitted)."""
    current_time: float
    clock_label: str
    is_playing: bool
    playback_speed: float
    loop_enabled: bool
    animation_enabled: bool
    scheduled_flights: int


class ActiveFlightsResponse(BaseModel):
    """Aircraft airborne at one instant."""
    time: float
    clock_label: str
    airport: Optional[str] = None
    count: int
    positions: list[FlightPositionState]
