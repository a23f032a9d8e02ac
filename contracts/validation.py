"""
Validation library for SkyReplay message contracts.

Provides Pydantic models for the schedule document, computed flight
positions, animation state and WebSocket frames. All services should use
these models to validate records before they cross a service boundary.
"""

from typing import Optional, Literal
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator
from contracts.constants import (
    MINUTES_PER_DAY,
    DEFAULT_PLAYBACK_SPEED,
    WS_MESSAGE_TYPE_FRAME,
)


# ============================================================================
# Schedule Components
# ============================================================================

class Airport(BaseModel):
    """Airport with IATA code and WGS84 coordinates."""
    model_config = ConfigDict(frozen=True)

    code: str = Field(min_length=3, max_length=4, description="IATA code, e.g. 'LAX'")
    name: str = ""
    city: str = ""
    country: str = ""
    longitude: float = Field(ge=-180, le=180, description="Longitude in degrees (WGS84)")
    latitude: float = Field(ge=-90, le=90, description="Latitude in degrees (WGS84)")

    @field_validator("code")
    @classmethod
    def normalize_code(cls, v: str) -> str:
        """Normalize airport code to uppercase."""
        return v.strip().upper()


class ScheduledFlight(BaseModel):
    """
    One departure/arrival pair from the daily schedule.

    Times are whole minutes from local midnight. An arrival earlier than the
    departure means the flight lands the next day.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    flight_number: str = Field(alias="flightNumber", description="e.g. 'AA123'")
    origin: Airport
    destination: Airport
    departure_time: int = Field(alias="departureTime", ge=0, lt=MINUTES_PER_DAY)
    arrival_time: int = Field(alias="arrivalTime", ge=0, lt=MINUTES_PER_DAY)
    airline: Optional[str] = None
    aircraft_type: Optional[str] = Field(None, alias="aircraftType", description="e.g. 'B737', 'A320'")

    @model_validator(mode="after")
    def check_route(self):
        """Origin and destination must differ, and the flight must take time."""
        if self.origin.code == self.destination.code:
            raise ValueError(f"Origin and destination are both {self.origin.code}")
        if self.departure_time == self.arrival_time:
            raise ValueError(f"Zero-duration flight departing at {self.departure_time}")
        return self

    @property
    def is_overnight(self) -> bool:
        return self.arrival_time < self.departure_time


class ScheduleMetadata(BaseModel):
    """Optional descriptive block of a schedule document."""
    model_config = ConfigDict(populate_by_name=True)

    total_flights: Optional[int] = Field(None, alias="totalFlights", ge=0)
    timezone: Optional[str] = None
    generated_at: Optional[str] = Field(None, alias="generatedAt")
    description: Optional[str] = None


class ScheduledFlightsResponse(BaseModel):
    """Schedule document as served from file or HTTP."""
    flights: list[ScheduledFlight]
    metadata: Optional[ScheduleMetadata] = None


# ============================================================================
# Animation State
# ============================================================================

class AnimationSnapshot(BaseModel):
    """Immutable view of the animation state at one instant."""
    model_config = ConfigDict(frozen=True)

    current_time: float = Field(0.0, ge=0, lt=MINUTES_PER_DAY)
    is_playing: bool = False
    playback_speed: float = Field(DEFAULT_PLAYBACK_SPEED, gt=0)
    loop_enabled: bool = True
    animation_enabled: bool = False
    scheduled_flights: tuple[ScheduledFlight, ...] = ()


# ============================================================================
# WebSocket Messages
# ============================================================================

class FlightPositionState(BaseModel):
    """Computed aircraft position for WebSocket and REST consumers."""
    flight_id: str
    flight_number: str
    origin: str
    destination: str
    longitude: float = Field(ge=-180, le=180)
    latitude: float = Field(ge=-90, le=90)
    bearing: float = Field(ge=0, lt=360, description="Initial bearing in degrees [0, 360)")
    altitude: float = Field(ge=0, description="Estimated altitude in feet")
    progress: float = Field(ge=0, le=1)


class FrameMessage(BaseModel):
    """WebSocket frame message (sent on connect and every broadcast interval)."""
    type: Literal["frame"] = WS_MESSAGE_TYPE_FRAME
    timestamp: datetime
    sequence: int = Field(ge=0)
    current_time: float = Field(ge=0, lt=MINUTES_PER_DAY)
    clock_label: str
    is_playing: bool
    playback_speed: float = Field(gt=0)
    loop_enabled: bool
    airport_filter: Optional[str] = None
    positions: list[FlightPositionState]

    @field_validator("timestamp", mode="before")
    @classmethod
    def parse_timestamp(cls, v):
        """Parse ISO 8601 datetime string."""
        if isinstance(v, str):
            return datetime.fromisoformat(v.replace("Z", "+00:00"))
        return v


# ============================================================================
# Validation Functions
# ============================================================================

def validate_scheduled_flight(data: dict) -> tuple[bool, Optional[ScheduledFlight], Optional[str]]:
    """
    Validate a single ScheduledFlight record.

    Returns:
        (is_valid, flight_or_none, error_message_or_none)
    """
    try:
        flight = ScheduledFlight.model_validate(data)
        return True, flight, None
    except ValidationError as e:
        return False, None, str(e)


def validate_schedule_response(data: dict) -> tuple[bool, Optional[ScheduledFlightsResponse], Optional[str]]:
    """
    Validate a complete schedule document.

    Returns:
        (is_valid, document_or_none, error_message_or_none)
    """
    try:
        document = ScheduledFlightsResponse.model_validate(data)
        return True, document, None
    except ValidationError as e:
        return False, None, str(e)


def validate_frame_message(data: dict) -> tuple[bool, Optional[FrameMessage], Optional[str]]:
    """
    Validate FrameMessage.

    Returns:
        (is_valid, message_or_none, error_message_or_none)
    """
    try:
        message = FrameMessage.model_validate(data)
        return True, message, None
    except ValidationError as e:
        return False, None, str(e)
