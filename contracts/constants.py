"""
Shared constants for SkyReplay services.

This module provides a single source of truth for:
- Simulated day length and clock limits
- Altitude profile parameters
- Frame pacing
- Message types and schedule sources

All services should import from this module to ensure consistency.
"""

# Simulated day (minutes from midnight)
MINUTES_PER_DAY = 1440
END_OF_DAY_MINUTES = 1439.99  # Clamp value when playback stops at day end

# Altitude profile
CRUISE_ALTITUDE_FT = 35000
CLIMB_FRACTION = 0.10
DESCENT_FRACTION = 0.10

# Frame pacing
TARGET_FPS = 60
FRAME_INTERVAL_MS = 1000 / TARGET_FPS

# Playback
DEFAULT_PLAYBACK_SPEED = 120  # 2 simulated hours per real minute
PLAYBACK_SPEED_OPTIONS = (120, 300, 1000, 3000)

# WebSocket Message Types
WS_MESSAGE_TYPE_FRAME = "frame"
WS_MESSAGE_TYPE_ERROR = "error"

# Schedule Sources
SOURCE_FILE = "file"
SOURCE_URL = "url"
