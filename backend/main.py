"""
FastAPI backend - Animation Hub for SkyReplay.

Serves:
- REST controls for the simulation clock (play, pause, seek, speed, loop)
- REST snapshot of airborne flights at any time of day
- WebSocket endpoint streaming animation frames
- Prometheus metrics endpoint
"""

import os
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, WebSocket, Request, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware

from backend.metrics import get_metrics, HTTP_REQUESTS, SCHEDULED_FLIGHTS, ACTIVE_FLIGHTS
from backend.models import (
    SeekRequest,
    SpeedRequest,
    EnabledRequest,
    AnimationStateResponse,
    ActiveFlightsResponse,
)
from backend.websocket import ConnectionManager
from contracts.constants import PLAYBACK_SPEED_OPTIONS
from ingestion.schedule_loader import ScheduleLoadError, SCHEDULE_FILE, SCHEDULE_URL, load_schedule
from simulation.active_set import active_positions, count_active, flights_for_airport
from simulation.clock import SimulationClock
from simulation.frames import AsyncioFrameScheduler
from simulation.state import AnimationStateStore
from simulation.timeutil import format_time, normalize_time

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# Configuration
BACKEND_HOST = os.getenv("BACKEND_HOST", "0.0.0.0")
BACKEND_PORT = int(os.getenv("BACKEND_PORT", "8000"))


# Global state
store: Optional[AnimationStateStore] = None
clock: Optional[SimulationClock] = None
connection_manager: Optional[ConnectionManager] = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    global store, clock, connection_manager

    logger.info("=" * 50)
    logger.info("SkyReplay Backend - Starting")
    logger.info("=" * 50)

    store = AnimationStateStore()

    try:
        flights = load_schedule(url=SCHEDULE_URL, path=SCHEDULE_FILE)
    except ScheduleLoadError as e:
        logger.error(f"Starting with an empty schedule: {e}")
        flights = []
    store.set_scheduled_flights(flights)
    SCHEDULED_FLIGHTS.set(len(flights))

    clock = SimulationClock(store, AsyncioFrameScheduler())
    logger.info("Simulation clock initialized")

    connection_manager = ConnectionManager(store)
    connection_manager.start_broadcast()
    logger.info("WebSocket broadcast started")

    yield

    # Cleanup
    logger.info("Shutting down...")
    await connection_manager.stop_broadcast()
    clock.close()
    logger.info("Shutdown complete")


# Create FastAPI app
app = FastAPI(
    title="SkyReplay Backend API",
    description="Flight schedule animation hub",
    version="1.0.0",
    lifespan=lifespan
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # In production, specify allowed origins
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def metrics_middleware(request: Request, call_next):
    """Middleware to track HTTP requests."""
    response = await call_next(request)
    HTTP_REQUESTS.labels(
        method=request.method,
        path=request.url.path,
        status=response.status_code
    ).inc()
    return response


def _require_clock() -> SimulationClock:
    if clock is None:
        raise HTTPException(status_code=503, detail="Service not ready")
    return clock


def _state_response() -> AnimationStateResponse:
    state = _require_clock().store.snapshot()
    return AnimationStateResponse(
        current_time=state.current_time,
        clock_label=format_time(state.current_time),
        is_playing=state.is_playing,
        playback_speed=state.playback_speed,
        loop_enabled=state.loop_enabled,
        animation_enabled=state.animation_enabled,
        scheduled_flights=len(state.scheduled_flights),
    )


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "service": "SkyReplay Backend",
        "version": "1.0.0",
        "endpoints": {
            "websocket": "/ws/animation",
            "state": "/animation/state",
            "active": "/flights/active",
            "schedule": "/flights/schedule",
            "health": "/health",
            "metrics": "/metrics"
        },
        "playback_speeds": list(PLAYBACK_SPEED_OPTIONS)
    }


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "scheduled_flights": len(store.scheduled_flights) if store else 0,
        "active_flights": count_active(store.scheduled_flights, store.current_time) if store else 0,
        "connections": len(connection_manager.active_connections) if connection_manager else 0
    }


# ============================================================================
# Playback controls
# ============================================================================

@app.get("/animation/state", response_model=AnimationStateResponse)
async def get_animation_state():
    return _state_response()


@app.post("/animation/play", response_model=AnimationStateResponse)
async def play():
    _require_clock().play()
    return _state_response()


@app.post("/animation/pause", response_model=AnimationStateResponse)
async def pause():
    _require_clock().pause()
    return _state_response()


@app.post("/animation/toggle", response_model=AnimationStateResponse)
async def toggle_playback():
    _require_clock().toggle_playback()
    return _state_response()


@app.post("/animation/seek", response_model=AnimationStateResponse)
async def seek(request: SeekRequest):
    """Jump to a time of day without changing play state."""
    _require_clock().seek(request.time)
    return _state_response()


@app.post("/animation/reset", response_model=AnimationStateResponse)
async def reset_to_midnight():
    _require_clock().reset_to_midnight()
    return _state_response()


@app.post("/animation/speed", response_model=AnimationStateResponse)
async def set_playback_speed(request: SpeedRequest):
    _require_clock().set_playback_speed(request.speed)
    return _state_response()


@app.post("/animation/loop", response_model=AnimationStateResponse)
async def set_loop_enabled(request: EnabledRequest):
    _require_clock().set_loop_enabled(request.enabled)
    return _state_response()


@app.post("/animation/enabled", response_model=AnimationStateResponse)
async def set_animation_enabled(request: EnabledRequest):
    """Enable or disable animation. Disabling also pauses playback."""
    _require_clock().store.set_animation_enabled(request.enabled)
    return _state_response()


# ============================================================================
# Flights
# ============================================================================

@app.get("/flights/schedule")
async def get_schedule(
    airport: Optional[str] = Query(None, description="Only flights departing from or arriving at this airport"),
):
    """Loaded schedule in its file format."""
    flights = _require_clock().store.scheduled_flights
    if airport and airport.strip():
        flights = flights_for_airport(flights, airport)
    return {
        "count": len(flights),
        "flights": [flight.model_dump(by_alias=True) for flight in flights]
    }


@app.get("/flights/active", response_model=ActiveFlightsResponse)
async def get_active_flights(
    time: Optional[float] = Query(None, allow_inf_nan=False, description="Minutes from midnight; defaults to the clock"),
    airport: Optional[str] = Query(None, description="Airport code filter (origin or destination)"),
):
    """
    Get positions of all airborne flights.

    Returns the current clock frame unless `time` is given.
    """
    state = _require_clock().store.snapshot()
    at = state.current_time if time is None else normalize_time(time)

    positions = active_positions(state.scheduled_flights, at, airport)
    if time is None and not airport:
        ACTIVE_FLIGHTS.set(len(positions))

    return ActiveFlightsResponse(
        time=at,
        clock_label=format_time(at),
        airport=airport.strip().upper() if airport else None,
        count=len(positions),
        positions=[position.to_state() for position in positions],
    )


@app.websocket("/ws/animation")
async def websocket_animation(websocket: WebSocket):
    """
    WebSocket endpoint for animation frames.

    Protocol:
    - On connect: sends a frame for the current state
    - Continuously: sends a frame whenever the state changed since the last one
    - Client may send {"airport": "LAX"} (or null) to filter its frames

    Frame: {"type": "frame", "timestamp": "...", "sequence": N, "current_time": 510.0,
            "clock_label": "8:30 AM", "is_playing": true, "positions": [...]}
    """
    if not connection_manager:
        await websocket.close(code=1013, reason="Service not ready")
        return

    await connection_manager.handle_client(websocket)


@app.get("/metrics")
async def metrics():
    """Prometheus metrics endpoint."""
    return await get_metrics()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "backend.main:app",
        host=BACKEND_HOST,
        port=BACKEND_PORT,
        log_level="info"
    )
