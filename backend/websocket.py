"""
WebSocket handler streaming animation frames.
"""

import os
import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, Optional

from fastapi import WebSocket, WebSocketDisconnect

from backend.metrics import ACTIVE_FLIGHTS, WEBSOCKET_CONNECTIONS, WEBSOCKET_MESSAGES_SENT
from contracts.constants import WS_MESSAGE_TYPE_ERROR
from contracts.validation import AnimationSnapshot, FrameMessage, validate_frame_message
from simulation.active_set import active_positions
from simulation.state import AnimationStateStore
from simulation.timeutil import format_time

logger = logging.getLogger(__name__)

WS_FRAME_INTERVAL_MS = int(os.getenv("WS_FRAME_INTERVAL_MS", "100"))


@dataclass
class ClientSession:
    """Per-connection view settings."""
    airport_filter: Optional[str] = None
    last_state: Optional[AnimationSnapshot] = None


class ConnectionManager:
    """Manages WebSocket connections and frame broadcasts."""

    def __init__(self, store: AnimationStateStore):
        self.store = store
        self.active_connections: Dict[WebSocket, ClientSession] = {}
        self._broadcast_task: Optional[asyncio.Task] = None
        self._sequence = 0

    async def connect(self, websocket: WebSocket):
        """Accept new WebSocket connection."""
        await websocket.accept()
        self.active_connections[websocket] = ClientSession()
        WEBSOCKET_CONNECTIONS.set(len(self.active_connections))
        logger.info(f"WebSocket connected. Total connections: {len(self.active_connections)}")

        # Send initial frame
        await self._send_frame(websocket)

    def disconnect(self, websocket: WebSocket):
        """Remove WebSocket connection."""
        self.active_connections.pop(websocket, None)
        WEBSOCKET_CONNECTIONS.set(len(self.active_connections))
        logger.info(f"WebSocket disconnected. Total connections: {len(self.active_connections)}")

    def build_frame(self, state: AnimationSnapshot, airport_filter: Optional[str] = None) -> FrameMessage:
        """Compute the frame for one state and filter."""
        positions = active_positions(state.scheduled_flights, state.current_time, airport_filter)
        if airport_filter is None:
            ACTIVE_FLIGHTS.set(len(positions))

        self._sequence += 1
        return FrameMessage(
            timestamp=datetime.now(timezone.utc),
            sequence=self._sequence,
            current_time=state.current_time,
            clock_label=format_time(state.current_time),
            is_playing=state.is_playing,
            playback_speed=state.playback_speed,
            loop_enabled=state.loop_enabled,
            airport_filter=airport_filter,
            positions=[position.to_state() for position in positions],
        )

    async def _send_frame(self, websocket: WebSocket) -> bool:
        """Send the current frame to one client. Returns False if the client is gone."""
        session = self.active_connections.get(websocket)
        if session is None:
            return False

        state = self.store.snapshot()
        frame = self.build_frame(state, session.airport_filter)
        frame_dict = frame.model_dump(mode="json")

        # Validate before sending
        is_valid, _, error = validate_frame_message(frame_dict)
        if not is_valid:
            logger.error(f"Invalid frame message: {error}")
            return True

        try:
            await websocket.send_json(frame_dict)
        except Exception as e:
            logger.warning(f"Failed to send frame to connection: {e}")
            self.disconnect(websocket)
            return False

        session.last_state = state
        WEBSOCKET_MESSAGES_SENT.labels(type="frame").inc()
        logger.debug(f"Sent frame {frame.sequence} with {len(frame.positions)} positions")
        return True

    async def _broadcast_loop(self):
        """Background task pushing a frame to every client whose view changed."""
        logger.info(f"Starting broadcast loop (interval: {WS_FRAME_INTERVAL_MS}ms)")

        while True:
            try:
                await asyncio.sleep(WS_FRAME_INTERVAL_MS / 1000.0)

                if not self.active_connections:
                    continue

                state = self.store.snapshot()
                for websocket, session in list(self.active_connections.items()):
                    # Snapshots are replaced on every change, identity means unchanged
                    if session.last_state is state:
                        continue
                    await self._send_frame(websocket)

            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.error(f"Error in broadcast loop: {e}")

    def start_broadcast(self):
        """Start broadcast loop."""
        if self._broadcast_task is None or self._broadcast_task.done():
            loop = asyncio.get_running_loop()
            self._broadcast_task = loop.create_task(self._broadcast_loop())
            logger.info("Broadcast loop started")

    async def stop_broadcast(self):
        """Cancel broadcast loop."""
        if self._broadcast_task is None:
            return
        self._broadcast_task.cancel()
        try:
            await self._broadcast_task
        except asyncio.CancelledError:
            pass
        self._broadcast_task = None
        logger.info("Broadcast loop stopped")

    async def _handle_message(self, websocket: WebSocket, message):
        """Apply a client view request such as {"airport": "LAX"}."""
        if not isinstance(message, dict) or "airport" not in message:
            await websocket.send_json({"type": WS_MESSAGE_TYPE_ERROR, "message": "Expected {\"airport\": code or null}"})
            WEBSOCKET_MESSAGES_SENT.labels(type="error").inc()
            return

        airport = message["airport"]
        session = self.active_connections[websocket]
        session.airport_filter = airport.strip().upper() if isinstance(airport, str) and airport.strip() else None
        logger.debug(f"Client airport filter set to {session.airport_filter}")
        await self._send_frame(websocket)

    async def handle_client(self, websocket: WebSocket):
        """Handle a WebSocket client connection."""
        await self.connect(websocket)

        try:
            while websocket in self.active_connections:
                try:
                    message = await websocket.receive_json()
                except WebSocketDisconnect:
                    break
                except ValueError:
                    await websocket.send_json({"type": WS_MESSAGE_TYPE_ERROR, "message": "Invalid JSON"})
                    WEBSOCKET_MESSAGES_SENT.labels(type="error").inc()
                    continue
                await self._handle_message(websocket, message)

        except WebSocketDisconnect:
            logger.info("Client disconnected")
        except Exception as e:
            logger.error(f"WebSocket error: {e}")
        finally:
            self.disconnect(websocket)
