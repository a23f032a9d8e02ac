"""
Host frame signal for the simulation clock.

The clock only needs "call me back on the next frame" and "forget that
request". Any event loop or timer can provide it.
"""

import asyncio
import logging
from typing import Any, Callable, Optional, Protocol

from contracts.constants import FRAME_INTERVAL_MS

logger = logging.getLogger(__name__)

# Receives a monotonic timestamp in milliseconds
FrameCallback = Callable[[float], None]


class FrameScheduler(Protocol):
    def request_frame(self, callback: FrameCallback) -> Any:
        ...

    def cancel_frame(self, handle: Any) -> None:
        ...


class AsyncioFrameScheduler:
    """Frame signal backed by `loop.call_later`."""

    def __init__(
        self,
        loop: Optional[asyncio.AbstractEventLoop] = None,
        interval_ms: float = FRAME_INTERVAL_MS,
    ):
        self.loop = loop or asyncio.get_running_loop()
        self.interval_ms = interval_ms

    def request_frame(self, callback: FrameCallback) -> asyncio.TimerHandle:
        """Schedule `callback(timestamp_ms)` one frame interval from now."""
        return self.loop.call_later(self.interval_ms / 1000.0, self._fire, callback)

    def cancel_frame(self, handle: asyncio.TimerHandle) -> None:
        handle.cancel()

    def _fire(self, callback: FrameCallback):
        try:
            callback(self.loop.time() * 1000.0)
        except Exception:
            logger.exception("Frame callback failed")
