"""
Simulation clock.

Advances the store's current time in proportion to real elapsed time while
playback is on, independent of the host frame rate.

Tick algorithm (once per host frame while playing):
1. Throttle to TARGET_FPS; faster frames are skipped without mutation
2. First processed frame after starting only records its timestamp
3. Elapsed ms are scaled by playback speed into simulated minutes
4. At end of day: wrap when looping, otherwise clamp and stop
"""

import logging
from typing import Any, Optional

from contracts.constants import MINUTES_PER_DAY, END_OF_DAY_MINUTES, FRAME_INTERVAL_MS
from contracts.validation import AnimationSnapshot
from simulation.frames import FrameScheduler
from simulation.metrics import CLOCK_TICKS, CURRENT_TIME_MINUTES, PLAYBACK_SPEED
from simulation.state import AnimationStateStore
from simulation.timeutil import normalize_time, format_time

logger = logging.getLogger(__name__)


class SimulationClock:
    """Drives AnimationStateStore.current_time from host frame callbacks."""

    def __init__(self, store: AnimationStateStore, scheduler: FrameScheduler):
        self.store = store
        self.scheduler = scheduler
        self._frame_handle: Optional[Any] = None
        self._last_frame_time: Optional[float] = None
        self._last_update_time: Optional[float] = None

        PLAYBACK_SPEED.set(store.playback_speed)
        CURRENT_TIME_MINUTES.set(store.current_time)

        # Play state may be flipped by any store writer, not only this clock
        self._unsubscribe = store.subscribe(self._on_state_change)
        if store.is_playing:
            self._start()

    @property
    def running(self) -> bool:
        """True while a frame callback is pending."""
        return self._frame_handle is not None

    # ------------------------------------------------------------------
    # Controls
    # ------------------------------------------------------------------

    def play(self):
        self.store.set_is_playing(True)

    def pause(self):
        self.store.set_is_playing(False)

    def toggle_playback(self):
        self.store.toggle_playback()

    def seek(self, time: float):
        """Jump to `time` (normalized into the day). Play state is unchanged."""
        self.store.set_current_time(time)

    set_current_time = seek

    def set_playback_speed(self, speed: float):
        self.store.set_playback_speed(speed)

    def set_loop_enabled(self, enabled: bool):
        self.store.set_loop_enabled(enabled)

    def reset_to_midnight(self):
        self.store.set_current_time(0)

    def close(self):
        """Cancel any pending frame and detach from the store."""
        self._cancel_pending()
        self._unsubscribe()
        logger.info("Simulation clock closed")

    # ------------------------------------------------------------------
    # Frame loop
    # ------------------------------------------------------------------

    def _on_state_change(self, state: AnimationSnapshot, previous: AnimationSnapshot):
        CURRENT_TIME_MINUTES.set(state.current_time)
        if state.playback_speed != previous.playback_speed:
            PLAYBACK_SPEED.set(state.playback_speed)

        if state.is_playing and not previous.is_playing:
            self._start()
        elif previous.is_playing and not state.is_playing:
            self._stop()

    def _start(self):
        if self._frame_handle is not None:
            return
        self._last_frame_time = None
        self._last_update_time = None
        self._frame_handle = self.scheduler.request_frame(self.tick)
        logger.info(
            f"Playback started at {format_time(self.store.current_time)} "
            f"({self.store.playback_speed:g}x)"
        )

    def _stop(self):
        self._cancel_pending()
        logger.info(f"Playback stopped at {format_time(self.store.current_time)}")

    def _cancel_pending(self):
        if self._frame_handle is not None:
            self.scheduler.cancel_frame(self._frame_handle)
            self._frame_handle = None

    def _request_next(self):
        if self.store.is_playing and self._frame_handle is None:
            self._frame_handle = self.scheduler.request_frame(self.tick)

    def tick(self, timestamp: float):
        """
        Handle one host frame.

        Args:
            timestamp: Monotonic host time in milliseconds
        """
        # The callback that was pending is the one running now
        self._frame_handle = None
        if not self.store.is_playing:
            return

        if self._last_frame_time is not None and timestamp - self._last_frame_time < FRAME_INTERVAL_MS:
            CLOCK_TICKS.labels(outcome="throttled").inc()
            self._request_next()
            return
        self._last_frame_time = timestamp

        # Skip the first frame so time spent paused does not count
        if self._last_update_time is None:
            self._last_update_time = timestamp
            CLOCK_TICKS.labels(outcome="primed").inc()
            self._request_next()
            return

        delta_ms = timestamp - self._last_update_time
        self._last_update_time = timestamp

        # playback_speed of 60 means one simulated hour per real minute
        delta_minutes = (delta_ms / 1000.0) * (self.store.playback_speed / 60.0)
        new_time = self.store.current_time + delta_minutes

        if new_time < MINUTES_PER_DAY:
            self.store.set_current_time(new_time)
            CLOCK_TICKS.labels(outcome="advanced").inc()
        elif self.store.loop_enabled:
            self.store.set_current_time(normalize_time(new_time))
            CLOCK_TICKS.labels(outcome="wrapped").inc()
            logger.info("Simulated day complete, looping to midnight")
        else:
            self.store.set_current_time(END_OF_DAY_MINUTES)
            CLOCK_TICKS.labels(outcome="stopped").inc()
            logger.info("Simulated day complete, stopping playback")
            self.store.set_is_playing(False)
            return

        logger.debug(f"Tick: +{delta_minutes:.3f} min -> {self.store.current_time:.2f}")
        self._request_next()
