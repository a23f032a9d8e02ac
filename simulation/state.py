"""
Animation state store with change subscriptions.

Holds the public animation state (current time, play flag, speed, loop
flag, schedule) as an owned object. The clock is its only periodic writer;
UI controls write through the same setters. Readers always get the latest
immutable snapshot, so a tick scheduled long ago never sees stale values.
"""

import os
import math
import logging
import threading
from typing import Callable, Iterable, List

from contracts.constants import DEFAULT_PLAYBACK_SPEED
from contracts.validation import AnimationSnapshot, ScheduledFlight
from simulation.timeutil import normalize_time

logger = logging.getLogger(__name__)

INITIAL_PLAYBACK_SPEED = float(os.getenv("DEFAULT_PLAYBACK_SPEED", str(DEFAULT_PLAYBACK_SPEED)))
INITIAL_LOOP_ENABLED = os.getenv("DEFAULT_LOOP_ENABLED", "true").lower() in ("1", "true", "yes")

StateListener = Callable[[AnimationSnapshot, AnimationSnapshot], None]


def _check_speed(speed: float) -> float:
    if not math.isfinite(speed) or speed <= 0:
        raise ValueError(f"Playback speed must be a positive number, got {speed}")
    return float(speed)


class AnimationStateStore:
    """
    Single source of truth for animation state.

    Every setter replaces the snapshot atomically and notifies listeners
    with (new_state, previous_state) when something actually changed.
    """

    def __init__(
        self,
        playback_speed: float = INITIAL_PLAYBACK_SPEED,
        loop_enabled: bool = INITIAL_LOOP_ENABLED,
    ):
        self._initial = AnimationSnapshot(
            playback_speed=_check_speed(playback_speed),
            loop_enabled=loop_enabled,
        )
        self._state = self._initial
        self._lock = threading.RLock()
        self._listeners: List[StateListener] = []

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    def snapshot(self) -> AnimationSnapshot:
        """Get the current state."""
        with self._lock:
            return self._state

    @property
    def current_time(self) -> float:
        return self._state.current_time

    @property
    def is_playing(self) -> bool:
        return self._state.is_playing

    @property
    def playback_speed(self) -> float:
        return self._state.playback_speed

    @property
    def loop_enabled(self) -> bool:
        return self._state.loop_enabled

    @property
    def animation_enabled(self) -> bool:
        return self._state.animation_enabled

    @property
    def scheduled_flights(self) -> tuple[ScheduledFlight, ...]:
        return self._state.scheduled_flights

    # ------------------------------------------------------------------
    # Subscriptions
    # ------------------------------------------------------------------

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """
        Register a change listener.

        Returns:
            Callable that removes the listener
        """
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe():
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def _update(self, **changes) -> bool:
        with self._lock:
            previous = self._state
            if all(getattr(previous, name) == value for name, value in changes.items()):
                return False
            state = previous.model_copy(update=changes)
            self._state = state
            listeners = list(self._listeners)

        for listener in listeners:
            try:
                listener(state, previous)
            except Exception:
                logger.exception("State listener failed")
        return True

    # ------------------------------------------------------------------
    # Setters
    # ------------------------------------------------------------------

    def set_current_time(self, time: float):
        """Set simulated time, wrapping at 24 hours."""
        if not math.isfinite(time):
            raise ValueError(f"Time must be a finite number, got {time}")
        self._update(current_time=normalize_time(time))

    def set_is_playing(self, playing: bool):
        self._update(is_playing=bool(playing))

    def toggle_playback(self):
        with self._lock:
            self._update(is_playing=not self._state.is_playing)

    def set_playback_speed(self, speed: float):
        """Replace the speed multiplier. Rejects non-positive values."""
        self._update(playback_speed=_check_speed(speed))

    def set_loop_enabled(self, enabled: bool):
        self._update(loop_enabled=bool(enabled))

    def set_scheduled_flights(self, flights: Iterable[ScheduledFlight]):
        flights = tuple(flights)
        self._update(scheduled_flights=flights)
        logger.info(f"Schedule set: {len(flights)} flights")

    def set_animation_enabled(self, enabled: bool):
        """Enable or disable animation. Disabling also stops playback."""
        with self._lock:
            self._update(
                animation_enabled=bool(enabled),
                is_playing=self._state.is_playing if enabled else False,
            )

    def reset(self):
        """Restore every field to its initial value."""
        with self._lock:
            initial = self._initial
            self._update(**{name: getattr(initial, name) for name in AnimationSnapshot.model_fields})
