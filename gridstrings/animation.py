"""
Feedback animation for the string lines.

Each line is displaced along its perpendicular axis (x for vertical
strings, y for horizontal ones) by the sum of independent offset layers:

- ``IdleLayer``: a slow sine wobble on every string, driven by the
  ``FrameClock``,
- ``VibrationLayer``: a short back-and-forth shake on a string that was
  just played, which expires on its own.
"""

from __future__ import annotations

import logging
import math
import time
from typing import Callable, Iterable, Protocol

import numpy as np

from .config import (
    IDLE_AMPLITUDE,
    IDLE_BASE_FREQUENCY,
    IDLE_FREQUENCY_STEP,
    IDLE_TIME_STEP,
    VIBRATION_DURATION,
    VIBRATION_KEYFRAMES,
)
from .models import Segment, Vec2

logger = logging.getLogger(__name__)

FrameCallback = Callable[[float], None]


# ---------------------------------------------------------------------------
# Clock
# ---------------------------------------------------------------------------
class FrameClock:
    """
    Periodic frame callback, advanced by the host once per display refresh.

    ``start`` is idempotent and never registers a callback twice; ``stop``
    is a no-op when already stopped and otherwise clears elapsed time and
    callbacks.
    """

    def __init__(self, time_step: float = IDLE_TIME_STEP) -> None:
        self.time_step = time_step
        self.elapsed = 0.0
        self.running = False
        self._callbacks: list[FrameCallback] = []

    def start(self, callback: FrameCallback | None = None) -> None:
        if callback is not None and callback not in self._callbacks:
            self._callbacks.append(callback)
        self.running = True

    def stop(self) -> None:
        if not self.running:
            return
        self.running = False
        self.elapsed = 0.0
        self._callbacks.clear()

    def tick(self) -> None:
        if not self.running:
            return
        self.elapsed += self.time_step
        for callback in list(self._callbacks):
            callback(self.elapsed)

    @property
    def callback_count(self) -> int:
        return len(self._callbacks)


# ---------------------------------------------------------------------------
# Offset layers
# ---------------------------------------------------------------------------
class OffsetLayer(Protocol):
    def offset(self, index: int, now: float) -> float:
        ...


class IdleLayer:
    """``amplitude * sin(t * frequency_i)`` with frequency rising per index."""

    def __init__(
        self,
        clock: FrameClock,
        amplitude: float = IDLE_AMPLITUDE,
        base_frequency: float = IDLE_BASE_FREQUENCY,
        frequency_step: float = IDLE_FREQUENCY_STEP,
    ) -> None:
        self.clock = clock
        self.amplitude = amplitude
        self.base_frequency = base_frequency
        self.frequency_step = frequency_step

    def frequency(self, index: int) -> float:
        return self.base_frequency + index * self.frequency_step

    def offset(self, index: int, now: float) -> float:
        if not self.clock.running:
            return 0.0
        return self.amplitude * math.sin(self.clock.elapsed * self.frequency(index))


class VibrationLayer:
    """
    Fixed keyframe shake started per string by ``trigger``.

    Keyframes are evenly spaced over ``duration`` and linearly
    interpolated; the last one is 0 so the line settles back in place.
    """

    def __init__(
        self,
        keyframes: Iterable[float] = VIBRATION_KEYFRAMES,
        duration: float = VIBRATION_DURATION,
    ) -> None:
        self.keyframes = np.asarray(tuple(keyframes), dtype=float)
        self.duration = duration
        self._key_times = np.linspace(0.0, duration, len(self.keyframes))
        self._started: dict[int, float] = {}

    def trigger(self, index: int, now: float) -> None:
        self._started[index] = now

    def is_active(self, index: int, now: float) -> bool:
        started = self._started.get(index)
        return started is not None and 0.0 <= now - started < self.duration

    def offset(self, index: int, now: float) -> float:
        if not self.is_active(index, now):
            return 0.0
        elapsed = now - self._started[index]
        return float(np.interp(elapsed, self._key_times, self.keyframes))

    def prune(self, now: float) -> None:
        """Forget shakes that have run their course."""
        self._started = {
            index: started
            for index, started in self._started.items()
            if now - started < self.duration
        }

    def clear(self) -> None:
        self._started.clear()

    @property
    def active_indices(self) -> list[int]:
        return sorted(self._started)


# ---------------------------------------------------------------------------
# Animator
# ---------------------------------------------------------------------------
class FeedbackAnimator:
    """
    Owns the frame clock and the offset layers for every string.

    Parameters
    ----------
    clock : FrameClock | None
        Clock driving the idle wobble; a new one is created if omitted.
    time_fn : callable
        Wall clock used to time vibrations (seconds).
    """

    def __init__(
        self,
        clock: FrameClock | None = None,
        time_fn: Callable[[], float] = time.monotonic,
    ) -> None:
        self.clock = clock or FrameClock()
        self.time_fn = time_fn
        self.idle = IdleLayer(self.clock)
        self.vibration = VibrationLayer()
        self.layers: list[OffsetLayer] = [self.idle, self.vibration]

    # -----------------------------------------------------------------
    # View lifecycle
    # -----------------------------------------------------------------
    def start(self) -> None:
        if self.clock.running:
            return
        self.clock.start(self._on_frame)
        logger.debug("Idle animation started")

    def stop(self) -> None:
        if not self.clock.running:
            return
        self.clock.stop()
        self.vibration.clear()
        logger.debug("Idle animation stopped")

    def _on_frame(self, elapsed: float) -> None:
        self.vibration.prune(self.time_fn())

    # -----------------------------------------------------------------
    # Offsets
    # -----------------------------------------------------------------
    def trigger(self, index: int, now: float | None = None) -> None:
        """Shake string *index* once."""
        self.vibration.trigger(index, self.time_fn() if now is None else now)

    def displacement(self, index: int, now: float | None = None) -> float:
        if now is None:
            now = self.time_fn()
        return sum(layer.offset(index, now) for layer in self.layers)

    def offset(self, segment: Segment, now: float | None = None) -> Vec2:
        d = self.displacement(segment.index, now)
        return Vec2(d, 0.0) if segment.is_vertical else Vec2(0.0, d)

    def offsets(self, segments: Iterable[Segment], now: float | None = None) -> list[Vec2]:
        if now is None:
            now = self.time_fn()
        return [self.offset(segment, now) for segment in segments]
