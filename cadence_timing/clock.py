"""
Clock Module
============

Elapsed-time sources polled by deferred tasks.

Design:
- Clock is a Protocol: the environment may supply its own
- FrameClock is advanced by the frame driver with real elapsed seconds
- Scaled time follows time_scale (0 pauses it); unscaled time never does
"""

from enum import Enum
from typing import Protocol


class Clock(Protocol):
    """Protocol for elapsed-time providers (seconds since start)."""

    @property
    def scaled_time(self) -> float:
        ...

    @property
    def unscaled_time(self) -> float:
        ...


class ClockMode(str, Enum):
    """Which clock a timer measures elapsed time against."""
    SCALED = "scaled"
    UNSCALED = "unscaled"


def read_clock(clock: Clock, mode: ClockMode) -> float:
    """Read the clock selected by mode."""
    if mode == ClockMode.UNSCALED:
        return clock.unscaled_time
    return clock.scaled_time


class FrameClock:
    """
    Clock advanced explicitly by the frame driver.

    Usage:
        clock = FrameClock()
        clock.advance(1 / 60)      # one frame at 60 Hz
        clock.time_scale = 0.0     # pause gameplay time
        clock.advance(1 / 60)      # unscaled time still moves
    """

    def __init__(self, time_scale: float = 1.0):
        self._scaled = 0.0
        self._unscaled = 0.0
        self._time_scale = 1.0
        self.time_scale = time_scale

    @property
    def time_scale(self) -> float:
        return self._time_scale

    @time_scale.setter
    def time_scale(self, value: float) -> None:
        if value < 0:
            raise ValueError(f"time_scale must be >= 0, got {value}")
        self._time_scale = float(value)

    @property
    def scaled_time(self) -> float:
        return self._scaled

    @property
    def unscaled_time(self) -> float:
        return self._unscaled

    def advance(self, real_dt: float) -> None:
        """
        Advance both clocks by one frame.

        Args:
            real_dt: Real seconds elapsed since the previous frame (>= 0)
        """
        if real_dt < 0:
            raise ValueError(f"real_dt must be >= 0, got {real_dt}")
        self._unscaled += real_dt
        self._scaled += real_dt * self._time_scale

    def __repr__(self) -> str:
        return (
            f"FrameClock(scaled={self._scaled:.3f}, unscaled={self._unscaled:.3f}, "
            f"time_scale={self._time_scale})"
        )
