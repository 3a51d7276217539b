"""
Timing Layer
============

Bounded Context: Clocks, cooperative tasks and deferred invocation.

Responsibilities:
- Provide scaled and unscaled elapsed time (FrameClock)
- Resume suspended tasks once per tick (TickScheduler)
- Run a callback after N seconds, restartable and cancellable (DeferredInvoker)

Design Philosophy:
- Single-threaded, cooperative: the external driver calls tick()
- Clock is injected, never read from the system implicitly
- Restart, not queue: one pending task per invoker
"""

from cadence_timing.clock import Clock, ClockMode, FrameClock, read_clock
from cadence_timing.scheduler import TickScheduler, ScheduledTask, TaskState
from cadence_timing.invoker import DeferredInvoker

__all__ = [
    "Clock",
    "ClockMode",
    "FrameClock",
    "read_clock",
    "TickScheduler",
    "ScheduledTask",
    "TaskState",
    "DeferredInvoker",
]
