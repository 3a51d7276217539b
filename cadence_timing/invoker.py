"""
Deferred Invoker Module
=======================

Restartable, cancellable "run this callback after N seconds".

Design:
- One pending task per invoker (restart, not queue)
- The pending handle is cleared before the callback runs, so the callback
  may trigger the same invoker again
- Duration 0 still defers to the next tick
- Elapsed time measured on the scaled or unscaled clock, fixed at construction
"""

from typing import Callable, Generator, Optional

from cadence_events import CallbackChannel
from cadence_logging import StructuredLogger, LogEvent, create_logger
from cadence_timing.clock import Clock, ClockMode, read_clock
from cadence_timing.scheduler import TickScheduler, ScheduledTask


class DeferredInvoker:
    """
    Delayed callback with restart semantics.

    Usage:
        invoker = DeferredInvoker(scheduler, clock, duration_seconds=0.5)
        invoker.on_elapsed.add(close_door)

        invoker.trigger()          # close_door runs 0.5s of scaled time later
        invoker.trigger()          # restarts the countdown, fires only once
        invoker.cancel()           # nothing fires

        invoker.trigger(lambda: print("custom"))  # one-off callback
    """

    def __init__(
        self,
        scheduler: TickScheduler,
        clock: Clock,
        duration_seconds: float = 0.5,
        use_unscaled_clock: bool = False,
        invoke_on_activate: bool = False,
        name: str = "deferred",
        logger: Optional[StructuredLogger] = None,
    ):
        """
        Args:
            scheduler: Cooperative scheduler that resumes the pending task
            clock: Clock source (scaled and unscaled time)
            duration_seconds: Delay before firing (negative values clamp to 0)
            use_unscaled_clock: Measure against unscaled (real) time
            invoke_on_activate: activate() triggers the default callback
            name: Identifier for logs
            logger: Diagnostic sink
        """
        self.scheduler = scheduler
        self.clock = clock
        self.name = name
        self.invoke_on_activate = invoke_on_activate
        self.logger = logger or create_logger("timing")
        self.clock_mode = ClockMode.UNSCALED if use_unscaled_clock else ClockMode.SCALED
        self.on_elapsed = CallbackChannel(f"{name}.elapsed", logger=self.logger)

        self._duration = 0.0
        self.duration_seconds = duration_seconds
        self._pending: Optional[ScheduledTask] = None

    @property
    def duration_seconds(self) -> float:
        return self._duration

    @duration_seconds.setter
    def duration_seconds(self, value: float) -> None:
        if value < 0:
            self.logger.warning(
                event=LogEvent.TIMER_DURATION_CLAMPED,
                message=f"Negative duration for '{self.name}' clamped to 0",
                metadata={'timer': self.name, 'requested': value}
            )
            value = 0.0
        self._duration = float(value)

    @property
    def use_unscaled_clock(self) -> bool:
        return self.clock_mode == ClockMode.UNSCALED

    @property
    def is_pending(self) -> bool:
        return self._pending is not None and self._pending.is_pending

    def trigger(self, callback: Optional[Callable[[], None]] = None) -> ScheduledTask:
        """
        Start (or restart) the countdown.

        Args:
            callback: Invoked once when the delay elapses. When omitted the
                on_elapsed channel is invoked instead.

        Returns:
            Handle of the new pending task
        """
        restarted = self._cancel_pending()
        end = read_clock(self.clock, self.clock_mode) + self._duration
        self._pending = self.scheduler.start(self._run(end, callback), name=self.name)
        self.logger.info(
            event=LogEvent.TIMER_STARTED,
            message=f"Timer '{self.name}' {'restarted' if restarted else 'started'}",
            metadata={
                'timer': self.name,
                'duration': self._duration,
                'clock': self.clock_mode.value,
            }
        )
        return self._pending

    def cancel(self) -> bool:
        """
        Cancel the pending task, if any, without invoking its callback.

        Returns:
            True if a task was cancelled
        """
        cancelled = self._cancel_pending()
        if cancelled:
            self.logger.info(
                event=LogEvent.TIMER_CANCELLED,
                message=f"Timer '{self.name}' cancelled",
                metadata={'timer': self.name}
            )
        return cancelled

    def activate(self) -> None:
        """Owner became active: trigger the default callback if configured."""
        if self.invoke_on_activate:
            self.trigger()

    def deactivate(self) -> None:
        """Owner became inactive: drop any pending invocation."""
        self.cancel()

    def _cancel_pending(self) -> bool:
        task, self._pending = self._pending, None
        return task is not None and task.cancel()

    def _run(
        self,
        end: float,
        callback: Optional[Callable[[], None]],
    ) -> Generator[None, None, None]:
        while read_clock(self.clock, self.clock_mode) < end:
            yield

        self._pending = None
        self.logger.info(
            event=LogEvent.TIMER_FIRED,
            message=f"Timer '{self.name}' elapsed",
            metadata={'timer': self.name, 'duration': self._duration}
        )
        if callback is None:
            self.on_elapsed.invoke()
            return
        try:
            callback()
        except Exception as e:
            self.logger.error(
                event=LogEvent.CALLBACK_FAILED,
                message=f"Callback of timer '{self.name}' raised",
                metadata={'timer': self.name},
                exc_info=e
            )

    def __repr__(self) -> str:
        return (
            f"DeferredInvoker(name={self.name!r}, duration={self._duration}, "
            f"clock={self.clock_mode.value}, pending={self.is_pending})"
        )
