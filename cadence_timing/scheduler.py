"""
Tick Scheduler Module
=====================

Cooperative task runner driven by the frame/tick driver.

Design:
- A task is a generator; each `yield` hands control back to the driver
- tick() resumes every task that was pending when the tick began, once
- Tasks started during a tick first run on the next tick
  (a task never runs inside the call that started it)
- Cancellation is all-or-nothing: a cancelled task is never resumed again
"""

from enum import Enum
from typing import Generator, List, Optional

from cadence_logging import StructuredLogger, LogEvent, create_logger


class TaskState(str, Enum):
    """Lifecycle of a scheduled task."""
    PENDING = "pending"
    DONE = "done"
    CANCELLED = "cancelled"
    FAILED = "failed"


class ScheduledTask:
    """
    Handle to one cooperative task.

    Returned by TickScheduler.start(); holds the generator and its state.
    """

    def __init__(self, routine: Generator, name: str, scheduler: "TickScheduler"):
        self.name = name
        self.state = TaskState.PENDING
        self._routine = routine
        self._scheduler = scheduler
        self._running = False

    @property
    def is_pending(self) -> bool:
        return self.state == TaskState.PENDING

    def cancel(self) -> bool:
        """
        Stop the task without resuming it again.

        Returns:
            True if the task was pending, False if it had already ended
        """
        if not self.is_pending:
            return False
        self.state = TaskState.CANCELLED
        # A task cancelling itself from inside its own step finishes that step
        if not self._running:
            self._routine.close()
        self._scheduler._discard(self)
        return True

    def _step(self, logger: StructuredLogger) -> None:
        self._running = True
        try:
            next(self._routine)
        except StopIteration:
            if self.is_pending:
                self.state = TaskState.DONE
        except Exception as e:
            self.state = TaskState.FAILED
            logger.error(
                event=LogEvent.TASK_FAILED,
                message=f"Task '{self.name}' raised",
                metadata={'task': self.name},
                exc_info=e
            )
        finally:
            self._running = False

    def __repr__(self) -> str:
        return f"ScheduledTask(name={self.name!r}, state={self.state.value})"


class TickScheduler:
    """
    Resumes pending cooperative tasks once per tick.

    Usage:
        scheduler = TickScheduler()

        def blink():
            while True:
                toggle()
                yield

        task = scheduler.start(blink(), name="blink")
        scheduler.tick()   # blink runs once
        task.cancel()
    """

    def __init__(self, logger: Optional[StructuredLogger] = None):
        self.logger = logger or create_logger("timing")
        self._tasks: List[ScheduledTask] = []
        self._tick_count = 0

    @property
    def tick_count(self) -> int:
        return self._tick_count

    @property
    def pending_count(self) -> int:
        return len(self._tasks)

    def start(self, routine: Generator, name: str = "task") -> ScheduledTask:
        """
        Register a generator as a task. It is first resumed on the next tick.
        """
        task = ScheduledTask(routine, name, self)
        self._tasks.append(task)
        return task

    def tick(self) -> int:
        """
        Resume every task pending at the start of this tick.

        Returns:
            Number of tasks still pending after the tick
        """
        self._tick_count += 1
        for task in list(self._tasks):
            # Cancelled by an earlier task in this same tick
            if not task.is_pending:
                continue
            task._step(self.logger)
            if not task.is_pending:
                self._discard(task)
        return len(self._tasks)

    def cancel_all(self) -> int:
        """Cancel every pending task; returns how many were cancelled."""
        cancelled = 0
        for task in list(self._tasks):
            if task.cancel():
                cancelled += 1
        return cancelled

    def _discard(self, task: ScheduledTask) -> None:
        if task in self._tasks:
            self._tasks.remove(task)

    def __repr__(self) -> str:
        return f"TickScheduler(pending={len(self._tasks)}, ticks={self._tick_count})"
