"""
Shared fixtures: a manually advanced clock, a scheduler, a mock diagnostic
sink and a recording callback.
"""

from unittest.mock import MagicMock

import pytest

from cadence_logging import StructuredLogger
from cadence_timing import FrameClock, TickScheduler


class Recorder:
    """Callable that remembers every call's positional arguments."""

    def __init__(self, raises: Exception = None):
        self.calls = []
        self.raises = raises

    def __call__(self, *args):
        self.calls.append(args)
        if self.raises is not None:
            raise self.raises

    @property
    def count(self) -> int:
        return len(self.calls)


def logged_events(logger: MagicMock, level: str):
    """LogEvent members passed to logger.<level>(event=...)."""
    return [call.kwargs['event'] for call in getattr(logger, level).call_args_list]


@pytest.fixture
def logger():
    logger = MagicMock(spec=StructuredLogger)
    logger.bind.return_value = logger
    return logger


@pytest.fixture
def clock():
    return FrameClock()


@pytest.fixture
def scheduler(logger):
    return TickScheduler(logger=logger)


@pytest.fixture
def recorder():
    return Recorder()


@pytest.fixture
def run_ticks(clock, scheduler):
    """Advance the clock by dt and tick, n times."""
    def _run(n: int, dt: float = 0.25):
        for _ in range(n):
            clock.advance(dt)
            scheduler.tick()
    return _run
