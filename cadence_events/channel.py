"""
CallbackChannel - Explicit multicast of callback handles

Bounded Context: Notification channels (one per outbound event)
Responsibilities:
  - Register / unregister handlers
  - Invoke every handler in registration order
  - Report handler failures on the diagnostic channel

Design Motivation:
  Problem: Implicit delegate fields hide who listens and in which order
  Solution: One explicit list per channel, add/remove, snapshot dispatch

Threading: Not thread-safe. Channels live on the tick thread.
"""

from typing import Callable, List, Optional

from cadence_logging import StructuredLogger, LogEvent, create_logger


class CallbackChannel:
    """
    Ordered list of callback handles for one notification channel.

    Dispatch iterates over a snapshot taken when invoke() starts, so a
    handler that adds or removes handlers (or re-enters the owner) only
    affects later dispatches.

    Example:
        channel = CallbackChannel("coins.changed")
        channel.add(lambda value: print(value))
        channel.invoke(12)
    """

    def __init__(self, name: str = "channel", logger: Optional[StructuredLogger] = None):
        self.name = name
        self._handlers: List[Callable] = []
        self._logger = logger

    @property
    def logger(self) -> StructuredLogger:
        if self._logger is None:
            self._logger = create_logger("events")
        return self._logger

    def add(self, handler: Callable) -> None:
        """Register a handler (duplicates allowed, delivered once per registration)."""
        if not callable(handler):
            raise TypeError(f"Handler for channel '{self.name}' must be callable")
        self._handlers.append(handler)

    def remove(self, handler: Callable) -> bool:
        """
        Remove the first registration of handler.

        Returns:
            True if a registration was removed, False if handler was not registered
        """
        try:
            self._handlers.remove(handler)
        except ValueError:
            return False
        return True

    def clear(self) -> None:
        """Remove every handler."""
        self._handlers.clear()

    def invoke(self, *args) -> int:
        """
        Call every registered handler with args, in registration order.

        A handler that raises is logged and skipped; the remaining handlers
        still run.

        Returns:
            Number of handlers that completed without raising
        """
        delivered = 0
        for handler in list(self._handlers):
            try:
                handler(*args)
                delivered += 1
            except Exception as e:
                self.logger.error(
                    event=LogEvent.CALLBACK_FAILED,
                    message=f"Handler raised on channel '{self.name}'",
                    metadata={'channel': self.name, 'handler': repr(handler)},
                    exc_info=e
                )
        return delivered

    def __len__(self) -> int:
        return len(self._handlers)

    def __contains__(self, handler: Callable) -> bool:
        return handler in self._handlers

    def __repr__(self) -> str:
        return f"CallbackChannel(name={self.name!r}, handlers={len(self._handlers)})"
