"""
Structured Logging for Cadence
==============================

Bounded Context: Observability

JSON-structured diagnostics for every cadence component. The core packages
receive a StructuredLogger as an injected diagnostic sink; nothing in the
core talks to a concrete logging backend directly.

Public API
----------
    LogEvent: Typed event names (enum)
    StructuredLogger: JSON logger implementation
    create_logger: Factory function (component, level, bound context)
    StructuredLogger.bind: Child logger carrying entity context

Example:
    >>> from cadence_logging import StructuredLogger, LogEvent
    >>> logger = StructuredLogger(component="state")
    >>> logger.info(
    ...     event=LogEvent.COUNTER_CHANGED,
    ...     message="coins changed",
    ...     metadata={'counter': 'coins', 'value': 12}
    ... )

Output:
    {
        "timestamp": "2025-10-24T15:30:45.123456+00:00",
        "level": "INFO",
        "component": "state",
        "event": "counter.value.changed",
        "message": "coins changed",
        "metadata": {"counter": "coins", "value": 12}
    }
"""

from .events import LogEvent
from .structured import StructuredLogger, create_logger

__all__ = [
    'LogEvent',
    'StructuredLogger',
    'create_logger',
]
