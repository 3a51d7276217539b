"""
Structured JSON Logger
======================

Every record is one JSON object:

    {"timestamp": ..., "level": "WARNING", "component": "state",
     "service_id": "arena_01", "entity": "door",
     "event": "condition.misconfigured", "message": ..., "metadata": {...}}

`component` names the package that logs. `bind()` attaches entity context
(service_id, entity name, ...) once, so a counter or condition does not
repeat its own name in every metadata dict.

Example:
    >>> runtime_log = create_logger("runtime", service_id="arena_01")
    >>> door_log = runtime_log.bind(entity="door")
    >>> door_log.warning(
    ...     event=LogEvent.CONDITION_MISCONFIGURED,
    ...     message="Dual mode with no targets",
    ... )
"""

import json
import logging
from datetime import datetime, timezone
from typing import Dict, Any, Optional
from .events import LogEvent


RESERVED_FIELDS = frozenset({
    'timestamp', 'level', 'component', 'event', 'message', 'metadata', 'exception'
})


class StructuredLogger:
    """
    JSON logger for one cadence component, optionally bound to an entity.

    Bound children share the parent's stdlib logger (cadence.<component>),
    so level changes and handlers apply to the whole family.
    """

    def __init__(
        self,
        component: str,
        level: int = logging.INFO,
        logger_name: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        self.component = component
        self.context: Dict[str, Any] = dict(context or {})
        self._check_context(self.context)

        self.logger_name = logger_name or f"cadence.{component}"
        self.logger = logging.getLogger(self.logger_name)
        self.logger.setLevel(level)

        if not self.logger.handlers:
            handler = logging.StreamHandler()
            handler.setFormatter(JSONFormatter())
            self.logger.addHandler(handler)

    @staticmethod
    def _check_context(context: Dict[str, Any]) -> None:
        clashes = RESERVED_FIELDS.intersection(context)
        if clashes:
            raise ValueError(f"Context keys clash with record fields: {sorted(clashes)}")

    def bind(self, **context: Any) -> "StructuredLogger":
        """
        Child logger whose records also carry `context`.

        Raises:
            ValueError: If a key would overwrite a record field
        """
        self._check_context(context)
        child = StructuredLogger.__new__(StructuredLogger)
        child.component = self.component
        child.context = {**self.context, **context}
        child.logger_name = self.logger_name
        child.logger = self.logger
        return child

    def _log(
        self,
        level: int,
        event: LogEvent,
        message: str,
        metadata: Optional[Dict[str, Any]] = None,
        exc_info: Optional[BaseException] = None
    ) -> None:
        if not self.logger.isEnabledFor(level):
            return

        record: Dict[str, Any] = {
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'level': logging.getLevelName(level),
            'component': self.component,
            **self.context,
            'event': event.value,
            'message': message,
        }
        if metadata:
            record['metadata'] = metadata
        if exc_info is not None:
            record['exception'] = {
                'type': type(exc_info).__name__,
                'message': str(exc_info)
            }

        self.logger.log(
            level,
            json.dumps(record, default=str),
            exc_info=exc_info if level >= logging.ERROR else None
        )

    def debug(self, event: LogEvent, message: str, metadata: Optional[Dict[str, Any]] = None) -> None:
        """Per-evaluation traces and per-signal publish confirmations."""
        self._log(logging.DEBUG, event, message, metadata)

    def info(self, event: LogEvent, message: str, metadata: Optional[Dict[str, Any]] = None) -> None:
        self._log(logging.INFO, event, message, metadata)

    def warning(self, event: LogEvent, message: str, metadata: Optional[Dict[str, Any]] = None) -> None:
        """Misconfiguration and recoverable failures (clamped durations, dropped signals)."""
        self._log(logging.WARNING, event, message, metadata)

    def error(
        self,
        event: LogEvent,
        message: str,
        metadata: Optional[Dict[str, Any]] = None,
        exc_info: Optional[BaseException] = None
    ) -> None:
        """Failures with an exception attached; the traceback goes to the handler."""
        self._log(logging.ERROR, event, message, metadata, exc_info)

    def set_level(self, level: int) -> None:
        self.logger.setLevel(level)


class JSONFormatter(logging.Formatter):
    """Passes the pre-rendered JSON record through unchanged."""

    def format(self, record: logging.LogRecord) -> str:
        return record.getMessage()


def create_logger(component: str, level: int = logging.INFO, **context: Any) -> StructuredLogger:
    """
    StructuredLogger for `component`, bound to `context`.

    Example:
        >>> logger = create_logger("runtime", level=logging.DEBUG, service_id="arena_01")
    """
    return StructuredLogger(component=component, level=level, context=context)
