"""
Cadence MQTT Communication Package
==================================

Bounded Context: Mirroring runtime signals to remote consumers.

Architecture:
- schemas/: Immutable message types (Timestamp, SignalEvent)
- publishers/: Message producers (SignalEventPublisher)
- widget.py: PublishedWidget, a presentation sink for remote UIs

Example:
    >>> from cadence_logging import create_logger
    >>> from cadence_mqtt import SignalEventPublisher, SignalEvent, SignalKind, Timestamp
    >>>
    >>> publisher = SignalEventPublisher(
    ...     broker_host="localhost",
    ...     topic="cadence/data/signals/arena_01",
    ...     logger=create_logger("mqtt_publisher")
    ... )
    >>> publisher.connect()
    >>> publisher.publish_signal(SignalEvent(
    ...     schema_version="1.0",
    ...     timestamp=Timestamp.now(),
    ...     service_id="arena_01",
    ...     source="coins",
    ...     kind=SignalKind.COUNTER_CHANGED,
    ...     value=12,
    ... ))
"""

__version__ = "1.0.0"

from .schemas import (
    Timestamp,
    SignalKind,
    SignalEvent,
)

from .publishers import (
    SignalEventPublisher,
)

from .widget import PublishedWidget

__all__ = [
    '__version__',
    'Timestamp',
    'SignalKind',
    'SignalEvent',
    'SignalEventPublisher',
    'PublishedWidget',
]
