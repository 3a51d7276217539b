"""
Signal Event Message Schema
===========================

Bounded Context: Outbound notifications mirrored to MQTT.

Message Flow:
    Counter / Condition / Zone / Timer / Widget
        → SignalEvent → SignalEventPublisher → MQTT → remote UI / tooling
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

from .common import Timestamp


class SignalKind(str, Enum):
    """What happened."""
    COUNTER_CHANGED = "counter_changed"
    BECAME_TRUE = "became_true"
    BECAME_FALSE = "became_false"
    ZONE_ENTERED = "zone_entered"
    ZONE_EXITED = "zone_exited"
    TIMER_ELAPSED = "timer_elapsed"
    WIDGET_TEXT = "widget_text"
    WIDGET_VISIBLE = "widget_visible"
    WIDGET_PRESENT = "widget_present"


WIDGET_KINDS = {
    SignalKind.WIDGET_TEXT,
    SignalKind.WIDGET_VISIBLE,
    SignalKind.WIDGET_PRESENT,
}


@dataclass(frozen=True)
class SignalEvent:
    """
    One outbound notification.

    Attributes:
        schema_version: Message schema version (for evolution)
        timestamp: ISO 8601 timestamp of message creation
        service_id: Runtime that produced the event
        source: Name of the emitting entity (counter, condition, zone, ...)
        kind: What happened
        value: Payload (new counter value, widget text, visibility flag, ...)
        tick: Scheduler tick on which the event was produced

    Example:
        >>> event = SignalEvent(
        ...     schema_version="1.0",
        ...     timestamp=Timestamp.now(),
        ...     service_id="arena_01",
        ...     source="coins",
        ...     kind=SignalKind.COUNTER_CHANGED,
        ...     value=12,
        ...     tick=340,
        ... )
    """
    schema_version: str
    timestamp: Timestamp
    service_id: str
    source: str
    kind: SignalKind
    value: Optional[Any] = None
    tick: int = 0

    def __post_init__(self):
        """Validate invariants."""
        if not self.source:
            raise ValueError("SignalEvent source cannot be empty")
        if self.tick < 0:
            raise ValueError(f"Tick must be >= 0, got {self.tick}")

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to JSON-compatible dict."""
        return {
            'schema_version': self.schema_version,
            'timestamp': self.timestamp.to_dict(),
            'service_id': self.service_id,
            'source': self.source,
            'kind': self.kind.value,
            'value': self.value,
            'tick': self.tick,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SignalEvent':
        """
        Deserialize from dict.

        Raises:
            ValueError: If required fields missing or invalid
        """
        try:
            return cls(
                schema_version=str(data['schema_version']),
                timestamp=Timestamp(value=data['timestamp']),
                service_id=str(data['service_id']),
                source=str(data['source']),
                kind=SignalKind(data['kind']),
                value=data.get('value'),
                tick=int(data.get('tick', 0)),
            )
        except KeyError as e:
            raise ValueError(f"Missing required SignalEvent field: {e}")
        except (TypeError, ValueError) as e:
            raise ValueError(f"Invalid SignalEvent data: {e}")

    @property
    def is_widget_update(self) -> bool:
        return self.kind in WIDGET_KINDS
