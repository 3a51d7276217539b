"""
Message schemas for cadence MQTT traffic.
"""

from .common import Timestamp
from .signal_event import SignalKind, SignalEvent, WIDGET_KINDS

__all__ = [
    'Timestamp',
    'SignalKind',
    'SignalEvent',
    'WIDGET_KINDS',
]
